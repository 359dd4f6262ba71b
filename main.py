"""
Anime Series Timeline Engine - Main Orchestrator

This is the main entry point for building series timelines.
It wires settings, logging, the relationship store and the timeline assembler.
"""

import json
import re
import sys
from pathlib import Path
from typing import List, Dict, Any, Optional
import argparse

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from config import get_settings, LogConfig, get_logger
from services.relationship_store import InMemoryRelationshipStore, Neo4jRelationshipStore
from services.timeline_assembler import TimelineAssembler

# Initialize logging
settings = get_settings()
LogConfig.setup_logging(settings.log_level)
logger = get_logger(__name__)


class TimelineSystem:
    """
    Main orchestrator for the Anime Series Timeline Engine.

    Chooses the relationship store:
    1. A JSON graph file (graph_file argument or GRAPH_FILE setting)
    2. Otherwise the Neo4j graph from the NEO4J_* settings
    """

    def __init__(
        self,
        graph_file: Optional[str] = None,
        max_nodes: Optional[int] = None,
        store=None
    ):
        """
        Initialize the system.

        Args:
            graph_file: Path to a JSON graph file; overrides settings.graph_file
            max_nodes: Traversal node ceiling; defaults to settings
            store: Pre-built relationship store, used as-is when given
        """
        self.settings = get_settings()
        graph_file = graph_file or self.settings.graph_file

        if store is not None:
            self.store = store
        elif graph_file:
            self.store = InMemoryRelationshipStore.from_json(graph_file)
        else:
            try:
                self.store = Neo4jRelationshipStore()
            except Exception as e:
                logger.error(f"Failed to connect to relationship store: {e}")
                raise

        self.assembler = TimelineAssembler(self.store, max_nodes=max_nodes)
        logger.info("Timeline system initialized successfully")

    def timeline(self, mal_id: int) -> Dict[str, Any]:
        """Generate a timeline and return its serialized form."""
        return self.assembler.generate_timeline(mal_id).to_dict()

    def refresh(self, mal_id: int) -> Dict[str, Any]:
        return self.assembler.refresh_timeline(mal_id).to_dict()

    def status(self, mal_id: int) -> Dict[str, Any]:
        return self.assembler.get_timeline_status(mal_id).to_dict()

    def batch(self, mal_ids: List[int]) -> Dict[str, Any]:
        return self.assembler.batch_generate_timelines(mal_ids).to_dict()

    def cycles(self, mal_id: int) -> Dict[str, Any]:
        """Report the cycles around an anime, both as seen by the walk and by DFS analysis."""
        engine = self.assembler.traversal
        result = engine.perform_graph_traversal(mal_id)
        return {
            "malId": mal_id,
            "visitedOrder": result.visited_order,
            "hasCycles": result.has_cycles,
            "cyclesDetected": result.cycles_detected,
            "dfsCycles": engine.detect_cycles(result)
        }

    def get_statistics(self) -> Dict[str, Any]:
        """Get store statistics."""
        return self.store.get_statistics() if hasattr(self.store, "get_statistics") else {}

    def close(self):
        """Close all connections."""
        if hasattr(self.store, "close"):
            self.store.close()
        logger.info("System connections closed")


def parse_mal_id(value: str) -> int:
    """Extract a MAL ID from a MyAnimeList URL or a bare numeric ID."""
    value = str(value).strip()

    match = re.search(r'myanimelist\.net/anime/(\d+)', value)
    if match:
        mal_id = int(match.group(1))
    elif value.isdigit():
        mal_id = int(value)
    else:
        raise ValueError(f"Could not extract MAL ID from: {value}")

    if mal_id <= 0:
        raise ValueError(f"MAL ID must be a positive integer: {value}")
    return mal_id


def non_negative_int(value: str) -> int:
    """argparse type for counts where 0 is meaningful."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative: {value}")
    return number


# CLI Interface
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Anime Series Timeline Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Build a timeline from a JSON graph file
  python main.py --graph-file data/sample_graph.json --timeline 9253

  # Build a timeline from a MyAnimeList URL against Neo4j
  python main.py --timeline "https://myanimelist.net/anime/16498/Shingeki_no_Kyojin"

  # Batch build from a JSON list of IDs
  python main.py --batch ids.json

  # Show cycles around an anime
  python main.py --cycles 9253

  # Get statistics
  python main.py --stats
        """
    )

    parser.add_argument("--timeline", help="Build the timeline for a MAL ID or URL")
    parser.add_argument("--refresh", help="Rebuild the timeline for a MAL ID or URL")
    parser.add_argument("--status", help="Show timeline status for a MAL ID or URL")
    parser.add_argument("--batch", help="Build timelines for MAL IDs listed in a JSON file")
    parser.add_argument("--cycles", help="Show relationship cycles for a MAL ID or URL")
    parser.add_argument("--stats", action="store_true", help="Show store statistics")

    parser.add_argument("--graph-file", help="JSON graph file to read instead of Neo4j")
    parser.add_argument("--max-nodes", type=non_negative_int, help="Traversal node ceiling (0 disables)")
    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    if not any([args.timeline, args.refresh, args.status, args.batch, args.cycles, args.stats]):
        parser.print_help()
        return

    # Initialize system
    system = TimelineSystem(graph_file=args.graph_file, max_nodes=args.max_nodes)

    try:
        if args.timeline:
            result = system.timeline(parse_mal_id(args.timeline))

        elif args.refresh:
            result = system.refresh(parse_mal_id(args.refresh))

        elif args.status:
            result = system.status(parse_mal_id(args.status))

        elif args.batch:
            with open(args.batch) as f:
                mal_ids = [parse_mal_id(item) for item in json.load(f)]
            result = system.batch(mal_ids)

        elif args.cycles:
            result = system.cycles(parse_mal_id(args.cycles))

        else:
            result = system.get_statistics()

        print(json.dumps(result, indent=2))

    finally:
        system.close()


if __name__ == "__main__":
    main()
