"""
Timeline Assembler for the Anime Series Timeline Engine.
Composes graph traversal and chronological sorting into series timelines.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional

from models.timeline import (
    Timeline,
    TimelineStatus,
    FailedTimeline,
    BatchTimelineResult
)
from services.relationship_store import RelationshipStore
from services.graph_traversal import GraphTraversalEngine
from services.chronological_sorter import ChronologicalSorter
from config import get_logger

logger = get_logger(__name__)


class TimelineAssembler:
    """
    Builds timelines for a root anime.

    Timelines are always built fresh from the store; caching them (keyed by
    root identifier) is left to the caller.
    """

    def __init__(
        self,
        store: RelationshipStore,
        max_nodes: Optional[int] = None,
        traversal: GraphTraversalEngine = None,
        sorter: ChronologicalSorter = None
    ):
        self.store = store
        self.traversal = traversal or GraphTraversalEngine(store, max_nodes=max_nodes)
        self.sorter = sorter or ChronologicalSorter()

    def generate_timeline(self, root_id: int) -> Timeline:
        """
        Generate the complete timeline for an anime.

        Args:
            root_id: MAL ID the timeline is rooted at

        Returns:
            Timeline with entries in chronological order; empty if the root
            does not resolve
        """
        result = self.traversal.perform_graph_traversal(root_id)
        entries = self.sorter.sort(result.nodes.values(), root_id)

        entries = [
            entry.model_copy(update={"relationship_path": result.relationship_path(entry.mal_id)})
            for entry in entries
        ]

        timeline = Timeline.from_entries(
            root_id,
            entries,
            last_updated=datetime.now(timezone.utc)
        )

        if timeline.total_entries == 0:
            logger.warning(f"No timeline entries for MAL ID {root_id}; root could not be resolved")
        else:
            logger.info(
                f"Generated timeline for MAL ID {root_id} with {timeline.total_entries} "
                f"entries ({timeline.main_timeline_count} main entries)"
            )
        return timeline

    def refresh_timeline(self, root_id: int) -> Timeline:
        """Rebuild a timeline; identical to generate_timeline since nothing is cached here."""
        logger.info(f"Refreshing timeline for MAL ID {root_id}")
        return self.generate_timeline(root_id)

    def get_timeline_status(self, root_id: int) -> TimelineStatus:
        """Check whether a timeline can be generated for an anime and report its size."""
        if self.store.resolve_record(root_id) is None:
            return TimelineStatus(exists=False)

        timeline = self.generate_timeline(root_id)
        return TimelineStatus(
            exists=True,
            last_updated=timeline.last_updated,
            entry_count=timeline.total_entries,
            main_entry_count=timeline.main_timeline_count
        )

    def batch_generate_timelines(self, root_ids: Iterable[int]) -> BatchTimelineResult:
        """
        Generate timelines for several roots.

        A failure for one root is recorded and does not stop the batch.
        """
        root_ids = list(root_ids)
        batch = BatchTimelineResult()
        logger.info(f"Batch processing {len(root_ids)} timelines")

        for root_id in root_ids:
            try:
                batch.successful.append(self.generate_timeline(root_id))
            except Exception as e:
                logger.error(f"Failed to process timeline for MAL ID {root_id}: {e}")
                batch.failed.append(FailedTimeline(mal_id=root_id, error=str(e)))

        logger.info(
            f"Batch processing complete: {len(batch.successful)} successful, "
            f"{len(batch.failed)} failed"
        )
        return batch
