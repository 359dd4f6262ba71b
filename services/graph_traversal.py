"""
Graph Traversal Engine for the Anime Series Timeline Engine.
Walks the anime relationship graph breadth-first from a root, tolerating cycles.
"""

from collections import deque
from typing import List, Dict, Optional, Iterable, Union, Set, FrozenSet

from models.entities import AnimeInfo, AnimeRelationship
from models.graph_schema import GraphTraversalResult, RelationshipType
from services.relationship_store import RelationshipStore
from services.relationship_priority import priority_of, filter_by_type
from config import get_settings, get_logger

logger = get_logger(__name__)


class GraphTooLargeError(RuntimeError):
    """Raised when a traversal visits more identifiers than the configured ceiling."""

    def __init__(self, root_id: int, limit: int):
        self.root_id = root_id
        self.limit = limit
        super().__init__(
            f"Relationship graph for MAL ID {root_id} exceeds {limit} nodes"
        )


class GraphTraversalEngine:
    """
    Discovers every anime reachable from a root through outgoing relationship edges.

    The engine keeps no state between calls; every traversal allocates its own
    queue, visited set and result. Only outgoing edges are followed, so inverse
    relationships must be stored as their own edges to be reachable.
    """

    def __init__(self, store: RelationshipStore, max_nodes: Optional[int] = None):
        """
        Args:
            store: Read-only record and edge lookups
            max_nodes: Ceiling on distinct visited identifiers; defaults to
                settings.max_traversal_nodes, 0 disables the ceiling
        """
        if max_nodes is not None and max_nodes < 0:
            raise ValueError(f"max_nodes must be non-negative: {max_nodes}")

        self.store = store
        if max_nodes is None:
            max_nodes = get_settings().max_traversal_nodes
        self.max_nodes = max_nodes or None

    def perform_graph_traversal(self, root_id: int) -> GraphTraversalResult:
        """
        Breadth-first walk from root_id.

        Records that fail to resolve are skipped without expanding their edges.
        Store errors propagate unchanged.

        Raises:
            GraphTooLargeError: If more than max_nodes identifiers are visited
        """
        result = GraphTraversalResult(root_id=root_id)
        visited: Set[int] = set()
        queued: Set[int] = {root_id}
        queue = deque([root_id])
        seen_cycles: Set[FrozenSet[int]] = set()

        while queue:
            current_id = queue.popleft()
            if current_id in visited:
                continue

            if self.max_nodes is not None and len(visited) >= self.max_nodes:
                raise GraphTooLargeError(root_id, self.max_nodes)
            visited.add(current_id)

            record = self.store.resolve_record(current_id)
            if record is None:
                logger.warning(f"Could not find anime info for MAL ID: {current_id}")
                continue

            result.nodes[current_id] = record
            result.visited_order.append(current_id)

            edges = self.store.outgoing_edges(current_id)
            targets = [edge.target_mal_id for edge in edges]
            result.adjacency[current_id] = targets

            for edge in edges:
                target_id = edge.target_mal_id
                if target_id in visited:
                    # Each back-reference walks the adjacency seen so far; max_nodes bounds it
                    cycle = self._trace_chain(result.adjacency, target_id, current_id)
                    if cycle is not None and frozenset(cycle) not in seen_cycles:
                        seen_cycles.add(frozenset(cycle))
                        result.cycles_detected.append(cycle)
                elif target_id not in queued:
                    queued.add(target_id)
                    queue.append(target_id)
                    result.discovered_via[target_id] = (current_id, edge.relationship_type)

        logger.debug(
            f"Traversal from MAL ID {root_id}: {result.node_count} nodes, "
            f"{len(result.cycles_detected)} cycles"
        )
        return result

    @staticmethod
    def _trace_chain(
        adjacency: Dict[int, List[int]],
        start: int,
        end: int
    ) -> Optional[List[int]]:
        """Shortest chain start -> ... -> end through already walked edges."""
        if start == end:
            return [start]

        parents: Dict[int, int] = {start: start}
        frontier = deque([start])
        while frontier:
            node = frontier.popleft()
            for neighbor in adjacency.get(node, []):
                if neighbor in parents:
                    continue
                parents[neighbor] = node
                if neighbor == end:
                    chain = [end]
                    while chain[-1] != start:
                        chain.append(parents[chain[-1]])
                    chain.reverse()
                    return chain
                frontier.append(neighbor)
        return None

    def detect_cycles(self, result: GraphTraversalResult) -> List[List[int]]:
        """
        Find cycles in the walked subgraph with an iterative depth-first search.

        Only resolved nodes take part. Each cycle runs from the stack ancestor
        the back edge points to, down to the node holding that edge. Cycles over
        the same set of identifiers are reported once.
        """
        cycles: List[List[int]] = []
        seen: Set[FrozenSet[int]] = set()
        finished: Set[int] = set()

        for start in result.visited_order:
            if start in finished:
                continue

            path = [start]
            on_path = {start}
            stack = [iter(result.adjacency.get(start, []))]

            while stack:
                child = next(stack[-1], None)
                if child is None:
                    stack.pop()
                    node = path.pop()
                    on_path.discard(node)
                    finished.add(node)
                    continue

                if child not in result.nodes:
                    continue

                if child in on_path:
                    cycle = path[path.index(child):]
                    key = frozenset(cycle)
                    if key not in seen:
                        seen.add(key)
                        cycles.append(cycle)
                elif child not in finished:
                    path.append(child)
                    on_path.add(child)
                    stack.append(iter(result.adjacency.get(child, [])))

        return cycles

    def find_all_related(self, root_id: int) -> List[AnimeInfo]:
        """Every record reachable from root_id, in discovery order (empty if the root is missing)."""
        return list(self.perform_graph_traversal(root_id).nodes.values())

    def priority_of(self, relationship_type: Union[RelationshipType, str]) -> int:
        return priority_of(relationship_type)

    def filter_by_type(
        self,
        edges: Iterable[AnimeRelationship],
        allowed_types: Iterable[Union[RelationshipType, str]]
    ) -> List[AnimeRelationship]:
        return filter_by_type(edges, allowed_types)
