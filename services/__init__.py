"""Services package for the Anime Series Timeline Engine."""

from .relationship_store import (
    RelationshipStore,
    InMemoryRelationshipStore,
    Neo4jRelationshipStore
)
from .relationship_priority import priority_of, filter_by_type
from .graph_traversal import GraphTraversalEngine, GraphTooLargeError
from .chronological_sorter import ChronologicalSorter
from .timeline_assembler import TimelineAssembler

__all__ = [
    "RelationshipStore",
    "InMemoryRelationshipStore",
    "Neo4jRelationshipStore",
    "priority_of",
    "filter_by_type",
    "GraphTraversalEngine",
    "GraphTooLargeError",
    "ChronologicalSorter",
    "TimelineAssembler"
]
