"""Data models for the Anime Series Timeline Engine."""

from .entities import (
    AnimeInfo,
    AnimeRelationship,
    MediaType,
    MediaStatus,
    MAIN_TIMELINE_TYPES
)

from .graph_schema import (
    RelationshipType,
    GraphTraversalResult,
    PredefinedQueries
)

from .timeline import (
    TimelineEntry,
    Timeline,
    TimelineStatus,
    FailedTimeline,
    BatchTimelineResult
)

__all__ = [
    "AnimeInfo",
    "AnimeRelationship",
    "MediaType",
    "MediaStatus",
    "MAIN_TIMELINE_TYPES",
    "RelationshipType",
    "GraphTraversalResult",
    "PredefinedQueries",
    "TimelineEntry",
    "Timeline",
    "TimelineStatus",
    "FailedTimeline",
    "BatchTimelineResult"
]
