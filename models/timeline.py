"""
Timeline data models for the Anime Series Timeline Engine.

The serialized field names of Timeline (rootId, entries, totalEntries,
mainTimelineCount, lastUpdated) are what external caches persist and rehydrate.
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone

from models.entities import AnimeInfo


class TimelineEntry(BaseModel):
    """
    An anime record placed on a timeline.

    Attributes:
        record: The underlying anime record
        chronological_order: 1-based position within the timeline
        is_main_entry: True for series and films, False for ancillary content
        relationship_path: Relationship tags leading from the root to this entry
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    record: AnimeInfo
    chronological_order: int = Field(ge=1)
    is_main_entry: bool
    relationship_path: List[str] = Field(default_factory=list)

    @property
    def mal_id(self) -> int:
        return self.record.mal_id

    @property
    def title(self) -> str:
        return self.record.title


class Timeline(BaseModel):
    """
    A chronologically ordered series timeline rooted at one anime.

    Attributes:
        root_id: Identifier the timeline was generated from
        entries: Entries in chronological order
        total_entries: Number of entries
        main_timeline_count: Number of main (series/film) entries
        last_updated: When the timeline was generated
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    root_id: int
    entries: List[TimelineEntry] = Field(default_factory=list)
    total_entries: int = 0
    main_timeline_count: int = 0
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode='after')
    def check_counts(self) -> "Timeline":
        if self.total_entries != len(self.entries):
            raise ValueError("totalEntries must equal the number of entries")
        main_count = sum(1 for entry in self.entries if entry.is_main_entry)
        if self.main_timeline_count != main_count:
            raise ValueError("mainTimelineCount must equal the number of main entries")
        orders = [entry.chronological_order for entry in self.entries]
        if orders != list(range(1, len(orders) + 1)):
            raise ValueError("chronologicalOrder values must run 1..N in entry order")
        return self

    @classmethod
    def from_entries(
        cls,
        root_id: int,
        entries: List[TimelineEntry],
        last_updated: Optional[datetime] = None
    ) -> "Timeline":
        """Build a timeline, deriving the counts from the entries."""
        return cls(
            root_id=root_id,
            entries=entries,
            total_entries=len(entries),
            main_timeline_count=sum(1 for entry in entries if entry.is_main_entry),
            last_updated=last_updated or datetime.now(timezone.utc)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization / caching."""
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Timeline":
        """Rehydrate a timeline previously produced by to_dict."""
        return cls.model_validate(data)


class TimelineStatus(BaseModel):
    """Whether a timeline can be generated for an anime, and its size."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    exists: bool
    last_updated: Optional[datetime] = None
    entry_count: int = 0
    main_entry_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return self.model_dump(by_alias=True, mode="json")


class FailedTimeline(BaseModel):
    """A root identifier whose timeline could not be built."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    mal_id: int
    error: str


class BatchTimelineResult(BaseModel):
    """Outcome of building timelines for several roots."""
    successful: List[Timeline] = Field(default_factory=list)
    failed: List[FailedTimeline] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "successful": [timeline.to_dict() for timeline in self.successful],
            "failed": [failure.model_dump(by_alias=True) for failure in self.failed]
        }
