"""
Entity data models for the Anime Series Timeline Engine.
Defines Pydantic models for anime records and the directed relationships between them.
"""

import json
from typing import List, Optional, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from enum import Enum
from datetime import date, datetime


class MediaType(str, Enum):
    """Media format of an anime entry."""
    TV = "tv"
    MOVIE = "movie"
    OVA = "ova"
    ONA = "ona"
    SPECIAL = "special"
    MUSIC = "music"
    UNKNOWN = "unknown"


class MediaStatus(str, Enum):
    """Airing status of an anime entry."""
    FINISHED_AIRING = "finished_airing"
    CURRENTLY_AIRING = "currently_airing"
    NOT_YET_AIRED = "not_yet_aired"


# Series and films make up the main timeline; everything else is ancillary
MAIN_TIMELINE_TYPES = frozenset({MediaType.TV, MediaType.MOVIE})


class AnimeInfo(BaseModel):
    """
    Descriptive record for a single anime entry.

    Attributes:
        mal_id: Stable unique identifier (MyAnimeList ID)
        title: Primary title
        title_english: Localized English title
        title_japanese: Original Japanese title
        image_url: Cover image URL
        rating: Average score
        premiere_date: First airing / release date
        num_episodes: Episode count, if known
        episode_duration: Episode length in minutes
        anime_type: Media format (tv, movie, ova, ...)
        status: Airing status
        source: Source material (manga, light novel, original, ...)
        studios: Producing studios
        genres: Genre tags
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    mal_id: int
    title: str
    title_english: Optional[str] = None
    title_japanese: Optional[str] = None
    image_url: Optional[str] = None
    rating: Optional[float] = None
    premiere_date: Optional[date] = None
    num_episodes: Optional[int] = Field(default=None, ge=0)
    episode_duration: Optional[int] = Field(default=None, ge=0)
    anime_type: MediaType = MediaType.UNKNOWN
    status: Optional[MediaStatus] = None
    source: Optional[str] = None
    studios: List[str] = Field(default_factory=list)
    genres: List[str] = Field(default_factory=list)

    @field_validator('title')
    @classmethod
    def title_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Anime title cannot be empty")
        return v.strip()

    @field_validator('premiere_date', mode='before')
    @classmethod
    def parse_premiere_date(cls, v: Any) -> Any:
        # Stores hand back full timestamps; only the calendar date matters here
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            return v[:10]
        return v

    @field_validator('anime_type', mode='before')
    @classmethod
    def coerce_anime_type(cls, v: Any) -> Any:
        if v is None:
            return MediaType.UNKNOWN
        if isinstance(v, MediaType):
            return v
        try:
            return MediaType(str(v).lower())
        except ValueError:
            return MediaType.UNKNOWN

    @field_validator('studios', 'genres', mode='before')
    @classmethod
    def parse_string_list(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return json.loads(v) if v.strip() else []
        return v

    @property
    def is_main_timeline_type(self) -> bool:
        """Series and films count toward the main timeline."""
        return self.anime_type in MAIN_TIMELINE_TYPES


class AnimeRelationship(BaseModel):
    """
    A directed, typed edge between two anime entries.

    Attributes:
        source_mal_id: Entry the edge starts from
        target_mal_id: Entry the edge points to
        relationship_type: Tag such as "sequel" or "side_story"
        created_at: When the edge was recorded by ingestion
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    source_mal_id: int
    target_mal_id: int
    relationship_type: str
    created_at: Optional[datetime] = None

    @field_validator('relationship_type', mode='before')
    @classmethod
    def normalize_type(cls, v: Any) -> str:
        if isinstance(v, Enum):
            v = v.value
        return str(v).strip().lower()
