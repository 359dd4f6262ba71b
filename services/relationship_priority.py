"""
Relationship and media type priority tables.

Lower values are more "primary". Both tables are read-only.
"""

from types import MappingProxyType
from typing import Iterable, List, Union

from models.entities import AnimeRelationship, MediaType
from models.graph_schema import RelationshipType

RELATIONSHIP_TYPE_PRIORITIES = MappingProxyType({
    RelationshipType.PREQUEL.value: 1,
    RelationshipType.SEQUEL.value: 2,
    RelationshipType.PARENT_STORY.value: 3,
    RelationshipType.SPIN_OFF.value: 4,
    RelationshipType.SIDE_STORY.value: 5,
    RelationshipType.ALTERNATIVE_VERSION.value: 6,
    RelationshipType.ALTERNATIVE_SETTING.value: 7,
    RelationshipType.ADAPTATION.value: 8,
    RelationshipType.CHARACTER.value: 9,
    RelationshipType.SUMMARY.value: 10,
    RelationshipType.FULL_STORY.value: 11,
    RelationshipType.OTHER.value: 12,
})

# Unrecognized relationship tags always rank after every known one
UNKNOWN_RELATIONSHIP_PRIORITY = 999

MEDIA_TYPE_PRIORITIES = MappingProxyType({
    MediaType.TV: 1,
    MediaType.MOVIE: 2,
    MediaType.OVA: 3,
    MediaType.SPECIAL: 4,
    MediaType.ONA: 5,
    MediaType.MUSIC: 6,
    MediaType.UNKNOWN: 7,
})

UNKNOWN_MEDIA_TYPE_PRIORITY = 999


def _tag(relationship_type: Union[RelationshipType, str]) -> str:
    if isinstance(relationship_type, RelationshipType):
        return relationship_type.value
    return str(relationship_type).strip().lower()


def priority_of(relationship_type: Union[RelationshipType, str]) -> int:
    """
    Get the ordering priority of a relationship type.

    Args:
        relationship_type: RelationshipType member or its string tag

    Returns:
        Priority value (lower = more primary); unrecognized tags get
        UNKNOWN_RELATIONSHIP_PRIORITY
    """
    return RELATIONSHIP_TYPE_PRIORITIES.get(_tag(relationship_type), UNKNOWN_RELATIONSHIP_PRIORITY)


def media_type_priority(media_type: MediaType) -> int:
    """Get the tie-break priority of a media type (series before film before the rest)."""
    return MEDIA_TYPE_PRIORITIES.get(media_type, UNKNOWN_MEDIA_TYPE_PRIORITY)


def filter_by_type(
    edges: Iterable[AnimeRelationship],
    allowed_types: Iterable[Union[RelationshipType, str]]
) -> List[AnimeRelationship]:
    """Keep only the edges whose type is in allowed_types, preserving order."""
    allowed = {_tag(t) for t in allowed_types}
    return [edge for edge in edges if edge.relationship_type in allowed]
