"""
Graph schema definitions for the anime relationship graph.
Defines relationship types, the traversal result structure, and the Cypher
queries the Neo4j store reads with.
"""

from typing import List, Dict, Tuple
from pydantic import BaseModel, Field
from enum import Enum

from models.entities import AnimeInfo


class RelationshipType(str, Enum):
    """Recognized relationship tags between anime entries."""
    PREQUEL = "prequel"
    SEQUEL = "sequel"
    PARENT_STORY = "parent_story"
    SPIN_OFF = "spin_off"
    SIDE_STORY = "side_story"
    ALTERNATIVE_VERSION = "alternative_version"
    ALTERNATIVE_SETTING = "alternative_setting"
    ADAPTATION = "adaptation"
    CHARACTER = "character"
    SUMMARY = "summary"
    FULL_STORY = "full_story"
    OTHER = "other"


class GraphTraversalResult(BaseModel):
    """
    Everything discovered by one breadth-first walk of the relationship graph.

    Attributes:
        root_id: Identifier the walk started from
        nodes: Resolved records keyed by identifier
        visited_order: Identifiers in discovery order, no duplicates
        adjacency: Target identifiers of the outgoing edges actually walked
        cycles_detected: Back-reference chains found during the walk
        discovered_via: Parent identifier and relationship tag each node was first reached through
    """
    root_id: int
    nodes: Dict[int, AnimeInfo] = Field(default_factory=dict)
    visited_order: List[int] = Field(default_factory=list)
    adjacency: Dict[int, List[int]] = Field(default_factory=dict)
    cycles_detected: List[List[int]] = Field(default_factory=list)
    discovered_via: Dict[int, Tuple[int, str]] = Field(default_factory=dict)

    @property
    def node_count(self) -> int:
        """Get the number of resolved nodes."""
        return len(self.nodes)

    @property
    def has_cycles(self) -> bool:
        return bool(self.cycles_detected)

    def relationship_path(self, mal_id: int) -> List[str]:
        """Relationship tags leading from the root to the given node."""
        path: List[str] = []
        current = mal_id
        while current in self.discovered_via:
            parent, relationship_type = self.discovered_via[current]
            path.append(relationship_type)
            current = parent
        path.reverse()
        return path


# Predefined Cypher queries for the read-only store
class PredefinedQueries:
    """Collection of predefined Cypher queries."""

    GET_ANIME = """
    MATCH (a:Anime {mal_id: $mal_id})
    RETURN a
    LIMIT 1
    """

    GET_OUTGOING_RELATIONSHIPS = """
    MATCH (a:Anime {mal_id: $mal_id})-[r:RELATED_TO]->(b:Anime)
    RETURN a.mal_id as source_mal_id, b.mal_id as target_mal_id,
           r.relationship_type as relationship_type, r.created_at as created_at
    ORDER BY r.created_at, b.mal_id
    """

    COUNT_ANIME = """
    MATCH (a:Anime)
    RETURN count(a) as count
    """

    COUNT_RELATIONSHIPS = """
    MATCH (:Anime)-[r:RELATED_TO]->(:Anime)
    RETURN count(r) as count
    """
