"""
Relationship Store implementations for the Anime Series Timeline Engine.
Read-only lookups of anime records and their outgoing relationship edges.
"""

import json
from pathlib import Path
from typing import List, Dict, Any, Optional, Protocol, Union, runtime_checkable
from contextlib import contextmanager

from neo4j import GraphDatabase, Driver, Session
from neo4j.exceptions import ServiceUnavailable, AuthError

from models.entities import AnimeInfo, AnimeRelationship
from models.graph_schema import PredefinedQueries
from config import get_settings, get_logger

logger = get_logger(__name__)


@runtime_checkable
class RelationshipStore(Protocol):
    """The two read-only lookups the traversal engine depends on."""

    def resolve_record(self, mal_id: int) -> Optional[AnimeInfo]:
        """Return the record for mal_id, or None if it does not exist."""
        ...

    def outgoing_edges(self, mal_id: int) -> List[AnimeRelationship]:
        """Return edges whose source is mal_id, in stored order."""
        ...


class InMemoryRelationshipStore:
    """
    Dictionary-backed store.

    Holds a snapshot of records and edges, typically loaded from a JSON graph
    file of the form {"anime": [...], "relationships": [...]}.
    """

    def __init__(
        self,
        records: List[AnimeInfo] = None,
        relationships: List[AnimeRelationship] = None
    ):
        self._records: Dict[int, AnimeInfo] = {}
        self._edges: Dict[int, List[AnimeRelationship]] = {}

        for record in records or []:
            self.add_record(record)
        for relationship in relationships or []:
            self.add_relationship(relationship)

    def add_record(self, record: AnimeInfo) -> None:
        self._records[record.mal_id] = record

    def add_relationship(self, relationship: AnimeRelationship) -> None:
        self._edges.setdefault(relationship.source_mal_id, []).append(relationship)

    def resolve_record(self, mal_id: int) -> Optional[AnimeInfo]:
        return self._records.get(mal_id)

    def outgoing_edges(self, mal_id: int) -> List[AnimeRelationship]:
        return list(self._edges.get(mal_id, []))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryRelationshipStore":
        """Build a store from parsed graph data."""
        records = [AnimeInfo.model_validate(item) for item in data.get("anime", [])]
        relationships = [
            AnimeRelationship.model_validate(item)
            for item in data.get("relationships", [])
        ]
        return cls(records, relationships)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "InMemoryRelationshipStore":
        """
        Load a store from a JSON graph file.

        Args:
            path: Path to a file with "anime" and "relationships" arrays

        Returns:
            Populated store

        Raises:
            ValueError: If the file is not valid graph data
        """
        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Graph file {path} must contain a JSON object")

        store = cls.from_dict(data)
        logger.info(
            f"Loaded {store.record_count} anime and {store.relationship_count} "
            f"relationships from {path}"
        )
        return store

    @property
    def record_count(self) -> int:
        return len(self._records)

    @property
    def relationship_count(self) -> int:
        return sum(len(edges) for edges in self._edges.values())

    def get_statistics(self) -> Dict[str, int]:
        """Get store statistics."""
        return {
            "anime_count": self.record_count,
            "relationship_count": self.relationship_count
        }

    def close(self) -> None:
        """Nothing to release for an in-memory store."""


class Neo4jRelationshipStore:
    """
    Read-only store backed by a Neo4j anime graph.

    Expects (:Anime {mal_id, ...}) nodes linked by
    [:RELATED_TO {relationship_type, created_at}] edges. Query errors are not
    caught here; they propagate to the caller.
    """

    def __init__(
        self,
        uri: str = None,
        user: str = None,
        password: str = None,
        database: str = None
    ):
        self.settings = get_settings()
        self.uri = uri or self.settings.neo4j_uri
        self.user = user or self.settings.neo4j_user
        self.password = password or self.settings.neo4j_password
        self.database = database or self.settings.neo4j_database

        self._driver: Optional[Driver] = None
        self._connect()

    def _connect(self) -> None:
        """Establish connection to Neo4j."""
        try:
            self._driver = GraphDatabase.driver(
                self.uri,
                auth=(self.user, self.password)
            )
            # Verify connection
            self._driver.verify_connectivity()
            logger.info(f"Connected to Neo4j at {self.uri}")
        except AuthError as e:
            logger.error(f"Neo4j authentication failed: {e}")
            raise
        except ServiceUnavailable as e:
            logger.error(f"Neo4j service unavailable: {e}")
            raise

    @property
    def driver(self) -> Driver:
        """Get the Neo4j driver, reconnecting if necessary."""
        if self._driver is None:
            self._connect()
        return self._driver

    @contextmanager
    def session(self) -> Session:
        """Context manager for Neo4j sessions."""
        session = self.driver.session(database=self.database)
        try:
            yield session
        finally:
            session.close()

    def close(self) -> None:
        """Close the database connection."""
        if self._driver:
            self._driver.close()
            self._driver = None
            logger.info("Neo4j connection closed")

    def resolve_record(self, mal_id: int) -> Optional[AnimeInfo]:
        with self.session() as session:
            result = session.run(PredefinedQueries.GET_ANIME, mal_id=mal_id)
            record = result.single()

        if record is None:
            return None
        return AnimeInfo.model_validate(_to_native(dict(record["a"])))

    def outgoing_edges(self, mal_id: int) -> List[AnimeRelationship]:
        with self.session() as session:
            result = session.run(PredefinedQueries.GET_OUTGOING_RELATIONSHIPS, mal_id=mal_id)
            rows = [_to_native(dict(record)) for record in result]

        return [AnimeRelationship.model_validate(row) for row in rows]

    def get_statistics(self) -> Dict[str, int]:
        """Get database statistics."""
        stats = {}

        with self.session() as session:
            record = session.run(PredefinedQueries.COUNT_ANIME).single()
            stats["anime_count"] = record["count"] if record else 0

            record = session.run(PredefinedQueries.COUNT_RELATIONSHIPS).single()
            stats["relationship_count"] = record["count"] if record else 0

        return stats


def _to_native(properties: Dict[str, Any]) -> Dict[str, Any]:
    """Convert neo4j temporal values to their Python equivalents."""
    return {
        key: value.to_native() if hasattr(value, "to_native") else value
        for key, value in properties.items()
    }
