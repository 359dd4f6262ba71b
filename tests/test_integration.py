"""
Integration Tests for the Anime Series Timeline Engine

Tests models, configuration, stores and the system wiring.
"""

import pytest
import json
import sys
from datetime import date, datetime, timezone
from pathlib import Path
from unittest.mock import Mock, patch

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

SAMPLE_GRAPH = Path(__file__).parent.parent / "data" / "sample_graph.json"


class TestModels:
    """Test data models."""

    def test_anime_info_model(self):
        from models.entities import AnimeInfo, MediaType, MediaStatus

        anime = AnimeInfo(
            mal_id=9253,
            title="  Steins;Gate ",
            premiere_date="2011-04-06",
            num_episodes=24,
            anime_type="TV",
            status="finished_airing",
            studios='["White Fox"]'
        )

        assert anime.title == "Steins;Gate"
        assert anime.premiere_date == date(2011, 4, 6)
        assert anime.anime_type == MediaType.TV
        assert anime.status == MediaStatus.FINISHED_AIRING
        assert anime.studios == ["White Fox"]
        assert anime.genres == []
        assert anime.is_main_timeline_type

    def test_anime_info_accepts_camel_case(self):
        from models.entities import AnimeInfo

        anime = AnimeInfo.model_validate({
            "malId": 1,
            "title": "Test",
            "titleEnglish": "Test EN",
            "numEpisodes": 12,
            "animeType": "movie"
        })

        assert anime.mal_id == 1
        assert anime.title_english == "Test EN"
        assert anime.num_episodes == 12

    def test_premiere_date_from_timestamp(self):
        from models.entities import AnimeInfo

        from_string = AnimeInfo(mal_id=1, title="Test", premiere_date="2011-04-06T00:00:00.000Z")
        from_datetime = AnimeInfo(mal_id=1, title="Test", premiere_date=datetime(2011, 4, 6, 9, 30))
        blank = AnimeInfo(mal_id=1, title="Test", premiere_date="")

        assert from_string.premiere_date == date(2011, 4, 6)
        assert from_datetime.premiere_date == date(2011, 4, 6)
        assert blank.premiere_date is None

    def test_unknown_media_type_is_coerced(self):
        from models.entities import AnimeInfo, MediaType

        anime = AnimeInfo(mal_id=1, title="Test", anime_type="tv_special_2")

        assert anime.anime_type == MediaType.UNKNOWN
        assert not anime.is_main_timeline_type

    def test_anime_info_validation(self):
        from models.entities import AnimeInfo
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            AnimeInfo(mal_id=1, title="   ")

        with pytest.raises(ValidationError):
            AnimeInfo(mal_id=1, title="Test", num_episodes=-1)

    def test_anime_info_is_immutable(self):
        from models.entities import AnimeInfo
        from pydantic import ValidationError

        anime = AnimeInfo(mal_id=1, title="Test")

        with pytest.raises(ValidationError):
            anime.title = "Changed"

    def test_relationship_model(self):
        from models.entities import AnimeRelationship
        from models.graph_schema import RelationshipType

        edge = AnimeRelationship(
            source_mal_id=1,
            target_mal_id=2,
            relationship_type=RelationshipType.SIDE_STORY
        )
        raw = AnimeRelationship(source_mal_id=1, target_mal_id=2, relationship_type=" Sequel ")

        assert edge.relationship_type == "side_story"
        assert raw.relationship_type == "sequel"
        assert edge.created_at is None


class TestTimelineModels:
    """Test timeline output contract."""

    def _timeline(self):
        from models.entities import AnimeInfo
        from models.timeline import Timeline, TimelineEntry

        entries = [
            TimelineEntry(
                record=AnimeInfo(mal_id=1, title="Root", anime_type="tv", premiere_date="2020-01-01"),
                chronological_order=1,
                is_main_entry=True
            ),
            TimelineEntry(
                record=AnimeInfo(mal_id=2, title="Extra", anime_type="special"),
                chronological_order=2,
                is_main_entry=False,
                relationship_path=["side_story"]
            ),
        ]
        return Timeline.from_entries(1, entries, last_updated=datetime(2024, 5, 1, tzinfo=timezone.utc))

    def test_timeline_field_names(self):
        data = self._timeline().to_dict()

        assert set(data) == {"rootId", "entries", "totalEntries", "mainTimelineCount", "lastUpdated"}
        assert data["rootId"] == 1
        assert data["totalEntries"] == 2
        assert data["mainTimelineCount"] == 1
        assert data["entries"][1]["chronologicalOrder"] == 2
        assert data["entries"][1]["isMainEntry"] is False
        assert data["entries"][1]["relationshipPath"] == ["side_story"]
        assert data["entries"][0]["record"]["malId"] == 1

    def test_timeline_rehydrates_from_cache(self):
        from models.timeline import Timeline

        timeline = self._timeline()
        cached = json.loads(json.dumps(timeline.to_dict()))

        restored = Timeline.from_dict(cached)

        assert restored.to_dict() == timeline.to_dict()
        assert restored.entries[0].record.premiere_date == date(2020, 1, 1)

    def test_timeline_rejects_inconsistent_counts(self):
        from models.timeline import Timeline
        from pydantic import ValidationError

        data = self._timeline().to_dict()
        data["totalEntries"] = 5

        with pytest.raises(ValidationError):
            Timeline.from_dict(data)

    def test_timeline_rejects_gaps_in_order(self):
        from models.timeline import Timeline
        from pydantic import ValidationError

        data = self._timeline().to_dict()
        data["entries"][1]["chronologicalOrder"] = 3

        with pytest.raises(ValidationError):
            Timeline.from_dict(data)

    def test_empty_timeline(self):
        from models.timeline import Timeline

        timeline = Timeline(root_id=7)

        assert timeline.total_entries == 0
        assert timeline.to_dict()["entries"] == []


class TestConfig:
    """Test configuration."""

    def test_settings_loading(self):
        from config import get_settings

        settings = get_settings()

        assert settings is not None
        assert hasattr(settings, 'neo4j_uri')
        assert hasattr(settings, 'max_traversal_nodes')

    def test_settings_from_environment(self, monkeypatch):
        from config import Settings

        monkeypatch.setenv("MAX_TRAVERSAL_NODES", "42")
        monkeypatch.setenv("NEO4J_URI", "bolt://graph:7687")

        settings = Settings()

        assert settings.max_traversal_nodes == 42
        assert settings.neo4j_uri == "bolt://graph:7687"

    def test_graph_schema(self):
        from config import GRAPH_SCHEMA

        assert "Anime" in GRAPH_SCHEMA["nodes"]
        assert "mal_id" in GRAPH_SCHEMA["nodes"]["Anime"]
        assert "RELATED_TO" in GRAPH_SCHEMA["relationships"]


class TestGraphSchema:
    """Test graph schema definitions."""

    def test_relationship_types(self):
        from models.graph_schema import RelationshipType

        assert RelationshipType.PREQUEL.value == "prequel"
        assert RelationshipType.SIDE_STORY.value == "side_story"
        assert len(RelationshipType) == 12

    def test_predefined_queries(self):
        from models.graph_schema import PredefinedQueries

        assert "$mal_id" in PredefinedQueries.GET_ANIME
        assert "RELATED_TO" in PredefinedQueries.GET_OUTGOING_RELATIONSHIPS
        assert "->" in PredefinedQueries.GET_OUTGOING_RELATIONSHIPS


class TestInMemoryStore:
    """Test the JSON-backed relationship store."""

    def test_load_sample_graph(self):
        from services.relationship_store import InMemoryRelationshipStore, RelationshipStore

        store = InMemoryRelationshipStore.from_json(SAMPLE_GRAPH)

        assert isinstance(store, RelationshipStore)
        assert store.get_statistics() == {"anime_count": 5, "relationship_count": 8}
        assert store.resolve_record(9253).title == "Steins;Gate"
        assert store.resolve_record(1) is None
        assert [edge.target_mal_id for edge in store.outgoing_edges(9253)] == [10863, 11577, 32188, 30484]
        assert store.outgoing_edges(1) == []

    def test_invalid_graph_file(self, tmp_path):
        from services.relationship_store import InMemoryRelationshipStore

        not_an_object = tmp_path / "list.json"
        not_an_object.write_text("[1, 2, 3]")
        bad_record = tmp_path / "bad.json"
        bad_record.write_text(json.dumps({"anime": [{"malId": 1}]}))

        with pytest.raises(ValueError):
            InMemoryRelationshipStore.from_json(not_an_object)
        with pytest.raises(ValueError):
            InMemoryRelationshipStore.from_json(bad_record)

    def test_outgoing_edges_returns_copy(self):
        from services.relationship_store import InMemoryRelationshipStore
        from models.entities import AnimeRelationship

        store = InMemoryRelationshipStore(relationships=[
            AnimeRelationship(source_mal_id=1, target_mal_id=2, relationship_type="sequel")
        ])

        store.outgoing_edges(1).clear()

        assert len(store.outgoing_edges(1)) == 1


class TestNeo4jStore:
    """Test the Neo4j store against a mocked driver."""

    @patch("services.relationship_store.GraphDatabase")
    def test_resolve_record(self, mock_graph_database):
        from services.relationship_store import Neo4jRelationshipStore

        session = mock_graph_database.driver.return_value.session.return_value
        premiere = Mock()
        premiere.to_native.return_value = date(2011, 4, 6)
        session.run.return_value.single.return_value = {
            "a": {"mal_id": 9253, "title": "Steins;Gate", "anime_type": "tv", "premiere_date": premiere}
        }

        store = Neo4jRelationshipStore(uri="bolt://test:7687", user="neo4j", password="secret")
        anime = store.resolve_record(9253)

        mock_graph_database.driver.assert_called_once_with("bolt://test:7687", auth=("neo4j", "secret"))
        mock_graph_database.driver.return_value.verify_connectivity.assert_called_once()
        assert anime.mal_id == 9253
        assert anime.premiere_date == date(2011, 4, 6)
        assert session.run.call_args.kwargs == {"mal_id": 9253}
        session.close.assert_called()

    @patch("services.relationship_store.GraphDatabase")
    def test_resolve_missing_record(self, mock_graph_database):
        from services.relationship_store import Neo4jRelationshipStore

        session = mock_graph_database.driver.return_value.session.return_value
        session.run.return_value.single.return_value = None

        store = Neo4jRelationshipStore(uri="bolt://test:7687", user="neo4j", password="secret")

        assert store.resolve_record(1) is None

    @patch("services.relationship_store.GraphDatabase")
    def test_outgoing_edges(self, mock_graph_database):
        from services.relationship_store import Neo4jRelationshipStore

        session = mock_graph_database.driver.return_value.session.return_value
        session.run.return_value = [
            {"source_mal_id": 1, "target_mal_id": 2, "relationship_type": "sequel", "created_at": None},
            {"source_mal_id": 1, "target_mal_id": 3, "relationship_type": "SIDE_STORY", "created_at": None},
        ]

        store = Neo4jRelationshipStore(uri="bolt://test:7687", user="neo4j", password="secret")
        edges = store.outgoing_edges(1)

        assert [(e.target_mal_id, e.relationship_type) for e in edges] == [(2, "sequel"), (3, "side_story")]

    @patch("services.relationship_store.GraphDatabase")
    def test_query_errors_propagate(self, mock_graph_database):
        from neo4j.exceptions import ServiceUnavailable
        from services.relationship_store import Neo4jRelationshipStore
        from services.graph_traversal import GraphTraversalEngine

        session = mock_graph_database.driver.return_value.session.return_value
        session.run.side_effect = ServiceUnavailable("connection lost")

        store = Neo4jRelationshipStore(uri="bolt://test:7687", user="neo4j", password="secret")

        with pytest.raises(ServiceUnavailable):
            GraphTraversalEngine(store).perform_graph_traversal(1)
        session.close.assert_called()

    @patch("services.relationship_store.GraphDatabase")
    def test_connection_failure_raises(self, mock_graph_database):
        from neo4j.exceptions import ServiceUnavailable
        from services.relationship_store import Neo4jRelationshipStore

        mock_graph_database.driver.return_value.verify_connectivity.side_effect = ServiceUnavailable("down")

        with pytest.raises(ServiceUnavailable):
            Neo4jRelationshipStore(uri="bolt://test:7687", user="neo4j", password="secret")

    @patch("services.relationship_store.GraphDatabase")
    def test_close(self, mock_graph_database):
        from services.relationship_store import Neo4jRelationshipStore

        store = Neo4jRelationshipStore(uri="bolt://test:7687", user="neo4j", password="secret")
        driver = mock_graph_database.driver.return_value

        store.close()

        driver.close.assert_called_once()


class TestTimelineSystem:
    """Test the orchestrator against the sample graph."""

    def test_sample_timeline(self):
        from main import TimelineSystem

        system = TimelineSystem(graph_file=str(SAMPLE_GRAPH))
        try:
            timeline = system.timeline(30484)
        finally:
            system.close()

        assert [entry["record"]["malId"] for entry in timeline["entries"]] == [9253, 10863, 11577, 32188, 30484]
        assert timeline["totalEntries"] == 5
        assert timeline["mainTimelineCount"] == 3

    def test_status_and_batch(self):
        from main import TimelineSystem

        system = TimelineSystem(graph_file=str(SAMPLE_GRAPH))

        status = system.status(9253)
        batch = system.batch([9253, 1])

        assert status["exists"] is True
        assert status["entryCount"] == 5
        assert len(batch["successful"]) == 2
        assert batch["successful"][1]["totalEntries"] == 0
        assert batch["failed"] == []

    def test_cycles_report(self):
        from main import TimelineSystem

        system = TimelineSystem(graph_file=str(SAMPLE_GRAPH))

        report = system.cycles(9253)

        assert report["visitedOrder"][0] == 9253
        assert report["hasCycles"] is True
        assert len(report["cyclesDetected"]) == 4
        assert len(report["dfsCycles"]) == 4

    def test_injected_store(self):
        from main import TimelineSystem
        from services.relationship_store import InMemoryRelationshipStore

        system = TimelineSystem(store=InMemoryRelationshipStore())

        assert system.timeline(1)["totalEntries"] == 0
        assert system.get_statistics() == {"anime_count": 0, "relationship_count": 0}


class TestHelperFunctions:
    """Test utility functions."""

    def test_parse_mal_id(self):
        from main import parse_mal_id

        # Standard URL
        assert parse_mal_id("https://myanimelist.net/anime/9253") == 9253

        # URL with title slug
        assert parse_mal_id("https://myanimelist.net/anime/16498/Shingeki_no_Kyojin") == 16498

        # Without scheme
        assert parse_mal_id("myanimelist.net/anime/5114/") == 5114

        # Just the ID
        assert parse_mal_id(" 9253 ") == 9253

    def test_parse_mal_id_invalid(self):
        from main import parse_mal_id

        with pytest.raises(ValueError):
            parse_mal_id("https://example.com/anime/1")
        with pytest.raises(ValueError):
            parse_mal_id("0")
        with pytest.raises(ValueError):
            parse_mal_id("abc")

    def test_cli_examples_use_sample_graph_ids(self):
        import re
        from main import TimelineSystem, build_parser

        epilog = build_parser().epilog
        example_ids = {int(mal_id) for mal_id in re.findall(r"--(?:timeline|cycles) (\d+)", epilog)}

        system = TimelineSystem(graph_file=str(SAMPLE_GRAPH))
        try:
            assert example_ids
            for mal_id in example_ids:
                assert system.timeline(mal_id)["totalEntries"] > 0
        finally:
            system.close()

    def test_max_nodes_option(self):
        from main import build_parser

        parser = build_parser()

        assert parser.parse_args(["--max-nodes", "0"]).max_nodes == 0
        assert parser.parse_args(["--max-nodes", "25"]).max_nodes == 25
        with pytest.raises(SystemExit):
            parser.parse_args(["--max-nodes", "-1"])
        with pytest.raises(SystemExit):
            parser.parse_args(["--max-nodes", "many"])


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
