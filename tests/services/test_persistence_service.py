"""Tests for the SQL and JSON-file snapshot stores."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from src.core.errors import PersistenceError
from src.core.game import GameSession
from src.db.models import SaveSlotModel
from src.services.persistence_service import (
    JsonFileSnapshotStore,
    SqlSnapshotStore,
    create_snapshot_store,
)


def _snapshot(score: int = 0) -> dict:
    return {"schema_version": 2, "score": score, "current_room_id": "entrance"}


class TestSqlSnapshotStore:
    def test_save_and_load(self, db_session):
        store = SqlSnapshotStore(db_session)
        store.save("slot1", _snapshot(120))

        assert store.load("slot1") == _snapshot(120)
        row = db_session.get(SaveSlotModel, "slot1")
        assert row.schema_version == 2
        assert row.score == 120

    def test_save_overwrites_slot(self, db_session):
        store = SqlSnapshotStore(db_session)
        store.save("slot1", _snapshot(10))
        store.save("slot1", _snapshot(20))

        assert store.load("slot1")["score"] == 20
        assert db_session.query(SaveSlotModel).count() == 1

    def test_missing_slot(self, db_session):
        assert SqlSnapshotStore(db_session).load("nothing") is None

    def test_clear(self, db_session):
        store = SqlSnapshotStore(db_session)
        store.save("slot1", _snapshot())
        store.clear("slot1")
        store.clear("slot1")
        assert store.load("slot1") is None

    def test_list_slots(self, db_session):
        store = SqlSnapshotStore(db_session)
        store.save("b", _snapshot(2))
        store.save("a", _snapshot(1))
        slots = store.list_slots()
        assert [s["slot_id"] for s in slots] == ["a", "b"]
        assert slots[1]["score"] == 2

    def test_game_session_round_trip(self, db_session, content, rules, answer):
        store = SqlSnapshotStore(db_session)
        game = GameSession(content, rules=rules, store=store)
        game.request_question()
        answer(game)
        game.save()

        restored = GameSession(content, rules=rules, store=store)
        assert restored.load() is True
        assert restored.progression.state.score == game.progression.state.score
        assert restored.progression.state.unlocked_room_ids == {"entrance", "hall"}


class TestJsonFileSnapshotStore:
    def test_save_and_load(self, tmp_path):
        store = JsonFileSnapshotStore(tmp_path / "saves")
        store.save("slot1", _snapshot(50))

        assert store.path_for("slot1").exists()
        assert store.load("slot1") == _snapshot(50)

    def test_missing_file(self, tmp_path):
        assert JsonFileSnapshotStore(tmp_path).load("slot1") is None

    def test_clear(self, tmp_path):
        store = JsonFileSnapshotStore(tmp_path)
        store.save("slot1", _snapshot())
        store.clear("slot1")
        store.clear("slot1")
        assert not store.path_for("slot1").exists()

    def test_corrupt_file(self, tmp_path):
        store = JsonFileSnapshotStore(tmp_path)
        store.path_for("slot1").write_text("{broken", encoding="utf-8")
        with pytest.raises(PersistenceError):
            store.load("slot1")

    def test_non_object_payload(self, tmp_path):
        store = JsonFileSnapshotStore(tmp_path)
        store.path_for("slot1").write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(PersistenceError, match="snapshot object"):
            store.load("slot1")

    def test_list_slots_skips_unreadable(self, tmp_path):
        store = JsonFileSnapshotStore(tmp_path)
        store.save("b", _snapshot(7))
        store.save("a", _snapshot(3))
        store.path_for("broken").write_text("{", encoding="utf-8")

        slots = store.list_slots()
        assert [s["slot_id"] for s in slots] == ["a", "b"]
        assert slots[1]["score"] == 7

    def test_corrupt_file_starts_fresh_game(self, tmp_path, content, rules):
        store = JsonFileSnapshotStore(tmp_path)
        store.path_for("default").write_text("{broken", encoding="utf-8")
        game = GameSession(content, rules=rules, store=store)
        assert game.load() is False
        assert game.progression.state.current_room_id == "entrance"


class TestSqlFailures:
    def test_commit_failure_rolls_back(self):
        db = MagicMock()
        db.get.return_value = None
        db.commit.side_effect = SQLAlchemyError("locked")
        store = SqlSnapshotStore(db)

        with pytest.raises(PersistenceError, match="Failed to save slot"):
            store.save("slot1", _snapshot())
        db.rollback.assert_called_once()

    def test_failed_save_reported_by_game(self, content, rules, event_bus, recorded):
        db = MagicMock()
        db.get.side_effect = SQLAlchemyError("gone")
        game = GameSession(
            content, event_bus=event_bus, rules=rules, store=SqlSnapshotStore(db)
        )
        with pytest.raises(PersistenceError):
            game.save()
        assert recorded[-1].kind == "persistence"
        assert recorded[-1].command == "save"


class TestCreateSnapshotStore:
    def test_sql_backend(self, db_session):
        store = create_snapshot_store("sql", db=db_session)
        assert isinstance(store, SqlSnapshotStore)

    def test_sql_backend_requires_session(self):
        with pytest.raises(ValueError, match="database session"):
            create_snapshot_store("sql")

    def test_file_backend(self, tmp_path, content, rules):
        store = create_snapshot_store("file", directory=tmp_path)
        assert isinstance(store, JsonFileSnapshotStore)

        game = GameSession(content, rules=rules, store=store)
        game.save()
        assert [s["slot_id"] for s in game.list_slots()] == ["default"]

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown save backend"):
            create_snapshot_store("redis")
