"""Tests for game API endpoints."""

import asyncio

from fastapi.testclient import TestClient

from src.core.game import GameSession


def _event_types(response) -> list[str]:
    return [e["type"] for e in response.json()["events"]]


def _correct_index(game: GameSession) -> int:
    return game.quiz.session.question.correct_index


class TestQueries:
    """Tests for GET /game/* endpoints."""

    def test_state(self, client: TestClient):
        response = client.get("/game/state")
        assert response.status_code == 200
        data = response.json()
        assert data["current_room"]["room_id"] == "entrance"
        assert data["unlocked_rooms"] == ["entrance"]
        assert data["score"] == 0
        assert data["question"] is None

    def test_statistics(self, client: TestClient):
        data = client.get("/game/statistics").json()
        assert data["questions_answered"] == 0
        assert data["grade"] == "F"
        assert data["play_time"] == "0s"

    def test_achievements(self, client: TestClient):
        data = client.get("/game/achievements").json()
        assert len(data) == 3
        assert data[0]["achievement_id"] == "first_correct"

    def test_export(self, client: TestClient):
        data = client.get("/game/export").json()
        assert data["schema_version"] == 2
        assert data["current_room_id"] == "entrance"


class TestQuestionFlow:
    """Tests for POST /game/question, /answer, /hint, /skip."""

    def test_question_hides_answer(self, client: TestClient):
        response = client.post("/game/question")
        assert response.status_code == 200
        body = response.json()
        assert body["result"]["question_id"] == "h_easy"
        assert "correct_index" not in body["result"]
        assert _event_types(response) == ["question_presented"]

    def test_correct_answer_unlocks_and_scores(self, client: TestClient, game):
        client.post("/game/question")
        response = client.post(
            "/game/answer", json={"option_index": _correct_index(game)}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["result"]["correct"] is True
        assert _event_types(response) == [
            "question_answered",
            "room_unlocked",
            "score_changed",
            "achievement_unlocked",
            "score_changed",
        ]
        assert "hall" in body["state"]["unlocked_rooms"]
        assert body["state"]["score"] == 200

    def test_answer_without_question(self, client: TestClient):
        response = client.post("/game/answer", json={"option_index": 0})
        assert response.status_code == 409

    def test_negative_index_rejected_by_schema(self, client: TestClient):
        client.post("/game/question")
        response = client.post("/game/answer", json={"option_index": -1})
        assert response.status_code == 422

    def test_hint(self, client: TestClient):
        client.post("/game/question")
        response = client.post("/game/hint")
        assert response.json()["result"] == {"hint": "Think of kings."}
        assert _event_types(response) == ["hint_used"]
        assert client.post("/game/hint").status_code == 409

    def test_skip(self, client: TestClient):
        client.post("/game/question")
        response = client.post("/game/skip")
        body = response.json()
        assert body["result"]["skipped"] is True
        assert body["state"]["score"] == -10

    def test_question_in_locked_room(self, client: TestClient):
        response = client.post("/game/question", json={"room_id": "vault"})
        assert response.status_code == 409


class TestMovement:
    def test_move_to_unlocked_room(self, client: TestClient, game):
        client.post("/game/question")
        client.post("/game/answer", json={"option_index": _correct_index(game)})

        response = client.post("/game/move", json={"room_id": "hall"})
        assert response.status_code == 200
        assert response.json()["result"] == "hall"
        assert _event_types(response) == ["room_changed"]

    def test_move_to_locked_room(self, client: TestClient):
        response = client.post("/game/move", json={"room_id": "library"})
        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "movement"
        assert "locked" in body["detail"]

    def test_move_validation(self, client: TestClient):
        response = client.post("/game/move", json={"room_id": ""})
        assert response.status_code == 422


class TestSessionControl:
    def test_pause_resume(self, client: TestClient):
        assert client.post("/game/pause").json()["state"]["paused"] is True
        assert client.post("/game/pause").status_code == 409
        assert client.post("/game/resume").json()["state"]["paused"] is False

    def test_save_and_load(self, client: TestClient, store):
        response = client.post("/game/save")
        assert response.json()["result"] == {"slot": "default", "saved": True}
        assert "default" in store

        response = client.post("/game/load")
        assert response.json()["result"] == {"slot": "default", "loaded": True}
        assert _event_types(response) == ["game_loaded"]

    def test_slots(self, client: TestClient):
        assert client.get("/game/slots").json() == []
        client.post("/game/save")
        slots = client.get("/game/slots").json()
        assert [s["slot_id"] for s in slots] == ["default"]

    def test_load_corrupt_save(self, client: TestClient, store):
        store.save("default", {"schema_version": 42})
        response = client.post("/game/load")
        assert response.status_code == 200
        assert response.json()["result"]["loaded"] is False
        assert _event_types(response) == ["error_occurred", "game_reset"]

    def test_import_invalid_snapshot(self, client: TestClient):
        response = client.post("/game/import", json={"snapshot": {"score": 1}})
        assert response.status_code == 422
        assert response.json()["error"] == "persistence"

    def test_import_exported_snapshot(self, client: TestClient, game):
        exported = client.get("/game/export").json()
        client.post("/game/question")
        client.post("/game/skip")

        response = client.post("/game/import", json={"snapshot": exported})
        assert response.status_code == 200
        assert response.json()["state"]["score"] == 0

    def test_reset(self, client: TestClient, game):
        client.post("/game/question")
        client.post("/game/skip")
        response = client.post("/game/reset")
        assert _event_types(response) == ["game_reset"]
        assert response.json()["state"]["score"] == 0


class TestExhaustion:
    def test_no_questions_left(self, client: TestClient, game):
        game.progression.state.answered_question_ids.update(
            q.question_id for q in game.content.questions
        )
        game.progression.state.questions_answered = game.content.question_count
        response = client.post("/game/question")
        assert response.status_code == 404


class TestThreading:
    """Commands must run on the event loop thread shared with the tick task."""

    def test_commands_run_on_event_loop(self, client: TestClient, game, monkeypatch):
        seen = {}
        original = game.move_to_room

        def spy(room_id):
            try:
                asyncio.get_running_loop()
                seen["on_loop"] = True
            except RuntimeError:
                seen["on_loop"] = False
            return original(room_id)

        monkeypatch.setattr(game, "move_to_room", spy)
        client.post("/game/move", json={"room_id": "entrance"})
        assert seen["on_loop"] is True


class TestErrorResponses:
    def test_error_model_documented(self, client: TestClient):
        schema = client.get("/openapi.json").json()
        responses = schema["paths"]["/game/move"]["post"]["responses"]
        for status in ("404", "409", "422"):
            ref = responses[status]["content"]["application/json"]["schema"]["$ref"]
            assert ref.endswith("/ErrorResponse")
