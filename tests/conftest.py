"""Shared test fixtures."""

import copy
import random

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.api.game import get_game_session
from src.core.content.loader import ContentStore
from src.core.event_bus import EventBus
from src.core.game import GameSession
from src.core.persistence import MemorySnapshotStore
from src.core.rules import GameRules
from src.db.database import get_db, init_db
from src.db.models import Base
from src.main import app

TEST_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
init_db(TEST_ENGINE)
TestSession = sessionmaker(bind=TEST_ENGINE, autocommit=False, autoflush=False)


def _override_get_db():
    db = TestSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = _override_get_db


# 작은 성:
#   entrance ─ hall ─ library ─ vault
#               └── armory
ROOMS = [
    {
        "id": "entrance",
        "name": "Entrance",
        "description": "Castle gate",
        "connections": ["hall"],
        "preferred_category": "history",
        "is_start": True,
    },
    {
        "id": "hall",
        "name": "Hall",
        "description": "Great hall",
        "connections": ["entrance", "library", "armory"],
        "preferred_category": "science",
    },
    {
        "id": "library",
        "name": "Library",
        "description": "Dusty shelves",
        "connections": ["hall", "vault"],
        "preferred_category": "history",
    },
    {
        "id": "armory",
        "name": "Armory",
        "description": "Old weapons",
        "connections": ["hall"],
        "preferred_category": "science",
    },
    {
        "id": "vault",
        "name": "Vault",
        "description": "Locked treasure",
        "connections": ["library"],
        "preferred_category": "science",
    },
]


def _question(qid, category, difficulty, correct_index=0, hint=None, points=100):
    return {
        "id": qid,
        "prompt": f"Question {qid}?",
        "options": ["A", "B", "C", "D"],
        "correct_index": correct_index,
        "category": category,
        "difficulty": difficulty,
        "points": points,
        "hint": hint,
        "explanation": f"Because {qid}.",
    }


QUESTIONS = [
    _question("h_easy", "history", "easy", 0, hint="Think of kings."),
    _question("h_medium", "history", "medium", 1),
    _question("h_hard", "history", "hard", 2),
    _question("s_easy", "science", "easy", 3, hint="Think of atoms."),
    _question("s_medium", "science", "medium", 0),
    _question("s_hard", "science", "hard", 1),
]

ACHIEVEMENTS = [
    {
        "id": "first_correct",
        "name": "First Correct",
        "description": "Answer one question correctly",
        "points": 50,
        "rarity": "common",
        "trigger": {"type": "correct_answers", "value": 1},
    },
    {
        "id": "explorer",
        "name": "Explorer",
        "description": "Visit 3 rooms",
        "points": 20,
        "trigger": {"type": "rooms_visited", "value": 3},
    },
    {
        "id": "finisher",
        "name": "Finisher",
        "description": "Complete the game",
        "points": 100,
        "rarity": "epic",
        "trigger": {"type": "game_completed"},
    },
]


def make_content(rooms=None, questions=None, achievements=None) -> ContentStore:
    return ContentStore.from_dicts(
        rooms if rooms is not None else ROOMS,
        questions if questions is not None else QUESTIONS,
        achievements if achievements is not None else ACHIEVEMENTS,
    )


def answer_current(game: GameSession, correct: bool = True):
    """진행 중인 문제에 정답(또는 오답) 제출"""
    question = game.quiz.session.question
    index = question.correct_index
    if not correct:
        index = (index + 1) % len(question.options)
    return game.submit_answer(index)


@pytest.fixture()
def content() -> ContentStore:
    return make_content()


@pytest.fixture()
def content_factory():
    """rooms / questions / achievements 일부만 바꿔 ContentStore 생성"""
    return make_content


@pytest.fixture()
def raw_content() -> dict:
    """기본 콘텐츠의 원시 dict (수정해도 안전한 복사본)"""
    return {
        "rooms": copy.deepcopy(ROOMS),
        "questions": copy.deepcopy(QUESTIONS),
        "achievements": copy.deepcopy(ACHIEVEMENTS),
    }


@pytest.fixture()
def answer():
    return answer_current


@pytest.fixture()
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def rules() -> GameRules:
    return GameRules(question_time_limit=10.0)


@pytest.fixture()
def store() -> MemorySnapshotStore:
    return MemorySnapshotStore()


@pytest.fixture()
def game(content, event_bus, rules, store) -> GameSession:
    """메모리 저장소를 쓰는 GameSession (시드 고정)"""
    return GameSession(
        content,
        event_bus=event_bus,
        rules=rules,
        store=store,
        rng=random.Random(7),
    )


@pytest.fixture()
def recorded(event_bus) -> list:
    """버스에 발행된 모든 이벤트 (발행 순서)"""
    events: list = []
    event_bus.subscribe_all(events.append)
    return events


@pytest.fixture()
def client(game: GameSession) -> TestClient:
    """FastAPI TestClient wired to an in-memory game session and SQLite database."""
    app.dependency_overrides[get_game_session] = lambda: game
    yield TestClient(app)
    app.dependency_overrides.pop(get_game_session, None)


@pytest.fixture()
def db_session() -> Session:
    """Raw database session for direct DB assertions."""
    session = TestSession()
    try:
        yield session
    finally:
        session.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
        session.close()
