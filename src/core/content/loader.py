"""콘텐츠 저장소 - JSON 로드 + 구조 검증

rooms.json / questions.json / achievements.json 을 읽어 불변 모델로 변환한다.
위반 사항은 모두 모은 뒤 DataError 하나로 보고한다 (부분 데이터로 시작 금지).
"""

from __future__ import annotations

import json
import logging
from collections import deque
from pathlib import Path
from typing import Any, Iterable, Optional

from src.core.achievements.rules import KNOWN_TRIGGER_TYPES
from src.core.errors import DataError

from .models import (
    Achievement,
    AchievementTrigger,
    Difficulty,
    Question,
    Rarity,
    Room,
)

logger = logging.getLogger(__name__)

ROOMS_FILE = "rooms.json"
QUESTIONS_FILE = "questions.json"
ACHIEVEMENTS_FILE = "achievements.json"

MIN_OPTIONS = 2


def _unwrap(raw: Any, key: str) -> list[dict]:
    """{"rooms": [...]} 형태와 bare 배열 둘 다 허용"""
    if isinstance(raw, dict):
        raw = raw.get(key, [])
    if not isinstance(raw, list):
        raise DataError([f"{key} data must be an array"])
    return raw


def _parse_room(raw: dict, violations: list[str]) -> Optional[Room]:
    if not isinstance(raw, dict):
        violations.append(f"Room entry must be an object: {raw!r}")
        return None
    room_id = raw.get("id")
    if not room_id:
        violations.append("Room missing required field: id")
        return None
    for required in ("name", "description", "connections"):
        if required not in raw:
            violations.append(f"Room {room_id} missing required field: {required}")
    connections = raw.get("connections", [])
    if not isinstance(connections, list):
        violations.append(f"Room {room_id} connections must be an array")
        connections = []
    return Room(
        room_id=str(room_id),
        name=str(raw.get("name", "")),
        description=str(raw.get("description", "")),
        connections=tuple(str(c) for c in connections),
        preferred_category=raw.get("preferred_category"),
        is_start=bool(raw.get("is_start", False)),
    )


def _parse_question(raw: dict, violations: list[str]) -> Optional[Question]:
    if not isinstance(raw, dict):
        violations.append(f"Question entry must be an object: {raw!r}")
        return None
    question_id = raw.get("id")
    if not question_id:
        violations.append("Question missing required field: id")
        return None

    missing = [
        f
        for f in ("prompt", "options", "correct_index", "category", "points")
        if f not in raw
    ]
    if missing:
        violations.append(
            f"Question {question_id} missing required fields: {', '.join(missing)}"
        )
        return None

    options = raw["options"]
    if not isinstance(options, list) or len(options) < MIN_OPTIONS:
        violations.append(
            f"Question {question_id} must have at least {MIN_OPTIONS} options"
        )
        return None

    correct_index = raw["correct_index"]
    if (
        not isinstance(correct_index, int)
        or isinstance(correct_index, bool)
        or not 0 <= correct_index < len(options)
    ):
        violations.append(
            f"Question {question_id} has invalid correct_index: {correct_index!r}"
        )
        return None

    points = raw["points"]
    if not isinstance(points, int) or isinstance(points, bool) or points <= 0:
        violations.append(f"Question {question_id} must have positive points value")
        return None

    try:
        difficulty = Difficulty(raw.get("difficulty", Difficulty.MEDIUM.value))
    except ValueError:
        violations.append(
            f"Question {question_id} has unknown difficulty: {raw.get('difficulty')!r}"
        )
        return None

    return Question(
        question_id=str(question_id),
        prompt=str(raw["prompt"]),
        options=tuple(str(o) for o in options),
        correct_index=correct_index,
        category=str(raw["category"]),
        difficulty=difficulty,
        points=points,
        hint=raw.get("hint") or None,
        explanation=raw.get("explanation") or None,
    )


def _parse_achievement(raw: dict, violations: list[str]) -> Optional[Achievement]:
    if not isinstance(raw, dict):
        violations.append(f"Achievement entry must be an object: {raw!r}")
        return None
    achievement_id = raw.get("id")
    if not achievement_id:
        violations.append("Achievement missing required field: id")
        return None

    trigger_raw = raw.get("trigger")
    if not isinstance(trigger_raw, dict) or not trigger_raw.get("type"):
        violations.append(f"Achievement {achievement_id} trigger missing type")
        return None
    if trigger_raw["type"] not in KNOWN_TRIGGER_TYPES:
        violations.append(
            f"Achievement {achievement_id} has unknown trigger type: "
            f"{trigger_raw['type']!r}"
        )
        return None

    try:
        rarity = Rarity(raw.get("rarity", Rarity.COMMON.value))
    except ValueError:
        violations.append(
            f"Achievement {achievement_id} has unknown rarity: {raw.get('rarity')!r}"
        )
        return None

    points = raw.get("points", 0)
    if not isinstance(points, int) or points < 0:
        violations.append(f"Achievement {achievement_id} points must be >= 0")
        return None

    params = {k: v for k, v in trigger_raw.items() if k not in ("type", "value")}
    return Achievement(
        achievement_id=str(achievement_id),
        name=str(raw.get("name", achievement_id)),
        description=str(raw.get("description", "")),
        points=points,
        trigger=AchievementTrigger(
            type=trigger_raw["type"],
            value=trigger_raw.get("value"),
            params=params,
        ),
        rarity=rarity,
        category=str(raw.get("category", "general")),
        icon=str(raw.get("icon", "")),
    )


def _duplicates(ids: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    dups: list[str] = []
    for item_id in ids:
        if item_id in seen and item_id not in dups:
            dups.append(item_id)
        seen.add(item_id)
    return dups


class ContentStore:
    """
    읽기 전용 콘텐츠 조회 서비스.
    방 그래프는 무방향: A가 B를 connections에 나열하면 B의 이웃에도 A가 포함된다.
    """

    def __init__(
        self,
        rooms: list[Room],
        questions: list[Question],
        achievements: list[Achievement],
    ) -> None:
        violations = self._validate(rooms, questions, achievements)
        if violations:
            for v in violations:
                logger.error("Content violation: %s", v)
            raise DataError(violations)

        self._rooms: dict[str, Room] = {r.room_id: r for r in rooms}
        self._questions: dict[str, Question] = {q.question_id: q for q in questions}
        self._achievements: list[Achievement] = list(achievements)
        self._start_room_id = next(r.room_id for r in rooms if r.is_start)
        self._adjacency = self._build_adjacency(rooms)

        unreachable = set(self._rooms) - self._reachable_from(self._start_room_id)
        if unreachable:
            logger.warning("Rooms unreachable from start: %s", sorted(unreachable))

        used = {r.preferred_category for r in rooms if r.preferred_category}
        known = {q.category for q in questions}
        for category in sorted(used - known):
            logger.warning("Room references unused question category: %s", category)

    # === 생성 ===

    @classmethod
    def from_dicts(
        cls,
        rooms: Any,
        questions: Any,
        achievements: Any,
    ) -> "ContentStore":
        """원시 JSON 구조에서 생성. 파싱 위반도 DataError로 모은다."""
        violations: list[str] = []
        parsed_rooms = [
            r
            for r in (_parse_room(raw, violations) for raw in _unwrap(rooms, "rooms"))
            if r is not None
        ]
        parsed_questions = [
            q
            for q in (
                _parse_question(raw, violations)
                for raw in _unwrap(questions, "questions")
            )
            if q is not None
        ]
        parsed_achievements = [
            a
            for a in (
                _parse_achievement(raw, violations)
                for raw in _unwrap(achievements, "achievements")
            )
            if a is not None
        ]
        if violations:
            raise DataError(violations)
        return cls(parsed_rooms, parsed_questions, parsed_achievements)

    @classmethod
    def load_from_dir(cls, path: str | Path) -> "ContentStore":
        """content 디렉터리의 세 JSON 파일 로드"""
        path = Path(path)
        raw: dict[str, Any] = {}
        for name in (ROOMS_FILE, QUESTIONS_FILE, ACHIEVEMENTS_FILE):
            file_path = path / name
            try:
                with file_path.open("r", encoding="utf-8") as f:
                    raw[name] = json.load(f)
            except FileNotFoundError as e:
                raise DataError([f"Missing content file: {file_path}"]) from e
            except json.JSONDecodeError as e:
                raise DataError([f"Malformed JSON in {file_path}: {e}"]) from e

        store = cls.from_dicts(
            raw[ROOMS_FILE], raw[QUESTIONS_FILE], raw[ACHIEVEMENTS_FILE]
        )
        logger.info(
            "Loaded content from %s: %d rooms, %d questions, %d achievements",
            path,
            store.room_count,
            store.question_count,
            len(store.achievements),
        )
        return store

    # === 검증 ===

    @staticmethod
    def _validate(
        rooms: list[Room],
        questions: list[Question],
        achievements: list[Achievement],
    ) -> list[str]:
        violations: list[str] = []

        if not rooms:
            violations.append("At least one room must be defined")
        if not questions:
            violations.append("At least one question must be defined")

        for dup in _duplicates(r.room_id for r in rooms):
            violations.append(f"Duplicate room ID: {dup}")
        for dup in _duplicates(q.question_id for q in questions):
            violations.append(f"Duplicate question ID: {dup}")
        for dup in _duplicates(a.achievement_id for a in achievements):
            violations.append(f"Duplicate achievement ID: {dup}")

        starts = [r.room_id for r in rooms if r.is_start]
        if rooms and len(starts) != 1:
            violations.append(
                f"Exactly one start room required, found {len(starts)}: {starts}"
            )

        room_ids = {r.room_id for r in rooms}
        for room in rooms:
            for connection in room.connections:
                if connection == room.room_id:
                    violations.append(f"Room {room.room_id} connects to itself")
                elif connection not in room_ids:
                    violations.append(
                        f"Room {room.room_id} references non-existent room: "
                        f"{connection}"
                    )

        for q in questions:
            if not 0 <= q.correct_index < len(q.options):
                violations.append(
                    f"Question {q.question_id} has invalid correct_index: "
                    f"{q.correct_index}"
                )

        for a in achievements:
            if a.trigger.type == "specific_room_visited" and (
                a.trigger.value not in room_ids
            ):
                violations.append(
                    f"Achievement {a.achievement_id} references non-existent room: "
                    f"{a.trigger.value}"
                )

        return violations

    @staticmethod
    def _build_adjacency(rooms: list[Room]) -> dict[str, tuple[str, ...]]:
        adjacency: dict[str, list[str]] = {r.room_id: list(r.connections) for r in rooms}
        for room in rooms:
            for connection in room.connections:
                back = adjacency[connection]
                if room.room_id not in back:
                    back.append(room.room_id)
        return {room_id: tuple(ns) for room_id, ns in adjacency.items()}

    def _reachable_from(self, room_id: str) -> set[str]:
        seen = {room_id}
        queue = deque([room_id])
        while queue:
            for neighbor in self._adjacency[queue.popleft()]:
                if neighbor not in seen:
                    seen.add(neighbor)
                    queue.append(neighbor)
        return seen

    # === 조회 ===

    @property
    def start_room_id(self) -> str:
        return self._start_room_id

    @property
    def rooms(self) -> list[Room]:
        return list(self._rooms.values())

    @property
    def questions(self) -> list[Question]:
        return list(self._questions.values())

    @property
    def achievements(self) -> list[Achievement]:
        """선언 순서 보존"""
        return list(self._achievements)

    @property
    def room_count(self) -> int:
        return len(self._rooms)

    @property
    def question_count(self) -> int:
        return len(self._questions)

    def get_room(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def get_question(self, question_id: str) -> Optional[Question]:
        return self._questions.get(question_id)

    def get_achievement(self, achievement_id: str) -> Optional[Achievement]:
        for achievement in self._achievements:
            if achievement.achievement_id == achievement_id:
                return achievement
        return None

    def has_room(self, room_id: str) -> bool:
        return room_id in self._rooms

    def neighbors(self, room_id: str) -> tuple[str, ...]:
        """무방향 인접 방. 자신의 connections 순서 먼저, 역방향 링크는 그 뒤."""
        return self._adjacency.get(room_id, ())

    def are_connected(self, a: str, b: str) -> bool:
        return b in self._adjacency.get(a, ())

    def categories(self) -> list[str]:
        seen: dict[str, None] = {}
        for q in self._questions.values():
            seen.setdefault(q.category, None)
        return list(seen)

    def questions_by_category(self, category: str) -> list[Question]:
        return [q for q in self._questions.values() if q.category == category]
