"""ProgressionState 스냅샷 직렬화 / 복원 / 마이그레이션

- v2: 현재 형식 (snake_case, 누적 통계 포함)
- v1: 브라우저 저장 형식 (currentRoomId, visitedRooms, ...) → v2로 마이그레이션
그 외 버전, 필수 필드 누락, 콘텐츠에 없는 id는 PersistenceError.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any

from src.core.content.loader import ContentStore
from src.core.errors import PersistenceError

from .models import SCHEMA_VERSION, CategoryStats, ProgressionState

logger = logging.getLogger(__name__)

SUPPORTED_VERSIONS = (1, 2)

REQUIRED_FIELDS_V2 = (
    "current_room_id",
    "unlocked_room_ids",
    "visited_room_ids",
    "answered_question_ids",
    "score",
    "questions_answered",
    "correct_answers",
    "completed",
    "unlocked_achievement_ids",
)

REQUIRED_FIELDS_V1 = ("currentRoomId", "score", "visitedRooms", "unlockedRooms")


def state_to_snapshot(state: ProgressionState) -> dict[str, Any]:
    """JSON 직렬화 가능한 dict. 집합은 정렬된 리스트로."""
    return {
        "schema_version": SCHEMA_VERSION,
        "current_room_id": state.current_room_id,
        "unlocked_room_ids": sorted(state.unlocked_room_ids),
        "visited_room_ids": sorted(state.visited_room_ids),
        "answered_question_ids": sorted(state.answered_question_ids),
        "score": state.score,
        "questions_answered": state.questions_answered,
        "correct_answers": state.correct_answers,
        "elapsed_seconds": state.elapsed_seconds,
        "completed": state.completed,
        "unlocked_achievement_ids": list(state.unlocked_achievement_ids),
        "stats": {
            "current_streak": state.current_streak,
            "max_streak": state.max_streak,
            "incorrect_streak": state.incorrect_streak,
            "best_comeback": state.best_comeback,
            "correct_answer_times": list(state.correct_answer_times),
            "hints_used": state.hints_used,
            "questions_skipped": state.questions_skipped,
            "questions_timed_out": state.questions_timed_out,
            "category_stats": {
                category: {"answered": cs.answered, "correct": cs.correct}
                for category, cs in state.category_stats.items()
            },
        },
        "final_bonuses": dict(state.final_bonuses),
        "player_name": state.player_name,
        "saved_at": state.saved_at,
    }


def migrate_v1(data: dict[str, Any]) -> dict[str, Any]:
    """브라우저 저장 형식 → v2.

    v1은 정답일 때만 answeredQuestions에 추가했으므로
    응답 수 = 정답 수로 복원한다.
    """
    missing = [f for f in REQUIRED_FIELDS_V1 if f not in data]
    if missing:
        raise PersistenceError(f"Snapshot v1 missing fields: {', '.join(missing)}")

    try:
        answered = [str(q) for q in data.get("answeredQuestions") or []]
        unlocked = [str(r) for r in data["unlockedRooms"]]
        visited = [str(r) for r in data["visitedRooms"]]
    except TypeError as e:
        raise PersistenceError(f"Malformed snapshot v1 field: {e}") from e

    start_ms = data.get("startTime")
    save_ms = data.get("saveTime")
    elapsed = 0.0
    if isinstance(start_ms, (int, float)) and isinstance(save_ms, (int, float)):
        elapsed = max(0.0, (save_ms - start_ms) / 1000)

    logger.info("Migrating snapshot v1 → v%d", SCHEMA_VERSION)
    return {
        "schema_version": SCHEMA_VERSION,
        "current_room_id": data["currentRoomId"],
        "unlocked_room_ids": unlocked,
        "visited_room_ids": visited,
        "answered_question_ids": answered,
        "score": data["score"],
        "questions_answered": len(answered),
        "correct_answers": len(answered),
        "elapsed_seconds": elapsed,
        "completed": bool(data.get("gameCompleted", False)),
        "unlocked_achievement_ids": [],
        "player_name": data.get("playerName") or "",
    }


def _detect_version(data: dict[str, Any]) -> int:
    if "schema_version" in data:
        version = data["schema_version"]
        if not isinstance(version, int) or isinstance(version, bool):
            raise PersistenceError(f"Invalid schema version: {version!r}")
        return version
    if "currentRoomId" in data:
        return 1
    raise PersistenceError("Snapshot has no schema version")


def _parse_state(data: dict[str, Any]) -> ProgressionState:
    missing = [f for f in REQUIRED_FIELDS_V2 if f not in data]
    if missing:
        raise PersistenceError(f"Snapshot missing fields: {', '.join(missing)}")

    try:
        stats = data.get("stats") or {}
        category_stats = {
            str(category): CategoryStats(
                answered=int(raw["answered"]), correct=int(raw["correct"])
            )
            for category, raw in (stats.get("category_stats") or {}).items()
        }
        return ProgressionState(
            current_room_id=str(data["current_room_id"]),
            unlocked_room_ids={str(r) for r in data["unlocked_room_ids"]},
            visited_room_ids={str(r) for r in data["visited_room_ids"]},
            answered_question_ids={str(q) for q in data["answered_question_ids"]},
            score=int(data["score"]),
            questions_answered=int(data["questions_answered"]),
            correct_answers=int(data["correct_answers"]),
            elapsed_seconds=float(data.get("elapsed_seconds", 0.0)),
            completed=bool(data["completed"]),
            unlocked_achievement_ids=[str(a) for a in data["unlocked_achievement_ids"]],
            current_streak=int(stats.get("current_streak", 0)),
            max_streak=int(stats.get("max_streak", 0)),
            incorrect_streak=int(stats.get("incorrect_streak", 0)),
            best_comeback=int(stats.get("best_comeback", 0)),
            correct_answer_times=[float(t) for t in stats.get("correct_answer_times", [])],
            hints_used=int(stats.get("hints_used", 0)),
            questions_skipped=int(stats.get("questions_skipped", 0)),
            questions_timed_out=int(stats.get("questions_timed_out", 0)),
            category_stats=category_stats,
            final_bonuses={
                str(k): int(v) for k, v in (data.get("final_bonuses") or {}).items()
            },
            player_name=str(data.get("player_name") or ""),
            saved_at=data.get("saved_at"),
        )
    except (TypeError, ValueError, KeyError, AttributeError) as e:
        raise PersistenceError(f"Malformed snapshot field: {e}") from e


def _reachable_unlocked(state: ProgressionState, content: ContentStore) -> set[str]:
    start = content.start_room_id
    if start not in state.unlocked_room_ids:
        return set()
    seen = {start}
    queue = deque([start])
    while queue:
        for neighbor in content.neighbors(queue.popleft()):
            if neighbor in state.unlocked_room_ids and neighbor not in seen:
                seen.add(neighbor)
                queue.append(neighbor)
    return seen


def _check_against_content(state: ProgressionState, content: ContentStore) -> None:
    problems = state.invariant_violations()

    unknown_rooms = sorted(r for r in state.unlocked_room_ids if not content.has_room(r))
    if unknown_rooms:
        problems.append(f"unknown rooms: {unknown_rooms}")
    unknown_questions = sorted(
        q for q in state.answered_question_ids if content.get_question(q) is None
    )
    if unknown_questions:
        problems.append(f"unknown questions: {unknown_questions}")
    unknown_achievements = [
        a for a in state.unlocked_achievement_ids if content.get_achievement(a) is None
    ]
    if unknown_achievements:
        problems.append(f"unknown achievements: {unknown_achievements}")

    if not unknown_rooms:
        detached = state.unlocked_room_ids - _reachable_unlocked(state, content)
        if detached:
            problems.append(f"unlocked rooms unreachable from start: {sorted(detached)}")

    if problems:
        raise PersistenceError("Inconsistent snapshot: " + "; ".join(problems))


def snapshot_to_state(data: Any, content: ContentStore) -> ProgressionState:
    """스냅샷 검증 + 복원. 실패 시 PersistenceError (부분 적용 없음)."""
    if not isinstance(data, dict):
        raise PersistenceError("Snapshot must be an object")

    version = _detect_version(data)
    if version not in SUPPORTED_VERSIONS:
        raise PersistenceError(f"Unsupported schema version: {version}")
    if version == 1:
        data = migrate_v1(data)

    state = _parse_state(data)
    _check_against_content(state, content)
    return state
