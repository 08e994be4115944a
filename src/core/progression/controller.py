"""진행 컨트롤러 - 방 그래프 순회, 점수/통계, 승리 판정, 스냅샷

ProgressionState를 단독 소유한다. 모든 명령은 검증을 먼저 끝낸 뒤에만 상태를 바꾼다.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from src.core.achievements.statistics import Statistics
from src.core.content.loader import ContentStore
from src.core.content.models import Room
from src.core.errors import InvalidMove, StateError
from src.core.event_bus import EventBus
from src.core.event_types import (
    GameCompleted,
    RoomChanged,
    RoomUnlocked,
    ScoreChanged,
)
from src.core.rules import DEFAULT_RULES, GameRules

from .models import AnswerOutcome, CategoryStats, ProgressionState
from .scoring import VictoryProgress, final_bonuses, victory_progress
from .snapshot import snapshot_to_state, state_to_snapshot

logger = logging.getLogger(__name__)


class ProgressionController:
    """방 이동 / 해금 / 점수 / 승리 / 영속화 담당"""

    def __init__(
        self,
        content: ContentStore,
        event_bus: EventBus,
        rules: GameRules = DEFAULT_RULES,
        state: Optional[ProgressionState] = None,
    ) -> None:
        self._content = content
        self._bus = event_bus
        self._rules = rules
        self._state = state or ProgressionState.fresh(content.start_room_id)

    @property
    def state(self) -> ProgressionState:
        return self._state

    @property
    def current_room(self) -> Room:
        room = self._content.get_room(self._state.current_room_id)
        assert room is not None
        return room

    # === 방 그래프 ===

    def move_to_room(self, room_id: str) -> Room:
        """해금된 방으로만 이동 가능. 실패 시 InvalidMove, 현재 방 유지."""
        room = self._content.get_room(room_id)
        if room is None:
            raise InvalidMove(f"Room {room_id} does not exist")
        if room_id not in self._state.unlocked_room_ids:
            raise InvalidMove(
                f"Room {room_id} is locked. Answer questions to unlock new areas."
            )

        previous = self._state.current_room_id
        first_visit = room_id not in self._state.visited_room_ids
        self._state.current_room_id = room_id
        self._state.visited_room_ids.add(room_id)

        logger.info("Moved %s → %s", previous, room_id)
        self._bus.emit(
            RoomChanged(from_room_id=previous, to_room_id=room_id, first_visit=first_visit)
        )
        return room

    def unlock_room(self, room_id: str, via_room_id: Optional[str] = None) -> bool:
        """방 해금. 이미 해금된 방은 no-op (False).

        해금된 방과 인접하지 않은 방은 StateError (시작 방에서의 도달 가능성 보존).
        """
        if not self._content.has_room(room_id):
            raise StateError(f"Room {room_id} does not exist")
        if room_id in self._state.unlocked_room_ids:
            return False
        if not any(
            n in self._state.unlocked_room_ids for n in self._content.neighbors(room_id)
        ):
            raise StateError(f"Room {room_id} is not adjacent to any unlocked room")

        self._state.unlocked_room_ids.add(room_id)
        logger.info("Unlocked room: %s", room_id)
        self._bus.emit(RoomUnlocked(room_id=room_id, via_room_id=via_room_id))
        return True

    def unlock_neighbors(self, room_id: str) -> list[str]:
        """정답 처리: 문제를 낸 방의 이웃을 연결 순서대로 해금"""
        if room_id not in self._state.unlocked_room_ids:
            raise StateError(f"Room {room_id} is not unlocked")
        return [
            neighbor
            for neighbor in self._content.neighbors(room_id)
            if self.unlock_room(neighbor, via_room_id=room_id)
        ]

    def available_rooms(self) -> list[str]:
        """현재 방에서 바로 이동 가능한 (해금된) 이웃"""
        return [
            n
            for n in self._content.neighbors(self._state.current_room_id)
            if n in self._state.unlocked_room_ids
        ]

    # === 점수 / 통계 ===

    def record_outcome(self, outcome: AnswerOutcome) -> None:
        """문제 세션 결과를 누적 통계에 반영 (점수는 apply_score_delta가 따로 처리)"""
        state = self._state
        if outcome.question_id in state.answered_question_ids:
            raise StateError(f"Question {outcome.question_id} already answered")

        state.answered_question_ids.add(outcome.question_id)
        state.questions_answered += 1

        category = state.category_stats.setdefault(outcome.category, CategoryStats())
        category.answered += 1

        if outcome.hint_used:
            state.hints_used += 1

        if outcome.skipped:
            state.questions_skipped += 1
            state.current_streak = 0
        elif outcome.correct:
            state.correct_answers += 1
            category.correct += 1
            if state.incorrect_streak:
                state.best_comeback = max(state.best_comeback, state.incorrect_streak)
            state.incorrect_streak = 0
            state.current_streak += 1
            state.max_streak = max(state.max_streak, state.current_streak)
            state.correct_answer_times.append(round(outcome.time_taken, 3))
        else:
            state.current_streak = 0
            state.incorrect_streak += 1
            if outcome.timed_out:
                state.questions_timed_out += 1

    def apply_score_delta(self, delta: int, reason: str = "") -> int:
        """점수 가감. 반환: 실제 적용된 변화량.

        음수 점수 허용 정책(allow_negative_score=False)이면 0에서 고정.
        """
        new_score = self._state.score + delta
        if not self._rules.allow_negative_score:
            new_score = max(0, new_score)
        applied = new_score - self._state.score
        self._state.score = new_score

        logger.debug("Score %+d (%s) → %d", applied, reason or "-", new_score)
        self._bus.emit(ScoreChanged(delta=applied, score=new_score, reason=reason))
        return applied

    def add_play_time(self, seconds: float) -> None:
        if seconds > 0:
            self._state.elapsed_seconds += seconds

    def unlock_achievement(self, achievement_id: str) -> bool:
        """해금 집합에 추가 (증가만). 이미 있으면 False."""
        if achievement_id in self._state.unlocked_achievement_ids:
            return False
        self._state.unlocked_achievement_ids.append(achievement_id)
        return True

    def statistics(self) -> Statistics:
        state = self._state
        return Statistics(
            score=state.score,
            rooms_visited=len(state.visited_room_ids),
            rooms_total=self._content.room_count,
            visited_room_ids=frozenset(state.visited_room_ids),
            questions_answered=state.questions_answered,
            questions_total=self._content.question_count,
            correct_answers=state.correct_answers,
            current_streak=state.current_streak,
            max_streak=state.max_streak,
            incorrect_streak=state.incorrect_streak,
            best_comeback=state.best_comeback,
            correct_answer_times=tuple(state.correct_answer_times),
            hints_used=state.hints_used,
            questions_skipped=state.questions_skipped,
            questions_timed_out=state.questions_timed_out,
            elapsed_seconds=state.elapsed_seconds,
            completed=state.completed,
        )

    # === 승리 ===

    def victory_progress(self) -> VictoryProgress:
        return victory_progress(self.statistics(), self._rules)

    def check_victory(self) -> Optional[GameCompleted]:
        """승리 조건 최초 충족 시 1회만 완료 처리 + GameCompleted 발행"""
        if self._state.completed:
            return None

        stats = self.statistics()
        progress = victory_progress(stats, self._rules)
        if not progress.satisfied:
            return None

        self._state.completed = True
        self._state.final_bonuses = final_bonuses(stats, self._rules)

        event = GameCompleted(
            score=self._state.score,
            final_score=self._state.final_score,
            bonuses=dict(self._state.final_bonuses),
            rooms_visited=stats.rooms_visited,
            rooms_total=stats.rooms_total,
            questions_answered=stats.questions_answered,
            questions_total=stats.questions_total,
            correct_answers=stats.correct_answers,
            accuracy=stats.accuracy,
            elapsed_seconds=stats.elapsed_seconds,
            is_perfect_game=stats.rooms_visited == stats.rooms_total
            and stats.correct_answers == stats.questions_answered,
            is_speed_run=stats.elapsed_seconds < self._rules.speed_run_seconds,
        )
        logger.info(
            "Game completed: score=%d final=%d bonuses=%s",
            event.score,
            event.final_score,
            event.bonuses,
        )
        self._bus.emit(event)
        return event

    # === 영속화 ===

    def serialize(self) -> dict[str, Any]:
        self._state.saved_at = datetime.now(timezone.utc).isoformat()
        return state_to_snapshot(self._state)

    def restore(self, snapshot: Any) -> ProgressionState:
        """스냅샷 복원. 실패 시 PersistenceError, 현재 상태는 그대로."""
        state = snapshot_to_state(snapshot, self._content)
        self._state = state
        logger.info(
            "Progression restored: room=%s score=%d answered=%d",
            state.current_room_id,
            state.score,
            state.questions_answered,
        )
        return state

    def reset(self) -> ProgressionState:
        self._state = ProgressionState.fresh(self._content.start_room_id)
        logger.info("Progression reset at %s", self._content.start_room_id)
        return self._state
