"""퀴즈 엔진 - 문제 선택, 타이머 상태 기계, 응답 채점

정답/오답/시간초과/건너뛰기 결과는 모두 _finalize() 한 경로로 반영된다:
    1. ProgressionController.record_outcome (누적 통계)
    2. 적응형 난이도 갱신
    3. QuestionAnswered 발행
    4. 정답이면 문제를 낸 방의 이웃 해금 (RoomUnlocked)
    5. 점수 반영 (ScoreChanged)
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from src.core.content.loader import ContentStore
from src.core.content.models import Difficulty
from src.core.errors import InvalidTimerTransition, StateError
from src.core.event_bus import EventBus
from src.core.event_types import (
    HintUsed,
    QuestionAnswered,
    QuestionPresented,
    TimerTick,
)
from src.core.progression.controller import ProgressionController
from src.core.progression.models import AnswerOutcome
from src.core.progression.scoring import time_bonus
from src.core.rules import DEFAULT_RULES, GameRules

from .difficulty import DifficultyTracker
from .models import QuizSession
from .selection import select_question
from .timer import QuestionTimer, TimerState

logger = logging.getLogger(__name__)

NO_HINT_MESSAGE = "No hint available for this question."


class QuizEngine:
    """문제 세션 관리 (한 번에 하나의 활성 세션)"""

    def __init__(
        self,
        content: ContentStore,
        progression: ProgressionController,
        event_bus: EventBus,
        rules: GameRules = DEFAULT_RULES,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._content = content
        self._progression = progression
        self._bus = event_bus
        self._rules = rules
        self._rng = rng or random.Random()
        self._session: Optional[QuizSession] = None
        self._tracker = DifficultyTracker(
            tier=Difficulty(rules.start_difficulty),
            raise_after=rules.raise_after_correct,
            lower_after=rules.lower_after_incorrect,
        )

    @property
    def session(self) -> Optional[QuizSession]:
        return self._session

    @property
    def difficulty(self) -> Difficulty:
        return self._tracker.tier

    @property
    def tracker(self) -> DifficultyTracker:
        return self._tracker

    @property
    def has_active_session(self) -> bool:
        return self._session is not None and self._session.is_active

    # === 명령 ===

    def request_question(self, room_id: Optional[str] = None) -> QuizSession:
        """해금된 방에서 새 문제 세션 시작 (Idle → Running)"""
        if self.has_active_session:
            assert self._session is not None
            raise InvalidTimerTransition(
                self._session.state.value, TimerState.RUNNING.value
            )

        state = self._progression.state
        room_id = room_id or state.current_room_id
        room = self._content.get_room(room_id)
        if room is None:
            raise StateError(f"Room {room_id} does not exist")
        if room_id not in state.unlocked_room_ids:
            raise StateError(f"Room {room_id} is locked")

        question = select_question(
            self._content.questions,
            state.answered_question_ids,
            room.preferred_category,
            self._tracker.tier,
            self._rng,
        )

        timer = QuestionTimer(self._rules.question_time_limit)
        session = QuizSession(
            question=question,
            room_id=room_id,
            timer=timer,
            difficulty=self._tracker.tier,
            consecutive_correct=self._tracker.consecutive_correct,
            consecutive_incorrect=self._tracker.consecutive_incorrect,
        )
        timer.start()
        self._session = session

        logger.info(
            "Presenting question %s in %s (category=%s, tier=%s)",
            question.question_id,
            room_id,
            question.category,
            question.difficulty.value,
        )
        self._bus.emit(
            QuestionPresented(
                question_id=question.question_id,
                room_id=room_id,
                prompt=question.prompt,
                options=question.options,
                category=question.category,
                difficulty=question.difficulty.value,
                points=question.points,
                time_limit=timer.time_limit,
                has_hint=question.hint is not None,
            )
        )
        return session

    def submit_answer(self, option_index: int) -> AnswerOutcome:
        """Running/Paused에서만 유효. Answered로 전이 후 채점."""
        session = self._require_active(TimerState.ANSWERED)
        question = session.question
        if not 0 <= option_index < len(question.options):
            raise StateError(
                f"Option index {option_index} out of range "
                f"(0..{len(question.options) - 1})"
            )

        session.timer.finish()
        correct = question.is_correct(option_index)
        bonus = (
            time_bonus(
                session.timer.fraction_remaining,
                self._rules.max_time_bonus,
                hint_used=session.hint_used,
            )
            if correct
            else 0
        )
        outcome = AnswerOutcome(
            question_id=question.question_id,
            room_id=session.room_id,
            category=question.category,
            correct=correct,
            points=question.points + bonus if correct else 0,
            time_taken=session.timer.elapsed,
            time_bonus=bonus,
            hint_used=session.hint_used,
            selected_index=option_index,
        )
        logger.info(
            "Answer %s for %s: %+d points",
            "correct" if correct else "incorrect",
            question.question_id,
            outcome.points,
        )
        return self._finalize(session, outcome)

    def skip(self) -> AnswerOutcome:
        """고정 감점 + 응답 처리. 방은 해금하지 않는다."""
        session = self._require_active(TimerState.ANSWERED)
        session.timer.finish()
        outcome = AnswerOutcome(
            question_id=session.question.question_id,
            room_id=session.room_id,
            category=session.question.category,
            correct=False,
            points=-self._rules.skip_penalty,
            time_taken=session.timer.elapsed,
            skipped=True,
            hint_used=session.hint_used,
        )
        logger.info("Question skipped: %s", session.question.question_id)
        return self._finalize(session, outcome)

    def request_hint(self) -> str:
        """세션당 1회. 힌트를 쓰면 이 문제의 시간 보너스는 0."""
        session = self._require_active(TimerState.ANSWERED)
        if session.hint_used:
            raise StateError("Hint already used for this question")

        hint = session.question.hint
        if hint is None:
            return NO_HINT_MESSAGE

        session.hint_used = True
        logger.info("Hint used for %s", session.question.question_id)
        self._bus.emit(HintUsed(question_id=session.question.question_id, hint=hint))
        return hint

    def pause(self) -> None:
        session = self._require_active(TimerState.PAUSED)
        session.timer.pause()
        logger.debug("Timer paused (%.2fs left)", session.timer.remaining)

    def resume(self) -> None:
        session = self._require_active(TimerState.RUNNING)
        session.timer.resume()
        logger.debug("Timer resumed (%.2fs left)", session.timer.remaining)

    def tick(self, dt: float) -> Optional[AnswerOutcome]:
        """타이머 진행. 만료되면 시간초과 결과를 반환."""
        session = self._session
        if session is None or session.state != TimerState.RUNNING:
            return None

        expired = session.timer.tick(dt)
        self._bus.emit(
            TimerTick(
                question_id=session.question.question_id,
                remaining=round(session.timer.remaining, 3),
                time_limit=session.timer.time_limit,
                state=session.timer.state.value,
            )
        )
        if not expired:
            return None

        logger.info("Time up for question: %s", session.question.question_id)
        outcome = AnswerOutcome(
            question_id=session.question.question_id,
            room_id=session.room_id,
            category=session.question.category,
            correct=False,
            points=0,
            time_taken=session.timer.time_limit,
            timed_out=True,
            hint_used=session.hint_used,
        )
        return self._finalize(session, outcome)

    def reset(self) -> None:
        """세션 폐기 + 난이도 초기화 (새 게임 / 로드)"""
        self._session = None
        self._tracker.reset(Difficulty(self._rules.start_difficulty))

    # === 내부 ===

    def _require_active(self, target: TimerState) -> QuizSession:
        session = self._session
        if session is None:
            raise InvalidTimerTransition(TimerState.IDLE.value, target.value)
        if not session.is_active:
            raise InvalidTimerTransition(session.state.value, target.value)
        if session.question.question_id in self._progression.state.answered_question_ids:
            raise StateError(f"Question {session.question.question_id} already answered")
        return session

    def _finalize(self, session: QuizSession, outcome: AnswerOutcome) -> AnswerOutcome:
        session.outcome = outcome
        self._progression.record_outcome(outcome)

        if outcome.skipped:
            self._tracker.record_skip()
        else:
            self._tracker.record(outcome.correct)

        question = session.question
        self._bus.emit(
            QuestionAnswered(
                question_id=outcome.question_id,
                room_id=outcome.room_id,
                correct=outcome.correct,
                points=outcome.points,
                time_taken=round(outcome.time_taken, 3),
                time_bonus=outcome.time_bonus,
                skipped=outcome.skipped,
                timed_out=outcome.timed_out,
                hint_used=outcome.hint_used,
                selected_index=outcome.selected_index,
                correct_index=question.correct_index,
                explanation=question.explanation or "",
            )
        )

        if outcome.correct:
            self._progression.unlock_neighbors(outcome.room_id)

        if outcome.points:
            reason = "skip_penalty" if outcome.skipped else "correct_answer"
            self._progression.apply_score_delta(outcome.points, reason=reason)

        return outcome
