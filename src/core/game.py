"""GameSession - 명령 표면 + 명령 후 파이프라인 + 오류 경계

하나의 게임 컨텍스트(콘텐츠, 이벤트 버스, 진행, 퀴즈, 업적, 저장소)를 묶는다.
모듈 전역 상태 없이 HTTP 계층에는 의존성 주입으로 전달된다.

명령 하나가 발행하는 이벤트 순서 (고정):
    1. 주 이벤트 (RoomChanged / QuestionAnswered)
       → 새로 해금된 이웃마다 RoomUnlocked → 응답 점수 ScoreChanged
    2. 업적 판정: 새 업적마다 AchievementUnlocked → ScoreChanged
    3. 승리 판정: GameCompleted → 완료 기준 업적 판정 (2와 동일 순서)
    4. 완료 시 즉시 저장: GameSaved

GameError는 명령 경계에서 ErrorOccurred로 보고되고 호출자에게 다시 던져진다.
검증은 항상 변경보다 먼저 일어나므로 실패한 명령은 상태를 바꾸지 않는다.
"""

from __future__ import annotations

import logging
import random
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from src.core.achievements.engine import AchievementEngine
from src.core.autosave import AutosaveScheduler
from src.core.content.loader import ContentStore
from src.core.content.models import Room
from src.core.errors import GameError, PersistenceError, StateError
from src.core.event_bus import EventBus
from src.core.event_types import (
    AchievementUnlocked,
    ErrorOccurred,
    GameLoaded,
    GameReset,
    GameSaved,
)
from src.core.persistence import SnapshotStore
from src.core.progression.controller import ProgressionController
from src.core.progression.models import AnswerOutcome
from src.core.progression.scoring import (
    format_duration,
    performance_grade,
    performance_score,
)
from src.core.quiz.engine import QuizEngine
from src.core.quiz.models import QuizSession
from src.core.rules import DEFAULT_RULES, GameRules

logger = logging.getLogger(__name__)

DEFAULT_SLOT = "default"


class GameSession:
    """단일 플레이어 게임 컨텍스트"""

    def __init__(
        self,
        content: ContentStore,
        event_bus: Optional[EventBus] = None,
        rules: GameRules = DEFAULT_RULES,
        store: Optional[SnapshotStore] = None,
        slot: str = DEFAULT_SLOT,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.content = content
        self.bus = event_bus or EventBus()
        self.rules = rules
        self.store = store
        self.slot = slot

        self.progression = ProgressionController(content, self.bus, rules)
        self.quiz = QuizEngine(content, self.progression, self.bus, rules, rng)
        self.achievements = AchievementEngine(content.achievements)
        self.autosave = AutosaveScheduler(rules.autosave_interval, self._autosave)
        self.autosave.enabled = store is not None

        self._paused = False

    @property
    def paused(self) -> bool:
        return self._paused

    # === 명령 표면 ===

    def move_to_room(self, room_id: str) -> Room:
        with self._command("move_to_room"):
            room = self.progression.move_to_room(room_id)
            self._after_command()
            return room

    def request_question(self, room_id: Optional[str] = None) -> QuizSession:
        with self._command("request_question"):
            session = self.quiz.request_question(room_id)
            if self._paused:
                logger.info("New question resumes the paused game")
                self._paused = False
            return session

    def submit_answer(self, option_index: int) -> AnswerOutcome:
        with self._command("submit_answer"):
            outcome = self.quiz.submit_answer(option_index)
            self._after_command()
            return outcome

    def skip(self) -> AnswerOutcome:
        with self._command("skip"):
            outcome = self.quiz.skip()
            self._after_command()
            return outcome

    def request_hint(self) -> str:
        with self._command("request_hint"):
            return self.quiz.request_hint()

    def pause(self) -> None:
        """게임 일시정지. 진행 중인 문제 타이머도 멈춘다 (Running → Paused)."""
        with self._command("pause"):
            if self._paused:
                raise StateError("Game is already paused")
            session = self.quiz.session
            if session is not None and session.is_active:
                self.quiz.pause()
            self._paused = True
            logger.info("Game paused")

    def resume(self) -> None:
        with self._command("resume"):
            if not self._paused:
                raise StateError("Game is not paused")
            session = self.quiz.session
            if session is not None and session.is_active:
                self.quiz.resume()
            self._paused = False
            logger.info("Game resumed")

    def save(self, reason: str = "manual") -> dict[str, Any]:
        with self._command("save"):
            store = self._require_store()
            snapshot = self.progression.serialize()
            store.save(self.slot, snapshot)
            self.autosave.reset()
            logger.info("Game saved to slot %s (%s)", self.slot, reason)
            self.bus.emit(GameSaved(slot=self.slot, reason=reason))
            return snapshot

    def load(self) -> bool:
        """저장 슬롯 복원. 반환: 복원 성공 여부.

        슬롯이 비어 있으면 현재 상태 유지. 스냅샷이 손상되었으면
        ErrorOccurred 보고 후 새 게임으로 대체한다.
        """
        try:
            with self._command("load"):
                snapshot = self._require_store().load(self.slot)
                if snapshot is None:
                    logger.info("No saved game in slot %s", self.slot)
                    return False
                self._restore(snapshot)
        except PersistenceError:
            logger.warning("Saved game unusable, starting fresh")
            self._start_fresh()
            return False
        return True

    def reset(self) -> None:
        """새 게임. 저장 슬롯도 비운다."""
        with self._command("reset"):
            if self.store is not None:
                self.store.clear(self.slot)
            self._start_fresh()

    def list_slots(self) -> list[dict[str, Any]]:
        """저장소의 세이브 슬롯 요약 목록"""
        with self._command("list_slots"):
            return self._require_store().list_slots()

    def export_snapshot(self) -> dict[str, Any]:
        return self.progression.serialize()

    def import_snapshot(self, snapshot: Any) -> None:
        """외부 스냅샷 적용. 실패 시 PersistenceError, 현재 게임 유지."""
        with self._command("import_snapshot"):
            self._restore(snapshot)

    def tick(self, dt: float) -> None:
        """고정 주기 호출: 문제 타이머, 플레이 시간, 자동 저장"""
        if dt <= 0:
            return
        if not self._paused:
            if not self.progression.state.completed:
                self.progression.add_play_time(dt)
            outcome = self.quiz.tick(dt)
            if outcome is not None:
                self._after_command()
        self.autosave.tick(dt)

    # === 조회 ===

    def state_view(self) -> dict[str, Any]:
        state = self.progression.state
        room = self.progression.current_room
        session = self.quiz.session
        progress = self.progression.victory_progress()
        return {
            "current_room": {
                "room_id": room.room_id,
                "name": room.name,
                "description": room.description,
                "preferred_category": room.preferred_category,
            },
            "available_rooms": self.progression.available_rooms(),
            "unlocked_rooms": sorted(state.unlocked_room_ids),
            "visited_rooms": sorted(state.visited_room_ids),
            "score": state.score,
            "final_score": state.final_score,
            "completed": state.completed,
            "paused": self._paused,
            "difficulty": self.quiz.difficulty.value,
            "question": session.to_public_dict() if session is not None else None,
            "unlocked_achievements": list(state.unlocked_achievement_ids),
            "victory": {
                "exploration_ratio": progress.exploration_ratio,
                "answered_ratio": progress.answered_ratio,
                "accuracy": progress.accuracy,
                "satisfied": progress.satisfied,
            },
        }

    def statistics_report(self) -> dict[str, Any]:
        state = self.progression.state
        stats = self.progression.statistics()
        times = stats.correct_answer_times
        perf = performance_score(stats)

        categories = {
            name: {
                "answered": c.answered,
                "correct": c.correct,
                "accuracy": c.accuracy,
            }
            for name, c in sorted(state.category_stats.items())
        }
        ranked = sorted(
            (c for c in state.category_stats.items() if c[1].answered),
            key=lambda item: (item[1].accuracy, item[1].answered),
        )

        return {
            "score": state.score,
            "final_score": state.final_score,
            "bonuses": dict(state.final_bonuses),
            "completed": state.completed,
            "rooms_visited": stats.rooms_visited,
            "rooms_total": stats.rooms_total,
            "exploration_ratio": stats.exploration_ratio,
            "questions_answered": stats.questions_answered,
            "questions_total": stats.questions_total,
            "answered_ratio": stats.answered_ratio,
            "correct_answers": stats.correct_answers,
            "incorrect_answers": stats.incorrect_answers,
            "accuracy": stats.accuracy,
            "max_streak": stats.max_streak,
            "hints_used": stats.hints_used,
            "questions_skipped": stats.questions_skipped,
            "questions_timed_out": stats.questions_timed_out,
            "average_answer_time": round(sum(times) / len(times), 2) if times else 0.0,
            "elapsed_seconds": round(stats.elapsed_seconds, 1),
            "play_time": format_duration(stats.elapsed_seconds),
            "performance_score": perf,
            "grade": performance_grade(perf),
            "achievement_points": self.achievements.total_points(
                set(state.unlocked_achievement_ids)
            ),
            "categories": categories,
            "strongest_category": ranked[-1][0] if ranked else None,
            "weakest_category": ranked[0][0] if ranked else None,
        }

    def achievement_overview(self) -> list[dict[str, Any]]:
        return self.achievements.overview(
            self.progression.statistics(),
            set(self.progression.state.unlocked_achievement_ids),
        )

    # === 내부 ===

    @contextmanager
    def _command(self, name: str) -> Iterator[None]:
        try:
            yield
        except GameError as e:
            logger.warning("Command %s rejected: %s", name, e)
            self.bus.emit(
                ErrorOccurred(
                    kind=e.kind,
                    message=str(e),
                    command=name,
                    recoverable=e.recoverable,
                )
            )
            raise

    def _require_store(self) -> SnapshotStore:
        if self.store is None:
            raise StateError("No snapshot store configured")
        return self.store

    def _after_command(self) -> None:
        self._achievement_pass()
        if self.progression.check_victory() is None:
            return
        self._achievement_pass()
        if self.store is not None:
            try:
                self.save(reason="completion")
            except GameError:
                logger.warning("Completion save failed; game state kept in memory")

    def _achievement_pass(self) -> list[str]:
        state = self.progression.state
        newly = self.achievements.evaluate(
            self.progression.statistics(), set(state.unlocked_achievement_ids)
        )
        for achievement_id in newly:
            achievement = self.achievements.get(achievement_id)
            assert achievement is not None
            self.progression.unlock_achievement(achievement_id)
            logger.info("Achievement unlocked: %s", achievement.name)
            self.bus.emit(
                AchievementUnlocked(
                    achievement_id=achievement_id,
                    name=achievement.name,
                    points=achievement.points,
                    rarity=achievement.rarity.value,
                    unlocked_count=len(state.unlocked_achievement_ids),
                )
            )
            if achievement.points:
                self.progression.apply_score_delta(
                    achievement.points, reason=f"achievement:{achievement_id}"
                )
        return newly

    def _restore(self, snapshot: Any) -> None:
        self.progression.restore(snapshot)
        self.quiz.reset()
        self.autosave.reset()
        self._paused = False
        version = snapshot.get("schema_version", 1)
        self.bus.emit(GameLoaded(slot=self.slot, schema_version=int(version)))

    def _start_fresh(self) -> None:
        self.progression.reset()
        self.quiz.reset()
        self.autosave.reset()
        self._paused = False
        self.bus.emit(GameReset(start_room_id=self.content.start_room_id))

    def _autosave(self) -> None:
        self.save(reason="autosave")
