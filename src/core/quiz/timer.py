"""문제 타이머 상태 기계

Idle → Running → (Paused ↔ Running) → Expired | Answered
허용되지 않은 전이는 InvalidTimerTransition.
"""

from enum import Enum

from src.core.errors import InvalidTimerTransition


class TimerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    EXPIRED = "expired"
    ANSWERED = "answered"


TRANSITIONS: dict[TimerState, frozenset[TimerState]] = {
    TimerState.IDLE: frozenset({TimerState.RUNNING}),
    TimerState.RUNNING: frozenset(
        {TimerState.PAUSED, TimerState.EXPIRED, TimerState.ANSWERED}
    ),
    TimerState.PAUSED: frozenset({TimerState.RUNNING, TimerState.ANSWERED}),
    TimerState.EXPIRED: frozenset(),
    TimerState.ANSWERED: frozenset(),
}

ACTIVE_STATES = frozenset({TimerState.RUNNING, TimerState.PAUSED})


class QuestionTimer:
    """카운트다운. 시간은 tick(dt)로만 흐른다 (Paused 동안은 멈춤)."""

    def __init__(self, time_limit: float) -> None:
        if time_limit <= 0:
            raise ValueError(f"time_limit must be positive: {time_limit}")
        self.time_limit = float(time_limit)
        self.remaining = float(time_limit)
        self.state = TimerState.IDLE

    def __repr__(self) -> str:
        return (
            f"QuestionTimer(state={self.state.value}, "
            f"remaining={self.remaining:.2f}/{self.time_limit:.2f})"
        )

    @property
    def elapsed(self) -> float:
        return self.time_limit - self.remaining

    @property
    def fraction_remaining(self) -> float:
        return self.remaining / self.time_limit

    @property
    def is_active(self) -> bool:
        return self.state in ACTIVE_STATES

    def can_transition(self, target: TimerState) -> bool:
        return target in TRANSITIONS[self.state]

    def _transition(self, target: TimerState) -> None:
        if not self.can_transition(target):
            raise InvalidTimerTransition(self.state.value, target.value)
        self.state = target

    def start(self) -> None:
        self._transition(TimerState.RUNNING)

    def pause(self) -> None:
        self._transition(TimerState.PAUSED)

    def resume(self) -> None:
        if self.state != TimerState.PAUSED:
            raise InvalidTimerTransition(self.state.value, TimerState.RUNNING.value)
        self._transition(TimerState.RUNNING)

    def finish(self) -> None:
        """응답/건너뛰기로 종료"""
        self._transition(TimerState.ANSWERED)

    def tick(self, dt: float) -> bool:
        """Running일 때만 감소. 0 도달 시 Expired로 전이하고 True 반환."""
        if self.state != TimerState.RUNNING or dt <= 0:
            return False
        self.remaining = max(0.0, self.remaining - dt)
        if self.remaining <= 0:
            self._transition(TimerState.EXPIRED)
            return True
        return False
