"""이벤트 유형 (태그드 변형)

이벤트마다 고정된 payload 형태를 갖는 frozen dataclass.
구독은 문자열이 아니라 클래스 단위로 한다.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar, Optional


@dataclass(frozen=True)
class GameEvent:
    """모든 이벤트의 기반. event_type은 직렬화용 태그."""

    event_type: ClassVar[str] = "game_event"

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, (set, frozenset)):
                data[key] = sorted(value)
            elif isinstance(value, tuple):
                data[key] = list(value)
        return {"type": self.event_type, "data": data}


# === 진행 (ProgressionController) ===


@dataclass(frozen=True)
class RoomChanged(GameEvent):
    event_type: ClassVar[str] = "room_changed"

    from_room_id: str
    to_room_id: str
    first_visit: bool


@dataclass(frozen=True)
class RoomUnlocked(GameEvent):
    event_type: ClassVar[str] = "room_unlocked"

    room_id: str
    via_room_id: Optional[str] = None


@dataclass(frozen=True)
class ScoreChanged(GameEvent):
    event_type: ClassVar[str] = "score_changed"

    delta: int
    score: int
    reason: str = ""


@dataclass(frozen=True)
class GameCompleted(GameEvent):
    event_type: ClassVar[str] = "game_completed"

    score: int
    final_score: int
    bonuses: dict[str, int] = field(default_factory=dict)
    rooms_visited: int = 0
    rooms_total: int = 0
    questions_answered: int = 0
    questions_total: int = 0
    correct_answers: int = 0
    accuracy: float = 0.0
    elapsed_seconds: float = 0.0
    is_perfect_game: bool = False
    is_speed_run: bool = False


# === 퀴즈 (QuizEngine) ===


@dataclass(frozen=True)
class QuestionPresented(GameEvent):
    """정답 인덱스는 싣지 않는다"""

    event_type: ClassVar[str] = "question_presented"

    question_id: str
    room_id: str
    prompt: str
    options: tuple[str, ...]
    category: str
    difficulty: str
    points: int
    time_limit: float
    has_hint: bool


@dataclass(frozen=True)
class QuestionAnswered(GameEvent):
    event_type: ClassVar[str] = "question_answered"

    question_id: str
    room_id: str
    correct: bool
    points: int
    time_taken: float
    time_bonus: int = 0
    skipped: bool = False
    timed_out: bool = False
    hint_used: bool = False
    selected_index: Optional[int] = None
    correct_index: int = -1
    explanation: str = ""


@dataclass(frozen=True)
class HintUsed(GameEvent):
    event_type: ClassVar[str] = "hint_used"

    question_id: str
    hint: str


@dataclass(frozen=True)
class TimerTick(GameEvent):
    event_type: ClassVar[str] = "timer_tick"

    question_id: str
    remaining: float
    time_limit: float
    state: str


# === 업적 ===


@dataclass(frozen=True)
class AchievementUnlocked(GameEvent):
    event_type: ClassVar[str] = "achievement_unlocked"

    achievement_id: str
    name: str
    points: int
    rarity: str
    unlocked_count: int


# === 세션 / 영속화 ===


@dataclass(frozen=True)
class GameSaved(GameEvent):
    event_type: ClassVar[str] = "game_saved"

    slot: str
    reason: str


@dataclass(frozen=True)
class GameLoaded(GameEvent):
    event_type: ClassVar[str] = "game_loaded"

    slot: str
    schema_version: int


@dataclass(frozen=True)
class GameReset(GameEvent):
    event_type: ClassVar[str] = "game_reset"

    start_room_id: str


@dataclass(frozen=True)
class ErrorOccurred(GameEvent):
    event_type: ClassVar[str] = "error_occurred"

    kind: str
    message: str
    command: str = ""
    recoverable: bool = True


ALL_EVENT_TYPES: tuple[type[GameEvent], ...] = (
    RoomChanged,
    RoomUnlocked,
    ScoreChanged,
    GameCompleted,
    QuestionPresented,
    QuestionAnswered,
    HintUsed,
    TimerTick,
    AchievementUnlocked,
    GameSaved,
    GameLoaded,
    GameReset,
    ErrorOccurred,
)
