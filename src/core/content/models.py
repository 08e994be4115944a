"""콘텐츠 도메인 모델 (로드 후 불변)"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def rank(self) -> int:
        return DIFFICULTY_ORDER.index(self)


DIFFICULTY_ORDER: tuple[Difficulty, ...] = (
    Difficulty.EASY,
    Difficulty.MEDIUM,
    Difficulty.HARD,
)


class Rarity(str, Enum):
    """표시 전용. 동작에 영향 없음."""

    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


@dataclass(frozen=True)
class Room:
    room_id: str
    name: str
    description: str
    connections: tuple[str, ...] = ()
    preferred_category: Optional[str] = None
    is_start: bool = False


@dataclass(frozen=True)
class Question:
    question_id: str
    prompt: str
    options: tuple[str, ...]
    correct_index: int
    category: str
    difficulty: Difficulty = Difficulty.MEDIUM
    points: int = 100
    hint: Optional[str] = None
    explanation: Optional[str] = None

    def is_correct(self, option_index: int) -> bool:
        return option_index == self.correct_index


@dataclass(frozen=True)
class AchievementTrigger:
    """업적 해금 조건. type별 의미는 achievements/rules.py 참조."""

    type: str
    value: Any = None
    params: dict[str, Any] = field(default_factory=dict)

    def param(self, key: str, default: Any = None) -> Any:
        return self.params.get(key, default)


@dataclass(frozen=True)
class Achievement:
    achievement_id: str
    name: str
    description: str
    points: int
    trigger: AchievementTrigger
    rarity: Rarity = Rarity.COMMON
    category: str = "general"
    icon: str = ""
