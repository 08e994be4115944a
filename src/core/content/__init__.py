"""콘텐츠 Core 패키지 (방 / 문제 / 업적 정의)"""

from src.core.content.loader import ContentStore
from src.core.content.models import (
    DIFFICULTY_ORDER,
    Achievement,
    AchievementTrigger,
    Difficulty,
    Question,
    Rarity,
    Room,
)

__all__ = [
    "ContentStore",
    "DIFFICULTY_ORDER",
    "Achievement",
    "AchievementTrigger",
    "Difficulty",
    "Question",
    "Rarity",
    "Room",
]
