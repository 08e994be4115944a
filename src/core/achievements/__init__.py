"""업적 Core 패키지"""

from src.core.achievements.engine import AchievementEngine, evaluate
from src.core.achievements.rules import (
    KNOWN_TRIGGER_TYPES,
    is_satisfied,
    measure_progress,
)
from src.core.achievements.statistics import Statistics

__all__ = [
    "AchievementEngine",
    "evaluate",
    "KNOWN_TRIGGER_TYPES",
    "is_satisfied",
    "measure_progress",
    "Statistics",
]
