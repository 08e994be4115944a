"""업적 판정 엔진 (무상태)"""

from __future__ import annotations

import logging
from typing import AbstractSet, Any, Iterable

from src.core.content.models import Achievement

from .rules import is_satisfied, measure_progress
from .statistics import Statistics

logger = logging.getLogger(__name__)


def evaluate(
    statistics: Statistics,
    achievements: Iterable[Achievement],
    unlocked: AbstractSet[str],
) -> list[str]:
    """새로 조건을 만족한 업적 id 목록 (선언 순서).

    - 입력을 변경하지 않는다
    - unlocked에 이미 있는 id는 절대 반환하지 않는다
    - 모든 조건은 같은 pre-pass 스냅샷으로 판정된다
    """
    return [
        a.achievement_id
        for a in achievements
        if a.achievement_id not in unlocked and is_satisfied(statistics, a.trigger)
    ]


class AchievementEngine:
    """업적 정의 목록을 들고 있는 판정기. 상태는 ProgressionState가 소유한다."""

    def __init__(self, achievements: Iterable[Achievement]) -> None:
        self._achievements: list[Achievement] = list(achievements)
        self._by_id = {a.achievement_id: a for a in self._achievements}

    @property
    def achievements(self) -> list[Achievement]:
        return list(self._achievements)

    def get(self, achievement_id: str) -> Achievement | None:
        return self._by_id.get(achievement_id)

    def evaluate(
        self, statistics: Statistics, unlocked: AbstractSet[str]
    ) -> list[str]:
        newly = evaluate(statistics, self._achievements, unlocked)
        if newly:
            logger.debug("Achievements newly satisfied: %s", newly)
        return newly

    def progress(
        self, statistics: Statistics, achievement: Achievement
    ) -> tuple[int, int]:
        return measure_progress(statistics, achievement.trigger)

    def overview(
        self, statistics: Statistics, unlocked: AbstractSet[str]
    ) -> list[dict[str, Any]]:
        """표시용 전체 목록 (해금 여부 + 진행도)"""
        rows: list[dict[str, Any]] = []
        for a in self._achievements:
            current, maximum = self.progress(statistics, a)
            is_unlocked = a.achievement_id in unlocked
            if is_unlocked:
                current = maximum
            rows.append(
                {
                    "achievement_id": a.achievement_id,
                    "name": a.name,
                    "description": a.description,
                    "points": a.points,
                    "rarity": a.rarity.value,
                    "category": a.category,
                    "unlocked": is_unlocked,
                    "progress": current,
                    "max_progress": maximum,
                    "progress_percent": round(current / maximum * 100, 1)
                    if maximum
                    else 0.0,
                }
            )
        return rows

    def total_points(self, unlocked: AbstractSet[str]) -> int:
        return sum(a.points for a in self._achievements if a.achievement_id in unlocked)
