"""문제 선택 - 미응답 문제 중 선호 카테고리 → 가장 가까운 난이도 순"""

import random
from typing import AbstractSet, Optional, Sequence

from src.core.content.models import Difficulty, Question
from src.core.errors import NoQuestionsAvailable


def closest_tier(pool: Sequence[Question], tier: Difficulty) -> list[Question]:
    """목표 난이도와의 거리가 최소인 문제들 (동률이면 모두)"""
    if not pool:
        return []
    best = min(abs(q.difficulty.rank - tier.rank) for q in pool)
    return [q for q in pool if abs(q.difficulty.rank - tier.rank) == best]


def select_question(
    questions: Sequence[Question],
    answered: AbstractSet[str],
    preferred_category: Optional[str],
    tier: Difficulty,
    rng: random.Random,
) -> Question:
    """선택 우선순위:
    1. 선호 카테고리 (목표 난이도, 없으면 가장 가까운 난이도)
    2. 선호 카테고리 소진 시 전체 카테고리 (같은 난이도 규칙)

    모든 문제에 응답했으면 NoQuestionsAvailable.
    """
    available = [q for q in questions if q.question_id not in answered]
    if not available:
        raise NoQuestionsAvailable("All questions have been answered")

    preferred = (
        [q for q in available if q.category == preferred_category]
        if preferred_category
        else []
    )
    pool = preferred or available
    return rng.choice(closest_tier(pool, tier))
