"""점수 계산 - 시간 보너스, 승리 조건, 최종 보너스, 성취 등급

모두 통계에 대한 결정적 순수 함수. 이력을 재생하지 않는다.
"""

import math
from dataclasses import dataclass

from src.core.achievements.statistics import Statistics
from src.core.rules import DEFAULT_RULES, GameRules

# 성취 점수(0-100) → 등급
GRADE_THRESHOLDS: list[tuple[int, str]] = [
    (95, "S"),
    (85, "A"),
    (75, "B"),
    (65, "C"),
    (50, "D"),
]


def time_bonus(
    fraction_remaining: float,
    max_bonus: int = DEFAULT_RULES.max_time_bonus,
    hint_used: bool = False,
) -> int:
    """남은 시간 비율에 비례한 보너스. 힌트 사용 시 0, 상한 max_bonus."""
    if hint_used:
        return 0
    fraction = min(max(fraction_remaining, 0.0), 1.0)
    return min(max_bonus, math.floor(max_bonus * fraction + 1e-9))


@dataclass(frozen=True)
class VictoryProgress:
    exploration_ratio: float
    answered_ratio: float
    accuracy: float
    explored_enough: bool
    answered_enough: bool
    accurate_enough: bool

    @property
    def satisfied(self) -> bool:
        return self.explored_enough and self.answered_enough and self.accurate_enough


def victory_progress(
    stats: Statistics, rules: GameRules = DEFAULT_RULES
) -> VictoryProgress:
    return VictoryProgress(
        exploration_ratio=stats.exploration_ratio,
        answered_ratio=stats.answered_ratio,
        accuracy=stats.accuracy,
        explored_enough=stats.exploration_ratio >= rules.exploration_threshold,
        answered_enough=stats.answered_ratio >= rules.answered_threshold,
        accurate_enough=stats.accuracy >= rules.accuracy_threshold,
    )


def final_bonuses(stats: Statistics, rules: GameRules = DEFAULT_RULES) -> dict[str, int]:
    """완료 시점 보너스 내역.

    - completion: 고정
    - exploration: 방문한 방 수 비례
    - accuracy: 정확도 비례 + 100%면 perfect 추가
    - speed: 제한 시간 내 완료 시 고정
    """
    accuracy = stats.accuracy
    accuracy_bonus = math.floor(rules.accuracy_bonus_max * accuracy + 1e-9)
    if stats.questions_answered and stats.correct_answers == stats.questions_answered:
        accuracy_bonus += rules.perfect_bonus
    return {
        "completion": rules.completion_bonus,
        "exploration": stats.rooms_visited * rules.exploration_bonus_per_room,
        "accuracy": accuracy_bonus,
        "speed": rules.speed_bonus
        if stats.elapsed_seconds < rules.speed_run_seconds
        else 0,
    }


def performance_score(stats: Statistics) -> int:
    """정확도 50% + 탐험 30% + 응답 진척 20% (0-100)"""
    return round(
        stats.accuracy * 100 * 0.5
        + stats.exploration_ratio * 100 * 0.3
        + stats.answered_ratio * 100 * 0.2
    )


def performance_grade(score: int) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


def format_duration(seconds: float) -> str:
    total = int(seconds)
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
