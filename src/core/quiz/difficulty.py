"""적응형 난이도 - 연속 정답/오답 카운터에 대한 순수 로직"""

from dataclasses import dataclass

from src.core.content.models import DIFFICULTY_ORDER, Difficulty


def shift_difficulty(tier: Difficulty, steps: int) -> Difficulty:
    """난이도를 steps만큼 이동 (easy~hard 범위로 고정)"""
    index = min(max(tier.rank + steps, 0), len(DIFFICULTY_ORDER) - 1)
    return DIFFICULTY_ORDER[index]


def next_difficulty(
    tier: Difficulty,
    consecutive_correct: int,
    consecutive_incorrect: int,
    raise_after: int,
    lower_after: int,
) -> Difficulty:
    if consecutive_correct >= raise_after:
        return shift_difficulty(tier, 1)
    if consecutive_incorrect >= lower_after:
        return shift_difficulty(tier, -1)
    return tier


@dataclass
class DifficultyTracker:
    """연속 N회 정답 → 한 단계 상승, 연속 M회 오답 → 한 단계 하강.

    단계가 바뀌면 두 카운터 모두 초기화.
    """

    tier: Difficulty = Difficulty.EASY
    consecutive_correct: int = 0
    consecutive_incorrect: int = 0
    raise_after: int = 3
    lower_after: int = 2

    def record(self, correct: bool) -> Difficulty:
        if correct:
            self.consecutive_correct += 1
            self.consecutive_incorrect = 0
        else:
            self.consecutive_incorrect += 1
            self.consecutive_correct = 0

        new_tier = next_difficulty(
            self.tier,
            self.consecutive_correct,
            self.consecutive_incorrect,
            self.raise_after,
            self.lower_after,
        )
        streak_complete = (
            self.consecutive_correct >= self.raise_after
            or self.consecutive_incorrect >= self.lower_after
        )
        if streak_complete:
            self.consecutive_correct = 0
            self.consecutive_incorrect = 0
        self.tier = new_tier
        return new_tier

    def record_skip(self) -> None:
        """건너뛰기는 정답 연속만 끊는다"""
        self.consecutive_correct = 0

    def reset(self, tier: Difficulty) -> None:
        self.tier = tier
        self.consecutive_correct = 0
        self.consecutive_incorrect = 0
