"""업적 판정용 누적 통계 스냅샷

ProgressionController.statistics()가 생성한다.
순간적인 UI 상태는 포함하지 않는다 (스냅샷만으로 재현 가능).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Statistics:
    score: int = 0
    rooms_visited: int = 0
    rooms_total: int = 0
    visited_room_ids: frozenset[str] = frozenset()
    questions_answered: int = 0
    questions_total: int = 0
    correct_answers: int = 0
    current_streak: int = 0
    max_streak: int = 0
    incorrect_streak: int = 0
    best_comeback: int = 0  # 정답 직전에 이어진 오답 연속의 최댓값
    correct_answer_times: tuple[float, ...] = ()
    hints_used: int = 0
    questions_skipped: int = 0
    questions_timed_out: int = 0
    elapsed_seconds: float = 0.0
    completed: bool = False

    @property
    def accuracy(self) -> float:
        if self.questions_answered == 0:
            return 0.0
        return self.correct_answers / self.questions_answered

    @property
    def exploration_ratio(self) -> float:
        if self.rooms_total == 0:
            return 0.0
        return self.rooms_visited / self.rooms_total

    @property
    def answered_ratio(self) -> float:
        if self.questions_total == 0:
            return 0.0
        return self.questions_answered / self.questions_total

    @property
    def incorrect_answers(self) -> int:
        return self.questions_answered - self.correct_answers

    def quick_answer_count(self, time_limit: float) -> int:
        return sum(1 for t in self.correct_answer_times if t < time_limit)
