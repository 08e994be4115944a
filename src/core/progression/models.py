"""진행 상태 도메인 모델 (ProgressionController 전용 소유)"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

SCHEMA_VERSION = 2


@dataclass
class CategoryStats:
    """카테고리별 응답 집계 (학습 분석용)"""

    answered: int = 0
    correct: int = 0

    @property
    def accuracy(self) -> float:
        return self.correct / self.answered if self.answered else 0.0


@dataclass
class ProgressionState:
    """플레이어 진행 상태

    불변식:
    - visited_room_ids ⊆ unlocked_room_ids
    - len(answered_question_ids) == questions_answered
    - correct_answers <= questions_answered
    - unlocked_achievement_ids는 세션 중 증가만 한다 (해금 순서 보존)
    """

    current_room_id: str
    unlocked_room_ids: set[str] = field(default_factory=set)
    visited_room_ids: set[str] = field(default_factory=set)
    answered_question_ids: set[str] = field(default_factory=set)
    score: int = 0
    questions_answered: int = 0
    correct_answers: int = 0
    elapsed_seconds: float = 0.0
    completed: bool = False
    unlocked_achievement_ids: list[str] = field(default_factory=list)
    schema_version: int = SCHEMA_VERSION

    # 업적 판정용 누적 통계
    current_streak: int = 0
    max_streak: int = 0
    incorrect_streak: int = 0
    best_comeback: int = 0
    correct_answer_times: list[float] = field(default_factory=list)
    hints_used: int = 0
    questions_skipped: int = 0
    questions_timed_out: int = 0
    category_stats: dict[str, CategoryStats] = field(default_factory=dict)

    # 완료 시 1회 계산
    final_bonuses: dict[str, int] = field(default_factory=dict)
    player_name: str = ""
    saved_at: Optional[str] = None

    @classmethod
    def fresh(cls, start_room_id: str) -> "ProgressionState":
        return cls(
            current_room_id=start_room_id,
            unlocked_room_ids={start_room_id},
            visited_room_ids={start_room_id},
        )

    @property
    def final_score(self) -> int:
        return self.score + sum(self.final_bonuses.values())

    def invariant_violations(self) -> list[str]:
        problems: list[str] = []
        if not self.visited_room_ids <= self.unlocked_room_ids:
            extra = sorted(self.visited_room_ids - self.unlocked_room_ids)
            problems.append(f"visited rooms not unlocked: {extra}")
        if self.current_room_id not in self.visited_room_ids:
            problems.append(f"current room not visited: {self.current_room_id}")
        if len(self.answered_question_ids) != self.questions_answered:
            problems.append(
                f"answered ids ({len(self.answered_question_ids)}) != "
                f"questions_answered ({self.questions_answered})"
            )
        if self.correct_answers > self.questions_answered:
            problems.append("correct_answers exceeds questions_answered")
        if len(set(self.unlocked_achievement_ids)) != len(self.unlocked_achievement_ids):
            problems.append("duplicate achievement ids")
        return problems


@dataclass(frozen=True)
class AnswerOutcome:
    """문제 세션 종료 결과. 정답/오답/시간초과/건너뛰기 모두 같은 경로로 반영된다."""

    question_id: str
    room_id: str
    category: str
    correct: bool
    points: int
    time_taken: float
    time_bonus: int = 0
    skipped: bool = False
    timed_out: bool = False
    hint_used: bool = False
    selected_index: Optional[int] = None
