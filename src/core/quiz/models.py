"""퀴즈 세션 모델 (인메모리, 한 번에 하나)"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from src.core.content.models import Difficulty, Question
from src.core.progression.models import AnswerOutcome

from .timer import QuestionTimer, TimerState


@dataclass
class QuizSession:
    question: Question
    room_id: str
    timer: QuestionTimer
    difficulty: Difficulty
    consecutive_correct: int = 0
    consecutive_incorrect: int = 0
    hint_used: bool = False
    outcome: Optional[AnswerOutcome] = None

    @property
    def state(self) -> TimerState:
        return self.timer.state

    @property
    def is_active(self) -> bool:
        return self.timer.is_active

    def to_public_dict(self) -> dict:
        """표현 계층용. 종료 전에는 정답을 노출하지 않는다."""
        data = {
            "question_id": self.question.question_id,
            "room_id": self.room_id,
            "prompt": self.question.prompt,
            "options": list(self.question.options),
            "category": self.question.category,
            "difficulty": self.question.difficulty.value,
            "points": self.question.points,
            "time_limit": self.timer.time_limit,
            "remaining": round(self.timer.remaining, 3),
            "state": self.timer.state.value,
            "hint_used": self.hint_used,
            "has_hint": self.question.hint is not None,
        }
        if not self.is_active:
            data["correct_index"] = self.question.correct_index
            data["explanation"] = self.question.explanation or ""
        return data
