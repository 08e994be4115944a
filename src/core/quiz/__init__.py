"""퀴즈 Core 패키지 (문제 선택 / 타이머 / 적응형 난이도)"""

from src.core.quiz.difficulty import DifficultyTracker, next_difficulty, shift_difficulty
from src.core.quiz.engine import NO_HINT_MESSAGE, QuizEngine
from src.core.quiz.models import QuizSession
from src.core.quiz.selection import closest_tier, select_question
from src.core.quiz.timer import ACTIVE_STATES, QuestionTimer, TimerState

__all__ = [
    "DifficultyTracker",
    "next_difficulty",
    "shift_difficulty",
    "NO_HINT_MESSAGE",
    "QuizEngine",
    "QuizSession",
    "closest_tier",
    "select_question",
    "ACTIVE_STATES",
    "QuestionTimer",
    "TimerState",
]
