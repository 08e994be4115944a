"""게임 규칙 상수 묶음

config.Settings.game_rules()가 환경 설정으로부터 생성한다.
코어는 pydantic에 의존하지 않고 이 dataclass만 받는다.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class GameRules:
    # 퀴즈 타이머
    question_time_limit: float = 30.0
    max_time_bonus: int = 50
    skip_penalty: int = 10

    # 적응형 난이도
    raise_after_correct: int = 3
    lower_after_incorrect: int = 2
    start_difficulty: str = "easy"

    # 업적 통계: "빠른 정답" 기본 기준 (초)
    quick_answer_seconds: float = 10.0

    # 승리 조건
    exploration_threshold: float = 0.8
    answered_threshold: float = 0.7
    accuracy_threshold: float = 0.7

    # 최종 보너스
    completion_bonus: int = 500
    exploration_bonus_per_room: int = 10
    accuracy_bonus_max: int = 1000
    perfect_bonus: int = 1000
    speed_bonus: int = 750
    speed_run_seconds: float = 600.0

    # 점수 정책: 음수 허용 여부 (False면 0에서 고정)
    allow_negative_score: bool = True

    # 자동 저장
    autosave_interval: float = 30.0


DEFAULT_RULES = GameRules()
