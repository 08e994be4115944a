"""게임 코어 예외 계층

- DataError: 콘텐츠 구조 오류. 시작 차단 (치명적)
- StateError: 불법 전이. 상태 변경 없이 거부 (복구 가능)
- PersistenceError: 손상/버전 불일치 스냅샷. 새 게임으로 대체 (복구 가능)
- NoQuestionsAvailable: 문제 소진 (복구 가능)
"""

from typing import Iterable


class GameError(Exception):
    """모든 코어 예외의 기반"""

    kind = "game"
    recoverable = True


class DataError(GameError):
    """콘텐츠 로드 시 발견된 위반 목록을 한꺼번에 보고"""

    kind = "data"
    recoverable = False

    def __init__(self, violations: Iterable[str]):
        self.violations = list(violations)
        summary = "; ".join(self.violations)
        super().__init__(
            f"Invalid game content ({len(self.violations)} violations): {summary}"
        )


class StateError(GameError):
    kind = "state"


class InvalidMove(StateError):
    kind = "movement"


class InvalidTimerTransition(StateError):
    kind = "timer"

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Illegal timer transition: {current} -> {target}")


class PersistenceError(GameError):
    kind = "persistence"


class NoQuestionsAvailable(GameError):
    kind = "no_questions"
