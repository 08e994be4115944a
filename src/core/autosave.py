"""자동 저장 스케줄러 - tick 누적 시간이 주기를 넘으면 저장 콜백 호출

저장 실패는 로그로만 남기고 게임 진행을 막지 않는다.
"""

import logging
from typing import Callable

logger = logging.getLogger(__name__)


class AutosaveScheduler:
    def __init__(self, interval: float, save_callback: Callable[[], object]) -> None:
        if interval <= 0:
            raise ValueError(f"autosave interval must be positive: {interval}")
        self._interval = interval
        self._save = save_callback
        self._accumulated = 0.0
        self.enabled = True
        self.save_count = 0
        self.failure_count = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def due_in(self) -> float:
        return max(0.0, self._interval - self._accumulated)

    def reset(self) -> None:
        self._accumulated = 0.0

    def tick(self, dt: float) -> bool:
        """반환: 이번 tick에서 저장을 시도했는지"""
        if not self.enabled or dt <= 0:
            return False

        self._accumulated += dt
        if self._accumulated < self._interval:
            return False

        self._accumulated = 0.0
        try:
            self._save()
        except Exception:
            self.failure_count += 1
            logger.exception("Autosave failed")
        else:
            self.save_count += 1
            logger.debug("Autosave complete (#%d)", self.save_count)
        return True
