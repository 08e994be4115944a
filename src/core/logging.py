from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.core.event_bus import EventBus
    from src.core.event_types import GameEvent

EVENT_LOGGER_NAME = "lobe_labyrinth.events"

# 고빈도 이벤트는 DEBUG로만 기록
QUIET_EVENT_TYPES = frozenset({"timer_tick"})


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def attach_event_logger(bus: EventBus, logger: logging.Logger | None = None):
    """버스의 모든 이벤트를 로그로 남기는 핸들러 등록. 반환: 해제용 핸들러."""
    target = logger or get_logger(EVENT_LOGGER_NAME)

    def _log_event(event: GameEvent) -> None:
        if event.event_type == "error_occurred":
            target.warning("%s %s", event.event_type, event.to_dict()["data"])
        elif event.event_type in QUIET_EVENT_TYPES:
            target.debug("%s", event.event_type)
        else:
            target.info("%s %s", event.event_type, event.to_dict()["data"])

    bus.subscribe_all(_log_event)
    return _log_event
