"""EventBus - 코어 → 표현 계층 이벤트 전달 인프라

규칙:
- 이벤트는 event_types.py의 dataclass 인스턴스만 허용한다
- 구독은 이벤트 클래스 단위, 또는 subscribe_all로 전체 구독
- 전파 깊이 최대 MAX_DEPTH 단계
- 발행 순서 = 핸들러 호출 순서 (동기식)
"""

from collections import defaultdict
from typing import Callable, Dict, List, Type

from src.core.event_types import GameEvent
from src.core.logging import get_logger

logger = get_logger(__name__)

MAX_DEPTH = 5  # 핸들러 안에서 재발행할 수 있는 최대 깊이

# 핸들러 타입: GameEvent를 받는 callable
EventHandler = Callable[[GameEvent], None]


class EventBus:
    """동기식 타입 이벤트 버스

    사용 패턴:
        bus = EventBus()
        bus.subscribe(RoomChanged, ui.handle_room_changed)
        bus.emit(RoomChanged(from_room_id="entrance", to_room_id="library", first_visit=True))
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[GameEvent], List[EventHandler]] = defaultdict(list)
        self._catch_all: List[EventHandler] = []
        self._current_depth: int = 0

    def subscribe(self, event_cls: Type[GameEvent], handler: EventHandler) -> None:
        """이벤트 구독 등록"""
        self._handlers[event_cls].append(handler)
        logger.debug(
            f"EventBus 구독: {event_cls.event_type} → {handler.__qualname__}"
        )

    def subscribe_all(self, handler: EventHandler) -> None:
        """모든 이벤트 구독 (API 응답 수집, 로그 등)"""
        self._catch_all.append(handler)

    def unsubscribe(self, event_cls: Type[GameEvent], handler: EventHandler) -> None:
        """이벤트 구독 해제"""
        try:
            self._handlers[event_cls].remove(handler)
            logger.debug(
                f"EventBus 구독 해제: {event_cls.event_type} → {handler.__qualname__}"
            )
        except ValueError:
            logger.warning(
                f"핸들러 미등록: {event_cls.event_type} → {handler.__qualname__}"
            )

    def unsubscribe_all(self, handler: EventHandler) -> None:
        try:
            self._catch_all.remove(handler)
        except ValueError:
            logger.warning(f"핸들러 미등록: * → {handler.__qualname__}")

    def emit(self, event: GameEvent) -> None:
        """이벤트 발행. 등록된 핸들러를 등록 순서대로 동기 호출.

        핸들러 예외는 로그만 남기고 다른 핸들러 호출을 계속한다.
        코어 상태는 발행 전에 이미 확정되어 있으므로 구독자 실패가
        통계를 어긋나게 만들지 않는다.
        """
        if self._current_depth >= MAX_DEPTH:
            logger.warning(
                f"EventBus 전파 깊이 초과 ({MAX_DEPTH}): {event.event_type} 무시됨"
            )
            return

        handlers = list(self._handlers.get(type(event), [])) + list(self._catch_all)
        if not handlers:
            logger.debug(f"EventBus: {event.event_type} 구독자 없음")
            return

        logger.debug(
            f"EventBus 전파: {event.event_type} "
            f"(depth={self._current_depth}, handlers={len(handlers)})"
        )

        self._current_depth += 1
        try:
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        f"EventBus 핸들러 에러: {handler.__qualname__} "
                        f"(event={event.event_type})"
                    )
        finally:
            self._current_depth -= 1

    def clear(self) -> None:
        """모든 구독 해제 (테스트용)"""
        self._handlers.clear()
        self._catch_all.clear()
        self._current_depth = 0

    @property
    def handler_count(self) -> int:
        """등록된 총 핸들러 수"""
        return sum(len(h) for h in self._handlers.values()) + len(self._catch_all)
