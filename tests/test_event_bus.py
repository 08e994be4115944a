"""EventBus 테스트"""

import logging

from src.core.event_bus import MAX_DEPTH, EventBus
from src.core.event_types import (
    ALL_EVENT_TYPES,
    ErrorOccurred,
    GameEvent,
    QuestionPresented,
    RoomChanged,
    RoomUnlocked,
    ScoreChanged,
    TimerTick,
)
from src.core.logging import EVENT_LOGGER_NAME, attach_event_logger


def _moved(to_room: str = "library") -> RoomChanged:
    return RoomChanged(from_room_id="entrance", to_room_id=to_room, first_visit=True)


class TestSubscribeEmit:
    def test_basic_emit(self):
        bus = EventBus()
        received = []
        bus.subscribe(RoomChanged, received.append)
        bus.emit(_moved())
        assert len(received) == 1
        assert received[0].to_room_id == "library"

    def test_multiple_handlers(self):
        bus = EventBus()
        results = []
        bus.subscribe(RoomChanged, lambda e: results.append("a"))
        bus.subscribe(RoomChanged, lambda e: results.append("b"))
        bus.emit(_moved())
        assert results == ["a", "b"]

    def test_subscription_is_per_class(self):
        bus = EventBus()
        received = []
        bus.subscribe(RoomUnlocked, received.append)
        bus.emit(_moved())
        assert received == []

    def test_no_handlers(self):
        """구독자 없는 이벤트 발행 - 에러 없이 무시"""
        bus = EventBus()
        bus.emit(ScoreChanged(delta=10, score=10))

    def test_unsubscribe(self):
        bus = EventBus()
        received = []
        handler = lambda e: received.append(e)  # noqa: E731
        bus.subscribe(RoomChanged, handler)
        bus.unsubscribe(RoomChanged, handler)
        bus.emit(_moved())
        assert len(received) == 0

    def test_unsubscribe_nonexistent(self):
        """미등록 핸들러 해제 - 경고만, 에러 없음"""
        bus = EventBus()
        bus.unsubscribe(RoomChanged, lambda e: None)
        bus.unsubscribe_all(lambda e: None)


class TestSubscribeAll:
    def test_catch_all_receives_every_type_in_order(self):
        bus = EventBus()
        received = []
        bus.subscribe_all(received.append)
        bus.emit(_moved())
        bus.emit(RoomUnlocked(room_id="gallery", via_room_id="library"))
        bus.emit(ScoreChanged(delta=100, score=100, reason="correct_answer"))
        assert [type(e) for e in received] == [RoomChanged, RoomUnlocked, ScoreChanged]

    def test_typed_handlers_run_before_catch_all(self):
        bus = EventBus()
        order = []
        bus.subscribe_all(lambda e: order.append("all"))
        bus.subscribe(RoomChanged, lambda e: order.append("typed"))
        bus.emit(_moved())
        assert order == ["typed", "all"]


class TestDepthLimit:
    def test_max_depth_prevents_infinite_loop(self):
        bus = EventBus()
        call_count = 0

        def recursive_handler(event: GameEvent):
            nonlocal call_count
            call_count += 1
            bus.emit(_moved(f"room_{call_count}"))

        bus.subscribe(RoomChanged, recursive_handler)
        bus.emit(_moved())

        # MAX_DEPTH(5)까지만 전파
        assert call_count == MAX_DEPTH

    def test_depth_resets_after_emit(self):
        bus = EventBus()
        received = []
        bus.subscribe(RoomChanged, received.append)
        for _ in range(MAX_DEPTH + 2):
            bus.emit(_moved())
        assert len(received) == MAX_DEPTH + 2


class TestHandlerError:
    def test_handler_exception_doesnt_stop_others(self):
        bus = EventBus()
        results = []

        def bad_handler(e):
            raise ValueError("boom")

        def good_handler(e):
            results.append("ok")

        bus.subscribe(RoomChanged, bad_handler)
        bus.subscribe(RoomChanged, good_handler)
        bus.emit(_moved())
        assert results == ["ok"]


class TestClear:
    def test_clear_removes_all(self):
        bus = EventBus()
        bus.subscribe(RoomChanged, lambda e: None)
        bus.subscribe(ScoreChanged, lambda e: None)
        bus.subscribe_all(lambda e: None)
        assert bus.handler_count == 3
        bus.clear()
        assert bus.handler_count == 0


class TestEventPayload:
    def test_to_dict_tags_type(self):
        data = ScoreChanged(delta=-10, score=-10, reason="skip_penalty").to_dict()
        assert data == {
            "type": "score_changed",
            "data": {"delta": -10, "score": -10, "reason": "skip_penalty"},
        }

    def test_tuples_become_lists(self):
        event = QuestionPresented(
            question_id="q1",
            room_id="entrance",
            prompt="?",
            options=("a", "b"),
            category="history",
            difficulty="easy",
            points=100,
            time_limit=30.0,
            has_hint=False,
        )
        payload = event.to_dict()["data"]
        assert payload["options"] == ["a", "b"]
        assert "correct_index" not in payload

    def test_event_type_tags_are_unique(self):
        tags = [cls.event_type for cls in ALL_EVENT_TYPES]
        assert len(tags) == len(set(tags))


class TestEventLogger:
    def test_events_are_logged(self, caplog):
        bus = EventBus()
        handler = attach_event_logger(bus)
        with caplog.at_level(logging.DEBUG, logger=EVENT_LOGGER_NAME):
            bus.emit(ScoreChanged(delta=10, score=10, reason="correct_answer"))
            bus.emit(
                ErrorOccurred(
                    kind="movement", message="locked", command="move_to_room"
                )
            )
            bus.emit(
                TimerTick(
                    question_id="q1", remaining=3.0, time_limit=10.0, state="running"
                )
            )

        levels = [
            (r.levelname, r.getMessage().split()[0])
            for r in caplog.records
            if r.name == EVENT_LOGGER_NAME
        ]
        assert levels == [
            ("INFO", "score_changed"),
            ("WARNING", "error_occurred"),
            ("DEBUG", "timer_tick"),
        ]

        bus.unsubscribe_all(handler)
        assert bus.handler_count == 0
