"""
Tests for the event bus.
"""
import logging

import pytest

from fetch_facade.events import EventBus, EventType, to_event_type


class TestEventType:
    def test_names_match_wire_values(self):
        assert EventType.CACHE_HIT.value == "cache-hit"
        assert EventType.CACHE_MISS.value == "cache-miss"
        assert to_event_type("retry") is EventType.RETRY

    def test_unknown_name_raises(self):
        with pytest.raises(ValueError, match="Unknown event type"):
            to_event_type("progress")


class TestEventBus:
    """Tests for subscription and dispatch."""

    def test_handlers_run_in_subscription_order(self):
        bus = EventBus()
        calls = []
        bus.on("request", lambda payload: calls.append(("a", payload)))
        bus.on(EventType.REQUEST, lambda payload: calls.append(("b", payload)))

        bus.emit("request", 1)

        assert calls == [("a", 1), ("b", 1)]

    def test_unsubscribe_returned_by_on(self):
        bus = EventBus()
        calls = []
        unsubscribe = bus.on("response", calls.append)

        unsubscribe()
        bus.emit("response", "payload")

        assert calls == []
        assert bus.listener_count("response") == 0

    def test_off_unknown_handler_is_noop(self):
        bus = EventBus()
        bus.off("error", lambda payload: None)
        assert bus.listener_count("error") == 0

    def test_once_fires_a_single_time(self):
        bus = EventBus()
        calls = []
        bus.once("retry", calls.append)

        bus.emit("retry", 1)
        bus.emit("retry", 2)

        assert calls == [1]
        assert bus.listener_count("retry") == 0

    def test_once_can_be_removed_with_off(self):
        bus = EventBus()
        calls = []
        bus.once("retry", calls.append)

        bus.off("retry", calls.append)
        bus.emit("retry", 1)

        assert calls == []

    def test_same_handler_registered_once_twice(self):
        bus = EventBus()
        calls = []
        bus.once(EventType.REQUEST, calls.append)
        bus.once(EventType.REQUEST, calls.append)

        bus.emit(EventType.REQUEST, 1)
        bus.emit(EventType.REQUEST, 2)
        bus.emit(EventType.REQUEST, 3)

        assert calls == [1, 1]
        assert bus.listener_count(EventType.REQUEST) == 0

    def test_once_unsubscribe_removes_only_its_own_registration(self):
        bus = EventBus()
        calls = []
        bus.once("retry", calls.append)
        unsubscribe = bus.once("retry", calls.append)

        unsubscribe()
        bus.emit("retry", 1)
        bus.emit("retry", 2)

        assert calls == [1]
        assert bus.listener_count("retry") == 0

    def test_failing_handler_does_not_stop_others(self, caplog):
        """
        Path: handler raises -> logged and swallowed
        Decision: remaining handlers still run, emit() does not raise
        """
        bus = EventBus()
        calls = []

        def broken(payload):
            raise RuntimeError("boom")

        bus.on("error", broken)
        bus.on("error", calls.append)

        with caplog.at_level(logging.ERROR, logger="fetch_facade.events"):
            bus.emit("error", "payload")

        assert calls == ["payload"]
        assert "handler for 'error' raised" in caplog.text

    def test_handler_removed_during_emit_still_sees_current_event(self):
        bus = EventBus()
        calls = []

        def first(payload):
            calls.append("first")
            bus.off("request", second)

        def second(payload):
            calls.append("second")

        bus.on("request", first)
        bus.on("request", second)

        bus.emit("request")
        bus.emit("request")

        assert calls == ["first", "second", "first"]

    def test_clear_single_event(self):
        bus = EventBus()
        bus.on("request", lambda p: None)
        bus.on("response", lambda p: None)

        bus.clear("request")

        assert bus.listener_count("request") == 0
        assert bus.listener_count("response") == 1

    def test_clear_everything(self):
        bus = EventBus()
        bus.on("request", lambda p: None)
        bus.once("cache-hit", lambda p: None)

        bus.clear()

        assert all(bus.listener_count(e) == 0 for e in EventType)

    def test_emit_unknown_event_raises(self):
        bus = EventBus()
        with pytest.raises(ValueError):
            bus.emit("bogus")
