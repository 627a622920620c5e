"""Tests for the event bus and phase machine."""

import asyncio

from prizewheel.core.events import (
    Event,
    EventBus,
    EventType,
    pointer_event,
    tick_event,
)
from prizewheel.core.state import PhaseMachine, WheelPhase
from prizewheel.wheel.clock import FrameClock
from prizewheel.wheel.rotation import RotationState


class TestEventBus:

    def test_subscribe_and_unsubscribe(self):
        bus = EventBus()
        seen = []
        unsubscribe = bus.subscribe(EventType.SPIN_BUTTON, seen.append)

        bus.emit(Event(EventType.SPIN_BUTTON))
        bus.emit(Event(EventType.CLAIM))
        assert [e.type for e in seen] == [EventType.SPIN_BUTTON]

        unsubscribe()
        bus.emit(Event(EventType.SPIN_BUTTON))
        assert len(seen) == 1

    def test_subscribe_all(self):
        bus = EventBus()
        seen = []
        bus.subscribe_all(seen.append)
        bus.emit(Event(EventType.CLAIM))
        bus.emit(Event("custom"))
        assert [e.type for e in seen] == [EventType.CLAIM, "custom"]

    def test_failing_handler_isolated(self):
        bus = EventBus()
        seen = []

        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe(EventType.TICK, broken)
        bus.subscribe(EventType.TICK, seen.append)
        bus.emit(tick_event(16, 1))
        assert len(seen) == 1

    def test_history_limit(self):
        bus = EventBus(history_limit=3)
        for frame in range(5):
            bus.emit(tick_event(frame * 16, frame))

        history = bus.get_history(EventType.TICK, limit=10)
        assert [e.data["frame"] for e in history] == [2, 3, 4]
        bus.clear_history()
        assert bus.get_history() == []

    def test_queue_runs_async_handlers(self):
        bus = EventBus()
        seen = []

        async def handler(event):
            seen.append(event.data["y"])

        bus.subscribe(EventType.POINTER_MOVE, handler)
        bus.queue_event(pointer_event(EventType.POINTER_MOVE, 12, 0))
        bus.queue_event(pointer_event(EventType.POINTER_MOVE, 30, 16))

        asyncio.run(bus.process_queue())
        assert seen == [12, 30]

    def test_emit_skips_async_handlers(self):
        bus = EventBus()
        seen = []

        async def handler(event):
            seen.append(event)

        bus.subscribe(EventType.CLAIM, handler)
        bus.emit(Event(EventType.CLAIM))
        assert seen == []

    def test_helpers(self):
        event = pointer_event(EventType.POINTER_DOWN, 40.0, 1200.0)
        assert event.data == {"y": 40.0, "t": 1200.0}
        assert tick_event(500, 3).data == {"timestamp": 500, "frame": 3}


class TestPhaseMachine:

    def test_valid_path(self):
        state = RotationState()
        machine = PhaseMachine(state)
        for phase in (WheelPhase.DRAGGING, WheelPhase.SPINNING,
                      WheelPhase.RESOLVED, WheelPhase.IDLE):
            assert machine.transition(phase)
            assert state.phase == phase

    def test_invalid_transition_refused(self):
        state = RotationState()
        machine = PhaseMachine(state)
        assert not machine.transition(WheelPhase.RESOLVED)
        assert state.phase == WheelPhase.IDLE

        machine.transition(WheelPhase.SPINNING)
        assert not machine.can_transition(WheelPhase.DRAGGING)
        assert not machine.can_transition(WheelPhase.IDLE)

    def test_listeners(self):
        machine = PhaseMachine(RotationState())
        changes = []

        def broken(old, new):
            raise RuntimeError("listener failed")

        machine.add_listener(broken)
        machine.add_listener(lambda old, new: changes.append((old, new)))
        machine.transition(WheelPhase.DRAGGING)
        assert changes == [(WheelPhase.IDLE, WheelPhase.DRAGGING)]

        machine.remove_listener(broken)
        machine.transition(WheelPhase.IDLE)
        assert len(changes) == 2


class TestFrameClock:

    def test_first_timestamp_is_baseline(self):
        clock = FrameClock()
        assert not clock.has_baseline
        assert clock.advance(1000) == 0
        assert clock.has_baseline
        assert clock.advance(1016) == 16
        assert clock.advance(1050) == 34

    def test_never_negative(self):
        clock = FrameClock()
        clock.advance(1000)
        assert clock.advance(900) == 0
        assert clock.advance(916) == 16

    def test_reset(self):
        clock = FrameClock()
        clock.advance(1000)
        clock.reset()
        assert clock.advance(5000) == 0
