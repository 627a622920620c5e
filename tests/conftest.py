"""Shared fixtures for the prize wheel tests."""

import random

import pytest

from prizewheel.core.events import Event, EventBus, EventType
from prizewheel.core.state import WheelPhase
from prizewheel.storage.prize_store import MemoryPrizeStore
from prizewheel.wheel.controller import SpinController
from prizewheel.wheel.policy import DecayPolicy
from prizewheel.wheel.prizes import PrizeSet


class EventRecorder:
    """Collects every event emitted on a bus."""

    def __init__(self, bus: EventBus) -> None:
        self.events: list[Event] = []
        bus.subscribe_all(self.events.append)

    def of(self, event_type: EventType) -> list[Event]:
        return [e for e in self.events if e.type == event_type]

    def types(self) -> list[EventType]:
        return [e.type for e in self.events]

    def clear(self) -> None:
        self.events.clear()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def recorder(bus):
    return EventRecorder(bus)


@pytest.fixture
def store():
    return MemoryPrizeStore()


@pytest.fixture
def make_controller(bus, store, rng):
    """Factory for controllers sharing the test bus, store and rng."""
    def factory(policy=None, labels=None, **kwargs):
        prizes = PrizeSet(labels) if labels is not None else PrizeSet.default()
        return SpinController(
            prizes,
            policy or DecayPolicy(),
            event_bus=bus,
            store=store,
            rng=rng,
            **kwargs,
        )
    return factory


@pytest.fixture
def controller(make_controller):
    return make_controller()


@pytest.fixture
def run_to_rest():
    """Tick a controller at 16ms until it stops asking for ticks."""
    def run(controller: SpinController, dt_ms: float = 16.0, limit: int = 100_000) -> int:
        ticks = 0
        while ticks < limit:
            ticks += 1
            if not controller.tick(dt_ms):
                break
        return ticks
    return run


@pytest.fixture
def run_to_resolved():
    """Tick a spinning controller at 16ms until it resolves."""
    def run(controller: SpinController, dt_ms: float = 16.0, limit: int = 100_000) -> int:
        ticks = 0
        while controller.phase == WheelPhase.SPINNING and ticks < limit:
            controller.tick(dt_ms)
            ticks += 1
        return ticks
    return run
