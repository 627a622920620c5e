"""
Event bus for the prize wheel.

Input surfaces publish pointer, button and frame events; the spin
controller consumes them and publishes engine notifications that the
renderer and audio collaborators follow. A failing subscriber is logged
and skipped so it can never stall the wheel.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable
from enum import Enum, auto
from collections import defaultdict, deque
import asyncio
import inspect
import logging
import time

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Built-in event types."""
    # Input events
    POINTER_DOWN = auto()
    POINTER_MOVE = auto()
    POINTER_UP = auto()
    SPIN_BUTTON = auto()
    CLAIM = auto()

    # Engine events
    PHASE_CHANGED = auto()
    SPIN_STARTED = auto()
    SPIN_TICK = auto()  # Slice under the pointer changed
    WINNER_RESOLVED = auto()
    WINNER_CLAIMED = auto()
    WHEEL_UPDATED = auto()  # Rotation or prizes changed, redraw
    PRIZES_CHANGED = auto()

    # System events
    TICK = auto()  # Host frame, carries a timestamp in ms
    SHUTDOWN = auto()


@dataclass
class Event:
    """
    One published event.

    Attributes:
        type: EventType member, or a string for ad-hoc events
        data: Payload, keyed by field name
        source: Who published it ("wheel", "mouse", "keyboard", ...)
        timestamp: Wall-clock creation time
    """
    type: EventType | str
    data: dict[str, Any] = field(default_factory=dict)
    source: str = "system"
    timestamp: float = field(default_factory=time.time)


SyncHandler = Callable[[Event], None]
AsyncHandler = Callable[[Event], Awaitable[None]]
Handler = SyncHandler | AsyncHandler


def _remover(handlers: list[Handler], handler: Handler) -> Callable[[], None]:
    def unsubscribe() -> None:
        if handler in handlers:
            handlers.remove(handler)
    return unsubscribe


class EventBus:
    """
    Publish/subscribe hub shared by the wheel and its collaborators.

    `emit` runs plain handlers immediately, in subscription order, which
    is what the controller relies on for its own notifications. Coroutine
    handlers only run through `emit_async` or the frame queue.
    """

    def __init__(self, history_limit: int = 100) -> None:
        self._handlers: dict[EventType | str, list[Handler]] = defaultdict(list)
        self._wildcard: list[Handler] = []
        self._pending: asyncio.Queue[Event] = asyncio.Queue()
        self._history: deque[Event] = deque(maxlen=history_limit)

    def subscribe(self, event_type: EventType | str, handler: Handler) -> Callable[[], None]:
        """
        Register `handler` for one event type.

        Returns:
            A function that removes the subscription again
        """
        handlers = self._handlers[event_type]
        handlers.append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__qualname__', handler)} to {event_type}")
        return _remover(handlers, handler)

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        """Register `handler` for every event. Returns an unsubscribe function."""
        self._wildcard.append(handler)
        return _remover(self._wildcard, handler)

    def emit(self, event: Event) -> None:
        """Deliver an event to plain handlers now. Coroutine handlers are skipped."""
        self._history.append(event)
        for handler in self._targets(event):
            if not inspect.iscoroutinefunction(handler):
                self._call(handler, event)

    async def emit_async(self, event: Event) -> None:
        """Deliver an event to every handler, awaiting the coroutine ones."""
        self._history.append(event)
        await self._deliver(event)

    def queue_event(self, event: Event) -> None:
        """Hold an event until the next `process_queue`."""
        self._pending.put_nowait(event)

    async def process_queue(self) -> None:
        """Deliver everything queued so far (called once per frame)."""
        while not self._pending.empty():
            event = self._pending.get_nowait()
            self._history.append(event)
            await self._deliver(event)
            self._pending.task_done()

    def _targets(self, event: Event) -> list[Handler]:
        # Copy so handlers may (un)subscribe while being called
        return list(self._handlers.get(event.type, ())) + list(self._wildcard)

    def _call(self, handler: SyncHandler, event: Event) -> None:
        try:
            handler(event)
        except Exception as e:
            logger.error(f"Handler for {event.type} failed: {e}")

    async def _deliver(self, event: Event) -> None:
        pending = []
        for handler in self._targets(event):
            if inspect.iscoroutinefunction(handler):
                pending.append(asyncio.create_task(handler(event)))
            else:
                self._call(handler, event)

        if pending:
            for result in await asyncio.gather(*pending, return_exceptions=True):
                if isinstance(result, Exception):
                    logger.error(f"Async handler for {event.type} failed: {result}")

    def get_history(
        self,
        event_type: EventType | str | None = None,
        limit: int = 10
    ) -> list[Event]:
        """Most recent events, oldest first, optionally of one type."""
        events: Iterable[Event] = self._history
        if event_type is not None:
            events = (e for e in events if e.type == event_type)
        return list(events)[-limit:]

    def clear_history(self) -> None:
        self._history.clear()


def pointer_event(kind: EventType, y: float, t: float, source: str = "pointer") -> Event:
    """Pointer down/move/up at vertical position `y`, time `t` in ms."""
    return Event(kind, data={"y": y, "t": t}, source=source)


def spin_button_event(source: str = "button") -> Event:
    return Event(EventType.SPIN_BUTTON, source=source)


def claim_event(source: str = "button") -> Event:
    """Acknowledge the shown winner."""
    return Event(EventType.CLAIM, source=source)


def tick_event(timestamp_ms: float, frame: int) -> Event:
    """Host frame tick carrying the frame timestamp."""
    return Event(EventType.TICK, data={"timestamp": timestamp_ms, "frame": frame})
