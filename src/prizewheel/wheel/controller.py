"""
Spin controller: the wheel's state machine.

Phases:
    IDLE --drag_start--> DRAGGING
    DRAGGING --drag_end (fast)--> SPINNING
    DRAGGING --drag_end (slow)--> IDLE
    IDLE --spin--> SPINNING
    SPINNING --policy stop--> RESOLVED
    RESOLVED --claim--> IDLE

The controller is the single owner of the rotation state and the prize
list. Renderers, audio and the admin surface talk to it through its
methods or the event bus and never mutate either directly.

While DRAGGING the input translator is the only thing that moves the
wheel; ticks are suspended until the drag ends.
"""

from dataclasses import dataclass, replace
from typing import Any, Callable, Optional
import logging
import random

from prizewheel.config.settings import Settings
from prizewheel.core.errors import StateError, WheelError
from prizewheel.core.events import Event, EventBus, EventType
from prizewheel.core.state import PhaseMachine, WheelPhase
from prizewheel.storage.prize_store import PrizeStore, load_or_default
from prizewheel.wheel.clock import FrameClock
from prizewheel.wheel.input import InputTranslator, PointerSample
from prizewheel.wheel.policy import SpinPolicy, build_policy
from prizewheel.wheel.prizes import PrizeSet
from prizewheel.wheel.resolver import resolve
from prizewheel.wheel.rotation import RotationState

logger = logging.getLogger(__name__)

INPUT_EVENTS = (
    EventType.POINTER_DOWN,
    EventType.POINTER_MOVE,
    EventType.POINTER_UP,
    EventType.SPIN_BUTTON,
    EventType.CLAIM,
    EventType.TICK,
)


@dataclass(frozen=True)
class Winner:
    """Outcome of one spin."""
    index: int
    label: str
    rotation_degrees: float


class SpinController:
    """Orchestrates input, physics and winner resolution for one wheel."""

    def __init__(
        self,
        prizes: PrizeSet,
        policy: SpinPolicy,
        event_bus: Optional[EventBus] = None,
        store: Optional[PrizeStore] = None,
        translator: Optional[InputTranslator] = None,
        rng: Optional[random.Random] = None,
    ):
        self._prizes = prizes
        self._policy = policy
        self._bus = event_bus or EventBus()
        self._store = store
        self._translator = translator or InputTranslator()
        self._rng = rng or random.Random()

        self._state = RotationState()
        self._machine = PhaseMachine(self._state)
        self._machine.add_listener(self._on_phase_changed)
        self._clock = FrameClock()

        self._winner: Optional[Winner] = None
        self._pointer_index = resolve(self.display_rotation, len(self._prizes))

        logger.info(
            f"SpinController ready: {len(self._prizes)} prizes, policy={policy.name}"
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: PrizeStore,
        event_bus: Optional[EventBus] = None,
    ) -> "SpinController":
        """Build a controller from settings, loading prizes from `store`."""
        physics = settings.physics
        translator = InputTranslator(
            sensitivity=physics.drag_sensitivity,
            frame_ms=physics.frame_ms,
            max_velocity=physics.max_velocity,
            spin_threshold=physics.spin_threshold,
        )
        return cls(
            prizes=load_or_default(store),
            policy=build_policy(settings),
            event_bus=event_bus,
            store=store,
            translator=translator,
            rng=random.Random(settings.seed),
        )

    # ===== READ-ONLY VIEW =====

    @property
    def phase(self) -> WheelPhase:
        return self._state.phase

    @property
    def state(self) -> RotationState:
        """Copy of the rotation state."""
        return replace(self._state)

    @property
    def rotation_degrees(self) -> float:
        return self._state.rotation_degrees

    @property
    def angular_velocity(self) -> float:
        return self._state.angular_velocity

    @property
    def display_rotation(self) -> float:
        """Angle to draw the wheel at (may lag the target under a timed spin)."""
        return self._policy.display_rotation(self._state)

    @property
    def prizes(self) -> tuple[str, ...]:
        return self._prizes.all()

    @property
    def winner(self) -> Optional[Winner]:
        return self._winner

    @property
    def policy(self) -> SpinPolicy:
        return self._policy

    @property
    def event_bus(self) -> EventBus:
        return self._bus

    @property
    def needs_tick(self) -> bool:
        """Whether the host should keep delivering ticks."""
        if self._state.phase == WheelPhase.DRAGGING:
            return False
        return self._policy.is_active(self._state)

    # ===== SPIN =====

    def spin(self) -> None:
        """Start a spin from the spin button.

        Raises:
            StateError: Unless the wheel is IDLE. Nothing changes.
        """
        if self._state.phase != WheelPhase.IDLE:
            raise StateError(f"Cannot spin while {self._state.phase.name}")

        self._policy.launch(self._state, self._rng)
        self._start_spin("button")

    def _start_spin(self, source: str) -> None:
        # The host may resume ticks after a long pause
        self._clock.reset()
        self._machine.transition(WheelPhase.SPINNING)
        logger.info(
            f"Spin started ({source}): velocity={self._state.angular_velocity:.2f}"
        )
        self._emit(EventType.SPIN_STARTED, {
            "source": source,
            "velocity": self._state.angular_velocity,
            "rotation": self._state.rotation_degrees,
        })
        self._emit_wheel_updated()

    # ===== DRAG =====

    def drag_start(self, y: float, t: float) -> None:
        """Pointer went down on the wheel.

        Raises:
            StateError: Unless the wheel is IDLE.
        """
        if self._state.phase != WheelPhase.IDLE:
            raise StateError(f"Cannot drag while {self._state.phase.name}")

        self._state.angular_velocity = 0.0
        self._translator.begin(PointerSample(y, t))
        # Ticks are suspended for the whole drag
        self._clock.reset()
        self._machine.transition(WheelPhase.DRAGGING)

    def drag_move(self, y: float, t: float) -> bool:
        """Pointer moved. Returns False if no drag is in progress."""
        if self._state.phase != WheelPhase.DRAGGING:
            return False

        if self._translator.move(self._state, PointerSample(y, t)):
            self._sync_pointer(cue=False)
            self._emit_wheel_updated()
        return True

    def drag_end(self) -> bool:
        """Pointer released. Returns False if no drag is in progress."""
        if self._state.phase != WheelPhase.DRAGGING:
            return False

        if self._translator.release(self._state):
            self._policy.release(self._state, self._rng)
            self._start_spin("drag")
        else:
            self._machine.transition(WheelPhase.IDLE)
            self._policy.settle(self._state)
            logger.debug(
                f"Drag settled with residual velocity {self._state.angular_velocity:.2f}"
            )
        return True

    # ===== TICKS =====

    def tick(self, dt_ms: float) -> bool:
        """Advance the wheel by `dt_ms` of host time.

        Returns:
            True while further ticks are wanted
        """
        state = self._state
        if state.phase == WheelPhase.DRAGGING:
            return False
        if not self._policy.is_active(state):
            return False
        if dt_ms <= 0:
            return True

        should_stop = self._policy.step(state, dt_ms)
        self._sync_pointer(cue=state.phase == WheelPhase.SPINNING)

        if should_stop and state.phase == WheelPhase.SPINNING:
            self._resolve()

        self._emit_wheel_updated()
        return self.needs_tick

    def on_frame(self, timestamp_ms: float) -> bool:
        """Host frame callback carrying an absolute timestamp in ms."""
        if self._state.phase == WheelPhase.DRAGGING:
            self._clock.reset()
            return False
        wants_more = self.tick(self._clock.advance(timestamp_ms))
        if not wants_more:
            # Tick stream ends here; the next frame is a new baseline
            self._clock.reset()
        return wants_more

    def _resolve(self) -> None:
        state = self._state
        index = resolve(state.rotation_degrees, len(self._prizes))
        self._policy.finish(state)
        self._winner = Winner(index, self._prizes[index], state.rotation_degrees)
        self._machine.transition(WheelPhase.RESOLVED)
        self._sync_pointer(cue=False)

        logger.info(
            f"Winner: #{index} {self._winner.label} "
            f"(rotation={state.rotation_degrees:.2f})"
        )
        self._emit(EventType.WINNER_RESOLVED, {
            "index": index,
            "label": self._winner.label,
            "rotation": state.rotation_degrees,
        })

    # ===== CLAIM =====

    def claim(self) -> Winner:
        """Acknowledge the resolved winner and return to IDLE.

        Raises:
            StateError: Unless the wheel is RESOLVED.
        """
        if self._state.phase != WheelPhase.RESOLVED or self._winner is None:
            raise StateError(f"Nothing to claim while {self._state.phase.name}")

        winner = self._winner
        self._state.angular_velocity = 0.0
        self._clock.reset()
        self._winner = None
        self._machine.transition(WheelPhase.IDLE)
        self._emit(EventType.WINNER_CLAIMED, {
            "index": winner.index,
            "label": winner.label,
        })
        return winner

    # ===== ADMIN =====

    def add_prize(self, label: str) -> str:
        """Append a prize, persist and redraw. Returns the stored label."""
        self._guard_prize_mutation()
        value = self._prizes.add(label)
        logger.info(f"Prize added: {value}")
        self._prizes_changed()
        return value

    def remove_prize(self, index: int) -> str:
        """Remove a prize, persist and redraw. Returns the removed label."""
        self._guard_prize_mutation()
        value = self._prizes.remove(index)
        logger.info(f"Prize removed: {value}")
        self._prizes_changed()
        return value

    def _guard_prize_mutation(self) -> None:
        # Slice count must stay fixed until the running spin resolves
        if self._state.phase == WheelPhase.SPINNING:
            raise StateError("Cannot edit prizes while the wheel is spinning")

    def _prizes_changed(self) -> None:
        if self._store is not None:
            self._store.save(self._prizes)
        self._sync_pointer(cue=False)
        self._emit(EventType.PRIZES_CHANGED, {"prizes": list(self._prizes.all())})
        self._emit_wheel_updated()

    # ===== EVENT BUS =====

    def handle_event(self, event: Event) -> bool:
        """Apply an input event.

        Returns:
            True if the event was handled, False if ignored or rejected
        """
        data = event.data
        try:
            if event.type == EventType.POINTER_DOWN:
                self.drag_start(data["y"], data["t"])
                return True
            if event.type == EventType.POINTER_MOVE:
                return self.drag_move(data["y"], data["t"])
            if event.type == EventType.POINTER_UP:
                return self.drag_end()
            if event.type == EventType.SPIN_BUTTON:
                self.spin()
                return True
            if event.type == EventType.CLAIM:
                self.claim()
                return True
            if event.type == EventType.TICK:
                self.on_frame(data["timestamp"])
                return True
        except WheelError as e:
            logger.warning(f"Rejected {event.type}: {e}")
            return False
        return False

    def attach(self) -> Callable[[], None]:
        """Subscribe to input events on the bus. Returns a detach function."""
        unsubscribers = [
            self._bus.subscribe(event_type, self.handle_event)
            for event_type in INPUT_EVENTS
        ]

        def detach() -> None:
            for unsubscribe in unsubscribers:
                unsubscribe()

        return detach

    def _emit(self, event_type: EventType, data: dict[str, Any]) -> None:
        self._bus.emit(Event(event_type, data=data, source="wheel"))

    def _emit_wheel_updated(self) -> None:
        self._emit(EventType.WHEEL_UPDATED, {
            "prizes": self._prizes.all(),
            "rotation": self._state.rotation_degrees,
            "display_rotation": self.display_rotation,
            "phase": self._state.phase.name,
        })

    def _sync_pointer(self, cue: bool) -> None:
        """Track the slice under the pointer; emit a tick cue when it changes."""
        index = resolve(self.display_rotation, len(self._prizes))
        if index != self._pointer_index:
            self._pointer_index = index
            if cue:
                self._emit(EventType.SPIN_TICK, {"index": index})

    def _on_phase_changed(self, old_phase: WheelPhase, new_phase: WheelPhase) -> None:
        self._emit(EventType.PHASE_CHANGED, {
            "from": old_phase.name,
            "to": new_phase.name,
        })
