"""Tests for the spin controller state machine."""

import math

import pytest

from prizewheel.config.settings import Settings
from prizewheel.core.errors import CapacityError, StateError, ValidationError
from prizewheel.core.events import (
    EventType,
    claim_event,
    pointer_event,
    spin_button_event,
    tick_event,
)
from prizewheel.core.state import WheelPhase
from prizewheel.storage.prize_store import MemoryPrizeStore
from prizewheel.wheel.controller import SpinController
from prizewheel.wheel.policy import TimedPolicy
from prizewheel.wheel.prizes import DEFAULT_PRIZES, MAX_PRIZES, PrizeSet
from prizewheel.wheel.resolver import resolve


def fast_drag(controller, start_y=100.0, end_y=160.0):
    """Drag 30 degrees in one 16ms frame and release."""
    controller.drag_start(start_y, 0)
    controller.drag_move(end_y, 16)
    return controller.drag_end()


class TestInitialState:

    def test_starts_idle(self, controller):
        assert controller.phase == WheelPhase.IDLE
        assert controller.rotation_degrees == 0
        assert controller.angular_velocity == 0
        assert controller.winner is None
        assert controller.prizes == DEFAULT_PRIZES
        assert not controller.needs_tick

    def test_state_is_a_copy(self, controller):
        snapshot = controller.state
        snapshot.rotation_degrees = 999
        assert controller.rotation_degrees == 0


class TestSpinButton:

    def test_spin_starts(self, controller, recorder):
        controller.spin()

        assert controller.phase == WheelPhase.SPINNING
        assert 30 <= controller.angular_velocity <= 50
        assert controller.needs_tick
        started = recorder.of(EventType.SPIN_STARTED)
        assert len(started) == 1
        assert started[0].data["source"] == "button"
        phases = recorder.of(EventType.PHASE_CHANGED)
        assert phases[-1].data == {"from": "IDLE", "to": "SPINNING"}

    def test_spin_while_spinning_rejected(self, controller):
        controller.spin()
        before = controller.state

        with pytest.raises(StateError):
            controller.spin()
        assert controller.state == before

    def test_drag_while_spinning_rejected(self, controller):
        controller.spin()
        before = controller.state

        with pytest.raises(StateError):
            controller.drag_start(10, 0)
        assert controller.state == before

    def test_winner_resolved_exactly_once(self, controller, recorder, run_to_resolved):
        controller.spin()
        ticks = run_to_resolved(controller)

        assert controller.phase == WheelPhase.RESOLVED
        assert 0 < ticks < 1000
        winner = controller.winner
        assert winner is not None
        assert winner.index == resolve(controller.rotation_degrees, len(DEFAULT_PRIZES))
        assert winner.label == DEFAULT_PRIZES[winner.index]
        assert controller.angular_velocity == 0

        # More ticks change nothing
        rotation = controller.rotation_degrees
        for _ in range(50):
            assert controller.tick(16) is False
        assert controller.rotation_degrees == rotation
        assert len(recorder.of(EventType.WINNER_RESOLVED)) == 1

        event = recorder.of(EventType.WINNER_RESOLVED)[0]
        assert event.data["index"] == winner.index
        assert event.data["label"] == winner.label

    def test_pointer_cues_while_spinning(self, controller, recorder, run_to_resolved):
        controller.spin()
        run_to_resolved(controller)
        assert len(recorder.of(EventType.SPIN_TICK)) > 10

    def test_resolved_rejects_spin_and_drag(self, controller, run_to_resolved):
        controller.spin()
        run_to_resolved(controller)

        with pytest.raises(StateError):
            controller.spin()
        with pytest.raises(StateError):
            controller.drag_start(0, 0)
        assert controller.phase == WheelPhase.RESOLVED

    def test_zero_dt_tick_is_noop(self, controller):
        controller.spin()
        before = controller.state
        assert controller.tick(0) is True
        assert controller.state == before


class TestClaim:

    def test_claim_returns_to_idle(self, controller, recorder, run_to_resolved):
        controller.spin()
        run_to_resolved(controller)
        winner = controller.winner

        assert controller.claim() == winner
        assert controller.phase == WheelPhase.IDLE
        assert controller.winner is None
        assert controller.angular_velocity == 0
        claimed = recorder.of(EventType.WINNER_CLAIMED)
        assert claimed[0].data == {"index": winner.index, "label": winner.label}

    def test_claim_outside_resolved_rejected(self, controller):
        with pytest.raises(StateError):
            controller.claim()
        controller.spin()
        with pytest.raises(StateError):
            controller.claim()

    def test_spin_again_after_claim(self, controller, run_to_resolved):
        controller.spin()
        run_to_resolved(controller)
        controller.claim()

        controller.spin()
        assert controller.phase == WheelPhase.SPINNING


class TestDrag:

    def test_fast_release_spins(self, controller, recorder):
        assert fast_drag(controller) is True

        assert controller.phase == WheelPhase.SPINNING
        assert controller.rotation_degrees == 30
        assert controller.angular_velocity == 30
        assert recorder.of(EventType.SPIN_STARTED)[0].data["source"] == "drag"

    def test_release_velocity_clamped(self, controller):
        fast_drag(controller, 0, 1000)
        assert controller.angular_velocity == 50

    def test_ticks_suspended_while_dragging(self, controller):
        controller.drag_start(100, 0)
        controller.drag_move(140, 16)
        rotation = controller.rotation_degrees

        assert controller.tick(16) is False
        assert controller.rotation_degrees == rotation
        assert controller.phase == WheelPhase.DRAGGING
        assert not controller.needs_tick

    def test_drag_start_zeroes_coasting(self, controller):
        controller.drag_start(100, 0)
        controller.drag_move(103, 16)
        controller.drag_end()
        assert controller.angular_velocity == 1.5

        controller.drag_start(0, 100)
        assert controller.angular_velocity == 0

    def test_slow_release_coasts_without_winner(self, controller, recorder, run_to_rest):
        controller.drag_start(100, 0)
        controller.drag_move(103, 16)
        assert controller.drag_end() is True

        assert controller.phase == WheelPhase.IDLE
        assert controller.needs_tick
        run_to_rest(controller)

        assert controller.phase == WheelPhase.IDLE
        assert controller.rotation_degrees > 1.5
        assert abs(controller.angular_velocity) <= 0.01
        assert controller.winner is None
        assert recorder.of(EventType.WINNER_RESOLVED) == []
        assert recorder.of(EventType.SPIN_STARTED) == []

    def test_move_and_end_without_drag_ignored(self, controller):
        assert controller.drag_move(10, 0) is False
        assert controller.drag_end() is False
        assert controller.phase == WheelPhase.IDLE

    def test_drag_updates_wheel(self, controller, recorder):
        controller.drag_start(100, 0)
        controller.drag_move(110, 16)
        updates = recorder.of(EventType.WHEEL_UPDATED)
        assert updates[-1].data["rotation"] == 5
        assert updates[-1].data["phase"] == "DRAGGING"


class TestTimedController:

    def test_drag_release_uses_fixed_duration(self, make_controller, recorder, run_to_resolved):
        controller = make_controller(policy=TimedPolicy())
        fast_drag(controller)

        assert controller.phase == WheelPhase.SPINNING
        assert controller.angular_velocity == 0
        assert controller.rotation_degrees >= 30 + 7 * 360

        ticks = run_to_resolved(controller)
        assert ticks == math.ceil(5000 / 16)
        assert controller.winner.index == resolve(controller.rotation_degrees, 8)
        assert controller.display_rotation == controller.rotation_degrees
        assert len(recorder.of(EventType.WINNER_RESOLVED)) == 1

    def test_display_lags_target_mid_spin(self, make_controller):
        controller = make_controller(policy=TimedPolicy())
        controller.spin()
        controller.tick(1000)
        assert controller.display_rotation < controller.rotation_degrees

    def test_slow_release_does_not_coast(self, make_controller):
        controller = make_controller(policy=TimedPolicy())
        controller.drag_start(100, 0)
        controller.drag_move(103, 16)
        controller.drag_end()

        assert controller.phase == WheelPhase.IDLE
        assert controller.angular_velocity == 0
        assert not controller.needs_tick
        assert controller.tick(16) is False


class TestFrames:

    def test_first_frame_is_baseline(self, controller):
        controller.spin()
        velocity = controller.angular_velocity

        assert controller.on_frame(1000) is True
        assert controller.rotation_degrees == 0

        controller.on_frame(1016)
        assert controller.rotation_degrees == pytest.approx(velocity)

    def test_clock_restarts_after_drag(self, controller):
        controller.drag_start(100, 0)
        assert controller.on_frame(5000) is False
        controller.drag_move(160, 16)
        controller.drag_end()
        rotation = controller.rotation_degrees

        # Time spent dragging is not replayed
        controller.on_frame(9000)
        assert controller.rotation_degrees == rotation
        controller.on_frame(9016)
        assert controller.rotation_degrees == pytest.approx(rotation + 30)

    def test_pause_between_spins_not_replayed(self, make_controller):
        controller = make_controller(policy=TimedPolicy())
        controller.spin()
        t = 0
        while controller.on_frame(t) and t < 60000:
            t += 16
        assert controller.phase == WheelPhase.RESOLVED
        controller.claim()

        # A minute passes on the host before the next spin
        controller.spin()
        assert controller.on_frame(t + 60000) is True
        assert controller.phase == WheelPhase.SPINNING
        assert controller.policy.elapsed_ms == 0

        controller.on_frame(t + 60016)
        assert controller.policy.elapsed_ms == 16
        assert controller.phase == WheelPhase.SPINNING

    def test_idle_frames_do_not_leak_into_spin(self, controller):
        assert controller.on_frame(0) is False

        controller.spin()
        velocity = controller.angular_velocity
        assert controller.on_frame(10000) is True
        assert controller.rotation_degrees == 0

        controller.on_frame(10016)
        assert controller.rotation_degrees == pytest.approx(velocity)

    def test_coast_then_pause_then_spin(self, controller):
        controller.drag_start(100, 0)
        controller.drag_move(103, 16)
        controller.drag_end()
        t = 0
        while controller.on_frame(t) and t < 60000:
            t += 16
        assert controller.phase == WheelPhase.IDLE
        rotation = controller.rotation_degrees

        controller.spin()
        controller.on_frame(t + 30000)
        assert controller.rotation_degrees == rotation


class TestPrizeAdmin:

    def test_add_persists_and_notifies(self, controller, store, recorder):
        assert controller.add_prize(" mug ") == "MUG"

        assert controller.prizes[-1] == "MUG"
        assert store.record[-1] == "MUG"
        changed = recorder.of(EventType.PRIZES_CHANGED)
        assert changed[-1].data["prizes"][-1] == "MUG"
        assert recorder.of(EventType.WHEEL_UPDATED)

    def test_remove_persists(self, controller, store):
        assert controller.remove_prize(0) == DEFAULT_PRIZES[0]
        assert store.record == list(DEFAULT_PRIZES[1:])

    def test_edits_rejected_while_spinning(self, controller, store):
        controller.spin()
        saves = store.save_count

        with pytest.raises(StateError):
            controller.add_prize("MUG")
        with pytest.raises(StateError):
            controller.remove_prize(0)
        assert controller.prizes == DEFAULT_PRIZES
        assert store.save_count == saves

    def test_full_wheel_edit_not_persisted(self, make_controller, store):
        controller = make_controller(labels=[f"P{i}" for i in range(MAX_PRIZES)])
        with pytest.raises(CapacityError):
            controller.add_prize("EXTRA")
        assert len(controller.prizes) == MAX_PRIZES
        assert store.save_count == 0

    def test_blank_label_not_persisted(self, controller, store):
        with pytest.raises(ValidationError):
            controller.add_prize("   ")
        assert controller.prizes == DEFAULT_PRIZES
        assert store.save_count == 0

    def test_edit_allowed_while_resolved(self, controller, run_to_resolved):
        controller.spin()
        run_to_resolved(controller)
        winner = controller.winner

        controller.add_prize("MUG")
        assert controller.winner == winner
        assert len(controller.prizes) == 9


class TestEventBusWiring:

    def test_input_events_drive_controller(self, controller, bus, run_to_resolved):
        controller.attach()

        bus.emit(spin_button_event())
        assert controller.phase == WheelPhase.SPINNING

        # Rejected input does not disturb the spin
        bus.emit(pointer_event(EventType.POINTER_DOWN, 10, 0))
        assert controller.phase == WheelPhase.SPINNING

        frame = 0
        while controller.phase == WheelPhase.SPINNING and frame < 5000:
            bus.emit(tick_event(frame * 16, frame))
            frame += 1
        assert controller.phase == WheelPhase.RESOLVED

        bus.emit(claim_event())
        assert controller.phase == WheelPhase.IDLE

    def test_pointer_events_drag(self, controller, bus):
        controller.attach()
        bus.emit(pointer_event(EventType.POINTER_DOWN, 100, 0))
        bus.emit(pointer_event(EventType.POINTER_MOVE, 160, 16))
        bus.emit(pointer_event(EventType.POINTER_UP, 160, 16))

        assert controller.phase == WheelPhase.SPINNING
        assert controller.angular_velocity == 30

    def test_handle_event_reports_rejection(self, controller):
        assert controller.handle_event(claim_event()) is False
        assert controller.handle_event(spin_button_event()) is True
        assert controller.handle_event(spin_button_event()) is False

    def test_detach(self, controller, bus):
        detach = controller.attach()
        detach()
        bus.emit(spin_button_event())
        assert controller.phase == WheelPhase.IDLE


class TestFromSettings:

    def test_loads_and_seeds(self):
        settings = Settings(_env_file=None, seed=7)
        first = SpinController.from_settings(settings, MemoryPrizeStore())
        second = SpinController.from_settings(settings, MemoryPrizeStore())
        first.spin()
        second.spin()
        assert first.angular_velocity == second.angular_velocity

    def test_uses_stored_prizes(self):
        store = MemoryPrizeStore(["A", "B", "C"])
        controller = SpinController.from_settings(Settings(_env_file=None), store)
        assert controller.prizes == ("A", "B", "C")
        assert store.save_count == 0

    def test_invalid_record_falls_back(self):
        store = MemoryPrizeStore(["ONLY"])
        controller = SpinController.from_settings(Settings(_env_file=None), store)
        assert controller.prizes == PrizeSet.default().all()
        assert store.record == list(DEFAULT_PRIZES)
