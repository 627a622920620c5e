"""Tests for the simulator's prize admin panel state."""

import logging

from prizewheel.core.events import EventType
from prizewheel.simulator.prize_editor import PrizeEditor
from prizewheel.wheel.prizes import DEFAULT_PRIZES, MAX_PRIZES, MIN_PRIZES


def test_toggle_and_close(controller):
    editor = PrizeEditor(controller)
    assert not editor.is_open
    assert editor.toggle() is True
    assert editor.toggle() is False

    editor.toggle()
    editor.close()
    assert not editor.is_open


def test_typed_label_added_and_persisted(controller, store, recorder):
    editor = PrizeEditor(controller)
    editor.type_text(" mug")
    editor.type_text("s ")

    assert editor.submit() == "MUGS"
    assert editor.text == ""
    assert editor.prizes[-1] == "MUGS"
    assert store.record[-1] == "MUGS"
    assert recorder.of(EventType.PRIZES_CHANGED)


def test_backspace_and_length_limit(controller):
    editor = PrizeEditor(controller, max_length=5)
    editor.type_text("abcdefgh")
    assert editor.text == "abcde"

    editor.backspace()
    editor.backspace()
    assert editor.text == "abc"

    editor.text = ""
    editor.backspace()
    assert editor.text == ""


def test_control_characters_dropped(controller):
    editor = PrizeEditor(controller)
    editor.type_text("a\tb\n")
    assert editor.text == "ab"


def test_blank_submit_rejected(controller, store, caplog):
    editor = PrizeEditor(controller)
    editor.type_text("   ")

    with caplog.at_level(logging.WARNING):
        assert editor.submit() is None
    assert controller.prizes == DEFAULT_PRIZES
    assert store.save_count == 0
    assert editor.message
    assert editor.text == "   "
    assert "rejected" in caplog.text


def test_full_wheel_rejects_add(make_controller, store):
    controller = make_controller(labels=[f"P{i}" for i in range(MAX_PRIZES)])
    editor = PrizeEditor(controller)
    editor.type_text("extra")

    assert editor.submit() is None
    assert len(editor.prizes) == MAX_PRIZES
    assert editor.text == "extra"
    assert store.save_count == 0


def test_remove_by_position(controller, store):
    editor = PrizeEditor(controller)
    assert editor.remove(0) == DEFAULT_PRIZES[0]
    assert editor.prizes == DEFAULT_PRIZES[1:]
    assert store.record == list(DEFAULT_PRIZES[1:])
    assert DEFAULT_PRIZES[0] in editor.message


def test_remove_at_minimum_rejected(make_controller, store):
    labels = [f"P{i}" for i in range(MIN_PRIZES)]
    editor = PrizeEditor(make_controller(labels=labels))

    assert editor.remove(0) is None
    assert editor.prizes == tuple(labels)
    assert store.save_count == 0
    assert editor.message


def test_remove_out_of_range_rejected(controller):
    editor = PrizeEditor(controller)
    assert editor.remove(len(DEFAULT_PRIZES)) is None
    assert editor.prizes == DEFAULT_PRIZES


def test_edits_rejected_while_spinning(controller, store):
    editor = PrizeEditor(controller)
    controller.spin()

    editor.type_text("mug")
    assert editor.submit() is None
    assert editor.remove(0) is None
    assert controller.prizes == DEFAULT_PRIZES
    assert store.save_count == 0
