"""Tests for keyboard shortcut dispatch."""

from types import SimpleNamespace

import pytest
from PyQt5.QtCore import Qt

from polymark.config import ToolConfig, ViewConfig
from polymark.controllers import AnnotationController, UserInputHandler, ViewController
from polymark.controllers.input_handler import ROTATE_STEP, SCALE_STEP
from polymark.core.annotations import ToolKind


class KeyEvent:
    """Stand-in for QKeyEvent; only the calls the handler makes."""

    def __init__(self, key, modifiers=Qt.NoModifier):
        self._key = key
        self._modifiers = modifiers
        self.accepted = None

    def key(self):
        return self._key

    def modifiers(self):
        return self._modifiers

    def matches(self, _sequence):
        return False

    def accept(self):
        self.accepted = True

    def ignore(self):
        self.accepted = False


@pytest.fixture
def window(qapp, store):
    view = ViewController(ViewConfig())
    view.set_document_info(2)
    return SimpleNamespace(
        annotation_controller=AnnotationController(store, ToolConfig()),
        view_controller=view,
    )


@pytest.fixture
def handler(window):
    return UserInputHandler(window)


CTRL_SHIFT = Qt.ControlModifier | Qt.ShiftModifier


@pytest.mark.parametrize(
    "key, factor",
    [
        (Qt.Key_Plus, SCALE_STEP),
        (Qt.Key_Equal, SCALE_STEP),
        (Qt.Key_Underscore, 1 / SCALE_STEP),
        (Qt.Key_Minus, 1 / SCALE_STEP),
    ],
)
def test_ctrl_shift_scales_selection(handler, window, key, factor):
    annotations = window.annotation_controller
    annotations.select_ids(["1-1"])

    event = KeyEvent(key, CTRL_SHIFT)
    assert handler.handle_key_press(event)
    assert event.accepted

    transform = annotations.store.get(1, "1-1").transform
    assert transform.scale_x == pytest.approx(factor)
    assert window.view_controller.zoom_level == 1.0


def test_scale_keys_need_select_tool(handler, window):
    annotations = window.annotation_controller
    annotations.select_ids(["1-1"])
    annotations.set_tool(ToolKind.LINE)

    assert handler.handle_key_press(KeyEvent(Qt.Key_Plus, CTRL_SHIFT))
    assert annotations.store.get(1, "1-1").transform.scale_x == 1.0


def test_ctrl_plus_still_zooms(handler, window):
    assert handler.handle_key_press(KeyEvent(Qt.Key_Equal, Qt.ControlModifier))
    assert window.view_controller.zoom_level == 1.25


def test_brackets_rotate_selection(handler, window):
    annotations = window.annotation_controller
    annotations.select_ids(["1-0"])
    handler.handle_key_press(KeyEvent(Qt.Key_BracketRight))
    assert annotations.store.get(1, "1-0").transform.rotation_degrees == ROTATE_STEP


def test_unhandled_key_is_ignored(handler):
    event = KeyEvent(Qt.Key_Q)
    assert not handler.handle_key_press(event)
    assert event.accepted is False
