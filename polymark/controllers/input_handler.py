from PyQt5.QtCore import Qt
from PyQt5.QtGui import QKeySequence

from polymark.core.annotations import ToolKind

# Rotation step for the selected shapes, in degrees
ROTATE_STEP = 15
# Scale factor per step for the selected shapes
SCALE_STEP = 1.1


class UserInputHandler:
    """
    Handles keyboard shortcuts for the main window.
    """
    def __init__(self, main_window):
        """
        Initializes the handler with a reference to the main window.

        Args:
            main_window (MainWindow): A reference to the main application window.
        """
        self.main_window = main_window

    def handle_key_press(self, event):
        """
        Handles key press events for the main window.

        Returns:
            bool: True if the event was consumed
        """
        window = self.main_window
        annotations = window.annotation_controller
        key = event.key()
        ctrl = bool(event.modifiers() & Qt.ControlModifier)
        shift = bool(event.modifiers() & Qt.ShiftModifier)
        select_tool = annotations.tool == ToolKind.SELECT

        if event.matches(QKeySequence.Open):
            window.open_pdf()
        elif ctrl and key == Qt.Key_E:
            window.export_pdf()
        elif ctrl and key == Qt.Key_M:
            window.merge_selection()
        elif ctrl and shift and key in (Qt.Key_Equal, Qt.Key_Plus):
            if select_tool:
                annotations.scale_selection(SCALE_STEP)
        elif ctrl and shift and key in (Qt.Key_Minus, Qt.Key_Underscore):
            if select_tool:
                annotations.scale_selection(1 / SCALE_STEP)
        elif ctrl and key in (Qt.Key_Equal, Qt.Key_Plus):
            window.view_controller.zoom_in()
        elif ctrl and key == Qt.Key_Minus:
            window.view_controller.zoom_out()
        elif key == Qt.Key_Escape:
            annotations.cancel()
        elif key in (Qt.Key_Delete, Qt.Key_Backspace):
            annotations.delete_selection()
        elif key == Qt.Key_PageDown:
            window.view_controller.next_page()
        elif key == Qt.Key_PageUp:
            window.view_controller.previous_page()
        elif key == Qt.Key_BracketLeft and select_tool:
            annotations.rotate_selection(-ROTATE_STEP)
        elif key == Qt.Key_BracketRight and select_tool:
            annotations.rotate_selection(ROTATE_STEP)
        else:
            event.ignore()
            return False

        event.accept()
        return True
