from PyQt5.QtCore import pyqtSignal
from PyQt5.QtGui import QColor
from PyQt5.QtWidgets import (
    QButtonGroup, QColorDialog, QFrame, QHBoxLayout, QLabel,
    QSpinBox, QToolButton
)

from polymark.core.annotations import ToolKind

TOOL_LABELS = [
    (ToolKind.SELECT, "Select", "Select and move shapes"),
    (ToolKind.HAND, "Hand", "Pan the page"),
    (ToolKind.LINE, "Line", "Drag to draw a line"),
    (ToolKind.POLYGON, "Polygon", "Click to add points, double-click to finish"),
]


class AnnotationToolbar(QFrame):
    """Tool buttons, stroke settings and the merge action."""

    tool_selected = pyqtSignal(object)  # ToolKind
    style_changed = pyqtSignal(tuple, float)  # color, width
    merge_requested = pyqtSignal()

    def __init__(self, color=(59, 130, 246), stroke_width=2.0, parent=None):
        super().__init__(parent)
        self.setObjectName("AnnotationToolbar")
        self.current_color = tuple(color)
        self.current_stroke_width = float(stroke_width)
        self.tool_buttons = {}

        self.setup_ui()

    def setup_ui(self):
        layout = QHBoxLayout(self)
        layout.setContentsMargins(8, 4, 8, 4)
        layout.setSpacing(6)

        self.tool_group = QButtonGroup(self)
        self.tool_group.setExclusive(True)
        for tool, text, tip in TOOL_LABELS:
            button = QToolButton(self)
            button.setText(text)
            button.setToolTip(tip)
            button.setCheckable(True)
            button.setFixedHeight(28)
            button.clicked.connect(lambda _checked, t=tool: self.tool_selected.emit(t))
            self.tool_group.addButton(button)
            self.tool_buttons[tool] = button
            layout.addWidget(button)
        self.tool_buttons[ToolKind.SELECT].setChecked(True)

        layout.addSpacing(12)

        width_label = QLabel("Width:", self)
        width_label.setStyleSheet("color: #B5B5C5;")
        layout.addWidget(width_label)

        self.stroke_spinbox = QSpinBox(self)
        self.stroke_spinbox.setMinimum(1)
        self.stroke_spinbox.setMaximum(20)
        self.stroke_spinbox.setValue(int(round(self.current_stroke_width)))
        self.stroke_spinbox.setFixedWidth(60)
        self.stroke_spinbox.valueChanged.connect(self._on_stroke_changed)
        layout.addWidget(self.stroke_spinbox)

        self.color_button = QToolButton(self)
        self.color_button.setToolTip("Choose color")
        self.color_button.setFixedSize(28, 28)
        self.color_button.clicked.connect(self._choose_color)
        self._update_color_button()
        layout.addWidget(self.color_button)

        layout.addSpacing(12)

        self.merge_button = QToolButton(self)
        self.merge_button.setToolTip("Merge the selected shapes into one polygon (Ctrl+M)")
        self.merge_button.setFixedHeight(28)
        self.merge_button.clicked.connect(self.merge_requested.emit)
        self.merge_button.hide()
        layout.addWidget(self.merge_button)

        layout.addStretch()

    def set_tool(self, tool: ToolKind):
        """Check the button of ``tool`` without emitting a signal."""
        button = self.tool_buttons.get(tool)
        if button is not None:
            button.setChecked(True)

    def update_merge_button(self, selected_count: int):
        """Show "Merge N objects" when at least two shapes are selected."""
        if selected_count >= 2:
            self.merge_button.setText(f"Merge {selected_count} objects")
            self.merge_button.show()
        else:
            self.merge_button.hide()

    def _on_stroke_changed(self, value):
        """Update stroke width."""
        self.current_stroke_width = float(value)
        self.style_changed.emit(self.current_color, self.current_stroke_width)

    def _choose_color(self):
        """Open color picker dialog."""
        initial_color = QColor(*self.current_color)
        color = QColorDialog.getColor(initial_color, self, "Choose Stroke Color")

        if color.isValid():
            self.current_color = (color.red(), color.green(), color.blue())
            self._update_color_button()
            self.style_changed.emit(self.current_color, self.current_stroke_width)

    def _update_color_button(self):
        """Update the color button to show the current color."""
        r, g, b = self.current_color
        self.color_button.setStyleSheet(f"""
            QToolButton {{
                background-color: rgb({r}, {g}, {b});
                border: 2px solid #555555;
                border-radius: 4px;
            }}
            QToolButton:hover {{
                border: 2px solid #777777;
            }}
        """)
