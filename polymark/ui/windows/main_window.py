"""
Main application window for Polymark.
"""
import logging
import os
from typing import List, Optional

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QIntValidator
from PyQt5.QtWidgets import (
    QButtonGroup,
    QFileDialog,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QProgressDialog,
    QScrollArea,
    QSizePolicy,
    QSpacerItem,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from polymark.config import AppConfig
from polymark.controllers import (
    ALL_PAGES,
    AnnotationController,
    UserInputHandler,
    ViewController,
    ViewMode,
    tile_zoom,
)
from polymark.controllers.view_controller import GRID_PADDING, TILE_GAP
from polymark.core.annotations import AnnotationStore, ToolKind
from polymark.core.document import PDFDocumentRenderer
from polymark.core.errors import DocumentError
from polymark.core.export import ExportWorker
from polymark.ui.toolbars import AnnotationToolbar
from polymark.ui.widgets import PageCanvas

logger = logging.getLogger(__name__)

VIEW_MODE_BUTTONS = [
    (ViewMode.SINGLE, "1", "Single page"),
    (ViewMode.DUAL, "2", "2 pages"),
    (ViewMode.QUAD, "4", "4 pages"),
    (ViewMode.OCTO, "8", "8 pages"),
]


class MainWindow(QMainWindow):
    """Main application window."""

    def __init__(self, config: Optional[AppConfig] = None, file_path: Optional[str] = None):
        super().__init__()
        self.config = config or AppConfig()

        # Initialize core components
        self._init_core_components()

        # Initialize controllers
        self._init_controllers()

        # Setup UI
        self._setup_window()
        self._setup_ui()
        self._setup_connections()

        # Load file if provided
        if file_path and os.path.exists(file_path):
            self.load_pdf(file_path)

    def _init_core_components(self):
        """Initialize core business logic components."""
        self.renderer = PDFDocumentRenderer(self.config.renderer)
        self.store = AnnotationStore()

        # File state
        self.current_file_path: Optional[str] = None

        # Export worker (created when needed)
        self.export_worker: Optional[ExportWorker] = None

    def _init_controllers(self):
        """Initialize application controllers."""
        self.view_controller = ViewController(self.config.view)
        self.annotation_controller = AnnotationController(
            self.store,
            self.config.tools,
            page=self.view_controller.current_page,
            zoom=self.view_controller.zoom_level,
        )
        self.input_handler = UserInputHandler(self)

    def _setup_window(self):
        """Setup main window properties."""
        self.setWindowTitle("Polymark")
        self.setMinimumSize(800, 600)

    def _setup_ui(self):
        """Setup the user interface."""
        self._create_toolbar()

        self.annotation_toolbar = AnnotationToolbar(
            self.config.tools.color, self.config.tools.stroke_width, self
        )

        # One canvas per visible page; canvases beyond the current grid are hidden
        self.canvases: List[PageCanvas] = []
        self.page_grid = QWidget()
        self.grid_layout = QGridLayout(self.page_grid)
        self.grid_layout.setContentsMargins(GRID_PADDING, GRID_PADDING, GRID_PADDING, GRID_PADDING)
        self.grid_layout.setSpacing(TILE_GAP)
        self.grid_layout.setAlignment(Qt.AlignCenter)

        self.scroll_area = QScrollArea()
        self.scroll_area.setWidget(self.page_grid)
        self.scroll_area.setAlignment(Qt.AlignCenter)
        self.scroll_area.setWidgetResizable(True)

        self.empty_label = QLabel("Open a PDF to start annotating (Ctrl+O)")
        self.empty_label.setAlignment(Qt.AlignCenter)
        self.empty_label.setStyleSheet("color: #8899AA; font-size: 14px;")

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        layout.addWidget(self.top_frame)
        layout.addWidget(self.annotation_toolbar)
        layout.addWidget(self.scroll_area, 1)
        layout.addWidget(self.empty_label, 1)
        self.setCentralWidget(central)

        self._update_document_widgets()

    def _create_toolbar(self):
        """Create the top toolbar."""
        self.top_frame = QFrame()
        self.top_frame.setObjectName("TopFrame")
        self.top_layout = QHBoxLayout(self.top_frame)
        self.top_layout.setContentsMargins(10, 8, 10, 8)
        self.top_layout.setSpacing(8)

        self._add_toolbar_button("Open", "Open PDF (Ctrl+O)", self.open_pdf)
        self.export_button = self._add_toolbar_button(
            "Export", "Export annotated PDF (Ctrl+E)", self.export_pdf
        )

        self._add_toolbar_spacer(15)

        self.file_name_label = QLabel("No PDF Loaded", self.top_frame)
        self.file_name_label.setStyleSheet("font-weight: bold; color: #8899AA;")
        self.top_layout.addWidget(self.file_name_label)

        self.annotation_count_label = QLabel("0 annotation(s)", self.top_frame)
        self.annotation_count_label.setStyleSheet("color: #8899AA;")
        self.top_layout.addWidget(self.annotation_count_label)

        self._add_toolbar_spacer(40, expanding=True)

        # Page navigation
        self.prev_button = self._add_toolbar_button(
            "<", "Previous page (PageUp)", self.view_controller.previous_page
        )
        self.page_edit = QLineEdit("1", self.top_frame)
        self.page_edit.setObjectName("page_input")
        self.page_edit.setFixedWidth(50)
        self.page_edit.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.page_edit.setValidator(QIntValidator(1, 1, self))
        self.page_edit.returnPressed.connect(self.page_number_changed)
        self.top_layout.addWidget(self.page_edit)
        self.total_page_label = QLabel("/ 0", self.top_frame)
        self.top_layout.addWidget(self.total_page_label)
        self.next_button = self._add_toolbar_button(
            ">", "Next page (PageDown)", self.view_controller.next_page
        )

        self._add_toolbar_separator()

        # Zoom controls
        self._add_toolbar_button("-", "Zoom out (Ctrl+-)", self.view_controller.zoom_out)
        self.zoom_label = QLabel(self._zoom_text(self.view_controller.zoom_level), self.top_frame)
        self.zoom_label.setFixedWidth(50)
        self.zoom_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.top_layout.addWidget(self.zoom_label)
        self._add_toolbar_button("+", "Zoom in (Ctrl+=)", self.view_controller.zoom_in)

        self._add_toolbar_separator()
        self._add_toolbar_button("Rotate", "Rotate view 90°", lambda: self.view_controller.rotate(90))

        self._add_toolbar_separator()

        # Page grid
        self.view_mode_group = QButtonGroup(self)
        self.view_mode_group.setExclusive(True)
        self.view_mode_buttons = {}
        for mode, text, tooltip in VIEW_MODE_BUTTONS:
            btn = self._add_toolbar_button(
                text, tooltip, lambda _checked, m=mode: self.view_controller.set_view_mode(m)
            )
            btn.setCheckable(True)
            self.view_mode_group.addButton(btn)
            self.view_mode_buttons[mode] = btn
        self.view_mode_buttons[self.view_controller.view_mode].setChecked(True)

    def _add_toolbar_button(self, text: str, tooltip: str, callback) -> QToolButton:
        """Add a button to the toolbar."""
        btn = QToolButton(self.top_frame)
        btn.setText(text)
        btn.setToolTip(tooltip)
        btn.clicked.connect(callback)
        self.top_layout.addWidget(btn)
        return btn

    def _add_toolbar_separator(self):
        """Add a separator to the toolbar."""
        separator = QFrame()
        separator.setFrameShape(QFrame.VLine)
        separator.setFrameShadow(QFrame.Sunken)
        separator.setStyleSheet("background-color: #555555; max-width: 1px;")
        self.top_layout.addWidget(separator)

    def _add_toolbar_spacer(self, width: int, expanding: bool = False):
        """Add a spacer to the toolbar."""
        policy = QSizePolicy.Expanding if expanding else QSizePolicy.Fixed
        spacer = QSpacerItem(width, 20, policy, QSizePolicy.Minimum)
        self.top_layout.addSpacerItem(spacer)

    def _setup_connections(self):
        self.view_controller.page_changed.connect(self._on_page_changed)
        self.view_controller.zoom_changed.connect(self._on_zoom_changed)
        self.view_controller.rotation_changed.connect(lambda _r: self._render_visible_pages())
        self.view_controller.view_mode_changed.connect(self._on_view_mode_changed)

        self.annotation_controller.annotations_changed.connect(self._on_annotations_changed)
        self.annotation_controller.selection_changed.connect(
            lambda ids: self.annotation_toolbar.update_merge_button(len(ids))
        )
        self.annotation_controller.tool_changed.connect(self.annotation_toolbar.set_tool)

        self.annotation_toolbar.tool_selected.connect(self.annotation_controller.set_tool)
        self.annotation_toolbar.style_changed.connect(
            lambda color, width: self.annotation_controller.set_style(color, width)
        )
        self.annotation_toolbar.merge_requested.connect(self.merge_selection)

    # Document handling

    def load_pdf(self, file_path: str) -> bool:
        """Load a PDF file."""
        try:
            total_pages = self.renderer.load(file_path)
        except DocumentError as e:
            logger.error(str(e))
            QMessageBox.critical(self, "Open Failed", str(e))
            return False

        self.annotation_controller.reset()
        self.current_file_path = file_path
        self.file_name_label.setText(os.path.basename(file_path))
        self.total_page_label.setText(f"/ {total_pages}")
        self.page_edit.setValidator(QIntValidator(1, total_pages, self))

        self.view_controller.set_document_info(total_pages)
        self._update_document_widgets()
        return True

    def open_pdf(self):
        """Open a PDF file dialog."""
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Open PDF", "", "PDF Files (*.pdf)"
        )
        if file_path:
            self.load_pdf(file_path)

    def default_export_path(self) -> str:
        """Source path with the export suffix, e.g. ``report-annotated.pdf``."""
        root, _ = os.path.splitext(self.current_file_path)
        return f"{root}{self.config.export.suffix}.pdf"

    def export_pdf(self) -> bool:
        """Export the document with annotations flattened into each page."""
        if not self.renderer.is_loaded() or not self.current_file_path:
            QMessageBox.warning(self, "No PDF", "No PDF document is currently loaded.")
            return False
        if self.export_worker is not None:
            return False

        output_path, _ = QFileDialog.getSaveFileName(
            self, "Export Annotated PDF", self.default_export_path(), "PDF Files (*.pdf)"
        )
        if not output_path:
            return False

        progress = QProgressDialog("Preparing export...", None, 0, 100, self)
        progress.setWindowTitle("Exporting PDF")
        progress.setWindowModality(Qt.WindowModality.WindowModal)
        progress.setMinimumDuration(0)
        progress.setCancelButton(None)
        progress.setAutoClose(False)
        progress.setAutoReset(False)
        progress.show()

        self.export_worker = ExportWorker(
            self.current_file_path,
            output_path,
            self.store.all_annotations(),
            renderer_config=self.config.renderer,
            export_config=self.config.export,
        )

        def on_progress(message):
            progress.setLabelText(message)

        def on_page_progress(current, total):
            if total > 0:
                progress.setValue(int((current / total) * 100))
                progress.setLabelText(f"Rendering pages: {current}/{total}")

        def on_finished(success, message):
            progress.close()
            if success:
                QMessageBox.information(self, "Export Complete", message)
            else:
                QMessageBox.critical(self, "Export Failed", message)

            if self.export_worker is not None:
                self.export_worker.deleteLater()
            self.export_worker = None

        self.export_worker.progress.connect(on_progress)
        self.export_worker.page_progress.connect(on_page_progress)
        self.export_worker.finished.connect(on_finished)
        self.export_worker.start()
        return True

    def merge_selection(self):
        if self.annotation_controller.tool != ToolKind.SELECT:
            return
        if self.annotation_controller.merge_selection() is None:
            self.statusBar().showMessage("Select at least two shapes with 3 or more points to merge", 3000)

    # Navigation

    def page_number_changed(self):
        text = self.page_edit.text()
        if text.isdigit():
            self.view_controller.jump_to_page(int(text))

    def _pan_by(self, dx: int, dy: int):
        hbar = self.scroll_area.horizontalScrollBar()
        vbar = self.scroll_area.verticalScrollBar()
        hbar.setValue(hbar.value() - dx)
        vbar.setValue(vbar.value() - dy)

    def _zoom_text(self, zoom: float) -> str:
        return f"{int(round(zoom * 100))}%"

    # Helper Methods

    def _effective_zoom(self, pages: List[int]) -> float:
        """User zoom in single page mode, otherwise the zoom that fits the grid."""
        mode = self.view_controller.view_mode
        user_zoom = self.view_controller.zoom_level
        if mode == ViewMode.SINGLE:
            return user_zoom

        sample = self.renderer.get_page_dimensions(pages[0], 1.0)
        if self.view_controller.rotation in (90, 270):
            sample_width, sample_height = sample.height, sample.width
        else:
            sample_width, sample_height = sample.width, sample.height
        viewport = self.scroll_area.viewport().size()
        return tile_zoom(
            mode, viewport.width(), viewport.height(), sample_width, sample_height, user_zoom
        )

    def _ensure_canvases(self, count: int) -> List[PageCanvas]:
        """Grow the canvas pool to ``count`` and lay it out as the current grid."""
        while len(self.canvases) < count:
            canvas = PageCanvas(self.annotation_controller, parent=self.page_grid)
            canvas.pan_requested.connect(self._pan_by)
            self.canvases.append(canvas)

        cols, _rows = self.view_controller.view_mode.grid
        for index, canvas in enumerate(self.canvases):
            self.grid_layout.removeWidget(canvas)
            if index < count:
                self.grid_layout.addWidget(canvas, index // cols, index % cols)
                canvas.show()
            else:
                canvas.clear_page()
                canvas.hide()
        return self.canvases[:count]

    def _render_visible_pages(self):
        """Render every page of the grid at the effective zoom and rotation."""
        if not self.renderer.is_loaded():
            self._ensure_canvases(0)
            return

        pages = self.view_controller.visible_pages()
        rotation = self.view_controller.rotation
        try:
            zoom = self._effective_zoom(pages)
            rendered = [
                (page,
                 self.renderer.render_page(page, zoom, rotation),
                 self.renderer.get_page_dimensions(page, zoom))
                for page in pages
            ]
        except DocumentError as e:
            logger.error(str(e))
            QMessageBox.critical(self, "Render Failed", str(e))
            return

        self.annotation_controller.set_zoom(zoom)
        self.zoom_label.setText(self._zoom_text(zoom))
        for canvas, (page, pix, dims) in zip(self._ensure_canvases(len(pages)), rendered):
            canvas.show_page(page, pix, dims, rotation)

    def _update_document_widgets(self):
        loaded = self.renderer.is_loaded()
        self.scroll_area.setVisible(loaded)
        self.empty_label.setVisible(not loaded)
        self.annotation_toolbar.setEnabled(loaded)
        self.export_button.setEnabled(loaded)
        self._update_navigation()

    def _update_navigation(self):
        self.prev_button.setEnabled(self.view_controller.can_go_previous())
        self.next_button.setEnabled(self.view_controller.can_go_next())

    def _on_page_changed(self, page: int):
        self.annotation_controller.set_page(page)
        self.page_edit.setText(str(page))
        self._update_navigation()
        self._render_visible_pages()

    def _on_zoom_changed(self, _zoom: float):
        self._render_visible_pages()

    def _on_view_mode_changed(self, mode: ViewMode):
        self.view_mode_buttons[mode].setChecked(True)
        self._update_navigation()
        self._render_visible_pages()

    def _on_annotations_changed(self, page: int):
        count = self.annotation_controller.annotation_count()
        self.annotation_count_label.setText(f"{count} annotation(s)")
        for canvas in self.canvases:
            if page in (ALL_PAGES, canvas.page):
                canvas.update()

    def keyPressEvent(self, event):  # type: ignore[override]
        """Handle keyboard shortcuts."""
        if not self.input_handler.handle_key_press(event):
            super().keyPressEvent(event)

    def resizeEvent(self, event):  # type: ignore[override]
        super().resizeEvent(event)
        # Grid tiles follow the viewport size
        if self.view_controller.view_mode != ViewMode.SINGLE:
            self._render_visible_pages()

    def closeEvent(self, event):  # type: ignore[override]
        if self.export_worker is not None and self.export_worker.isRunning():
            QMessageBox.information(self, "Export Running", "Wait for the export to finish before closing.")
            event.ignore()
            return
        self.renderer.close()
        event.accept()
