"""
Page canvas: draws the page raster with its annotations and routes input.
"""
import logging
from typing import Optional

import fitz  # PyMuPDF
from PyQt5.QtCore import QPointF, QRectF, Qt, pyqtSignal
from PyQt5.QtGui import (
    QBrush,
    QColor,
    QImage,
    QMouseEvent,
    QPainter,
    QPen,
    QPixmap,
    QPolygonF,
    QTransform,
)
from PyQt5.QtWidgets import QLabel

from polymark.controllers import AnnotationController
from polymark.core.annotations import CommittedShape, PreviewArtifact, PreviewRole, ToolKind
from polymark.core.document import PageDimensions
from polymark.core.geometry import DevicePoint

logger = logging.getLogger(__name__)

SELECTION_COLOR = QColor(0, 120, 215)


def pixmap_to_qpixmap(pix: fitz.Pixmap) -> QPixmap:
    """Convert a PyMuPDF pixmap to a QPixmap."""
    fmt = QImage.Format_RGBA8888 if pix.alpha else QImage.Format_RGB888
    img = QImage(pix.samples, pix.width, pix.height, pix.stride, fmt)
    # QImage does not own pix.samples; copy before the pixmap goes away
    return QPixmap.fromImage(img.copy())


def rotation_transform(rotation: int, dims: PageDimensions) -> QTransform:
    """
    Map unrotated device coordinates onto a page raster rotated clockwise.

    Args:
        rotation: View rotation, one of 0, 90, 180, 270
        dims: Unrotated page size in device pixels
    """
    transform = QTransform()
    if rotation == 90:
        transform.translate(dims.height, 0)
    elif rotation == 180:
        transform.translate(dims.width, dims.height)
    elif rotation == 270:
        transform.translate(0, dims.width)
    transform.rotate(rotation)
    return transform


class PageCanvas(QLabel):
    """
    Shows one page and its annotations at the current zoom.

    In the grid view there is one canvas per visible page; each canvas
    tags its pointer events with its own page number.

    The display list comes from the annotation controller and is rebuilt
    on every paint. Mouse positions are converted to unrotated device
    points before they reach the controller.
    """

    # Signals
    pan_requested = pyqtSignal(int, int)  # dx, dy in widget pixels (hand tool)

    def __init__(self, controller: AnnotationController, page: int = 1, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.page = page
        self.dims: Optional[PageDimensions] = None
        self.rotation = 0
        self._transform = QTransform()
        self._pan_origin = None

        self.setAlignment(Qt.AlignLeft | Qt.AlignTop)
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.StrongFocus)

        self.controller.annotations_changed.connect(lambda _page: self.update())
        self.controller.selection_changed.connect(lambda _ids: self.update())
        self.controller.session_changed.connect(self.update)
        self.controller.tool_changed.connect(self._update_cursor)
        self._update_cursor(self.controller.tool)

    def show_page(self, page: int, pix: fitz.Pixmap, dims: PageDimensions, rotation: int = 0):
        """
        Show a freshly rendered page.

        Args:
            page: 1-based page number
            pix: Page raster, already rotated by ``rotation``
            dims: Unrotated page size in device pixels
            rotation: View rotation in degrees
        """
        pixmap = pixmap_to_qpixmap(pix)
        self.page = page
        self.dims = dims
        self.rotation = rotation % 360
        self._transform = rotation_transform(self.rotation, dims)
        self.setPixmap(pixmap)
        self.setFixedSize(pixmap.size())
        self.update()

    def clear_page(self):
        self.dims = None
        self.clear()
        self.update()

    def _to_device(self, pos) -> DevicePoint:
        """Convert a widget position to an unrotated device point."""
        inverse, _ = self._transform.inverted()
        mapped = inverse.map(QPointF(pos))
        return DevicePoint(mapped.x(), mapped.y())

    def _update_cursor(self, tool):
        if tool == ToolKind.HAND:
            self.setCursor(Qt.OpenHandCursor)
        elif tool in (ToolKind.LINE, ToolKind.POLYGON):
            self.setCursor(Qt.CrossCursor)
        else:
            self.setCursor(Qt.ArrowCursor)

    # Mouse event handlers

    def mousePressEvent(self, event: QMouseEvent):
        self.setFocus()
        if event.button() != Qt.LeftButton or self.dims is None:
            return super().mousePressEvent(event)

        if self.controller.tool == ToolKind.HAND:
            self._pan_origin = event.globalPos()
            self.setCursor(Qt.ClosedHandCursor)
            return

        additive = bool(event.modifiers() & (Qt.ControlModifier | Qt.ShiftModifier))
        self.controller.pointer_down(self._to_device(event.pos()), additive, page=self.page)

    def mouseMoveEvent(self, event: QMouseEvent):
        if self.dims is None:
            return super().mouseMoveEvent(event)

        if self._pan_origin is not None:
            delta = event.globalPos() - self._pan_origin
            self._pan_origin = event.globalPos()
            self.pan_requested.emit(delta.x(), delta.y())
            return

        if event.buttons() & Qt.LeftButton:
            self.controller.pointer_move(self._to_device(event.pos()), page=self.page)

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() != Qt.LeftButton or self.dims is None:
            return super().mouseReleaseEvent(event)

        if self._pan_origin is not None:
            self._pan_origin = None
            self.setCursor(Qt.OpenHandCursor)
            return

        self.controller.pointer_up(self._to_device(event.pos()), page=self.page)

    def mouseDoubleClickEvent(self, event: QMouseEvent):
        if event.button() != Qt.LeftButton or self.dims is None:
            return super().mouseDoubleClickEvent(event)
        self.controller.double_click(self._to_device(event.pos()), page=self.page)

    # Paint methods

    def paintEvent(self, event):
        super().paintEvent(event)
        if self.dims is None:
            return

        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.setTransform(self._transform)

        selected = set()
        if self.page == self.controller.page:
            selected = set(self.controller.selection.ids)
        for item in self.controller.display_items(self.page):
            if isinstance(item, CommittedShape):
                self._paint_shape(painter, item, item.annotation.id in selected)
            else:
                self._paint_preview(painter, item)

        painter.resetTransform()
        self._paint_hint(painter)
        painter.end()

    def _paint_shape(self, painter: QPainter, shape: CommittedShape, selected: bool):
        """Paint a committed line or polygon."""
        pen = QPen(QColor(*shape.color), shape.width)
        pen.setCapStyle(Qt.RoundCap)
        pen.setJoinStyle(Qt.RoundJoin)
        painter.setPen(pen)
        painter.setBrush(Qt.NoBrush)

        points = [QPointF(p.x, p.y) for p in shape.points]
        if shape.closed:
            painter.drawPolygon(QPolygonF(points))
        else:
            painter.drawLine(points[0], points[-1])

        if selected:
            self._paint_selection_box(painter, shape)

    def _paint_selection_box(self, painter: QPainter, shape: CommittedShape):
        xs = [p.x for p in shape.points]
        ys = [p.y for p in shape.points]
        margin = shape.width / 2.0 + 3
        rect = QRectF(
            min(xs) - margin, min(ys) - margin,
            max(xs) - min(xs) + 2 * margin, max(ys) - min(ys) + 2 * margin,
        )
        pen = QPen(SELECTION_COLOR, 1, Qt.DashLine)
        painter.setPen(pen)
        painter.setBrush(Qt.NoBrush)
        painter.drawRect(rect)

    def _paint_preview(self, painter: QPainter, item: PreviewArtifact):
        """Paint construction feedback for a polygon or line in progress."""
        color = QColor(*item.color)
        painter.save()
        painter.setOpacity(item.opacity)

        if item.role == PreviewRole.MARKER:
            center = QPointF(item.points[0].x, item.points[0].y)
            if item.outline_color is not None and item.outline_width > 0:
                painter.setPen(QPen(QColor(*item.outline_color), item.outline_width))
            else:
                painter.setPen(Qt.NoPen)
            painter.setBrush(QBrush(color))
            painter.drawEllipse(center, item.radius, item.radius)
        else:
            pen = QPen(color, item.width)
            pen.setCapStyle(Qt.RoundCap)
            if item.dashes:
                # Qt dash lengths are in units of the pen width
                pen.setDashPattern([d / max(item.width, 1e-6) for d in item.dashes])
            painter.setPen(pen)
            painter.setBrush(Qt.NoBrush)
            points = [QPointF(p.x, p.y) for p in item.points]
            if item.closed:
                painter.drawPolygon(QPolygonF(points))
            else:
                painter.drawLine(points[0], points[-1])

        painter.restore()

    def _paint_hint(self, painter: QPainter):
        hint = self.controller.polygon_hint(self.page)
        if not hint:
            return

        metrics = painter.fontMetrics()
        rect = QRectF(8, 8, metrics.horizontalAdvance(hint) + 16, metrics.height() + 8)
        painter.setPen(Qt.NoPen)
        painter.setBrush(QBrush(QColor(255, 255, 255, 230)))
        painter.drawRoundedRect(rect, 4, 4)
        painter.setPen(QColor(55, 65, 81))
        painter.drawText(rect, Qt.AlignCenter, hint)
