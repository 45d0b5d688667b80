"""
Controller for annotation tools, selection and editing.
"""
import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

from PyQt5.QtCore import QObject, pyqtSignal

from polymark.config import ToolConfig
from polymark.core.annotations import (
    Annotation,
    AnnotationStore,
    CanvasItem,
    LineDraft,
    PolygonConstructionSession,
    ShapeMergeResolver,
    StrokeStyle,
    ToolKind,
    project_page,
)
from polymark.core.errors import InsufficientGeometry, InvalidZoom
from polymark.core.geometry import DevicePoint, check_zoom, length_to_canonical
from polymark.core.selection import ShapeSelection, hit_test

logger = logging.getLogger(__name__)

ALL_PAGES = 0


class AnnotationController(QObject):
    """Routes pointer input to the active tool and applies edits to the store."""

    # Signals
    annotations_changed = pyqtSignal(int)  # page, or ALL_PAGES
    selection_changed = pyqtSignal(list)  # selected ids
    session_changed = pyqtSignal()  # preview items or hint changed
    tool_changed = pyqtSignal(object)  # ToolKind

    def __init__(
        self,
        store: Optional[AnnotationStore] = None,
        config: Optional[ToolConfig] = None,
        page: int = 1,
        zoom: float = 1.0,
    ):
        super().__init__()
        self.store = store if store is not None else AnnotationStore()
        self.config = config or ToolConfig()
        self.resolver = ShapeMergeResolver(self.store)
        self.selection = ShapeSelection(page)

        self.page = page
        self.zoom = check_zoom(zoom)
        self.tool = ToolKind.SELECT
        self.style = StrokeStyle(color=tuple(self.config.color), width=self.config.stroke_width)

        self.session: Optional[PolygonConstructionSession] = None
        self.line_draft: Optional[LineDraft] = None

        # Select-tool drag state
        self._drag_origin: Optional[DevicePoint] = None
        self._drag_sources: List[Annotation] = []

        self.store.subscribe(self._on_store_changed)

    # ------------------------------------------------------------------
    # Tool, style and view state
    # ------------------------------------------------------------------

    def set_tool(self, tool: ToolKind) -> None:
        """
        Switch the active tool.

        Any polygon in progress is discarded. Leaving the select tool
        clears the selection.
        """
        if tool == self.tool:
            return
        self._discard_drafts()
        if tool != ToolKind.SELECT:
            self._clear_selection()
        self.tool = tool
        if tool == ToolKind.POLYGON:
            self.session = self._new_session()
        logger.debug(f"Tool changed to {tool.value}")
        self.tool_changed.emit(tool)
        self.session_changed.emit()

    def set_style(self, color: Optional[Tuple[int, int, int]] = None,
                  width: Optional[float] = None) -> None:
        """Update the colour and/or stroke width used by new shapes."""
        self.style = StrokeStyle(
            color=tuple(color) if color is not None else self.style.color,
            width=width if width is not None else self.style.width,
        )
        if self.session is not None and not self.session.is_closed:
            self.session.style = self.style

    def set_page(self, page: int) -> None:
        """Move to another page, dropping drafts and the selection."""
        if page == self.page:
            return
        self._discard_drafts()
        self.page = page
        self.selection.reset(page)
        self.selection_changed.emit([])
        if self.tool == ToolKind.POLYGON:
            self.session = self._new_session()
        self.session_changed.emit()

    def set_zoom(self, zoom: float) -> bool:
        """
        Follow a zoom change of the view.

        Stored annotations are zoom independent, so only drafts in device
        space are affected; they are discarded.

        Returns:
            False if ``zoom`` was rejected and the previous zoom kept
        """
        try:
            zoom = check_zoom(zoom)
        except InvalidZoom as e:
            logger.warning(f"Rejected zoom change: {e}")
            return False

        if zoom == self.zoom:
            return True
        self._discard_drafts()
        self.zoom = zoom
        if self.tool == ToolKind.POLYGON:
            self.session = self._new_session()
        self.session_changed.emit()
        return True

    # ------------------------------------------------------------------
    # Pointer input (device space)
    # ------------------------------------------------------------------

    def pointer_down(self, point: DevicePoint, additive: bool = False,
                     page: Optional[int] = None) -> None:
        """
        Handle a button press on a page.

        Args:
            point: Press position in device space
            additive: Ctrl/Shift held; extends the selection
            page: Page the press landed on; a press on another page makes
                it the active page first
        """
        if page is not None and page != self.page:
            self.set_page(page)

        if self.tool == ToolKind.SELECT:
            self._select_at(point, additive)
        elif self.tool == ToolKind.LINE:
            self.line_draft = LineDraft(self.page, point, self.style, self.zoom)
            self.session_changed.emit()
        elif self.tool == ToolKind.POLYGON:
            if self.session is None or self.session.is_closed:
                self.session = self._new_session()
            self.session.add_point(point)
            self.session_changed.emit()

    def pointer_move(self, point: DevicePoint, page: Optional[int] = None) -> None:
        if not self._is_active(page):
            return
        if self.tool == ToolKind.SELECT and self._drag_origin is not None:
            self._drag_to(point)
        elif self.tool == ToolKind.LINE and self.line_draft is not None:
            self.line_draft.move_to(point)
            self.session_changed.emit()

    def pointer_up(self, point: DevicePoint, page: Optional[int] = None) -> Optional[Annotation]:
        """
        Handle a button release.

        Returns:
            The line created by a line drag, if any
        """
        if not self._is_active(page):
            return None
        if self.tool == ToolKind.SELECT:
            if self._drag_origin is not None:
                self._drag_to(point)
            self._drag_origin = None
            self._drag_sources = []
            return None

        if self.tool == ToolKind.LINE and self.line_draft is not None:
            draft, self.line_draft = self.line_draft, None
            draft.move_to(point)
            annotation = draft.commit(self.store, self.zoom)
            self.session_changed.emit()
            return annotation
        return None

    def double_click(self, point: DevicePoint, page: Optional[int] = None) -> Optional[Annotation]:
        """
        Complete the polygon in progress.

        The first click of the double-click has already added ``point``.

        Returns:
            The committed polygon, or None if it has fewer than 3 points
        """
        if self.tool != ToolKind.POLYGON or self.session is None or not self._is_active(page):
            return None

        annotation = self.session.commit(self.zoom)
        if annotation is not None:
            self.session = self._new_session()
        self.session_changed.emit()
        return annotation

    # ------------------------------------------------------------------
    # Selection actions
    # ------------------------------------------------------------------

    def cancel(self) -> None:
        """Escape: drop any draft and clear the selection."""
        self._discard_drafts()
        if self.tool == ToolKind.POLYGON:
            self.session = self._new_session()
        self._clear_selection()
        self.session_changed.emit()

    def select_ids(self, ids: Iterable[str]) -> None:
        self.selection.set_ids(list(ids))
        self.selection.resolve(self.store)
        self.selection_changed.emit(self.selection.ids)

    def selected_annotations(self) -> List[Annotation]:
        return self.selection.resolve(self.store)

    def can_merge(self) -> bool:
        return self.selection.can_merge

    def merge_label(self) -> str:
        return self.selection.merge_label()

    def merge_selection(self) -> Optional[Annotation]:
        """
        Merge the selected shapes into one polygon.

        Returns:
            The merged polygon, or None if the selection was insufficient
        """
        shapes = self.selection.resolve(self.store)
        try:
            merged = self.resolver.merge(shapes, self.style)
        except InsufficientGeometry as e:
            logger.warning(f"Merge rejected: {e}")
            return None

        self._clear_selection()
        return merged

    def delete_selection(self) -> int:
        """Remove the selected shapes. Returns how many were removed."""
        ids = self.selection.ids
        if not ids:
            return 0
        removed = self.store.remove(self.page, ids)
        self._clear_selection()
        logger.info(f"Deleted {removed} annotation(s) on page {self.page}")
        return removed

    def rotate_selection(self, degrees: float) -> int:
        """Rotate each selected shape about its own centre."""
        return self._transform_selection(lambda t: t.rotated(degrees))

    def scale_selection(self, factor: float) -> int:
        """
        Scale each selected shape uniformly about its own centre.

        Returns:
            Number of shapes changed; 0 if ``factor`` is rejected
        """
        try:
            return self._transform_selection(lambda t: t.scaled(factor))
        except ValueError as e:
            logger.warning(f"Rejected scale of selection: {e}")
            return 0

    # ------------------------------------------------------------------
    # Read access for the canvas and the window
    # ------------------------------------------------------------------

    def display_items(self, page: Optional[int] = None) -> List[CanvasItem]:
        """
        Everything to draw on a page, bottom to top.

        Committed shapes come first, followed by the preview of any
        construction in progress. Pages other than the active one only
        get their committed shapes.

        Args:
            page: Page to draw; defaults to the active page
        """
        if page is None:
            page = self.page
        items: List[CanvasItem] = list(project_page(self.store.by_page(page), self.zoom))
        if page != self.page:
            return items
        if self.session is not None:
            items.extend(self.session.preview)
        if self.line_draft is not None:
            items.extend(self.line_draft.preview)
        return items

    def polygon_hint(self, page: Optional[int] = None) -> Optional[str]:
        """Hint text for the polygon tool on the active page, otherwise None."""
        if self.tool != ToolKind.POLYGON or not self._is_active(page):
            return None
        if self.session is None:
            return "Click to add points"
        return self.session.hint()

    def annotation_count(self) -> int:
        return self.store.count()

    def all_annotations(self) -> Dict[int, List[Annotation]]:
        return self.store.all_annotations()

    def load_annotations(self, records: Iterable[Dict[str, Any]]) -> int:
        """Replace all annotations with serialized records."""
        self._discard_drafts()
        self._clear_selection()
        self.store.clear()
        return self.store.load(records)

    def reset(self) -> None:
        """Forget everything, e.g. when a new document is opened."""
        self._discard_drafts()
        self.page = 1
        self.selection.reset(1)
        self.store.clear()
        if self.tool == ToolKind.POLYGON:
            self.session = self._new_session()
        self.selection_changed.emit([])
        self.session_changed.emit()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _new_session(self) -> PolygonConstructionSession:
        return PolygonConstructionSession(
            self.page,
            self.store,
            self.style,
            self.zoom,
            marker_radius=self.config.marker_radius,
            preview_dashes=tuple(self.config.preview_dashes),
            preview_opacity=self.config.preview_opacity,
        )

    def _is_active(self, page: Optional[int]) -> bool:
        return page is None or page == self.page

    def _discard_drafts(self) -> None:
        if self.session is not None:
            self.session.discard()
            self.session = None
        self.line_draft = None
        self._drag_origin = None
        self._drag_sources = []

    def _clear_selection(self) -> None:
        if len(self.selection):
            self.selection.clear()
            self.selection_changed.emit([])

    def _select_at(self, point: DevicePoint, additive: bool) -> None:
        shapes = project_page(self.store.by_page(self.page), self.zoom)
        hit = hit_test(shapes, point, self.config.hit_tolerance)

        if hit is None:
            if not additive:
                self._clear_selection()
            return

        if additive:
            self.selection.toggle(hit.id)
        elif hit.id not in self.selection:
            self.selection.select(hit.id)
        self.selection_changed.emit(self.selection.ids)

        if hit.id in self.selection:
            self._drag_origin = point
            self._drag_sources = self.selection.resolve(self.store)

    def _drag_to(self, point: DevicePoint) -> None:
        dx = length_to_canonical(point.x - self._drag_origin.x, self.zoom)
        dy = length_to_canonical(point.y - self._drag_origin.y, self.zoom)
        moved = [
            replace(ann, transform=ann.transform.translated(dx, dy))
            for ann in self._drag_sources
        ]
        if moved:
            self.store.update(self.page, moved)

    def _transform_selection(self, change) -> int:
        shapes = self.selection.resolve(self.store)
        if not shapes:
            return 0
        updated = [replace(ann, transform=change(ann.transform)) for ann in shapes]
        return self.store.update(self.page, updated)

    def _on_store_changed(self, page: Optional[int]) -> None:
        self.annotations_changed.emit(ALL_PAGES if page is None else page)
