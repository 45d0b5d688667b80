"""
Controller for page navigation, zoom, view rotation and the page grid.
"""
import logging
from enum import Enum
from typing import List, Optional

from PyQt5.QtCore import QObject, pyqtSignal

from polymark.config import ViewConfig
from polymark.core.errors import InvalidZoom
from polymark.core.geometry import check_zoom

logger = logging.getLogger(__name__)

# Space around the grid and between tiles, in widget pixels
GRID_PADDING = 20
TILE_GAP = 20
MIN_TILE_ZOOM = 0.1


class ViewMode(Enum):
    """How many pages are shown at once."""
    SINGLE = "single"
    DUAL = "dual"
    QUAD = "quad"
    OCTO = "octo"

    @property
    def grid(self):
        """(columns, rows) of the page grid."""
        return GRID_LAYOUTS[self]

    @property
    def page_count(self) -> int:
        cols, rows = self.grid
        return cols * rows


GRID_LAYOUTS = {
    ViewMode.SINGLE: (1, 1),
    ViewMode.DUAL: (2, 1),
    ViewMode.QUAD: (2, 2),
    ViewMode.OCTO: (4, 2),
}


def tile_zoom(mode: ViewMode, available_width: float, available_height: float,
              page_width: float, page_height: float, user_zoom: float) -> float:
    """
    Zoom that fits one tile of the page grid into the viewport.

    Args:
        mode: Current view mode
        available_width: Viewport width in widget pixels
        available_height: Viewport height in widget pixels
        page_width: Unzoomed width of a sample page
        page_height: Unzoomed height of a sample page
        user_zoom: Zoom chosen by the user; tiles never exceed it

    Returns:
        The zoom to render every tile at
    """
    if mode == ViewMode.SINGLE or page_width <= 0 or page_height <= 0:
        return user_zoom

    cols, rows = mode.grid
    tile_width = (available_width - 2 * GRID_PADDING) / cols - TILE_GAP
    tile_height = (available_height - 2 * GRID_PADDING) / rows - TILE_GAP
    fit = min(tile_width / page_width, tile_height / page_height, user_zoom)
    return max(MIN_TILE_ZOOM, fit)


class ViewController(QObject):
    """Manages which pages are shown and at what zoom and rotation."""

    # Signals
    page_changed = pyqtSignal(int)  # 1-based page number
    zoom_changed = pyqtSignal(float)
    rotation_changed = pyqtSignal(int)  # degrees, multiple of 90
    view_mode_changed = pyqtSignal(object)  # ViewMode

    def __init__(self, config: Optional[ViewConfig] = None):
        super().__init__()
        self.config = config or ViewConfig()

        # View state
        self.current_page: int = 1
        self.total_pages: int = 0
        self.zoom_level: float = check_zoom(self.config.default_zoom)
        self.rotation: int = 0
        self.view_mode: ViewMode = ViewMode.SINGLE

    def set_document_info(self, total_pages: int) -> None:
        """
        Reset the view for a newly loaded document.

        Args:
            total_pages: Total number of pages in the document
        """
        self.total_pages = total_pages
        self.rotation = 0
        self.current_page = 1
        self.page_changed.emit(self.current_page)

    def set_view_mode(self, mode: ViewMode) -> None:
        if mode == self.view_mode:
            return
        self.view_mode = mode
        logger.debug(f"View mode changed to {mode.value}")
        self.view_mode_changed.emit(mode)

    def visible_pages(self) -> List[int]:
        """Pages shown in the grid, starting at the current page."""
        last = min(self.total_pages, self.current_page + self.view_mode.page_count - 1)
        return list(range(self.current_page, last + 1))

    def can_go_previous(self) -> bool:
        return self.current_page > 1

    def can_go_next(self) -> bool:
        return self.current_page + self.view_mode.page_count - 1 < self.total_pages

    def jump_to_page(self, page_num: int) -> bool:
        """
        Show a specific page.

        Args:
            page_num: 1-based page number

        Returns:
            True if the page changed
        """
        if not (1 <= page_num <= self.total_pages):
            return False
        if page_num == self.current_page:
            return False

        self.current_page = page_num
        self.page_changed.emit(page_num)
        return True

    def next_page(self) -> bool:
        """Advance by one page, or by a whole grid in the multi-page modes."""
        step = self.view_mode.page_count
        if step == 1:
            return self.jump_to_page(self.current_page + 1)
        if not self.can_go_next():
            return False
        return self.jump_to_page(min(self.total_pages - step + 1, self.current_page + step))

    def previous_page(self) -> bool:
        step = self.view_mode.page_count
        return self.jump_to_page(max(1, self.current_page - step))

    def set_zoom(self, zoom: float) -> float:
        """
        Set the zoom factor, clamped to the configured range.

        Args:
            zoom: Requested zoom factor

        Returns:
            The zoom in effect afterwards; unchanged if ``zoom`` was invalid
        """
        try:
            zoom = check_zoom(zoom)
        except InvalidZoom as e:
            logger.warning(f"Rejected zoom change: {e}")
            return self.zoom_level

        zoom = max(self.config.min_zoom, min(self.config.max_zoom, zoom))
        if zoom != self.zoom_level:
            self.zoom_level = zoom
            self.zoom_changed.emit(zoom)
        return self.zoom_level

    def zoom_in(self) -> float:
        return self.set_zoom(self.zoom_level + self.config.zoom_step)

    def zoom_out(self) -> float:
        return self.set_zoom(self.zoom_level - self.config.zoom_step)

    def get_zoom_percent(self) -> int:
        """
        Get current zoom as percentage.

        Returns:
            Zoom percentage (100 = actual size)
        """
        return int(round(self.zoom_level * 100))

    def rotate(self, degrees: int = 90) -> int:
        """
        Rotate the view.

        Args:
            degrees: Clockwise step, a multiple of 90

        Returns:
            The new rotation in [0, 360)
        """
        if degrees % 90 != 0:
            raise ValueError(f"View rotation must be a multiple of 90, got {degrees}")
        self.rotation = (self.rotation + degrees) % 360
        self.rotation_changed.emit(self.rotation)
        return self.rotation
