"""
Interactive construction of polygons and lines.

A polygon is built click by click in a ``PolygonConstructionSession``;
a line is dragged out in a ``LineDraft``. Both collect device-space
points and only convert to canonical space when they commit.
"""
import logging
from enum import Enum
from typing import List, Optional, Tuple

from polymark.core.annotations.models import (
    MIN_POLYGON_VERTICES,
    Annotation,
    StrokeStyle,
    make_line,
    make_polygon,
)
from polymark.core.annotations.projection import PreviewArtifact, PreviewRole
from polymark.core.annotations.store import AnnotationStore
from polymark.core.errors import SessionClosed
from polymark.core.geometry import (
    DevicePoint,
    check_zoom,
    length_to_canonical,
    length_to_device,
    points_to_canonical,
    to_canonical,
)

logger = logging.getLogger(__name__)

MARKER_OUTLINE_COLOR = (255, 255, 255)
MARKER_OUTLINE_WIDTH = 2.0  # canonical units


class SessionState(Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    COMMITTED = "committed"
    DISCARDED = "discarded"


class PolygonConstructionSession:
    """
    Accumulates clicks on one page into a candidate polygon.

    Points are kept in device space at the zoom the session was opened
    with. The preview is rebuilt on every click.
    """

    def __init__(
        self,
        page: int,
        store: AnnotationStore,
        style: StrokeStyle,
        zoom: float,
        marker_radius: float = 3.0,
        preview_dashes: Tuple[float, float] = (5.0, 5.0),
        preview_opacity: float = 0.7,
    ):
        self.page = page
        self.store = store
        self.style = style
        self.zoom = check_zoom(zoom)
        self.marker_radius = marker_radius
        self.preview_dashes = preview_dashes
        self.preview_opacity = preview_opacity

        self.state = SessionState.IDLE
        self._points: List[DevicePoint] = []
        self._preview: List[PreviewArtifact] = []

    @property
    def points(self) -> Tuple[DevicePoint, ...]:
        return tuple(self._points)

    @property
    def preview(self) -> List[PreviewArtifact]:
        return list(self._preview)

    @property
    def is_closed(self) -> bool:
        return self.state in (SessionState.COMMITTED, SessionState.DISCARDED)

    @property
    def can_commit(self) -> bool:
        return not self.is_closed and len(self._points) >= MIN_POLYGON_VERTICES

    def add_point(self, point: DevicePoint) -> None:
        """
        Append a clicked point.

        Args:
            point: Click position in device space

        Raises:
            SessionClosed: If the session already committed or was discarded
        """
        if self.is_closed:
            raise SessionClosed(f"Polygon session on page {self.page} is {self.state.value}")
        if not isinstance(point, DevicePoint):
            raise TypeError(f"Session points must be DevicePoint, got {type(point).__name__}")

        self._points.append(point)
        self.state = SessionState.COLLECTING
        self._rebuild_preview()

    def commit(self, zoom: float) -> Optional[Annotation]:
        """
        Turn the collected points into a polygon annotation.

        Args:
            zoom: Zoom active at commit time

        Returns:
            The new annotation, or None when fewer than 3 points exist
        """
        if not self.can_commit:
            logger.debug(
                f"Ignoring polygon commit on page {self.page} with {len(self._points)} point(s)"
            )
            return None

        device_width = length_to_device(self.style.width, self.zoom)
        style = StrokeStyle(
            color=self.style.color,
            width=length_to_canonical(device_width, zoom),
        )
        annotation = make_polygon(
            self.store.next_id(self.page),
            self.page,
            points_to_canonical(self._points, zoom),
            style,
        )
        self.store.add(annotation)

        self._clear()
        self.state = SessionState.COMMITTED
        logger.info(f"Committed polygon {annotation.id} with {len(annotation.local_points())} vertices")
        return annotation

    def discard(self) -> None:
        """Drop every point and preview artifact without creating anything."""
        self._clear()
        self.state = SessionState.DISCARDED

    def hint(self) -> str:
        """Indicator text shown on the canvas while the polygon tool is active."""
        count = len(self._points)
        if count == 0:
            return "Click to add points"
        if count < MIN_POLYGON_VERTICES:
            return f"Points: {count} (need {MIN_POLYGON_VERTICES} minimum)"
        return f"Points: {count} | Double-click to complete"

    def _clear(self) -> None:
        self._points = []
        self._preview = []

    def _rebuild_preview(self) -> None:
        width = length_to_device(self.style.width, self.zoom)
        radius = length_to_device(self.marker_radius, self.zoom)
        outline_width = length_to_device(MARKER_OUTLINE_WIDTH, self.zoom)
        color = self.style.color

        artifacts = [
            PreviewArtifact(
                PreviewRole.MARKER,
                (p,),
                color,
                width,
                radius=radius,
                outline_color=MARKER_OUTLINE_COLOR,
                outline_width=outline_width,
            )
            for p in self._points
        ]
        for prev, current in zip(self._points, self._points[1:]):
            artifacts.append(
                PreviewArtifact(PreviewRole.SEGMENT, (prev, current), color, width)
            )
        if len(self._points) >= MIN_POLYGON_VERTICES:
            artifacts.append(
                PreviewArtifact(
                    PreviewRole.OUTLINE,
                    tuple(self._points),
                    color,
                    width,
                    dashes=self.preview_dashes,
                    opacity=self.preview_opacity,
                    closed=True,
                )
            )
        self._preview = artifacts


class LineDraft:
    """A line being dragged out between pointer down and pointer up."""

    def __init__(self, page: int, start: DevicePoint, style: StrokeStyle, zoom: float):
        if not isinstance(start, DevicePoint):
            raise TypeError(f"Line points must be DevicePoint, got {type(start).__name__}")
        self.page = page
        self.style = style
        self.zoom = check_zoom(zoom)
        self.start = start
        self.end = start

    def move_to(self, point: DevicePoint) -> None:
        if not isinstance(point, DevicePoint):
            raise TypeError(f"Line points must be DevicePoint, got {type(point).__name__}")
        self.end = point

    @property
    def is_degenerate(self) -> bool:
        return self.start == self.end

    @property
    def preview(self) -> List[PreviewArtifact]:
        width = length_to_device(self.style.width, self.zoom)
        return [
            PreviewArtifact(
                PreviewRole.SEGMENT, (self.start, self.end), self.style.color, width
            )
        ]

    def commit(self, store: AnnotationStore, zoom: float) -> Optional[Annotation]:
        """
        Store the dragged line.

        Returns:
            The new annotation, or None for a zero-length drag
        """
        if self.is_degenerate:
            logger.debug(f"Ignoring zero-length line on page {self.page}")
            return None

        device_width = length_to_device(self.style.width, self.zoom)
        style = StrokeStyle(color=self.style.color, width=length_to_canonical(device_width, zoom))
        annotation = make_line(
            store.next_id(self.page),
            self.page,
            to_canonical(self.start, zoom),
            to_canonical(self.end, zoom),
            style,
        )
        store.add(annotation)
        logger.info(f"Committed line {annotation.id}")
        return annotation
