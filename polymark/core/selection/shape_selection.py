"""
Selection of annotations on the current page and device-space hit testing.
"""
from typing import List, Optional, Sequence

from polymark.core.annotations.models import Annotation
from polymark.core.annotations.projection import CommittedShape
from polymark.core.annotations.store import AnnotationStore
from polymark.core.geometry import DevicePoint


class ShapeSelection:
    """Ordered set of selected annotation ids on one page."""

    def __init__(self, page: int = 1):
        self.page = page
        self._ids: List[str] = []

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, annotation_id: str) -> bool:
        return annotation_id in self._ids

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    @property
    def can_merge(self) -> bool:
        return len(self._ids) >= 2

    def merge_label(self) -> str:
        return f"Merge {len(self._ids)} objects"

    def select(self, annotation_id: str, additive: bool = False) -> None:
        """
        Select an annotation.

        Args:
            annotation_id: Id to select
            additive: Keep the existing selection and append to it
        """
        if not additive:
            self._ids = []
        if annotation_id not in self._ids:
            self._ids.append(annotation_id)

    def toggle(self, annotation_id: str) -> None:
        if annotation_id in self._ids:
            self._ids.remove(annotation_id)
        else:
            self._ids.append(annotation_id)

    def set_ids(self, ids: Sequence[str]) -> None:
        self._ids = []
        for annotation_id in ids:
            if annotation_id not in self._ids:
                self._ids.append(annotation_id)

    def clear(self) -> None:
        self._ids = []

    def reset(self, page: int) -> None:
        """Clear the selection and move it to another page."""
        self.page = page
        self._ids = []

    def resolve(self, store: AnnotationStore) -> List[Annotation]:
        """
        Current annotations for the selected ids, in selection order.

        Ids that no longer exist in the store are dropped from the selection.
        """
        resolved = []
        for annotation_id in self._ids:
            ann = store.get(self.page, annotation_id)
            if ann is not None:
                resolved.append(ann)
        self._ids = [ann.id for ann in resolved]
        return resolved


def hit_test(
    shapes: Sequence[CommittedShape], point: DevicePoint, tolerance: float
) -> Optional[Annotation]:
    """
    Find the top-most shape at a device point.

    Args:
        shapes: Projected shapes in drawing order (last is on top)
        point: Pointer position in device space
        tolerance: Extra pick distance in device pixels

    Returns:
        The annotation under the point, or None
    """
    for shape in reversed(shapes):
        reach = max(shape.width / 2.0 + tolerance, tolerance)
        if _near_outline(shape, point, reach):
            return shape.annotation
        if shape.closed and _point_in_polygon(point, shape.points):
            return shape.annotation
    return None


def _near_outline(shape: CommittedShape, point: DevicePoint, reach: float) -> bool:
    pts = list(shape.points)
    if shape.closed:
        pts.append(pts[0])
    for p1, p2 in zip(pts, pts[1:]):
        if _point_near_line(point.x, point.y, p1.x, p1.y, p2.x, p2.y, reach):
            return True
    return False


def _point_near_line(
    px: float, py: float, x1: float, y1: float, x2: float, y2: float, tolerance: float
) -> bool:
    """Check if a point is within ``tolerance`` of a line segment."""
    line_length_sq = (x2 - x1) ** 2 + (y2 - y1) ** 2

    if line_length_sq == 0:
        dist = ((px - x1) ** 2 + (py - y1) ** 2) ** 0.5
        return dist <= tolerance

    # Projection of the point onto the segment, clamped to its ends
    t = max(0, min(1, ((px - x1) * (x2 - x1) + (py - y1) * (y2 - y1)) / line_length_sq))
    nearest_x = x1 + t * (x2 - x1)
    nearest_y = y1 + t * (y2 - y1)

    dist = ((px - nearest_x) ** 2 + (py - nearest_y) ** 2) ** 0.5
    return dist <= tolerance


def _point_in_polygon(point: DevicePoint, vertices: Sequence[DevicePoint]) -> bool:
    """Even-odd ray casting test."""
    inside = False
    n = len(vertices)
    j = n - 1
    for i in range(n):
        xi, yi = vertices[i].x, vertices[i].y
        xj, yj = vertices[j].x, vertices[j].y
        if (yi > point.y) != (yj > point.y):
            x_cross = (xj - xi) * (point.y - yi) / (yj - yi) + xi
            if point.x < x_cross:
                inside = not inside
        j = i
    return inside
