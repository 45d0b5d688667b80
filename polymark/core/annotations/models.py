"""
Annotation data model.

All committed geometry is stored in canonical space. Device-space objects
(preview artifacts) live in ``projection`` and never enter the store.
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import fitz  # PyMuPDF

from polymark.core.errors import MalformedAnnotation
from polymark.core.geometry import IDENTITY, AffineTransform, CanonicalPoint

Color = Tuple[int, int, int]

MIN_POLYGON_VERTICES = 3


class AnnotationKind(Enum):
    LINE = "line"
    POLYGON = "polygon"


class ToolKind(Enum):
    """Tools offered by the annotation toolbar."""

    SELECT = "select"
    HAND = "hand"
    LINE = "line"
    POLYGON = "polygon"


@dataclass(frozen=True)
class StrokeStyle:
    """Stroke colour (RGB 0-255) and width in canonical units."""

    color: Color = (59, 130, 246)
    width: float = 2.0

    def __post_init__(self):
        if len(self.color) != 3 or not all(0 <= c <= 255 for c in self.color):
            raise ValueError(f"Invalid RGB colour: {self.color!r}")
        if not math.isfinite(self.width) or self.width <= 0:
            raise ValueError(f"Stroke width must be > 0, got {self.width!r}")

    @property
    def pdf_color(self) -> Tuple[float, float, float]:
        """Colour in the 0-1 range PyMuPDF expects."""
        return tuple(c / 255.0 for c in self.color)

    def to_dict(self) -> Dict[str, Any]:
        return {"color": list(self.color), "width": self.width}


def _require_finite(point: CanonicalPoint) -> CanonicalPoint:
    if not isinstance(point, CanonicalPoint):
        raise MalformedAnnotation(
            f"Geometry must use canonical points, got {type(point).__name__}"
        )
    if not (math.isfinite(point.x) and math.isfinite(point.y)):
        raise MalformedAnnotation(f"Non-finite coordinate in {point!r}")
    return point


@dataclass(frozen=True)
class LineGeometry:
    start: CanonicalPoint
    end: CanonicalPoint

    def __post_init__(self):
        _require_finite(self.start)
        _require_finite(self.end)

    @property
    def points(self) -> List[CanonicalPoint]:
        return [self.start, self.end]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": [self.start.x, self.start.y],
            "end": [self.end.x, self.end.y],
        }


@dataclass(frozen=True)
class PolygonGeometry:
    vertices: Tuple[CanonicalPoint, ...]

    def __post_init__(self):
        # Accept any sequence but store a tuple so the geometry stays immutable
        object.__setattr__(self, "vertices", tuple(self.vertices))
        if len(self.vertices) < MIN_POLYGON_VERTICES:
            raise MalformedAnnotation(
                f"Polygon needs at least {MIN_POLYGON_VERTICES} vertices, "
                f"got {len(self.vertices)}"
            )
        for vertex in self.vertices:
            _require_finite(vertex)

    @property
    def points(self) -> List[CanonicalPoint]:
        return list(self.vertices)

    def to_dict(self) -> Dict[str, Any]:
        return {"vertices": [[v.x, v.y] for v in self.vertices]}


Geometry = Union[LineGeometry, PolygonGeometry]

_GEOMETRY_FOR_KIND = {
    AnnotationKind.LINE: LineGeometry,
    AnnotationKind.POLYGON: PolygonGeometry,
}


@dataclass(frozen=True)
class Annotation:
    """A committed line or polygon on one page."""

    id: str
    page: int  # 1-based page number
    kind: AnnotationKind
    geometry: Geometry
    style: StrokeStyle = field(default_factory=StrokeStyle)
    transform: AffineTransform = IDENTITY

    def __post_init__(self):
        if not self.id:
            raise MalformedAnnotation("Annotation id must not be empty")
        if isinstance(self.page, bool) or not isinstance(self.page, int) or self.page < 1:
            raise MalformedAnnotation(f"Page must be a positive integer, got {self.page!r}")
        if not isinstance(self.geometry, _GEOMETRY_FOR_KIND[self.kind]):
            raise MalformedAnnotation(
                f"{self.kind.value} annotation cannot hold "
                f"{type(self.geometry).__name__}"
            )

    @property
    def is_closed(self) -> bool:
        return self.kind == AnnotationKind.POLYGON

    def local_points(self) -> List[CanonicalPoint]:
        """Endpoints of a line, or vertices of a polygon, before the transform."""
        return self.geometry.points

    def world_points(self, parent: Optional[fitz.Matrix] = None) -> List[CanonicalPoint]:
        """
        Local points mapped through the annotation's transform.

        Args:
            parent: Optional ancestor matrix applied after the own transform

        Returns:
            Canonical world-space points in local order
        """
        return self.transform.apply(self.local_points(), parent)

    def to_dict(self) -> Dict[str, Any]:
        """Convert annotation to a plain dictionary."""
        data = {
            "id": self.id,
            "page": self.page,
            "type": self.kind.value,
            "style": self.style.to_dict(),
            "geometry": self.geometry.to_dict(),
        }
        if not self.transform.is_identity:
            data["transform"] = self.transform.to_dict()
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Annotation":
        """
        Create an annotation from its dictionary form.

        Raises:
            MalformedAnnotation: If any required field is missing or invalid
        """
        try:
            kind = AnnotationKind(data["type"])
            geometry_data = data["geometry"]

            if kind == AnnotationKind.LINE:
                geometry = LineGeometry(
                    start=_point_from_pair(geometry_data["start"]),
                    end=_point_from_pair(geometry_data["end"]),
                )
            else:
                geometry = PolygonGeometry(
                    vertices=tuple(_point_from_pair(v) for v in geometry_data["vertices"])
                )

            style_data = data.get("style") or {}
            style = StrokeStyle(
                color=tuple(int(c) for c in style_data.get("color", StrokeStyle.color)),
                width=float(style_data.get("width", StrokeStyle.width)),
            )

            return Annotation(
                id=str(data["id"]),
                page=data["page"],
                kind=kind,
                geometry=geometry,
                style=style,
                transform=AffineTransform.from_dict(data.get("transform")),
            )
        except MalformedAnnotation as e:
            if e.record is None:
                e.record = data
            raise
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise MalformedAnnotation(f"Invalid annotation record: {e!r}", data) from e


def _point_from_pair(pair: Sequence[float]) -> CanonicalPoint:
    x, y = pair
    return CanonicalPoint(float(x), float(y))


def make_line(
    annotation_id: str,
    page: int,
    start: CanonicalPoint,
    end: CanonicalPoint,
    style: StrokeStyle,
) -> Annotation:
    """Build a line annotation with an identity transform."""
    return Annotation(
        id=annotation_id,
        page=page,
        kind=AnnotationKind.LINE,
        geometry=LineGeometry(start, end),
        style=style,
    )


def make_polygon(
    annotation_id: str,
    page: int,
    vertices: Sequence[CanonicalPoint],
    style: StrokeStyle,
) -> Annotation:
    """Build a polygon annotation with an identity transform."""
    return Annotation(
        id=annotation_id,
        page=page,
        kind=AnnotationKind.POLYGON,
        geometry=PolygonGeometry(tuple(vertices)),
        style=style,
    )
