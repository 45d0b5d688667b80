"""
Conversion between device space and canonical space.

Device space is the pixel frame of a page drawn at the current zoom.
Canonical space is the same frame at zoom = 1.0, which is also the PDF
point frame PyMuPDF reports for a page. Every zoom multiplication and
division in the application happens in this module.
"""
import math
from dataclasses import dataclass
from typing import Iterable, List

import fitz  # PyMuPDF

from polymark.core.errors import InvalidZoom


@dataclass(frozen=True)
class CanonicalPoint:
    """A point in canonical (zoom = 1.0) space."""

    x: float
    y: float


@dataclass(frozen=True)
class DevicePoint:
    """A point in device space at some zoom level."""

    x: float
    y: float


def check_zoom(zoom: float) -> float:
    """
    Validate a zoom factor.

    Args:
        zoom: Zoom factor to validate

    Returns:
        The zoom as a float

    Raises:
        InvalidZoom: If zoom is not a finite number greater than zero
    """
    try:
        value = float(zoom)
    except (TypeError, ValueError):
        raise InvalidZoom(zoom) from None

    if not math.isfinite(value) or value <= 0:
        raise InvalidZoom(zoom)
    return value


def to_canonical(point: DevicePoint, zoom: float) -> CanonicalPoint:
    """
    Convert a device-space point to canonical space.

    Args:
        point: Point in device pixels at ``zoom``
        zoom: Zoom the point was captured at

    Returns:
        The same location at zoom = 1.0
    """
    if not isinstance(point, DevicePoint):
        raise TypeError(f"to_canonical expects a DevicePoint, got {type(point).__name__}")
    zoom = check_zoom(zoom)
    return CanonicalPoint(point.x / zoom, point.y / zoom)


def to_device(point: CanonicalPoint, zoom: float) -> DevicePoint:
    """
    Convert a canonical point to device space.

    Args:
        point: Point in canonical space
        zoom: Zoom to project at

    Returns:
        The same location in device pixels at ``zoom``
    """
    if not isinstance(point, CanonicalPoint):
        raise TypeError(f"to_device expects a CanonicalPoint, got {type(point).__name__}")
    zoom = check_zoom(zoom)
    return DevicePoint(point.x * zoom, point.y * zoom)


def length_to_canonical(value: float, zoom: float) -> float:
    """Convert a device-space length (e.g. a stroke width) to canonical space."""
    return float(value) / check_zoom(zoom)


def length_to_device(value: float, zoom: float) -> float:
    """Convert a canonical length (e.g. a stroke width) to device space."""
    return float(value) * check_zoom(zoom)


def points_to_canonical(points: Iterable[DevicePoint], zoom: float) -> List[CanonicalPoint]:
    """Convert a sequence of device points, keeping their order."""
    zoom = check_zoom(zoom)
    return [to_canonical(p, zoom) for p in points]


def points_to_device(points: Iterable[CanonicalPoint], zoom: float) -> List[DevicePoint]:
    """Convert a sequence of canonical points, keeping their order."""
    zoom = check_zoom(zoom)
    return [to_device(p, zoom) for p in points]


def zoom_matrix(zoom: float) -> fitz.Matrix:
    """
    Build the raster matrix for rendering a page at ``zoom``.

    Args:
        zoom: Zoom factor

    Returns:
        A PyMuPDF scaling matrix
    """
    zoom = check_zoom(zoom)
    return fitz.Matrix(zoom, zoom)
