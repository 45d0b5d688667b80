"""
Error kinds raised by the annotation engine.
"""
from typing import Any, Optional


class AnnotationError(Exception):
    """Base class for all annotation engine errors."""


class InvalidZoom(AnnotationError, ValueError):
    """Raised when a zoom factor is not a finite number greater than zero."""

    def __init__(self, zoom: Any):
        super().__init__(f"Zoom must be a finite number > 0, got {zoom!r}")
        self.zoom = zoom


class InsufficientGeometry(AnnotationError):
    """Raised when an operation would produce a polygon with too few points."""

    def __init__(self, message: str, point_count: int = 0, shape_count: int = 0):
        super().__init__(message)
        self.point_count = point_count
        self.shape_count = shape_count


class MalformedAnnotation(AnnotationError, ValueError):
    """Raised when annotation data has missing or invalid geometry."""

    def __init__(self, message: str, record: Optional[Any] = None):
        super().__init__(message)
        self.record = record


class SessionClosed(AnnotationError):
    """Raised when a finished polygon session receives more points."""


class DocumentError(AnnotationError):
    """Raised by the document renderer for unreadable files or bad pages."""


class ExportError(AnnotationError):
    """Terminal failure of an export operation."""
