"""
Core annotation engine for Polymark.
"""
from .annotations import Annotation, AnnotationStore, ShapeMergeResolver
from .errors import (
    AnnotationError,
    DocumentError,
    ExportError,
    InsufficientGeometry,
    InvalidZoom,
    MalformedAnnotation,
    SessionClosed,
)
from .selection import ShapeSelection, hit_test

__all__ = [
    "Annotation",
    "AnnotationStore",
    "ShapeMergeResolver",
    "ShapeSelection",
    "hit_test",
    "AnnotationError",
    "DocumentError",
    "ExportError",
    "InsufficientGeometry",
    "InvalidZoom",
    "MalformedAnnotation",
    "SessionClosed",
]
