"""
Annotation system for PDF pages.
"""
from .merge import ShapeMergeResolver
from .models import (
    Annotation,
    AnnotationKind,
    LineGeometry,
    PolygonGeometry,
    StrokeStyle,
    ToolKind,
    make_line,
    make_polygon,
)
from .projection import (
    CanvasItem,
    CommittedShape,
    PreviewArtifact,
    PreviewRole,
    project_annotation,
    project_page,
)
from .session import LineDraft, PolygonConstructionSession, SessionState
from .store import AnnotationStore

__all__ = [
    'Annotation',
    'AnnotationKind',
    'LineGeometry',
    'PolygonGeometry',
    'StrokeStyle',
    'ToolKind',
    'make_line',
    'make_polygon',
    'CanvasItem',
    'CommittedShape',
    'PreviewArtifact',
    'PreviewRole',
    'project_annotation',
    'project_page',
    'LineDraft',
    'PolygonConstructionSession',
    'SessionState',
    'AnnotationStore',
    'ShapeMergeResolver',
]
