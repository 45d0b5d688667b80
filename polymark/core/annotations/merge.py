"""
Merging selected shapes into a single polygon.

The merge is a concatenation of world-space vertices in selection order,
not a geometric union or hull. Shapes whose endpoints already chain
together (adjoining segments) give a simple polygon; disjoint shapes can
give a self-intersecting one.
"""
import logging
from typing import List, Optional, Sequence

import fitz  # PyMuPDF

from polymark.core.annotations.models import (
    MIN_POLYGON_VERTICES,
    Annotation,
    StrokeStyle,
    make_polygon,
)
from polymark.core.annotations.store import AnnotationStore
from polymark.core.errors import InsufficientGeometry
from polymark.core.geometry import CanonicalPoint

logger = logging.getLogger(__name__)

MIN_MERGE_SHAPES = 2


class ShapeMergeResolver:
    """Collapses two or more selected annotations into one polygon."""

    def __init__(self, store: AnnotationStore):
        self.store = store

    @staticmethod
    def resolve_points(
        selection: Sequence[Annotation], parent: Optional[fitz.Matrix] = None
    ) -> List[CanonicalPoint]:
        """
        Map every selected shape's local points into the shared frame.

        Args:
            selection: Annotations in selection order
            parent: Optional ancestor matrix shared by the selection

        Returns:
            All world points, shape by shape, each shape in its own order
        """
        points: List[CanonicalPoint] = []
        for annotation in selection:
            points.extend(annotation.world_points(parent))
        return points

    def merge(
        self,
        selection: Sequence[Annotation],
        style: StrokeStyle,
        parent: Optional[fitz.Matrix] = None,
    ) -> Annotation:
        """
        Replace the selected shapes with one polygon.

        Args:
            selection: Annotations in selection order, all on one page
            style: Stroke style of the active tool
            parent: Optional ancestor matrix shared by the selection

        Returns:
            The new polygon annotation

        Raises:
            InsufficientGeometry: Fewer than 2 shapes or 3 merged points
            ValueError: Shapes span pages or are no longer in the store
        """
        shapes = _unique(selection)
        if len(shapes) < MIN_MERGE_SHAPES:
            raise InsufficientGeometry(
                f"Merge needs at least {MIN_MERGE_SHAPES} shapes, got {len(shapes)}",
                point_count=sum(len(s.local_points()) for s in shapes),
                shape_count=len(shapes),
            )

        page = shapes[0].page
        for shape in shapes:
            if shape.page != page:
                raise ValueError("Cannot merge shapes from different pages")
            if self.store.get(page, shape.id) is None:
                raise ValueError(f"Annotation {shape.id!r} is not in the store")

        points = self.resolve_points(shapes, parent)
        if len(points) < MIN_POLYGON_VERTICES:
            raise InsufficientGeometry(
                f"Merged shape needs at least {MIN_POLYGON_VERTICES} points, got {len(points)}",
                point_count=len(points),
                shape_count=len(shapes),
            )

        merged = make_polygon(self.store.next_id(page), page, points, style)
        self.store.replace(page, [s.id for s in shapes], [merged])

        logger.info(
            f"Merged {len(shapes)} shapes on page {page} into {merged.id} "
            f"({len(points)} vertices)"
        )
        return merged


def _unique(selection: Sequence[Annotation]) -> List[Annotation]:
    seen = set()
    shapes = []
    for annotation in selection:
        key = (annotation.page, annotation.id)
        if key not in seen:
            seen.add(key)
            shapes.append(annotation)
    return shapes
