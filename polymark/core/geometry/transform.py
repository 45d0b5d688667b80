"""
Affine transforms applied on top of a shape's local geometry.
"""
import math
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence

import fitz  # PyMuPDF

from polymark.core.geometry.normalizer import CanonicalPoint


def bounding_center(points: Sequence[CanonicalPoint]) -> CanonicalPoint:
    """
    Centre of the axis-aligned bounding box of ``points``.

    Args:
        points: Non-empty sequence of canonical points

    Returns:
        The bounding box centre
    """
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return CanonicalPoint((min(xs) + max(xs)) / 2.0, (min(ys) + max(ys)) / 2.0)


@dataclass(frozen=True)
class AffineTransform:
    """
    Translate, scale and rotation of a shape, in canonical units.

    The transform acts about the centre of the shape's local bounding box:
    ``world(p) = c + t + R(rotation) * S(scale) * (p - c)``. Positive
    rotation turns clockwise on screen since the y axis points down.
    """

    translate_x: float = 0.0
    translate_y: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    rotation_degrees: float = 0.0

    def __post_init__(self):
        values = (
            self.translate_x,
            self.translate_y,
            self.scale_x,
            self.scale_y,
            self.rotation_degrees,
        )
        if not all(math.isfinite(v) for v in values):
            raise ValueError(f"Transform values must be finite: {values}")
        if self.scale_x == 0 or self.scale_y == 0:
            raise ValueError("Transform scale must be non-zero")

    @property
    def is_identity(self) -> bool:
        return (
            self.translate_x == 0
            and self.translate_y == 0
            and self.scale_x == 1
            and self.scale_y == 1
            and self.rotation_degrees % 360 == 0
        )

    def matrix(self, pivot: CanonicalPoint) -> fitz.Matrix:
        """
        Build the local-to-parent matrix for a shape centred on ``pivot``.

        Args:
            pivot: Centre of the shape's local bounding box

        Returns:
            PyMuPDF matrix; transform a point with ``fitz.Point(x, y) * m``
        """
        # Row-vector convention: m1 * m2 applies m1 first.
        m = fitz.Matrix(1, 0, 0, 1, -pivot.x, -pivot.y)
        m = m * fitz.Matrix(self.scale_x, self.scale_y)
        m = m * fitz.Matrix(self.rotation_degrees)
        m = m * fitz.Matrix(
            1, 0, 0, 1, pivot.x + self.translate_x, pivot.y + self.translate_y
        )
        return m

    def apply(
        self,
        points: Sequence[CanonicalPoint],
        parent: Optional[fitz.Matrix] = None,
    ) -> List[CanonicalPoint]:
        """
        Map local points into the world frame.

        Args:
            points: The shape's local points
            parent: Optional ancestor matrix applied after this transform

        Returns:
            World-space points in the same order
        """
        if not points:
            return []
        if self.is_identity and parent is None:
            return list(points)

        m = self.matrix(bounding_center(points))
        if parent is not None:
            m = m * parent

        result = []
        for p in points:
            q = fitz.Point(p.x, p.y) * m
            result.append(CanonicalPoint(q.x, q.y))
        return result

    def translated(self, dx: float, dy: float) -> "AffineTransform":
        """Return a copy moved by (dx, dy) canonical units."""
        return replace(
            self,
            translate_x=self.translate_x + dx,
            translate_y=self.translate_y + dy,
        )

    def rotated(self, degrees: float) -> "AffineTransform":
        """Return a copy rotated by ``degrees`` more, normalised to [0, 360)."""
        return replace(self, rotation_degrees=(self.rotation_degrees + degrees) % 360)

    def scaled(self, factor_x: float, factor_y: Optional[float] = None) -> "AffineTransform":
        """Return a copy with its scale multiplied by the given factors."""
        if factor_y is None:
            factor_y = factor_x
        return replace(
            self, scale_x=self.scale_x * factor_x, scale_y=self.scale_y * factor_y
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "translate": [self.translate_x, self.translate_y],
            "scale": [self.scale_x, self.scale_y],
            "rotation": self.rotation_degrees,
        }

    @staticmethod
    def from_dict(data: Optional[Dict[str, Any]]) -> "AffineTransform":
        """Create a transform from its dictionary form; None means identity."""
        if not data:
            return AffineTransform()
        tx, ty = data.get("translate", (0.0, 0.0))
        sx, sy = data.get("scale", (1.0, 1.0))
        return AffineTransform(
            translate_x=float(tx),
            translate_y=float(ty),
            scale_x=float(sx),
            scale_y=float(sy),
            rotation_degrees=float(data.get("rotation", 0.0)),
        )


IDENTITY = AffineTransform()
