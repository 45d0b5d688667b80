"""Shape selection and hit testing."""

from .shape_selection import ShapeSelection, hit_test

__all__ = ["ShapeSelection", "hit_test"]
