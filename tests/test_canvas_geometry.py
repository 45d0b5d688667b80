"""The canvas rotation must agree with how PyMuPDF rotates the page raster."""

import fitz
import pytest
from PyQt5.QtCore import QPointF

from polymark.core.document import PageDimensions
from polymark.ui.widgets import rotation_transform


@pytest.mark.parametrize("rotation", [0, 90, 180, 270])
def test_rotation_matches_rendered_raster(rotation):
    dims = PageDimensions(200, 300)
    page_rect = fitz.Rect(0, 0, dims.width, dims.height)
    m = fitz.Matrix(1, 1).prerotate(rotation)
    origin = (page_rect * m).tl

    transform = rotation_transform(rotation, dims)
    for x, y in [(0, 0), (20, 50), (200, 300)]:
        expected = fitz.Point(x, y) * m - origin
        actual = transform.map(QPointF(x, y))
        assert actual.x() == pytest.approx(expected.x, abs=1e-6)
        assert actual.y() == pytest.approx(expected.y, abs=1e-6)


def test_rotation_is_invertible():
    transform = rotation_transform(90, PageDimensions(200, 300))
    inverse, ok = transform.inverted()
    assert ok
    back = inverse.map(transform.map(QPointF(12, 34)))
    assert back.x() == pytest.approx(12)
    assert back.y() == pytest.approx(34)
