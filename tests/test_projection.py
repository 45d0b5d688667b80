"""Tests for device-space projection."""

from dataclasses import replace

import pytest

from polymark.core.annotations import CommittedShape, project_annotation, project_page
from polymark.core.geometry import AffineTransform, DevicePoint


@pytest.mark.parametrize("zoom", [0.5, 1.0, 1.5, 3.0])
def test_projection_scales_points_and_width(line, zoom):
    shape = project_annotation(line, zoom)
    assert shape.points == (DevicePoint(10 * zoom, 10 * zoom), DevicePoint(50 * zoom, 10 * zoom))
    assert shape.width == pytest.approx(2.0 * zoom)
    assert shape.color == line.style.color
    assert not shape.closed


def test_projection_uses_world_points(square):
    moved = replace(square, transform=AffineTransform(translate_x=10))
    shape = project_annotation(moved, 2.0)
    assert shape.points[0] == DevicePoint(140, 120)
    assert shape.closed


def test_project_page_keeps_order(store):
    shapes = project_page(store.by_page(1), 1.0)
    assert all(isinstance(s, CommittedShape) for s in shapes)
    assert [s.annotation.id for s in shapes] == ["1-0", "1-1"]
