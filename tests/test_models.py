"""Tests for the annotation data model."""

import pytest

from polymark.core.annotations import (
    Annotation,
    AnnotationKind,
    LineGeometry,
    PolygonGeometry,
    StrokeStyle,
    make_line,
    make_polygon,
)
from polymark.core.errors import MalformedAnnotation
from polymark.core.geometry import AffineTransform, CanonicalPoint, DevicePoint


def test_default_style():
    style = StrokeStyle()
    assert style.color == (59, 130, 246)
    assert style.width == 2.0
    assert style.pdf_color == pytest.approx((59 / 255, 130 / 255, 246 / 255))


@pytest.mark.parametrize("kwargs", [{"color": (0, 0, 256)}, {"color": (1, 2)}, {"width": 0}, {"width": -1}])
def test_invalid_style(kwargs):
    with pytest.raises(ValueError):
        StrokeStyle(**kwargs)


def test_polygon_needs_three_vertices():
    with pytest.raises(MalformedAnnotation):
        PolygonGeometry((CanonicalPoint(0, 0), CanonicalPoint(1, 1)))


def test_geometry_rejects_device_points():
    with pytest.raises(MalformedAnnotation):
        LineGeometry(DevicePoint(0, 0), CanonicalPoint(1, 1))


def test_geometry_rejects_non_finite():
    with pytest.raises(MalformedAnnotation):
        LineGeometry(CanonicalPoint(float("nan"), 0), CanonicalPoint(1, 1))


def test_polygon_vertices_stored_as_tuple():
    geometry = PolygonGeometry([CanonicalPoint(0, 0), CanonicalPoint(1, 0), CanonicalPoint(0, 1)])
    assert isinstance(geometry.vertices, tuple)


def test_kind_must_match_geometry(style):
    with pytest.raises(MalformedAnnotation):
        Annotation(
            "1-0", 1, AnnotationKind.POLYGON,
            LineGeometry(CanonicalPoint(0, 0), CanonicalPoint(1, 1)), style,
        )


@pytest.mark.parametrize("page", [0, -1, True, 1.0, "1"])
def test_page_must_be_positive_int(page, style):
    with pytest.raises(MalformedAnnotation):
        make_line("x", page, CanonicalPoint(0, 0), CanonicalPoint(1, 1), style)


def test_empty_id_rejected(style):
    with pytest.raises(MalformedAnnotation):
        make_line("", 1, CanonicalPoint(0, 0), CanonicalPoint(1, 1), style)


def test_local_and_world_points(line):
    assert line.local_points() == [CanonicalPoint(10, 10), CanonicalPoint(50, 10)]
    assert line.world_points() == line.local_points()
    assert not line.is_closed


def test_world_points_follow_transform(square):
    from dataclasses import replace

    moved = replace(square, transform=AffineTransform(translate_x=5, translate_y=-5))
    assert moved.world_points()[0] == CanonicalPoint(65, 55)
    assert moved.local_points() == square.local_points()
    assert moved.is_closed


def test_to_dict(line):
    assert line.to_dict() == {
        "id": "1-0",
        "page": 1,
        "type": "line",
        "style": {"color": [220, 38, 38], "width": 2.0},
        "geometry": {"start": [10, 10], "end": [50, 10]},
    }


def test_dict_round_trip_with_transform(square):
    from dataclasses import replace

    rotated = replace(square, transform=AffineTransform(rotation_degrees=30, scale_x=2))
    data = rotated.to_dict()
    assert data["transform"]["rotation"] == 30
    assert Annotation.from_dict(data) == rotated


@pytest.mark.parametrize(
    "record",
    [
        {},
        {"id": "1-0", "page": 1, "type": "circle", "geometry": {}},
        {"id": "1-0", "page": 1, "type": "line", "geometry": {"start": [0, 0]}},
        {"id": "1-0", "page": 1, "type": "line", "geometry": {"start": [0, 0], "end": ["a", 1]}},
        {"id": "1-0", "page": 1, "type": "polygon", "geometry": {"vertices": [[0, 0], [1, 1]]}},
        {"id": "1-0", "page": 0, "type": "line", "geometry": {"start": [0, 0], "end": [1, 1]}},
        "not a dict",
    ],
)
def test_from_dict_rejects_malformed(record):
    with pytest.raises(MalformedAnnotation) as info:
        Annotation.from_dict(record)
    assert info.value.record == record


def test_from_dict_defaults_style():
    ann = Annotation.from_dict(
        {"id": "3-0", "page": 3, "type": "polygon", "geometry": {"vertices": [[0, 0], [4, 0], [0, 3]]}}
    )
    assert ann.style == StrokeStyle()
    assert ann.transform.is_identity


def test_make_polygon(style):
    ann = make_polygon("2-0", 2, [CanonicalPoint(0, 0), CanonicalPoint(4, 0), CanonicalPoint(0, 3)], style)
    assert ann.kind == AnnotationKind.POLYGON
    assert len(ann.local_points()) == 3
