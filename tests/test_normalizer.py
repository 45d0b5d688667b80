"""Tests for device/canonical conversion."""

import math

import pytest

from polymark.core.errors import InvalidZoom
from polymark.core.geometry import (
    CanonicalPoint,
    DevicePoint,
    check_zoom,
    length_to_canonical,
    length_to_device,
    points_to_canonical,
    points_to_device,
    to_canonical,
    to_device,
    zoom_matrix,
)


@pytest.mark.parametrize("zoom", [0.25, 0.5, 1.0, 1.5, 2.2, 3.0])
def test_round_trip_is_identity(zoom):
    p = DevicePoint(123.4, 56.7)
    back = to_device(to_canonical(p, zoom), zoom)
    assert back.x == pytest.approx(p.x)
    assert back.y == pytest.approx(p.y)


def test_canonical_point_does_not_depend_on_zoom():
    # The same spot on the page clicked at two zoom levels
    at_1 = to_canonical(DevicePoint(40, 60), 1.0)
    at_2 = to_canonical(DevicePoint(80, 120), 2.0)
    assert at_1 == at_2 == CanonicalPoint(40, 60)


def test_to_device_scales_by_zoom():
    assert to_device(CanonicalPoint(10, 20), 1.5) == DevicePoint(15, 30)


def test_lengths_scale_like_points():
    assert length_to_device(2, 1.5) == 3.0
    assert length_to_canonical(3, 1.5) == 2.0


def test_point_lists_keep_order():
    device = [DevicePoint(20, 20), DevicePoint(100, 20), DevicePoint(60, 80)]
    canonical = points_to_canonical(device, 2.0)
    assert canonical == [CanonicalPoint(10, 10), CanonicalPoint(50, 10), CanonicalPoint(30, 40)]
    assert points_to_device(canonical, 2.0) == device


@pytest.mark.parametrize("zoom", [0, -1, float("nan"), float("inf"), "abc", None])
def test_invalid_zoom_rejected(zoom):
    with pytest.raises(InvalidZoom):
        check_zoom(zoom)
    with pytest.raises(InvalidZoom):
        to_canonical(DevicePoint(1, 1), zoom)


def test_invalid_zoom_is_a_value_error():
    with pytest.raises(ValueError):
        to_device(CanonicalPoint(1, 1), 0)


def test_spaces_are_not_interchangeable():
    with pytest.raises(TypeError):
        to_canonical(CanonicalPoint(1, 1), 2.0)
    with pytest.raises(TypeError):
        to_device(DevicePoint(1, 1), 2.0)


def test_zoom_matrix_matches_to_device():
    m = zoom_matrix(2.5)
    assert (m.a, m.d) == (2.5, 2.5)
    assert math.isclose(m.b, 0) and math.isclose(m.c, 0)
