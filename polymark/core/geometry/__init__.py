"""
Coordinate spaces and affine transforms.
"""
from .normalizer import (
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
from .transform import IDENTITY, AffineTransform, bounding_center

__all__ = [
    "CanonicalPoint",
    "DevicePoint",
    "check_zoom",
    "to_canonical",
    "to_device",
    "length_to_canonical",
    "length_to_device",
    "points_to_canonical",
    "points_to_device",
    "zoom_matrix",
    "AffineTransform",
    "IDENTITY",
    "bounding_center",
]
