"""
Custom widgets for page display and interaction.
"""

from .page_canvas import PageCanvas, pixmap_to_qpixmap, rotation_transform

__all__ = [
    "PageCanvas",
    "pixmap_to_qpixmap",
    "rotation_transform",
]
