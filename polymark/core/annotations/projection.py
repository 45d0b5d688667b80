"""
Device-space display items for the page canvas and the exporter.

The canvas draws a list of ``CanvasItem``: either a ``CommittedShape``
(an annotation re-projected at the current zoom) or a ``PreviewArtifact``
(transient construction feedback). Neither type is accepted by the store.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union

from polymark.core.annotations.models import Annotation, Color
from polymark.core.geometry import DevicePoint, length_to_device, points_to_device


class PreviewRole(Enum):
    MARKER = "marker"  # dot at a clicked vertex
    SEGMENT = "segment"  # solid edge between two consecutive clicks
    OUTLINE = "outline"  # dashed closed polygon once enough points exist


@dataclass(frozen=True)
class PreviewArtifact:
    """Non-interactive construction feedback, in device space."""

    role: PreviewRole
    points: Tuple[DevicePoint, ...]
    color: Color
    width: float
    radius: float = 0.0
    dashes: Optional[Tuple[float, float]] = None
    opacity: float = 1.0
    closed: bool = False
    outline_color: Optional[Color] = None  # marker ring
    outline_width: float = 0.0


@dataclass(frozen=True)
class CommittedShape:
    """A stored annotation projected to device space."""

    annotation: Annotation
    points: Tuple[DevicePoint, ...]
    width: float

    @property
    def closed(self) -> bool:
        return self.annotation.is_closed

    @property
    def color(self) -> Color:
        return self.annotation.style.color


CanvasItem = Union[CommittedShape, PreviewArtifact]


def project_annotation(annotation: Annotation, zoom: float) -> CommittedShape:
    """
    Re-project an annotation for drawing at ``zoom``.

    The transform is applied in canonical space, then world points and the
    stroke width go through the normalizer.

    Args:
        annotation: Stored annotation
        zoom: Target zoom (interactive zoom or export scale)

    Returns:
        Device-space shape
    """
    return CommittedShape(
        annotation=annotation,
        points=tuple(points_to_device(annotation.world_points(), zoom)),
        width=length_to_device(annotation.style.width, zoom),
    )


def project_page(annotations: Iterable[Annotation], zoom: float) -> List[CommittedShape]:
    """Project a page's annotations, keeping store order (bottom to top)."""
    return [project_annotation(ann, zoom) for ann in annotations]
