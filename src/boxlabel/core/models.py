"""Data models for BoxLabel annotations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Tuple

from PyQt6.QtCore import QPointF, QRectF
from PyQt6.QtGui import QColor

logger = logging.getLogger(__name__)

# Per-class outline colors, indexed by class index modulo the palette length
CLASS_PALETTE: Tuple[str, ...] = (
    "#e74c3c",
    "#3498db",
    "#2ecc71",
    "#f39c12",
    "#9b59b6",
    "#1abc9c",
    "#e67e22",
    "#34495e",
    "#16a085",
    "#c0392b",
    "#2980b9",
    "#8e44ad",
)

SELECTED_COLOR = "#000000"
DRAFT_COLOR = "#000000"


def color_for_class(class_index: int) -> QColor:
    """Return the outline color used for a class index."""
    return QColor(CLASS_PALETTE[class_index % len(CLASS_PALETTE)])


@dataclass(frozen=True)
class ImageRef:
    """
    A loaded image file.

    Identity is the name, which is unique within a session. Width and
    height are the intrinsic pixel dimensions (0 when not yet known).
    """

    name: str
    data: bytes = field(repr=False)
    width: int = 0
    height: int = 0

    @property
    def has_size(self) -> bool:
        """True when intrinsic dimensions are known."""
        return self.width > 0 and self.height > 0


@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned bounding box in absolute image-pixel space.

    Boxes are never mutated. The class name is captured when the box is
    created so that later edits to the class list do not relabel it.
    """

    x: float
    y: float
    width: float
    height: float
    class_index: int
    class_name: str = ""

    def __post_init__(self) -> None:
        """Validate the fixed schema."""
        if isinstance(self.class_index, bool) or not isinstance(self.class_index, int):
            raise ValueError(f"class_index must be an integer, got {self.class_index!r}")
        if self.class_index < 0:
            raise ValueError(f"class_index must be non-negative, got {self.class_index}")
        if self.x < 0 or self.y < 0:
            raise ValueError(f"Box origin must be non-negative, got ({self.x}, {self.y})")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Box size must be positive, got {self.width}x{self.height}"
            )

    @classmethod
    def from_rect(cls, rect: QRectF, class_index: int, class_name: str = "") -> BoundingBox:
        """Create a box from a normalized rectangle."""
        return cls(
            x=rect.x(),
            y=rect.y(),
            width=rect.width(),
            height=rect.height(),
            class_index=class_index,
            class_name=class_name,
        )

    @property
    def label(self) -> str:
        """Display label: the captured class name or the numeric index."""
        return self.class_name or str(self.class_index)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, point: QPointF) -> bool:
        """
        Check whether a point lies inside the box.

        All four edges are inclusive.
        """
        return (
            self.x <= point.x() <= self.right and
            self.y <= point.y() <= self.bottom
        )

    def to_rect(self) -> QRectF:
        """Return the box as a QRectF."""
        return QRectF(self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class RenderBox:
    """
    Drawing instructions for one box on the canvas.

    Coordinates are in image-pixel space; the canvas maps them to the
    displayed surface.
    """

    x: float
    y: float
    width: float
    height: float
    color: QColor
    label: str = ""
    is_selected: bool = False
    is_draft: bool = False

    def to_rect(self) -> QRectF:
        """Return the box as a QRectF."""
        return QRectF(self.x, self.y, self.width, self.height)
