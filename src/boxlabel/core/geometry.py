"""Box geometry: drag normalization, size filtering and hit-testing."""

from __future__ import annotations

from typing import Optional, Sequence

from PyQt6.QtCore import QPointF, QRectF

from .models import BoundingBox

DEFAULT_MIN_BOX_SIZE = 5.0


def normalize_drag(start: QPointF, current: QPointF) -> QRectF:
    """
    Build a top-left anchored rectangle from two drag endpoints.

    The result is the same whichever direction the drag went.
    """
    return QRectF(
        min(start.x(), current.x()),
        min(start.y(), current.y()),
        abs(current.x() - start.x()),
        abs(current.y() - start.y()),
    )


def is_valid_box(rect: QRectF, min_size: float = DEFAULT_MIN_BOX_SIZE) -> bool:
    """True iff both sides strictly exceed min_size."""
    return rect.width() > min_size and rect.height() > min_size


def hit_test(point: QPointF, boxes: Sequence[BoundingBox]) -> Optional[int]:
    """
    Find the box under a point.

    Boxes are scanned newest first, so where boxes overlap the most
    recently drawn one wins.

    Returns:
        Index of the hit box, or None
    """
    for index in range(len(boxes) - 1, -1, -1):
        if boxes[index].contains(point):
            return index
    return None
