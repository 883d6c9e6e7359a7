"""YOLO label format encoding."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Callable, Optional, Sequence, Tuple

from .classes import ClassRegistry
from .models import BoundingBox

logger = logging.getLogger(__name__)

# Decimal places written for normalized coordinates
PRECISION = 3

ClassResolver = Callable[[BoundingBox], int]


def to_normalized(
    box: BoundingBox,
    img_width: float,
    img_height: float
) -> Tuple[int, float, float, float, float]:
    """
    Convert a box to YOLO format (normalized center coordinates).

    Args:
        box: Box in absolute image-pixel space
        img_width: Image width in pixels
        img_height: Image height in pixels

    Returns:
        Tuple of (class_index, x_center, y_center, width, height)
    """
    if img_width <= 0 or img_height <= 0:
        raise ValueError(f"Image size must be positive, got {img_width}x{img_height}")

    x_center = (box.x + box.width / 2) / img_width
    y_center = (box.y + box.height / 2) / img_height
    width = box.width / img_width
    height = box.height / img_height

    return (box.class_index, x_center, y_center, width, height)


def from_normalized(
    x_center: float,
    y_center: float,
    width: float,
    height: float,
    img_width: float,
    img_height: float
) -> Tuple[float, float, float, float]:
    """
    Reconstruct an absolute (x, y, width, height) box from YOLO values.

    Inverse of to_normalized, up to the rounding applied when the values
    were written.
    """
    abs_width = width * img_width
    abs_height = height * img_height
    x = x_center * img_width - abs_width / 2
    y = y_center * img_height - abs_height / 2
    return (x, y, abs_width, abs_height)


def _format_values(*values: float) -> str:
    return " ".join(f"{value:.{PRECISION}f}" for value in values)


def format_line(
    box: BoundingBox,
    img_width: float,
    img_height: float,
    class_index: Optional[int] = None
) -> str:
    """
    Format a single box as a YOLO annotation line.

    Args:
        box: Box to format
        img_width: Image width
        img_height: Image height
        class_index: Index to write instead of the box's stored index

    Returns:
        "class x_center y_center width height"
    """
    stored_index, x_center, y_center, width, height = to_normalized(box, img_width, img_height)
    if class_index is None:
        class_index = stored_index
    return f"{class_index} {_format_values(x_center, y_center, width, height)}"


def describe_box(box: BoundingBox, img_width: float, img_height: float) -> str:
    """Normalized "x_center y_center width height" text for list display."""
    _, x_center, y_center, width, height = to_normalized(box, img_width, img_height)
    return _format_values(x_center, y_center, width, height)


def encode_label_file(
    boxes: Sequence[BoundingBox],
    img_width: float,
    img_height: float,
    class_resolver: Optional[ClassResolver] = None
) -> str:
    """
    Encode the boxes of one image as label file text.

    One line per box in store order, newline-joined. No boxes gives an
    empty string; the file is still written.
    """
    lines = []
    for box in boxes:
        class_index = class_resolver(box) if class_resolver else None
        lines.append(format_line(box, img_width, img_height, class_index))
    return "\n".join(lines)


def encode_class_file(registry: ClassRegistry) -> str:
    """Newline-joined class names in registry order."""
    return registry.to_text()


def label_file_name(image_name: str) -> str:
    """
    Get the label file name for an image.

    The final extension is replaced by .txt; any directory part is dropped.
    """
    name = PurePosixPath(image_name.replace("\\", "/")).name
    stem, dot, _ = name.rpartition(".")
    return f"{stem if dot else name}.txt"


class YOLOLabelWriter:
    """
    Writer for YOLO label text.

    Resolves the class index written for each box against the current
    class registry. The class name captured on the box is authoritative;
    the stored index is used as-is only when the name no longer exists.
    """

    def __init__(self, registry: Optional[ClassRegistry] = None) -> None:
        """
        Initialize the writer.

        Args:
            registry: Class registry used to resolve indices
        """
        self.registry = registry or ClassRegistry()

    def resolve_class_index(self, box: BoundingBox) -> int:
        """
        Get the class index to export for a box.

        Args:
            box: Box carrying a stored index and a class name snapshot

        Returns:
            Class index valid for the current registry where possible
        """
        if not box.class_name:
            return box.class_index

        if self.registry.name_of(box.class_index) == box.class_name:
            return box.class_index

        index = self.registry.index_of(box.class_name)
        if index is not None:
            return index

        logger.warning(
            f"Class '{box.class_name}' is no longer defined; "
            f"exporting stored index {box.class_index}"
        )
        return box.class_index

    def encode(
        self,
        boxes: Sequence[BoundingBox],
        img_width: float,
        img_height: float
    ) -> str:
        """Encode the boxes of one image as label file text."""
        return encode_label_file(boxes, img_width, img_height, self.resolve_class_index)

    def encode_classes(self) -> str:
        """Encode the class list file."""
        return encode_class_file(self.registry)
