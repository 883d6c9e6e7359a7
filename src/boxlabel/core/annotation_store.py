"""Per-image bounding box storage."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .models import BoundingBox

logger = logging.getLogger(__name__)


class AnnotationStore:
    """
    Mapping from image name to its ordered list of boxes.

    Insertion order is creation order and defines the indices used for
    selection and deletion. An image with no entry has no boxes. The
    store does not track selection; callers remap their own indices
    after a deletion.
    """

    def __init__(self) -> None:
        self._boxes: Dict[str, List[BoundingBox]] = {}

    def add_box(self, image_name: str, box: BoundingBox) -> None:
        """Append a box to an image. Overlaps are allowed."""
        self._boxes.setdefault(image_name, []).append(box)
        logger.debug(f"Added box to {image_name}: {box}")

    def delete_box(self, image_name: str, index: int) -> BoundingBox:
        """
        Remove the box at a position, shifting later boxes down by one.

        Args:
            image_name: Image the box belongs to
            index: Position of the box

        Returns:
            The removed box

        Raises:
            IndexError: If there is no box at that position
        """
        boxes = self._boxes.get(image_name, [])
        if not 0 <= index < len(boxes):
            raise IndexError(
                f"No box at index {index} for {image_name} ({len(boxes)} boxes)"
            )
        removed = boxes.pop(index)
        logger.debug(f"Deleted box {index} from {image_name}")
        return removed

    def clear(self, image_name: str) -> None:
        """Remove all boxes for an image."""
        if image_name in self._boxes:
            count = len(self._boxes[image_name])
            self._boxes[image_name] = []
            logger.info(f"Cleared {count} boxes from {image_name}")

    def boxes(self, image_name: str) -> Tuple[BoundingBox, ...]:
        """Boxes for an image in creation order."""
        return tuple(self._boxes.get(image_name, ()))

    def has_annotations(self, image_name: str) -> bool:
        """True iff the image has at least one box."""
        return bool(self._boxes.get(image_name))

    def snapshot(self) -> Dict[str, Tuple[BoundingBox, ...]]:
        """
        Immutable copy of the whole store.

        Boxes are frozen, so copying the sequences is enough to isolate
        the snapshot from later mutations.
        """
        return {name: tuple(boxes) for name, boxes in self._boxes.items()}

    def annotated_count(self, names: Optional[Iterable[str]] = None) -> int:
        """
        Number of images with at least one box.

        Args:
            names: Only count these images; every stored image if omitted
        """
        if names is None:
            names = self._boxes.keys()
        return sum(1 for name in names if self._boxes.get(name))

    def total_boxes(self, names: Optional[Iterable[str]] = None) -> int:
        """Number of boxes across images, optionally limited to some names."""
        if names is None:
            names = self._boxes.keys()
        return sum(len(self._boxes.get(name, ())) for name in names)
