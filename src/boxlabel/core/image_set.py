"""Ordered image list and navigation."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .models import ImageRef

logger = logging.getLogger(__name__)

# Supported image extensions
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".gif"}


def is_image_name(name: str) -> bool:
    """Check a file name against the supported extensions (case-insensitive)."""
    dot = name.rfind(".")
    return dot != -1 and name[dot:].lower() in IMAGE_EXTENSIONS


class ImageSetController:
    """
    Ordered image list with a current position.

    Images are sorted by name at load. The current index is -1 when
    nothing is loaded.
    """

    def __init__(self) -> None:
        self._images: List[ImageRef] = []
        self._current_index = -1

    def load(self, images: Iterable[ImageRef]) -> int:
        """
        Replace the image list.

        Unsupported file types are dropped and the rest sorted by name.
        The first image becomes current.

        Returns:
            Number of images loaded
        """
        supported = [image for image in images if is_image_name(image.name)]
        self._images = sorted(supported, key=lambda image: image.name)
        self._current_index = 0 if self._images else -1
        logger.info(f"Loaded {len(self._images)} images")
        return len(self._images)

    @property
    def images(self) -> List[ImageRef]:
        """Copy of the ordered image list."""
        return list(self._images)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current(self) -> Optional[ImageRef]:
        """The current image, or None."""
        if 0 <= self._current_index < len(self._images):
            return self._images[self._current_index]
        return None

    def navigate(self, delta: int) -> bool:
        """
        Move the current position by delta, clamped to the list bounds.

        Returns:
            True if the current image changed
        """
        if not self._images:
            return False
        target = max(0, min(len(self._images) - 1, self._current_index + delta))
        if target == self._current_index:
            return False
        self._current_index = target
        return True

    def go_to(self, index: int) -> bool:
        """
        Jump to an index. Out-of-range indices are ignored.

        Returns:
            True if the current image changed
        """
        if not 0 <= index < len(self._images) or index == self._current_index:
            return False
        self._current_index = index
        return True

    def position_text(self) -> str:
        """One-based "position / total" text, empty when nothing is loaded."""
        if self._current_index < 0:
            return ""
        return f"{self._current_index + 1} / {len(self._images)}"

    def __len__(self) -> int:
        return len(self._images)
