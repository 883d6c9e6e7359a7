"""Ordered class-name registry."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)


class ClassRegistry:
    """
    Ordered list of class names.

    The position of a name is its class index. Duplicate names are kept
    as distinct indices.
    """

    def __init__(self, names: Optional[Iterable[str]] = None) -> None:
        self._names: List[str] = []
        if names is not None:
            self.set_classes(names)

    def set_classes(self, lines: Iterable[str]) -> None:
        """
        Replace the registry with the non-empty, trimmed lines.

        Args:
            lines: Candidate class names in display order
        """
        self._names = [line.strip() for line in lines if line.strip()]
        logger.debug(f"Class registry updated: {len(self._names)} classes")

    def set_classes_from_text(self, text: str) -> None:
        """Replace the registry from newline-separated text."""
        self.set_classes(text.splitlines())

    @property
    def names(self) -> List[str]:
        """Copy of the class names in index order."""
        return list(self._names)

    def name_of(self, index: int) -> str:
        """
        Get the class name at an index.

        Returns:
            Class name, or the index as a string if out of range
        """
        if 0 <= index < len(self._names):
            return self._names[index]
        return str(index)

    def index_of(self, name: str) -> Optional[int]:
        """Return the first index holding name, or None."""
        try:
            return self._names.index(name)
        except ValueError:
            return None

    def cycle(self, current_index: int, direction: int) -> int:
        """
        Step to the next or previous class, wrapping at both ends.

        Args:
            current_index: Index of the active class
            direction: +1 for next, -1 for previous

        Returns:
            The new class index

        Raises:
            ValueError: If the registry is empty or direction is not +/-1
        """
        if direction not in (1, -1):
            raise ValueError(f"direction must be +1 or -1, got {direction}")
        if not self._names:
            raise ValueError("Cannot cycle an empty class registry")
        return (current_index + direction) % len(self._names)

    def to_text(self) -> str:
        """Newline-joined class names."""
        return "\n".join(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __bool__(self) -> bool:
        return bool(self._names)

    def __iter__(self):
        return iter(self._names)
