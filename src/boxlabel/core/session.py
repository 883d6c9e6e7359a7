"""Annotation session state and the interaction protocol."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from PyQt6.QtCore import QPointF, QRectF
from PyQt6.QtGui import QColor

from .annotation_store import AnnotationStore
from .classes import ClassRegistry
from .export import ArchiveEntry, build_dataset_entries
from .geometry import DEFAULT_MIN_BOX_SIZE, hit_test, is_valid_box, normalize_drag
from .image_set import ImageSetController
from .models import (
    DRAFT_COLOR, SELECTED_COLOR, BoundingBox, ImageRef, RenderBox, color_for_class
)
from .yolo_format import describe_box

logger = logging.getLogger(__name__)


class AnnotationSession:
    """
    All state of one annotation session.

    Owns the class registry, the annotation store and the image list,
    plus the interaction state: active class, selected box and the
    transient drag rectangle. Pointer positions passed in are already
    in image-pixel space.
    """

    def __init__(self, min_box_size: float = DEFAULT_MIN_BOX_SIZE) -> None:
        """
        Initialize an empty session.

        Args:
            min_box_size: Boxes must exceed this size on both sides to be kept
        """
        self.min_box_size = min_box_size
        self.classes = ClassRegistry()
        self.store = AnnotationStore()
        self.image_set = ImageSetController()

        self.active_class = 0
        self.selected_index: Optional[int] = None
        self._drag_start: Optional[QPointF] = None
        self._draft: Optional[QRectF] = None

    # === Classes ===

    @property
    def is_ready(self) -> bool:
        """True when classes are defined and annotation is possible."""
        return bool(self.classes)

    def set_classes_text(self, text: str) -> None:
        """Replace the classes from newline-separated text."""
        self.classes.set_classes_from_text(text)
        if not 0 <= self.active_class < len(self.classes):
            self.active_class = 0

    def set_active_class(self, index: int) -> None:
        """Select the class used for new boxes."""
        if 0 <= index < len(self.classes):
            self.active_class = index

    def scroll_class(self, delta_y: float) -> Optional[int]:
        """
        Cycle the active class for one wheel event.

        Scrolling up (negative delta) selects the previous class, down
        the next one, wrapping at both ends.

        Returns:
            The new active class, or None when no classes are defined
        """
        if not self.classes or delta_y == 0:
            return None
        direction = -1 if delta_y < 0 else 1
        self.active_class = self.classes.cycle(self.active_class, direction)
        return self.active_class

    # === Images ===

    def load_images(self, images: Iterable[ImageRef]) -> int:
        """
        Replace the image list and show the first image.

        Annotations stay keyed by name, so reloading a folder keeps them.
        """
        count = self.image_set.load(images)
        self._on_image_changed()
        return count

    @property
    def current_image(self) -> Optional[ImageRef]:
        return self.image_set.current

    def current_boxes(self) -> Tuple[BoundingBox, ...]:
        """Boxes of the displayed image."""
        image = self.current_image
        if image is None:
            return ()
        return self.store.boxes(image.name)

    def next_image(self) -> bool:
        """Show the next image; no-op on the last one."""
        return self._navigate(1)

    def previous_image(self) -> bool:
        """Show the previous image; no-op on the first one."""
        return self._navigate(-1)

    def go_to(self, index: int) -> bool:
        """Show the image at an index."""
        if self.image_set.go_to(index):
            self._on_image_changed()
            return True
        return False

    def _navigate(self, delta: int) -> bool:
        if self.image_set.navigate(delta):
            self._on_image_changed()
            return True
        return False

    def _on_image_changed(self) -> None:
        self.selected_index = None
        self.cancel_drag()
        image = self.current_image
        if image is not None:
            logger.debug(f"Showing {image.name} ({self.image_set.position_text()})")

    # === Pointer protocol ===

    @property
    def is_dragging(self) -> bool:
        return self._drag_start is not None

    def press(self, point: QPointF) -> Optional[int]:
        """
        Handle a pointer press.

        A press on a box selects it. Anywhere else starts a new drag and
        clears the selection.

        Returns:
            Index of the selected box, or None if a drag was started
        """
        if self.current_image is None:
            return None

        hit = hit_test(point, self.current_boxes())
        if hit is not None:
            self.cancel_drag()
            self.selected_index = hit
            return hit

        self.selected_index = None
        self._drag_start = self._clamp_to_image(point)
        self._draft = normalize_drag(self._drag_start, self._drag_start)
        return None

    def move(self, point: QPointF) -> bool:
        """
        Update the transient box while dragging.

        Returns:
            True if a drag is in progress
        """
        if self._drag_start is None:
            return False
        self._draft = normalize_drag(self._drag_start, self._clamp_to_image(point))
        return True

    def release(self, point: Optional[QPointF] = None) -> Optional[BoundingBox]:
        """
        Finish a drag.

        The box is committed to the current image with the active class
        if it exceeds the minimum size; otherwise it is discarded.

        Returns:
            The committed box, or None
        """
        if self._drag_start is None:
            return None
        if point is not None:
            self.move(point)

        draft = self._draft
        self.cancel_drag()
        image = self.current_image

        if draft is None or image is None:
            return None
        if not is_valid_box(draft, self.min_box_size):
            logger.debug(f"Discarded {draft.width():.1f}x{draft.height():.1f} box below minimum size")
            return None
        if not self.is_ready:
            logger.debug("Discarded box: no classes defined")
            return None

        box = BoundingBox.from_rect(
            draft,
            class_index=self.active_class,
            class_name=self.classes.name_of(self.active_class),
        )
        self.store.add_box(image.name, box)
        return box

    def _clamp_to_image(self, point: QPointF) -> QPointF:
        image = self.current_image
        if image is None or not image.has_size:
            return QPointF(max(0.0, point.x()), max(0.0, point.y()))
        return QPointF(
            min(max(0.0, point.x()), float(image.width)),
            min(max(0.0, point.y()), float(image.height)),
        )

    def cancel_drag(self) -> None:
        """Discard the transient box."""
        self._drag_start = None
        self._draft = None

    # === Selection and deletion ===

    def select(self, index: Optional[int]) -> None:
        """Select a box of the displayed image, or clear with None."""
        if index is None or 0 <= index < len(self.current_boxes()):
            self.selected_index = index

    def delete_selected(self) -> bool:
        """
        Delete the selected box.

        Returns:
            True if a box was deleted, False when nothing was selected
        """
        if self.selected_index is None:
            return False
        return self.delete_box(self.selected_index)

    def delete_box(self, index: int) -> bool:
        """
        Delete a box of the displayed image and remap the selection.

        The selection is cleared if it pointed at the removed box and
        shifted down if it pointed past it.
        """
        image = self.current_image
        if image is None or not 0 <= index < len(self.current_boxes()):
            return False

        self.store.delete_box(image.name, index)

        if self.selected_index is not None:
            if self.selected_index == index:
                self.selected_index = None
            elif self.selected_index > index:
                self.selected_index -= 1
        return True

    def clear_current(self) -> bool:
        """Remove every box of the displayed image."""
        image = self.current_image
        if image is None:
            return False
        self.store.clear(image.name)
        self.selected_index = None
        return True

    # === Rendering ===

    def render_boxes(self) -> List[RenderBox]:
        """Boxes to draw for the displayed image, in creation order."""
        render_list = []
        for index, box in enumerate(self.current_boxes()):
            selected = index == self.selected_index
            render_list.append(RenderBox(
                x=box.x,
                y=box.y,
                width=box.width,
                height=box.height,
                color=QColor(SELECTED_COLOR) if selected else color_for_class(box.class_index),
                label=box.label,
                is_selected=selected,
            ))
        return render_list

    def draft_box(self) -> Optional[RenderBox]:
        """The in-progress drag rectangle, drawn dashed."""
        if self._draft is None:
            return None
        return RenderBox(
            x=self._draft.x(),
            y=self._draft.y(),
            width=self._draft.width(),
            height=self._draft.height(),
            color=QColor(DRAFT_COLOR),
            is_draft=True,
        )

    def annotation_rows(self) -> List[Tuple[str, str]]:
        """(label, normalized coordinates) for each box of the displayed image."""
        image = self.current_image
        if image is None or not image.has_size:
            return []
        return [
            (box.label, describe_box(box, image.width, image.height))
            for box in self.current_boxes()
        ]

    # === Export ===

    def build_export(self) -> List[ArchiveEntry]:
        """
        Snapshot the session into dataset archive entries.

        Raises:
            ExportError: If no images or no classes are loaded
        """
        return build_dataset_entries(
            self.image_set.images,
            self.store.snapshot(),
            self.classes,
        )
