"""Drawing area canvas widget for image annotation."""

from __future__ import annotations

import logging
from typing import List, Optional

from PyQt6.QtCore import Qt, QPointF, QRectF, pyqtSignal
from PyQt6.QtGui import (
    QColor, QFont, QFontMetrics, QKeyEvent, QKeySequence, QMouseEvent,
    QPainter, QPen, QPixmap, QWheelEvent
)
from PyQt6.QtWidgets import QWidget

from ..core.coordinates import rect_to_surface_space, to_image_space
from ..core.models import RenderBox
from ..core.session import AnnotationSession

logger = logging.getLogger(__name__)


class DrawingArea(QWidget):
    """
    Canvas widget for drawing and selecting bounding boxes.

    The image is scaled to fit the widget. Pointer positions are mapped
    to image-pixel space before being handed to the session, and the
    session's render list is mapped back onto the displayed image.
    """

    # Signals
    annotations_changed = pyqtSignal()
    selection_changed = pyqtSignal(object)  # Emits box index or None
    active_class_changed = pyqtSignal(int)
    navigation_requested = pyqtSignal(int)  # Emits +1 / -1

    LABEL_PADDING = 5

    def __init__(self, session: AnnotationSession, parent: Optional[QWidget] = None) -> None:
        """
        Initialize the drawing area.

        Args:
            session: Session whose current image is displayed
            parent: Parent widget
        """
        super().__init__(parent)

        self.session = session
        self._pixmap: Optional[QPixmap] = None

        # Visual settings
        self.line_thickness = 3
        self.selected_line_thickness = 4
        self.font_size = 12
        self.next_image_key = "Right"
        self.previous_image_key = "Left"
        self.delete_shape_keys: List[str] = ["Delete", "Backspace"]

        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(200, 200)

    # === Pixmap Methods ===

    def pixmap(self) -> Optional[QPixmap]:
        """Return the current pixmap."""
        return self._pixmap

    def setPixmap(self, pixmap: Optional[QPixmap]) -> None:
        """Set the image pixmap."""
        self._pixmap = pixmap if pixmap is not None and not pixmap.isNull() else None
        self.update()

    def clear(self) -> None:
        """Remove the displayed image."""
        self._pixmap = None
        self.update()

    def image_rect(self) -> Optional[QRectF]:
        """
        Rectangle the image occupies on the widget.

        The image is fitted to the widget, keeping its aspect ratio, and
        centered.
        """
        if self._pixmap is None:
            return None

        img_width = self._pixmap.width()
        img_height = self._pixmap.height()
        if img_width <= 0 or img_height <= 0:
            return None

        scale = min(self.width() / img_width, self.height() / img_height)
        if scale <= 0:
            return None

        display_width = img_width * scale
        display_height = img_height * scale
        return QRectF(
            (self.width() - display_width) / 2,
            (self.height() - display_height) / 2,
            display_width,
            display_height,
        )

    # === Coordinate Transform Methods ===

    def _transform_pos(self, pos: QPointF) -> Optional[QPointF]:
        """Transform widget position to image coordinates."""
        rect = self.image_rect()
        if rect is None:
            return None
        return to_image_space(pos, rect, self._pixmap.width(), self._pixmap.height())

    def _surface_rect(self, box: RenderBox, image_rect: QRectF) -> QRectF:
        return rect_to_surface_space(
            box.to_rect(), image_rect, self._pixmap.width(), self._pixmap.height()
        )

    # === Event Handlers ===

    def mousePressEvent(self, event: QMouseEvent) -> None:
        """Select a box under the pointer or start drawing a new one."""
        self.setFocus()
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return

        rect = self.image_rect()
        if rect is None or not rect.contains(event.position()):
            return

        pos = self._transform_pos(event.position())
        hit = self.session.press(pos)
        self.selection_changed.emit(hit)
        self.update()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        """Update the box being drawn."""
        if self.session.is_dragging:
            pos = self._transform_pos(event.position())
            if pos is not None and self.session.move(pos):
                self.update()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        """Commit the box being drawn if it is large enough."""
        if event.button() != Qt.MouseButton.LeftButton or not self.session.is_dragging:
            return

        pos = self._transform_pos(event.position())
        box = self.session.release(pos)
        if box is not None:
            logger.debug(f"Created box {box}")
            self.annotations_changed.emit()
        self.update()

    def wheelEvent(self, event: QWheelEvent) -> None:
        """Cycle the active class, one step per wheel event."""
        # Qt reports scrolling up as a positive angle
        delta = -event.angleDelta().y()
        new_class = self.session.scroll_class(delta)
        if new_class is None:
            super().wheelEvent(event)
            return

        self.active_class_changed.emit(new_class)
        event.accept()

    def keyPressEvent(self, event: QKeyEvent) -> None:
        """Handle key press events."""
        if not self.handle_key(event):
            super().keyPressEvent(event)

    def handle_key(self, event: QKeyEvent) -> bool:
        """
        Apply the keyboard shortcuts.

        Returns:
            True if the key was handled
        """
        if self._matches_key_sequence(event, self.next_image_key):
            self.navigation_requested.emit(1)
            return True
        if self._matches_key_sequence(event, self.previous_image_key):
            self.navigation_requested.emit(-1)
            return True
        if any(self._matches_key_sequence(event, key) for key in self.delete_shape_keys):
            if self.session.delete_selected():
                self.selection_changed.emit(None)
                self.annotations_changed.emit()
                self.update()
            return True
        return False

    def _matches_key_sequence(self, event: QKeyEvent, key_sequence_str: str) -> bool:
        """Check if a key event matches a configured key sequence string."""
        if not key_sequence_str:
            return False

        key = event.key()
        modifiers = event.modifiers()

        # Ignore pure modifier key presses
        if key in (Qt.Key.Key_Control, Qt.Key.Key_Shift, Qt.Key.Key_Alt, Qt.Key.Key_Meta):
            return False

        combined = key
        if modifiers & Qt.KeyboardModifier.ControlModifier:
            combined |= Qt.KeyboardModifier.ControlModifier.value
        if modifiers & Qt.KeyboardModifier.ShiftModifier:
            combined |= Qt.KeyboardModifier.ShiftModifier.value
        if modifiers & Qt.KeyboardModifier.AltModifier:
            combined |= Qt.KeyboardModifier.AltModifier.value
        if modifiers & Qt.KeyboardModifier.MetaModifier:
            combined |= Qt.KeyboardModifier.MetaModifier.value

        return QKeySequence(combined) == QKeySequence(key_sequence_str)

    # === Painting ===

    def paintEvent(self, event) -> None:
        """Draw the image, its boxes and the box being drawn."""
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        rect = self.image_rect()
        if rect is None:
            painter.end()
            return

        painter.drawPixmap(rect, self._pixmap, QRectF(self._pixmap.rect()))

        for box in self.session.render_boxes():
            self._draw_box(painter, box, rect)

        draft = self.session.draft_box()
        if draft is not None:
            self._draw_box(painter, draft, rect)

        painter.end()

    def _draw_box(self, painter: QPainter, box: RenderBox, image_rect: QRectF) -> None:
        """Draw a single box with its label."""
        surface_rect = self._surface_rect(box, image_rect)

        width = self.selected_line_thickness if box.is_selected else self.line_thickness
        pen = QPen(box.color, width)
        if box.is_draft:
            pen.setStyle(Qt.PenStyle.DashLine)
        painter.setPen(pen)
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawRect(surface_rect)

        if box.label:
            self._draw_label(painter, box.label, surface_rect, box.color)

    def _draw_label(
        self,
        painter: QPainter,
        label: str,
        box_rect: QRectF,
        color: QColor
    ) -> None:
        """Draw a label above the box, or just inside it near the top edge."""
        font = QFont("Arial")
        font.setPixelSize(self.font_size)
        metrics = QFontMetrics(font)

        if box_rect.top() > metrics.height() + self.LABEL_PADDING:
            baseline = box_rect.top() - self.LABEL_PADDING
        else:
            baseline = box_rect.top() + metrics.ascent() + self.LABEL_PADDING

        painter.setFont(font)
        painter.setPen(color)
        painter.drawText(QPointF(box_rect.left(), baseline), label)
