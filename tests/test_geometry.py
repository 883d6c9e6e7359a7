"""Tests for box geometry helpers."""

from PyQt6.QtCore import QPointF, QRectF

from boxlabel.core.geometry import hit_test, is_valid_box, normalize_drag
from boxlabel.core.models import BoundingBox


def _box(x, y, w, h):
    return BoundingBox(x=x, y=y, width=w, height=h, class_index=0)


class TestNormalizeDrag:
    """Tests for normalize_drag."""

    def test_drag_up_left(self):
        """Test dragging from bottom-right to top-left."""
        rect = normalize_drag(QPointF(50, 50), QPointF(10, 20))

        assert rect == QRectF(10, 20, 40, 30)

    def test_drag_down_right(self):
        """Test dragging from top-left to bottom-right gives the same box."""
        assert normalize_drag(QPointF(10, 20), QPointF(50, 50)) == QRectF(10, 20, 40, 30)

    def test_mixed_directions(self):
        """Test dragging up-right and down-left."""
        assert normalize_drag(QPointF(10, 50), QPointF(50, 20)) == QRectF(10, 20, 40, 30)
        assert normalize_drag(QPointF(50, 20), QPointF(10, 50)) == QRectF(10, 20, 40, 30)

    def test_zero_drag(self):
        """Test a click without movement."""
        rect = normalize_drag(QPointF(5, 5), QPointF(5, 5))

        assert rect.width() == 0
        assert rect.height() == 0


class TestIsValidBox:
    """Tests for is_valid_box."""

    def test_thin_box_rejected(self):
        """Test that a box narrower than the minimum is rejected."""
        assert not is_valid_box(QRectF(0, 0, 3, 100), 5)

    def test_minimum_is_exclusive(self):
        """Test that a side equal to the minimum is rejected."""
        assert not is_valid_box(QRectF(0, 0, 5, 100), 5)
        assert is_valid_box(QRectF(0, 0, 5.5, 100), 5)

    def test_default_minimum(self):
        """Test the default minimum size."""
        assert is_valid_box(QRectF(0, 0, 6, 6))
        assert not is_valid_box(QRectF(0, 0, 6, 5))


class TestHitTest:
    """Tests for hit_test."""

    def test_no_boxes(self):
        """Test hit-testing an empty list."""
        assert hit_test(QPointF(1, 1), []) is None

    def test_miss(self):
        """Test a point outside every box."""
        assert hit_test(QPointF(100, 100), [_box(0, 0, 10, 10)]) is None

    def test_newest_box_wins(self):
        """Test that overlapping boxes resolve to the most recent one."""
        boxes = [_box(0, 0, 100, 100), _box(50, 50, 100, 100)]

        assert hit_test(QPointF(75, 75), boxes) == 1

    def test_older_box_hit_outside_overlap(self):
        """Test hitting the older box where it does not overlap."""
        boxes = [_box(0, 0, 100, 100), _box(50, 50, 100, 100)]

        assert hit_test(QPointF(10, 10), boxes) == 0

    def test_edge_is_inclusive(self):
        """Test that a point on the border is a hit."""
        assert hit_test(QPointF(10, 5), [_box(0, 0, 10, 10)]) == 0
