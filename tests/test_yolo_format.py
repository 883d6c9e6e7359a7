"""Tests for YOLO label encoding."""

import logging

import pytest

from boxlabel.core.classes import ClassRegistry
from boxlabel.core.models import BoundingBox
from boxlabel.core.yolo_format import (
    YOLOLabelWriter,
    describe_box,
    encode_class_file,
    encode_label_file,
    format_line,
    from_normalized,
    label_file_name,
    to_normalized,
)


class TestNormalization:
    """Tests for to_normalized and from_normalized."""

    def test_to_normalized(self):
        """Test converting a box to center/size format."""
        box = BoundingBox(x=100, y=100, width=200, height=100, class_index=2)

        class_index, x_center, y_center, width, height = to_normalized(box, 1000, 1000)

        assert class_index == 2
        assert x_center == pytest.approx(0.2)
        assert y_center == pytest.approx(0.15)
        assert width == pytest.approx(0.2)
        assert height == pytest.approx(0.1)

    def test_full_image_box(self):
        """Test that a box covering the image normalizes to the unit square."""
        box = BoundingBox(x=0, y=0, width=640, height=480, class_index=0)

        assert to_normalized(box, 640, 480)[1:] == pytest.approx((0.5, 0.5, 1.0, 1.0))

    def test_invalid_image_size(self):
        """Test that image dimensions must be positive."""
        box = BoundingBox(x=0, y=0, width=10, height=10, class_index=0)

        with pytest.raises(ValueError):
            to_normalized(box, 0, 480)

    @pytest.mark.parametrize("x, y, width, height", [
        (0, 0, 640, 480),
        (10, 20, 40, 30),
        (123.4, 56.7, 89.1, 200.2),
        (600, 470, 39.5, 9.5),
    ])
    def test_round_trip_within_half_pixel(self, x, y, width, height):
        """Test reconstructing a box from its written line."""
        box = BoundingBox(x=x, y=y, width=width, height=height, class_index=1)
        values = [float(v) for v in format_line(box, 640, 480).split()[1:]]

        rx, ry, rw, rh = from_normalized(*values, 640, 480)

        assert rx == pytest.approx(x, abs=0.5)
        assert ry == pytest.approx(y, abs=0.5)
        assert rw == pytest.approx(width, abs=0.5)
        assert rh == pytest.approx(height, abs=0.5)


class TestEncoding:
    """Tests for label and class file text."""

    def test_format_line_three_decimals(self):
        """Test the written line format."""
        box = BoundingBox(x=400, y=450, width=200, height=100, class_index=0)

        assert format_line(box, 1000, 1000) == "0 0.500 0.500 0.200 0.100"

    def test_format_line_class_override(self):
        """Test writing a different class index."""
        box = BoundingBox(x=400, y=450, width=200, height=100, class_index=0)

        assert format_line(box, 1000, 1000, class_index=3).startswith("3 ")

    def test_encode_label_file_order(self):
        """Test that lines follow box order and are newline-joined."""
        boxes = [
            BoundingBox(x=0, y=0, width=100, height=100, class_index=1),
            BoundingBox(x=500, y=500, width=100, height=100, class_index=0),
        ]

        text = encode_label_file(boxes, 1000, 1000)

        assert text == "1 0.050 0.050 0.100 0.100\n0 0.550 0.550 0.100 0.100"

    def test_encode_empty_label_file(self):
        """Test that no boxes give empty text, even without dimensions."""
        assert encode_label_file([], 0, 0) == ""

    def test_encode_class_file(self):
        """Test the class list text."""
        assert encode_class_file(ClassRegistry(["cat", "dog"])) == "cat\ndog"

    def test_describe_box(self):
        """Test the list display text."""
        box = BoundingBox(x=400, y=450, width=200, height=100, class_index=0)

        assert describe_box(box, 1000, 1000) == "0.500 0.500 0.200 0.100"


class TestLabelFileName:
    """Tests for label_file_name."""

    def test_strips_final_extension(self):
        """Test replacing the last extension only."""
        assert label_file_name("image.jpg") == "image.txt"
        assert label_file_name("my.photo.PNG") == "my.photo.txt"

    def test_no_extension(self):
        """Test a name without an extension."""
        assert label_file_name("image") == "image.txt"

    def test_drops_directories(self):
        """Test that directory parts are removed."""
        assert label_file_name("sub/dir/image.jpeg") == "image.txt"


class TestYOLOLabelWriter:
    """Tests for class index resolution."""

    def test_matching_index_kept(self):
        """Test a box whose index still names its class."""
        writer = YOLOLabelWriter(ClassRegistry(["cat", "dog"]))
        box = BoundingBox(x=0, y=0, width=10, height=10, class_index=1, class_name="dog")

        assert writer.resolve_class_index(box) == 1

    def test_reordered_classes_follow_name(self):
        """Test that the class name snapshot wins over a stale index."""
        writer = YOLOLabelWriter(ClassRegistry(["dog", "cat"]))
        box = BoundingBox(x=0, y=0, width=10, height=10, class_index=0, class_name="cat")

        assert writer.resolve_class_index(box) == 1

    def test_duplicate_names_keep_stored_index(self):
        """Test that a stored index naming the same class is preferred."""
        writer = YOLOLabelWriter(ClassRegistry(["cat", "cat"]))
        box = BoundingBox(x=0, y=0, width=10, height=10, class_index=1, class_name="cat")

        assert writer.resolve_class_index(box) == 1

    def test_removed_class_keeps_index(self, caplog):
        """Test that a vanished class exports its stored index with a warning."""
        writer = YOLOLabelWriter(ClassRegistry(["dog"]))
        box = BoundingBox(x=0, y=0, width=10, height=10, class_index=2, class_name="cat")

        with caplog.at_level(logging.WARNING):
            assert writer.resolve_class_index(box) == 2

        assert "cat" in caplog.text

    def test_encode_uses_resolution(self):
        """Test that encoding writes resolved indices."""
        writer = YOLOLabelWriter(ClassRegistry(["dog", "cat"]))
        box = BoundingBox(x=0, y=0, width=100, height=100, class_index=0, class_name="cat")

        assert writer.encode([box], 1000, 1000) == "1 0.050 0.050 0.100 0.100"
        assert writer.encode_classes() == "dog\ncat"
