"""Tests for the annotation store."""

import pytest

from boxlabel.core.annotation_store import AnnotationStore
from boxlabel.core.models import BoundingBox


def _box(x, class_index=0):
    return BoundingBox(x=x, y=0, width=10, height=10, class_index=class_index)


class TestAnnotationStore:
    """Tests for AnnotationStore."""

    def test_unknown_image_is_empty(self):
        """Test that an image without entries has no boxes."""
        store = AnnotationStore()

        assert store.boxes("missing.png") == ()
        assert store.has_annotations("missing.png") is False

    def test_add_box_keeps_order(self):
        """Test that boxes are kept in creation order."""
        store = AnnotationStore()
        a, b = _box(0), _box(20)
        store.add_box("img.png", a)
        store.add_box("img.png", b)

        assert store.boxes("img.png") == (a, b)
        assert store.has_annotations("img.png") is True

    def test_overlapping_duplicates_allowed(self):
        """Test that identical boxes are both stored."""
        store = AnnotationStore()
        store.add_box("img.png", _box(0))
        store.add_box("img.png", _box(0))

        assert len(store.boxes("img.png")) == 2

    def test_delete_shifts_indices(self):
        """Test that deleting a box shifts later boxes down."""
        store = AnnotationStore()
        a, b, c = _box(0), _box(20), _box(40)
        for box in (a, b, c):
            store.add_box("img.png", box)

        removed = store.delete_box("img.png", 1)

        assert removed == b
        assert store.boxes("img.png") == (a, c)

    def test_delete_invalid_index(self):
        """Test deleting outside the sequence."""
        store = AnnotationStore()
        store.add_box("img.png", _box(0))

        with pytest.raises(IndexError):
            store.delete_box("img.png", 1)
        with pytest.raises(IndexError):
            store.delete_box("other.png", 0)

    def test_clear(self):
        """Test clearing an image."""
        store = AnnotationStore()
        store.add_box("img.png", _box(0))
        store.add_box("other.png", _box(0))

        store.clear("img.png")

        assert store.has_annotations("img.png") is False
        assert store.has_annotations("other.png") is True

    def test_images_are_independent(self):
        """Test that boxes belong to exactly one image."""
        store = AnnotationStore()
        store.add_box("a.png", _box(0))

        assert store.boxes("b.png") == ()

    def test_snapshot_isolated_from_later_changes(self):
        """Test that a snapshot does not see later mutations."""
        store = AnnotationStore()
        store.add_box("img.png", _box(0))

        snapshot = store.snapshot()
        store.add_box("img.png", _box(20))
        store.clear("img.png")

        assert len(snapshot["img.png"]) == 1

    def test_counts(self):
        """Test annotated image and box counts."""
        store = AnnotationStore()
        store.add_box("a.png", _box(0))
        store.add_box("a.png", _box(20))
        store.add_box("b.png", _box(0))
        store.clear("b.png")

        assert store.annotated_count() == 1
        assert store.total_boxes() == 2

    def test_counts_limited_to_names(self):
        """Test counting only the images currently loaded."""
        store = AnnotationStore()
        store.add_box("a.png", _box(0))
        store.add_box("gone.png", _box(0))
        store.add_box("gone.png", _box(20))

        assert store.annotated_count(["a.png", "b.png"]) == 1
        assert store.total_boxes(["a.png", "b.png"]) == 1
        assert store.annotated_count() == 2
