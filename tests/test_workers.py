"""Tests for background workers, run synchronously."""

import io
import zipfile

from PyQt6.QtCore import Qt

from boxlabel.core.export import ArchiveEntry, Archiver, ExportError
from boxlabel.workers.export_worker import ExportWorker
from boxlabel.workers.image_loader import DirectoryFileProvider, ImageScanner


class FailingArchiver(Archiver):
    @property
    def file_name(self):
        return "broken.zip"

    def build(self, entries):
        raise ExportError("disk full")


class BrokenArchiver(FailingArchiver):
    def build(self, entries):
        raise RuntimeError("disk gone")


class TestExportWorker:
    """Tests for ExportWorker."""

    def test_builds_zip(self, qapp):
        """Test that the worker emits archive bytes."""
        worker = ExportWorker([ArchiveEntry("classes.txt", "cat")])
        results = []
        worker.finished_archive.connect(results.append)

        worker.run()

        assert len(results) == 1
        with zipfile.ZipFile(io.BytesIO(results[0])) as archive:
            assert archive.read("classes.txt") == b"cat"

    def test_reports_failure(self, qapp):
        """Test that archiver errors are emitted, not raised."""
        worker = ExportWorker([], archiver=FailingArchiver())
        errors = []
        results = []
        worker.failed.connect(errors.append)
        worker.finished_archive.connect(results.append)

        worker.run()

        assert errors == ["disk full"]
        assert results == []

    def test_reports_unexpected_error(self, qapp):
        """Test that any archiver exception is reported through the signal."""
        worker = ExportWorker([ArchiveEntry("classes.txt", "cat")], archiver=BrokenArchiver())
        errors = []
        worker.failed.connect(errors.append)

        worker.run()

        assert errors == ["disk gone"]

    def test_unexpected_error_in_thread(self, qapp):
        """Test that a failing archive build does not escape the thread."""
        worker = ExportWorker([], archiver=BrokenArchiver())
        errors = []
        worker.failed.connect(errors.append, Qt.ConnectionType.DirectConnection)

        worker.start()
        assert worker.wait(5000)

        assert errors == ["disk gone"]


class TestImageScanner:
    """Tests for ImageScanner."""

    def test_emits_images(self, qapp, temp_dir):
        """Test that loaded images are emitted."""
        (temp_dir / "a.png").write_bytes(b"a")
        provider = DirectoryFileProvider(temp_dir, lambda data: (10, 10))
        scanner = ImageScanner(str(temp_dir), provider)
        loaded = []
        scanner.images_loaded.connect(loaded.append)

        scanner.run()

        assert [image.name for image in loaded[0]] == ["a.png"]

    def test_missing_directory_fails(self, qapp, temp_dir):
        """Test that scan errors are emitted."""
        scanner = ImageScanner(str(temp_dir / "missing"))
        errors = []
        scanner.failed.connect(errors.append)

        scanner.run()

        assert len(errors) == 1

    def test_stopped_scanner_emits_nothing(self, qapp, temp_dir):
        """Test that a stopped scan delivers no result."""
        (temp_dir / "a.png").write_bytes(b"a")
        scanner = ImageScanner(str(temp_dir))
        loaded = []
        scanner.images_loaded.connect(loaded.append)

        scanner.stop()
        scanner.run()

        assert loaded == []
