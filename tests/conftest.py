"""Pytest configuration and fixtures."""

import os
import pytest
import sys
from pathlib import Path

# Run Qt headless so QApplication can start without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from boxlabel.core.models import ImageRef  # noqa: E402
from boxlabel.core.session import AnnotationSession  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    """Create a QApplication for tests that need it."""
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])

    yield app


@pytest.fixture
def temp_dir(tmp_path):
    """Provide a temporary directory for tests."""
    return tmp_path


@pytest.fixture
def sample_images():
    """Three small images, deliberately out of name order."""
    return [
        ImageRef(name="c.png", data=b"png-c", width=640, height=480),
        ImageRef(name="a.jpg", data=b"jpg-a", width=640, height=480),
        ImageRef(name="b.bmp", data=b"bmp-b", width=320, height=240),
    ]


@pytest.fixture
def session(sample_images):
    """A session with classes and images loaded."""
    session = AnnotationSession()
    session.set_classes_text("cat\ndog\nbird")
    session.load_images(sample_images)
    return session
