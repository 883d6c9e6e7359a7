"""Image file discovery and background loading."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from PyQt6.QtCore import QBuffer, QByteArray, QIODevice, QThread, pyqtSignal
from PyQt6.QtGui import QImageReader

from ..core.image_set import is_image_name
from ..core.models import ImageRef

logger = logging.getLogger(__name__)

SizeProbe = Callable[[bytes], Tuple[int, int]]


def probe_image_size(data: bytes) -> Tuple[int, int]:
    """
    Read the intrinsic size of encoded image bytes without decoding pixels.

    Returns:
        (width, height), or (0, 0) if the format is not readable
    """
    buffer = QBuffer()
    buffer.setData(QByteArray(data))
    if not buffer.open(QIODevice.OpenModeFlag.ReadOnly):
        return (0, 0)
    try:
        size = QImageReader(buffer).size()
    finally:
        buffer.close()

    if not size.isValid():
        return (0, 0)
    return (size.width(), size.height())


class DirectoryFileProvider:
    """
    Recursively collects image files below a directory.

    Files are identified by their base name. When two files in different
    subdirectories share a name, the first one in path order is kept.
    """

    def __init__(self, directory: Path, size_probe: SizeProbe = probe_image_size) -> None:
        """
        Initialize the provider.

        Args:
            directory: Root directory to scan
            size_probe: Callable returning (width, height) for image bytes
        """
        self.directory = Path(directory)
        self.size_probe = size_probe

    def iter_image_paths(self) -> List[Path]:
        """Image file paths below the directory, in path order."""
        return sorted(
            path for path in self.directory.rglob("*")
            if path.is_file() and is_image_name(path.name)
        )

    def collect(self, should_continue: Optional[Callable[[], bool]] = None) -> List[ImageRef]:
        """
        Read every image below the directory.

        Args:
            should_continue: Polled between files; returning False stops early

        Returns:
            Loaded images (unsorted by name)
        """
        if not self.directory.is_dir():
            raise NotADirectoryError(f"Not a directory: {self.directory}")

        images: Dict[str, ImageRef] = {}
        for path in self.iter_image_paths():
            if should_continue is not None and not should_continue():
                logger.info("Image loading cancelled")
                break

            if path.name in images:
                logger.warning(f"Skipping {path}: another image is already named {path.name}")
                continue

            try:
                data = path.read_bytes()
            except OSError as e:
                logger.warning(f"Could not read {path}: {e}")
                continue

            width, height = self.size_probe(data)
            if width <= 0 or height <= 0:
                logger.warning(f"Could not determine size of {path}")

            images[path.name] = ImageRef(name=path.name, data=data, width=width, height=height)

        logger.info(f"Collected {len(images)} images from {self.directory}")
        return list(images.values())


class ImageScanner(QThread):
    """
    Background thread that loads all images of a directory.

    The result is delivered through a queued signal, so it is handled
    on the GUI thread like any other event.
    """

    # Signal emitted with the list of ImageRef objects
    images_loaded = pyqtSignal(list)

    # Signal emitted with an error message
    failed = pyqtSignal(str)

    def __init__(self, directory: str, provider: Optional[DirectoryFileProvider] = None) -> None:
        """
        Initialize the image scanner.

        Args:
            directory: Directory to scan for images
            provider: Provider to use instead of a DirectoryFileProvider
        """
        super().__init__()
        self.directory = Path(directory)
        self.provider = provider or DirectoryFileProvider(self.directory)
        self._is_running = True

    def run(self) -> None:
        """Load the directory's images."""
        try:
            images = self.provider.collect(lambda: self._is_running)
        except OSError as e:
            logger.error(f"Error scanning directory {self.directory}: {e}")
            self.failed.emit(str(e))
            return
        except Exception as e:
            logger.exception(f"Unexpected error scanning {self.directory}")
            self.failed.emit(str(e))
            return

        if self._is_running:
            self.images_loaded.emit(images)

    def stop(self) -> None:
        """Request the scanner to stop."""
        self._is_running = False
