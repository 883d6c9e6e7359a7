"""Background worker threads for BoxLabel."""

from .export_worker import ExportWorker
from .image_loader import DirectoryFileProvider, ImageScanner

__all__ = [
    "ExportWorker",
    "DirectoryFileProvider",
    "ImageScanner",
]
