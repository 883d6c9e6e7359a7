"""Core annotation state and coordinate logic for BoxLabel."""

from .annotation_store import AnnotationStore
from .classes import ClassRegistry
from .config import AppConfig, ConfigManager
from .export import ArchiveEntry, Archiver, ExportError, ZipArchiver
from .image_set import ImageSetController
from .models import BoundingBox, ImageRef, RenderBox
from .session import AnnotationSession
from .yolo_format import YOLOLabelWriter

__all__ = [
    "AnnotationStore",
    "ClassRegistry",
    "AppConfig",
    "ConfigManager",
    "ArchiveEntry",
    "Archiver",
    "ExportError",
    "ZipArchiver",
    "ImageSetController",
    "BoundingBox",
    "ImageRef",
    "RenderBox",
    "AnnotationSession",
    "YOLOLabelWriter",
]
