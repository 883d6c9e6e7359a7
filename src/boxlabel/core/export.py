"""YOLO dataset export: archive entry assembly and archivers."""

from __future__ import annotations

import io
import logging
import zipfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence, Tuple, Union

from .classes import ClassRegistry
from .models import BoundingBox, ImageRef
from .yolo_format import YOLOLabelWriter, label_file_name

logger = logging.getLogger(__name__)

ARCHIVE_FILE_NAME = "yolo_dataset.zip"
IMAGES_FOLDER = "images"
LABELS_FOLDER = "labels"
CLASSES_FILE_NAME = "classes.txt"

# Fixed timestamp so identical entries produce identical archives
_ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)


class ExportError(Exception):
    """Raised when a dataset cannot be exported."""


@dataclass(frozen=True)
class ArchiveEntry:
    """A named file to place in the exported archive."""

    path: str
    content: Union[bytes, str]

    def as_bytes(self) -> bytes:
        """Content as bytes (text is UTF-8 encoded)."""
        if isinstance(self.content, str):
            return self.content.encode("utf-8")
        return self.content


def build_dataset_entries(
    images: Sequence[ImageRef],
    annotations: Mapping[str, Sequence[BoundingBox]],
    registry: ClassRegistry
) -> List[ArchiveEntry]:
    """
    Assemble the files of a YOLO dataset.

    Produces images/<name> with the original bytes and labels/<base>.txt
    for every image (empty when it has no boxes), followed by a root
    classes.txt.

    Args:
        images: Images in display order
        annotations: Boxes per image name
        registry: Class registry used for the class file and index resolution

    Returns:
        Archive entries in a deterministic order

    Raises:
        ExportError: If there are no images or no classes, two images map to
            the same label file, or an annotated image has unknown dimensions
    """
    if not images:
        raise ExportError("No images loaded")
    if not registry:
        raise ExportError("Please enter classes first")

    writer = YOLOLabelWriter(registry)
    entries: List[ArchiveEntry] = []
    label_owners: Dict[str, str] = {}

    for image in images:
        label_name = label_file_name(image.name)
        if label_name in label_owners:
            raise ExportError(
                f"Images {label_owners[label_name]} and {image.name} "
                f"would share the label file {label_name}"
            )
        label_owners[label_name] = image.name

        boxes = annotations.get(image.name, ())
        if boxes and not image.has_size:
            raise ExportError(f"Unknown dimensions for annotated image {image.name}")

        entries.append(ArchiveEntry(f"{IMAGES_FOLDER}/{image.name}", image.data))
        entries.append(ArchiveEntry(
            f"{LABELS_FOLDER}/{label_name}",
            writer.encode(boxes, image.width, image.height),
        ))

    entries.append(ArchiveEntry(CLASSES_FILE_NAME, writer.encode_classes()))

    logger.info(
        f"Prepared export of {len(images)} images with "
        f"{sum(len(annotations.get(image.name, ())) for image in images)} boxes"
    )
    return entries


class Archiver(ABC):
    """Packs archive entries into a single downloadable blob."""

    @property
    @abstractmethod
    def file_name(self) -> str:
        """Default file name for the produced archive."""
        pass

    @abstractmethod
    def build(self, entries: Sequence[ArchiveEntry]) -> bytes:
        """
        Pack entries into one archive.

        Args:
            entries: Files to include

        Returns:
            Archive bytes

        Raises:
            ExportError: If the archive cannot be produced
        """
        pass


class ZipArchiver(Archiver):
    """Archiver producing a deflated ZIP file."""

    def __init__(self, file_name: str = ARCHIVE_FILE_NAME) -> None:
        self._file_name = file_name

    @property
    def file_name(self) -> str:
        return self._file_name

    def build(self, entries: Sequence[ArchiveEntry]) -> bytes:
        """Pack entries into ZIP bytes with stable metadata."""
        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                for entry in entries:
                    info = zipfile.ZipInfo(entry.path, date_time=_ZIP_TIMESTAMP)
                    info.compress_type = zipfile.ZIP_DEFLATED
                    info.external_attr = 0o644 << 16
                    archive.writestr(info, entry.as_bytes())
        except (OSError, ValueError, zipfile.BadZipFile) as e:
            raise ExportError(f"Failed to build archive: {e}") from e

        logger.info(f"Built archive with {len(entries)} entries")
        return buffer.getvalue()


def count_labels(entries: Sequence[ArchiveEntry]) -> Tuple[int, int]:
    """Number of (label files, non-empty label files) among entries."""
    labels = [e for e in entries if e.path.startswith(f"{LABELS_FOLDER}/")]
    return len(labels), sum(1 for e in labels if e.as_bytes())
