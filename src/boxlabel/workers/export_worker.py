"""Background dataset archive generation."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from PyQt6.QtCore import QThread, pyqtSignal

from ..core.export import ArchiveEntry, Archiver, ExportError, ZipArchiver

logger = logging.getLogger(__name__)


class ExportWorker(QThread):
    """
    Runs an archiver over a prepared set of entries.

    The entries are a snapshot taken on the GUI thread; the worker never
    touches session state.
    """

    # Signal emitted with the archive bytes
    finished_archive = pyqtSignal(bytes)

    # Signal emitted with an error message
    failed = pyqtSignal(str)

    def __init__(
        self,
        entries: Sequence[ArchiveEntry],
        archiver: Optional[Archiver] = None
    ) -> None:
        """
        Initialize the export worker.

        Args:
            entries: Files to pack
            archiver: Archiver to use, a ZipArchiver by default
        """
        super().__init__()
        self.entries: List[ArchiveEntry] = list(entries)
        self.archiver = archiver or ZipArchiver()

    def run(self) -> None:
        """Build the archive."""
        try:
            data = self.archiver.build(self.entries)
        except ExportError as e:
            logger.error(f"Export failed: {e}")
            self.failed.emit(str(e))
            return
        except Exception as e:
            logger.exception("Unexpected error while building archive")
            self.failed.emit(str(e))
            return

        self.finished_archive.emit(data)
