"""Application bootstrap for BoxLabel."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

from PyQt6.QtWidgets import QApplication

from . import __version__
from .core.config import DEFAULT_CONFIG_PATH, ConfigManager
from .ui.main_window import MainWindow

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    """Send log records to stdout."""
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def create_application(argv: Optional[List[str]] = None) -> QApplication:
    """
    Create the Qt application, or return the running one.

    Args:
        argv: Command line arguments passed to Qt

    Returns:
        QApplication instance
    """
    app = QApplication.instance()
    if app is None:
        app = QApplication(argv if argv is not None else sys.argv)
    app.setApplicationName("BoxLabel")
    app.setApplicationVersion(__version__)
    return app


def run(config_path: Path = DEFAULT_CONFIG_PATH) -> int:
    """
    Show the main window and run the event loop.

    Args:
        config_path: YAML file holding user preferences

    Returns:
        Exit code
    """
    logger.info(f"Starting BoxLabel {__version__}")

    try:
        app = create_application()
        window = MainWindow(ConfigManager(config_path))
        window.show()
        return app.exec()
    except Exception as e:
        logger.error(f"Application error: {e}", exc_info=True)
        return 1


def main() -> None:
    """Main entry point for the application."""
    configure_logging()
    sys.exit(run())


if __name__ == "__main__":
    main()
