"""User interface components for BoxLabel."""

from .drawing_area import DrawingArea
from .main_window import MainWindow

__all__ = [
    "DrawingArea",
    "MainWindow",
]
