"""
BoxLabel - A desktop bounding box annotation tool for YOLO datasets.

Built with PyQt6. Load a folder of images, draw labeled boxes and export
a ZIP archive with images, normalized YOLO labels and a class list.
"""

__version__ = "1.0.0"
__author__ = "BoxLabel Team"
