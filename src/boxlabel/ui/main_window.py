"""Main application window for BoxLabel."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QBrush, QColor, QFont, QKeySequence, QPixmap
from PyQt6.QtWidgets import (
    QComboBox, QDockWidget, QFileDialog, QLabel, QListWidget, QListWidgetItem,
    QMainWindow, QMenu, QMessageBox, QPlainTextEdit, QPushButton, QStatusBar,
    QVBoxLayout, QWidget
)

from ..core.config import AppConfig, ConfigManager
from ..core.export import ExportError, count_labels
from ..core.models import ImageRef
from ..core.session import AnnotationSession
from ..workers.export_worker import ExportWorker
from ..workers.image_loader import ImageScanner
from .drawing_area import DrawingArea

logger = logging.getLogger(__name__)

ANNOTATED_COLOR = QColor("#2ecc71")


class MainWindow(QMainWindow):
    """
    Main application window for BoxLabel.

    Provides:
    - Image folder loading and navigation
    - Class list editing and the active class selector
    - Box drawing on the canvas and a per-image annotation list
    - YOLO dataset export as a ZIP archive
    """

    def __init__(self, config_manager: Optional[ConfigManager] = None) -> None:
        """Initialize the main window."""
        super().__init__()

        self.config_manager = config_manager or ConfigManager()
        self.session = AnnotationSession(min_box_size=self.config.min_box_size)

        self.image_scanner: Optional[ImageScanner] = None
        self.export_worker: Optional[ExportWorker] = None
        self._export_path: Optional[Path] = None
        self._export_summary = ""

        # UI elements (initialized in _init_ui)
        self.drawing_area: Optional[DrawingArea] = None
        self.image_list: Optional[QListWidget] = None
        self.classes_edit: Optional[QPlainTextEdit] = None
        self.class_select: Optional[QComboBox] = None
        self.annotation_list: Optional[QListWidget] = None
        self.clear_button: Optional[QPushButton] = None
        self.export_button: Optional[QPushButton] = None
        self.export_action: Optional[QAction] = None
        self.recent_menu: Optional[QMenu] = None

        # Status bar elements
        self.status_bar: Optional[QStatusBar] = None
        self.file_label: Optional[QLabel] = None
        self.index_label: Optional[QLabel] = None
        self.dimensions_label: Optional[QLabel] = None
        self.image_count_label: Optional[QLabel] = None

        self._init_ui()
        self._setup_connections()
        self._on_classes_changed()

        if self.config.default_directory and Path(self.config.default_directory).is_dir():
            self._load_images(self.config.default_directory)

        logger.info("MainWindow initialization complete")

    @property
    def config(self) -> AppConfig:
        """Get the current configuration."""
        return self.config_manager.config

    # === UI Construction ===

    def _init_ui(self) -> None:
        """Initialize the user interface."""
        self.setWindowTitle("BoxLabel")
        self.setGeometry(100, 100, 1200, 800)

        self.drawing_area = DrawingArea(self.session)
        self.drawing_area.line_thickness = self.config.line_thickness
        self.drawing_area.selected_line_thickness = self.config.selected_line_thickness
        self.drawing_area.font_size = self.config.font_size
        self.drawing_area.next_image_key = self.config.next_image_key
        self.drawing_area.previous_image_key = self.config.previous_image_key
        self.drawing_area.delete_shape_keys = list(self.config.delete_shape_keys)
        self.setCentralWidget(self.drawing_area)

        self._create_status_bar()
        self._create_dock_widgets()
        self._create_menus()

    def _create_status_bar(self) -> None:
        """Create the status bar."""
        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)

        self.file_label = QLabel()
        self.status_bar.addPermanentWidget(self.file_label)

        self.index_label = QLabel()
        self.status_bar.addPermanentWidget(self.index_label)

        self.dimensions_label = QLabel()
        self.status_bar.addPermanentWidget(self.dimensions_label)

        self.image_count_label = QLabel()
        self.status_bar.addPermanentWidget(self.image_count_label)

    def _create_dock_widgets(self) -> None:
        """Create the image list and the classes/annotations panels."""
        self.image_list = QListWidget()
        images_dock = QDockWidget("Images", self)
        images_dock.setObjectName("Images")
        images_dock.setWidget(self.image_list)
        self.addDockWidget(Qt.DockWidgetArea.LeftDockWidgetArea, images_dock)

        classes_widget = QWidget()
        layout = QVBoxLayout(classes_widget)

        layout.addWidget(QLabel("Classes (one per line)"))
        self.classes_edit = QPlainTextEdit()
        self.classes_edit.setPlaceholderText("person\ncar\ndog")
        layout.addWidget(self.classes_edit)

        layout.addWidget(QLabel("Active class"))
        self.class_select = QComboBox()
        layout.addWidget(self.class_select)

        layout.addWidget(QLabel("Annotations"))
        self.annotation_list = QListWidget()
        layout.addWidget(self.annotation_list)

        self.clear_button = QPushButton("Clear Image Annotations")
        layout.addWidget(self.clear_button)

        self.export_button = QPushButton("Export YOLO Dataset")
        layout.addWidget(self.export_button)

        classes_dock = QDockWidget("Classifications", self)
        classes_dock.setObjectName("Classifications")
        classes_dock.setWidget(classes_widget)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, classes_dock)

    def _create_menus(self) -> None:
        """Create the menu bar."""
        file_menu = self.menuBar().addMenu("&File")

        open_action = QAction("&Open Directory...", self)
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.triggered.connect(self._open_directory)
        file_menu.addAction(open_action)

        self.recent_menu = file_menu.addMenu("Open &Recent")
        self._update_recent_paths_menu()

        self.export_action = QAction("&Export Dataset...", self)
        self.export_action.setShortcut(QKeySequence("Ctrl+E"))
        self.export_action.triggered.connect(self._export_dataset)
        file_menu.addAction(self.export_action)

        file_menu.addSeparator()

        quit_action = QAction("&Quit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

    def _setup_connections(self) -> None:
        """Connect widget signals."""
        self.classes_edit.textChanged.connect(self._on_classes_changed)
        self.class_select.currentIndexChanged.connect(self._on_class_selected)
        self.image_list.currentRowChanged.connect(self._on_image_row_changed)
        self.annotation_list.itemClicked.connect(self._on_annotation_clicked)
        self.clear_button.clicked.connect(self._clear_current_image)
        self.export_button.clicked.connect(self._export_dataset)

        self.drawing_area.annotations_changed.connect(self._on_annotations_changed)
        self.drawing_area.selection_changed.connect(self._on_selection_changed)
        self.drawing_area.active_class_changed.connect(self.class_select.setCurrentIndex)
        self.drawing_area.navigation_requested.connect(self._navigate)

    def _set_controls_enabled(self, enabled: bool) -> None:
        """Enable the controls that need at least one class."""
        self.class_select.setEnabled(enabled)
        self.clear_button.setEnabled(enabled)
        self.export_button.setEnabled(enabled and self.export_worker is None)
        self.export_action.setEnabled(enabled and self.export_worker is None)
        self.image_list.setEnabled(enabled)

    # === Directory Loading ===

    def _open_directory(self) -> None:
        """Ask for a directory and load its images."""
        directory = QFileDialog.getExistingDirectory(
            self, "Select Image Directory", self.config.default_directory
        )
        if directory:
            self._load_images(directory)

    def _load_images(self, dir_path: str) -> None:
        """Load images from a directory in the background."""
        self._stop_image_loading()
        self._show_status_message("Loading images...")

        self.image_scanner = ImageScanner(dir_path)
        self.image_scanner.images_loaded.connect(self._on_images_loaded)
        self.image_scanner.failed.connect(self._on_image_loading_failed)
        self.image_scanner.start()

        self._add_recent_path(dir_path)

    def _stop_image_loading(self) -> None:
        """Stop an active image scanner."""
        if self.image_scanner:
            self.image_scanner.stop()
            self.image_scanner.wait()
            self.image_scanner = None

    def _release_scanner(self) -> None:
        """Drop a scanner that has delivered its result."""
        if self.image_scanner is not None:
            self.image_scanner.wait()
            self.image_scanner = None

    def _on_images_loaded(self, images: List[ImageRef]) -> None:
        """Handle completion of image loading."""
        if self.sender() is not self.image_scanner:
            return  # superseded scan
        self._release_scanner()
        count = self.session.load_images(images)

        if count == 0:
            self._show_status_message("No images found")
            QMessageBox.information(self, "Info", "No supported images found in the selected directory.")
        else:
            self._show_status_message(f"Loaded {count} images")

        self._refresh_image_list()
        self._display_current_image()

    def _on_image_loading_failed(self, message: str) -> None:
        """Report a failed directory scan."""
        if self.sender() is not self.image_scanner:
            return
        self._release_scanner()
        self._show_status_message("Image loading failed")
        QMessageBox.warning(self, "Error", f"Failed to load images: {message}")

    def _add_recent_path(self, path: str) -> None:
        """Remember a directory in the recent list."""
        self.config.add_recent_path(path)
        self.config.default_directory = path
        self.config_manager.save()
        self._update_recent_paths_menu()

    def _update_recent_paths_menu(self) -> None:
        """Rebuild the recent directories menu."""
        self.recent_menu.clear()
        for path in self.config.recent_paths:
            action = QAction(path, self)
            action.triggered.connect(lambda checked=False, p=path: self._load_images(p))
            self.recent_menu.addAction(action)
        self.recent_menu.setEnabled(bool(self.config.recent_paths))

    # === Image Display ===

    def _refresh_image_list(self) -> None:
        """Rebuild the image list with annotation markers."""
        self.image_list.blockSignals(True)
        self.image_list.clear()
        for image in self.session.image_set.images:
            item = QListWidgetItem(image.name)
            self._mark_item(item, self.session.store.has_annotations(image.name))
            self.image_list.addItem(item)
        self.image_list.setCurrentRow(self.session.image_set.current_index)
        self.image_list.blockSignals(False)
        self._update_counts()

    def _mark_item(self, item: QListWidgetItem, annotated: bool) -> None:
        font = QFont(item.font())
        font.setBold(annotated)
        item.setFont(font)
        if annotated:
            item.setForeground(QBrush(ANNOTATED_COLOR))
        else:
            item.setData(Qt.ItemDataRole.ForegroundRole, None)

    def _update_current_item_marker(self) -> None:
        """Refresh the annotated marker of the displayed image."""
        image = self.session.current_image
        item = self.image_list.item(self.session.image_set.current_index)
        if image is not None and item is not None:
            self._mark_item(item, self.session.store.has_annotations(image.name))
        self._update_counts()

    def _update_counts(self) -> None:
        names = [image.name for image in self.session.image_set.images]
        if not names:
            self.image_count_label.setText("")
            return
        tagged = self.session.store.annotated_count(names)
        boxes = self.session.store.total_boxes(names)
        self.image_count_label.setText(f"{tagged}/{len(names)} tagged, {boxes} boxes")

    def _display_current_image(self) -> None:
        """Show the session's current image."""
        image = self.session.current_image
        if image is None:
            self.drawing_area.clear()
            self.file_label.setText("")
            self.index_label.setText("")
            self.dimensions_label.setText("")
            self._update_annotation_list()
            return

        pixmap = QPixmap()
        if not pixmap.loadFromData(image.data):
            logger.error(f"Failed to decode image: {image.name}")
            QMessageBox.warning(self, "Error", f"Failed to load image: {image.name}")

        self.drawing_area.setPixmap(pixmap)
        self.file_label.setText(image.name)
        self.index_label.setText(self.session.image_set.position_text())
        self.dimensions_label.setText(f"{image.width}x{image.height}")

        self.image_list.blockSignals(True)
        self.image_list.setCurrentRow(self.session.image_set.current_index)
        self.image_list.blockSignals(False)

        self._update_annotation_list()

    def _navigate(self, delta: int) -> None:
        """Move to the next or previous image."""
        if delta == 0:
            return
        changed = self.session.next_image() if delta > 0 else self.session.previous_image()
        if changed:
            self._display_current_image()

    def _on_image_row_changed(self, row: int) -> None:
        """Show the image picked in the list."""
        if self.session.go_to(row):
            self._display_current_image()

    # === Classes ===

    def _on_classes_changed(self) -> None:
        """Rebuild the class selector from the class text."""
        self.session.set_classes_text(self.classes_edit.toPlainText())

        self.class_select.blockSignals(True)
        self.class_select.clear()
        if self.session.is_ready:
            self.class_select.addItems(self.session.classes.names)
            self.class_select.setCurrentIndex(self.session.active_class)
        else:
            self.class_select.addItem("Enter classes first")
        self.class_select.blockSignals(False)

        self._set_controls_enabled(self.session.is_ready)

    def _on_class_selected(self, index: int) -> None:
        """Use the selected class for new boxes."""
        self.session.set_active_class(index)

    # === Annotations ===

    def _update_annotation_list(self) -> None:
        """Rebuild the annotation list for the displayed image."""
        self.annotation_list.clear()
        for index, (label, coords) in enumerate(self.session.annotation_rows()):
            item = QListWidgetItem(f"{label}    {coords}")
            item.setData(Qt.ItemDataRole.UserRole, index)
            self.annotation_list.addItem(item)
        self._sync_annotation_selection()

    def _sync_annotation_selection(self) -> None:
        selected = self.session.selected_index
        self.annotation_list.blockSignals(True)
        if selected is None:
            self.annotation_list.clearSelection()
        else:
            self.annotation_list.setCurrentRow(selected)
        self.annotation_list.blockSignals(False)

    def _on_annotation_clicked(self, item: QListWidgetItem) -> None:
        """Select the clicked box on the canvas."""
        self.session.select(item.data(Qt.ItemDataRole.UserRole))
        self.drawing_area.update()

    def _on_selection_changed(self, index: Optional[int]) -> None:
        self._sync_annotation_selection()

    def _on_annotations_changed(self) -> None:
        """Refresh everything that depends on the displayed image's boxes."""
        self._update_annotation_list()
        self._update_current_item_marker()

    def _clear_current_image(self) -> None:
        """Remove all boxes from the displayed image after confirmation."""
        if self.session.current_image is None:
            return

        confirm = QMessageBox.question(
            self,
            "Clear Annotations",
            "Clear all annotations for this image?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        if confirm == QMessageBox.StandardButton.Yes:
            self.session.clear_current()
            self._on_annotations_changed()
            self.drawing_area.update()

    # === Export ===

    def _export_dataset(self) -> None:
        """Export the dataset to a ZIP archive chosen by the user."""
        if self.export_worker is not None:
            return

        try:
            entries = self.session.build_export()
        except ExportError as e:
            QMessageBox.warning(self, "Export", str(e))
            return

        default_path = str(Path(self.config.default_directory or ".") / self.config.export_file_name)
        path, _ = QFileDialog.getSaveFileName(
            self, "Export YOLO Dataset", default_path, "Zip File (*.zip)"
        )
        if not path:
            return

        labels, annotated = count_labels(entries)
        self._export_path = Path(path)
        self._export_summary = f"{labels} images, {annotated} annotated"

        self.export_worker = ExportWorker(entries)
        self.export_worker.finished_archive.connect(self._on_export_finished)
        self.export_worker.failed.connect(self._on_export_failed)
        self._set_controls_enabled(self.session.is_ready)
        self._show_status_message("Exporting dataset...")
        self.export_worker.start()

    def _on_export_finished(self, data: bytes) -> None:
        """Write the finished archive to disk."""
        path = self._export_path
        self._finish_export()

        try:
            path.write_bytes(data)
        except OSError as e:
            logger.exception("Error writing export archive")
            QMessageBox.critical(self, "Export Error", f"Failed to write {path}: {e}")
            return

        logger.info(f"Exported dataset to {path}")
        self._show_status_message(f"Exported {self._export_summary} to {path.name}")

    def _on_export_failed(self, message: str) -> None:
        self._finish_export()
        QMessageBox.critical(self, "Export Error", f"Failed to export dataset: {message}")

    def _finish_export(self) -> None:
        if self.export_worker is not None:
            self.export_worker.wait()
        self.export_worker = None
        self._export_path = None
        self._set_controls_enabled(self.session.is_ready)

    # === Event Handlers ===

    def _show_status_message(self, message: str) -> None:
        self.status_bar.showMessage(message, 5000)

    def keyPressEvent(self, event) -> None:
        """Route unhandled shortcut keys to the canvas."""
        if not self.drawing_area.handle_key(event):
            super().keyPressEvent(event)

    def closeEvent(self, event) -> None:
        """Handle window close."""
        self._stop_image_loading()
        if self.export_worker is not None:
            self.export_worker.wait()
        super().closeEvent(event)
