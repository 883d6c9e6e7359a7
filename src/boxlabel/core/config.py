"""Configuration management for BoxLabel."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

# Default configuration file path
DEFAULT_CONFIG_PATH = Path("config.yaml")


@dataclass
class AppConfig:
    """
    Application configuration settings.

    Stores user preferences. Annotations are never persisted here.
    """

    default_directory: str = ""
    min_box_size: float = 5.0  # Boxes must exceed this many pixels on both sides
    line_thickness: int = 3
    selected_line_thickness: int = 4
    font_size: int = 12
    next_image_key: str = "Right"
    previous_image_key: str = "Left"
    delete_shape_keys: list[str] = field(default_factory=lambda: ["Delete", "Backspace"])
    export_file_name: str = "yolo_dataset.zip"
    max_recent_paths: int = 10  # Number of recent paths to remember (0 = disabled)
    recent_paths: list[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for serialization."""
        return {
            "defaultDirectory": self.default_directory,
            "minBoxSize": self.min_box_size,
            "lineThickness": self.line_thickness,
            "selectedLineThickness": self.selected_line_thickness,
            "fontSize": self.font_size,
            "nextImageKey": self.next_image_key,
            "previousImageKey": self.previous_image_key,
            "deleteShapeKeys": list(self.delete_shape_keys),
            "exportFileName": self.export_file_name,
            "maxRecentPaths": self.max_recent_paths,
            "recentPaths": list(self.recent_paths),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AppConfig:
        """Create config from dictionary."""
        delete_keys = data.get("deleteShapeKeys", ["Delete", "Backspace"])
        if isinstance(delete_keys, str):
            delete_keys = [k.strip() for k in delete_keys.split(",") if k.strip()]

        return cls(
            default_directory=data.get("defaultDirectory", ""),
            min_box_size=float(data.get("minBoxSize", 5.0)),
            line_thickness=data.get("lineThickness", 3),
            selected_line_thickness=data.get("selectedLineThickness", 4),
            font_size=data.get("fontSize", 12),
            next_image_key=data.get("nextImageKey", "Right"),
            previous_image_key=data.get("previousImageKey", "Left"),
            delete_shape_keys=delete_keys,
            export_file_name=data.get("exportFileName", "yolo_dataset.zip"),
            max_recent_paths=data.get("maxRecentPaths", 10),
            recent_paths=data.get("recentPaths", []),
        )

    def add_recent_path(self, path: str) -> None:
        """Move a path to the front of the recent list, honoring the limit."""
        if self.max_recent_paths <= 0:
            self.recent_paths = []
            return
        paths = [p for p in self.recent_paths if p != path]
        paths.insert(0, path)
        self.recent_paths = paths[:self.max_recent_paths]


class ConfigManager:
    """
    Loads and stores an AppConfig as a YAML document.

    A missing or unreadable file yields the defaults; the problem is
    logged and the application keeps running.
    """

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH) -> None:
        self.config_path = Path(config_path)
        self._config: Optional[AppConfig] = None

    @property
    def config(self) -> AppConfig:
        """The active configuration, read from disk on first access."""
        if self._config is None:
            self._config = self.load()
        return self._config

    def _read_mapping(self) -> Optional[Dict[str, Any]]:
        try:
            data = yaml.safe_load(self.config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            logger.error(f"Invalid YAML in {self.config_path}: {e}")
            return None
        except OSError as e:
            logger.error(f"Could not read {self.config_path}: {e}")
            return None

        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.error(f"{self.config_path} does not contain a mapping")
            return None
        return data

    def load(self) -> AppConfig:
        """
        Read the configuration file.

        Returns:
            The stored settings, or defaults if the file is missing or invalid
        """
        if not self.config_path.is_file():
            logger.info(f"No config at {self.config_path}, using defaults")
            return AppConfig()

        data = self._read_mapping()
        if data is None:
            return AppConfig()

        try:
            config = AppConfig.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.error(f"Bad value in {self.config_path}: {e}")
            return AppConfig()

        logger.info(f"Loaded configuration from {self.config_path}")
        return config

    def save(self, config: Optional[AppConfig] = None) -> bool:
        """
        Write the configuration file.

        Args:
            config: New configuration to store; the active one if omitted

        Returns:
            True if the file was written
        """
        if config is not None:
            self._config = config
        if self._config is None:
            return False

        text = yaml.safe_dump(self._config.to_dict(), default_flow_style=False)
        try:
            self.config_path.write_text(text, encoding="utf-8")
        except OSError as e:
            logger.error(f"Could not write {self.config_path}: {e}")
            return False

        logger.debug(f"Saved configuration to {self.config_path}")
        return True

    def update(self, **kwargs: Any) -> None:
        """Set known fields and save; unknown keys are logged and ignored."""
        config = self.config
        for key, value in kwargs.items():
            if not hasattr(config, key):
                logger.warning(f"Unknown config key: {key}")
                continue
            setattr(config, key, value)
        self.save()
