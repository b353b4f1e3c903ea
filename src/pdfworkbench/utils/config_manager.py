"""
PDF Workbench - Configuration Manager

This module provides centralized JSON-based configuration management for
the default watermark, page-numbering, rendering and image-layout settings.
"""

import copy
import json
import os
from typing import Any, Final

from pdfworkbench.config import CONFIG_FILE_PATH
from pdfworkbench.constants import EXPORT_SCALE, THUMBNAIL_SCALE
from pdfworkbench.utils.logger import logger

# Default configuration values
DEFAULT_CONFIG: Final[dict[str, Any]] = {
    "version": 1,
    "watermark": {
        "text": "CONFIDENTIAL",
        "font_size": 50,
        "opacity": 0.3,
        "rotation": -45,
        "color": "#000000",
    },
    "page_numbers": {
        "position": "bottom",
        "alignment": "center",
        "font_size": 12,
        "color": "#000000",
    },
    "rendering": {
        "renderer": "pdfium",
        "thumbnail_scale": THUMBNAIL_SCALE,
        "export_scale": EXPORT_SCALE,
        "image_format": "png",
    },
    "images": {
        "layout": "fit-to-image",
    },
    "output": {
        "destination_folder": "",
    },
}


class ConfigManager:
    """Manages application configuration in JSON format.

    This class provides a centralized way to load, save, and access
    configuration settings. Missing keys are filled in from
    DEFAULT_CONFIG when an older settings file is loaded.
    """

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize the configuration manager.

        Args:
            config_path: Optional path to the configuration file.
                        Defaults to CONFIG_FILE_PATH.
        """
        self.config_path = config_path or CONFIG_FILE_PATH
        self._config: dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file or fall back to defaults."""
        if not os.path.exists(self.config_path):
            self._config = self._get_default_config()
            return

        try:
            with open(self.config_path, encoding="utf-8") as f:
                loaded = json.load(f)
            if not isinstance(loaded, dict):
                raise ValueError("top-level value is not an object")
            self._config = loaded
            logger.info("Configuration loaded from JSON")
            self._upgrade_config()
        except (OSError, ValueError) as e:
            logger.error(f"Error loading config: {e}")
            self._config = self._get_default_config()

    def _get_default_config(self) -> dict[str, Any]:
        """Get a copy of the default configuration.

        Returns:
            Deep copy of default configuration dictionary.
        """
        return copy.deepcopy(DEFAULT_CONFIG)

    def _upgrade_config(self) -> None:
        """Add any missing keys from the default configuration."""
        current_version = self._config.get("version", 0)
        self._merge_defaults(self._config, DEFAULT_CONFIG)

        if current_version < DEFAULT_CONFIG["version"]:
            self._config["version"] = DEFAULT_CONFIG["version"]
            logger.info(f"Configuration upgraded to version {DEFAULT_CONFIG['version']}")

    def _merge_defaults(self, config: dict, defaults: dict) -> None:
        """Merge default values into config for missing keys.

        Args:
            config: Current configuration dictionary.
            defaults: Default configuration dictionary.
        """
        for key, value in defaults.items():
            if key not in config:
                config[key] = copy.deepcopy(value)
            elif isinstance(value, dict) and isinstance(config.get(key), dict):
                self._merge_defaults(config[key], value)

    def save(self) -> bool:
        """Save configuration to file.

        Returns:
            True if save was successful, False otherwise.
        """
        try:
            os.makedirs(os.path.dirname(self.config_path) or ".", exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2, ensure_ascii=False)
            logger.debug("Configuration saved to JSON")
            return True
        except OSError as e:
            logger.error(f"Error saving config: {e}")
            return False

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get a configuration value by dot-separated path.

        Args:
            key_path: Dot-separated path to the config value (e.g., "watermark.opacity")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value: Any = self._config

        for key in key_path.split("."):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> dict[str, Any]:
        """Return a copy of one top-level section (empty dict if absent)."""
        value = self._config.get(section)
        return copy.deepcopy(value) if isinstance(value, dict) else {}

    def set(self, key_path: str, value: Any, save_immediately: bool = True) -> None:
        """Set a configuration value by dot-separated path.

        Args:
            key_path: Dot-separated path to the config value
            value: Value to set
            save_immediately: Whether to save to file immediately
        """
        keys = key_path.split(".")
        config = self._config

        for key in keys[:-1]:
            if not isinstance(config.get(key), dict):
                config[key] = {}
            config = config[key]

        config[keys[-1]] = value

        if save_immediately:
            self.save()


# Singleton instance for global access
_config_manager: ConfigManager | None = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance.

    Returns:
        The singleton ConfigManager instance
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager
