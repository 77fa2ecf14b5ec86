"""
Settings Manager.

Handles editor settings with JSON file storage.
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from typing import Optional, List
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class HandleStyle:
    """Appearance of the edit handles."""
    anchor_radius: float = 6.0
    control_handle_radius: float = 5.0
    smooth_color: str = "#10b981"
    corner_color: str = "#3b82f6"
    selected_color: str = "#f59e0b"
    guide_line_color: str = "#10b981"
    guide_line_dash: List[float] = field(default_factory=lambda: [5.0, 3.0])
    selected_scale: float = 1.2
    stroke_color: str = "#ffffff"
    stroke_width: float = 2.0
    selected_stroke_width: float = 3.0


@dataclass
class GeometrySettings:
    """Closest-point search and hit-testing parameters."""
    closest_point_samples: int = 20
    refine_samples: int = 10
    path_click_tolerance: float = 6.0  # scene units


@dataclass
class UISettings:
    """User interface settings."""
    show_grid: bool = True
    grid_size: int = 50
    path_color: str = "#111827"
    path_width: float = 2.0


@dataclass
class EditorSettings:
    """Complete editor settings."""
    handles: HandleStyle = field(default_factory=HandleStyle)
    geometry: GeometrySettings = field(default_factory=GeometrySettings)
    ui: UISettings = field(default_factory=UISettings)
    window_geometry: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "handles": asdict(self.handles),
            "geometry": asdict(self.geometry),
            "ui": asdict(self.ui),
            "window_geometry": self.window_geometry,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EditorSettings":
        """
        Create from dictionary, ignoring unknown keys.

        Raises:
            ValueError: If a section is not an object or a value has the
                wrong type.
        """
        if not isinstance(data, dict):
            raise ValueError("Settings file must contain an object")
        settings = cls()

        if "handles" in data:
            settings.handles = _load_section(HandleStyle, data["handles"])
        if "geometry" in data:
            settings.geometry = _load_section(GeometrySettings, data["geometry"])
        if "ui" in data:
            settings.ui = _load_section(UISettings, data["ui"])
        if "window_geometry" in data:
            if not isinstance(data["window_geometry"], dict):
                raise ValueError("window_geometry must be an object")
            settings.window_geometry = data["window_geometry"]

        return settings


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _load_section(section_cls, values: dict):
    """Build a settings section, dropping keys it does not define."""
    if not isinstance(values, dict):
        raise ValueError(f"Settings section for {section_cls.__name__} must be an object")

    defaults = section_cls()
    known = {}
    for name, value in values.items():
        if name not in section_cls.__dataclass_fields__:
            continue
        default = getattr(defaults, name)
        if isinstance(default, bool):
            valid = isinstance(value, bool)
        elif isinstance(default, float):
            valid = _is_number(value)
            value = float(value) if valid else value
        elif isinstance(default, int):
            valid = isinstance(value, int) and not isinstance(value, bool)
        elif isinstance(default, list):
            valid = isinstance(value, list) and all(_is_number(v) for v in value)
        else:
            valid = isinstance(value, type(default))
        if not valid:
            raise ValueError(f"Invalid value for {section_cls.__name__}.{name}: {value!r}")
        known[name] = value
    return section_cls(**known)


class SettingsManager:
    """
    Manages editor settings with JSON file storage.

    Settings file location:
    - Windows: %APPDATA%/BezierEditor/settings.json
    - Linux: ~/.config/BezierEditor/settings.json
    - macOS: ~/Library/Application Support/BezierEditor/settings.json
    """

    APP_NAME = "BezierEditor"
    SETTINGS_FILE = "settings.json"

    def __init__(self, config_override: Optional[str] = None):
        """
        Initialize settings manager.

        Args:
            config_override: Optional path to override config file location.
                            Useful for testing.
        """
        self._settings = EditorSettings()
        self._config_override = config_override
        self._settings_path = self._get_settings_path()
        self._ensure_settings_dir()
        self.load()

    @property
    def settings(self) -> EditorSettings:
        """Get current settings."""
        return self._settings

    @property
    def settings_path(self) -> str:
        """Get the settings file path."""
        return str(self._settings_path)

    @property
    def handles(self) -> HandleStyle:
        return self._settings.handles

    @property
    def geometry(self) -> GeometrySettings:
        return self._settings.geometry

    def _get_settings_path(self) -> Path:
        """Get platform-specific settings directory."""
        if self._config_override:
            return Path(self._config_override)

        import platform
        system = platform.system()

        if system == "Windows":
            base = os.environ.get("APPDATA", os.path.expanduser("~"))
            config_dir = Path(base) / self.APP_NAME
        elif system == "Darwin":  # macOS
            config_dir = Path.home() / "Library" / "Application Support" / self.APP_NAME
        else:  # Linux and others
            xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
            config_dir = Path(xdg_config) / self.APP_NAME

        return config_dir / self.SETTINGS_FILE

    def _ensure_settings_dir(self):
        """Create settings directory if it doesn't exist."""
        self._settings_path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> bool:
        """Load settings from file."""
        if not self._settings_path.exists():
            return False

        try:
            with open(self._settings_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._settings = EditorSettings.from_dict(data)
            return True
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Error loading settings from {self._settings_path}: {e}")
            return False

    def save(self) -> bool:
        """Save settings to file."""
        try:
            self._ensure_settings_dir()
            with open(self._settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings.to_dict(), f, indent=2)
            return True
        except (OSError, TypeError) as e:
            logger.error(f"Error saving settings to {self._settings_path}: {e}")
            return False

    def reset(self):
        """Reset settings to defaults."""
        self._settings = EditorSettings()
        self.save()

    def save_window_geometry(self, geometry: bytes, state: bytes):
        """Save window geometry and state."""
        import base64
        self._settings.window_geometry = {
            "geometry": base64.b64encode(geometry).decode("ascii"),
            "state": base64.b64encode(state).decode("ascii"),
        }
        self.save()

    def get_window_geometry(self) -> tuple:
        """Get saved window geometry and state."""
        import base64
        geo = self._settings.window_geometry
        if not geo:
            return None, None

        try:
            geometry = base64.b64decode(geo.get("geometry", ""))
            state = base64.b64decode(geo.get("state", ""))
            return geometry, state
        except (ValueError, TypeError):
            return None, None


# Global settings instance
_settings_manager: Optional[SettingsManager] = None


def get_settings(config_override: Optional[str] = None) -> SettingsManager:
    """
    Get the global settings manager instance.

    Args:
        config_override: Optional path to override config location.
                        Only used on first call to initialize.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager(config_override)
    return _settings_manager


def reset_settings_manager():
    """Reset the global settings manager (useful for testing)."""
    global _settings_manager
    _settings_manager = None
