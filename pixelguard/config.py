"""
User-tunable settings for rendering, effects and export.
"""
import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .utils.resource_loader import get_config_dir

logger = logging.getLogger(__name__)

SETTINGS_FILE = "settings.json"


@dataclass
class Settings:
    """Settings shared by the interactive view and the export pipeline."""

    # Oversampling factor for export rasters
    export_scale: float = 2.0

    # Pixelation block edge in document units
    block_size: float = 12.0

    # Drags at or below this size (device pixels) are rejected
    min_drag_px: float = 5.0

    # Linear downsample factor for blur and share of pixelation blended in
    blur_factor: float = 0.1
    blur_mix: float = 0.0

    # View
    default_scale: float = 1.0
    zoom_min: float = 0.5
    zoom_max: float = 3.0
    zoom_step: float = 0.25
    raster_cache_size: int = 3

    # Vector annotations
    stroke_color: Tuple[int, int, int] = (239, 68, 68)
    stroke_width: float = 2.0
    text_color: Tuple[int, int, int] = (0, 0, 0)
    text_font_size: float = 14.0
    text_box: Tuple[float, float] = (100.0, 20.0)

    export_prefix: str = "pixelguard_"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """
        Build settings from a dictionary, ignoring unknown keys.

        Args:
            data: Mapping of field names to values

        Returns:
            Settings with the known keys applied over the defaults
        """
        known = {f.name: f for f in fields(cls)}
        values = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown setting %r", key)
                continue
            # JSON has no tuples
            if isinstance(value, list):
                value = tuple(value)
            values[key] = value
        return cls(**values)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Settings":
        """
        Load settings from JSON, falling back to defaults.

        Args:
            path: Settings file; defaults to settings.json in the config dir

        Returns:
            Loaded settings, or defaults when the file is missing or unreadable
        """
        if path is None:
            path = get_config_dir() / SETTINGS_FILE

        path = Path(path)
        if not path.exists():
            return cls()

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("settings root must be an object")
            return cls.from_dict(data)
        except (OSError, ValueError, TypeError) as e:
            logger.error("Failed to load settings from %s: %s", path, e)
            return cls()

    def save(self, path: Optional[Path] = None) -> bool:
        """Write settings to JSON. Returns True on success."""
        if path is None:
            path = get_config_dir() / SETTINGS_FILE

        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, indent=2)
            return True
        except OSError as e:
            logger.error("Failed to save settings to %s: %s", path, e)
            return False


def load_user_settings() -> Settings:
    """
    Load settings.json from the config dir.

    On first start the file does not exist yet; it is written with the
    defaults so there is something to edit.
    """
    path = get_config_dir() / SETTINGS_FILE
    settings = Settings.load(path)
    if not path.exists() and settings.save(path):
        logger.info("Wrote default settings to %s", path)
    return settings
