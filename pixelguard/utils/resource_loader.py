"""
Per-user directories for saved annotations, logs and settings.

Setting PIXELGUARD_HOME puts everything under one directory, which keeps
tests and portable installs away from the real user profile.
"""
import os
import sys
from pathlib import Path

APP_NAME = "PixelGuardPDF"
HOME_ENV = "PIXELGUARD_HOME"


def _ensure(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_app_data_dir(app_name: str = APP_NAME) -> Path:
    """
    Get the application data directory for storing user data.

    Args:
        app_name: Name of the application

    Returns:
        Path to the app data directory
    """
    override = os.environ.get(HOME_ENV)
    if override:
        return _ensure(Path(override) / "data")

    if os.name == 'nt':
        base_dir = Path(os.environ.get('APPDATA', Path.home()))
    elif sys.platform == 'darwin':
        base_dir = Path.home() / "Library" / "Application Support"
    else:
        base_dir = Path(os.environ.get('XDG_DATA_HOME', Path.home() / ".local" / "share"))
    return _ensure(base_dir / app_name)


def get_config_dir(app_name: str = APP_NAME) -> Path:
    """Directory holding settings.json."""
    override = os.environ.get(HOME_ENV)
    if override:
        return _ensure(Path(override) / "config")

    if os.name == 'nt':
        return _ensure(get_app_data_dir(app_name) / "config")
    if sys.platform == 'darwin':
        return _ensure(Path.home() / "Library" / "Preferences" / app_name)
    base_dir = Path(os.environ.get('XDG_CONFIG_HOME', Path.home() / ".config"))
    return _ensure(base_dir / app_name)
