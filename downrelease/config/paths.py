"""Filesystem locations used by downrelease.

Settings and logs live in a per-user configuration directory. Setting
``DOWNRELEASE_HOME`` points everything at another directory, which is
how tests and CI keep their state isolated.
"""

import os
import sys
from pathlib import Path


APP_NAME = "downrelease"

HOME_ENV_VAR = "DOWNRELEASE_HOME"

SETTINGS_FILE_NAME = "settings.json"
LOG_FILE_NAME = "downrelease.log"


def _platform_config_base() -> Path:
    if sys.platform == "win32":
        return Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def get_app_data_dir(create: bool = True) -> Path:
    """
    Get the directory holding settings and logs.

    Args:
        create: Create the directory if it does not exist

    Returns:
        ``$DOWNRELEASE_HOME`` when set, otherwise one of:
        - Windows: %APPDATA%/downrelease
        - Linux: $XDG_CONFIG_HOME/downrelease (~/.config/downrelease)
        - macOS: ~/Library/Application Support/downrelease
    """
    override = os.environ.get(HOME_ENV_VAR)
    app_dir = Path(override).expanduser() if override else _platform_config_base() / APP_NAME

    if create:
        app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


def get_settings_path() -> Path:
    """Path to the settings file. Its directory is not created."""
    return get_app_data_dir(create=False) / SETTINGS_FILE_NAME


def get_log_file_path() -> Path:
    """Path to the log file, creating the logs directory."""
    log_dir = get_app_data_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / LOG_FILE_NAME
