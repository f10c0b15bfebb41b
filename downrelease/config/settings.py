"""Persistent settings for downrelease.

Settings are stored as a flat JSON object. Values read from disk or
given on the command line are checked against the field's type, so a
hand-edited file cannot feed a string timeout into the HTTP client.
"""

import json
import logging
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from downrelease.config.paths import get_settings_path
from downrelease.utils.validators import (
    validate_release_host,
    validate_repository,
    validate_retries,
    validate_timeout,
)

logger = logging.getLogger("downrelease.settings")


DEFAULT_REPOSITORIES = ["Guerrilla-Interactive/ngo"]

_TRUE_WORDS = ("true", "1", "yes", "on")
_FALSE_WORDS = ("false", "0", "no", "off")


class SettingsError(ValueError):
    """A settings key is unknown or its value is invalid."""


@dataclass
class AppSettings:
    """Settings that persist between runs."""

    # Release host
    host: str = "github.com"
    timeout: float = 10.0
    retries: int = 0

    # Fetched when no repository is given on the command line
    repositories: List[str] = field(default_factory=lambda: list(DEFAULT_REPOSITORIES))

    # "" leaves the binary in the extraction directory
    install_dir: str = ""
    safe_paths: bool = True
    keep_going: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def field_type(cls, name: str) -> Optional[type]:
        """Python type of a settings field, or None if unknown."""
        if name not in cls.field_names():
            return None
        return type(getattr(cls(), name))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppSettings":
        """
        Build settings from a decoded JSON object.

        Unknown keys are ignored. Values that fail validation are replaced
        by the field default and logged.
        """
        values = {}
        for key, value in data.items():
            if key not in cls.field_names():
                continue
            try:
                values[key] = cls.check_value(key, value)
            except SettingsError as e:
                logger.warning(f"Ignoring saved setting: {e}")
        return cls(**values)

    @classmethod
    def check_value(cls, key: str, value: Any) -> Any:
        """
        Validate a typed value for a settings field.

        Returns:
            The value, normalised where needed

        Raises:
            SettingsError: If key is unknown or value is invalid
        """
        expected = cls.field_type(key)
        if expected is None:
            raise SettingsError(f"unknown setting '{key}'")

        if expected is float and type(value) is int:
            value = float(value)
        # type() rather than isinstance(): bool is an int subclass
        if type(value) is not expected:
            raise SettingsError(f"{key} must be {expected.__name__}, got {value!r}")

        error = None
        if key == "timeout":
            _, error = validate_timeout(value)
        elif key == "retries":
            _, error = validate_retries(value)
        elif key == "repositories":
            bad = [spec for spec in value if not isinstance(spec, str) or not validate_repository(spec)[0]]
            if bad:
                error = f"invalid repository {bad[0]!r}"
        elif key == "host":
            _, error = validate_release_host(value)
        if error:
            raise SettingsError(f"{key}: {error}")

        return value

    @classmethod
    def parse_value(cls, key: str, text: str) -> Any:
        """
        Convert command-line text to a validated value for a field.

        Lists are comma-separated.

        Raises:
            SettingsError: If key is unknown or text does not convert
        """
        expected = cls.field_type(key)
        if expected is None:
            raise SettingsError(f"unknown setting '{key}'")

        if expected is bool:
            lowered = text.strip().lower()
            if lowered in _TRUE_WORDS:
                value = True
            elif lowered in _FALSE_WORDS:
                value = False
            else:
                raise SettingsError(f"{key} expects true or false, got '{text}'")
        elif expected in (int, float):
            try:
                value = expected(text)
            except ValueError:
                raise SettingsError(f"{key} expects a number, got '{text}'") from None
        elif expected is list:
            value = [item.strip() for item in text.split(",") if item.strip()]
        else:
            value = text.strip()

        return cls.check_value(key, value)


class SettingsManager:
    """Loads and saves AppSettings as JSON."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Args:
            config_path: Settings file (default: platform config directory)
        """
        self._config_path = config_path or get_settings_path()
        self._settings: Optional[AppSettings] = None

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load(self) -> AppSettings:
        """
        Read settings from disk.

        Returns:
            Saved settings, or defaults if the file is missing or unreadable
        """
        self._settings = AppSettings()
        if not self._config_path.exists():
            return self._settings

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Unreadable settings file {self._config_path}, using defaults: {e}")
            return self._settings

        if not isinstance(data, dict):
            logger.warning(f"Settings file {self._config_path} is not a JSON object, using defaults")
            return self._settings

        self._settings = AppSettings.from_dict(data)
        return self._settings

    def save(self, settings: AppSettings) -> None:
        """Write settings to disk, creating the parent directory."""
        self._settings = settings
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_path, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, indent=2)

    def reset(self) -> AppSettings:
        """Delete the settings file and return defaults."""
        self._settings = AppSettings()
        if self._config_path.exists():
            self._config_path.unlink()
        return self._settings

    def update(self, **changes: Any) -> AppSettings:
        """
        Validate and persist changes to individual fields.

        Raises:
            SettingsError: If a key is unknown or a value is invalid;
                nothing is saved in that case
        """
        if self._settings is None:
            self.load()

        checked = {key: AppSettings.check_value(key, value) for key, value in changes.items()}
        for key, value in checked.items():
            setattr(self._settings, key, value)

        self.save(self._settings)
        return self._settings
