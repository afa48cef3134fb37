"""Configuration loading for Registrar."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "registrar.yaml"
DB_PATH_ENV = "REGISTRAR_DB_PATH"


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class RegistrarConfig:
    """Registrar configuration.

    Attributes:
        db_path: SQLite database file, or ":memory:".
        page_size: Students per page in listings.
        log_dir: Directory for log files (None uses the logging default).
        log_level: Log level name (None uses the logging default).
    """

    db_path: str = "registrar.db"
    page_size: int = 12
    log_dir: str | None = None
    log_level: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], root_path: Path | None = None) -> RegistrarConfig:
        """Create config from dictionary.

        Args:
            data: Configuration dictionary from YAML.
            root_path: Directory relative paths are resolved against.

        Returns:
            Parsed configuration object.

        Raises:
            ConfigError: If a value has the wrong type or range.
        """
        unknown = set(data) - {"db_path", "page_size", "log_dir", "log_level"}
        if unknown:
            raise ConfigError(f"Unknown config fields: {', '.join(sorted(unknown))}")

        page_size = data.get("page_size", 12)
        if not isinstance(page_size, int) or isinstance(page_size, bool) or page_size < 1:
            raise ConfigError(f"page_size must be a positive integer, got {page_size!r}")

        db_path = str(data.get("db_path", "registrar.db"))
        if root_path is not None and db_path != ":memory:" and not Path(db_path).is_absolute():
            db_path = str(root_path / db_path)

        log_dir = data.get("log_dir")
        if log_dir is not None and root_path is not None and not Path(log_dir).is_absolute():
            log_dir = str(root_path / log_dir)

        return cls(
            db_path=db_path,
            page_size=page_size,
            log_dir=log_dir,
            log_level=data.get("log_level"),
        )

    def apply_env(self) -> RegistrarConfig:
        """Apply environment overrides (REGISTRAR_DB_PATH)."""
        env_db_path = os.environ.get(DB_PATH_ENV)
        if env_db_path:
            self.db_path = env_db_path
        return self


def find_config(start: Path | None = None) -> Path | None:
    """Find registrar.yaml in start directory or its parents.

    Args:
        start: Directory to start searching from. Defaults to cwd.

    Returns:
        Path to the config file, or None if not found.
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None = None) -> RegistrarConfig:
    """Load configuration from a YAML file.

    Without a path the nearest registrar.yaml is used; when none exists the
    defaults apply. Environment overrides are applied last.

    Raises:
        ConfigError: If the file cannot be parsed or holds invalid values.
    """
    if path is None:
        path = find_config()
    if path is None:
        return RegistrarConfig().apply_env()

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    return RegistrarConfig.from_dict(data, root_path=Path(path).parent).apply_env()
