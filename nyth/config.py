"""Run configuration loaded from ``nyth.toml`` (or ``[tool.nyth]`` in pyproject)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml

from .detectors.base import IssueDetector
from .detectors.registry import select_detectors
from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "nyth.toml"
PYPROJECT_FILE_NAME = "pyproject.toml"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass
class NythConfig:
    detectors: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    jobs: int = 1
    log_level: str = DEFAULT_LOG_LEVEL
    source: Optional[Path] = None

    def selected_detectors(self) -> List[IssueDetector]:
        """Fresh detector instances for this configuration."""
        return select_detectors(self.detectors, self.exclude)


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (toml.TomlDecodeError, OSError) as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc


def _section(path: Path) -> Optional[Dict[str, Any]]:
    data = _read_toml(path)
    if path.name == PYPROJECT_FILE_NAME:
        return data.get("tool", {}).get("nyth")
    return data.get("nyth", data)


def find_config_file(root: Path) -> Optional[Path]:
    candidate = root / CONFIG_FILE_NAME
    if candidate.is_file():
        return candidate
    pyproject = root / PYPROJECT_FILE_NAME
    if pyproject.is_file() and _section(pyproject) is not None:
        return pyproject
    return None


def _string_list(section: Dict[str, Any], key: str, path: Path) -> List[str]:
    value = section.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"'{key}' in {path} must be a list of strings")
    return list(value)


def load_config(path: Optional[Path] = None, root: Optional[Path] = None) -> NythConfig:
    """Build the effective configuration.

    Precedence, lowest first: defaults, the config file (explicit *path*, or
    the one found in *root*), then ``NYTH_LOG_LEVEL`` / ``NYTH_JOBS``.
    A missing file means defaults; an unreadable one raises ConfigError.
    """
    config = NythConfig()

    if path is None:
        path = find_config_file(root or Path.cwd())
    elif not path.is_file():
        raise ConfigError(f"Config file {path} does not exist")

    if path is not None:
        section = _section(path) or {}
        config.detectors = _string_list(section, "detectors", path)
        config.exclude = _string_list(section, "exclude", path)
        config.jobs = _positive_int(section.get("jobs", config.jobs), "jobs")
        config.log_level = str(section.get("log_level", config.log_level)).upper()
        config.source = path
        logger.debug("Loaded configuration from %s", path)

    if os.environ.get("NYTH_LOG_LEVEL"):
        config.log_level = os.environ["NYTH_LOG_LEVEL"].upper()
    if os.environ.get("NYTH_JOBS"):
        config.jobs = _positive_int(os.environ["NYTH_JOBS"], "NYTH_JOBS")
    return config


def _positive_int(value: Any, name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"'{name}' must be an integer, got {value!r}") from None
    if number < 1:
        raise ConfigError(f"'{name}' must be at least 1, got {number}")
    return number


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
