"""
Configuration loader for memostack.

Loads config.yaml from the data directory. A missing file is created with
defaults; an unreadable or malformed file falls back to defaults without
touching it. Values are fixed for the lifetime of the process.
"""

import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path

import yaml

from .constants import (
    CONFIG_FILE,
    DATA_DIR_ENV,
    DATA_DIR_NAME,
    DATABASE_FILE,
    DEFAULT_DELAYED_CHECK_INTERVAL_SECONDS,
    DEFAULT_MAX_HOT_COUNT,
    DEFAULT_PAUSE_SPOTLIGHT_WHEN_EXPANDED,
    DEFAULT_SPOTLIGHT_INTERVAL_SECONDS,
)
from . import validate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppConfig:
    """Startup configuration from config.yaml"""
    max_hot_count: int = DEFAULT_MAX_HOT_COUNT
    cold_spotlight_interval_seconds: float = DEFAULT_SPOTLIGHT_INTERVAL_SECONDS  # 0 disables the spotlight
    delayed_check_interval_seconds: float = DEFAULT_DELAYED_CHECK_INTERVAL_SECONDS
    pause_spotlight_when_expanded: bool = DEFAULT_PAUSE_SPOTLIGHT_WHEN_EXPANDED  # Hold the pick while it is expanded


def get_data_dir(explicit: str | None = None) -> Path:
    """Resolve the data directory.

    Order: explicit path, $MEMOSTACK_DATA_DIR, $XDG_DATA_HOME/memo-stack,
    ~/.local/share/memo-stack.
    """
    if explicit:
        return Path(explicit).expanduser()
    env_dir = os.environ.get(DATA_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser()
    xdg = os.environ.get("XDG_DATA_HOME")
    base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return base / DATA_DIR_NAME


def get_database_path(data_dir: Path) -> Path:
    return data_dir / DATABASE_FILE


def _positive_int(data: dict, key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        logger.warning(f"[CONFIG] Invalid {key} {value!r}, using {default}")
        return default
    return value


def _non_negative(data: dict, key: str, default: float) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        logger.warning(f"[CONFIG] Invalid {key} {value!r}, using {default}")
        return default
    return value


def _flag(data: dict, key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        logger.warning(f"[CONFIG] Invalid {key} {value!r}, using {default}")
        return default
    return value


def config_from_dict(data: dict) -> AppConfig:
    """Build AppConfig from a parsed mapping.

    Unknown keys are ignored; invalid values fall back to their default.
    """
    return AppConfig(
        max_hot_count=_positive_int(data, "max_hot_count", DEFAULT_MAX_HOT_COUNT),
        cold_spotlight_interval_seconds=_non_negative(
            data, "cold_spotlight_interval_seconds", DEFAULT_SPOTLIGHT_INTERVAL_SECONDS
        ),
        delayed_check_interval_seconds=_non_negative(
            data, "delayed_check_interval_seconds", DEFAULT_DELAYED_CHECK_INTERVAL_SECONDS
        ),
        pause_spotlight_when_expanded=_flag(
            data, "pause_spotlight_when_expanded", DEFAULT_PAUSE_SPOTLIGHT_WHEN_EXPANDED
        ),
    )


def save_config(config_path: Path, config: AppConfig) -> None:
    """Write config as YAML. Failures are logged, not raised."""
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(yaml.safe_dump(asdict(config), sort_keys=False))
    except OSError as e:
        logger.warning(f"[CONFIG] Error writing {config_path}: {e}")


def load_config(data_dir: Path) -> AppConfig:
    """Load config.yaml from data_dir and return AppConfig.

    If the file doesn't exist, defaults are written out and returned.
    """
    config_path = data_dir / CONFIG_FILE
    if not config_path.exists():
        config = AppConfig()
        save_config(config_path, config)
        return config

    try:
        data = yaml.safe_load(config_path.read_text())
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"[CONFIG] Failed to read {config_path}: {e}, using defaults")
        return AppConfig()

    if data is None:
        return AppConfig()

    try:
        validate.validate(data, "config")
    except validate.ValidationError as e:
        logger.warning(f"[CONFIG] {config_path}: {e}, using defaults")
        return AppConfig()

    return config_from_dict(data)
