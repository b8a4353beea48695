"""
===============================================================================
ORRERY - Settings and Logging Configuration
===============================================================================
Resolution settings live in a small dataclass. They can be loaded from a
YAML file shaped like:

    max_frame_depth: 64
    angular_velocity_delta: 1.1574074e-05   # days
    velocity_delta: 1.1574074e-05           # days
    logging:
      level: INFO
      file: output/orrery.log

Every key is optional. The active settings are module-level state consulted
by the resolution code; swap them with use_settings() between frames, never
during a resolution pass.
===============================================================================
"""

import logging
import sys
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from orrery.core.constants import DEFAULT_DIFF_DELTA, DEFAULT_MAX_FRAME_DEPTH
from orrery.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


@dataclass(frozen=True)
class Settings:
    """
    Tunables for frame and timeline resolution.

    Attributes
    ----------
    max_frame_depth : int
        Maximum number of orbit-frame centers visited while resolving one
        position or velocity. Exceeding it raises FrameGraphError.
    angular_velocity_delta : float
        Step (days) used to finite-difference orientations of frames and
        rotation models that have no analytic angular velocity.
    velocity_delta : float
        Half-step (days) used to central-difference orbit positions when an
        orbit has no analytic velocity.
    log_level : str
        Level name applied by configure_logging().
    log_file : str or None
        Optional log file path.
    """
    max_frame_depth: int = DEFAULT_MAX_FRAME_DEPTH
    angular_velocity_delta: float = DEFAULT_DIFF_DELTA
    velocity_delta: float = DEFAULT_DIFF_DELTA
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self) -> None:
        if self.max_frame_depth < 1:
            raise ConfigError(
                f"max_frame_depth must be positive, got {self.max_frame_depth}"
            )
        if self.angular_velocity_delta <= 0.0 or self.velocity_delta <= 0.0:
            raise ConfigError("Finite-difference steps must be positive")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Settings':
        """
        Build settings from a parsed configuration mapping.

        Raises
        ------
        ConfigError
            If the mapping contains keys this version does not know.
        """
        data = dict(data or {})
        log_section = data.pop("logging", None) or {}
        if not isinstance(log_section, dict):
            raise ConfigError("'logging' section must be a mapping")

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        unknown |= {f"logging.{k}" for k in set(log_section) - {"level", "file"}}
        if unknown:
            raise ConfigError(f"Unknown settings keys: {sorted(unknown)}")

        if "level" in log_section:
            data["log_level"] = str(log_section["level"]).upper()
        if "file" in log_section:
            data["log_file"] = log_section["file"]

        return cls(**data)


_active_settings = Settings()


def get_settings() -> Settings:
    """Return the settings currently used by the resolution code."""
    return _active_settings


def use_settings(settings: Optional[Settings] = None, **overrides: Any) -> Settings:
    """
    Install new active settings.

    Parameters
    ----------
    settings : Settings, optional
        Settings to install. Defaults to the currently active ones.
    **overrides
        Individual fields to replace on top of settings.

    Returns
    -------
    Settings
        The previously active settings, so callers can restore them.
    """
    global _active_settings
    previous = _active_settings
    base = settings if settings is not None else previous
    _active_settings = replace(base, **overrides) if overrides else base
    return previous


def load_settings(config_path: Union[str, Path]) -> Settings:
    """
    Load settings from a YAML file.

    Args:
        config_path: Path to the YAML settings file.

    Returns:
        Parsed Settings (not yet active; pass to use_settings()).
    """
    path = Path(config_path)
    logger.info("Loading settings from: %s", path)
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot read settings file {path}: {exc}") from exc

    if data is not None and not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")

    return Settings.from_dict(data or {})


def configure_logging(level: Union[int, str, None] = None,
                      log_file: Optional[str] = None) -> None:
    """
    Configure the root logger with a stdout handler and an optional file.

    Parameters
    ----------
    level : int or str, optional
        Logging level. Defaults to the active settings' log_level.
    log_file : str, optional
        File to log to in addition to stdout. Defaults to the active
        settings' log_file.
    """
    settings = get_settings()
    if level is None:
        level = settings.log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    if log_file is None:
        log_file = settings.log_file

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode='w'))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    logger.debug("Logging configured at level %s", logging.getLevelName(level))
