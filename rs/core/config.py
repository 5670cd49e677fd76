"""Typed controller configuration loaded from ``rs.toml``.

Example:

    [controller]
    max_passes = 200

    [requeue]
    base_delay_seconds = 0.005
    max_delay_seconds = 30.0
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_int, get_table

__all__ = [
    "Config",
    "ConfigError",
    "ControllerConfig",
    "RequeueConfig",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_FILE",
    "default_config_path",
    "load_config",
    "load_config_or_default",
]

CONFIG_ENV_VAR = "RS_CONFIG"
DEFAULT_CONFIG_FILE = "rs.toml"

# Mirrors the per-item exponential backoff of a typical controller work queue.
DEFAULT_BASE_DELAY_SECONDS = 0.005
DEFAULT_MAX_DELAY_SECONDS = 1000.0
DEFAULT_MAX_PASSES = 100


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class RequeueConfig:
    """Backoff applied to passes that end in requeue-with-error."""

    base_delay_seconds: float = DEFAULT_BASE_DELAY_SECONDS
    max_delay_seconds: float = DEFAULT_MAX_DELAY_SECONDS

    def delay_for(self, failures: int) -> float:
        """Delay before retry number ``failures`` (1-based)."""
        if failures <= 0:
            return 0.0
        delay = self.base_delay_seconds * (2 ** (failures - 1))
        return min(delay, self.max_delay_seconds)


@dataclass(frozen=True, slots=True)
class ControllerConfig:
    max_passes: int = DEFAULT_MAX_PASSES


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    controller: ControllerConfig = field(default_factory=ControllerConfig)
    requeue: RequeueConfig = field(default_factory=RequeueConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        controller: StrDict = get_table(data, "controller") or {}
        requeue: StrDict = get_table(data, "requeue") or {}

        max_passes = get_int(controller, "max_passes")
        if max_passes is not None and max_passes <= 0:
            raise ValueError("controller.max_passes must be positive")

        base = get_float(requeue, "base_delay_seconds")
        cap = get_float(requeue, "max_delay_seconds")
        if base is not None and base < 0:
            raise ValueError("requeue.base_delay_seconds must not be negative")
        if cap is not None and cap < 0:
            raise ValueError("requeue.max_delay_seconds must not be negative")

        return cls(
            controller=ControllerConfig(max_passes=max_passes or DEFAULT_MAX_PASSES),
            requeue=RequeueConfig(
                base_delay_seconds=DEFAULT_BASE_DELAY_SECONDS if base is None else base,
                max_delay_seconds=DEFAULT_MAX_DELAY_SECONDS if cap is None else cap,
            ),
        )


def default_config_path() -> Path:
    """``$RS_CONFIG`` if set, else ``./rs.toml``."""
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser()
    return Path.cwd() / DEFAULT_CONFIG_FILE


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to rs.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Like ``load_config`` but a missing file yields the defaults.

    A file that exists and is broken is still an error: silently running with
    defaults would hide a typo in the operator's config.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
