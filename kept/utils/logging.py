"""Root logger setup for the web runtime.

``KEPT_LOG_LEVEL`` (a level name or number) wins over everything else, then a
truthy ``KEPT_DEBUG``, then the value passed in by the caller. The settings
toggle can only change the level while neither variable is set.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional, Union

LEVEL_ENV = "KEPT_LOG_LEVEL"
DEBUG_ENV = "KEPT_DEBUG"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

# Third-party loggers that are only useful while debugging a backend call.
CHATTY_LOGGERS = ("urllib3", "requests")

TRUTHY = {"1", "true", "yes", "on"}


def parse_level(value: Union[int, str, None], fallback: int = logging.INFO) -> int:
    if isinstance(value, int):
        return value
    text = (value or "").strip()
    if not text:
        return fallback
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else fallback


def env_log_level(environ: Optional[Mapping[str, str]] = None) -> Optional[int]:
    """Level forced by the environment, or ``None`` when it leaves it open."""
    env = os.environ if environ is None else environ
    if env.get(LEVEL_ENV, "").strip():
        return parse_level(env[LEVEL_ENV])
    if env.get(DEBUG_ENV, "").strip().lower() in TRUTHY:
        return logging.DEBUG
    return None


def env_forces_debug(environ: Optional[Mapping[str, str]] = None) -> bool:
    level = env_log_level(environ)
    return level is not None and level <= logging.DEBUG


def _set_level(level: int) -> int:
    logging.getLogger().setLevel(level)
    chatty = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty)
    return level


def configure_root(default_level: Union[int, str] = logging.INFO) -> int:
    """Install the compact console handler once and return the effective level."""
    env_level = env_log_level()
    level = env_level if env_level is not None else parse_level(default_level)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=DATE_FORMAT)
    return _set_level(level)


def apply_debug_setting(enabled: bool) -> int:
    """Follow the ``debug_logging`` setting unless the environment pins a level."""
    env_level = env_log_level()
    if env_level is not None:
        return _set_level(env_level)
    return _set_level(logging.DEBUG if enabled else logging.INFO)


__all__ = [
    "apply_debug_setting",
    "configure_root",
    "env_forces_debug",
    "env_log_level",
    "parse_level",
]
