"""Shared logging helpers for godocbot."""

from __future__ import annotations

import logging

from .env import optional_env

LOG_LEVEL_ENV = "GODOCBOT_LOG_LEVEL"


def resolve_log_level(value: str | None = None) -> int:
    """Map a level name (``debug``, ``INFO`` ...) to its numeric value, INFO by default."""

    name = (value or optional_env(LOG_LEVEL_ENV) or "INFO").upper()
    level = logging.getLevelNamesMapping().get(name)
    if level is None:
        raise ValueError(f"Unknown log level: {value or name}")
    return level


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: we default
    to INFO level and a terse format suitable for a long-running controller. Pass
    ``force=True`` to reconfigure during tests or specialised entry points.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        force=force,
    )
    # httpx logs every request line at INFO.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
