"""Logging setup for applications embedding passvault.

Library modules only call ``logging.getLogger(__name__)``; handlers are the
embedding application's business. ``configure_logging`` is the one-call setup
for scripts, with the level taken from ``PASSVAULT_LOG_LEVEL`` when not given.
"""

import logging
import sys
from typing import Optional, Union

from .core.config import VaultConfig

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level {level!r}")
    return value


def configure_logging(
    level: Union[int, str, None] = None,
    config: Optional[VaultConfig] = None,
) -> int:
    """Attach a stdout handler to the root logger and return the level used."""
    if level is None:
        level = (config or VaultConfig.from_env()).log_level
    resolved = resolve_level(level)
    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        stream=sys.stdout,
    )
    # keys and secrets never reach log records; entry usernames do at INFO
    logging.getLogger("passvault").setLevel(resolved)
    return resolved
