from __future__ import annotations

import logging
import os
from typing import Optional

from .config_loader import AppConfig

LOG_LEVEL_ENV = "CONTACTS_NORMALIZER_LOG_LEVEL"
DEFAULT_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def level_from_name(level_name: Optional[str]) -> int:
    """Numeric level for a level name or number; unknown names map to INFO."""
    candidate = (level_name or "INFO").strip().upper()
    if candidate.isdigit():
        return int(candidate)
    resolved = logging.getLevelName(candidate)
    return resolved if isinstance(resolved, int) else logging.INFO


def _apply_format(root: logging.Logger, log_format: Optional[str]) -> None:
    """Give root handlers that have no formatter of their own the configured format."""
    if not log_format:
        return
    for handler in root.handlers:
        if handler.formatter is None:
            handler.setFormatter(logging.Formatter(log_format))


def configure_logging(config: AppConfig, level_override: Optional[str] = None) -> int:
    """
    Set up the root logger for a CLI run and return the level used.

    The level comes from ``CONTACTS_NORMALIZER_LOG_LEVEL`` first, then
    ``level_override`` (the ``--log-level`` flag), then ``logging.level`` in
    the YAML config, then WARNING.

    Without handlers a stderr handler is installed using ``logging.format``
    (or ``DEFAULT_LOG_FORMAT``). When the host application already installed
    handlers, only the level changes, and ``logging.format`` is applied to
    handlers that were left without a formatter.
    """
    level = level_from_name(
        os.getenv(LOG_LEVEL_ENV) or level_override or config.logging.level or "WARNING"
    )
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=config.logging.format or DEFAULT_LOG_FORMAT)
        return level
    root.setLevel(level)
    _apply_format(root, config.logging.format)
    return level
