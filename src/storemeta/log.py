# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for storemeta."""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_LEVEL = os.getenv("STOREMETA_LOG_LEVEL", "WARNING").upper()

# httpx/httpcore log every request at INFO; only surface them when debugging.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def resolve_log_level(level: str | None = None) -> int:
    """Map a level name (or the STOREMETA_LOG_LEVEL default) to a logging constant."""
    name = (level or DEFAULT_LOG_LEVEL).strip().upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.WARNING


def setup_logging(level: str | None = None) -> None:
    """Configure standard logging for CLI/library use."""
    effective_level = resolve_log_level(level)
    logging.basicConfig(
        level=effective_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if effective_level <= logging.DEBUG else logging.WARNING)


__all__ = ["resolve_log_level", "setup_logging"]
