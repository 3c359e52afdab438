"""Logging setup with a rich console handler."""

from __future__ import annotations

import logging
from typing import Final

from rich.logging import RichHandler

_DEFAULT_LEVEL: Final[str] = "INFO"
_FORMAT: Final[str] = "%(message)s"
_DATE_FORMAT: Final[str] = "[%X]"

_configured: bool = False


def _configured_level() -> str:
    """Level from config (``log_level``, overridable via ILAB_LOG_LEVEL)."""
    # Deferred import keeps app.config free of logging side effects.
    from app.config import load_config

    level = load_config().get("log_level")
    return str(level) if level else _DEFAULT_LEVEL


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger with a Rich console handler.

    Only the first call takes effect.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Falls back to the configured ``log_level``, then to INFO.
    """
    global _configured
    if _configured:
        return

    resolved_level = getattr(logging, (level or _configured_level()).upper(), logging.INFO)

    handler = RichHandler(
        level=resolved_level,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))

    root = logging.getLogger()
    root.setLevel(resolved_level)
    root.addHandler(handler)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a named logger, ensuring logging is configured."""
    setup_logging()
    return logging.getLogger(name)
