"""Application utilities: configuration, logging and the ``ilab`` CLI."""

from app.config import get_config, indicator_defaults
from app.logging import get_logger

__all__ = ["get_config", "get_logger", "indicator_defaults"]
