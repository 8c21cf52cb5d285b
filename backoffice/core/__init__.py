"""Core application modules."""

from backoffice.core.config import settings
from backoffice.core.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
]
