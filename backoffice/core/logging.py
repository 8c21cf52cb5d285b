"""Console logging for the API process and the views it drives."""

import logging
import sys
from typing import Any

from backoffice.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers held at WARNING; uvicorn keeps its startup lines
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "reportlab")


def setup_logging() -> None:
    """Send every record to stdout, at DEBUG when ``settings.debug`` is set."""
    level = logging.DEBUG if settings.debug else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("backoffice").setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``backoffice`` namespace; module names are kept as is."""
    if name.startswith("backoffice"):
        return logging.getLogger(name)
    return logging.getLogger(f"backoffice.{name}")


class LoggerAdapter(logging.LoggerAdapter):
    """Appends ``key=value`` context, e.g. ``Submitted with 2 lines - form=sale``."""

    def process(self, msg: str, kwargs: Any) -> tuple[str, Any]:
        context = " - ".join(f"{k}={v}" for k, v in self.extra.items())
        return f"{msg} - {context}" if context else msg, kwargs
