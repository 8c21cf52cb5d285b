"""Transient user notifications.

Views report the outcome of user actions here instead of raising to the
top level. A UI drains ``pending()`` to show toasts; every notification is
also logged.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Deque, List, Optional

from backoffice.core.config import settings
from backoffice.core.errors import BackofficeError, SUGGESTED_ACTIONS, error_code_for

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass
class Notification:
    severity: Severity
    message: str
    suggested_action: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier:
    """Bounded queue of notifications for one view."""

    def __init__(self, limit: Optional[int] = None):
        self._queue: Deque[Notification] = deque(
            maxlen=limit if limit is not None else settings.notification_limit
        )

    def _push(self, notification: Notification) -> Notification:
        self._queue.append(notification)
        return notification

    def success(self, message: str) -> Notification:
        logger.info(message)
        return self._push(Notification(Severity.SUCCESS, message))

    def info(self, message: str) -> Notification:
        logger.info(message)
        return self._push(Notification(Severity.INFO, message))

    def error(self, message: str, exc: Optional[BaseException] = None) -> Notification:
        """Record a failure; the error's text is appended to the message."""
        suggested_action = None
        if exc is not None:
            logger.error(f"{message}: {exc}")
            if isinstance(exc, BackofficeError):
                suggested_action = SUGGESTED_ACTIONS.get(error_code_for(exc))
            message = f"{message}: {exc}"
        else:
            logger.error(message)
        return self._push(Notification(Severity.ERROR, message, suggested_action))

    @property
    def latest(self) -> Optional[Notification]:
        return self._queue[-1] if self._queue else None

    def pending(self) -> List[Notification]:
        """Return and forget every queued notification."""
        notifications = list(self._queue)
        self._queue.clear()
        return notifications
