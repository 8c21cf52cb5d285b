"""Common dependencies for API endpoints."""

from typing import Annotated, AsyncGenerator

from fastapi import Depends

from backoffice.services.backend_client import BackofficeClient
from backoffice.services.notifications import Notifier


async def get_backend_client() -> AsyncGenerator[BackofficeClient, None]:
    """Yield a backend client bound to the configured base URL."""
    async with BackofficeClient() as client:
        yield client


def get_notifier() -> Notifier:
    """Fresh notifier per request; its messages end up in the logs."""
    return Notifier()


# Type aliases for endpoint signatures
BackendClient = Annotated[BackofficeClient, Depends(get_backend_client)]
ViewNotifier = Annotated[Notifier, Depends(get_notifier)]
