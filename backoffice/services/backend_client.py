"""REST client for the back-office backend.

This module provides the BackofficeClient class used by every view to talk
to the backend resources. It includes:
- A lazily created httpx.AsyncClient bound to the configured base URL
- One method per REST verb, addressed by resource name
- Mapping of transport failures and non-2xx statuses to the error taxonomy
- A helper for fetching several collections in parallel

Requests are made once; failures are not retried.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import httpx

from backoffice.core.config import settings
from backoffice.core.errors import (
    BackofficeError,
    ConflictError,
    NetworkError,
    NotFoundError,
    ResponseError,
)
from backoffice.models.base import RecordId

logger = logging.getLogger(__name__)


class Resource(str, Enum):
    """Backend collections."""
    ITEMS = "items"
    SUPPLIERS = "suppliers"
    CUSTOMERS = "customers"
    PURCHASES = "purchases"
    SALES = "sales"
    VOUCHERS = "vouchers"


# Collections created through a dedicated endpoint instead of POST /<resource>
CREATE_ENDPOINTS = {
    Resource.SALES: "/create-sale",
}

# Statuses a DELETE answers with when the record is still referenced
DELETE_CONFLICT_STATUSES = {400, 409, 422}


class BackofficeClient:
    """Client for the back-office REST backend.

    Example:
        ```python
        async with BackofficeClient("http://localhost:5000") as client:
            items = await client.list(Resource.ITEMS)
            await client.delete(Resource.CUSTOMERS, 7)
        ```
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize BackofficeClient.

        Args:
            base_url: Backend base URL. Defaults to ``settings.api_base_url``.
            timeout: Request timeout in seconds. Defaults to ``settings.request_timeout``.
            transport: Optional httpx transport, e.g. a MockTransport in tests.
        """
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._transport = transport

        # HTTP client will be created lazily
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "BackofficeClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # =========================================================================
    # HTTP Request Methods
    # =========================================================================

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Extract the backend's error text from a failed response."""
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict):
            for key in ("error", "message", "detail"):
                if body.get(key):
                    return str(body[key])
        return response.text or f"HTTP {response.status_code}"

    def _handle_response_error(self, response: httpx.Response, method: str = "GET") -> None:
        """Raise the matching error for a non-2xx response.

        Raises:
            NotFoundError: For 404 responses
            ConflictError: For 409 responses, and for a DELETE the backend
                refuses because the record is referenced elsewhere
            ResponseError: For any other non-2xx response
        """
        if response.is_success:
            return

        status = response.status_code
        message = self._error_message(response)

        if status == 404:
            raise NotFoundError(f"Record not found: {message}")
        if status == 409 or (method == "DELETE" and status in DELETE_CONFLICT_STATUSES):
            raise ConflictError(message, status_code=status)
        raise ResponseError(f"Backend error ({status}): {message}", status_code=status)

    async def _request(
        self,
        method: str,
        endpoint: str,
        json_data: Optional[Union[dict, list]] = None,
    ) -> Any:
        """Make one HTTP request and return the decoded JSON body.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            endpoint: API endpoint path
            json_data: Optional JSON body data

        Returns:
            Decoded JSON, or None for an empty response

        Raises:
            NetworkError: If the backend is unreachable or the body is not JSON
            ResponseError: If the backend answers with a non-2xx status
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        client = await self._get_client()

        try:
            response = await client.request(method=method, url=url, json=json_data)
        except httpx.TimeoutException as e:
            raise NetworkError(f"Request to {url} timed out: {e}") from e
        except httpx.TransportError as e:
            raise NetworkError(f"Cannot connect to backend at {self.base_url}: {e}") from e

        logger.debug(f"{method} {url} -> {response.status_code}")
        self._handle_response_error(response, method)

        if response.status_code == 204:
            return None
        try:
            return response.json()
        except ValueError as e:
            if method == "DELETE":
                return None
            raise NetworkError(
                f"Expected JSON from {method} {url}, got: {response.text[:200]}"
            ) from e

    # =========================================================================
    # Resource Methods
    # =========================================================================

    async def list(self, resource: Resource) -> List[Dict[str, Any]]:
        """Fetch every record of a collection."""
        data = await self._request("GET", f"/{resource.value}")
        if not isinstance(data, list):
            raise NetworkError(
                f"Expected a list from /{resource.value}, got {type(data).__name__}"
            )
        return data

    async def get(self, resource: Resource, record_id: RecordId) -> Dict[str, Any]:
        """Fetch one record by id."""
        return await self._request("GET", f"/{resource.value}/{record_id}")

    async def create(self, resource: Resource, data: dict) -> Dict[str, Any]:
        """Create a record and return the backend's answer."""
        endpoint = CREATE_ENDPOINTS.get(resource, f"/{resource.value}")
        return await self._request("POST", endpoint, json_data=data)

    async def update(
        self,
        resource: Resource,
        record_id: RecordId,
        data: dict,
    ) -> Dict[str, Any]:
        """Replace a record (full-record PUT)."""
        return await self._request("PUT", f"/{resource.value}/{record_id}", json_data=data)

    async def delete(self, resource: Resource, record_id: RecordId) -> None:
        """Delete a record.

        Raises:
            ConflictError: If the record is referenced by other records
        """
        await self._request("DELETE", f"/{resource.value}/{record_id}")

    async def fetch_many(
        self,
        *resources: Resource,
    ) -> Dict[Resource, Union[List[Dict[str, Any]], BackofficeError]]:
        """Fetch several collections in parallel.

        A failing collection does not cancel the others: its slot holds the
        error instead of the records.
        """
        results = await asyncio.gather(
            *(self.list(resource) for resource in resources),
            return_exceptions=True,
        )
        collected: Dict[Resource, Union[List[Dict[str, Any]], BackofficeError]] = {}
        for resource, result in zip(resources, results):
            if isinstance(result, BaseException) and not isinstance(result, BackofficeError):
                raise result
            collected[resource] = result
        return collected

    async def health_check(self) -> bool:
        """Check that the backend answers on the items collection."""
        try:
            await self.list(Resource.ITEMS)
            return True
        except BackofficeError as e:
            logger.warning(f"Backend health check failed: {e}")
            return False
