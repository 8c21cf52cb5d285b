"""Pytest configuration and fixtures for tests.

Provides an in-memory fake of the REST backend, served to the client
through ``httpx.MockTransport``.
"""

import os

# Set test environment variables BEFORE any backoffice imports
os.environ["API_BASE_URL"] = "http://backend.test"
os.environ["REPORT_DIR"] = "test-reports"

import json
from typing import Any, AsyncGenerator, Dict, List, Set

import httpx
import pytest
import pytest_asyncio

from backoffice.services.backend_client import BackofficeClient
from backoffice.services.notifications import Notifier


BACKEND_URL = "http://backend.test"

COLLECTIONS = ("items", "suppliers", "customers", "purchases", "sales", "vouchers")


class FakeBackend:
    """Dict-backed stand-in for the REST backend.

    Deletes are refused with ``400 {"error": ...}`` while another record
    still points at the target, like the real backend's foreign keys.
    """

    def __init__(self):
        self.collections: Dict[str, Dict[int, Dict[str, Any]]] = {
            name: {} for name in COLLECTIONS
        }
        self.failing: Set[str] = set()
        self.requests: List[httpx.Request] = []
        self._next_id = 1

    def seed(self, resource: str, **fields: Any) -> Dict[str, Any]:
        """Store a record and return it with its assigned id."""
        record = {**fields, "id": self._next_id}
        self.collections[resource][self._next_id] = record
        self._next_id += 1
        return record

    def _referenced(self, resource: str, record: Dict[str, Any]) -> bool:
        sales = self.collections["sales"].values()
        purchases = self.collections["purchases"].values()
        if resource == "customers":
            return any(str(sale.get("customer_id")) == str(record["id"]) for sale in sales)
        if resource == "suppliers":
            return any(p.get("supplier_name") == record.get("name") for p in purchases)
        if resource == "items":
            in_sales = any(
                str(line.get("item_id")) == str(record["id"])
                for sale in sales for line in sale.get("items", [])
            )
            in_purchases = any(
                line.get("item_name") == record.get("item_name")
                for p in purchases for line in p.get("items", [])
            )
            return in_sales or in_purchases
        return False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = request.url.path.strip("/").split("/")
        resource = "sales" if parts[0] == "create-sale" else parts[0]
        method = request.method

        if resource in self.failing:
            return httpx.Response(500, json={"error": "database unavailable"})
        if resource not in self.collections:
            return httpx.Response(404, json={"error": "unknown resource"})
        store = self.collections[resource]

        if len(parts) == 1:
            if method == "GET":
                return httpx.Response(200, json=list(store.values()))
            if method == "POST":
                record = self.seed(resource, **json.loads(request.content))
                return httpx.Response(
                    201, json={"id": record["id"], "message": "created"}
                )
            return httpx.Response(405, json={"error": "method not allowed"})

        key = int(parts[1]) if parts[1].isdigit() else parts[1]
        if key not in store:
            return httpx.Response(404, json={"error": f"{resource} {parts[1]} not found"})

        if method == "GET":
            return httpx.Response(200, json=store[key])
        if method == "PUT":
            store[key] = {**json.loads(request.content), "id": key}
            return httpx.Response(200, json={"message": "updated"})
        if method == "DELETE":
            if self._referenced(resource, store[key]):
                return httpx.Response(
                    400,
                    json={"error": f"Cannot delete {resource} {key}: it is referenced"},
                )
            del store[key]
            return httpx.Response(200, json={"message": "deleted"})
        return httpx.Response(405, json={"error": "method not allowed"})


@pytest.fixture
def backend() -> FakeBackend:
    """Create an empty fake backend."""
    return FakeBackend()


@pytest_asyncio.fixture
async def client(backend: FakeBackend) -> AsyncGenerator[BackofficeClient, None]:
    """Create a BackofficeClient wired to the fake backend."""
    async with BackofficeClient(
        base_url=BACKEND_URL,
        transport=httpx.MockTransport(backend.handler),
    ) as client:
        yield client


@pytest.fixture
def notifier() -> Notifier:
    """Create a notifier for one view."""
    return Notifier()
