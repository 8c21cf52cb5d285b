"""Master record endpoints: items, suppliers and customers."""

from enum import Enum
from typing import Any, Dict, List

from fastapi import APIRouter, Body, status
from pydantic import BaseModel

from backoffice.api.deps import BackendClient, ViewNotifier
from backoffice.core.errors import BackofficeError, to_app_exception
from backoffice.services.backend_client import Resource
from backoffice.services.record_list import RecordList

router = APIRouter()


class MasterResource(str, Enum):
    """Collections served by these endpoints."""
    ITEMS = "items"
    SUPPLIERS = "suppliers"
    CUSTOMERS = "customers"


class RecordListResponse(BaseModel):
    """Response containing the rows of one collection."""
    records: List[Dict[str, Any]]
    total: int


class MessageResponse(BaseModel):
    """Generic message response."""
    message: str


def _view(resource: MasterResource, client: BackendClient, notifier: ViewNotifier) -> RecordList:
    return RecordList(client, Resource(resource.value), notifier)


@router.get(
    "/{resource}",
    response_model=RecordListResponse,
    summary="List master records",
)
async def list_records(
    resource: MasterResource,
    client: BackendClient,
    notifier: ViewNotifier,
) -> RecordListResponse:
    view = _view(resource, client, notifier)
    try:
        rows = await view.load()
    except BackofficeError as e:
        raise to_app_exception(e)
    return RecordListResponse(
        records=[row.model_dump(mode="json") for row in rows],
        total=len(rows),
    )


@router.post(
    "/{resource}",
    status_code=status.HTTP_201_CREATED,
    summary="Create a master record",
)
async def create_record(
    resource: MasterResource,
    client: BackendClient,
    notifier: ViewNotifier,
    data: Dict[str, Any] = Body(...),
) -> Dict[str, Any]:
    view = _view(resource, client, notifier)
    try:
        record = await view.create(data)
    except BackofficeError as e:
        raise to_app_exception(e)
    return record.model_dump(mode="json")


@router.put(
    "/{resource}/{record_id}",
    summary="Replace a master record",
)
async def update_record(
    resource: MasterResource,
    record_id: str,
    client: BackendClient,
    notifier: ViewNotifier,
    data: Dict[str, Any] = Body(...),
) -> Dict[str, Any]:
    """Full-record replace; fields left out of the body keep their stored values."""
    view = _view(resource, client, notifier)
    try:
        record = await view.update(record_id, data)
    except BackofficeError as e:
        raise to_app_exception(e)
    return record.model_dump(mode="json")


@router.delete(
    "/{resource}/{record_id}",
    response_model=MessageResponse,
    summary="Delete a master record",
    description="Fails with 409 when the record is referenced by other records.",
)
async def delete_record(
    resource: MasterResource,
    record_id: str,
    client: BackendClient,
    notifier: ViewNotifier,
) -> MessageResponse:
    view = _view(resource, client, notifier)
    try:
        await view.remove(record_id)
    except BackofficeError as e:
        raise to_app_exception(e)
    return MessageResponse(message=notifier.latest.message)
