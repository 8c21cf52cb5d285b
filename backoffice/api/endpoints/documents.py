"""Document endpoints: purchases, sales and vouchers.

Creating a document goes through the same entry form the views use, so the
payload sent to the backend is validated and shaped identically.
"""

from enum import Enum
from typing import Any, Dict, List, Type

from fastapi import APIRouter, Body, Response, status
from pydantic import BaseModel

from backoffice.api.deps import BackendClient, ViewNotifier
from backoffice.core.errors import (
    AppException,
    BackofficeError,
    ErrorCode,
    to_app_exception,
)
from backoffice.models.documents import Totals
from backoffice.services.backend_client import Resource
from backoffice.services.documents import (
    DocumentForm,
    DocumentList,
    PurchaseForm,
    SaleForm,
    VoucherForm,
)
from backoffice.services.notifications import Notifier
from backoffice.services.reports import render_pdf

router = APIRouter()


class DocumentKind(str, Enum):
    """Document collections served by these endpoints."""
    PURCHASES = "purchases"
    SALES = "sales"
    VOUCHERS = "vouchers"


FORMS: Dict[DocumentKind, Type[DocumentForm]] = {
    DocumentKind.PURCHASES: PurchaseForm,
    DocumentKind.SALES: SaleForm,
    DocumentKind.VOUCHERS: VoucherForm,
}


class DocumentListResponse(BaseModel):
    """Response containing the summary rows of one collection."""
    documents: List[Dict[str, Any]]
    total: int


class MessageResponse(BaseModel):
    """Generic message response."""
    message: str


def _list_view(kind: DocumentKind, client: BackendClient, notifier: Notifier) -> DocumentList:
    return DocumentList(client, Resource(kind.value), notifier)


async def _filled_form(
    kind: DocumentKind,
    client: BackendClient,
    notifier: Notifier,
    data: Dict[str, Any],
) -> DocumentForm:
    form = FORMS[kind](client, notifier)
    form.fill(data)
    if isinstance(form, SaleForm) and any(line.unit_rate is None for line in form.lines.items):
        await form.load_options()
    return form


@router.get(
    "/{kind}",
    response_model=DocumentListResponse,
    summary="List documents",
)
async def list_documents(
    kind: DocumentKind,
    client: BackendClient,
    notifier: ViewNotifier,
) -> DocumentListResponse:
    view = _list_view(kind, client, notifier)
    try:
        rows = await view.load()
    except BackofficeError as e:
        raise to_app_exception(e)
    return DocumentListResponse(documents=rows, total=len(rows))


@router.post(
    "/{kind}/totals",
    response_model=Totals,
    summary="Preview document totals",
    description="Compute net, discount and balance for a draft without submitting it.",
)
async def preview_totals(
    kind: DocumentKind,
    client: BackendClient,
    notifier: ViewNotifier,
    data: Dict[str, Any] = Body(...),
) -> Totals:
    try:
        form = await _filled_form(kind, client, notifier, data)
    except BackofficeError as e:
        raise to_app_exception(e)
    if form.totals is None:
        raise to_app_exception(form.totals_error)
    return form.totals


@router.post(
    "/{kind}",
    status_code=status.HTTP_201_CREATED,
    summary="Submit a document",
)
async def create_document(
    kind: DocumentKind,
    client: BackendClient,
    notifier: ViewNotifier,
    data: Dict[str, Any] = Body(...),
) -> Dict[str, Any]:
    try:
        form = await _filled_form(kind, client, notifier, data)
        result = await form.submit()
    except BackofficeError as e:
        raise to_app_exception(e)
    return result if isinstance(result, dict) else {"result": result}


@router.get(
    "/{kind}/{document_id}",
    summary="Get one document with its lines",
)
async def get_document(
    kind: DocumentKind,
    document_id: str,
    client: BackendClient,
    notifier: ViewNotifier,
) -> Dict[str, Any]:
    view = _list_view(kind, client, notifier)
    try:
        document = await view.view(document_id)
    except BackofficeError as e:
        raise to_app_exception(e)
    return document.model_dump(mode="json")


@router.delete(
    "/{kind}/{document_id}",
    response_model=MessageResponse,
    summary="Delete a document",
)
async def delete_document(
    kind: DocumentKind,
    document_id: str,
    client: BackendClient,
    notifier: ViewNotifier,
) -> MessageResponse:
    view = _list_view(kind, client, notifier)
    try:
        await view.remove(document_id)
    except BackofficeError as e:
        raise to_app_exception(e)
    return MessageResponse(message=notifier.latest.message)


@router.get(
    "/{kind}/{document_id}/report",
    summary="Download the printable PDF slip",
    response_class=Response,
)
async def download_report(
    kind: DocumentKind,
    document_id: str,
    client: BackendClient,
    notifier: ViewNotifier,
) -> Response:
    view = _list_view(kind, client, notifier)
    try:
        report = await view.report(document_id)
    except BackofficeError as e:
        raise to_app_exception(e)

    try:
        content = render_pdf(report)
    except Exception as e:
        notifier.error("Error generating report", e)
        raise AppException(
            error_code=ErrorCode.INTERNAL_ERROR,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message=f"Failed to render {report.filename}",
        ) from e

    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{report.filename}"'},
    )
