"""Entry forms and list views for purchases, sales and vouchers.

A form holds the header fields of one new document plus a
``LineItemEditor`` for its lines. Totals are recomputed from scratch after
every header or line change. On submit the form validates, assembles the
payload in the shape the backend expects and posts it.
"""

from abc import ABC, abstractmethod
from typing import (
    Any,
    Dict,
    Generic,
    List,
    Mapping,
    Optional,
    Type,
    TypeVar,
    Union,
)

from pydantic import ValidationError as PydanticValidationError

from backoffice.core.errors import BackofficeError, ValidationError
from backoffice.core.logging import LoggerAdapter, get_logger
from backoffice.models.base import Record, RecordId
from backoffice.models.documents import (
    Purchase,
    PurchaseLine,
    Sale,
    SaleLine,
    Totals,
    Voucher,
    VoucherLine,
)
from backoffice.models.records import Customer, Item, Supplier
from backoffice.services import totals as calc
from backoffice.services.backend_client import BackofficeClient, Resource
from backoffice.services.line_items import LineItemEditor
from backoffice.services.notifications import Notifier
from backoffice.services.record_list import build_record
from backoffice.services.reports import Report, build_report, save_report

DocT = TypeVar("DocT", bound=Record)
LineT = TypeVar("LineT", bound=Record)

Document = Union[Purchase, Sale, Voucher]

DOCUMENT_MODELS: Dict[Resource, Type[Record]] = {
    Resource.PURCHASES: Purchase,
    Resource.SALES: Sale,
    Resource.VOUCHERS: Voucher,
}


def _require(document: Record, *fields: str) -> None:
    for name in fields:
        value = getattr(document, name)
        if value is None or not str(value).strip():
            raise ValidationError(f"{name} is required", field=name)


class DocumentForm(ABC, Generic[DocT, LineT]):
    """Header fields, line items and derived totals of one new document."""

    resource: Resource
    document_type: Type[DocT]
    line_type: Type[LineT]
    lines_field: str = "items"
    label: str = "document"

    def __init__(self, client: BackofficeClient, notifier: Optional[Notifier] = None):
        self.client = client
        self.notifier = notifier or Notifier()
        self.logger = LoggerAdapter(get_logger(__name__), {"form": self.label})
        self.header: DocT = self.document_type()
        self.lines: LineItemEditor[LineT] = LineItemEditor(
            self.line_type, self.initial_lines(), on_change=self.recompute
        )
        self.totals: Optional[Totals] = None
        self.totals_error: Optional[ValidationError] = None
        self.recompute()

    def initial_lines(self) -> List[LineT]:
        return []

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def set_header(self, field: str, value: Any) -> None:
        """Change one header field and recompute totals.

        Raises:
            ValidationError: If the field is unknown or the value is invalid
        """
        if field == self.lines_field or field not in self.document_type.model_fields:
            raise ValidationError(f"Unknown header field: {field}", field=field)
        try:
            setattr(self.header, field, value)
        except PydanticValidationError as e:
            raise ValidationError(
                f"invalid {field}: {e.errors()[0]['msg']}", field=field
            ) from e
        self.recompute()

    @abstractmethod
    def compute_totals(self) -> Totals:
        """Totals of the current header and lines."""
        pass

    def recompute(self) -> Optional[Totals]:
        """Derive totals from the current header and lines.

        A rejected input (e.g. a negative metered quantity) clears the totals
        and is kept in ``totals_error`` until the input is corrected.
        """
        try:
            self.totals = self.compute_totals()
            self.totals_error = None
        except ValidationError as e:
            self.totals = None
            self.totals_error = e
        return self.totals

    def document(self) -> DocT:
        """The document as currently entered, with its lines."""
        document = self.header.model_copy(deep=True)
        setattr(
            document,
            self.lines_field,
            [line.model_copy(deep=True) for line in self.lines.items],
        )
        return document

    def reset(self) -> None:
        self.header = self.document_type()
        self.lines = LineItemEditor(
            self.line_type, self.initial_lines(), on_change=self.recompute
        )
        self.recompute()

    def fill(self, data: Mapping[str, Any]) -> None:
        """Replace the form contents with raw data such as a request body.

        Both the create and the read shape of the document are accepted.
        """
        document = build_record(self.document_type, dict(data))
        lines = getattr(document, self.lines_field)
        setattr(document, self.lines_field, [])
        self.header = document
        self.lines = LineItemEditor(self.line_type, lines, on_change=self.recompute)
        self.recompute()

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    @abstractmethod
    def validate(self) -> Totals:
        """Check the form before submission and return its totals.

        Raises:
            ValidationError: On the first problem found
        """
        pass

    @abstractmethod
    def payload(self) -> Dict[str, Any]:
        """Request body for the create endpoint."""
        pass

    async def submit(self) -> Any:
        """Validate, post the document, then clear the form.

        Raises:
            BackofficeError: On validation or backend failure; the form keeps
                its contents
        """
        try:
            body = self.payload()
            result = await self.client.create(self.resource, body)
        except BackofficeError as e:
            self.notifier.error(f"Failed to submit {self.label}", e)
            raise
        self.logger.info(f"Submitted with {len(self.lines)} lines")
        self.notifier.success(f"{self.label.capitalize()} submitted successfully!")
        self.reset()
        return result


# =============================================================================
# Purchase
# =============================================================================


class PurchaseForm(DocumentForm[Purchase, PurchaseLine]):
    """Purchase invoice entry."""

    resource = Resource.PURCHASES
    document_type = Purchase
    line_type = PurchaseLine
    label = "purchase invoice"

    def __init__(self, client: BackofficeClient, notifier: Optional[Notifier] = None):
        super().__init__(client, notifier)
        self.available_items: List[Item] = []
        self.suppliers: List[Supplier] = []

    async def load_options(self) -> None:
        """Fetch items and suppliers for the pickers, in parallel.

        Each collection is loaded independently; a failed one stays empty
        and is reported through the notifier.
        """
        results = await self.client.fetch_many(Resource.ITEMS, Resource.SUPPLIERS)
        self.available_items = _options(self.notifier, results, Resource.ITEMS, Item)
        self.suppliers = _options(self.notifier, results, Resource.SUPPLIERS, Supplier)

    def compute_totals(self) -> Totals:
        return calc.purchase_totals(
            self.lines.items, self.header.discount_percent, self.header.payment
        )

    def validate(self) -> Totals:
        _require(self.header, "purchase_no", "supplier")
        for index, line in enumerate(self.lines.items):
            if not line.reference:
                raise ValidationError(
                    f"line {index + 1}: item_name is required", field="item_name"
                )
        return self.compute_totals()

    def payload(self) -> Dict[str, Any]:
        totals = self.validate()
        header = self.header
        return {
            "purchase_no": header.purchase_no,
            "supplier_name": header.supplier,
            "discount_percentage": header.discount_percent,
            "discount": totals.discount,
            "net_amount": totals.net,
            "payment": header.payment,
            "billRemarks": header.remarks,
            "items": [
                {
                    "item_name": line.item_name,
                    "qty": line.qty,
                    "purchaseRate": line.purchase_rate,
                    "saleRate": line.sale_rate,
                    "netAmount": calc.line_amount(line),
                    "description": line.description,
                }
                for line in self.lines.items
            ],
        }


# =============================================================================
# Sale
# =============================================================================


class SaleForm(DocumentForm[Sale, SaleLine]):
    """Metered sale slip entry.

    Line rates come from the item catalog, so ``load_options`` should run
    before totals mean anything.
    """

    resource = Resource.SALES
    document_type = Sale
    line_type = SaleLine
    label = "sale"

    def __init__(self, client: BackofficeClient, notifier: Optional[Notifier] = None):
        self.available_items: List[Item] = []
        self.customers: List[Customer] = []
        self.rates: Mapping[str, float] = {}
        super().__init__(client, notifier)

    async def load_options(self) -> None:
        """Fetch items and customers in parallel; see ``PurchaseForm.load_options``."""
        results = await self.client.fetch_many(Resource.ITEMS, Resource.CUSTOMERS)
        self.available_items = _options(self.notifier, results, Resource.ITEMS, Item)
        self.customers = _options(self.notifier, results, Resource.CUSTOMERS, Customer)
        self.rates = calc.rate_table(self.available_items)
        self.recompute()

    def compute_totals(self) -> Totals:
        return calc.sale_totals(self.lines.items, self.rates, self.header.cash)

    @property
    def is_credit(self) -> bool:
        """Whether the cash paid is below the net amount."""
        return calc.needs_credit_description(self.totals, self.header.cash)

    def validate(self) -> Totals:
        header = self.header
        _require(header, "slip_no", "customer_id")
        for index, line in enumerate(self.lines.items):
            if line.item_id is None or not str(line.item_id).strip():
                raise ValidationError(
                    f"line {index + 1}: item_id is required", field="item_id"
                )
        totals = self.compute_totals()
        if header.is_online:
            _require(header, "bank_name", "account_number")
        if calc.needs_credit_description(totals, header.cash):
            _require(header, "credit_description")
        return totals

    def payload(self) -> Dict[str, Any]:
        totals = self.validate()
        header = self.header
        return {
            "slip_no": header.slip_no,
            "salesperson": header.salesperson,
            "cashier": header.cashier,
            "customer_id": header.customer_id,
            "cash": header.cash,
            "is_online": header.is_online,
            "bank_name": header.bank_name if header.is_online else None,
            "account_number": header.account_number if header.is_online else None,
            "credit_description": (
                header.credit_description
                if calc.needs_credit_description(totals, header.cash)
                else None
            ),
            "items": [
                {
                    "item_id": line.item_id,
                    "previous_reading": line.previous_reading,
                    "current_reading": line.current_reading,
                }
                for line in self.lines.items
            ],
        }


# =============================================================================
# Voucher
# =============================================================================


class VoucherForm(DocumentForm[Voucher, VoucherLine]):
    """Credit voucher entry; starts with one blank account line."""

    resource = Resource.VOUCHERS
    document_type = Voucher
    line_type = VoucherLine
    lines_field = "accounts"
    label = "voucher"

    def initial_lines(self) -> List[VoucherLine]:
        return [VoucherLine()]

    def compute_totals(self) -> Totals:
        return calc.voucher_totals(self.lines.items)

    def validate(self) -> Totals:
        _require(self.header, "voucher_no", "cr_account")
        if not len(self.lines):
            raise ValidationError("at least one account line is required", field="accounts")
        for index, line in enumerate(self.lines.items):
            if not line.account_code.strip():
                raise ValidationError(
                    f"line {index + 1}: account_code is required", field="account_code"
                )
        return self.compute_totals()

    def payload(self) -> Dict[str, Any]:
        self.validate()
        header = self.header
        return {
            "voucher_no": header.voucher_no,
            "cr_account": header.cr_account,
            "description": header.description,
            "accounts": [
                {
                    "date": line.date,
                    "account_code": line.account_code,
                    "account_name": line.account_name,
                    "debit": line.debit,
                }
                for line in self.lines.items
            ],
        }


def _options(
    notifier: Notifier,
    results: Mapping[Resource, Any],
    resource: Resource,
    model: Type[Record],
) -> List[Any]:
    result = results[resource]
    if isinstance(result, BackofficeError):
        notifier.error(f"Failed to fetch {resource.value}", result)
        return []
    try:
        return [build_record(model, row) for row in result]
    except ValidationError as e:
        notifier.error(f"Failed to read {resource.value}", e)
        return []


# =============================================================================
# Document list
# =============================================================================


class DocumentList:
    """List view of purchases, sales or vouchers with view, delete and print."""

    def __init__(
        self,
        client: BackofficeClient,
        resource: Resource,
        notifier: Optional[Notifier] = None,
    ):
        if resource not in DOCUMENT_MODELS:
            raise ValueError(f"{resource.value} is not a document collection")
        self.client = client
        self.resource = resource
        self.model = DOCUMENT_MODELS[resource]
        self.notifier = notifier or Notifier()
        self.rows: List[Dict[str, Any]] = []
        self.selected: Optional[Document] = None

    async def load(self) -> List[Dict[str, Any]]:
        """Fetch the summary rows of the collection."""
        try:
            self.rows = await self.client.list(self.resource)
        except BackofficeError as e:
            self.notifier.error(f"Failed to fetch {self.resource.value}", e)
            raise
        self.notifier.info(f"Loaded {len(self.rows)} {self.resource.value}")
        return self.rows

    async def fetch(self, record_id: RecordId) -> Document:
        """Fetch one document with its lines."""
        data = await self.client.get(self.resource, record_id)
        return build_record(self.model, data)  # type: ignore[return-value]

    async def view(self, record_id: RecordId) -> Document:
        """Fetch one document and select it for display."""
        try:
            self.selected = await self.fetch(record_id)
        except BackofficeError as e:
            self.notifier.error(f"Failed to fetch {self.resource.value} details", e)
            raise
        return self.selected

    async def remove(self, record_id: RecordId) -> None:
        """Delete a document and drop its summary row."""
        try:
            await self.client.delete(self.resource, record_id)
        except BackofficeError as e:
            self.notifier.error(f"Failed to delete from {self.resource.value}", e)
            raise
        self.rows = [row for row in self.rows if str(row.get("id")) != str(record_id)]
        if self.selected is not None and str(self.selected.id) == str(record_id):
            self.selected = None
        self.notifier.success("Deleted successfully")

    async def _rates(self, document: Document) -> Mapping[str, float]:
        if not isinstance(document, Sale):
            return {}
        if all(line.unit_rate is not None for line in document.items):
            return {}
        items = await self.client.list(Resource.ITEMS)
        return calc.rate_table(build_record(Item, row) for row in items)

    async def report(self, record_id: RecordId) -> Report:
        """Fetch a document and build its printable report."""
        try:
            document = await self.fetch(record_id)
            return build_report(document, await self._rates(document))
        except BackofficeError as e:
            self.notifier.error("Error generating report", e)
            raise

    async def export_report(self, record_id: RecordId, directory: Optional[str] = None) -> str:
        """Write the document's PDF slip and return its path."""
        report = await self.report(record_id)
        path = save_report(report, directory)
        self.notifier.success(f"Report saved as {path.name}")
        return str(path)
