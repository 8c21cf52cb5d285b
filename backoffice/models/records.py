"""Master records: items, suppliers and customers."""

from enum import Enum
from typing import Annotated, Any, ClassVar, Dict, List, Optional

from pydantic import BeforeValidator, ConfigDict

from backoffice.models.base import Amount, Record, Text, to_optional_text


class CashBalanceType(str, Enum):
    """Direction of a counterparty's opening cash balance."""
    RECEIVABLE = "Receivable"
    PAYABLE = "Payable"


class MasterRecord(Record):
    """A standalone business entity identified by a backend id.

    Unknown fields returned by the backend are kept so that a full-record
    replace (PUT) sends them back untouched.
    """

    model_config = ConfigDict(extra="allow")

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ()

    def missing_fields(self) -> List[str]:
        """Return the required fields that are still blank."""
        return [
            name for name in self.REQUIRED_FIELDS
            if not str(getattr(self, name) or "").strip()
        ]

    def to_payload(self) -> Dict[str, Any]:
        """Serialize for POST/PUT; the id is only sent once assigned."""
        exclude = {"id"} if self.id is None else None
        return self.model_dump(mode="json", exclude=exclude)


class Item(MasterRecord):
    """Inventory item."""

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ("item_name",)

    item_name: Text = ""
    item_code: Text = ""
    minimum_level: Amount = 0
    qty_per_packet: Amount = 0
    purchase_rate: Amount = 0
    sale_rate: Amount = 0
    wholesale_rate: Amount = 0
    sale_discount_percent: Amount = 0
    opening_stock: Amount = 0
    unit: Text = ""


class Counterparty(MasterRecord):
    """Fields shared by customers and suppliers."""

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ("name",)

    name: Text = ""
    address: Text = ""
    tel: Text = ""
    mobile: Text = ""
    email: Text = ""
    cash_balance: Amount = 0
    cash_balance_type: Annotated[
        Optional[CashBalanceType], BeforeValidator(to_optional_text)
    ] = None


class Customer(Counterparty):
    """Customer buying on slips."""
    pass


class Supplier(Counterparty):
    """Supplier selling on purchase invoices."""
    pass
