"""Trading and accounting documents with their line items.

Documents accept both the shape the backend expects on create (camelCase
rates, ``discount_percentage``, ``billRemarks``) and the shape it returns on
read (``purchase_rate``, ``discount_percent``, ``description``). Derived
totals reported by the backend are not stored; they are recomputed from the
header and lines by ``backoffice.services.totals``.
"""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field

from backoffice.models.base import Amount, OptionalText, Record, RecordId, Text


class Totals(BaseModel):
    """Derived totals of a document."""
    net: float = 0.0
    discount: float = 0.0
    balance: float = 0.0


# =============================================================================
# Purchase
# =============================================================================


class PurchaseLine(Record):
    """One purchased item."""
    item_name: Text = ""
    item_id: Optional[RecordId] = None  # read shape only
    qty: Amount = 0
    purchase_rate: Amount = Field(
        0, validation_alias=AliasChoices("purchase_rate", "purchaseRate")
    )
    sale_rate: Amount = Field(
        0, validation_alias=AliasChoices("sale_rate", "saleRate")
    )
    description: Text = ""

    @property
    def reference(self) -> str:
        """The item this line points at, by name or by id."""
        if self.item_name:
            return self.item_name
        return "" if self.item_id is None else str(self.item_id)


class Purchase(Record):
    """Purchase invoice from a supplier."""
    purchase_no: Text = ""
    bill_no: OptionalText = None
    supplier: Text = Field(
        "", validation_alias=AliasChoices("supplier", "supplier_name")
    )
    date: OptionalText = None
    discount_percent: Amount = Field(
        0, validation_alias=AliasChoices("discount_percent", "discount_percentage")
    )
    payment: Amount = 0
    remarks: Text = Field(
        "", validation_alias=AliasChoices("remarks", "billRemarks", "description")
    )
    items: List[PurchaseLine] = Field(default_factory=list)


# =============================================================================
# Sale
# =============================================================================


class SaleLine(Record):
    """One metered sale line; quantity is the difference of two readings."""
    item_id: Optional[RecordId] = None
    previous_reading: Amount = 0
    current_reading: Amount = 0
    unit_rate: Optional[float] = None  # rate the backend priced the line at


class SaleAmount(BaseModel):
    """A payment recorded against a sale slip (read shape only)."""
    account_number: OptionalText = None
    bank_name: OptionalText = None
    cash_in_hand: Amount = 0
    is_online: bool = False
    timestamp: OptionalText = None


class Sale(Record):
    """Sale slip for a customer."""
    slip_no: Text = ""
    salesperson: Text = ""
    cashier: Text = ""
    customer_id: Optional[RecordId] = None
    cash: Amount = 0
    is_online: bool = False
    bank_name: OptionalText = None
    account_number: OptionalText = None
    credit_description: OptionalText = None
    date: OptionalText = None
    items: List[SaleLine] = Field(default_factory=list)
    amounts: List[SaleAmount] = Field(default_factory=list)


# =============================================================================
# Voucher
# =============================================================================


class VoucherLine(Record):
    """One debited account of a credit voucher."""
    date: Text = ""
    account_code: Text = ""
    account_name: Text = ""
    debit: Amount = 0


class Voucher(Record):
    """Credit voucher: one credited account against several debits."""
    voucher_no: Text = ""
    cr_account: Text = ""
    description: Text = ""
    date: OptionalText = None
    accounts: List[VoucherLine] = Field(default_factory=list)
