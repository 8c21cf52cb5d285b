"""Pydantic models exchanged with the backend."""

from backoffice.models.base import Record
from backoffice.models.documents import (
    Purchase,
    PurchaseLine,
    Sale,
    SaleAmount,
    SaleLine,
    Totals,
    Voucher,
    VoucherLine,
)
from backoffice.models.records import (
    CashBalanceType,
    Customer,
    Item,
    MasterRecord,
    Supplier,
)

__all__ = [
    "Record",
    "MasterRecord",
    "CashBalanceType",
    "Item",
    "Supplier",
    "Customer",
    "Totals",
    "Purchase",
    "PurchaseLine",
    "Sale",
    "SaleLine",
    "SaleAmount",
    "Voucher",
    "VoucherLine",
]
