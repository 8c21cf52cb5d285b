"""Derived totals for purchases, sales and vouchers.

All functions here are pure: they read line items and header values and
return a fresh ``Totals``. Forms call them after every mutation instead of
keeping totals as independent state.
"""

from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple

from backoffice.core.errors import ValidationError
from backoffice.models.documents import (
    PurchaseLine,
    SaleLine,
    Totals,
    VoucherLine,
)
from backoffice.models.records import Item


def _number(value: Any) -> float:
    """Read a possibly blank numeric input as a float."""
    if value is None:
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def totals(
    line_items: Iterable[Tuple[Any, Any]],
    discount_percent: Any = 0,
    payment: Any = 0,
) -> Totals:
    """Compute net amount, discount and balance.

    Args:
        line_items: ``(quantity, rate)`` pairs
        discount_percent: Discount on the net amount, in percent
        payment: Amount already paid

    Returns:
        Totals where ``net = sum(qty * rate)``,
        ``discount = net * discount_percent / 100`` and
        ``balance = net - discount - payment``
    """
    net = sum(_number(qty) * _number(rate) for qty, rate in line_items)
    discount = net * _number(discount_percent) / 100
    balance = net - discount - _number(payment)
    return Totals(net=net, discount=discount, balance=balance)


def line_amount(line: PurchaseLine) -> float:
    """Net amount of one purchase line."""
    return _number(line.qty) * _number(line.purchase_rate)


def purchase_totals(
    lines: Sequence[PurchaseLine],
    discount_percent: Any = 0,
    payment: Any = 0,
) -> Totals:
    """Totals of a purchase invoice."""
    return totals(
        ((line.qty, line.purchase_rate) for line in lines),
        discount_percent,
        payment,
    )


def metered_quantity(
    previous_reading: Any,
    current_reading: Any,
    index: Optional[int] = None,
    strict: bool = True,
) -> float:
    """Quantity sold between two meter readings.

    With ``strict=False`` a decreasing reading gives a negative quantity
    instead of an error; stored documents are read that way.

    Raises:
        ValidationError: If the current reading is below the previous one
    """
    quantity = _number(current_reading) - _number(previous_reading)
    if strict and quantity < 0:
        where = f"line {index + 1}: " if index is not None else ""
        raise ValidationError(
            f"{where}current reading {_number(current_reading):g} is below "
            f"previous reading {_number(previous_reading):g}",
            field="current_reading",
        )
    return quantity


def rate_table(items: Iterable[Item]) -> Mapping[str, float]:
    """Index catalog sale rates by item id."""
    return {str(item.id): _number(item.sale_rate) for item in items if item.id is not None}


def sale_line_rate(line: SaleLine, rates: Mapping[str, float]) -> float:
    """Unit rate of a sale line: the stored rate, else the catalog rate."""
    if line.unit_rate is not None:
        return line.unit_rate
    if line.item_id is None:
        return 0.0
    return rates.get(str(line.item_id), 0.0)


def sale_totals(
    lines: Sequence[SaleLine],
    rates: Mapping[str, float],
    cash: Any = 0,
    strict: bool = True,
) -> Totals:
    """Totals of a metered sale slip; cash counts as the payment."""
    pairs = [
        (
            metered_quantity(line.previous_reading, line.current_reading, index, strict),
            sale_line_rate(line, rates),
        )
        for index, line in enumerate(lines)
    ]
    return totals(pairs, 0, cash)


def sale_quantity(lines: Sequence[SaleLine], strict: bool = True) -> float:
    """Total metered quantity of a sale slip."""
    return sum(
        metered_quantity(line.previous_reading, line.current_reading, index, strict)
        for index, line in enumerate(lines)
    )


def needs_credit_description(sale_totals: Optional[Totals], cash: Any) -> bool:
    """A sale paid below its net amount is a credit sale."""
    return sale_totals is not None and sale_totals.net > _number(cash)


def voucher_totals(lines: Sequence[VoucherLine]) -> Totals:
    """Totals of a credit voucher; the net is the total debit."""
    return totals(((1, line.debit) for line in lines), 0, 0)


def total_debit(lines: Sequence[VoucherLine]) -> float:
    """Sum of all debits on a voucher."""
    return voucher_totals(lines).net

