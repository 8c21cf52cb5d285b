"""Printable single-page slips for purchases, sales and vouchers.

Building and drawing are separate steps. ``purchase_report``,
``sale_report`` and ``voucher_report`` turn a document into a ``Report``
holding only text; ``render_pdf`` draws a report with reportlab at the
coordinates of its ``SlipLayout``. Coordinates are millimetres from the
top-left corner of an A4 page. There is no pagination: rows that do not fit
run off the page.
"""

import io
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, Field
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from backoffice.core.config import settings
from backoffice.models.documents import Purchase, Sale, Voucher
from backoffice.services import totals as calc

logger = logging.getLogger(__name__)


# =============================================================================
# Report model
# =============================================================================


class ReportTable(BaseModel):
    """A titled grid of text cells."""
    title: Optional[str] = None
    columns: List[str]
    rows: List[List[str]] = Field(default_factory=list)


class Report(BaseModel):
    """Everything printed on one slip, as text."""
    layout: str
    title: str
    filename: str
    fields: List[Tuple[str, str]] = Field(default_factory=list)
    corner_fields: List[Tuple[str, str]] = Field(default_factory=list)
    tables: List[ReportTable] = Field(default_factory=list)
    footer: List[Tuple[str, str]] = Field(default_factory=list)


# =============================================================================
# Layouts
# =============================================================================


@dataclass(frozen=True)
class SlipLayout:
    """Hand-tuned positions for one kind of slip (millimetres)."""
    table_columns: Tuple[Tuple[float, ...], ...]
    title_size: int = 18
    title_centered: bool = True
    title_y: float = 20
    body_size: int = 12
    margin: float = 14
    field_y: float = 35
    field_step: float = 7
    table_size: int = 12
    section_gap: float = 14
    section_title_step: float = 5
    row_step: float = 6
    footer_gap: float = 10
    footer_step: float = 6


LAYOUTS: Dict[str, SlipLayout] = {
    "purchase": SlipLayout(
        table_columns=(
            (14, 30, 55, 75, 100, 125),
            (14, 64, 114),
        ),
    ),
    "sale": SlipLayout(
        table_columns=(
            (14, 39, 64, 89, 114, 139, 164),
            (14, 49, 84, 119, 154),
        ),
        table_size=10,
        section_gap=12,
    ),
    "voucher": SlipLayout(
        table_columns=((14, 40, 100, 160),),
        title_size=16,
        title_centered=False,
        field_y=30,
        field_step=10,
        table_size=10,
        section_gap=10,
        section_title_step=10,
        row_step=8,
        footer_gap=8,
    ),
}


# =============================================================================
# Formatting helpers
# =============================================================================


def format_amount(value: Any) -> str:
    """Two-decimal rendering of a money or quantity value."""
    try:
        return f"{float(value):.2f}"
    except (TypeError, ValueError):
        return "N/A"


def _parse_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    text = str(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    try:
        # Flask's jsonify writes dates as RFC 1123 strings
        return parsedate_to_datetime(text)
    except (TypeError, ValueError):
        return None


def format_date(value: Any) -> str:
    parsed = _parse_datetime(value)
    if parsed is None:
        return str(value) if value else "N/A"
    return parsed.strftime("%d/%m/%Y")


def format_timestamp(value: Any) -> str:
    parsed = _parse_datetime(value)
    if parsed is None:
        return str(value) if value else "N/A"
    return parsed.strftime("%d/%m/%Y %H:%M")


def _text(value: Any) -> str:
    if value is None or value == "":
        return "N/A"
    return str(value)


def report_filename(prefix: str, number: Any) -> str:
    """PDF filename built from a business number, safe for any filesystem."""
    safe = re.sub(r"[^\w.-]+", "_", str(number or "").strip()) or "unnumbered"
    return f"{prefix}_{safe}.pdf"


# =============================================================================
# Report builders
# =============================================================================


def purchase_report(purchase: Purchase) -> Report:
    """Purchase slip: header, item lines and payment details."""
    totals = calc.purchase_totals(
        purchase.items, purchase.discount_percent, purchase.payment
    )
    currency = settings.currency_label

    items = ReportTable(
        columns=["#", "Item", "Qty", "P. Rate", "S. Rate", "Net Amount"],
        rows=[
            [
                str(index),
                line.reference or "N/A",
                f"{line.qty:g}",
                format_amount(line.purchase_rate),
                format_amount(line.sale_rate),
                format_amount(calc.line_amount(line)),
            ]
            for index, line in enumerate(purchase.items, start=1)
        ],
    )
    payment = ReportTable(
        title="Payment Details",
        columns=["Payment", "Discount", "Balance"],
        rows=[[
            format_amount(purchase.payment),
            format_amount(totals.discount),
            format_amount(totals.balance),
        ]],
    )

    return Report(
        layout="purchase",
        title="Purchase Slip Report",
        filename=report_filename("purchase_report", purchase.purchase_no),
        fields=[
            ("Purchase No", _text(purchase.purchase_no)),
            ("Date", format_date(purchase.date)),
            ("Supplier", _text(purchase.supplier)),
            ("Net Amount", f"{currency} {format_amount(totals.net)}"),
            ("Description", _text(purchase.remarks)),
            ("Discount Percent", f"{purchase.discount_percent:g}"),
            ("Discount", f"{currency} {format_amount(totals.discount)}"),
            ("Payment", f"{currency} {format_amount(purchase.payment)}"),
            ("Balance", f"{currency} {format_amount(totals.balance)}"),
        ],
        corner_fields=[("Bill No", _text(purchase.bill_no))],
        tables=[items, payment],
    )


def sale_report(sale: Sale, rates: Optional[Mapping[str, float]] = None) -> Report:
    """Sales slip: header, metered lines, payments received and totals.

    Args:
        sale: The fetched sale
        rates: Catalog sale rates by item id, for lines without a stored rate
    """
    rates = rates or {}
    totals = calc.sale_totals(sale.items, rates, sale.cash, strict=False)

    rows = []
    for index, line in enumerate(sale.items):
        qty = calc.metered_quantity(
            line.previous_reading, line.current_reading, index, strict=False
        )
        rate = calc.sale_line_rate(line, rates)
        rows.append([
            str(index + 1),
            _text(line.item_id),
            f"{line.previous_reading:g}",
            f"{line.current_reading:g}",
            f"{qty:g}",
            format_amount(rate),
            format_amount(qty * rate),
        ])

    amounts = ReportTable(
        title="Amounts",
        columns=["Account", "Bank", "Cash", "Online", "Timestamp"],
        rows=[
            [
                _text(amount.account_number),
                _text(amount.bank_name),
                format_amount(amount.cash_in_hand),
                "Yes" if amount.is_online else "No",
                format_timestamp(amount.timestamp),
            ]
            for amount in sale.amounts
        ],
    )

    return Report(
        layout="sale",
        title="Sales Slip Report",
        filename=report_filename("sales_slip", sale.slip_no),
        fields=[
            ("Slip No", _text(sale.slip_no)),
            ("Salesperson", _text(sale.salesperson)),
            ("Cashier", _text(sale.cashier)),
            ("Customer ID", _text(sale.customer_id)),
            ("Cash", format_amount(sale.cash)),
        ],
        corner_fields=[("Date", format_date(sale.date))],
        tables=[
            ReportTable(
                title="Items",
                columns=["#", "Item ID", "Prev", "Curr", "Qty", "Rate", "Amount"],
                rows=rows,
            ),
            amounts,
        ],
        footer=[
            ("Total Quantity", f"{calc.sale_quantity(sale.items, strict=False):g}"),
            ("Total Net Amount", format_amount(totals.net)),
            ("Total Balance", format_amount(totals.balance)),
        ],
    )


def voucher_report(voucher: Voucher) -> Report:
    """Credit voucher: credited account and the debited accounts."""
    return Report(
        layout="voucher",
        title=f"Voucher No: {_text(voucher.voucher_no)}",
        filename=report_filename("voucher", voucher.voucher_no),
        fields=[
            ("Date", format_timestamp(voucher.date)),
            ("Cr. Account", _text(voucher.cr_account)),
            ("Description", _text(voucher.description)),
        ],
        tables=[
            ReportTable(
                title="Account Details:",
                columns=["Date", "Account Code", "Account Name", "Debit"],
                rows=[
                    [
                        format_date(line.date),
                        _text(line.account_code),
                        _text(line.account_name),
                        format_amount(line.debit),
                    ]
                    for line in voucher.accounts
                ],
            ),
        ],
        footer=[("Total Debit", format_amount(calc.total_debit(voucher.accounts)))],
    )


def build_report(
    document: Union[Purchase, Sale, Voucher],
    rates: Optional[Mapping[str, float]] = None,
) -> Report:
    """Build the report matching the document's type."""
    if isinstance(document, Purchase):
        return purchase_report(document)
    if isinstance(document, Sale):
        return sale_report(document, rates)
    if isinstance(document, Voucher):
        return voucher_report(document)
    raise TypeError(f"No report for {type(document).__name__}")


# =============================================================================
# Rendering
# =============================================================================


class _Page:
    """reportlab canvas addressed in millimetres from the top-left corner."""

    def __init__(self, pdf: canvas.Canvas):
        self.pdf = pdf
        self.width, self.height = A4

    @property
    def width_mm(self) -> float:
        return self.width / mm

    def text(self, x: float, y: float, value: str, align: str = "left") -> None:
        px, py = x * mm, self.height - y * mm
        if align == "center":
            self.pdf.drawCentredString(px, py, value)
        elif align == "right":
            self.pdf.drawRightString(px, py, value)
        else:
            self.pdf.drawString(px, py, value)

    def font(self, size: int, bold: bool = False) -> None:
        self.pdf.setFont("Helvetica-Bold" if bold else "Helvetica", size)


def _draw_table(
    page: _Page,
    layout: SlipLayout,
    table: ReportTable,
    columns: Sequence[float],
    y: float,
) -> float:
    """Draw a table starting at ``y``; return the y just below its last row."""
    if table.title:
        page.font(layout.body_size, bold=True)
        page.text(layout.margin, y, table.title)
        y += layout.section_title_step

    page.font(layout.table_size, bold=True)
    for x, header in zip(columns, table.columns):
        page.text(x, y, header)
    y += layout.row_step

    page.font(layout.table_size)
    for row in table.rows:
        for x, cell in zip(columns, row):
            page.text(x, y, cell)
        y += layout.row_step
    return y


def render_pdf(report: Report) -> bytes:
    """Draw a report onto a single A4 page and return the PDF bytes."""
    layout = LAYOUTS[report.layout]
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(report.title)
    page = _Page(pdf)

    page.font(layout.title_size, bold=True)
    if layout.title_centered:
        page.text(page.width_mm / 2, layout.title_y, report.title, align="center")
    else:
        page.text(layout.margin, layout.title_y, report.title)

    page.font(layout.body_size)
    y = layout.field_y
    for label, value in report.corner_fields:
        page.text(page.width_mm - layout.margin, y, f"{label}: {value}", align="right")
    for label, value in report.fields:
        page.text(layout.margin, y, f"{label}: {value}")
        y += layout.field_step

    y += layout.section_gap - layout.field_step
    for table, columns in zip(report.tables, layout.table_columns):
        y = _draw_table(page, layout, table, columns, y)
        y += layout.section_gap - layout.row_step

    if report.footer:
        y += layout.footer_gap - layout.section_gap
        page.font(layout.body_size, bold=True)
        for label, value in report.footer:
            page.text(layout.margin, y, f"{label}: {value}")
            y += layout.footer_step

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


def save_report(report: Report, directory: Optional[Union[str, Path]] = None) -> Path:
    """Render a report and write it under its business-number filename."""
    folder = Path(directory if directory is not None else settings.report_dir)
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / report.filename
    path.write_bytes(render_pdf(report))
    logger.info(f"Report written to {path}")
    return path
