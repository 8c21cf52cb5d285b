"""Tests for the derived totals calculator.

Properties tested:
- An empty document has zero totals
- net, discount and balance follow their formulas for any inputs
- Metered quantities never go negative
"""

import pytest
from hypothesis import given, settings as hyp_settings, strategies as st

from backoffice.core.errors import ValidationError
from backoffice.models.documents import PurchaseLine, SaleLine, VoucherLine
from backoffice.models.records import Item
from backoffice.services import totals as calc


# =============================================================================
# Custom Strategies
# =============================================================================

amount_strategy = st.floats(min_value=0, max_value=1_000_000, allow_nan=False)
percent_strategy = st.floats(min_value=0, max_value=100, allow_nan=False)
line_strategy = st.tuples(
    st.integers(min_value=0, max_value=1000),
    st.floats(min_value=0, max_value=10_000, allow_nan=False),
)


# =============================================================================
# totals()
# =============================================================================


class TestTotals:
    """Tests for the generic totals function."""

    def test_empty_document(self):
        """No lines, no discount and no payment give zero totals."""
        result = calc.totals([], 0, 0)

        assert (result.net, result.discount, result.balance) == (0, 0, 0)

    def test_single_line_with_discount_and_payment(self):
        """2 x 10 with 10% discount and 5 paid leaves 13 to pay."""
        result = calc.totals([(2, 10)], 10, 5)

        assert result.net == pytest.approx(20)
        assert result.discount == pytest.approx(2)
        assert result.balance == pytest.approx(13)

    def test_blank_inputs_read_as_zero(self):
        """Blank form inputs do not break the computation."""
        result = calc.totals([("", "5"), ("3", None)], "", " ")

        assert result.net == 0
        assert result.balance == 0

    def test_overpayment_gives_negative_balance(self):
        """Paying more than owed is allowed and shows as a negative balance."""
        result = calc.totals([(1, 50)], 0, 80)

        assert result.balance == pytest.approx(-30)

    @given(
        lines=st.lists(line_strategy, max_size=20),
        discount_percent=percent_strategy,
        payment=amount_strategy,
    )
    @hyp_settings(max_examples=50, deadline=None)
    def test_formulas_hold(self, lines, discount_percent, payment):
        """net, discount and balance follow their definitions for any input."""
        result = calc.totals(lines, discount_percent, payment)

        net = sum(qty * rate for qty, rate in lines)
        assert result.net == pytest.approx(net)
        assert result.discount == pytest.approx(net * discount_percent / 100)
        assert result.balance == pytest.approx(
            net - net * discount_percent / 100 - payment, abs=1e-6
        )


# =============================================================================
# Purchases
# =============================================================================


class TestPurchaseTotals:
    """Tests for purchase invoice totals."""

    def test_lines_use_purchase_rate(self):
        """The purchase rate prices a line; the sale rate is informational."""
        lines = [
            PurchaseLine(item_name="Oil", qty=3, purchase_rate=100, sale_rate=120),
            PurchaseLine(item_name="Filter", qty=1, purchase_rate=50, sale_rate=70),
        ]

        result = calc.purchase_totals(lines, 10, 100)

        assert result.net == pytest.approx(350)
        assert result.discount == pytest.approx(35)
        assert result.balance == pytest.approx(215)

    def test_line_amount(self):
        """A line's net amount is qty x purchase rate."""
        assert calc.line_amount(PurchaseLine(qty=4, purchaseRate=2.5)) == 10


# =============================================================================
# Sales
# =============================================================================


class TestSaleTotals:
    """Tests for metered sale totals."""

    def test_quantity_is_reading_difference(self):
        """The sold quantity is current minus previous reading."""
        assert calc.metered_quantity(1200, 1250) == 50

    def test_negative_quantity_rejected(self):
        """A current reading below the previous one is refused."""
        with pytest.raises(ValidationError) as exc_info:
            calc.metered_quantity(1250, 1200, index=1)

        assert exc_info.value.field == "current_reading"
        assert "line 2" in str(exc_info.value)

    def test_stored_reading_may_decrease(self):
        """Read-side callers get a signed quantity instead of an error."""
        assert calc.metered_quantity(100, 90, strict=False) == -10

        lines = [SaleLine(item_id=1, previous_reading=100, current_reading=90)]
        assert calc.sale_totals(lines, {"1": 10}, strict=False).net == pytest.approx(-100)
        assert calc.sale_quantity(lines, strict=False) == -10

    def test_rates_from_catalog(self):
        """Lines without a stored rate are priced at the catalog sale rate."""
        rates = calc.rate_table([Item(id=1, item_name="Petrol", sale_rate=250)])
        lines = [SaleLine(item_id=1, previous_reading=100, current_reading=110)]

        result = calc.sale_totals(lines, rates, cash=2000)

        assert result.net == pytest.approx(2500)
        assert result.discount == 0
        assert result.balance == pytest.approx(500)

    def test_stored_rate_wins(self):
        """A rate stored on the line overrides the catalog."""
        line = SaleLine(item_id=1, previous_reading=0, current_reading=2, unit_rate=9)

        assert calc.sale_line_rate(line, {"1": 250}) == 9

    def test_unknown_item_priced_at_zero(self):
        """An item missing from the catalog contributes nothing."""
        lines = [SaleLine(item_id=99, previous_reading=0, current_reading=5)]

        assert calc.sale_totals(lines, {}, 0).net == 0

    def test_total_quantity(self):
        """Total quantity sums every line's metered quantity."""
        lines = [
            SaleLine(previous_reading=0, current_reading=5),
            SaleLine(previous_reading=10, current_reading=12),
        ]

        assert calc.sale_quantity(lines) == 7

    @pytest.mark.parametrize(
        "net,cash,expected",
        [(2500, 1000, True), (2500, 2500, False), (2500, "", True), (0, 0, False)],
    )
    def test_needs_credit_description(self, net, cash, expected):
        """Cash below the net amount makes a credit sale."""
        result = calc.totals([(1, net)], 0, cash)

        assert calc.needs_credit_description(result, cash) is expected

    def test_no_totals_is_not_credit(self):
        assert calc.needs_credit_description(None, 0) is False

    @given(
        readings=st.lists(
            st.tuples(
                st.integers(min_value=0, max_value=100_000),
                st.integers(min_value=0, max_value=100_000),
            ),
            min_size=1,
            max_size=10,
        ),
    )
    @hyp_settings(max_examples=50, deadline=None)
    def test_net_never_negative(self, readings):
        """Whenever totals are produced, no line contributed a negative quantity."""
        lines = [
            SaleLine(item_id=1, previous_reading=prev, current_reading=curr)
            for prev, curr in readings
        ]
        try:
            result = calc.sale_totals(lines, {"1": 3.0}, 0)
        except ValidationError:
            assert any(curr < prev for prev, curr in readings)
        else:
            assert all(curr >= prev for prev, curr in readings)
            assert result.net >= 0


# =============================================================================
# Vouchers
# =============================================================================


class TestVoucherTotals:
    """Tests for voucher totals."""

    def test_total_debit(self):
        """The voucher net is the sum of its debits."""
        lines = [VoucherLine(debit=100), VoucherLine(debit=""), VoucherLine(debit=25.5)]

        assert calc.total_debit(lines) == pytest.approx(125.5)
        assert calc.voucher_totals(lines).balance == pytest.approx(125.5)
