"""Tests for the index-addressed line item editor."""

import pytest
from hypothesis import given, settings as hyp_settings, strategies as st

from backoffice.core.errors import ValidationError
from backoffice.models.documents import PurchaseLine, VoucherLine
from backoffice.services.line_items import LineItemEditor


def make_editor(names, on_change=None):
    return LineItemEditor(
        PurchaseLine,
        [PurchaseLine(item_name=name) for name in names],
        on_change=on_change,
    )


# =============================================================================
# Append / Remove
# =============================================================================


class TestAppendRemove:
    """Tests for adding and removing lines."""

    def test_append_blank_line(self):
        """append() without a line adds a blank one at the end."""
        editor = make_editor(["Oil"])

        index = editor.append()

        assert index == 1
        assert len(editor) == 2
        assert editor[1].item_name == ""
        assert editor[1].qty == 0

    def test_append_given_line(self):
        """append() keeps a provided line as is."""
        editor = LineItemEditor(VoucherLine)
        line = VoucherLine(account_code="1001", debit=50)

        editor.append(line)

        assert editor.items == (line,)

    def test_remove_middle_line_shifts_later_lines(self):
        """Removing index 1 of three lines keeps the others in order."""
        editor = make_editor(["a", "b", "c"])

        removed = editor.remove_at(1)

        assert removed.item_name == "b"
        assert [line.item_name for line in editor.items] == ["a", "c"]

    def test_remove_out_of_range(self):
        """Removing a missing index raises IndexError and changes nothing."""
        editor = make_editor(["a"])

        with pytest.raises(IndexError):
            editor.remove_at(1)
        with pytest.raises(IndexError):
            editor.remove_at(-1)

        assert len(editor) == 1

    def test_items_is_a_snapshot(self):
        """The items tuple does not change when the editor does."""
        editor = make_editor(["a", "b"])
        snapshot = editor.items

        editor.remove_at(0)

        assert len(snapshot) == 2

    @given(
        names=st.lists(st.text(min_size=1, max_size=5), min_size=1, max_size=15),
        data=st.data(),
    )
    @hyp_settings(max_examples=50, deadline=None)
    def test_remove_at_preserves_order(self, names, data):
        """remove_at(i) on n lines leaves n-1 lines in their original order."""
        editor = make_editor(names)
        index = data.draw(st.integers(min_value=0, max_value=len(names) - 1))

        editor.remove_at(index)

        assert len(editor) == len(names) - 1
        assert [line.item_name for line in editor.items] == names[:index] + names[index + 1:]


# =============================================================================
# Field updates
# =============================================================================


class TestUpdateField:
    """Tests for editing one field of one line."""

    def test_update_coerces_value(self):
        """Form text is coerced into the field's type."""
        editor = make_editor(["Oil"])

        editor.update_field(0, "qty", "3")

        assert editor[0].qty == 3.0

    def test_blank_numeric_reads_as_zero(self):
        """Clearing a numeric input stores zero."""
        editor = make_editor(["Oil"])
        editor.update_field(0, "qty", 5)

        editor.update_field(0, "qty", "")

        assert editor[0].qty == 0

    def test_unknown_field(self):
        """Unknown fields are rejected with a ValidationError."""
        editor = make_editor(["Oil"])

        with pytest.raises(ValidationError) as exc_info:
            editor.update_field(0, "colour", "red")

        assert exc_info.value.field == "colour"

    def test_invalid_value(self):
        """Values that cannot be coerced become a ValidationError naming the line."""
        editor = make_editor(["Oil", "Filter"])

        with pytest.raises(ValidationError) as exc_info:
            editor.update_field(1, "qty", "lots")

        assert exc_info.value.field == "qty"
        assert "line 2" in str(exc_info.value)


# =============================================================================
# Change notification
# =============================================================================


class TestOnChange:
    """Every mutation notifies the owner."""

    def test_each_mutation_calls_on_change(self):
        calls = []
        editor = make_editor(["a"], on_change=lambda: calls.append(1))

        editor.append()
        editor.update_field(0, "qty", 2)
        editor.remove_at(1)
        editor.clear()

        assert len(calls) == 4
        assert len(editor) == 0

    def test_failed_update_does_not_notify(self):
        calls = []
        editor = make_editor(["a"], on_change=lambda: calls.append(1))

        with pytest.raises(ValidationError):
            editor.update_field(0, "qty", "lots")

        assert calls == []
