"""
Tests for the selection view model and amount formatting
"""

import asyncio
from decimal import Decimal

import pytest

from classfund.ledger import LedgerSyncError
from classfund.models.box import Box
from classfund.viewmodels import (
    BoxSelectionVM,
    NoSelectionError,
    SelectionState,
    balance_label,
    format_amount,
)


@pytest.fixture
def vm(ledger):
    view_model = BoxSelectionVM(ledger)
    asyncio.run(view_model.load())
    return view_model


class TestFormatAmount:
    """Tests for format_amount."""

    @pytest.mark.parametrize("amount, expected", [
        (None, "0.00"),
        (12.5, "12.50"),
        (3, "3.00"),
        (0, "0.00"),
        (Decimal("2.005"), "2.01"),
        (Decimal("1234.5"), "1234.50"),
        (Decimal("-5.255"), "-5.26"),
        ("7.1", "7.10"),
        (0.1, "0.10"),
    ])
    def test_format(self, amount, expected):
        assert format_amount(amount) == expected

    @pytest.mark.parametrize("amount", ["abc", "", Decimal("NaN"), float("inf"), True])
    def test_invalid_amount(self, amount):
        with pytest.raises(ValueError):
            format_amount(amount)

    def test_very_large_amount(self):
        """Amounts past the default decimal precision still get cents."""
        assert format_amount(Decimal("1e30")) == "1" + "0" * 30 + ".00"
        assert format_amount(Decimal("-123456789012345678901234567890.125")) == (
            "-123456789012345678901234567890.13"
        )

    def test_very_large_balance_label(self, ledger):
        vm = BoxSelectionVM(ledger)
        box = Box(id="1", name="A", balance=Decimal("1e30"))
        assert vm.balance_label(box).endswith("000.00")

    def test_balance_label(self):
        assert balance_label(Decimal("12.5")) == "R$ 12.50"
        assert balance_label(None, "$") == "$ 0.00"


class TestSelection:
    """Tests for the selection state machine."""

    def test_starts_without_selection(self, vm):
        assert vm.state == SelectionState.NO_SELECTION
        assert vm.selected is None

    def test_select_and_clear(self, vm):
        box = Box(id="1", name="A")
        vm.select(box)
        assert vm.state == SelectionState.HAS_SELECTION
        assert vm.selected == box
        vm.select(None)
        assert vm.state == SelectionState.NO_SELECTION

    def test_select_replaces_previous(self, vm):
        vm.select(Box(id="1", name="A"))
        vm.select(Box(id="2", name="B"))
        assert vm.selected.id == "2"

    def test_selection_callback(self, ledger):
        seen = []
        vm = BoxSelectionVM(ledger, on_selection_changed=seen.append)
        box = Box(id="1", name="A")
        vm.select(box)
        vm.select(None)
        assert seen == [box, None]

    def test_load_clears_selection(self, vm):
        """Selection does not survive a reload."""
        vm.select(Box(id="1", name="A"))
        asyncio.run(vm.load())
        assert vm.state == SelectionState.NO_SELECTION
        assert vm.is_loaded is True


class TestLedgerSurface:
    """Tests for add/edit through the view model."""

    def test_add_box_assigns_id(self, vm):
        box = asyncio.run(vm.add_box("Trip Fund", Decimal("0")))
        assert box.id
        assert vm.boxes() == (box,)

    def test_add_box_ids_differ(self, vm):
        first = asyncio.run(vm.add_box("A"))
        second = asyncio.run(vm.add_box("A"))
        assert first.id != second.id
        assert len(vm.boxes()) == 2

    def test_add_box_failure_keeps_box(self, vm, store):
        store.fail_writes = True
        with pytest.raises(LedgerSyncError):
            asyncio.run(vm.add_box("A"))
        assert len(vm.boxes()) == 1
        assert vm.sync_status.pending_sync is True

    def test_balance_label_uses_currency(self, ledger):
        vm = BoxSelectionVM(ledger, currency_symbol="€")
        assert vm.balance_label(Box(id="1", name="A", balance=Decimal("3"))) == "€ 3.00"
        assert vm.balance_label(Box(id="1", name="A")) == "€ 0.00"

    def test_format_amount_on_view_model(self):
        assert BoxSelectionVM.format_amount(Decimal("2.005")) == "2.01"


class TestRequestEdit:
    """Tests for handing a box to the edit form."""

    def test_without_selection_raises(self, vm):
        with pytest.raises(NoSelectionError):
            vm.request_edit()

    def test_uses_selected_box(self, vm):
        box = asyncio.run(vm.add_box("A", Decimal("1")))
        vm.select(box)
        request = vm.request_edit()
        assert request.box == box

    def test_explicit_box_wins(self, vm):
        first = asyncio.run(vm.add_box("A"))
        second = asyncio.run(vm.add_box("B"))
        vm.select(first)
        assert vm.request_edit(second).box == second

    def test_submit_edits_and_refreshes_selection(self, vm):
        """After an edit the detail view shows the new values."""
        box = asyncio.run(vm.add_box("A", Decimal("10")))
        vm.select(box)

        updated = asyncio.run(vm.request_edit().submit(balance=Decimal("25")))

        assert updated.id == box.id
        assert updated.name == "A"
        assert vm.boxes() == (updated,)
        assert vm.selected == updated

    def test_submit_failure_still_refreshes_selection(self, vm, store):
        box = asyncio.run(vm.add_box("A", Decimal("10")))
        vm.select(box)
        store.fail_writes = True

        with pytest.raises(LedgerSyncError):
            asyncio.run(vm.request_edit().submit(name="A2"))

        assert vm.selected.name == "A2"

    def test_edit_other_box_keeps_selection(self, vm):
        first = asyncio.run(vm.add_box("A"))
        second = asyncio.run(vm.add_box("B"))
        vm.select(first)
        asyncio.run(vm.request_edit(second).submit(name="B2"))
        assert vm.selected == first

    def test_edit_request_is_frozen(self, vm):
        box = asyncio.run(vm.add_box("A"))
        request = vm.request_edit(box)
        with pytest.raises(AttributeError):
            request.box = Box(id="x", name="X")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
