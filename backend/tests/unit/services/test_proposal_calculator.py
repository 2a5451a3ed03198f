"""
Unit tests for the proposal totals calculator.

WHAT: Tests for subtotal, discount, tax and total arithmetic.

WHY: Verifies the pricing contract every proposal relies on:
1. subtotal is the sum of quantity x unit_price
2. the discount comes off the subtotal first
3. tax is charged on the discounted amount
4. rates outside 0-100 are rejected
"""

import pytest
from decimal import Decimal

from app.core.exceptions import ValidationError
from app.services.proposal_calculator import (
    calculate_totals,
    discount_amount,
    item_total,
    priced_items,
    subtotal,
    tax_amount,
    total,
)


class TestSubtotal:
    """Tests for subtotal()."""

    def test_sums_quantity_times_unit_price(self):
        items = [
            {"quantity": 2, "unit_price": 50},
            {"quantity": 1, "unit_price": 19.99},
        ]
        assert subtotal(items) == Decimal("119.99")

    def test_empty_items_is_zero(self):
        assert subtotal([]) == Decimal("0")

    def test_accepts_objects_with_attributes(self):
        class Item:
            quantity = 3
            unit_price = Decimal("10.50")

        assert item_total(Item()) == Decimal("31.50")

    def test_no_float_artefacts(self):
        items = [{"quantity": 3, "unit_price": 0.1}]
        assert subtotal(items) == Decimal("0.3")


class TestDiscountAndTax:
    """Tests for discount_amount(), tax_amount() and total()."""

    def test_discount_is_percentage_of_subtotal(self):
        assert discount_amount(200, 10) == Decimal("20")

    def test_missing_discount_is_zero(self):
        assert discount_amount(200) == Decimal("0")
        assert discount_amount(200, None) == Decimal("0")

    def test_tax_applies_after_discount(self):
        # (1000 - 100) * 20% = 180, not 1000 * 20% = 200
        assert tax_amount(1000, 100, 20) == Decimal("180")

    def test_missing_tax_is_zero(self):
        assert tax_amount(1000, 100) == Decimal("0")

    def test_total(self):
        assert total(1000, 100, 180) == Decimal("1080")

    def test_total_defaults(self):
        assert total(250) == Decimal("250")

    @pytest.mark.parametrize("pct", [-1, 100.01, 150])
    def test_discount_out_of_range(self, pct):
        with pytest.raises(ValidationError) as exc_info:
            discount_amount(100, pct)
        assert exc_info.value.context["field"] == "discount_percentage"

    @pytest.mark.parametrize("pct", [-5, 101])
    def test_tax_out_of_range(self, pct):
        with pytest.raises(ValidationError):
            tax_amount(100, 0, pct)

    @pytest.mark.parametrize("pct", [0, 100])
    def test_bounds_are_inclusive(self, pct):
        assert discount_amount(100, pct) == Decimal(pct)


class TestCalculateTotals:
    """Tests for calculate_totals()."""

    def test_full_pricing(self):
        items = [
            {"quantity": 10, "unit_price": 100},
            {"quantity": 5, "unit_price": 75},
        ]
        totals = calculate_totals(items, discount_percentage=10, tax_percentage=8)

        assert totals.subtotal == Decimal("1375.00")
        assert totals.discount_amount == Decimal("137.50")
        assert totals.tax_amount == Decimal("99.00")
        assert totals.total == Decimal("1336.50")

    def test_rounds_half_up_to_cents(self):
        totals = calculate_totals([{"quantity": 1, "unit_price": "10.005"}])
        assert totals.subtotal == Decimal("10.01")

    def test_no_items(self):
        totals = calculate_totals([], 10, 10)
        assert totals.total == Decimal("0.00")


class TestPricedItems:
    """Tests for priced_items()."""

    def test_fills_total_and_subscription_flag(self):
        priced = priced_items([{"description": "Setup", "quantity": 2, "unit_price": 25}])

        assert priced[0]["total"] == 50.0
        assert priced[0]["is_subscription"] is False
        assert priced[0]["description"] == "Setup"

    def test_does_not_mutate_input(self):
        items = [{"quantity": 1, "unit_price": 10}]
        priced_items(items)
        assert "total" not in items[0]
