"""
Proposal totals calculator.

WHAT: Pure functions that price a proposal from its line items.

WHY: The same arithmetic is needed when a proposal is created, when it is
edited, and when an invoice copies it. Keeping it free of I/O makes the
ordering contract easy to test: the discount comes off the subtotal first,
and tax is charged on what is left.

HOW: Decimal arithmetic throughout. The individual functions are exact;
calculate_totals() rounds the stored amounts to cents (ROUND_HALF_UP).
Quantity and unit price bounds are enforced by the request schemas, not here.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, List, Mapping, Optional, Union

from app.core.exceptions import ValidationError

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")


def to_decimal(value: Optional[Number]) -> Decimal:
    """Convert a number (or None) to Decimal without float artefacts."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _percentage(value: Optional[Number], name: str) -> Decimal:
    pct = to_decimal(value)
    if pct < ZERO or pct > HUNDRED:
        raise ValidationError(
            message=f"{name} must be between 0 and 100",
            field=name,
            value=str(pct),
        )
    return pct


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def item_total(item: Any) -> Decimal:
    """quantity x unit_price for one line item (mapping or object)."""
    return to_decimal(_field(item, "quantity")) * to_decimal(_field(item, "unit_price"))


def subtotal(items: Iterable[Any]) -> Decimal:
    """Sum of quantity x unit_price over all items."""
    return sum((item_total(item) for item in items), ZERO)


def discount_amount(subtotal: Number, discount_percentage: Optional[Number] = None) -> Decimal:
    """subtotal x discount_percentage / 100."""
    pct = _percentage(discount_percentage, "discount_percentage")
    return to_decimal(subtotal) * pct / HUNDRED


def tax_amount(
    subtotal: Number,
    discount_amount: Number,
    tax_percentage: Optional[Number] = None,
) -> Decimal:
    """(subtotal - discount_amount) x tax_percentage / 100."""
    pct = _percentage(tax_percentage, "tax_percentage")
    return (to_decimal(subtotal) - to_decimal(discount_amount)) * pct / HUNDRED


def total(subtotal: Number, discount_amount: Number = ZERO, tax_amount: Number = ZERO) -> Decimal:
    """subtotal - discount_amount + tax_amount."""
    return to_decimal(subtotal) - to_decimal(discount_amount) + to_decimal(tax_amount)


@dataclass(frozen=True)
class ProposalTotals:
    """Rounded amounts stored on a proposal."""

    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total: Decimal


def calculate_totals(
    items: Iterable[Any],
    discount_percentage: Optional[Number] = None,
    tax_percentage: Optional[Number] = None,
) -> ProposalTotals:
    """
    Price a proposal.

    Args:
        items: Line items with quantity and unit_price
        discount_percentage: 0-100, absent means no discount
        tax_percentage: 0-100, absent means no tax

    Returns:
        ProposalTotals rounded to cents

    Raises:
        ValidationError: If a percentage is outside 0-100
    """
    sub = subtotal(items)
    discount = discount_amount(sub, discount_percentage)
    tax = tax_amount(sub, discount, tax_percentage)
    return ProposalTotals(
        subtotal=round_money(sub),
        discount_amount=round_money(discount),
        tax_amount=round_money(tax),
        total=round_money(total(sub, discount, tax)),
    )


def priced_items(items: Iterable[Mapping[str, Any]]) -> List[dict]:
    """
    Copy line items with their total filled in.

    WHY: Items are stored as JSON, so amounts are kept as floats there;
    the authoritative arithmetic stays in Decimal.
    """
    priced = []
    for item in items:
        row = dict(item)
        row["total"] = float(round_money(item_total(item)))
        row["is_subscription"] = bool(row.get("is_subscription", False))
        priced.append(row)
    return priced
