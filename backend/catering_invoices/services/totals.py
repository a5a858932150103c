"""
Money calculations for invoices
Project: Catering Invoices

Pure functions computing line amounts and invoice totals.

Every value goes through ``Decimal(str(value))`` so binary floating point
never enters the arithmetic, and every result is quantized with
ROUND_HALF_UP: currency to 2 decimal places, rates to 4.

Example:
    10 x 25.00 = 250.00; 250.00 x 0.0825 = 20.625 -> 20.63; total 270.63
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, NamedTuple, Union

CURRENCY_QUANTUM = Decimal("0.01")
RATE_QUANTUM = Decimal("0.0001")

ZERO = Decimal("0.00")

Number = Union[Decimal, int, str, float]


def to_decimal(value: Number) -> Decimal:
    """Convert ``value`` to Decimal without going through a binary float."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_currency(value: Number) -> Decimal:
    """Round to 2 decimal places, half-up."""
    return to_decimal(value).quantize(CURRENCY_QUANTUM, rounding=ROUND_HALF_UP)


def to_rate(value: Number) -> Decimal:
    """Round to 4 decimal places, half-up."""
    return to_decimal(value).quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)


class InvoiceTotals(NamedTuple):
    """Subtotal, tax and total of an invoice, all at currency scale."""

    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


def compute_line_amount(quantity: int, rate: Number) -> Decimal:
    """
    Amount of a single line item.

    Quantity and rate are validated upstream (quantity >= 1, rate >= 0);
    this function only does the arithmetic.

    Args:
        quantity: Number of units
        rate: Price per unit

    Returns:
        Decimal: ``quantity * rate`` rounded to 2 decimal places
    """
    return to_currency(to_decimal(quantity) * to_decimal(rate))


def _amount_of(item: Any) -> Decimal:
    if isinstance(item, Mapping):
        return to_decimal(item["amount"])
    if isinstance(item, (Decimal, int, str, float)):
        return to_decimal(item)
    return to_decimal(item.amount)


def compute_totals(line_items: Iterable[Any], tax_rate: Number) -> InvoiceTotals:
    """
    Compute subtotal, tax and total for a set of line items.

    ``line_items`` may contain objects with an ``amount`` attribute,
    mappings with an ``"amount"`` key, or bare amounts.

    - subtotal = round(sum(amounts), 2)
    - tax_amount = round(subtotal * tax_rate, 2)
    - total = round(subtotal + tax_amount, 2)

    An empty list yields 0.00 for all three values.

    Args:
        line_items: Line items (or their amounts)
        tax_rate: Tax rate as a fraction (0.0825 = 8.25%)

    Returns:
        InvoiceTotals: The three computed amounts
    """
    subtotal = to_currency(sum((_amount_of(item) for item in line_items), ZERO))
    tax_amount = to_currency(subtotal * to_decimal(tax_rate))
    total = to_currency(subtotal + tax_amount)
    return InvoiceTotals(subtotal=subtotal, tax_amount=tax_amount, total=total)
