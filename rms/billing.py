"""Order totals and tax computation."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

from rms.models import Order, OrderItem, Tax, TaxLine


@dataclass(frozen=True)
class Totals:
    subtotal: float
    tax: float
    total: float
    tax_lines: tuple[TaxLine, ...] = ()


def tax_breakdown(subtotal: float, taxes: Iterable[Tax]) -> tuple[TaxLine, ...]:
    """Per-tax amounts for each enabled tax, in configuration order."""
    return tuple(
        TaxLine(name=entry.name, rate=entry.rate, amount=subtotal * (entry.rate / 100))
        for entry in taxes
        if entry.enabled
    )


def compute_totals(items: Iterable[OrderItem], taxes: Iterable[Tax]) -> Totals:
    """
    Derive subtotal, tax and total for a set of order lines.

    Every enabled tax is applied to the pre-tax subtotal independently and the
    amounts are summed; taxes never compound. Disabled taxes are ignored, so
    callers may pass the full tax configuration.
    """
    subtotal = sum((item.price * item.quantity for item in items), 0.0)
    lines = tax_breakdown(subtotal, taxes)
    tax = sum((line.amount for line in lines), 0.0)
    return Totals(subtotal=subtotal, tax=tax, total=subtotal + tax, tax_lines=lines)


def recompute(order: Order, taxes: Iterable[Tax]) -> Order:
    """Return the order with totals and its tax lines refreshed from its items."""
    totals = compute_totals(order.items, taxes)
    return replace(
        order,
        subtotal=totals.subtotal,
        tax=totals.tax,
        total=totals.total,
        tax_lines=totals.tax_lines,
    )


def split_amount(total: float, ways: int) -> float:
    """Share per person when a bill is split evenly."""
    if ways < 2:
        raise ValueError("a bill can only be split 2 or more ways")
    return total / ways
