from datetime import datetime

import pytest

from rms.billing import compute_totals, recompute, split_amount, tax_breakdown
from rms.models import Order, OrderItem, Tax

GST = Tax(id="tax-1", name="GST", rate=18, enabled=True)
SERVICE = Tax(id="tax-2", name="Service Charge", rate=5, enabled=True)


def _items() -> tuple[OrderItem, ...]:
    return (
        OrderItem(id="a", name="Pizza", category="Main Course", price=400, quantity=2),
        OrderItem(id="b", name="Espresso", category="Beverages", price=100, quantity=2),
    )


def test_every_enabled_tax_applies_to_the_subtotal() -> None:
    totals = compute_totals(_items(), (GST, SERVICE))
    assert totals.subtotal == pytest.approx(1000)
    assert totals.tax == pytest.approx(230)
    assert totals.total == pytest.approx(1230)


def test_disabled_taxes_are_ignored() -> None:
    disabled = Tax(id="tax-2", name="Service Charge", rate=5, enabled=False)
    totals = compute_totals(_items(), (GST, disabled))
    assert totals.tax == pytest.approx(180)
    assert totals.total == pytest.approx(1180)


def test_empty_order_totals_zero() -> None:
    totals = compute_totals((), (GST,))
    assert (totals.subtotal, totals.tax, totals.total) == (0, 0, 0)


def test_tax_breakdown_lists_enabled_taxes_in_order() -> None:
    disabled = Tax(id="tax-3", name="Cess", rate=1, enabled=False)
    breakdown = tax_breakdown(1000, (GST, disabled, SERVICE))
    assert [(line.name, line.rate) for line in breakdown] == [("GST", 18), ("Service Charge", 5)]
    assert [line.amount for line in breakdown] == [pytest.approx(180), pytest.approx(50)]


def test_recompute_stores_tax_lines_that_add_up() -> None:
    order = recompute(Order(id="ord-1", table_id=1, created_at=datetime(2024, 6, 12), items=_items()), (GST, SERVICE))
    assert [line.name for line in order.tax_lines] == ["GST", "Service Charge"]
    assert order.subtotal + sum(line.amount for line in order.tax_lines) == pytest.approx(order.total)


def test_recompute_is_idempotent() -> None:
    order = Order(id="ord-1", table_id=1, created_at=datetime(2024, 6, 12), items=_items())
    once = recompute(order, (GST,))
    assert recompute(once, (GST,)) == once
    assert once.total == pytest.approx(once.subtotal + once.tax)


def test_split_amount() -> None:
    assert split_amount(1230, 3) == pytest.approx(410)
    with pytest.raises(ValueError):
        split_amount(1230, 1)
