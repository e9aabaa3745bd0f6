"""Customer records kept in step with settled orders."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from rms.models import Customer, Order


def upsert_customer(
    customers: tuple[Customer, ...],
    order: Order,
    now: datetime,
    new_id: str,
    count_spend: bool,
) -> tuple[Customer, ...]:
    """
    Record a visit for the order's customer, matched by exact phone number.

    An existing customer gets the order's name, one more visit and a fresh
    last visit; the order total is added to their spend only when
    `count_spend` is set (finalized bills, not credit). Unknown phones create a
    new customer with one visit. Orders without both name and phone leave the
    list untouched.
    """
    if not order.customer_name or not order.customer_phone:
        return customers

    spend = order.total if count_spend else 0.0
    for idx, customer in enumerate(customers):
        if customer.phone != order.customer_phone:
            continue
        updated = replace(
            customer,
            name=order.customer_name,
            visits=customer.visits + 1,
            total_spent=customer.total_spent + spend,
            last_visit=now,
        )
        return customers[:idx] + (updated,) + customers[idx + 1 :]

    created = Customer(
        id=new_id,
        name=order.customer_name,
        phone=order.customer_phone,
        total_spent=spend,
        visits=1,
        last_visit=now,
    )
    return customers + (created,)
