from datetime import datetime

from rms.customers import upsert_customer
from rms.models import Customer, Order

NOW = datetime(2024, 6, 12, 14, 30)


def _customers() -> tuple[Customer, ...]:
    return (
        Customer(id="cust-1", name="John Doe", phone="1234567890", total_spent=12550, visits=5,
                 last_visit=datetime(2024, 5, 10)),
        Customer(id="cust-2", name="Jane Smith", phone="0987654321", total_spent=5800, visits=2,
                 last_visit=datetime(2024, 5, 15)),
    )


def _order(name: str = "", phone: str = "", total: float = 590.0) -> Order:
    return Order(id="ord-1", table_id=1, created_at=NOW, total=total, customer_name=name, customer_phone=phone)


def test_order_without_both_name_and_phone_is_skipped() -> None:
    customers = _customers()
    assert upsert_customer(customers, _order(name="John"), NOW, "cust-9", count_spend=True) is customers
    assert upsert_customer(customers, _order(phone="1234567890"), NOW, "cust-9", count_spend=True) is customers


def test_existing_phone_updates_that_customer() -> None:
    result = upsert_customer(_customers(), _order("Johnny", "1234567890"), NOW, "cust-9", count_spend=True)
    john = result[0]
    assert len(result) == 2
    assert john.id == "cust-1"
    assert john.name == "Johnny"
    assert john.visits == 6
    assert john.total_spent == 12550 + 590
    assert john.last_visit == NOW
    assert result[1] == _customers()[1]


def test_credit_counts_a_visit_but_not_spend() -> None:
    result = upsert_customer(_customers(), _order("Jane Smith", "0987654321"), NOW, "cust-9", count_spend=False)
    assert result[1].visits == 3
    assert result[1].total_spent == 5800


def test_unknown_phone_appends_new_customer() -> None:
    result = upsert_customer(_customers(), _order("Ravi", "9876543210"), NOW, "cust-9", count_spend=True)
    assert len(result) == 3
    created = result[-1]
    assert created == Customer(id="cust-9", name="Ravi", phone="9876543210", total_spent=590.0, visits=1,
                               last_visit=NOW)
