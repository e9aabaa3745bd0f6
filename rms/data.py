"""Mock data wrapped into the initial application state."""

from __future__ import annotations

from datetime import datetime, timedelta

from rms.config import INITIAL_TOTAL_SALES
from rms.constant import (
    CUSTOMERS,
    EXPENSES,
    MENU_CATEGORIES,
    MENU_ITEMS,
    STAFF,
    TABLE_COUNT,
    TAXES,
)
from rms.models import AppState, Customer, DashboardPage, Expense, MenuItem, Staff, Table, Tax


def mock_tables(count: int = TABLE_COUNT) -> tuple[Table, ...]:
    """Tables T-1..T-n with capacities cycling 2, 4, 6, 8."""
    return tuple(
        Table(id=idx + 1, name=f"T-{idx + 1}", capacity=(idx % 4 + 1) * 2)
        for idx in range(count)
    )


def initial_state(now: datetime | None = None) -> AppState:
    """Build a fresh state from the static mock data."""
    now = now or datetime.now()

    menu = tuple(
        MenuItem(
            id=str(raw["id"]),
            name=str(raw["name"]),
            category=str(raw["category"]),
            price=float(raw["price"]),
            stock=int(raw["stock"]),
            image_url=str(raw.get("image_url", "")),
        )
        for raw in MENU_ITEMS
    )
    customers = tuple(
        Customer(
            id=str(raw["id"]),
            name=str(raw["name"]),
            phone=str(raw["phone"]),
            total_spent=float(raw["total_spent"]),
            visits=int(raw["visits"]),
            last_visit=datetime.fromisoformat(str(raw["last_visit"])),
        )
        for raw in CUSTOMERS
    )
    expenses = tuple(
        Expense(
            id=str(raw["id"]),
            description=str(raw["description"]),
            amount=float(raw["amount"]),
            category=str(raw["category"]),
            date=now - timedelta(days=int(raw["days_ago"])),
        )
        for raw in EXPENSES
    )
    staff = tuple(
        Staff(
            id=str(raw["id"]),
            name=str(raw["name"]),
            role=str(raw["role"]),
            phone=str(raw["phone"]),
            email=str(raw["email"]),
            salary=float(raw["salary"]),
            is_active=bool(raw["is_active"]),
        )
        for raw in STAFF
    )
    taxes = tuple(
        Tax(id=str(raw["id"]), name=str(raw["name"]), rate=float(raw["rate"]), enabled=bool(raw["enabled"]))
        for raw in TAXES
    )

    return AppState(
        tables=mock_tables(),
        menu=menu,
        categories=tuple(MENU_CATEGORIES),
        taxes=taxes,
        customers=customers,
        staff=staff,
        expenses=expenses,
        total_sales=INITIAL_TOTAL_SALES,
        page=DashboardPage(),
    )
