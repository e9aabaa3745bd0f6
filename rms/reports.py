"""Report rows and dashboard figures derived from state."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from rms.config import LOW_STOCK_THRESHOLD
from rms.models import OCCUPIED, AppState, Expense, MenuItem, Order

TIME_FRAMES = ("today", "week", "month", "all")
REPORT_KINDS = ("sales", "inventory", "credit", "expenses")

Cell = str | float | int


@dataclass(frozen=True)
class Report:
    kind: str
    frame: str
    headers: tuple[str, ...]
    rows: list[tuple[Cell, ...]]
    total: float | None = None


@dataclass(frozen=True)
class DashboardStats:
    total_sales: float
    expenses_today: float
    occupied_tables: int
    table_count: int
    active_orders: int


def in_time_frame(when: datetime, frame: str, now: datetime) -> bool:
    """Whether `when` falls in the frame; weeks start on Sunday."""
    if frame == "all":
        return True
    if frame == "today":
        return when.date() == now.date()
    if frame == "week":
        days_since_sunday = (now.weekday() + 1) % 7
        start = (now - timedelta(days=days_since_sunday)).replace(hour=0, minute=0, second=0, microsecond=0)
        return when >= start
    if frame == "month":
        return when.year == now.year and when.month == now.month
    raise ValueError(f"Unknown time frame: {frame!r}")


def stock_status(item: MenuItem) -> str:
    if item.stock == 0:
        return "Out of Stock"
    if item.stock <= LOW_STOCK_THRESHOLD:
        return "Low Stock"
    return "In Stock"


def _orders_in(orders: tuple[Order, ...], frame: str, now: datetime) -> list[Order]:
    return [order for order in orders if in_time_frame(order.created_at, frame, now)]


def _expenses_in(expenses: tuple[Expense, ...], frame: str, now: datetime) -> list[Expense]:
    return [expense for expense in expenses if in_time_frame(expense.date, frame, now)]


def _stamp(when: datetime) -> str:
    return when.strftime("%Y-%m-%d %H:%M:%S")


def sales_report(state: AppState, frame: str, now: datetime) -> Report:
    orders = _orders_in(state.completed_orders, frame, now)
    rows = [
        (
            order.id,
            _stamp(order.created_at),
            order.customer_name or "N/A",
            order.customer_phone or "N/A",
            order.subtotal,
            order.tax,
            order.total,
        )
        for order in orders
    ]
    headers = ("Order ID", "Date", "Customer Name", "Customer Phone", "Subtotal", "Tax", "Total")
    return Report("sales", frame, headers, rows, total=sum((o.total for o in orders), 0.0))


def credit_report(state: AppState, frame: str, now: datetime) -> Report:
    orders = _orders_in(state.credit_records, frame, now)
    rows = [
        (order.id, _stamp(order.created_at), order.customer_name or "N/A", order.customer_phone or "N/A", order.total)
        for order in orders
    ]
    headers = ("Order ID", "Date", "Customer Name", "Customer Phone", "Credit Amount")
    return Report("credit", frame, headers, rows, total=sum((o.total for o in orders), 0.0))


def expenses_report(state: AppState, frame: str, now: datetime) -> Report:
    expenses = _expenses_in(state.expenses, frame, now)
    rows = [(e.id, _stamp(e.date), e.description, e.category, e.amount) for e in expenses]
    headers = ("Expense ID", "Date", "Description", "Category", "Amount")
    return Report("expenses", frame, headers, rows, total=sum((e.amount for e in expenses), 0.0))


def inventory_report(state: AppState, frame: str = "all", now: datetime | None = None) -> Report:
    """Current stock levels; the time frame does not apply."""
    rows = [(item.id, item.name, item.category, item.price, item.stock, stock_status(item)) for item in state.menu]
    headers = ("Item ID", "Name", "Category", "Price", "Stock", "Status")
    return Report("inventory", "all", headers, rows)


_BUILDERS = {
    "sales": sales_report,
    "credit": credit_report,
    "expenses": expenses_report,
    "inventory": inventory_report,
}


def build_report(state: AppState, kind: str, frame: str, now: datetime) -> Report:
    builder = _BUILDERS.get(kind)
    if builder is None:
        raise ValueError(f"Unknown report: {kind!r}")
    return builder(state, frame, now)


def dashboard_stats(state: AppState, now: datetime) -> DashboardStats:
    return DashboardStats(
        total_sales=state.total_sales,
        expenses_today=sum((e.amount for e in _expenses_in(state.expenses, "today", now)), 0.0),
        occupied_tables=sum(1 for table in state.tables if table.status == OCCUPIED),
        table_count=len(state.tables),
        active_orders=len(state.orders),
    )
