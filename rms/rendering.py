"""Rich renderables for each page."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence

from rich.console import Group
from rich.table import Table as RichTable
from rich.text import Text

from rms.export import format_money
from rms.links import qr_code_url, table_menu_url
from rms.models import AVAILABLE, OCCUPIED, AppState, MenuItem, Order, Table
from rms.reports import Report, dashboard_stats, stock_status
from rms.specials import SpecialDish

POINTER = "➤ "


def badge_style(status: str) -> str:
    """Return a consistent badge style for table statuses."""
    if status == OCCUPIED:
        return "bold #ffffff on #b23a48"
    if status == AVAILABLE:
        return "bold #0b1f0f on #5fbf72"
    return "bold #1f1a0b on #e0b84a"


def stock_style(item: MenuItem) -> str:
    status = stock_status(item)
    if status == "Out of Stock":
        return "bold #ff6b6b"
    if status == "Low Stock":
        return "#e0b84a"
    return "#5fbf72"


def window_bounds(total: int, rows: int, selected: int | None) -> tuple[int, int]:
    """Visible slice of a list of `total` rows that keeps `selected` near the middle."""
    if total <= 0:
        return (0, 0)

    rows = max(1, rows)
    if total <= rows:
        return (0, total)

    if selected is None:
        start = 0
    else:
        start = selected - rows // 2
        start = max(0, start)
        start = min(start, total - rows)

    return (start, start + rows)


def _pointer(idx: int, cursor: int | None) -> str:
    return POINTER if idx == cursor else "  "


def _grid(*headers: str) -> RichTable:
    grid = RichTable(box=None, expand=True, pad_edge=False, header_style="bold")
    grid.add_column("", width=2, no_wrap=True)
    for header in headers:
        grid.add_column(header)
    return grid


def render_dashboard(state: AppState, now: datetime) -> Text:
    stats = dashboard_stats(state, now)
    text = Text()
    text.append("Total Sales Today   ", style="bold")
    text.append(f"{format_money(stats.total_sales)}\n", style="#5fbf72")
    text.append("Expenses Today      ", style="bold")
    text.append(f"{format_money(stats.expenses_today)}\n", style="#ff6b6b")
    text.append("Occupied Tables     ", style="bold")
    text.append(f"{stats.occupied_tables} / {stats.table_count}\n")
    text.append("Active Orders       ", style="bold")
    text.append(f"{stats.active_orders}\n\n")

    low = [item for item in state.menu if stock_status(item) != "In Stock"]
    if low:
        text.append("Stock alerts\n", style="bold")
        for item in low:
            text.append(f"  {item.name}: {stock_status(item)} ({item.stock})\n", style=stock_style(item))
    return text


def format_table_label(table: Table) -> Text:
    text = Text()
    text.append(f" {table.status} ", style=badge_style(table.status))
    text.append(f" {table.name}  {table.capacity} seats")
    return text


def render_tables(state: AppState, cursor: int | None, start: int, end: int) -> Text:
    text = Text()
    if start > 0:
        text.append("⋮\n", style="dim")
    for idx in range(start, end):
        table = state.tables[idx]
        if idx > start:
            text.append("\n")
        text.append(_pointer(idx, cursor))
        text.append_text(format_table_label(table))
        order = state.order_for_table(table.id)
        if order is not None:
            text.append(f"  {len(order.items)} line(s), {format_money(order.total)}", style="dim")
    if end < len(state.tables):
        text.append("\n⋮", style="dim")
    return text


def render_table_qr(table: Table) -> Text:
    link = table_menu_url(table.id)
    text = Text()
    text.append(f"QR Menu for {table.name}\n", style="bold")
    text.append("Scan this code with your phone to view the menu for this table.\n\n")
    text.append(f"Menu link: {link}\n")
    text.append(f"QR image:  {qr_code_url(link)}\n", style="dim")
    return text


def render_order(state: AppState, order: Order, cursor: int | None) -> Group:
    table = state.find_table(order.table_id)
    title = Text(f"Order {order.id}  Table {table.name if table else order.table_id}\n", style="bold")
    customer = Text(
        f"Customer: {order.customer_name or 'N/A'} ({order.customer_phone or 'N/A'})\n",
        style="dim",
    )

    lines = _grid("Item", "Qty", "Rate", "Amount")
    if not order.items:
        lines.add_row("", "(no items yet)", "", "", "")
    for idx, item in enumerate(order.items):
        lines.add_row(_pointer(idx, cursor), item.name, str(item.quantity), format_money(item.price), format_money(item.amount))

    totals = Text()
    totals.append(f"\nSubtotal  {format_money(order.subtotal)}\n")
    for tax in order.tax_lines:
        totals.append(f"{tax.name} ({tax.rate:g}%)  {format_money(tax.amount)}\n", style="dim")
    totals.append(f"Total  {format_money(order.total)}", style="bold")
    return Group(title, customer, lines, totals)


def render_menu_results(items: Sequence[MenuItem], cursor: int | None, start: int, end: int) -> Text:
    if not items:
        return Text("No results")
    text = Text()
    if start > 0:
        text.append("⋮\n", style="dim")
    for idx in range(start, end):
        item = items[idx]
        if idx > start:
            text.append("\n")
        text.append(_pointer(idx, cursor))
        text.append(f"{item.name}  {format_money(item.price)}  ")
        text.append(f"[{item.stock}]", style=stock_style(item))
    if end < len(items):
        text.append("\n⋮", style="dim")
    return text


def render_menu(state: AppState, cursor: int | None) -> RichTable:
    grid = _grid("Name", "Category", "Price", "Stock", "Status")
    for idx, item in enumerate(state.menu):
        grid.add_row(
            _pointer(idx, cursor),
            item.name,
            item.category,
            format_money(item.price),
            str(item.stock),
            Text(stock_status(item), style=stock_style(item)),
        )
    return grid


def render_customers(state: AppState, cursor: int | None) -> RichTable:
    grid = _grid("Name", "Phone", "Total Spent", "Visits", "Last Visit")
    for idx, customer in enumerate(state.customers):
        grid.add_row(
            _pointer(idx, cursor),
            customer.name,
            customer.phone,
            format_money(customer.total_spent),
            str(customer.visits),
            f"{customer.last_visit:%Y-%m-%d}",
        )
    return grid


def render_staff(state: AppState, cursor: int | None) -> RichTable:
    grid = _grid("Name", "Role", "Phone", "Email", "Salary", "Status")
    for idx, member in enumerate(state.staff):
        status = Text("Active", style="#5fbf72") if member.is_active else Text("Inactive", style="dim")
        grid.add_row(
            _pointer(idx, cursor),
            member.name,
            member.role,
            member.phone,
            member.email,
            format_money(member.salary),
            status,
        )
    return grid


def render_report(report: Report) -> Group:
    title = Text()
    title.append(f"{report.kind.title()} Report", style="bold")
    title.append(f"  [{report.frame}]", style="dim")
    if report.total is not None:
        title.append(f"  Total: {format_money(report.total)}")
    grid = _grid(*report.headers)
    if not report.rows:
        grid.add_row("", "(no records)", *([""] * (len(report.headers) - 1)))
    for row in report.rows:
        grid.add_row("", *(format_money(cell) if isinstance(cell, float) else str(cell) for cell in row))
    return Group(title, Text(""), grid)


def render_specials(specials: Iterable[SpecialDish], loading: bool, error: str | None) -> Text:
    text = Text()
    text.append("Chef's AI Assistant\n", style="bold")
    text.append("Suggest daily specials from the current inventory.\n\n", style="dim")
    if loading:
        text.append("Generating...\n")
        return text
    if error:
        text.append(f"{error}\n", style="#ff6b6b")
        return text
    for special in specials:
        text.append(f"{special.name}", style="bold #4ab3e0")
        text.append(f"  {format_money(special.price)}\n")
        text.append(f"  {special.description}\n")
        text.append(f"  Ingredients: {', '.join(special.ingredients)}\n\n", style="dim")
    return text


SETTINGS_SECTIONS = ("taxes", "tables", "categories")


def render_settings(state: AppState, section: str, cursor: int | None) -> Group:
    tabs = Text()
    for name in SETTINGS_SECTIONS:
        tabs.append(f" {name.title()} ", style="reverse" if name == section else "dim")
        tabs.append(" ")

    if section == "taxes":
        grid = _grid("Tax", "Rate", "Enabled")
        for idx, tax in enumerate(state.taxes):
            grid.add_row(_pointer(idx, cursor), tax.name, f"{tax.rate:g}%", "on" if tax.enabled else "off")
    elif section == "tables":
        grid = _grid("Table", "Capacity", "Status")
        for idx, table in enumerate(state.tables):
            grid.add_row(_pointer(idx, cursor), table.name, str(table.capacity), table.status)
    else:
        grid = _grid("Category", "Items")
        for idx, category in enumerate(state.categories):
            used = sum(1 for item in state.menu if item.category == category)
            grid.add_row(_pointer(idx, cursor), category, str(used))
    return Group(tabs, Text(""), grid)


def render_qr_menu(state: AppState, table_id: int) -> Text:
    """Public read-only menu: in-stock items grouped by category."""
    table = state.find_table(table_id)
    text = Text()
    if table is None:
        text.append("Table not found.\n", style="bold #ff6b6b")
        return text
    text.append(f"Welcome! You're at {table.name}\n", style="bold")
    text.append("Here is our menu. A waiter will be with you shortly.\n\n", style="dim")
    available = [item for item in state.menu if item.stock > 0]
    for category in state.categories:
        items = [item for item in available if item.category == category]
        if not items:
            continue
        text.append(f"{category}\n", style="bold #4ab3e0")
        for item in items:
            text.append(f"  {item.name}  {format_money(item.price)}\n")
    return text


def render_offer_links(links: Sequence[tuple[str, str]]) -> Text:
    text = Text()
    text.append(f"Offer links ({len(links)})\n\n", style="bold")
    for name, url in links:
        text.append(f"{name}\n")
        text.append(f"  {url}\n", style="dim")
    return text
