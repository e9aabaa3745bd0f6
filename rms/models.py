"""Domain models for rms."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

AVAILABLE = "Available"
OCCUPIED = "Occupied"
RESERVED = "Reserved"
TABLE_STATUSES = (AVAILABLE, OCCUPIED, RESERVED)


@dataclass(frozen=True)
class Table:
    """A dining table on the floor plan."""

    id: int
    name: str
    capacity: int
    status: str = AVAILABLE


@dataclass(frozen=True)
class MenuItem:
    """A sellable menu item with its remaining stock."""

    id: str
    name: str
    category: str
    price: float
    stock: int
    image_url: str = ""


@dataclass(frozen=True)
class OrderItem:
    """A line on an order, copied from the menu item at the time it was added."""

    id: str
    name: str
    category: str
    price: float
    quantity: int

    @property
    def amount(self) -> float:
        return self.price * self.quantity


@dataclass(frozen=True)
class TaxLine:
    """One tax charged on an order, fixed when its totals were last computed."""

    name: str
    rate: float
    amount: float


@dataclass(frozen=True)
class Order:
    id: str
    table_id: int
    created_at: datetime
    items: tuple[OrderItem, ...] = ()
    subtotal: float = 0.0
    tax: float = 0.0
    total: float = 0.0
    tax_lines: tuple[TaxLine, ...] = ()
    customer_name: str = ""
    customer_phone: str = ""

    def item(self, item_id: str) -> OrderItem | None:
        for line in self.items:
            if line.id == item_id:
                return line
        return None


@dataclass(frozen=True)
class Tax:
    """A tax configuration entry; `rate` is a percentage."""

    id: str
    name: str
    rate: float
    enabled: bool = True


@dataclass(frozen=True)
class Customer:
    id: str
    name: str
    phone: str
    total_spent: float
    visits: int
    last_visit: datetime


@dataclass(frozen=True)
class Staff:
    id: str
    name: str
    role: str
    phone: str
    email: str
    salary: float
    is_active: bool = True


@dataclass(frozen=True)
class Expense:
    id: str
    description: str
    amount: float
    category: str
    date: datetime


# Page variants. Each page carries only the fields it needs.


@dataclass(frozen=True)
class DashboardPage:
    title = "Dashboard"


@dataclass(frozen=True)
class TablesPage:
    title = "Tables"


@dataclass(frozen=True)
class OrderPage:
    order_id: str
    title = "Order"


@dataclass(frozen=True)
class MenuPage:
    title = "Menu"


@dataclass(frozen=True)
class CustomersPage:
    title = "Customers"


@dataclass(frozen=True)
class StaffPage:
    title = "Staff"


@dataclass(frozen=True)
class ReportsPage:
    title = "Reports"


@dataclass(frozen=True)
class SpecialsPage:
    title = "AI Specials"


@dataclass(frozen=True)
class SettingsPage:
    title = "Settings"


@dataclass(frozen=True)
class QRMenuPage:
    """Read-only public menu reached through a table's QR code."""

    table_id: int
    title = "QR Menu"


Page = (
    DashboardPage
    | TablesPage
    | OrderPage
    | MenuPage
    | CustomersPage
    | StaffPage
    | ReportsPage
    | SpecialsPage
    | SettingsPage
    | QRMenuPage
)


@dataclass(frozen=True)
class AppState:
    """The complete in-memory application state."""

    tables: tuple[Table, ...]
    menu: tuple[MenuItem, ...]
    categories: tuple[str, ...]
    taxes: tuple[Tax, ...]
    customers: tuple[Customer, ...]
    staff: tuple[Staff, ...]
    expenses: tuple[Expense, ...]
    orders: tuple[Order, ...] = ()
    completed_orders: tuple[Order, ...] = ()
    credit_records: tuple[Order, ...] = ()
    total_sales: float = 0.0
    page: Page = field(default_factory=DashboardPage)

    @property
    def active_order_id(self) -> str | None:
        if isinstance(self.page, OrderPage):
            return self.page.order_id
        return None

    @property
    def active_order(self) -> Order | None:
        order_id = self.active_order_id
        if order_id is None:
            return None
        return self.find_order(order_id)

    def find_order(self, order_id: str) -> Order | None:
        for order in self.orders:
            if order.id == order_id:
                return order
        return None

    def find_table(self, table_id: int) -> Table | None:
        for table in self.tables:
            if table.id == table_id:
                return table
        return None

    def find_menu_item(self, item_id: str) -> MenuItem | None:
        for item in self.menu:
            if item.id == item_id:
                return item
        return None

    def order_for_table(self, table_id: int) -> Order | None:
        for order in self.orders:
            if order.table_id == table_id:
                return order
        return None

    @property
    def enabled_taxes(self) -> tuple[Tax, ...]:
        return tuple(tax for tax in self.taxes if tax.enabled)
