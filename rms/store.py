"""State transitions and the single controller that owns application state."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable
from uuid import uuid4

from rms import config
from rms.billing import recompute
from rms.commands import (
    AddCategory,
    AddCustomer,
    AddExpense,
    AddItemToOrder,
    AddMenuItem,
    AddStaff,
    AddTable,
    AddTax,
    Command,
    DeleteCategory,
    DeleteTable,
    DeleteTax,
    FinalizeBill,
    MoveToCredit,
    OpenTable,
    PaySalaries,
    RemoveItemFromOrder,
    SetPage,
    ToggleStaffStatus,
    ToggleTaxStatus,
    UpdateCustomerDetails,
    UpdateItemQuantity,
    UpdateTableStatus,
)
from rms.constant import EXPENSE_CATEGORIES, STAFF_ROLES
from rms.customers import upsert_customer
from rms.logger import log_debug, log_event, log_warning
from rms.models import (
    AVAILABLE,
    OCCUPIED,
    RESERVED,
    TABLE_STATUSES,
    AppState,
    Customer,
    DashboardPage,
    Expense,
    MenuItem,
    Order,
    OrderItem,
    OrderPage,
    QRMenuPage,
    Staff,
    Table,
    TablesPage,
    Tax,
)

IdFactory = Callable[[str], str]


@dataclass(frozen=True)
class Transition:
    """Result of applying one command; `alert` is set when input was rejected."""

    state: AppState
    alert: str | None = None


@dataclass(frozen=True)
class _Context:
    now: datetime
    make_id: IdFactory


def _reject(state: AppState, message: str) -> Transition:
    return Transition(state, alert=message)


def _replace_order(state: AppState, order: Order) -> tuple[Order, ...]:
    return tuple(order if existing.id == order.id else existing for existing in state.orders)


def _adjust_stock(menu: tuple[MenuItem, ...], item_id: str, delta: int) -> tuple[MenuItem, ...]:
    return tuple(replace(item, stock=item.stock + delta) if item.id == item_id else item for item in menu)


def _set_table_status(tables: tuple[Table, ...], table_id: int, status: str) -> tuple[Table, ...]:
    return tuple(replace(table, status=status) if table.id == table_id else table for table in tables)


def _with_items(state: AppState, order: Order, items: tuple[OrderItem, ...], menu: tuple[MenuItem, ...]) -> Transition:
    updated = recompute(replace(order, items=items), state.enabled_taxes)
    return Transition(replace(state, menu=menu, orders=_replace_order(state, updated)))


def _recompute_open_orders(state: AppState) -> AppState:
    if not config.RECOMPUTE_OPEN_ORDERS_ON_TAX_CHANGE:
        return state
    return replace(state, orders=tuple(recompute(order, state.enabled_taxes) for order in state.orders))


# Navigation and tables


def _set_page(state: AppState, cmd: SetPage, ctx: _Context) -> Transition:
    page = cmd.page
    if isinstance(page, OrderPage) and state.find_order(page.order_id) is None:
        log_debug(f"set_page redirect unknown order={page.order_id!r}")
        page = TablesPage()
    elif isinstance(page, QRMenuPage) and state.find_table(page.table_id) is None:
        log_debug(f"set_page redirect unknown table={page.table_id!r}")
        page = DashboardPage()
    return Transition(replace(state, page=page))


def _open_table(state: AppState, cmd: OpenTable, ctx: _Context) -> Transition:
    table = state.find_table(cmd.table_id)
    if table is None:
        return Transition(state)

    if table.status == OCCUPIED:
        existing = state.order_for_table(table.id)
        if existing is None:
            return Transition(state)
        return Transition(replace(state, page=OrderPage(existing.id)))

    if table.status != AVAILABLE:
        return Transition(state)

    order = Order(id=ctx.make_id("ord"), table_id=table.id, created_at=ctx.now)
    return Transition(
        replace(
            state,
            orders=state.orders + (order,),
            tables=_set_table_status(state.tables, table.id, OCCUPIED),
            page=OrderPage(order.id),
        )
    )


def _update_table_status(state: AppState, cmd: UpdateTableStatus, ctx: _Context) -> Transition:
    table = state.find_table(cmd.table_id)
    if table is None:
        return Transition(state)
    if cmd.status not in TABLE_STATUSES:
        log_debug(f"update_table_status unknown status={cmd.status!r}")
        return Transition(state)
    if cmd.status not in (AVAILABLE, RESERVED):
        return _reject(state, "Tables become occupied only by starting an order.")
    if state.order_for_table(table.id) is not None:
        return _reject(state, f"Table {table.name} has an open order; settle it first.")
    return Transition(replace(state, tables=_set_table_status(state.tables, table.id, cmd.status)))


# Order lines


def _add_item(state: AppState, cmd: AddItemToOrder, ctx: _Context) -> Transition:
    order = state.active_order
    if order is None:
        return Transition(state)
    menu_item = state.find_menu_item(cmd.item_id)
    if menu_item is None or menu_item.stock <= 0:
        return Transition(state)

    line = order.item(menu_item.id)
    if line is not None:
        items = tuple(replace(i, quantity=i.quantity + 1) if i.id == menu_item.id else i for i in order.items)
    else:
        added = OrderItem(
            id=menu_item.id,
            name=menu_item.name,
            category=menu_item.category,
            price=menu_item.price,
            quantity=1,
        )
        items = order.items + (added,)
    return _with_items(state, order, items, _adjust_stock(state.menu, menu_item.id, -1))


def _update_quantity(state: AppState, cmd: UpdateItemQuantity, ctx: _Context) -> Transition:
    order = state.active_order
    if order is None:
        return Transition(state)
    line = order.item(cmd.item_id)
    menu_item = state.find_menu_item(cmd.item_id)
    if line is None or menu_item is None:
        return Transition(state)

    quantity = max(cmd.quantity, 0)
    diff = quantity - line.quantity
    if menu_item.stock < diff:
        return _reject(state, f"Not enough stock for {menu_item.name} (only {menu_item.stock} left).")

    if quantity == 0:
        items = tuple(i for i in order.items if i.id != cmd.item_id)
    else:
        items = tuple(replace(i, quantity=quantity) if i.id == cmd.item_id else i for i in order.items)
    return _with_items(state, order, items, _adjust_stock(state.menu, cmd.item_id, -diff))


def _remove_item(state: AppState, cmd: RemoveItemFromOrder, ctx: _Context) -> Transition:
    order = state.active_order
    if order is None:
        return Transition(state)
    line = order.item(cmd.item_id)
    if line is None:
        return Transition(state)
    items = tuple(i for i in order.items if i.id != cmd.item_id)
    return _with_items(state, order, items, _adjust_stock(state.menu, cmd.item_id, line.quantity))


def _update_customer_details(state: AppState, cmd: UpdateCustomerDetails, ctx: _Context) -> Transition:
    order = state.active_order
    if order is None:
        return Transition(state)
    updated = replace(order, customer_name=cmd.name.strip(), customer_phone=cmd.phone.strip())
    return Transition(replace(state, orders=_replace_order(state, updated)))


# Settlement


def _settle(state: AppState, order_id: str, ctx: _Context, paid: bool) -> Transition:
    order = state.find_order(order_id)
    if order is None:
        return Transition(state)

    customers = upsert_customer(state.customers, order, ctx.now, ctx.make_id("cust"), count_spend=paid)
    settled = replace(
        state,
        orders=tuple(o for o in state.orders if o.id != order.id),
        tables=_set_table_status(state.tables, order.table_id, AVAILABLE),
        customers=customers,
        page=TablesPage(),
    )
    if paid:
        settled = replace(
            settled,
            completed_orders=state.completed_orders + (order,),
            total_sales=state.total_sales + order.total,
        )
    else:
        settled = replace(settled, credit_records=state.credit_records + (order,))
    return Transition(settled)


def _finalize_bill(state: AppState, cmd: FinalizeBill, ctx: _Context) -> Transition:
    return _settle(state, cmd.order_id, ctx, paid=True)


def _move_to_credit(state: AppState, cmd: MoveToCredit, ctx: _Context) -> Transition:
    return _settle(state, cmd.order_id, ctx, paid=False)


# Menu, expenses, people


def _add_menu_item(state: AppState, cmd: AddMenuItem, ctx: _Context) -> Transition:
    name = cmd.name.strip()
    if not name or cmd.category not in state.categories or cmd.price < 0 or cmd.stock < 0:
        return _reject(state, "Invalid menu item: name, category, price and stock are required.")
    if any(item.name.lower() == name.lower() for item in state.menu):
        return _reject(state, f'A menu item named "{name}" already exists.')
    item = MenuItem(
        id=ctx.make_id("menu"),
        name=name,
        category=cmd.category,
        price=float(cmd.price),
        stock=int(cmd.stock),
        image_url=cmd.image_url.strip(),
    )
    return Transition(replace(state, menu=state.menu + (item,)))


def _add_expense(state: AppState, cmd: AddExpense, ctx: _Context) -> Transition:
    description = cmd.description.strip()
    if not description or cmd.amount <= 0 or cmd.category not in EXPENSE_CATEGORIES:
        return _reject(state, "Invalid expense: description, positive amount and category are required.")
    expense = Expense(
        id=ctx.make_id("exp"),
        description=description,
        amount=float(cmd.amount),
        category=cmd.category,
        date=ctx.now,
    )
    return Transition(replace(state, expenses=(expense,) + state.expenses))


def _pay_salaries(state: AppState, cmd: PaySalaries, ctx: _Context) -> Transition:
    total = sum((member.salary for member in state.staff if member.is_active), 0.0)
    if total <= 0:
        return _reject(state, "No active staff with salaries to pay.")
    expense = Expense(
        id=ctx.make_id("exp-sal"),
        description=f"Staff Salaries for {ctx.now:%B %Y}",
        amount=total,
        category="Salaries",
        date=ctx.now,
    )
    return Transition(replace(state, expenses=(expense,) + state.expenses))


def _add_customer(state: AppState, cmd: AddCustomer, ctx: _Context) -> Transition:
    name, phone = cmd.name.strip(), cmd.phone.strip()
    if not name or not phone:
        return _reject(state, "Please enter both name and phone number.")
    if any(customer.phone == phone for customer in state.customers):
        return _reject(state, "A customer with this phone number already exists.")
    customer = Customer(
        id=ctx.make_id("cust"),
        name=name,
        phone=phone,
        total_spent=0.0,
        visits=0,
        last_visit=ctx.now,
    )
    return Transition(replace(state, customers=(customer,) + state.customers))


def _add_staff(state: AppState, cmd: AddStaff, ctx: _Context) -> Transition:
    name, phone, email = cmd.name.strip(), cmd.phone.strip(), cmd.email.strip()
    if not name or not phone or not email or cmd.salary <= 0 or cmd.role not in STAFF_ROLES:
        return _reject(state, "Please fill all staff fields correctly.")
    if any(member.phone == phone for member in state.staff):
        return _reject(state, "A staff member with this phone number already exists.")
    member = Staff(
        id=ctx.make_id("staff"),
        name=name,
        role=cmd.role,
        phone=phone,
        email=email,
        salary=float(cmd.salary),
    )
    return Transition(replace(state, staff=(member,) + state.staff))


def _toggle_staff(state: AppState, cmd: ToggleStaffStatus, ctx: _Context) -> Transition:
    if not any(member.id == cmd.staff_id for member in state.staff):
        return Transition(state)
    staff = tuple(
        replace(member, is_active=not member.is_active) if member.id == cmd.staff_id else member
        for member in state.staff
    )
    return Transition(replace(state, staff=staff))


# Settings


def _add_category(state: AppState, cmd: AddCategory, ctx: _Context) -> Transition:
    name = cmd.name.strip()
    if not name or any(existing.lower() == name.lower() for existing in state.categories):
        return _reject(state, "Category already exists or is empty.")
    return Transition(replace(state, categories=state.categories + (name,)))


def _delete_category(state: AppState, cmd: DeleteCategory, ctx: _Context) -> Transition:
    if cmd.name not in state.categories:
        return Transition(state)
    if any(item.category == cmd.name for item in state.menu):
        return _reject(state, f'Cannot delete category "{cmd.name}" as it is currently being used by menu items.')
    return Transition(replace(state, categories=tuple(c for c in state.categories if c != cmd.name)))


def _add_tax(state: AppState, cmd: AddTax, ctx: _Context) -> Transition:
    name = cmd.name.strip()
    if not name or cmd.rate < 0:
        return _reject(state, "Invalid tax name or rate.")
    if any(tax.name.lower() == name.lower() for tax in state.taxes):
        return _reject(state, "A tax with this name already exists.")
    tax = Tax(id=ctx.make_id("tax"), name=name, rate=float(cmd.rate), enabled=True)
    return Transition(_recompute_open_orders(replace(state, taxes=state.taxes + (tax,))))


def _delete_tax(state: AppState, cmd: DeleteTax, ctx: _Context) -> Transition:
    if not any(tax.id == cmd.tax_id for tax in state.taxes):
        return Transition(state)
    taxes = tuple(tax for tax in state.taxes if tax.id != cmd.tax_id)
    return Transition(_recompute_open_orders(replace(state, taxes=taxes)))


def _toggle_tax(state: AppState, cmd: ToggleTaxStatus, ctx: _Context) -> Transition:
    if not any(tax.id == cmd.tax_id for tax in state.taxes):
        return Transition(state)
    taxes = tuple(replace(tax, enabled=not tax.enabled) if tax.id == cmd.tax_id else tax for tax in state.taxes)
    return Transition(_recompute_open_orders(replace(state, taxes=taxes)))


def _add_table(state: AppState, cmd: AddTable, ctx: _Context) -> Transition:
    name = cmd.name.strip()
    if not name or cmd.capacity <= 0:
        return _reject(state, "Invalid table name or capacity.")
    if any(table.name.lower() == name.lower() for table in state.tables):
        return _reject(state, "A table with this name already exists.")
    next_id = max((table.id for table in state.tables), default=0) + 1
    table = Table(id=next_id, name=name, capacity=int(cmd.capacity))
    return Transition(replace(state, tables=state.tables + (table,)))


def _delete_table(state: AppState, cmd: DeleteTable, ctx: _Context) -> Transition:
    table = state.find_table(cmd.table_id)
    if table is None:
        return Transition(state)
    if table.status != AVAILABLE:
        return _reject(state, "Cannot delete a table that is currently occupied or reserved.")
    return Transition(replace(state, tables=tuple(t for t in state.tables if t.id != cmd.table_id)))


_HANDLERS: dict[type, Callable[[AppState, Command, _Context], Transition]] = {
    SetPage: _set_page,
    OpenTable: _open_table,
    UpdateTableStatus: _update_table_status,
    AddItemToOrder: _add_item,
    UpdateItemQuantity: _update_quantity,
    RemoveItemFromOrder: _remove_item,
    UpdateCustomerDetails: _update_customer_details,
    FinalizeBill: _finalize_bill,
    MoveToCredit: _move_to_credit,
    AddMenuItem: _add_menu_item,
    AddExpense: _add_expense,
    PaySalaries: _pay_salaries,
    AddCustomer: _add_customer,
    AddStaff: _add_staff,
    ToggleStaffStatus: _toggle_staff,
    AddCategory: _add_category,
    DeleteCategory: _delete_category,
    AddTax: _add_tax,
    DeleteTax: _delete_tax,
    ToggleTaxStatus: _toggle_tax,
    AddTable: _add_table,
    DeleteTable: _delete_table,
}


def _default_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:12]}"


def apply(
    state: AppState,
    command: Command,
    *,
    now: datetime | None = None,
    make_id: IdFactory = _default_id,
) -> Transition:
    """Apply one command to `state` and return the resulting transition without mutating anything."""
    handler = _HANDLERS.get(type(command))
    if handler is None:
        raise TypeError(f"Unsupported command: {command!r}")
    return handler(state, command, _Context(now=now or datetime.now(), make_id=make_id))


Listener = Callable[[AppState], None]


class Store:
    """Single writer for the application state."""

    def __init__(
        self,
        state: AppState,
        clock: Callable[[], datetime] = datetime.now,
        make_id: IdFactory = _default_id,
    ) -> None:
        self._state = state
        self._clock = clock
        self._make_id = make_id
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called after each accepted command; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, command: Command) -> str | None:
        """Apply `command`; return the rejection message when it was refused."""
        transition = apply(self._state, command, now=self._clock(), make_id=self._make_id)
        name = type(command).__name__
        if transition.alert is not None:
            log_warning(f"{name} rejected: {transition.alert}")
            return transition.alert
        if transition.state is self._state:
            log_debug(f"{name} ignored")
            return None

        self._state = transition.state
        log_event(f"{name} applied {command!r}")
        for listener in list(self._listeners):
            listener(self._state)
        return None
