from datetime import datetime
from itertools import count

import pytest

from rms import config
from rms.commands import (
    AddCategory,
    AddCustomer,
    AddExpense,
    AddItemToOrder,
    AddMenuItem,
    AddStaff,
    AddTable,
    AddTax,
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
from rms.data import initial_state
from rms.models import (
    AVAILABLE,
    OCCUPIED,
    RESERVED,
    AppState,
    DashboardPage,
    MenuPage,
    OrderPage,
    QRMenuPage,
    TablesPage,
)
from rms.store import Store, apply

NOW = datetime(2024, 6, 12, 14, 30)


def _ids():
    counter = count(1)
    return lambda prefix: f"{prefix}-{next(counter)}"


def _run(state: AppState, *commands, make_id=None):
    """Apply commands in order; return the final state and the last alert."""
    make_id = make_id or _ids()
    alert = None
    for command in commands:
        transition = apply(state, command, now=NOW, make_id=make_id)
        state, alert = transition.state, transition.alert
    return state, alert


def _stock(state: AppState, item_id: str) -> int:
    return state.find_menu_item(item_id).stock


def _committed(state: AppState, item_id: str) -> int:
    return sum(line.quantity for order in state.orders for line in order.items if line.id == item_id)


def _open(state: AppState | None = None, table_id: int = 1) -> AppState:
    state, _ = _run(state or initial_state(NOW), OpenTable(table_id))
    return state


def test_open_table_starts_order_and_occupies_table() -> None:
    state = _open()
    assert len(state.orders) == 1
    order = state.orders[0]
    assert order.table_id == 1
    assert order.items == ()
    assert order.created_at == NOW
    assert state.find_table(1).status == OCCUPIED
    assert state.page == OrderPage(order.id)
    assert state.active_order == order


def test_open_occupied_table_resumes_its_order() -> None:
    state = _open()
    order_id = state.orders[0].id
    state, _ = _run(state, SetPage(TablesPage()), OpenTable(1))
    assert len(state.orders) == 1
    assert state.page == OrderPage(order_id)


def test_open_reserved_table_is_ignored() -> None:
    state, _ = _run(initial_state(NOW), UpdateTableStatus(2, RESERVED))
    after = apply(state, OpenTable(2), now=NOW).state
    assert after is state


def test_table_status_updates_and_guards() -> None:
    state, alert = _run(initial_state(NOW), UpdateTableStatus(3, RESERVED))
    assert alert is None
    assert state.find_table(3).status == RESERVED

    state, alert = _run(state, UpdateTableStatus(3, AVAILABLE))
    assert state.find_table(3).status == AVAILABLE

    _, alert = _run(state, UpdateTableStatus(3, OCCUPIED))
    assert alert == "Tables become occupied only by starting an order."

    opened = _open(state, table_id=3)
    after, alert = _run(opened, UpdateTableStatus(3, AVAILABLE))
    assert alert == "Table T-3 has an open order; settle it first."
    assert after.find_table(3).status == OCCUPIED


def test_add_item_takes_stock_and_recomputes_totals() -> None:
    state, _ = _run(_open(), AddItemToOrder("bev001"), AddItemToOrder("bev001"))
    order = state.active_order
    assert [(line.id, line.quantity) for line in order.items] == [("bev001", 2)]
    assert _stock(state, "bev001") == 48
    assert order.subtotal == pytest.approx(698)
    assert order.tax == pytest.approx(698 * 0.18)
    assert order.total == pytest.approx(698 * 1.18)


def test_add_out_of_stock_item_is_ignored() -> None:
    state = _open()
    assert apply(state, AddItemToOrder("des002"), now=NOW).state is state


def test_add_item_without_active_order_is_ignored() -> None:
    state, _ = _run(_open(), SetPage(MenuPage()))
    assert apply(state, AddItemToOrder("bev001"), now=NOW).state is state


def test_update_quantity_moves_stock_by_difference() -> None:
    state, _ = _run(_open(), AddItemToOrder("grill001"), UpdateItemQuantity("grill001", 4))
    assert state.active_order.item("grill001").quantity == 4
    assert _stock(state, "grill001") == 11

    state, _ = _run(state, UpdateItemQuantity("grill001", 2))
    assert _stock(state, "grill001") == 13


def test_update_quantity_beyond_stock_is_rejected() -> None:
    state, _ = _run(_open(), AddItemToOrder("grill001"))
    after, alert = _run(state, UpdateItemQuantity("grill001", 20))
    assert alert == "Not enough stock for Grilled Salmon (only 14 left)."
    assert after is state


def test_quantity_zero_or_negative_removes_line_and_restores_stock() -> None:
    state, _ = _run(_open(), AddItemToOrder("app001"), AddItemToOrder("app001"))
    for quantity in (0, -3):
        after, _ = _run(state, UpdateItemQuantity("app001", quantity))
        assert after.active_order.items == ()
        assert _stock(after, "app001") == 30
        assert after.active_order.total == 0


def test_remove_item_restores_stock() -> None:
    state, _ = _run(_open(), AddItemToOrder("pasta001"), UpdateItemQuantity("pasta001", 3), AddItemToOrder("bev002"))
    state, _ = _run(state, RemoveItemFromOrder("pasta001"))
    assert [line.id for line in state.active_order.items] == ["bev002"]
    assert _stock(state, "pasta001") == 20
    assert state.active_order.subtotal == pytest.approx(149)


def test_stock_is_conserved_across_line_edits() -> None:
    initial = initial_state(NOW)
    state, _ = _run(
        _open(initial),
        AddItemToOrder("main001"),
        UpdateItemQuantity("main001", 7),
        AddItemToOrder("main001"),
        UpdateItemQuantity("main001", 99),
        SetPage(TablesPage()),
        OpenTable(2),
        AddItemToOrder("main001"),
        UpdateItemQuantity("main001", 3),
    )
    assert _stock(state, "main001") + _committed(state, "main001") == _stock(initial, "main001")
    assert _committed(state, "main001") == 11


def test_finalize_bill_settles_order() -> None:
    state, _ = _run(
        _open(),
        AddItemToOrder("main001"),
        UpdateCustomerDetails(" John Doe ", "1234567890"),
    )
    order = state.active_order
    assert order.customer_name == "John Doe"

    settled, alert = _run(state, FinalizeBill(order.id))
    assert alert is None
    assert settled.orders == ()
    assert settled.completed_orders == (order,)
    assert settled.find_table(1).status == AVAILABLE
    assert settled.page == TablesPage()
    assert settled.total_sales == pytest.approx(state.total_sales + order.total)
    john = next(c for c in settled.customers if c.phone == "1234567890")
    assert john.visits == 6
    assert john.total_spent == pytest.approx(12550 + order.total)
    assert john.last_visit == NOW


def test_move_to_credit_keeps_sales_and_spend() -> None:
    state, _ = _run(_open(), AddItemToOrder("des001"), UpdateCustomerDetails("Ravi", "9876543210"))
    order = state.active_order
    settled, _ = _run(state, MoveToCredit(order.id))
    assert settled.credit_records == (order,)
    assert settled.completed_orders == ()
    assert settled.total_sales == state.total_sales
    assert settled.find_table(1).status == AVAILABLE
    ravi = next(c for c in settled.customers if c.phone == "9876543210")
    assert (ravi.visits, ravi.total_spent) == (1, 0)


def test_finalize_unknown_order_is_ignored() -> None:
    state = initial_state(NOW)
    assert apply(state, FinalizeBill("missing"), now=NOW).state is state


def test_set_page_redirects_unknown_targets() -> None:
    state, _ = _run(initial_state(NOW), SetPage(OrderPage("missing")))
    assert state.page == TablesPage()
    state, _ = _run(state, SetPage(QRMenuPage(99)))
    assert state.page == DashboardPage()
    state, _ = _run(state, SetPage(QRMenuPage(4)))
    assert state.page == QRMenuPage(4)
    assert state.active_order_id is None


def test_tax_toggle_keeps_open_order_totals_by_default() -> None:
    state, _ = _run(_open(), AddItemToOrder("bev001"))
    before = state.active_order.total
    state, _ = _run(state, ToggleTaxStatus("tax-2"))
    assert state.active_order.total == before

    state, _ = _run(state, AddItemToOrder("bev001"))
    assert state.active_order.tax == pytest.approx(698 * 0.23)


def test_tax_change_can_recompute_open_orders(monkeypatch) -> None:
    monkeypatch.setattr(config, "RECOMPUTE_OPEN_ORDERS_ON_TAX_CHANGE", True)
    state, _ = _run(_open(), AddItemToOrder("bev001"), ToggleTaxStatus("tax-1"))
    assert state.active_order.tax == 0
    assert state.active_order.total == pytest.approx(349)


def test_tax_settings() -> None:
    state, alert = _run(initial_state(NOW), AddTax("Cess", 2))
    assert alert is None
    assert [tax.name for tax in state.taxes] == ["GST", "Service Charge", "Cess"]

    _, alert = _run(state, AddTax("gst", 5))
    assert alert == "A tax with this name already exists."
    _, alert = _run(state, AddTax("Luxury", -1))
    assert alert == "Invalid tax name or rate."

    state, _ = _run(state, DeleteTax("tax-1"))
    assert [tax.id for tax in state.taxes][0] == "tax-2"


def test_category_settings() -> None:
    state, alert = _run(initial_state(NOW), AddCategory("Specials"))
    assert alert is None
    assert state.categories[-1] == "Specials"

    _, alert = _run(state, AddCategory(" beverages "))
    assert alert == "Category already exists or is empty."

    _, alert = _run(state, DeleteCategory("Beverages"))
    assert alert == 'Cannot delete category "Beverages" as it is currently being used by menu items.'

    state, _ = _run(state, DeleteCategory("Soups"))
    assert "Soups" not in state.categories


def test_table_settings() -> None:
    state, alert = _run(initial_state(NOW), AddTable("Patio", 4))
    assert alert is None
    assert state.tables[-1].id == 13
    assert state.tables[-1].status == AVAILABLE

    _, alert = _run(state, AddTable("t-1", 2))
    assert alert == "A table with this name already exists."
    _, alert = _run(state, AddTable("Bar", 0))
    assert alert == "Invalid table name or capacity."

    opened = _open(state, table_id=5)
    _, alert = _run(opened, DeleteTable(5))
    assert alert == "Cannot delete a table that is currently occupied or reserved."

    state, _ = _run(state, DeleteTable(5))
    assert state.find_table(5) is None


def test_add_menu_item() -> None:
    state, alert = _run(initial_state(NOW), AddMenuItem("Tomato Soup", "Soups", 199, 12))
    assert alert is None
    item = state.menu[-1]
    assert (item.id, item.name, item.category, item.price, item.stock) == ("menu-1", "Tomato Soup", "Soups", 199, 12)

    _, alert = _run(state, AddMenuItem("espresso", "Beverages", 99, 1))
    assert alert == 'A menu item named "espresso" already exists.'
    _, alert = _run(state, AddMenuItem("Ramen", "Noodles", 99, 1))
    assert alert is not None


def test_add_expense() -> None:
    state, alert = _run(initial_state(NOW), AddExpense("Gas refill", 1200, "Utilities"))
    assert alert is None
    assert state.expenses[0].description == "Gas refill"
    assert state.expenses[0].date == NOW

    _, alert = _run(state, AddExpense("Gas refill", 0, "Utilities"))
    assert alert is not None


def test_pay_salaries_records_active_staff_total() -> None:
    state, alert = _run(initial_state(NOW), PaySalaries())
    assert alert is None
    expense = state.expenses[0]
    assert expense.amount == pytest.approx(75000 + 40000 + 45000)
    assert expense.category == "Salaries"
    assert expense.description == "Staff Salaries for June 2024"


def test_customers_and_staff() -> None:
    state, alert = _run(initial_state(NOW), AddCustomer("Ravi", "9876543210"))
    assert alert is None
    assert state.customers[0].name == "Ravi"
    assert state.customers[0].visits == 0

    _, alert = _run(state, AddCustomer("Someone", "1234567890"))
    assert alert == "A customer with this phone number already exists."
    _, alert = _run(state, AddCustomer("", "111"))
    assert alert == "Please enter both name and phone number."

    state, alert = _run(state, AddStaff("Eve", "Waiter", "555-0199", "eve@rmspro.io", 30000))
    assert alert is None
    assert state.staff[0].is_active
    _, alert = _run(state, AddStaff("Mallory", "Waiter", "555-0101", "m@rmspro.io", 30000))
    assert alert == "A staff member with this phone number already exists."

    state, _ = _run(state, ToggleStaffStatus("staff-3"))
    assert next(m for m in state.staff if m.id == "staff-3").is_active


def test_apply_rejects_unknown_command() -> None:
    with pytest.raises(TypeError):
        apply(initial_state(NOW), object(), now=NOW)


def test_store_notifies_only_on_change() -> None:
    store = Store(initial_state(NOW), clock=lambda: NOW, make_id=_ids())
    seen = []
    unsubscribe = store.subscribe(seen.append)

    assert store.dispatch(OpenTable(1)) is None
    assert seen == [store.state]

    assert store.dispatch(AddCustomer("Dup", "1234567890")) == "A customer with this phone number already exists."
    assert store.dispatch(OpenTable(999)) is None
    assert len(seen) == 1

    unsubscribe()
    store.dispatch(AddItemToOrder("bev001"))
    assert len(seen) == 1
    assert store.state.active_order.items[0].id == "bev001"


@pytest.mark.parametrize(
    "command",
    [
        DeleteTax("missing"),
        ToggleTaxStatus("missing"),
        DeleteCategory("Nope"),
        ToggleStaffStatus("missing"),
        DeleteTable(99),
        UpdateTableStatus(2, "Cleaning"),
    ],
)
def test_commands_on_unknown_targets_keep_the_same_state(command) -> None:
    state = initial_state(NOW)
    transition = apply(state, command, now=NOW)
    assert transition.state is state
    assert transition.alert is None

    store = Store(state, clock=lambda: NOW, make_id=_ids())
    seen = []
    store.subscribe(seen.append)
    store.dispatch(command)
    assert seen == []


def test_order_tax_lines_follow_enabled_taxes() -> None:
    state, _ = _run(_open(), AddItemToOrder("bev001"))
    assert [line.name for line in state.active_order.tax_lines] == ["GST"]

    state, _ = _run(state, ToggleTaxStatus("tax-2"))
    assert [line.name for line in state.active_order.tax_lines] == ["GST"]

    state, _ = _run(state, AddItemToOrder("bev001"))
    order = state.active_order
    assert [line.name for line in order.tax_lines] == ["GST", "Service Charge"]
    assert order.subtotal + sum(line.amount for line in order.tax_lines) == pytest.approx(order.total)
