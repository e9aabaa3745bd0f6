"""Main Textual app class."""

from __future__ import annotations

from datetime import datetime

from rich.console import RenderableType
from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Header, Static

from rms import commands
from rms.bill_modal import CREDIT, FINALIZE, PRINT, SEND, BillModal
from rms.config import RESTAURANT_NAME
from rms.constant import EXPENSE_CATEGORIES, STAFF_ROLES
from rms.data import initial_state
from rms.export import BillError, write_report_csv, send_bill
from rms.form_modal import FormField, FormModal
from rms.links import offer_links
from rms.logger import log_debug, log_error, log_event
from rms.models import (
    AVAILABLE,
    RESERVED,
    CustomersPage,
    DashboardPage,
    MenuItem,
    MenuPage,
    OrderPage,
    Page,
    QRMenuPage,
    ReportsPage,
    SettingsPage,
    SpecialsPage,
    StaffPage,
    TablesPage,
)
from rms.printer import check_printer_dependencies, print_invoice
from rms.rendering import (
    SETTINGS_SECTIONS,
    render_customers,
    render_dashboard,
    render_menu,
    render_menu_results,
    render_offer_links,
    render_order,
    render_qr_menu,
    render_report,
    render_settings,
    render_specials,
    render_staff,
    render_table_qr,
    render_tables,
    window_bounds,
)
from rms.reports import REPORT_KINDS, TIME_FRAMES, build_report
from rms.specials import SpecialDish, SpecialsError, generate_chef_specials
from rms.store import Store

NAV_KEYS = {
    "1": DashboardPage,
    "2": TablesPage,
    "4": MenuPage,
    "5": CustomersPage,
    "6": StaffPage,
    "7": ReportsPage,
    "8": SpecialsPage,
    "9": SettingsPage,
}

PAGE_HELP = {
    DashboardPage: "E add expense",
    TablesPage: "↑/↓ select, Enter open order, R reserve/free, Q QR menu",
    OrderPage: "/ search menu, ↑/↓ line, +/- qty, X remove, C customer, B bill, T tables",
    MenuPage: "A add menu item",
    CustomersPage: "A add customer, O send offer, B offer to all",
    StaffPage: "A add staff, T toggle active, P pay salaries",
    ReportsPage: "R report type, F time frame, X export CSV",
    SpecialsPage: "G generate today's specials",
    SettingsPage: "S section, A add, D delete, T toggle tax",
    QRMenuPage: "Esc back to dashboard",
}

PERSONAL_OFFER = "Hello {name}, we have a special offer for you at {restaurant}! Get 20% off on your next visit."
BULK_OFFER = "Hello! We're excited to announce our new special: [Your Offer Here]. Visit us soon to enjoy!"


class RmsApp(App):
    """A Textual front-of-house manager for tables, orders, menu, people and reports."""

    TITLE = "RMS Pro"
    SUB_TITLE = "Dashboard"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #page-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #side-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #search-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 3;
    }

    #page-body {
        height: 1fr;
        padding: 0 1;
    }

    #side-body {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #status-bar {
        height: 1;
        padding: 0 1;
        background: $panel;
    }
    """

    input_state = reactive("normal")
    search_query = reactive("")
    cursor = reactive(0)
    result_index = reactive(0)

    BINDINGS = [
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "select", "Select"),
        ("backspace", "backspace_query", "Delete query char"),
        ("escape", "back", "Back"),
        ("ctrl+c", "cancel_active_mode", "Exit search"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, store: Store | None = None, start_page: Page | None = None) -> None:
        super().__init__()
        self.store = store or Store(initial_state())
        self.start_page = start_page
        self.system_status = ""
        self.specials: list[SpecialDish] = []
        self.specials_loading = False
        self.specials_error: str | None = None
        self.report_kind = REPORT_KINDS[0]
        self.report_frame = "month"
        self.settings_section = SETTINGS_SECTIONS[0]
        self.offer_links: list[tuple[str, str]] = []
        self.store.subscribe(lambda _state: self._refresh_all())

    @property
    def page(self) -> Page:
        return self.store.state.page

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="page-pane"):
                yield Static(id="page-body")
            with Vertical(id="side-pane"):
                yield Static(id="search-bar")
                yield Static(id="side-body")
        yield Static(id="status-bar")

    def on_mount(self) -> None:
        _, msg = check_printer_dependencies()
        log_debug(f"on_mount printer_status={msg!r}")
        if self.start_page is not None:
            self._dispatch(commands.SetPage(self.start_page))
        self._refresh_all()

    # Input

    def _modal_open(self) -> bool:
        return isinstance(self.screen, ModalScreen)

    def on_key(self, event: Key) -> None:
        if self._modal_open():
            return
        char = event.character
        if not event.is_printable or not char or len(char) != 1:
            return

        if self.input_state == "active":
            self.search_query += char
            self.result_index = 0
            self._refresh_all()
            event.stop()
            return

        if isinstance(self.page, QRMenuPage):
            return

        key = char.lower()
        if key in NAV_KEYS:
            self._dispatch(commands.SetPage(NAV_KEYS[key]()))
            event.stop()
            return
        if key == "3":
            self._go_to_order()
            event.stop()
            return

        handler = {
            DashboardPage: self._dashboard_key,
            TablesPage: self._tables_key,
            OrderPage: self._order_key,
            MenuPage: self._menu_key,
            CustomersPage: self._customers_key,
            StaffPage: self._staff_key,
            ReportsPage: self._reports_key,
            SpecialsPage: self._specials_key,
            SettingsPage: self._settings_key,
        }.get(type(self.page))
        if handler is not None and handler(key):
            event.stop()

    def action_move_cursor(self, delta: int) -> None:
        if self._modal_open():
            return
        if self.input_state == "active":
            results = self._filtered_results()
            self.result_index = (self.result_index + delta) % len(results) if results else 0
        else:
            count = self._row_count()
            self.cursor = (self.cursor + delta) % count if count else 0
        self._refresh_all()

    def action_select(self) -> None:
        if self._modal_open():
            return
        if self.input_state == "active":
            results = self._filtered_results()
            if results:
                self._dispatch(commands.AddItemToOrder(results[self.result_index].id))
            return
        if isinstance(self.page, TablesPage):
            self._open_selected_table()

    def action_backspace_query(self) -> None:
        if self._modal_open() or self.input_state != "active" or not self.search_query:
            return
        self.search_query = self.search_query[:-1]
        self.result_index = 0
        self._refresh_all()

    def action_cancel_active_mode(self) -> None:
        if self._modal_open() or self.input_state == "normal":
            return
        self.input_state = "normal"
        self.search_query = ""
        self.result_index = 0
        self._refresh_all()

    def action_back(self) -> None:
        if self._modal_open():
            return
        if self.input_state == "active":
            self.action_cancel_active_mode()
            return
        if isinstance(self.page, QRMenuPage):
            self._dispatch(commands.SetPage(DashboardPage()))

    # Page handlers. Each returns True when it consumed the key.

    def _dashboard_key(self, key: str) -> bool:
        if key != "e":
            return False
        fields = [
            FormField("description", "Description"),
            FormField("category", "Category", choices=tuple(EXPENSE_CATEGORIES), value="Other"),
            FormField("amount", "Amount", numeric=True),
        ]

        def on_submit(values: dict[str, str] | None) -> None:
            if values is not None:
                self._dispatch(commands.AddExpense(values["description"], float(values["amount"]), values["category"]))

        self.push_screen(FormModal("Add New Expense", fields), on_submit)
        return True

    def _tables_key(self, key: str) -> bool:
        table = self._selected(self.store.state.tables)
        if table is None:
            return False
        if key == "o":
            self._open_selected_table()
        elif key == "r":
            target = AVAILABLE if table.status == RESERVED else RESERVED
            self._dispatch(commands.UpdateTableStatus(table.id, target))
        elif key == "q":
            self._dispatch(commands.SetPage(QRMenuPage(table.id)))
        else:
            return False
        return True

    def _order_key(self, key: str) -> bool:
        order = self.store.state.active_order
        if order is None:
            return False
        line = self._selected(order.items)
        if key == "/":
            self.input_state = "active"
            self.search_query = ""
            self.result_index = 0
            self._refresh_all()
        elif key in {"+", "="} and line is not None:
            self._dispatch(commands.UpdateItemQuantity(line.id, line.quantity + 1))
        elif key == "-" and line is not None:
            self._dispatch(commands.UpdateItemQuantity(line.id, line.quantity - 1))
        elif key == "x" and line is not None:
            self._dispatch(commands.RemoveItemFromOrder(line.id))
        elif key == "c":
            self._edit_customer_details()
        elif key == "b":
            self._open_bill()
        elif key == "t":
            self._dispatch(commands.SetPage(TablesPage()))
        else:
            return False
        return True

    def _menu_key(self, key: str) -> bool:
        if key != "a":
            return False
        categories = self.store.state.categories
        if not categories:
            self._set_status("Add a category in Settings first.")
            return True
        fields = [
            FormField("name", "Item Name"),
            FormField("category", "Category", choices=tuple(categories)),
            FormField("price", "Price", numeric=True),
            FormField("stock", "Stock Quantity", numeric=True),
        ]

        def on_submit(values: dict[str, str] | None) -> None:
            if values is not None:
                self._dispatch(
                    commands.AddMenuItem(
                        name=values["name"],
                        category=values["category"],
                        price=float(values["price"]),
                        stock=int(float(values["stock"])),
                    )
                )

        self.push_screen(FormModal("Add New Menu Item", fields), on_submit)
        return True

    def _customers_key(self, key: str) -> bool:
        if key == "a":
            fields = [FormField("name", "Customer Name"), FormField("phone", "Phone Number")]

            def on_submit(values: dict[str, str] | None) -> None:
                if values is not None:
                    self._dispatch(commands.AddCustomer(values["name"], values["phone"]))

            self.push_screen(FormModal("Add New Customer", fields), on_submit)
            return True
        if key == "o":
            customer = self._selected(self.store.state.customers)
            if customer is None:
                return True
            default = PERSONAL_OFFER.format(name=customer.name, restaurant=RESTAURANT_NAME)
            fields = [FormField("message", "Message", value=default)]

            def on_offer(values: dict[str, str] | None) -> None:
                if values is not None:
                    self._show_offers(f"Offer for {customer.name}", offer_links((customer,), values["message"]))

            self.push_screen(FormModal(f"Send Offer to {customer.name}", fields), on_offer)
            return True
        if key == "b":
            customers = self.store.state.customers
            if not customers:
                self._set_status("No customers to send an offer to.")
                return True
            fields = [FormField("message", "Message", value=BULK_OFFER)]

            def on_bulk(values: dict[str, str] | None) -> None:
                if values is not None:
                    links = offer_links(self.store.state.customers, values["message"])
                    self._show_offers(f"Offer queued for {len(links)} customers", links)

            self.push_screen(FormModal(f"Send Bulk Offer to {len(customers)} Customers", fields), on_bulk)
            return True
        return False

    def _show_offers(self, summary: str, links: list[tuple[str, str]]) -> None:
        if not links:
            self._set_status("No customer has a phone number to send to.")
            return
        self.offer_links = links
        for name, url in links:
            log_event(f"offer_link customer={name!r} url={url}")
        self._set_status(f"{summary}: {links[0][1]}" if len(links) == 1 else summary)

    def _staff_key(self, key: str) -> bool:
        if key == "a":
            fields = [
                FormField("name", "Full Name"),
                FormField("email", "Email"),
                FormField("phone", "Phone Number"),
                FormField("role", "Role", choices=tuple(STAFF_ROLES), value="Waiter"),
                FormField("salary", "Monthly Salary", numeric=True),
            ]

            def on_submit(values: dict[str, str] | None) -> None:
                if values is not None:
                    self._dispatch(
                        commands.AddStaff(
                            name=values["name"],
                            role=values["role"],
                            phone=values["phone"],
                            email=values["email"],
                            salary=float(values["salary"]),
                        )
                    )

            self.push_screen(FormModal("Add New Staff Member", fields), on_submit)
            return True
        if key == "t":
            member = self._selected(self.store.state.staff)
            if member is not None:
                self._dispatch(commands.ToggleStaffStatus(member.id))
            return True
        if key == "p":
            if self._dispatch(commands.PaySalaries()) is None:
                self._set_status("Salary expense has been recorded.")
            return True
        return False

    def _reports_key(self, key: str) -> bool:
        if key == "r":
            self.report_kind = REPORT_KINDS[(REPORT_KINDS.index(self.report_kind) + 1) % len(REPORT_KINDS)]
        elif key == "f":
            self.report_frame = TIME_FRAMES[(TIME_FRAMES.index(self.report_frame) + 1) % len(TIME_FRAMES)]
        elif key == "x":
            report = build_report(self.store.state, self.report_kind, self.report_frame, datetime.now())
            if not report.rows:
                self._set_status("Nothing to export.")
                return True
            path = write_report_csv(report)
            log_event(f"report_exported kind={report.kind} frame={report.frame} path={path}")
            self._set_status(f"Exported {path}")
            return True
        else:
            return False
        self._refresh_all()
        return True

    def _specials_key(self, key: str) -> bool:
        if key != "g" or self.specials_loading:
            return False
        self.specials_loading = True
        self.specials_error = None
        self.specials = []
        self._refresh_all()
        self.generate_specials(self.store.state.menu)
        return True

    def _settings_key(self, key: str) -> bool:
        state = self.store.state
        section = self.settings_section
        if key == "s":
            idx = SETTINGS_SECTIONS.index(section)
            self.settings_section = SETTINGS_SECTIONS[(idx + 1) % len(SETTINGS_SECTIONS)]
            self.cursor = 0
            self._refresh_all()
            return True
        if key == "a":
            self._add_setting(section)
            return True
        if key == "d":
            if section == "taxes" and (tax := self._selected(state.taxes)) is not None:
                self._dispatch(commands.DeleteTax(tax.id))
            elif section == "tables" and (table := self._selected(state.tables)) is not None:
                self._dispatch(commands.DeleteTable(table.id))
            elif section == "categories" and (category := self._selected(state.categories)) is not None:
                self._dispatch(commands.DeleteCategory(category))
            return True
        if key == "t" and section == "taxes":
            tax = self._selected(state.taxes)
            if tax is not None:
                self._dispatch(commands.ToggleTaxStatus(tax.id))
            return True
        return False

    # Actions

    def _dispatch(self, command: commands.Command) -> str | None:
        alert = self.store.dispatch(command)
        self._set_status(alert or "")
        return alert

    def _set_status(self, message: str) -> None:
        self.system_status = message
        self._refresh_all()

    def _go_to_order(self) -> None:
        state = self.store.state
        if state.active_order is not None:
            return
        if not state.orders:
            self._dispatch(commands.SetPage(TablesPage()))
            self._set_status("No active order selected. Please select a table first.")
            return
        self._dispatch(commands.SetPage(OrderPage(state.orders[0].id)))

    def _open_selected_table(self) -> None:
        table = self._selected(self.store.state.tables)
        if table is not None:
            self.cursor = 0
            self._dispatch(commands.OpenTable(table.id))

    def _edit_customer_details(self) -> None:
        order = self.store.state.active_order
        if order is None:
            return
        fields = [
            FormField("name", "Customer Name", value=order.customer_name),
            FormField("phone", "Customer Phone", value=order.customer_phone),
        ]

        def on_submit(values: dict[str, str] | None) -> None:
            if values is not None:
                self._dispatch(commands.UpdateCustomerDetails(values["name"], values["phone"]))

        self.push_screen(FormModal("Customer Details", fields), on_submit)

    def _open_bill(self) -> None:
        state = self.store.state
        order = state.active_order
        if order is None:
            return
        table = state.find_table(order.table_id)
        if table is None or not order.items:
            self._set_status("Add items before generating the bill.")
            return

        def on_choice(choice: str | None) -> None:
            self._settle(order.id, choice)

        self.push_screen(BillModal(order, table), on_choice)

    def _settle(self, order_id: str, choice: str | None) -> None:
        state = self.store.state
        order = state.find_order(order_id)
        if choice is None or order is None:
            return
        table = state.find_table(order.table_id)
        if table is None:
            return

        if choice == FINALIZE:
            self._dispatch(commands.FinalizeBill(order.id))
        elif choice == CREDIT:
            self._dispatch(commands.MoveToCredit(order.id))
        elif choice == SEND:
            try:
                path, link = send_bill(order, table)
            except BillError as exc:
                self._set_status(str(exc))
                return
            self._dispatch(commands.FinalizeBill(order.id))
            self._set_status(f"Bill saved to {path}; send via {link}")
        elif choice == PRINT:
            try:
                print_invoice(order, table)
            except Exception as exc:
                log_error(f"print_failed order_id={order.id}", exc)
                self._set_status(f"Print failed: {exc}")
                return
            self._set_status(f"Printed invoice for {table.name}")

    def _add_setting(self, section: str) -> None:
        if section == "taxes":
            fields = [FormField("name", "Tax Name"), FormField("rate", "Rate (%)", numeric=True)]

            def on_tax(values: dict[str, str] | None) -> None:
                if values is not None:
                    self._dispatch(commands.AddTax(values["name"], float(values["rate"])))

            self.push_screen(FormModal("Add Tax", fields), on_tax)
        elif section == "tables":
            fields = [FormField("name", "Table Name"), FormField("capacity", "Capacity", numeric=True)]

            def on_table(values: dict[str, str] | None) -> None:
                if values is not None:
                    self._dispatch(commands.AddTable(values["name"], int(float(values["capacity"]))))

            self.push_screen(FormModal("Add Table", fields), on_table)
        else:
            fields = [FormField("name", "Category Name")]

            def on_category(values: dict[str, str] | None) -> None:
                if values is not None:
                    self._dispatch(commands.AddCategory(values["name"]))

            self.push_screen(FormModal("Add Category", fields), on_category)

    @work(thread=True, exclusive=True, group="specials")
    def generate_specials(self, menu: tuple[MenuItem, ...]) -> None:
        try:
            specials = generate_chef_specials(menu)
        except SpecialsError as exc:
            self.call_from_thread(self._show_specials, [], str(exc))
            return
        self.call_from_thread(self._show_specials, specials, None)

    def _show_specials(self, specials: list[SpecialDish], error: str | None) -> None:
        self.specials_loading = False
        self.specials = specials
        self.specials_error = error
        self._refresh_all()

    # Rendering

    def _selected(self, rows):
        if not rows or not (0 <= self.cursor < len(rows)):
            return None
        return rows[self.cursor]

    def _row_count(self) -> int:
        state = self.store.state
        page = self.page
        if isinstance(page, TablesPage):
            return len(state.tables)
        if isinstance(page, OrderPage):
            order = state.active_order
            return len(order.items) if order else 0
        if isinstance(page, MenuPage):
            return len(state.menu)
        if isinstance(page, CustomersPage):
            return len(state.customers)
        if isinstance(page, StaffPage):
            return len(state.staff)
        if isinstance(page, SettingsPage):
            return len(getattr(state, self.settings_section))
        return 0

    def _filtered_results(self) -> list[MenuItem]:
        menu = list(self.store.state.menu)
        if not self.search_query:
            return menu
        q = self.search_query.lower()
        return [item for item in menu if q in item.name.lower()]

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _refresh_all(self) -> None:
        try:
            page_widget = self.query_one("#page-body", Static)
            side_widget = self.query_one("#side-body", Static)
            bar = self.query_one("#search-bar", Static)
            status = self.query_one("#status-bar", Static)
        except NoMatches:
            return

        page = self.page
        if not isinstance(page, OrderPage) and self.input_state == "active":
            self.input_state = "normal"
            self.search_query = ""

        count = self._row_count()
        if count == 0:
            self.cursor = 0
        elif self.cursor >= count:
            self.cursor = count - 1

        self.sub_title = page.title
        page_widget.update(self._render_page(page_widget))
        side_widget.update(self._render_side(side_widget))
        bar.update(self._render_search_bar())
        status.update(self.system_status or PAGE_HELP.get(type(page), ""))

    def _render_page(self, widget: Static) -> RenderableType:
        state = self.store.state
        page = self.page
        now = datetime.now()
        if isinstance(page, DashboardPage):
            return render_dashboard(state, now)
        if isinstance(page, TablesPage):
            start, end = window_bounds(len(state.tables), self._visible_rows(widget), self.cursor)
            return render_tables(state, self.cursor, start, end)
        if isinstance(page, OrderPage):
            order = state.active_order
            if order is None:
                return Text("No active order selected. Please select a table first.")
            return render_order(state, order, None if self.input_state == "active" else self.cursor)
        if isinstance(page, MenuPage):
            return render_menu(state, self.cursor)
        if isinstance(page, CustomersPage):
            return render_customers(state, self.cursor)
        if isinstance(page, StaffPage):
            return render_staff(state, self.cursor)
        if isinstance(page, ReportsPage):
            return render_report(build_report(state, self.report_kind, self.report_frame, now))
        if isinstance(page, SpecialsPage):
            return render_specials(self.specials, self.specials_loading, self.specials_error)
        if isinstance(page, SettingsPage):
            return render_settings(state, self.settings_section, self.cursor)
        return render_qr_menu(state, page.table_id)

    def _render_side(self, widget: Static) -> RenderableType:
        page = self.page
        if isinstance(page, OrderPage) and self.input_state == "active":
            results = self._filtered_results()
            if self.result_index >= len(results):
                self.result_index = 0
            start, end = window_bounds(len(results), self._visible_rows(widget), self.result_index)
            return render_menu_results(results, self.result_index, start, end)
        if isinstance(page, TablesPage):
            table = self._selected(self.store.state.tables)
            if table is not None:
                return render_table_qr(table)
        if isinstance(page, CustomersPage) and self.offer_links:
            return render_offer_links(self.offer_links)
        text = Text()
        text.append("1 Dashboard  2 Tables  3 Order\n4 Menu  5 Customers  6 Staff\n7 Reports  8 Specials  9 Settings\n\n")
        text.append(PAGE_HELP.get(type(page), ""), style="dim")
        text.append("\nCtrl+Q quit", style="dim")
        return text

    def _render_search_bar(self) -> RenderableType:
        if self.input_state == "active":
            text = Text()
            text.append(" MENU ", style="bold #ffffff on #2f6db5")
            text.append(f": {self.search_query}")
            return text
        if isinstance(self.page, OrderPage):
            return "Press / to search the menu. Enter adds the item."
        return self.page.title
