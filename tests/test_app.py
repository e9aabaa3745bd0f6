import asyncio
from datetime import datetime
from itertools import count

import pytest

from rms.data import initial_state
from rms.models import AVAILABLE, CustomersPage, DashboardPage, OrderPage, QRMenuPage, TablesPage
from rms.rms_app import RmsApp
from rms.store import Store

NOW = datetime(2024, 6, 12, 14, 30)


def _make_app(**kwargs) -> RmsApp:
    counter = count(1)
    store = Store(initial_state(NOW), clock=lambda: NOW, make_id=lambda prefix: f"{prefix}-{next(counter)}")
    return RmsApp(store=store, **kwargs)


def test_order_flow_from_table_to_finalized_bill() -> None:
    app = _make_app()

    async def scenario() -> None:
        async with app.run_test() as pilot:
            await pilot.press("2")
            assert app.store.state.page == TablesPage()

            await pilot.press("enter")
            state = app.store.state
            assert isinstance(state.page, OrderPage)

            await pilot.press("/", "e", "s", "p", "enter")
            await pilot.press("escape")
            await pilot.press("+")
            order = app.store.state.active_order
            assert [(line.name, line.quantity) for line in order.items] == [("Espresso", 2)]
            assert app.store.state.find_menu_item("bev002").stock == 98

            await pilot.press("b", "m", "c")
            await pilot.pause()

    asyncio.run(scenario())
    state = app.store.state
    assert state.orders == ()
    assert len(state.completed_orders) == 1
    assert state.total_sales == pytest.approx(45250.50 + 298 * 1.18)
    assert state.find_table(1).status == AVAILABLE
    assert state.page == TablesPage()


def test_deep_link_opens_read_only_table_menu() -> None:
    app = _make_app(start_page=QRMenuPage(3))

    async def scenario() -> None:
        async with app.run_test() as pilot:
            await pilot.pause()
            assert app.store.state.page == QRMenuPage(3)
            await pilot.press("2")
            assert app.store.state.page == QRMenuPage(3)
            await pilot.press("escape")
            assert app.store.state.page == DashboardPage()

    asyncio.run(scenario())


def test_add_customer_through_form() -> None:
    app = _make_app()

    async def scenario() -> None:
        async with app.run_test() as pilot:
            await pilot.press("5")
            assert app.store.state.page == CustomersPage()
            await pilot.press("a", "r", "a", "v", "i", "down", "9", "8", "7", "enter")
            await pilot.pause()

    asyncio.run(scenario())
    newest = app.store.state.customers[0]
    assert (newest.name, newest.phone) == ("ravi", "987")


def test_offer_message_is_edited_before_the_link_is_built() -> None:
    app = _make_app()

    async def scenario() -> None:
        async with app.run_test() as pilot:
            await pilot.press("5", "o")
            await pilot.press("backspace", "!", "enter")
            await pilot.pause()

    asyncio.run(scenario())
    [(name, url)] = app.offer_links
    assert name == "John Doe"
    assert url.startswith("https://wa.me/1234567890?text=Hello%20John%20Doe")
    assert url.endswith("next%20visit%21")
    assert app.system_status.startswith("Offer for John Doe: https://wa.me/1234567890")


def test_bulk_offer_builds_one_link_per_customer() -> None:
    app = _make_app()

    async def scenario() -> None:
        async with app.run_test() as pilot:
            await pilot.press("5", "b", "enter")
            await pilot.pause()

    asyncio.run(scenario())
    assert [name for name, _ in app.offer_links] == ["John Doe", "Jane Smith"]
    assert app.offer_links[1][1].startswith("https://wa.me/0987654321?text=Hello%21")
    assert app.system_status == "Offer queued for 2 customers"
