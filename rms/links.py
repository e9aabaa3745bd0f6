"""Deep links and URLs handed to outside services."""

from __future__ import annotations

from typing import Iterable
from urllib.parse import parse_qs, quote, urlencode, urlsplit

from rms.config import CURRENCY_CODE, PUBLIC_BASE_URL, QR_IMAGE_SIZE, QR_SERVICE_URL, RESTAURANT_NAME, UPI_ID
from rms.models import (
    Customer,
    CustomersPage,
    DashboardPage,
    MenuPage,
    Page,
    QRMenuPage,
    ReportsPage,
    SettingsPage,
    SpecialsPage,
    StaffPage,
    TablesPage,
)

# Pages that can be entered without extra fields.
_SIMPLE_PAGES: dict[str, type] = {
    "Dashboard": DashboardPage,
    "Tables": TablesPage,
    "Menu": MenuPage,
    "Customers": CustomersPage,
    "Staff": StaffPage,
    "Reports": ReportsPage,
    "AI_Specials": SpecialsPage,
    "Settings": SettingsPage,
}


def parse_deep_link(link: str) -> Page:
    """
    Resolve a link such as `https://host/?page=QRMenu&tableId=3` to a page.

    Accepts a full URL or a bare query string. Orders are never reachable by
    link; unknown or malformed input lands on the dashboard.
    """
    query = urlsplit(link).query if "://" in link else link.lstrip("?")
    params = parse_qs(query)
    page_name = (params.get("page") or [""])[0]

    if page_name == "QRMenu":
        raw_table = (params.get("tableId") or [""])[0]
        try:
            return QRMenuPage(table_id=int(raw_table))
        except ValueError:
            return DashboardPage()

    page_cls = _SIMPLE_PAGES.get(page_name, DashboardPage)
    return page_cls()


def table_menu_url(table_id: int, base_url: str = PUBLIC_BASE_URL) -> str:
    return f"{base_url}/?{urlencode({'page': 'QRMenu', 'tableId': table_id})}"


def qr_code_url(payload: str) -> str:
    """URL of a QR image rendered by the external QR service."""
    return f"{QR_SERVICE_URL}?size={QR_IMAGE_SIZE}&data={quote(payload, safe='')}"


def upi_payment_link(total: float) -> str:
    return f"upi://pay?pa={UPI_ID}&pn={quote(RESTAURANT_NAME)}&am={total:.2f}&cu={CURRENCY_CODE}"


def whatsapp_url(phone: str, text: str) -> str:
    digits = "".join(ch for ch in phone if ch.isdigit())
    return f"https://wa.me/{digits}?text={quote(text)}"


def offer_links(customers: Iterable[Customer], text: str) -> list[tuple[str, str]]:
    """One (customer name, WhatsApp link) pair per customer with a phone number."""
    return [
        (customer.name, whatsapp_url(customer.phone, text))
        for customer in customers
        if any(ch.isdigit() for ch in customer.phone)
    ]
