"""Thermal receipt printing of tax invoices."""

from __future__ import annotations

from rms.config import (
    PRINTER_FONT_SIZE,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_USB_PRODUCT_ID,
    PRINTER_USB_VENDOR_ID,
    PRINTER_WIDTH_PX,
)
from rms.export import InvoiceLine, draw_invoice_lines, invoice_lines, load_font
from rms.models import Order, Table

# Extra tail so short tickets are easy to tear off.
_TAIL_SPACER_PX = 70


def check_printer_dependencies() -> tuple[bool, str]:
    """Check whether printer dependencies are importable."""
    try:
        from escpos.printer import Usb  # noqa: F401
        from PIL import ImageFont  # noqa: F401
    except ImportError as exc:
        return (False, f"Printer deps unavailable: {exc}")
    return (True, "Printer ready")


def _measure_height(lines: list[InvoiceLine], font: object, bold_font: object) -> int:
    from PIL import Image, ImageDraw

    scratch = Image.new("1", (PRINTER_WIDTH_PX, 1), color=1)
    return draw_invoice_lines(
        ImageDraw.Draw(scratch),
        lines,
        font,
        bold_font,
        left=PRINTER_LEFT_INDENT_PX,
        right=PRINTER_WIDTH_PX - PRINTER_LEFT_INDENT_PX,
        top=0,
    )


def render_receipt(lines: list[InvoiceLine]) -> object:
    """Render invoice rows onto a single receipt-width monochrome strip."""
    from PIL import Image, ImageDraw

    font = load_font(PRINTER_FONT_SIZE)
    bold_font = load_font(PRINTER_FONT_SIZE + 4)
    height = _measure_height(lines, font, bold_font) + _TAIL_SPACER_PX

    img = Image.new("1", (PRINTER_WIDTH_PX, height), color=1)
    draw_invoice_lines(
        ImageDraw.Draw(img),
        lines,
        font,
        bold_font,
        left=PRINTER_LEFT_INDENT_PX,
        right=PRINTER_WIDTH_PX - PRINTER_LEFT_INDENT_PX,
        top=0,
    )
    return img


def print_invoice(order: Order, table: Table) -> None:
    """Print the order's tax invoice and cut the ticket."""
    if not order.items:
        return

    try:
        from escpos.printer import Usb
    except ImportError as exc:
        raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc

    receipt = render_receipt(invoice_lines(order, table))
    printer = Usb(PRINTER_USB_VENDOR_ID, PRINTER_USB_PRODUCT_ID)
    printer.image(receipt)
    printer.cut()
