"""CSV report files and the printable tax invoice."""

from __future__ import annotations

import csv
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from PIL import Image, ImageDraw, ImageFont

from rms.config import (
    BILLING_FOOTER,
    CURRENCY_SYMBOL,
    EXPORT_DIR,
    INVOICE_FONT_SIZE,
    INVOICE_HEIGHT_PX,
    INVOICE_MARGIN_PX,
    INVOICE_WIDTH_PX,
    PRINTER_FONT_PATH,
    RESTAURANT_NAME,
)
from rms.links import whatsapp_url
from rms.logger import log_debug
from rms.models import Order, Table
from rms.reports import Report

_FONT_OVERRIDE_ENV = "RMS_FONT_PATH"
_LINUX_FONT_FALLBACKS = (
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/noto/NotoSans-Regular.ttf",
    "/usr/share/fonts/liberation/LiberationSans-Regular.ttf",
)
_LINE_GAP_PX = 8
_RULE_PX = 2


class BillError(Exception):
    """The bill cannot be sent as requested."""


@dataclass(frozen=True)
class InvoiceLine:
    """One invoice row; `right` is right-aligned, `rule` draws a separator."""

    left: str = ""
    right: str = ""
    bold: bool = False
    rule: bool = False


def format_money(amount: float) -> str:
    return f"{CURRENCY_SYMBOL}{amount:.2f}"


def report_filename(report: Report) -> str:
    if report.kind == "inventory":
        return "inventory-report.csv"
    return f"{report.kind}-report-{report.frame}.csv"


def _csv_cell(cell: object) -> object:
    return f"{cell:.2f}" if isinstance(cell, float) else cell


def write_report_csv(report: Report, directory: str | Path = EXPORT_DIR) -> Path:
    """Write a report as CSV with every field quoted and money to 2 decimals; return its path."""
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / report_filename(report)
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(report.headers)
        writer.writerows(tuple(_csv_cell(cell) for cell in row) for row in report.rows)
    return path


def invoice_lines(order: Order, table: Table) -> list[InvoiceLine]:
    """
    Lay out the tax invoice for an order as rows shared by the PDF and the printer.

    Tax rows come from the order itself, so they always add up to its total
    even if the tax settings changed after the last line edit.
    """
    lines = [
        InvoiceLine(f"{RESTAURANT_NAME} - Tax Invoice", bold=True),
        InvoiceLine(f"Order ID: {order.id}"),
        InvoiceLine(f"Table: {table.name}", f"Date: {order.created_at:%Y-%m-%d %H:%M}"),
        InvoiceLine(f"Customer: {order.customer_name or 'N/A'}", f"Phone: {order.customer_phone or 'N/A'}"),
        InvoiceLine(rule=True),
        InvoiceLine("Item / Qty x Rate", "Amount", bold=True),
    ]
    for item in order.items:
        lines.append(InvoiceLine(f"{item.name}  {item.quantity} x {format_money(item.price)}", format_money(item.amount)))
    lines.append(InvoiceLine(rule=True))
    lines.append(InvoiceLine("Subtotal", format_money(order.subtotal)))
    for tax in order.tax_lines:
        lines.append(InvoiceLine(f"{tax.name} ({tax.rate:g}%)", format_money(tax.amount)))
    lines.append(InvoiceLine("Total", format_money(order.total), bold=True))
    lines.append(InvoiceLine())
    lines.append(InvoiceLine(BILLING_FOOTER))
    return lines


def invoice_text(lines: list[InvoiceLine], width: int = 48) -> str:
    """Plain-text rendering used for previews."""
    out = []
    for line in lines:
        if line.rule:
            out.append("-" * width)
            continue
        gap = max(1, width - len(line.left) - len(line.right))
        out.append(f"{line.left}{' ' * gap}{line.right}" if line.right else line.left)
    return "\n".join(out)


def _font_candidates() -> Iterator[str]:
    override = os.environ.get(_FONT_OVERRIDE_ENV, "").strip()
    if override:
        yield override
    yield PRINTER_FONT_PATH
    yield from _LINUX_FONT_FALLBACKS


def load_font(size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    """
    Load a TrueType face at `size`.

    Tries RMS_FONT_PATH, then PRINTER_FONT_PATH, then common Linux font
    locations; the first file Pillow can open wins. Falls back to Pillow's
    bundled font so invoices still render on bare machines.
    """
    for candidate in _font_candidates():
        if not Path(candidate).is_file():
            continue
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            log_debug(f"font_unreadable path={candidate}")
    log_debug(f"font_fallback size={size}")
    return ImageFont.load_default(size=size)


def draw_invoice_lines(
    draw: ImageDraw.ImageDraw,
    lines: list[InvoiceLine],
    font: object,
    bold_font: object,
    left: int,
    right: int,
    top: int,
) -> int:
    """Draw invoice rows between `left` and `right` starting at `top`; return the next free y."""
    y = top
    for line in lines:
        if line.rule:
            draw.rectangle((left, y + _LINE_GAP_PX, right, y + _LINE_GAP_PX + _RULE_PX - 1), fill=0)
            y += _LINE_GAP_PX * 2 + _RULE_PX
            continue
        face = bold_font if line.bold else font
        sample = line.left or line.right or "Ag"
        bbox = draw.textbbox((0, 0), sample, font=face)
        height = max(bbox[3] - bbox[1], 1)
        if line.left:
            draw.text((left, y - bbox[1]), line.left, font=face, fill=0)
        if line.right:
            rbox = draw.textbbox((0, 0), line.right, font=face)
            draw.text((right - (rbox[2] - rbox[0]) - rbox[0], y - bbox[1]), line.right, font=face, fill=0)
        y += height + _LINE_GAP_PX
    return y


def render_invoice_image(lines: list[InvoiceLine]) -> Image.Image:
    font = load_font(INVOICE_FONT_SIZE)
    bold_font = load_font(INVOICE_FONT_SIZE + 6)
    img = Image.new("L", (INVOICE_WIDTH_PX, INVOICE_HEIGHT_PX), color=255)
    draw = ImageDraw.Draw(img)
    draw_invoice_lines(
        draw,
        lines,
        font,
        bold_font,
        left=INVOICE_MARGIN_PX,
        right=INVOICE_WIDTH_PX - INVOICE_MARGIN_PX,
        top=INVOICE_MARGIN_PX,
    )
    return img


def save_invoice_pdf(order: Order, table: Table, directory: str | Path = EXPORT_DIR) -> Path:
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"invoice-{order.id}.pdf"
    render_invoice_image(invoice_lines(order, table)).save(path, "PDF", resolution=100.0)
    return path


def send_bill(order: Order, table: Table, directory: str | Path = EXPORT_DIR) -> tuple[Path, str]:
    """Save the invoice PDF and build the WhatsApp link used to share it with the customer."""
    if not order.customer_name or not order.customer_phone:
        raise BillError("Please add customer name and phone number to send the bill via WhatsApp.")
    path = save_invoice_pdf(order, table, directory)
    message = f"Hello {order.customer_name}, your bill from {RESTAURANT_NAME} is {format_money(order.total)}."
    return path, whatsapp_url(order.customer_phone, message)
