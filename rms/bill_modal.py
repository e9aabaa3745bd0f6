"""Bill preview and payment options modal."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from rms.billing import split_amount
from rms.export import format_money, invoice_lines, invoice_text
from rms.links import qr_code_url, upi_payment_link
from rms.models import Order, Table

FINALIZE = "finalize"
CREDIT = "credit"
SEND = "send"
PRINT = "print"


class BillModal(ModalScreen[str | None]):
    """Walk through a bill; dismisses with the chosen settlement action or None."""

    CSS = """
    BillModal {
        align: center middle;
        background: $background 60%;
    }

    #bill-dialog {
        width: 64;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #bill-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #bill-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    _HELP = {
        "preview": "S send & finalize, M settle manually, P print, Esc cancel",
        "payment_options": "C cash, D card, U UPI, Q QR code, X split, R move to credit, B back",
        "qr": "Enter confirm payment received, B back",
        "split": "+/- people, Enter confirm all payments, B back",
    }

    def __init__(self, order: Order, table: Table) -> None:
        super().__init__()
        self.order = order
        self.table = table
        self.view = "preview"
        self.split_ways = 2

    def compose(self) -> ComposeResult:
        with Container(id="bill-dialog"):
            yield Static(f"Bill for {self.table.name}", id="bill-title")
            yield Static(id="bill-body")
            yield Static(id="bill-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        key = event.key
        event.stop()

        if key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            return

        if self.view == "preview":
            if key == "s":
                self.dismiss(SEND)
                return
            if key == "p":
                self.dismiss(PRINT)
                return
            if key == "m":
                self.view = "payment_options"
        elif self.view == "payment_options":
            if key in {"c", "d", "u"}:
                self.dismiss(FINALIZE)
                return
            if key == "r":
                self.dismiss(CREDIT)
                return
            if key == "q":
                self.view = "qr"
            elif key == "x":
                self.view = "split"
            elif key == "b":
                self.view = "preview"
        elif self.view == "qr":
            if key == "enter":
                self.dismiss(FINALIZE)
                return
            if key == "b":
                self.view = "payment_options"
        elif self.view == "split":
            if key == "enter":
                self.dismiss(FINALIZE)
                return
            if key in {"plus", "equals_sign"}:
                self.split_ways += 1
            elif key in {"minus", "hyphen"}:
                self.split_ways = max(2, self.split_ways - 1)
            elif key == "b":
                self.view = "payment_options"

        self._refresh_content()

    def _refresh_content(self) -> None:
        total = format_money(self.order.total)
        body = Text(style="white")
        if self.view == "preview":
            body.append(invoice_text(invoice_lines(self.order, self.table), width=56))
        elif self.view == "payment_options":
            body.append(f"Total  {total}\n\n", style="bold")
            body.append("Select Payment Method")
        elif self.view == "qr":
            body.append("Scan to Pay\n\n", style="bold")
            body.append(f"{qr_code_url(upi_payment_link(self.order.total))}\n\n", style="dim")
            body.append(f"{total}\n", style="bold")
            body.append("Scan using any UPI app")
        else:
            share = split_amount(self.order.total, self.split_ways)
            body.append(f"Total Bill  {total}\n\n", style="bold")
            body.append(f"Split by {self.split_ways}\n")
            body.append(f"Each person pays  {format_money(share)}", style="bold #4ab3e0")
        self.query_one("#bill-body", Static).update(body)
        self.query_one("#bill-help", Static).update(self._HELP[self.view])
