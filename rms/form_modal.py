"""Generic data-entry modal screen."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static


@dataclass(frozen=True)
class FormField:
    """A form input; fields with `choices` cycle through them instead of taking text."""

    key: str
    label: str
    value: str = ""
    choices: tuple[str, ...] = ()
    numeric: bool = False


class FormModal(ModalScreen[dict[str, str] | None]):
    """Prompt for a few text, number or choice fields; dismisses with the values or None."""

    CSS = """
    FormModal {
        align: center middle;
        background: $background 60%;
    }

    #form-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #form-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #form-body {
        color: white;
        margin-bottom: 1;
    }

    #form-error {
        color: #ffb3b3;
    }

    #form-help {
        color: #dddddd;
    }
    """

    def __init__(self, title: str, fields: list[FormField]) -> None:
        super().__init__()
        self.form_title = title
        self.fields = fields
        self.values = {field.key: field.value or (field.choices[0] if field.choices else "") for field in fields}
        self.cursor_index = 0
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="form-dialog"):
            yield Static(self.form_title, id="form-title")
            yield Static(id="form-body")
            yield Static(id="form-error")
            yield Static("↑/↓ field, ←/→ choice, Enter confirm, Esc cancel", id="form-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        field = self.fields[self.cursor_index]

        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return
        if event.key == "enter":
            event.stop()
            if self._confirm():
                return
        elif event.key == "up":
            self.cursor_index = (self.cursor_index - 1) % len(self.fields)
        elif event.key == "down":
            self.cursor_index = (self.cursor_index + 1) % len(self.fields)
        elif event.key in {"left", "right"} and field.choices:
            self._cycle_choice(field, 1 if event.key == "right" else -1)
        elif event.key == "backspace":
            if not field.choices:
                self.values[field.key] = self.values[field.key][:-1]
        elif event.is_printable and event.character and not field.choices:
            if field.numeric and not (event.character.isdigit() or event.character in ".-"):
                self.error = f"{field.label} takes a number."
            else:
                self.values[field.key] += event.character
                self.error = ""
        else:
            return

        event.stop()
        self._refresh_content()

    def _cycle_choice(self, field: FormField, delta: int) -> None:
        current = self.values[field.key]
        idx = field.choices.index(current) if current in field.choices else 0
        self.values[field.key] = field.choices[(idx + delta) % len(field.choices)]

    def _confirm(self) -> bool:
        """Dismiss with the values when every field is valid; return whether it did."""
        for idx, field in enumerate(self.fields):
            raw = self.values[field.key].strip()
            if not raw:
                self.error = f"{field.label} is required."
                self.cursor_index = idx
                return False
            if field.numeric:
                try:
                    float(raw)
                except ValueError:
                    self.error = f"{field.label} must be a number."
                    self.cursor_index = idx
                    return False
        self.dismiss({key: value.strip() for key, value in self.values.items()})
        return True

    def _refresh_content(self) -> None:
        body = Text(style="white")
        for idx, field in enumerate(self.fields):
            if idx > 0:
                body.append("\n")
            active = idx == self.cursor_index
            pointer = "➤ " if active else "  "
            value = self.values[field.key]
            if field.choices:
                shown = f"< {value} >"
            else:
                shown = f"{value}|" if active else value
            body.append(f"{pointer}{field.label}: ", style="bold white" if active else "white")
            body.append(shown)
        self.query_one("#form-body", Static).update(body)
        self.query_one("#form-error", Static).update(self.error)
