"""Small entry-form modal used for create and edit dialogs."""

from __future__ import annotations

from dataclasses import dataclass

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static


@dataclass(frozen=True)
class FormField:
    """One text field of a form modal."""

    key: str
    placeholder: str
    value: str = ""
    password: bool = False
    required: bool = True


class FormModal(ModalScreen[dict[str, str] | None]):
    """Collect a few text values; dismisses with None when cancelled."""

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

    #form-error {
        color: #ffb3b3;
        margin: 1 0;
    }

    #form-buttons {
        height: auto;
    }

    #form-buttons Button {
        margin-right: 2;
    }
    """

    def __init__(self, title: str, fields: list[FormField], submit_label: str) -> None:
        super().__init__()
        self.title_text = title
        self.fields = fields
        self.submit_label = submit_label

    def compose(self) -> ComposeResult:
        with Container(id="form-dialog"):
            yield Static(self.title_text, id="form-title")
            for form_field in self.fields:
                yield Input(
                    value=form_field.value,
                    placeholder=form_field.placeholder,
                    password=form_field.password,
                    id=f"field-{form_field.key}",
                )
            yield Static(id="form-error")
            with Horizontal(id="form-buttons"):
                yield Button(self.submit_label, id="submit", variant="primary")
                yield Button("Cancel", id="cancel")

    def on_key(self, event: Key) -> None:
        if event.key == "escape":
            self.dismiss(None)
            event.stop()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._confirm()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id == "submit":
            self._confirm()
            return
        self.dismiss(None)

    def values(self) -> dict[str, str]:
        return {
            form_field.key: self.query_one(f"#field-{form_field.key}", Input).value.strip()
            for form_field in self.fields
        }

    def _confirm(self) -> None:
        values = self.values()
        missing = [form_field.placeholder for form_field in self.fields if form_field.required and not values[form_field.key]]
        if missing:
            self.query_one("#form-error", Static).update(f"Required: {', '.join(missing)}")
            return
        self.dismiss(values)
