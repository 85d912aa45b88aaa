"""PIN entry modal used for staff login and admin overrides."""

from __future__ import annotations

from typing import Callable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

PinCheck = Callable[[str, str], bool]


class LoginModal(ModalScreen[tuple[str, str] | None]):
    """Prompt for a role and PIN; dismisses with (role, pin) once ``check`` accepts them."""

    CSS = """
    LoginModal {
        align: center middle;
        background: $background 60%;
    }

    #login-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #login-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #login-role {
        color: white;
        margin-bottom: 1;
    }

    #login-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #login-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #login-help {
        color: #dddddd;
    }
    """

    MAX_PIN_LENGTH = 8

    def __init__(
        self,
        check: PinCheck,
        title: str = "Staff Login",
        roles: tuple[str, ...] = ("cashier", "admin"),
        cancellable: bool = False,
    ) -> None:
        super().__init__()
        self.pin_check = check
        self.title_text = title
        self.roles = roles
        self.cancellable = cancellable
        self.role_index = 0
        self.value = ""
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="login-dialog"):
            yield Static(self.title_text, id="login-title")
            yield Static(id="login-role")
            yield Static(id="login-value")
            yield Static(id="login-error")
            yield Static(id="login-help")

    def on_mount(self) -> None:
        self._refresh_content()

    @property
    def current_role(self) -> str:
        return self.roles[self.role_index]

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "ctrl+c"}:
            if self.cancellable:
                self.dismiss(None)
            event.stop()
            return

        if event.key == "tab" and len(self.roles) > 1:
            self.role_index = (self.role_index + 1) % len(self.roles)
            self.error = ""
            self._refresh_content()
            event.stop()
            return

        if event.key == "enter":
            self._confirm()
            event.stop()
            return

        if event.key == "backspace":
            if self.value:
                self.value = self.value[:-1]
                self.error = ""
                self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character and event.character.isdigit():
            if len(self.value) < self.MAX_PIN_LENGTH:
                self.value += event.character
            self.error = ""
            self._refresh_content()
            event.stop()

    def _confirm(self) -> None:
        if not self.value:
            self.error = "Password is required."
            self._refresh_content()
            return

        if not self.pin_check(self.current_role, self.value):
            self.error = "Invalid password."
            self.value = ""
            self._refresh_content()
            return

        self.dismiss((self.current_role, self.value))

    def _refresh_content(self) -> None:
        role_line = Text("Role: ")
        for idx, role in enumerate(self.roles):
            if idx > 0:
                role_line.append("  ")
            style = "bold reverse" if idx == self.role_index else "dim"
            role_line.append(f" {role} ", style=style)
        self.query_one("#login-role", Static).update(role_line)
        self.query_one("#login-value", Static).update("•" * len(self.value))
        self.query_one("#login-error", Static).update(self.error or "")

        help_parts = ["Digits only. Enter confirm. Backspace delete."]
        if len(self.roles) > 1:
            help_parts.append("Tab switch role.")
        if self.cancellable:
            help_parts.append("Esc cancel.")
        self.query_one("#login-help", Static).update(" ".join(help_parts))
