"""Size and extras picker shown before a menu item goes into the cart."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from cafe_pos.constant import AVAILABLE_EXTRAS, EXTRA_PRICE
from cafe_pos.models import MenuItem
from cafe_pos.pricing import format_price, line_total


class ExtrasModal(ModalScreen[tuple[str, list[str]] | None]):
    """Centered modal to choose a size and toggle extras for one menu item."""

    BINDINGS = [
        ("escape", "close", "Cancel"),
        ("q", "close", "Cancel"),
        ("ctrl+c", "close", "Cancel"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("left", "cycle_size(-1)", "Smaller"),
        ("right", "cycle_size(1)", "Larger"),
        ("space", "toggle_current", "Toggle"),
        ("enter", "confirm", "Add"),
    ]

    CSS = """
    ExtrasModal {
        align: center middle;
        background: $background 60%;
    }

    #extras-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #extras-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #extras-body {
        margin-bottom: 1;
        color: white;
    }

    #extras-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)

    def __init__(self, menu_item: MenuItem) -> None:
        super().__init__()
        self.menu_item = menu_item
        self.size_index = 0
        self.selected_extras: list[str] = []

    def compose(self) -> ComposeResult:
        with Container(id="extras-dialog"):
            yield Static(self.menu_item.name, id="extras-title")
            yield Static(id="extras-body")
            yield Static(
                "←/→ size. j/k move. Space toggle extra. Enter add. Esc cancel.",
                id="extras-help",
            )

    def on_mount(self) -> None:
        self._refresh_content()

    @property
    def chosen_size(self) -> str:
        return self.menu_item.sizes[self.size_index]

    def action_close(self) -> None:
        self.dismiss(None)

    def action_move_cursor(self, delta: int) -> None:
        self.cursor_index = (self.cursor_index + delta) % len(AVAILABLE_EXTRAS)
        self._refresh_content()

    def action_cycle_size(self, delta: int) -> None:
        self.size_index = (self.size_index + delta) % len(self.menu_item.sizes)
        self._refresh_content()

    def action_toggle_current(self) -> None:
        extra = AVAILABLE_EXTRAS[self.cursor_index]
        if extra in self.selected_extras:
            self.selected_extras.remove(extra)
        else:
            self.selected_extras.append(extra)
        self._refresh_content()

    def action_confirm(self) -> None:
        self.dismiss((self.chosen_size, list(self.selected_extras)))

    def _refresh_content(self) -> None:
        unit_price = self.menu_item.prices[self.chosen_size]
        extras_cost = len(self.selected_extras) * EXTRA_PRICE

        text = Text()
        text.append("Size: ")
        for idx, size in enumerate(self.menu_item.sizes):
            if idx > 0:
                text.append("  ")
            style = "bold reverse" if idx == self.size_index else "dim"
            text.append(f" {size} {format_price(self.menu_item.prices[size])} ", style=style)

        text.append(f"\n\nExtras ({format_price(EXTRA_PRICE)} each)\n")
        for idx, extra in enumerate(AVAILABLE_EXTRAS):
            pointer = "➤ " if idx == self.cursor_index else "  "
            mark = "[x]" if extra in self.selected_extras else "[ ]"
            text.append(f"{pointer}{mark} {extra}\n")

        text.append(f"\nLine total: {format_price(line_total(1, unit_price, extras_cost))}", style="bold")
        self.query_one("#extras-body", Static).update(text)
