"""Admin sales report and order history modal."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from cafe_pos.models import Order
from cafe_pos.receipt_modal import ReceiptModal
from cafe_pos.rendering import render_receipt, render_sales_report
from cafe_pos.reports import DATE_RANGES, filter_orders, summarize

PAYMENT_FILTERS = ("all", "cash", "card")
HISTORY_LIMIT = 15


class ReportsModal(ModalScreen[None]):
    """Summary of completed orders with date, payment and text filters.

    ``/`` starts a search; while searching, typed characters go to the query
    and Enter or Esc ends it.
    """

    CSS = """
    ReportsModal {
        align: center middle;
        background: $background 60%;
    }

    #reports-dialog {
        width: 72;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
        overflow-y: auto;
    }

    #reports-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #reports-filters {
        color: white;
        margin-bottom: 1;
    }

    #reports-help {
        color: #dddddd;
        margin-top: 1;
    }
    """

    def __init__(self, orders: list[Order], staff_email: str | None = None) -> None:
        super().__init__()
        self.orders = orders
        self.staff_email = staff_email
        self.date_range = "all"
        self.payment_filter = "all"
        self.query_text = ""
        self.searching = False
        self.cursor = 0

    def compose(self) -> ComposeResult:
        with Container(id="reports-dialog"):
            yield Static("Sales Report", id="reports-title")
            yield Static(id="reports-filters")
            yield Static(id="reports-body", markup=False)
            yield Static(id="reports-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def visible_orders(self) -> list[Order]:
        return filter_orders(
            self.orders,
            date_range=self.date_range,
            payment_method=self.payment_filter,
            query=self.query_text,
        )

    def on_key(self, event: Key) -> None:
        if self.searching:
            self._search_key(event)
            event.stop()
            return

        if event.key in {"escape", "q"}:
            self.dismiss()
        elif event.key == "slash":
            self.searching = True
        elif event.key == "t":
            self.date_range = DATE_RANGES[(DATE_RANGES.index(self.date_range) + 1) % len(DATE_RANGES)]
            self.cursor = 0
        elif event.key == "m":
            self.payment_filter = PAYMENT_FILTERS[(PAYMENT_FILTERS.index(self.payment_filter) + 1) % len(PAYMENT_FILTERS)]
            self.cursor = 0
        elif event.key in {"j", "down"}:
            self._move_cursor(1)
        elif event.key in {"k", "up"}:
            self._move_cursor(-1)
        elif event.key == "enter":
            self._show_selected_receipt()
        else:
            return
        event.stop()
        self._refresh_content()

    def _search_key(self, event: Key) -> None:
        if event.key in {"enter", "escape"}:
            self.searching = False
        elif event.key == "backspace":
            self.query_text = self.query_text[:-1]
        elif event.is_printable and event.character:
            self.query_text += event.character
        else:
            return
        self.cursor = 0
        self._refresh_content()

    def _move_cursor(self, delta: int) -> None:
        count = min(len(self.visible_orders()), HISTORY_LIMIT)
        if count:
            self.cursor = (self.cursor + delta) % count

    def _show_selected_receipt(self) -> None:
        orders = self.visible_orders()
        if not 0 <= self.cursor < len(orders):
            return
        self.app.push_screen(ReceiptModal(render_receipt(orders[self.cursor], self.staff_email), status="Reprint"))

    def _refresh_content(self) -> None:
        orders = self.visible_orders()
        search = f"{self.query_text}_" if self.searching else (self.query_text or "-")
        self.query_one("#reports-filters", Static).update(
            f"Range: {self.date_range}   Payment: {self.payment_filter}   Search: {search}"
        )
        self.query_one("#reports-body", Static).update(
            render_sales_report(summarize(orders), orders, selected=self.cursor, history_limit=HISTORY_LIMIT)
        )
        help_text = (
            "Type to search. Enter/Esc done."
            if self.searching
            else "t range  m payment  / search  j/k select  Enter reprint  Esc close"
        )
        self.query_one("#reports-help", Static).update(help_text)
