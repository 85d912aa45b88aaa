"""Main Textual app class."""

from __future__ import annotations

from typing import Callable

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Header, Static

from cafe_pos import auth
from cafe_pos.data import build_cart_item
from cafe_pos.extras_modal import ExtrasModal
from cafe_pos.login_modal import LoginModal
from cafe_pos.models import MenuItem, ValidationError
from cafe_pos.pricing import format_price
from cafe_pos.receipt_modal import ReceiptModal
from cafe_pos.rendering import format_cart_line, format_table_label, render_receipt, status_style
from cafe_pos.reports_modal import ReportsModal
from cafe_pos.store import PosStore


class CafePosApp(App):
    """A Textual till for table orders: tables, menu, cart, hold and pay."""

    TITLE = "Café POS"
    SUB_TITLE = "Tables / Menu / Cart"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #left-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #menu-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #status-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #menu-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #left-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #totals {
        height: auto;
        padding: 0 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    BINDINGS = [
        ("up", "move_cursor(-1)", "Up"),
        ("down", "move_cursor(1)", "Down"),
        ("enter", "activate", "Select / Add"),
        ("escape", "back_to_tables", "Tables"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, store: PosStore) -> None:
        super().__init__()
        self.store = store
        self.table_cursor = 0
        self.menu_cursor = 0
        self.line_cursor: int | None = None
        self.system_status = ""

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="left-pane"):
                yield Static("Tables", id="left-title", classes="pane-title")
                yield Static(id="left-list")
                yield Static(id="totals")
            with Vertical(id="menu-pane"):
                yield Static(id="status-bar")
                yield Static(id="menu-list")

    def on_mount(self) -> None:
        self.store.load_persisted()
        self.store.initialize_tables()
        if self.store.remote is not None:
            remote_menu = self.store.remote.fetch_menu_items()
            if remote_menu:
                self.store.catalog.set_menu_items(remote_menu)
        self.store.restore_session()
        self._refresh_all()
        if not self.store.is_authenticated:
            self._prompt_login()

    def on_unmount(self) -> None:
        if self.store.remote is not None:
            self.store.remote.close()

    # Helpers

    def _modal_open(self) -> bool:
        return isinstance(self.screen, ModalScreen)

    def _notify_status(self, message: str) -> None:
        self.system_status = message
        self._refresh_status()

    def _prompt_login(self) -> None:
        def check(role: str, pin: str) -> bool:
            return auth.quick_login(role, pin) is not None

        def on_login(result: tuple[str, str] | None) -> None:
            if result is None:
                return
            self.store.set_staff(auth.quick_login(*result))
            self._notify_status(f"Signed in as {result[0]}")
            self._refresh_all()

        self.push_screen(LoginModal(check=check), on_login)

    def _with_admin(self, action_name: str, action: Callable[[], None]) -> None:
        """Run an order deletion now for admins; cashiers must enter the admin password first."""
        if auth.can_delete_orders(self.store.staff):
            action()
            return

        def check(role: str, pin: str) -> bool:
            return auth.authorize_admin_action(self.store.staff, pin)

        def on_result(result: tuple[str, str] | None) -> None:
            if result is None:
                self._notify_status(f"{action_name} cancelled")
                return
            action()

        self.push_screen(
            LoginModal(check=check, title=f"Admin password: {action_name}", roles=("admin",), cancellable=True),
            on_result,
        )

    def _visible_menu(self) -> list[MenuItem]:
        include_inactive = auth.can_manage_menu(self.store.staff)
        return self.store.catalog.items_in_category(self.store.selected_category, include_inactive=include_inactive)

    def _selected_line_id(self) -> str | None:
        cart = self.store.table_cart(self.store.selected_table)
        if self.line_cursor is None or not (0 <= self.line_cursor < len(cart)):
            return None
        return cart[self.line_cursor].id

    # Actions

    def action_move_cursor(self, delta: int) -> None:
        if self._modal_open():
            return
        if self.store.current_view == "tables":
            if self.store.tables:
                self.table_cursor = (self.table_cursor + delta) % len(self.store.tables)
            self._refresh_left()
            return
        menu = self._visible_menu()
        if menu:
            self.menu_cursor = (self.menu_cursor + delta) % len(menu)
        self._refresh_menu()

    def action_cycle_category(self, delta: int) -> None:
        if self._modal_open() or self.store.current_view != "pos":
            return
        categories = self.store.catalog.categories
        current = categories.index(self.store.selected_category) if self.store.selected_category in categories else 0
        self.store.set_selected_category(categories[(current + delta) % len(categories)])
        self.menu_cursor = 0
        self._refresh_menu()
        self._refresh_status()

    def action_activate(self) -> None:
        if self._modal_open() or not self.store.is_authenticated:
            return
        if self.store.current_view == "tables":
            if not self.store.tables:
                return
            self.store.select_table(self.store.tables[self.table_cursor].id)
            self.line_cursor = None
            self._refresh_all()
            return

        menu = self._visible_menu()
        if not menu:
            return
        menu_item = menu[min(self.menu_cursor, len(menu) - 1)]
        if not menu_item.is_active:
            self._notify_status(f"{menu_item.name} is unavailable")
            return
        self.push_screen(ExtrasModal(menu_item), lambda result: self._add_menu_item(menu_item, result))

    def _add_menu_item(self, menu_item: MenuItem, result: tuple[str, list[str]] | None) -> None:
        if result is None:
            return
        size, extras = result
        try:
            table = self.store.require_selected_table()
            self.store.add_to_table_cart(table.id, build_cart_item(menu_item, size, extras=extras))
        except ValidationError as exc:
            self._notify_status(str(exc))
            return
        self.line_cursor = len(self.store.table_cart(table.id)) - 1
        self._notify_status(f"{menu_item.name} ({size}) added to {table.name}")
        self._refresh_left()

    def action_back_to_tables(self) -> None:
        if self._modal_open():
            return
        self.store.set_current_view("tables")
        self._refresh_all()

    def on_key(self, event: Key) -> None:
        if self._modal_open() or not self.store.is_authenticated:
            return
        if not event.is_printable or not event.character:
            return

        key = event.character.lower()
        if key == "l":
            self.store.logout()
            self._refresh_all()
            self._prompt_login()
            event.stop()
            return
        if key == "r":
            self._show_reports()
            event.stop()
            return

        if self.store.current_view != "pos":
            return

        handlers: dict[str, Callable[[], None]] = {
            "j": lambda: self._move_line(1),
            "k": lambda: self._move_line(-1),
            "+": lambda: self._change_quantity(1),
            "-": lambda: self._change_quantity(-1),
            "d": self._remove_selected_line,
            "x": self._clear_table,
            "h": self._hold_table,
            "c": lambda: self._pay("cash"),
            "v": lambda: self._pay("card"),
            "p": self._preview_bill,
            "a": self._toggle_availability,
            "]": lambda: self.action_cycle_category(1),
            "[": lambda: self.action_cycle_category(-1),
        }
        handler = handlers.get(key)
        if handler is None:
            return
        handler()
        event.stop()

    def _move_line(self, delta: int) -> None:
        cart = self.store.table_cart(self.store.selected_table)
        if not cart:
            return
        if self.line_cursor is None:
            self.line_cursor = 0 if delta > 0 else len(cart) - 1
        else:
            self.line_cursor = (self.line_cursor + delta) % len(cart)
        self._refresh_left()

    def _change_quantity(self, delta: int) -> None:
        line_id = self._selected_line_id()
        table_id = self.store.selected_table
        if line_id is None or table_id is None:
            return
        line = next(item for item in self.store.table_cart(table_id) if item.id == line_id)
        new_quantity = line.quantity + delta
        if new_quantity < 1:
            self._remove_selected_line()
            return
        self.store.update_table_cart_item(table_id, line_id, quantity=new_quantity)
        self._refresh_left()

    def _remove_selected_line(self) -> None:
        line_id = self._selected_line_id()
        table_id = self.store.selected_table
        if line_id is None or table_id is None:
            return

        def remove() -> None:
            self.store.remove_from_table_cart(table_id, line_id)
            self.line_cursor = None
            self._notify_status("Item removed from order")
            self._refresh_left()

        self._with_admin("Remove item from order", remove)

    def _clear_table(self) -> None:
        table_id = self.store.selected_table
        if table_id is None or self.store.table_order(table_id) is None:
            return

        def clear() -> None:
            self.store.clear_table_cart(table_id)
            self.store.set_current_view("tables")
            self._notify_status("Order cleared")
            self._refresh_all()

        self._with_admin("Clear entire order", clear)

    def _hold_table(self) -> None:
        table_id = self.store.selected_table
        if table_id is None or self.store.hold_table_order(table_id) is None:
            return
        self.store.set_current_view("tables")
        self._notify_status("Order held")
        self._refresh_all()

    def _pay(self, payment_method: str) -> None:
        table_id = self.store.selected_table
        if table_id is None:
            return
        result = self.store.pay_table_order(table_id, payment_method)
        if result is None:
            self._notify_status("Nothing to pay")
            return

        staff_email = self.store.staff.email if self.store.staff else None
        if result.save_result.status == "local_only":
            note = "Saved locally only (remote store not configured)"
        elif not result.save_result.ok:
            note = "Remote save failed; order kept locally"
        else:
            note = ""
        self.store.set_current_view("tables")
        self.line_cursor = None
        self._notify_status(f"Paid {result.order.order_number} {format_price(result.order.total)}")
        self._refresh_all()
        self.push_screen(ReceiptModal(render_receipt(result.order, staff_email), status=note))

    def _preview_bill(self) -> None:
        order = self.store.table_order(self.store.selected_table)
        if order is None:
            return
        staff_email = self.store.staff.email if self.store.staff else None
        self.push_screen(ReceiptModal(render_receipt(order, staff_email)))

    def _show_reports(self) -> None:
        if not auth.can_view_reports(self.store.staff):
            self._notify_status("Only admins can view reports")
            return
        staff_email = self.store.staff.email if self.store.staff else None
        self.push_screen(ReportsModal(self.store.completed_orders(), staff_email))

    def _toggle_availability(self) -> None:
        if not auth.can_manage_menu(self.store.staff):
            self._notify_status("Only admins can change the menu")
            return
        menu = self._visible_menu()
        if not menu:
            return
        item = menu[min(self.menu_cursor, len(menu) - 1)]
        updated = self.store.catalog.toggle_item_availability(item.id)
        if updated is not None:
            state = "available" if updated.is_active else "unavailable"
            self._notify_status(f"{updated.name} marked {state}")
        self._refresh_menu()

    # Rendering

    def _refresh_all(self) -> None:
        self._refresh_left()
        self._refresh_menu()
        self._refresh_status()

    def _refresh_left(self) -> None:
        try:
            title = self.query_one("#left-title", Static)
            body = self.query_one("#left-list", Static)
            totals = self.query_one("#totals", Static)
        except NoMatches:
            return

        if self.store.current_view == "tables":
            title.update("Tables")
            lines = Text()
            for idx, table in enumerate(self.store.tables):
                if idx > 0:
                    lines.append("\n")
                lines.append("➤ " if idx == self.table_cursor else "  ")
                lines.append_text(format_table_label(table))
            body.update(lines)
            totals.update("")
            return

        table = self.store.get_table(self.store.selected_table) if self.store.selected_table else None
        if table is None:
            title.update("No table selected")
            body.update("")
            totals.update("")
            return

        title_text = Text(f"{table.name} ")
        title_text.append(f" {table.status} ", style=status_style(table.status))
        title.update(title_text)
        if table.order is None or not table.order.items:
            body.update("(no items yet)")
            totals.update("")
            return

        lines = Text()
        for idx, item in enumerate(table.order.items):
            if idx > 0:
                lines.append("\n")
            lines.append("➤ " if idx == self.line_cursor else "  ")
            lines.append_text(format_cart_line(item))
        body.update(lines)
        totals.update(
            f"Subtotal {format_price(table.order.subtotal)}   "
            f"GST {format_price(table.order.gst_amount)}   "
            f"Total {format_price(table.order.total)}"
        )

    def _refresh_menu(self) -> None:
        try:
            widget = self.query_one("#menu-list", Static)
        except NoMatches:
            return
        if self.store.current_view != "pos":
            widget.update("Select a table (↑/↓, Enter)")
            return

        menu = self._visible_menu()
        if not menu:
            widget.update("No items")
            return
        if self.menu_cursor >= len(menu):
            self.menu_cursor = 0

        lines = Text()
        for idx, item in enumerate(menu):
            if idx > 0:
                lines.append("\n")
            pointer = "➤ " if idx == self.menu_cursor else "  "
            low = min(item.prices.values()) if item.prices else 0
            style = "dim strike" if not item.is_active else ""
            lines.append(f"{pointer}{item.name}  from {format_price(low)}", style=style)
        widget.update(lines)

    def _refresh_status(self) -> None:
        try:
            bar = self.query_one("#status-bar", Static)
        except NoMatches:
            return
        staff = self.store.staff
        who = f"{staff.email} ({staff.role})" if staff else "Not signed in"
        status = self.system_status or "Ready"
        if self.store.current_view == "pos":
            bar.update(
                f"{who} | Category: {self.store.selected_category} ([ ])\n"
                "Enter add  j/k line  +/- qty  d remove  h hold  c cash  v card  p bill  x clear  r reports\n"
                f"{status}"
            )
            return
        bar.update(f"{who}\nEnter open table. R reports. L logout. Ctrl+Q quit.\n{status}")
