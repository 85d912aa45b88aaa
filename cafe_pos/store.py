"""Per-table order engine: cart lines, totals and the table/order lifecycle.

Tables move empty -> occupied -> held -> paid (and back to empty). All
operations run synchronously; the only outward call is the remote save made
while paying, and its failure never undoes the local transition.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable

from cafe_pos import auth
from cafe_pos.constant import ALL_CATEGORY, COMPLETED_ORDER_LIMIT, ORDER_NUMBER_PREFIX, TABLE_COUNT
from cafe_pos.data import MenuCatalog, normalize_extras
from cafe_pos.models import CartItem, Order, Staff, Table, ValidationError
from cafe_pos.persistence import SNAPSHOT_KEY, LocalStore
from cafe_pos.pricing import calculate_gst, extras_price, line_total, order_totals, validate_payment_method
from cafe_pos.remote import RemoteStore, SaveResult

logger = logging.getLogger("cafe_pos.store")

VIEWS = ("tables", "pos")
_UPDATABLE_LINE_FIELDS = {"quantity", "extras"}


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class PaymentResult:
    """A paid order ready for the receipt, plus what happened to the remote copy."""

    order: Order
    save_result: SaveResult


class PosStore:
    """Owns the tables, their orders and the session-level UI selections."""

    def __init__(
        self,
        local_store: LocalStore | None = None,
        remote: RemoteStore | None = None,
        catalog: MenuCatalog | None = None,
        table_count: int = TABLE_COUNT,
        now: Callable[[], str] = _utc_now_iso,
    ) -> None:
        self.local_store = local_store
        self.remote = remote
        self.catalog = catalog if catalog is not None else MenuCatalog()
        self.table_count = table_count
        self._now = now

        self.staff: Staff | None = None
        self.tables: list[Table] = []
        self.selected_table: int | None = None
        self.current_view = "tables"
        self.selected_category = ALL_CATEGORY
        self._completed: list[Order] = []

    # Session

    @property
    def is_authenticated(self) -> bool:
        return self.staff is not None

    @property
    def is_admin_mode(self) -> bool:
        return auth.is_admin(self.staff)

    def set_staff(self, staff: Staff | None) -> None:
        """Set the acting staff member and cache (or drop) the session locally."""
        self.staff = staff
        if self.local_store is None:
            return
        if staff is None:
            auth.clear_session(self.local_store)
        else:
            auth.save_session(self.local_store, staff)

    def restore_session(self) -> Staff | None:
        if self.local_store is None:
            return None
        session = auth.get_session(self.local_store)
        self.staff = session.staff if session else None
        return self.staff

    def logout(self) -> None:
        self.set_staff(None)
        self.selected_table = None
        self.current_view = "tables"

    # Snapshot

    def load_persisted(self) -> None:
        """Restore tables and the category filter saved by a previous run."""
        if self.local_store is None:
            return
        snapshot = self.local_store.get(SNAPSHOT_KEY)
        if not isinstance(snapshot, dict):
            return
        try:
            tables = [Table.from_dict(raw) for raw in snapshot.get("tables") or []]
        except (KeyError, TypeError, ValueError):
            logger.warning("snapshot_unreadable, starting with fresh tables")
            return
        self.tables = tables
        self.selected_category = str(snapshot.get("selected_category") or ALL_CATEGORY)

    def _persist(self) -> None:
        if self.local_store is None:
            return
        self.local_store.set(
            SNAPSHOT_KEY,
            {
                "tables": [table.to_dict() for table in self.tables],
                "selected_category": self.selected_category,
            },
        )

    # Tables and view

    def initialize_tables(self) -> None:
        """Create the fixed set of empty tables; leaves existing tables untouched."""
        if self.tables:
            return
        self.tables = [Table(id=idx, name=f"Table {idx}") for idx in range(1, self.table_count + 1)]
        self._persist()

    def get_table(self, table_id: int) -> Table | None:
        for table in self.tables:
            if table.id == table_id:
                return table
        return None

    def select_table(self, table_id: int) -> None:
        if self.get_table(table_id) is None:
            logger.debug("select_table_skipped table_id=%s reason=not_found", table_id)
            return
        self.selected_table = table_id
        self.current_view = "pos"

    def require_selected_table(self) -> Table:
        table = self.get_table(self.selected_table) if self.selected_table is not None else None
        if table is None:
            raise ValidationError("Please select a table first")
        return table

    def set_current_view(self, view: str) -> None:
        if view not in VIEWS:
            raise ValidationError(f"Unknown view: {view!r}")
        self.current_view = view

    def set_selected_category(self, category: str) -> None:
        self.selected_category = category
        self._persist()

    def set_table_status(self, table_id: int, status: str) -> None:
        """Flip a table between occupied and held; emptying goes through clear or pay."""
        if status not in ("occupied", "held"):
            raise ValidationError(f"Table status cannot be set to {status!r}")
        table = self.get_table(table_id)
        if table is None:
            return
        if table.order is None:
            raise ValidationError(f"Table {table_id} has no order")
        stamp = self._now()
        table.status = status  # type: ignore[assignment]
        table.order.status = "held" if status == "held" else "draft"
        table.order.updated_at = stamp
        table.last_updated = stamp
        self._persist()

    def table_order(self, table_id: int | None) -> Order | None:
        table = self.get_table(table_id) if table_id is not None else None
        return table.order if table else None

    def table_cart(self, table_id: int | None) -> list[CartItem]:
        order = self.table_order(table_id)
        return list(order.items) if order else []

    def active_tables(self) -> list[Table]:
        return [table for table in self.tables if table.status != "empty"]

    # Cart lines

    def _new_order(self, table_id: int) -> Order:
        stamp = self._now()
        order = Order(
            order_number=f"{ORDER_NUMBER_PREFIX}-T{table_id}-{int(time.time() * 1000)}",
            table_id=table_id,
            staff_id=self.staff.id if self.staff else "",
            created_at=stamp,
            updated_at=stamp,
        )
        logger.info("order_created table_id=%s order_number=%s", table_id, order.order_number)
        return order

    def _recalculate(self, table: Table, order: Order) -> None:
        """Refresh totals and mark the table as actively edited."""
        order.subtotal, order.gst_amount, order.total = order_totals(order.items)
        order.status = "draft"
        order.updated_at = self._now()
        table.status = "occupied"
        table.last_updated = order.updated_at

    def _detach(self, table: Table) -> None:
        table.order = None
        table.status = "empty"
        table.last_updated = self._now()

    def add_to_table_cart(self, table_id: int, item: CartItem) -> Order | None:
        """Add a line, folding it into an identical existing line when there is one."""
        if item.quantity < 1:
            raise ValidationError("Quantity must be at least 1")
        table = self.get_table(table_id)
        if table is None:
            logger.debug("add_to_cart_skipped table_id=%s reason=not_found", table_id)
            return None

        if table.order is None:
            table.order = self._new_order(table_id)
        order = table.order

        # Orders own their lines; the caller's object is never stored.
        extras = normalize_extras(item.extras)
        extras_cost = extras_price(extras)
        line = replace(
            item,
            menu_item=replace(item.menu_item, sizes=list(item.menu_item.sizes), prices=dict(item.menu_item.prices)),
            extras=extras,
            extras_price=extras_cost,
            total_price=line_total(item.quantity, item.unit_price, extras_cost),
        )

        lines_by_key = {current.merge_key(): current for current in order.items}
        existing = lines_by_key.get(line.merge_key())
        if existing is not None:
            existing.quantity += line.quantity
            existing.total_price = line_total(existing.quantity, existing.unit_price, existing.extras_price)
        else:
            order.items.append(line)

        self._recalculate(table, order)
        self._persist()
        return order

    def update_table_cart_item(self, table_id: int, item_id: str, **updates: Any) -> CartItem | None:
        """Apply quantity/extras changes to one line and reprice it."""
        unknown = set(updates) - _UPDATABLE_LINE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update cart line fields: {', '.join(sorted(unknown))}")
        if "quantity" in updates and int(updates["quantity"]) < 1:
            raise ValidationError("Quantity must be at least 1")

        table = self.get_table(table_id)
        if table is None or table.order is None:
            logger.debug("update_cart_item_skipped table_id=%s item_id=%s reason=no_order", table_id, item_id)
            return None
        line = next((candidate for candidate in table.order.items if candidate.id == item_id), None)
        if line is None:
            logger.debug("update_cart_item_skipped table_id=%s item_id=%s reason=not_found", table_id, item_id)
            return None

        if "quantity" in updates:
            line.quantity = int(updates["quantity"])
        if "extras" in updates:
            line.extras = normalize_extras(updates["extras"])
            line.extras_price = extras_price(line.extras)
        line.total_price = line_total(line.quantity, line.unit_price, line.extras_price)

        self._recalculate(table, table.order)
        self._persist()
        return line

    def remove_from_table_cart(self, table_id: int, item_id: str) -> None:
        table = self.get_table(table_id)
        if table is None or table.order is None:
            return
        remaining = [line for line in table.order.items if line.id != item_id]
        if len(remaining) == len(table.order.items):
            logger.debug("remove_cart_item_skipped table_id=%s item_id=%s reason=not_found", table_id, item_id)
            return

        if not remaining:
            logger.info("table_emptied table_id=%s order_number=%s", table_id, table.order.order_number)
            self._detach(table)
        else:
            table.order.items = remaining
            self._recalculate(table, table.order)
        self._persist()

    def clear_table_cart(self, table_id: int) -> None:
        table = self.get_table(table_id)
        if table is None:
            return
        if table.order is not None:
            logger.info("table_cleared table_id=%s order_number=%s", table_id, table.order.order_number)
        self._detach(table)
        self._persist()

    # Lifecycle

    def hold_table_order(self, table_id: int) -> Order | None:
        table = self.get_table(table_id)
        if table is None or table.order is None:
            return None
        stamp = self._now()
        table.order.status = "held"
        table.order.updated_at = stamp
        table.status = "held"
        table.last_updated = stamp
        logger.info("order_held table_id=%s order_number=%s", table_id, table.order.order_number)
        self._persist()
        return table.order

    def pay_table_order(self, table_id: int, payment_method: str) -> PaymentResult | None:
        """Finalize a table's order, try the remote save, then free the table.

        The remote save is best-effort: whatever it reports, the order is
        returned as paid, logged locally and detached from the table.
        """
        validate_payment_method(payment_method)
        table = self.get_table(table_id)
        if table is None or table.order is None:
            logger.debug("pay_skipped table_id=%s reason=no_order", table_id)
            return None

        order = table.order
        order.subtotal = sum(line.total_price for line in order.items)
        order.gst_amount = calculate_gst(order.subtotal, payment_method)
        order.total = order.subtotal + order.gst_amount
        order.payment_method = payment_method  # type: ignore[assignment]
        order.status = "paid"
        order.updated_at = self._now()
        logger.info(
            "order_paid table_id=%s order_number=%s payment_method=%s total=%.2f",
            table_id,
            order.order_number,
            payment_method,
            order.total,
        )

        if self.remote is not None:
            save_result = self.remote.save_order(order)
        else:
            save_result = SaveResult(status="local_only")
        if not save_result.ok:
            logger.warning(
                "order_not_synced order_number=%s, continuing with local state only", order.order_number
            )

        self._detach(table)
        self._record_completed(order)
        self._persist()
        return PaymentResult(order=order, save_result=save_result)

    # Completed orders

    def _record_completed(self, order: Order) -> None:
        if self.local_store is not None:
            self.local_store.append_completed_order(order)
            return
        order.completed_at = self._now()
        self._completed.insert(0, order)
        del self._completed[COMPLETED_ORDER_LIMIT:]

    def completed_orders(self) -> list[Order]:
        if self.local_store is not None:
            return self.local_store.completed_orders()
        return list(self._completed)

    def find_completed_order(self, order_number: str) -> Order | None:
        if self.local_store is not None:
            return self.local_store.find_completed_order(order_number)
        return next((order for order in self._completed if order.order_number == order_number), None)
