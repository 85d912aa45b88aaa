from __future__ import annotations

import httpx
import pytest

from cafe_pos.constant import TABLE_COUNT
from cafe_pos.data import build_cart_item
from cafe_pos.models import CartItem, ValidationError
from cafe_pos.persistence import LocalStore
from cafe_pos.store import PosStore


def _assert_table_invariants(store: PosStore) -> None:
    for table in store.tables:
        if table.status == "empty":
            assert table.order is None
        else:
            assert table.order is not None
            expected = "held" if table.status == "held" else "draft"
            assert table.order.status == expected
            assert table.order.subtotal == sum(item.total_price for item in table.order.items)
            assert table.order.total == table.order.subtotal + table.order.gst_amount


def test_initialize_tables_creates_fifteen_empty_tables(store):
    assert [table.id for table in store.tables] == list(range(1, TABLE_COUNT + 1))
    assert all(table.status == "empty" and table.order is None for table in store.tables)
    assert store.tables[0].name == "Table 1"


def test_initialize_tables_is_idempotent(store, cappuccino):
    store.add_to_table_cart(2, build_cart_item(cappuccino, "Regular"))
    store.initialize_tables()
    assert len(store.tables) == TABLE_COUNT
    assert store.get_table(2).status == "occupied"


def test_select_table_switches_view(store):
    store.select_table(4)
    assert store.selected_table == 4
    assert store.current_view == "pos"


def test_select_unknown_table_is_silent(store):
    store.select_table(99)
    assert store.selected_table is None
    assert store.current_view == "tables"
    with pytest.raises(ValidationError):
        store.require_selected_table()


def test_first_add_creates_draft_order(store, cappuccino, cashier):
    order = store.add_to_table_cart(3, build_cart_item(cappuccino, "Regular"))
    table = store.get_table(3)
    assert table.status == "occupied"
    assert order is table.order
    assert order.status == "draft"
    assert order.subtotal == 795
    assert order.staff_id == cashier.id
    assert order.order_number.startswith("GJC-T3-")
    _assert_table_invariants(store)


def test_repeated_adds_merge_into_one_line(store, cappuccino):
    for quantity in (1, 2, 3):
        store.add_to_table_cart(5, build_cart_item(cappuccino, "Regular", quantity=quantity, extras=["Flavour Syrup"]))
    lines = store.table_cart(5)
    assert len(lines) == 1
    assert lines[0].quantity == 6
    assert lines[0].total_price == 6 * 795 + 350
    _assert_table_invariants(store)


def test_merge_ignores_extras_order(store, cappuccino):
    store.add_to_table_cart(1, build_cart_item(cappuccino, "Regular", extras=["Espresso Shot", "Whipped Cream"]))
    store.add_to_table_cart(1, build_cart_item(cappuccino, "Regular", extras=["Whipped Cream", "Espresso Shot"]))
    lines = store.table_cart(1)
    assert len(lines) == 1
    assert lines[0].quantity == 2


def test_different_size_or_extras_make_new_lines(store, cappuccino):
    store.add_to_table_cart(1, build_cart_item(cappuccino, "Regular"))
    store.add_to_table_cart(1, build_cart_item(cappuccino, "Large"))
    store.add_to_table_cart(1, build_cart_item(cappuccino, "Regular", extras=["Espresso Shot"]))
    assert len(store.table_cart(1)) == 3
    assert store.table_order(1).subtotal == 795 + 950 + 795 + 350


def test_one_line_object_added_to_two_tables_stays_independent(store, cappuccino):
    line = build_cart_item(cappuccino, "Regular")
    store.add_to_table_cart(1, line)
    store.add_to_table_cart(2, line)
    store.add_to_table_cart(1, build_cart_item(cappuccino, "Regular"))

    assert store.table_cart(1)[0].quantity == 2
    assert store.table_cart(2)[0].quantity == 1
    assert store.table_cart(2)[0].total_price == 795
    assert store.table_order(2).subtotal == 795
    assert store.table_cart(1)[0] is not line
    assert store.table_order(1).items is not store.table_order(2).items
    assert line.quantity == 1
    _assert_table_invariants(store)


def test_hand_built_line_is_repriced_on_add(store, cappuccino):
    line = CartItem(id="x1", menu_item=cappuccino, size="Regular", quantity=2, unit_price=795)
    store.add_to_table_cart(3, line)

    stored = store.table_cart(3)[0]
    assert stored.total_price == 1590
    assert store.table_order(3).subtotal == 1590

    store.add_to_table_cart(
        3,
        CartItem(
            id="x2",
            menu_item=cappuccino,
            size="Large",
            quantity=1,
            unit_price=950,
            extras=["Whipped Cream", "Whipped Cream"],
            extras_price=9999,
            total_price=1,
        ),
    )
    large = store.table_cart(3)[1]
    assert large.extras == ["Whipped Cream"]
    assert large.extras_price == 350
    assert large.total_price == 950 + 350
    assert store.table_order(3).subtotal == 1590 + 1300
    _assert_table_invariants(store)


def test_add_to_unknown_table_is_a_no_op(store, cappuccino):
    assert store.add_to_table_cart(42, build_cart_item(cappuccino, "Regular")) is None
    assert store.active_tables() == []


def test_update_quantity_reprices_line_and_order(store, cappuccino):
    store.add_to_table_cart(2, build_cart_item(cappuccino, "Regular", extras=["Espresso Shot"]))
    line_id = store.table_cart(2)[0].id
    line = store.update_table_cart_item(2, line_id, quantity=4)
    assert line.total_price == 4 * 795 + 350
    assert store.table_order(2).subtotal == 4 * 795 + 350
    _assert_table_invariants(store)


def test_update_extras_reprices_line(store, cappuccino):
    store.add_to_table_cart(2, build_cart_item(cappuccino, "Regular"))
    line_id = store.table_cart(2)[0].id
    line = store.update_table_cart_item(2, line_id, extras=["Espresso Shot", "Whipped Cream"])
    assert line.extras_price == 700
    assert line.total_price == 795 + 700


def test_update_missing_line_or_order_is_a_no_op(store, cappuccino):
    assert store.update_table_cart_item(7, "cart_missing", quantity=2) is None
    store.add_to_table_cart(7, build_cart_item(cappuccino, "Regular"))
    assert store.update_table_cart_item(7, "cart_missing", quantity=2) is None
    assert store.table_cart(7)[0].quantity == 1


def test_update_rejects_non_positive_quantity(store, cappuccino):
    store.add_to_table_cart(2, build_cart_item(cappuccino, "Regular"))
    line_id = store.table_cart(2)[0].id
    with pytest.raises(ValidationError):
        store.update_table_cart_item(2, line_id, quantity=0)
    assert store.table_cart(2)[0].quantity == 1


def test_removing_last_line_empties_table(store, cappuccino, caramel_latte):
    store.add_to_table_cart(6, build_cart_item(cappuccino, "Regular"))
    store.add_to_table_cart(6, build_cart_item(caramel_latte, "Large"))
    first, second = store.table_cart(6)

    store.remove_from_table_cart(6, first.id)
    assert store.get_table(6).status == "occupied"
    assert store.table_order(6).subtotal == 1050

    store.remove_from_table_cart(6, second.id)
    table = store.get_table(6)
    assert table.status == "empty"
    assert table.order is None


def test_clear_table_cart_detaches_order(store, cappuccino):
    store.add_to_table_cart(8, build_cart_item(cappuccino, "Regular"))
    store.clear_table_cart(8)
    assert store.get_table(8).status == "empty"
    assert store.table_order(8) is None


def test_hold_is_idempotent(store, cappuccino):
    store.add_to_table_cart(9, build_cart_item(cappuccino, "Regular", quantity=2))
    store.hold_table_order(9)
    before = store.table_order(9).to_dict()
    store.hold_table_order(9)
    after = store.table_order(9).to_dict()

    assert store.get_table(9).status == "held"
    assert after["status"] == "held"
    for key in ("items", "subtotal", "gst_amount", "total"):
        assert after[key] == before[key]
    _assert_table_invariants(store)


def test_hold_without_order_does_nothing(store):
    assert store.hold_table_order(10) is None
    assert store.get_table(10).status == "empty"


def test_editing_a_held_order_reactivates_it(store, cappuccino):
    store.add_to_table_cart(9, build_cart_item(cappuccino, "Regular"))
    store.hold_table_order(9)
    store.add_to_table_cart(9, build_cart_item(cappuccino, "Regular"))
    assert store.get_table(9).status == "occupied"
    assert store.table_order(9).status == "draft"
    _assert_table_invariants(store)


def test_set_table_status_keeps_order_in_step(store, cappuccino):
    store.add_to_table_cart(4, build_cart_item(cappuccino, "Regular"))
    store.set_table_status(4, "held")
    assert store.table_order(4).status == "held"
    store.set_table_status(4, "occupied")
    assert store.table_order(4).status == "draft"
    _assert_table_invariants(store)


@pytest.mark.parametrize("status", ["empty", "paid", "closed"])
def test_set_table_status_rejects_statuses_reached_by_other_operations(store, cappuccino, status):
    store.add_to_table_cart(4, build_cart_item(cappuccino, "Regular"))
    with pytest.raises(ValidationError):
        store.set_table_status(4, status)
    assert store.get_table(4).status == "occupied"
    assert store.table_order(4) is not None


def test_set_table_status_needs_an_order(store):
    with pytest.raises(ValidationError):
        store.set_table_status(5, "held")
    assert store.get_table(5).status == "empty"
    _assert_table_invariants(store)


def test_pay_by_card_scenario(store, cappuccino):
    store.add_to_table_cart(3, build_cart_item(cappuccino, "Regular"))
    assert store.table_order(3).subtotal == 795
    store.add_to_table_cart(3, build_cart_item(cappuccino, "Regular"))
    assert len(store.table_cart(3)) == 1
    assert store.table_cart(3)[0].quantity == 2
    assert store.table_order(3).subtotal == 1590

    result = store.pay_table_order(3, "card")

    order = result.order
    assert order.status == "paid"
    assert order.payment_method == "card"
    assert order.gst_amount == pytest.approx(79.5)
    assert order.gst_amount == order.subtotal * 0.05
    assert order.total == pytest.approx(1669.5)
    assert store.get_table(3).status == "empty"
    assert store.get_table(3).order is None
    assert result.save_result.status == "local_only"


def test_pay_held_order_in_cash(store, caramel_latte):
    store.catalog.update_menu_item("caramel_latte", prices={"Regular": 600, "Large": 1050})
    store.add_to_table_cart(11, build_cart_item(store.catalog.get("caramel_latte"), "Regular", quantity=2))
    store.hold_table_order(11)
    assert store.table_order(11).subtotal == 1200

    result = store.pay_table_order(11, "cash")
    assert result.order.status == "paid"
    assert result.order.gst_amount == pytest.approx(192)
    assert result.order.total == pytest.approx(1392)
    assert store.get_table(11).status == "empty"


def test_pay_without_order_returns_none(store):
    assert store.pay_table_order(12, "cash") is None


def test_pay_rejects_unknown_method_without_touching_state(store, cappuccino):
    store.add_to_table_cart(12, build_cart_item(cappuccino, "Regular"))
    with pytest.raises(ValidationError):
        store.pay_table_order(12, "cheque")
    assert store.get_table(12).status == "occupied"
    assert store.table_order(12).status == "draft"


def test_paid_orders_are_logged_newest_first(store, cappuccino):
    store.add_to_table_cart(1, build_cart_item(cappuccino, "Regular"))
    first = store.pay_table_order(1, "cash").order
    store.add_to_table_cart(2, build_cart_item(cappuccino, "Large"))
    second = store.pay_table_order(2, "card").order

    history = store.completed_orders()
    assert [order.order_number for order in history] == [second.order_number, first.order_number]
    assert all(order.completed_at for order in history)
    assert store.find_completed_order(first.order_number).total == pytest.approx(first.total)


def test_in_memory_history_when_no_local_store(cappuccino):
    store = PosStore()
    store.initialize_tables()
    store.add_to_table_cart(1, build_cart_item(cappuccino, "Regular"))
    paid = store.pay_table_order(1, "cash").order
    assert store.completed_orders()[0] is paid
    assert paid.staff_id == ""


def test_remote_failure_still_completes_payment(local_store, catalog, cashier, make_remote, cappuccino):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("backend unreachable", request=request)

    remote, backend = make_remote(handler)
    store = PosStore(local_store=local_store, remote=remote, catalog=catalog)
    store.set_staff(cashier)
    store.initialize_tables()
    store.add_to_table_cart(4, build_cart_item(cappuccino, "Regular"))

    result = store.pay_table_order(4, "cash")

    assert backend.requests
    assert result.save_result.ok is False
    assert result.order.status == "paid"
    assert store.get_table(4).status == "empty"
    assert store.completed_orders()[0].order_number == result.order.order_number


def test_state_survives_a_restart(local_store, catalog, cashier, cappuccino):
    first = PosStore(local_store=local_store, catalog=catalog)
    first.set_staff(cashier)
    first.initialize_tables()
    first.add_to_table_cart(5, build_cart_item(cappuccino, "Regular", extras=["Whipped Cream"]))
    first.hold_table_order(5)
    first.set_selected_category("Hot Coffee")

    second = PosStore(local_store=LocalStore(local_store.db_path), catalog=catalog)
    second.load_persisted()
    second.initialize_tables()
    assert second.restore_session() == cashier
    assert second.selected_category == "Hot Coffee"
    table = second.get_table(5)
    assert table.status == "held"
    assert table.order.items[0].extras == ["Whipped Cream"]
    assert table.order.subtotal == 795 + 350


def test_logout_clears_session(store, local_store):
    store.logout()
    assert store.staff is None
    assert PosStore(local_store=local_store).restore_session() is None
