from __future__ import annotations

import sqlite3

from cafe_pos.data import build_cart_item
from cafe_pos.models import Order
from cafe_pos.persistence import LocalStore


def _order(number: str, cappuccino) -> Order:
    item = build_cart_item(cappuccino, "Regular")
    return Order(
        order_number=number,
        table_id=1,
        staff_id="staff",
        items=[item],
        subtotal=item.total_price,
        status="paid",
        payment_method="cash",
    )


def test_bootstrap_creates_db_file(tmp_path):
    db_path = tmp_path / "nested" / "pos.db"
    LocalStore(db_path)
    assert db_path.is_file()


def test_key_values_round_trip_and_delete(local_store):
    assert local_store.get("missing") is None
    local_store.set("pos_store", {"selected_category": "Tea", "tables": []})
    local_store.set("pos_store", {"selected_category": "Bakery", "tables": []})
    assert local_store.get("pos_store") == {"selected_category": "Bakery", "tables": []}
    local_store.delete("pos_store")
    assert local_store.get("pos_store") is None


def test_corrupt_values_read_as_absent(local_store):
    with sqlite3.connect(local_store.db_path) as conn:
        conn.execute(
            "INSERT INTO kv_store (key, value, updated_at) VALUES ('session', '{not json', '2024-01-01')"
        )
    assert local_store.get("session") is None


def test_completed_orders_are_capped(tmp_path, cappuccino):
    store = LocalStore(tmp_path / "pos.db", completed_limit=3)
    for idx in range(5):
        store.append_completed_order(_order(f"GJC-T1-{idx}", cappuccino))

    numbers = [order.order_number for order in store.completed_orders()]
    assert numbers == ["GJC-T1-4", "GJC-T1-3", "GJC-T1-2"]
    assert store.find_completed_order("GJC-T1-0") is None


def test_completed_order_keeps_lines(local_store, cappuccino):
    logged = local_store.append_completed_order(_order("GJC-T1-1", cappuccino))
    assert logged.completed_at is not None

    found = local_store.find_completed_order("GJC-T1-1")
    assert found.items[0].menu_item.name == "Cappuccino"
    assert found.items[0].unit_price == 795
    assert found.completed_at == logged.completed_at
