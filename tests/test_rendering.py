from __future__ import annotations

from datetime import datetime

from cafe_pos.data import build_cart_item
from cafe_pos.models import Order, Table
from cafe_pos.rendering import format_cart_line, format_table_label, render_receipt, render_sales_report
from cafe_pos.reports import summarize

PRINTED_AT = datetime(2024, 3, 31, 14, 5, 9)


def _order(cappuccino, caramel_latte, **overrides) -> Order:
    items = [
        build_cart_item(cappuccino, "Regular", quantity=2),
        build_cart_item(caramel_latte, "Large", extras=["Espresso Shot"]),
    ]
    fields = dict(
        order_number="GJC-T3-1718000000000",
        table_id=3,
        staff_id="staff",
        items=items,
        subtotal=2990,
        gst_amount=2990 * 0.16,
        total=2990 * 1.16,
    )
    fields.update(overrides)
    return Order(**fields)


def test_paid_receipt_uses_stamped_amounts(cappuccino, caramel_latte):
    order = _order(
        cappuccino,
        caramel_latte,
        status="paid",
        payment_method="card",
        gst_amount=149.5,
        total=3139.5,
    )
    text = render_receipt(order, "cashier@gloriapos.com", printed_at=PRINTED_AT)
    lines = text.splitlines()

    assert "Table: 3" in lines
    assert "Order: GJC-T3-1718000000000" in lines
    assert "Date: 2024-03-31" in lines
    assert "Time: 14:05:09" in lines
    assert "Staff: cashier@gloriapos.com" in lines
    assert "Payment: CARD" in lines
    assert "  Regular x2" in lines
    assert "  Extras: Espresso Shot" in lines
    assert "  1400.00" in lines
    assert any(line.startswith("GST (5%):") and line.endswith("149.50") for line in lines)
    assert any(line.startswith("TOTAL:") and line.endswith("3139.50") for line in lines)
    assert all(len(line) <= 32 for line in lines)


def test_draft_receipt_shows_cash_rate(cappuccino, caramel_latte):
    text = render_receipt(_order(cappuccino, caramel_latte), printed_at=PRINTED_AT)
    assert "Staff: Unknown" in text
    assert "GST (16%):" in text
    assert "478.40" in text


def test_cart_line_label_lists_extras(caramel_latte):
    line = build_cart_item(caramel_latte, "Large", extras=["Espresso Shot", "Whipped Cream"])
    plain = format_cart_line(line).plain
    assert plain.startswith("1x Caramel Latté (Large)")
    assert "Rs. 1750.00" in plain
    assert "[+Espresso Shot] [+Whipped Cream]" in plain


def test_table_label_shows_order_summary(cappuccino, caramel_latte):
    assert format_table_label(Table(id=4, name="Table 4")).plain == "  4  Table 4"
    busy = Table(id=12, name="Table 12", status="occupied", order=_order(cappuccino, caramel_latte))
    assert format_table_label(busy).plain == " 12  Table 12  2 items  Rs. 2990.00"


def test_sales_report_lists_summary_and_history(cappuccino, caramel_latte):
    card = Order(
        order_number="GJC-T1-1",
        table_id=1,
        staff_id="staff",
        items=[build_cart_item(cappuccino, "Regular", quantity=2)],
        subtotal=1590,
        gst_amount=79.5,
        total=1669.5,
        status="paid",
        payment_method="card",
        completed_at="2024-03-31T09:00:00+00:00",
    )
    cash = Order(
        order_number="GJC-T2-2",
        table_id=2,
        staff_id="staff",
        items=[build_cart_item(caramel_latte, "Large", extras=["Espresso Shot"])],
        subtotal=1400,
        gst_amount=224,
        total=1624,
        status="paid",
        payment_method="cash",
        completed_at="2024-03-30T18:00:00+00:00",
    )
    orders = [card, cash]

    text = render_sales_report(summarize(orders), orders, selected=1)
    lines = text.splitlines()
    assert lines[:4] == [
        "Revenue: Rs. 3293.50",
        "Orders: 2   Avg: Rs. 1646.75",
        "Cash: 1   Card: 1",
        "GST collected: Rs. 303.50",
    ]
    assert "  Cappuccino x2  Rs. 1590.00" in lines
    assert "  Hot Coffee  Rs. 2990.00 (2 orders)" in lines
    assert "  2024-03-30  1 orders  Rs. 1624.00" in lines
    assert "  GJC-T1-1  CARD  Rs. 1669.50" in lines
    assert "> GJC-T2-2  CASH  Rs. 1624.00" in lines


def test_sales_report_without_orders():
    text = render_sales_report(summarize([]), [], history_limit=3)
    assert text.splitlines()[-1] == "  (no orders)"
