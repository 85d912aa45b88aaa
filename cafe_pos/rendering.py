"""Rendering helpers: rich labels for the TUI and the plain-text receipt."""

from __future__ import annotations

from datetime import datetime

from rich.text import Text

from cafe_pos.constant import RECEIPT_FOOTER, RECEIPT_SUBTITLE, RECEIPT_TITLE, RECEIPT_WIDTH
from cafe_pos.models import CartItem, Order, Table
from cafe_pos.pricing import DISPLAY_PAYMENT_METHOD, calculate_gst, format_price, gst_label
from cafe_pos.reports import SalesSummary


def status_style(status: str) -> str:
    """Return a consistent badge style for table status."""
    if status == "occupied":
        return "bold #ffffff on #b23a48"
    if status == "held":
        return "bold #0b1f0f on #e0b44c"
    return "bold #0b1f0f on #5fbf72"


def format_table_label(table: Table) -> Text:
    text = Text()
    text.append(f" {table.id:>2} ", style=status_style(table.status))
    text.append(f" {table.name}")
    if table.order is not None:
        text.append(f"  {len(table.order.items)} items  {format_price(table.order.subtotal)}", style="dim")
    return text


def format_cart_line(item: CartItem) -> Text:
    """Render one cart line with size, quantity and extras tags."""
    text = Text()
    text.append(f"{item.quantity}x ", style="bold")
    text.append(f"{item.menu_item.name} ({item.size})")
    text.append(f"  {format_price(item.total_price)}", style="dim")
    if item.extras:
        text.append("\n      ")
        for idx, extra in enumerate(item.extras):
            if idx > 0:
                text.append(" ")
            text.append(f"[+{extra}]", style="white")
    return text


def _center(value: str) -> str:
    return value.center(RECEIPT_WIDTH).rstrip()


def _amount_row(label: str, amount: float) -> str:
    value = f"{amount:.2f}"
    return f"{label}{value.rjust(RECEIPT_WIDTH - len(label))}"


def render_receipt(order: Order, staff_email: str | None = None, printed_at: datetime | None = None) -> str:
    """Build the thermal-style text bill for an order.

    Draft orders are shown at the display GST rate; paid orders use the
    amounts stamped at payment.
    """
    when = printed_at or datetime.now()
    payment_method = order.payment_method or DISPLAY_PAYMENT_METHOD
    if order.status == "paid":
        gst_amount, total = order.gst_amount, order.total
    else:
        gst_amount = calculate_gst(order.subtotal, payment_method)
        total = order.subtotal + gst_amount

    rule = "=" * RECEIPT_WIDTH
    thin_rule = "-" * RECEIPT_WIDTH
    lines = [
        rule,
        _center(RECEIPT_TITLE),
        _center(RECEIPT_SUBTITLE),
        rule,
        f"Table: {order.table_id}",
        f"Order: {order.order_number}",
        f"Date: {when:%Y-%m-%d}",
        f"Time: {when:%H:%M:%S}",
        f"Staff: {staff_email or 'Unknown'}",
    ]
    if order.payment_method:
        lines.append(f"Payment: {order.payment_method.upper()}")
    lines.append(thin_rule)

    for item in order.items:
        lines.append(item.menu_item.name)
        lines.append(f"  {item.size} x{item.quantity}")
        if item.extras:
            lines.append(f"  Extras: {', '.join(item.extras)}")
        lines.append(f"  {item.total_price:.2f}")
        lines.append("")

    lines.extend(
        [
            thin_rule,
            _amount_row("Subtotal:", order.subtotal),
            _amount_row(f"GST ({gst_label(payment_method)}):", gst_amount),
            _amount_row("TOTAL:", total),
            rule,
            *[_center(line) for line in RECEIPT_FOOTER],
            rule,
        ]
    )
    return "\n".join(lines) + "\n"


def render_sales_report(
    summary: SalesSummary,
    orders: list[Order],
    selected: int | None = None,
    history_limit: int = 15,
) -> str:
    """Plain-text sales summary followed by the matching order history."""
    lines = [
        f"Revenue: {format_price(summary.total_revenue)}",
        f"Orders: {summary.total_orders}   Avg: {format_price(summary.avg_order_value)}",
        f"Cash: {summary.payment_counts.get('cash', 0)}   Card: {summary.payment_counts.get('card', 0)}",
        f"GST collected: {format_price(summary.gst_collected)}",
    ]

    if summary.top_items:
        lines.extend(["", "Top items"])
        for row in summary.top_items:
            lines.append(f"  {row.name} x{row.quantity}  {format_price(row.revenue)}")
    if summary.top_categories:
        lines.extend(["", "Top categories"])
        for row in summary.top_categories:
            lines.append(f"  {row.category}  {format_price(row.revenue)} ({row.order_count} orders)")
    if summary.daily_sales:
        lines.extend(["", "Daily sales"])
        for day in summary.daily_sales:
            lines.append(f"  {day.day:%Y-%m-%d}  {day.orders} orders  {format_price(day.revenue)}")

    lines.extend(["", "Orders"])
    if not orders:
        lines.append("  (no orders)")
    for idx, order in enumerate(orders[:history_limit]):
        pointer = "> " if idx == selected else "  "
        method = (order.payment_method or "-").upper()
        lines.append(f"{pointer}{order.order_number}  {method}  {format_price(order.total)}")
    hidden = len(orders) - history_limit
    if hidden > 0:
        lines.append(f"  ... {hidden} more")
    return "\n".join(lines)
