"""Order history filtering and sales summaries for the admin dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Iterable

from cafe_pos.models import Order

DATE_RANGES = ("all", "today", "week", "month")
TOP_LIMIT = 10


@dataclass
class ItemSales:
    name: str
    quantity: int = 0
    revenue: float = 0


@dataclass
class CategorySales:
    category: str
    quantity: int = 0
    revenue: float = 0
    order_count: int = 0


@dataclass
class DailySales:
    day: date
    revenue: float = 0
    orders: int = 0

    @property
    def avg_order(self) -> float:
        return self.revenue / self.orders if self.orders else 0


@dataclass
class SalesSummary:
    total_revenue: float = 0
    total_orders: int = 0
    gst_collected: float = 0
    payment_counts: dict[str, int] = field(default_factory=lambda: {"cash": 0, "card": 0})
    top_items: list[ItemSales] = field(default_factory=list)
    top_categories: list[CategorySales] = field(default_factory=list)
    daily_sales: list[DailySales] = field(default_factory=list)

    @property
    def avg_order_value(self) -> float:
        return self.total_revenue / self.total_orders if self.total_orders else 0


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def order_timestamp(order: Order) -> datetime | None:
    return _parse_timestamp(order.completed_at or order.updated_at or order.created_at)


def _range_start(date_range: str, now: datetime) -> datetime | None:
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if date_range == "today":
        return today
    if date_range == "week":
        return today - timedelta(days=7)
    if date_range == "month":
        month = today.month - 1 or 12
        year = today.year - (1 if today.month == 1 else 0)
        # Clamp e.g. 31 March -> 28/29 February.
        for day in range(today.day, 0, -1):
            try:
                return today.replace(year=year, month=month, day=day)
            except ValueError:
                continue
    return None


def filter_orders(
    orders: Iterable[Order],
    date_range: str = "all",
    payment_method: str = "all",
    query: str = "",
    now: datetime | None = None,
) -> list[Order]:
    """Filter orders by age, payment method and a text search.

    The search matches the order number or any item name, case-insensitively.
    """
    current = now or datetime.now(timezone.utc)
    start = _range_start(date_range, current)
    needle = query.strip().lower()

    matched: list[Order] = []
    for order in orders:
        if start is not None:
            stamp = order_timestamp(order)
            if stamp is None or stamp < start:
                continue
        if payment_method != "all" and order.payment_method != payment_method:
            continue
        if needle and needle not in order.order_number.lower():
            if not any(needle in item.menu_item.name.lower() for item in order.items):
                continue
        matched.append(order)
    return matched


def summarize(orders: Iterable[Order]) -> SalesSummary:
    summary = SalesSummary()
    items: dict[str, ItemSales] = {}
    categories: dict[str, CategorySales] = {}
    category_orders: dict[str, set[str]] = {}
    days: dict[date, DailySales] = {}

    for order in orders:
        summary.total_revenue += order.total
        summary.total_orders += 1
        summary.gst_collected += order.gst_amount
        if order.payment_method in summary.payment_counts:
            summary.payment_counts[order.payment_method] += 1

        for item in order.items:
            sales = items.setdefault(item.menu_item.name, ItemSales(name=item.menu_item.name))
            sales.quantity += item.quantity
            sales.revenue += item.total_price

            category = item.menu_item.category
            cat_sales = categories.setdefault(category, CategorySales(category=category))
            cat_sales.quantity += item.quantity
            cat_sales.revenue += item.total_price
            category_orders.setdefault(category, set()).add(order.order_number)

        stamp = order_timestamp(order)
        if stamp is not None:
            day = days.setdefault(stamp.date(), DailySales(day=stamp.date()))
            day.revenue += order.total
            day.orders += 1

    for category, cat_sales in categories.items():
        cat_sales.order_count = len(category_orders[category])

    summary.top_items = sorted(items.values(), key=lambda row: row.quantity, reverse=True)[:TOP_LIMIT]
    summary.top_categories = sorted(categories.values(), key=lambda row: row.revenue, reverse=True)[:TOP_LIMIT]
    summary.daily_sales = sorted(days.values(), key=lambda row: row.day)
    return summary
