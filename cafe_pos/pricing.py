"""GST and order total arithmetic."""

from __future__ import annotations

from typing import Iterable

from cafe_pos.constant import CURRENCY_PREFIX, EXTRA_PRICE, GST_RATE_BY_PAYMENT_METHOD
from cafe_pos.models import CartItem, PAYMENT_METHODS, ValidationError

# Draft orders show GST at the cash rate until a payment method is picked.
DISPLAY_PAYMENT_METHOD = "cash"


def gst_rate(payment_method: str) -> float:
    """Return the GST rate for a payment method (anything but cash is billed as card)."""
    if payment_method == "cash":
        return GST_RATE_BY_PAYMENT_METHOD["cash"]
    return GST_RATE_BY_PAYMENT_METHOD["card"]


def calculate_gst(subtotal: float, payment_method: str) -> float:
    """GST owed on a subtotal. Unrounded; formatting rounds for display."""
    return subtotal * gst_rate(payment_method)


def extras_price(extras: Iterable[str]) -> float:
    return len(set(extras)) * EXTRA_PRICE


def line_total(quantity: int, unit_price: float, extras_cost: float) -> float:
    return quantity * unit_price + extras_cost


def order_totals(items: Iterable[CartItem], payment_method: str = DISPLAY_PAYMENT_METHOD) -> tuple[float, float, float]:
    """Return (subtotal, gst_amount, total) across cart lines."""
    subtotal = sum(item.total_price for item in items)
    gst_amount = calculate_gst(subtotal, payment_method)
    return (subtotal, gst_amount, subtotal + gst_amount)


def validate_payment_method(payment_method: str) -> str:
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError(f"Unknown payment method: {payment_method!r}")
    return payment_method


def gst_label(payment_method: str) -> str:
    """Percent label such as '16%' used on receipts."""
    return f"{round(gst_rate(payment_method) * 100)}%"


def format_price(amount: float) -> str:
    return f"{CURRENCY_PREFIX} {amount:.2f}"
