"""Menu catalogue: seed data, categories, admin edits and cart-line building."""

from __future__ import annotations

import logging
import random
import string
import time
from dataclasses import replace
from typing import Any, Iterable

from cafe_pos.constant import ALL_CATEGORY, AVAILABLE_EXTRAS, MENU_SEED
from cafe_pos.models import CartItem, MenuItem, ValidationError
from cafe_pos.pricing import extras_price, line_total

logger = logging.getLogger("cafe_pos.data")

SEED_MENU: list[MenuItem] = [MenuItem.from_dict(raw) for raw in MENU_SEED]

_EDITABLE_FIELDS = {"name", "category", "sizes", "prices", "description", "image_url", "is_active"}


def generate_cart_item_id() -> str:
    """Return a line id such as ``cart_1718000000000_k3j9x0a1b``."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"cart_{int(time.time() * 1000)}_{suffix}"


def validate_menu_item(item: MenuItem) -> MenuItem:
    """Reject items missing required fields or with prices that do not match sizes."""
    missing = [name for name in ("id", "name", "category") if not str(getattr(item, name) or "").strip()]
    if missing:
        raise ValidationError(f"Menu item is missing required fields: {', '.join(missing)}")
    if not item.sizes:
        raise ValidationError(f"Menu item {item.id!r} needs at least one size")
    if len(set(item.sizes)) != len(item.sizes):
        raise ValidationError(f"Menu item {item.id!r} has duplicate sizes")
    if set(item.prices) != set(item.sizes):
        raise ValidationError(f"Menu item {item.id!r} must have exactly one price per size")
    for size, price in item.prices.items():
        if isinstance(price, bool) or not isinstance(price, (int, float)) or price < 0:
            raise ValidationError(f"Menu item {item.id!r} has an invalid price for {size!r}")
    return item


def normalize_extras(extras: Iterable[str]) -> list[str]:
    """Deduplicate extras while keeping first-seen order for display."""
    seen: list[str] = []
    for extra in extras:
        label = str(extra).strip()
        if label and label not in seen:
            seen.append(label)
    return seen


def build_cart_item(
    menu_item: MenuItem,
    size: str,
    quantity: int = 1,
    extras: Iterable[str] = (),
) -> CartItem:
    """Price a new cart line from the menu item as it is right now."""
    if size not in menu_item.prices:
        raise ValidationError(f"{menu_item.name} has no size {size!r}")
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1")

    chosen_extras = normalize_extras(extras)
    unknown = [extra for extra in chosen_extras if extra not in AVAILABLE_EXTRAS]
    if unknown:
        raise ValidationError(f"Unknown extras: {', '.join(unknown)}")

    unit_price = menu_item.prices[size]
    extras_cost = extras_price(chosen_extras)
    return CartItem(
        id=generate_cart_item_id(),
        menu_item=replace(menu_item, sizes=list(menu_item.sizes), prices=dict(menu_item.prices)),
        size=size,
        quantity=quantity,
        unit_price=unit_price,
        extras=chosen_extras,
        extras_price=extras_cost,
        total_price=line_total(quantity, unit_price, extras_cost),
    )


class MenuCatalog:
    """Mutable menu list with derived categories; admin edits go through here."""

    def __init__(self, items: Iterable[MenuItem] | None = None) -> None:
        self.items: list[MenuItem] = []
        self.categories: list[str] = [ALL_CATEGORY]
        self.set_menu_items(SEED_MENU if items is None else items)

    def set_menu_items(self, items: Iterable[MenuItem]) -> None:
        self.items = list(items)
        self._refresh_categories()

    def _refresh_categories(self) -> None:
        categories = [ALL_CATEGORY]
        for item in self.items:
            if item.category not in categories:
                categories.append(item.category)
        self.categories = categories

    def get(self, item_id: str) -> MenuItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def items_in_category(self, category: str, include_inactive: bool = False) -> list[MenuItem]:
        """Items shown for a category filter; inactive items are hidden unless asked for."""
        visible = self.items if include_inactive else [item for item in self.items if item.is_active]
        if category == ALL_CATEGORY:
            return list(visible)
        return [item for item in visible if item.category == category]

    def add_menu_item(self, item: MenuItem) -> MenuItem:
        validate_menu_item(item)
        if self.get(item.id) is not None:
            raise ValidationError(f"Menu item {item.id!r} already exists")
        self.items.append(item)
        self._refresh_categories()
        logger.info("menu_item_added id=%s", item.id)
        return item

    def update_menu_item(self, item_id: str, **updates: Any) -> MenuItem | None:
        current = self.get(item_id)
        if current is None:
            logger.debug("menu_item_update_skipped id=%s reason=not_found", item_id)
            return None
        unknown = set(updates) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update menu item fields: {', '.join(sorted(unknown))}")

        updated = validate_menu_item(replace(current, **updates))
        self.items = [updated if item.id == item_id else item for item in self.items]
        self._refresh_categories()
        logger.info("menu_item_updated id=%s fields=%s", item_id, ",".join(sorted(updates)))
        return updated

    def delete_menu_item(self, item_id: str) -> bool:
        remaining = [item for item in self.items if item.id != item_id]
        if len(remaining) == len(self.items):
            logger.debug("menu_item_delete_skipped id=%s reason=not_found", item_id)
            return False
        self.items = remaining
        self._refresh_categories()
        logger.info("menu_item_deleted id=%s", item_id)
        return True

    def toggle_item_availability(self, item_id: str) -> MenuItem | None:
        current = self.get(item_id)
        if current is None:
            return None
        return self.update_menu_item(item_id, is_active=not current.is_active)
