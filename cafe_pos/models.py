"""Domain models for the café POS."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

TableStatus = Literal["empty", "occupied", "held"]
OrderStatus = Literal["draft", "held", "paid"]
PaymentMethod = Literal["cash", "card"]
StaffRole = Literal["admin", "cashier"]

PAYMENT_METHODS: tuple[str, ...] = ("cash", "card")
STAFF_ROLES: tuple[str, ...] = ("admin", "cashier")


class ValidationError(ValueError):
    """Operator input rejected before any state was touched."""


@dataclass(frozen=True)
class MenuItem:
    """A sellable menu entry with per-size prices."""

    id: str
    name: str
    category: str
    sizes: list[str]
    prices: dict[str, float]
    description: str | None = None
    image_url: str | None = None
    is_active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> MenuItem:
        return cls(
            id=str(raw["id"]),
            name=str(raw["name"]),
            category=str(raw["category"]),
            sizes=[str(size) for size in raw.get("sizes") or []],
            prices={str(size): raw_price for size, raw_price in (raw.get("prices") or {}).items()},
            description=raw.get("description"),
            image_url=raw.get("image_url"),
            is_active=bool(raw.get("is_active", True)),
        )


@dataclass
class CartItem:
    """One line of a table's order, priced at the moment it was added."""

    id: str
    menu_item: MenuItem
    size: str
    quantity: int
    unit_price: float
    extras: list[str] = field(default_factory=list)
    extras_price: float = 0
    total_price: float = 0

    def merge_key(self) -> tuple[str, str, tuple[str, ...]]:
        """Identity used to fold repeated adds into one line; extras order is ignored."""
        return (self.menu_item.id, self.size, tuple(sorted(set(self.extras))))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> CartItem:
        return cls(
            id=str(raw["id"]),
            menu_item=MenuItem.from_dict(raw["menu_item"]),
            size=str(raw["size"]),
            quantity=int(raw["quantity"]),
            unit_price=raw["unit_price"],
            extras=list(raw.get("extras") or []),
            extras_price=raw.get("extras_price", 0),
            total_price=raw.get("total_price", 0),
        )


@dataclass
class Order:
    """The in-progress or finalized order owned by one table."""

    order_number: str
    table_id: int
    staff_id: str
    items: list[CartItem] = field(default_factory=list)
    subtotal: float = 0
    gst_amount: float = 0
    total: float = 0
    status: OrderStatus = "draft"
    payment_method: PaymentMethod | None = None
    created_at: str | None = None
    updated_at: str | None = None
    completed_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Order:
        return cls(
            order_number=str(raw["order_number"]),
            table_id=int(raw["table_id"]),
            staff_id=str(raw.get("staff_id") or ""),
            items=[CartItem.from_dict(item) for item in raw.get("items") or []],
            subtotal=raw.get("subtotal", 0),
            gst_amount=raw.get("gst_amount", 0),
            total=raw.get("total", 0),
            status=raw.get("status", "draft"),
            payment_method=raw.get("payment_method"),
            created_at=raw.get("created_at"),
            updated_at=raw.get("updated_at"),
            completed_at=raw.get("completed_at"),
        )


@dataclass
class Table:
    """A physical seating unit; owns at most one order."""

    id: int
    name: str
    status: TableStatus = "empty"
    order: Order | None = None
    last_updated: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Table:
        order_raw = raw.get("order")
        return cls(
            id=int(raw["id"]),
            name=str(raw.get("name") or f"Table {raw['id']}"),
            status=raw.get("status", "empty"),
            order=Order.from_dict(order_raw) if order_raw else None,
            last_updated=raw.get("last_updated"),
        )


@dataclass(frozen=True)
class Staff:
    """The acting staff member for this session."""

    id: str
    email: str
    role: StaffRole
    created_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Staff:
        return cls(
            id=str(raw["id"]),
            email=str(raw["email"]),
            role=raw["role"],
            created_at=raw.get("created_at"),
        )
