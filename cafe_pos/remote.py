"""Best-effort sync of paid orders to the hosted REST data store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

import httpx

from cafe_pos.config import (
    PLACEHOLDER_SUPABASE_ANON_KEY,
    PLACEHOLDER_SUPABASE_URL,
    REMOTE_TIMEOUT_SECONDS,
    SUPABASE_ANON_KEY,
    SUPABASE_URL,
)
from cafe_pos.models import MenuItem, Order

logger = logging.getLogger("cafe_pos.remote")

SaveStatus = Literal["saved", "saved_without_staff", "items_failed", "local_only", "failed"]

_FOREIGN_KEY_VIOLATION = "23503"
_STAFF_FOREIGN_KEY = "staff_id_fkey"


@dataclass(frozen=True)
class RemoteError:
    """Diagnostic detail returned by the data store (or the transport)."""

    message: str
    code: str | None = None
    details: str | None = None
    hint: str | None = None
    http_status: int | None = None

    def is_staff_foreign_key_violation(self) -> bool:
        return self.code == _FOREIGN_KEY_VIOLATION and _STAFF_FOREIGN_KEY in (self.message or "")


@dataclass(frozen=True)
class SaveResult:
    """Outcome of one remote save; never raised, only inspected and logged."""

    status: SaveStatus
    order_id: str | None = None
    error: RemoteError | None = None

    @property
    def ok(self) -> bool:
        return self.status != "failed"

    @property
    def reached_remote(self) -> bool:
        return self.status in {"saved", "saved_without_staff", "items_failed"}


def credentials_configured(url: str | None, key: str | None) -> bool:
    if not url or not key:
        return False
    return url != PLACEHOLDER_SUPABASE_URL and key != PLACEHOLDER_SUPABASE_ANON_KEY


def order_row(order: Order, include_staff: bool = True) -> dict[str, Any]:
    row: dict[str, Any] = {
        "order_number": order.order_number,
        "subtotal": order.subtotal,
        "gst_amount": order.gst_amount,
        "total": order.total,
        "payment_method": order.payment_method,
        "status": order.status or "paid",
    }
    if include_staff and order.staff_id:
        row["staff_id"] = order.staff_id
    return row


def order_item_rows(order: Order, order_id: str) -> list[dict[str, Any]]:
    return [
        {
            "order_id": order_id,
            "menu_item_id": item.menu_item.id,
            "menu_item_name": item.menu_item.name,
            "size": item.size,
            "quantity": item.quantity,
            "unit_price": item.unit_price,
            "total_price": item.total_price,
            "extras": list(item.extras),
            "extras_cost": item.extras_price,
        }
        for item in order.items
    ]


def _error_from_response(response: httpx.Response) -> RemoteError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    return RemoteError(
        message=str(body.get("message") or response.text or f"HTTP {response.status_code}"),
        code=body.get("code"),
        details=body.get("details"),
        hint=body.get("hint"),
        http_status=response.status_code,
    )


class RemoteStore:
    """Thin client for the ``orders``/``order_items``/``menu_items`` REST tables."""

    def __init__(
        self,
        url: str | None = SUPABASE_URL,
        api_key: str | None = SUPABASE_ANON_KEY,
        timeout: float = REMOTE_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.url = (url or "").rstrip("/")
        self.api_key = api_key or ""
        self.configured = credentials_configured(self.url, self.api_key)
        self._client: httpx.Client | None = None
        if self.configured:
            self._client = httpx.Client(
                base_url=f"{self.url}/rest/v1",
                headers={
                    "apikey": self.api_key,
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=timeout,
                transport=transport,
            )

    def close(self) -> None:
        if self._client is not None:
            self._client.close()

    def _insert(self, table: str, rows: Any, returning: str | None = None) -> tuple[Any, RemoteError | None]:
        assert self._client is not None
        headers = {"Prefer": "return=representation" if returning else "return=minimal"}
        params = {"select": returning} if returning else None
        try:
            response = self._client.post(f"/{table}", json=rows, headers=headers, params=params)
        except httpx.HTTPError as exc:
            return (None, RemoteError(message=f"{type(exc).__name__}: {exc}"))

        if response.is_error:
            return (None, _error_from_response(response))
        if not returning:
            return (None, None)
        try:
            data = response.json()
        except ValueError:
            return (None, RemoteError(message="Response body is not JSON", http_status=response.status_code))
        if isinstance(data, list):
            data = data[0] if data else None
        if not isinstance(data, dict):
            return (None, RemoteError(message="Insert returned no row", http_status=response.status_code))
        return (data, None)

    def _log_error(self, stage: str, order: Order, error: RemoteError) -> None:
        logger.error(
            "remote_%s_failed order_number=%s http_status=%s code=%s message=%s details=%s hint=%s",
            stage,
            order.order_number,
            error.http_status,
            error.code or "NO_CODE",
            error.message,
            error.details or "No details provided",
            error.hint or "No hint provided",
        )

    def save_order(self, order: Order) -> SaveResult:
        """Write the order row, then its item rows. Failures come back as a result."""
        if not self.configured:
            logger.warning(
                "remote_not_configured order_number=%s table_id=%s staff_id=%s total=%s payment_method=%s items=%s",
                order.order_number,
                order.table_id,
                order.staff_id,
                order.total,
                order.payment_method,
                len(order.items),
            )
            return SaveResult(status="local_only")

        try:
            return self._save_order(order)
        except Exception as exc:
            logger.exception("remote_save_crashed order_number=%s", order.order_number)
            return SaveResult(status="failed", error=RemoteError(message=f"{type(exc).__name__}: {exc}"))

    def _save_order(self, order: Order) -> SaveResult:
        status: SaveStatus = "saved"
        row, error = self._insert("orders", order_row(order), returning="id")
        if error is not None:
            self._log_error("order_insert", order, error)
            if not error.is_staff_foreign_key_violation():
                return SaveResult(status="failed", error=error)

            logger.info("remote_order_retry_without_staff order_number=%s", order.order_number)
            row, error = self._insert("orders", order_row(order, include_staff=False), returning="id")
            if error is not None:
                self._log_error("order_retry", order, error)
                return SaveResult(status="failed", error=error)
            status = "saved_without_staff"

        order_id = str(row["id"])
        if order.items:
            _, items_error = self._insert("order_items", order_item_rows(order, order_id))
            if items_error is not None:
                self._log_error("order_items_insert", order, items_error)
                return SaveResult(status="items_failed", order_id=order_id, error=items_error)

        logger.info("remote_order_saved order_number=%s order_id=%s status=%s", order.order_number, order_id, status)
        return SaveResult(status=status, order_id=order_id)

    def fetch_menu_items(self) -> list[MenuItem] | None:
        """Load the menu; None means the caller should keep its current menu."""
        if not self.configured:
            return None
        assert self._client is not None
        try:
            response = self._client.get("/menu_items", params={"select": "*", "order": "name.asc"})
            response.raise_for_status()
            rows = response.json()
            return [MenuItem.from_dict(row) for row in rows]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            logger.error("remote_menu_fetch_failed error=%r", exc)
            return None
