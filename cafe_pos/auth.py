"""Session handling and role checks for the acting staff member.

The fixed role passwords are a convenience login for a shared till, not a
security boundary.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from cafe_pos.constant import QUICK_LOGIN_STAFF, SESSION_TTL_SECONDS
from cafe_pos.models import Staff
from cafe_pos.persistence import SESSION_KEY, LocalStore

logger = logging.getLogger("cafe_pos.auth")


@dataclass(frozen=True)
class AuthSession:
    staff: Staff
    expires: float  # epoch seconds


def quick_login(role: str, password: str) -> Staff | None:
    """Return the fixed staff identity for a role when the password matches."""
    entry = QUICK_LOGIN_STAFF.get(role)
    if entry is None or password != entry["password"]:
        logger.info("login_rejected role=%s", role)
        return None
    logger.info("login_accepted role=%s", role)
    return Staff(
        id=entry["id"],
        email=entry["email"],
        role=role,  # type: ignore[arg-type]
        created_at=datetime.now(timezone.utc).isoformat(),
    )


def save_session(store: LocalStore, staff: Staff, now: float | None = None) -> AuthSession:
    issued = time.time() if now is None else now
    session = AuthSession(staff=staff, expires=issued + SESSION_TTL_SECONDS)
    store.set(SESSION_KEY, {"staff": staff.to_dict(), "expires": session.expires})
    return session


def get_session(store: LocalStore, now: float | None = None) -> AuthSession | None:
    """Restore a cached session; expired or unreadable sessions are cleared."""
    raw = store.get(SESSION_KEY)
    if raw is None:
        return None

    try:
        session = AuthSession(staff=Staff.from_dict(raw["staff"]), expires=float(raw["expires"]))
    except (KeyError, TypeError, ValueError):
        logger.warning("session_unreadable")
        clear_session(store)
        return None

    current = time.time() if now is None else now
    if current > session.expires:
        logger.info("session_expired staff_id=%s", session.staff.id)
        clear_session(store)
        return None
    return session


def clear_session(store: LocalStore) -> None:
    store.delete(SESSION_KEY)


def is_admin(staff: Staff | None) -> bool:
    return staff is not None and staff.role == "admin"


def is_cashier(staff: Staff | None) -> bool:
    return staff is not None and staff.role == "cashier"


def can_manage_menu(staff: Staff | None) -> bool:
    return is_admin(staff)


def can_view_reports(staff: Staff | None) -> bool:
    return is_admin(staff)


def can_delete_orders(staff: Staff | None) -> bool:
    return is_admin(staff)


def authorize_admin_action(staff: Staff | None, password: str | None = None) -> bool:
    """Admins pass straight through; anyone else needs the admin password."""
    if is_admin(staff):
        return True
    return password == QUICK_LOGIN_STAFF["admin"]["password"]
