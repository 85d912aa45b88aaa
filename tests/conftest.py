from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from cafe_pos.auth import quick_login
from cafe_pos.data import MenuCatalog
from cafe_pos.models import MenuItem, Staff
from cafe_pos.persistence import LocalStore
from cafe_pos.remote import RemoteStore
from cafe_pos.store import PosStore

REMOTE_URL = "https://cafe-test.supabase.co"
REMOTE_KEY = "test-anon-key"


@pytest.fixture()
def local_store(tmp_path) -> LocalStore:
    return LocalStore(tmp_path / "pos.db")


@pytest.fixture()
def catalog() -> MenuCatalog:
    return MenuCatalog()


@pytest.fixture()
def cashier() -> Staff:
    staff = quick_login("cashier", "1111")
    assert staff is not None
    return staff


@pytest.fixture()
def store(local_store, catalog, cashier) -> PosStore:
    pos = PosStore(local_store=local_store, catalog=catalog)
    pos.set_staff(cashier)
    pos.initialize_tables()
    return pos


@pytest.fixture()
def cappuccino(catalog) -> MenuItem:
    item = catalog.get("cappuccino")
    assert item is not None
    return item


@pytest.fixture()
def caramel_latte(catalog) -> MenuItem:
    item = catalog.get("caramel_latte")
    assert item is not None
    return item


class RecordingBackend:
    """Stand-in for the hosted REST store; records every request it sees."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def bodies(self, table: str) -> list[Any]:
        return [json.loads(req.content) for req in self.requests if req.url.path.endswith(f"/{table}")]


@pytest.fixture()
def make_remote():
    created: list[RemoteStore] = []

    def factory(handler):
        backend = RecordingBackend(handler)
        remote = RemoteStore(REMOTE_URL, REMOTE_KEY, transport=httpx.MockTransport(backend))
        created.append(remote)
        return remote, backend

    yield factory
    for remote in created:
        remote.close()
