"""Entry point for the café POS Textual app."""

from __future__ import annotations

import logging

from cafe_pos.logs import setup_logging
from cafe_pos.persistence import LocalStore
from cafe_pos.pos_app import CafePosApp
from cafe_pos.remote import RemoteStore
from cafe_pos.store import PosStore


def main() -> None:
    setup_logging()
    remote = RemoteStore()
    if not remote.configured:
        logging.getLogger("cafe_pos.main").warning("remote store not configured, running local-only")
    store = PosStore(local_store=LocalStore(), remote=remote)
    CafePosApp(store).run()


if __name__ == "__main__":
    main()
