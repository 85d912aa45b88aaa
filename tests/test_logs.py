from __future__ import annotations

import json
import logging

from cafe_pos.logs import setup_logging


def test_setup_logging_writes_json_lines(tmp_path):
    log_path = tmp_path / "logs" / "pos.log"
    root = logging.getLogger()
    previous_handlers, previous_level = list(root.handlers), root.level
    try:
        handler = setup_logging("debug", log_path)
        logging.getLogger("cafe_pos.store").info("order_held table_id=%s", 3)
        handler.flush()
        handler.close()
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)

    record = json.loads(log_path.read_text(encoding="utf-8").splitlines()[-1])
    assert record["level"] == "INFO"
    assert record["logger"] == "cafe_pos.store"
    assert record["message"] == "order_held table_id=3"
    assert "time" in record
