"""Logging setup. The terminal belongs to the TUI, so records go to a file."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from cafe_pos.config import LOG_LEVEL, LOG_PATH


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        data = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data)


def setup_logging(level: str | None = None, path: str | Path | None = None) -> logging.Handler:
    lvl = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    log_file = Path(path or LOG_PATH)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.handlers.clear()
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    root.setLevel(lvl)
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return handler
