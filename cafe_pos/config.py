"""Runtime configuration defaults for persistence, remote sync and logging."""

from __future__ import annotations

import os

DB_PATH = os.environ.get("CAFE_POS_DB_PATH", "data/cafe_pos.db")

SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY", "")
REMOTE_TIMEOUT_SECONDS = float(os.environ.get("CAFE_POS_REMOTE_TIMEOUT", "10"))

# Values shipped in the sample .env; treated the same as unset.
PLACEHOLDER_SUPABASE_URL = "https://your-project-id.supabase.co"
PLACEHOLDER_SUPABASE_ANON_KEY = "your-anon-key-here"

LOG_LEVEL = os.environ.get("CAFE_POS_LOG_LEVEL", "INFO")
LOG_PATH = os.environ.get("CAFE_POS_LOG_PATH", "/tmp/cafe-pos.log")
