"""Time helpers. All market times are integer Unix seconds."""

import time
from datetime import datetime, timezone


def now_seconds() -> int:
    """Current Unix time, truncated to whole seconds."""
    return int(time.time())


def format_seconds(ts: int) -> str:
    """Render Unix seconds as an ISO 8601 UTC timestamp."""
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
