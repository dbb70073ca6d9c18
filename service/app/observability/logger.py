"""Query audit log as JSON lines.

Best-effort: if no path is configured or the write fails, we log the
error and move on. A failed audit write should never break a query.
"""

from __future__ import annotations

import datetime
import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def log_query(
    log_path: str,
    *,
    source: str,
    query: str,
    model_used: str | None = None,
    tool_calls: int = 0,
    latency_ms: float = 0,
    status: str = "success",
    error_message: str | None = None,
) -> None:
    """Append one entry to the query log.

    ``source`` is the entry point: "direct", "tools" or "llm". Silently
    skipped if log_path is empty.
    """
    if not log_path:
        return

    entry: dict[str, Any] = {
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "source": source,
        "query": query[:1000],
        "model_used": model_used,
        "tool_calls": tool_calls,
        "latency_ms": round(latency_ms, 1),
        "status": status,
        "error_message": error_message[:1024] if error_message else None,
    }

    try:
        with open(log_path, "a", encoding="utf-8") as fh:
            fh.write(json.dumps(entry) + "\n")
    except OSError:
        logger.exception("Failed to write query log entry to %s", log_path)
