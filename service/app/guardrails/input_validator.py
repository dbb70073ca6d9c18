"""Input validation for natural-language messages sent to the LLM.

Applied before any LLM call. Rejections raise HTTPException(400) so
FastAPI returns a clean error response; the SQL the model produces is
validated separately by the query tool.
"""

import re

from fastapi import HTTPException

# Attempts to talk the model out of the tool-only contract. Heuristic only.
_INJECTION_PATTERNS = [
    re.compile(r"ignore\s+(all\s+)?(previous|above|prior)\s+(instructions|prompts)", re.IGNORECASE),
    re.compile(r"(do\s+not|don'?t)\s+use\s+(the\s+)?(database_query|tools?)\b", re.IGNORECASE),
    re.compile(r"<\s*/?\s*system\s*>", re.IGNORECASE),
]


def validate_message(message: str, max_length: int) -> str:
    """Return the stripped message, or raise HTTPException(400)."""
    stripped = message.strip()

    if not stripped:
        raise HTTPException(status_code=400, detail="Message is required.")

    if len(stripped) > max_length:
        raise HTTPException(
            status_code=400,
            detail=f"Message exceeds maximum length of {max_length} characters.",
        )

    if any(pattern.search(stripped) for pattern in _INJECTION_PATTERNS):
        raise HTTPException(
            status_code=400,
            detail="Message rejected by input validation.",
        )

    return stripped
