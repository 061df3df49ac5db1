from __future__ import annotations

from typing import Any, Optional

from httpx import Response


def status_fallback_message(status_code: int) -> str:
    return f"Request failed with status {status_code}"


def _message_from(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, dict):
        message = value.get("message") or value.get("msg")
        return str(message) if message else None
    if isinstance(value, list):
        # FastAPI validation errors: [{"loc": [...], "msg": "...", ...}]
        parts = [_message_from(item) for item in value]
        joined = "; ".join(part for part in parts if part)
        return joined or None
    return None


def error_message_from_body(data: Any) -> Optional[str]:
    """Return the ``error`` or ``detail`` message of a decoded JSON body, if any."""
    if not isinstance(data, dict):
        return None
    return _message_from(data.get("error")) or _message_from(data.get("detail"))


def extract_http_error(response: Response, *, default_message: Optional[str] = None) -> str:
    """Return a user-facing message for a non-2xx HTTPX response."""
    fallback = default_message or status_fallback_message(response.status_code)
    try:
        data = response.json()
    except ValueError:
        return fallback

    return error_message_from_body(data) or fallback
