from __future__ import annotations

import logging
import re
from typing import Optional

from fastapi import HTTPException, status
from pydantic import ValidationError

logger = logging.getLogger("webtools.errors")

# Patterns that might leak sensitive information
SENSITIVE_PATTERNS = [
    r"api[_-]?key[=:\s]+\S+",
    r"password[=:\s]+\S+",
    r"token[=:\s]+\S+",
    r"secret[=:\s]+\S+",
    r"bearer\s+\S+",
    r"/home/\S+",
    r"/var/\S+",
    r"/etc/\S+",
    r"traceback",
]

MAX_MESSAGE_LENGTH = 500


def sanitize_error_message(message: str) -> str:
    """Remove credentials, file paths and stack traces from a user-facing message."""
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, "[REDACTED]", sanitized, flags=re.IGNORECASE)

    if len(sanitized) > MAX_MESSAGE_LENGTH:
        sanitized = sanitized[:MAX_MESSAGE_LENGTH] + "... [truncated]"

    return sanitized


def api_error(
    message: str,
    *,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    code: str = "bad_request",
    internal_message: Optional[str] = None,
    sanitize: bool = True,
) -> HTTPException:
    """Create an API error with optional message sanitization.

    Args:
        message: The error message to show to users
        status_code: HTTP status code
        code: Error code for programmatic handling
        internal_message: Optional detailed message for logging only
        sanitize: Whether to sanitize the message (default True)

    Returns:
        HTTPException whose detail is ``{"error": {"message", "code"}}``
    """
    if internal_message:
        logger.error(f"[{code}] Internal: {internal_message}")

    user_message = sanitize_error_message(message) if sanitize else message

    return HTTPException(
        status_code=status_code,
        detail={"error": {"message": user_message, "code": code}}
    )


def describe_validation_error(exc: ValidationError) -> str:
    """First pydantic error as ``"loc: msg"``."""
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "body"
    return f"{location}: {first.get('msg')}"
