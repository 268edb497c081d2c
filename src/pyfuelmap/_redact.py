"""Helpers for safe debug logging.

Requests carry the API key, bearer tokens and, for contributor reads,
phone numbers. This module redacts those fields before they reach
DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "apikey",
        "authorization",
        "access_token",
        "refresh_token",
        "token",
        "password",
        "cookie",
        "phone",
    }
)


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            if key.lower() in _SENSITIVE_VALUE_KEYS:
                redacted[key] = "<redacted>"
            else:
                redacted[key] = redact_for_log(v, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Mask credential headers, keeping the bearer scheme visible."""
    masked: dict[str, str] = {}
    for key, value in headers.items():
        lowered = key.lower()
        if lowered == "authorization" and value.lower().startswith("bearer "):
            masked[key] = "Bearer <redacted>"
        elif lowered in _SENSITIVE_VALUE_KEYS:
            masked[key] = "<redacted>"
        else:
            masked[key] = value
    return masked
