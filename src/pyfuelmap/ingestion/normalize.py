"""Normalization helpers.

Centralizes defensive parsing of data-service rows. Rows come from a
crowd-edited database, so numbers may arrive as strings, blanks or
placeholders.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any

_PLACEHOLDERS = frozenset({"", "--", "null", "NaN", "nan"})


def safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if text in _PLACEHOLDERS:
            return None
        value = text
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def positive_or_none(value: Any) -> float | None:
    """Parse a price; ``0``, negatives and blanks mean "unknown"."""
    parsed = safe_float(value)
    if parsed is None or parsed <= 0:
        return None
    return parsed


def non_negative_or_zero(value: Any) -> int:
    parsed = safe_int(value)
    if parsed is None or parsed < 0:
        return 0
    return parsed


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp (as returned by PostgREST) to an aware datetime.

    Naive values are assumed to be UTC. Epoch numbers (seconds or
    milliseconds) are accepted as well.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        ts = float(value)
        if ts > 1e11:
            ts /= 1000.0
        return datetime.fromtimestamp(ts, tz=UTC)
    text = str(value).strip()
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def string_id_list(value: Any) -> list[str]:
    """Coerce a nullable array column into a list of non-empty string ids."""
    if value is None:
        return []
    if isinstance(value, (str, bytes)):
        value = [value]
    ids: list[str] = []
    for item in value:
        text = safe_str(item)
        if text is not None:
            ids.append(text)
    return ids
