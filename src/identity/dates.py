# src/identity/dates.py - v1
"""Date normalisation for incoming and stored documents.

All server-side timestamps are epoch milliseconds.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

logger = logging.getLogger(__name__)


def normalize_date(doc: dict[str, Any], created_at_fallback: bool = False) -> None:
    """Convert ``doc["date"]`` to epoch milliseconds in place.

    ISO-8601 strings are parsed; when ``utcOffset`` is absent it is set to
    the parsed offset in minutes (0 for numeric or naive timestamps).
    With ``created_at_fallback``, ``created_at`` is used when ``date`` is
    missing or unparseable. Unparseable values are left untouched for the
    validators to reject.
    """
    candidates = [doc.get("date")]
    if created_at_fallback:
        candidates.append(doc.get("created_at"))

    for value in candidates:
        if _is_number(value):
            if "utcOffset" not in doc:
                doc["utcOffset"] = 0
            doc["date"] = value
            return

        parsed = _parse_string(value)
        if parsed is None:
            continue

        doc["date"] = int(parsed.timestamp() * 1000)
        if "utcOffset" not in doc:
            offset = parsed.utcoffset()
            doc["utcOffset"] = int(offset.total_seconds() // 60) if offset else 0
        return


def resolve_modified(stored: dict[str, Any]) -> int | None:
    """Last modification time of a stored record (epoch ms)."""
    for key in ("srvModified", "srvCreated", "date"):
        value = stored.get(key)
        if _is_number(value):
            return int(value)
    return None


def floor_seconds(value_ms: int | float) -> int:
    """Truncate epoch milliseconds to whole seconds."""
    return int(value_ms // 1000)


def to_epoch_ms(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def parse_http_date(value: str | None) -> datetime | None:
    """Parse an RFC 7231 header date (``If-Unmodified-Since``) or ISO string."""
    if not value:
        return None
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        pass
    parsed = _parse_string(value)
    if parsed is None:
        logger.debug("Ignoring unparseable header date %r", value)
    return parsed


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_string(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.lstrip("-").isdigit():
        return datetime.fromtimestamp(int(text) / 1000, tz=timezone.utc)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
