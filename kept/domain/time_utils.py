"""Datetime parsing helpers for backend-provided timestamps."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

MS_PER_DAY = 24 * 60 * 60 * 1000


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_backend_datetime(value: Any) -> Optional[datetime]:
    """Parse ISO strings, datetimes, or epoch milliseconds into aware datetimes.

    Date-only strings (``2026-03-05``) resolve to UTC midnight. Date-time
    strings without an offset are read in the local zone. Returns ``None`` for
    empty or unparseable input instead of raising.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(float(value) / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        text = str(value).strip()
        if not text:
            return None
        normalized = text
        if normalized.endswith("Z") or normalized.endswith("z"):
            normalized = normalized[:-1] + "+00:00"
        date_only = "T" not in normalized and " " not in normalized
        try:
            parsed = datetime.fromisoformat(normalized)
        except ValueError:
            return None
        if date_only:
            return parsed.replace(tzinfo=timezone.utc)

    if parsed.tzinfo is None or parsed.tzinfo.utcoffset(parsed) is None:
        parsed = parsed.astimezone()
    return parsed


def ensure_aware(value: Optional[datetime]) -> datetime:
    """Return ``value`` as an aware datetime, defaulting to the current instant."""
    if value is None:
        return utc_now()
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.astimezone()
    return value


__all__ = ["MS_PER_DAY", "ensure_aware", "parse_backend_datetime", "utc_now"]
