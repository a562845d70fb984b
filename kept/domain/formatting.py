"""Pure display formatting helpers shared by the screen view models.

Currency is always rendered as whole US dollars. Date helpers accept the ISO
strings (or epoch milliseconds) the backend returns; unparseable input yields
an empty label instead of raising.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Tuple

from .entities import MaintenanceTask
from .time_utils import ensure_aware, parse_backend_datetime


def format_currency(amount: Any) -> str:
    """Format ``amount`` as ``$1,234`` (zero decimals, half-up rounding)."""
    try:
        value = Decimal(str(amount if amount is not None else 0))
    except (InvalidOperation, ValueError):
        value = Decimal(0)
    if not value.is_finite():
        value = Decimal(0)
    whole = int(abs(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    sign = "-" if value < 0 and whole else ""
    return f"{sign}${whole:,}"


def js_round(value: float) -> int:
    """Round half toward positive infinity."""
    return int(math.floor(value + 0.5))


def diy_savings(task: MaintenanceTask) -> int:
    """Dollars saved by doing the task yourself instead of hiring a pro."""
    return max(0, js_round(task.pro_cost_mean - task.diy_cost_mean))


def format_short_date(value: Any) -> str:
    parsed = parse_backend_datetime(value)
    if parsed is None:
        return ""
    return f"{parsed:%b} {parsed.day}"


def format_long_date(value: Any) -> str:
    parsed = parse_backend_datetime(value)
    if parsed is None:
        return ""
    return f"{parsed:%A}, {parsed:%B} {parsed.day}, {parsed.year}"


def format_month_year(value: Any) -> str:
    parsed = parse_backend_datetime(value)
    if parsed is None:
        return ""
    return f"{parsed:%b} {parsed.year}"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_relative_date(value: Any, now: Optional[datetime] = None) -> str:
    """Human label relative to ``now``: Today, Tomorrow, 3 days ago, 2 weeks, Mar 5."""
    parsed = parse_backend_datetime(value)
    if parsed is None:
        return ""
    current = ensure_aware(now)
    delta_days = (parsed - current).total_seconds() / 86400.0
    days = abs(int(math.ceil(delta_days)))
    past = parsed < current
    if days == 0:
        return "Today"
    if days == 1:
        return "Yesterday" if past else "Tomorrow"
    if days < 7:
        label = _plural(days, "day")
        return f"{label} ago" if past else label
    if days < 30:
        label = _plural(days // 7, "week")
        return f"{label} ago" if past else label
    return format_short_date(parsed)


def format_time_ago(timestamp_ms: Any, now: Optional[datetime] = None) -> str:
    """Compact age of an epoch-millisecond timestamp: 5m ago, 3h ago, 2d ago."""
    parsed = parse_backend_datetime(timestamp_ms)
    if parsed is None:
        return ""
    diff_ms = (ensure_aware(now) - parsed).total_seconds() * 1000.0
    minutes = int(diff_ms // 60000)
    hours = int(diff_ms // 3600000)
    days = int(diff_ms // 86400000)
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    if days < 7:
        return f"{days}d ago"
    local = parsed.astimezone()
    return f"{local.month}/{local.day}/{local.year}"


def health_score_label(score: Optional[float]) -> str:
    value = 100.0 if score is None else float(score)
    if value >= 90:
        return "Excellent"
    if value >= 70:
        return "Good"
    if value >= 50:
        return "Fair"
    return "Needs Attention"


def health_score_tone(score: Optional[float]) -> str:
    value = 100.0 if score is None else float(score)
    if value >= 90:
        return "excellent"
    if value >= 70:
        return "primary"
    if value >= 50:
        return "warning"
    return "danger"


def system_health_grade(score: Optional[float]) -> Tuple[str, str]:
    """Label and badge variant for a system's health score."""
    value = 100.0 if score is None else float(score)
    if value >= 90:
        return "Excellent", "success"
    if value >= 70:
        return "Good", "success"
    if value >= 50:
        return "Fair", "warning"
    if value >= 30:
        return "Needs Attention", "warning"
    return "Critical", "danger"


def clamp_score(score: Optional[float]) -> float:
    value = 0.0 if score is None else float(score)
    return min(100.0, max(0.0, value))


def system_age_years(
    install_date: Any,
    year_built: Optional[int],
    today: Optional[date] = None,
) -> int:
    """Whole calendar years since install, falling back to the home's build year."""
    current_year = (today or date.today()).year
    installed = parse_backend_datetime(install_date)
    if installed is not None:
        return current_year - installed.year
    if year_built:
        return current_year - int(year_built)
    return 0


def install_age_years(install_date: Any, now: Optional[datetime] = None) -> float:
    """Age since install in years, one decimal place; 0.0 when unknown."""
    installed = parse_backend_datetime(install_date)
    if installed is None:
        return 0.0
    days = (ensure_aware(now) - installed).total_seconds() / 86400.0
    return js_round(days / 365.0 * 10) / 10


__all__ = [
    "clamp_score",
    "diy_savings",
    "format_currency",
    "format_long_date",
    "format_month_year",
    "format_relative_date",
    "format_short_date",
    "format_time_ago",
    "health_score_label",
    "health_score_tone",
    "install_age_years",
    "js_round",
    "system_age_years",
    "system_health_grade",
]
