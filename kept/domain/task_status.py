"""Single source of truth for the completed/overdue/due classification of tasks.

Every screen that colors or labels a task goes through ``derive_task_status`` so
that the rules stay identical across the care list, the task detail screen, the
home dashboard and the system detail tabs.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from .time_utils import ensure_aware, parse_backend_datetime

DUE_SOON_DAYS = 7

STATUS_COMPLETED = "completed"
STATUS_SKIPPED = "skipped"
STATUS_OVERDUE = "overdue"
STATUS_DUE = "due"
STATUS_UPCOMING = "upcoming"
STATUS_SNOOZED = "snoozed"

CLOSED_STATUSES = frozenset({STATUS_COMPLETED, STATUS_SKIPPED})


@dataclass(frozen=True)
class TaskStatusFlags:
    """Mutually exclusive display flags derived from status and due date."""

    is_completed: bool = False
    is_overdue: bool = False
    is_due: bool = False


def normalize_status(status: Optional[str]) -> str:
    return (status or "").strip().lower()


def is_past_due(due_date: Any, now: Optional[datetime] = None) -> bool:
    """True iff the due date parses and lies strictly before ``now``."""
    due = parse_backend_datetime(due_date)
    if due is None:
        return False
    return due < ensure_aware(now)


def days_until_due(due_date: Any, now: Optional[datetime] = None) -> Optional[int]:
    """Whole days until the due date, rounded up; ``None`` when unparseable."""
    due = parse_backend_datetime(due_date)
    if due is None:
        return None
    delta = (due - ensure_aware(now)).total_seconds() / 86400.0
    return int(math.ceil(delta))


def derive_task_status(
    status: Optional[str],
    due_date: Any,
    now: Optional[datetime] = None,
    *,
    due_soon_days: int = DUE_SOON_DAYS,
) -> TaskStatusFlags:
    key = normalize_status(status)
    if key == STATUS_COMPLETED:
        return TaskStatusFlags(is_completed=True)
    current = ensure_aware(now)
    if key == STATUS_OVERDUE or is_past_due(due_date, current):
        return TaskStatusFlags(is_overdue=True)
    if key == STATUS_DUE:
        return TaskStatusFlags(is_due=True)
    days = days_until_due(due_date, current)
    if days is not None and days <= due_soon_days:
        return TaskStatusFlags(is_due=True)
    return TaskStatusFlags()


def status_tone(
    status: Optional[str],
    due_date: Any,
    now: Optional[datetime] = None,
    *,
    due_soon_days: int = DUE_SOON_DAYS,
) -> str:
    """Accent tone for task cards: success, danger, warning, muted or primary."""
    flags = derive_task_status(status, due_date, now, due_soon_days=due_soon_days)
    if flags.is_completed:
        return "success"
    if flags.is_overdue:
        return "danger"
    if flags.is_due:
        return "warning"
    if normalize_status(status) == STATUS_SNOOZED:
        return "muted"
    return "primary"


def is_open(status: Optional[str]) -> bool:
    """Open tasks are everything except completed and skipped ones."""
    return normalize_status(status) not in CLOSED_STATUSES


__all__ = [
    "CLOSED_STATUSES",
    "DUE_SOON_DAYS",
    "STATUS_COMPLETED",
    "STATUS_DUE",
    "STATUS_OVERDUE",
    "STATUS_SKIPPED",
    "STATUS_SNOOZED",
    "STATUS_UPCOMING",
    "TaskStatusFlags",
    "days_until_due",
    "derive_task_status",
    "is_open",
    "is_past_due",
    "normalize_status",
    "status_tone",
]
