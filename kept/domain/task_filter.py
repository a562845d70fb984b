"""Filter and sort maintenance tasks for the care screen.

Call context:
    ``CareVM.rows`` feeds the backend task list and the user's filter controls
    through ``filter_and_sort`` on every render. The function is pure: the
    input sequence is never mutated and the output only ever contains items
    from the input, in a stable order.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .entities import MaintenanceTask
from .task_status import (
    DUE_SOON_DAYS,
    STATUS_COMPLETED,
    STATUS_DUE,
    STATUS_OVERDUE,
    STATUS_UPCOMING,
    days_until_due,
    is_open,
    is_past_due,
    normalize_status,
)
from .time_utils import ensure_aware, parse_backend_datetime

TaskLike = Union[MaintenanceTask, Mapping[str, Any]]

PRIORITY_RANK = {
    "critical": 0,
    "high": 1,
    "medium": 2,
    "low": 3,
    "routine": 4,
}
UNKNOWN_PRIORITY_RANK = 99

DIFFICULTY_RANK = {
    "easy": 0,
    "moderate": 1,
    "hard": 2,
    "pro_only": 3,
}
DEFAULT_DIFFICULTY = "moderate"


class TaskTab(str, Enum):
    UPCOMING = "upcoming"
    COMPLETED = "completed"


class StatusFilter(str, Enum):
    OVERDUE = "overdue"
    DUE = "due"
    UPCOMING = "upcoming"


class SortBy(str, Enum):
    DATE = "date"
    PRIORITY = "priority"
    COST = "cost"
    DIFFICULTY = "difficulty"


@dataclass(frozen=True)
class TaskFilter:
    """User-chosen filter and sort controls; unset filters match everything."""

    active_tab: TaskTab = TaskTab.UPCOMING
    category: str = ""
    status_filter: Optional[StatusFilter] = None
    search_query: str = ""
    sort_by: SortBy = SortBy.DATE

    def with_changes(self, **changes: Any) -> "TaskFilter":
        return replace(self, **changes)


def as_task(item: TaskLike) -> MaintenanceTask:
    if isinstance(item, MaintenanceTask):
        return item
    if isinstance(item, Mapping):
        return MaintenanceTask.from_payload(item)
    raise TypeError(f"Unsupported task record: {type(item).__name__}")


def priority_rank(priority: Optional[str]) -> int:
    return PRIORITY_RANK.get((priority or "").strip().lower(), UNKNOWN_PRIORITY_RANK)


def difficulty_rank(difficulty: Optional[str]) -> int:
    key = (difficulty or DEFAULT_DIFFICULTY).strip().lower()
    return DIFFICULTY_RANK.get(key, DIFFICULTY_RANK[DEFAULT_DIFFICULTY])


def matches_tab(task: MaintenanceTask, tab: TaskTab) -> bool:
    if tab == TaskTab.COMPLETED:
        return normalize_status(task.status) == STATUS_COMPLETED
    return is_open(task.status)


def matches_category(task: MaintenanceTask, category: str) -> bool:
    return not category or task.category == category


def matches_status(
    task: MaintenanceTask,
    status_filter: Optional[StatusFilter],
    now: datetime,
    *,
    due_soon_days: int = DUE_SOON_DAYS,
) -> bool:
    if status_filter is None:
        return True
    status = normalize_status(task.status)
    days = days_until_due(task.due_date, now)
    if status_filter == StatusFilter.OVERDUE:
        return status == STATUS_OVERDUE or is_past_due(task.due_date, now)
    if status_filter == StatusFilter.DUE:
        return status == STATUS_DUE or (
            days is not None and days <= due_soon_days and not is_past_due(task.due_date, now)
        )
    if status_filter == StatusFilter.UPCOMING:
        # Undated tasks are never upcoming.
        return status == STATUS_UPCOMING and days is not None and days > due_soon_days
    return True


def matches_search(task: MaintenanceTask, query: str) -> bool:
    if not query:
        return True
    needle = query.lower()
    system_name = task.system.name if task.system else ""
    haystacks = (task.name, system_name, task.category)
    return any(needle in (text or "").lower() for text in haystacks)


def _sort_key(task: MaintenanceTask, sort_by: SortBy) -> Tuple[Any, ...]:
    if sort_by == SortBy.PRIORITY:
        return (priority_rank(task.priority),)
    if sort_by == SortBy.COST:
        return (-task.pro_cost_mean,)
    if sort_by == SortBy.DIFFICULTY:
        return (difficulty_rank(task.difficulty),)
    due = parse_backend_datetime(task.due_date)
    if due is None:
        return (1, 0.0)
    return (0, due.timestamp())


def filter_and_sort(
    tasks: Optional[Iterable[TaskLike]],
    config: Optional[TaskFilter] = None,
    *,
    now: Optional[datetime] = None,
    due_soon_days: int = DUE_SOON_DAYS,
) -> List[TaskLike]:
    """Return the tasks matching ``config`` in display order.

    ``tasks`` may be ``None`` while the query is still loading; the result is
    then empty and the caller renders its loading placeholder instead.
    """
    if tasks is None:
        return []
    cfg = config or TaskFilter()
    current = ensure_aware(now)
    status_filter = StatusFilter(cfg.status_filter) if cfg.status_filter else None
    tab = TaskTab(cfg.active_tab)
    sort_by = SortBy(cfg.sort_by)

    selected: List[Tuple[TaskLike, MaintenanceTask]] = []
    for item in tasks:
        task = as_task(item)
        if not matches_tab(task, tab):
            continue
        if not matches_category(task, cfg.category):
            continue
        if not matches_status(task, status_filter, current, due_soon_days=due_soon_days):
            continue
        if not matches_search(task, cfg.search_query):
            continue
        selected.append((item, task))

    selected.sort(key=lambda pair: _sort_key(pair[1], sort_by))
    return [item for item, _ in selected]


def count_by_status(
    tasks: Sequence[TaskLike],
    *,
    now: Optional[datetime] = None,
    due_soon_days: int = DUE_SOON_DAYS,
) -> Mapping[str, int]:
    """Client-side overdue/due/upcoming counts over open tasks.

    Used as a fallback for the stat cards while ``getTaskStats`` is pending.
    """
    current = ensure_aware(now)
    counts = {StatusFilter.OVERDUE.value: 0, StatusFilter.DUE.value: 0, StatusFilter.UPCOMING.value: 0}
    for item in tasks:
        task = as_task(item)
        if not is_open(task.status):
            continue
        for status_filter in (StatusFilter.OVERDUE, StatusFilter.DUE, StatusFilter.UPCOMING):
            if matches_status(task, status_filter, current, due_soon_days=due_soon_days):
                counts[status_filter.value] += 1
                break
    return counts


__all__ = [
    "DIFFICULTY_RANK",
    "PRIORITY_RANK",
    "SortBy",
    "StatusFilter",
    "TaskFilter",
    "TaskTab",
    "UNKNOWN_PRIORITY_RANK",
    "as_task",
    "count_by_status",
    "difficulty_rank",
    "filter_and_sort",
    "matches_search",
    "matches_status",
    "matches_tab",
    "priority_rank",
]
