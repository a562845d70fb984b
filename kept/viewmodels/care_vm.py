"""Care screen projection: filter controls, stat cards and task rows.

Call context:
    The ``/care`` page feeds ``getEnhancedTasks`` and ``getTaskStats`` results
    into ``set_tasks``/``set_stats`` and renders ``rows()`` on every refresh.
    ``quick_complete`` marks a task done as DIY straight from the list.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from kept.domain.entities import MaintenanceTask, TaskId, TaskStats
from kept.domain.formatting import (
    diy_savings,
    format_currency,
    format_relative_date,
    format_short_date,
)
from kept.domain.ports import UseCaseError
from kept.domain.query import QueryResult
from kept.domain.task_filter import (
    SortBy,
    StatusFilter,
    TaskFilter,
    TaskTab,
    count_by_status,
    filter_and_sort,
)
from kept.domain.task_status import DUE_SOON_DAYS, derive_task_status, status_tone
from kept.usecases.task_actions import CompleteTask

from .common import Clock, default_clock
from .status_format import (
    CATEGORY_FILTERS,
    CATEGORY_LABELS,
    EMPTY_COMPLETED,
    EMPTY_HOMES,
    EMPTY_TASKS,
    STATUS_BADGES,
    EmptyState,
    category_label,
    difficulty_label,
    priority_badge,
)


@dataclass
class TaskRow:
    """Display row consumed by the care task list."""

    task_id: TaskId
    name: str
    system_name: str
    category: str
    priority_label: str
    priority_variant: str
    difficulty: str
    estimated_time: str
    is_completed: bool
    is_overdue: bool
    is_due: bool
    date_label: str
    relative_label: str
    savings_label: str
    tone: str

    @property
    def can_complete(self) -> bool:
        return not self.is_completed


@dataclass
class StatCard:
    key: str
    label: str
    count: int
    active: bool


@dataclass
class FilterChip:
    key: str
    label: str


class CareVM:
    """Keeps care-screen filter state and projects tasks into rows, no I/O here."""

    def __init__(
        self,
        *,
        complete_task: Optional[CompleteTask] = None,
        clock: Clock = default_clock,
        due_soon_days: int = DUE_SOON_DAYS,
    ) -> None:
        self.complete_task = complete_task
        self.clock = clock
        self.due_soon_days = due_soon_days

        self.filters = TaskFilter()
        self.tasks: QueryResult[List[MaintenanceTask]] = QueryResult.pending()
        self.stats: QueryResult[TaskStats] = QueryResult.pending()
        self.completing_task_id: Optional[TaskId] = None
        self.error_message: Optional[str] = None

    # ------------------------------------------------------------------
    # Query results
    # ------------------------------------------------------------------
    def set_tasks(self, result: QueryResult[List[MaintenanceTask]]) -> None:
        self.tasks = result

    def set_stats(self, result: QueryResult[TaskStats]) -> None:
        self.stats = result

    @property
    def is_loading(self) -> bool:
        return self.tasks.is_loading

    @property
    def is_skipped(self) -> bool:
        return self.tasks.is_skipped

    # ------------------------------------------------------------------
    # Filter controls
    # ------------------------------------------------------------------
    def set_tab(self, tab: str) -> None:
        self.filters = self.filters.with_changes(active_tab=TaskTab(tab))

    def set_category(self, category: str) -> None:
        value = (category or "").strip().lower()
        if value and value not in CATEGORY_LABELS:
            raise ValueError(f"Unknown category filter: {category}")
        self.filters = self.filters.with_changes(category=value)

    def set_search(self, query: str) -> None:
        self.filters = self.filters.with_changes(search_query=query or "")

    def set_sort(self, sort_by: str) -> None:
        self.filters = self.filters.with_changes(sort_by=SortBy(sort_by))

    def toggle_status_filter(self, status: str) -> None:
        """Stat-card press: select the status, or clear it when already selected."""
        selected = StatusFilter(status)
        current = self.filters.status_filter
        self.filters = self.filters.with_changes(
            status_filter=None if current == selected else selected
        )

    def clear_status_filter(self) -> None:
        self.filters = self.filters.with_changes(status_filter=None)

    def clear_category(self) -> None:
        self.filters = self.filters.with_changes(category="")

    def clear_search(self) -> None:
        self.filters = self.filters.with_changes(search_query="")

    def clear_filters(self) -> None:
        self.filters = self.filters.with_changes(status_filter=None, category="", search_query="")

    @property
    def has_active_filters(self) -> bool:
        f = self.filters
        return bool(f.status_filter or f.category or f.search_query)

    def active_filter_chips(self) -> List[FilterChip]:
        chips: List[FilterChip] = []
        f = self.filters
        if f.search_query:
            chips.append(FilterChip("search", f'"{f.search_query}"'))
        if f.status_filter:
            chips.append(FilterChip("status", STATUS_BADGES[StatusFilter(f.status_filter).value][0]))
        if f.category:
            chips.append(FilterChip("category", category_label(f.category)))
        return chips

    @staticmethod
    def category_options() -> List[FilterChip]:
        return [FilterChip(value, label) for value, label in CATEGORY_FILTERS]

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------
    def stat_cards(self) -> List[StatCard]:
        """Overdue/due/upcoming counts; server stats, else counted locally."""
        if self.stats.is_resolved and self.stats.value is not None:
            stats = self.stats.value
            counts = {"overdue": stats.overdue, "due": stats.due, "upcoming": stats.upcoming}
        else:
            counts = dict(
                count_by_status(
                    self.tasks.data_or([]), now=self.clock(), due_soon_days=self.due_soon_days
                )
            )
        current = self.filters.status_filter
        return [
            StatCard(
                key=status.value,
                label=STATUS_BADGES[status.value][0],
                count=int(counts.get(status.value, 0)),
                active=current == status,
            )
            for status in (StatusFilter.OVERDUE, StatusFilter.DUE, StatusFilter.UPCOMING)
        ]

    @property
    def show_stat_cards(self) -> bool:
        return self.filters.active_tab == TaskTab.UPCOMING

    def rows(self) -> List[TaskRow]:
        if not self.tasks.is_resolved:
            return []
        now = self.clock()
        selected = filter_and_sort(
            self.tasks.value, self.filters, now=now, due_soon_days=self.due_soon_days
        )
        return [self._to_row(task, now) for task in selected]  # type: ignore[arg-type]

    def empty_state(self) -> EmptyState:
        if self.tasks.is_skipped:
            return EMPTY_HOMES
        if self.filters.active_tab == TaskTab.COMPLETED:
            return EMPTY_COMPLETED
        return EMPTY_TASKS

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def quick_complete(self, task_id: TaskId) -> bool:
        """Mark ``task_id`` completed as DIY. Returns ``True`` on success."""
        if self.complete_task is None or self.completing_task_id is not None:
            return False
        self.error_message = None
        self.completing_task_id = task_id
        try:
            self.complete_task(task_id, was_diy=True)
            return True
        except UseCaseError as exc:
            self.error_message = exc.message
            return False
        finally:
            self.completing_task_id = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _to_row(self, task: MaintenanceTask, now: datetime) -> TaskRow:
        flags = derive_task_status(
            task.status, task.due_date, now, due_soon_days=self.due_soon_days
        )
        priority_label, priority_variant = priority_badge(task.priority)
        minutes = task.template.estimated_time_minutes if task.template else None
        savings = diy_savings(task)

        if flags.is_completed:
            date_label = format_short_date(task.completed_date)
            relative = ""
        elif flags.is_overdue:
            date_label = "Overdue"
            relative = ""
        else:
            date_label = format_short_date(task.due_date)
            relative = format_relative_date(task.due_date, now)

        return TaskRow(
            task_id=task.id,
            name=task.name,
            system_name=task.system_name,
            category=category_label(task.category),
            priority_label=priority_label,
            priority_variant=priority_variant,
            difficulty=difficulty_label(task.difficulty),
            estimated_time=f"{minutes}m" if minutes else "",
            is_completed=flags.is_completed,
            is_overdue=flags.is_overdue,
            is_due=flags.is_due,
            date_label=date_label,
            relative_label=relative,
            savings_label=(
                f"Save {format_currency(savings)}" if savings > 0 and not flags.is_completed else ""
            ),
            tone=status_tone(task.status, task.due_date, now, due_soon_days=self.due_soon_days),
        )


__all__ = ["CareVM", "FilterChip", "StatCard", "TaskRow"]
