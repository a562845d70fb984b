"""Home dashboard projection: next-up tasks, budget and health cards.

Call context:
    The ``/home`` page resolves the active home, then feeds the upcoming tasks
    (limit 5), the home systems, the bundle progress and a one-year forecast
    into the ``set_*`` methods. Every query is skipped while no home exists,
    in which case ``show_empty_homes`` is true.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from kept.domain.entities import (
    BudgetForecast,
    BundleProgress,
    Home,
    HomeSystem,
    MaintenanceTask,
    SystemId,
    TaskId,
)
from kept.domain.formatting import (
    diy_savings,
    format_currency,
    format_short_date,
    health_score_label,
    health_score_tone,
    js_round,
)
from kept.domain.query import QueryResult
from kept.domain.task_status import DUE_SOON_DAYS, derive_task_status, status_tone

from .common import Clock, default_clock
from .status_format import EMPTY_HOMES, EMPTY_TASKS, EmptyState

UPCOMING_LIMIT = 5
SYSTEM_CARD_LIMIT = 5
FORECAST_YEARS = 1


@dataclass
class TaskCard:
    task_id: TaskId
    name: str
    due_label: str
    is_overdue: bool
    savings_label: str
    tone: str


@dataclass
class SystemCard:
    system_id: SystemId
    name: str
    score: int
    label: str
    tone: str


@dataclass
class PointsCard:
    current_points: int
    lifetime_label: str
    next_label: str
    remaining_label: str
    progress_percent: float
    badges: List[Tuple[str, str]]


class HomeDashboardVM:
    def __init__(
        self,
        *,
        clock: Clock = default_clock,
        due_soon_days: int = DUE_SOON_DAYS,
    ) -> None:
        self.clock = clock
        self.due_soon_days = due_soon_days

        self.home: QueryResult[Optional[Home]] = QueryResult.pending()
        self.tasks: QueryResult[List[MaintenanceTask]] = QueryResult.pending()
        self.systems: QueryResult[List[HomeSystem]] = QueryResult.pending()
        self.points: QueryResult[Optional[BundleProgress]] = QueryResult.pending()
        self.forecast: QueryResult[Optional[BudgetForecast]] = QueryResult.pending()

    # ------------------------------------------------------------------
    # Query results
    # ------------------------------------------------------------------
    def set_home(self, result: QueryResult[Optional[Home]]) -> None:
        self.home = result

    def set_tasks(self, result: QueryResult[List[MaintenanceTask]]) -> None:
        self.tasks = result

    def set_systems(self, result: QueryResult[List[HomeSystem]]) -> None:
        self.systems = result

    def set_points(self, result: QueryResult[Optional[BundleProgress]]) -> None:
        self.points = result

    def set_forecast(self, result: QueryResult[Optional[BudgetForecast]]) -> None:
        self.forecast = result

    @property
    def is_loading(self) -> bool:
        return not self.home.is_resolved

    @property
    def active_home(self) -> Optional[Home]:
        return self.home.value if self.home.is_resolved else None

    @property
    def show_empty_homes(self) -> bool:
        return self.home.is_resolved and self.home.value is None

    @property
    def home_name(self) -> str:
        home = self.active_home
        return home.display_name if home else ""

    # ------------------------------------------------------------------
    # Next-up tasks
    # ------------------------------------------------------------------
    @property
    def tasks_loading(self) -> bool:
        return self.tasks.is_loading

    @property
    def has_overdue(self) -> bool:
        now = self.clock()
        return any(
            derive_task_status(t.status, t.due_date, now, due_soon_days=self.due_soon_days).is_overdue
            for t in self.tasks.data_or([]) or []
        )

    @property
    def section_title(self) -> str:
        return "Action Required" if self.has_overdue else "Next Up"

    def task_cards(self) -> List[TaskCard]:
        now = self.clock()
        cards: List[TaskCard] = []
        for task in self.tasks.data_or([]) or []:
            flags = derive_task_status(
                task.status, task.due_date, now, due_soon_days=self.due_soon_days
            )
            savings = diy_savings(task)
            prefix = "Overdue: " if flags.is_overdue else "Due: "
            cards.append(
                TaskCard(
                    task_id=task.id,
                    name=task.name,
                    due_label=f"{prefix}{format_short_date(task.due_date)}",
                    is_overdue=flags.is_overdue,
                    savings_label=f"Save ${savings} with DIY" if savings > 0 else "",
                    tone=status_tone(
                        task.status, task.due_date, now, due_soon_days=self.due_soon_days
                    ),
                )
            )
        return cards

    def tasks_empty_state(self) -> Optional[EmptyState]:
        if self.tasks.is_resolved and not self.tasks.value:
            return EMPTY_TASKS
        return None

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------
    @property
    def health_score(self) -> float:
        home = self.active_home
        if home is None or home.overall_health_score is None:
            return 100.0
        return float(home.overall_health_score)

    def health_card(self) -> dict:
        score = self.health_score
        return {
            "score": js_round(score),
            "label": health_score_label(score),
            "tone": health_score_tone(score),
            "warning": "Overdue tasks affecting score" if self.has_overdue else "",
        }

    def monthly_budget_label(self) -> Optional[str]:
        """``$N`` per-month budget, or ``None`` while the forecast loads."""
        if not self.forecast.is_resolved:
            return None
        forecast = self.forecast.value
        per_month = forecast.summary.per_month if forecast and forecast.summary else 0
        return format_currency(per_month)

    def points_card(self) -> Optional[PointsCard]:
        progress = self.points.value if self.points.is_resolved else None
        if progress is None:
            return None
        nxt = progress.next_bundle
        return PointsCard(
            current_points=progress.current_points,
            lifetime_label=f"{progress.lifetime_points} lifetime",
            next_label=f"Next: {nxt.name}" if nxt else "",
            remaining_label=f"{nxt.remaining_points} pts to go" if nxt else "",
            progress_percent=nxt.progress_percent if nxt else 0.0,
            badges=[
                (b.short_name, "success" if b.achieved else "default") for b in progress.bundles
            ],
        )

    def system_cards(self) -> List[SystemCard]:
        cards = []
        for system in (self.systems.data_or([]) or [])[:SYSTEM_CARD_LIMIT]:
            score = 100.0 if system.health_score is None else float(system.health_score)
            cards.append(
                SystemCard(
                    system_id=system.id,
                    name=system.display_name,
                    score=js_round(score),
                    label=health_score_label(score),
                    tone=health_score_tone(score),
                )
            )
        return cards

    def empty_state(self) -> Optional[EmptyState]:
        return EMPTY_HOMES if self.show_empty_homes else None


__all__ = [
    "FORECAST_YEARS",
    "HomeDashboardVM",
    "PointsCard",
    "SystemCard",
    "TaskCard",
    "UPCOMING_LIMIT",
]
