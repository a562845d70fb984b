"""Systems list and system detail projections.

Call context:
    ``/systems`` feeds ``getHomeSystems`` into ``SystemsVM`` together with the
    active home (its ``year_built`` is the age fallback). ``/systems/<id>``
    feeds the system, its tasks (completed included), its issues and the
    templates of its system type into ``SystemDetailVM``. The template query
    is skipped until the system has loaded.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from kept.domain.entities import (
    Home,
    HomeSystem,
    Issue,
    MaintenanceTask,
    SystemId,
    TaskId,
    TaskTemplate,
)
from kept.domain.formatting import (
    format_currency,
    format_short_date,
    install_age_years,
    js_round,
    system_age_years,
    system_health_grade,
)
from kept.domain.query import QueryResult
from kept.domain.task_status import DUE_SOON_DAYS, derive_task_status, is_open

from .common import Clock, default_clock
from .status_format import (
    CATEGORY_FILTERS,
    CATEGORY_LABELS,
    EMPTY_HOMES,
    EMPTY_SYSTEMS,
    EmptyState,
    difficulty_label,
)

TAB_OVERVIEW = "overview"
TAB_TASKS = "tasks"
TAB_ISSUES = "issues"
TAB_LIBRARY = "library"
DETAIL_TABS = (
    (TAB_OVERVIEW, "Overview"),
    (TAB_TASKS, "Tasks"),
    (TAB_ISSUES, "Issues"),
    (TAB_LIBRARY, "DIY Library"),
)

SEVERITY_TONES = {
    "minor": "muted",
    "moderate": "warning",
    "major": "orange",
    "critical": "danger",
}

PREVIEW_COUNT = 3
COMPLETED_LIMIT = 10


def risk_tone(probability: float) -> str:
    if probability > 50:
        return "danger"
    if probability > 25:
        return "warning"
    return "success"


def remaining_life_tone(percent: Optional[float]) -> str:
    value = percent or 0
    if value > 50:
        return "success"
    if value > 25:
        return "warning"
    return "danger"


@dataclass
class SystemRow:
    system_id: SystemId
    name: str
    category_badge: str
    score: int
    grade_label: str
    grade_variant: str
    age_label: str
    lifespan_label: str
    manufacturer_label: str
    needs_attention: bool


@dataclass
class SystemTaskRow:
    task_id: TaskId
    name: str
    date_label: str
    is_overdue: bool


@dataclass
class IssueCard:
    issue_id: str
    name: str
    severity: str
    severity_tone: str
    risk_label: str
    risk_tone: str
    description: str
    timeline: str
    cost_range: str
    diy_label: str


@dataclass
class GuideCard:
    template_id: str
    name: str
    description: str
    difficulty: str
    estimated_time: str


class SystemsVM:
    """Category-filtered list of the active home's systems."""

    def __init__(self, *, clock: Clock = default_clock) -> None:
        self.clock = clock
        self.category = ""
        self.home: Optional[Home] = None
        self.systems: QueryResult[List[HomeSystem]] = QueryResult.pending()

    def set_home(self, home: Optional[Home]) -> None:
        self.home = home

    def set_systems(self, result: QueryResult[List[HomeSystem]]) -> None:
        self.systems = result

    @property
    def is_loading(self) -> bool:
        return self.systems.is_loading

    @property
    def is_skipped(self) -> bool:
        return self.systems.is_skipped

    def set_category(self, category: str) -> None:
        value = (category or "").strip().lower()
        if value and value not in CATEGORY_LABELS:
            raise ValueError(f"Unknown category filter: {category}")
        self.category = value

    @staticmethod
    def category_options() -> List[tuple]:
        return list(CATEGORY_FILTERS)

    def filtered(self) -> List[HomeSystem]:
        systems = self.systems.data_or([]) or []
        if not self.category:
            return list(systems)
        return [s for s in systems if s.category.lower() == self.category]

    def rows(self) -> List[SystemRow]:
        year_built = self.home.year_built if self.home else None
        today = self.clock().date()
        rows = []
        for system in self.filtered():
            label, variant = system_health_grade(system.health_score)
            age = system_age_years(system.install_date, year_built, today)
            lifespan = system.system_type.default_lifespan_years if system.system_type else None
            score = 100.0 if system.health_score is None else system.health_score
            rows.append(
                SystemRow(
                    system_id=system.id,
                    name=system.display_name,
                    category_badge=system.category.upper(),
                    score=js_round(score),
                    grade_label=label,
                    grade_variant=variant,
                    age_label=f"{age} years old" if age > 0 else "Age unknown",
                    lifespan_label=f"/ {lifespan} yr lifespan" if lifespan else "",
                    manufacturer_label=(
                        f"{system.manufacturer} {system.model_number}".strip()
                        if system.manufacturer
                        else ""
                    ),
                    needs_attention=system.needs_attention,
                )
            )
        return rows

    def empty_state(self) -> Optional[EmptyState]:
        """``None`` while loading or when rows exist."""
        if self.systems.is_skipped:
            return EMPTY_HOMES
        if not self.systems.is_resolved or self.filtered():
            return None
        if self.category:
            return EmptyState(f"No {CATEGORY_LABELS[self.category]} systems", "")
        return EMPTY_SYSTEMS


class SystemDetailVM:
    """Header stats and the four detail tabs of a single system."""

    def __init__(
        self,
        *,
        clock: Clock = default_clock,
        due_soon_days: int = DUE_SOON_DAYS,
    ) -> None:
        self.clock = clock
        self.due_soon_days = due_soon_days
        self.active_tab = TAB_OVERVIEW

        self.system: QueryResult[Optional[HomeSystem]] = QueryResult.pending()
        self.tasks: QueryResult[List[MaintenanceTask]] = QueryResult.pending()
        self.issues: QueryResult[List[Issue]] = QueryResult.pending()
        self.templates: QueryResult[List[TaskTemplate]] = QueryResult.pending()

    def set_system(self, result: QueryResult[Optional[HomeSystem]]) -> None:
        self.system = result

    def set_tasks(self, result: QueryResult[List[MaintenanceTask]]) -> None:
        self.tasks = result

    def set_issues(self, result: QueryResult[List[Issue]]) -> None:
        self.issues = result

    def set_templates(self, result: QueryResult[List[TaskTemplate]]) -> None:
        self.templates = result

    def set_tab(self, tab: str) -> None:
        if tab not in dict(DETAIL_TABS):
            raise ValueError(f"Unknown system tab: {tab}")
        self.active_tab = tab

    @property
    def is_loading(self) -> bool:
        return self.current is None

    @property
    def current(self) -> Optional[HomeSystem]:
        return self.system.value if self.system.is_resolved else None

    @property
    def system_type_id(self) -> Optional[str]:
        """Argument of the template query; ``None`` keeps it skipped."""
        system = self.current
        return (system.system_type_id or None) if system else None

    # ------------------------------------------------------------------
    # Task partitions
    # ------------------------------------------------------------------
    def _now(self) -> datetime:
        return self.clock()

    def active_tasks(self) -> List[MaintenanceTask]:
        return [t for t in self.tasks.data_or([]) or [] if is_open(t.status)]

    def completed_tasks(self) -> List[MaintenanceTask]:
        return [
            t for t in self.tasks.data_or([]) or [] if (t.status or "").lower() == "completed"
        ]

    def overdue_tasks(self) -> List[MaintenanceTask]:
        now = self._now()
        return [
            t
            for t in self.active_tasks()
            if derive_task_status(t.status, t.due_date, now, due_soon_days=self.due_soon_days).is_overdue
        ]

    # ------------------------------------------------------------------
    # Header
    # ------------------------------------------------------------------
    @property
    def age_years(self) -> float:
        system = self.current
        if system is None:
            return 0.0
        return install_age_years(system.install_date, self._now())

    def header(self) -> dict:
        system = self.current
        if system is None:
            raise ValueError("System not loaded")
        age = self.age_years
        score = 100.0 if system.health_score is None else system.health_score
        overdue = len(self.overdue_tasks())
        return {
            "name": system.display_name,
            "category": system.category,
            "score": js_round(score),
            "installed_label": (
                f"Installed {format_short_date(system.install_date)}" if system.install_date else ""
            ),
            "age_label": f"{age:g} years old" if age > 0 else "",
            "active_count": len(self.active_tasks()),
            "overdue_count": overdue,
            "completed_count": len(self.completed_tasks()),
            "has_overdue": overdue > 0,
        }

    def lifecycle(self) -> Optional[dict]:
        system = self.current
        if system is None or not system.estimated_replacement_year:
            return None
        percent = system.remaining_life_percent
        return {
            "remaining_label": f"{js_round(percent)}%" if percent else "-",
            "remaining_percent": max(0.0, min(100.0, percent or 0.0)),
            "tone": remaining_life_tone(percent),
            "replacement_year": str(system.estimated_replacement_year),
            "replacement_cost": (
                format_currency(system.estimated_replacement_cost)
                if system.estimated_replacement_cost
                else ""
            ),
        }

    # ------------------------------------------------------------------
    # Tabs
    # ------------------------------------------------------------------
    def _task_row(self, task: MaintenanceTask, now: datetime, *, prefix: str) -> SystemTaskRow:
        flags = derive_task_status(task.status, task.due_date, now, due_soon_days=self.due_soon_days)
        if flags.is_overdue:
            label = "Overdue"
        else:
            label = f"{prefix}{format_short_date(task.due_date)}"
        return SystemTaskRow(task.id, task.name, label, flags.is_overdue)

    def upcoming_preview(self) -> List[SystemTaskRow]:
        now = self._now()
        return [self._task_row(t, now, prefix="") for t in self.active_tasks()[:PREVIEW_COUNT]]

    def active_rows(self) -> List[SystemTaskRow]:
        now = self._now()
        return [self._task_row(t, now, prefix="Due ") for t in self.active_tasks()]

    def completed_rows(self) -> List[SystemTaskRow]:
        rows = []
        for task in self.completed_tasks()[:COMPLETED_LIMIT]:
            label = "Completed"
            if task.completed_date:
                label = f"Completed {format_short_date(task.completed_date)}"
            rows.append(SystemTaskRow(task.id, task.name, label, False))
        return rows

    @property
    def has_no_tasks(self) -> bool:
        return self.tasks.is_resolved and not self.tasks.value

    def risks_title(self) -> str:
        return f"Top Risks at {js_round(self.age_years)} Years"

    def issues_intro(self) -> str:
        return (
            f"Based on your system's age ({js_round(self.age_years)} years), "
            "here are the most likely issues:"
        )

    def issue_cards(self, limit: Optional[int] = None) -> List[IssueCard]:
        issues = self.issues.data_or([]) or []
        if limit is not None:
            issues = issues[:limit]
        cards = []
        for issue in issues:
            severity = (issue.severity or "").lower()
            cards.append(
                IssueCard(
                    issue_id=issue.id,
                    name=issue.title,
                    severity=severity,
                    severity_tone=SEVERITY_TONES.get(severity, "muted"),
                    risk_label=f"{issue.current_probability}%",
                    risk_tone=risk_tone(issue.current_probability),
                    description=issue.description,
                    timeline=(
                        f"Now: {issue.current_probability}% | "
                        f"3yr: {issue.probability_3yr}% | 5yr: {issue.probability_5yr}%"
                    ),
                    cost_range=(
                        f"{format_currency(issue.repair_cost_low)} - "
                        f"{format_currency(issue.repair_cost_high)}"
                    ),
                    diy_label=(
                        f"DIY fixable ({issue.diy_difficulty or 'moderate'})"
                        if issue.is_diy_fixable
                        else ""
                    ),
                )
            )
        return cards

    def library_intro(self) -> str:
        system = self.current
        count = len(self.templates.data_or([]) or [])
        type_name = system.system_type.name if system and system.system_type else ""
        return f"{count} maintenance guides for {type_name}".rstrip()

    def guide_cards(self) -> List[GuideCard]:
        return [
            GuideCard(
                template_id=t.id,
                name=t.name,
                description=t.description,
                difficulty=difficulty_label(t.difficulty) if t.difficulty else "",
                estimated_time=(
                    f"{t.estimated_time_minutes} min" if t.estimated_time_minutes else ""
                ),
            )
            for t in self.templates.data_or([]) or []
        ]


__all__ = [
    "DETAIL_TABS",
    "GuideCard",
    "IssueCard",
    "SystemDetailVM",
    "SystemRow",
    "SystemTaskRow",
    "SystemsVM",
    "TAB_ISSUES",
    "TAB_LIBRARY",
    "TAB_OVERVIEW",
    "TAB_TASKS",
    "remaining_life_tone",
    "risk_tone",
]
