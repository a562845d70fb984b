from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Set

from kept.domain.entities import MaintenanceTask
from kept.domain.formatting import format_currency, format_long_date
from kept.domain.ports import UseCaseError
from kept.domain.query import QueryResult
from kept.domain.task_status import DUE_SOON_DAYS, derive_task_status, status_tone
from kept.usecases.task_actions import CompleteTask, SnoozeTask

from .common import AlertCallback, BackCallback, Clock, ERROR_TITLE, default_clock
from .status_format import category_label, difficulty_label, priority_badge, status_badge

SECTION_QUICK_SKIM = "quickSkim"
SECTION_CALL_PRO = "callPro"
SECTION_DIY_STEPS = "diySteps"
SECTION_DEEP_DIVE = "deepDive"


@dataclass
class CostSummary:
    diy_range: str
    pro_range: str
    savings_label: str


@dataclass
class GuideSection:
    key: str
    title: str
    items: List[str]
    badge: str
    expanded: bool


class TaskDetailVM:
    """State for ``/care/<task_id>``: header labels, guide sections and actions.

    ``complete`` and ``snooze`` are gated by their in-flight flags; on success
    ``on_done`` navigates back, on failure ``on_alert`` shows the error.
    """

    def __init__(
        self,
        *,
        complete_task: Optional[CompleteTask] = None,
        snooze_task: Optional[SnoozeTask] = None,
        on_alert: Optional[AlertCallback] = None,
        on_done: Optional[BackCallback] = None,
        clock: Clock = default_clock,
        due_soon_days: int = DUE_SOON_DAYS,
        snooze_days: int = DUE_SOON_DAYS,
    ) -> None:
        self.complete_task = complete_task
        self.snooze_task = snooze_task
        self.on_alert = on_alert
        self.on_done = on_done
        self.clock = clock
        self.due_soon_days = due_soon_days
        self.snooze_days = snooze_days

        self.task: QueryResult[MaintenanceTask] = QueryResult.pending()
        self.is_completing = False
        self.is_snoozing = False
        self.expanded_sections: Set[str] = {SECTION_QUICK_SKIM}

    def set_task(self, result: QueryResult[MaintenanceTask]) -> None:
        self.task = result

    @property
    def is_loading(self) -> bool:
        return not self.task.is_resolved or self.task.value is None

    def toggle_section(self, key: str) -> None:
        if key in self.expanded_sections:
            self.expanded_sections.discard(key)
        else:
            self.expanded_sections.add(key)

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------
    def _current(self) -> MaintenanceTask:
        if self.task.value is None:
            raise ValueError("Task not loaded")
        return self.task.value

    @property
    def is_completed(self) -> bool:
        task = self.task.value
        return task is not None and derive_task_status(
            task.status, task.due_date, self.clock()
        ).is_completed

    def header(self) -> dict:
        task = self._current()
        now = self.clock()
        flags = derive_task_status(task.status, task.due_date, now, due_soon_days=self.due_soon_days)
        status_label, status_variant = status_badge(task.status)
        priority_label, priority_variant = priority_badge(task.priority)
        minutes = task.template.estimated_time_minutes if task.template else None
        prefix = "Overdue: " if flags.is_overdue else "Due: "
        return {
            "name": task.name,
            "system": task.system_name,
            "status_label": status_label,
            "status_variant": status_variant,
            "category": category_label(task.category) if task.category else "",
            "priority_label": priority_label,
            "priority_variant": priority_variant,
            "difficulty": difficulty_label(task.difficulty),
            "due_label": f"{prefix}{format_long_date(task.due_date)}",
            "estimated_time": f"{minutes} min" if minutes else "",
            "tone": status_tone(task.status, task.due_date, now, due_soon_days=self.due_soon_days),
            "is_overdue": flags.is_overdue,
            "is_completed": flags.is_completed,
        }

    def cost_summary(self) -> Optional[CostSummary]:
        task = self._current()
        if not (task.diy_cost_low or task.pro_cost_low):
            return None
        savings = max(0.0, task.pro_cost_mean - task.diy_cost_mean)
        return CostSummary(
            diy_range=f"{format_currency(task.diy_cost_low)} - {format_currency(task.diy_cost_high)}",
            pro_range=f"{format_currency(task.pro_cost_low)} - {format_currency(task.pro_cost_high)}",
            savings_label=(
                f"Save up to {format_currency(savings)} by doing it yourself!" if savings > 0 else ""
            ),
        )

    def sections(self) -> List[GuideSection]:
        """Collapsible DIY guide sections that have content."""
        template = self._current().template
        if template is None:
            return []
        found: List[GuideSection] = []

        def add(key: str, title: str, items: List[str], badge: str = "") -> None:
            if items:
                found.append(
                    GuideSection(key, title, items, badge, key in self.expanded_sections)
                )

        add(
            SECTION_QUICK_SKIM,
            "Quick Skim",
            list(template.quick_skim),
            f"{len(template.quick_skim)} points",
        )
        add(SECTION_CALL_PRO, "When to Call a Pro", list(template.when_to_call_pro))
        if template.diy_steps:
            steps = [f"Warning: {w}" for w in template.safety_warnings]
            steps += [f"{i}. {step}" for i, step in enumerate(template.diy_steps, start=1)]
            steps += [f"Avoid: {m}" for m in template.common_mistakes]
            add(SECTION_DIY_STEPS, "DIY Steps", steps, f"{len(template.diy_steps)} steps")
        if template.has_deep_dive:
            deep = [text for text in (template.why_it_matters, template.science_behind) if text]
            deep += [f"Tip: {tip}" for tip in template.pro_tips]
            add(SECTION_DEEP_DIVE, "Deep Dive", deep)
        return found

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def complete(self, *, was_diy: bool) -> bool:
        task = self.task.value
        if task is None or self.complete_task is None or self.is_completing:
            return False
        self.is_completing = True
        try:
            self.complete_task(task.id, was_diy=was_diy)
        except UseCaseError as exc:
            self._alert(exc, "Failed to complete task")
            return False
        finally:
            self.is_completing = False
        if self.on_done:
            self.on_done()
        return True

    def snooze(self) -> bool:
        task = self.task.value
        if task is None or self.snooze_task is None or self.is_snoozing:
            return False
        self.is_snoozing = True
        try:
            self.snooze_task(task.id, days=self.snooze_days)
        except UseCaseError as exc:
            self._alert(exc, "Failed to snooze task")
            return False
        finally:
            self.is_snoozing = False
        if self.on_done:
            self.on_done()
        return True

    def _alert(self, exc: UseCaseError, fallback: str) -> None:
        if self.on_alert:
            self.on_alert(ERROR_TITLE, exc.message or fallback)


__all__ = [
    "CostSummary",
    "GuideSection",
    "SECTION_CALL_PRO",
    "SECTION_DEEP_DIVE",
    "SECTION_DIY_STEPS",
    "SECTION_QUICK_SKIM",
    "TaskDetailVM",
]
