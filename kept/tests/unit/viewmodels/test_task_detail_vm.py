from __future__ import annotations

from kept.domain.entities import MaintenanceTask
from kept.domain.query import QueryResult
from kept.usecases.task_actions import CompleteTask, SnoozeTask
from kept.viewmodels.task_detail_vm import (
    SECTION_CALL_PRO,
    SECTION_DEEP_DIVE,
    SECTION_DIY_STEPS,
    SECTION_QUICK_SKIM,
    TaskDetailVM,
)

from kept.tests.unit.viewmodels.helpers import AlertRecorder, CallCounter, fixed_clock, make_backend

GUIDED_TASK = {
    "_id": "task_guided",
    "name": "Replace filter",
    "status": "upcoming",
    "dueDate": "2026-03-05",
    "category": "hvac",
    "priority": "critical",
    "proCostLow": 80,
    "proCostHigh": 120,
    "diyCostLow": 15,
    "diyCostHigh": 25,
    "template": {
        "difficulty": "easy",
        "estimatedTimeMinutes": 10,
        "quickSkim": ["Turn it off", "Match the size"],
        "whenToCallPro": ["Slot damaged"],
        "diySteps": ["Open panel", "Swap filter"],
        "safetyWarnings": ["Power off first"],
        "commonMistakes": ["Backwards filter"],
        "deepDiveContent": {"whyItMatters": "Airflow", "proTips": ["Date the frame"]},
    },
}


def _vm(**kwargs):
    backend = make_backend()
    alerts = AlertRecorder()
    done = CallCounter()
    vm = TaskDetailVM(
        complete_task=CompleteTask(backend),
        snooze_task=SnoozeTask(backend),
        on_alert=alerts,
        on_done=done,
        clock=fixed_clock,
        **kwargs,
    )
    vm.set_task(QueryResult.resolved(backend.get_task("task_filter")))
    return vm, backend, alerts, done


def test_header_for_overdue_task() -> None:
    vm = TaskDetailVM(clock=fixed_clock)
    vm.set_task(QueryResult.resolved(MaintenanceTask.from_payload(GUIDED_TASK)))

    header = vm.header()

    assert header["due_label"] == "Overdue: Thursday, March 5, 2026"
    assert header["priority_label"] == "Critical"
    assert header["difficulty"] == "Easy"
    assert header["estimated_time"] == "10 min"
    assert header["category"] == "HVAC"
    assert header["is_overdue"] is True


def test_cost_summary_ranges_and_savings() -> None:
    vm = TaskDetailVM(clock=fixed_clock)
    vm.set_task(QueryResult.resolved(MaintenanceTask.from_payload(GUIDED_TASK)))

    summary = vm.cost_summary()

    assert summary.diy_range == "$15 - $25"
    assert summary.pro_range == "$80 - $120"
    assert summary.savings_label == "Save up to $80 by doing it yourself!"


def test_cost_summary_absent_without_costs() -> None:
    vm = TaskDetailVM(clock=fixed_clock)
    vm.set_task(QueryResult.resolved(MaintenanceTask(id="t")))

    assert vm.cost_summary() is None
    assert vm.sections() == []


def test_sections_only_quick_skim_expanded_by_default() -> None:
    vm = TaskDetailVM(clock=fixed_clock)
    vm.set_task(QueryResult.resolved(MaintenanceTask.from_payload(GUIDED_TASK)))

    sections = {s.key: s for s in vm.sections()}

    assert list(sections) == [SECTION_QUICK_SKIM, SECTION_CALL_PRO, SECTION_DIY_STEPS, SECTION_DEEP_DIVE]
    assert sections[SECTION_QUICK_SKIM].expanded is True
    assert sections[SECTION_QUICK_SKIM].badge == "2 points"
    assert sections[SECTION_DIY_STEPS].items == [
        "Warning: Power off first",
        "1. Open panel",
        "2. Swap filter",
        "Avoid: Backwards filter",
    ]
    assert sections[SECTION_DEEP_DIVE].items == ["Airflow", "Tip: Date the frame"]

    vm.toggle_section(SECTION_DIY_STEPS)
    vm.toggle_section(SECTION_QUICK_SKIM)
    expanded = {s.key for s in vm.sections() if s.expanded}
    assert expanded == {SECTION_DIY_STEPS}


def test_complete_success_navigates_back() -> None:
    vm, backend, alerts, done = _vm()

    assert vm.complete(was_diy=False) is True

    assert backend.calls[-1] == ("complete_task", {"taskId": "task_filter", "wasDiy": False})
    assert done.count == 1
    assert alerts.alerts == []
    assert vm.is_completing is False


def test_complete_failure_alerts_and_clears_flag() -> None:
    vm, backend, alerts, done = _vm()
    backend.fail_next("complete_task", RuntimeError("offline"))

    assert vm.complete(was_diy=True) is False

    assert alerts.alerts == [("Error", "Failed to complete task")]
    assert done.count == 0
    assert vm.is_completing is False


def test_snooze_uses_configured_days() -> None:
    vm, backend, _, done = _vm(snooze_days=14)

    assert vm.snooze() is True

    assert backend.calls[-1] == ("snooze_task", {"taskId": "task_filter", "days": 14})
    assert done.count == 1
    assert vm.is_snoozing is False


def test_snooze_failure_alerts() -> None:
    vm, backend, alerts, _ = _vm()
    backend.fail_next("snooze_task", RuntimeError("offline"))

    assert vm.snooze() is False
    assert alerts.alerts == [("Error", "Failed to snooze task")]
    assert vm.is_snoozing is False


def test_actions_ignored_while_in_flight_or_unloaded() -> None:
    vm, backend, _, _ = _vm()
    vm.is_completing = True
    calls_before = len(backend.calls)

    assert vm.complete(was_diy=True) is False
    assert len(backend.calls) == calls_before
    assert TaskDetailVM().snooze() is False
