from __future__ import annotations

import pytest

from kept.domain.query import QueryResult
from kept.domain.task_filter import StatusFilter, TaskTab
from kept.usecases.fetch_query import run_query
from kept.usecases.task_actions import CompleteTask
from kept.viewmodels.care_vm import CareVM
from kept.viewmodels.status_format import EMPTY_COMPLETED, EMPTY_HOMES, EMPTY_TASKS

from kept.tests.unit.viewmodels.helpers import fixed_clock, make_backend


def _vm():
    backend = make_backend()
    vm = CareVM(complete_task=CompleteTask(backend), clock=fixed_clock)
    vm.set_tasks(QueryResult.resolved(backend.get_enhanced_tasks("home_1")))
    return vm, backend


def test_rows_project_status_and_savings() -> None:
    vm, _ = _vm()

    rows = vm.rows()

    assert [r.task_id for r in rows] == ["task_filter", "task_flush"]
    overdue, due = rows
    assert overdue.is_overdue and overdue.date_label == "Overdue"
    assert overdue.system_name == "Furnace"
    assert overdue.savings_label == "Save $80"
    assert overdue.priority_label == "High"
    assert overdue.tone == "danger"
    assert due.is_due and due.date_label == "Mar 13"
    assert due.savings_label == ""
    assert due.difficulty == "Moderate"


def test_rows_empty_while_loading() -> None:
    vm = CareVM(clock=fixed_clock)

    assert vm.is_loading
    assert vm.rows() == []


def test_skipped_task_query_shows_no_home_state() -> None:
    backend = make_backend()
    vm = CareVM(clock=fixed_clock)

    vm.set_tasks(run_query(backend.get_enhanced_tasks, None, include_completed=True))

    assert vm.is_skipped
    assert not vm.is_loading
    assert vm.rows() == []
    assert vm.empty_state() == EMPTY_HOMES
    assert backend.calls == []


def test_completed_tab_and_empty_states() -> None:
    vm, _ = _vm()

    vm.set_tab("completed")

    assert [r.task_id for r in vm.rows()] == ["task_done"]
    assert vm.rows()[0].date_label == "Feb 2"
    assert vm.empty_state() == EMPTY_COMPLETED
    assert vm.show_stat_cards is False
    vm.set_tab(TaskTab.UPCOMING.value)
    assert vm.empty_state() == EMPTY_TASKS


def test_stat_cards_fall_back_to_local_counts() -> None:
    vm, backend = _vm()

    local = {card.key: card.count for card in vm.stat_cards()}
    vm.set_stats(QueryResult.resolved(backend.get_task_stats("home_1")))
    server = {card.key: card.count for card in vm.stat_cards()}

    assert local == {"overdue": 1, "due": 1, "upcoming": 0}
    assert server == local


def test_toggle_status_filter_selects_and_clears() -> None:
    vm, _ = _vm()

    vm.toggle_status_filter("overdue")
    assert vm.filters.status_filter == StatusFilter.OVERDUE
    assert [c.active for c in vm.stat_cards()] == [True, False, False]
    assert [r.task_id for r in vm.rows()] == ["task_filter"]

    vm.toggle_status_filter("overdue")
    assert vm.filters.status_filter is None


def test_filter_chips_and_clear() -> None:
    vm, _ = _vm()
    vm.set_search("heater")
    vm.set_category("Plumbing")
    vm.toggle_status_filter("due")

    chips = [(c.key, c.label) for c in vm.active_filter_chips()]

    assert chips == [("search", '"heater"'), ("status", "Due Soon"), ("category", "Plumbing")]
    assert vm.has_active_filters
    vm.clear_filters()
    assert not vm.has_active_filters


def test_unknown_category_rejected() -> None:
    vm, _ = _vm()

    with pytest.raises(ValueError):
        vm.set_category("garden")


def test_sort_by_priority() -> None:
    vm, _ = _vm()

    vm.set_sort("priority")

    assert [r.task_id for r in vm.rows()] == ["task_filter", "task_flush"]


def test_quick_complete_marks_task_done() -> None:
    vm, backend = _vm()

    assert vm.quick_complete("task_flush") is True

    assert backend.calls[-1] == ("complete_task", {"taskId": "task_flush", "wasDiy": True})
    assert vm.completing_task_id is None
    assert vm.error_message is None


def test_quick_complete_failure_sets_inline_error_and_clears_flag() -> None:
    vm, backend = _vm()
    backend.fail_next("complete_task", RuntimeError("offline"))

    assert vm.quick_complete("task_flush") is False

    assert vm.error_message == "Failed to complete task"
    assert vm.completing_task_id is None


def test_quick_complete_ignored_while_in_flight() -> None:
    vm, backend = _vm()
    vm.completing_task_id = "task_filter"

    assert vm.quick_complete("task_flush") is False
    assert backend.calls[-1][0] == "get_enhanced_tasks"
