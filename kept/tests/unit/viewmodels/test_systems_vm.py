from __future__ import annotations

import pytest

from kept.domain.entities import Home, HomeSystem, Issue, MaintenanceTask
from kept.domain.query import QueryResult
from kept.usecases.fetch_query import run_query
from kept.viewmodels.status_format import EMPTY_HOMES
from kept.viewmodels.systems_vm import (
    TAB_ISSUES,
    SystemDetailVM,
    SystemsVM,
    remaining_life_tone,
    risk_tone,
)

from kept.tests.unit.viewmodels.helpers import fixed_clock, make_backend


def _systems_vm() -> SystemsVM:
    backend = make_backend()
    vm = SystemsVM(clock=fixed_clock)
    vm.set_home(backend.get_user_homes()[0])
    vm.set_systems(QueryResult.resolved(backend.get_home_systems("home_1")))
    return vm


def test_rows_grade_and_age_fallbacks() -> None:
    vm = _systems_vm()
    vm.set_home(None)

    rows = {r.system_id: r for r in vm.rows()}

    furnace = rows["sys_furnace"]
    assert furnace.name == "Furnace"
    assert furnace.category_badge == "HVAC"
    assert (furnace.grade_label, furnace.grade_variant) == ("Needs Attention", "warning")
    assert furnace.score == 45
    assert furnace.age_label == "Age unknown"
    assert rows["sys_heater"].score == 100


def test_age_uses_year_built_when_install_date_missing() -> None:
    vm = SystemsVM(clock=fixed_clock)
    vm.set_systems(
        QueryResult.resolved(
            [
                HomeSystem(id="a", name="Roof", install_date="2011-06-01"),
                HomeSystem(id="b", name="Panel"),
            ]
        )
    )
    vm.set_home(Home(id="h", year_built=2000))
    ages = [r.age_label for r in vm.rows()]

    assert ages == ["15 years old", "26 years old"]


def test_category_filter_and_empty_states() -> None:
    vm = _systems_vm()

    vm.set_category("plumbing")
    assert [r.system_id for r in vm.rows()] == ["sys_heater"]

    vm.set_category("exterior")
    assert vm.rows() == []
    assert vm.empty_state().title == "No Exterior systems"

    vm.set_category("")
    assert vm.empty_state() is None
    with pytest.raises(ValueError):
        vm.set_category("garden")
    assert vm.category_options()[0] == ("", "All")


def test_loading_list_has_no_empty_state() -> None:
    vm = SystemsVM(clock=fixed_clock)

    assert vm.is_loading
    assert vm.empty_state() is None
    vm.set_systems(QueryResult.resolved([]))
    assert vm.empty_state().title == "No systems yet"


def test_systems_without_home_show_no_home_state() -> None:
    backend = make_backend()
    vm = SystemsVM(clock=fixed_clock)

    vm.set_systems(run_query(backend.get_home_systems, None))

    assert vm.is_skipped and not vm.is_loading
    assert vm.rows() == []
    assert vm.empty_state() == EMPTY_HOMES


def _detail_vm() -> SystemDetailVM:
    backend = make_backend()
    backend.add_task(
        {"_id": "task_soon", "homeId": "home_1", "systemId": "sys_furnace", "name": "Clean burners",
         "status": "upcoming", "dueDate": "2026-03-20"}
    )
    backend.add_task(
        {"_id": "task_old", "homeId": "home_1", "systemId": "sys_furnace", "name": "Tune-up",
         "status": "completed", "dueDate": "2025-10-01", "completedDate": "2025-10-02"}
    )
    vm = SystemDetailVM(clock=fixed_clock)
    vm.set_system(run_query(backend.get_system, "sys_furnace"))
    vm.set_tasks(run_query(backend.get_tasks_for_system, "sys_furnace", include_completed=True))
    vm.set_issues(QueryResult.resolved([]))
    vm.set_templates(run_query(backend.get_templates_for_system_type, vm.system_type_id))
    return vm


def test_detail_header_counts() -> None:
    vm = _detail_vm()

    header = vm.header()

    assert header["name"] == "Furnace"
    assert header["score"] == 45
    assert header["active_count"] == 2
    assert header["overdue_count"] == 1
    assert header["completed_count"] == 1
    assert header["has_overdue"] is True
    assert header["installed_label"] == ""


def test_detail_task_rows() -> None:
    vm = _detail_vm()

    assert [(r.task_id, r.date_label) for r in vm.active_rows()] == [
        ("task_filter", "Overdue"),
        ("task_soon", "Due Mar 20"),
    ]
    assert [r.date_label for r in vm.upcoming_preview()] == ["Overdue", "Mar 20"]
    assert [r.date_label for r in vm.completed_rows()] == ["Completed Oct 2"]
    assert vm.has_no_tasks is False


def test_template_query_skipped_until_system_loaded() -> None:
    vm = SystemDetailVM(clock=fixed_clock)

    assert vm.system_type_id is None
    assert run_query(lambda type_id: [], vm.system_type_id).is_skipped


def test_tabs() -> None:
    vm = _detail_vm()

    vm.set_tab(TAB_ISSUES)
    assert vm.active_tab == TAB_ISSUES
    with pytest.raises(ValueError):
        vm.set_tab("photos")


def test_issue_cards_and_lifecycle() -> None:
    vm = SystemDetailVM(clock=fixed_clock)
    vm.set_system(
        QueryResult.resolved(
            HomeSystem.from_payload(
                {
                    "_id": "s",
                    "installDate": "2014-03-10",
                    "remainingLifePercent": 40,
                    "estimatedReplacementYear": 2034,
                    "estimatedReplacementCost": 5200,
                    "systemType": {"_id": "t", "name": "Furnace"},
                }
            )
        )
    )
    vm.set_issues(
        QueryResult.resolved(
            [
                Issue.from_payload(
                    {
                        "_id": "i1",
                        "issueName": "Igniter failure",
                        "severity": "Major",
                        "currentProbability": 35,
                        "probability3yr": 55,
                        "probability5yr": 70,
                        "repairCostLow": 150,
                        "repairCostHigh": 350,
                        "isDiyFixable": True,
                    }
                )
            ]
        )
    )
    vm.set_templates(QueryResult.resolved([]))

    card = vm.issue_cards(limit=3)[0]
    life = vm.lifecycle()

    assert card.severity_tone == "orange"
    assert card.risk_tone == "warning"
    assert card.timeline == "Now: 35% | 3yr: 55% | 5yr: 70%"
    assert card.cost_range == "$150 - $350"
    assert card.diy_label == "DIY fixable (moderate)"
    assert vm.risks_title() == "Top Risks at 12 Years"
    assert life["remaining_label"] == "40%"
    assert life["tone"] == "warning"
    assert life["replacement_cost"] == "$5,200"
    assert vm.library_intro() == "0 maintenance guides for Furnace"


def test_tone_thresholds() -> None:
    assert risk_tone(51) == "danger"
    assert risk_tone(25) == "success"
    assert remaining_life_tone(None) == "danger"
    assert remaining_life_tone(60) == "success"


def test_completed_rows_capped() -> None:
    vm = SystemDetailVM(clock=fixed_clock)
    vm.set_tasks(
        QueryResult.resolved(
            [MaintenanceTask(id=f"t{i}", status="completed") for i in range(12)]
        )
    )

    assert len(vm.completed_rows()) == 10
    assert vm.completed_rows()[0].date_label == "Completed"
