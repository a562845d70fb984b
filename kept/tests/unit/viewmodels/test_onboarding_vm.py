from __future__ import annotations

from typing import List

from kept.adapters.backend_memory import InMemoryBackend
from kept.adapters.storage_local import StorageLocal
from kept.domain.entities import SystemType
from kept.domain.onboarding import OnboardingSession
from kept.domain.query import QueryResult
from kept.usecases.fetch_query import run_query
from kept.usecases.onboarding_flow import FinishOnboarding, SaveOnboardingHome, SaveSystemSelection
from kept.usecases.onboarding_storage import load_onboarding_session, save_onboarding_session
from kept.viewmodels.onboarding_vm import (
    ROUTE_COMPLETE,
    ROUTE_DATES,
    ROUTE_SYSTEMS,
    OnboardingDatesVM,
    OnboardingHomeVM,
    OnboardingSystemsVM,
    group_by_category,
)

from kept.tests.unit.viewmodels.helpers import NOW


def _backend() -> InMemoryBackend:
    backend = InMemoryBackend(now=NOW)
    backend.add_system_type({"_id": "type_furnace", "name": "Furnace", "category": "hvac"})
    backend.add_system_type({"_id": "type_ac", "name": "Central AC", "category": "hvac"})
    backend.add_system_type({"_id": "type_roof", "name": "Roof", "category": "exterior"})
    return backend


def test_home_step_creates_home_and_navigates(tmp_path) -> None:
    backend = _backend()
    store = StorageLocal(str(tmp_path))
    paths: List[str] = []
    vm = OnboardingHomeVM(save_home=SaveOnboardingHome(backend, store), on_navigate=paths.append)
    for key, value in (
        ("address_line1", "1 Main St"),
        ("city", "Austin"),
        ("state", "tx"),
        ("zip_code", "78701"),
    ):
        vm.set_field(key, value)

    assert vm.submit() is True

    assert paths == [ROUTE_SYSTEMS]
    assert vm.session.home_id
    assert load_onboarding_session(store).home_id == vm.session.home_id
    assert vm.is_submitting is False


def test_home_step_shows_inline_error(tmp_path) -> None:
    backend = _backend()
    paths: List[str] = []
    vm = OnboardingHomeVM(
        save_home=SaveOnboardingHome(backend, StorageLocal(str(tmp_path))), on_navigate=paths.append
    )
    vm.set_field("city", "Austin")

    assert vm.submit() is False

    assert vm.error_message.startswith("Missing required field(s): Street address")
    assert paths == []
    assert "create_home" not in backend.operations()


def test_home_step_backend_failure_message(tmp_path) -> None:
    backend = _backend()
    backend.fail_next("create_home", RuntimeError("offline"))
    vm = OnboardingHomeVM(save_home=SaveOnboardingHome(backend, StorageLocal(str(tmp_path))))
    vm.form.update(address_line1="1 Main St", city="Austin", state="TX", zip_code="78701")

    assert vm.submit() is False
    assert vm.error_message == "Failed to create home"


def test_systems_step_groups_and_toggles(tmp_path) -> None:
    backend = _backend()
    store = StorageLocal(str(tmp_path))
    paths: List[str] = []
    vm = OnboardingSystemsVM(
        save_selection=SaveSystemSelection(store),
        on_navigate=paths.append,
        session=OnboardingSession(home_id="home_x"),
    )
    assert vm.is_loading
    vm.set_catalog(run_query(backend.get_system_types))

    assert vm.can_continue is False
    vm.toggle("type_roof")
    vm.toggle("type_furnace")
    vm.toggle("type_roof")
    vm.toggle("type_roof")

    assert vm.groups() == [
        ("HVAC", [("type_furnace", "Furnace", True), ("type_ac", "Central AC", False)]),
        ("EXTERIOR", [("type_roof", "Roof", True)]),
    ]
    assert vm.continue_() is True
    assert paths == [ROUTE_DATES]
    assert load_onboarding_session(store).system_type_ids == ("type_furnace", "type_roof")


def test_systems_step_requires_selection(tmp_path) -> None:
    vm = OnboardingSystemsVM(save_selection=SaveSystemSelection(StorageLocal(str(tmp_path))))

    assert vm.continue_() is False
    assert vm.is_saving is False


def test_group_by_category_keeps_first_seen_order() -> None:
    types = [
        SystemType(id="a", name="A", category="plumbing"),
        SystemType(id="b", name="B", category="hvac"),
        SystemType(id="c", name="C", category="plumbing"),
    ]

    groups = group_by_category(types)

    assert list(groups) == ["plumbing", "hvac"]
    assert [t.id for t in groups["plumbing"]] == ["a", "c"]


def _dates_vm(tmp_path, backend: InMemoryBackend, session: OnboardingSession, paths: List[str]):
    store = StorageLocal(str(tmp_path))
    vm = OnboardingDatesVM(
        finish=FinishOnboarding(backend, store), on_navigate=paths.append, session=session
    )
    vm.set_catalog(QueryResult.resolved(backend.get_system_types()))
    return vm, store


def test_dates_step_creates_systems_and_clears_draft(tmp_path) -> None:
    backend = _backend()
    home_id = backend.add_home({"_id": "home_1", "name": "Maple"})
    paths: List[str] = []
    session = OnboardingSession(home_id=home_id, system_type_ids=("type_roof", "type_furnace"))
    vm, store = _dates_vm(tmp_path, backend, session, paths)

    assert [t.id for t in vm.selected_types()] == ["type_furnace", "type_roof"]
    vm.set_year("type_furnace", " 2015 ")
    vm.set_year("type_roof", "15")
    assert vm.year_inputs() == {"type_furnace": "2015", "type_roof": "15"}

    assert vm.finish() is True

    created = {s["systemTypeId"]: s for s in backend.systems_for_home(home_id)}
    assert created["type_furnace"]["installDate"] == "2015-01-01"
    assert "installDate" not in created["type_roof"]
    assert backend.get_current_profile().onboarding_completed_at is not None
    assert paths == [ROUTE_COMPLETE]
    assert vm.session.is_empty
    assert load_onboarding_session(store).is_empty


def test_dates_step_without_home_shows_error(tmp_path) -> None:
    backend = _backend()
    paths: List[str] = []
    vm, _ = _dates_vm(tmp_path, backend, OnboardingSession(system_type_ids=("type_roof",)), paths)

    assert vm.can_finish is False
    assert vm.finish() is False

    assert vm.error_message == "No home found. Please add your home first."
    assert paths == []
    assert "create_system" not in backend.operations()


def test_dates_step_failure_keeps_draft(tmp_path) -> None:
    backend = _backend()
    home_id = backend.add_home({"_id": "home_1"})
    backend.fail_next("complete_onboarding", RuntimeError("offline"))
    paths: List[str] = []
    session = OnboardingSession(home_id=home_id, system_type_ids=("type_furnace",))
    vm, store = _dates_vm(tmp_path, backend, session, paths)
    save_onboarding_session(store, session)

    assert vm.finish() is False

    assert vm.error_message == "Failed to finish setup"
    assert vm.session == session
    assert load_onboarding_session(store).home_id == home_id
    assert len(backend.systems_for_home(home_id)) == 1
    assert vm.is_finishing is False
