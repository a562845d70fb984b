from __future__ import annotations

from datetime import datetime, timezone

import pytest

from kept.adapters.api_errors import ApiClientError
from kept.adapters.backend_memory import InMemoryBackend

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def _backend() -> InMemoryBackend:
    backend = InMemoryBackend(now=NOW)
    backend.add_system_type({"_id": "type_furnace", "name": "Furnace", "category": "hvac"})
    backend.add_home({"_id": "home_1", "name": "Maple"})
    backend.add_system({"_id": "sys_1", "homeId": "home_1", "systemTypeId": "type_furnace"})
    backend.add_task(
        {"_id": "t_past", "homeId": "home_1", "systemId": "sys_1", "status": "upcoming", "dueDate": "2026-03-01"}
    )
    backend.add_task({"_id": "t_soon", "homeId": "home_1", "status": "upcoming", "dueDate": "2026-03-14"})
    backend.add_task({"_id": "t_later", "homeId": "home_1", "status": "upcoming", "dueDate": "2026-05-01"})
    backend.add_task({"_id": "t_done", "homeId": "home_1", "status": "completed", "dueDate": "2026-02-01"})
    return backend


def test_tasks_join_system_and_type() -> None:
    backend = _backend()

    task = backend.get_task("t_past")

    assert task is not None
    assert task.system_name == "Furnace"
    assert task.system is not None and task.system.category == "hvac"


def test_task_stats_counts_open_tasks() -> None:
    stats = _backend().get_task_stats("home_1")

    assert (stats.overdue, stats.due, stats.upcoming) == (1, 1, 1)


def test_upcoming_tasks_skip_completed_and_respect_limit() -> None:
    backend = _backend()

    tasks = backend.get_upcoming_tasks("home_1", limit=2)

    assert [t.id for t in tasks] == ["t_past", "t_soon"]


def test_complete_and_snooze_update_records() -> None:
    backend = _backend()

    backend.complete_task("t_soon", True)
    backend.snooze_task("t_later", 7)

    assert backend.get_task("t_soon").status == "completed"
    later = backend.get_task("t_later")
    assert later.due_date == "2026-05-08"
    assert later.status == "snoozed"
    assert backend.operations()[-2:] == ["get_task", "get_task"]


def test_missing_records_raise_not_found() -> None:
    backend = _backend()

    with pytest.raises(ApiClientError) as excinfo:
        backend.complete_task("nope", False)

    assert excinfo.value.status == 404


def test_fail_next_raises_once() -> None:
    backend = _backend()
    backend.fail_next("get_user_homes", RuntimeError("offline"))

    with pytest.raises(RuntimeError):
        backend.get_user_homes()
    assert [h.id for h in backend.get_user_homes()] == ["home_1"]


def test_share_packet_reuses_token() -> None:
    backend = _backend()
    packet_id = backend.create_packet({"homeId": "home_1", "title": "No heat", "symptom": "No heat"})

    first = backend.share_packet(packet_id)

    assert backend.share_packet(packet_id) == first
    assert backend.get_packet(packet_id).is_shared is True
