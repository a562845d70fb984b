from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Tuple

from kept.adapters.backend_memory import InMemoryBackend

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return NOW


class AlertRecorder:
    def __init__(self) -> None:
        self.alerts: List[Tuple[str, str]] = []

    def __call__(self, title: str, message: str) -> None:
        self.alerts.append((title, message))


class CallCounter:
    def __init__(self) -> None:
        self.count = 0

    def __call__(self) -> None:
        self.count += 1


def make_backend() -> InMemoryBackend:
    """One home with a furnace, a water heater and three tasks."""
    backend = InMemoryBackend(now=NOW)
    backend.add_system_type({"_id": "type_furnace", "name": "Furnace", "category": "hvac"})
    backend.add_system_type({"_id": "type_heater", "name": "Water Heater", "category": "plumbing"})
    backend.add_home({"_id": "home_1", "name": "Maple", "overallHealthScore": 82, "systemsCount": 2})
    backend.add_system(
        {"_id": "sys_furnace", "homeId": "home_1", "systemTypeId": "type_furnace", "healthScore": 45}
    )
    backend.add_system({"_id": "sys_heater", "homeId": "home_1", "systemTypeId": "type_heater"})
    backend.add_task(
        {
            "_id": "task_filter",
            "homeId": "home_1",
            "systemId": "sys_furnace",
            "name": "Replace filter",
            "status": "upcoming",
            "dueDate": "2026-03-07",
            "category": "hvac",
            "priority": "high",
            "proCostLow": 80,
            "proCostHigh": 120,
            "diyCostLow": 15,
            "diyCostHigh": 25,
        }
    )
    backend.add_task(
        {
            "_id": "task_flush",
            "homeId": "home_1",
            "systemId": "sys_heater",
            "name": "Flush heater",
            "status": "upcoming",
            "dueDate": "2026-03-13",
            "category": "plumbing",
        }
    )
    backend.add_task(
        {
            "_id": "task_done",
            "homeId": "home_1",
            "name": "Test detectors",
            "status": "completed",
            "dueDate": "2026-02-01",
            "completedDate": "2026-02-02",
            "category": "electrical",
        }
    )
    backend.calls.clear()
    return backend


__all__ = ["AlertRecorder", "CallCounter", "NOW", "fixed_clock", "make_backend"]
