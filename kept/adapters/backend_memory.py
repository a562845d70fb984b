from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional, Tuple
from uuid import uuid4

from kept.domain.entities import (
    BudgetForecast,
    BundleProgress,
    ForecastConfidence,
    Home,
    HomeId,
    HomeSystem,
    Issue,
    MaintenanceTask,
    Packet,
    PacketId,
    Subscription,
    SystemId,
    SystemType,
    SystemTypeId,
    TaskId,
    TaskStats,
    TaskTemplate,
    UserProfile,
)
from kept.domain.ports import BackendPort
from kept.domain.task_filter import count_by_status
from kept.domain.task_status import STATUS_COMPLETED, STATUS_SNOOZED, is_open
from kept.domain.time_utils import ensure_aware, parse_backend_datetime, utc_now

from .api_errors import ApiClientError


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:12]}"


@dataclass
class InMemoryBackend(BackendPort):
    """Offline substitute for ``BackendRestAdapter`` with deterministic data.

    Records are kept as raw backend payloads (camelCase keys, ``_id``) and
    converted with the same ``from_payload`` factories the REST adapter uses.
    """

    now: Optional[datetime] = None
    calls: List[Tuple[str, Dict[str, Any]]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._profile: Optional[Dict[str, Any]] = None
        self._subscription: Optional[Dict[str, Any]] = None
        self._homes: Dict[HomeId, Dict[str, Any]] = {}
        self._system_types: Dict[SystemTypeId, Dict[str, Any]] = {}
        self._systems: Dict[SystemId, Dict[str, Any]] = {}
        self._tasks: Dict[TaskId, Dict[str, Any]] = {}
        self._templates: Dict[SystemTypeId, List[Dict[str, Any]]] = {}
        self._issues: Dict[SystemId, List[Dict[str, Any]]] = {}
        self._packets: Dict[PacketId, Dict[str, Any]] = {}
        self._forecasts: Dict[Tuple[HomeId, int], Dict[str, Any]] = {}
        self._confidence: Dict[HomeId, Dict[str, Any]] = {}
        self._progress: Dict[HomeId, Dict[str, Any]] = {}
        self._failures: Dict[str, Exception] = {}

    # ---------- Reads ----------

    def get_current_profile(self) -> Optional[UserProfile]:
        self._record("get_current_profile")
        return UserProfile.from_payload(self._profile) if self._profile else None

    def get_user_subscription(self) -> Optional[Subscription]:
        self._record("get_user_subscription")
        return Subscription.from_payload(self._subscription) if self._subscription else None

    def get_user_homes(self) -> List[Home]:
        self._record("get_user_homes")
        return [Home.from_payload(home) for home in self._homes.values()]

    def get_home_systems(self, home_id: HomeId) -> List[HomeSystem]:
        self._record("get_home_systems", homeId=home_id)
        return [
            HomeSystem.from_payload(self._joined_system(system))
            for system in self._systems.values()
            if system.get("homeId") == home_id
        ]

    def get_system(self, system_id: SystemId) -> Optional[HomeSystem]:
        self._record("get_system", systemId=system_id)
        system = self._systems.get(system_id)
        return HomeSystem.from_payload(self._joined_system(system)) if system else None

    def get_upcoming_tasks(
        self, home_id: HomeId, limit: Optional[int] = None
    ) -> List[MaintenanceTask]:
        self._record("get_upcoming_tasks", homeId=home_id, limit=limit)
        tasks = [
            task for task in self._home_tasks(home_id) if is_open(task.get("status"))
        ]
        tasks.sort(key=lambda task: task.get("dueDate") or "")
        if limit is not None:
            tasks = tasks[: max(0, int(limit))]
        return [MaintenanceTask.from_payload(self._joined_task(task)) for task in tasks]

    def get_enhanced_tasks(
        self, home_id: HomeId, include_completed: bool = True
    ) -> List[MaintenanceTask]:
        self._record("get_enhanced_tasks", homeId=home_id, includeCompleted=include_completed)
        return [
            MaintenanceTask.from_payload(self._joined_task(task))
            for task in self._home_tasks(home_id)
            if include_completed or task.get("status") != STATUS_COMPLETED
        ]

    def get_task_stats(self, home_id: HomeId) -> TaskStats:
        self._record("get_task_stats", homeId=home_id)
        tasks = [MaintenanceTask.from_payload(task) for task in self._home_tasks(home_id)]
        counts = count_by_status(tasks, now=self._now())
        return TaskStats(
            overdue=counts["overdue"], due=counts["due"], upcoming=counts["upcoming"]
        )

    def get_task(self, task_id: TaskId) -> Optional[MaintenanceTask]:
        self._record("get_task", taskId=task_id)
        task = self._tasks.get(task_id)
        return MaintenanceTask.from_payload(self._joined_task(task)) if task else None

    def get_tasks_for_system(
        self, system_id: SystemId, include_completed: bool = True
    ) -> List[MaintenanceTask]:
        self._record("get_tasks_for_system", systemId=system_id)
        return [
            MaintenanceTask.from_payload(self._joined_task(task))
            for task in self._tasks.values()
            if task.get("systemId") == system_id
            and (include_completed or task.get("status") != STATUS_COMPLETED)
        ]

    def get_templates_for_system_type(
        self, system_type_id: SystemTypeId
    ) -> List[TaskTemplate]:
        self._record("get_templates_for_system_type", systemTypeId=system_type_id)
        return [TaskTemplate.from_payload(t) for t in self._templates.get(system_type_id, [])]

    def get_issues_for_system(self, system_id: SystemId) -> List[Issue]:
        self._record("get_issues_for_system", systemId=system_id)
        return [Issue.from_payload(issue) for issue in self._issues.get(system_id, [])]

    def get_home_packets(self, home_id: HomeId) -> List[Packet]:
        self._record("get_home_packets", homeId=home_id)
        packets = [p for p in self._packets.values() if p.get("homeId") == home_id]
        packets.sort(key=lambda p: p.get("createdAt") or 0, reverse=True)
        return [Packet.from_payload(p) for p in packets]

    def get_packet(self, packet_id: PacketId) -> Optional[Packet]:
        self._record("get_packet", packetId=packet_id)
        packet = self._packets.get(packet_id)
        return Packet.from_payload(packet) if packet else None

    def get_budget_forecast(self, home_id: HomeId, years: int) -> Optional[BudgetForecast]:
        self._record("get_budget_forecast", homeId=home_id, years=years)
        forecast = self._forecasts.get((home_id, int(years)))
        return BudgetForecast.from_payload(forecast) if forecast else None

    def get_forecast_confidence(self, home_id: HomeId) -> Optional[ForecastConfidence]:
        self._record("get_forecast_confidence", homeId=home_id)
        confidence = self._confidence.get(home_id)
        return ForecastConfidence.from_payload(confidence) if confidence else None

    def get_bundle_progress(self, home_id: HomeId) -> Optional[BundleProgress]:
        self._record("get_bundle_progress", homeId=home_id)
        progress = self._progress.get(home_id)
        return BundleProgress.from_payload(progress) if progress else None

    def get_system_types(self) -> List[SystemType]:
        self._record("get_system_types")
        return [SystemType.from_payload(t) for t in self._system_types.values()]

    # ---------- Writes ----------

    def create_home(self, fields: Mapping[str, Any]) -> HomeId:
        self._record("create_home", **dict(fields))
        home_id = _new_id("home")
        self._homes[home_id] = {"_id": home_id, **self._compact(fields)}
        return home_id

    def update_home(self, home_id: HomeId, fields: Mapping[str, Any]) -> None:
        self._record("update_home", homeId=home_id, **dict(fields))
        home = self._require(self._homes, home_id, "home")
        home.update(self._compact(fields))

    def create_system(
        self,
        home_id: HomeId,
        system_type_id: SystemTypeId,
        install_date: Optional[str] = None,
    ) -> SystemId:
        self._record(
            "create_system",
            homeId=home_id,
            systemTypeId=system_type_id,
            installDate=install_date,
        )
        self._require(self._homes, home_id, "home")
        system_id = _new_id("system")
        self._systems[system_id] = self._compact(
            {
                "_id": system_id,
                "homeId": home_id,
                "systemTypeId": system_type_id,
                "installDate": install_date,
                "healthScore": 100,
            }
        )
        return system_id

    def complete_onboarding(self) -> None:
        self._record("complete_onboarding")
        if self._profile is None:
            self._profile = {"_id": _new_id("user")}
        self._profile["onboardingCompletedAt"] = int(self._now().timestamp() * 1000)

    def complete_task(self, task_id: TaskId, was_diy: bool) -> None:
        self._record("complete_task", taskId=task_id, wasDiy=was_diy)
        task = self._require(self._tasks, task_id, "task")
        task["status"] = STATUS_COMPLETED
        task["completedDate"] = self._now().date().isoformat()
        task["wasDiy"] = bool(was_diy)

    def snooze_task(self, task_id: TaskId, days: int) -> None:
        self._record("snooze_task", taskId=task_id, days=days)
        task = self._require(self._tasks, task_id, "task")
        due = parse_backend_datetime(task.get("dueDate")) or self._now()
        task["dueDate"] = (due + timedelta(days=int(days))).date().isoformat()
        task["status"] = STATUS_SNOOZED

    def create_packet(self, fields: Mapping[str, Any]) -> PacketId:
        self._record("create_packet", **dict(fields))
        self._require(self._homes, str(fields.get("homeId") or ""), "home")
        packet_id = _new_id("packet")
        self._packets[packet_id] = {
            "_id": packet_id,
            "createdAt": int(self._now().timestamp() * 1000),
            "packetData": {},
            **self._compact(fields),
        }
        return packet_id

    def share_packet(self, packet_id: PacketId) -> str:
        self._record("share_packet", packetId=packet_id)
        packet = self._require(self._packets, packet_id, "packet")
        token = packet.get("shareToken") or uuid4().hex[:16]
        packet["shareToken"] = token
        packet["isShared"] = True
        return token

    # ---------- Test helpers ----------

    def set_profile(self, payload: Optional[Mapping[str, Any]]) -> None:
        self._profile = dict(payload) if payload is not None else None

    def set_subscription(self, payload: Optional[Mapping[str, Any]]) -> None:
        self._subscription = dict(payload) if payload is not None else None

    def add_home(self, payload: Mapping[str, Any]) -> HomeId:
        return self._insert(self._homes, payload, "home")

    def add_system_type(self, payload: Mapping[str, Any]) -> SystemTypeId:
        return self._insert(self._system_types, payload, "type")

    def add_system(self, payload: Mapping[str, Any]) -> SystemId:
        return self._insert(self._systems, payload, "system")

    def add_task(self, payload: Mapping[str, Any]) -> TaskId:
        return self._insert(self._tasks, payload, "task")

    def add_template(self, system_type_id: SystemTypeId, payload: Mapping[str, Any]) -> None:
        self._templates.setdefault(system_type_id, []).append(dict(payload))

    def add_issue(self, system_id: SystemId, payload: Mapping[str, Any]) -> None:
        self._issues.setdefault(system_id, []).append({"systemId": system_id, **dict(payload)})

    def add_packet(self, payload: Mapping[str, Any]) -> PacketId:
        return self._insert(self._packets, payload, "packet")

    def set_forecast(self, home_id: HomeId, years: int, payload: Mapping[str, Any]) -> None:
        self._forecasts[(home_id, int(years))] = {"years": int(years), **dict(payload)}

    def set_confidence(self, home_id: HomeId, payload: Mapping[str, Any]) -> None:
        self._confidence[home_id] = dict(payload)

    def set_bundle_progress(self, home_id: HomeId, payload: Mapping[str, Any]) -> None:
        self._progress[home_id] = dict(payload)

    def fail_next(self, operation: str, exc: Exception) -> None:
        """Make the next call of ``operation`` raise ``exc`` instead of running."""
        self._failures[operation] = exc

    def systems_for_home(self, home_id: HomeId) -> List[Dict[str, Any]]:
        return [dict(s) for s in self._systems.values() if s.get("homeId") == home_id]

    def operations(self) -> List[str]:
        return [name for name, _ in self.calls]

    # ---------- Internals ----------

    def _now(self) -> datetime:
        return ensure_aware(self.now) if self.now is not None else utc_now()

    def _record(self, operation: str, **args: Any) -> None:
        self.calls.append((operation, args))
        failure = self._failures.pop(operation, None)
        if failure is not None:
            raise failure

    @staticmethod
    def _compact(fields: Mapping[str, Any]) -> Dict[str, Any]:
        return {key: value for key, value in fields.items() if value is not None}

    @staticmethod
    def _insert(table: Dict[str, Dict[str, Any]], payload: Mapping[str, Any], prefix: str) -> str:
        record = dict(payload)
        record_id = str(record.get("_id") or _new_id(prefix))
        record["_id"] = record_id
        table[record_id] = record
        return record_id

    @staticmethod
    def _require(table: Dict[str, Dict[str, Any]], record_id: str, kind: str) -> Dict[str, Any]:
        record = table.get(record_id)
        if record is None:
            raise ApiClientError(
                f"{kind} not found: {record_id}",
                status=404,
                code="NOT_FOUND",
                context=kind,
            )
        return record

    def _home_tasks(self, home_id: HomeId) -> List[Dict[str, Any]]:
        return [task for task in self._tasks.values() if task.get("homeId") == home_id]

    def _joined_system(self, system: Dict[str, Any]) -> Dict[str, Any]:
        joined = dict(system)
        system_type = self._system_types.get(str(system.get("systemTypeId") or ""))
        if system_type is not None and "systemType" not in joined:
            joined["systemType"] = dict(system_type)
        return joined

    def _joined_task(self, task: Dict[str, Any]) -> Dict[str, Any]:
        joined = dict(task)
        system = self._systems.get(str(task.get("systemId") or ""))
        if system is not None and "system" not in joined:
            joined["system"] = self._joined_system(system)
        return joined


__all__ = ["InMemoryBackend"]
