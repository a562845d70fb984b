from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar

import requests

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

from .api_errors import BackendFunctionError, ErrorBody, error_for_status
from .http_client import FunctionTransport, HttpConfig

log = logging.getLogger(__name__)

T = TypeVar("T")


def compact_args(args: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Drop ``None`` values; the backend treats absent and undefined alike."""
    return {key: value for key, value in dict(args or {}).items() if value is not None}


class BackendRestAdapter(BackendPort):
    """Backend port over the managed backend's HTTP function API.

    Every operation is a named function (``module:function``) invoked with a
    JSON argument object. Reads go to ``/api/query`` and may be retried on
    transport failures; writes go to ``/api/mutation`` and are sent once.
    """

    QUERY_ENDPOINT = "/api/query"
    MUTATION_ENDPOINT = "/api/mutation"

    def __init__(
        self,
        base_url: str,
        *,
        auth_token: Optional[str] = None,
        request_timeout_s: int = 10,
        retries: int = 2,
    ) -> None:
        if not base_url or not str(base_url).strip():
            raise ValueError("BackendRestAdapter requires a backend URL")
        self.base_url = str(base_url).strip()
        self.cfg = HttpConfig(request_timeout_s=request_timeout_s, retries=retries)
        self.session = FunctionTransport(auth_token, self.cfg)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_current_profile(self) -> Optional[UserProfile]:
        data = self._query("users:getCurrentProfile")
        return self._one(data, UserProfile.from_payload)

    def get_user_subscription(self) -> Optional[Subscription]:
        data = self._query("subscriptions:getUserSubscription")
        return self._one(data, Subscription.from_payload)

    def get_user_homes(self) -> List[Home]:
        data = self._query("homes:getUserHomes")
        return self._many(data, Home.from_payload, ctx="homes:getUserHomes")

    def get_home_systems(self, home_id: HomeId) -> List[HomeSystem]:
        data = self._query("systems:getHomeSystems", {"homeId": home_id})
        return self._many(data, HomeSystem.from_payload, ctx="systems:getHomeSystems")

    def get_system(self, system_id: SystemId) -> Optional[HomeSystem]:
        data = self._query("systems:getSystem", {"systemId": system_id})
        return self._one(data, HomeSystem.from_payload)

    def get_upcoming_tasks(
        self, home_id: HomeId, limit: Optional[int] = None
    ) -> List[MaintenanceTask]:
        data = self._query(
            "maintenance:getUpcomingTasks", {"homeId": home_id, "limit": limit}
        )
        return self._many(data, MaintenanceTask.from_payload, ctx="maintenance:getUpcomingTasks")

    def get_enhanced_tasks(
        self, home_id: HomeId, include_completed: bool = True
    ) -> List[MaintenanceTask]:
        data = self._query(
            "maintenance:getEnhancedTasks",
            {"homeId": home_id, "includeCompleted": bool(include_completed)},
        )
        return self._many(data, MaintenanceTask.from_payload, ctx="maintenance:getEnhancedTasks")

    def get_task_stats(self, home_id: HomeId) -> TaskStats:
        data = self._query("maintenance:getTaskStats", {"homeId": home_id})
        return self._one(data, TaskStats.from_payload) or TaskStats()

    def get_task(self, task_id: TaskId) -> Optional[MaintenanceTask]:
        data = self._query("maintenance:getTask", {"taskId": task_id})
        return self._one(data, MaintenanceTask.from_payload)

    def get_tasks_for_system(
        self, system_id: SystemId, include_completed: bool = True
    ) -> List[MaintenanceTask]:
        data = self._query(
            "maintenance:getTasksForSystem",
            {"systemId": system_id, "includeCompleted": bool(include_completed)},
        )
        return self._many(data, MaintenanceTask.from_payload, ctx="maintenance:getTasksForSystem")

    def get_templates_for_system_type(
        self, system_type_id: SystemTypeId
    ) -> List[TaskTemplate]:
        data = self._query(
            "maintenance:getTemplatesForSystemType", {"systemTypeId": system_type_id}
        )
        return self._many(
            data, TaskTemplate.from_payload, ctx="maintenance:getTemplatesForSystemType"
        )

    def get_issues_for_system(self, system_id: SystemId) -> List[Issue]:
        data = self._query("issues:getIssuesForSystem", {"systemId": system_id})
        return self._many(data, Issue.from_payload, ctx="issues:getIssuesForSystem")

    def get_home_packets(self, home_id: HomeId) -> List[Packet]:
        data = self._query("packets:getHomePackets", {"homeId": home_id})
        return self._many(data, Packet.from_payload, ctx="packets:getHomePackets")

    def get_packet(self, packet_id: PacketId) -> Optional[Packet]:
        data = self._query("packets:getPacket", {"packetId": packet_id})
        return self._one(data, Packet.from_payload)

    def get_budget_forecast(self, home_id: HomeId, years: int) -> Optional[BudgetForecast]:
        data = self._query(
            "forecasting:getBudgetForecast", {"homeId": home_id, "years": int(years)}
        )
        return self._one(data, BudgetForecast.from_payload)

    def get_forecast_confidence(self, home_id: HomeId) -> Optional[ForecastConfidence]:
        data = self._query("forecasting:getForecastConfidence", {"homeId": home_id})
        return self._one(data, ForecastConfidence.from_payload)

    def get_bundle_progress(self, home_id: HomeId) -> Optional[BundleProgress]:
        data = self._query("healthPoints:getBundleProgress", {"homeId": home_id})
        return self._one(data, BundleProgress.from_payload)

    def get_system_types(self) -> List[SystemType]:
        data = self._query("systems:getSystemTypes")
        return self._many(data, SystemType.from_payload, ctx="systems:getSystemTypes")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def create_home(self, fields: Mapping[str, Any]) -> HomeId:
        data = self._mutation("homes:createHome", fields)
        return self._identifier(data, ctx="homes:createHome")

    def update_home(self, home_id: HomeId, fields: Mapping[str, Any]) -> None:
        args = dict(fields)
        args["homeId"] = home_id
        self._mutation("homes:updateHome", args)

    def create_system(
        self,
        home_id: HomeId,
        system_type_id: SystemTypeId,
        install_date: Optional[str] = None,
    ) -> SystemId:
        data = self._mutation(
            "systems:createSystem",
            {"homeId": home_id, "systemTypeId": system_type_id, "installDate": install_date},
        )
        return self._identifier(data, ctx="systems:createSystem")

    def complete_onboarding(self) -> None:
        self._mutation("users:completeOnboarding")

    def complete_task(self, task_id: TaskId, was_diy: bool) -> None:
        self._mutation("maintenance:completeTask", {"taskId": task_id, "wasDiy": bool(was_diy)})

    def snooze_task(self, task_id: TaskId, days: int) -> None:
        self._mutation("maintenance:snoozeTask", {"taskId": task_id, "days": int(days)})

    def create_packet(self, fields: Mapping[str, Any]) -> PacketId:
        data = self._mutation("packets:createPacket", fields)
        return self._identifier(data, ctx="packets:createPacket")

    def share_packet(self, packet_id: PacketId) -> str:
        data = self._mutation("packets:sharePacket", {"packetId": packet_id})
        return self._identifier(data, ctx="packets:sharePacket")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _query(self, path: str, args: Optional[Mapping[str, Any]] = None) -> Any:
        return self._call(self.QUERY_ENDPOINT, path, args, retry=True)

    def _mutation(self, path: str, args: Optional[Mapping[str, Any]] = None) -> Any:
        return self._call(self.MUTATION_ENDPOINT, path, args, retry=False)

    def _call(
        self,
        endpoint: str,
        path: str,
        args: Optional[Mapping[str, Any]],
        *,
        retry: bool,
    ) -> Any:
        body = {"path": path, "args": compact_args(args), "format": "json"}
        url = self._make_url(endpoint)
        log.debug("backend call %s %s", endpoint, path)
        resp = self.session.post(url, body, retry=retry)
        self._ensure_ok(resp, path)
        return self._unwrap(self._json_any(resp), path)

    def _make_url(self, path: str) -> str:
        base = self.base_url
        if base.endswith("/"):
            base = base[:-1]
        return f"{base}{path}"

    @staticmethod
    def _unwrap(payload: Any, path: str) -> Any:
        if not isinstance(payload, dict):
            raise RuntimeError(f"{path}: expected object response")
        status = payload.get("status")
        if status == "success":
            return payload.get("value")
        if status == "error":
            message = ErrorBody.from_payload(payload).message or "Backend function failed"
            raise BackendFunctionError(
                f"{path}: {message}",
                function_path=path,
                payload=payload,
                data=payload.get("errorData"),
            )
        raise RuntimeError(f"{path}: unexpected response status {status!r}")

    @staticmethod
    def _one(data: Any, factory: Callable[[Mapping[str, Any]], T]) -> Optional[T]:
        if data is None:
            return None
        if not isinstance(data, dict):
            raise RuntimeError("expected object or null response")
        return factory(data)

    @staticmethod
    def _many(data: Any, factory: Callable[[Mapping[str, Any]], T], *, ctx: str) -> List[T]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise RuntimeError(f"{ctx}: expected list response")
        return [factory(entry) for entry in data if isinstance(entry, dict)]

    @staticmethod
    def _identifier(data: Any, *, ctx: str) -> str:
        if isinstance(data, str) and data.strip():
            return data.strip()
        raise RuntimeError(f"{ctx}: expected identifier string, got {type(data).__name__}")

    @staticmethod
    def _ensure_ok(resp: requests.Response, ctx: str) -> None:
        if 200 <= resp.status_code < 300:
            return
        raise error_for_status(ctx, resp.status_code, ErrorBody.from_response(resp))

    @staticmethod
    def _json_any(resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            snippet = getattr(resp, "text", "")[:400]
            raise RuntimeError(f"Invalid JSON response: {snippet}") from exc


__all__ = ["BackendRestAdapter", "compact_args"]
