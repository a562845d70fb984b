from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional, Protocol

from .entities import (
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


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str, *, meta: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = meta or {}


# ---- Ports (Hexagonal boundaries) ----
class BackendPort(Protocol):
    """Named remote operations of the managed backend.

    Reads return projections (``None`` when the record does not exist);
    writes return the new identifier, a share token, or nothing.
    """

    # Reads
    def get_current_profile(self) -> Optional[UserProfile]: ...
    def get_user_subscription(self) -> Optional[Subscription]: ...
    def get_user_homes(self) -> List[Home]: ...
    def get_home_systems(self, home_id: HomeId) -> List[HomeSystem]: ...
    def get_system(self, system_id: SystemId) -> Optional[HomeSystem]: ...
    def get_upcoming_tasks(
        self, home_id: HomeId, limit: Optional[int] = None
    ) -> List[MaintenanceTask]: ...
    def get_enhanced_tasks(
        self, home_id: HomeId, include_completed: bool = True
    ) -> List[MaintenanceTask]: ...
    def get_task_stats(self, home_id: HomeId) -> TaskStats: ...
    def get_task(self, task_id: TaskId) -> Optional[MaintenanceTask]: ...
    def get_tasks_for_system(
        self, system_id: SystemId, include_completed: bool = True
    ) -> List[MaintenanceTask]: ...
    def get_templates_for_system_type(
        self, system_type_id: SystemTypeId
    ) -> List[TaskTemplate]: ...
    def get_issues_for_system(self, system_id: SystemId) -> List[Issue]: ...
    def get_home_packets(self, home_id: HomeId) -> List[Packet]: ...
    def get_packet(self, packet_id: PacketId) -> Optional[Packet]: ...
    def get_budget_forecast(self, home_id: HomeId, years: int) -> Optional[BudgetForecast]: ...
    def get_forecast_confidence(self, home_id: HomeId) -> Optional[ForecastConfidence]: ...
    def get_bundle_progress(self, home_id: HomeId) -> Optional[BundleProgress]: ...
    def get_system_types(self) -> List[SystemType]: ...

    # Writes
    def create_home(self, fields: Mapping[str, Any]) -> HomeId: ...
    def update_home(self, home_id: HomeId, fields: Mapping[str, Any]) -> None: ...
    def create_system(
        self,
        home_id: HomeId,
        system_type_id: SystemTypeId,
        install_date: Optional[str] = None,
    ) -> SystemId: ...
    def complete_onboarding(self) -> None: ...
    def complete_task(self, task_id: TaskId, was_diy: bool) -> None: ...
    def snooze_task(self, task_id: TaskId, days: int) -> None: ...
    def create_packet(self, fields: Mapping[str, Any]) -> PacketId: ...
    def share_packet(self, packet_id: PacketId) -> str: ...


class KeyValueStorePort(Protocol):
    """Private, restart-safe string key-value storage."""

    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...


class SettingsStoragePort(Protocol):
    """Persistence for the flat user settings payload."""

    def save_user_settings(self, payload: Dict[str, Any]) -> None: ...
    def load_user_settings(self) -> Optional[Dict[str, Any]]: ...
