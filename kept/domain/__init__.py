"""Domain package exports for backend projections and pure client logic."""

from .entities import (
    BudgetForecast,
    BundleProgress,
    ForecastConfidence,
    ForecastSummary,
    Home,
    HomeSystem,
    Issue,
    MaintenanceTask,
    Packet,
    Subscription,
    SystemType,
    TaskStats,
    TaskTemplate,
    UserProfile,
)
from .onboarding import OnboardingSession
from .query import QueryResult, QueryState
from .task_filter import SortBy, StatusFilter, TaskFilter, TaskTab, filter_and_sort
from .task_status import TaskStatusFlags, derive_task_status

__all__ = [
    "BudgetForecast",
    "BundleProgress",
    "ForecastConfidence",
    "ForecastSummary",
    "Home",
    "HomeSystem",
    "Issue",
    "MaintenanceTask",
    "OnboardingSession",
    "Packet",
    "QueryResult",
    "QueryState",
    "SortBy",
    "StatusFilter",
    "Subscription",
    "SystemType",
    "TaskFilter",
    "TaskStats",
    "TaskStatusFlags",
    "TaskTab",
    "TaskTemplate",
    "UserProfile",
    "derive_task_status",
    "filter_and_sort",
]
