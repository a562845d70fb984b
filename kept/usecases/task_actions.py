from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from kept.domain.entities import TaskId
from kept.domain.ports import BackendPort, UseCaseError
from kept.domain.task_status import DUE_SOON_DAYS
from kept.usecases.error_mapping import BACKEND_FAILURES, map_api_error

log = logging.getLogger(__name__)

DEFAULT_SNOOZE_DAYS = DUE_SOON_DAYS


@dataclass
class CompleteTask:
    backend: BackendPort

    def __call__(self, task_id: TaskId, *, was_diy: bool) -> None:
        if not task_id:
            raise UseCaseError("TASK_MISSING", "No task selected.")
        try:
            self.backend.complete_task(task_id, bool(was_diy))
        except BACKEND_FAILURES as exc:
            log.warning("Completing task %s failed: %s", task_id, exc)
            raise map_api_error(
                exc, default_code="COMPLETE_FAILED", default_message="Failed to complete task"
            ) from exc


@dataclass
class SnoozeTask:
    backend: BackendPort
    default_days: int = DEFAULT_SNOOZE_DAYS

    def __call__(self, task_id: TaskId, *, days: Optional[int] = None) -> None:
        if not task_id:
            raise UseCaseError("TASK_MISSING", "No task selected.")
        span = self.default_days if days is None else int(days)
        if span <= 0:
            raise UseCaseError("SNOOZE_INVALID", "Snooze must be at least one day.")
        try:
            self.backend.snooze_task(task_id, span)
        except BACKEND_FAILURES as exc:
            log.warning("Snoozing task %s failed: %s", task_id, exc)
            raise map_api_error(
                exc, default_code="SNOOZE_FAILED", default_message="Failed to snooze task"
            ) from exc


__all__ = ["CompleteTask", "DEFAULT_SNOOZE_DAYS", "SnoozeTask"]
