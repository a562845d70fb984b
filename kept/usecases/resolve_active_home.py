from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from kept.domain.entities import Home, HomeId
from kept.domain.ports import BackendPort
from kept.usecases.error_mapping import BACKEND_FAILURES, map_api_error

log = logging.getLogger(__name__)


@dataclass
class ActiveHomeResult:
    """All homes of the user plus the one selected for display."""

    homes: List[Home] = field(default_factory=list)
    active_home: Optional[Home] = None

    @property
    def active_home_id(self) -> Optional[HomeId]:
        return self.active_home.id if self.active_home else None


@dataclass
class ResolveActiveHome:
    """Use-case callable selecting the active home (always the first one)."""

    backend: BackendPort

    def __call__(self) -> ActiveHomeResult:
        try:
            homes = list(self.backend.get_user_homes() or [])
        except BACKEND_FAILURES as exc:
            log.warning("Loading homes failed: %s", exc)
            raise map_api_error(
                exc, default_code="HOMES_LOAD_FAILED", default_message="Failed to load homes."
            ) from exc
        return ActiveHomeResult(homes=homes, active_home=homes[0] if homes else None)


__all__ = ["ActiveHomeResult", "ResolveActiveHome"]
