"""Use cases committing each onboarding step.

Call context:
    ``OnboardingHomeVM`` -> ``SaveOnboardingHome``,
    ``OnboardingSystemsVM`` -> ``SaveSystemSelection``,
    ``OnboardingDatesVM`` -> ``FinishOnboarding``.

Each step receives the current ``OnboardingSession``, persists the part it
owns, and returns the updated session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from kept.domain.entities import SystemId, SystemType
from kept.domain.onboarding import OnboardingSession
from kept.domain.ports import BackendPort, KeyValueStorePort, UseCaseError
from kept.usecases.error_mapping import BACKEND_FAILURES, map_api_error
from kept.usecases.home_forms import CreateHome, HomeForm
from kept.usecases.onboarding_storage import (
    clear_onboarding_session,
    save_onboarding_home_id,
    save_onboarding_selection,
    save_onboarding_years,
)

log = logging.getLogger(__name__)


@dataclass
class SaveOnboardingHome:
    """Create the home from the form and remember its id for later steps."""

    backend: BackendPort
    store: KeyValueStorePort

    def __call__(self, session: OnboardingSession, form: HomeForm) -> OnboardingSession:
        home_id = CreateHome(self.backend)(form)
        updated = session.with_home_id(home_id)
        save_onboarding_home_id(self.store, updated)
        return updated


@dataclass
class SaveSystemSelection:
    store: KeyValueStorePort

    def __call__(self, session: OnboardingSession) -> OnboardingSession:
        if not session.system_type_ids:
            raise UseCaseError("ONBOARDING_NO_SYSTEMS", "Select at least one system.")
        save_onboarding_selection(self.store, session)
        return session


@dataclass
class FinishOnboardingResult:
    created_system_ids: List[SystemId] = field(default_factory=list)


@dataclass
class FinishOnboarding:
    """Create the selected systems, mark onboarding complete, drop the draft.

    Systems are created in catalog order for every selected type the catalog
    knows; ids not in the catalog are skipped. The install date is January 1st
    of the entered year, or omitted when no valid year was given.
    """

    backend: BackendPort
    store: KeyValueStorePort

    def __call__(
        self, session: OnboardingSession, catalog: Iterable[SystemType]
    ) -> FinishOnboardingResult:
        home_id = session.home_id
        if not home_id:
            raise UseCaseError("ONBOARDING_NO_HOME", "No home found. Please add your home first.")

        save_onboarding_years(self.store, session)
        selected = [t for t in catalog if session.is_selected(t.id)]
        result = FinishOnboardingResult()
        try:
            for system_type in selected:
                system_id = self.backend.create_system(
                    home_id, system_type.id, session.install_date_for(system_type.id)
                )
                result.created_system_ids.append(system_id)
            self.backend.complete_onboarding()
        except BACKEND_FAILURES as exc:
            log.warning(
                "Finishing onboarding failed after %d system(s): %s",
                len(result.created_system_ids),
                exc,
            )
            raise map_api_error(
                exc, default_code="ONBOARDING_FAILED", default_message="Failed to finish setup"
            ) from exc
        clear_onboarding_session(self.store)
        log.info("Onboarding complete for home %s (%d systems)", home_id, len(selected))
        return result


__all__ = [
    "FinishOnboarding",
    "FinishOnboardingResult",
    "SaveOnboardingHome",
    "SaveSystemSelection",
]
