"""Onboarding step view models: home form, system picker, install years.

Call context:
    Each step page loads the draft with ``load_onboarding_session`` when it
    opens, hands it to the view model, and navigates with ``on_navigate`` once
    the step's use case has committed. The dates step ends the flow and the
    draft is cleared by ``FinishOnboarding``.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Dict, List, Optional

from kept.domain.entities import SystemType
from kept.domain.onboarding import OnboardingSession
from kept.domain.ports import UseCaseError
from kept.domain.query import QueryResult
from kept.usecases.home_forms import HomeForm
from kept.usecases.onboarding_flow import FinishOnboarding, SaveOnboardingHome, SaveSystemSelection

from .common import NavigateCallback

log = logging.getLogger(__name__)

ROUTE_HOME = "/onboarding/home"
ROUTE_SYSTEMS = "/onboarding/systems"
ROUTE_DATES = "/onboarding/dates"
ROUTE_COMPLETE = "/onboarding/complete"

HOME_FORM_FIELDS = (
    ("name", "Home Name (optional)", "My House"),
    ("address_line1", "Street Address", "123 Main St"),
    ("city", "City", "Springfield"),
    ("state", "State (2-letter)", "CA"),
    ("zip_code", "ZIP Code", "90210"),
    ("year_built", "Year Built (optional)", "2001"),
    ("square_footage", "Square Footage (optional)", "2000"),
)


class OnboardingHomeVM:
    """Address form; errors are shown inline above the fields."""

    def __init__(
        self,
        *,
        save_home: Optional[SaveOnboardingHome] = None,
        on_navigate: Optional[NavigateCallback] = None,
        session: Optional[OnboardingSession] = None,
    ) -> None:
        self.save_home = save_home
        self.on_navigate = on_navigate
        self.session = session or OnboardingSession()
        self.form = HomeForm()
        self.is_submitting = False
        self.error_message: Optional[str] = None

    def set_field(self, key: str, value: str) -> None:
        self.form.update(**{key: value})

    def submit(self) -> bool:
        if self.save_home is None or self.is_submitting:
            return False
        self.error_message = None
        self.is_submitting = True
        try:
            self.session = self.save_home(self.session, self.form)
        except UseCaseError as exc:
            self.error_message = exc.message or "Failed to create home"
            return False
        finally:
            self.is_submitting = False
        if self.on_navigate:
            self.on_navigate(ROUTE_SYSTEMS)
        return True


def group_by_category(types: List[SystemType]) -> "OrderedDict[str, List[SystemType]]":
    """Catalog entries grouped by category in first-seen order."""
    groups: "OrderedDict[str, List[SystemType]]" = OrderedDict()
    for system_type in types:
        groups.setdefault(system_type.category, []).append(system_type)
    return groups


class OnboardingSystemsVM:
    def __init__(
        self,
        *,
        save_selection: Optional[SaveSystemSelection] = None,
        on_navigate: Optional[NavigateCallback] = None,
        session: Optional[OnboardingSession] = None,
    ) -> None:
        self.save_selection = save_selection
        self.on_navigate = on_navigate
        self.session = session or OnboardingSession()
        self.catalog: QueryResult[List[SystemType]] = QueryResult.pending()
        self.is_saving = False
        self.error_message: Optional[str] = None

    def set_catalog(self, result: QueryResult[List[SystemType]]) -> None:
        self.catalog = result

    @property
    def is_loading(self) -> bool:
        return not self.catalog.is_resolved

    def groups(self) -> List[tuple]:
        """``(CATEGORY, [(type_id, name, selected), ...])`` per category."""
        grouped = group_by_category(self.catalog.data_or([]) or [])
        return [
            (
                category.upper(),
                [(t.id, t.name, self.session.is_selected(t.id)) for t in types],
            )
            for category, types in grouped.items()
        ]

    def toggle(self, type_id: str) -> None:
        self.session = self.session.toggle_system_type(type_id)

    @property
    def can_continue(self) -> bool:
        return bool(self.session.system_type_ids) and not self.is_saving

    def continue_(self) -> bool:
        if self.save_selection is None or not self.can_continue:
            return False
        self.error_message = None
        self.is_saving = True
        try:
            self.session = self.save_selection(self.session)
        except UseCaseError as exc:
            self.error_message = exc.message
            return False
        finally:
            self.is_saving = False
        if self.on_navigate:
            self.on_navigate(ROUTE_DATES)
        return True


class OnboardingDatesVM:
    """Optional install year per selected system type, then finish setup."""

    def __init__(
        self,
        *,
        finish: Optional[FinishOnboarding] = None,
        on_navigate: Optional[NavigateCallback] = None,
        session: Optional[OnboardingSession] = None,
    ) -> None:
        self.finish_onboarding = finish
        self.on_navigate = on_navigate
        self.session = session or OnboardingSession()
        self.catalog: QueryResult[List[SystemType]] = QueryResult.pending()
        self.is_finishing = False
        self.error_message: Optional[str] = None

    def set_catalog(self, result: QueryResult[List[SystemType]]) -> None:
        self.catalog = result

    def selected_types(self) -> List[SystemType]:
        """Selected catalog entries, in catalog order."""
        return [t for t in self.catalog.data_or([]) or [] if self.session.is_selected(t.id)]

    def year_inputs(self) -> Dict[str, str]:
        return {
            t.id: self.session.install_years.get(t.id) or "" for t in self.selected_types()
        }

    def set_year(self, type_id: str, value: str) -> None:
        self.session = self.session.with_install_year(type_id, value)

    @property
    def can_finish(self) -> bool:
        return bool(self.session.home_id) and not self.is_finishing

    def finish(self) -> bool:
        if self.finish_onboarding is None or self.is_finishing:
            return False
        self.error_message = None
        self.is_finishing = True
        try:
            result = self.finish_onboarding(self.session, self.catalog.data_or([]) or [])
        except UseCaseError as exc:
            self.error_message = exc.message
            return False
        finally:
            self.is_finishing = False
        log.debug("Created %d system(s) during onboarding", len(result.created_system_ids))
        self.session = OnboardingSession()
        if self.on_navigate:
            self.on_navigate(ROUTE_COMPLETE)
        return True


__all__ = [
    "HOME_FORM_FIELDS",
    "OnboardingDatesVM",
    "OnboardingHomeVM",
    "OnboardingSystemsVM",
    "ROUTE_COMPLETE",
    "ROUTE_DATES",
    "ROUTE_HOME",
    "ROUTE_SYSTEMS",
    "group_by_category",
]
