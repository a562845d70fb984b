"""Onboarding draft carried across the home, systems and install-year steps."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Mapping, Optional, Tuple

from .entities import HomeId, SystemTypeId


def normalize_install_year(value: Optional[str]) -> Optional[str]:
    """Keep only a trimmed four-digit year; anything else means "unknown"."""
    if value is None:
        return None
    text = str(value).strip()
    if len(text) == 4 and text.isdigit():
        return text
    return None


@dataclass(frozen=True)
class OnboardingSession:
    """Immutable onboarding draft.

    The session is loaded from the key-value store when a step opens and saved
    back when the step commits; no step reads storage in between.
    """

    home_id: Optional[HomeId] = None
    system_type_ids: Tuple[SystemTypeId, ...] = ()
    install_years: Mapping[SystemTypeId, Optional[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        seen = []
        for type_id in self.system_type_ids:
            text = str(type_id).strip()
            if text and text not in seen:
                seen.append(text)
        object.__setattr__(self, "system_type_ids", tuple(seen))
        object.__setattr__(self, "install_years", dict(self.install_years or {}))

    @property
    def is_empty(self) -> bool:
        return not self.home_id and not self.system_type_ids and not self.install_years

    def with_home_id(self, home_id: Optional[HomeId]) -> "OnboardingSession":
        return replace(self, home_id=(home_id or None))

    def with_system_type_ids(self, ids: Iterable[SystemTypeId]) -> "OnboardingSession":
        return replace(self, system_type_ids=tuple(ids))

    def is_selected(self, type_id: SystemTypeId) -> bool:
        return type_id in self.system_type_ids

    def toggle_system_type(self, type_id: SystemTypeId) -> "OnboardingSession":
        if type_id in self.system_type_ids:
            remaining = tuple(item for item in self.system_type_ids if item != type_id)
            return replace(self, system_type_ids=remaining)
        return replace(self, system_type_ids=self.system_type_ids + (type_id,))

    def with_install_year(
        self, type_id: SystemTypeId, year: Optional[str]
    ) -> "OnboardingSession":
        years: Dict[SystemTypeId, Optional[str]] = dict(self.install_years)
        years[type_id] = None if year is None else str(year).strip()
        return replace(self, install_years=years)

    def install_date_for(self, type_id: SystemTypeId) -> Optional[str]:
        """January 1st of the recorded install year, or ``None`` when unknown."""
        year = normalize_install_year(self.install_years.get(type_id))
        return f"{year}-01-01" if year else None


__all__ = ["OnboardingSession", "normalize_install_year"]
