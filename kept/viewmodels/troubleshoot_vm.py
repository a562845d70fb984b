"""Symptom picker that hands a symptom over to the new-packet form."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlencode

from kept.domain.entities import HomeSystem
from kept.domain.query import QueryResult


@dataclass(frozen=True)
class Symptom:
    id: str
    label: str
    icon: str


OTHER_SYMPTOM_ID = "other"

COMMON_SYMPTOMS = (
    Symptom("no-cool", "AC not cooling", "ac_unit"),
    Symptom("no-heat", "No heat", "local_fire_department"),
    Symptom("water-leak", "Water leak", "water_drop"),
    Symptom("no-hot-water", "No hot water", "thermostat"),
    Symptom("electrical", "Electrical issue", "bolt"),
    Symptom("strange-noise", "Strange noise", "volume_up"),
    Symptom("smell", "Unusual smell", "warning"),
    Symptom(OTHER_SYMPTOM_ID, "Other issue", "help_outline"),
)

SYSTEM_LINK_LIMIT = 4


class TroubleshootVM:
    def __init__(self) -> None:
        self.selected_id: Optional[str] = None
        self.custom_symptom = ""
        self.systems: QueryResult[List[HomeSystem]] = QueryResult.pending()

    def set_systems(self, result: QueryResult[List[HomeSystem]]) -> None:
        self.systems = result

    def select(self, symptom_id: str) -> None:
        if symptom_id not in {s.id for s in COMMON_SYMPTOMS}:
            raise ValueError(f"Unknown symptom: {symptom_id}")
        self.selected_id = symptom_id

    @property
    def shows_custom_input(self) -> bool:
        return self.selected_id == OTHER_SYMPTOM_ID

    def resolved_symptom(self) -> str:
        """Label of the chosen symptom, or the typed text for "Other issue"."""
        if self.selected_id is None:
            return ""
        if self.selected_id == OTHER_SYMPTOM_ID:
            return self.custom_symptom.strip()
        for symptom in COMMON_SYMPTOMS:
            if symptom.id == self.selected_id:
                return symptom.label
        return ""

    @property
    def can_continue(self) -> bool:
        return bool(self.resolved_symptom())

    def continue_path(self) -> Optional[str]:
        """Route of the pre-filled new-packet form, ``None`` when nothing is chosen."""
        symptom = self.resolved_symptom()
        if not symptom:
            return None
        return "/packet/new?" + urlencode({"symptom": symptom})

    def system_links(self) -> List[tuple]:
        systems = self.systems.data_or([]) or []
        return [(s.id, s.display_name) for s in systems[:SYSTEM_LINK_LIMIT]]


__all__ = ["COMMON_SYMPTOMS", "OTHER_SYMPTOM_ID", "Symptom", "TroubleshootVM"]
