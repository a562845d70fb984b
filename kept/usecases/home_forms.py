"""Create and update homes from free-text form input.

Form fields arrive exactly as typed. Both use cases trim text, drop blank
optional values, and parse the numeric fields (year built, square footage)
before calling the backend.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, fields as dc_fields
from typing import Any, Dict, Optional

from kept.domain.entities import Home, HomeId
from kept.domain.ports import BackendPort, UseCaseError
from kept.usecases.error_mapping import BACKEND_FAILURES, map_api_error

log = logging.getLogger(__name__)

US_STATES = frozenset(
    (
        "AL AK AZ AR CA CO CT DE FL GA HI ID IL IN IA KS KY LA ME MD MA MI MN MS MO "
        "MT NE NV NH NJ NM NY NC ND OH OK OR PA RI SC SD TN TX UT VT VA WA WV WI WY"
    ).split()
)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass
class HomeForm:
    """Raw home form values; every field is the text the user typed."""

    name: str = ""
    address_line1: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    year_built: str = ""
    square_footage: str = ""

    @classmethod
    def from_home(cls, home: Optional[Home]) -> "HomeForm":
        if home is None:
            return cls()
        return cls(
            name=home.name,
            address_line1=home.address_line1,
            city=home.city,
            state=home.state,
            zip_code=home.zip_code,
            year_built="" if home.year_built is None else str(home.year_built),
            square_footage="" if home.square_footage is None else str(home.square_footage),
        )

    def update(self, **changes: str) -> None:
        known = {f.name for f in dc_fields(self)}
        for key, value in changes.items():
            if key not in known:
                raise ValueError(f"Unknown home form field: {key}")
            setattr(self, key, "" if value is None else str(value))


def parse_optional_int(value: Any, *, label: str) -> Optional[int]:
    """Parse leading digits the way a lenient numeric text field would.

    Blank input is ``None``; ``"2001 "`` and ``"2001a"`` are ``2001``; text
    without leading digits raises ``UseCaseError``.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    match = _LEADING_INT.match(text)
    if not match:
        raise UseCaseError("INVALID_NUMBER", f"{label} must be a whole number.")
    return int(match.group(1))


def _blank_to_none(value: Any) -> Optional[str]:
    text = str(value or "").strip()
    return text or None


def home_fields(form: HomeForm) -> Dict[str, Any]:
    """Backend argument object for ``form``; blank entries are omitted."""
    payload = {
        "name": _blank_to_none(form.name),
        "addressLine1": _blank_to_none(form.address_line1),
        "city": _blank_to_none(form.city),
        "state": (_blank_to_none(form.state) or "").upper() or None,
        "zipCode": _blank_to_none(form.zip_code),
        "yearBuilt": parse_optional_int(form.year_built, label="Year built"),
        "squareFootage": parse_optional_int(form.square_footage, label="Square footage"),
    }
    return {key: value for key, value in payload.items() if value is not None}


@dataclass
class CreateHome:
    """Validate the onboarding home form and create the home."""

    backend: BackendPort

    REQUIRED = (
        ("addressLine1", "Street address"),
        ("city", "City"),
        ("state", "State"),
        ("zipCode", "ZIP code"),
    )

    def __call__(self, form: HomeForm) -> HomeId:
        payload = home_fields(form)
        missing = [label for key, label in self.REQUIRED if key not in payload]
        if missing:
            raise UseCaseError(
                "HOME_INVALID",
                f"Missing required field(s): {', '.join(missing)}.",
                meta={"missing": missing},
            )
        if payload["state"] not in US_STATES:
            raise UseCaseError("HOME_INVALID", "State must be a 2-letter US state code.")
        try:
            return self.backend.create_home(payload)
        except BACKEND_FAILURES as exc:
            log.warning("Creating home failed: %s", exc)
            raise map_api_error(
                exc, default_code="HOME_CREATE_FAILED", default_message="Failed to create home"
            ) from exc


@dataclass
class UpdateHome:
    """Persist edited home details; blank fields leave the stored value untouched."""

    backend: BackendPort

    def __call__(self, home_id: Optional[HomeId], form: HomeForm) -> None:
        if not home_id:
            raise UseCaseError("HOME_MISSING", "No home selected")
        payload = home_fields(form)
        try:
            self.backend.update_home(home_id, payload)
        except BACKEND_FAILURES as exc:
            log.warning("Updating home %s failed: %s", home_id, exc)
            raise map_api_error(
                exc,
                default_code="HOME_UPDATE_FAILED",
                default_message="Failed to update home details",
            ) from exc


__all__ = [
    "CreateHome",
    "HomeForm",
    "US_STATES",
    "UpdateHome",
    "home_fields",
    "parse_optional_int",
]
