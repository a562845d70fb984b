from __future__ import annotations

from typing import Optional

from kept.domain.entities import Home
from kept.domain.formatting import js_round
from kept.domain.ports import UseCaseError
from kept.usecases.home_forms import HomeForm, UpdateHome

from .common import AlertCallback, BackCallback, ERROR_TITLE, SUCCESS_TITLE

UPDATE_SUCCESS_MESSAGE = "Home details updated"
UPDATE_FAILED_MESSAGE = "Failed to update home details"


class HomeDetailsVM:
    """Edit form for the active home, seeded once the home has loaded."""

    def __init__(
        self,
        *,
        update_home: Optional[UpdateHome] = None,
        on_alert: Optional[AlertCallback] = None,
        on_back: Optional[BackCallback] = None,
    ) -> None:
        self.update_home = update_home
        self.on_alert = on_alert
        self.on_back = on_back
        self.home: Optional[Home] = None
        self.form = HomeForm()
        self.is_saving = False

    def set_home(self, home: Optional[Home]) -> None:
        """Seed the form from ``home``; a reload of the same home keeps edits."""
        if home is not None and (self.home is None or self.home.id != home.id):
            self.form = HomeForm.from_home(home)
        self.home = home

    @property
    def is_loading(self) -> bool:
        return self.home is None

    def set_field(self, key: str, value: str) -> None:
        self.form.update(**{key: value})

    def stats(self) -> dict:
        home = self.home
        if home is None:
            return {"systems": 0, "health_score": 0}
        return {
            "systems": home.systems_count,
            "health_score": js_round(home.overall_health_score or 0),
        }

    def save(self) -> bool:
        if self.home is None or self.update_home is None or self.is_saving:
            return False
        self.is_saving = True
        try:
            self.update_home(self.home.id, self.form)
        except UseCaseError as exc:
            if self.on_alert:
                message = UPDATE_FAILED_MESSAGE
                if exc.code == "INVALID_NUMBER":
                    message = exc.message
                self.on_alert(ERROR_TITLE, message)
            return False
        finally:
            self.is_saving = False
        if self.on_alert:
            self.on_alert(SUCCESS_TITLE, UPDATE_SUCCESS_MESSAGE)
        if self.on_back:
            self.on_back()
        return True


__all__ = ["HomeDetailsVM", "UPDATE_FAILED_MESSAGE", "UPDATE_SUCCESS_MESSAGE"]
