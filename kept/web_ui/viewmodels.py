"""Browser-side settings form for the NiceGUI settings page.

``WebSettingsVM`` mirrors ``SettingsConfig`` plus the debug toggle. It is
what the page binds its inputs to and what gets exported/imported as JSON;
``SettingsVM.apply_dict`` still does the real validation.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping

from kept.viewmodels.settings_vm import SettingsConfig, SettingsVM

BROWSER_SETTINGS_KEY = "kept.web.settings.v1"

_DEFAULTS = SettingsConfig()


def _int_or(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class WebSettingsVM:
    backend_url: str = _DEFAULTS.backend_url
    auth_token: str = _DEFAULTS.auth_token
    request_timeout_s: int = _DEFAULTS.request_timeout_s
    retries: int = _DEFAULTS.retries
    due_soon_days: int = _DEFAULTS.due_soon_days
    snooze_days: int = _DEFAULTS.snooze_days
    storage_dir: str = _DEFAULTS.storage_dir
    share_base_url: str = _DEFAULTS.share_base_url
    debug_logging: bool = False

    @classmethod
    def from_settings_vm(cls, settings_vm: SettingsVM) -> "WebSettingsVM":
        return cls.from_payload(settings_vm.to_dict())

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "WebSettingsVM":
        """Form state from a ``SettingsVM.to_dict`` shaped mapping.

        Text inputs left empty and numbers that do not parse fall back to the
        defaults so the form always renders.
        """
        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping.")
        values: Dict[str, Any] = {}
        for f in fields(cls):
            default = getattr(_DEFAULTS, f.name, False)
            raw = payload.get(f.name)
            if f.name == "debug_logging":
                values[f.name] = bool(raw)
            elif isinstance(default, int):
                values[f.name] = _int_or(raw, default)
            elif f.name == "auth_token":
                values[f.name] = str(raw or "")
            else:
                values[f.name] = str(raw or "") or default
        return cls(**values)

    def to_payload(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["backend_url"] = self.backend_url.strip()
        for name in ("request_timeout_s", "retries", "due_soon_days", "snooze_days"):
            payload[name] = _int_or(payload[name], getattr(_DEFAULTS, name))
        payload["debug_logging"] = bool(self.debug_logging)
        return payload

    def apply_to_settings_vm(self, settings_vm: SettingsVM) -> None:
        settings_vm.apply_dict(self.to_payload())


def parse_settings_json(text: str) -> Dict[str, Any]:
    """Settings mapping from an imported JSON file; raises ``ValueError``."""
    raw = json.loads(text)
    if not isinstance(raw, dict):
        raise ValueError("Imported settings must be a JSON object.")
    return raw


__all__ = ["BROWSER_SETTINGS_KEY", "WebSettingsVM", "parse_settings_json"]
