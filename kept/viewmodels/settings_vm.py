from __future__ import annotations

import os
from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, Dict, Mapping, Optional

from kept.domain.task_status import DUE_SOON_DAYS
from kept.usecases.packets import DEFAULT_SHARE_BASE_URL

from ..utils.logging import env_forces_debug

ENV_BACKEND_URL = "KEPT_BACKEND_URL"
ENV_AUTH_TOKEN = "KEPT_AUTH_TOKEN"


@dataclass
class SettingsConfig:
    """Typed runtime settings that persist via StorageLocal."""

    backend_url: str = ""
    auth_token: str = ""
    request_timeout_s: int = 10
    retries: int = 2
    due_soon_days: int = DUE_SOON_DAYS
    snooze_days: int = 7
    storage_dir: str = "."
    share_base_url: str = DEFAULT_SHARE_BASE_URL


_INT_FIELDS = {"request_timeout_s", "retries", "due_soon_days", "snooze_days"}
_POSITIVE_FIELDS = {"request_timeout_s", "due_soon_days", "snooze_days"}


def _default_debug_logging() -> bool:
    return env_forces_debug()


class SettingsVM:
    """Keeps app settings UI state and validation, no I/O here."""

    def __init__(
        self,
        *,
        config: Optional[SettingsConfig] = None,
        on_save: Optional[Callable[[dict], None]] = None,
    ) -> None:
        self.config = config or SettingsConfig()
        self.on_save = on_save
        self.debug_logging: bool = _default_debug_logging()

    # ------------------------------------------------------------------
    # Properties bridging to the typed config
    # ------------------------------------------------------------------
    @property
    def backend_url(self) -> str:
        return self.config.backend_url

    @backend_url.setter
    def backend_url(self, value: str) -> None:
        self.config = replace(self.config, backend_url=self._coerce_url(value))

    @property
    def auth_token(self) -> str:
        return self.config.auth_token

    @auth_token.setter
    def auth_token(self, value: str) -> None:
        self.config = replace(self.config, auth_token=self._coerce_optional_str(value))

    @property
    def request_timeout_s(self) -> int:
        return self.config.request_timeout_s

    @request_timeout_s.setter
    def request_timeout_s(self, value: int) -> None:
        coerced = self._coerce_config_value("request_timeout_s", value)
        self.config = replace(self.config, request_timeout_s=coerced)

    @property
    def retries(self) -> int:
        return self.config.retries

    @retries.setter
    def retries(self, value: int) -> None:
        self.config = replace(self.config, retries=self._coerce_config_value("retries", value))

    @property
    def due_soon_days(self) -> int:
        return self.config.due_soon_days

    @due_soon_days.setter
    def due_soon_days(self, value: int) -> None:
        coerced = self._coerce_config_value("due_soon_days", value)
        self.config = replace(self.config, due_soon_days=coerced)

    @property
    def snooze_days(self) -> int:
        return self.config.snooze_days

    @snooze_days.setter
    def snooze_days(self, value: int) -> None:
        coerced = self._coerce_config_value("snooze_days", value)
        self.config = replace(self.config, snooze_days=coerced)

    @property
    def storage_dir(self) -> str:
        return self.config.storage_dir

    @storage_dir.setter
    def storage_dir(self, value: str) -> None:
        self.config = replace(self.config, storage_dir=self._coerce_dir(value))

    @property
    def share_base_url(self) -> str:
        return self.config.share_base_url

    @share_base_url.setter
    def share_base_url(self, value: str) -> None:
        coerced = self._coerce_url(value) or DEFAULT_SHARE_BASE_URL
        self.config = replace(self.config, share_base_url=coerced)

    # ------------------------------------------------------------------
    def is_valid(self) -> bool:
        if self.backend_url and not self.backend_url.startswith(("http://", "https://")):
            return False
        return self.request_timeout_s > 0 and self.retries >= 0

    def apply_dict(self, payload: Mapping[str, Any]) -> None:
        """Apply persisted settings to the view-model."""

        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")

        allowed_flat_keys = {*SettingsConfig.__annotations__.keys(), "debug_logging"}
        unknown = set(payload.keys()) - allowed_flat_keys
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(sorted(str(key) for key in unknown))}")

        updates: Dict[str, Any] = {}
        for cfg_key in SettingsConfig.__annotations__.keys():
            if cfg_key in payload:
                updates[cfg_key] = self._coerce_config_value(cfg_key, payload[cfg_key])

        if updates:
            self.config = replace(self.config, **updates)

        if "debug_logging" in payload:
            self.debug_logging = self._coerce_bool(payload["debug_logging"])

    def apply_env(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """Fill backend URL and token from ``KEPT_BACKEND_URL``/``KEPT_AUTH_TOKEN`` when unset."""
        env = os.environ if environ is None else environ
        if not self.backend_url and env.get(ENV_BACKEND_URL):
            self.backend_url = env[ENV_BACKEND_URL]
        if not self.auth_token and env.get(ENV_AUTH_TOKEN):
            self.auth_token = env[ENV_AUTH_TOKEN]

    def to_dict(self) -> dict:
        snapshot = asdict(self.config)
        snapshot["debug_logging"] = bool(self.debug_logging)
        return snapshot

    def set_debug_logging(self, enabled: bool) -> None:
        self.debug_logging = self._coerce_bool(enabled)

    def cmd_save(self) -> None:
        if not self.is_valid():
            raise ValueError("Settings invalid")
        if self.on_save:
            self.on_save(self.to_dict())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _coerce_config_value(self, key: str, raw: Any) -> Any:
        if key == "storage_dir":
            return self._coerce_dir(raw)
        if key in {"backend_url", "share_base_url"}:
            coerced = self._coerce_url(raw)
            if key == "share_base_url":
                return coerced or DEFAULT_SHARE_BASE_URL
            return coerced
        if key == "auth_token":
            return self._coerce_optional_str(raw)
        if key in _INT_FIELDS:
            value = self._coerce_int(key, raw, allow_negative=False)
            if key in _POSITIVE_FIELDS and value == 0:
                raise ValueError(f"{key} must be positive.")
            return value
        raise ValueError(f"Unhandled config field: {key}")

    @staticmethod
    def _coerce_dir(value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("storage_dir must be a string path.")
        return value.strip() or "."

    @staticmethod
    def _coerce_url(value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValueError("URL settings must be strings.")
        return value.strip().rstrip("/")

    @staticmethod
    def _coerce_optional_str(value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    @staticmethod
    def _coerce_int(name: str, value: Any, *, allow_negative: bool = True) -> int:
        if isinstance(value, bool):
            raise ValueError(f"{name} must be an integer.")
        if isinstance(value, (int, float)):
            coerced = int(value)
        elif isinstance(value, str):
            try:
                coerced = int(value.strip())
            except (TypeError, ValueError) as exc:
                raise ValueError(f"{name} must be an integer.") from exc
        else:
            raise ValueError(f"{name} must be an integer.")
        if not allow_negative and coerced < 0:
            raise ValueError(f"{name} must be non-negative.")
        return coerced


def default_settings_payload() -> dict:
    """Return a fresh snapshot containing the default settings payload."""
    return SettingsVM().to_dict()


__all__ = ["SettingsConfig", "SettingsVM", "default_settings_payload"]
