"""NiceGUI runtime orchestration for Kept.

This module composes the settings view model, the app controller and the
local store for the web pages. Pages ask the runtime for the backend and the
use cases; they never build adapters themselves.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar

from kept.adapters.storage_local import StorageLocal
from kept.app.controller import AppController
from kept.domain.entities import Home, UserProfile
from kept.domain.onboarding import OnboardingSession
from kept.domain.ports import BackendPort, UseCaseError
from kept.domain.query import QueryResult
from kept.usecases.fetch_query import run_query
from kept.usecases.onboarding_storage import load_onboarding_session
from kept.usecases.resolve_active_home import ActiveHomeResult
from kept.utils.logging import apply_debug_setting
from kept.viewmodels.settings_vm import SettingsVM
from kept.web_ui.demo_data import build_demo_backend


LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class WebRuntime:
    """Orchestration state used by NiceGUI views."""

    def __init__(
        self,
        *,
        storage_root: Optional[str] = None,
        fallback_backend: Optional[BackendPort] = None,
    ) -> None:
        self.status_message = "Ready."
        root = storage_root or os.environ.get("KEPT_STORAGE_ROOT") or "."
        self.settings_storage = StorageLocal(root_dir=root)
        self.settings_vm = SettingsVM(config=None, on_save=self.settings_storage.save_user_settings)
        self.settings_vm.storage_dir = root
        self._load_settings_defaults()
        self.settings_vm.apply_env()
        apply_debug_setting(self.settings_vm.debug_logging)

        if fallback_backend is None and not self.settings_vm.backend_url:
            fallback_backend = build_demo_backend()
        self.controller = AppController(self.settings_vm, fallback_backend=fallback_backend)

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------
    def ensure_adapter(self) -> bool:
        if self.controller.ensure_ready():
            return True
        self.status_message = "Configure the backend URL in Settings first."
        return False

    @property
    def backend(self) -> BackendPort:
        if not self.ensure_adapter() or self.controller.backend is None:
            raise UseCaseError("NOT_CONFIGURED", self.status_message)
        return self.controller.backend

    @property
    def store(self) -> StorageLocal:
        if not self.ensure_adapter() or self.controller.store is None:
            raise UseCaseError("NOT_CONFIGURED", self.status_message)
        return self.controller.store

    def settings_payload(self) -> Dict[str, Any]:
        return self.settings_vm.to_dict()

    def apply_settings_payload(self, payload: Mapping[str, Any]) -> None:
        self.settings_vm.apply_dict(payload)
        apply_debug_setting(self.settings_vm.debug_logging)
        self.controller.reset()
        self.status_message = "Settings applied."

    def save_settings(self) -> None:
        self.settings_vm.cmd_save()
        self.status_message = "Settings saved."

    # ------------------------------------------------------------------
    # Shared reads
    # ------------------------------------------------------------------
    def query(self, fetch: Callable[..., T], *args: Any, **kwargs: Any) -> QueryResult[T]:
        return run_query(fetch, *args, **kwargs)

    def resolve_home(self) -> ActiveHomeResult:
        self.ensure_adapter()
        if self.controller.uc_resolve_home is None:
            raise UseCaseError("NOT_CONFIGURED", self.status_message)
        return self.controller.uc_resolve_home()

    def active_home(self) -> Optional[Home]:
        return self.resolve_home().active_home

    def profile(self) -> Optional[UserProfile]:
        return self.backend.get_current_profile()

    def needs_onboarding(self) -> bool:
        profile = self.profile()
        return profile is not None and profile.needs_onboarding

    def onboarding_session(self) -> OnboardingSession:
        return load_onboarding_session(self.store)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _load_settings_defaults(self) -> None:
        try:
            payload = self.settings_storage.load_user_settings()
        except (OSError, ValueError) as exc:
            LOGGER.warning("Could not load local settings defaults: %s", exc)
            return
        if payload is None:
            return
        try:
            self.settings_vm.apply_dict(payload)
        except ValueError as exc:
            LOGGER.warning("Could not apply local settings defaults: %s", exc)


__all__ = ["WebRuntime"]
