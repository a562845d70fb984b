"""Adapter and use-case wiring for the web runtime.

This module owns lazy construction of the backend adapter, the local store
and the use-case objects that depend on values in
:class:`kept.viewmodels.settings_vm.SettingsVM`. Pages call ``ensure_ready``
before their first backend read.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..adapters.backend_rest import BackendRestAdapter
from ..adapters.storage_local import StorageLocal
from ..domain.ports import BackendPort
from ..usecases.home_forms import CreateHome, UpdateHome
from ..usecases.onboarding_flow import FinishOnboarding, SaveOnboardingHome, SaveSystemSelection
from ..usecases.packets import CreatePacket, SharePacket
from ..usecases.resolve_active_home import ResolveActiveHome
from ..usecases.task_actions import CompleteTask, SnoozeTask
from ..viewmodels.settings_vm import SettingsVM

log = logging.getLogger(__name__)


class AppController:
    """Create and cache runtime adapters/use-cases from settings state.

    Call chain:
        ``kept.web_ui.runtime.WebRuntime`` creates one instance per browser
        session. Pages call ``ensure_ready`` and then use the cached
        ``backend``, ``store`` and ``uc_*`` attributes.

    Without a configured backend URL the controller falls back to
    ``fallback_backend`` (an in-memory backend seeded with demo data by the
    web runtime).
    """

    def __init__(
        self,
        settings_vm: SettingsVM,
        *,
        fallback_backend: Optional[BackendPort] = None,
    ) -> None:
        self.settings_vm = settings_vm
        self.fallback_backend = fallback_backend
        self._backend: Optional[BackendPort] = None
        self._store: Optional[StorageLocal] = None
        self.uc_resolve_home: Optional[ResolveActiveHome] = None
        self.uc_complete_task: Optional[CompleteTask] = None
        self.uc_snooze_task: Optional[SnoozeTask] = None
        self.uc_create_home: Optional[CreateHome] = None
        self.uc_update_home: Optional[UpdateHome] = None
        self.uc_create_packet: Optional[CreatePacket] = None
        self.uc_share_packet: Optional[SharePacket] = None
        self.uc_save_onboarding_home: Optional[SaveOnboardingHome] = None
        self.uc_save_system_selection: Optional[SaveSystemSelection] = None
        self.uc_finish_onboarding: Optional[FinishOnboarding] = None

    @property
    def backend(self) -> Optional[BackendPort]:
        return self._backend

    @property
    def store(self) -> Optional[StorageLocal]:
        return self._store

    def reset(self) -> None:
        """Drop all cached adapters and use-cases.

        Side Effects:
            The next ``ensure_ready`` call rebuilds everything from current
            settings values.
        """
        self._backend = None
        self._store = None
        self.uc_resolve_home = None
        self.uc_complete_task = None
        self.uc_snooze_task = None
        self.uc_create_home = None
        self.uc_update_home = None
        self.uc_create_packet = None
        self.uc_share_packet = None
        self.uc_save_onboarding_home = None
        self.uc_save_system_selection = None
        self.uc_finish_onboarding = None

    def ensure_ready(self) -> bool:
        """Ensure the backend, the store and all use-cases exist.

        Returns:
            ``True`` when a backend is available, ``False`` when no backend URL
            is configured and there is no fallback backend.
        """
        if self._backend is not None and self._store is not None:
            return True

        settings = self.settings_vm
        if self._backend is None:
            if settings.backend_url:
                self._backend = BackendRestAdapter(
                    settings.backend_url,
                    auth_token=settings.auth_token or None,
                    request_timeout_s=settings.request_timeout_s,
                    retries=settings.retries,
                )
            elif self.fallback_backend is not None:
                log.info("No backend URL configured; using the in-memory backend")
                self._backend = self.fallback_backend
            else:
                return False

        if self._store is None:
            self._store = StorageLocal(settings.storage_dir)

        backend, store = self._backend, self._store
        self.uc_resolve_home = ResolveActiveHome(backend)
        self.uc_complete_task = CompleteTask(backend)
        self.uc_snooze_task = SnoozeTask(backend, default_days=settings.snooze_days)
        self.uc_create_home = CreateHome(backend)
        self.uc_update_home = UpdateHome(backend)
        self.uc_create_packet = CreatePacket(backend)
        self.uc_share_packet = SharePacket(backend, share_base_url=settings.share_base_url)
        self.uc_save_onboarding_home = SaveOnboardingHome(backend, store)
        self.uc_save_system_selection = SaveSystemSelection(store)
        self.uc_finish_onboarding = FinishOnboarding(backend, store)
        return True


__all__ = ["AppController"]
