from __future__ import annotations

from pathlib import Path

from kept.adapters.backend_memory import InMemoryBackend
from kept.adapters.backend_rest import BackendRestAdapter
from kept.app.controller import AppController
from kept.viewmodels.settings_vm import SettingsVM


def _settings(tmp_path: Path) -> SettingsVM:
    settings = SettingsVM()
    settings.storage_dir = str(tmp_path)
    return settings


def test_controller_ensure_ready_wires_usecases(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    settings.backend_url = "https://api.example"
    settings.auth_token = "token"
    settings.snooze_days = 3

    controller = AppController(settings)

    assert controller.ensure_ready() is True
    assert isinstance(controller.backend, BackendRestAdapter)
    assert controller.backend.base_url == "https://api.example"
    assert controller.store is not None
    assert controller.uc_resolve_home is not None
    assert controller.uc_complete_task is not None
    assert controller.uc_snooze_task.default_days == 3
    assert controller.uc_create_home is not None
    assert controller.uc_update_home is not None
    assert controller.uc_create_packet is not None
    assert controller.uc_share_packet is not None
    assert controller.uc_save_onboarding_home is not None
    assert controller.uc_save_system_selection is not None
    assert controller.uc_finish_onboarding is not None


def test_controller_uses_fallback_without_url(tmp_path: Path) -> None:
    fallback = InMemoryBackend()
    controller = AppController(_settings(tmp_path), fallback_backend=fallback)

    assert controller.ensure_ready() is True
    assert controller.backend is fallback
    assert controller.uc_share_packet.backend is fallback


def test_controller_not_ready_without_backend(tmp_path: Path) -> None:
    controller = AppController(_settings(tmp_path))

    assert controller.ensure_ready() is False
    assert controller.backend is None
    assert controller.uc_complete_task is None


def test_controller_reset_rebuilds_from_settings(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    controller = AppController(settings, fallback_backend=InMemoryBackend())
    controller.ensure_ready()

    settings.backend_url = "https://api.example"
    controller.reset()
    assert controller.backend is None
    assert controller.uc_resolve_home is None

    assert controller.ensure_ready() is True
    assert isinstance(controller.backend, BackendRestAdapter)
