from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from kept.adapters.backend_memory import InMemoryBackend
from kept.domain.ports import UseCaseError
from kept.viewmodels.settings_vm import ENV_AUTH_TOKEN, ENV_BACKEND_URL
from kept.web_ui.demo_data import build_demo_backend
from kept.web_ui.runtime import WebRuntime

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(ENV_BACKEND_URL, raising=False)
    monkeypatch.delenv(ENV_AUTH_TOKEN, raising=False)
    monkeypatch.delenv("KEPT_STORAGE_ROOT", raising=False)


def test_demo_backend_has_dashboard_data() -> None:
    backend = build_demo_backend(NOW)

    homes = backend.get_user_homes()
    assert [h.id for h in homes] == ["home_demo"]
    assert len(backend.get_home_systems("home_demo")) == 3
    tasks = backend.get_upcoming_tasks("home_demo", limit=10)
    assert [t.id for t in tasks][:2] == ["task_filter", "task_flush"]
    assert backend.get_budget_forecast("home_demo", 5) is not None
    assert backend.get_current_profile().needs_onboarding is False


def test_demo_backend_before_onboarding() -> None:
    backend = build_demo_backend(NOW, onboarded=False)

    assert backend.get_user_homes() == []
    assert backend.get_current_profile().needs_onboarding is True
    assert len(backend.get_system_types()) == 8


def test_runtime_defaults_to_demo_backend(tmp_path: Path) -> None:
    runtime = WebRuntime(storage_root=str(tmp_path))

    assert runtime.ensure_adapter() is True
    assert isinstance(runtime.backend, InMemoryBackend)
    assert runtime.active_home().id == "home_demo"
    assert runtime.needs_onboarding() is False
    assert runtime.onboarding_session().is_empty


def test_runtime_saves_and_reloads_settings(tmp_path: Path) -> None:
    runtime = WebRuntime(storage_root=str(tmp_path), fallback_backend=InMemoryBackend())
    runtime.apply_settings_payload({"snooze_days": 14, "share_base_url": "https://share.example/"})
    runtime.save_settings()

    assert runtime.status_message == "Settings saved."
    reloaded = WebRuntime(storage_root=str(tmp_path), fallback_backend=InMemoryBackend())
    assert reloaded.settings_vm.snooze_days == 14
    assert reloaded.settings_vm.share_base_url == "https://share.example"
    assert reloaded.controller.ensure_ready()
    assert reloaded.controller.uc_snooze_task.default_days == 14


def test_runtime_env_backend_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(ENV_BACKEND_URL, "https://api.example/")

    runtime = WebRuntime(storage_root=str(tmp_path))

    assert runtime.settings_vm.backend_url == "https://api.example"
    assert runtime.controller.fallback_backend is None


def test_runtime_reports_missing_backend(tmp_path: Path) -> None:
    runtime = WebRuntime(storage_root=str(tmp_path))
    runtime.controller.fallback_backend = None
    runtime.controller.reset()

    assert runtime.ensure_adapter() is False
    with pytest.raises(UseCaseError) as excinfo:
        runtime.resolve_home()
    assert excinfo.value.code == "NOT_CONFIGURED"
