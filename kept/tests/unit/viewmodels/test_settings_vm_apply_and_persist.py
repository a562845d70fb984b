from __future__ import annotations

import json
from pathlib import Path

import pytest

from kept.adapters.storage_local import StorageLocal
from kept.usecases.packets import DEFAULT_SHARE_BASE_URL
from kept.viewmodels.settings_vm import (
    ENV_AUTH_TOKEN,
    ENV_BACKEND_URL,
    SettingsVM,
    default_settings_payload,
)


def test_apply_dict_updates_flat_keys() -> None:
    vm = SettingsVM()
    payload = {
        "backend_url": "https://api.example.test/",
        "auth_token": " token-123 ",
        "request_timeout_s": "12",
        "retries": 0,
        "due_soon_days": 10,
        "snooze_days": 3,
        "storage_dir": "  ./data ",
        "share_base_url": "",
        "debug_logging": "yes",
    }
    vm.apply_dict(payload)

    assert vm.backend_url == "https://api.example.test"
    assert vm.auth_token == "token-123"
    assert vm.request_timeout_s == 12
    assert vm.retries == 0
    assert vm.due_soon_days == 10
    assert vm.snooze_days == 3
    assert vm.storage_dir == "./data"
    assert vm.share_base_url == DEFAULT_SHARE_BASE_URL
    assert vm.debug_logging is True


@pytest.mark.parametrize(
    "payload",
    [
        {"unknown_key": 1},
        {"request_timeout_s": 0},
        {"retries": -1},
        {"snooze_days": "soon"},
        {"due_soon_days": True},
        {"storage_dir": 5},
        {"backend_url": 42},
    ],
)
def test_apply_dict_rejects_invalid_values(payload: dict) -> None:
    vm = SettingsVM()
    before = vm.to_dict()

    with pytest.raises(ValueError):
        vm.apply_dict(payload)
    assert vm.to_dict() == before


def test_apply_env_fills_only_missing_values() -> None:
    vm = SettingsVM()
    vm.apply_env({ENV_BACKEND_URL: "https://env.example/", ENV_AUTH_TOKEN: "env-token"})

    assert vm.backend_url == "https://env.example"
    assert vm.auth_token == "env-token"

    vm.apply_env({ENV_BACKEND_URL: "https://other.example"})
    assert vm.backend_url == "https://env.example"


def test_cmd_save_validates_before_callback() -> None:
    saved = []
    vm = SettingsVM(on_save=saved.append)

    vm.backend_url = "ftp://files.example"
    with pytest.raises(ValueError):
        vm.cmd_save()
    assert saved == []

    vm.backend_url = "https://api.example"
    vm.cmd_save()
    assert saved[0]["backend_url"] == "https://api.example"


def test_storage_local_defaults_and_roundtrip(tmp_path: Path) -> None:
    storage = StorageLocal(root_dir=str(tmp_path))
    settings_path = tmp_path / "user_settings.json"
    assert storage.load_user_settings() is None
    assert not settings_path.exists()

    vm = SettingsVM()
    vm.apply_dict(
        {
            "backend_url": "https://api.example",
            "auth_token": "secret",
            "request_timeout_s": 15,
            "retries": 4,
            "snooze_days": 14,
            "storage_dir": str(tmp_path / "store"),
        }
    )
    payload = vm.to_dict()

    storage.save_user_settings(payload)
    assert settings_path.exists()

    loaded = storage.load_user_settings()
    assert loaded == payload

    restored = SettingsVM()
    restored.apply_dict(loaded)
    assert restored.to_dict() == payload

    with settings_path.open("r", encoding="utf-8") as fh:
        parsed = json.load(fh)
    assert parsed == payload


def test_default_payload_has_every_setting() -> None:
    payload = default_settings_payload()

    assert payload["backend_url"] == ""
    assert payload["due_soon_days"] == 7
    assert payload["snooze_days"] == 7
    assert "debug_logging" in payload
