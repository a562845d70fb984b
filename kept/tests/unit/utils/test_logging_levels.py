from __future__ import annotations

import logging

import pytest

from kept.utils.logging import (
    DEBUG_ENV,
    LEVEL_ENV,
    apply_debug_setting,
    env_forces_debug,
    env_log_level,
    parse_level,
)


@pytest.fixture(autouse=True)
def _restore_levels(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv(LEVEL_ENV, raising=False)
    monkeypatch.delenv(DEBUG_ENV, raising=False)
    root = logging.getLogger()
    saved = (root.level, logging.getLogger("urllib3").level)
    yield
    root.setLevel(saved[0])
    logging.getLogger("urllib3").setLevel(saved[1])


def test_parse_level_accepts_names_and_numbers() -> None:
    assert parse_level("debug") == logging.DEBUG
    assert parse_level("30") == 30
    assert parse_level(logging.ERROR) == logging.ERROR
    assert parse_level("loud") == logging.INFO
    assert parse_level(None, logging.WARNING) == logging.WARNING


def test_env_precedence() -> None:
    assert env_log_level({}) is None
    assert env_log_level({DEBUG_ENV: "yes"}) == logging.DEBUG
    assert env_log_level({LEVEL_ENV: "warning", DEBUG_ENV: "1"}) == logging.WARNING
    assert env_forces_debug({LEVEL_ENV: "10"}) is True
    assert env_forces_debug({DEBUG_ENV: "off"}) is False


def test_debug_setting_follows_toggle_without_env() -> None:
    assert apply_debug_setting(True) == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.DEBUG

    assert apply_debug_setting(False) == logging.INFO
    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger("urllib3").level == logging.WARNING


def test_env_level_overrides_toggle(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(LEVEL_ENV, "ERROR")

    assert apply_debug_setting(True) == logging.ERROR
    assert logging.getLogger().level == logging.ERROR
