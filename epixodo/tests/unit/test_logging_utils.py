from __future__ import annotations

import logging

import pytest

from epixodo.utils import logging as log_utils


@pytest.fixture(autouse=True)
def _restore_root_level():
    root = logging.getLogger()
    previous = root.level
    yield
    root.setLevel(previous)


def test_preferences_toggle_debug(monkeypatch) -> None:
    monkeypatch.delenv("EPIXODO_LOG_LEVEL", raising=False)
    monkeypatch.delenv("EPIXODO_DEBUG", raising=False)

    assert log_utils.apply_preferences(True) == logging.DEBUG
    assert log_utils.apply_preferences(False) == logging.INFO
    assert logging.getLogger("urllib3").level == logging.WARNING
    assert log_utils.env_requests_debug() is False


def test_env_level_overrides_preferences(monkeypatch) -> None:
    monkeypatch.setenv("EPIXODO_LOG_LEVEL", "warning")
    assert log_utils.apply_preferences(True) == logging.WARNING
    assert log_utils.configure_root() == logging.WARNING
    assert log_utils.level_name(logging.WARNING) == "WARNING"


def test_debug_flag(monkeypatch) -> None:
    monkeypatch.delenv("EPIXODO_LOG_LEVEL", raising=False)
    monkeypatch.setenv("EPIXODO_DEBUG", "yes")
    assert log_utils.env_requests_debug() is True
    assert log_utils.configure_root("INFO") == logging.DEBUG
