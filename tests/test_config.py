from __future__ import annotations

import logging

import pytest

from avii_ref.config import (
    LOG_LEVEL_ENV,
    PY_TRACE_ENV,
    RECURSION_LIMIT_ENV,
    DEFAULT_RECURSION_LIMIT,
    debug_py_trace_enabled,
    log_level,
    recursion_limit,
    set_debug_py_trace,
)


@pytest.mark.parametrize("raw", ["1", "true", "YES", " on "])
def test_py_trace_truthy_values(raw: str, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(PY_TRACE_ENV, raw)
    assert debug_py_trace_enabled()


@pytest.mark.parametrize("raw", ["", "0", "off", "maybe"])
def test_py_trace_falsy_values(raw: str, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(PY_TRACE_ENV, raw)
    assert not debug_py_trace_enabled()


def test_set_debug_py_trace_round_trip(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(PY_TRACE_ENV, raising=False)
    set_debug_py_trace(True)
    assert debug_py_trace_enabled()
    set_debug_py_trace(False)
    assert not debug_py_trace_enabled()


def test_log_level_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    assert log_level() == logging.WARNING

    monkeypatch.setenv(LOG_LEVEL_ENV, "debug")
    assert log_level() == logging.DEBUG

    monkeypatch.setenv(LOG_LEVEL_ENV, "chatty")
    assert log_level() == logging.WARNING


@pytest.mark.parametrize(
    "raw, expected",
    [
        pytest.param(None, DEFAULT_RECURSION_LIMIT, id="unset"),
        pytest.param("20000", 20000, id="explicit"),
        pytest.param("0", DEFAULT_RECURSION_LIMIT, id="zero"),
        pytest.param("lots", DEFAULT_RECURSION_LIMIT, id="garbage"),
    ],
)
def test_recursion_limit_from_env(raw, expected: int, monkeypatch: pytest.MonkeyPatch) -> None:
    if raw is not None:
        monkeypatch.setenv(RECURSION_LIMIT_ENV, raw)
    assert recursion_limit() == expected
