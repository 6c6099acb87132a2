"""Tests for modtrack.logging."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from modtrack.logging import LEVEL_ENV_VAR, configure_logging, get_logger, resolve_level


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    logger = logging.getLogger("modtrack")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def test_get_logger_is_scoped_under_modtrack() -> None:
    assert get_logger().name == "modtrack"
    assert get_logger("history").name == "modtrack.history"


@pytest.mark.parametrize(
    ("verbose", "env_value", "expected"),
    [
        (False, None, (logging.INFO, None)),
        (False, "warning", (logging.WARNING, None)),
        (False, " DEBUG ", (logging.DEBUG, None)),
        (True, "ERROR", (logging.DEBUG, None)),
        (False, "chatty", (logging.INFO, "chatty")),
    ],
)
def test_resolve_level(verbose: bool, env_value: str | None, expected: tuple) -> None:
    assert resolve_level(verbose, env_value) == expected


def test_env_level_applies_to_console(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(LEVEL_ENV_VAR, "WARNING")

    logger = configure_logging()

    assert logger.level == logging.WARNING
    assert [handler.level for handler in logger.handlers] == [logging.WARNING]


def test_reconfiguring_replaces_handlers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(LEVEL_ENV_VAR, raising=False)

    configure_logging()
    logger = configure_logging(verbose=True)

    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert logger.propagate is False


def test_log_file_receives_progress_lines(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(LEVEL_ENV_VAR, raising=False)
    log_file = tmp_path / "logs" / "modtrack.log"

    logger = configure_logging(log_file=log_file)
    get_logger("engine").info("[ok] Core - 2 targets")
    for handler in logger.handlers:
        handler.flush()

    content = log_file.read_text(encoding="utf-8")
    assert "INFO modtrack.engine: [ok] Core - 2 targets" in content
