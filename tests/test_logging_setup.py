"""Package logger configuration."""

from __future__ import annotations

import io
import logging

import pytest

from core.logging_setup import configure_logging, get_logger


def _stream_handlers(logger: logging.Logger) -> list[logging.Handler]:
    # pytest attaches its own capture handlers, which are subclasses.
    return [handler for handler in logger.handlers if type(handler) is logging.StreamHandler]


@pytest.fixture()
def fresh_logging():
    """Clear stream handlers left by earlier tests and restore them afterwards."""

    root = logging.getLogger("cashpulse")
    saved = list(root.handlers)
    for handler in _stream_handlers(root):
        root.removeHandler(handler)
    yield root
    root.handlers = saved


def test_get_logger_nests_under_package():
    assert get_logger("core.data_loader").name == "cashpulse.core.data_loader"
    assert get_logger("cashpulse.analytics").name == "cashpulse.analytics"


def test_configure_logging_writes_to_stream(fresh_logging):
    stream = io.StringIO()

    configure_logging("debug", fmt="%(levelname)s %(name)s %(message)s", stream=stream)
    get_logger("tests").debug("hello %s", "there")

    assert stream.getvalue().strip() == "DEBUG cashpulse.tests hello there"
    assert fresh_logging.propagate is False


def test_configure_logging_runs_once(fresh_logging):
    first, second = io.StringIO(), io.StringIO()

    configure_logging("info", stream=first)
    configure_logging("debug", stream=second)
    get_logger("tests").info("only once")

    assert len(_stream_handlers(fresh_logging)) == 1
    assert fresh_logging.level == logging.INFO
    assert "only once" in first.getvalue()
    assert second.getvalue() == ""


def test_level_falls_back_to_environment(fresh_logging, monkeypatch):
    monkeypatch.setenv("CASHPULSE_LOG_LEVEL", "WARNING")

    configure_logging(stream=io.StringIO())

    assert fresh_logging.level == logging.WARNING
