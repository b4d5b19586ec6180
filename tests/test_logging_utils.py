from __future__ import annotations

import io
import logging

import pytest

from cursorpager.utils.logging import ROOT_LOGGER_NAME, configure_logging, get_logger


def _package_handlers() -> list[logging.Handler]:
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    return [h for h in logger.handlers if getattr(h, "_cursorpager_handler", False)]


def test_get_logger_namespacing() -> None:
    assert get_logger().name == "cursorpager"
    assert get_logger("queries").name == "cursorpager.queries"
    assert get_logger("cursorpager.core.fetcher").name == "cursorpager.core.fetcher"


def test_configure_logging_is_idempotent() -> None:
    stream = io.StringIO()
    configure_logging("INFO", stream=stream)
    configure_logging(logging.DEBUG, stream=stream)
    assert len(_package_handlers()) == 1
    assert logging.getLogger(ROOT_LOGGER_NAME).level == logging.DEBUG

    get_logger("queries").debug("hello %s", "there")
    assert "DEBUG cursorpager.queries: hello there" in stream.getvalue()


def test_configure_logging_rejects_unknown_level() -> None:
    with pytest.raises(ValueError):
        configure_logging("LOUD")


def test_handler_follows_replaced_stderr(monkeypatch: pytest.MonkeyPatch) -> None:
    first = io.StringIO()
    monkeypatch.setattr("sys.stderr", first)
    configure_logging("INFO")
    first.close()

    second = io.StringIO()
    monkeypatch.setattr("sys.stderr", second)
    configure_logging("INFO")
    get_logger("queries").info("after swap")
    assert "after swap" in second.getvalue()
    assert len(_package_handlers()) == 1
