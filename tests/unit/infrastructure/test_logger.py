# tests/unit/infrastructure/test_logger.py
from __future__ import annotations

import json
import logging
from decimal import Decimal

import pytest

from retail_sales.infrastructure.logging.logger import (
    _JsonFormatter,  # internal but importable
    bind_correlation_id,
    configure_root_logging,
    get_correlation_id,
    get_json_logger,
)


def _capture_log(record_msg: str, level: int = logging.INFO, **extra) -> dict:
    """Build a record with arbitrary extras and return the parsed JSON payload."""
    logger = logging.getLogger("test.logger")
    record = logger.makeRecord(
        name=logger.name,
        level=level,
        fn="test_logger",
        lno=123,
        msg=record_msg,
        args=(),
        exc_info=None,
    )
    for k, v in extra.items():
        setattr(record, k, v)
    return json.loads(_JsonFormatter().format(record))


def test_configure_root_logging_installs_json_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    """Root logger should get a JSON formatter and respect LOG_LEVEL."""
    monkeypatch.setenv("LOG_LEVEL", "debug")
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    root.handlers.clear()
    try:
        configure_root_logging()
        configure_root_logging()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, _JsonFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_json_formatter_basic_fields() -> None:
    payload = _capture_log("sales.create.done")
    assert payload["message"] == "sales.create.done"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert "ts" in payload


def test_json_formatter_merges_extras_and_stringifies_unknown_types() -> None:
    payload = _capture_log("sales.add_item.done", sale_id="s-1", total_amount=Decimal("36.00"))
    assert payload["sale_id"] == "s-1"
    assert payload["total_amount"] == "36.00"
    assert "lineno" not in payload


def test_json_formatter_request_id_sources(monkeypatch: pytest.MonkeyPatch) -> None:
    """Request ID comes from the record, then the REQUEST_ID env."""
    monkeypatch.delenv("REQUEST_ID", raising=False)
    assert "request_id" not in _capture_log("no-id")
    assert _capture_log("with-record-id", request_id="abc-123")["request_id"] == "abc-123"

    monkeypatch.setenv("REQUEST_ID", "env-id")
    assert _capture_log("with-env-id")["request_id"] == "env-id"


def test_bound_correlation_id_is_logged_and_restored() -> None:
    assert get_correlation_id() is None

    with bind_correlation_id("corr-1") as bound:
        assert bound == "corr-1"
        assert _capture_log("inside")["correlation_id"] == "corr-1"

    assert get_correlation_id() is None
    assert "correlation_id" not in _capture_log("outside")


def test_nested_binding_keeps_outer_id_unless_given_one() -> None:
    with bind_correlation_id() as outer:
        assert len(outer) == 32
        with bind_correlation_id() as inner:
            assert inner == outer
        with bind_correlation_id("explicit") as explicit:
            assert get_correlation_id() == explicit == "explicit"
        assert get_correlation_id() == outer


def test_json_formatter_includes_exception_info(caplog: pytest.LogCaptureFixture) -> None:
    """Formatter should add exc_type and exc_message for errors with exc_info."""
    logger = get_json_logger("test.logger.exc")

    with caplog.at_level(logging.ERROR, logger="test.logger.exc"):
        try:
            raise ValueError("boom")
        except ValueError:
            logger.exception("failure")

    payload = json.loads(_JsonFormatter().format(caplog.records[-1]))
    assert payload["level"] == "ERROR"
    assert payload["exc_type"] == "ValueError"
    assert "boom" in payload["exc_message"]
