"""Unit tests for request-id correlation and the JSON log formatter."""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import pytest

from imobcrm.core import events
from imobcrm.core.logging_config import (
    REQUEST_ID_CTX,
    JsonFormatter,
    RequestContextFilter,
    configure_logging,
)


def _record(msg: str = "hello %s", *args: object, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("imobcrm.test", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestRequestContextFilter:
    def test_default_is_dash(self) -> None:
        record = _record()
        assert RequestContextFilter().filter(record) is True
        assert record.request_id == "-"

    def test_copies_current_request_id(self) -> None:
        token = REQUEST_ID_CTX.set("abcd1234")
        try:
            record = _record()
            RequestContextFilter().filter(record)
        finally:
            REQUEST_ID_CTX.reset(token)
        assert record.request_id == "abcd1234"
        assert REQUEST_ID_CTX.get() == "-"

    @pytest.mark.asyncio
    async def test_gather_children_inherit_request_id(self) -> None:
        async def child() -> str:
            return REQUEST_ID_CTX.get()

        token = REQUEST_ID_CTX.set("feedbeef")
        try:
            seen = await asyncio.gather(child(), child())
        finally:
            REQUEST_ID_CTX.reset(token)
        assert seen == ["feedbeef", "feedbeef"]


class TestJsonFormatter:
    def test_shape(self) -> None:
        record = _record("hello %s", "world", event=events.PUBLISH_COMPLETE, request_id="r1")

        payload = json.loads(JsonFormatter().format(record))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "imobcrm.test"
        assert payload["message"] == "hello world"
        assert payload["ts"].endswith("Z")
        assert payload["extra"] == {"event": "PUBLISH_COMPLETE", "request_id": "r1"}
        assert "exc_info" not in payload

    def test_exception_included(self) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord(
                "imobcrm.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )

        payload = json.loads(JsonFormatter().format(record))

        assert "RuntimeError: boom" in payload["exc_info"]

    def test_non_serialisable_extra_uses_str(self) -> None:
        record = _record(event=events.PLATFORM_FAULT, platform=object())
        payload = json.loads(JsonFormatter().format(record))
        assert payload["extra"]["platform"].startswith("<object object")


class TestConfigureLogging:
    def test_invalid_level(self) -> None:
        with pytest.raises(ValueError, match="LOG_LEVEL"):
            configure_logging(level="LOUD", force=True)

    def test_invalid_format(self) -> None:
        with pytest.raises(ValueError, match="LOG_FORMAT"):
            configure_logging(fmt="xml", force=True)

    def test_json_handler_installed(self) -> None:
        configure_logging(level="WARNING", fmt="json", force=True)

        root = logging.getLogger()

        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert any(isinstance(f, RequestContextFilter) for f in root.handlers[0].filters)
