"""Tests for JSON logging and request correlation."""

from __future__ import annotations

import json
import logging
import sys

from userauth.core.logger import REQUEST_ID_HEADER, JSONFormatter, ensure_request_id


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="userauth.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello %s",
        args=("world",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_renders_known_extras():
    line = JSONFormatter().format(
        _record(request_id="rid-1", user_id=5, event="user.registered", unrelated="x")
    )
    payload = json.loads(line)

    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["request_id"] == "rid-1"
    assert payload["user_id"] == 5
    assert payload["event"] == "user.registered"
    assert "unrelated" not in payload


def test_json_formatter_includes_traceback():
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record()
        record.exc_info = sys.exc_info()

    payload = json.loads(JSONFormatter().format(record))
    assert "ValueError: boom" in payload["exc_info"]


def test_request_id_outside_request_is_random():
    assert ensure_request_id() != ensure_request_id()


def test_request_id_echoed_from_header(client):
    resp = client.get("/api/health", headers={REQUEST_ID_HEADER: "abc-123"})
    assert resp.headers[REQUEST_ID_HEADER] == "abc-123"


def test_request_id_generated_per_request(client):
    first = client.get("/api/health").headers[REQUEST_ID_HEADER]
    second = client.get("/api/health").headers[REQUEST_ID_HEADER]
    assert first and second and first != second


def test_correlation_header_accepted(client):
    resp = client.get("/api/health", headers={"X-Correlation-ID": "corr-9"})
    assert resp.headers[REQUEST_ID_HEADER] == "corr-9"
