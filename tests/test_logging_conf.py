from __future__ import annotations

import json
import logging

from recaptcha_relay.logging_conf import JsonFormatter


def _record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("service.relay", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formats_one_json_object_with_extras():
    line = JsonFormatter().format(_record("relay.decision", event="relay_decision", score=0.9))
    payload = json.loads(line)
    assert payload["message"] == "relay.decision"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "service.relay"
    assert payload["event"] == "relay_decision"
    assert payload["score"] == 0.9
    assert "pathname" not in payload
    assert "ts" in payload


def test_extras_do_not_override_core_keys():
    payload = json.loads(JsonFormatter().format(_record("hello", level="spoofed")))
    assert payload["level"] == "INFO"


def test_exception_info_is_included():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        import sys

        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())
    payload = json.loads(JsonFormatter().format(record))
    assert "RuntimeError: boom" in payload["exc_info"]
