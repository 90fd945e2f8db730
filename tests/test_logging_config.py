from __future__ import annotations

import json
import logging

from callroute.logging_config import (
    DecisionTextFormatter,
    JsonFormatter,
    configure_logging,
    extra_fields,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="callroute.core.engine",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Route %r matched",
        args=("Office",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields() -> None:
    payload = json.loads(JsonFormatter().format(_record(did_id=7, route_name="Office")))
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "callroute.core.engine"
    assert payload["msg"] == "Route 'Office' matched"
    assert payload["did_id"] == 7
    assert payload["route_name"] == "Office"
    assert "lineno" not in payload
    assert "taskName" not in payload


def test_extra_fields_puts_decision_fields_first() -> None:
    record = _record(trace="abc", priority=10, did_id=3)
    assert list(extra_fields(record)) == ["did_id", "priority", "trace"]
    assert extra_fields(_record()) == {}


def test_text_formatter_appends_decision_fields() -> None:
    line = DecisionTextFormatter().format(_record(did_id=2, route_name="Office", priority=10))
    assert line.endswith("Route 'Office' matched [did_id=2 route_name='Office' priority=10]")

    plain = DecisionTextFormatter().format(_record())
    assert plain.endswith("callroute.core.engine: Route 'Office' matched")


def test_configure_logging_replaces_handlers() -> None:
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    try:
        configure_logging(level="debug", json_logging=True)
        configure_logging(level="warning", json_logging=True)
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert root.level == logging.WARNING

        configure_logging(level="info")
        assert isinstance(root.handlers[0].formatter, DecisionTextFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
