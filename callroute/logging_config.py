# file: callroute/logging_config.py
"""
Logging configuration.

Library modules only create loggers; the CLI (or the embedding service) picks
handlers and format. Routing decisions carry structured fields through
`extra=`:

  - did_id: DID the call arrived on
  - route_name: deciding route ("Blocklist"/"Default" for synthetic decisions)
  - priority: priority of the deciding route
  - blocklist_entry_id: entry that rejected the caller

The JSON formatter emits them as top-level keys; the text formatter appends
them as `key=value` pairs.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

DECISION_FIELDS = ("did_id", "route_name", "priority", "blocklist_entry_id")

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Present on every LogRecord; anything else came in through `extra=`.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Fields attached to `record` via `extra=`, decision fields first."""

    found = {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS and k[:1] != "_"}
    ordered = {k: found.pop(k) for k in DECISION_FIELDS if k in found}
    ordered.update(found)
    return ordered


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        payload.update(extra_fields(record))
        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)


class DecisionTextFormatter(logging.Formatter):
    """Plain text lines with routing decision fields appended."""

    def __init__(self) -> None:
        super().__init__(_TEXT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = []
        for key in DECISION_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                fields.append(f"{key}={value!r}")
        if not fields:
            return line
        head, sep, tail = line.partition("\n")
        return f"{head} [{' '.join(fields)}]{sep}{tail}"


def configure_logging(*, level: str = "INFO", json_logging: bool = False) -> None:
    """
    Configure root logging for CLI use. Output goes to stderr so that command
    output on stdout stays machine-readable.
    """

    root = logging.getLogger()
    root.setLevel(level.upper())

    # Replace existing handlers to avoid duplicate logs when called twice.
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_logging else DecisionTextFormatter())
    root.addHandler(handler)
