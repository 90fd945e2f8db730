# file: callroute/core/models.py
"""
Core data types for call routing.

`Route` and `BlocklistEntry` mirror what the persistence layer stores: kinds
are kept as the stored strings so that a bad row can still be represented and
validated. The closed enums below are what the engine works with once a
stored kind has been recognized.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

BLOCKLIST_ROUTE_NAME = "Blocklist"
DEFAULT_ROUTE_NAME = "Default"


class ConditionKind(str, Enum):
    DEFAULT = "default"
    CALLERID = "callerid"
    TIME = "time"


class ActionKind(str, Enum):
    RING = "ring"
    FORWARD = "forward"
    VOICEMAIL = "voicemail"
    REJECT = "reject"


class PatternKind(str, Enum):
    EXACT = "exact"
    PREFIX = "prefix"
    REGEX = "regex"


def parse_kind(enum_cls: type[Enum], value: str) -> Any | None:
    """Return the enum member for `value`, or None if it is not a known kind."""

    try:
        return enum_cls(value)
    except ValueError:
        return None


class PayloadModel(BaseModel):
    """Base for JSON payloads; accepts snake_case and camelCase keys."""

    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
        strict=True,
        frozen=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # JSON null means "not set": the field keeps its default.
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class CallerIDCondition(PayloadModel):
    pattern: str = ""
    match_type: str = "contains"  # exact, contains, prefix, regex
    anonymous: bool = False


class TimeCondition(PayloadModel):
    start_hour: int = 0
    end_hour: int = 0
    days: list[int] = Field(default_factory=list)  # 0=Sunday .. 6=Saturday
    business_hours: bool = False
    after_hours: bool = False


class RingAction(PayloadModel):
    devices: list[int] = Field(default_factory=list)
    timeout: int = Field(
        default=0,
        validation_alias=AliasChoices("timeout", "timeoutSeconds", "timeout_seconds"),
    )


class ForwardAction(PayloadModel):
    number: str = ""


ActionPayload = Union[RingAction, ForwardAction, None]


@dataclass(frozen=True, slots=True)
class CallContext:
    """Inbound call facts, built per call by whatever invokes the engine."""

    caller_id: str
    called_number: str
    did_id: int
    time: datetime

    def local_time(self, tz: Any) -> datetime:
        ts = self.time
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return ts.astimezone(tz)


@dataclass(frozen=True, slots=True)
class Route:
    id: int
    did_id: int | None
    priority: int
    name: str
    condition_type: str
    condition_data: bytes | None = None
    action_type: str = ActionKind.VOICEMAIL.value
    action_data: bytes | None = None
    enabled: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "did_id": self.did_id,
            "priority": self.priority,
            "name": self.name,
            "condition_type": self.condition_type,
            "condition_data": _decode_raw(self.condition_data),
            "action_type": self.action_type,
            "action_data": _decode_raw(self.action_data),
            "enabled": self.enabled,
        }


@dataclass(frozen=True, slots=True)
class BlocklistEntry:
    id: int
    pattern: str
    pattern_type: str
    reason: str = ""
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class Action:
    """
    Routing decision for one call.

    Fields:
        kind: What to do with the call.
        payload: Decoded ring/forward data; None for voicemail/reject.
        route_name: Winning route, or "Blocklist"/"Default".
        priority: Winning route priority; None for blocklist/default outcomes.
        data: Raw stored action payload of the winning route.
    """

    kind: ActionKind
    route_name: str
    payload: ActionPayload = None
    priority: int | None = None
    data: bytes | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "route_name": self.route_name,
            "priority": self.priority,
            "payload": self.payload.model_dump() if self.payload is not None else None,
        }


def _decode_raw(data: bytes | None) -> str | None:
    if data is None:
        return None
    return data.decode("utf-8", errors="replace")
