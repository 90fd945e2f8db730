# file: callroute/core/conditions.py
"""
Route condition evaluation.

Each condition kind consumes its stored JSON payload plus the call context and
answers "does this route apply?". A payload that cannot be parsed means the
route does not apply: one bad rule must not take down routing for every call,
so problems are logged and evaluation carries on.
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import TypeVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import ValidationError

from callroute.core.blocklist import compile_regex
from callroute.core.models import (
    CallContext,
    CallerIDCondition,
    ConditionKind,
    PayloadModel,
    TimeCondition,
    parse_kind,
)
from callroute.core.normalize import normalize_number

logger = logging.getLogger(__name__)

ANONYMOUS_MARKERS = ("anonymous", "blocked", "private", "unavailable", "unknown", "restricted")

BUSINESS_START_HOUR = 9
BUSINESS_END_HOUR = 17

P = TypeVar("P", bound=PayloadModel)


def load_timezone(name: str | None) -> tzinfo:
    """Resolve an IANA timezone name, falling back to UTC for unknown names."""

    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
            logger.warning("Unknown timezone %r, using UTC: %s", name, exc)
    return ZoneInfo("UTC")


def parse_payload(model: type[P], data: bytes | str | None) -> P:
    """
    Parse a stored JSON payload into `model`.

    Raises:
        ValueError: if the payload is missing or malformed.
    """

    if data is None or not data.strip():
        raise ValueError("empty payload")
    try:
        return model.model_validate_json(data)
    except ValidationError as exc:
        raise ValueError(str(exc)) from exc


def _weekday(local: datetime) -> int:
    # datetime.weekday() is Monday=0; routing days use Sunday=0.
    return (local.weekday() + 1) % 7


def match_caller_id(condition: CallerIDCondition, caller_id: str) -> bool:
    if condition.anonymous:
        if caller_id == "":
            return True
        lowered = caller_id.lower()
        return any(marker in lowered for marker in ANONYMOUS_MARKERS)

    match_type = condition.match_type
    if match_type == "regex":
        # Raw caller id, not normalized.
        compiled = compile_regex(condition.pattern)
        return compiled is not None and compiled.search(caller_id) is not None

    number = normalize_number(caller_id)
    pattern = normalize_number(condition.pattern)
    if match_type == "exact":
        return number == pattern
    if match_type == "prefix":
        return number.startswith(pattern)
    return pattern in number


def match_time(condition: TimeCondition, ctx: CallContext, tz: tzinfo) -> bool:
    local = ctx.local_time(tz)
    hour = local.hour
    weekday = _weekday(local)

    if condition.business_hours or condition.after_hours:
        is_business = 1 <= weekday <= 5 and BUSINESS_START_HOUR <= hour < BUSINESS_END_HOUR
        if condition.business_hours:
            return is_business
        return not is_business

    if condition.days and weekday not in condition.days:
        return False

    if condition.start_hour <= condition.end_hour:
        return condition.start_hour <= hour < condition.end_hour
    # Overnight range, e.g. 22 -> 6.
    return hour >= condition.start_hour or hour < condition.end_hour


def evaluate_condition(
    condition_type: str,
    data: bytes | None,
    ctx: CallContext,
    *,
    tz: tzinfo,
    route_name: str = "",
) -> bool:
    """
    Evaluate a stored route condition for one call.

    Unknown condition kinds and malformed payloads evaluate to False.
    """

    kind = parse_kind(ConditionKind, condition_type)
    if kind is ConditionKind.DEFAULT:
        return True

    if kind is ConditionKind.CALLERID:
        try:
            caller_condition = parse_payload(CallerIDCondition, data)
        except ValueError as exc:
            logger.warning("Route %r: unusable callerid condition: %s", route_name, exc)
            return False
        return match_caller_id(caller_condition, ctx.caller_id)

    if kind is ConditionKind.TIME:
        try:
            time_condition = parse_payload(TimeCondition, data)
        except ValueError as exc:
            logger.warning("Route %r: unusable time condition: %s", route_name, exc)
            return False
        return match_time(time_condition, ctx, tz)

    logger.warning("Route %r: unknown condition type %r", route_name, condition_type)
    return False
