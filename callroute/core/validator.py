# file: callroute/core/validator.py
"""
Static validation of route definitions.

`validate_route` is meant to run before a rule is stored or enabled. It never
raises; every problem found is reported so the rule editor can show them all
at once. A missing payload is tolerated here (defaults apply); only payloads
that are present and malformed or out of range are flagged.
"""

from __future__ import annotations

from callroute.core.blocklist import compile_regex
from callroute.core.conditions import parse_payload
from callroute.core.models import (
    ActionKind,
    CallerIDCondition,
    ConditionKind,
    ForwardAction,
    RingAction,
    Route,
    TimeCondition,
    parse_kind,
)

MAX_RING_TIMEOUT_SECONDS = 300


def _present(data: bytes | None) -> bool:
    return data is not None and len(data) > 0


def _validate_time(data: bytes | None) -> list[str]:
    try:
        condition = parse_payload(TimeCondition, data)
    except ValueError as exc:
        return [f"Invalid time condition data: {exc}"]

    errors: list[str] = []
    if not 0 <= condition.start_hour <= 23:
        errors.append("Start hour must be between 0 and 23")
    if not 0 <= condition.end_hour <= 23:
        errors.append("End hour must be between 0 and 23")
    for day in condition.days:
        if not 0 <= day <= 6:
            errors.append("Day must be between 0 (Sunday) and 6 (Saturday)")
    return errors


def _validate_caller_id(data: bytes | None) -> list[str]:
    try:
        condition = parse_payload(CallerIDCondition, data)
    except ValueError as exc:
        return [f"Invalid caller ID condition data: {exc}"]

    if condition.match_type == "regex" and not condition.anonymous:
        if compile_regex(condition.pattern) is None:
            return [f"Invalid caller ID regex: {condition.pattern}"]
    return []


def _validate_ring(data: bytes | None) -> list[str]:
    try:
        action = parse_payload(RingAction, data)
    except ValueError as exc:
        return [f"Invalid ring action data: {exc}"]

    errors: list[str] = []
    if not action.devices:
        errors.append("Ring action requires at least one device")
    if not 0 <= action.timeout <= MAX_RING_TIMEOUT_SECONDS:
        errors.append(f"Timeout must be between 0 and {MAX_RING_TIMEOUT_SECONDS} seconds")
    return errors


def _validate_forward(data: bytes | None) -> list[str]:
    try:
        action = parse_payload(ForwardAction, data)
    except ValueError as exc:
        return [f"Invalid forward action data: {exc}"]

    if not action.number:
        return ["Forward action requires a phone number"]
    return []


def validate_route(route: Route) -> list[str]:
    """
    Validate a route definition.

    Returns:
        Human-readable error messages; an empty list means the route is valid.
    """

    errors: list[str] = []

    condition = parse_kind(ConditionKind, route.condition_type)
    if condition is None:
        errors.append(f"Invalid condition type: {route.condition_type}")

    action = parse_kind(ActionKind, route.action_type)
    if action is None:
        errors.append(f"Invalid action type: {route.action_type}")

    if _present(route.condition_data):
        if condition is ConditionKind.TIME:
            errors.extend(_validate_time(route.condition_data))
        elif condition is ConditionKind.CALLERID:
            errors.extend(_validate_caller_id(route.condition_data))

    if _present(route.action_data):
        if action is ActionKind.RING:
            errors.extend(_validate_ring(route.action_data))
        elif action is ActionKind.FORWARD:
            errors.extend(_validate_forward(route.action_data))

    return errors
