# file: callroute/core/actions.py
"""
Action decoding.

Unlike conditions, actions are not decoded leniently: if the winning route's
action payload cannot be turned into something executable, the caller gets an
`ActionDecodeError` instead of a silently wrong disposition.
"""

from __future__ import annotations

from callroute.core.conditions import parse_payload
from callroute.core.models import ActionKind, ActionPayload, ForwardAction, RingAction, parse_kind


class ActionDecodeError(ValueError):
    """Raised when a route's action cannot be decoded into an executable action."""

    def __init__(self, message: str, *, action_type: str, route_name: str = "") -> None:
        super().__init__(message)
        self.action_type = action_type
        self.route_name = route_name


def resolve_action(action_type: str, data: bytes | None, *, route_name: str = "") -> ActionPayload:
    """
    Decode an action kind plus stored payload into a typed action.

    Returns:
        `RingAction` or `ForwardAction`; None for voicemail and reject.

    Raises:
        ActionDecodeError: unknown action kind, or a missing/malformed/incomplete
            ring or forward payload.
    """

    kind = parse_kind(ActionKind, action_type)
    if kind is ActionKind.VOICEMAIL or kind is ActionKind.REJECT:
        return None

    if kind is ActionKind.RING:
        try:
            ring = parse_payload(RingAction, data)
        except ValueError as exc:
            raise ActionDecodeError(
                f"Invalid ring action data: {exc}", action_type=action_type, route_name=route_name
            ) from exc
        if not ring.devices:
            raise ActionDecodeError(
                "Ring action requires at least one device",
                action_type=action_type,
                route_name=route_name,
            )
        return ring

    if kind is ActionKind.FORWARD:
        try:
            forward = parse_payload(ForwardAction, data)
        except ValueError as exc:
            raise ActionDecodeError(
                f"Invalid forward action data: {exc}",
                action_type=action_type,
                route_name=route_name,
            ) from exc
        if not forward.number:
            raise ActionDecodeError(
                "Forward action requires a phone number",
                action_type=action_type,
                route_name=route_name,
            )
        return forward

    raise ActionDecodeError(
        f"Invalid action type: {action_type}", action_type=action_type, route_name=route_name
    )
