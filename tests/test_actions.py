from __future__ import annotations

import pytest

from callroute.core.actions import ActionDecodeError, resolve_action
from callroute.core.models import ForwardAction, RingAction


def test_ring_action_decodes() -> None:
    action = resolve_action("ring", b'{"devices": [1, 2], "timeout": 25}')
    assert isinstance(action, RingAction)
    assert action.devices == [1, 2]
    assert action.timeout == 25


def test_ring_action_accepts_timeout_seconds_alias() -> None:
    action = resolve_action("ring", b'{"devices": [4], "timeoutSeconds": 40}')
    assert isinstance(action, RingAction)
    assert action.timeout == 40


def test_ring_null_timeout_uses_default() -> None:
    action = resolve_action("ring", b'{"devices": [4], "timeout": null}')
    assert isinstance(action, RingAction)
    assert action.timeout == 0


def test_forward_action_decodes() -> None:
    action = resolve_action("forward", b'{"number": "+15559876543"}')
    assert isinstance(action, ForwardAction)
    assert action.number == "+15559876543"


@pytest.mark.parametrize("kind", ["voicemail", "reject"])
def test_voicemail_and_reject_have_no_payload(kind: str) -> None:
    assert resolve_action(kind, None) is None
    assert resolve_action(kind, b"garbage") is None


@pytest.mark.parametrize(
    ("kind", "payload"),
    [
        ("ring", b"{"),
        ("ring", None),
        ("ring", b'{"devices": []}'),
        ("ring", b'{"devices": ["desk"]}'),
        ("forward", b'{"number": ""}'),
        ("forward", b""),
        ("forward", b'{"number": 15551234567}'),
        ("forward", b'{"number": null}'),
        ("page", b"{}"),
    ],
)
def test_undecodable_actions_raise(kind: str, payload: bytes | None) -> None:
    with pytest.raises(ActionDecodeError) as excinfo:
        resolve_action(kind, payload, route_name="Office")
    assert excinfo.value.route_name == "Office"
    assert excinfo.value.action_type == kind
