from __future__ import annotations

import pytest

from callroute.core.models import Route
from callroute.core.presets import preset_rules
from callroute.core.validator import validate_route


def _route(
    *,
    condition_type: str = "default",
    condition_data: bytes | None = None,
    action_type: str = "voicemail",
    action_data: bytes | None = None,
) -> Route:
    return Route(
        id=1,
        did_id=None,
        priority=10,
        name="test",
        condition_type=condition_type,
        condition_data=condition_data,
        action_type=action_type,
        action_data=action_data,
    )


def test_valid_minimal_route() -> None:
    assert validate_route(_route()) == []


def test_invalid_kinds_are_both_reported() -> None:
    errors = validate_route(_route(condition_type="weather", action_type="page"))
    assert errors == ["Invalid condition type: weather", "Invalid action type: page"]


@pytest.mark.parametrize(
    ("action_data", "expected"),
    [
        (b'{"devices": [], "timeout": 30}', ["Ring action requires at least one device"]),
        (b'{"devices": [1], "timeout": 500}', ["Timeout must be between 0 and 300 seconds"]),
        (b'{"devices": [1], "timeout": -1}', ["Timeout must be between 0 and 300 seconds"]),
        (b'{"devices": [1], "timeout": 30}', []),
        (b'{"devices": [1], "timeout": 300}', []),
        (
            b'{"devices": [], "timeout": 301}',
            [
                "Ring action requires at least one device",
                "Timeout must be between 0 and 300 seconds",
            ],
        ),
    ],
)
def test_ring_action_checks(action_data: bytes, expected: list[str]) -> None:
    assert validate_route(_route(action_type="ring", action_data=action_data)) == expected


def test_ring_without_payload_is_tolerated() -> None:
    assert validate_route(_route(action_type="ring")) == []
    assert validate_route(_route(action_type="ring", action_data=b"")) == []


def test_malformed_payloads_are_reported() -> None:
    errors = validate_route(_route(action_type="ring", action_data=b"{nope"))
    assert len(errors) == 1
    assert errors[0].startswith("Invalid ring action data:")

    errors = validate_route(_route(action_type="forward", action_data=b"[]"))
    assert len(errors) == 1
    assert errors[0].startswith("Invalid forward action data:")

    errors = validate_route(_route(condition_type="time", condition_data=b"{"))
    assert len(errors) == 1
    assert errors[0].startswith("Invalid time condition data:")


def test_forward_requires_number() -> None:
    errors = validate_route(_route(action_type="forward", action_data=b'{"number": ""}'))
    assert errors == ["Forward action requires a phone number"]
    ok = _route(action_type="forward", action_data=b'{"number": "+15551234567"}')
    assert validate_route(ok) == []


def test_time_condition_ranges() -> None:
    data = b'{"start_hour": 24, "end_hour": -1, "days": [0, 7, 9]}'
    errors = validate_route(_route(condition_type="time", condition_data=data))
    assert errors == [
        "Start hour must be between 0 and 23",
        "End hour must be between 0 and 23",
        "Day must be between 0 (Sunday) and 6 (Saturday)",
        "Day must be between 0 (Sunday) and 6 (Saturday)",
    ]

    ok = b'{"startHour": 22, "endHour": 6, "days": [1, 2, 3, 4, 5]}'
    assert validate_route(_route(condition_type="time", condition_data=ok)) == []


def test_checks_are_independent() -> None:
    route = _route(
        condition_type="time",
        condition_data=b'{"start_hour": 30}',
        action_type="ring",
        action_data=b'{"devices": [], "timeout": 30}',
    )
    assert validate_route(route) == [
        "Start hour must be between 0 and 23",
        "Ring action requires at least one device",
    ]


def test_callerid_regex_must_compile() -> None:
    bad = _route(
        condition_type="callerid",
        condition_data=b'{"pattern": "([x", "match_type": "regex"}',
    )
    errors = validate_route(bad)
    assert len(errors) == 1
    assert errors[0].startswith("Invalid caller ID regex")

    good = _route(
        condition_type="callerid",
        condition_data=b'{"pattern": "^\\\\+1", "match_type": "regex"}',
    )
    assert validate_route(good) == []


def test_payload_of_other_kind_is_not_checked() -> None:
    # Time rules only apply to time conditions; voicemail ignores action data.
    route = _route(condition_type="default", condition_data=b"{", action_data=b"{")
    assert validate_route(route) == []


def test_presets_validate_except_device_less_ring() -> None:
    results = {p.name: validate_route(p.to_route()) for p in preset_rules()}
    assert results["Block Anonymous"] == []
    assert results["After Hours Voicemail"] == []
    assert results["Weekend Voicemail"] == []
    assert results["Business Hours Ring"] == ["Ring action requires at least one device"]
