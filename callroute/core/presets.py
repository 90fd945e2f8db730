"""Common routing rule templates offered by the rule editor."""

from __future__ import annotations

from dataclasses import dataclass

from callroute.core.models import Route


@dataclass(frozen=True, slots=True)
class PresetRule:
    name: str
    description: str
    condition_type: str
    condition_data: bytes | None
    action_type: str
    action_data: bytes | None = None

    def to_route(self, *, route_id: int = 0, priority: int = 0, did_id: int | None = None) -> Route:
        return Route(
            id=route_id,
            did_id=did_id,
            priority=priority,
            name=self.name,
            condition_type=self.condition_type,
            condition_data=self.condition_data,
            action_type=self.action_type,
            action_data=self.action_data,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "description": self.description,
            "condition_type": self.condition_type,
            "condition_data": self.condition_data.decode("utf-8") if self.condition_data else None,
            "action_type": self.action_type,
            "action_data": self.action_data.decode("utf-8") if self.action_data else None,
        }


def preset_rules() -> list[PresetRule]:
    """
    Return the built-in rule templates.

    "Business Hours Ring" carries no devices; fill them in before enabling it.
    """

    return [
        PresetRule(
            name="Block Anonymous",
            description="Reject calls from anonymous or blocked callers",
            condition_type="callerid",
            condition_data=b'{"anonymous": true}',
            action_type="reject",
        ),
        PresetRule(
            name="After Hours Voicemail",
            description="Send calls to voicemail outside business hours",
            condition_type="time",
            condition_data=b'{"after_hours": true}',
            action_type="voicemail",
        ),
        PresetRule(
            name="Weekend Voicemail",
            description="Send weekend calls to voicemail",
            condition_type="time",
            condition_data=b'{"days": [0, 6]}',
            action_type="voicemail",
        ),
        PresetRule(
            name="Business Hours Ring",
            description="Ring devices during business hours",
            condition_type="time",
            condition_data=b'{"business_hours": true}',
            action_type="ring",
            action_data=b'{"timeout": 30}',
        ),
    ]
