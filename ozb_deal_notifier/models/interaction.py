"""
Discord interaction data models.

Only the handful of fields the notifier needs from an inbound
interaction payload are modelled here.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional


class InteractionType(IntEnum):
    """Inbound interaction types."""

    PING = 1
    APPLICATION_COMMAND = 2


class InteractionResponseType(IntEnum):
    """Interaction callback types."""

    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4
    DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5


@dataclass
class Interaction:
    """A parsed Discord interaction."""

    type: int
    application_id: str
    token: str
    command_name: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Interaction":
        data = payload.get("data") or {}
        return cls(
            type=int(payload.get("type", 0)),
            application_id=str(payload.get("application_id", "")),
            token=str(payload.get("token", "")),
            command_name=data.get("name"),
        )

    @property
    def followup_url(self) -> str:
        return (
            f"https://discord.com/api/v10/webhooks/{self.application_id}/{self.token}"
        )

    def validate(self) -> bool:
        """Validate the fields needed to post a follow-up."""
        if not self.application_id or not self.token:
            raise ValueError("Interaction requires application_id and token")
        return True
