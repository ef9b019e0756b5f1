"""
Alert formatting models.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class FormattedAlert:
    """One outbound webhook message ready for delivery."""

    content: str = ""
    embeds: List[Dict[str, Any]] = field(default_factory=list)
    allowed_mentions: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        """Build the JSON body for the webhook, omitting empty parts."""
        payload: Dict[str, Any] = {}
        if self.content:
            payload["content"] = self.content
        if self.embeds:
            payload["embeds"] = self.embeds
        if self.allowed_mentions:
            payload["allowed_mentions"] = self.allowed_mentions
        return payload

    def validate(self) -> bool:
        """Validate formatted alert data against Discord message limits."""
        if not self.content.strip() and not self.embeds:
            raise ValueError("alert needs content or at least one embed")

        if len(self.content) > 2000:
            raise ValueError("content too long (max 2000 characters)")

        if len(self.embeds) > 10:
            raise ValueError("too many embeds (max 10 per message)")

        return True
