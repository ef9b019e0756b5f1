"""
Novelty state models.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class NoveltyState:
    """What has already been announced, persisted between runs."""

    last_guid: Optional[str] = None
    seen_guids: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when nothing has ever been recorded."""
        return not self.last_guid and not self.seen_guids

    def validate(self, cap: Optional[int] = None) -> bool:
        """Validate the state against the bounded seen-list invariants."""
        if len(set(self.seen_guids)) != len(self.seen_guids):
            raise ValueError("seen_guids must not contain duplicates")

        if cap is not None and len(self.seen_guids) > cap:
            raise ValueError(f"seen_guids exceeds cap of {cap}")

        return True
