"""
Message delivery and run result models.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class DeliveryResult:
    """Result of message delivery attempt."""

    success: bool
    delivery_time: datetime
    error_message: Optional[str]
    status_code: Optional[int] = None

    def validate(self) -> bool:
        """Validate delivery result data."""
        if not isinstance(self.success, bool):
            raise ValueError("success must be a boolean")

        if not isinstance(self.delivery_time, datetime):
            raise ValueError("delivery_time must be a datetime object")

        if self.error_message is not None and not isinstance(self.error_message, str):
            raise ValueError("error_message must be a string or None")

        # Logical validation: if success is False, error_message should be provided
        if not self.success and not self.error_message:
            raise ValueError("error_message should be provided when success is False")

        return True


@dataclass
class RunResult:
    """Outcome of one pipeline invocation."""

    ok: bool
    message: Optional[str] = None
    error: Optional[str] = None
    sent: int = 0
    failed: int = 0

    @classmethod
    def success(cls, message: str, sent: int = 0) -> "RunResult":
        return cls(ok=True, message=message, sent=sent)

    @classmethod
    def failure(cls, error: str, sent: int = 0, failed: int = 0) -> "RunResult":
        return cls(ok=False, error=error, sent=sent, failed=failed)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation used by the HTTP surface."""
        data: Dict[str, Any] = {"ok": self.ok}
        if self.message is not None:
            data["message"] = self.message
        if self.error is not None:
            data["error"] = self.error
        if self.sent or self.failed:
            data["sent"] = self.sent
            data["failed"] = self.failed
        return data
