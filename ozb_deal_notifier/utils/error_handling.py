"""
Error types and error tracking for the OzBargain Deal Notifier.

Failures are either fatal for a run (configuration, fetch) or recorded and
tolerated (delivery). Every failure surfaces as a descriptive message.
"""

import traceback
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .logging import get_logger


class NotifierError(Exception):
    """Base class for all notifier errors."""


class ConfigurationError(NotifierError):
    """A required setting is missing or invalid."""


class FetchError(NotifierError):
    """The feed could not be fetched."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class DeliveryError(NotifierError):
    """An outbound notification was rejected or could not be sent."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class StateError(NotifierError):
    """Novelty state could not be read or stored."""


class ErrorCategory(Enum):
    """Error categories for classification."""

    CONFIGURATION = "configuration"
    NETWORK = "network"
    PARSING = "parsing"
    MESSAGE_DELIVERY = "message_delivery"
    STATE = "state"
    SYSTEM = "system"


@dataclass
class ErrorInfo:
    """Information about an error occurrence."""

    timestamp: datetime
    component: str
    category: ErrorCategory
    message: str
    exception_type: str
    traceback: str
    context: Dict[str, Any] = field(default_factory=dict)


class ErrorTracker:
    """
    Keeps a bounded history of recent errors and per-key counts.
    """

    def __init__(self, max_errors: int = 200):
        """
        Initialize error tracker.

        Args:
            max_errors: Maximum number of errors to keep in memory
        """
        self.max_errors = max_errors
        self.errors: List[ErrorInfo] = []
        self.error_counts: Dict[str, int] = {}
        self.logger = get_logger("error_tracker")

    def record_error(
        self,
        component: str,
        category: ErrorCategory,
        message: str,
        exception: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> ErrorInfo:
        """
        Record an error occurrence.

        Args:
            component: Component where error occurred
            category: Error category
            message: Error message
            exception: Exception object if available
            context: Additional context information

        Returns:
            ErrorInfo object
        """
        error_info = ErrorInfo(
            timestamp=datetime.now(),
            component=component,
            category=category,
            message=message,
            exception_type=type(exception).__name__ if exception else "Unknown",
            traceback="".join(
                traceback.format_exception(
                    type(exception), exception, exception.__traceback__
                )
            )
            if exception
            else "",
            context=context or {},
        )

        self.errors.append(error_info)
        if len(self.errors) > self.max_errors:
            self.errors.pop(0)

        error_key = f"{component}.{category.value}"
        self.error_counts[error_key] = self.error_counts.get(error_key, 0) + 1

        self.logger.error(
            f"Error recorded: {message}",
            extra={
                "error_component": component,
                "category": category.value,
                "exception_type": error_info.exception_type,
                "context": context,
            },
        )

        return error_info

    def get_error_stats(self) -> Dict[str, Any]:
        """Get error statistics."""
        return {
            "total_errors": len(self.errors),
            "error_counts": self.error_counts.copy(),
            "category_breakdown": {
                category.value: len([e for e in self.errors if e.category == category])
                for category in ErrorCategory
            },
            "last_error": self.errors[-1].message if self.errors else None,
        }

    def get_component_errors(self, component: str, limit: int = 10) -> List[ErrorInfo]:
        """Get recent errors for a specific component."""
        return [e for e in self.errors if e.component == component][-limit:]
