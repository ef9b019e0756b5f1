"""
Protocol interfaces for the OzBargain Deal Notifier.

This module defines the protocol interfaces that establish system
boundaries and enable dependency injection throughout the application.
"""

from typing import List, Optional, Protocol

from .models.alert import FormattedAlert
from .models.deal import DealRecord, Pricing
from .models.delivery import DeliveryResult


class IFeedFetcher(Protocol):
    """Protocol for retrieving the raw feed document."""

    def fetch(self, url: str) -> str:
        """Return the feed body, raising FetchError on failure."""
        ...


class IFeedScanner(Protocol):
    """Protocol for splitting a feed document into raw entry blocks."""

    def parse_entries(self, text: str) -> List[str]:
        """Return the markup of each entry in document order."""
        ...


class IPriceExtractor(Protocol):
    """Protocol for deriving pricing from free text."""

    def extract(self, text: str) -> Optional[Pricing]:
        """Return the pricing triple, or None when no price is present."""
        ...


class IDealParser(Protocol):
    """Protocol for parsing a feed document into deal records."""

    def parse(self, raw_document: str) -> List[DealRecord]:
        """Parse a feed document; never raises."""
        ...


class IStateStore(Protocol):
    """Protocol for the small key-value store holding novelty state."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when absent."""
        ...

    def put(self, key: str, value: str) -> None:
        """Store a value."""
        ...


class IMessageDispatcher(Protocol):
    """Protocol for dispatching webhook messages."""

    def send_alert(self, alert: FormattedAlert) -> DeliveryResult:
        """Send an alert to the configured webhook."""
        ...


class IFollowUpSender(Protocol):
    """Protocol for posting interaction follow-up messages."""

    def send_followup(self, url: str, alert: FormattedAlert) -> DeliveryResult:
        """Post a follow-up message to an interaction webhook URL."""
        ...
