"""
Configuration models for the system.
"""

from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple
from urllib.parse import urlparse

from .filter import FilterCriteria

DEFAULT_RSS_URL = "https://www.ozbargain.com.au/feed"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)
DEFAULT_SUMMARY_HOURS = (2, 5, 8, 11, 14, 17, 20, 23)


@dataclass(frozen=True)
class NotifierConfig:
    """Immutable system configuration passed explicitly to every component."""

    rss_url: str = DEFAULT_RSS_URL
    user_agent: str = DEFAULT_USER_AGENT
    discord_webhook_url: Optional[str] = None
    discord_user_id: Optional[str] = None
    discord_public_key: Optional[str] = None
    keywords_include: FrozenSet[str] = frozenset()
    keywords_exclude: FrozenSet[str] = frozenset()
    min_discount: Optional[float] = None
    max_price: Optional[float] = None
    seen_guids_limit: int = 200
    summary_limit: Optional[int] = None
    first_run_send: bool = False
    history_items: int = 0
    state_file: str = "data/state.json"
    poll_interval: int = 300
    summary_hours: Tuple[int, ...] = DEFAULT_SUMMARY_HOURS
    host: str = "0.0.0.0"
    port: int = 8787
    log_level: str = "INFO"
    log_dir: Optional[str] = "logs"
    request_timeout: int = 30

    @property
    def criteria(self) -> FilterCriteria:
        """Filter criteria derived from this configuration."""
        return FilterCriteria(
            include_keywords=self.keywords_include,
            exclude_keywords=self.keywords_exclude,
            min_discount=self.min_discount,
            max_price=self.max_price,
        )

    @property
    def summary_batch_size(self) -> int:
        """Number of records in a scheduled or manual summary."""
        return self.summary_limit or 10

    @property
    def command_batch_size(self) -> int:
        """Number of records returned by the slash-command."""
        return self.summary_limit or 15

    def validate(self) -> bool:
        """Validate system configuration."""
        parsed_url = urlparse(self.rss_url)
        if parsed_url.scheme not in ["http", "https"] or not parsed_url.netloc:
            raise ValueError(f"RSS URL must be an HTTP(S) URL: {self.rss_url}")

        if self.discord_webhook_url:
            parsed_hook = urlparse(self.discord_webhook_url)
            if parsed_hook.scheme not in ["http", "https"] or not parsed_hook.netloc:
                raise ValueError("Invalid Discord webhook URL format")

        if not isinstance(self.seen_guids_limit, int) or self.seen_guids_limit <= 0:
            raise ValueError("Seen guid limit must be a positive integer")

        if self.summary_limit is not None and self.summary_limit <= 0:
            raise ValueError("Summary limit must be positive")

        if self.history_items < 0:
            raise ValueError("History items cannot be negative")

        if not isinstance(self.poll_interval, int) or self.poll_interval < 60:
            raise ValueError("Polling interval must be at least 60 seconds")

        for hour in self.summary_hours:
            if not (0 <= hour <= 23):
                raise ValueError(f"Summary hour out of range: {hour}")

        if not (0 < self.port < 65536):
            raise ValueError(f"Invalid port: {self.port}")

        self.criteria.validate()

        return True
