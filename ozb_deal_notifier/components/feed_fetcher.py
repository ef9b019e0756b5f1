"""
Feed fetching for the OzBargain Deal Notifier.

Fetches the raw RSS document over HTTP. Failures are raised as FetchError so
the caller can abort the run without touching stored state; the next
scheduled run retries from the same baseline.
"""

import logging
from datetime import datetime
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..models.config import DEFAULT_USER_AGENT
from ..utils.error_handling import FetchError

logger = logging.getLogger(__name__)

FEED_ACCEPT = "application/rss+xml, application/xml;q=0.9, */*;q=0.8"


class FeedFetcher:
    """Retrieves the feed document with a shared HTTP session."""

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: int = 30,
        max_retries: int = 2,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize feed fetcher.

        Args:
            user_agent: User-Agent header sent with every request
            timeout: Request timeout in seconds
            max_retries: Transport-level retries for transient statuses
            session: Pre-built session, mainly for tests
        """
        self.timeout = timeout
        self.last_fetch_time: Optional[datetime] = None

        if session is None:
            session = requests.Session()
            retry_strategy = Retry(
                total=max_retries,
                backoff_factor=1,
                status_forcelist=[429, 500, 502, 503, 504],
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            session.mount("http://", adapter)
            session.mount("https://", adapter)

        self.session = session
        self.session.headers.update({"User-Agent": user_agent, "Accept": FEED_ACCEPT})

    def fetch(self, url: str) -> str:
        """
        Fetch feed content.

        Args:
            url: Feed URL

        Returns:
            Feed content as string

        Raises:
            FetchError: On network failure or a non-2xx status
        """
        logger.debug(f"Fetching RSS feed: {url}")

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise FetchError(f"RSS fetch timed out: {url}") from e
        except requests.exceptions.RequestException as e:
            raise FetchError(f"RSS fetch failed: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.warning(f"HTTP error {response.status_code} for feed {url}")
            raise FetchError(
                f"RSS fetch failed: {response.status_code}",
                status=response.status_code,
            )

        self.last_fetch_time = datetime.now()
        return response.text
