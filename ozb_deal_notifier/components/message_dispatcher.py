"""
Message dispatching components for the OzBargain Deal Notifier.

This module posts formatted alerts to Discord webhooks (the configured
channel webhook and interaction follow-up webhooks) with retry logic.
Failures are reported as DeliveryResult objects rather than raised, so a
failed send never interrupts the caller's bookkeeping.
"""

import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..models.alert import FormattedAlert
from ..models.delivery import DeliveryResult
from ..utils.error_handling import DeliveryError

logger = logging.getLogger(__name__)


class BaseMessageDispatcher(ABC):
    """Base class for message dispatchers with common retry logic."""

    def __init__(self, max_retries: int = 2, retry_delay: float = 1.0, timeout: int = 30):
        """
        Initialize base dispatcher.

        Args:
            max_retries: Maximum number of retry attempts
            retry_delay: Initial delay between retries in seconds
            timeout: Request timeout in seconds
        """
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session with retry configuration."""
        session = requests.Session()

        retry_strategy = Retry(
            total=self.max_retries,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "POST"],
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    def send_alert(self, alert: FormattedAlert) -> DeliveryResult:
        """
        Send alert with retry logic.

        Args:
            alert: Formatted alert to send

        Returns:
            DeliveryResult: Result of delivery attempt
        """
        return self._deliver(lambda: self._send_message(alert))

    def _deliver(self, send: Callable[[], None]) -> DeliveryResult:
        start_time = datetime.now()
        last_error = None
        status_code = None

        for attempt in range(self.max_retries + 1):
            try:
                send()

                delivery_time = datetime.now()
                logger.debug(
                    f"Alert sent in {(delivery_time - start_time).total_seconds():.2f}s"
                )
                return DeliveryResult(
                    success=True, delivery_time=delivery_time, error_message=None
                )

            except Exception as e:
                last_error = str(e)
                status_code = getattr(e, "status", None)
                logger.warning(f"Send attempt {attempt + 1} failed: {last_error}")

                if not self._is_retryable(e):
                    break

                # Don't sleep after the last attempt
                if attempt < self.max_retries:
                    sleep_time = self.retry_delay * (2**attempt)
                    logger.info(f"Retrying in {sleep_time:.1f} seconds...")
                    time.sleep(sleep_time)

        error_msg = f"Delivery failed: {last_error}"
        logger.error(error_msg)

        return DeliveryResult(
            success=False,
            delivery_time=datetime.now(),
            error_message=error_msg,
            status_code=status_code,
        )

    @staticmethod
    def _is_retryable(error: Exception) -> bool:
        """Client errors other than rate limiting will not succeed on retry."""
        if isinstance(error, ValueError):
            return False
        status = getattr(error, "status", None)
        if status is None:
            return True
        return status == 429 or status >= 500

    @abstractmethod
    def _send_message(self, alert: FormattedAlert) -> None:
        """
        Platform-specific message sending implementation.

        Raises:
            Exception: If sending fails
        """


class DiscordWebhookDispatcher(BaseMessageDispatcher):
    """Discord webhook message dispatcher."""

    def __init__(
        self,
        webhook_url: str,
        max_retries: int = 2,
        retry_delay: float = 1.0,
        timeout: int = 30,
    ):
        """
        Initialize Discord dispatcher.

        Args:
            webhook_url: Discord channel webhook URL
            max_retries: Maximum number of retry attempts
            retry_delay: Initial delay between retries in seconds
            timeout: Request timeout in seconds
        """
        super().__init__(max_retries, retry_delay, timeout)
        self.webhook_url = webhook_url

    def _send_message(self, alert: FormattedAlert) -> None:
        """Send message via the channel webhook."""
        self._post(self.webhook_url, alert)

    def send_followup(self, url: str, alert: FormattedAlert) -> DeliveryResult:
        """Post a follow-up message to an interaction webhook."""
        return self._deliver(lambda: self._post(url, alert))

    def _post(self, url: str, alert: FormattedAlert) -> None:
        alert.validate()

        response = self.session.post(url, json=alert.to_payload(), timeout=self.timeout)
        if not 200 <= response.status_code < 300:
            raise DeliveryError(
                f"Discord webhook failed: {response.status_code} {response.text}",
                status=response.status_code,
            )

        logger.debug("Message sent to Discord webhook")
