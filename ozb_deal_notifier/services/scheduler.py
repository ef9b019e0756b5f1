"""
Periodic triggers for the OzBargain Deal Notifier.

Polls the feed every poll_interval seconds and sends a front-page summary
once during each configured UTC hour. Every triggered run is awaited
before the loop continues, so runs never overlap.
"""

import asyncio
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from ..utils.logging import get_logger

TICK_SECONDS = 30


class SummarySchedule:
    """Hour-of-day schedule for summaries, evaluated in UTC."""

    def __init__(self, hours: Iterable[int]):
        self.hours = frozenset(hours)

    def is_due(self, now: datetime, last_fired: Optional[datetime] = None) -> bool:
        """
        Whether a summary should fire at ``now``.

        Any time within a configured hour is due, so a check delayed past
        minute 0 by a slow run still fires. Each hour slot fires at most once.
        """
        now = _as_utc(now)
        if now.hour not in self.hours:
            return False
        if last_fired is None:
            return True
        return _slot(_as_utc(last_fired)) != _slot(now)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _slot(value: datetime) -> tuple:
    return (value.year, value.month, value.day, value.hour)


class Scheduler:
    """Async loop driving polling runs and scheduled summaries."""

    def __init__(
        self,
        service,
        poll_interval: int,
        summary_hours: Iterable[int],
        tick: float = TICK_SECONDS,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        """
        Initialize scheduler.

        Args:
            service: DealNotifierService exposing run_async/run_summary_async
            poll_interval: Seconds between polling runs
            summary_hours: UTC hours at which summaries are sent
            tick: Seconds between schedule checks
            clock: Source of the current UTC time
        """
        self.service = service
        self.poll_interval = poll_interval
        self.schedule = SummarySchedule(summary_hours)
        self.tick = min(tick, poll_interval)
        self.clock = clock
        self.logger = get_logger("scheduler")

        self._running = False
        self._shutdown_event = asyncio.Event()
        self._last_poll: Optional[datetime] = None
        self._last_summary: Optional[datetime] = None

    def poll_due(self, now: datetime) -> bool:
        if self._last_poll is None:
            return True
        return (now - self._last_poll).total_seconds() >= self.poll_interval

    async def run_once(self) -> None:
        """Fire whatever is due at the current time."""
        now = self.clock()

        if self.poll_due(now):
            self._last_poll = now
            result = await self.service.run_async()
            self.logger.info("Scheduled run finished", extra=result.to_dict())
            now = self.clock()

        if self.schedule.is_due(now, self._last_summary):
            self._last_summary = now
            result = await self.service.run_summary_async(label="scheduled")
            self.logger.info("Scheduled summary finished", extra=result.to_dict())

    async def start(self) -> None:
        """Run until stop() is called."""
        if self._running:
            self.logger.warning("Scheduler is already running")
            return

        self._running = True
        self.logger.info(
            "Starting scheduler",
            extra={
                "poll_interval": self.poll_interval,
                "summary_hours": sorted(self.schedule.hours),
            },
        )

        try:
            while self._running and not self._shutdown_event.is_set():
                try:
                    await self.run_once()
                except Exception as e:
                    self.logger.error(
                        f"Error in scheduler loop: {e}", extra={"error": str(e)}, exc_info=True
                    )

                try:
                    await asyncio.wait_for(self._shutdown_event.wait(), timeout=self.tick)
                except asyncio.TimeoutError:
                    pass
        finally:
            self._running = False

    async def stop(self) -> None:
        """Stop the loop after the current run completes."""
        self._running = False
        self._shutdown_event.set()
        self.logger.info("Scheduler stopped")

    @property
    def running(self) -> bool:
        return self._running
