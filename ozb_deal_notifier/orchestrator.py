"""
Run orchestration for the OzBargain Deal Notifier.

This module provides the central coordination point for one pipeline run:
fetch, parse, select new deals, filter, deliver and persist state. It also
builds the summary and slash-command replies, which share the fetch, parse
and filter steps but never touch novelty state.
"""

import asyncio
from functools import partial
from typing import List, Optional

from .components.alert_formatter import AlertFormatter
from .components.deal_parser import DealParser
from .components.feed_fetcher import FeedFetcher
from .components.filter_engine import FilterEngine
from .components.message_dispatcher import DiscordWebhookDispatcher
from .components.novelty_tracker import NoveltyTracker
from .interfaces import IDealParser, IFeedFetcher, IFollowUpSender, IMessageDispatcher, IStateStore
from .models.config import NotifierConfig
from .models.deal import DealRecord
from .models.delivery import RunResult
from .models.interaction import Interaction
from .models.state import NoveltyState
from .services.state_store import NoveltyStateRepository
from .utils.error_handling import (
    ConfigurationError,
    ErrorCategory,
    ErrorTracker,
    FetchError,
    StateError,
)
from .utils.logging import get_logger


class DealNotifierService:
    """
    Coordinates the components of one notifier deployment.

    Runs that read and write novelty state are serialised through an
    asyncio lock when invoked via the async entry points; the synchronous
    methods assume the caller does not overlap them.
    """

    def __init__(
        self,
        config: NotifierConfig,
        store: IStateStore,
        fetcher: Optional[IFeedFetcher] = None,
        dispatcher: Optional[IMessageDispatcher] = None,
        followup_sender: Optional[IFollowUpSender] = None,
        parser: Optional[IDealParser] = None,
        formatter: Optional[AlertFormatter] = None,
    ):
        """
        Initialize the service.

        Args:
            config: Immutable configuration
            store: Key-value store holding novelty state
            fetcher: Feed fetcher; built from config when omitted
            dispatcher: Channel webhook dispatcher; built from config when omitted
            followup_sender: Interaction follow-up sender; defaults to the dispatcher
            parser: Feed parser
            formatter: Message formatter
        """
        self.config = config
        self.logger = get_logger("orchestrator")
        self.error_tracker = ErrorTracker()

        self.fetcher = fetcher or FeedFetcher(
            user_agent=config.user_agent, timeout=config.request_timeout
        )
        if dispatcher is None and config.discord_webhook_url:
            dispatcher = DiscordWebhookDispatcher(
                config.discord_webhook_url, timeout=config.request_timeout
            )
        self.dispatcher = dispatcher
        if followup_sender is None:
            if isinstance(dispatcher, DiscordWebhookDispatcher):
                followup_sender = dispatcher
            else:
                followup_sender = DiscordWebhookDispatcher(
                    "", timeout=config.request_timeout
                )
        self.followup_sender = followup_sender

        self.parser = parser or DealParser()
        self.formatter = formatter or AlertFormatter(config.discord_user_id)
        self.filter_engine = FilterEngine(config.criteria)
        self.tracker = NoveltyTracker(
            cap=config.seen_guids_limit, send_on_first_run=config.first_run_send
        )
        self.repository = NoveltyStateRepository(store)

        self._run_lock = asyncio.Lock()

    def fetch_snapshot(self) -> List[DealRecord]:
        """Fetch and parse the feed, newest first."""
        document = self.fetcher.fetch(self.config.rss_url)
        return self.parser.parse(document)

    def _require_webhook(self) -> None:
        if not self.config.discord_webhook_url or self.dispatcher is None:
            raise ConfigurationError("Missing DISCORD_WEBHOOK_URL")

    def run(self, force: bool = False, limit: Optional[int] = None) -> RunResult:
        """
        Announce deals that are new since the last run.

        Args:
            force: Announce the whole feed regardless of stored state
            limit: Cap on the number of deals announced this run

        Returns:
            RunResult describing what was sent
        """
        try:
            self._require_webhook()
            snapshot = self.fetch_snapshot()
        except ConfigurationError as e:
            self.error_tracker.record_error("orchestrator", ErrorCategory.CONFIGURATION, str(e), e)
            return RunResult.failure(str(e))
        except FetchError as e:
            self.error_tracker.record_error(
                "orchestrator", ErrorCategory.NETWORK, str(e), e, {"status": e.status}
            )
            return RunResult.failure(str(e))

        if not snapshot:
            return RunResult.success("No items in feed")

        try:
            state = self._load_state()
            selection = self.tracker.select(snapshot, state, force=force)

            if selection.bootstrap:
                self._save_state(selection.next_state)
                self.logger.info(
                    "First run: stored latest guid", extra={"last_guid": snapshot[0].guid}
                )
                return RunResult.success("First run: stored latest guid, no send")

            if not selection.new_records:
                self._save_state(selection.next_state)
                return RunResult.success("No new items")
        except StateError as e:
            return RunResult.failure(str(e))

        batch = selection.new_records + self._history_padding(
            snapshot, selection.new_records
        )
        to_send = self.filter_engine.filter(batch)
        if limit and limit > 0:
            to_send = to_send[:limit]

        failures = []
        # Deliver oldest first
        for record in reversed(to_send):
            result = self.dispatcher.send_alert(self.formatter.format_new_deal(record))
            if not result.success:
                failures.append(f"{record.guid}: {result.error_message}")
                self.error_tracker.record_error(
                    "orchestrator",
                    ErrorCategory.MESSAGE_DELIVERY,
                    result.error_message or "delivery failed",
                    context={"guid": record.guid},
                )

        # Delivery failures never hold the cursor back
        state_error = None
        try:
            self._save_state(selection.next_state)
        except StateError as e:
            state_error = str(e)

        sent = len(to_send) - len(failures)
        self.logger.info(
            "Run complete",
            extra={
                "new_items": len(selection.new_records),
                "filtered": len(to_send),
                "sent": sent,
                "failed": len(failures),
                "forced": selection.forced,
            },
        )

        if failures or state_error:
            message = f"Sent {sent} of {len(to_send)} new items"
            if failures:
                message += f"; delivery failed for {'; '.join(failures)}"
            if state_error:
                message += f"; {state_error}"
            return RunResult.failure(message, sent=sent, failed=len(failures))
        return RunResult.success(f"Sent {sent} new items", sent=sent)

    def _load_state(self) -> NoveltyState:
        try:
            return self.repository.load()
        except OSError as e:
            raise self._state_error("Could not load state", e) from e

    def _save_state(self, state: NoveltyState) -> None:
        try:
            self.repository.save(state)
        except OSError as e:
            raise self._state_error("Could not store state", e) from e

    def _state_error(self, prefix: str, error: OSError) -> StateError:
        message = f"{prefix}: {error}"
        self.error_tracker.record_error("orchestrator", ErrorCategory.STATE, message, error)
        self.logger.error(message, extra={"error": str(error)})
        return StateError(message)

    def _history_padding(
        self, snapshot: List[DealRecord], new_records: List[DealRecord]
    ) -> List[DealRecord]:
        """Older records appended to a batch when history_items is configured."""
        count = max(0, self.config.history_items)
        if not count:
            return []
        new_guids = {record.guid for record in new_records}
        return [r for r in snapshot if r.guid not in new_guids][:count]

    def run_summary(self, label: str = "scheduled", limit: Optional[int] = None) -> RunResult:
        """
        Send the top of the filtered feed as one digest.

        Args:
            label: "manual" for on-demand summaries, anything else when scheduled
            limit: Number of records, defaults to the configured summary size

        Returns:
            RunResult describing what was sent
        """
        try:
            self._require_webhook()
            snapshot = self.fetch_snapshot()
        except (ConfigurationError, FetchError) as e:
            category = (
                ErrorCategory.CONFIGURATION
                if isinstance(e, ConfigurationError)
                else ErrorCategory.NETWORK
            )
            self.error_tracker.record_error("orchestrator", category, str(e), e)
            return RunResult.failure(str(e))

        if not snapshot:
            return RunResult.success("No items in feed")

        size = limit if limit and limit > 0 else self.config.summary_batch_size
        records = self.filter_engine.filter(snapshot)[:size]
        if not records:
            return RunResult.success("No items after filters")

        for alert in self.formatter.format_summary(records, manual=label == "manual"):
            result = self.dispatcher.send_alert(alert)
            if not result.success:
                self.error_tracker.record_error(
                    "orchestrator",
                    ErrorCategory.MESSAGE_DELIVERY,
                    result.error_message or "delivery failed",
                )
                return RunResult.failure(result.error_message or "Summary delivery failed")

        self.logger.info("Summary sent", extra={"items": len(records), "label": label})
        return RunResult.success(f"Summary sent ({len(records)} items)", sent=len(records))

    def handle_command(self, interaction: Interaction) -> None:
        """
        Answer the /ozb slash-command through the interaction follow-up webhook.

        Errors are reported back to the channel rather than raised. An
        interaction without a token cannot be answered and is dropped.
        """
        try:
            interaction.validate()
        except ValueError as e:
            self.error_tracker.record_error(
                "orchestrator", ErrorCategory.PARSING, f"Unusable interaction: {e}", e
            )
            self.logger.warning("Dropping interaction", extra={"error": str(e)})
            return

        url = interaction.followup_url
        try:
            records = self.filter_engine.filter(self.fetch_snapshot())
            alerts = self.formatter.format_command_response(
                records[: self.config.command_batch_size]
            )
            for alert in alerts:
                result = self.followup_sender.send_followup(url, alert)
                if not result.success:
                    raise RuntimeError(result.error_message)
        except Exception as e:
            self.error_tracker.record_error(
                "orchestrator", ErrorCategory.SYSTEM, f"Slash-command failed: {e}", e
            )
            self.followup_sender.send_followup(url, self.formatter.format_error(str(e)))

    async def run_async(self, force: bool = False, limit: Optional[int] = None) -> RunResult:
        """Run in a worker thread, never overlapping another stateful run."""
        async with self._run_lock:
            return await asyncio.get_running_loop().run_in_executor(
                None, partial(self.run, force=force, limit=limit)
            )

    async def run_summary_async(
        self, label: str = "scheduled", limit: Optional[int] = None
    ) -> RunResult:
        return await asyncio.get_running_loop().run_in_executor(
            None, partial(self.run_summary, label=label, limit=limit)
        )

    async def handle_command_async(self, interaction: Interaction) -> None:
        await asyncio.get_running_loop().run_in_executor(
            None, self.handle_command, interaction
        )

    def get_status(self) -> dict:
        """Current stored state and error statistics."""
        state = self.repository.load()
        return {
            "last_guid": state.last_guid,
            "seen_guids": len(state.seen_guids),
            "errors": self.error_tracker.get_error_stats(),
        }
