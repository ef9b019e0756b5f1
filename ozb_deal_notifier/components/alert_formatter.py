"""
Alert formatting component for the OzBargain Deal Notifier.

This module turns deal records into Discord webhook messages: a detailed
embed for each newly detected deal, and numbered digest embeds for the
scheduled summary and the /ozb slash-command.
"""

from datetime import timezone
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser

from ..models.alert import FormattedAlert
from ..models.deal import DealRecord

# Discord allows at most 10 embeds per message
MAX_EMBEDS_PER_MESSAGE = 10

NEW_DEAL_COLOR = 0xED4245
DIGEST_COLOR = 0xFF6A00

NO_MENTIONS = {"parse": []}


def truncate(value: Optional[str], max_length: int) -> str:
    """Shorten text to max_length characters, ending with an ellipsis."""
    if not value:
        return ""
    if len(value) > max_length:
        return f"{value[: max_length - 3]}..."
    return value


def format_posted_time(published_at: str) -> str:
    """Render a feed timestamp as 'YYYY-MM-DD HH:MM' in UTC, or return it as-is."""
    try:
        posted = date_parser.parse(published_at)
    except (ValueError, OverflowError):
        return published_at

    if posted.tzinfo is not None:
        posted = posted.astimezone(timezone.utc)
    return posted.strftime("%Y-%m-%d %H:%M")


def format_money(amount: float) -> str:
    return f"${amount:.2f}"


class AlertFormatter:
    """Formats deal records into Discord webhook messages."""

    def __init__(self, mention_user_id: Optional[str] = None):
        """
        Initialize the alert formatter.

        Args:
            mention_user_id: Discord user to mention in webhook messages
        """
        self.mention_user_id = mention_user_id

    @property
    def mention(self) -> str:
        return f"<@{self.mention_user_id}> " if self.mention_user_id else ""

    def format_new_deal(self, record: DealRecord) -> FormattedAlert:
        """
        Format a single newly detected deal.

        Args:
            record: The deal to announce

        Returns:
            FormattedAlert with one detailed embed
        """
        posted = (
            f" - Posted: {format_posted_time(record.published_at)}"
            if record.published_at
            else ""
        )

        embed: Dict[str, Any] = {
            "title": truncate(record.title, 256),
            "url": record.link,
            "description": truncate(record.description, 200),
            "color": NEW_DEAL_COLOR,
        }
        fields = self._detail_fields(record)
        if fields:
            embed["fields"] = fields
        if record.image:
            embed["thumbnail"] = {"url": record.image}
        if record.published_at:
            embed["footer"] = {"text": record.published_at}

        return FormattedAlert(
            content=f"{self.mention}🚨 **NEW DEAL DETECTED**{posted}",
            embeds=[embed],
        )

    def format_summary(
        self, records: List[DealRecord], manual: bool = False
    ) -> List[FormattedAlert]:
        """
        Format the front page summary, oldest first.

        Args:
            records: Summary records, newest first
            manual: Whether the summary was requested by hand

        Returns:
            One message per batch of at most ten embeds
        """
        label = "Front Page Summary (manual)" if manual else "Front Page Summary"
        return self._format_digest(
            list(reversed(records)),
            header=f"{self.mention}📊 **{label}**",
        )

    def format_command_response(
        self, records: List[DealRecord]
    ) -> List[FormattedAlert]:
        """
        Format the /ozb slash-command reply, oldest first.

        Args:
            records: Latest records, newest first

        Returns:
            Follow-up messages; a single "No items found." when empty
        """
        if not records:
            return [
                FormattedAlert(content="No items found.", allowed_mentions=NO_MENTIONS)
            ]

        return self._format_digest(
            list(reversed(records)),
            header="🔥 **Latest OzBargain Deals**",
            allowed_mentions=NO_MENTIONS,
        )

    def format_error(self, message: str) -> FormattedAlert:
        """Follow-up message reporting a failed command."""
        return FormattedAlert(
            content=truncate(f"Error: {message}", 2000), allowed_mentions=NO_MENTIONS
        )

    def _format_digest(
        self,
        records: List[DealRecord],
        header: str,
        allowed_mentions: Optional[Dict[str, Any]] = None,
    ) -> List[FormattedAlert]:
        embeds = [
            self._digest_embed(index, record)
            for index, record in enumerate(records, start=1)
        ]

        alerts = []
        for start in range(0, len(embeds), MAX_EMBEDS_PER_MESSAGE):
            alerts.append(
                FormattedAlert(
                    content=header if start == 0 else "",
                    embeds=embeds[start : start + MAX_EMBEDS_PER_MESSAGE],
                    allowed_mentions=dict(allowed_mentions or {}),
                )
            )
        return alerts

    def _digest_embed(self, index: int, record: DealRecord) -> Dict[str, Any]:
        fields = []
        pricing = record.pricing
        meta = record.vendor_meta

        if pricing is not None:
            fields.append(
                {
                    "name": "💰 Price",
                    "value": format_money(pricing.deal_price),
                    "inline": True,
                }
            )
            if pricing.discount_percent:
                fields.append(
                    {
                        "name": "📊 Discount",
                        "value": f"{pricing.discount_percent}%",
                        "inline": True,
                    }
                )

        if meta is not None and meta.votes_pos is not None:
            negative = meta.votes_neg or 0
            votes = f"+{meta.votes_pos}" + (f" / -{negative}" if negative > 0 else "")
            fields.append({"name": "👍 Votes", "value": votes, "inline": True})

        if meta is not None and meta.comment_count is not None:
            fields.append(
                {"name": "💬 Comments", "value": str(meta.comment_count), "inline": True}
            )

        embed: Dict[str, Any] = {
            "title": f"{index}. {truncate(record.title, 200)}",
            "url": record.link,
            "description": truncate(record.description, 150),
            "color": DIGEST_COLOR,
        }
        if record.image:
            embed["thumbnail"] = {"url": record.image}
        if fields:
            embed["fields"] = fields
        return embed

    def _detail_fields(self, record: DealRecord) -> List[Dict[str, Any]]:
        fields = []
        pricing = record.pricing
        meta = record.vendor_meta

        if pricing is not None:
            fields.append(
                {
                    "name": "Deal Price",
                    "value": format_money(pricing.deal_price),
                    "inline": True,
                }
            )
            if pricing.original_price is not None:
                fields.append(
                    {
                        "name": "Original Price",
                        "value": format_money(pricing.original_price),
                        "inline": True,
                    }
                )
            if pricing.discount_percent is not None:
                fields.append(
                    {
                        "name": "Discount",
                        "value": f"{pricing.discount_percent}%",
                        "inline": True,
                    }
                )

        if meta is not None and meta.url:
            fields.append({"name": "Store Link", "value": meta.url, "inline": False})

        if record.categories:
            fields.append(
                {
                    "name": "Category",
                    "value": ", ".join(record.categories[:4]),
                    "inline": True,
                }
            )

        if meta is not None and meta.comment_count is not None:
            fields.append(
                {"name": "Comments", "value": str(meta.comment_count), "inline": True}
            )

        if meta is not None and meta.votes_pos is not None:
            negative = meta.votes_neg if meta.votes_neg is not None else 0
            fields.append(
                {
                    "name": "Votes",
                    "value": f"+{meta.votes_pos} / -{negative}",
                    "inline": True,
                }
            )

        if meta is not None and meta.expiry:
            fields.append({"name": "Expiry", "value": meta.expiry, "inline": True})

        return fields
