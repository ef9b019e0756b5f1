"""
Core components for the OzBargain Deal Notifier.

This module contains the components that fetch and parse the feed, extract
pricing, track novelty, filter deals and format and dispatch messages.
"""

from .alert_formatter import AlertFormatter
from .deal_parser import DealParser
from .feed_fetcher import FeedFetcher
from .feed_scanner import RegexItemScanner
from .filter_engine import FilterEngine
from .message_dispatcher import BaseMessageDispatcher, DiscordWebhookDispatcher
from .novelty_tracker import NoveltySelection, NoveltyTracker, compute_new, next_state
from .price_extractor import PriceExtractor

__all__ = [
    "AlertFormatter",
    "DealParser",
    "FeedFetcher",
    "RegexItemScanner",
    "FilterEngine",
    "BaseMessageDispatcher",
    "DiscordWebhookDispatcher",
    "NoveltySelection",
    "NoveltyTracker",
    "compute_new",
    "next_state",
    "PriceExtractor",
]
