"""
Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the OzBargain Deal Notifier test suite.
"""

import pytest
from unittest.mock import Mock
from datetime import datetime, timezone
from pathlib import Path
import tempfile

from ozb_deal_notifier.models.config import NotifierConfig
from ozb_deal_notifier.models.deal import DealRecord, Pricing, VendorMeta
from ozb_deal_notifier.models.delivery import DeliveryResult
from ozb_deal_notifier.services.state_store import InMemoryStateStore


def make_record(guid, title=None, description="", price=None, original=None, discount=None):
    """Build a DealRecord with optional pricing for tests."""
    pricing = None
    if price is not None:
        pricing = Pricing(
            deal_price=price, original_price=original, discount_percent=discount
        )
    return DealRecord(
        title=title or f"Deal {guid}",
        link=f"https://www.ozbargain.com.au/node/{guid}",
        guid=guid,
        published_at="Mon, 01 Jan 2024 12:00:00 +1100",
        description=description,
        pricing=pricing,
    )


def build_feed(*guids):
    """Minimal RSS document with one item per guid, newest first."""
    items = "".join(
        f"""
        <item>
            <title>Deal {guid} $10 (was $20)</title>
            <link>https://www.ozbargain.com.au/node/{guid}</link>
            <guid isPermaLink="false">{guid} at https://www.ozbargain.com.au</guid>
            <description>Deal {guid} description</description>
            <pubDate>Mon, 01 Jan 2024 12:00:00 +1100</pubDate>
        </item>"""
        for guid in guids
    )
    return f'<?xml version="1.0"?><rss version="2.0"><channel>{items}</channel></rss>'


# Test data fixtures
@pytest.fixture
def sample_feed_xml():
    """An OzBargain-style feed with vendor metadata, CDATA and a broken entry."""
    return """<?xml version="1.0" encoding="UTF-8"?>
    <rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/"
         xmlns:ozb="https://www.ozbargain.com.au">
        <channel>
            <title>OzBargain</title>
            <link>https://www.ozbargain.com.au</link>
            <item>
                <title>Sony WH-1000XM5 Headphones $399 (was $549) @ JB Hi-Fi</title>
                <link>https://www.ozbargain.com.au/node/800001</link>
                <guid isPermaLink="false">800001 at https://www.ozbargain.com.au</guid>
                <description><![CDATA[<p>Great price on <b>noise cancelling</b> headphones.</p>
                <img src="https://files.ozbargain.com.au/n/01/800001.jpg" alt=""/>]]></description>
                <pubDate>Mon, 01 Jan 2024 12:30:00 +1100</pubDate>
                <category>Electrical &amp; Electronics</category>
                <category>Audio</category>
                <media:thumbnail url="https://files.ozbargain.com.au/n/01/800001t.jpg"/>
                <ozb:meta comment-count="42" click-count="1000" expiry="2024-01-31"
                    url="https://www.jbhifi.com.au/sony" votes-pos="120" votes-neg="3"
                    image="https://files.ozbargain.com.au/n/01/800001m.jpg"/>
            </item>
            <item>
                <title>Free Coffee at 7-Eleven</title>
                <link>https://www.ozbargain.com.au/node/800000</link>
                <guid isPermaLink="false">800000 at https://www.ozbargain.com.au</guid>
                <description>Grab a free small coffee &amp; enjoy</description>
                <pubDate>Mon, 01 Jan 2024 11:00:00 +1100</pubDate>
                <ozb:meta comment-count="n/a" votes-pos="15" votes-neg=""/>
            </item>
            <item>
                <title></title>
                <link>https://www.ozbargain.com.au/node/799999</link>
                <guid>799999 at https://www.ozbargain.com.au</guid>
            </item>
            <item>
                <title>Link Only Deal $5</title>
                <link>https://www.ozbargain.com.au/node/799998</link>
            </item>
        </channel>
    </rss>"""


@pytest.fixture
def sample_record():
    """Create a sample DealRecord for testing."""
    return DealRecord(
        title="Sony WH-1000XM5 Headphones $399 (was $549) @ JB Hi-Fi",
        link="https://www.ozbargain.com.au/node/800001",
        guid="800001 at https://www.ozbargain.com.au",
        published_at="Mon, 01 Jan 2024 12:30:00 +1100",
        description="Great price on noise cancelling headphones.",
        image="https://files.ozbargain.com.au/n/01/800001t.jpg",
        categories=["Electrical & Electronics", "Audio"],
        vendor_meta=VendorMeta(
            url="https://www.jbhifi.com.au/sony",
            votes_pos=120,
            votes_neg=3,
            comment_count=42,
            click_count=1000,
            expiry="2024-01-31",
        ),
        pricing=Pricing(deal_price=399.0, original_price=549.0, discount_percent=27),
    )


@pytest.fixture
def sample_config():
    """Create a sample NotifierConfig for testing."""
    return NotifierConfig(
        discord_webhook_url="https://discord.com/api/webhooks/1/abc",
        discord_user_id="123456789",
        log_dir=None,
    )


# Mock fixtures
@pytest.fixture
def memory_store():
    """Create an empty in-memory state store."""
    return InMemoryStateStore()


@pytest.fixture
def mock_fetcher():
    """Create a mock feed fetcher returning an empty feed."""
    fetcher = Mock()
    fetcher.fetch.return_value = build_feed()
    return fetcher


@pytest.fixture
def mock_message_dispatcher():
    """Create a mock message dispatcher for testing."""
    dispatcher = Mock()
    dispatcher.send_alert.return_value = DeliveryResult(
        success=True, delivery_time=datetime.now(timezone.utc), error_message=None
    )
    dispatcher.send_followup.return_value = DeliveryResult(
        success=True, delivery_time=datetime.now(timezone.utc), error_message=None
    )
    return dispatcher


# Temporary directory fixtures
@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        # Add unit marker to all tests by default
        if not any(
            marker.name in ["integration", "slow"] for marker in item.iter_markers()
        ):
            item.add_marker(pytest.mark.unit)

        if "integration" in item.name.lower():
            item.add_marker(pytest.mark.slow)
