"""
Deal parsing components for the OzBargain Deal Notifier.

This module turns a raw feed document into an ordered list of DealRecord
objects: field text, categories, images, OzBargain vendor metadata and
embedded pricing. Parsing is pure and tolerant; entries that cannot be
parsed are skipped rather than failing the whole document.
"""

import logging
import math
import re
from typing import List, Optional

from bs4 import BeautifulSoup

from ..interfaces import IFeedScanner, IPriceExtractor
from ..models.deal import DealRecord, VendorMeta
from .feed_scanner import (
    RegexItemScanner,
    get_all_tag_text,
    get_tag_attribute,
    get_tag_attributes,
    get_tag_text,
)
from .price_extractor import PriceExtractor

logger = logging.getLogger(__name__)

WHITESPACE_PATTERN = re.compile(r"\s+")

# Media elements checked for an explicit image, in preference order
MEDIA_IMAGE_TAGS = ["media:thumbnail", "media:content"]
VENDOR_META_TAG = "ozb:meta"


def to_int(value: Optional[str]) -> Optional[int]:
    """Parse a numeric attribute permissively; anything unparsable is None."""
    if value is None or not str(value).strip():
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)


def strip_html(html: str) -> str:
    """Remove markup and collapse whitespace."""
    if not html:
        return ""

    # Only use BeautifulSoup if text actually contains HTML tags
    if "<" in html and ">" in html:
        text = BeautifulSoup(html, "html.parser").get_text(" ")
    else:
        text = html

    return WHITESPACE_PATTERN.sub(" ", text).strip()


def first_image_src(html: str) -> Optional[str]:
    """The src of the first <img> in an HTML fragment."""
    if not html or "<img" not in html.lower():
        return None
    img = BeautifulSoup(html, "html.parser").find("img", src=True)
    if img is None:
        return None
    src = img["src"].strip()
    return src or None


class DealParser:
    """Main deal parser that converts feed entries to DealRecord objects."""

    def __init__(
        self,
        scanner: Optional[IFeedScanner] = None,
        price_extractor: Optional[IPriceExtractor] = None,
    ):
        """
        Initialize deal parser.

        Args:
            scanner: Splits the document into entry blocks
            price_extractor: Derives pricing from title and description
        """
        self.scanner = scanner or RegexItemScanner()
        self.price_extractor = price_extractor or PriceExtractor()

    def parse(self, raw_document: str) -> List[DealRecord]:
        """
        Parse a feed document into deal records in document order.

        Args:
            raw_document: Raw feed text

        Returns:
            Records with non-empty title, link and guid
        """
        records = []
        for index, block in enumerate(self.scanner.parse_entries(raw_document)):
            try:
                record = self.parse_entry(block)
            except Exception as e:
                logger.debug(f"Skipping unparsable feed entry #{index}: {e}")
                continue

            if record is None:
                logger.debug(f"Skipping incomplete feed entry #{index}")
                continue

            records.append(record)

        logger.debug(f"Parsed {len(records)} deal records from feed")
        return records

    def parse_entry(self, block: str) -> Optional[DealRecord]:
        """
        Parse a single entry block.

        Args:
            block: Inner markup of one feed entry

        Returns:
            DealRecord, or None when title, link or guid is missing
        """
        title = get_tag_text(block, "title").strip()
        link = get_tag_text(block, "link").strip()
        guid = (get_tag_text(block, "guid") or link).strip()
        if not (title and link and guid):
            return None

        raw_description = get_tag_text(block, "description")
        description = strip_html(raw_description)
        vendor_meta = self._parse_vendor_meta(block)

        return DealRecord(
            title=title,
            link=link,
            guid=guid,
            published_at=get_tag_text(block, "pubDate").strip(),
            description=description,
            image=self._resolve_image(block, raw_description, vendor_meta),
            categories=get_all_tag_text(block, "category"),
            vendor_meta=vendor_meta,
            pricing=self.price_extractor.extract(f"{title} {description}"),
        )

    def _resolve_image(
        self,
        block: str,
        raw_description: str,
        vendor_meta: Optional[VendorMeta],
    ) -> Optional[str]:
        """Pick the deal image: media element, then description, then metadata."""
        for tag in MEDIA_IMAGE_TAGS:
            url = get_tag_attribute(block, tag, "url")
            if url:
                return url

        description_image = first_image_src(raw_description)
        if description_image:
            return description_image

        if vendor_meta is not None and vendor_meta.image:
            return vendor_meta.image

        return None

    def _parse_vendor_meta(self, block: str) -> Optional[VendorMeta]:
        """Parse the ozb:meta element; numeric attributes parse permissively."""
        attrs = get_tag_attributes(block, VENDOR_META_TAG)
        if attrs is None:
            return None

        return VendorMeta(
            url=attrs.get("url") or None,
            image=attrs.get("image") or None,
            votes_pos=to_int(attrs.get("votes-pos")),
            votes_neg=to_int(attrs.get("votes-neg")),
            comment_count=to_int(attrs.get("comment-count")),
            click_count=to_int(attrs.get("click-count")),
            expiry=attrs.get("expiry") or None,
            starting=attrs.get("starting") or None,
        )
