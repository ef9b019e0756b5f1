"""
Feed scanning for the OzBargain Deal Notifier.

A scanner splits a feed document into the raw markup of each entry and
offers small tolerant helpers for pulling tag text and attributes out of
that markup. The OzBargain feed is not always well-formed (unescaped
ampersands in titles are common), so these helpers work on text rather
than on a parsed XML tree.
"""

import re
from typing import Dict, List, Optional

ITEM_PATTERN = re.compile(r"<item\b[^>]*>(.*?)</item>", re.IGNORECASE | re.DOTALL)
CDATA_PATTERN = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.IGNORECASE | re.DOTALL)
ATTRIBUTE_PATTERN = re.compile(r'([a-zA-Z0-9:_-]+)="([^"]*)"')

XML_ENTITIES = [
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&amp;", "&"),
]


class RegexItemScanner:
    """Extracts <item> blocks from an RSS document by structural scan."""

    def parse_entries(self, text: str) -> List[str]:
        """
        Return the inner markup of every <item> element in document order.

        Args:
            text: Raw feed document

        Returns:
            List of item bodies; an unterminated trailing item is ignored
        """
        if not text:
            return []
        return [match.group(1) for match in ITEM_PATTERN.finditer(text)]


def _tag_pattern(tag: str) -> "re.Pattern[str]":
    return re.compile(
        rf"<{re.escape(tag)}(?:\s[^>]*)?>(.*?)</{re.escape(tag)}>",
        re.IGNORECASE | re.DOTALL,
    )


def strip_cdata(value: str) -> str:
    """Unwrap the first CDATA section, if any."""
    match = CDATA_PATTERN.search(value)
    return match.group(1) if match else value


def decode_entities(value: str) -> str:
    """Decode the five predefined XML entities."""
    # &amp; goes last so "&amp;lt;" decodes to "&lt;", not "<"
    for entity, char in XML_ENTITIES:
        value = value.replace(entity, char)
    return value


def get_tag_text(block: str, tag: str) -> str:
    """First-match text content of a tag with CDATA unwrapped and entities decoded."""
    match = _tag_pattern(tag).search(block)
    if not match:
        return ""
    return decode_entities(strip_cdata(match.group(1)).strip())


def get_all_tag_text(block: str, tag: str) -> List[str]:
    """Text content of every occurrence of a tag, skipping empty ones."""
    results = []
    for match in _tag_pattern(tag).finditer(block):
        value = decode_entities(strip_cdata(match.group(1)).strip())
        if value:
            results.append(value)
    return results


def get_tag_attribute(block: str, tag: str, attribute: str) -> str:
    """Value of an attribute on the first opening tag with the given name."""
    match = re.search(rf"<{re.escape(tag)}\b[^>]*>", block, re.IGNORECASE)
    if not match:
        return ""
    attr_match = re.search(
        rf'\b{re.escape(attribute)}="([^"]+)"', match.group(0), re.IGNORECASE
    )
    return decode_entities(attr_match.group(1)) if attr_match else ""


def get_tag_attributes(block: str, tag: str) -> Optional[Dict[str, str]]:
    """All attributes of the first opening tag with the given name, or None."""
    match = re.search(
        rf"<{re.escape(tag)}\s+([^>]+?)\s*/?>", block, re.IGNORECASE | re.DOTALL
    )
    if not match:
        return None
    return {
        name: decode_entities(value)
        for name, value in ATTRIBUTE_PATTERN.findall(match.group(1))
    }
