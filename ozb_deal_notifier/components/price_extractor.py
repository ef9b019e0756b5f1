"""
Price extraction for the OzBargain Deal Notifier.

Deal posts rarely label their prices, so pricing is a heuristic over every
dollar amount in the title and description: the cheapest amount is taken as
the deal price and the dearest as the original price. Unrelated amounts in
the same text (shipping, cashback, bundle prices) will be misattributed;
that trade-off is accepted.
"""

import math
import re
from typing import List, Optional

from ..models.deal import Pricing


class PriceExtractor:
    """Extracts a (deal price, original price, discount) triple from text."""

    # $99, $99.9, $99.99
    PRICE_PATTERN = r"\$([0-9]+(?:\.[0-9]{1,2})?)"

    def __init__(self):
        """Initialize price extractor."""
        self.price_regex = re.compile(self.PRICE_PATTERN)

    def find_prices(self, text: str) -> List[float]:
        """
        Find every dollar amount in text, in order of appearance.

        Args:
            text: Text to scan

        Returns:
            List of amounts as floats
        """
        if not text:
            return []

        prices = []
        for token in self.price_regex.findall(text):
            try:
                prices.append(float(token))
            except ValueError:
                continue
        return prices

    def extract(self, text: str) -> Optional[Pricing]:
        """
        Derive pricing from the dollar amounts found in text.

        Args:
            text: Text to extract prices from

        Returns:
            Pricing, or None when the text has no dollar amount
        """
        prices = sorted(self.find_prices(text))
        if not prices:
            return None

        deal_price = prices[0]
        original_price = prices[-1] if prices[-1] != deal_price else None

        discount = None
        if original_price is not None and original_price > deal_price:
            discount = round_half_up(
                (original_price - deal_price) / original_price * 100
            )

        return Pricing(
            deal_price=deal_price,
            original_price=original_price,
            discount_percent=discount,
        )


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""
    return int(math.floor(value + 0.5))
