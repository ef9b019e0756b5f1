"""Filter engine for applying keyword, discount and price criteria to deals."""

import logging
from typing import Iterable, List

from ..models.deal import DealRecord
from ..models.filter import FilterCriteria

logger = logging.getLogger(__name__)


class FilterEngine:
    """Applies the user's filter criteria to a sequence of records."""

    def __init__(self, criteria: FilterCriteria):
        """Initialize filter engine with user criteria."""
        self.criteria = criteria

        logger.debug(
            f"FilterEngine initialized with include={sorted(criteria.include_keywords)}, "
            f"exclude={sorted(criteria.exclude_keywords)}, "
            f"min_discount={criteria.min_discount}, max_price={criteria.max_price}"
        )

    def filter(self, records: Iterable[DealRecord]) -> List[DealRecord]:
        """Records passing every criterion, in their original order."""
        return [record for record in records if self.passes(record)]

    def passes(self, record: DealRecord) -> bool:
        """Check a single record against all criteria."""
        haystack = f"{record.title} {record.description}".lower()

        if not self._check_include(haystack):
            logger.debug(f"Deal {record.guid} dropped: no include keyword")
            return False

        if not self._check_exclude(haystack):
            logger.debug(f"Deal {record.guid} dropped: exclude keyword")
            return False

        if not self._check_min_discount(record):
            logger.debug(f"Deal {record.guid} dropped: discount below minimum")
            return False

        if not self._check_max_price(record):
            logger.debug(f"Deal {record.guid} dropped: price above maximum")
            return False

        return True

    def _check_include(self, haystack: str) -> bool:
        if not self.criteria.include_keywords:
            return True  # No include filter set
        return any(keyword in haystack for keyword in self.criteria.include_keywords)

    def _check_exclude(self, haystack: str) -> bool:
        if not self.criteria.exclude_keywords:
            return True
        return not any(
            keyword in haystack for keyword in self.criteria.exclude_keywords
        )

    def _check_min_discount(self, record: DealRecord) -> bool:
        if self.criteria.min_discount is None:
            return True

        # Deals without a known discount cannot satisfy a minimum
        discount = record.pricing.discount_percent if record.pricing else None
        if discount is None:
            return False

        return discount >= self.criteria.min_discount

    def _check_max_price(self, record: DealRecord) -> bool:
        if self.criteria.max_price is None:
            return True

        deal_price = record.pricing.deal_price if record.pricing else None
        if deal_price is None:
            return True  # No price information available, let it pass

        return deal_price <= self.criteria.max_price
