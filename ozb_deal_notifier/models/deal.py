"""
Deal data models for the OzBargain Deal Notifier.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Pricing:
    """Best-effort price signals extracted from deal text."""

    deal_price: float
    original_price: Optional[float] = None
    discount_percent: Optional[int] = None

    def validate(self) -> bool:
        """Validate the pricing triple."""
        if self.deal_price < 0:
            raise ValueError("Deal price cannot be negative")

        if self.original_price is not None and self.original_price < self.deal_price:
            raise ValueError("Original price cannot be lower than deal price")

        if self.discount_percent is not None:
            if not (0 <= self.discount_percent <= 100):
                raise ValueError("Discount percentage must be between 0 and 100")

            if self.original_price is None:
                raise ValueError("Discount requires an original price")

        return True


@dataclass
class VendorMeta:
    """OzBargain-specific attributes carried by the ozb:meta element."""

    url: Optional[str] = None
    image: Optional[str] = None
    votes_pos: Optional[int] = None
    votes_neg: Optional[int] = None
    comment_count: Optional[int] = None
    click_count: Optional[int] = None
    expiry: Optional[str] = None
    starting: Optional[str] = None


@dataclass
class DealRecord:
    """One parsed entry from the deal feed."""

    title: str
    link: str
    guid: str
    published_at: str = ""
    description: str = ""
    image: Optional[str] = None
    categories: List[str] = field(default_factory=list)
    vendor_meta: Optional[VendorMeta] = None
    pricing: Optional[Pricing] = None

    def is_complete(self) -> bool:
        """Whether the record carries the identity fields needed downstream."""
        return bool(self.title.strip() and self.link.strip() and self.guid.strip())

    def validate(self) -> bool:
        """Validate the deal record."""
        if not self.title or not self.title.strip():
            raise ValueError("Deal title cannot be empty")

        if not self.link or not self.link.strip():
            raise ValueError("Deal link cannot be empty")

        if not self.guid or not self.guid.strip():
            raise ValueError("Deal guid cannot be empty")

        if not isinstance(self.categories, list):
            raise ValueError("Categories must be a list")

        if self.pricing is not None:
            self.pricing.validate()

        return True
