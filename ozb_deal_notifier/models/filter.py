"""
Filter criteria models.
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional


def csv_to_keywords(value: Optional[str]) -> FrozenSet[str]:
    """Split a comma-separated list into trimmed, lower-cased keywords."""
    if not value:
        return frozenset()
    return frozenset(part.strip().lower() for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class FilterCriteria:
    """User filtering criteria; every criterion is optional."""

    include_keywords: FrozenSet[str] = frozenset()
    exclude_keywords: FrozenSet[str] = frozenset()
    min_discount: Optional[float] = None
    max_price: Optional[float] = None

    @classmethod
    def build(
        cls,
        include: Iterable[str] = (),
        exclude: Iterable[str] = (),
        min_discount: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> "FilterCriteria":
        """Create criteria from keyword iterables, normalising case and blanks."""
        return cls(
            include_keywords=frozenset(k.strip().lower() for k in include if k.strip()),
            exclude_keywords=frozenset(k.strip().lower() for k in exclude if k.strip()),
            min_discount=min_discount,
            max_price=max_price,
        )

    @classmethod
    def from_csv(
        cls,
        include: Optional[str] = None,
        exclude: Optional[str] = None,
        min_discount: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> "FilterCriteria":
        """Create criteria from comma-separated keyword lists."""
        return cls(
            include_keywords=csv_to_keywords(include),
            exclude_keywords=csv_to_keywords(exclude),
            min_discount=min_discount,
            max_price=max_price,
        )

    def validate(self) -> bool:
        """Validate filter thresholds."""
        if self.min_discount is not None and not (0 <= self.min_discount <= 100):
            raise ValueError("Minimum discount must be between 0 and 100")

        if self.max_price is not None and self.max_price < 0:
            raise ValueError("Maximum price cannot be negative")

        return True
