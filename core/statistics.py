"""
Statistics Aggregator

Reduces a project's material list into the summary figures used by every
report section. Computed once per report and never recomputed.

Rules:
- Empty input is not an error: all figures are zero, extremes are None
- Unreadable total prices contribute zero (best-effort report)
- Unclassified materials fall into the "other" bucket
- Most/least expensive come from one stable sort, so ties keep input order
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .models import Material


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryBreakdown:
    """Item count and cost total for one category."""

    count: int
    total: float


@dataclass(frozen=True)
class Stats:
    """Aggregate figures for one project's materials."""

    total: float = 0.0
    count: int = 0
    average: float = 0.0
    categories: dict[str, CategoryBreakdown] = field(default_factory=dict)
    most_expensive: Optional[Material] = None
    least_expensive: Optional[Material] = None

    @property
    def categories_used(self) -> int:
        return len(self.categories)

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def category_share(self, category: str) -> float:
        """Percentage of the grand total spent in a category."""
        breakdown = self.categories.get(category)
        if breakdown is None or self.total <= 0:
            return 0.0
        return breakdown.total / self.total * 100

    def to_dict(self) -> dict:
        """Convert to a JSON-safe dictionary."""
        return {
            "total": self.total,
            "count": self.count,
            "average": self.average,
            "categories": {
                name: {"count": b.count, "total": b.total}
                for name, b in self.categories.items()
            },
            "most_expensive": self.most_expensive.to_dict() if self.most_expensive else None,
            "least_expensive": self.least_expensive.to_dict() if self.least_expensive else None,
        }


def compute_stats(materials: Iterable[Material]) -> Stats:
    """
    Compute summary statistics for a list of materials.

    Args:
        materials: Materials in caller-supplied order.

    Returns:
        Stats snapshot.
    """
    items = list(materials)
    if not items:
        return Stats()

    counts: dict[str, int] = {}
    totals: dict[str, float] = {}

    for material in items:
        if not material.has_valid_cost:
            logger.warning(
                "Material %r has unreadable total price %r; counted as 0",
                material.name,
                material.total_price,
            )
        cost = material.cost
        group = material.group
        counts[group] = counts.get(group, 0) + 1
        totals[group] = totals.get(group, 0.0) + cost

    categories = {
        name: CategoryBreakdown(count=counts[name], total=totals[name])
        for name in counts
    }
    # Summed per category so the breakdown partitions the total exactly
    total = sum(b.total for b in categories.values())

    # sorted() is stable: equal costs keep their input order
    ranked = sorted(items, key=lambda m: m.cost, reverse=True)

    stats = Stats(
        total=total,
        count=len(items),
        average=total / len(items),
        categories=categories,
        most_expensive=ranked[0],
        least_expensive=ranked[-1],
    )
    logger.debug("Computed stats: %d materials, total %.2f", stats.count, stats.total)
    return stats
