"""
Tests for the Statistics Aggregator

Tests covering:
1. Empty input yields zeros and no extremes
2. Category totals partition the grand total exactly
3. Ties for most/least expensive keep input order
4. Malformed prices degrade to zero with a warning
"""

import logging

import pytest

from core.models import Material, OTHER_CATEGORY, create_sample_project
from core.statistics import Stats, compute_stats


def make_material(name, cost, category="construction", **kwargs):
    return Material(name=name, unit="unit", quantity=1, price_per_unit=cost,
                    total_price=cost, category=category, **kwargs)


@pytest.fixture
def sample_materials():
    _, materials = create_sample_project()
    return materials


class TestEmptyStats:
    """No materials is not an error."""

    def test_all_zero(self):
        stats = compute_stats([])
        assert stats.total == 0
        assert stats.count == 0
        assert stats.average == 0
        assert stats.categories == {}
        assert stats.most_expensive is None
        assert stats.least_expensive is None
        assert stats.is_empty

    def test_equals_default_stats(self):
        assert compute_stats(iter(())) == Stats()


class TestAggregation:
    """Totals, averages and category breakdown."""

    def test_totals(self, sample_materials):
        stats = compute_stats(sample_materials)
        assert stats.count == len(sample_materials)
        assert stats.total == pytest.approx(sum(m.cost for m in sample_materials))
        assert stats.average == pytest.approx(stats.total / stats.count)

    def test_category_totals_sum_to_total_exactly(self):
        materials = [
            make_material("a", 0.1),
            make_material("b", 0.2, "electrical"),
            make_material("c", 0.3, "plumbing"),
            make_material("d", 1e-9, "finishing"),
            make_material("e", 12345.678),
        ]
        stats = compute_stats(materials)
        assert sum(b.total for b in stats.categories.values()) == stats.total
        assert sum(b.count for b in stats.categories.values()) == stats.count

    def test_categories_in_first_appearance_order(self, sample_materials):
        stats = compute_stats(sample_materials)
        assert list(stats.categories) == ["construction", "electrical", "plumbing", "finishing"]
        assert stats.categories_used == 4

    def test_unknown_category_goes_to_other(self):
        stats = compute_stats([make_material("x", 10, "landscaping"), make_material("y", 5, "")])
        assert list(stats.categories) == [OTHER_CATEGORY]
        assert stats.categories[OTHER_CATEGORY].count == 2

    def test_category_share(self):
        stats = compute_stats([make_material("a", 75), make_material("b", 25, "electrical")])
        assert stats.category_share("construction") == pytest.approx(75.0)
        assert stats.category_share("plumbing") == 0.0

    def test_missing_total_price_derived_from_quantity(self):
        material = Material(name="Sand", unit="m3", quantity=4, price_per_unit=650)
        assert compute_stats([material]).total == 2600


class TestExtremes:
    """Most and least expensive items."""

    def test_most_and_least(self, sample_materials):
        stats = compute_stats(sample_materials)
        assert stats.most_expensive.name == "Ceramic floor tiles 60x60"
        assert stats.least_expensive.name == "Distribution board 24 ways"

    def test_tie_keeps_first_in_input(self):
        first = make_material("first", 600)
        second = make_material("second", 600)
        stats = compute_stats([first, second])
        assert stats.most_expensive is first
        assert stats.least_expensive is second

    def test_single_item_is_both_extremes(self):
        only = make_material("only", 42)
        stats = compute_stats([only])
        assert stats.most_expensive is only
        assert stats.least_expensive is only


class TestMalformedPrices:
    """Best-effort aggregation over bad records."""

    def test_unreadable_total_counts_as_zero(self, caplog):
        bad = Material(name="bad", unit="unit", quantity=1, price_per_unit=1, total_price="n/a")
        good = make_material("good", 100)
        with caplog.at_level(logging.WARNING, logger="core.statistics"):
            stats = compute_stats([bad, good])
        assert stats.total == 100
        assert stats.count == 2
        assert not bad.has_valid_cost
        assert "unreadable total price" in caplog.text

    def test_nan_total_counts_as_zero(self):
        bad = Material(name="nan", unit="unit", quantity=1, price_per_unit=1,
                       total_price=float("nan"))
        assert compute_stats([bad]).total == 0


class TestStatsToDict:
    """JSON shape used by the stats endpoint."""

    def test_to_dict(self, sample_materials):
        data = compute_stats(sample_materials).to_dict()
        assert data["count"] == 8
        assert set(data["categories"]) == {"construction", "electrical", "plumbing", "finishing"}
        assert data["most_expensive"]["name"] == "Ceramic floor tiles 60x60"
