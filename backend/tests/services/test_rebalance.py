# backend/tests/services/test_rebalance.py
"""
Tests for RebalanceAdvisor.

Covers:
- Proportional split when both sides are under target
- Whole contribution to one side when the other is over target
- Nothing allocated with no contribution and both sides at/over target
- Input validation
"""

from decimal import Decimal

import pytest

from gemhub.models import AssetCategory
from gemhub.services.exceptions import ValidationError
from gemhub.services.rebalance import RebalanceAdvisor


@pytest.fixture
def advisor() -> RebalanceAdvisor:
    return RebalanceAdvisor()


class TestSuggest:
    """Tests for RebalanceAdvisor.suggest."""

    def test_proportional_split(self, advisor):
        """1000 crypto / 9000 FII, 30% target, 5000 new money → 3500 / 1500."""
        result = advisor.suggest(
            Decimal("1000"), Decimal("9000"), Decimal("0.30"), Decimal("5000")
        )

        assert result.new_total == Decimal("15000")
        assert result.target_a == Decimal("4500")
        assert result.target_b == Decimal("10500")
        assert result.diff_a == Decimal("3500")
        assert result.diff_b == Decimal("1500")
        assert result.allocation_a == Decimal("3500")
        assert result.allocation_b == Decimal("1500")

    def test_side_over_target_gets_nothing(self, advisor):
        """When A is already above its target, everything goes to B."""
        result = advisor.suggest(
            Decimal("8000"), Decimal("2000"), Decimal("0.30"), Decimal("1000")
        )

        assert result.diff_a < 0
        assert result.allocation_a == Decimal("0")
        assert result.allocation_b == Decimal("1000")

    def test_other_side_over_target(self, advisor):
        result = advisor.suggest(
            Decimal("0"), Decimal("10000"), Decimal("0.50"), Decimal("2000")
        )

        assert result.allocation_a == Decimal("2000")
        assert result.allocation_b == Decimal("0")

    def test_balanced_without_contribution_allocates_nothing(self, advisor):
        """Exactly on target and no new money: both diffs are zero."""
        result = advisor.suggest(
            Decimal("3000"), Decimal("7000"), Decimal("0.30"), Decimal("0")
        )

        assert result.allocation_a == Decimal("0")
        assert result.allocation_b == Decimal("0")

    @pytest.mark.parametrize("current_a,current_b,target,contribution", [
        ("1000", "9000", "0.30", "5000"),
        ("123.45", "678.9", "0.42", "333.33"),
        ("0", "0", "0.25", "1000"),
        ("5000", "5000", "1", "750"),
    ])
    def test_allocations_add_up_to_contribution(self, advisor, current_a, current_b, target, contribution):
        """Whenever something is allocated, the whole contribution is used."""
        result = advisor.suggest(
            Decimal(current_a), Decimal(current_b), Decimal(target), Decimal(contribution)
        )

        assert abs(result.total_allocated - Decimal(contribution)) < Decimal("1e-20")

    @pytest.mark.parametrize("target", ["-0.01", "1.01"])
    def test_target_out_of_range_raises(self, advisor, target):
        with pytest.raises(ValidationError) as exc_info:
            advisor.suggest(Decimal("1"), Decimal("1"), Decimal(target), Decimal("1"))

        assert exc_info.value.field == "target_pct"

    def test_negative_contribution_raises(self, advisor):
        with pytest.raises(ValidationError) as exc_info:
            advisor.suggest(Decimal("1"), Decimal("1"), Decimal("0.3"), Decimal("-1"))

        assert exc_info.value.field == "contribution"


class TestSuggestForCategory:
    """Tests for RebalanceAdvisor.suggest_for_category."""

    def test_category_against_the_rest(self, advisor):
        totals = {
            AssetCategory.CRYPTO: Decimal("1000"),
            AssetCategory.FII: Decimal("9000"),
        }

        result = advisor.suggest_for_category(
            totals, AssetCategory.CRYPTO, Decimal("0.30"), Decimal("5000")
        )

        assert result.current_a == Decimal("1000")
        assert result.current_b == Decimal("9000")
        assert result.allocation_a == Decimal("3500")

    def test_missing_category_counts_as_zero(self, advisor):
        result = advisor.suggest_for_category(
            {AssetCategory.FII: Decimal("1000")},
            AssetCategory.CRYPTO,
            Decimal("0.50"),
            Decimal("1000"),
        )

        assert result.current_a == Decimal("0")
        assert result.allocation_a == Decimal("1000")
