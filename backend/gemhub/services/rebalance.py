# backend/gemhub/services/rebalance.py
"""
Rebalance advice for a new contribution.

Given current totals for two sides of the portfolio (one category versus
everything else), a target share for side A and an amount of new money, the
advisor splits the contribution so the portfolio moves toward the target.
It never suggests selling.

Formula:
    new_total = current_a + current_b + contribution
    target_a  = new_total × target_pct
    target_b  = new_total × (1 - target_pct)
    diff_a    = target_a - current_a
    diff_b    = target_b - current_b

Allocation:
    both diffs > 0   → split proportionally to diff_a : diff_b
    one diff > 0     → 100% of the contribution to that side
    both diffs <= 0  → nothing allocated

Usage:
    advisor = RebalanceAdvisor()
    suggestion = advisor.suggest(
        Decimal("1000"), Decimal("9000"), Decimal("0.30"), Decimal("5000")
    )
    suggestion.allocation_a  # Decimal("3500")
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from gemhub.models import AssetCategory
from gemhub.services.exceptions import ValidationError

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_ONE = Decimal("1")


@dataclass(frozen=True)
class RebalanceSuggestion:
    """
    Result of a rebalance calculation.

    Attributes:
        current_a: Current value of side A
        current_b: Current value of side B
        target_pct: Target share of side A (0..1)
        contribution: Amount being allocated
        new_total: Portfolio total after the contribution
        target_a: Ideal value of side A after the contribution
        target_b: Ideal value of side B after the contribution
        diff_a: target_a - current_a
        diff_b: target_b - current_b
        allocation_a: Suggested amount for side A
        allocation_b: Suggested amount for side B
    """

    current_a: Decimal
    current_b: Decimal
    target_pct: Decimal
    contribution: Decimal
    new_total: Decimal
    target_a: Decimal
    target_b: Decimal
    diff_a: Decimal
    diff_b: Decimal
    allocation_a: Decimal
    allocation_b: Decimal

    @property
    def total_allocated(self) -> Decimal:
        return self.allocation_a + self.allocation_b


class RebalanceAdvisor:
    """Stateless calculator for contribution splits."""

    def suggest(
            self,
            current_a: Decimal,
            current_b: Decimal,
            target_pct: Decimal,
            contribution: Decimal,
    ) -> RebalanceSuggestion:
        """
        Split a contribution between two sides.

        Args:
            current_a: Current value of side A
            current_b: Current value of side B
            target_pct: Desired share of side A as a fraction (0..1)
            contribution: New money to allocate (>= 0)

        Returns:
            RebalanceSuggestion

        Raises:
            ValidationError: If target_pct is outside [0, 1] or contribution < 0
        """
        if target_pct < _ZERO or target_pct > _ONE:
            raise ValidationError(
                f"Target percentage must be between 0 and 1, got {target_pct}",
                field="target_pct",
            )
        if contribution < _ZERO:
            raise ValidationError(
                f"Contribution cannot be negative, got {contribution}",
                field="contribution",
            )

        new_total = current_a + current_b + contribution
        target_a = new_total * target_pct
        target_b = new_total * (_ONE - target_pct)
        diff_a = target_a - current_a
        diff_b = target_b - current_b

        if diff_a > _ZERO and diff_b > _ZERO:
            diff_sum = diff_a + diff_b
            allocation_a = contribution * diff_a / diff_sum
            allocation_b = contribution * diff_b / diff_sum
        elif diff_a > _ZERO:
            allocation_a, allocation_b = contribution, _ZERO
        elif diff_b > _ZERO:
            allocation_a, allocation_b = _ZERO, contribution
        else:
            allocation_a, allocation_b = _ZERO, _ZERO

        logger.debug(
            f"Rebalance: a={current_a} b={current_b} target={target_pct} "
            f"contribution={contribution} -> a+{allocation_a} b+{allocation_b}"
        )

        return RebalanceSuggestion(
            current_a=current_a,
            current_b=current_b,
            target_pct=target_pct,
            contribution=contribution,
            new_total=new_total,
            target_a=target_a,
            target_b=target_b,
            diff_a=diff_a,
            diff_b=diff_b,
            allocation_a=allocation_a,
            allocation_b=allocation_b,
        )

    def suggest_for_category(
            self,
            category_totals: Mapping[AssetCategory, Decimal],
            category: AssetCategory,
            target_pct: Decimal,
            contribution: Decimal,
    ) -> RebalanceSuggestion:
        """
        Rebalance one category against all the others.

        Side A is `category`, side B is the sum of every other category.
        Missing categories count as zero.
        """
        current_a = category_totals.get(category, _ZERO)
        current_b = sum(
            (value for key, value in category_totals.items() if key != category),
            _ZERO,
        )
        return self.suggest(current_a, current_b, target_pct, contribution)
