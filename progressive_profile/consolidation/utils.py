"""
Decimal Utilities
progressive_profile/consolidation/utils.py

Precision-safe decimal math shared by the consolidation components.
"""

from decimal import Decimal
from typing import List


def clamp(
    value: Decimal,
    min_val: Decimal = Decimal("0"),
    max_val: Decimal = Decimal("100"),
) -> Decimal:
    """Clamp value to range [min_val, max_val]."""
    return max(min_val, min(max_val, value))


def weighted_mean(values: List[Decimal], weights: List[Decimal]) -> Decimal:
    """
    Calculate weighted mean at full Decimal precision.

    Formula: Σ(value_i × weight_i) / Σ(weight_i)
    Returns Decimal("0") if all weights are zero.
    """
    if len(values) != len(weights):
        raise ValueError("values and weights must have same length")

    total_weight = sum(weights, Decimal("0"))
    if total_weight == 0:
        return Decimal("0")

    numerator = sum((v * w for v, w in zip(values, weights)), Decimal("0"))
    return numerator / total_weight


def mean(values: List[Decimal]) -> Decimal:
    """Unweighted mean; Decimal("0") for an empty list."""
    if not values:
        return Decimal("0")
    return sum(values, Decimal("0")) / Decimal(len(values))
