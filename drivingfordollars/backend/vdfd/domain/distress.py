# vdfd/domain/distress.py
from __future__ import annotations

import math

from .types import FIXED_INDICATORS, DistressIndicators


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def distress_score(indicators: DistressIndicators) -> int:
    """
    0..100 share of flagged condition indicators.

    Extra (free-text) indicators count in both the numerator and the
    denominator: (fixed_true + extras) / (7 + extras). Blank extras are ignored.
    """
    fixed_true = sum(1 for flag in indicators.fixed_flags().values() if flag)
    extras = sum(1 for o in indicators.other if o and o.strip())

    denominator = len(FIXED_INDICATORS) + extras
    return min(100, round_half_up((fixed_true + extras) / denominator * 100))


def distress_band(score: int) -> str:
    # same thresholds as the list view colouring
    if score >= 70:
        return "high"
    if score >= 40:
        return "medium"
    return "low"
