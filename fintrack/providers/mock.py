"""Synthetic performance figures used when live market data is unavailable."""

import random
from typing import Optional

from ..domain.models import PerformanceResult

# (low, high) bounds of the uniform draw per window
WEEKLY_RANGE = (-5.0, 5.0)
MONTHLY_RANGE = (-10.0, 10.0)
YEARLY_RANGE = (-25.0, 25.0)
FIVE_YEARLY_RANGE = (-100.0, 100.0)

# Long horizons skew positive: five-yearly lands in [-40, 160]
FIVE_YEARLY_BIAS = 60.0


def synthetic_performance(rng: Optional[random.Random] = None) -> PerformanceResult:
    """
    Fabricate a plausible PerformanceResult without a price series.

    Args:
        rng: Optional random source (seed it for deterministic output)
    """
    rng = rng or random
    return PerformanceResult(
        weekly_change=rng.uniform(*WEEKLY_RANGE),
        monthly_change=rng.uniform(*MONTHLY_RANGE),
        yearly_change=rng.uniform(*YEARLY_RANGE),
        five_yearly_change=rng.uniform(*FIVE_YEARLY_RANGE) + FIVE_YEARLY_BIAS,
    )
