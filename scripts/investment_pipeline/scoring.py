"""
Investment scoring.

The score is additive from a base of 50:

- volatility: linear up to the profile's ceiling
- momentum: ``momentum * multiplier``, capped
- price change: linear up to a ceiling, optional credit for a shallow dip
- affordability: discrete tiers on the number of units the budget buys
- breakout: flat bonus when momentum, price change and volatility all exceed
  the profile's thresholds

and is clamped to ``[min_score, max_score]``.
"""
import math
from typing import Optional

from .config import ScoringProfile
from .models import Features


def _finite(value: Optional[float]) -> float:
    if value is None:
        return 0.0
    value = float(value)
    return value if math.isfinite(value) else 0.0


class ScoringEngine:
    """Scores analysed items with one market's ScoringProfile."""

    def __init__(self, profile: ScoringProfile):
        self.profile = profile

    def volatility_points(self, volatility: float) -> float:
        p = self.profile
        if volatility >= p.volatility_ceiling:
            return p.volatility_points
        if volatility <= 0:
            return 0.0
        return (volatility / p.volatility_ceiling) * p.volatility_points

    def momentum_points(self, momentum: float) -> float:
        p = self.profile
        if p.momentum_positive_only and momentum <= 0:
            return 0.0
        return min(momentum * p.momentum_multiplier, p.momentum_cap)

    def price_change_points(self, change: float) -> float:
        p = self.profile
        if change >= p.price_change_ceiling:
            return p.price_change_points
        if change > 0:
            return (change / p.price_change_ceiling) * p.price_change_points
        if p.dip_floor is not None and p.dip_floor < change < 0:
            return p.dip_points
        return 0.0

    def affordability_points(self, current_price: float, budget: float) -> float:
        p = self.profile
        if not p.affordability_tiers or current_price <= 0 or budget <= 0:
            return 0.0
        units = min(budget / current_price, p.affordability_cap)
        for min_units, points in p.affordability_tiers:
            if units >= min_units:
                return points
        return 0.0

    def breakout_points(self, change: float, volatility: float, momentum: float) -> float:
        min_momentum, min_change, min_volatility = self.profile.breakout_thresholds
        if momentum > min_momentum and change > min_change and volatility > min_volatility:
            return self.profile.breakout_bonus
        return 0.0

    def score(
        self,
        price_change_pct: float,
        volatility_pct: float,
        momentum_pct: float,
        current_price: float = 0.0,
        budget: float = 0.0
    ) -> float:
        """Investment score in [min_score, max_score]."""
        change = _finite(price_change_pct)
        volatility = _finite(volatility_pct)
        momentum = _finite(momentum_pct)
        current_price = _finite(current_price)
        budget = _finite(budget)

        score = self.profile.base_score
        score += self.volatility_points(volatility)
        score += self.momentum_points(momentum)
        score += self.price_change_points(change)
        score += self.affordability_points(current_price, budget)
        score += self.breakout_points(change, volatility, momentum)

        return max(self.profile.min_score, min(self.profile.max_score, score))

    def score_features(self, features: Features, current_price: float, budget: float) -> float:
        return self.score(
            features.price_change_pct,
            features.volatility_pct,
            features.momentum_pct,
            current_price,
            budget
        )
