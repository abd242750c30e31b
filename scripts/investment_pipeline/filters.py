"""
Candidate filtering by data completeness, membership tier, unit limits and liquidity.
"""
import logging
import math
from enum import Enum
from typing import Collection, Optional

from .config import Config
from .models import CatalogEntry

logger = logging.getLogger(__name__)


class RejectReason(str, Enum):
    MISSING_DATA = 'missing_data'
    MEMBERSHIP = 'membership'
    UNIT_LIMIT = 'unit_limit'
    ILLIQUID = 'illiquid'


def affordable_units(budget: float, price: Optional[float]) -> int:
    """floor(budget / price); 0 for a missing or non-positive price."""
    if price is None or not price > 0 or not math.isfinite(price):
        return 0
    units = budget / price
    if not math.isfinite(units):
        return 0
    return int(math.floor(units))


class CandidateFilter:
    """Decides whether a candidate is tradeable at the given budget."""

    def __init__(
        self,
        allowed_tiers: Optional[Collection[Optional[bool]]] = None,
        liquidity_fraction: float = Config.LIQUIDITY_FRACTION
    ):
        """
        Args:
            allowed_tiers: membership values to keep (e.g. ``{False}`` for
                free-to-play only). None keeps every tier.
            liquidity_fraction: max share of daily volume one purchase may take
        """
        self.allowed_tiers = None if allowed_tiers is None else set(allowed_tiers)
        self.liquidity_fraction = liquidity_fraction

    def check(
        self,
        entry: CatalogEntry,
        units: int,
        daily_volume: Optional[float],
        price: Optional[float] = None
    ) -> Optional[RejectReason]:
        """Return the first reason to reject the candidate, or None to accept it."""
        if not entry.name or price is None or not price > 0 or daily_volume is None:
            return RejectReason.MISSING_DATA

        if self.allowed_tiers is not None and entry.members not in self.allowed_tiers:
            return RejectReason.MEMBERSHIP

        # No known limit means no limit
        if entry.unit_limit is not None and units > entry.unit_limit:
            return RejectReason.UNIT_LIMIT

        if units > daily_volume * self.liquidity_fraction:
            return RejectReason.ILLIQUID

        return None

    def prefilter(self, entry: CatalogEntry, budget: float) -> Optional[RejectReason]:
        """Check a catalog entry using its own price and volume hints."""
        units = affordable_units(budget, entry.price_hint)
        return self.check(entry, units, entry.daily_volume, entry.price_hint)

    def accept(
        self,
        entry: CatalogEntry,
        units: int,
        daily_volume: Optional[float],
        price: Optional[float]
    ) -> bool:
        """True when the analysed candidate passes every rule."""
        reason = self.check(entry, units, daily_volume, price)
        if reason is not None:
            logger.debug(f"Rejected {entry.name} ({entry.id}): {reason.value}")
            return False
        return True
