"""
Configuration and constants for the pipeline.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoringProfile:
    """Weights and breakpoints for the additive investment score."""
    volatility_ceiling: float
    volatility_points: float
    momentum_multiplier: float
    momentum_cap: float
    momentum_positive_only: bool
    price_change_ceiling: float
    price_change_points: float

    # Credit for a shallow drawdown (dip_floor < change < 0); None disables it
    dip_floor: Optional[float] = None
    dip_points: float = 0.0

    # (min_units, points), highest first; empty disables affordability
    affordability_cap: float = 0.0
    affordability_tiers: Tuple[Tuple[float, float], ...] = ()

    # Breakout thresholds: (momentum, price change, volatility)
    breakout_thresholds: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    breakout_bonus: float = 10.0

    base_score: float = 50.0
    min_score: float = 0.0
    max_score: float = 100.0


@dataclass(frozen=True)
class MarketProfile:
    """Everything that differs between the supported markets."""
    key: str
    display_name: str
    currency: str
    scoring: ScoringProfile
    request_delay: float = 1.0

    # 'catalog' filters on catalog hints before fetching,
    # 'series' filters on the fetched series after analysis
    filter_stage: str = 'series'

    # Catalog carries a members/free-to-play flag
    has_tiers: bool = False
    default_budget: str = '1b'
    default_mode: str = 'until_found'
    top_n: int = 10


EVE_SCORING = ScoringProfile(
    volatility_ceiling=10.0,
    volatility_points=25.0,
    momentum_multiplier=2.5,
    momentum_cap=25.0,
    momentum_positive_only=True,
    price_change_ceiling=20.0,
    price_change_points=20.0,
    dip_floor=-10.0,
    dip_points=10.0,
    affordability_cap=100.0,
    affordability_tiers=((100, 20), (50, 15), (20, 10), (10, 5)),
    breakout_thresholds=(5.0, 15.0, 8.0),
)

OSRS_SCORING = ScoringProfile(
    volatility_ceiling=20.0,
    volatility_points=25.0,
    momentum_multiplier=2.5,
    momentum_cap=25.0,
    momentum_positive_only=False,
    price_change_ceiling=40.0,
    price_change_points=20.0,
    affordability_cap=50.0,
    affordability_tiers=((50, 20), (20, 15), (10, 10), (5, 5)),
    breakout_thresholds=(10.0, 30.0, 15.0),
)

# Stricter variant: heavier volatility/momentum/trend weights, no affordability
OSRS_CLASSIC_SCORING = ScoringProfile(
    volatility_ceiling=20.0,
    volatility_points=30.0,
    momentum_multiplier=3.0,
    momentum_cap=30.0,
    momentum_positive_only=False,
    price_change_ceiling=40.0,
    price_change_points=30.0,
    breakout_thresholds=(10.0, 30.0, 15.0),
)


class Config:
    """Global configuration for the pipeline."""

    # Budget and HTTP identity
    DEFAULT_BUDGET: Optional[str] = os.environ.get('MOGUL_BUDGET')
    USER_AGENT: str = os.environ.get(
        'MOGUL_USER_AGENT',
        'market-mogul/1.0.0 (local-development)'
    )
    REQUEST_TIMEOUT = float(os.environ.get('MOGUL_REQUEST_TIMEOUT', '20'))

    # Upstream endpoints
    OSRS_ITEM_DUMP_URL = "https://chisel.weirdgloop.org/gazproj/gazbot/os_dump.json"
    OSRS_GRAPH_URL = "https://secure.runescape.com/m=itemdb_oldschool/api/graph/{item_id}.json"
    EVE_HISTORY_URL = "https://esi.evetech.net/latest/markets/{region_id}/history/"
    EVE_REGION_ID = 10000002  # The Forge (Jita)
    EVE_COMPATIBILITY_DATE = '2025-09-30'

    # Analysis
    LIQUIDITY_FRACTION = 0.1       # max share of daily volume we may buy
    MOMENTUM_WINDOW = 30           # points per momentum window
    RISK_VOLATILITY_THRESHOLD = 15.0
    GROUP_SIZE = 3                 # items per risk group in reports
    PROGRESS_EVERY = 100           # log progress every N checked items

    # Directory Structure
    BASE_DIR = Path(__file__).parent.parent.parent
    OUTPUT_DIR = Path(os.environ.get('MOGUL_OUTPUT_DIR', BASE_DIR / 'results'))
    EVE_TYPES_FILE = Path(os.environ.get('MOGUL_EVE_TYPES_FILE', BASE_DIR / 'data' / 'types.yaml'))

    MARKETS: Dict[str, MarketProfile] = {
        'eve': MarketProfile(
            key='eve',
            display_name='EVE Online (Jita)',
            currency='ISK',
            scoring=EVE_SCORING,
            request_delay=1.0,
            filter_stage='series',
            default_budget='1b',
            default_mode='until_found',
            top_n=10,
        ),
        'osrs': MarketProfile(
            key='osrs',
            display_name='Old School RuneScape',
            currency='gp',
            scoring=OSRS_SCORING,
            request_delay=1.0,
            filter_stage='catalog',
            has_tiers=True,
            default_budget='50m',
            default_mode='sample',
            top_n=10,
        ),
        'osrs-classic': MarketProfile(
            key='osrs-classic',
            display_name='Old School RuneScape (classic scoring)',
            currency='gp',
            scoring=OSRS_CLASSIC_SCORING,
            request_delay=2.0,
            filter_stage='catalog',
            has_tiers=True,
            default_budget='2.5m',
            default_mode='sample',
            top_n=10,
        ),
    }

    @classmethod
    def get_market(cls, key: str) -> MarketProfile:
        """Look up a market profile by key."""
        try:
            return cls.MARKETS[key.lower()]
        except KeyError:
            known = ', '.join(sorted(cls.MARKETS))
            raise ValueError(f"Unknown market '{key}' (expected one of: {known})")

    @classmethod
    def validate(cls) -> bool:
        """Validate that the configuration is usable."""
        errors = []

        if cls.REQUEST_TIMEOUT <= 0:
            errors.append("MOGUL_REQUEST_TIMEOUT must be positive")

        if not 0 < cls.LIQUIDITY_FRACTION <= 1:
            errors.append("LIQUIDITY_FRACTION must be in (0, 1]")

        for market in cls.MARKETS.values():
            if market.filter_stage not in ('catalog', 'series'):
                errors.append(f"{market.key}: unknown filter stage '{market.filter_stage}'")
            if market.request_delay < 0:
                errors.append(f"{market.key}: request delay must not be negative")

        if errors:
            for error in errors:
                logger.error(error)
            return False

        return True

    @classmethod
    def setup_directories(cls):
        """Create necessary directories."""
        cls.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
