"""
Analysis modules for feature extraction and per-item evaluation.
"""
import logging
from typing import Optional

from .config import Config, ScoringProfile
from .filters import affordable_units
from .models import AnalysisResult, CatalogEntry, Features, Series
from .normalizer import SeriesNormalizer
from .scoring import ScoringEngine
from .utils.features import momentum_pct, price_change_pct, volatility_pct

logger = logging.getLogger(__name__)

VOLUME_CATEGORIES = [
    (1_000_000, 'Very High'),
    (100_000, 'High'),
    (10_000, 'Medium'),
    (1_000, 'Low'),
]


def categorize_volume(volume: Optional[float]) -> str:
    """Bucket a daily volume into a descriptive level."""
    volume = volume or 0
    for min_volume, label in VOLUME_CATEGORIES:
        if volume >= min_volume:
            return label
    return 'Very Low'


def risk_level(volatility: float, threshold: float = Config.RISK_VOLATILITY_THRESHOLD) -> str:
    return 'high' if volatility >= threshold else 'low'


class FeatureExtractor:
    """Computes price change, volatility and momentum for a series."""

    def __init__(self, momentum_window: int = Config.MOMENTUM_WINDOW):
        self.momentum_window = momentum_window

    def extract(self, series: Series) -> Features:
        if len(series) < 2:
            return Features()
        prices = SeriesNormalizer.to_frame(series)['price']
        return Features(
            price_change_pct=price_change_pct(prices),
            volatility_pct=volatility_pct(prices),
            momentum_pct=momentum_pct(prices, window=self.momentum_window),
        )


class ItemAnalyzer:
    """Scores one catalog entry against its normalized history."""

    def __init__(
        self,
        scoring: ScoringProfile,
        extractor: Optional[FeatureExtractor] = None
    ):
        self.engine = ScoringEngine(scoring)
        self.extractor = extractor or FeatureExtractor()

    def latest_volume(self, entry: CatalogEntry, series: Series) -> Optional[float]:
        """Volume of the most recent point, falling back to the catalog hint."""
        if series and series[-1].volume is not None:
            return series[-1].volume
        return entry.daily_volume

    def analyze(self, entry: CatalogEntry, series: Series, budget: float) -> Optional[AnalysisResult]:
        """
        Analyze a single item.

        Args:
            entry: Catalog entry being evaluated
            series: Normalized price history (oldest first)
            budget: Amount available to invest

        Returns:
            AnalysisResult, or None when the series is empty
        """
        if not series:
            return None

        features = self.extractor.extract(series)
        current_price = series[-1].price
        volume = self.latest_volume(entry, series)

        return AnalysisResult(
            id=entry.id,
            name=entry.name,
            current_price=current_price,
            start_price=series[0].price,
            units_affordable=affordable_units(budget, current_price),
            price_change_pct=features.price_change_pct,
            volatility_pct=features.volatility_pct,
            momentum_pct=features.momentum_pct,
            investment_score=self.engine.score_features(features, current_price, budget),
            source_volume=volume,
            data_points=len(series),
            members=entry.members,
            risk_level=risk_level(features.volatility_pct),
            volume_category=categorize_volume(volume),
        )
