"""
Tests for price change, volatility and momentum.
"""
import math

import numpy as np
import pandas as pd
import pytest

from investment_pipeline.analyzers import FeatureExtractor
from investment_pipeline.models import Features
from investment_pipeline.utils.features import momentum_pct, price_change_pct, volatility_pct

from conftest import make_series


# =============================================================
# TEST: Degenerate series
# =============================================================

class TestShortSeries:
    """Fewer than two points yields zero features."""

    @pytest.mark.parametrize("prices", [[], [100]])
    def test_all_zero(self, prices):
        series = make_series(prices)

        assert price_change_pct(series) == 0
        assert volatility_pct(series) == 0
        assert momentum_pct(series) == 0
        assert FeatureExtractor().extract(series) == Features(0.0, 0.0, 0.0)

    def test_zero_first_price_gives_zero_change(self):
        assert price_change_pct([0, 50]) == 0

    def test_zero_mean_gives_zero_volatility(self):
        assert volatility_pct([0, 0, 0]) == 0

    def test_zero_prior_window_gives_zero_momentum(self):
        assert momentum_pct([0] * 30 + [5] * 30) == 0


class TestConstantSeries:

    @pytest.mark.parametrize("length", [60, 61, 180])
    def test_constant_price_has_no_volatility_or_momentum(self, length):
        series = make_series([250] * length)

        assert volatility_pct(series) == 0
        assert momentum_pct(series) == 0
        assert price_change_pct(series) == 0


# =============================================================
# TEST: Price change and volatility
# =============================================================

class TestPriceChange:

    def test_two_point_rise(self):
        assert price_change_pct(make_series([100, 140])) == pytest.approx(40.0)

    def test_decline(self):
        assert price_change_pct(make_series([200, 150, 150])) == pytest.approx(-25.0)

    def test_only_endpoints_matter(self):
        assert price_change_pct([100, 500, 1, 110]) == pytest.approx(10.0)

    def test_linear_180_day_rise(self):
        prices = np.linspace(100, 150, 180)
        series = make_series(prices)

        assert round(price_change_pct(series), 2) == 50.00
        vol = volatility_pct(series)
        assert math.isfinite(vol)
        assert vol > 0


class TestVolatility:

    def test_population_standard_deviation(self):
        # mean 120, population std 20
        assert volatility_pct(make_series([100, 140])) == pytest.approx(100 * 20 / 120)

    def test_matches_numpy(self):
        prices = [10, 12, 9, 15, 11, 13]
        expected = 100 * np.std(prices) / np.mean(prices)
        assert volatility_pct(prices) == pytest.approx(expected)

    def test_accepts_pandas_series(self):
        assert volatility_pct(pd.Series([100.0, 140.0])) == pytest.approx(100 * 20 / 120)


# =============================================================
# TEST: Momentum
# =============================================================

class TestMomentum:

    def test_needs_sixty_points(self):
        assert momentum_pct(list(range(1, 60))) == 0

    def test_recent_window_against_prior_window(self):
        prices = [100] * 30 + [110] * 30
        assert momentum_pct(prices) == pytest.approx(10.0)

    def test_only_last_sixty_points_count(self):
        prices = [1_000] * 40 + [100] * 30 + [90] * 30
        assert momentum_pct(prices) == pytest.approx(-10.0)

    def test_custom_window(self):
        prices = [100] * 5 + [120] * 5
        assert momentum_pct(prices, window=5) == pytest.approx(20.0)

    def test_extractor_uses_configured_window(self):
        series = make_series([100] * 5 + [120] * 5)
        features = FeatureExtractor(momentum_window=5).extract(series)

        assert features.momentum_pct == pytest.approx(20.0)
        assert features.price_change_pct == pytest.approx(20.0)
