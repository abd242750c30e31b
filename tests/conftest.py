"""
Shared fixtures for pipeline tests.
"""
import random

import pandas as pd
import pytest

from investment_pipeline.models import PricePoint


DAY_MS = 86_400_000
START_MS = 1_700_000_000_000


class NoShuffle(random.Random):
    """Random source that keeps catalog order, so discovery order is predictable."""

    def shuffle(self, x):
        pass


def make_series(prices, volume=None):
    """Daily PricePoints for a list of prices."""
    return [
        PricePoint(
            timestamp=pd.Timestamp(START_MS + i * DAY_MS, unit='ms', tz='UTC'),
            price=float(p),
            volume=volume,
        )
        for i, p in enumerate(prices)
    ]


def osrs_payload(prices):
    """OSRS graph API shape: {'daily': {epoch_ms: price}}."""
    return {'daily': {str(START_MS + i * DAY_MS): p for i, p in enumerate(prices)}}


def eve_payload(prices, volume=1_000_000):
    """EVE ESI history shape: list of daily records."""
    dates = pd.date_range('2025-01-01', periods=len(prices), freq='D')
    return [
        {
            'date': d.strftime('%Y-%m-%d'),
            'average': p,
            'highest': p,
            'lowest': p,
            'order_count': 10,
            'volume': volume,
        }
        for d, p in zip(dates, prices)
    ]


class SleepRecorder:
    """Stand-in for time.sleep that records requested delays."""

    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def no_shuffle():
    return NoShuffle()
