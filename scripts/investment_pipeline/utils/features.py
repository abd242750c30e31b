import math

import numpy as np
import pandas as pd


MOMENTUM_WINDOW = 30


def _prices(source):
    """Coerce a series of PricePoints, a pd.Series or a sequence of floats to a float array."""
    if isinstance(source, pd.Series):
        return source.to_numpy(dtype=float)
    values = [getattr(p, 'price', p) for p in source]
    return np.array(values, dtype=float)


def _finite_or_zero(value):
    value = float(value)
    return value if math.isfinite(value) else 0.0


def price_change_pct(source):
    """
    Percentage change from the first to the last price.

        change = 100 * (last - first) / first

    Parameters
    ----------
    source : sequence of PricePoint, pd.Series or array of float
        Chronologically ordered prices.

    Returns
    -------
    float
        0.0 when fewer than two prices are available or the first price is 0.

    Examples
    --------
    >>> price_change_pct([100, 140])
    40.0
    """
    prices = _prices(source)
    if len(prices) < 2 or prices[0] == 0:
        return 0.0
    return _finite_or_zero(100 * (prices[-1] - prices[0]) / prices[0])


def volatility_pct(source):
    """
    Coefficient of variation of the prices, in percent.

    Uses the population standard deviation (ddof=0).

    Returns
    -------
    float
        0.0 when fewer than two prices are available or the mean is 0.
    """
    prices = _prices(source)
    if len(prices) < 2:
        return 0.0
    mean = prices.mean()
    if mean == 0:
        return 0.0
    return _finite_or_zero(100 * prices.std(ddof=0) / mean)


def momentum_pct(source, window=MOMENTUM_WINDOW):
    """
    Mean of the most recent ``window`` prices relative to the ``window`` before.

        momentum = 100 * (mean(p[-w:]) - mean(p[-2w:-w])) / mean(p[-2w:-w])

    Parameters
    ----------
    source : sequence of PricePoint, pd.Series or array of float
    window : int, default=30
        Size of each comparison window.

    Returns
    -------
    float
        0.0 when fewer than ``2 * window`` prices exist or the prior mean is 0.
    """
    prices = _prices(source)
    if len(prices) < 2 * window:
        return 0.0
    recent = prices[-window:].mean()
    prior = prices[-2 * window:-window].mean()
    if prior == 0:
        return 0.0
    return _finite_or_zero(100 * (recent - prior) / prior)
