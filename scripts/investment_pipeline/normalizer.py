"""
Normalization of raw market history payloads.

Upstream APIs return history in two shapes:

- a mapping of epoch-millisecond timestamps to prices (OSRS graph API,
  optionally nested under a ``daily`` key)
- a list of daily records ``{date, average, volume, ...}`` (EVE ESI)

Both are turned into a chronologically ordered list of PricePoint with one
point per timestamp.
"""
import logging
import math
from collections.abc import Mapping
from typing import Any, List, Optional, Tuple

import pandas as pd

from .models import PricePoint, Series

logger = logging.getLogger(__name__)

PRICE_KEYS = ('average', 'price', 'avg')
TIMESTAMP_KEYS = ('date', 'timestamp', 'time')


def _parse_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """Epoch milliseconds (int or digit string) or an ISO date string."""
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            if not math.isfinite(value):
                return None
            return pd.to_datetime(int(value), unit='ms', utc=True)
        text = str(value).strip()
        if not text:
            return None
        if text.lstrip('-').isdigit():
            return pd.to_datetime(int(text), unit='ms', utc=True)
        ts = pd.to_datetime(text, utc=True)
    except (TypeError, ValueError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return ts


def _parse_price(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price) or price <= 0:
        return None
    return price


def _parse_volume(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        volume = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(volume) or volume < 0:
        return None
    return volume


def _first_present(record: Mapping, keys) -> Any:
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return None


class SeriesNormalizer:
    """Turns raw history payloads into a sorted, de-duplicated Series."""

    def normalize(self, raw: Any) -> Series:
        """
        Normalize a raw payload.

        Malformed entries are skipped; an empty, missing or unrecognised
        payload yields an empty series. When two entries share a timestamp
        the one that appears first in the payload wins.
        """
        rows = self._parse_rows(raw)
        if not rows:
            return []

        df = pd.DataFrame(rows, columns=['timestamp', 'price', 'volume'])
        df = df.drop_duplicates(subset='timestamp', keep='first')
        df = df.sort_values('timestamp', kind='stable').reset_index(drop=True)

        dropped = len(rows) - len(df)
        if dropped:
            logger.debug(f"Dropped {dropped} duplicate timestamp(s)")

        return [
            PricePoint(
                timestamp=row.timestamp,
                price=float(row.price),
                volume=None if pd.isna(row.volume) else float(row.volume),
            )
            for row in df.itertuples(index=False)
        ]

    @staticmethod
    def to_frame(series: Series) -> pd.DataFrame:
        """Series as a DataFrame indexed by timestamp."""
        if not series:
            return pd.DataFrame(columns=['price', 'volume'])
        df = pd.DataFrame(
            [(p.timestamp, p.price, p.volume) for p in series],
            columns=['timestamp', 'price', 'volume']
        )
        return df.set_index('timestamp')

    def _parse_rows(self, raw: Any) -> List[Tuple[pd.Timestamp, float, Optional[float]]]:
        if raw is None:
            return []

        if isinstance(raw, Mapping):
            daily = raw.get('daily')
            if isinstance(daily, Mapping):
                raw = daily
            return self._rows_from_mapping(raw)

        if isinstance(raw, (list, tuple)):
            return self._rows_from_records(raw)

        logger.debug(f"Unsupported history payload type: {type(raw).__name__}")
        return []

    def _rows_from_mapping(self, raw: Mapping) -> List[Tuple[pd.Timestamp, float, Optional[float]]]:
        rows = []
        for key, value in raw.items():
            timestamp = _parse_timestamp(key)
            if timestamp is None:
                continue
            if isinstance(value, Mapping):
                price = _parse_price(_first_present(value, PRICE_KEYS))
                volume = _parse_volume(value.get('volume'))
            else:
                price = _parse_price(value)
                volume = None
            if price is None:
                continue
            rows.append((timestamp, price, volume))
        return rows

    def _rows_from_records(self, raw) -> List[Tuple[pd.Timestamp, float, Optional[float]]]:
        rows = []
        for record in raw:
            if isinstance(record, Mapping):
                timestamp = _parse_timestamp(_first_present(record, TIMESTAMP_KEYS))
                price = _parse_price(_first_present(record, PRICE_KEYS))
                volume = _parse_volume(record.get('volume'))
            elif isinstance(record, (list, tuple)) and len(record) >= 2:
                timestamp = _parse_timestamp(record[0])
                price = _parse_price(record[1])
                volume = _parse_volume(record[2]) if len(record) > 2 else None
            else:
                continue
            if timestamp is None or price is None:
                continue
            rows.append((timestamp, price, volume))
        return rows
