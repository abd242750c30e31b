"""
Tests for raw history normalization.
"""
import pandas as pd

from investment_pipeline.normalizer import SeriesNormalizer

from conftest import DAY_MS, START_MS, eve_payload, osrs_payload


class TestMappingPayloads:
    """OSRS graph shape: timestamp -> price."""

    def test_daily_mapping_is_sorted(self):
        raw = {
            str(START_MS + 2 * DAY_MS): 120,
            str(START_MS): 100,
            str(START_MS + DAY_MS): 110,
        }
        series = SeriesNormalizer().normalize(raw)

        assert [p.price for p in series] == [100.0, 110.0, 120.0]
        assert series[0].timestamp == pd.Timestamp(START_MS, unit='ms', tz='UTC')
        assert all(p.volume is None for p in series)

    def test_nested_daily_key(self):
        series = SeriesNormalizer().normalize(osrs_payload([5, 6, 7]))
        assert [p.price for p in series] == [5.0, 6.0, 7.0]

    def test_integer_keys(self):
        series = SeriesNormalizer().normalize({START_MS + DAY_MS: 2, START_MS: 1})
        assert [p.price for p in series] == [1.0, 2.0]

    def test_malformed_entries_are_skipped(self):
        raw = {
            str(START_MS): 100,
            'not-a-time': 105,
            str(START_MS + DAY_MS): None,
            str(START_MS + 2 * DAY_MS): 'abc',
            str(START_MS + 3 * DAY_MS): -4,
            str(START_MS + 4 * DAY_MS): 0,
            str(START_MS + 5 * DAY_MS): 130,
        }
        series = SeriesNormalizer().normalize(raw)
        assert [p.price for p in series] == [100.0, 130.0]


class TestRecordPayloads:
    """EVE ESI shape: list of {date, average, volume}."""

    def test_records_with_volume(self):
        series = SeriesNormalizer().normalize(eve_payload([10, 11, 12], volume=500))

        assert len(series) == 3
        assert series[-1].price == 12.0
        assert series[-1].volume == 500.0
        assert series[0].timestamp == pd.Timestamp('2025-01-01', tz='UTC')

    def test_out_of_order_records_are_sorted(self):
        raw = [
            {'date': '2025-01-03', 'average': 3, 'volume': 30},
            {'date': '2025-01-01', 'average': 1, 'volume': 10},
            {'date': '2025-01-02', 'average': 2, 'volume': 20},
        ]
        series = SeriesNormalizer().normalize(raw)
        assert [p.price for p in series] == [1.0, 2.0, 3.0]
        assert [p.volume for p in series] == [10.0, 20.0, 30.0]

    def test_missing_price_or_date_is_dropped(self):
        raw = [
            {'date': '2025-01-01', 'average': 1, 'volume': 10},
            {'date': '2025-01-02', 'volume': 20},
            {'average': 3, 'volume': 30},
            'garbage',
            42,
            {'date': '2025-01-04', 'average': 4, 'volume': 'lots'},
        ]
        series = SeriesNormalizer().normalize(raw)

        assert [p.price for p in series] == [1.0, 4.0]
        assert series[-1].volume is None

    def test_negative_volume_becomes_none(self):
        series = SeriesNormalizer().normalize([{'date': '2025-01-01', 'average': 1, 'volume': -5}])
        assert series[0].volume is None


class TestDuplicateTimestamps:
    """Duplicates keep the first-seen entry, then the series is sorted."""

    def test_first_seen_wins_in_records(self):
        raw = [
            {'date': '2025-01-02', 'average': 20, 'volume': 1},
            {'date': '2025-01-01', 'average': 10, 'volume': 1},
            {'date': '2025-01-02', 'average': 99, 'volume': 1},
        ]
        series = SeriesNormalizer().normalize(raw)

        assert [p.price for p in series] == [10.0, 20.0]

    def test_equivalent_timestamp_spellings_are_duplicates(self):
        raw = {
            str(START_MS): 1,
            START_MS: 2,
        }
        series = SeriesNormalizer().normalize(raw)
        assert [p.price for p in series] == [1.0]

    def test_timestamps_strictly_increase(self):
        raw = [{'date': f'2025-01-{d:02d}', 'average': d, 'volume': 1} for d in (5, 1, 3, 1, 5, 2)]
        series = SeriesNormalizer().normalize(raw)

        stamps = [p.timestamp for p in series]
        assert stamps == sorted(set(stamps))
        assert [p.price for p in series] == [1.0, 2.0, 3.0, 5.0]


class TestEmptyInput:

    def test_none(self):
        assert SeriesNormalizer().normalize(None) == []

    def test_empty_containers(self):
        normalizer = SeriesNormalizer()
        assert normalizer.normalize({}) == []
        assert normalizer.normalize([]) == []
        assert normalizer.normalize({'daily': {}}) == []

    def test_unsupported_type(self):
        assert SeriesNormalizer().normalize("not a payload") == []

    def test_to_frame(self):
        normalizer = SeriesNormalizer()
        df = normalizer.to_frame(normalizer.normalize(eve_payload([1, 2], volume=7)))

        assert list(df.columns) == ['price', 'volume']
        assert df['price'].tolist() == [1.0, 2.0]
        assert normalizer.to_frame([]).empty
