import os
import sys
from datetime import datetime, timedelta, timezone

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'scripts'))

from processing.data_filter import DataFilter, filter_time_series
from utils.data_models import TimeSeriesPoint


def make_points():
    return [
        TimeSeriesPoint(datetime(2022, 1, 1), 1.0, 0.9),
        TimeSeriesPoint(datetime(2022, 2, 1), 2.0, 0.4, is_estimated=True),
        TimeSeriesPoint(datetime(2022, 3, 1), 3.0, 0.7),
        TimeSeriesPoint(datetime(2022, 4, 1), 4.0, float("nan")),
        TimeSeriesPoint(datetime(2022, 5, 1), 5.0, 0.8, is_estimated=True),
    ]


class TestDataFilter:

    def test_no_predicates_keeps_everything(self):
        points = make_points()
        result = filter_time_series(points)
        assert result == points
        assert result is not points

    def test_min_confidence_is_inclusive(self):
        result = filter_time_series(make_points(), min_confidence=0.7)
        assert [p.value for p in result] == [1.0, 3.0, 5.0]

    def test_nan_confidence_fails_min_confidence(self):
        result = filter_time_series(make_points(), min_confidence=0.0)
        assert 4.0 not in [p.value for p in result]

    def test_exclude_estimated(self):
        result = filter_time_series(make_points(), exclude_estimated=True)
        assert [p.value for p in result] == [1.0, 3.0, 4.0]

    def test_time_range_is_inclusive(self):
        result = filter_time_series(make_points(), time_range=(datetime(2022, 2, 1), datetime(2022, 4, 1)))
        assert [p.value for p in result] == [2.0, 3.0, 4.0]

    def test_combined_predicates(self):
        result = filter_time_series(
            make_points(),
            min_confidence=0.5,
            exclude_estimated=True,
            time_range=("2022-01-15", "2022-12-31"),
        )
        assert [p.value for p in result] == [3.0]

    def test_result_is_ordered_subsequence(self):
        points = list(reversed(make_points()))
        result = filter_time_series(points, min_confidence=0.5)
        positions = [points.index(p) for p in result]
        assert positions == sorted(positions)

    def test_accepts_single_point(self):
        data_filter = DataFilter(min_confidence=0.5)
        assert data_filter.accepts(TimeSeriesPoint(datetime(2022, 1, 1), 1.0, 0.5))
        assert not data_filter.accepts(TimeSeriesPoint(datetime(2022, 1, 1), 1.0, 0.49))

    def test_aware_points_and_aware_range(self):
        points = [
            TimeSeriesPoint(datetime(2022, 3, 1, tzinfo=timezone.utc), 1.0, 0.9),
            TimeSeriesPoint(datetime(2023, 3, 1, tzinfo=timezone.utc), 2.0, 0.9),
        ]
        result = filter_time_series(points, time_range=("2022-01-01T00:00:00Z", "2022-12-31T23:59:59Z"))
        assert [p.value for p in result] == [1.0]

    def test_aware_and_naive_points_mix(self):
        points = [
            TimeSeriesPoint(datetime(2022, 1, 1, 5, tzinfo=timezone(timedelta(hours=5))), 1.0, 0.9),
            TimeSeriesPoint(datetime(2022, 1, 2), 2.0, 0.9),
        ]
        result = filter_time_series(points, time_range=(datetime(2022, 1, 1), datetime(2022, 1, 1, 23)))
        assert [p.value for p in result] == [1.0]

    def test_missing_confidence_fails_min_confidence(self):
        points = [TimeSeriesPoint(datetime(2022, 1, 1), 1.0, None), TimeSeriesPoint(datetime(2022, 2, 1), 2.0, 0.9)]
        assert [p.value for p in filter_time_series(points, min_confidence=0.5)] == [2.0]
        assert len(filter_time_series(points)) == 2

    def test_points_without_timestamp_are_dropped(self):
        points = [
            TimeSeriesPoint(None, 1.0, 0.9),
            TimeSeriesPoint(datetime(2022, 2, 1), 2.0, 0.9),
            TimeSeriesPoint("not a date", 3.0, 0.9),
        ]
        assert [p.value for p in filter_time_series(points)] == [2.0]
        assert [p.value for p in filter_time_series(points, time_range=("2022-01-01", "2022-12-31"))] == [2.0]
