#!/usr/bin/env python3
# scripts/processing/data_filter.py
"""
Data filtering for time series - subsets by confidence, estimation flag and time window
"""
import logging
import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
from utils.data_models import is_finite_number, is_timestamp, parse_timestamp

logger = logging.getLogger("data-filter")


class DataFilter:
    """
    Keeps the points that satisfy every active predicate.

    The result is always a subsequence of the input: relative order is kept and
    no point is created or modified. Points without a datetime timestamp are
    always dropped.
    """
    def __init__(self, min_confidence=None, exclude_estimated=False, time_range=None):
        self.min_confidence = min_confidence
        self.exclude_estimated = exclude_estimated
        self.time_range = None
        if time_range is not None:
            start, end = time_range
            self.time_range = (parse_timestamp(start), parse_timestamp(end))

    def accepts(self, point):
        if not is_timestamp(point.timestamp):
            return False

        if self.min_confidence is not None:
            # Missing or NaN confidence never meets a threshold
            if not is_finite_number(point.confidence) or point.confidence < self.min_confidence:
                return False

        if self.exclude_estimated and point.is_estimated:
            return False

        if self.time_range is not None:
            start, end = self.time_range
            if point.timestamp < start or point.timestamp > end:
                return False

        return True

    def apply(self, points):
        kept = [point for point in points if self.accepts(point)]
        malformed = sum(1 for point in points if not is_timestamp(point.timestamp))
        if malformed:
            logger.warning(f"Dropped {malformed} point(s) without a valid timestamp")
        logger.debug(f"Filter kept {len(kept)} of {len(points)} points")
        return kept


def filter_time_series(points, min_confidence=None, exclude_estimated=False, time_range=None):
    """
    Filter a series.

    Args:
        points: sequence of TimeSeriesPoint
        min_confidence: keep points with confidence >= this value
        exclude_estimated: drop interpolated/extrapolated points
        time_range: (start, end), inclusive on both ends

    Returns:
        New list containing the retained points in their original order
    """
    return DataFilter(min_confidence, exclude_estimated, time_range).apply(list(points))
