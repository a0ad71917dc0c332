#!/usr/bin/env python3
# scripts/processing/time_series_normalizer.py
"""
Time Series Normalizer - resamples sparse or irregular series onto a regular grid

Observed points that fall on (or within a day of) a grid timestamp are kept,
gaps between observations are filled by linear interpolation and the edges
of the grid are extrapolated from the nearest observations. Every filled
point is tagged as estimated and carries a reduced confidence.
"""
import bisect
import logging
import math
import os
import sys
from datetime import timedelta

import pandas as pd

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
from utils.data_models import Granularity, TimeSeriesPoint, is_finite_number, is_timestamp, parse_timestamp

logger = logging.getLogger("time-series-normalizer")


def resolve_granularity(granularity):
    """Accept a Granularity member or its string value."""
    try:
        return Granularity(granularity)
    except ValueError:
        raise ValueError(f"Unknown granularity: {granularity!r}") from None


def resolve_time_range(time_range):
    """Parse a (start, end) pair, raising ValueError when start is after end."""
    start, end = time_range
    start, end = parse_timestamp(start), parse_timestamp(end)
    if start > end:
        raise ValueError(f"Invalid time range: start {start.isoformat()} is after end {end.isoformat()}")
    return start, end


def generate_time_points(time_range, granularity="month"):
    """
    Build the regular grid of timestamps spanning ``time_range``.

    Steps are counted from the range start (start + k months) rather than
    accumulated, so month-end starts do not drift.
    """
    start, end = resolve_time_range(time_range)
    step = resolve_granularity(granularity).months

    base = pd.Timestamp(start)
    points = []
    k = 0
    while True:
        current = (base + pd.DateOffset(months=k * step)).to_pydatetime()
        if current > end:
            break
        points.append(current)
        k += 1
    return points


class TimeSeriesNormalizer:
    """
    Resamples a series onto a regular time grid.
    """
    # An observation this close to a grid timestamp is used directly
    MATCH_TOLERANCE = timedelta(days=1)

    # Confidence multipliers for filled points
    INTERPOLATION_CONFIDENCE = 0.8      # applied to the weaker bracketing point
    INTERPOLATION_DISTANCE_PENALTY = 0.2  # extra loss at the midpoint of a gap
    EXTRAPOLATION_CONFIDENCE = 0.6
    EXTRAPOLATION_DECAY_PER_PERIOD = 0.1
    EXTRAPOLATION_MIN_FACTOR = 0.25

    # Extrapolated values stay within observed min/max +/- this share of the spread
    EXTRAPOLATION_SPREAD_TOLERANCE = 0.5

    def __init__(self, match_tolerance=None):
        self.match_tolerance = match_tolerance or self.MATCH_TOLERANCE

    def clean_points(self, points):
        """Drop points without a timestamp or a finite value and clamp confidence into [0, 1]."""
        cleaned = []
        bad_timestamps = 0
        bad_values = 0
        for point in points:
            if not is_timestamp(point.timestamp):
                bad_timestamps += 1
                continue
            if not is_finite_number(point.value):
                bad_values += 1
                continue
            confidence = point.confidence if is_finite_number(point.confidence) else 0.0
            if confidence != point.confidence or not 0.0 <= confidence <= 1.0:
                point = TimeSeriesPoint(
                    timestamp=point.timestamp,
                    value=point.value,
                    confidence=min(1.0, max(0.0, float(confidence))),
                    is_estimated=point.is_estimated,
                    metadata=point.metadata,
                )
            cleaned.append(point)

        if bad_timestamps:
            logger.warning(f"Dropped {bad_timestamps} point(s) without a valid timestamp")
        if bad_values:
            logger.warning(f"Dropped {bad_values} point(s) with non-finite values")
        return cleaned

    def normalize(self, points, time_range, granularity="month"):
        """
        Resample ``points`` onto the grid defined by ``time_range`` and ``granularity``.

        Args:
            points: sequence of TimeSeriesPoint, in any order
            time_range: (start, end) datetimes, start <= end
            granularity: 'month', 'quarter' or 'year'

        Returns:
            New list of TimeSeriesPoint sorted by timestamp, all within the range
        """
        start, end = resolve_time_range(time_range)
        granularity = resolve_granularity(granularity)

        observed = sorted(self.clean_points(points), key=lambda p: p.timestamp)
        if not observed:
            return []

        grid = generate_time_points((start, end), granularity)
        timestamps = [p.timestamp for p in observed]
        values = [p.value for p in observed]
        lower, upper = self._value_bounds(values)

        normalized = []
        for target in grid:
            match = self._find_match(observed, timestamps, target)
            if match is not None:
                normalized.append(TimeSeriesPoint(
                    timestamp=target,
                    value=float(match.value),
                    confidence=match.confidence,
                    is_estimated=match.is_estimated,
                    metadata=dict(match.metadata),
                ))
            else:
                normalized.append(self._estimate(observed, timestamps, target, granularity, lower, upper))

        estimated = sum(1 for p in normalized if p.is_estimated)
        logger.debug(f"Normalized {len(observed)} points onto {len(grid)} {granularity.value} steps "
                     f"({estimated} estimated)")
        return normalized

    def _value_bounds(self, values):
        low, high = min(values), max(values)
        margin = (high - low) * self.EXTRAPOLATION_SPREAD_TOLERANCE
        return low - margin, high + margin

    def _find_match(self, observed, timestamps, target):
        """Return the observation nearest to ``target`` if it is within tolerance."""
        idx = bisect.bisect_left(timestamps, target)
        best = None
        best_gap = None
        for candidate in (idx - 1, idx):
            if 0 <= candidate < len(observed):
                gap = abs(timestamps[candidate] - target)
                if gap < self.match_tolerance and (best_gap is None or gap < best_gap):
                    best, best_gap = observed[candidate], gap
        return best

    def _estimate(self, observed, timestamps, target, granularity, lower, upper):
        # Last observation at or before target, first at or after it
        before_idx = bisect.bisect_right(timestamps, target) - 1
        after_idx = bisect.bisect_left(timestamps, target)
        before = observed[before_idx] if before_idx >= 0 else None
        after = observed[after_idx] if after_idx < len(observed) else None

        if before is not None and after is not None and before.timestamp != after.timestamp:
            return self._interpolate(before, after, target)
        return self._extrapolate(observed, target, granularity, lower, upper)

    def _interpolate(self, before, after, target):
        span = (after.timestamp - before.timestamp).total_seconds()
        ratio = (target - before.timestamp).total_seconds() / span
        value = before.value * (1 - ratio) + after.value * ratio

        # 0 next to an observation, 1 in the middle of the gap
        distance = 2 * min(ratio, 1 - ratio)
        confidence = (min(before.confidence, after.confidence)
                      * self.INTERPOLATION_CONFIDENCE
                      * (1 - self.INTERPOLATION_DISTANCE_PENALTY * distance))

        return TimeSeriesPoint(
            timestamp=target,
            value=value,
            confidence=min(1.0, max(0.0, confidence)),
            is_estimated=True,
            metadata={
                "interpolationMethod": "linear",
                "beforePoint": before.timestamp,
                "afterPoint": after.timestamp,
                "ratio": ratio,
            },
        )

    def _extrapolate(self, observed, target, granularity, lower, upper):
        if target < observed[0].timestamp:
            reference, neighbour = observed[0], (observed[1] if len(observed) > 1 else None)
        else:
            reference, neighbour = observed[-1], (observed[-2] if len(observed) > 1 else None)

        method = "constant"
        value = reference.value
        if neighbour is not None and neighbour.timestamp != reference.timestamp:
            slope = (reference.value - neighbour.value) / (reference.timestamp - neighbour.timestamp).total_seconds()
            value = reference.value + slope * (target - reference.timestamp).total_seconds()
            method = "extrapolation"
        if not math.isfinite(value):
            value = reference.value
        value = min(upper, max(lower, float(value)))

        period = timedelta(days=30.4375 * granularity.months)
        periods_away = abs(target - reference.timestamp) / period
        decay = max(self.EXTRAPOLATION_MIN_FACTOR, 1 - self.EXTRAPOLATION_DECAY_PER_PERIOD * periods_away)
        confidence = reference.confidence * self.EXTRAPOLATION_CONFIDENCE * decay

        return TimeSeriesPoint(
            timestamp=target,
            value=value,
            confidence=min(1.0, max(0.0, confidence)),
            is_estimated=True,
            metadata={"interpolationMethod": method, "sourcePoint": reference.timestamp},
        )


def normalize_time_series(points, time_range, granularity="month"):
    """Module-level convenience wrapper around TimeSeriesNormalizer.normalize."""
    return TimeSeriesNormalizer().normalize(points, time_range, granularity)
