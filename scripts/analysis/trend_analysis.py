#!/usr/bin/env python3
# scripts/analysis/trend_analysis.py
"""
Trend analysis and aggregation for time series

TrendAnalyzer fits a least-squares line through the series (values against
their position in time order) and reports direction, strength (|r|) and the
percentage change from the first to the last value. Aggregator reduces a
series to a single number.
"""
import logging
import os
import sys

import numpy as np

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
from utils.data_models import AggregationType, TrendDirection, is_finite_number, is_timestamp

logger = logging.getLogger("trend-analyzer")


def finite_values(points):
    """Values of the points whose value is a finite number, in input order."""
    return [p.value for p in points if is_finite_number(p.value)]


class TrendAnalyzer:
    """
    Computes direction, strength and growth rate of a series.
    """
    # |growth rate| below this (in percent) is treated as flat
    STABLE_GROWTH_THRESHOLD = 1.0
    # |correlation| below this means there is no consistent direction
    MIN_TREND_STRENGTH = 0.1

    def __init__(self, stable_growth_threshold=None, min_trend_strength=None):
        self.stable_growth_threshold = (self.STABLE_GROWTH_THRESHOLD
                                        if stable_growth_threshold is None else stable_growth_threshold)
        self.min_trend_strength = (self.MIN_TREND_STRENGTH
                                   if min_trend_strength is None else min_trend_strength)

    def analyze_trend(self, points):
        """
        Returns:
            dict with "direction" (TrendDirection), "strength" in [0, 1],
            "growth_rate" (percent change first -> last) and "slope"
            (value change per step of the fitted line)
        """
        points = list(points)
        usable = [p for p in points if is_timestamp(p.timestamp) and is_finite_number(p.value)]
        if len(usable) < len(points):
            logger.warning(f"Ignored {len(points) - len(usable)} point(s) without a valid timestamp or value")
        ordered = sorted(usable, key=lambda p: p.timestamp)
        if len(ordered) < 2:
            return {
                "direction": TrendDirection.STABLE,
                "strength": 0.0,
                "growth_rate": 0.0,
                "slope": 0.0,
            }

        y = np.array([p.value for p in ordered], dtype=float)
        x = np.arange(len(y), dtype=float)

        # Centre values to keep the sums small for large magnitudes
        dx = x - x.mean()
        dy = y - y.mean()
        sxx = float(np.sum(dx * dx))
        syy = float(np.sum(dy * dy))
        sxy = float(np.sum(dx * dy))

        slope = sxy / sxx if sxx > 0 else 0.0
        denominator = np.sqrt(sxx * syy)
        correlation = sxy / denominator if denominator > 0 and np.isfinite(denominator) else 0.0
        strength = float(min(1.0, abs(correlation))) if np.isfinite(correlation) else 0.0

        growth_rate = self.growth_rate(y[0], y[-1])

        if strength < self.min_trend_strength or abs(growth_rate) < self.stable_growth_threshold:
            direction = TrendDirection.STABLE
        elif growth_rate > 0:
            direction = TrendDirection.INCREASING
        else:
            direction = TrendDirection.DECREASING

        return {
            "direction": direction,
            "strength": strength,
            "growth_rate": growth_rate,
            "slope": slope if np.isfinite(slope) else 0.0,
        }

    @staticmethod
    def growth_rate(first, last):
        """Percent change from ``first`` to ``last``; 0 when the base is zero."""
        if first == 0:
            return 0.0
        rate = (float(last) - float(first)) / abs(float(first)) * 100
        return rate if np.isfinite(rate) else 0.0


class Aggregator:
    """
    Reduces a series to sum, average, max or min of its values.
    """
    def aggregate(self, points, operation="average"):
        try:
            operation = AggregationType(operation)
        except ValueError:
            raise ValueError(f"Unknown aggregation type: {operation!r}") from None

        values = finite_values(points)
        if not values:
            return 0.0

        array = np.array(values, dtype=float)
        if operation == AggregationType.SUM:
            return float(np.sum(array))
        if operation == AggregationType.AVERAGE:
            return float(np.mean(array))
        if operation == AggregationType.MAX:
            return float(np.max(array))
        return float(np.min(array))


def analyze_trend(points):
    return TrendAnalyzer().analyze_trend(points)


def aggregate_time_series(points, operation="average"):
    return Aggregator().aggregate(points, operation)
