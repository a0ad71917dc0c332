#!/usr/bin/env python3
# scripts/analysis/confidence_scoring.py
"""
Confidence scoring for time series - combines point-level confidence with
data completeness, source reliability and temporal recency
"""
import logging
import math
import os
import sys

import numpy as np

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
from utils.data_models import is_finite_number

logger = logging.getLogger("confidence-calculator")


def clamp_unit(value):
    """Clamp into [0, 1]; anything that is not a finite number becomes 0."""
    if not is_finite_number(value):
        return 0.0
    return min(1.0, max(0.0, float(value)))


class ConfidenceCalculator:
    """
    Weighted confidence score in [0, 1].
    """
    WEIGHTS = {
        "point_confidence": 0.4,
        "completeness": 0.3,
        "reliability": 0.2,
        "recency": 0.1
    }

    # Series shorter than this are penalised for thin evidence
    FULL_VOLUME_POINTS = 12
    # Share of the observed-data term lost when every point is estimated
    ESTIMATED_PENALTY = 0.3

    def __init__(self, weights=None, full_volume_points=None):
        self.weights = dict(weights or self.WEIGHTS)
        self.full_volume_points = full_volume_points or self.FULL_VOLUME_POINTS

    def observed_quality(self, points):
        """Average point confidence scaled down for estimated points and low volume."""
        confidences = [clamp_unit(p.confidence) for p in points]
        avg_confidence = float(np.mean(confidences))

        estimated_ratio = sum(1 for p in points if p.is_estimated) / len(points)
        volume_factor = min(1.0, math.sqrt(len(points) / self.full_volume_points))

        return avg_confidence * (1 - self.ESTIMATED_PENALTY * estimated_ratio) * volume_factor

    def calculate_confidence(self, points, data_completeness=0.0, source_reliability=0.0, temporal_recency=0.0):
        """
        Args:
            points: sequence of TimeSeriesPoint
            data_completeness, source_reliability, temporal_recency: factors in [0, 1]

        Returns:
            Confidence in [0, 1]; 0 for an empty series
        """
        points = list(points)
        if not points:
            return 0.0

        confidence = (
            self.observed_quality(points) * self.weights["point_confidence"] +
            clamp_unit(data_completeness) * self.weights["completeness"] +
            clamp_unit(source_reliability) * self.weights["reliability"] +
            clamp_unit(temporal_recency) * self.weights["recency"]
        )
        return clamp_unit(confidence)


def calculate_confidence(points, factors):
    """
    Convenience wrapper taking the factors as a dict with
    ``data_completeness``, ``source_reliability`` and ``temporal_recency``.
    """
    return ConfidenceCalculator().calculate_confidence(
        points,
        data_completeness=factors.get("data_completeness", 0.0),
        source_reliability=factors.get("source_reliability", 0.0),
        temporal_recency=factors.get("temporal_recency", 0.0),
    )
