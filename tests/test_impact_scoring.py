import math
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'scripts'))

from analysis.impact_scoring import ImpactScorer, RiskClassifier, calculate_impact_score, classify_risk
from utils.data_models import Classification, RiskLevel


class TestImpactScorer:
    """Impact score formula"""

    def setup_method(self):
        self.scorer = ImpactScorer()

    def test_zero_inputs_score_zero(self):
        assert self.scorer.calculate_impact_score(0.0, 0.0) == 0.0

    def test_volatility_dampening(self):
        # volatility = (50 + 10) / 200 = 0.3, factor = 0.97
        assert self.scorer.calculate_impact_score(50.0, 10.0) == pytest.approx(40.0 * 0.97)

    def test_volatility_is_capped(self):
        assert self.scorer.calculate_volatility(500.0, -300.0) == 1.0
        assert self.scorer.calculate_impact_score(500.0, -300.0) == pytest.approx(800.0 * 0.9)

    def test_sign_follows_gap(self):
        assert self.scorer.calculate_impact_score(60.0, 10.0) > 0
        assert self.scorer.calculate_impact_score(10.0, 60.0) < 0
        assert self.scorer.calculate_impact_score(25.0, 25.0) == 0.0

    def test_deterministic(self):
        assert self.scorer.calculate_impact_score(37.5, -12.25) == self.scorer.calculate_impact_score(37.5, -12.25)
        assert ImpactScorer().calculate_impact_score(37.5, -12.25) == calculate_impact_score(37.5, -12.25)

    def test_antisymmetric(self):
        assert self.scorer.calculate_impact_score(70.0, 20.0) == pytest.approx(
            -self.scorer.calculate_impact_score(20.0, 70.0))

    def test_monotonic_in_ai_growth(self):
        scores = [self.scorer.calculate_impact_score(ai, 10.0) for ai in range(-100, 101, 10)]
        assert scores == sorted(scores)

    def test_non_finite_inputs_score_zero(self):
        assert calculate_impact_score(float("nan"), 10.0) == 0.0
        assert calculate_impact_score(10.0, float("inf")) == 0.0

    def test_huge_inputs_stay_finite(self):
        score = self.scorer.calculate_impact_score(1e308, -1e308)
        assert math.isfinite(score)
        assert score > 0


class TestRiskClassifier:
    """Score to risk bucket mapping"""

    def setup_method(self):
        self.classifier = RiskClassifier()

    def test_high_risk_disruption(self):
        result = self.classifier.classify_risk(40.0, -20.0)
        assert result == {"risk_level": RiskLevel.HIGH, "classification": Classification.DISRUPTION}

    def test_low_risk_growth(self):
        result = self.classifier.classify_risk(-30.0, 25.0)
        assert result == {"risk_level": RiskLevel.LOW, "classification": Classification.GROWTH}

    def test_medium_risk_transition(self):
        result = classify_risk(0.0, 0.0)
        assert result["risk_level"] == RiskLevel.MEDIUM
        assert result["classification"] == Classification.TRANSITION

    def test_thresholds_are_exclusive(self):
        assert self.classifier.classify_risk(30.0, 0.0)["risk_level"] == RiskLevel.MEDIUM
        assert self.classifier.classify_risk(-10.0, 0.0)["risk_level"] == RiskLevel.MEDIUM
        assert self.classifier.classify_risk(30.01, 0.0)["risk_level"] == RiskLevel.HIGH
        assert self.classifier.classify_risk(-10.01, 0.0)["risk_level"] == RiskLevel.LOW

    def test_monotonic_in_score(self):
        order = {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2}
        levels = [order[self.classifier.classify_risk(s, 0.0)["risk_level"]] for s in range(-50, 51, 5)]
        assert levels == sorted(levels)

    def test_risk_level_matches_classification(self):
        pairs = {
            RiskLevel.HIGH: Classification.DISRUPTION,
            RiskLevel.MEDIUM: Classification.TRANSITION,
            RiskLevel.LOW: Classification.GROWTH
        }
        for score in (-100.0, -10.0, 0.0, 30.0, 100.0):
            result = self.classifier.classify_risk(score, 5.0)
            assert pairs[result["risk_level"]] == result["classification"]

    def test_nan_score_is_transition(self):
        result = self.classifier.classify_risk(float("nan"), 0.0)
        assert result["risk_level"] == RiskLevel.MEDIUM

    def test_custom_thresholds(self):
        classifier = RiskClassifier(high_threshold=15.0, low_threshold=-15.0)
        assert classifier.classify_risk(20.0, 0.0)["risk_level"] == RiskLevel.HIGH
        assert classifier.classify_risk(-20.0, 0.0)["risk_level"] == RiskLevel.LOW

    def test_inverted_thresholds_rejected(self):
        with pytest.raises(ValueError):
            RiskClassifier(high_threshold=-20.0, low_threshold=10.0)

    def test_enum_members_compare_to_strings(self):
        assert self.classifier.classify_risk(40.0, -20.0)["risk_level"] == "high"

    def test_describe(self):
        assert "falling" in self.classifier.describe(40.0, -20.0)
        assert "growing" in self.classifier.describe(-30.0, 25.0)
        assert "comparable" in self.classifier.describe(0.0, 0.0)
