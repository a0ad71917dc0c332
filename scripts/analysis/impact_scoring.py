#!/usr/bin/env python3
# scripts/analysis/impact_scoring.py
"""
AI Impact Scoring - combines AI growth and job demand change into an impact score
and buckets roles by disruption risk

Impact Score = (AI Growth Rate - Job Demand Change) x (1 - Volatility x Dampening)
Volatility = min(1, (|AI Growth Rate| + |Job Demand Change|) / 200)
"""
import logging
import math
import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
from utils.data_models import Classification, RiskLevel, is_finite_number

logger = logging.getLogger("impact-scorer")


class ImpactScorer:
    """
    Pure function of (ai_growth_rate, job_demand_change); holds only constants.
    """
    VOLATILITY_DAMPENING = 0.1
    # Growth rates are percentages; 100% change maps to volatility 1
    VOLATILITY_SCALE = 100.0

    def calculate_volatility(self, ai_growth_rate, job_demand_change):
        ai_volatility = abs(ai_growth_rate) / self.VOLATILITY_SCALE
        job_volatility = abs(job_demand_change) / self.VOLATILITY_SCALE
        # Halve each term first so huge inputs cannot overflow
        return min(1.0, ai_volatility / 2 + job_volatility / 2)

    def calculate_impact_score(self, ai_growth_rate, job_demand_change):
        if not (is_finite_number(ai_growth_rate) and is_finite_number(job_demand_change)):
            logger.warning(f"Non-finite impact inputs ({ai_growth_rate}, {job_demand_change}), scoring 0")
            return 0.0

        factor = 1 - self.calculate_volatility(ai_growth_rate, job_demand_change) * self.VOLATILITY_DAMPENING
        score = ai_growth_rate * factor - job_demand_change * factor

        if not math.isfinite(score):
            score = math.copysign(sys.float_info.max, score)
        return score


class RiskClassifier:
    """
    Maps an impact score to a risk level and classification.

    high   -> disruption  (score above HIGH_RISK_THRESHOLD)
    low    -> growth      (score below LOW_RISK_THRESHOLD)
    medium -> transition  (everything else)
    """
    HIGH_RISK_THRESHOLD = 30.0
    LOW_RISK_THRESHOLD = -10.0

    # Used only to label the reason; the bucket depends on the score
    DECLINING_DEMAND = -15.0
    GROWING_DEMAND = 10.0

    def __init__(self, high_threshold=None, low_threshold=None):
        self.high_threshold = self.HIGH_RISK_THRESHOLD if high_threshold is None else high_threshold
        self.low_threshold = self.LOW_RISK_THRESHOLD if low_threshold is None else low_threshold
        if self.low_threshold > self.high_threshold:
            raise ValueError("low_threshold must not exceed high_threshold")

    def classify_risk(self, impact_score, job_demand_change):
        """
        Returns:
            dict with "risk_level" (RiskLevel) and "classification" (Classification)
        """
        if not is_finite_number(impact_score):
            logger.warning(f"Non-finite impact score {impact_score}, classifying as transition")
            return {"risk_level": RiskLevel.MEDIUM, "classification": Classification.TRANSITION}

        if impact_score > self.high_threshold:
            return {"risk_level": RiskLevel.HIGH, "classification": Classification.DISRUPTION}
        if impact_score < self.low_threshold:
            return {"risk_level": RiskLevel.LOW, "classification": Classification.GROWTH}
        return {"risk_level": RiskLevel.MEDIUM, "classification": Classification.TRANSITION}

    def describe(self, impact_score, job_demand_change):
        """Short human-readable reason for the bucket, used in reports."""
        result = self.classify_risk(impact_score, job_demand_change)
        demand_known = is_finite_number(job_demand_change)

        if result["risk_level"] == RiskLevel.HIGH:
            if demand_known and job_demand_change < self.DECLINING_DEMAND:
                return "AI growth outpaces demand while demand is falling"
            return "AI growth strongly outpaces job demand"
        if result["risk_level"] == RiskLevel.LOW:
            if demand_known and job_demand_change > self.GROWING_DEMAND:
                return "Job demand is growing faster than AI development"
            return "Job demand keeps ahead of AI development"
        return "AI growth and job demand are moving at a comparable pace"


def calculate_impact_score(ai_growth_rate, job_demand_change):
    return ImpactScorer().calculate_impact_score(ai_growth_rate, job_demand_change)


def classify_risk(impact_score, job_demand_change):
    return RiskClassifier().classify_risk(impact_score, job_demand_change)
