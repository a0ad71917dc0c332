#!/usr/bin/env python3
# scripts/analysis/role_impact_analyzer.py
"""
Role Impact Analyzer - role-aware impact scoring for the tracked job roles

Extends the basic impact score with category factors from the role catalog:
Adjusted Score = Base Score x (1 + Skill Overlap + Automation Risk + (1 - Complementarity) + Market Volatility - 0.5)
where every factor is weighted (see FACTOR_WEIGHTS). Also derives the detailed
per-role metrics shown in the role explorer: seasonality, volatility, data
quality and short-range projections.
"""
import logging
import math
import os
import sys

import numpy as np

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
from analysis.impact_scoring import ImpactScorer, RiskClassifier
from analysis.trend_analysis import TrendAnalyzer
from processing.source_alignment import SourceAligner
from processing.time_series_normalizer import resolve_time_range
from utils.data_models import JobRoleImpact, is_finite_number, is_timestamp, unwrap_source
from utils.role_catalog import RoleCatalog

logger = logging.getLogger("role-impact-analyzer")

DAYS_PER_MONTH = 30.4375


def _finite_or(value, fallback):
    return value if math.isfinite(value) else fallback


def _usable_points(points):
    """Points with a datetime timestamp and a finite value, in time order."""
    return sorted((p for p in points if is_timestamp(p.timestamp) and is_finite_number(p.value)),
                  key=lambda p: p.timestamp)


class RoleImpactAnalyzer:
    """
    Calculates impact scores for job roles using the catalog's category factors.
    """
    FACTOR_WEIGHTS = {
        "skill_overlap": 0.25,
        "automation_risk": 0.30,
        "complementarity": 0.20,
        "market_volatility": 0.15
    }

    # Used when a caller omits a factor
    FACTOR_DEFAULTS = {
        "skill_overlap": 0.5,
        "automation_risk": 0.5,
        "complementarity": 0.5,
        "market_volatility": 0.3
    }

    # Share of AI growth assumed to feed through to job demand projections
    AI_PROJECTION_INFLUENCE = 0.1

    def __init__(self, catalog=None, scorer=None, classifier=None, trend_analyzer=None, aligner=None):
        self.catalog = catalog or RoleCatalog()
        self.scorer = scorer or ImpactScorer()
        self.classifier = classifier or RiskClassifier()
        self.trend_analyzer = trend_analyzer or TrendAnalyzer()
        self.aligner = aligner or SourceAligner()

    def calculate_advanced_impact_score(self, ai_growth_rate, job_demand_change, additional_factors=None):
        """
        Impact score adjusted by role factors.

        Args:
            ai_growth_rate: AI growth in percent
            job_demand_change: job demand change in percent
            additional_factors: optional dict with skill_overlap, automation_risk,
                complementarity and market_volatility (each 0-1)

        Returns:
            dict with base_score, adjusted_score, factors (weighted contributions)
            and confidence
        """
        additional_factors = additional_factors or {}
        base_score = self.scorer.calculate_impact_score(ai_growth_rate, job_demand_change)

        resolved = {}
        for name, default in self.FACTOR_DEFAULTS.items():
            value = additional_factors.get(name)
            resolved[name] = min(1.0, max(0.0, value)) if is_finite_number(value) else default

        factors = {
            "skill_overlap": resolved["skill_overlap"] * self.FACTOR_WEIGHTS["skill_overlap"],
            "automation_risk": resolved["automation_risk"] * self.FACTOR_WEIGHTS["automation_risk"],
            # Roles that complement AI are less exposed
            "complementarity": (1 - resolved["complementarity"]) * self.FACTOR_WEIGHTS["complementarity"],
            "market_volatility": resolved["market_volatility"] * self.FACTOR_WEIGHTS["market_volatility"],
        }

        adjustment = sum(factors.values())
        adjusted_score = base_score * (1 + adjustment - 0.5)
        if not math.isfinite(adjusted_score):
            adjusted_score = math.copysign(sys.float_info.max, adjusted_score)

        return {
            "base_score": base_score,
            "adjusted_score": adjusted_score,
            "factors": factors,
            "confidence": self.calculate_score_confidence(ai_growth_rate, job_demand_change, additional_factors)
        }

    def calculate_score_confidence(self, ai_growth_rate, job_demand_change, factors):
        """Confidence in a score, bounded to [0.3, 0.95]."""
        confidence = 0.7

        # Up to 0.2 bonus for a complete set of factors
        supplied = sum(1 for name in self.FACTOR_DEFAULTS if is_finite_number(factors.get(name)))
        confidence += (supplied / len(self.FACTOR_DEFAULTS)) * 0.2

        # Extreme values are less certain
        if is_finite_number(ai_growth_rate) and is_finite_number(job_demand_change):
            magnitude = abs(ai_growth_rate) / 1000 + abs(job_demand_change) / 1000
            confidence -= min(0.2, magnitude)
        else:
            confidence -= 0.2

        return max(0.3, min(0.95, confidence))

    def calculate_seasonality(self, points):
        """Coefficient of variation across calendar-month averages; 0 for under a year of data."""
        values_by_month = {}
        for point in _usable_points(points):
            values_by_month.setdefault(point.timestamp.month, []).append(point.value)

        if sum(len(v) for v in values_by_month.values()) < 12:
            return 0.0

        monthly_averages = np.array([np.mean(v) for v in values_by_month.values()], dtype=float)
        mean = float(np.mean(monthly_averages))
        if mean == 0 or not math.isfinite(mean):
            return 0.0
        return _finite_or(float(np.std(monthly_averages)) / abs(mean), 0.0)

    def calculate_volatility(self, points):
        """Standard deviation of period-over-period returns."""
        ordered = _usable_points(points)
        returns = []
        for previous, current in zip(ordered, ordered[1:]):
            if previous.value != 0:
                returns.append((current.value - previous.value) / previous.value)

        if not returns:
            return 0.0
        return _finite_or(float(np.std(returns)), 0.0)

    def assess_data_quality(self, points):
        """Quality in [0, 1] from estimated share, average confidence and gaps."""
        ordered = sorted((p for p in points if is_timestamp(p.timestamp)), key=lambda p: p.timestamp)
        if not ordered:
            return 0.0

        quality = 1.0
        estimated_ratio = sum(1 for p in ordered if p.is_estimated) / len(ordered)
        quality -= estimated_ratio * 0.3

        confidences = [min(1.0, max(0.0, p.confidence)) if is_finite_number(p.confidence) else 0.0
                       for p in ordered]
        quality *= float(np.mean(confidences))

        # Roughly one point per month expected
        span_days = (ordered[-1].timestamp - ordered[0].timestamp).days
        expected_points = int(span_days // 30) + 1
        quality *= min(1.0, len(ordered) / expected_points)

        return max(0.0, min(1.0, quality))

    def project_future_trends(self, points, ai_growth_rate):
        """Project the last value 6, 12 and 24 months ahead."""
        ordered = _usable_points(points)
        if not ordered:
            return {"six_months": 0.0, "one_year": 0.0, "two_years": 0.0}

        trend = self.trend_analyzer.analyze_trend(ordered)
        last_value = float(ordered[-1].value)
        span_months = (ordered[-1].timestamp - ordered[0].timestamp).days / DAYS_PER_MONTH
        monthly_rate = trend["growth_rate"] / span_months / 100 if span_months >= 1 else 0.0
        # Keep the base of the power positive
        monthly_rate = max(-0.99, monthly_rate)

        ai_rate = ai_growth_rate if is_finite_number(ai_growth_rate) else 0.0
        ai_factor = max(0.01, 1 + (ai_rate / 100) * self.AI_PROJECTION_INFLUENCE)

        def project(months, ai_exponent):
            try:
                projected = last_value * (1 + monthly_rate) ** months * ai_factor ** ai_exponent
            except OverflowError:
                return last_value
            return _finite_or(projected, last_value)

        return {
            "six_months": project(6, 0.5),
            "one_year": project(12, 1),
            "two_years": project(24, 2)
        }

    def analyze_role_impact(self, role_id, ai_data, job_data):
        """
        Detailed impact analysis for one catalog role.

        Raises:
            KeyError: if ``role_id`` is not in the role catalog
        """
        if self.catalog.get_role(role_id) is None:
            raise KeyError(f"Role not found: {role_id}")

        ai_trend = self.trend_analyzer.analyze_trend(ai_data.time_series_data)
        job_trend = self.trend_analyzer.analyze_trend(job_data.time_series_data)

        impact_analysis = self.calculate_advanced_impact_score(
            ai_trend["growth_rate"],
            job_trend["growth_rate"],
            self.catalog.get_role_factors(role_id)
        )
        risk = self.classifier.classify_risk(impact_analysis["adjusted_score"], job_trend["growth_rate"])

        impact = JobRoleImpact(
            role_id=role_id,
            ai_growth_rate=ai_trend["growth_rate"],
            job_demand_change=job_trend["growth_rate"],
            impact_score=impact_analysis["adjusted_score"],
            risk_level=risk["risk_level"],
            classification=risk["classification"],
        )

        detailed_analysis = {
            "trend_strength": max(ai_trend["strength"], job_trend["strength"]),
            "seasonality": self.calculate_seasonality(job_data.time_series_data),
            "volatility": self.calculate_volatility(job_data.time_series_data),
            "data_quality": self.assess_data_quality(job_data.time_series_data),
            "future_projection": self.project_future_trends(job_data.time_series_data, ai_trend["growth_rate"]),
            "score_confidence": impact_analysis["confidence"]
        }

        return {"impact": impact, "detailed_analysis": detailed_analysis}

    def basic_role_impact(self, role_id, ai_data, job_data):
        """Impact from the plain score, for roles without catalog factors."""
        ai_trend = self.trend_analyzer.analyze_trend(ai_data.time_series_data)
        job_trend = self.trend_analyzer.analyze_trend(job_data.time_series_data)
        impact_score = self.scorer.calculate_impact_score(ai_trend["growth_rate"], job_trend["growth_rate"])
        risk = self.classifier.classify_risk(impact_score, job_trend["growth_rate"])

        return JobRoleImpact(
            role_id=role_id,
            ai_growth_rate=ai_trend["growth_rate"],
            job_demand_change=job_trend["growth_rate"],
            impact_score=impact_score,
            risk_level=risk["risk_level"],
            classification=risk["classification"],
        )

    def default_time_range(self, ai_data, job_data_list):
        """Span of the AI series, or of all job series when the AI series is empty."""
        timestamps = [p.timestamp for p in ai_data.time_series_data if is_timestamp(p.timestamp)]
        if not timestamps:
            timestamps = [p.timestamp for role in job_data_list for p in role.time_series_data
                          if is_timestamp(p.timestamp)]
        if not timestamps:
            return None
        return min(timestamps), max(timestamps)

    def calculate_impact_scores(self, ai_data, job_data_list, time_range=None, granularity="month"):
        """
        Align all sources and compute a JobRoleImpact per role, in input order.
        """
        ai_data = unwrap_source(ai_data)
        job_data_list = list(unwrap_source(job_data_list))

        if time_range is None:
            time_range = self.default_time_range(ai_data, job_data_list)
            if time_range is None:
                logger.warning("No time series data available, no impact scores calculated")
                return []
        time_range = resolve_time_range(time_range)

        aligned = self.aligner.align(ai_data, job_data_list, time_range, granularity)
        return self.score_aligned_roles(aligned["aligned_ai_data"], aligned["aligned_job_data"])

    def score_aligned_roles(self, aligned_ai, aligned_jobs):
        """JobRoleImpact per role for series already on a common time axis, in input order."""
        impacts = []
        for role_data in aligned_jobs:
            try:
                result = self.analyze_role_impact(role_data.role_id, aligned_ai, role_data)
                impacts.append(result["impact"])
            except KeyError:
                logger.warning(f"Role '{role_data.role_id}' not in catalog, using basic impact calculation")
                impacts.append(self.basic_role_impact(role_data.role_id, aligned_ai, role_data))

        logger.info(f"Calculated impact scores for {len(impacts)} roles")
        return impacts
