#!/usr/bin/env python3
# scripts/analysis/generate_insights.py
"""
Insight generation - turns impact scores and trends into short narrative findings
"""
import hashlib
import logging
import os
import sys

import numpy as np

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
from analysis.trend_analysis import TrendAnalyzer
from utils.data_models import (
    Classification,
    GeneratedInsight,
    InsightType,
    RiskLevel,
    is_finite_number,
    unwrap_source,
)
from utils.role_catalog import RoleCatalog

logger = logging.getLogger("insight-generator")


def insight_id(insight_type, title):
    """Stable id so the same finding keeps its id across runs."""
    digest = hashlib.sha1(f"{InsightType(insight_type).value}:{title}".encode("utf-8")).hexdigest()
    return f"insight-{digest[:12]}"


def pearson_correlation(x, y):
    """Correlation over the common prefix of two value lists; 0 when undefined."""
    n = min(len(x), len(y))
    if n < 2:
        return 0.0

    xs = np.array(x[:n], dtype=float)
    ys = np.array(y[:n], dtype=float)
    dx = xs - xs.mean()
    dy = ys - ys.mean()
    denominator = np.sqrt(np.sum(dx * dx) * np.sum(dy * dy))
    if denominator == 0 or not np.isfinite(denominator):
        return 0.0
    correlation = float(np.sum(dx * dy) / denominator)
    return correlation if np.isfinite(correlation) else 0.0


class InsightGenerator:
    """
    Builds GeneratedInsight records for the insight panel.
    """
    MAX_INSIGHTS = 10

    def __init__(self, catalog=None, trend_analyzer=None):
        self.catalog = catalog or RoleCatalog()
        self.trend_analyzer = trend_analyzer or TrendAnalyzer()

    def _insight(self, insight_type, title, description, confidence, relevant_data, actionable):
        return GeneratedInsight(
            id=insight_id(insight_type, title),
            type=InsightType(insight_type),
            title=title,
            description=description,
            confidence=confidence,
            relevant_data=list(relevant_data),
            actionable=actionable,
        )

    def generate_insights(self, context, ai_data, job_data_list, impacts):
        """
        Returns:
            Up to MAX_INSIGHTS insights, actionable ones first, then by confidence
        """
        ai_data = unwrap_source(ai_data)
        job_data_list = list(unwrap_source(job_data_list))
        impacts = list(impacts)

        insights = []
        insights.extend(self.market_overview_insights(ai_data, impacts))

        selected = list(context.selected_roles) if context is not None else []
        if len(selected) == 1:
            insights.extend(self.single_role_insights(selected[0], impacts))
        elif len(selected) == 2 and context.comparison_mode:
            insights.extend(self.comparison_insights(selected, impacts))

        insights.extend(self.trend_insights(ai_data, job_data_list))
        insights.extend(self.risk_insights(impacts))
        insights.extend(self.opportunity_insights(impacts))
        insights.extend(self.correlation_insights(ai_data, job_data_list))

        insights.sort(key=lambda i: (not i.actionable, -i.confidence))
        logger.info(f"Generated {len(insights)} insights, keeping top {min(len(insights), self.MAX_INSIGHTS)}")
        return insights[:self.MAX_INSIGHTS]

    def market_overview_insights(self, ai_data, impacts):
        if not impacts:
            return []

        high_risk = sum(1 for i in impacts if i.risk_level == RiskLevel.HIGH)
        growth = sum(1 for i in impacts if i.classification == Classification.GROWTH)
        ai_trend = self.trend_analyzer.analyze_trend(ai_data.time_series_data)

        return [self._insight(
            InsightType.TREND,
            "AI Development Acceleration Impact",
            f"AI repository activity changed {ai_trend['growth_rate']:.1f}% over the period, affecting "
            f"{len(impacts)} analyzed roles. {high_risk} roles face high disruption risk while "
            f"{growth} roles show growth opportunities.",
            0.85,
            [i.role_id for i in impacts],
            True
        )]

    def single_role_insights(self, role_id, impacts):
        impact = next((i for i in impacts if i.role_id == role_id), None)
        if impact is None:
            return []

        name = self.catalog.role_name(role_id)
        classification = self.catalog.classifications[Classification(impact.classification).value]
        risk = self.catalog.risk_levels[RiskLevel(impact.risk_level).value]

        return [self._insight(
            InsightType.TREND,
            f"{name}: {classification['label']} Analysis",
            f"{name} positions are classified as {classification['description'].lower()}. With "
            f"{impact.job_demand_change:.1f}% job market change and AI impact score of "
            f"{impact.impact_score:.1f}, this role shows {risk['label'].lower()} characteristics.",
            0.82,
            [role_id],
            True
        )]

    def comparison_insights(self, role_ids, impacts):
        first_id, second_id = role_ids[:2]
        first = next((i for i in impacts if i.role_id == first_id), None)
        second = next((i for i in impacts if i.role_id == second_id), None)
        if first is None or second is None:
            return []

        first_name = self.catalog.role_name(first_id)
        second_name = self.catalog.role_name(second_id)
        score_diff = abs(first.impact_score - second.impact_score)
        demand_diff = abs(first.job_demand_change - second.job_demand_change)
        pressured = first_name if first.impact_score > second.impact_score else second_name

        return [self._insight(
            InsightType.COMPARISON,
            f"{first_name} vs {second_name}: Strategic Comparison",
            f"Comparing {first_name} ({Classification(first.classification).value}) and {second_name} "
            f"({Classification(second.classification).value}) reveals a {score_diff:.1f} point difference "
            f"in AI impact scores and {demand_diff:.1f}% difference in job demand trends. "
            f"{pressured} shows higher transformation pressure.",
            0.78,
            [first_id, second_id],
            True
        )]

    def trend_insights(self, ai_data, job_data_list):
        if not job_data_list:
            return []

        job_growth = [self.trend_analyzer.analyze_trend(job.time_series_data)["growth_rate"]
                      for job in job_data_list]
        avg_job_growth = float(np.mean(job_growth))
        ai_growth = self.trend_analyzer.analyze_trend(ai_data.time_series_data)["growth_rate"]

        if ai_growth > avg_job_growth:
            comparison = "outpaces"
            outlook = "This gap suggests increasing automation pressure across traditional roles."
        else:
            comparison = "trails"
            outlook = "Job demand is keeping pace with AI development for now."

        return [self._insight(
            InsightType.CORRELATION,
            "AI-Job Market Correlation Patterns",
            f"AI development growth ({ai_growth:.1f}%) {comparison} average job market growth "
            f"({avg_job_growth:.1f}%). {outlook}",
            0.75,
            [job.role_id for job in job_data_list],
            False
        )]

    def risk_insights(self, impacts):
        high_risk = [i for i in impacts if i.risk_level == RiskLevel.HIGH]
        if not high_risk:
            return []

        names = ", ".join(self.catalog.role_name(i.role_id) for i in high_risk)
        return [self._insight(
            InsightType.PREDICTION,
            "High-Risk Role Alert",
            f"{len(high_risk)} roles ({names}) face high disruption risk from AI advancement. These "
            f"positions need upskilling focused on AI collaboration and human-centric skills.",
            0.88,
            [i.role_id for i in high_risk],
            True
        )]

    def opportunity_insights(self, impacts):
        growth = [i for i in impacts if i.classification == Classification.GROWTH]
        if not growth:
            return []

        # Lowest impact score = demand furthest ahead of AI growth
        top = min(growth, key=lambda i: i.impact_score)
        return [self._insight(
            InsightType.PREDICTION,
            "Growth Opportunity Spotlight",
            f"{self.catalog.role_name(top.role_id)} shows the strongest growth potential with "
            f"{top.job_demand_change:.1f}% demand change. This role benefits from AI complementarity "
            f"rather than replacement.",
            0.83,
            [top.role_id],
            True
        )]

    def correlation_insights(self, ai_data, job_data_list):
        if not job_data_list:
            return []

        ai_values = [p.value for p in ai_data.time_series_data if is_finite_number(p.value)]
        correlations = []
        for job in job_data_list:
            job_values = [p.value for p in job.time_series_data if is_finite_number(p.value)]
            correlations.append(pearson_correlation(ai_values, job_values))
        avg_correlation = float(np.mean(correlations))

        sign = "positive" if avg_correlation > 0 else "negative"
        strength = "strong" if abs(avg_correlation) > 0.5 else "moderate"
        dynamics = "complementary" if avg_correlation > 0 else "competitive"

        return [self._insight(
            InsightType.CORRELATION,
            "AI-Employment Correlation Analysis",
            f"Statistical analysis shows {sign} correlation (r={avg_correlation:.2f}) between AI "
            f"development and job market trends. This {strength} relationship indicates {dynamics} "
            f"dynamics between AI growth and employment.",
            0.72,
            [job.role_id for job in job_data_list],
            False
        )]
