import os
import sys
from datetime import datetime

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'scripts'))

from analysis.role_impact_analyzer import RoleImpactAnalyzer
from utils.data_models import (
    AIGrowthData,
    Classification,
    JobRoleData,
    JobRoleImpact,
    LiveData,
    RiskLevel,
    TimeSeriesPoint,
    TrendDirection,
)
from utils.role_catalog import RoleCatalog


def monthly(values, year=2022):
    return [
        TimeSeriesPoint(datetime(year + i // 12, i % 12 + 1, 1), float(v), 0.9)
        for i, v in enumerate(values)
    ]


def job(role_id, values, growth=0.0):
    return JobRoleData(role_id, monthly(values), TrendDirection.STABLE, growth, 0.85)


@pytest.fixture
def ai_data():
    # doubles over the year: +100%
    return AIGrowthData(monthly([100 + 100 * i / 11 for i in range(12)]), 5000, 40.0)


class TestAdvancedImpactScore:

    def setup_method(self):
        self.analyzer = RoleImpactAnalyzer()

    def test_category_factors_adjust_score(self):
        factors = RoleCatalog().get_role_factors("ai-engineer")
        result = self.analyzer.calculate_advanced_impact_score(50.0, 10.0, factors)

        # 0.9*0.25 + 0.2*0.30 + (1-0.8)*0.20 + 0.4*0.15 = 0.385
        assert result["base_score"] == pytest.approx(38.8)
        assert result["adjusted_score"] == pytest.approx(38.8 * 0.885)
        assert sum(result["factors"].values()) == pytest.approx(0.385)

    def test_missing_factors_use_defaults(self):
        result = self.analyzer.calculate_advanced_impact_score(50.0, 10.0)
        assert result["factors"]["market_volatility"] == pytest.approx(0.3 * 0.15)
        assert result["factors"]["complementarity"] == pytest.approx(0.5 * 0.20)

    def test_confidence_bounds(self):
        full = {"skill_overlap": 0.5, "automation_risk": 0.5, "complementarity": 0.5, "market_volatility": 0.5}
        assert self.analyzer.calculate_score_confidence(10.0, 5.0, full) == pytest.approx(0.885)
        assert self.analyzer.calculate_score_confidence(5000.0, -5000.0, {}) == pytest.approx(0.5)
        assert 0.3 <= self.analyzer.calculate_score_confidence(float("nan"), 0.0, {}) <= 0.95

    def test_non_finite_growth_scores_zero(self):
        result = self.analyzer.calculate_advanced_impact_score(float("nan"), 10.0)
        assert result["base_score"] == 0.0
        assert result["adjusted_score"] == 0.0


class TestSeriesMetrics:

    def setup_method(self):
        self.analyzer = RoleImpactAnalyzer()

    def test_seasonality_needs_a_year(self):
        assert self.analyzer.calculate_seasonality(monthly([1, 2, 3])) == 0.0
        assert self.analyzer.calculate_seasonality(monthly([10] * 12)) == 0.0
        assert self.analyzer.calculate_seasonality(monthly([10, 20] * 6)) > 0.0

    def test_volatility(self):
        assert self.analyzer.calculate_volatility(monthly([10, 10, 10])) == 0.0
        assert self.analyzer.calculate_volatility(monthly([10, 20, 10, 20])) > 0.0
        assert self.analyzer.calculate_volatility([]) == 0.0

    def test_data_quality(self):
        assert self.analyzer.assess_data_quality([]) == 0.0
        quality = self.analyzer.assess_data_quality(monthly([1, 2, 3, 4]))
        assert quality == pytest.approx(0.9)

    def test_projection(self):
        assert self.analyzer.project_future_trends([], 10.0) == {
            "six_months": 0.0, "one_year": 0.0, "two_years": 0.0
        }
        projection = self.analyzer.project_future_trends(monthly([100 + 10 * i for i in range(12)]), 50.0)
        assert projection["six_months"] > 210
        assert projection["two_years"] > projection["one_year"] > projection["six_months"]

    def test_undated_points_are_skipped(self):
        points = monthly([10, 20, 10, 20]) + [TimeSeriesPoint(None, 500.0, 0.9)]
        assert self.analyzer.calculate_volatility(points) == self.analyzer.calculate_volatility(monthly([10, 20, 10, 20]))
        assert self.analyzer.assess_data_quality(points) == self.analyzer.assess_data_quality(monthly([10, 20, 10, 20]))
        assert self.analyzer.project_future_trends(points, 0.0)["six_months"] < 500.0


class TestRoleImpact:

    def setup_method(self):
        self.analyzer = RoleImpactAnalyzer()

    def test_unknown_role_raises(self, ai_data):
        with pytest.raises(KeyError):
            self.analyzer.analyze_role_impact("astronaut", ai_data, job("astronaut", [1, 2]))

    def test_analyze_role_impact(self, ai_data):
        result = self.analyzer.analyze_role_impact("manual-tester", ai_data, job("manual-tester", [100] * 11 + [80]))
        impact = result["impact"]

        assert isinstance(impact, JobRoleImpact)
        assert impact.ai_growth_rate == pytest.approx(100.0)
        assert impact.job_demand_change == pytest.approx(-20.0)
        assert impact.risk_level == RiskLevel.HIGH
        assert impact.classification == Classification.DISRUPTION
        assert set(result["detailed_analysis"]) == {
            "trend_strength", "seasonality", "volatility", "data_quality", "future_projection", "score_confidence"
        }

    def test_calculate_impact_scores_keeps_order_and_falls_back(self, ai_data):
        jobs = [
            job("data-engineer", [100 + 20 * i for i in range(12)]),
            job("astronaut", [10] * 12),
            job("manual-tester", [100] * 12),
        ]
        impacts = self.analyzer.calculate_impact_scores(
            LiveData(ai_data), LiveData(jobs), (datetime(2022, 1, 1), datetime(2022, 12, 31)))

        assert [i.role_id for i in impacts] == ["data-engineer", "astronaut", "manual-tester"]
        # uncatalogued roles get the unadjusted score
        assert impacts[1].impact_score == pytest.approx(self.analyzer.scorer.calculate_impact_score(100.0, 0.0))
        for impact in impacts:
            assert self.analyzer.classifier.classify_risk(impact.impact_score, impact.job_demand_change) == {
                "risk_level": impact.risk_level, "classification": impact.classification
            }

    def test_default_time_range(self, ai_data):
        impacts = self.analyzer.calculate_impact_scores(ai_data, [job("ui-designer", [5, 6])])
        assert len(impacts) == 1

    def test_no_data_gives_no_impacts(self):
        empty = AIGrowthData([], 0, 0.0)
        assert self.analyzer.calculate_impact_scores(empty, []) == []

    def test_score_aligned_roles_matches_full_path(self, ai_data):
        jobs = [job("data-engineer", [100 + 20 * i for i in range(12)]), job("astronaut", [10] * 12)]
        time_range = (datetime(2022, 1, 1), datetime(2022, 12, 31))
        aligned = self.analyzer.aligner.align(ai_data, jobs, time_range)

        assert self.analyzer.score_aligned_roles(aligned["aligned_ai_data"], aligned["aligned_job_data"]) == \
            self.analyzer.calculate_impact_scores(ai_data, jobs, time_range)
