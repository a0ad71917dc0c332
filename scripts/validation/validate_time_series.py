#!/usr/bin/env python3
# scripts/validation/validate_time_series.py
"""
Validation Framework for Workforce Impact Data
Structural checks for time series, AI growth and job role records, plus
completeness and range checks. Validators flag out-of-range values instead of
clamping them so data-quality problems reach the caller.

Every validator accepts either a model instance or the parsed JSON dict and
returns a plain result without raising.
"""
import logging
import numbers
import os
import sys
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
from processing.time_series_normalizer import generate_time_points
from utils.data_models import (
    AIGrowthData,
    AnalysisContext,
    Classification,
    GeneratedInsight,
    InsightType,
    JobCategory,
    JobRoleData,
    JobRoleImpact,
    RiskLevel,
    TimeSeriesPoint,
    TrendDirection,
    is_finite_number,
    parse_timestamp,
)

logger = logging.getLogger(__name__)

MIN_START_DATE = datetime(2020, 1, 1)


def _field(record, attribute, key):
    """Read a field from a dataclass record or a camelCase dict."""
    if isinstance(record, dict):
        return record.get(key)
    return getattr(record, attribute, None)


def _enum_value(value):
    return getattr(value, "value", value)


def _is_unit_interval(value) -> bool:
    return is_finite_number(value) and 0 <= value <= 1


def _is_non_empty_string(value) -> bool:
    return isinstance(value, str) and len(value) > 0


def _is_non_negative_int(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool) and value >= 0


# Type guards

def is_job_category(value) -> bool:
    return _enum_value(value) in {c.value for c in JobCategory}


def is_risk_level(value) -> bool:
    return _enum_value(value) in {r.value for r in RiskLevel}


def is_trend_direction(value) -> bool:
    return _enum_value(value) in {t.value for t in TrendDirection}


def is_classification(value) -> bool:
    return _enum_value(value) in {c.value for c in Classification}


def is_insight_type(value) -> bool:
    return _enum_value(value) in {i.value for i in InsightType}


# Record validators

def validate_time_series_point(point: Any) -> bool:
    if not isinstance(point, (TimeSeriesPoint, dict)):
        return False

    timestamp = _field(point, "timestamp", "timestamp")
    if isinstance(point, dict) and isinstance(timestamp, str):
        try:
            timestamp = parse_timestamp(timestamp)
        except ValueError:
            return False

    return (
        isinstance(timestamp, datetime) and
        is_finite_number(_field(point, "value", "value")) and
        _is_unit_interval(_field(point, "confidence", "confidence")) and
        isinstance(_field(point, "is_estimated", "isEstimated"), bool)
    )


def _validate_series(series) -> bool:
    return isinstance(series, (list, tuple)) and all(validate_time_series_point(p) for p in series)


def validate_job_role_data(data: Any) -> bool:
    if not isinstance(data, (JobRoleData, dict)):
        return False

    return (
        _is_non_empty_string(_field(data, "role_id", "roleId")) and
        _validate_series(_field(data, "time_series_data", "timeSeriesData")) and
        is_trend_direction(_field(data, "current_trend", "currentTrend")) and
        is_finite_number(_field(data, "growth_rate", "growthRate")) and
        _is_unit_interval(_field(data, "confidence", "confidence"))
    )


def _validate_tech_category(tech) -> bool:
    return (
        _is_non_empty_string(_field(tech, "name", "name")) and
        _is_non_negative_int(_field(tech, "count", "count")) and
        is_finite_number(_field(tech, "growth_rate", "growthRate"))
    )


def validate_ai_growth_data(data: Any) -> bool:
    if not isinstance(data, (AIGrowthData, dict)):
        return False

    series = _field(data, "time_series_data", "timeSeriesData")
    breakdown = _field(data, "technology_breakdown", "technologyBreakdown")
    return (
        _validate_series(series) and
        len(series) > 0 and
        _is_non_negative_int(_field(data, "repository_count", "repositoryCount")) and
        is_finite_number(_field(data, "contributor_growth", "contributorGrowth")) and
        isinstance(breakdown, (list, tuple)) and
        all(_validate_tech_category(t) for t in breakdown)
    )


def validate_job_role_impact(impact: Any) -> bool:
    if not isinstance(impact, (JobRoleImpact, dict)):
        return False

    return (
        _is_non_empty_string(_field(impact, "role_id", "roleId")) and
        is_finite_number(_field(impact, "ai_growth_rate", "aiGrowthRate")) and
        is_finite_number(_field(impact, "job_demand_change", "jobDemandChange")) and
        is_finite_number(_field(impact, "impact_score", "impactScore")) and
        is_risk_level(_field(impact, "risk_level", "riskLevel")) and
        is_classification(_field(impact, "classification", "classification"))
    )


def validate_analysis_context(context: Any) -> bool:
    if isinstance(context, dict):
        try:
            context = AnalysisContext.from_dict(context)
        except (KeyError, TypeError, ValueError):
            return False
    if not isinstance(context, AnalysisContext):
        return False

    time_range = context.time_range
    min_confidence = context.filters.min_confidence
    return (
        all(isinstance(role, str) for role in context.selected_roles) and
        len(time_range) == 2 and
        all(isinstance(t, datetime) for t in time_range) and
        time_range[0] <= time_range[1] and
        isinstance(context.comparison_mode, bool) and
        (min_confidence is None or _is_unit_interval(min_confidence))
    )


def validate_generated_insight(insight: Any) -> bool:
    if not isinstance(insight, (GeneratedInsight, dict)):
        return False

    relevant = _field(insight, "relevant_data", "relevantData")
    return (
        _is_non_empty_string(_field(insight, "id", "id")) and
        is_insight_type(_field(insight, "type", "type")) and
        _is_non_empty_string(_field(insight, "title", "title")) and
        _is_non_empty_string(_field(insight, "description", "description")) and
        _is_unit_interval(_field(insight, "confidence", "confidence")) and
        isinstance(relevant, (list, tuple)) and
        all(isinstance(item, str) for item in relevant) and
        isinstance(_field(insight, "actionable", "actionable"), bool)
    )


# Batch and range validation

def validate_data_quality(items, validator: Callable[[Any], bool], min_items: int = 1) -> Dict[str, Any]:
    """
    Run ``validator`` over every item.

    Returns:
        {"is_valid": bool, "errors": [str], "valid_items": [item]}
    """
    errors: List[str] = []
    valid_items: List[Any] = []

    if not isinstance(items, (list, tuple)):
        errors.append("Data must be a list")
        return {"is_valid": False, "errors": errors, "valid_items": valid_items}

    if len(items) < min_items:
        errors.append(f"Minimum {min_items} items required, got {len(items)}")

    for index, item in enumerate(items):
        if validator(item):
            valid_items.append(item)
        else:
            errors.append(f"Invalid item at index {index}")

    if errors:
        logger.warning(f"Data quality check found {len(errors)} issue(s); {len(valid_items)} valid item(s) kept")

    return {
        "is_valid": len(errors) == 0 and len(valid_items) >= min_items,
        "errors": errors,
        "valid_items": valid_items
    }


def validate_data_completeness(points, time_range, granularity="month") -> Dict[str, Any]:
    """
    Compare a series against the regular grid for ``time_range``.

    Returns:
        {"completeness": share of grid timestamps present,
         "missing_periods": [datetime], "estimated_count": int}
    """
    points = list(points)
    if not points:
        return {"completeness": 0.0, "missing_periods": [], "estimated_count": 0}

    expected = generate_time_points(time_range, granularity)
    actual = {p.timestamp for p in points}
    missing = [t for t in expected if t not in actual]
    estimated_count = sum(1 for p in points if p.is_estimated)

    completeness = (len(expected) - len(missing)) / len(expected) if expected else 0.0
    return {
        "completeness": completeness,
        "missing_periods": missing,
        "estimated_count": estimated_count
    }


def validate_numeric_range(value, min_value=float("-inf"), max_value=float("inf"),
                           field_name="value") -> Dict[str, Optional[str]]:
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or value != value:
        return {"is_valid": False, "error": f"{field_name} must be a valid number"}

    if value < min_value:
        return {"is_valid": False, "error": f"{field_name} must be >= {min_value}"}

    if value > max_value:
        return {"is_valid": False, "error": f"{field_name} must be <= {max_value}"}

    return {"is_valid": True, "error": None}


def validate_date_range(start_date, end_date, now=None) -> Dict[str, Optional[str]]:
    if not isinstance(start_date, datetime) or not isinstance(end_date, datetime):
        return {"is_valid": False, "error": "Both dates must be valid datetime objects"}

    start_date, end_date = parse_timestamp(start_date), parse_timestamp(end_date)
    if start_date > end_date:
        return {"is_valid": False, "error": "Start date must be before or equal to end date"}

    if start_date < MIN_START_DATE:
        return {"is_valid": False, "error": "Start date cannot be before 2020"}

    if end_date > (now or datetime.now()):
        return {"is_valid": False, "error": "End date cannot be in the future"}

    return {"is_valid": True, "error": None}
