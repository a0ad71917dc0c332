#!/usr/bin/env python3
# scripts/processing/load_series.py
"""
Loading of AI growth and job market series

Reads the JSON documents produced by the collectors, drops records that fail
validation and wraps the result as LiveData. generate_sample_data builds the
deterministic demo datasets (wrapped as SampleData) used when no collected
data is available.
"""
import json
import logging
import os
import sys
from datetime import datetime

import numpy as np
import pandas as pd

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
from utils.data_models import (
    AIGrowthData,
    JobRoleData,
    LiveData,
    SampleData,
    TechCategory,
    TimeSeriesPoint,
    TrendDirection,
)
from validation.validate_time_series import (
    validate_ai_growth_data,
    validate_data_quality,
    validate_job_role_data,
    validate_time_series_point,
)

logger = logging.getLogger("series-loader")

SAMPLE_TECHNOLOGY_BREAKDOWN = [
    ("Python", 15200, 45.3),
    ("JavaScript", 12800, 32.1),
    ("TypeScript", 9600, 58.7),
    ("Jupyter Notebook", 8400, 72.4),
    ("R", 4200, 28.9),
    ("C++", 3800, 15.6),
    ("Java", 3200, 12.3),
    ("Go", 2100, 41.2),
    ("Rust", 1800, 89.5),
    ("Swift", 1200, 23.7),
]

# role_id: (base postings, monthly trend, volatility, seasonality, reported growth, confidence)
SAMPLE_ROLE_PARAMS = {
    "ai-engineer": (800, 25, 120, 50, 78.5, 0.92),
    "data-scientist": (1200, 18, 150, 80, 45.2, 0.88),
    "ml-researcher": (300, 12, 80, 30, 92.3, 0.85),
    "software-developer": (3500, 8, 200, 150, 12.4, 0.90),
    "frontend-developer": (2200, 6, 180, 120, 8.7, 0.87),
    "backend-developer": (2800, 10, 190, 100, 15.3, 0.89),
    "fullstack-developer": (1800, 12, 160, 90, 18.9, 0.86),
    "devops-engineer": (1500, 15, 140, 70, 28.4, 0.88),
    "cloud-architect": (600, 8, 80, 40, 22.1, 0.84),
    "manual-tester": (1200, -3, 100, 60, -15.2, 0.83),
    "automation-engineer": (400, 5, 60, 30, 14.6, 0.81),
    "ux-designer": (1000, 4, 120, 80, 6.8, 0.82),
    "ui-designer": (800, 2, 100, 70, 2.1, 0.80),
    "product-manager": (900, 6, 90, 50, 25.4, 0.86),
    "engineering-manager": (500, 4, 60, 30, 19.7, 0.85),
    "support-engineer": (1400, -1, 130, 90, -8.3, 0.82),
    "technical-writer": (600, 3, 70, 40, 4.2, 0.79),
    "data-analyst": (1600, 10, 140, 100, 16.8, 0.87),
    "data-engineer": (800, 14, 100, 60, 34.5, 0.88),
}


def load_data(filepath):
    """Load data from a JSON file."""
    try:
        with open(filepath, 'r') as f:
            return json.load(f)
    except FileNotFoundError:
        logger.warning(f"File not found: {filepath}")
        return None
    except json.JSONDecodeError:
        logger.error(f"Error decoding JSON from {filepath}")
        return None


def _parse_records(records, parser, label):
    parsed = []
    for index, record in enumerate(records):
        try:
            parsed.append(parser(record))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed {label} record at index {index}: {e}")
    return parsed


def parse_ai_growth_data(document):
    """
    Build AIGrowthData from a parsed JSON document.

    Malformed points and technology entries are dropped; returns None when the
    document is unusable.
    """
    if not isinstance(document, dict):
        logger.error("AI growth document must be a JSON object")
        return None

    points = _parse_records(document.get("timeSeriesData") or [], TimeSeriesPoint.from_dict, "time series")
    quality = validate_data_quality(points, validate_time_series_point, min_items=1)
    technologies = _parse_records(document.get("technologyBreakdown") or [], TechCategory.from_dict, "technology")

    try:
        data = AIGrowthData(
            time_series_data=quality["valid_items"],
            repository_count=document["repositoryCount"],
            contributor_growth=document["contributorGrowth"],
            technology_breakdown=technologies,
        )
    except KeyError as e:
        logger.error(f"AI growth document missing field {e}")
        return None

    if not validate_ai_growth_data(data):
        logger.error("AI growth data failed validation")
        return None
    return data


def parse_job_role_data(records):
    """Build JobRoleData records, keeping only those that pass validation."""
    if not isinstance(records, list):
        logger.error("Job market document must be a JSON list")
        return []

    roles = _parse_records(records, JobRoleData.from_dict, "job role")
    quality = validate_data_quality(roles, validate_job_role_data, min_items=1)
    for error in quality["errors"]:
        logger.warning(f"Job market data: {error}")
    return quality["valid_items"]


def load_ai_growth_data(filepath):
    document = load_data(filepath)
    if document is None:
        return None
    data = parse_ai_growth_data(document)
    return LiveData(data) if data is not None else None


def load_job_role_data(filepath):
    document = load_data(filepath)
    if document is None:
        return None
    # Either a bare list or {"roles": [...]}
    if isinstance(document, dict):
        document = document.get("roles", [])
    return LiveData(parse_job_role_data(document))


def generate_sample_series(rng, start, end, base_value, trend_slope, volatility, seasonality=0.0):
    """
    Monthly sample series: linear trend + yearly seasonality + uniform noise,
    floored at zero and rounded to whole counts.
    """
    points = []
    base = pd.Timestamp(start)
    k = 0
    while True:
        current = (base + pd.DateOffset(months=k)).to_pydatetime()
        if current > end:
            break

        seasonal = seasonality * np.sin((current.month - 1) / 12 * 2 * np.pi)
        noise = (rng.random() - 0.5) * volatility
        value = max(0.0, base_value + trend_slope * k + seasonal + noise)

        points.append(TimeSeriesPoint(
            timestamp=current,
            value=float(round(value)),
            confidence=float(0.8 + rng.random() * 0.15),
            is_estimated=bool(rng.random() < 0.1),
            metadata={"source": "sample-data"},
        ))
        k += 1
    return points


def generate_sample_data(start=None, end=None, seed=42):
    """
    Deterministic demo datasets for the given period.

    Returns:
        (SampleData(AIGrowthData), SampleData([JobRoleData]))
    """
    start = start or datetime(2022, 1, 1)
    end = end or datetime.now()
    rng = np.random.default_rng(seed)

    ai_data = AIGrowthData(
        time_series_data=generate_sample_series(rng, start, end, 5000, 150, 300, 200),
        repository_count=47500,
        contributor_growth=68.5,
        technology_breakdown=[TechCategory(name, count, rate) for name, count, rate in SAMPLE_TECHNOLOGY_BREAKDOWN],
    )

    job_data = []
    for role_id, (base_value, slope, volatility, seasonality, growth, confidence) in SAMPLE_ROLE_PARAMS.items():
        job_data.append(JobRoleData(
            role_id=role_id,
            time_series_data=generate_sample_series(rng, start, end, base_value, slope, volatility, seasonality),
            current_trend=TrendDirection.INCREASING if slope > 0 else TrendDirection.DECREASING,
            growth_rate=growth,
            confidence=confidence,
        ))

    logger.info(f"Generated sample data for {len(job_data)} roles from {start.date()} to {end.date()}")
    return SampleData(ai_data), SampleData(job_data)
