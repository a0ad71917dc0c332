#!/usr/bin/env python3
# scripts/utils/data_models.py
"""
Core data structures for the Workforce Impact pipeline.

Records mirror the JSON documents exchanged with the fetch layer and the
dashboard. Python attributes are snake_case; ``from_dict``/``to_dict`` use the
camelCase keys of the JSON documents. All records are frozen: pipeline steps
build new records instead of mutating their inputs.
"""
import math
import numbers
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Granularity(str, Enum):
    """Sampling step of a normalized series."""
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"

    @property
    def months(self) -> int:
        return {"month": 1, "quarter": 3, "year": 12}[self.value]


class TrendDirection(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class RiskLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Classification(str, Enum):
    DISRUPTION = "disruption"
    TRANSITION = "transition"
    GROWTH = "growth"


class AggregationType(str, Enum):
    SUM = "sum"
    AVERAGE = "average"
    MAX = "max"
    MIN = "min"


class InsightType(str, Enum):
    TREND = "trend"
    COMPARISON = "comparison"
    PREDICTION = "prediction"
    CORRELATION = "correlation"


class JobCategory(str, Enum):
    SOFTWARE_DEVELOPMENT = "software-development"
    DATA_SCIENCE = "data-science"
    DESIGN = "design"
    MANAGEMENT = "management"
    TESTING = "testing"
    SUPPORT = "support"
    DEVOPS = "devops"
    AI_ML = "ai-ml"


class SortBy(str, Enum):
    AI_GROWTH = "aiGrowth"
    JOB_TREND = "jobTrend"
    IMPACT_SCORE = "impactScore"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def parse_timestamp(value) -> datetime:
    """
    Parse an ISO-8601 string (or pass through a datetime).

    Timezone-aware values are converted to naive UTC so that every timestamp
    in the pipeline is comparable with every other one.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise TypeError(f"Cannot parse timestamp from {type(value).__name__}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def format_timestamp(value: datetime) -> str:
    return value.isoformat()


def is_finite_number(value) -> bool:
    """True for real numbers (numpy scalars included) that are neither NaN nor infinite; bools excluded."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(float(value))


def is_timestamp(value) -> bool:
    return isinstance(value, datetime)


@dataclass(frozen=True)
class TimeSeriesPoint:
    timestamp: datetime
    value: float
    confidence: float
    is_estimated: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        # Aware datetimes are stored as naive UTC; anything else is left for the
        # pipeline steps to reject
        if isinstance(self.timestamp, datetime) and self.timestamp.tzinfo is not None:
            object.__setattr__(self, "timestamp", parse_timestamp(self.timestamp))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeSeriesPoint":
        return cls(
            timestamp=parse_timestamp(data["timestamp"]),
            value=data["value"],
            confidence=data["confidence"],
            is_estimated=data.get("isEstimated", False),
            metadata=dict(data.get("metadata") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "timestamp": format_timestamp(self.timestamp),
            "value": self.value,
            "confidence": self.confidence,
            "isEstimated": self.is_estimated,
        }
        if self.metadata:
            result["metadata"] = {
                key: format_timestamp(value) if isinstance(value, datetime) else value
                for key, value in self.metadata.items()
            }
        return result


@dataclass(frozen=True)
class TechCategory:
    name: str
    count: int
    growth_rate: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TechCategory":
        return cls(name=data["name"], count=data["count"], growth_rate=data["growthRate"])

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "count": self.count, "growthRate": self.growth_rate}


@dataclass(frozen=True)
class AIGrowthData:
    time_series_data: List[TimeSeriesPoint]
    repository_count: int
    contributor_growth: float
    technology_breakdown: List[TechCategory] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AIGrowthData":
        return cls(
            time_series_data=[TimeSeriesPoint.from_dict(p) for p in data.get("timeSeriesData", [])],
            repository_count=data["repositoryCount"],
            contributor_growth=data["contributorGrowth"],
            technology_breakdown=[TechCategory.from_dict(t) for t in data.get("technologyBreakdown", [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timeSeriesData": [p.to_dict() for p in self.time_series_data],
            "repositoryCount": self.repository_count,
            "contributorGrowth": self.contributor_growth,
            "technologyBreakdown": [t.to_dict() for t in self.technology_breakdown],
        }


@dataclass(frozen=True)
class JobRoleData:
    role_id: str
    time_series_data: List[TimeSeriesPoint]
    current_trend: TrendDirection
    growth_rate: float
    confidence: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobRoleData":
        return cls(
            role_id=data["roleId"],
            time_series_data=[TimeSeriesPoint.from_dict(p) for p in data.get("timeSeriesData", [])],
            current_trend=TrendDirection(data["currentTrend"]),
            growth_rate=data["growthRate"],
            confidence=data["confidence"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roleId": self.role_id,
            "timeSeriesData": [p.to_dict() for p in self.time_series_data],
            "currentTrend": TrendDirection(self.current_trend).value,
            "growthRate": self.growth_rate,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class JobRoleImpact:
    role_id: str
    ai_growth_rate: float
    job_demand_change: float
    impact_score: float
    risk_level: RiskLevel
    classification: Classification

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobRoleImpact":
        return cls(
            role_id=data["roleId"],
            ai_growth_rate=data["aiGrowthRate"],
            job_demand_change=data["jobDemandChange"],
            impact_score=data["impactScore"],
            risk_level=RiskLevel(data["riskLevel"]),
            classification=Classification(data["classification"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roleId": self.role_id,
            "aiGrowthRate": self.ai_growth_rate,
            "jobDemandChange": self.job_demand_change,
            "impactScore": self.impact_score,
            "riskLevel": RiskLevel(self.risk_level).value,
            "classification": Classification(self.classification).value,
        }


@dataclass(frozen=True)
class AnalysisFilters:
    categories: Tuple[JobCategory, ...] = ()
    risk_levels: Tuple[RiskLevel, ...] = ()
    min_confidence: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisFilters":
        return cls(
            categories=tuple(JobCategory(c) for c in data.get("categories") or ()),
            risk_levels=tuple(RiskLevel(r) for r in data.get("riskLevels") or ()),
            min_confidence=data.get("minConfidence"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "categories": [JobCategory(c).value for c in self.categories],
            "riskLevels": [RiskLevel(r).value for r in self.risk_levels],
        }
        if self.min_confidence is not None:
            result["minConfidence"] = self.min_confidence
        return result


@dataclass(frozen=True)
class AnalysisContext:
    """Transient selection state held by the dashboard; the pipeline only reads it."""
    selected_roles: Tuple[str, ...]
    time_range: Tuple[datetime, datetime]
    comparison_mode: bool = False
    filters: AnalysisFilters = field(default_factory=AnalysisFilters)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisContext":
        start, end = data["timeRange"]
        return cls(
            selected_roles=tuple(data.get("selectedRoles") or ()),
            time_range=(parse_timestamp(start), parse_timestamp(end)),
            comparison_mode=bool(data.get("comparisonMode", False)),
            filters=AnalysisFilters.from_dict(data.get("filters") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selectedRoles": list(self.selected_roles),
            "timeRange": [format_timestamp(t) for t in self.time_range],
            "comparisonMode": self.comparison_mode,
            "filters": self.filters.to_dict(),
        }


@dataclass(frozen=True)
class GeneratedInsight:
    id: str
    type: InsightType
    title: str
    description: str
    confidence: float
    relevant_data: List[str]
    actionable: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": InsightType(self.type).value,
            "title": self.title,
            "description": self.description,
            "confidence": self.confidence,
            "relevantData": list(self.relevant_data),
            "actionable": self.actionable,
        }


# Provenance variants at the fetch-layer boundary. Live API data and demo
# sample data share the same payload shape; only the wrapper differs.

@dataclass(frozen=True)
class LiveData:
    payload: Any
    source: str = "api"


@dataclass(frozen=True)
class SampleData:
    payload: Any
    source: str = "sample-data"


def unwrap_source(data):
    """Return the payload of a LiveData/SampleData wrapper, or the value itself."""
    if isinstance(data, (LiveData, SampleData)):
        return data.payload
    return data
