#!/usr/bin/env python3
# scripts/analysis/impact_matrix.py
"""
Impact matrix - tabular view of role impacts with context filters and sorting
"""
import logging
import os
import sys

import pandas as pd

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
from utils.data_models import RiskLevel, SortBy, SortOrder
from utils.role_catalog import RoleCatalog

logger = logging.getLogger("impact-matrix")

MATRIX_COLUMNS = [
    "roleId", "name", "category", "aiGrowthRate", "jobDemandChange",
    "impactScore", "riskLevel", "classification", "confidence"
]

SORT_COLUMNS = {
    SortBy.AI_GROWTH: "aiGrowthRate",
    SortBy.JOB_TREND: "jobDemandChange",
    SortBy.IMPACT_SCORE: "impactScore"
}


def build_impact_matrix(impacts, job_data_list=None, catalog=None):
    """
    One row per JobRoleImpact, joined with catalog name/category and the
    role's data confidence (NaN when no job data was supplied for the role).
    """
    catalog = catalog or RoleCatalog()
    confidence_by_role = {job.role_id: job.confidence for job in (job_data_list or [])}

    rows = []
    for impact in impacts:
        role = catalog.get_role(impact.role_id)
        row = impact.to_dict()
        row["name"] = role["name"] if role else impact.role_id
        row["category"] = role["category"] if role else None
        row["confidence"] = confidence_by_role.get(impact.role_id, float("nan"))
        rows.append(row)

    return pd.DataFrame(rows, columns=MATRIX_COLUMNS)


def apply_analysis_context(matrix, context):
    """Apply the context filters (categories, risk levels, minimum confidence)."""
    if context is None:
        return matrix

    filters = context.filters
    result = matrix
    if filters.categories:
        wanted = [getattr(c, "value", c) for c in filters.categories]
        result = result[result["category"].isin(wanted)]
    if filters.risk_levels:
        wanted = [RiskLevel(r).value for r in filters.risk_levels]
        result = result[result["riskLevel"].isin(wanted)]
    if filters.min_confidence is not None:
        result = result[result["confidence"] >= filters.min_confidence]

    logger.debug(f"Context filters kept {len(result)} of {len(matrix)} roles")
    return result


def sort_impact_matrix(matrix, sort_by="impactScore", sort_order="desc"):
    column = SORT_COLUMNS[SortBy(sort_by)]
    ascending = SortOrder(sort_order) == SortOrder.ASC
    # mergesort keeps ties in input order
    return matrix.sort_values(by=column, ascending=ascending, kind="mergesort").reset_index(drop=True)


def summarize_by_risk(matrix):
    """Role count and mean impact score per risk level (all three levels always present)."""
    summary = {}
    for level in RiskLevel:
        rows = matrix[matrix["riskLevel"] == level.value]
        summary[level.value] = {
            "count": int(len(rows)),
            "average_impact_score": float(rows["impactScore"].mean()) if len(rows) else 0.0,
            "roles": rows["roleId"].tolist()
        }
    return summary
