#!/usr/bin/env python3
# scripts/processing/source_alignment.py
"""
Source alignment - puts the AI growth series and every job role series on one time axis
"""
import dataclasses
import logging
import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
from processing.time_series_normalizer import TimeSeriesNormalizer, resolve_granularity, resolve_time_range
from utils.data_models import unwrap_source

logger = logging.getLogger("source-aligner")


class SourceAligner:
    """
    Applies the same normalization (range and granularity) to all sources.
    Only the time series payloads change; every other field is carried over.
    """
    def __init__(self, normalizer=None):
        self.normalizer = normalizer or TimeSeriesNormalizer()

    def align(self, ai_data, job_data_list, time_range, granularity="month"):
        """
        Returns:
            dict with "aligned_ai_data" (AIGrowthData) and "aligned_job_data"
            (list of JobRoleData in the same order as the input)
        """
        time_range = resolve_time_range(time_range)
        granularity = resolve_granularity(granularity)
        ai_data = unwrap_source(ai_data)
        job_data_list = unwrap_source(job_data_list)

        aligned_ai = dataclasses.replace(
            ai_data,
            time_series_data=self.normalizer.normalize(ai_data.time_series_data, time_range, granularity),
        )

        aligned_jobs = []
        for role_data in job_data_list:
            aligned_jobs.append(dataclasses.replace(
                role_data,
                time_series_data=self.normalizer.normalize(role_data.time_series_data, time_range, granularity),
            ))

        logger.info(f"Aligned AI series and {len(aligned_jobs)} job role series to "
                    f"{time_range[0].date()}..{time_range[1].date()} ({granularity.value})")

        return {
            "aligned_ai_data": aligned_ai,
            "aligned_job_data": aligned_jobs,
        }


def align_data_sources(ai_data, job_data_list, time_range, granularity="month"):
    return SourceAligner().align(ai_data, job_data_list, time_range, granularity)
