#!/usr/bin/env python3
# scripts/run_impact_analysis.py
"""
Workforce Impact Analysis - Main Workflow Script

This script coordinates the impact analysis for the tracked job roles:
1. Loads the collected AI growth and job market series (or sample data)
2. Validates the records and drops malformed ones
3. Aligns all series onto one time axis
4. Calculates impact scores and risk classifications per role
5. Builds the filtered, sorted impact matrix and the insights
6. Outputs the results to the specified directory

Impact Score = (AI Growth Rate - Job Demand Change) x Volatility Dampening x Role Factors
"""
import argparse
import json
import logging
import os
import sys
from datetime import datetime

sys.path.append(os.path.dirname(os.path.abspath(__file__)))
from analysis.confidence_scoring import ConfidenceCalculator
from analysis.generate_insights import InsightGenerator
from analysis.impact_matrix import apply_analysis_context, build_impact_matrix, sort_impact_matrix, summarize_by_risk
from analysis.role_impact_analyzer import RoleImpactAnalyzer
from analysis.trend_analysis import TrendAnalyzer
from processing.load_series import generate_sample_data, load_ai_growth_data, load_job_role_data
from processing.time_series_normalizer import resolve_granularity
from utils.data_models import (
    AnalysisContext,
    AnalysisFilters,
    JobCategory,
    RiskLevel,
    SampleData,
    parse_timestamp,
    unwrap_source,
)
from utils.result_cache import ResultCache
from validation.validate_time_series import validate_data_completeness, validate_date_range

logger = logging.getLogger("impact-analysis-workflow")


def configure_logging(log_file="impact_analysis.log"):
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(sys.stdout)
        ]
    )


class ImpactAnalysisWorkflow:
    """
    Coordinates loading, alignment, scoring and reporting of role impacts.
    """
    # Reliability of each data source, used in the series confidence score
    SOURCE_RELIABILITY = {
        "api": 0.9,
        "sample-data": 0.6
    }

    def __init__(self,
                 input_dir="./data/processed",
                 output_dir="./data/processed/impact",
                 ai_file="ai_growth_latest.json",
                 jobs_file="job_market_latest.json",
                 start=None,
                 end=None,
                 granularity="month",
                 use_sample=False,
                 seed=42,
                 cache=None):
        self.input_dir = input_dir
        self.output_dir = output_dir
        self.ai_file = ai_file
        self.jobs_file = jobs_file
        self.start = parse_timestamp(start) if start else datetime(2022, 1, 1)
        self.end = parse_timestamp(end) if end else datetime.now().replace(microsecond=0)
        self.granularity = resolve_granularity(granularity)
        self.use_sample = use_sample
        self.seed = seed
        self.cache = cache or ResultCache()

        self.analyzer = RoleImpactAnalyzer()
        self.insight_generator = InsightGenerator(catalog=self.analyzer.catalog)
        self.confidence_calculator = ConfidenceCalculator()
        self.trend_analyzer = TrendAnalyzer()

        # Create output directory if it doesn't exist
        os.makedirs(output_dir, exist_ok=True)

        self.date_str = datetime.now().strftime('%Y%m%d')

    def load_sources(self):
        """Returns (ai_source, job_source) wrapped as LiveData/SampleData, or (None, None)."""
        if self.use_sample:
            logger.info("Using generated sample data")
            return generate_sample_data(self.start, self.end, seed=self.seed)

        ai_source = load_ai_growth_data(os.path.join(self.input_dir, self.ai_file))
        job_source = load_job_role_data(os.path.join(self.input_dir, self.jobs_file))
        if ai_source is None or job_source is None or not job_source.payload:
            logger.error("Collected data unavailable; rerun with --use-sample for demo data")
            return None, None
        return ai_source, job_source

    def series_confidence(self, points, source):
        """Confidence of one normalized series given its provenance."""
        completeness = validate_data_completeness(points, (self.start, self.end), self.granularity)
        observed = [p for p in points if not p.is_estimated]
        recency = 0.0
        if observed:
            months_since = (self.end - max(p.timestamp for p in observed)).days / 30.4375
            recency = max(0.0, 1 - months_since / 12)

        return self.confidence_calculator.calculate_confidence(
            points,
            data_completeness=completeness["completeness"],
            source_reliability=self.SOURCE_RELIABILITY.get(source.source, 0.5),
            temporal_recency=recency
        )

    def align_and_score(self, ai_source, job_source):
        """Align both sources once and score every role; returns (aligned_ai, aligned_jobs, impacts)."""
        aligned = self.analyzer.aligner.align(ai_source, job_source, (self.start, self.end), self.granularity)
        aligned_ai = aligned["aligned_ai_data"]
        aligned_jobs = aligned["aligned_job_data"]
        return aligned_ai, aligned_jobs, self.analyzer.score_aligned_roles(aligned_ai, aligned_jobs)

    def analyze(self, ai_source, job_source, context, sort_by="impactScore", sort_order="desc"):
        key = ResultCache.generate_key("impact-analysis", {
            "source": ai_source.source,
            "seed": self.seed if isinstance(ai_source, SampleData) else None,
            "ai": unwrap_source(ai_source),
            "jobs": unwrap_source(job_source),
            "range": [self.start, self.end],
            "granularity": self.granularity
        })
        aligned_ai, aligned_jobs, impacts = self.cache.get_or_set(
            key, lambda: self.align_and_score(ai_source, job_source))

        matrix = build_impact_matrix(impacts, unwrap_source(job_source), self.analyzer.catalog)
        matrix = sort_impact_matrix(apply_analysis_context(matrix, context),
                                    sort_by, sort_order)

        insights = self.insight_generator.generate_insights(context, aligned_ai, aligned_jobs, impacts)

        ai_trend = self.trend_analyzer.analyze_trend(aligned_ai.time_series_data)
        return {
            "generated_at": datetime.now().isoformat(),
            "data_source": ai_source.source,
            "time_range": [self.start.isoformat(), self.end.isoformat()],
            "granularity": self.granularity.value,
            "context": context.to_dict(),
            "ai_growth": {
                "growth_rate": ai_trend["growth_rate"],
                "direction": ai_trend["direction"].value,
                "strength": ai_trend["strength"],
                "confidence": self.series_confidence(aligned_ai.time_series_data, ai_source),
                "repository_count": aligned_ai.repository_count
            },
            "series_confidence": {
                job.role_id: self.series_confidence(job.time_series_data, job_source)
                for job in aligned_jobs
            },
            "impacts": [impact.to_dict() for impact in impacts],
            "impact_matrix": json.loads(matrix.to_json(orient="records")),
            "risk_summary": summarize_by_risk(matrix),
            "insights": [insight.to_dict() for insight in insights]
        }

    def save_results(self, results):
        """Save the results to a dated file and the latest file."""
        output_file = os.path.join(self.output_dir, f"impact_analysis_{self.date_str}.json")
        with open(output_file, 'w') as f:
            json.dump(results, f, indent=2)
        logger.info(f"Saved impact analysis to {output_file}")

        latest_file = os.path.join(self.output_dir, "impact_analysis_latest.json")
        with open(latest_file, 'w') as f:
            json.dump(results, f, indent=2)
        logger.info(f"Updated latest impact analysis at {latest_file}")

        return output_file

    def resolve_roles(self, queries):
        """Map role ids, names or aliases to catalog ids; unknown entries are skipped."""
        resolved = []
        for query in queries or ():
            role = self.analyzer.catalog.find_role(query)
            if role is None:
                logger.warning(f"Unknown role '{query}' ignored")
            elif role["id"] not in resolved:
                resolved.append(role["id"])
        return tuple(resolved)

    def run(self, selected_roles=None, risk_levels=None, categories=None, min_confidence=None,
            comparison_mode=False, sort_by="impactScore", sort_order="desc"):
        """Run the full workflow; returns the results dict or None on failure."""
        date_check = validate_date_range(self.start, self.end)
        if not date_check["is_valid"]:
            logger.error(f"Invalid analysis period: {date_check['error']}")
            return None

        context = AnalysisContext(
            selected_roles=self.resolve_roles(selected_roles),
            time_range=(self.start, self.end),
            comparison_mode=comparison_mode,
            filters=AnalysisFilters(
                categories=tuple(JobCategory(c) for c in (categories or ())),
                risk_levels=tuple(RiskLevel(r) for r in (risk_levels or ())),
                min_confidence=min_confidence
            )
        )

        ai_source, job_source = self.load_sources()
        if ai_source is None:
            return None

        logger.info(f"Analyzing {len(job_source.payload)} roles from {self.start.date()} to {self.end.date()}")
        results = self.analyze(ai_source, job_source, context, sort_by, sort_order)
        self.save_results(results)

        summary = results["risk_summary"]
        logger.info(f"Impact analysis complete: {summary['high']['count']} high, "
                    f"{summary['medium']['count']} medium, {summary['low']['count']} low risk roles")
        return results


def main(argv=None):
    """Main entry point for the script."""
    parser = argparse.ArgumentParser(description='Calculate AI impact scores for tracked job roles')
    parser.add_argument('--input-dir', default='./data/processed', help='Directory containing collected data')
    parser.add_argument('--output-dir', default='./data/processed/impact', help='Output directory for results')
    parser.add_argument('--ai-file', default='ai_growth_latest.json', help='AI growth data file')
    parser.add_argument('--jobs-file', default='job_market_latest.json', help='Job market data file')
    parser.add_argument('--start', help='Start of the analysis period (YYYY-MM-DD, default: 2022-01-01)')
    parser.add_argument('--end', help='End of the analysis period (YYYY-MM-DD, default: now)')
    parser.add_argument('--granularity', choices=['month', 'quarter', 'year'], default='month',
                        help='Sampling step for aligned series')
    parser.add_argument('--roles', nargs='*', default=[], help='Selected role ids (two with --compare)')
    parser.add_argument('--compare', action='store_true', help='Compare the two selected roles')
    parser.add_argument('--categories', nargs='*', choices=[c.value for c in JobCategory], default=[],
                        help='Only include these job categories')
    parser.add_argument('--risk-levels', nargs='*', choices=['high', 'medium', 'low'], default=[],
                        help='Only include these risk levels')
    parser.add_argument('--min-confidence', type=float, help='Minimum role data confidence (0-1)')
    parser.add_argument('--sort-by', choices=['aiGrowth', 'jobTrend', 'impactScore'], default='impactScore')
    parser.add_argument('--sort-order', choices=['asc', 'desc'], default='desc')
    parser.add_argument('--use-sample', action='store_true', help='Use generated sample data')
    parser.add_argument('--seed', type=int, default=42, help='Random seed for sample data (default: 42)')
    parser.add_argument('--log-file', default='impact_analysis.log', help='Log file path')

    args = parser.parse_args(argv)
    configure_logging(args.log_file)

    try:
        workflow = ImpactAnalysisWorkflow(
            input_dir=args.input_dir,
            output_dir=args.output_dir,
            ai_file=args.ai_file,
            jobs_file=args.jobs_file,
            start=args.start,
            end=args.end,
            granularity=args.granularity,
            use_sample=args.use_sample,
            seed=args.seed
        )
        results = workflow.run(
            selected_roles=args.roles,
            risk_levels=args.risk_levels,
            categories=args.categories,
            min_confidence=args.min_confidence,
            comparison_mode=args.compare,
            sort_by=args.sort_by,
            sort_order=args.sort_order
        )
    except ValueError as e:
        logger.error(f"Invalid arguments: {e}")
        return 1

    if results:
        logger.info("Impact analysis successful")
        return 0
    else:
        logger.error("Impact analysis failed")
        return 1


if __name__ == "__main__":
    sys.exit(main())
