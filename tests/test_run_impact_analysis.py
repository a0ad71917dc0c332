import json
import os
import sys
from datetime import datetime

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'scripts'))

from processing.load_series import SAMPLE_ROLE_PARAMS, generate_sample_data
from run_impact_analysis import ImpactAnalysisWorkflow, main
from utils.result_cache import ResultCache


@pytest.fixture
def workflow(tmp_path):
    return ImpactAnalysisWorkflow(
        input_dir=str(tmp_path / "input"),
        output_dir=str(tmp_path / "output"),
        start="2022-01-01",
        end="2023-12-31",
        use_sample=True,
    )


class TestImpactAnalysisWorkflow:
    """End-to-end run on generated sample data"""

    def test_run_writes_results(self, workflow, tmp_path):
        results = workflow.run()

        assert results is not None
        assert results["data_source"] == "sample-data"
        assert len(results["impacts"]) == len(SAMPLE_ROLE_PARAMS)
        assert sum(level["count"] for level in results["risk_summary"].values()) == len(SAMPLE_ROLE_PARAMS)

        latest = tmp_path / "output" / "impact_analysis_latest.json"
        dated = tmp_path / "output" / f"impact_analysis_{workflow.date_str}.json"
        assert latest.exists()
        assert dated.exists()
        with open(latest) as f:
            saved = json.load(f)
        assert saved["impacts"] == results["impacts"]

    def test_matrix_is_sorted(self, workflow):
        results = workflow.run(sort_by="impactScore", sort_order="desc")
        scores = [row["impactScore"] for row in results["impact_matrix"]]
        assert scores == sorted(scores, reverse=True)

    def test_context_filters_apply(self, workflow):
        results = workflow.run(risk_levels=["high"], min_confidence=0.85)
        for row in results["impact_matrix"]:
            assert row["riskLevel"] == "high"
            assert row["confidence"] >= 0.85

    def test_confidences_are_bounded(self, workflow):
        results = workflow.run()
        assert 0.0 <= results["ai_growth"]["confidence"] <= 1.0
        assert all(0.0 <= c <= 1.0 for c in results["series_confidence"].values())
        assert len(results["insights"]) <= 10

    def test_roles_resolved_by_name_or_alias(self, workflow):
        assert workflow.resolve_roles(["AI Engineer", "qa tester", "astronaut", "ai-engineer"]) == (
            "ai-engineer", "manual-tester"
        )

    def test_category_filter(self, workflow):
        results = workflow.run(categories=["testing"])
        assert {row["roleId"] for row in results["impact_matrix"]} == {"manual-tester", "automation-engineer"}
        assert results["context"]["filters"]["categories"] == ["testing"]

    def test_repeat_run_uses_cache(self, workflow):
        workflow.run()
        workflow.run()
        assert workflow.cache.get_stats()["hit_rate"] == 0.5

    def test_sources_are_aligned_once_per_run(self, workflow):
        aligner = workflow.analyzer.aligner
        calls = []
        original_align = aligner.align

        def counting_align(*args, **kwargs):
            calls.append(args)
            return original_align(*args, **kwargs)

        aligner.align = counting_align
        workflow.run()
        assert len(calls) == 1

        workflow.run()
        assert len(calls) == 1

    def test_cache_shared_between_workflows(self, tmp_path):
        cache = ResultCache()
        for _ in range(2):
            ImpactAnalysisWorkflow(
                output_dir=str(tmp_path / "output"),
                start="2022-01-01",
                end="2022-12-31",
                use_sample=True,
                cache=cache,
            ).run()
        assert cache.hits == 1
        assert cache.misses == 1

    def test_collected_data_is_loaded(self, tmp_path):
        input_dir = tmp_path / "input"
        input_dir.mkdir()
        ai_source, job_source = generate_sample_data(datetime(2022, 1, 1), datetime(2022, 12, 31))
        with open(input_dir / "ai_growth_latest.json", 'w') as f:
            json.dump(ai_source.payload.to_dict(), f)
        with open(input_dir / "job_market_latest.json", 'w') as f:
            json.dump({"roles": [r.to_dict() for r in job_source.payload[:3]]}, f)

        workflow = ImpactAnalysisWorkflow(
            input_dir=str(input_dir),
            output_dir=str(tmp_path / "output"),
            start="2022-01-01",
            end="2022-12-31",
        )
        results = workflow.run()

        assert results["data_source"] == "api"
        assert len(results["impacts"]) == 3

    def test_missing_data_fails(self, tmp_path):
        workflow = ImpactAnalysisWorkflow(
            input_dir=str(tmp_path),
            output_dir=str(tmp_path / "output"),
            start="2022-01-01",
            end="2022-12-31",
        )
        assert workflow.run() is None


class TestMain:

    def test_main_with_sample_data(self, tmp_path):
        exit_code = main([
            "--use-sample",
            "--output-dir", str(tmp_path / "out"),
            "--start", "2022-01-01",
            "--end", "2022-12-31",
            "--granularity", "quarter",
            "--roles", "ai-engineer",
            "--log-file", str(tmp_path / "impact.log"),
        ])
        assert exit_code == 0
        assert (tmp_path / "out" / "impact_analysis_latest.json").exists()

    def test_main_invalid_period(self, tmp_path):
        exit_code = main([
            "--use-sample",
            "--output-dir", str(tmp_path / "out"),
            "--start", "2023-01-01",
            "--end", "2022-01-01",
            "--log-file", str(tmp_path / "impact.log"),
        ])
        assert exit_code == 1

    def test_main_without_data(self, tmp_path):
        exit_code = main([
            "--input-dir", str(tmp_path),
            "--output-dir", str(tmp_path / "out"),
            "--start", "2022-01-01",
            "--end", "2022-12-31",
            "--log-file", str(tmp_path / "impact.log"),
        ])
        assert exit_code == 1
