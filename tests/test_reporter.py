"""Tests for reporter orchestration."""

from pathlib import Path

from breakbot.models.config import BreakbotConfig
from breakbot.reporter.reducer import reduce_run
from breakbot.reporter.reporter import Reporter, report_stem


class TestReportStem:
    def test_slug_and_timestamp(self, run_result):
        assert report_stem(run_result) == "report_example-com_20250101000000"

    def test_path_included(self, run_result):
        run = run_result.model_copy(update={"url": "https://Example.com/pricing?plan=pro"})
        assert report_stem(run) == "report_example-com-pricing-plan-pro_20250101000000"


class TestReporter:
    def test_all_formats(self, run_result, breakbot_config, temp_report_dir: Path):
        reporter = Reporter(breakbot_config)
        generated = reporter.generate_reports(run_result, reduce_run(run_result), temp_report_dir)

        assert set(generated) == {"text", "json"}
        assert generated["text"].endswith(".md")
        assert generated["json"].endswith(".json")
        assert Path(generated["text"]).read_text(encoding="utf-8").startswith(
            "## Responsive Test: https://example.com"
        )
        assert Path(generated["json"]).exists()

    def test_only_configured_formats(self, run_result, temp_report_dir: Path):
        reporter = Reporter(BreakbotConfig(report_formats=["json"]))
        generated = reporter.generate_reports(run_result, reduce_run(run_result), temp_report_dir)
        assert list(generated) == ["json"]
        assert not list(temp_report_dir.glob("*.md"))

    def test_default_output_dir_created(self, run_result, tmp_path: Path):
        out_dir = tmp_path / "nested" / "reports"
        reporter = Reporter(BreakbotConfig(report_output_dir=str(out_dir)))
        generated = reporter.generate_reports(run_result, reduce_run(run_result))
        assert Path(generated["text"]).parent == out_dir

    def test_text_report_respects_example_cap(self, run_result, temp_report_dir: Path):
        reporter = Reporter(BreakbotConfig(max_examples_per_kind=1))
        generated = reporter.generate_reports(run_result, reduce_run(run_result), temp_report_dir)
        assert "### Unique Issues (2)" in Path(generated["text"]).read_text(encoding="utf-8")
