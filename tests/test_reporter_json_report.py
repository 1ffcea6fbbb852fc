"""Tests for JSON report generation."""

import json
from pathlib import Path

from breakbot.reporter.json_report import build_json_report, generate_json_report
from breakbot.reporter.reducer import reduce_run


class TestBuildJsonReport:
    """Tests for the JSON report structure."""

    def test_run_in_wire_format(self, run_result):
        report = build_json_report(run_result, reduce_run(run_result))

        assert report["url"] == "https://example.com"
        assert report["timestamp"] == "2025-01-01T00:00:00.000Z"
        assert report["summary"]["totalIssues"] == 2
        assert report["summary"]["worstViewport"] == "iPhone 8"
        assert report["summary"]["commonIssues"] == ["horizontal-overflow", "touch-target"]

        mobile = report["viewports"][0]
        assert mobile["viewport"] == {"width": 375, "height": 667, "name": "iPhone 8"}
        assert mobile["breakpoint"] == "default (mobile)"
        assert mobile["metrics"]["hasHorizontalScroll"] is False
        assert mobile["metrics"]["smallTouchTargetCount"] == 1
        assert mobile["issues"][0]["viewportName"] == "iPhone 8"

    def test_unique_issues_flattened(self, run_result):
        report = build_json_report(run_result, reduce_run(run_result))

        unique = report["uniqueIssues"]
        assert [u["kind"] for u in unique] == ["horizontal-overflow", "touch-target"]
        assert unique[0]["normalizedDescription"] == "Element extends Npx beyond viewport"
        assert unique[0]["affectedViewports"] == ["iPhone 8"]

    def test_no_groups(self, run_result):
        report = build_json_report(run_result, [])
        assert report["uniqueIssues"] == []


class TestGenerateJsonReport:
    """Tests for generate_json_report function."""

    def test_writes_valid_json(self, run_result, tmp_path: Path):
        output_file = tmp_path / "report.json"
        generate_json_report(run_result, reduce_run(run_result), output_file)

        assert output_file.exists()
        with open(output_file) as f:
            data = json.load(f)
        assert data["summary"]["highSeverity"] == 1
        assert len(data["uniqueIssues"]) == 2
