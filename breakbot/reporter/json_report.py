"""JSON report output."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from breakbot.models.analysis import IssueGroup, RunResult


def build_json_report(run_result: RunResult, groups: Sequence[IssueGroup]) -> dict:
    """Machine-readable report: the run in wire format plus the unique issues."""
    report = run_result.model_dump(by_alias=True)
    report["uniqueIssues"] = [
        issue.model_dump(by_alias=True)
        for group in groups
        for issue in group.issues
    ]
    return report


def generate_json_report(
    run_result: RunResult,
    groups: Sequence[IssueGroup],
    output_path: Path,
) -> None:
    """Write a machine-readable JSON report."""
    with open(output_path, "w") as f:
        json.dump(build_json_report(run_result, groups), f, indent=2, default=str)
