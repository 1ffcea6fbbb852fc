"""Merges observations across viewports and groups them by kind."""

from __future__ import annotations

import logging
import re

from breakbot.models.analysis import DeduplicatedIssue, IssueGroup, RunResult

logger = logging.getLogger(__name__)

PIXEL_LITERAL = re.compile(r"\d+px")
PIXEL_PLACEHOLDER = "Npx"


def normalize_description(description: str) -> str:
    """Replace pixel magnitudes so the same defect reads the same at every width."""
    return PIXEL_LITERAL.sub(PIXEL_PLACEHOLDER, description)


def deduplicate(run: RunResult) -> list[DeduplicatedIssue]:
    """Collapse observations sharing (kind, selector) into one issue each.

    Viewports are walked in catalog order and issues in per-viewport order, so
    both the issue list and each ``affected_viewports`` are in first-seen order.
    Severity, description and fix come from the first occurrence.
    """
    by_key: dict[tuple[str, str], DeduplicatedIssue] = {}

    for va in run.viewports:
        name = va.viewport.name
        for issue in va.issues:
            key = (issue.kind, issue.selector)
            entry = by_key.get(key)
            if entry is None:
                entry = DeduplicatedIssue(
                    kind=issue.kind,
                    selector=issue.selector,
                    severity=issue.severity,
                    normalized_description=normalize_description(issue.description),
                    suggested_fix=issue.suggested_fix,
                )
                by_key[key] = entry
            if name not in entry.affected_viewports:
                entry.affected_viewports.append(name)

    logger.debug("Reduced %d observations to %d unique issues",
                 len(run.all_issues), len(by_key))
    return list(by_key.values())


def group_by_kind(issues: list[DeduplicatedIssue]) -> list[IssueGroup]:
    """Group issues by kind; groups and members keep first-seen order."""
    groups: dict[str, IssueGroup] = {}
    for issue in issues:
        if issue.kind not in groups:
            groups[issue.kind] = IssueGroup(kind=issue.kind)
        groups[issue.kind].issues.append(issue)
    return list(groups.values())


def reduce_run(run: RunResult) -> list[IssueGroup]:
    """Deduplicate a run and group the result for display."""
    return group_by_kind(deduplicate(run))
