"""Drives every viewport pass for one page and summarises the run."""

from __future__ import annotations

import logging
import time
from collections import Counter
from datetime import datetime, timezone
from typing import Sequence

from playwright.async_api import Page

from breakbot.models.analysis import (
    RunResult,
    RunSummary,
    ViewportAnalysis,
    ViewportGeometry,
)

from .viewport_analyzer import DEFAULT_SETTLE_DELAY_MS, analyze_viewport

logger = logging.getLogger(__name__)

MAX_COMMON_ISSUES = 3


def summarize(viewports: Sequence[ViewportAnalysis]) -> RunSummary:
    """Derive the run summary from the per-viewport analyses.

    Pure function of ``viewports``: calling it again on the same input yields
    an equal summary.
    """
    all_issues = [issue for va in viewports for issue in va.issues]
    severities = Counter(issue.severity for issue in all_issues)

    # Strictly greater wins, so ties keep the earlier viewport
    worst_viewport = None
    max_issues = 0
    for va in viewports:
        if len(va.issues) > max_issues:
            max_issues = len(va.issues)
            worst_viewport = va.viewport.name

    # Counter keeps first-seen order and sorted() is stable, so equal
    # counts stay in first-seen order
    kind_counts = Counter(issue.kind for issue in all_issues)
    ranked = sorted(kind_counts.items(), key=lambda item: item[1], reverse=True)

    return RunSummary(
        total_issues=len(all_issues),
        high_severity=severities["high"],
        medium_severity=severities["medium"],
        low_severity=severities["low"],
        worst_viewport=worst_viewport,
        common_issues=[kind for kind, _ in ranked[:MAX_COMMON_ISSUES]],
    )


async def run_analysis(
    page: Page,
    url: str,
    viewports: Sequence[ViewportGeometry],
    settle_delay_ms: int = DEFAULT_SETTLE_DELAY_MS,
) -> RunResult:
    """Analyze an already-loaded page at every viewport, in order.

    Resizing mutates the one page, so passes run strictly one after another.
    Any failing pass aborts the whole run.
    """
    start = time.time()
    logger.info("Analyzing %s at %d viewports", url, len(viewports))

    analyses: list[ViewportAnalysis] = []
    for viewport in viewports:
        analyses.append(await analyze_viewport(page, viewport, settle_delay_ms))

    summary = summarize(analyses)
    logger.info(
        "Analysis of %s complete: %d issues (%d high) in %.1fs",
        url, summary.total_issues, summary.high_severity, time.time() - start,
    )
    return RunResult(
        url=url,
        timestamp=datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        viewports=analyses,
        summary=summary,
    )
