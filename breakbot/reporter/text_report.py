"""Compact markdown report for a responsive analysis run."""

from __future__ import annotations

from typing import Sequence

from breakbot.models.analysis import IssueGroup, RunResult, ViewportGeometry
from breakbot.viewports import TAILWIND_BREAKPOINTS, classify_breakpoint

DEFAULT_MAX_EXAMPLES = 5

# Generic fixes, keyed off the kinds that show up among the common issues
GENERIC_FIXES: dict[str, str] = {
    "horizontal-overflow": "Overflow: `max-w-full overflow-x-hidden` or `w-full`",
    "touch-target": "Touch targets: `min-w-[44px] min-h-[44px]` or `p-3`",
}

SEVERITY_ICONS = {"high": "\U0001F534", "medium": "\U0001F7E1"}

BREAKPOINT_DESCRIPTIONS = {
    "sm": "Small devices",
    "md": "Medium devices (tablets)",
    "lg": "Large devices (laptops)",
    "xl": "Extra large devices",
    "2xl": "2X extra large devices",
}


def _viewport_info(affected: int, total: int) -> str:
    return "all viewports" if affected == total else f"{affected} viewports"


def build_text_report(
    run: RunResult,
    groups: Sequence[IssueGroup],
    max_examples: int = DEFAULT_MAX_EXAMPLES,
) -> str:
    """Render a run as the compact markdown report."""
    summary = run.summary
    lines = [f"## Responsive Test: {run.url}", ""]

    if summary.total_issues == 0:
        lines.append("**PASS** - No issues found")
        return "\n".join(lines) + "\n"

    lines.append(
        f"**{summary.high_severity} high, {summary.medium_severity} medium severity issues**"
    )
    if summary.worst_viewport:
        lines.append(
            f"Worst: {summary.worst_viewport} | Types: {', '.join(summary.common_issues)}"
        )
    lines.append("")

    lines.append("| Viewport | Issues | H-Scroll |")
    lines.append("|----------|--------|----------|")
    for va in run.viewports:
        if not va.issues:
            continue
        scroll = "YES" if va.metrics.has_horizontal_scroll else "-"
        lines.append(f"| {va.viewport.name} ({va.viewport.width}px) | {len(va.issues)} | {scroll} |")
    lines.append("")

    unique_count = sum(len(g.issues) for g in groups)
    lines.append(f"### Unique Issues ({unique_count})")
    lines.append("")

    total_viewports = len(run.viewports)
    for group in groups:
        icon = SEVERITY_ICONS["high" if group.issues[0].severity == "high" else "medium"]
        lines.append(f"**{icon} {group.kind}** ({len(group.issues)} elements)")
        for issue in group.issues[:max_examples]:
            info = _viewport_info(len(issue.affected_viewports), total_viewports)
            lines.append(f"- `{issue.selector}` ({info})")
        if len(group.issues) > max_examples:
            lines.append(f"- ...and {len(group.issues) - max_examples} more")
        lines.append("")

    fixes = [fix for kind, fix in GENERIC_FIXES.items() if kind in summary.common_issues]
    if fixes:
        lines.append("### Fixes")
        lines.extend(f"- {fix}" for fix in fixes)

    return "\n".join(lines) + "\n"


def build_error_report(url: str, error: Exception) -> str:
    """Render a failed run; the error message is shown verbatim."""
    return (
        f"## Error Testing {url}\n\n"
        f"**Error:** {error}\n\n"
        "Please check that the URL is accessible.\n"
    )


def breakpoints_reference(viewports: Sequence[ViewportGeometry]) -> str:
    """Tailwind breakpoint table plus the viewports a run tests."""
    lines = [
        "## Tailwind CSS Breakpoints",
        "",
        "| Prefix | Min Width | Description |",
        "|--------|-----------|-------------|",
        "| (none) | 0px | Mobile-first default |",
    ]
    for prefix, min_width in TAILWIND_BREAKPOINTS.items():
        lines.append(f"| {prefix}: | {min_width}px | {BREAKPOINT_DESCRIPTIONS[prefix]} |")
    lines += ["", "## Breakbot Test Viewports", ""]
    for vp in viewports:
        lines.append(
            f"- **{vp.name}**: {vp.width}×{vp.height}px → `{classify_breakpoint(vp.width)}`"
        )
    return "\n".join(lines) + "\n"
