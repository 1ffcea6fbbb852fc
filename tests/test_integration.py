"""Integration tests for Breakbot.

These tests drive the orchestrator, inspector, reducer and reporters together
against a mocked Playwright page whose layout depends on the viewport width.
"""

import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from breakbot.models.analysis import ViewportGeometry
from breakbot.models.config import BreakbotConfig
from breakbot.orchestrator import Orchestrator
from breakbot.reporter.text_report import build_text_report

HERO_WIDTH = 400


def _make_responsive_page(mock_page):
    """A page with a fixed-width hero and a tiny close link at every width."""
    state = {"width": 0}

    async def set_viewport_size(size):
        state["width"] = size["width"]

    def evaluate(script, *args):
        vw = state["width"]
        return {
            "documentWidth": max(vw, HERO_WIDTH),
            "viewportWidth": vw,
            "body": {"tagName": "body", "className": "", "id": "", "scrollHeight": 1000},
            "elements": [
                {
                    "tagName": "div", "className": "hero banner", "id": "",
                    "rect": {"x": 0, "y": 0, "width": HERO_WIDTH, "height": 300,
                             "left": 0, "right": HERO_WIDTH},
                    "scrollWidth": HERO_WIDTH, "clientWidth": HERO_WIDTH,
                    "overflow": "visible", "interactive": False, "textual": False,
                },
                {
                    "tagName": "a", "className": "", "id": "close",
                    "rect": {"x": 10, "y": 10, "width": 20, "height": 20, "left": 10, "right": 30},
                    "scrollWidth": 20, "clientWidth": 20,
                    "overflow": "visible", "interactive": True, "textual": True,
                },
            ],
        }

    mock_page.set_viewport_size = AsyncMock(side_effect=set_viewport_size)
    mock_page.evaluate = AsyncMock(side_effect=evaluate)
    return mock_page


@pytest.fixture
def three_phone_config(tmp_path: Path) -> BreakbotConfig:
    return BreakbotConfig(
        viewports=[
            ViewportGeometry(width=320, height=568, name="iPhone SE"),
            ViewportGeometry(width=375, height=667, name="iPhone 8"),
            ViewportGeometry(width=390, height=844, name="iPhone 14"),
            ViewportGeometry(width=1280, height=800, name="xl (Tailwind)"),
        ],
        settle_delay_ms=0,
        report_formats=["text", "json"],
        report_output_dir=str(tmp_path / "reports"),
    )


@pytest.mark.integration
class TestEndToEnd:
    def test_issue_recurring_across_viewports_is_reported_once(
        self, three_phone_config, mock_page, mock_browser,
    ):
        _make_responsive_page(mock_page)
        orchestrator = Orchestrator(three_phone_config)
        orchestrator.browser._browser = mock_browser

        outcome = orchestrator.test_urls(["https://example.com"])[0]

        assert outcome.ok
        run = outcome.result
        # Hero overflows the three phones; the link is tiny everywhere
        assert [len(va.issues) for va in run.viewports] == [3, 3, 3, 1]
        assert run.summary.total_issues == 10
        assert run.summary.worst_viewport == "iPhone SE"
        assert run.summary.common_issues == ["horizontal-overflow", "touch-target"]

        by_key = {issue.key: issue for group in outcome.groups for issue in group.issues}
        hero = by_key[("horizontal-overflow", "div.hero.banner")]
        assert hero.affected_viewports == ["iPhone SE", "iPhone 8", "iPhone 14"]
        assert hero.normalized_description == "Element extends Npx beyond viewport"
        page_scroll = by_key[("horizontal-overflow", "body")]
        assert page_scroll.normalized_description == (
            "Page has horizontal scrollbar (document: Npx, viewport: Npx)"
        )
        close = by_key[("touch-target", "#close")]
        assert close.affected_viewports == run.viewport_names

        text = build_text_report(run, outcome.groups)
        assert "- `#close` (all viewports)" in text
        assert "- `div.hero.banner` (3 viewports)" in text

        with open(outcome.reports["json"]) as f:
            data = json.load(f)
        assert len(data["uniqueIssues"]) == 3
        assert data["summary"]["totalIssues"] == 10

    def test_browser_released_after_run(self, three_phone_config, mock_page, mock_browser):
        _make_responsive_page(mock_page)
        orchestrator = Orchestrator(three_phone_config)
        orchestrator.browser._browser = mock_browser

        orchestrator.test_urls(["https://example.com"], write_reports=False)

        mock_browser.close.assert_awaited_once()
        assert not orchestrator.browser.is_running
