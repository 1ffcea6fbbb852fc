"""Pytest configuration and shared fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
from playwright.async_api import Browser, BrowserContext, Page

from breakbot.models.analysis import (
    DefectObservation,
    ElementRect,
    ElementSnapshot,
    RunResult,
    ViewportAnalysis,
    ViewportGeometry,
    ViewportMetrics,
)
from breakbot.models.config import BreakbotConfig
from breakbot.inspector.aggregator import summarize


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def mobile_viewport() -> ViewportGeometry:
    return ViewportGeometry(width=375, height=667, name="iPhone 8")


@pytest.fixture
def desktop_viewport() -> ViewportGeometry:
    return ViewportGeometry(width=1280, height=800, name="xl (Tailwind)")


@pytest.fixture
def breakbot_config(mobile_viewport, desktop_viewport) -> BreakbotConfig:
    """A two-viewport config with no settle delay."""
    return BreakbotConfig(
        viewports=[mobile_viewport, desktop_viewport],
        settle_delay_ms=0,
        navigation_timeout_ms=5000,
        report_formats=["text", "json"],
        report_output_dir="./test-reports",
    )


@pytest.fixture
def temp_config_file(breakbot_config: BreakbotConfig, tmp_path: Path) -> Path:
    config_file = tmp_path / "breakbot.json"
    breakbot_config.save(config_file)
    return config_file


# ============================================================================
# Analysis Fixtures
# ============================================================================


@pytest.fixture
def overflow_observation() -> DefectObservation:
    return DefectObservation(
        kind="horizontal-overflow",
        description="Element extends 80px beyond viewport",
        selector="div.hero.wide",
        severity="high",
        viewport_name="iPhone 8",
        viewport_width=375,
        element=ElementSnapshot(
            tag_name="div",
            class_name="hero wide",
            rect=ElementRect(x=0, y=0, width=455, height=200),
        ),
        suggested_fix="overflow-x-hidden or max-w-full or w-full",
    )


@pytest.fixture
def touch_observation() -> DefectObservation:
    return DefectObservation(
        kind="touch-target",
        description="Interactive element too small for touch (20x20px, min 44x44px recommended)",
        selector="#close",
        severity="medium",
        viewport_name="iPhone 8",
        viewport_width=375,
        suggested_fix="min-w-[44px] min-h-[44px] or p-3",
    )


@pytest.fixture
def run_result(mobile_viewport, desktop_viewport, overflow_observation, touch_observation) -> RunResult:
    """A run where the mobile viewport has two issues and desktop has none."""
    analyses = [
        ViewportAnalysis(
            viewport=mobile_viewport,
            breakpoint="default (mobile)",
            issues=[overflow_observation, touch_observation],
            metrics=ViewportMetrics(
                has_horizontal_scroll=False,
                document_width=375,
                viewport_width=375,
                overflowing_element_count=1,
                small_touch_target_count=1,
            ),
        ),
        ViewportAnalysis(
            viewport=desktop_viewport,
            breakpoint="xl",
            metrics=ViewportMetrics(document_width=1280, viewport_width=1280),
        ),
    ]
    return RunResult(
        url="https://example.com",
        timestamp="2025-01-01T00:00:00.000Z",
        viewports=analyses,
        summary=summarize(analyses),
    )


# ============================================================================
# Mock Fixtures
# ============================================================================


def _empty_payload(document_width: int = 375, viewport_width: int = 375) -> dict:
    """Inspection payload for a page with nothing to report."""
    return {
        "documentWidth": document_width,
        "viewportWidth": viewport_width,
        "body": {"tagName": "body", "className": "", "id": "", "scrollHeight": 800},
        "elements": [],
    }


@pytest.fixture
def mock_page() -> AsyncMock:
    """A Playwright page whose inspection finds nothing."""
    page = AsyncMock(spec=Page)
    page.url = "https://example.com"
    page.set_viewport_size = AsyncMock()
    page.wait_for_timeout = AsyncMock()
    page.goto = AsyncMock(return_value=Mock(status=200))
    page.evaluate = AsyncMock(return_value=_empty_payload())
    page.screenshot = AsyncMock(return_value=b"\x89PNG fake")
    page.context = AsyncMock(spec=BrowserContext)
    return page


@pytest.fixture
def mock_browser(mock_page) -> AsyncMock:
    """A connected browser whose contexts hand out ``mock_page``."""
    context = AsyncMock(spec=BrowserContext)
    context.new_page = AsyncMock(return_value=mock_page)
    browser = AsyncMock(spec=Browser)
    browser.is_connected = Mock(return_value=True)
    browser.new_context = AsyncMock(return_value=context)
    browser.version = "120.0"
    return browser


@pytest.fixture
def temp_report_dir(tmp_path: Path) -> Path:
    report_dir = tmp_path / "reports"
    report_dir.mkdir()
    return report_dir
