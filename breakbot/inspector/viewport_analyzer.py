"""Viewport analyzer: one resize, settle, inspect pass."""

from __future__ import annotations

import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from breakbot.errors import InspectionFailure
from breakbot.models.analysis import ViewportAnalysis, ViewportGeometry
from breakbot.viewports import classify_breakpoint

from .element_inspector import inspect_page

logger = logging.getLogger(__name__)

DEFAULT_SETTLE_DELAY_MS = 500


async def analyze_viewport(
    page: Page,
    viewport: ViewportGeometry,
    settle_delay_ms: int = DEFAULT_SETTLE_DELAY_MS,
) -> ViewportAnalysis:
    """Resize the page to ``viewport`` and report its layout defects.

    The page must come from a context with ``device_scale_factor=1``. The
    settle delay is required: measuring straight after a resize can observe
    the previous layout pass.
    """
    logger.debug("Analyzing %s (%dx%d)", viewport.name, viewport.width, viewport.height)
    try:
        await page.set_viewport_size({"width": viewport.width, "height": viewport.height})
        await page.wait_for_timeout(settle_delay_ms)
        report = await inspect_page(page)
    except InspectionFailure as e:
        raise InspectionFailure(e.cause, viewport.name) from e
    except PlaywrightError as e:
        raise InspectionFailure(str(e), viewport.name) from e

    issues = [
        issue.model_copy(update={
            "viewport_name": viewport.name,
            "viewport_width": viewport.width,
        })
        for issue in report.issues
    ]
    logger.info("%s: %d issues", viewport.name, len(issues))

    return ViewportAnalysis(
        viewport=viewport,
        breakpoint=classify_breakpoint(viewport.width),
        issues=issues,
        metrics=report.metrics,
    )
