"""Full-page screenshot capture at one or more viewports."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from breakbot.models.analysis import ViewportGeometry

from .manager import DEFAULT_NAVIGATION_TIMEOUT_MS, BrowserManager, navigate

logger = logging.getLogger(__name__)

# Scrolls the page in steps so lazy-loaded content renders, then returns to the top
LAZY_CONTENT_SCRIPT = """() => new Promise((resolve) => {
    let totalHeight = 0;
    const distance = 100;
    const timer = setInterval(() => {
        const scrollHeight = document.body.scrollHeight;
        window.scrollBy(0, distance);
        totalHeight += distance;
        if (totalHeight >= scrollHeight) {
            clearInterval(timer);
            window.scrollTo(0, 0);
            setTimeout(resolve, 500);
        }
    }, 100);
})"""


@dataclass
class Screenshot:
    viewport: ViewportGeometry
    data: bytes
    timestamp: float = field(default_factory=time.time)

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.data)
        return path


async def capture_screenshots(
    manager: BrowserManager,
    url: str,
    viewports: Sequence[ViewportGeometry],
    timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS,
    wait_until: str = "networkidle",
    scroll_for_lazy_content: bool = True,
) -> list[Screenshot]:
    """Load ``url`` fresh at each viewport and capture a full-page PNG."""
    screenshots: list[Screenshot] = []

    for i, viewport in enumerate(viewports, 1):
        logger.info("Capturing [%d/%d] %s (%dpx)", i, len(viewports), viewport.name, viewport.width)
        page = await manager.new_page(viewport)
        try:
            await navigate(page, url, timeout_ms=timeout_ms, wait_until=wait_until)
            if scroll_for_lazy_content:
                await page.evaluate(LAZY_CONTENT_SCRIPT)
            data = await page.screenshot(full_page=True, type="png")
            screenshots.append(Screenshot(viewport=viewport, data=data))
        except Exception as e:
            logger.error("Screenshot failed for %s: %s", viewport.name, e)
            raise
        finally:
            await manager.close_page(page)

    return screenshots
