"""Main orchestrator: owns the browser for a command and coordinates analysis and capture."""

from __future__ import annotations

import asyncio
import logging
import signal
import time
from dataclasses import dataclass, field
from typing import Awaitable, Optional, Sequence, TypeVar

from breakbot.browser.manager import BrowserManager, navigate
from breakbot.browser.screenshot import Screenshot, capture_screenshots
from breakbot.errors import BreakbotError
from breakbot.inspector.aggregator import run_analysis
from breakbot.models.analysis import IssueGroup, RunResult, ViewportGeometry
from breakbot.models.config import BreakbotConfig
from breakbot.reporter.reducer import reduce_run
from breakbot.reporter.reporter import Reporter

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class UrlOutcome:
    """Result of testing one URL: either a complete run or the error that aborted it."""

    url: str
    result: Optional[RunResult] = None
    groups: list[IssueGroup] = field(default_factory=list)
    error: Optional[BreakbotError] = None
    reports: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None


class Orchestrator:
    """Coordinates browser lifecycle, analysis runs and reporting."""

    def __init__(self, config: BreakbotConfig, browser: BrowserManager | None = None):
        self.config = config
        self.browser = browser or BrowserManager(
            headless=config.headless,
            args=config.browser_args,
        )
        self.reporter = Reporter(config)

    # -- analysis -----------------------------------------------------------

    async def analyze_url(self, url: str) -> RunResult:
        """Load ``url`` once and analyze it at every configured viewport."""
        first = self.config.viewports[0]
        page = await self.browser.new_page(first)
        try:
            await navigate(
                page, url,
                timeout_ms=self.config.navigation_timeout_ms,
                wait_until=self.config.wait_until,
            )
            return await run_analysis(
                page, url, self.config.viewports,
                settle_delay_ms=self.config.settle_delay_ms,
            )
        finally:
            await self.browser.close_page(page)

    async def _test_urls(self, urls: Sequence[str], write_reports: bool) -> list[UrlOutcome]:
        start = time.time()
        # Engine failures are fatal for every run, so surface them up front
        await self.browser.acquire()
        # Runs share the browser but each has its own page
        semaphore = asyncio.Semaphore(self.config.max_concurrent_runs)

        async def _run_one(index: int, url: str) -> UrlOutcome:
            async with semaphore:
                logger.info("Testing [%d/%d]: %s", index + 1, len(urls), url)
                try:
                    result = await self.analyze_url(url)
                except BreakbotError as e:
                    logger.error("Run for %s failed: %s", url, e)
                    return UrlOutcome(url=url, error=e)

                groups = reduce_run(result)
                outcome = UrlOutcome(url=url, result=result, groups=groups)
                if write_reports:
                    outcome.reports = self.reporter.generate_reports(result, groups)
                return outcome

        tasks = [asyncio.create_task(_run_one(i, u)) for i, u in enumerate(urls)]
        try:
            outcomes = await asyncio.gather(*tasks)
        except BaseException:
            # No run may outlive the session's browser teardown
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        logger.info("=== Tested %d URLs in %.1fs ===", len(urls), time.time() - start)
        return list(outcomes)

    def test_urls(self, urls: Sequence[str], write_reports: bool = True) -> list[UrlOutcome]:
        """Analyze every URL and reduce each run into grouped unique issues."""
        return asyncio.run(self._session(self._test_urls(urls, write_reports)))

    # -- screenshots --------------------------------------------------------

    async def _capture(self, url: str, viewports: Sequence[ViewportGeometry]) -> list[Screenshot]:
        return await capture_screenshots(
            self.browser, url, viewports,
            timeout_ms=self.config.navigation_timeout_ms,
            wait_until=self.config.wait_until,
            scroll_for_lazy_content=self.config.scroll_for_lazy_content,
        )

    def capture(self, url: str, viewports: Sequence[ViewportGeometry]) -> list[Screenshot]:
        """Capture full-page screenshots of ``url`` at each viewport."""
        return asyncio.run(self._session(self._capture(url, viewports)))

    # -- lifecycle ----------------------------------------------------------

    async def _session(self, work: Awaitable[T]) -> T:
        """Await ``work``, then release the browser however it ended.

        SIGINT/SIGTERM cancel the work so the browser is still torn down.
        """
        loop = asyncio.get_running_loop()
        task = asyncio.current_task()
        installed = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._on_signal, sig, task)
                installed.append(sig)
            except (NotImplementedError, RuntimeError, ValueError):
                logger.debug("Signal handler for %s unavailable", sig.name)
        try:
            return await work
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)
            await self.browser.release_all()

    def _on_signal(self, sig: signal.Signals, task: asyncio.Task | None) -> None:
        logger.warning("Received %s, shutting down browser", sig.name)
        if task is not None:
            task.cancel()
