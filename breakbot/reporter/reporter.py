"""Report generation orchestration."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Sequence

from breakbot.models.analysis import IssueGroup, RunResult
from breakbot.models.config import BreakbotConfig

from .json_report import generate_json_report
from .text_report import build_text_report

logger = logging.getLogger(__name__)


def report_stem(run_result: RunResult) -> str:
    """File name stem derived from the URL host/path and the run timestamp."""
    target = re.sub(r"^https?://", "", run_result.url)
    slug = re.sub(r"[^A-Za-z0-9]+", "-", target).strip("-").lower()[:60] or "page"
    stamp = re.sub(r"[^0-9]", "", run_result.timestamp)[:14]
    return f"report_{slug}_{stamp}"


class Reporter:
    """Writes run reports in every configured format."""

    def __init__(self, config: BreakbotConfig):
        self.config = config

    def generate_reports(
        self,
        run_result: RunResult,
        groups: Sequence[IssueGroup],
        output_dir: Path | None = None,
    ) -> dict[str, str]:
        """Generate all configured report formats. Returns format -> file path."""
        out_dir = output_dir or Path(self.config.report_output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        generated = {}
        stem = report_stem(run_result)
        logger.debug("Report output directory: %s", out_dir)

        if "text" in self.config.report_formats:
            path = out_dir / f"{stem}.md"
            path.write_text(
                build_text_report(run_result, groups, self.config.max_examples_per_kind),
                encoding="utf-8",
            )
            generated["text"] = str(path)
            logger.info("Text report: %s", path)

        if "json" in self.config.report_formats:
            path = out_dir / f"{stem}.json"
            generate_json_report(run_result, groups, path)
            generated["json"] = str(path)
            logger.info("JSON report: %s", path)

        return generated
