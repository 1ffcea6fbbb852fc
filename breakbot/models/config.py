"""Configuration models for Breakbot."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from breakbot.models.analysis import ViewportGeometry
from breakbot.viewports import geometries


class BreakbotConfig(BaseModel):
    # Viewports tested per run, in display order
    viewports: list[ViewportGeometry] = Field(default_factory=geometries)

    # Navigation
    navigation_timeout_ms: int = Field(default=30000, gt=0)
    wait_until: str = "networkidle"

    # Layout must settle after a resize before the DOM is measured
    settle_delay_ms: int = Field(default=500, ge=0)

    # Browser
    headless: bool = True
    browser_args: list[str] = Field(
        default_factory=lambda: [
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
            "--disable-gpu",
        ]
    )
    max_concurrent_runs: int = Field(default=3, gt=0)

    # Screenshots
    screenshot_dir: str = "./breakbot-screenshots"
    scroll_for_lazy_content: bool = True

    # Reporting
    report_formats: list[str] = Field(default_factory=lambda: ["text"])
    report_output_dir: str = "./breakbot-reports"
    max_examples_per_kind: int = Field(default=5, gt=0)

    @field_validator("viewports")
    @classmethod
    def unique_viewport_names(cls, v: list[ViewportGeometry]) -> list[ViewportGeometry]:
        if not v:
            raise ValueError("At least one viewport is required")
        names = [vp.name for vp in v]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ValueError(f"Duplicate viewport names: {', '.join(dupes)}")
        return v

    @field_validator("report_formats")
    @classmethod
    def known_formats(cls, v: list[str]) -> list[str]:
        unknown = [f for f in v if f not in ("text", "json")]
        if unknown:
            raise ValueError(f"Unknown report formats: {', '.join(unknown)}")
        return v

    @classmethod
    def load(cls, path: str | Path) -> "BreakbotConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    @classmethod
    def load_or_default(cls, path: str | Path) -> "BreakbotConfig":
        """Load config from a JSON file, falling back to defaults if it is missing."""
        try:
            return cls.load(path)
        except FileNotFoundError:
            return cls()

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
