"""Breakbot failure taxonomy."""

from __future__ import annotations


class BreakbotError(Exception):
    """Base class for failures that abort a run."""


class EngineUnavailable(BreakbotError):
    """The headless browser could not be started."""


class NavigationFailure(BreakbotError):
    """The page did not load (timeout, DNS or connection failure)."""

    def __init__(self, url: str, cause: str):
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to load {url}: {cause}")


class InspectionFailure(BreakbotError):
    """The in-page inspection threw or returned unusable data."""

    def __init__(self, cause: str, viewport_name: str | None = None):
        self.cause = cause
        self.viewport_name = viewport_name
        if viewport_name:
            super().__init__(f"Inspection failed at viewport '{viewport_name}': {cause}")
        else:
            super().__init__(f"Inspection failed: {cause}")


class SimulatorError(BreakbotError):
    """An xcrun simctl command failed."""
