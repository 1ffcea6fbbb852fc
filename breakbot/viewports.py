"""Viewport catalog — the tested geometries and the Tailwind breakpoint bands."""

from __future__ import annotations

from breakbot.models.analysis import ViewportGeometry

DEFAULT_VIEWPORTS: tuple[ViewportGeometry, ...] = (
    ViewportGeometry(width=320, height=568, name="iPhone SE"),
    ViewportGeometry(width=375, height=667, name="iPhone 8"),
    ViewportGeometry(width=390, height=844, name="iPhone 14"),
    ViewportGeometry(width=480, height=854, name="Mobile Large"),
    ViewportGeometry(width=640, height=960, name="sm (Tailwind)"),
    ViewportGeometry(width=768, height=1024, name="md (Tailwind)"),
    ViewportGeometry(width=1024, height=768, name="lg (Tailwind)"),
    ViewportGeometry(width=1280, height=800, name="xl (Tailwind)"),
    ViewportGeometry(width=1536, height=864, name="2xl (Tailwind)"),
)

# Minimum width of each band
TAILWIND_BREAKPOINTS: dict[str, int] = {
    "sm": 640,
    "md": 768,
    "lg": 1024,
    "xl": 1280,
    "2xl": 1536,
}

MOBILE_BREAKPOINT = "default (mobile)"


def geometries() -> list[ViewportGeometry]:
    """Return the default catalog in canonical (iteration and display) order."""
    return list(DEFAULT_VIEWPORTS)


def classify_breakpoint(width: int) -> str:
    """Map a viewport width onto its Tailwind breakpoint band.

    Boundary widths belong to the upper band, so 640 is "sm" and 1536 is "2xl".
    """
    if width < 0:
        raise ValueError(f"Viewport width must be non-negative, got {width}")
    band = MOBILE_BREAKPOINT
    for name, min_width in TAILWIND_BREAKPOINTS.items():
        if width >= min_width:
            band = name
    return band


def ad_hoc_viewport(width: int) -> ViewportGeometry:
    """Build a one-off 4:3 viewport for a single width."""
    return ViewportGeometry(width=width, height=int(width * 0.75 + 0.5), name=f"{width}px")
