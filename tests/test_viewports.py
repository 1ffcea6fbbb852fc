"""Tests for the viewport catalog and breakpoint classification."""

import pytest

from breakbot.viewports import (
    DEFAULT_VIEWPORTS,
    MOBILE_BREAKPOINT,
    TAILWIND_BREAKPOINTS,
    ad_hoc_viewport,
    classify_breakpoint,
    geometries,
)


class TestCatalog:
    def test_nine_viewports_in_width_order(self):
        vps = geometries()
        assert len(vps) == 9
        widths = [vp.width for vp in vps]
        assert widths == sorted(widths)
        assert widths[0] == 320
        assert widths[-1] == 1536

    def test_names_are_unique(self):
        names = [vp.name for vp in geometries()]
        assert len(names) == len(set(names))

    def test_geometries_returns_copy(self):
        vps = geometries()
        vps.pop()
        assert len(geometries()) == len(DEFAULT_VIEWPORTS)

    def test_known_entries(self):
        by_name = {vp.name: vp for vp in geometries()}
        assert (by_name["iPhone SE"].width, by_name["iPhone SE"].height) == (320, 568)
        assert (by_name["lg (Tailwind)"].width, by_name["lg (Tailwind)"].height) == (1024, 768)

    def test_every_band_is_covered(self):
        bands = {classify_breakpoint(vp.width) for vp in geometries()}
        assert bands == {MOBILE_BREAKPOINT, *TAILWIND_BREAKPOINTS}


class TestClassifyBreakpoint:
    @pytest.mark.parametrize("width,expected", [
        (0, "default (mobile)"),
        (320, "default (mobile)"),
        (639, "default (mobile)"),
        (640, "sm"),
        (767, "sm"),
        (768, "md"),
        (1023, "md"),
        (1024, "lg"),
        (1279, "lg"),
        (1280, "xl"),
        (1535, "xl"),
        (1536, "2xl"),
        (3840, "2xl"),
    ])
    def test_bands(self, width, expected):
        assert classify_breakpoint(width) == expected

    def test_negative_width_rejected(self):
        with pytest.raises(ValueError):
            classify_breakpoint(-1)


class TestAdHocViewport:
    def test_four_by_three(self):
        vp = ad_hoc_viewport(800)
        assert vp.width == 800
        assert vp.height == 600
        assert vp.name == "800px"

    def test_height_rounds_half_up(self):
        # 322 * 0.75 = 241.5
        assert ad_hoc_viewport(322).height == 242
