"""Element inspector: measures the live layout and turns it into defect observations.

Measurement has to happen inside the page (live geometry, computed styles), so a
single ``page.evaluate`` call walks ``body *`` and returns one record per visible
element that could trip a rule. The thresholds below are then applied to those
records. The inspector does not know which viewport it is looking at; the
viewport analyzer stamps that onto the observations afterwards.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from pydantic import BaseModel, Field, ValidationError

from breakbot.errors import InspectionFailure
from breakbot.models.analysis import (
    DefectObservation,
    ElementRect,
    ElementSnapshot,
    ViewportMetrics,
)

logger = logging.getLogger(__name__)

# Sub-pixel rendering noise is absorbed by the tolerance
OVERFLOW_TOLERANCE_PX = 5
OVERFLOW_HIGH_SEVERITY_PX = 50
OFFSCREEN_LEFT_PX = 10
# Targets under the recommended size are counted; only those under the
# defect size are reported
TOUCH_TARGET_RECOMMENDED_PX = 44
TOUCH_TARGET_DEFECT_PX = 30

SUGGESTED_FIXES: dict[str, str] = {
    "page-overflow": "Add overflow-x-hidden to body or fix overflowing children",
    "horizontal-overflow": "overflow-x-hidden or max-w-full or w-full",
    "offscreen": "Check margin/padding or use relative positioning",
    "touch-target": f"min-w-[{TOUCH_TARGET_RECOMMENDED_PX}px] min-h-[{TOUCH_TARGET_RECOMMENDED_PX}px] or p-3",
    "text-overflow": "break-words or text-wrap or overflow-visible",
}

INTERACTIVE_SELECTOR = 'a, button, input, select, textarea, [role="button"], [onclick]'
TEXTUAL_SELECTOR = "p, span, h1, h2, h3, h4, h5, h6, a, li, td, th, label"

INSPECTION_SCRIPT = """([interactiveSelector, textualSelector]) => {
    const vw = window.innerWidth;
    const body = document.body;
    const result = {
        documentWidth: document.documentElement.scrollWidth,
        viewportWidth: vw,
        body: {
            tagName: 'body',
            className: body && typeof body.className === 'string' ? body.className : '',
            id: body ? (body.id || '') : '',
            scrollHeight: body ? body.scrollHeight : 0,
        },
        elements: [],
    };

    for (const el of document.querySelectorAll('body *')) {
        const rect = el.getBoundingClientRect();
        const styles = window.getComputedStyle(el);

        // Skip invisible elements
        if (styles.display === 'none' || styles.visibility === 'hidden' || rect.width === 0) {
            continue;
        }

        const interactive = el.matches(interactiveSelector);
        const textual = el.matches(textualSelector);
        const clipped = el.scrollWidth > el.clientWidth;

        // Only ship elements that can trip a rule
        if (!(rect.right > vw || rect.left < 0 || interactive || (textual && clipped))) {
            continue;
        }

        result.elements.push({
            tagName: el.tagName.toLowerCase(),
            className: typeof el.className === 'string' ? el.className : '',
            id: el.id || '',
            rect: {
                x: rect.x, y: rect.y, width: rect.width, height: rect.height,
                left: rect.left, right: rect.right,
            },
            scrollWidth: el.scrollWidth,
            clientWidth: el.clientWidth,
            overflow: styles.overflow,
            interactive: interactive,
            textual: textual,
        });
    }
    return result;
}"""


class MeasuredRect(BaseModel):
    x: float
    y: float
    width: float
    height: float
    left: float
    right: float


class ElementMeasurement(BaseModel):
    tag_name: str = Field(alias="tagName")
    class_name: str = Field(default="", alias="className")
    element_id: str = Field(default="", alias="id")
    rect: MeasuredRect
    scroll_width: float = Field(default=0, alias="scrollWidth")
    client_width: float = Field(default=0, alias="clientWidth")
    overflow: str = "visible"
    interactive: bool = False
    textual: bool = False

    def snapshot(self) -> ElementSnapshot:
        return ElementSnapshot(
            tag_name=self.tag_name,
            class_name=self.class_name,
            element_id=self.element_id,
            rect=ElementRect(
                x=self.rect.x, y=self.rect.y,
                width=self.rect.width, height=self.rect.height,
            ),
        )


class BodyMeasurement(BaseModel):
    class_name: str = Field(default="", alias="className")
    element_id: str = Field(default="", alias="id")
    scroll_height: float = Field(default=0, alias="scrollHeight")


class PageMeasurement(BaseModel):
    document_width: int = Field(alias="documentWidth")
    viewport_width: int = Field(alias="viewportWidth")
    body: BodyMeasurement = Field(default_factory=BodyMeasurement)
    elements: list[ElementMeasurement] = Field(default_factory=list)


@dataclass
class InspectionReport:
    issues: list[DefectObservation] = field(default_factory=list)
    metrics: ViewportMetrics = field(default_factory=ViewportMetrics)


def _js_round(value: float) -> int:
    """Round half up, matching Math.round in the page."""
    return math.floor(value + 0.5)


def build_selector(tag_name: str, element_id: str = "", class_name: str = "") -> str:
    """Best-effort locator: #id, else tag plus its first two classes, else tag.

    Not unique across the page; dedup accepts the collisions.
    """
    if element_id:
        return f"#{element_id}"
    classes = class_name.split()[:2]
    if classes:
        return f"{tag_name}.{'.'.join(classes)}"
    return tag_name


def _page_overflow_observation(page: PageMeasurement) -> DefectObservation:
    body = page.body
    return DefectObservation(
        kind="horizontal-overflow",
        description=(
            f"Page has horizontal scrollbar (document: {page.document_width}px, "
            f"viewport: {page.viewport_width}px)"
        ),
        selector="body",
        severity="high",
        element=ElementSnapshot(
            tag_name="body",
            class_name=body.class_name,
            element_id=body.element_id,
            rect=ElementRect(
                x=0, y=0, width=page.document_width, height=body.scroll_height,
            ),
        ),
        suggested_fix=SUGGESTED_FIXES["page-overflow"],
    )


def evaluate_rules(page: PageMeasurement) -> InspectionReport:
    """Apply the layout defect rules to one page measurement."""
    report = InspectionReport()
    metrics = report.metrics
    vw = page.viewport_width
    metrics.document_width = page.document_width
    metrics.viewport_width = vw
    metrics.has_horizontal_scroll = page.document_width > vw

    for el in page.elements:
        rect = el.rect
        selector = build_selector(el.tag_name, el.element_id, el.class_name)

        if rect.right > vw + OVERFLOW_TOLERANCE_PX:
            excess = rect.right - vw
            metrics.overflowing_element_count += 1
            report.issues.append(DefectObservation(
                kind="horizontal-overflow",
                description=f"Element extends {_js_round(excess)}px beyond viewport",
                selector=selector,
                severity="high" if excess > OVERFLOW_HIGH_SEVERITY_PX else "medium",
                element=el.snapshot(),
                suggested_fix=SUGGESTED_FIXES["horizontal-overflow"],
            ))

        if rect.left < -OFFSCREEN_LEFT_PX and rect.right > 0:
            report.issues.append(DefectObservation(
                kind="offscreen",
                description="Element partially off-screen to the left",
                selector=selector,
                severity="medium",
                element=el.snapshot(),
                suggested_fix=SUGGESTED_FIXES["offscreen"],
            ))

        if el.interactive and (
            rect.width < TOUCH_TARGET_RECOMMENDED_PX or rect.height < TOUCH_TARGET_RECOMMENDED_PX
        ):
            metrics.small_touch_target_count += 1
            if rect.width < TOUCH_TARGET_DEFECT_PX or rect.height < TOUCH_TARGET_DEFECT_PX:
                report.issues.append(DefectObservation(
                    kind="touch-target",
                    description=(
                        f"Interactive element too small for touch "
                        f"({_js_round(rect.width)}x{_js_round(rect.height)}px, "
                        f"min {TOUCH_TARGET_RECOMMENDED_PX}x{TOUCH_TARGET_RECOMMENDED_PX}px recommended)"
                    ),
                    selector=selector,
                    severity="medium",
                    element=el.snapshot(),
                    suggested_fix=SUGGESTED_FIXES["touch-target"],
                ))

        if el.textual and el.scroll_width > el.client_width and el.overflow != "visible":
            metrics.truncated_text_count += 1
            report.issues.append(DefectObservation(
                kind="text-overflow",
                description="Text is being truncated or clipped",
                selector=selector,
                severity="low",
                element=el.snapshot(),
                suggested_fix=SUGGESTED_FIXES["text-overflow"],
            ))

    if metrics.has_horizontal_scroll:
        report.issues.insert(0, _page_overflow_observation(page))

    return report


async def inspect_page(page: Page) -> InspectionReport:
    """Measure the page as currently laid out and evaluate every defect rule."""
    try:
        raw = await page.evaluate(INSPECTION_SCRIPT, [INTERACTIVE_SELECTOR, TEXTUAL_SELECTOR])
    except PlaywrightError as e:
        raise InspectionFailure(str(e)) from e

    if not isinstance(raw, dict):
        raise InspectionFailure(f"Unexpected inspection payload: {type(raw).__name__}")
    try:
        measurement = PageMeasurement.model_validate(raw)
    except ValidationError as e:
        raise InspectionFailure(f"Malformed inspection payload: {e}") from e

    logger.debug(
        "Measured %d candidate elements (document %dpx, viewport %dpx)",
        len(measurement.elements), measurement.document_width, measurement.viewport_width,
    )
    return evaluate_rules(measurement)
