"""Analysis data structures produced by the inspector and consumed by reporters."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DefectKind = Literal[
    "horizontal-overflow",
    "vertical-overflow",
    "hidden-content",
    "touch-target",
    "text-overflow",
    "overlap",      # reserved, no rule emits it yet
    "offscreen",
]

Severity = Literal["low", "medium", "high"]


class _WireModel(BaseModel):
    """Base for models serialised with the camelCase wire names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ViewportGeometry(_WireModel):
    model_config = ConfigDict(frozen=True)

    width: int = Field(gt=0)
    height: int = Field(gt=0)
    name: str


class ElementRect(_WireModel):
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


class ElementSnapshot(_WireModel):
    tag_name: str
    class_name: str = ""
    element_id: str = Field(default="", alias="id")
    rect: ElementRect = Field(default_factory=ElementRect)


class DefectObservation(_WireModel):
    """One raw finding from a single viewport pass."""

    model_config = ConfigDict(frozen=True)

    kind: DefectKind
    description: str
    selector: str
    severity: Severity
    viewport_name: str = ""
    viewport_width: int = 0
    element: Optional[ElementSnapshot] = None
    suggested_fix: Optional[str] = None


class ViewportMetrics(_WireModel):
    has_horizontal_scroll: bool = False
    document_width: int = 0
    viewport_width: int = 0
    overflowing_element_count: int = 0
    small_touch_target_count: int = 0
    truncated_text_count: int = 0


class ViewportAnalysis(_WireModel):
    viewport: ViewportGeometry
    breakpoint: str
    issues: list[DefectObservation] = Field(default_factory=list)
    metrics: ViewportMetrics = Field(default_factory=ViewportMetrics)


class RunSummary(_WireModel):
    total_issues: int = 0
    high_severity: int = 0
    medium_severity: int = 0
    low_severity: int = 0
    worst_viewport: Optional[str] = None
    common_issues: list[DefectKind] = Field(default_factory=list, max_length=3)


class RunResult(_WireModel):
    url: str
    timestamp: str  # ISO-8601, UTC
    viewports: list[ViewportAnalysis] = Field(default_factory=list)
    summary: RunSummary = Field(default_factory=RunSummary)

    @property
    def viewport_names(self) -> list[str]:
        return [va.viewport.name for va in self.viewports]

    @property
    def all_issues(self) -> list[DefectObservation]:
        """Issues of every viewport, flattened in catalog order."""
        return [issue for va in self.viewports for issue in va.issues]


class DeduplicatedIssue(_WireModel):
    """A defect merged across every viewport where its (kind, selector) recurs."""

    kind: DefectKind
    selector: str
    severity: Severity
    normalized_description: str
    suggested_fix: Optional[str] = None
    affected_viewports: list[str] = Field(default_factory=list)

    @property
    def key(self) -> tuple[str, str]:
        return (self.kind, self.selector)


class IssueGroup(_WireModel):
    kind: DefectKind
    issues: list[DeduplicatedIssue] = Field(default_factory=list)
