"""Data models shared by the demo and exploration engine.

Every model accepts and emits the camelCase field names used by plan files
and by the in-page executor (``stepNumber``, ``selectorFallback``, ...), while
Python code works with the snake_case attributes.
"""

from __future__ import annotations

import time
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Metadata keys reported by the executor or attached by the engine.
NEEDS_BACKGROUND_SCREENSHOT = "needsBackgroundScreenshot"
SCREENSHOT_DATA_URL = "screenshotDataUrl"

# Step number used for steps the engine synthesizes itself.
SYNTHESIZED_STEP = 0

type WaitCondition = Literal["timeout", "visible", "hidden", "networkIdle", "domStable"]
type AssertionType = Literal["text", "visible", "hidden", "url", "count", "attribute", "value"]
type ExplorationMode = Literal["smart", "exhaustive"]
type TapeStatus = Literal["complete", "partial", "error"]


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class WireModel(BaseModel):
    """Base model using camelCase aliases on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Actions -----------------------------------------------------------------


class BaseStep(WireModel):
    """Fields common to every action."""

    model_config = ConfigDict(frozen=True)

    step_number: int = SYNTHESIZED_STEP
    description: str = ""
    timeout: int | None = None


class ElementStep(BaseStep):
    """An action aimed at a single element."""

    selector: str
    selector_fallback: str | None = None


class NavigateStep(BaseStep):
    action: Literal["navigate"] = "navigate"
    target: str


class GoBackStep(BaseStep):
    action: Literal["go_back"] = "go_back"


class ClickStep(ElementStep):
    action: Literal["click"] = "click"


class FillStep(ElementStep):
    action: Literal["fill"] = "fill"
    value: str = ""


class SelectStep(ElementStep):
    action: Literal["select"] = "select"
    value: str


class CheckStep(ElementStep):
    action: Literal["check"] = "check"


class UncheckStep(ElementStep):
    action: Literal["uncheck"] = "uncheck"


class HoverStep(ElementStep):
    action: Literal["hover"] = "hover"


class ScrollPosition(WireModel):
    x: int = 0
    y: int = 0


class ScrollStep(BaseStep):
    action: Literal["scroll"] = "scroll"
    selector: str | None = None
    selector_fallback: str | None = None
    position: ScrollPosition | None = None


class WaitStep(BaseStep):
    action: Literal["wait"] = "wait"
    condition: WaitCondition = "timeout"
    selector: str | None = None


class AssertStep(BaseStep):
    action: Literal["assert"] = "assert"
    assertion_type: AssertionType
    selector: str | None = None
    selector_fallback: str | None = None
    expected: str | int | None = None
    name: str | None = None


class KeypressStep(BaseStep):
    action: Literal["keypress"] = "keypress"
    key: str
    selector: str | None = None
    selector_fallback: str | None = None


class DragStep(ElementStep):
    action: Literal["drag"] = "drag"
    target_selector: str


class UploadStep(ElementStep):
    action: Literal["upload"] = "upload"
    file_path: str


class ScreenshotStep(BaseStep):
    action: Literal["screenshot"] = "screenshot"


class CheckActionabilityStep(ElementStep):
    action: Literal["check_actionability"] = "check_actionability"


class GetPageStateStep(BaseStep):
    action: Literal["get_page_state"] = "get_page_state"


class DismissModalStep(BaseStep):
    action: Literal["dismiss_modal"] = "dismiss_modal"
    selector: str | None = None


TestStep = Annotated[
    NavigateStep
    | GoBackStep
    | ClickStep
    | FillStep
    | SelectStep
    | CheckStep
    | UncheckStep
    | HoverStep
    | ScrollStep
    | WaitStep
    | AssertStep
    | KeypressStep
    | DragStep
    | UploadStep
    | ScreenshotStep
    | CheckActionabilityStep
    | GetPageStateStep
    | DismissModalStep,
    Field(discriminator="action"),
]

NAVIGATION_ACTIONS = frozenset({"navigate", "go_back"})


# --- Results -----------------------------------------------------------------


class StepResult(WireModel):
    """Outcome of a single action, reported by the driver or the executor."""

    step_number: int
    action: str
    description: str = ""
    passed: bool
    duration: int = 0
    timestamp: int = Field(default_factory=now_ms)
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    screenshot_data_url: str | None = None

    @property
    def needs_background_screenshot(self) -> bool:
        return bool(self.metadata.get(NEEDS_BACKGROUND_SCREENSHOT))


def make_step_result(
    step_number: int,
    action: str,
    description: str,
    passed: bool,
    error: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> StepResult:
    """Build a result for a step the engine performed itself."""
    return StepResult(
        step_number=step_number,
        action=action,
        description=description,
        passed=passed,
        error=error,
        metadata=metadata or {},
    )


class ScreenshotCapture(WireModel):
    step_number: int
    data_url: str
    timestamp: int
    label: str


class Resolution(WireModel):
    width: int = 0
    height: int = 0


class VideoMetadata(WireModel):
    """Describes a finished recording artifact."""

    filename: str = ""
    duration: int
    file_size: int
    resolution: Resolution = Field(default_factory=Resolution)
    mime_type: str
    timestamp: int


class CriterionResult(WireModel):
    criterion_id: str
    passed: bool
    message: str
    evidence: str | None = None


class DemoResult(WireModel):
    """Aggregated outcome of one demo or exploration run."""

    test_plan_id: str
    passed: bool
    steps: list[StepResult]
    screenshots: list[ScreenshotCapture] = Field(default_factory=list)
    duration: int
    summary: str
    video_metadata: VideoMetadata | None = None
    criteria_results: list[CriterionResult] | None = None
    timestamp: int = Field(default_factory=now_ms)


# --- Plans -------------------------------------------------------------------


class TestPlan(WireModel):
    """A fixed sequence of actions to run against a base URL."""

    __test__ = False

    plan_name: str
    description: str = ""
    base_url: str
    steps: list[TestStep]
    tags: list[str] = Field(default_factory=list)
    assumptions: list[str] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)


class StepOutline(WireModel):
    step_number: int
    action: str
    description: str = ""


class PlanOutline(WireModel):
    """Plan record synthesized from the steps of an exploration run."""

    plan_name: str
    description: str = ""
    base_url: str
    steps: list[StepOutline]
    tags: list[str] = Field(default_factory=list)


class StartDemoRequest(WireModel):
    test_plan_id: str
    test_plan: TestPlan
    acceptance_criteria: list[str] = Field(default_factory=list)
    triggered_by: str = "manual"


class ExplorationTarget(WireModel):
    """A candidate interactive element discovered on the page."""

    selector: str
    selector_fallback: str | None = None
    type: str = "button"
    label: str
    href: str | None = None
    may_navigate: bool = False


class ExplorationPlan(WireModel):
    base_url: str
    mode: ExplorationMode = "smart"
    targets: list[ExplorationTarget] = Field(default_factory=list)
    form_fill_steps: list[TestStep] = Field(default_factory=list)


class ModalDescriptor(WireModel):
    """Dialog reported by the executor after a click."""

    type: str
    selector: str
    dismiss_selector: str | None = None
