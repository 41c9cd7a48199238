from __future__ import annotations

from typing import TYPE_CHECKING

from ..models import DemoResult, ScreenshotCapture, now_ms

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..models import StepResult, VideoMetadata


def collect_screenshots(steps: Sequence[StepResult]) -> list[ScreenshotCapture]:
    return [
        ScreenshotCapture(
            step_number=s.step_number,
            data_url=s.screenshot_data_url,
            timestamp=s.timestamp,
            label=s.description,
        )
        for s in steps
        if s.screenshot_data_url
    ]


def assemble_demo_result(
    test_plan_id: str,
    steps: Sequence[StepResult],
    start_ms: int,
    error: str | None = None,
    video_metadata: VideoMetadata | None = None,
) -> DemoResult:
    """Aggregate step results into a DemoResult with a one-line summary."""
    duration = now_ms() - start_ms
    passed = error is None and all(s.passed for s in steps)

    total = len(steps)
    passed_count = sum(1 for s in steps if s.passed)
    if error is not None:
        summary = f"Demo failed with error: {error}. Completed {passed_count}/{total} steps."
    elif passed:
        summary = f"Demo completed successfully. All {total} steps passed in {duration / 1000:.2f}s."
    else:
        summary = f"Demo completed with issues. {passed_count}/{total} steps passed, {total - passed_count} failed."

    return DemoResult(
        test_plan_id=test_plan_id,
        passed=passed,
        steps=list(steps),
        screenshots=collect_screenshots(steps),
        duration=duration,
        summary=summary,
        video_metadata=video_metadata,
    )
