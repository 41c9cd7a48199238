"""Tests for grouping plan steps into rounds."""

import pytest

from popcorn.core.models import (
    ClickStep,
    FillStep,
    GoBackStep,
    NavigateStep,
    ScreenshotStep,
    WaitStep,
)
from popcorn.core.rounds import group_step_rounds


def navigate(n: int) -> NavigateStep:
    return NavigateStep(step_number=n, target=f"http://app.test/{n}")


def click(n: int) -> ClickStep:
    return ClickStep(step_number=n, selector=f"#b{n}")


def wait(n: int) -> WaitStep:
    return WaitStep(step_number=n, timeout=10)


def shot(n: int) -> ScreenshotStep:
    return ScreenshotStep(step_number=n)


def test_two_rounds_split_at_screenshot() -> None:
    """A screenshot closes a round; the navigate leads the first one."""
    steps = [navigate(1), click(2), wait(3), shot(4), click(5), wait(6), shot(7)]

    rounds = group_step_rounds(steps)

    assert len(rounds) == 2
    assert rounds[0].background_steps == [steps[0]]
    assert rounds[0].content_steps == steps[1:4]
    assert rounds[1].background_steps == []
    assert rounds[1].content_steps == steps[4:7]


def test_background_only_plan_yields_one_round_without_content() -> None:
    """Navigation-only plans still produce a round, with nothing for the executor."""
    steps = [navigate(1), GoBackStep(step_number=2), navigate(3)]

    rounds = group_step_rounds(steps)

    assert len(rounds) == 1
    assert rounds[0].background_steps == steps
    assert rounds[0].content_steps == []


def test_navigation_flushes_pending_content() -> None:
    """Content queued before a navigation runs before it, in its own round."""
    steps = [click(1), FillStep(step_number=2, selector="#q", value="x"), navigate(3), click(4)]

    rounds = group_step_rounds(steps)

    assert [(r.background_steps, r.content_steps) for r in rounds] == [
        ([], steps[:2]),
        ([steps[2]], [steps[3]]),
    ]


def test_empty_plan_has_no_rounds() -> None:
    """Nothing to run means no rounds."""
    assert group_step_rounds([]) == []


@pytest.mark.parametrize(
    "steps",
    [
        [shot(1)],
        [navigate(1), shot(2), navigate(3), shot(4)],
        [click(1), click(2), navigate(3), GoBackStep(step_number=4), click(5)],
        [navigate(1), navigate(2), click(3), shot(4), shot(5), wait(6)],
        [wait(1), GoBackStep(step_number=2), shot(3), click(4), navigate(5)],
    ],
)
def test_rounds_preserve_every_step_in_order(steps: list) -> None:
    """Concatenating background and content of every round gives back the plan."""
    rounds = group_step_rounds(steps)

    flattened = [s for r in rounds for s in (*r.background_steps, *r.content_steps)]
    assert flattened == steps

    for r, following in zip(rounds, rounds[1:]):
        if r.content_steps and r.content_steps[-1].action != "screenshot":
            # Only a navigation may cut a round short of a screenshot.
            assert following.background_steps
