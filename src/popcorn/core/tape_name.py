"""Human-readable names for recorded tapes."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import PlanOutline, TestPlan

# Steps that support other actions and say nothing about what the demo does.
UTILITY_ACTIONS = frozenset({"wait", "screenshot", "go_back", "check_actionability", "get_page_state"})

ACTION_LABELS = {
    "navigate": "Navigate",
    "click": "Click",
    "fill": "Fill",
    "select": "Select",
    "check": "Check",
    "uncheck": "Uncheck",
    "hover": "Hover",
    "scroll": "Scroll",
    "wait": "Wait",
    "assert": "Assert",
    "keypress": "Keypress",
    "drag": "Drag",
    "upload": "Upload",
    "screenshot": "Screenshot",
    "go_back": "Go Back",
    "check_actionability": "Check Actionability",
    "dismiss_modal": "Dismiss Modal",
    "get_page_state": "Get Page State",
}

GENERIC_NAMES = frozenset({"quick-demo", ""})


def _steps(count: int) -> str:
    return f"{count} step{'' if count == 1 else 's'}"


def generate_tape_name(plan: TestPlan | PlanOutline) -> str:
    """Name a tape after its plan, or after what its steps mostly do.

    Examples: ``"Click + Navigate (3 steps)"``, ``"Fill Form (5 steps)"``,
    ``"Keyboard Navigation (4 steps)"``.
    """
    if plan.plan_name not in GENERIC_NAMES:
        return plan.plan_name

    meaningful = [s.action for s in plan.steps if s.action not in UTILITY_ACTIONS]
    if not meaningful:
        return f"Demo ({_steps(len(plan.steps))})"

    counts = Counter(meaningful)
    total = len(meaningful)

    if set(counts) == {"keypress"}:
        return f"Keyboard Navigation ({_steps(total)})"

    if counts["fill"] and counts["fill"] >= total * 0.5:
        return f"Fill Form ({_steps(total)})"

    # most_common keeps first-seen order between equal counts
    top = [ACTION_LABELS.get(action, action.title()) for action, _ in counts.most_common(2)]
    return f"{' + '.join(top)} ({_steps(total)})"
