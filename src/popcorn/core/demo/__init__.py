"""Demo and exploration runs against a live target."""

from .context import DemoContext, DemoDeps
from .exploration import ElementOutcome, explore_element, explore_isolated, run_exploration_demo
from .full_plan import run_full_demo
from .persist import save_tape_and_reload
from .result import assemble_demo_result
from .round_runner import RoundOutcome, run_round

__all__ = [
    "DemoContext",
    "DemoDeps",
    "ElementOutcome",
    "RoundOutcome",
    "assemble_demo_result",
    "explore_element",
    "explore_isolated",
    "run_exploration_demo",
    "run_full_demo",
    "run_round",
    "save_tape_and_reload",
]
