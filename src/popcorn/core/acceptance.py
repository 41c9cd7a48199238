"""Acceptance criteria evaluated against the step results of a run.

Criteria are usually written as plain text, one per line. Each line is
matched against a list of known phrasings ("within 500ms", "redirects to
/home", "no errors", ...) and turned into an evaluator. Lines that match
nothing fall back to "all steps passed".
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Literal

from .models import CriterionResult

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from .models import StepResult

type CriterionType = Literal["visual", "functional", "performance", "accessibility"]
type Evaluator = Callable[[Sequence[StepResult]], CriterionResult]


@dataclass(frozen=True)
class AcceptanceCriterion:
    id: str
    description: str
    type: CriterionType
    evaluator: Evaluator

    def evaluate(self, steps: Sequence[StepResult]) -> CriterionResult:
        return self.evaluator(steps).model_copy(update={"criterion_id": self.id})


def all_steps_passed() -> AcceptanceCriterion:
    def evaluate(steps: Sequence[StepResult]) -> CriterionResult:
        failed = [s for s in steps if not s.passed]
        if not failed:
            return CriterionResult(criterion_id="all-steps-passed", passed=True, message="All steps passed")
        numbers = ", ".join(str(s.step_number) for s in failed)
        return CriterionResult(
            criterion_id="all-steps-passed",
            passed=False,
            message=f"{len(failed)} step(s) failed: " + ", ".join(f"step {s.step_number}" for s in failed),
            evidence=f"Failed steps: {numbers}",
        )

    return AcceptanceCriterion("all-steps-passed", "All test steps completed successfully", "functional", evaluate)


def no_step_errors() -> AcceptanceCriterion:
    def evaluate(steps: Sequence[StepResult]) -> CriterionResult:
        errored = [s for s in steps if s.error]
        if not errored:
            return CriterionResult(criterion_id="no-step-errors", passed=True, message="No errors encountered")
        return CriterionResult(
            criterion_id="no-step-errors",
            passed=False,
            message=f"{len(errored)} step(s) had errors",
            evidence="; ".join(f"Step {s.step_number}: {s.error}" for s in errored),
        )

    return AcceptanceCriterion("no-step-errors", "No steps produced errors", "functional", evaluate)


def completed_within_duration(max_ms: float) -> AcceptanceCriterion:
    criterion_id = f"completed-within-{max_ms:g}ms"

    def evaluate(steps: Sequence[StepResult]) -> CriterionResult:
        total = sum(s.duration for s in steps)
        if total <= max_ms:
            message = f"Completed in {total}ms (within {max_ms:g}ms limit)"
        else:
            message = f"Took {total}ms (exceeded {max_ms:g}ms limit)"
        return CriterionResult(criterion_id=criterion_id, passed=total <= max_ms, message=message)

    return AcceptanceCriterion(criterion_id, f"All steps completed within {max_ms:g}ms total", "performance", evaluate)


def _reported_urls(steps: Sequence[StepResult]) -> list[str]:
    urls = []
    for step in reversed(steps):
        url = step.metadata.get("finalUrl") or step.metadata.get("actualUrl")
        if url:
            urls.append(str(url))
    return urls


def _duration(match: re.Match[str], line: str, criterion_id: str) -> AcceptanceCriterion:
    value = float(match.group(1))
    unit = match.group(2).lower()
    ms = value if unit.startswith(("ms", "millis")) else value * 1000
    return replace(completed_within_duration(ms), id=criterion_id, description=line)


def _redirect(match: re.Match[str], line: str, criterion_id: str) -> AcceptanceCriterion:
    expected = match.group(1)

    def evaluate(steps: Sequence[StepResult]) -> CriterionResult:
        for url in _reported_urls(steps):
            if expected in url:
                return CriterionResult(
                    criterion_id=criterion_id, passed=True, message=f'Redirected to {url} (contains "{expected}")'
                )
        return CriterionResult(
            criterion_id=criterion_id,
            passed=False,
            message=f'Expected redirect to "{expected}" not found in step metadata',
        )

    return AcceptanceCriterion(criterion_id, line, "functional", evaluate)


def _error_shown(match: re.Match[str], line: str, criterion_id: str) -> AcceptanceCriterion:
    def evaluate(steps: Sequence[StepResult]) -> CriterionResult:
        for step in steps:
            if step.action == "assert" and step.passed:
                text = str(step.metadata.get("actualText") or "").lower()
                if any(word in text for word in ("error", "invalid", "fail")):
                    return CriterionResult(
                        criterion_id=criterion_id, passed=True, message="Error message found in assertion results"
                    )
        if any(s.error for s in steps):
            return CriterionResult(
                criterion_id=criterion_id, passed=True, message="Error condition detected in step results"
            )
        return CriterionResult(
            criterion_id=criterion_id,
            passed=False,
            message="No error message found in assertions or step results",
        )

    return AcceptanceCriterion(criterion_id, line, "functional", evaluate)


def _form_submits(match: re.Match[str], line: str, criterion_id: str) -> AcceptanceCriterion:
    def evaluate(steps: Sequence[StepResult]) -> CriterionResult:
        form_steps = [s for s in steps if s.action in ("fill", "select", "check", "click")]
        ok = bool(form_steps) and all(s.passed and not s.error for s in form_steps)
        if ok:
            message = f"All {len(form_steps)} form steps passed without errors"
        else:
            failed = sum(1 for s in form_steps if not s.passed)
            message = f"Form submission check failed ({failed} step(s) failed)"
        return CriterionResult(criterion_id=criterion_id, passed=ok, message=message)

    return AcceptanceCriterion(criterion_id, line, "functional", evaluate)


def _no_errors(match: re.Match[str], line: str, criterion_id: str) -> AcceptanceCriterion:
    return replace(no_step_errors(), id=criterion_id, description=line)


def _all_pass(match: re.Match[str], line: str, criterion_id: str) -> AcceptanceCriterion:
    return replace(all_steps_passed(), id=criterion_id, description=line)


def _text_shown(match: re.Match[str], line: str, criterion_id: str) -> AcceptanceCriterion:
    expected = match.group(1)

    def evaluate(steps: Sequence[StepResult]) -> CriterionResult:
        for step in steps:
            if expected in str(step.metadata.get("actualText") or ""):
                return CriterionResult(
                    criterion_id=criterion_id,
                    passed=True,
                    message=f'Found text "{expected}" in step {step.step_number}',
                )
        return CriterionResult(
            criterion_id=criterion_id,
            passed=False,
            message=f'Expected text "{expected}" not found in any step metadata',
        )

    return AcceptanceCriterion(criterion_id, line, "functional", evaluate)


def _fallback(line: str, criterion_id: str) -> AcceptanceCriterion:
    def evaluate(steps: Sequence[StepResult]) -> CriterionResult:
        ok = all(s.passed for s in steps)
        message = f"Criterion met: {line}" if ok else f"Criterion may not be met: {line}"
        return CriterionResult(criterion_id=criterion_id, passed=ok, message=message)

    return AcceptanceCriterion(criterion_id, line, "functional", evaluate)


# First match wins.
CRITERION_PATTERNS: list[tuple[re.Pattern[str], Callable[[re.Match[str], str, str], AcceptanceCriterion]]] = [
    (re.compile(r"(?:within|under|in|less than)\s+(\d+(?:\.\d+)?)\s*(ms|milliseconds?|seconds?|sec|s)\b", re.I), _duration),
    (re.compile(r"(?:redirects?\s+to|navigates?\s+to|url\s+(?:contains?|includes?))\s+(\S+)", re.I), _redirect),
    (re.compile(r"(?:shows?|displays?|renders?|presents?)\s+(?:an?\s+)?error", re.I), _error_shown),
    (re.compile(r"form\s+(?:submits?|submission)\s+(?:successfully|works|completes)", re.I), _form_submits),
    (re.compile(r"\b(?:no|zero)\s+errors?\b", re.I), _no_errors),
    (re.compile(r"\b(?:all|every)\s+steps?\s+(?:pass|succeed|complete)", re.I), _all_pass),
    (
        re.compile(r"(?:shows?|displays?|contains?|includes?)\s+(?:(?:the\s+)?(?:text|message)\s+)?['\"]([^'\"]+)['\"]", re.I),
        _text_shown,
    ),
]


def parse_plain_text_criteria(text: str) -> list[AcceptanceCriterion]:
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    criteria = []
    for i, line in enumerate(lines):
        criterion_id = f"custom-{i}"
        for pattern, build in CRITERION_PATTERNS:
            match = pattern.search(line)
            if match:
                criteria.append(build(match, line, criterion_id))
                break
        else:
            criteria.append(_fallback(line, criterion_id))
    return criteria


def evaluate_all_criteria(
    steps: Sequence[StepResult], criteria: Sequence[AcceptanceCriterion]
) -> tuple[bool, list[CriterionResult]]:
    results = [c.evaluate(steps) for c in criteria]
    return all(r.passed for r in results), results
