"""Fakes for the driver, executor, capture backend and tape store."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import pytest

from popcorn.core.config.main import DemoConfig
from popcorn.core.demo import DemoContext, DemoDeps
from popcorn.core.errors import ExecutorUnavailableError
from popcorn.core.executor.messages import ExecutePlanReply, PingReply
from popcorn.core.models import NEEDS_BACKGROUND_SCREENSHOT, StepResult
from popcorn.core.recorder import CapturedVideo, RecordingSession
from popcorn.core.urls import urls_match
from popcorn.core.waits import WaitOutcome

SCREENSHOT = "data:image/png;base64,iVBORw0KGgo="
BASE_URL = "http://app.test/"


class FakeDriver:
    """Tracks location and history the way a browser tab would."""

    def __init__(self, url: str = BASE_URL) -> None:
        self.url = url
        self.history: list[str] = []
        self.calls: list[tuple[Any, ...]] = []
        self.capture_times: list[float] = []
        self.executor: FakeExecutor | None = None
        self.screenshot_error: Exception | None = None
        self.inject_error: Exception | None = None
        self.navigate_error: Exception | None = None
        self.focus_error: Exception | None = None
        self.go_back_lands_on: str | None = None

    def _leave_page(self) -> None:
        if self.executor is not None:
            self.executor.alive = False

    async def navigate(self, url: str) -> None:
        self.calls.append(("navigate", url))
        if self.navigate_error is not None:
            raise self.navigate_error
        if urls_match(self.url, url):
            return
        self.history.append(self.url)
        self.url = url
        self._leave_page()

    async def go_back(self, timeout_ms: int = 5000) -> WaitOutcome:
        self.calls.append(("go_back",))
        if self.go_back_lands_on is not None:
            self.url = self.go_back_lands_on
        elif self.history:
            self.url = self.history.pop()
        self._leave_page()
        return WaitOutcome.COMPLETED

    async def reload(self) -> WaitOutcome:
        self.calls.append(("reload",))
        self._leave_page()
        return WaitOutcome.COMPLETED

    async def capture_screenshot(self) -> str:
        self.calls.append(("screenshot",))
        self.capture_times.append(time.monotonic())
        if self.screenshot_error is not None:
            raise self.screenshot_error
        return SCREENSHOT

    async def inject_executor(self) -> None:
        self.calls.append(("inject",))
        if self.inject_error is not None:
            raise self.inject_error
        if self.executor is not None:
            self.executor.alive = True

    async def focus_target(self) -> None:
        self.calls.append(("focus",))
        if self.focus_error is not None:
            raise self.focus_error

    async def get_current_location(self) -> str:
        return self.url

    async def wait_for_load(self, timeout_ms: int) -> WaitOutcome:
        self.calls.append(("wait_for_load", timeout_ms))
        return WaitOutcome.TIMED_OUT


type Handler = Callable[[Any], StepResult | dict[str, Any]]


class FakeExecutor:
    """Answers like the in-page executor; per-action behaviour can be overridden."""

    def __init__(self, driver: FakeDriver) -> None:
        self.driver = driver
        self.alive = True
        self.batches: list[list[Any]] = []
        self.handlers: dict[str, Handler] = {}

    def on(self, action: str, handler: Handler) -> None:
        self.handlers[action] = handler

    async def ping(self) -> PingReply | None:
        return PingReply() if self.alive else None

    async def execute_plan(self, request: Any) -> ExecutePlanReply:
        self.batches.append(list(request.steps))
        if not self.alive:
            raise ExecutorUnavailableError("Could not establish connection. Receiving end does not exist.")

        results = []
        for step in request.steps:
            result = self.respond(step)
            results.append(result)
            if not result.passed and step.action != "assert":
                break
        return ExecutePlanReply(success=all(r.passed for r in results), results=results)

    def respond(self, step: Any) -> StepResult:
        reply: StepResult | dict[str, Any] = {}
        if step.action in self.handlers:
            reply = self.handlers[step.action](step)
        if isinstance(reply, StepResult):
            return reply

        metadata: dict[str, Any] = {}
        match step.action:
            case "screenshot":
                metadata = {NEEDS_BACKGROUND_SCREENSHOT: True}
            case "get_page_state":
                metadata = {"url": self.driver.url}
            case "check_actionability":
                metadata = {"actionable": True}
            case "click":
                metadata = {"urlChanged": False, "modalDetected": None}
        metadata.update(reply)
        return StepResult(
            step_number=step.step_number,
            action=step.action,
            description=step.description,
            passed=metadata.pop("passed", True),
            error=metadata.pop("error", None),
            metadata=metadata,
        )

    def executed_actions(self) -> list[str]:
        return [step.action for batch in self.batches for step in batch]


class FakeCaptureBackend:
    def __init__(self, data: bytes = b"webp-bytes") -> None:
        self.data = data
        self.start_error: Exception | None = None
        self.stop_error: Exception | None = None
        self.targets: list[Any] = []
        self.released = 0

    async def start(self, target: Any) -> None:
        if self.start_error is not None:
            raise self.start_error
        self.targets.append(target)

    async def stop(self) -> CapturedVideo:
        if self.stop_error is not None:
            raise self.stop_error
        return CapturedVideo(data=self.data, width=640, height=480)

    async def release(self) -> None:
        self.released += 1


class FakeTapeStore:
    def __init__(self) -> None:
        self.records: list[Any] = []
        self.save_error: Exception | None = None
        self.initialized = False

    def init(self) -> None:
        self.initialized = True

    def save(self, record: Any) -> str:
        if self.save_error is not None:
            raise self.save_error
        self.records.append(record)
        return f"tape-{len(self.records)}"


@pytest.fixture
def settings() -> DemoConfig:
    return DemoConfig(
        screenshot_interval_ms=0,
        settle_delay_ms=0,
        focus_delay_ms=0,
        executor_init_delay_ms=0,
        default_wait_ms=0,
    )


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def executor(driver: FakeDriver) -> FakeExecutor:
    fake = FakeExecutor(driver)
    driver.executor = fake
    return fake


@pytest.fixture
def backend() -> FakeCaptureBackend:
    return FakeCaptureBackend()


@pytest.fixture
def ctx(driver: FakeDriver, executor: FakeExecutor, backend: FakeCaptureBackend, settings: DemoConfig) -> DemoContext:
    return DemoContext(
        driver=driver,
        executor=executor,
        settings=settings,
        recorder=RecordingSession(backend),
        recording_target="page-1",
    )


@pytest.fixture
def store() -> FakeTapeStore:
    return FakeTapeStore()


@pytest.fixture
def saved_ids() -> list[str]:
    return []


@pytest.fixture
def deps(store: FakeTapeStore, saved_ids: list[str]) -> DemoDeps:
    return DemoDeps(tape_store=store, on_tape_saved=saved_ids.append)
