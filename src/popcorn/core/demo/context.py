"""Per-run context passed through the demo and exploration flows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Self

from ..config.main import DemoConfig
from ..driver import PlaywrightDriver
from ..executor import PlaywrightActionExecutor
from ..recorder import RecordingSession, ScreencastBackend
from ..throttle import ScreenshotThrottle

if TYPE_CHECKING:
    from collections.abc import Callable

    from playwright.async_api import Page

    from ..driver import TargetDriver
    from ..executor import ActionExecutor
    from ..tape_store import TapeSink


@dataclass
class DemoContext:
    """Everything a run talks to. Owns its own screenshot throttle."""

    driver: TargetDriver
    executor: ActionExecutor
    settings: DemoConfig = field(default_factory=DemoConfig)
    recorder: RecordingSession | None = None
    recording_target: Any = None
    throttle: ScreenshotThrottle | None = None

    def __post_init__(self) -> None:
        self.throttle = self.throttle or ScreenshotThrottle(self.settings.screenshot_interval_ms)

    @classmethod
    def for_page(cls, page: Page, settings: DemoConfig | None = None) -> Self:
        """Build a context driving ``page`` through Playwright."""
        settings = settings or DemoConfig()
        recorder = RecordingSession(ScreencastBackend()) if settings.record_video else None
        return cls(
            driver=PlaywrightDriver(page),
            executor=PlaywrightActionExecutor(
                page, action_timeout_ms=settings.action_timeout_ms, settle_ms=settings.settle_delay_ms
            ),
            settings=settings,
            recorder=recorder,
            recording_target=page,
        )

    async def capture_screenshot(self) -> str:
        return await self.throttle.capture(self.driver)


@dataclass
class DemoDeps:
    """Collaborators supplied by the caller of a run."""

    tape_store: TapeSink | None = None
    on_tape_saved: Callable[[str], None] | None = None
    # Set when the run has no way to obtain capture permission.
    skip_recording: bool = False
