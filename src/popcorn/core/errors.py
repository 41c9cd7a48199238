"""Exceptions raised by the Popcorn engine."""

from __future__ import annotations


class PopcornError(Exception):
    """Base class for all Popcorn errors."""


class ConfigLoadingError(PopcornError):
    """Configuration file is missing or invalid."""


class RecorderStateError(PopcornError):
    """A recording operation was requested from a state that does not allow it."""


class RecordingUnavailableError(PopcornError):
    """The capture subsystem failed to start or finalize a recording."""


class ExecutorUnavailableError(PopcornError):
    """No in-page action executor answered the request."""


class NoExecutorResultError(PopcornError):
    """The action executor answered without a result for a single action."""


class ScreenshotError(PopcornError):
    """Screenshot capture returned no image data."""


class TapeStoreError(PopcornError):
    """The tape store could not read or write a record."""


class PlanLoadingError(PopcornError):
    """A plan file could not be read or does not describe a valid plan."""
