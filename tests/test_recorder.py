"""Tests for the recording session state machine."""

from io import BytesIO

import pytest
from conftest import FakeCaptureBackend
from PIL import Image

from popcorn.core.errors import RecorderStateError, RecordingUnavailableError
from popcorn.core.recorder import RecordingSession, RecordingState, encode_frames


class TestRecordingSession:
    """State transitions of RecordingSession."""

    async def test_start_and_stop(self) -> None:
        """A normal recording produces an artifact with metadata."""
        session = RecordingSession(FakeCaptureBackend(data=b"12345"))

        await session.start("page")
        assert session.state is RecordingState.RECORDING

        artifact = await session.stop()
        assert session.state is RecordingState.STOPPED
        assert artifact.data == b"12345"
        assert artifact.size == 5
        assert artifact.metadata.file_size == 5
        assert artifact.metadata.resolution.width == 640
        assert artifact.metadata.resolution.height == 480
        assert artifact.metadata.mime_type == "image/webp"
        assert artifact.metadata.duration >= 0

    async def test_stop_from_idle_names_state(self) -> None:
        """Stopping an idle session fails and leaves it idle."""
        session = RecordingSession(FakeCaptureBackend())

        with pytest.raises(RecorderStateError, match='"idle"'):
            await session.stop()
        assert session.state is RecordingState.IDLE

    async def test_second_start_rejected(self) -> None:
        """Starting while recording fails and keeps recording."""
        session = RecordingSession(FakeCaptureBackend())
        await session.start("page")

        with pytest.raises(RecorderStateError, match='"recording"'):
            await session.start("page")
        assert session.state is RecordingState.RECORDING

    async def test_start_failure_moves_to_error(self) -> None:
        """A capture subsystem failure is reported and leaves the session in error."""
        backend = FakeCaptureBackend()
        backend.start_error = PermissionError("Permission denied")
        session = RecordingSession(backend)

        with pytest.raises(RecordingUnavailableError, match="Failed to start recording: Permission denied"):
            await session.start("page")
        assert session.state is RecordingState.ERROR

    async def test_stop_failure_moves_to_error(self) -> None:
        """A failure while finalizing also ends in error."""
        backend = FakeCaptureBackend()
        backend.stop_error = RuntimeError("encoder crashed")
        session = RecordingSession(backend)
        await session.start("page")

        with pytest.raises(RecordingUnavailableError):
            await session.stop()
        assert session.state is RecordingState.ERROR

    async def test_reset_from_any_state(self) -> None:
        """Reset releases the backend and returns to idle."""
        backend = FakeCaptureBackend()
        backend.start_error = RuntimeError("no capture")
        session = RecordingSession(backend)
        with pytest.raises(RecordingUnavailableError):
            await session.start("page")

        await session.reset()

        assert session.state is RecordingState.IDLE
        assert backend.released == 1


def _jpeg(color: str) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (32, 24), color).save(buffer, format="JPEG")
    return buffer.getvalue()


def test_encode_frames_builds_animated_webp() -> None:
    """Screencast frames become an animated WebP of the first frame's size."""
    video = encode_frames([(_jpeg("red"), 1.0), (_jpeg("blue"), 1.2), (_jpeg("green"), 1.5)])

    assert video.width == 32
    assert video.height == 24
    img = Image.open(BytesIO(video.data))
    assert img.format == "WEBP"
    assert getattr(img, "n_frames", 1) == 3


def test_encode_no_frames_is_empty() -> None:
    """Without frames there is nothing to keep."""
    video = encode_frames([])

    assert video.data == b""
