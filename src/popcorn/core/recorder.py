"""Video recording of a run."""

from __future__ import annotations

import asyncio
import base64
import time
from dataclasses import dataclass
from enum import StrEnum
from io import BytesIO
from typing import TYPE_CHECKING, Any, Protocol

from PIL import Image
from playwright.async_api import Error as PlaywrightError
from rich.console import Console

from .errors import RecorderStateError, RecordingUnavailableError
from .models import Resolution, VideoMetadata, now_ms

if TYPE_CHECKING:
    from playwright.async_api import CDPSession, Page


console = Console()

VIDEO_MIME_TYPE = "image/webp"


class RecordingState(StrEnum):
    IDLE = "idle"
    RECORDING = "recording"
    STOPPED = "stopped"
    ERROR = "error"


@dataclass
class CapturedVideo:
    """Raw output of a capture backend."""

    data: bytes
    width: int
    height: int
    mime_type: str = VIDEO_MIME_TYPE


@dataclass
class RecordingArtifact:
    data: bytes
    metadata: VideoMetadata

    @property
    def size(self) -> int:
        return len(self.data)


class CaptureBackend(Protocol):
    async def start(self, target: Any) -> None: ...

    async def stop(self) -> CapturedVideo: ...

    async def release(self) -> None: ...


class RecordingSession:
    """State machine around a capture backend.

    ``start`` is only legal from idle and ``stop`` only while recording;
    ``reset`` returns to idle from anywhere.
    """

    def __init__(self, backend: CaptureBackend) -> None:
        self.backend = backend
        self.state = RecordingState.IDLE
        self._started_at: float | None = None

    async def start(self, target: Any) -> None:
        if self.state is not RecordingState.IDLE:
            raise RecorderStateError(f'Cannot start recording: recorder is in "{self.state}" state')

        try:
            await self.backend.start(target)
        except Exception as e:
            self.state = RecordingState.ERROR
            raise RecordingUnavailableError(f"Failed to start recording: {e}") from e

        self._started_at = time.perf_counter()
        self.state = RecordingState.RECORDING

    async def stop(self) -> RecordingArtifact:
        if self.state is not RecordingState.RECORDING:
            raise RecorderStateError(f'Cannot stop recording: recorder is in "{self.state}" state')

        try:
            video = await self.backend.stop()
        except Exception as e:
            self.state = RecordingState.ERROR
            raise RecordingUnavailableError(f"Failed to stop recording: {e}") from e

        duration = int((time.perf_counter() - (self._started_at or time.perf_counter())) * 1000)
        self.state = RecordingState.STOPPED
        return RecordingArtifact(
            data=video.data,
            metadata=VideoMetadata(
                duration=duration,
                file_size=len(video.data),
                resolution=Resolution(width=video.width, height=video.height),
                mime_type=video.mime_type,
                timestamp=now_ms(),
            ),
        )

    async def reset(self) -> None:
        try:
            await self.backend.release()
        except Exception as e:  # noqa: BLE001
            console.print(f"[yellow]Failed to release recording resources: {e}[/yellow]")
        self._started_at = None
        self.state = RecordingState.IDLE


class ScreencastBackend:
    """Records a Chromium page through the CDP screencast.

    Frames arrive as JPEGs and are encoded into an animated WebP on stop.
    """

    def __init__(self, quality: int = 80, max_width: int = 1280, max_height: int = 720) -> None:
        self.quality = quality
        self.max_width = max_width
        self.max_height = max_height
        self.frames: list[tuple[bytes, float]] = []
        self._cdp: CDPSession | None = None
        self._acks: set[asyncio.Future[Any]] = set()

    async def start(self, target: Page) -> None:
        self.frames = []
        self._cdp = await target.context.new_cdp_session(target)
        self._cdp.on("Page.screencastFrame", self._on_frame)
        await self._cdp.send(
            "Page.startScreencast",
            {"format": "jpeg", "quality": self.quality, "maxWidth": self.max_width, "maxHeight": self.max_height},
        )

    def _on_frame(self, params: dict[str, Any]) -> None:
        timestamp = params.get("metadata", {}).get("timestamp") or time.time()
        self.frames.append((base64.b64decode(params["data"]), float(timestamp)))
        if self._cdp is None:
            return
        ack = asyncio.ensure_future(self._cdp.send("Page.screencastFrameAck", {"sessionId": params["sessionId"]}))
        self._acks.add(ack)
        ack.add_done_callback(self._ack_done)

    def _ack_done(self, ack: asyncio.Future[Any]) -> None:
        self._acks.discard(ack)
        if not ack.cancelled() and ack.exception() is not None:
            console.print(f"[dim]Screencast frame ack failed: {ack.exception()}[/dim]")

    async def stop(self) -> CapturedVideo:
        if self._cdp is None:
            raise RecordingUnavailableError("Screencast was not started")
        await self._cdp.send("Page.stopScreencast")
        frames, self.frames = self.frames, []
        return await asyncio.to_thread(encode_frames, frames, self.quality)

    async def release(self) -> None:
        self.frames = []
        if self._cdp is None:
            return
        cdp, self._cdp = self._cdp, None
        try:
            await cdp.detach()
        except PlaywrightError as e:
            console.print(f"[dim]Screencast session already closed: {e}[/dim]")


def encode_frames(frames: list[tuple[bytes, float]], quality: int = 80) -> CapturedVideo:
    """Encode timestamped JPEG frames as an animated WebP. No frames gives an empty artifact."""
    if not frames:
        return CapturedVideo(data=b"", width=0, height=0)

    images = [Image.open(BytesIO(data)).convert("RGB") for data, _ in frames]
    size = images[0].size
    images = [img if img.size == size else img.resize(size) for img in images]

    durations = [max(1, int((nxt[1] - cur[1]) * 1000)) for cur, nxt in zip(frames, frames[1:])]
    durations.append(100)

    buffer = BytesIO()
    images[0].save(
        buffer,
        format="WEBP",
        save_all=True,
        append_images=images[1:],
        duration=durations,
        loop=0,
        quality=quality,
    )
    return CapturedVideo(data=buffer.getvalue(), width=size[0], height=size[1])
