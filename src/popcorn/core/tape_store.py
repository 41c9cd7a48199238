"""File-backed storage of recorded tapes.

Each tape lives in its own directory::

    <root>/<id>/tape.json
    <root>/<id>/video.webp       (when a recording was made)
    <root>/<id>/thumbnail.png    (when a thumbnail was captured)
"""

from __future__ import annotations

import secrets
import shutil
import string
from typing import TYPE_CHECKING, Protocol

from pydantic import Field, ValidationError
from rich.console import Console

from .errors import TapeStoreError
from .images import make_thumbnail
from .models import DemoResult, PlanOutline, Resolution, TapeStatus, TestPlan, WireModel, now_ms

if TYPE_CHECKING:
    from pathlib import Path

console = Console()

RECORD_FILE = "tape.json"
VIDEO_FILE = "video.webp"
THUMBNAIL_FILE = "thumbnail.png"

_ID_ALPHABET = string.ascii_lowercase + string.digits


class TapeRecord(WireModel):
    """A persisted run: its result, the plan it ran, and its artifacts."""

    id: str | None = None
    demo_name: str
    test_plan_id: str
    timestamp: int = Field(default_factory=now_ms)
    duration: int = 0
    file_size: int = 0
    resolution: Resolution = Field(default_factory=Resolution)
    status: TapeStatus
    passed: bool
    summary: str
    results: DemoResult
    test_plan: TestPlan | PlanOutline = Field(union_mode="left_to_right")
    video_file: str | None = None
    thumbnail_file: str | None = None

    # Handed over on save; never written into tape.json.
    video_artifact: bytes | None = Field(default=None, exclude=True)
    thumbnail_data_url: str | None = Field(default=None, exclude=True)


class TapeSink(Protocol):
    """What the engine needs from a store."""

    def init(self) -> None: ...

    def save(self, record: TapeRecord) -> str: ...


def generate_tape_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(8))
    return f"{now_ms()}-{suffix}"


class TapeStore:
    """Stores tapes under ``root``."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self._ready = False

    def init(self) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise TapeStoreError(f"Cannot create tape directory {self.root}: {e}") from e
        self._ready = True

    def _require_ready(self) -> None:
        if not self._ready:
            raise TapeStoreError("TapeStore not initialized. Call init() first.")

    def _tape_dir(self, tape_id: str) -> Path:
        if not tape_id or "/" in tape_id or "\\" in tape_id or tape_id.startswith("."):
            raise TapeStoreError(f"Invalid tape id: {tape_id!r}")
        return self.root / tape_id

    def save(self, record: TapeRecord) -> str:
        """Persist ``record`` and its binary payloads. Returns the new id."""
        self._require_ready()
        tape_id = generate_tape_id()
        tape_dir = self._tape_dir(tape_id)

        try:
            tape_dir.mkdir()
            updates: dict[str, object] = {"id": tape_id}
            if record.video_artifact:
                (tape_dir / VIDEO_FILE).write_bytes(record.video_artifact)
                updates["video_file"] = VIDEO_FILE
            if record.thumbnail_data_url:
                (tape_dir / THUMBNAIL_FILE).write_bytes(make_thumbnail(record.thumbnail_data_url))
                updates["thumbnail_file"] = THUMBNAIL_FILE
            stored = record.model_copy(update=updates)
            (tape_dir / RECORD_FILE).write_text(stored.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        except (OSError, ValueError) as e:
            shutil.rmtree(tape_dir, ignore_errors=True)
            raise TapeStoreError(f"Failed to save tape: {e}") from e

        return tape_id

    def get(self, tape_id: str) -> TapeRecord | None:
        self._require_ready()
        path = self._tape_dir(tape_id) / RECORD_FILE
        if not path.exists():
            return None
        try:
            return TapeRecord.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            raise TapeStoreError(f"Failed to read tape {tape_id}: {e}") from e

    def list(self) -> list[TapeRecord]:
        """All readable tapes, newest first."""
        self._require_ready()
        records = []
        for path in self.root.glob(f"*/{RECORD_FILE}"):
            try:
                records.append(TapeRecord.model_validate_json(path.read_text(encoding="utf-8")))
            except (OSError, ValidationError) as e:
                console.print(f"[yellow]Skipping unreadable tape {path.parent.name}: {e}[/yellow]")
        return sorted(records, key=lambda r: r.timestamp, reverse=True)

    def load_video(self, tape_id: str) -> bytes | None:
        self._require_ready()
        path = self._tape_dir(tape_id) / VIDEO_FILE
        return path.read_bytes() if path.exists() else None

    def delete(self, tape_id: str) -> None:
        self._require_ready()
        tape_dir = self._tape_dir(tape_id)
        if not tape_dir.exists():
            raise TapeStoreError(f"Tape not found: {tape_id}")
        shutil.rmtree(tape_dir)

    def storage_usage(self) -> tuple[int, int]:
        """Number of tapes and total bytes on disk."""
        self._require_ready()
        count = 0
        total = 0
        for tape_dir in self.root.iterdir():
            if not (tape_dir / RECORD_FILE).exists():
                continue
            count += 1
            total += sum(f.stat().st_size for f in tape_dir.iterdir() if f.is_file())
        return count, total
