"""Runtime state of playback and export."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class PlaybackState:
    """Snapshot of the playback scheduler."""

    is_playing: bool = False
    current_index: int = 0
    session_id: int = 0

    def restarted(self) -> "PlaybackState":
        return PlaybackState(is_playing=True, current_index=0, session_id=self.session_id + 1)

    def advanced(self) -> "PlaybackState":
        return replace(self, current_index=self.current_index + 1)

    def stopped(self) -> "PlaybackState":
        return replace(self, is_playing=False)


class ExportStatus(str, Enum):
    """Status of an export job."""

    IDLE = "idle"
    CAPTURING = "capturing"
    ENCODING = "encoding"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_active(self) -> bool:
        return self in (ExportStatus.CAPTURING, ExportStatus.ENCODING)


class ExportKind(str, Enum):
    """Product of an export job."""

    STILL = "still"
    VIDEO = "video"


@dataclass
class ExportJob:
    """Progress of a still or video export."""

    kind: ExportKind = ExportKind.VIDEO
    status: ExportStatus = ExportStatus.IDLE
    progress_message: str = ""
    frame_counter: int = 0
    total_frames: int = 0
    scene_index: int = 0
    output_path: Optional[Path] = None
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    metadata: dict = field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        return self.status.is_active
