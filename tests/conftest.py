"""
Pytest configuration and shared fixtures for LuminaBook tests
"""

from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest
from PIL import Image

from lumina.editor import SceneStore
from lumina.errors import CaptureError
from lumina.models import DEFAULT_SCENE, ProjectConfig, Scene
from lumina.render import FrameCapture, VideoEncoder


# ============================================
# Model fixtures
# ============================================

@pytest.fixture
def make_scene() -> Callable[..., Scene]:
    """Factory for scenes based on the default scene."""

    def _make(scene_id: str = "s1", **changes) -> Scene:
        return DEFAULT_SCENE.restyled(id=scene_id, **changes)

    return _make


@pytest.fixture
def three_scene_project(make_scene) -> ProjectConfig:
    """Durations {2, 3, 1}s, delays {0.5, 0, 0}s, reading buffer 1.5s."""
    return ProjectConfig(
        title="Three Acts",
        scenes=[
            make_scene("a", text="First", duration=2, delay=0.5),
            make_scene("b", text="Second", duration=3, delay=0),
            make_scene("c", text="Third", duration=1, delay=0),
        ],
        global_transition=1.0,
        reading_buffer=1.5,
    )


@pytest.fixture
def store(three_scene_project) -> SceneStore:
    return SceneStore(three_scene_project)


# ============================================
# Clock
# ============================================

class FakeHandle:
    """Timer handle recorded by FakeClock."""

    def __init__(self, when: float, callback, args) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeClock:
    """Manually advanced stand-in for an event loop's call_later."""

    def __init__(self) -> None:
        self.now = 0.0
        self.handles: List[FakeHandle] = []

    def call_later(self, delay: float, callback, *args) -> FakeHandle:
        handle = FakeHandle(self.now + delay, callback, args)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> List[FakeHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def fire(self, handle: FakeHandle) -> None:
        """Run a callback regardless of its due time, even if cancelled."""
        handle.fired = True
        handle.callback(*handle.args)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self.pending if h.when <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.now = handle.when
            self.fire(handle)
        self.now = target


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ============================================
# Capture and encoder doubles
# ============================================

class FakeCapture(FrameCapture):
    """Returns small solid frames and records every request."""

    def __init__(self, size: Tuple[int, int] = (64, 36), fail_on_call: Optional[int] = None) -> None:
        self.size = size
        self.fail_on_call = fail_on_call
        self.calls: List[Tuple[str, float, float]] = []
        self.exit_times: Dict[str, Optional[float]] = {}

    async def capture(
        self, scene: Scene, elapsed: float, pixel_ratio: float = 1.0, exit_at: Optional[float] = None
    ) -> Image.Image:
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise CaptureError(f"snapshot failed for {scene.id}")
        self.calls.append((scene.id, elapsed, pixel_ratio))
        self.exit_times[scene.id] = exit_at
        width, height = self.size
        return Image.new("RGB", (round(width * pixel_ratio), round(height * pixel_ratio)), scene.background)


class RecordingEncoder(VideoEncoder):
    """Keeps appended frame indices in memory and writes a stub file on finalize."""

    instances: List["RecordingEncoder"] = []

    def __init__(self, fail_on_finalize: bool = False) -> None:
        super().__init__()
        self.indices: List[int] = []
        self.discarded = False
        self.finalized = False
        self.fail_on_finalize = fail_on_finalize
        RecordingEncoder.instances.append(self)

    def _write(self, frame: Image.Image, index: int) -> None:
        self.indices.append(index)

    def _finalize(self, output_path: Path) -> None:
        if self.fail_on_finalize:
            raise OSError("disk full")
        output_path.write_bytes(b"video")
        self.finalized = True

    def _abort(self) -> None:
        self.discarded = True


@pytest.fixture
def capture() -> FakeCapture:
    return FakeCapture()


@pytest.fixture
def recording_encoders():
    RecordingEncoder.instances = []
    yield RecordingEncoder.instances
    RecordingEncoder.instances = []
