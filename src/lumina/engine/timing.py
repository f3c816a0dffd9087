"""Scene timing model.

Every duration the rest of the system needs is derived here from a scene and
the project's global parameters. Export length depends only on delay,
duration and reading buffer; the global transition pause is a property of
interactive playback and never reaches an exported file.
"""

import math
from dataclasses import dataclass
from typing import List

from ..models import ProjectConfig, Scene
from .animation import EXIT_SECONDS

# Products like 4.5 * 24 can land a hair above the integer in binary floats.
_FRAME_EPSILON = 1e-6


@dataclass(frozen=True)
class SceneEnvelope:
    """Timing breakdown of a single scene."""

    delay: float
    active_duration: float
    total_scene_time: float

    @property
    def settled_at(self) -> float:
        """Elapsed time at which the entrance animation has finished."""
        return self.delay + self.active_duration

    @property
    def exit_at(self) -> float:
        """Elapsed time at which the exit transition starts in an export."""
        return max(0.0, self.total_scene_time - EXIT_SECONDS)


def compute_scene_envelope(scene: Scene, project: ProjectConfig) -> SceneEnvelope:
    """Compute the delay, active duration and total on-screen time of a scene."""
    return SceneEnvelope(
        delay=scene.delay,
        active_duration=scene.duration,
        total_scene_time=scene.delay + scene.duration + project.reading_buffer,
    )


def playback_interval(scene: Scene, project: ProjectConfig) -> float:
    """Seconds the interactive player stays on a scene before advancing."""
    return compute_scene_envelope(scene, project).total_scene_time + project.global_transition


def frames_for(seconds: float, fps: int) -> int:
    """Number of frames needed to cover ``seconds``, rounded up, at least one."""
    if fps <= 0:
        raise ValueError(f"fps must be positive, got {fps}")
    exact = seconds * fps
    return max(1, math.ceil(exact - _FRAME_EPSILON))


def scene_frame_count(scene: Scene, project: ProjectConfig, fps: int) -> int:
    """Frames emitted for a scene in a video export."""
    return frames_for(compute_scene_envelope(scene, project).total_scene_time, fps)


def frame_budget(project: ProjectConfig, fps: int) -> List[int]:
    """Per-scene frame counts of a video export, in scene order."""
    return [scene_frame_count(scene, project, fps) for scene in project.scenes]


def export_duration(project: ProjectConfig) -> float:
    """Declared length of an exported video in seconds."""
    return sum(compute_scene_envelope(s, project).total_scene_time for s in project.scenes)


def playback_duration(project: ProjectConfig) -> float:
    """Wall-clock length of an interactive playback session."""
    return sum(playback_interval(s, project) for s in project.scenes)
