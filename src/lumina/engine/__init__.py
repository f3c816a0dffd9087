"""Timing, animation and playback."""

from .timing import (
    SceneEnvelope,
    compute_scene_envelope,
    playback_interval,
    frames_for,
    scene_frame_count,
    frame_budget,
    export_duration,
    playback_duration,
)
from .animation import (
    CharReveal,
    VisualState,
    cubic_bezier,
    ease_out,
    compute_visual_state,
    compute_exit_state,
    compute_frame_state,
    settle_time,
)
from .scheduler import PlaybackScheduler

__all__ = [
    # Timing
    "SceneEnvelope",
    "compute_scene_envelope",
    "playback_interval",
    "frames_for",
    "scene_frame_count",
    "frame_budget",
    "export_duration",
    "playback_duration",
    # Animation
    "CharReveal",
    "VisualState",
    "cubic_bezier",
    "ease_out",
    "compute_visual_state",
    "compute_exit_state",
    "compute_frame_state",
    "settle_time",
    # Playback
    "PlaybackScheduler",
]
