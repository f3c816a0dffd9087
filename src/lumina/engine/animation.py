"""Animation engine.

Maps a scene and the time elapsed since the scene started to the visual
parameters of its text block. The mapping is a pure function: the same scene
sampled at the same instant always produces the same state, so the
interactive preview and the export loop can sample it at whatever instants
they need.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from ..models import AnimationType, Scene

TYPE_IN_CHAR_SECONDS = 0.2
TYPE_IN_OFFSET_PX = 10.0
GRADIENT_AXIS_HORIZONTAL = "x"
GRADIENT_AXIS_VERTICAL = "y"
BLUR_IN_START_BLUR_PX = 30.0
BLUR_IN_START_SCALE = 0.9
BLUR_IN_OFFSET_PX = 20.0
SLIDE_UP_OFFSET_PX = 60.0
ZOOM_IN_START_SCALE = 1.4
ZOOM_IN_START_BLUR_PX = 10.0
EXIT_SECONDS = 0.4
EXIT_BLUR_PX = 20.0


def cubic_bezier(x1: float, y1: float, x2: float, y2: float) -> Callable[[float], float]:
    """Build a CSS-style cubic-bezier easing function.

    The curve runs from (0, 0) to (1, 1) with control points (x1, y1) and
    (x2, y2). The returned function maps progress in [0, 1] to eased progress,
    clamping its input.
    """
    cx = 3.0 * x1
    bx = 3.0 * (x2 - x1) - cx
    ax = 1.0 - cx - bx
    cy = 3.0 * y1
    by = 3.0 * (y2 - y1) - cy
    ay = 1.0 - cy - by

    def sample_x(t: float) -> float:
        return ((ax * t + bx) * t + cx) * t

    def sample_y(t: float) -> float:
        return ((ay * t + by) * t + cy) * t

    def sample_dx(t: float) -> float:
        return (3.0 * ax * t + 2.0 * bx) * t + cx

    def solve_t(x: float) -> float:
        t = x
        for _ in range(8):
            err = sample_x(t) - x
            if abs(err) < 1e-12:
                return t
            slope = sample_dx(t)
            if abs(slope) < 1e-9:
                break
            t -= err / slope

        # Newton did not converge; fall back to bisection.
        lo, hi = 0.0, 1.0
        t = x
        for _ in range(64):
            value = sample_x(t)
            if abs(value - x) < 1e-12:
                break
            if value < x:
                lo = t
            else:
                hi = t
            t = (lo + hi) / 2.0
        return t

    def ease(x: float) -> float:
        if x <= 0.0:
            return 0.0
        if x >= 1.0:
            return 1.0
        return sample_y(solve_t(x))

    return ease


ease_out = cubic_bezier(0.22, 1.0, 0.36, 1.0)


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _lerp(start: float, end: float, progress: float) -> float:
    return start + (end - start) * progress


@dataclass(frozen=True)
class CharReveal:
    """Reveal state of one character of a type-in scene."""

    opacity: float
    offset_px: float


@dataclass(frozen=True)
class VisualState:
    """Instantaneous visual parameters of a scene's text block.

    ``clip_inset`` is the fraction of the block hidden from the trailing edge
    along ``clip_axis``. ``translate_px`` is an offset along
    ``translate_axis`` that moves towards zero as the scene enters.
    ``char_reveals`` is only set for type-in scenes.
    """

    opacity: float = 1.0
    scale: float = 1.0
    blur_px: float = 0.0
    clip_inset: float = 0.0
    clip_axis: str = GRADIENT_AXIS_HORIZONTAL
    translate_px: float = 0.0
    translate_axis: str = "y"
    char_reveals: Optional[Tuple[CharReveal, ...]] = None


def animation_progress(scene: Scene, elapsed: float) -> float:
    """Linear progress of the entrance animation, in [0, 1]."""
    return _clamp01((elapsed - scene.delay) / scene.duration)


def type_in_stagger(scene: Scene) -> float:
    """Seconds between the reveal starts of consecutive characters."""
    if not scene.text:
        return 0.0
    return scene.duration / len(scene.text)


def char_reveal_start(scene: Scene, index: int) -> float:
    """Elapsed time at which character ``index`` starts to appear."""
    return scene.delay + index * type_in_stagger(scene)


def _char_reveals(scene: Scene, elapsed: float) -> Tuple[CharReveal, ...]:
    reveals = []
    for index in range(len(scene.text)):
        progress = _clamp01((elapsed - char_reveal_start(scene, index)) / TYPE_IN_CHAR_SECONDS)
        reveals.append(CharReveal(opacity=progress, offset_px=TYPE_IN_OFFSET_PX * (1.0 - progress)))
    return tuple(reveals)


def settle_time(scene: Scene) -> float:
    """Elapsed time after which the scene no longer changes."""
    settled = scene.delay + scene.duration
    if scene.animation is AnimationType.TYPE_IN and scene.text:
        settled = max(settled, char_reveal_start(scene, len(scene.text) - 1) + TYPE_IN_CHAR_SECONDS)
    return settled


def compute_visual_state(scene: Scene, elapsed: float) -> VisualState:
    """Compute the visual state of a scene ``elapsed`` seconds after it started."""
    progress = animation_progress(scene, elapsed)
    animation = scene.animation
    vertical = scene.writing_mode.is_vertical

    if animation is AnimationType.TYPE_IN:
        return VisualState(char_reveals=_char_reveals(scene, elapsed))

    if animation is AnimationType.FADE_IN:
        return VisualState(opacity=progress)

    eased = ease_out(progress)

    if animation is AnimationType.GRADIENT_IN:
        return VisualState(
            opacity=eased,
            clip_inset=1.0 - eased,
            clip_axis=GRADIENT_AXIS_VERTICAL if vertical else GRADIENT_AXIS_HORIZONTAL,
        )

    if animation is AnimationType.BLUR_IN:
        return VisualState(
            opacity=eased,
            scale=_lerp(BLUR_IN_START_SCALE, 1.0, eased),
            blur_px=_lerp(BLUR_IN_START_BLUR_PX, 0.0, eased),
            translate_px=_lerp(BLUR_IN_OFFSET_PX, 0.0, eased),
            translate_axis="y",
        )

    if animation is AnimationType.SLIDE_UP:
        return VisualState(
            opacity=eased,
            translate_px=_lerp(SLIDE_UP_OFFSET_PX, 0.0, eased),
            translate_axis="x" if vertical else "y",
        )

    if animation is AnimationType.ZOOM_IN:
        return VisualState(
            opacity=eased,
            scale=_lerp(ZOOM_IN_START_SCALE, 1.0, eased),
            blur_px=_lerp(ZOOM_IN_START_BLUR_PX, 0.0, eased),
        )

    raise ValueError(f"Unknown animation: {animation}")


def compute_exit_state(state: VisualState, since_exit: float) -> VisualState:
    """Apply the teardown transition to the state a scene was in when it left.

    Opacity falls to zero and blur rises to 20px over a fixed 0.4s,
    whatever the entrance animation was.
    """
    progress = ease_out(_clamp01(since_exit / EXIT_SECONDS))
    return VisualState(
        opacity=_lerp(state.opacity, 0.0, progress),
        scale=state.scale,
        blur_px=_lerp(state.blur_px, EXIT_BLUR_PX, progress),
        clip_inset=state.clip_inset,
        clip_axis=state.clip_axis,
        translate_px=state.translate_px,
        translate_axis=state.translate_axis,
        char_reveals=state.char_reveals,
    )


def compute_frame_state(scene: Scene, elapsed: float, exit_at: Optional[float] = None) -> VisualState:
    """Visual state of a scene that starts leaving at ``exit_at``.

    Before ``exit_at`` (or always, when it is None) this is the entrance
    state. From ``exit_at`` on, the exit transition runs from whatever state
    the scene had reached at that moment.
    """
    if exit_at is None or elapsed < exit_at:
        return compute_visual_state(scene, elapsed)
    return compute_exit_state(compute_visual_state(scene, exit_at), elapsed - exit_at)
