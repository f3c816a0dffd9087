"""
Unit tests for the animation engine.

Tests cover:
- Easing curve shape
- Per-variant entrance progress
- Type-in character stagger
- Exit transition
"""

import pytest

from lumina.engine import (
    compute_exit_state,
    compute_frame_state,
    compute_visual_state,
    cubic_bezier,
    ease_out,
    settle_time,
)
from lumina.engine.animation import char_reveal_start, type_in_stagger
from lumina.models import AnimationType, WritingMode


ALL_VARIANTS = list(AnimationType)

# Fields each variant animates, with +1 for rising and -1 for falling.
ANIMATED_FIELDS = [
    (AnimationType.FADE_IN, "opacity", 1),
    (AnimationType.GRADIENT_IN, "opacity", 1),
    (AnimationType.GRADIENT_IN, "clip_inset", -1),
    (AnimationType.BLUR_IN, "opacity", 1),
    (AnimationType.BLUR_IN, "blur_px", -1),
    (AnimationType.BLUR_IN, "scale", 1),
    (AnimationType.BLUR_IN, "translate_px", -1),
    (AnimationType.SLIDE_UP, "opacity", 1),
    (AnimationType.SLIDE_UP, "translate_px", -1),
    (AnimationType.ZOOM_IN, "opacity", 1),
    (AnimationType.ZOOM_IN, "scale", -1),
    (AnimationType.ZOOM_IN, "blur_px", -1),
]


def _samples(scene, count=40):
    end = scene.delay + scene.duration
    return [end * i / count for i in range(count + 1)]


class TestEasing:
    """Tests for the cubic-bezier easing."""

    def test_endpoints(self):
        assert ease_out(0.0) == 0.0
        assert ease_out(1.0) == 1.0

    def test_clamps_input(self):
        assert ease_out(-0.5) == 0.0
        assert ease_out(2.0) == 1.0

    def test_monotonic(self):
        values = [ease_out(i / 200) for i in range(201)]
        assert all(b >= a - 1e-12 for a, b in zip(values, values[1:]))

    def test_ease_out_front_loads_progress(self):
        assert ease_out(0.5) > 0.8

    def test_linear_curve_is_identity(self):
        linear = cubic_bezier(0.0, 0.0, 1.0, 1.0)
        for x in (0.1, 0.25, 0.5, 0.9):
            assert linear(x) == pytest.approx(x, abs=1e-6)


class TestEntranceVariants:
    """Tests for compute_visual_state."""

    @pytest.mark.parametrize("animation", ALL_VARIANTS)
    def test_hidden_during_delay(self, make_scene, animation):
        scene = make_scene(animation=animation, delay=1.0, duration=2.0, text="Hello")
        state = compute_visual_state(scene, 0.5)

        if animation is AnimationType.TYPE_IN:
            assert all(r.opacity == 0.0 for r in state.char_reveals)
        else:
            assert state.opacity == 0.0

    @pytest.mark.parametrize("animation", ALL_VARIANTS)
    def test_opacity_never_decreases(self, make_scene, animation):
        scene = make_scene(animation=animation, delay=0.5, duration=2.0, text="Hello")
        if animation is AnimationType.TYPE_IN:
            series = [sum(r.opacity for r in compute_visual_state(scene, t).char_reveals) for t in _samples(scene)]
        else:
            series = [compute_visual_state(scene, t).opacity for t in _samples(scene)]

        assert all(b >= a - 1e-9 for a, b in zip(series, series[1:]))

    @pytest.mark.parametrize("animation, field, direction", ANIMATED_FIELDS)
    def test_animated_field_moves_one_way(self, make_scene, animation, field, direction):
        scene = make_scene(animation=animation, delay=0.5, duration=2.0, text="Hello")
        series = [getattr(compute_visual_state(scene, t), field) for t in _samples(scene, count=80)]

        steps = [direction * (b - a) for a, b in zip(series, series[1:])]
        assert all(step >= -1e-9 for step in steps)
        assert direction * (series[-1] - series[0]) > 0

    @pytest.mark.parametrize("vertical", [False, True])
    def test_type_in_characters_rise_into_place(self, make_scene, vertical):
        mode = WritingMode.VERTICAL_RL if vertical else WritingMode.HORIZONTAL
        scene = make_scene(animation=AnimationType.TYPE_IN, text="Hello", writing_mode=mode)
        frames = [compute_visual_state(scene, t).char_reveals for t in _samples(scene, count=80)]

        for index in range(len(scene.text)):
            opacities = [frame[index].opacity for frame in frames]
            offsets = [frame[index].offset_px for frame in frames]
            assert all(b >= a - 1e-9 for a, b in zip(opacities, opacities[1:]))
            assert all(b <= a + 1e-9 for a, b in zip(offsets, offsets[1:]))

    @pytest.mark.parametrize("animation", ALL_VARIANTS)
    def test_settled_state_is_final(self, make_scene, animation):
        scene = make_scene(animation=animation, delay=0.5, duration=2.0, text="Hello")
        state = compute_visual_state(scene, settle_time(scene))

        assert state.scale == pytest.approx(1.0)
        assert state.blur_px == pytest.approx(0.0)
        assert state.clip_inset == pytest.approx(0.0)
        assert state.translate_px == pytest.approx(0.0)
        if animation is AnimationType.TYPE_IN:
            assert all(r.opacity == pytest.approx(1.0) for r in state.char_reveals)
        else:
            assert state.opacity == pytest.approx(1.0)

    def test_fade_in_is_linear(self, make_scene):
        scene = make_scene(animation=AnimationType.FADE_IN, delay=0, duration=2.0)
        assert compute_visual_state(scene, 0.5).opacity == pytest.approx(0.25)

    def test_blur_in_start(self, make_scene):
        state = compute_visual_state(make_scene(animation=AnimationType.BLUR_IN, delay=0), 0.0)
        assert state.blur_px == pytest.approx(30.0)
        assert state.scale == pytest.approx(0.9)
        assert state.translate_px == pytest.approx(20.0)

    def test_zoom_in_start(self, make_scene):
        state = compute_visual_state(make_scene(animation=AnimationType.ZOOM_IN, delay=0), 0.0)
        assert state.scale == pytest.approx(1.4)
        assert state.blur_px == pytest.approx(10.0)

    def test_gradient_axis_follows_writing_mode(self, make_scene):
        horizontal = make_scene(animation=AnimationType.GRADIENT_IN, delay=0)
        vertical = make_scene(
            animation=AnimationType.GRADIENT_IN, delay=0, writing_mode=WritingMode.VERTICAL_RL
        )

        assert compute_visual_state(horizontal, 0.5).clip_axis == "x"
        assert compute_visual_state(vertical, 0.5).clip_axis == "y"

    def test_slide_up_axis_follows_writing_mode(self, make_scene):
        horizontal = make_scene(animation=AnimationType.SLIDE_UP, delay=0)
        vertical = make_scene(
            animation=AnimationType.SLIDE_UP, delay=0, writing_mode=WritingMode.VERTICAL_LR
        )

        assert compute_visual_state(horizontal, 0.0).translate_axis == "y"
        assert compute_visual_state(vertical, 0.0).translate_axis == "x"
        assert compute_visual_state(vertical, 0.0).translate_px == pytest.approx(60.0)

    def test_same_inputs_same_state(self, make_scene):
        scene = make_scene(animation=AnimationType.ZOOM_IN)
        first = compute_visual_state(scene, 1.234)
        second = compute_visual_state(scene, 1.234)

        assert first == second
        assert hash(first) == hash(second)


class TestTypeIn:
    """Tests for the type-in character stagger."""

    def test_two_characters_one_second(self, make_scene):
        scene = make_scene(animation=AnimationType.TYPE_IN, text="AB", duration=1.0, delay=0)

        assert type_in_stagger(scene) == pytest.approx(0.5)
        assert char_reveal_start(scene, 0) == pytest.approx(0.0)
        assert char_reveal_start(scene, 1) == pytest.approx(0.5)

    def test_character_fade_window(self, make_scene):
        scene = make_scene(animation=AnimationType.TYPE_IN, text="AB", duration=1.0, delay=0)

        halfway = compute_visual_state(scene, 0.1).char_reveals
        assert halfway[0].opacity == pytest.approx(0.5)
        assert halfway[0].offset_px == pytest.approx(5.0)
        assert halfway[1].opacity == 0.0

        later = compute_visual_state(scene, 0.6).char_reveals
        assert later[0].opacity == pytest.approx(1.0)
        assert later[1].opacity == pytest.approx(0.5)

    def test_container_stays_opaque(self, make_scene):
        scene = make_scene(animation=AnimationType.TYPE_IN, text="AB")
        assert compute_visual_state(scene, 0.0).opacity == 1.0

    def test_empty_text(self, make_scene):
        scene = make_scene(animation=AnimationType.TYPE_IN, text="")
        assert compute_visual_state(scene, 1.0).char_reveals == ()

    def test_settle_time_covers_last_character(self, make_scene):
        scene = make_scene(animation=AnimationType.TYPE_IN, text="AB", duration=1.0, delay=0)
        assert settle_time(scene) == pytest.approx(1.0)

        fast = make_scene(animation=AnimationType.TYPE_IN, text="ABCDEFGHIJ", duration=0.5, delay=0)
        assert settle_time(fast) == pytest.approx(0.45 + 0.2)


class TestExitTransition:
    """Tests for compute_exit_state."""

    def test_starts_from_current_state(self, make_scene):
        state = compute_visual_state(make_scene(), 10.0)
        assert compute_exit_state(state, 0.0) == state

    def test_fully_gone_after_exit_window(self, make_scene):
        state = compute_visual_state(make_scene(), 10.0)
        gone = compute_exit_state(state, 0.4)

        assert gone.opacity == pytest.approx(0.0)
        assert gone.blur_px == pytest.approx(20.0)

    @pytest.mark.parametrize("animation", ALL_VARIANTS)
    def test_exit_fades_monotonically(self, make_scene, animation):
        state = compute_visual_state(make_scene(animation=animation, text="Hello"), 10.0)
        series = [compute_exit_state(state, 0.4 * i / 20) for i in range(21)]

        assert all(b.opacity <= a.opacity + 1e-9 for a, b in zip(series, series[1:]))
        assert all(b.blur_px >= a.blur_px - 1e-9 for a, b in zip(series, series[1:]))


class TestFrameState:
    """Tests for compute_frame_state."""

    def test_without_exit_matches_entrance(self, make_scene):
        scene = make_scene(animation=AnimationType.BLUR_IN)
        assert compute_frame_state(scene, 1.0) == compute_visual_state(scene, 1.0)
        assert compute_frame_state(scene, 1.0, exit_at=3.6) == compute_visual_state(scene, 1.0)

    def test_last_frames_show_exit(self, make_scene):
        scene = make_scene(animation=AnimationType.FADE_IN, delay=0.5, duration=2.0)
        settled = compute_visual_state(scene, 3.6)

        assert compute_frame_state(scene, 3.6, exit_at=3.6) == settled
        leaving = compute_frame_state(scene, 3.8, exit_at=3.6)
        assert 0.0 < leaving.opacity < 1.0
        assert 0.0 < leaving.blur_px < 20.0
        gone = compute_frame_state(scene, 4.0, exit_at=3.6)
        assert gone.opacity == pytest.approx(0.0)
        assert gone.blur_px == pytest.approx(20.0)

    def test_exit_starts_from_unfinished_entrance(self, make_scene):
        scene = make_scene(animation=AnimationType.ZOOM_IN, delay=0.0, duration=2.0)
        partial = compute_visual_state(scene, 0.3)
        state = compute_frame_state(scene, 0.3, exit_at=0.3)

        assert state.scale == pytest.approx(partial.scale)
        assert state.opacity == pytest.approx(partial.opacity)
