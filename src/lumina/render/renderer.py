"""Pillow-based scene renderer, the default frame capture adapter."""

import logging
import math
from typing import Optional, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFilter

from ..config import config, frame_height_for
from ..engine.animation import TYPE_IN_OFFSET_PX, VisualState, compute_frame_state, settle_time
from ..errors import CaptureError
from ..models import Scene
from .backdrop import bottom_shade_layer, glow_layer, text_shadow_layer, vignette_layer
from .capture import FrameCapture
from .fonts import load_font
from .layout import TextLayout, layout_text

logger = logging.getLogger(__name__)

# Share of the frame the text block may occupy along each axis.
TEXT_BOX_FRACTION = 0.85


def apply_alpha(image: Image.Image, factor: float) -> Image.Image:
    """Scale the alpha channel of an RGBA image."""
    factor = max(0.0, min(1.0, factor))
    if factor >= 0.999:
        return image
    alpha = image.getchannel("A").point(lambda v: int(v * factor))
    output = image.copy()
    output.putalpha(alpha)
    return output


class SceneRenderer(FrameCapture):
    """Draws a scene's background, ambient layers and animated text block onto a 16:9 frame."""

    def __init__(self, width: Optional[int] = None, ambient: bool = True) -> None:
        """Initialize the renderer.

        Args:
            width: Width of a 1x frame. Defaults to config.frame_width. The
                height always follows from the 16:9 aspect ratio.
            ambient: Draw the glow, vignette, bottom shade and text shadow.
        """
        self._width = width or config.frame_width
        self._height = frame_height_for(self._width)
        self._ambient = ambient

    def frame_size(self, pixel_ratio: float = 1.0) -> Tuple[int, int]:
        return round(self._width * pixel_ratio), round(self._height * pixel_ratio)

    async def capture(
        self,
        scene: Scene,
        elapsed: float,
        pixel_ratio: float = 1.0,
        exit_at: Optional[float] = None,
    ) -> Image.Image:
        try:
            return self.render(scene, elapsed, pixel_ratio, exit_at=exit_at)
        except CaptureError:
            raise
        except (OSError, ValueError, MemoryError) as e:
            raise CaptureError(f"Failed to render scene {scene.id} at {elapsed:.3f}s: {e}") from e

    def render_settled(self, scene: Scene, pixel_ratio: float = 1.0) -> Image.Image:
        """Render the scene once its entrance animation has completed."""
        return self.render(scene, settle_time(scene), pixel_ratio)

    def render(
        self,
        scene: Scene,
        elapsed: float,
        pixel_ratio: float = 1.0,
        state: Optional[VisualState] = None,
        exit_at: Optional[float] = None,
    ) -> Image.Image:
        """Render a scene at an instant.

        Args:
            scene: Scene to draw.
            elapsed: Seconds since the scene started.
            pixel_ratio: Pixel density multiplier.
            state: Visual state to draw instead of the computed one.
            exit_at: Elapsed time at which the exit transition starts.

        Returns:
            RGB frame of size frame_size(pixel_ratio).
        """
        size = self.frame_size(pixel_ratio)
        frame = Image.new("RGBA", size, ImageColor.getcolor(scene.background, "RGBA"))
        if state is None:
            state = compute_frame_state(scene, elapsed, exit_at)

        if self._ambient:
            frame.alpha_composite(glow_layer(size, elapsed, pixel_ratio))

        if not self._is_invisible(state) and scene.text:
            text = self._text_layer(scene, state, size, pixel_ratio)
            if self._ambient:
                frame.alpha_composite(text_shadow_layer(text, pixel_ratio))
            frame.alpha_composite(text)

        if self._ambient:
            frame.alpha_composite(vignette_layer(size, pixel_ratio))
            frame.alpha_composite(bottom_shade_layer(size))
        return frame.convert("RGB")

    def _text_layer(
        self,
        scene: Scene,
        state: VisualState,
        size: Tuple[int, int],
        pixel_ratio: float,
    ) -> Image.Image:
        font = load_font(scene.font_family, round(scene.font_size * pixel_ratio))
        layout = layout_text(
            scene.text,
            font.getlength,
            font_size=scene.font_size * pixel_ratio,
            letter_spacing=scene.letter_spacing * pixel_ratio,
            line_height=scene.line_height,
            align=scene.text_align,
            writing_mode=scene.writing_mode,
            direction=scene.direction,
            max_width=size[0] * TEXT_BOX_FRACTION,
            max_height=size[1] * TEXT_BOX_FRACTION,
        )
        block = self._draw_block(scene, layout, font, state, pixel_ratio)
        block = self._apply_effects(block, state, pixel_ratio)

        x = (size[0] - block.width) / 2.0
        y = (size[1] - block.height) / 2.0
        if state.translate_axis == "x":
            x += state.translate_px * pixel_ratio
        else:
            y += state.translate_px * pixel_ratio

        layer = Image.new("RGBA", size, (0, 0, 0, 0))
        layer.paste(block, (round(x), round(y)))
        return layer

    @staticmethod
    def _is_invisible(state: VisualState) -> bool:
        if state.opacity <= 0.0:
            return True
        if state.char_reveals is not None:
            return all(r.opacity <= 0.0 for r in state.char_reveals)
        return False

    def _draw_block(
        self,
        scene: Scene,
        layout: TextLayout,
        font,
        state: VisualState,
        pixel_ratio: float,
    ) -> Image.Image:
        # Padding leaves room for blur spill and the type-in drop offset.
        pad = math.ceil((max(state.blur_px * 3.0, TYPE_IN_OFFSET_PX) + 2.0) * pixel_ratio)
        width = math.ceil(layout.width) + 2 * pad
        height = math.ceil(layout.height) + 2 * pad
        block = Image.new("RGBA", (max(1, width), max(1, height)), (0, 0, 0, 0))
        draw = ImageDraw.Draw(block)
        rgb = ImageColor.getrgb(scene.color)[:3]

        for glyph in layout.glyphs:
            if glyph.char.isspace():
                continue
            alpha = 255
            dy = 0.0
            if state.char_reveals is not None:
                reveal = state.char_reveals[glyph.index]
                alpha = round(255 * reveal.opacity)
                dy = reveal.offset_px * pixel_ratio
            if alpha <= 0:
                continue
            draw.text((pad + glyph.x, pad + glyph.y + dy), glyph.char, font=font, fill=(*rgb, alpha))

        if state.clip_inset > 0.0:
            if state.clip_axis == "y":
                cut = pad + layout.height * (1.0 - state.clip_inset)
                block.paste((0, 0, 0, 0), (0, math.floor(cut), width, height))
            else:
                cut = pad + layout.width * (1.0 - state.clip_inset)
                block.paste((0, 0, 0, 0), (math.floor(cut), 0, width, height))
        return block

    @staticmethod
    def _apply_effects(block: Image.Image, state: VisualState, pixel_ratio: float) -> Image.Image:
        if abs(state.scale - 1.0) > 1e-6:
            scaled = (max(1, round(block.width * state.scale)), max(1, round(block.height * state.scale)))
            block = block.resize(scaled, Image.Resampling.BICUBIC)
        if state.blur_px > 0.0:
            block = block.filter(ImageFilter.GaussianBlur(state.blur_px * pixel_ratio))
        return apply_alpha(block, state.opacity)
