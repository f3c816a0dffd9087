"""Ambient layers drawn around the text block.

Two slow glow blobs sit behind the text, and an inset vignette and a bottom
shade sit in front of it. Every layer is a function of frame size, pixel ratio
and elapsed time only, so the same instant always renders the same pixels.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFilter

# Blurs are computed at this fraction of the frame size and scaled back up.
WORK_SCALE = 8

# Opacity of the whole glow group.
GLOW_GROUP_OPACITY = 0.4
VIGNETTE_RADIUS_PX = 150.0
VIGNETTE_OPACITY = 0.85
BOTTOM_SHADE_START = 0.5
BOTTOM_SHADE_OPACITY = 0.2
TEXT_SHADOW_OFFSET_PX = 2.0
TEXT_SHADOW_BLUR_PX = 40.0
TEXT_SHADOW_OPACITY = 0.15


@dataclass(frozen=True)
class GlowBlob:
    """A blurred ellipse breathing on a linear keyframe loop.

    Position and size are fractions of the frame. ``scales`` and
    ``opacities`` are (start/end, middle) keyframe values.
    """

    left: float
    top: float
    size: float
    rgb: Tuple[int, int, int]
    alpha: float
    blur_px: float
    period: float
    scales: Tuple[float, float]
    opacities: Tuple[float, float]


GLOW_BLOBS = (
    # indigo, top left
    GlowBlob(-0.2, -0.2, 0.6, (99, 102, 241), 0.05, 120.0, 20.0, (1.0, 1.1), (0.3, 0.5)),
    # violet, bottom right
    GlowBlob(0.5, 0.5, 0.7, (139, 92, 246), 0.05, 150.0, 25.0, (1.1, 1.0), (0.2, 0.4)),
)


def _keyframe(edge: float, middle: float, elapsed: float, period: float) -> float:
    phase = (elapsed % period) / period
    weight = 1.0 - abs(2.0 * phase - 1.0)
    return edge + (middle - edge) * weight


def _work_size(size: Tuple[int, int]) -> Tuple[int, int]:
    return max(1, size[0] // WORK_SCALE), max(1, size[1] // WORK_SCALE)


def glow_layer(size: Tuple[int, int], elapsed: float, pixel_ratio: float = 1.0) -> Image.Image:
    """Draw the glow blobs as an RGBA layer of ``size``."""
    small = _work_size(size)
    sx = small[0] / size[0]
    layer = Image.new("RGBA", small, (0, 0, 0, 0))

    for blob in GLOW_BLOBS:
        scale = _keyframe(*blob.scales, elapsed, blob.period)
        opacity = _keyframe(*blob.opacities, elapsed, blob.period)
        alpha = round(255 * blob.alpha * opacity * GLOW_GROUP_OPACITY)
        if alpha <= 0:
            continue

        width = blob.size * scale * small[0]
        height = blob.size * scale * small[1]
        cx = (blob.left + blob.size / 2.0) * small[0]
        cy = (blob.top + blob.size / 2.0) * small[1]
        shape = Image.new("RGBA", small, (0, 0, 0, 0))
        ImageDraw.Draw(shape, "RGBA").ellipse(
            (cx - width / 2.0, cy - height / 2.0, cx + width / 2.0, cy + height / 2.0),
            fill=(*blob.rgb, alpha),
        )
        # CSS blur radius is two standard deviations.
        radius = blob.blur_px * pixel_ratio * sx / 2.0
        layer.alpha_composite(shape.filter(ImageFilter.GaussianBlur(radius)))

    return layer.resize(size, Image.Resampling.BILINEAR)


def _smoothstep(values: np.ndarray) -> np.ndarray:
    values = np.clip(values, 0.0, 1.0)
    return values * values * (3.0 - 2.0 * values)


@lru_cache(maxsize=8)
def vignette_layer(size: Tuple[int, int], pixel_ratio: float = 1.0) -> Image.Image:
    """Dark inset shadow that fades in towards every edge."""
    width, height = size
    radius = max(1.0, VIGNETTE_RADIUS_PX * pixel_ratio)
    x = np.arange(width, dtype=np.float32)
    y = np.arange(height, dtype=np.float32)
    inside_x = _smoothstep(np.minimum(x + 0.5, width - 0.5 - x) / radius)
    inside_y = _smoothstep(np.minimum(y + 0.5, height - 0.5 - y) / radius)
    inside = np.outer(inside_y, inside_x)

    alpha = (1.0 - inside) * VIGNETTE_OPACITY * 255.0
    return _black_layer(size, alpha)


@lru_cache(maxsize=8)
def bottom_shade_layer(size: Tuple[int, int]) -> Image.Image:
    """Transparent over the top half, darkening linearly to the bottom edge."""
    width, height = size
    rows = (np.arange(height, dtype=np.float32) + 0.5) / height
    ramp = np.clip((rows - BOTTOM_SHADE_START) / (1.0 - BOTTOM_SHADE_START), 0.0, 1.0)
    alpha = np.repeat((ramp * BOTTOM_SHADE_OPACITY * 255.0)[:, None], width, axis=1)
    return _black_layer(size, alpha)


def text_shadow_layer(text_layer: Image.Image, pixel_ratio: float = 1.0) -> Image.Image:
    """Soft dark shadow cast slightly below the opaque parts of ``text_layer``."""
    size = text_layer.size
    small = _work_size(size)
    sy = small[1] / size[1]
    offset = round(TEXT_SHADOW_OFFSET_PX * pixel_ratio)

    mask = text_layer.getchannel("A").crop((0, -offset, size[0], size[1] - offset))
    mask = mask.resize(small, Image.Resampling.BOX)
    mask = mask.filter(ImageFilter.GaussianBlur(TEXT_SHADOW_BLUR_PX * pixel_ratio * sy / 2.0))
    mask = mask.point(lambda v: int(v * TEXT_SHADOW_OPACITY))
    return _black_layer(size, mask.resize(size, Image.Resampling.BILINEAR))


def _black_layer(size: Tuple[int, int], alpha) -> Image.Image:
    if isinstance(alpha, np.ndarray):
        alpha = Image.fromarray(np.clip(alpha, 0, 255).astype(np.uint8), "L")
    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    layer.putalpha(alpha)
    return layer
