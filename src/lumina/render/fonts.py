"""Font lookup for scene text."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Union

from PIL import ImageFont

from ..models import FontFamily

logger = logging.getLogger(__name__)

PILFont = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]

# Candidate files per family, tried in order. Bare names are resolved by
# FreeType against the system font directories.
FONT_CANDIDATES: Dict[FontFamily, List[str]] = {
    FontFamily.SERIF: [
        "/usr/share/fonts/truetype/dejavu/DejaVuSerif.ttf",
        "/System/Library/Fonts/Supplemental/Georgia.ttf",
        "DejaVuSerif.ttf",
        "Georgia.ttf",
        "times.ttf",
    ],
    FontFamily.SANS: [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/System/Library/Fonts/Supplemental/Arial.ttf",
        "DejaVuSans.ttf",
        "arial.ttf",
    ],
    FontFamily.MONO: [
        "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
        "/System/Library/Fonts/Menlo.ttc",
        "DejaVuSansMono.ttf",
        "cour.ttf",
    ],
    FontFamily.ZH_SERIF: [
        "/usr/share/fonts/opentype/noto/NotoSerifCJK-Regular.ttc",
        "/System/Library/Fonts/Supplemental/Songti.ttc",
        "NotoSerifCJK-Regular.ttc",
        "simsun.ttc",
    ],
    FontFamily.ZH_SANS: [
        "/usr/share/fonts/opentype/noto/NotoSansCJK-Regular.ttc",
        "/System/Library/Fonts/PingFang.ttc",
        "NotoSansCJK-Regular.ttc",
        "msyh.ttc",
    ],
    FontFamily.ZH_BRUSH: [
        "/usr/share/fonts/truetype/arphic/ukai.ttc",
        "/System/Library/Fonts/Supplemental/Kaiti.ttc",
        "simkai.ttf",
    ],
    FontFamily.ZH_INK: [
        "/usr/share/fonts/truetype/arphic/uming.ttc",
        "/System/Library/Fonts/Supplemental/Xingkai.ttc",
        "STXINGKA.TTF",
    ],
}

# Families without an installed face fall back along this chain.
FALLBACKS: Dict[FontFamily, FontFamily] = {
    FontFamily.ZH_BRUSH: FontFamily.ZH_SERIF,
    FontFamily.ZH_INK: FontFamily.ZH_BRUSH,
    FontFamily.ZH_SERIF: FontFamily.ZH_SANS,
    FontFamily.MONO: FontFamily.SANS,
    FontFamily.SERIF: FontFamily.SANS,
}


def register_font(family: FontFamily, path: Path) -> None:
    """Put a font file first in line for a family.

    Raises:
        FileNotFoundError: If the font file does not exist.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Font file not found: {path}")
    FONT_CANDIDATES[family].insert(0, str(path))
    load_font.cache_clear()
    logger.info(f"Registered {path.name} for {family.value}")


@lru_cache(maxsize=64)
def load_font(family: FontFamily, size: int) -> PILFont:
    """Load the first available face for a family at a pixel size.

    Falls back along FALLBACKS, then to Pillow's built-in font.
    """
    size = max(1, int(size))
    current = family
    visited = set()
    while current is not None and current not in visited:
        visited.add(current)
        for candidate in FONT_CANDIDATES.get(current, []):
            try:
                return ImageFont.truetype(candidate, size=size)
            except OSError:
                continue
        current = FALLBACKS.get(current)

    logger.warning(f"No font file found for {family.value}, using Pillow default")
    return ImageFont.load_default(size=size)
