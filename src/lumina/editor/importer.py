"""Plain-text import."""

import logging
import re
import time
from pathlib import Path
from typing import List, Union

from ..errors import ImportFormatError
from ..models import DEFAULT_SCENE, FontFamily, Scene

logger = logging.getLogger(__name__)

# Common CJK unified ideographs.
HAN_PATTERN = re.compile(r"[\u4e00-\u9fa5]")
LINE_BREAK = re.compile(r"\r?\n")


def is_likely_chinese(text: str) -> bool:
    """Return True if the text contains any common Han character."""
    return HAN_PATTERN.search(text) is not None


def decode_text(content: Union[str, bytes]) -> str:
    """Decode uploaded content as UTF-8 text.

    Raises:
        ImportFormatError: If the content is not readable as text.
    """
    if isinstance(content, str):
        return content
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ImportFormatError(f"Content is not UTF-8 text: {e}") from e


def split_paragraphs(text: str) -> List[str]:
    """Split text on line breaks, dropping blank lines.

    Only LF and CRLF end a line. Form feeds and other Unicode separators stay
    inside their paragraph.
    """
    return [line.strip() for line in LINE_BREAK.split(text) if line.strip()]


def scenes_from_text(content: Union[str, bytes], template: Scene = DEFAULT_SCENE) -> List[Scene]:
    """Build one scene per non-blank paragraph of the given text.

    Language and font are chosen for the whole import: if any Han character
    appears anywhere, every scene is marked Chinese with the Chinese serif
    font. All other style fields come from ``template``.

    Raises:
        ImportFormatError: If the content is unreadable or has no paragraphs.
    """
    text = decode_text(content)
    paragraphs = split_paragraphs(text)
    if not paragraphs:
        raise ImportFormatError("Imported text contains no paragraphs")

    chinese = is_likely_chinese(text)
    stamp = int(time.time() * 1000)
    scenes = [
        template.restyled(
            id=f"file-{i}-{stamp}",
            text=paragraph,
            language="zh" if chinese else "en",
            font_family=FontFamily.ZH_SERIF if chinese else FontFamily.SERIF,
            visual_prompt=None,
        )
        for i, paragraph in enumerate(paragraphs)
    ]
    logger.info(f"Parsed {len(scenes)} scenes from text ({'zh' if chinese else 'en'})")
    return scenes


def scenes_from_file(path: Path, template: Scene = DEFAULT_SCENE) -> List[Scene]:
    """Read a text file and build scenes from its paragraphs."""
    try:
        content = Path(path).read_bytes()
    except OSError as e:
        raise ImportFormatError(f"Cannot read {path}: {e}") from e
    return scenes_from_text(content, template)
