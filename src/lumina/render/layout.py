"""Text block layout for horizontal and vertical writing modes."""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from ..models import WritingMode


@dataclass(frozen=True)
class Glyph:
    """A placed character. ``index`` is its position in the scene text."""

    index: int
    char: str
    x: float
    y: float


@dataclass(frozen=True)
class TextLayout:
    """Glyphs positioned relative to the top-left of the text block."""

    glyphs: Tuple[Glyph, ...]
    width: float
    height: float


# (index, char, advance)
_Cell = Tuple[int, str, float]


def _break_lines(text: str, advance: Callable[[str], float], limit: float) -> List[List[_Cell]]:
    """Greedy line breaking, preferring the last space on an overflowing line."""
    lines: List[List[_Cell]] = [[]]
    used = 0.0
    for index, char in enumerate(text):
        if char == "\n":
            lines.append([])
            used = 0.0
            continue

        step = advance(char)
        line = lines[-1]
        if line and used + step > limit:
            carry: List[_Cell] = []
            if char != " ":
                spaces = [i for i, cell in enumerate(line) if cell[1] == " "]
                if spaces and spaces[-1] < len(line) - 1:
                    cut = spaces[-1] + 1
                    carry = line[cut:]
                    del line[cut:]
            lines.append(carry)
            used = sum(cell[2] for cell in carry)
            if char == " ":
                continue
            line = lines[-1]

        line.append((index, char, step))
        used += step
    return lines


def _extent(line: List[_Cell]) -> float:
    """Length of a line ignoring trailing spaces."""
    end = len(line)
    while end and line[end - 1][1] == " ":
        end -= 1
    return sum(cell[2] for cell in line[:end])


def _start_offset(align: str, free: float) -> float:
    if align == "center":
        return free / 2.0
    if align == "right":
        return free
    return 0.0


def layout_text(
    text: str,
    measure: Callable[[str], float],
    font_size: float,
    letter_spacing: float = 0.0,
    line_height: float = 1.4,
    align: str = "center",
    writing_mode: WritingMode = WritingMode.HORIZONTAL,
    direction: str = "ltr",
    max_width: Optional[float] = None,
    max_height: Optional[float] = None,
) -> TextLayout:
    """Place every character of ``text`` inside a text block.

    Horizontal text wraps at ``max_width``; lines stack downwards with a pitch
    of ``font_size * line_height``. Vertical text flows top to bottom in
    columns that wrap at ``max_height``; vertical-rl stacks columns right to
    left, vertical-lr left to right. For rtl text the start edge is the right
    one, so left and right alignment swap.

    Args:
        measure: Returns the advance width of a single character.
    """
    if direction == "rtl" and align in ("left", "right"):
        align = "right" if align == "left" else "left"

    pitch = font_size * line_height

    if not writing_mode.is_vertical:
        limit = max_width if max_width else float("inf")
        lines = _break_lines(text, lambda c: measure(c) + letter_spacing, limit)
        extents = [_extent(line) for line in lines]
        width = max(extents) if extents else 0.0
        glyphs = []
        for row, (line, extent) in enumerate(zip(lines, extents)):
            free = width - extent
            gap = 0.0
            if align == "justify" and row < len(lines) - 1 and len(line) > 1:
                gap = free / (len(line) - 1)
            x = _start_offset(align, free)
            y = row * pitch + (pitch - font_size) / 2.0
            for index, char, step in line:
                glyphs.append(Glyph(index=index, char=char, x=x, y=y))
                x += step + gap
        return TextLayout(glyphs=tuple(glyphs), width=width, height=len(lines) * pitch)

    cell = font_size + letter_spacing
    limit = max_height if max_height else float("inf")
    columns = _break_lines(text, lambda c: cell, limit)
    extents = [_extent(column) for column in columns]
    height = max(extents) if extents else 0.0
    width = len(columns) * pitch
    glyphs = []
    for col, (column, extent) in enumerate(zip(columns, extents)):
        slot = col if writing_mode is WritingMode.VERTICAL_LR else len(columns) - 1 - col
        x0 = slot * pitch
        y = _start_offset(align, height - extent)
        for index, char, step in column:
            glyphs.append(Glyph(index=index, char=char, x=x0 + (pitch - measure(char)) / 2.0, y=y))
            y += step
    return TextLayout(glyphs=tuple(glyphs), width=width, height=height)
