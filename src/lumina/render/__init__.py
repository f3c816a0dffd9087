"""Frame rendering, video encoding and export."""

from .capture import FrameCapture
from .renderer import SceneRenderer, apply_alpha
from .layout import Glyph, TextLayout, layout_text
from .fonts import load_font, register_font
from .encoder import (
    VideoEncoder,
    FrameDumpEncoder,
    StreamEncoder,
    create_encoder,
    even_size,
    export,
)
from .export import ExportPipeline

__all__ = [
    # Capture
    "FrameCapture",
    "SceneRenderer",
    "apply_alpha",
    "Glyph",
    "TextLayout",
    "layout_text",
    "load_font",
    "register_font",
    # Encoding
    "VideoEncoder",
    "FrameDumpEncoder",
    "StreamEncoder",
    "create_encoder",
    "even_size",
    "export",
    # Pipeline
    "ExportPipeline",
]
