"""Data models for LuminaBook."""

from .scene import Scene, AnimationType, WritingMode, FontFamily, DEFAULT_SCENE
from .project import ProjectConfig
from .state import PlaybackState, ExportJob, ExportStatus, ExportKind
from .suggestion import StyleSuggestion

__all__ = [
    "Scene",
    "AnimationType",
    "WritingMode",
    "FontFamily",
    "DEFAULT_SCENE",
    "ProjectConfig",
    "PlaybackState",
    "ExportJob",
    "ExportStatus",
    "ExportKind",
    "StyleSuggestion",
]
