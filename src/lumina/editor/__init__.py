"""Scene authoring: the scene store and text import."""

from .store import SceneStore, OWNER_EXPORT, OWNER_PLAYBACK, PLACEHOLDER_TEXT, new_scene_id
from .importer import (
    is_likely_chinese,
    split_paragraphs,
    scenes_from_text,
    scenes_from_file,
)

__all__ = [
    # Store
    "SceneStore",
    "OWNER_EXPORT",
    "OWNER_PLAYBACK",
    "PLACEHOLDER_TEXT",
    "new_scene_id",
    # Import
    "is_likely_chinese",
    "split_paragraphs",
    "scenes_from_text",
    "scenes_from_file",
]
