"""Scene store: the canonical, ordered scene collection."""

import logging
import uuid
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from ..errors import BusyError, ExportBusyError, SceneNotFoundError, ValidationError
from ..models import ProjectConfig, Scene
from .importer import scenes_from_file, scenes_from_text

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = {
    "zh": "新篇章开始了...",
    "en": "New chapter begins...",
}

# Owners of the active-scene pointer.
OWNER_PLAYBACK = "playback"
OWNER_EXPORT = "export"


def new_scene_id() -> str:
    """Return a fresh random scene id."""
    return uuid.uuid4().hex[:9]


class SceneStore:
    """Owns the project's scenes, its global timing and the active-scene pointer.

    The active scene is the one being rendered. While playback or an export
    job owns the pointer, selection changes and structural edits from anyone
    else are rejected with BusyError.
    """

    def __init__(self, project: Optional[ProjectConfig] = None) -> None:
        self._project = project.model_copy(deep=True) if project else ProjectConfig()
        self._active_id = self._project.scenes[0].id
        self._owner: Optional[str] = None
        self._claim_token: Optional[int] = None
        self._claim_count = 0

    # -- read access -------------------------------------------------------

    @property
    def project(self) -> ProjectConfig:
        """Return a copy of the current project snapshot."""
        return self._project.model_copy(deep=True)

    @property
    def scenes(self) -> Tuple[Scene, ...]:
        return tuple(self._project.scenes)

    @property
    def title(self) -> str:
        return self._project.title

    @property
    def global_transition(self) -> float:
        return self._project.global_transition

    @property
    def reading_buffer(self) -> float:
        return self._project.reading_buffer

    def __len__(self) -> int:
        return len(self._project.scenes)

    @property
    def active_id(self) -> str:
        return self._active_id

    @property
    def active_scene(self) -> Scene:
        return self.get(self._active_id)

    @property
    def active_index(self) -> int:
        return self.index_of(self._active_id)

    def get(self, scene_id: str) -> Scene:
        for scene in self._project.scenes:
            if scene.id == scene_id:
                return scene
        raise SceneNotFoundError(scene_id)

    def index_of(self, scene_id: str) -> int:
        for i, scene in enumerate(self._project.scenes):
            if scene.id == scene_id:
                return i
        raise SceneNotFoundError(scene_id)

    # -- active-scene pointer ----------------------------------------------

    @property
    def owner(self) -> Optional[str]:
        """Activity currently owning the active-scene pointer, if any."""
        return self._owner

    def claim(self, owner: str) -> int:
        """Take exclusive ownership of the active-scene pointer.

        Claims do not nest: a second claim fails even when it names the same
        owner, so two exports (or two players) can never share the pointer.

        Returns:
            Token identifying this claim, to be passed to release().

        Raises:
            ExportBusyError: If another export holds the pointer.
            BusyError: If any other activity holds the pointer.
        """
        if self._owner is not None:
            if owner == OWNER_EXPORT and self._owner == OWNER_EXPORT:
                raise ExportBusyError("Another export owns the active scene")
            raise BusyError(f"Active scene is locked by {self._owner}")
        self._claim_count += 1
        self._claim_token = self._claim_count
        self._owner = owner
        logger.debug(f"Active scene pointer claimed by {owner} (claim {self._claim_token})")
        return self._claim_token

    def release(self, token: Optional[int]) -> None:
        """Give up ownership. A token from an earlier or foreign claim is ignored."""
        if token is not None and token == self._claim_token:
            logger.debug(f"Active scene pointer released by {self._owner} (claim {token})")
            self._owner = None
            self._claim_token = None

    def _check_unlocked(self, owner: Optional[str]) -> None:
        if self._owner is not None and self._owner != owner:
            raise BusyError(f"Active scene is locked by {self._owner}")

    def select(self, scene_id: str, owner: Optional[str] = None) -> Scene:
        """Make a scene the active one."""
        self._check_unlocked(owner)
        scene = self.get(scene_id)
        self._active_id = scene_id
        return scene

    # -- edits -------------------------------------------------------------

    def add(self) -> Scene:
        """Append a scene styled like the active one and select it."""
        self._check_unlocked(None)
        template = self.active_scene
        scene = template.restyled(
            id=self._fresh_id(),
            text=PLACEHOLDER_TEXT.get(template.language, PLACEHOLDER_TEXT["en"]),
        )
        self._project.scenes.append(scene)
        self._active_id = scene.id
        logger.info(f"Added scene {scene.id}")
        return scene

    def delete(self, scene_id: str) -> None:
        """Remove a scene.

        Raises:
            ValidationError: If it is the only scene left.
            SceneNotFoundError: If no such scene exists.
        """
        self._check_unlocked(None)
        index = self.index_of(scene_id)
        if len(self._project.scenes) <= 1:
            raise ValidationError("Cannot delete the only scene")

        del self._project.scenes[index]
        if self._active_id == scene_id:
            self._active_id = self._project.scenes[0].id
        logger.info(f"Deleted scene {scene_id}")

    def update(self, scene: Scene) -> Scene:
        """Replace the scene with the same id by a full record."""
        index = self.index_of(scene.id)
        validated = self._validate(scene.model_dump())
        self._project.scenes[index] = validated
        return validated

    def patch(self, scene_id: str, **changes) -> Scene:
        """Merge field changes into a scene and store the result."""
        unknown = set(changes) - set(Scene.model_fields)
        if unknown:
            raise ValidationError(f"Unknown scene fields: {', '.join(sorted(unknown))}")
        if "id" in changes and changes["id"] != scene_id:
            raise ValidationError("Scene id cannot be changed")

        data = self.get(scene_id).model_dump()
        data.update(changes)
        return self.update(self._validate(data))

    def replace_all(self, scenes: Iterable[Scene]) -> None:
        """Replace the whole sequence and select its first scene."""
        self._check_unlocked(None)
        scenes = list(scenes)
        try:
            project = ProjectConfig(
                title=self._project.title,
                scenes=scenes,
                global_transition=self._project.global_transition,
                reading_buffer=self._project.reading_buffer,
            )
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid scene list: {e}") from e

        self._project = project
        self._active_id = project.scenes[0].id
        logger.info(f"Replaced scenes with {len(scenes)} new scenes")

    def import_text(self, content: Union[str, bytes]) -> List[Scene]:
        """Replace all scenes with one scene per paragraph of ``content``."""
        self._check_unlocked(None)
        scenes = scenes_from_text(content)
        self.replace_all(scenes)
        return scenes

    def import_file(self, path: Path) -> List[Scene]:
        self._check_unlocked(None)
        scenes = scenes_from_file(path)
        self.replace_all(scenes)
        return scenes

    def set_title(self, title: str) -> None:
        self._project.title = title

    def set_timing(
        self,
        global_transition: Optional[float] = None,
        reading_buffer: Optional[float] = None,
    ) -> None:
        """Change the global timing parameters."""
        data = self._project.model_dump()
        if global_transition is not None:
            data["global_transition"] = global_transition
        if reading_buffer is not None:
            data["reading_buffer"] = reading_buffer
        try:
            self._project = ProjectConfig.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid timing: {e}") from e

    def _fresh_id(self) -> str:
        existing = {scene.id for scene in self._project.scenes}
        scene_id = new_scene_id()
        while scene_id in existing:
            scene_id = new_scene_id()
        return scene_id

    @staticmethod
    def _validate(data: dict) -> Scene:
        try:
            return Scene.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid scene: {e}") from e
