"""Project snapshot model."""

import json
from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ImportFormatError, ValidationError
from .scene import Scene, DEFAULT_SCENE

YAML_SUFFIXES = (".yaml", ".yml")


class ProjectConfig(BaseModel):
    """Ordered scene sequence plus global timing parameters."""

    title: str = Field(default="Untitled Story", description="Project title")
    scenes: List[Scene] = Field(
        default_factory=lambda: [DEFAULT_SCENE.model_copy()],
        description="Ordered list of scenes",
        min_length=1,
    )
    global_transition: float = Field(
        1.0, alias="globalTransition", description="Pause between scenes during playback", ge=0, allow_inf_nan=False
    )
    reading_buffer: float = Field(
        1.5, alias="readingBuffer", description="Hold time after each animation finishes", ge=0, allow_inf_nan=False
    )

    class Config:
        """Pydantic config."""
        frozen = False
        populate_by_name = True

    @field_validator("scenes")
    @classmethod
    def _unique_ids(cls, scenes: List[Scene]) -> List[Scene]:
        seen = set()
        for scene in scenes:
            if scene.id in seen:
                raise ValueError(f"duplicate scene id: {scene.id}")
            seen.add(scene.id)
        return scenes

    @property
    def file_stem(self) -> str:
        """Title with whitespace runs replaced by underscores."""
        return "_".join(self.title.split()) or "Untitled"

    def to_dict(self) -> dict:
        """Serialize to the snapshot document layout."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectConfig":
        """Build a project from a snapshot document.

        Raises:
            ValidationError: If the document violates the data model.
        """
        if not isinstance(data, dict):
            raise ImportFormatError("Project snapshot must be a mapping")
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid project snapshot: {e}") from e

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> "ProjectConfig":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ImportFormatError(f"Project snapshot is not valid JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: Path) -> "ProjectConfig":
        """Load a project from a JSON or YAML file."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ImportFormatError(f"Cannot read project {path}: {e}") from e

        if Path(path).suffix.lower() in YAML_SUFFIXES:
            try:
                data = yaml.safe_load(text)
            except yaml.YAMLError as e:
                raise ImportFormatError(f"Project snapshot is not valid YAML: {e}") from e
            return cls.from_dict(data)
        return cls.from_json(text)

    def to_file(self, path: Path) -> Path:
        """Save the project as JSON, or YAML when the suffix asks for it."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix.lower() in YAML_SUFFIXES:
            with open(path, "w", encoding="utf-8") as f:
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False, allow_unicode=True, sort_keys=False)
        else:
            path.write_text(self.to_json() + "\n", encoding="utf-8")
        return path
