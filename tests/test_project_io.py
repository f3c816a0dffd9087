"""
Unit tests for project snapshot serialization.
"""

import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from lumina.errors import ImportFormatError, ValidationError
from lumina.models import AnimationType, ProjectConfig, Scene, WritingMode


class TestProjectSerialization:
    """Tests for ProjectConfig documents."""

    def test_document_uses_camel_case_keys(self, three_scene_project):
        data = three_scene_project.to_dict()

        assert data["globalTransition"] == 1.0
        assert data["readingBuffer"] == 1.5
        scene = data["scenes"][0]
        assert scene["fontSize"] == 48
        assert scene["fontFamily"] == "serif"
        assert scene["writingMode"] == "horizontal-tb"
        assert scene["animation"] == "fade-in"
        assert "visualPrompt" not in scene

    def test_json_file_round_trip(self, three_scene_project, tmp_path):
        path = three_scene_project.to_file(tmp_path / "story.json")
        assert ProjectConfig.from_file(path) == three_scene_project

    def test_yaml_file_round_trip(self, three_scene_project, tmp_path):
        project = three_scene_project.model_copy(deep=True)
        project.scenes[0] = project.scenes[0].restyled(
            text="竖排文字", language="zh", writing_mode=WritingMode.VERTICAL_RL, visual_prompt="ink wash"
        )
        path = project.to_file(tmp_path / "story.yaml")

        assert "竖排文字" in path.read_text(encoding="utf-8")
        assert ProjectConfig.from_file(path) == project

    def test_loads_camel_case_document(self):
        document = {
            "title": "Imported",
            "scenes": [{"id": "1", "text": "Hi", "animation": "zoom-in", "fontSize": 30}],
            "globalTransition": 0.5,
            "readingBuffer": 2,
        }
        project = ProjectConfig.from_json(json.dumps(document))

        assert project.global_transition == 0.5
        assert project.scenes[0].animation is AnimationType.ZOOM_IN
        assert project.scenes[0].font_size == 30

    def test_file_stem_replaces_whitespace(self):
        assert ProjectConfig(title="My  Long\tStory").file_stem == "My_Long_Story"


class TestProjectValidation:
    """Tests for snapshot invariants."""

    def test_rejects_empty_scene_list(self):
        with pytest.raises(ValidationError):
            ProjectConfig.from_dict({"title": "Empty", "scenes": []})

    def test_rejects_duplicate_ids(self):
        scenes = [{"id": "1", "text": "a"}, {"id": "1", "text": "b"}]
        with pytest.raises(ValidationError):
            ProjectConfig.from_dict({"scenes": scenes})

    def test_rejects_unknown_animation(self):
        with pytest.raises(ValidationError):
            ProjectConfig.from_dict({"scenes": [{"id": "1", "animation": "spin"}]})

    def test_rejects_non_mapping(self):
        with pytest.raises(ImportFormatError):
            ProjectConfig.from_json("[1, 2, 3]")

    def test_rejects_malformed_json(self):
        with pytest.raises(ImportFormatError):
            ProjectConfig.from_json("{not json")

    def test_scene_requires_positive_duration(self):
        with pytest.raises(PydanticValidationError):
            Scene(id="x", duration=0)

    @pytest.mark.parametrize("color", ["#abc", "#a3b8cc", "rgb(10, 20, 30)", "white"])
    def test_accepts_drawable_colors(self, color):
        assert Scene(id="x", color=color, background=color).color == color

    @pytest.mark.parametrize("field", ["color", "background"])
    def test_rejects_unknown_color(self, field):
        with pytest.raises(PydanticValidationError):
            Scene(id="x", **{field: "not-a-color"})

    def test_unknown_color_in_snapshot_is_rejected_on_load(self, three_scene_project):
        document = three_scene_project.to_dict()
        document["scenes"][0]["background"] = "#12345z"

        with pytest.raises(ValidationError):
            ProjectConfig.from_json(json.dumps(document))
