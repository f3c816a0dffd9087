"""
Unit tests for the scene store.

Tests cover:
- Adding scenes with locale-aware placeholders
- Deleting scenes, including the last one
- Full and partial scene updates
- Active-scene ownership
"""

import pytest

from lumina.editor import OWNER_EXPORT, OWNER_PLAYBACK, PLACEHOLDER_TEXT, SceneStore
from lumina.errors import BusyError, ExportBusyError, SceneNotFoundError, ValidationError
from lumina.models import DEFAULT_SCENE, AnimationType, FontFamily, ProjectConfig


class TestSceneStoreBasics:
    """Tests for construction and lookups."""

    def test_new_store_has_default_scene(self):
        store = SceneStore()

        assert len(store) == 1
        assert store.active_scene.text == DEFAULT_SCENE.text
        assert store.title == "Untitled Story"

    def test_store_copies_project(self, three_scene_project):
        store = SceneStore(three_scene_project)
        store.patch("a", text="Changed")

        assert three_scene_project.scenes[0].text == "First"

    def test_project_snapshot_is_a_copy(self, store):
        snapshot = store.project
        snapshot.scenes.clear()

        assert len(store) == 3

    def test_get_unknown_scene(self, store):
        with pytest.raises(SceneNotFoundError) as exc_info:
            store.get("missing")
        assert exc_info.value.scene_id == "missing"


class TestAddScene:
    """Tests for SceneStore.add."""

    def test_clones_active_style_with_placeholder(self, store):
        store.patch("b", color="#ff0000", animation=AnimationType.ZOOM_IN)
        store.select("b")
        scene = store.add()

        assert scene.text == PLACEHOLDER_TEXT["en"]
        assert scene.color == "#ff0000"
        assert scene.animation is AnimationType.ZOOM_IN
        assert store.scenes[-1] == scene
        assert store.active_id == scene.id

    def test_chinese_placeholder(self, store):
        store.patch("a", language="zh", font_family=FontFamily.ZH_SERIF)
        store.select("a")

        assert store.add().text == "新篇章开始了..."

    def test_ids_are_unique(self, store):
        ids = {store.add().id for _ in range(20)}

        assert len(ids) == 20
        assert not ids & {"a", "b", "c"}


class TestDeleteScene:
    """Tests for SceneStore.delete."""

    def test_delete_only_scene_is_rejected(self):
        store = SceneStore()
        only = store.active_scene

        with pytest.raises(ValidationError):
            store.delete(only.id)
        assert len(store) == 1
        assert store.active_scene == only

    def test_delete_active_selects_first(self, store):
        store.select("b")
        store.delete("b")

        assert [s.id for s in store.scenes] == ["a", "c"]
        assert store.active_id == "a"

    def test_delete_first_while_active(self, store):
        store.delete("a")
        assert store.active_id == "b"

    def test_delete_inactive_keeps_selection(self, store):
        store.select("c")
        store.delete("a")
        assert store.active_id == "c"

    def test_delete_unknown(self, store):
        with pytest.raises(SceneNotFoundError):
            store.delete("missing")
        assert len(store) == 3


class TestUpdateScene:
    """Tests for SceneStore.update and SceneStore.patch."""

    def test_update_replaces_record(self, store):
        changed = store.get("b").restyled(text="New text", font_size=64)
        store.update(changed)

        assert store.get("b").text == "New text"
        assert store.get("b").font_size == 64

    def test_patch_accepts_aliases_by_field_name(self, store):
        scene = store.patch("a", writing_mode="vertical-rl", letter_spacing=4)
        assert scene.writing_mode.is_vertical
        assert scene.letter_spacing == 4

    def test_patch_rejects_invalid_values(self, store):
        with pytest.raises(ValidationError):
            store.patch("a", duration=0)
        with pytest.raises(ValidationError):
            store.patch("a", delay=float("inf"))
        assert store.get("a").duration == 2

    def test_patch_rejects_unknown_fields(self, store):
        with pytest.raises(ValidationError):
            store.patch("a", sparkle=True)

    def test_patch_cannot_change_id(self, store):
        with pytest.raises(ValidationError):
            store.patch("a", id="z")

    def test_set_timing(self, store):
        store.set_timing(global_transition=0.0, reading_buffer=3.0)
        assert store.global_transition == 0.0
        assert store.reading_buffer == 3.0

    def test_set_timing_rejects_negative(self, store):
        with pytest.raises(ValidationError):
            store.set_timing(reading_buffer=-1)
        assert store.reading_buffer == 1.5


class TestActivePointer:
    """Tests for claim/release of the active-scene pointer."""

    def test_owner_may_select(self, store):
        store.claim(OWNER_EXPORT)
        store.select("c", owner=OWNER_EXPORT)
        assert store.active_id == "c"

    def test_others_are_rejected(self, store):
        store.claim(OWNER_PLAYBACK)

        with pytest.raises(BusyError):
            store.claim(OWNER_EXPORT)
        with pytest.raises(BusyError):
            store.add()
        with pytest.raises(BusyError):
            store.import_text("One\nTwo")
        assert len(store) == 3

    def test_content_edits_allowed_while_locked(self, store):
        store.claim(OWNER_PLAYBACK)
        store.patch("a", text="Typed during playback")
        assert store.get("a").text == "Typed during playback"

    def test_release_with_stale_token_is_noop(self, store):
        stale = store.claim(OWNER_EXPORT)
        store.release(stale)
        current = store.claim(OWNER_PLAYBACK)

        store.release(stale)
        store.release(None)
        assert store.owner == OWNER_PLAYBACK

        store.release(current)
        assert store.owner is None
        store.select("b")

    def test_claims_do_not_nest(self, store):
        store.claim(OWNER_EXPORT)
        with pytest.raises(ExportBusyError):
            store.claim(OWNER_EXPORT)

    def test_second_playback_claim_rejected(self, store):
        store.claim(OWNER_PLAYBACK)
        with pytest.raises(BusyError):
            store.claim(OWNER_PLAYBACK)


class TestReplaceAll:
    """Tests for bulk replacement."""

    def test_import_text_replaces_and_selects_first(self, store):
        scenes = store.import_text("Alpha\nBeta")

        assert [s.text for s in store.scenes] == ["Alpha", "Beta"]
        assert store.active_id == scenes[0].id

    def test_replace_all_rejects_empty(self, store):
        with pytest.raises(ValidationError):
            store.replace_all([])
        assert len(store) == 3

    def test_replace_all_rejects_duplicate_ids(self, store, make_scene):
        with pytest.raises(ValidationError):
            store.replace_all([make_scene("x"), make_scene("x")])
