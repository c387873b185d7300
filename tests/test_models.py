"""Tests for data models and their JSON codecs."""

import json
from pathlib import Path

import pytest

from config.exceptions import MetadataMalformedError
from models.chapter import Chapter, ChapterId, ChapterVersion
from models.character import CharacterProfile, NovelSettings, PlotPoint, WorldSetting
from models.enums import ChapterStatus
from models.novel import Project, Volume
from models.serialization import (
    chapter_from_metadata,
    chapter_to_metadata,
    characters_from_json,
    project_from_record,
    project_to_record,
    settings_to_json,
    to_json,
    version_from_json,
    version_to_json,
)


def _project(tmp_path) -> Project:
    volume = Volume(title="Part One")
    chapter = Chapter(
        id=ChapterId(4),
        title="Arrival",
        volume_id=volume.id,
        dir_path=tmp_path / "chapters" / "chapter-4",
        content="secret text",
        word_count=2,
        status=ChapterStatus.DRAFT,
        current_version=3,
    )
    volume.chapter_ids.append(chapter.id)
    return Project(
        root_path=tmp_path,
        title="Test Novel",
        volumes=[volume],
        chapters={chapter.id: chapter},
        settings=NovelSettings(characters=[CharacterProfile(name="Ann")]),
        next_chapter_id=5,
    )


class TestProjectModel:
    def test_allocate_chapter_id_is_monotonic(self, tmp_path):
        project = Project(root_path=tmp_path)
        assert [project.allocate_chapter_id() for _ in range(3)] == [0, 1, 2]
        assert project.next_chapter_id == 3

    def test_renumber_volumes(self, tmp_path):
        project = Project(root_path=tmp_path, volumes=[Volume(order=4), Volume(order=9)])
        project.renumber_volumes()
        assert [v.order for v in project.volumes] == [0, 1]

    def test_volume_of(self, tmp_path):
        project = _project(tmp_path)
        assert project.volume_of(ChapterId(4)) is project.volumes[0]
        assert project.volume_of(ChapterId(99)) is None

    def test_volume_ids_are_unique(self):
        assert len({Volume().id for _ in range(50)}) == 50


class TestChapterCodec:
    def test_metadata_excludes_content(self, tmp_path):
        chapter = _project(tmp_path).chapters[ChapterId(4)]
        data = chapter_to_metadata(chapter)
        assert "content" not in data
        assert data["status"] == "Draft"
        assert data["dir_path"] == str(chapter.dir_path)

    def test_metadata_round_trip(self, tmp_path):
        chapter = _project(tmp_path).chapters[ChapterId(4)]
        path = tmp_path / "metadata.json"
        restored = chapter_from_metadata(to_json(chapter_to_metadata(chapter)), path)
        assert restored.id == 4
        assert restored.title == "Arrival"
        assert restored.status == ChapterStatus.DRAFT
        assert restored.content == ""
        assert restored.created_at == chapter.created_at

    def test_invalid_json_is_malformed(self, tmp_path):
        with pytest.raises(MetadataMalformedError):
            chapter_from_metadata("{not json", tmp_path / "metadata.json")

    def test_wrong_shape_is_malformed(self, tmp_path):
        with pytest.raises(MetadataMalformedError):
            chapter_from_metadata('{"id": "abc"}', tmp_path / "metadata.json")

    def test_non_object_is_malformed(self, tmp_path):
        with pytest.raises(MetadataMalformedError):
            chapter_from_metadata("[1, 2]", tmp_path / "metadata.json")


class TestVersionCodec:
    def test_version_json_fields(self):
        version = ChapterVersion(version=2, content="a b", word_count=2, summary="edit")
        data = json.loads(version_to_json(version))
        assert data["version"] == 2
        assert data["summary"] == "edit"
        assert "timestamp" in data

    def test_missing_version_number_is_malformed(self, tmp_path):
        with pytest.raises(MetadataMalformedError):
            version_from_json('{"content": "x"}', tmp_path / "v1.json")


class TestProjectCodec:
    def test_record_has_no_chapter_content_or_settings_bodies(self, tmp_path):
        record = project_to_record(_project(tmp_path))
        assert "settings" not in record
        assert record["settings_summary"] == {"characters": 1, "world": 0, "plot_points": 0}
        for chapter in record["chapters"].values():
            assert "content" not in chapter
        assert "secret text" not in to_json(record)

    def test_record_round_trip(self, tmp_path):
        project = _project(tmp_path)
        path = tmp_path / ".novel" / "project.json"
        restored = project_from_record(to_json(project_to_record(project)), path)
        assert restored.title == "Test Novel"
        assert restored.next_chapter_id == 5
        assert [v.id for v in restored.volumes] == [v.id for v in project.volumes]
        assert restored.volumes[0].chapter_ids == [4]
        assert list(restored.chapters) == [4]
        assert restored.chapters[ChapterId(4)].content == ""
        assert restored.settings == NovelSettings()

    def test_missing_root_path_defaults_to_grandparent(self, tmp_path):
        path = tmp_path / ".novel" / "project.json"
        restored = project_from_record('{"title": "T"}', path)
        assert restored.root_path == Path(tmp_path)
        assert restored.volumes == []


class TestSettingsCodec:
    def test_settings_documents(self, tmp_path):
        settings = NovelSettings(
            characters=[CharacterProfile(name="Ann", age=30, relationships={"Bob": "brother"})],
            world=[WorldSetting(name="Magic", rules=["no resurrection"])],
            plot_points=[PlotPoint(title="Inciting incident", chapter_ids=[0])],
        )
        documents = settings_to_json(settings)
        assert set(documents) == {"characters", "world", "plot"}
        characters = characters_from_json(documents["characters"], tmp_path / "characters.json")
        assert characters == settings.characters
