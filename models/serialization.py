"""JSON codecs for project, chapter, version and settings records.

Records are plain dataclasses; pydantic ``TypeAdapter``s do the
validation on the way in and the JSON conversion on the way out.
"""

import json
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from config.exceptions import MetadataMalformedError
from models.chapter import Chapter, ChapterVersion
from models.character import CharacterProfile, NovelSettings, PlotPoint, WorldSetting
from models.novel import Project

_project_adapter = TypeAdapter(Project)
_chapter_adapter = TypeAdapter(Chapter)
_version_adapter = TypeAdapter(ChapterVersion)
_characters_adapter = TypeAdapter(list[CharacterProfile])
_world_adapter = TypeAdapter(list[WorldSetting])
_plot_adapter = TypeAdapter(list[PlotPoint])


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def _loads(raw: str, path: Path) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise MetadataMalformedError(path, str(e)) from e


def _validate(adapter: TypeAdapter, data: Any, path: Path):
    try:
        return adapter.validate_python(data)
    except PydanticValidationError as e:
        raise MetadataMalformedError(path, f"{e.error_count()} validation error(s)") from e


# ---- Chapter ----

def chapter_to_metadata(chapter: Chapter) -> dict:
    """Chapter record minus its content, which lives in content.md."""
    data = _chapter_adapter.dump_python(chapter, mode="json")
    data.pop("content", None)
    return data


def chapter_from_metadata(raw: str, path: Path) -> Chapter:
    data = _loads(raw, path)
    if not isinstance(data, dict):
        raise MetadataMalformedError(path, "expected a JSON object")
    data.pop("content", None)
    return _validate(_chapter_adapter, data, path)


# ---- Version ----

def version_to_json(version: ChapterVersion) -> str:
    return to_json(_version_adapter.dump_python(version, mode="json"))


def version_from_json(raw: str, path: Path) -> ChapterVersion:
    return _validate(_version_adapter, _loads(raw, path), path)


# ---- Project ----

def project_to_record(project: Project) -> dict:
    """Serialize the project without chapter content and settings bodies.

    Settings are written to their own files; only their sizes are kept
    here so the root file is readable on its own.
    """
    data = _project_adapter.dump_python(project, mode="json", exclude={"settings"})
    for chapter_data in data["chapters"].values():
        chapter_data.pop("content", None)
    data["settings_summary"] = {
        "characters": len(project.settings.characters),
        "world": len(project.settings.world),
        "plot_points": len(project.settings.plot_points),
    }
    return data


def project_from_record(raw: str, path: Path) -> Project:
    data = _loads(raw, path)
    if not isinstance(data, dict):
        raise MetadataMalformedError(path, "expected a JSON object")
    data.pop("settings_summary", None)
    data.pop("settings", None)
    # <root>/.novel/project.json
    data.setdefault("root_path", str(path.parent.parent))
    return _validate(_project_adapter, data, path)


# ---- Settings ----

def settings_to_json(settings: NovelSettings) -> dict[str, str]:
    """Return the JSON text of each settings document keyed by file stem."""
    return {
        "characters": to_json(_characters_adapter.dump_python(settings.characters, mode="json")),
        "world": to_json(_world_adapter.dump_python(settings.world, mode="json")),
        "plot": to_json(_plot_adapter.dump_python(settings.plot_points, mode="json")),
    }


def characters_from_json(raw: str, path: Path) -> list[CharacterProfile]:
    return _validate(_characters_adapter, _loads(raw, path), path)


def world_from_json(raw: str, path: Path) -> list[WorldSetting]:
    return _validate(_world_adapter, _loads(raw, path), path)


def plot_from_json(raw: str, path: Path) -> list[PlotPoint]:
    return _validate(_plot_adapter, _loads(raw, path), path)
