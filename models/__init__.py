"""Models package: project entities, settings records, and enums."""

from models.novel import Project, Volume, VolumeId, new_volume_id
from models.chapter import Chapter, ChapterId, ChapterVersion
from models.character import CharacterProfile, WorldSetting, PlotPoint, NovelSettings
from models.enums import ChapterStatus

__all__ = [
    "Project",
    "Volume",
    "VolumeId",
    "new_volume_id",
    "Chapter",
    "ChapterId",
    "ChapterVersion",
    "CharacterProfile",
    "WorldSetting",
    "PlotPoint",
    "NovelSettings",
    "ChapterStatus",
]
