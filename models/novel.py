"""Project and volume data models."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import NewType, Optional

from models.chapter import Chapter, ChapterId, utcnow
from models.character import NovelSettings

VolumeId = NewType("VolumeId", str)


def new_volume_id() -> VolumeId:
    return VolumeId(uuid.uuid4().hex)


@dataclass
class Volume:
    """A named, ordered group of chapters.

    ``chapter_ids`` is the authoritative chapter order for the volume.
    """
    id: VolumeId = field(default_factory=new_volume_id)
    title: str = ""
    order: int = 0
    chapter_ids: list[ChapterId] = field(default_factory=list)
    description: str = ""
    created_at: datetime = field(default_factory=utcnow)
    modified_at: datetime = field(default_factory=utcnow)

    def touch(self):
        self.modified_at = utcnow()


@dataclass
class Project:
    """Root aggregate: volumes, the chapter arena, and inert settings."""
    root_path: Path
    title: str = ""
    volumes: list[Volume] = field(default_factory=list)
    chapters: dict[ChapterId, Chapter] = field(default_factory=dict)
    settings: NovelSettings = field(default_factory=NovelSettings)
    next_chapter_id: int = 0
    created_at: datetime = field(default_factory=utcnow)
    modified_at: datetime = field(default_factory=utcnow)

    def touch(self):
        self.modified_at = utcnow()

    def find_volume(self, volume_id: str) -> Optional[Volume]:
        for volume in self.volumes:
            if volume.id == volume_id:
                return volume
        return None

    def volume_of(self, chapter_id: ChapterId) -> Optional[Volume]:
        """Return the volume whose chapter list holds ``chapter_id``."""
        for volume in self.volumes:
            if chapter_id in volume.chapter_ids:
                return volume
        return None

    def allocate_chapter_id(self) -> ChapterId:
        chapter_id = ChapterId(self.next_chapter_id)
        self.next_chapter_id += 1
        return chapter_id

    def renumber_volumes(self):
        for order, volume in enumerate(self.volumes):
            volume.order = order

    def renumber_chapters(self, volume: Volume):
        for order, chapter_id in enumerate(volume.chapter_ids):
            chapter = self.chapters.get(chapter_id)
            if chapter is not None:
                chapter.order = order
