"""Chapter data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import NewType

from models.enums import ChapterStatus

ChapterId = NewType("ChapterId", int)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Chapter:
    """A titled unit of prose with a position inside one volume.

    ``order`` mirrors the chapter's index in its volume's ``chapter_ids``
    and ``word_count`` is derived from ``content``; neither is a source
    of truth.
    """
    id: ChapterId
    title: str = ""
    order: int = 0
    volume_id: str = ""
    dir_path: Path = field(default_factory=Path)
    content: str = ""
    word_count: int = 0
    status: ChapterStatus = ChapterStatus.NOT_STARTED
    current_version: int = 0
    created_at: datetime = field(default_factory=utcnow)
    modified_at: datetime = field(default_factory=utcnow)

    def touch(self):
        self.modified_at = utcnow()


@dataclass(frozen=True)
class ChapterVersion:
    """Snapshot of a chapter's content before it was replaced."""
    version: int
    content: str = ""
    word_count: int = 0
    summary: str = ""
    timestamp: datetime = field(default_factory=utcnow)
