"""Asyncio front-end for ProjectStore.

Every call takes one lock, so operations on the project never interleave,
and disk-touching work runs in a worker thread via ``asyncio.to_thread``
to keep the event loop responsive.
"""

import asyncio
from pathlib import Path
from typing import Callable, Optional, TypeVar

from config.settings import Settings
from models.chapter import Chapter, ChapterId, ChapterVersion
from models.character import NovelSettings
from models.enums import ChapterStatus
from models.novel import Volume, VolumeId
from storage.project_store import ProjectStore

T = TypeVar("T")


async def _run_in_thread(func: Callable[..., T], *args) -> T:
    """Run ``func`` in a worker thread and wait for it even if cancelled.

    A running thread cannot be interrupted, so a cancelled caller keeps
    waiting (and keeps holding any lock it owns) until the thread is done,
    then re-raises the cancellation.
    """
    task = asyncio.ensure_future(asyncio.to_thread(func, *args))
    try:
        return await asyncio.shield(task)
    except asyncio.CancelledError:
        while not task.done():
            try:
                await asyncio.wait({task})
            except asyncio.CancelledError:
                continue
        if not task.cancelled():
            # Mark the outcome as retrieved; the caller only sees the cancellation.
            task.exception()
        raise


class AsyncProjectStore:
    """Serializes access to a single ProjectStore."""

    def __init__(self, store: ProjectStore):
        self._store = store
        self._lock = asyncio.Lock()

    @property
    def store(self) -> ProjectStore:
        """The wrapped store. Only safe to use while no call is in flight."""
        return self._store

    @classmethod
    async def create(
        cls, root: str | Path, title: str, settings: Optional[Settings] = None
    ) -> "AsyncProjectStore":
        """Create a project and its directory skeleton."""
        store = ProjectStore.create(root, title, settings)
        await _run_in_thread(store.initialize)
        return cls(store)

    @classmethod
    async def open(cls, root: str | Path, settings: Optional[Settings] = None) -> "AsyncProjectStore":
        store = await _run_in_thread(ProjectStore.load, root, settings)
        return cls(store)

    async def _io(self, func: Callable[..., T], *args) -> T:
        async with self._lock:
            return await _run_in_thread(func, *args)

    async def _read(self, func: Callable[..., T], *args) -> T:
        # In-memory reads still wait for a running mutation to finish.
        async with self._lock:
            return func(*args)

    # ---- Lifecycle ----

    async def persist(self):
        await self._io(self._store.persist)

    # ---- Volumes ----

    async def create_volume(self, title: str) -> VolumeId:
        return await self._io(self._store.create_volume, title)

    async def delete_volume(self, volume_id: str):
        await self._io(self._store.delete_volume, volume_id)

    async def rename_volume(self, volume_id: str, new_title: str):
        await self._io(self._store.rename_volume, volume_id, new_title)

    # ---- Chapters ----

    async def create_chapter(self, title: str, volume_id: Optional[str] = None) -> ChapterId:
        return await self._io(self._store.create_chapter, title, volume_id)

    async def delete_chapter(self, chapter_id: ChapterId):
        await self._io(self._store.delete_chapter, chapter_id)

    async def rename_chapter(self, chapter_id: ChapterId, new_title: str):
        await self._io(self._store.rename_chapter, chapter_id, new_title)

    async def reorder_chapters_in_volume(self, volume_id: str, ordered_ids: list[ChapterId]):
        await self._io(self._store.reorder_chapters_in_volume, volume_id, ordered_ids)

    async def move_chapter_to_volume(
        self, chapter_id: ChapterId, target_volume_id: str, target_position: int
    ):
        await self._io(self._store.move_chapter_to_volume, chapter_id, target_volume_id, target_position)

    async def update_chapter_status(self, chapter_id: ChapterId, status: ChapterStatus):
        await self._io(self._store.update_chapter_status, chapter_id, status)

    async def update_settings(self, settings: NovelSettings):
        await self._io(self._store.update_settings, settings)

    # ---- Versioning ----

    async def update_chapter_content(
        self, chapter_id: ChapterId, new_content: str, change_summary: Optional[str] = None
    ):
        await self._io(self._store.update_chapter_content, chapter_id, new_content, change_summary)

    async def get_version_history(self, chapter_id: ChapterId) -> list[ChapterVersion]:
        return await self._io(self._store.get_version_history, chapter_id)

    async def restore_version(self, chapter_id: ChapterId, version: int):
        await self._io(self._store.restore_version, chapter_id, version)

    # ---- Queries ----

    async def get_chapter(self, chapter_id: ChapterId) -> Optional[Chapter]:
        return await self._read(self._store.get_chapter, chapter_id)

    async def get_volume(self, volume_id: str) -> Optional[Volume]:
        return await self._read(self._store.get_volume, volume_id)

    async def all_chapters_in_order(self) -> list[Chapter]:
        return await self._read(self._store.all_chapters_in_order)

    async def chapters_for_volume(self, volume_id: str) -> list[Chapter]:
        return await self._read(self._store.chapters_for_volume, volume_id)

    async def chapter_content_path(self, chapter_id: ChapterId) -> Path:
        return await self._read(self._store.chapter_content_path, chapter_id)

    async def volumes(self) -> list[Volume]:
        return await self._read(lambda: list(self._store.volumes))

    async def chapter_count(self) -> int:
        return await self._read(lambda: self._store.chapter_count)

    async def total_word_count(self) -> int:
        return await self._read(lambda: self._store.total_word_count)
