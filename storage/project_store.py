"""File-backed project store: volumes, chapters and chapter history.

The store owns one ``Project`` and keeps it in step with the project's
directory tree. Reads are served from memory; every mutation writes the
files it affects before returning. Calls must be serialized by the
caller (see ``storage.async_store`` for a wrapper that does this).
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

from config.exceptions import (
    InvalidArgumentError,
    MetadataMissingError,
    NotFoundError,
    NovelStoreError,
)
from config.settings import Settings, get_settings
from models.chapter import Chapter, ChapterId, ChapterVersion, utcnow
from models.character import NovelSettings
from models.enums import ChapterStatus
from models.novel import Project, Volume, VolumeId
from models.serialization import (
    chapter_from_metadata,
    chapter_to_metadata,
    characters_from_json,
    plot_from_json,
    project_from_record,
    project_to_record,
    settings_to_json,
    to_json,
    version_from_json,
    version_to_json,
    world_from_json,
)
from storage.files import (
    ProjectLayout,
    ensure_dir,
    latest_version,
    list_subdirs,
    read_text,
    remove_tree,
    scan_versions,
    write_text,
)
from tools.text_utils import count_words

logger = logging.getLogger(__name__)


class ProjectStore:
    """Single-writer store for one novel project rooted at a directory."""

    def __init__(self, project: Project, settings: Optional[Settings] = None):
        self.project = project
        self.settings = settings or get_settings()
        self.layout = ProjectLayout(project.root_path, self.settings)

    # ---- Lifecycle ----

    @classmethod
    def create(
        cls, root: str | Path, title: str, settings: Optional[Settings] = None
    ) -> "ProjectStore":
        """Build a new in-memory project with one empty default volume.

        Nothing is written until ``initialize`` or ``persist`` is called.
        """
        settings = settings or get_settings()
        now = utcnow()
        project = Project(
            root_path=Path(root),
            title=title,
            volumes=[Volume(title=settings.default_volume_title, order=0, created_at=now, modified_at=now)],
            created_at=now,
            modified_at=now,
        )
        return cls(project, settings)

    def initialize(self):
        """Create the directory skeleton if needed, then persist."""
        ensure_dir(self.layout.metadata_dir)
        ensure_dir(self.layout.chapters_dir)
        ensure_dir(self.layout.drafts_dir)
        self.persist()
        logger.info("Initialized project '%s' at %s", self.project.title, self.layout.root)

    @classmethod
    def load(cls, root: str | Path, settings: Optional[Settings] = None) -> "ProjectStore":
        """Open an existing project and rebuild the chapter index from disk.

        Raises:
            MetadataMissingError: project.json does not exist.
            MetadataMalformedError: project.json (or a chapter, settings
                file) exists but cannot be parsed.
        """
        settings = settings or get_settings()
        layout = ProjectLayout(root, settings)
        if not layout.project_file.is_file():
            raise MetadataMissingError(layout.project_file)

        project = project_from_record(read_text(layout.project_file), layout.project_file)
        project.root_path = Path(root)
        project.settings = _load_settings(layout)

        store = cls(project, settings)
        store._reload_chapters()
        store._reconcile()
        logger.info(
            "Loaded project '%s' from %s: %d volume(s), %d chapter(s)",
            project.title, layout.root, len(project.volumes), len(project.chapters),
        )
        return store

    def persist(self):
        """Write project.json and the three settings documents."""
        layout = self.layout
        write_text(layout.project_file, to_json(project_to_record(self.project)))
        documents = settings_to_json(self.project.settings)
        write_text(layout.characters_file, documents["characters"])
        write_text(layout.world_file, documents["world"])
        write_text(layout.plot_file, documents["plot"])
        logger.debug("Persisted project metadata to %s", layout.metadata_dir)

    def _reload_chapters(self):
        """Replace the chapter index with what the chapters directory holds."""
        chapters: dict[ChapterId, Chapter] = {}
        for chapter_dir in list_subdirs(self.layout.chapters_dir):
            chapter = self._load_chapter_directory(chapter_dir)
            if chapter is None:
                continue
            if chapter.id in chapters:
                logger.warning(
                    "Chapter %s found in both %s and %s; keeping the first",
                    chapter.id, chapters[chapter.id].dir_path, chapter_dir,
                )
                continue
            chapters[chapter.id] = chapter
        self.project.chapters = chapters

    def _load_chapter_directory(self, chapter_dir: Path) -> Optional[Chapter]:
        metadata_file = ProjectLayout.chapter_metadata_file(chapter_dir)
        if not metadata_file.is_file():
            logger.debug("Skipping %s: no %s", chapter_dir, metadata_file.name)
            return None

        chapter = chapter_from_metadata(read_text(metadata_file), metadata_file)
        content_file = ProjectLayout.chapter_content_file(chapter_dir)
        if content_file.is_file():
            chapter.content = read_text(content_file)
        chapter.word_count = count_words(chapter.content)
        chapter.dir_path = chapter_dir

        latest = latest_version(ProjectLayout.history_dir(chapter_dir))
        chapter.current_version = latest + 1 if latest is not None else 0
        return chapter

    def _reconcile(self):
        """Repair the index after a crash left files and metadata out of step."""
        project = self.project
        placed: set[ChapterId] = set()

        for volume in project.volumes:
            kept = []
            for chapter_id in volume.chapter_ids:
                chapter = project.chapters.get(chapter_id)
                if chapter is None:
                    logger.warning("Dropping chapter %s from volume '%s': no chapter directory", chapter_id, volume.title)
                    continue
                if chapter_id in placed:
                    logger.warning("Dropping duplicate chapter %s from volume '%s'", chapter_id, volume.title)
                    continue
                if chapter.volume_id != volume.id:
                    logger.warning("Chapter %s listed in volume '%s'; updating its volume id", chapter_id, volume.title)
                    chapter.volume_id = volume.id
                placed.add(chapter_id)
                kept.append(chapter_id)
            volume.chapter_ids = kept

        orphans = sorted(
            (c for c in project.chapters.values() if c.id not in placed),
            key=lambda c: (c.order, c.id),
        )
        if orphans and not project.volumes:
            logger.warning("No volumes left for %d chapter(s); creating '%s'", len(orphans), self.settings.default_volume_title)
            project.volumes.append(Volume(title=self.settings.default_volume_title))
        for chapter in orphans:
            volume = project.find_volume(chapter.volume_id) or project.volumes[0]
            logger.warning("Chapter %s missing from every volume; appending to '%s'", chapter.id, volume.title)
            volume.chapter_ids.append(chapter.id)
            chapter.volume_id = volume.id

        project.renumber_volumes()
        for volume in project.volumes:
            project.renumber_chapters(volume)

        if project.chapters:
            project.next_chapter_id = max(project.next_chapter_id, max(project.chapters) + 1)

    # ---- Volume operations ----

    def create_volume(self, title: str) -> VolumeId:
        project = self.project
        volume = Volume(title=title, order=len(project.volumes))
        project.volumes.append(volume)
        project.touch()
        self.persist()
        logger.info("Created volume '%s' (%s)", title, volume.id)
        return volume.id

    def delete_volume(self, volume_id: str):
        """Delete a volume with every chapter it owns. Unknown ids are ignored."""
        project = self.project
        volume = project.find_volume(volume_id)
        if volume is None:
            logger.debug("delete_volume: unknown volume %s", volume_id)
            return

        for chapter_id in list(volume.chapter_ids):
            chapter = project.chapters.get(chapter_id)
            if chapter is not None:
                remove_tree(chapter.dir_path)
                del project.chapters[chapter_id]
            volume.chapter_ids.remove(chapter_id)

        project.volumes.remove(volume)
        project.renumber_volumes()
        project.touch()
        self.persist()
        logger.info("Deleted volume '%s' (%s)", volume.title, volume_id)

    def rename_volume(self, volume_id: str, new_title: str):
        volume = self.project.find_volume(volume_id)
        if volume is None:
            logger.debug("rename_volume: unknown volume %s", volume_id)
            return
        volume.title = new_title
        volume.touch()
        self.project.touch()
        self.persist()

    # ---- Chapter operations ----

    def create_chapter(self, title: str, volume_id: Optional[str] = None) -> ChapterId:
        """Create an empty chapter at the end of a volume.

        Args:
            title: Chapter title.
            volume_id: Target volume; the first volume when omitted.

        Raises:
            NotFoundError: The volume does not exist (or the project has
                no volumes at all).
        """
        project = self.project
        if volume_id is None:
            if not project.volumes:
                raise NotFoundError("volume", None, "Project has no volumes")
            volume = project.volumes[0]
        else:
            volume = project.find_volume(volume_id)
            if volume is None:
                raise NotFoundError("volume", volume_id)

        chapter_id, chapter_dir = self._allocate_chapter_dir()
        chapter = Chapter(
            id=chapter_id,
            title=title,
            order=len(volume.chapter_ids),
            volume_id=volume.id,
            dir_path=chapter_dir,
        )
        ensure_dir(chapter_dir)
        try:
            write_text(ProjectLayout.chapter_content_file(chapter_dir), "")
            self._write_chapter_metadata(chapter)
        except NovelStoreError:
            remove_tree(chapter_dir)
            raise

        project.chapters[chapter_id] = chapter
        volume.chapter_ids.append(chapter_id)
        volume.touch()
        project.touch()
        self.persist()
        logger.info("Created chapter %s '%s' in volume '%s'", chapter_id, title, volume.title)
        return chapter_id

    def _allocate_chapter_dir(self) -> tuple[ChapterId, Path]:
        # Directories left behind by an interrupted create are never reused.
        while True:
            chapter_id = self.project.allocate_chapter_id()
            chapter_dir = self.layout.chapter_dir(chapter_id)
            if not chapter_dir.exists():
                return chapter_id, chapter_dir
            logger.warning("Skipping chapter id %s: %s already exists", chapter_id, chapter_dir)

    def delete_chapter(self, chapter_id: ChapterId):
        project = self.project
        chapter = project.chapters.get(chapter_id)
        if chapter is None:
            logger.debug("delete_chapter: unknown chapter %s", chapter_id)
            return

        remove_tree(chapter.dir_path)
        volume = project.volume_of(chapter_id)
        if volume is not None:
            volume.chapter_ids.remove(chapter_id)
            project.renumber_chapters(volume)
            volume.touch()
        del project.chapters[chapter_id]
        project.touch()
        self.persist()
        logger.info("Deleted chapter %s '%s'", chapter_id, chapter.title)

    def rename_chapter(self, chapter_id: ChapterId, new_title: str):
        chapter = self.project.chapters.get(chapter_id)
        if chapter is None:
            logger.debug("rename_chapter: unknown chapter %s", chapter_id)
            return
        chapter.title = new_title
        chapter.touch()
        self._write_chapter_metadata(chapter)
        self.project.touch()
        self.persist()

    def reorder_chapters_in_volume(self, volume_id: str, ordered_ids: list[ChapterId]):
        """Replace a volume's chapter order.

        ``ordered_ids`` must be a permutation of the volume's current
        chapters. Nothing changes when validation fails.

        Raises:
            NotFoundError: The volume does not exist.
            InvalidArgumentError: An id is unknown, belongs to another
                volume, is repeated, or a member chapter is missing.
        """
        project = self.project
        volume = project.find_volume(volume_id)
        if volume is None:
            raise NotFoundError("volume", volume_id)

        members = set(volume.chapter_ids)
        seen = set()
        for chapter_id in ordered_ids:
            if chapter_id not in project.chapters:
                raise InvalidArgumentError(
                    f"Chapter {chapter_id} not found", {"chapter_id": chapter_id}
                )
            if chapter_id not in members:
                raise InvalidArgumentError(
                    f"Chapter {chapter_id} does not belong to volume {volume_id}",
                    {"chapter_id": chapter_id, "volume_id": volume_id},
                )
            if chapter_id in seen:
                raise InvalidArgumentError(
                    f"Chapter {chapter_id} listed more than once", {"chapter_id": chapter_id}
                )
            seen.add(chapter_id)

        missing = [cid for cid in volume.chapter_ids if cid not in seen]
        if missing:
            raise InvalidArgumentError(
                f"New order omits chapter(s) {missing} of volume {volume_id}",
                {"chapter_ids": missing, "volume_id": volume_id},
            )

        volume.chapter_ids = list(ordered_ids)
        project.renumber_chapters(volume)
        volume.touch()
        project.touch()
        self.persist()
        logger.info("Reordered %d chapter(s) in volume '%s'", len(ordered_ids), volume.title)

    def move_chapter_to_volume(
        self, chapter_id: ChapterId, target_volume_id: str, target_position: int
    ):
        """Move a chapter to ``target_position`` in another (or the same) volume.

        Positions past the end append. Both volumes' order caches are
        renumbered.
        """
        project = self.project
        chapter = project.chapters.get(chapter_id)
        if chapter is None:
            raise NotFoundError("chapter", chapter_id)
        target = project.find_volume(target_volume_id)
        if target is None:
            raise NotFoundError("volume", target_volume_id)

        source = project.volume_of(chapter_id)
        if source is not None:
            source.chapter_ids.remove(chapter_id)
            source.touch()

        position = max(0, min(target_position, len(target.chapter_ids)))
        target.chapter_ids.insert(position, chapter_id)
        target.touch()
        chapter.volume_id = target.id
        chapter.touch()

        if source is not None and source is not target:
            project.renumber_chapters(source)
        project.renumber_chapters(target)
        self._write_chapter_metadata(chapter)
        project.touch()
        self.persist()
        logger.info("Moved chapter %s to volume '%s' at position %d", chapter_id, target.title, position)

    def update_chapter_status(self, chapter_id: ChapterId, status: ChapterStatus):
        """Set a chapter's status. Unknown ids are ignored.

        Raises:
            InvalidArgumentError: ``status`` is not a ChapterStatus value.
        """
        try:
            status = ChapterStatus(status)
        except ValueError:
            raise InvalidArgumentError(
                f"Unknown chapter status: {status!r}", {"status": status}
            ) from None
        chapter = self.project.chapters.get(chapter_id)
        if chapter is None:
            logger.debug("update_chapter_status: unknown chapter %s", chapter_id)
            return
        chapter.status = status
        chapter.touch()
        self._write_chapter_metadata(chapter)
        self.project.touch()
        self.persist()

    def update_settings(self, settings: NovelSettings):
        self.project.settings = settings
        self.project.touch()
        self.persist()

    def _write_chapter_metadata(self, chapter: Chapter):
        metadata_file = ProjectLayout.chapter_metadata_file(chapter.dir_path)
        write_text(metadata_file, to_json(chapter_to_metadata(chapter)))

    # ---- Queries ----

    def get_chapter(self, chapter_id: ChapterId) -> Optional[Chapter]:
        return self.project.chapters.get(chapter_id)

    def get_volume(self, volume_id: str) -> Optional[Volume]:
        return self.project.find_volume(volume_id)

    @property
    def volumes(self) -> list[Volume]:
        return self.project.volumes

    @property
    def chapter_count(self) -> int:
        return len(self.project.chapters)

    @property
    def total_word_count(self) -> int:
        return sum(c.word_count for c in self.project.chapters.values())

    def all_chapters_in_order(self) -> list[Chapter]:
        """Every chapter, ordered by volume order then chapter order."""
        volume_order = {v.id: v.order for v in self.project.volumes}
        return sorted(
            self.project.chapters.values(),
            key=lambda c: (volume_order.get(c.volume_id, 0), c.order, c.id),
        )

    def chapters_for_volume(self, volume_id: str) -> list[Chapter]:
        volume = self.project.find_volume(volume_id)
        if volume is None:
            return []
        chapters = self.project.chapters
        return [chapters[cid] for cid in volume.chapter_ids if cid in chapters]

    def chapter_content_path(self, chapter_id: ChapterId) -> Path:
        chapter = self.project.chapters.get(chapter_id)
        if chapter is None:
            raise NotFoundError("chapter", chapter_id)
        return ProjectLayout.chapter_content_file(chapter.dir_path)

    # ---- Versioning ----

    def update_chapter_content(
        self, chapter_id: ChapterId, new_content: str, change_summary: Optional[str] = None
    ):
        """Replace a chapter's content, snapshotting the previous text.

        The old content is saved as ``history/v<current_version>.json``
        when it is non-empty and differs from ``new_content``; the version
        counter is bumped on every call. project.json is only rewritten
        when ``Settings.persist_on_content_update`` is set. Unknown ids
        are ignored.
        """
        chapter = self.project.chapters.get(chapter_id)
        if chapter is None:
            logger.debug("update_chapter_content: unknown chapter %s", chapter_id)
            return

        if chapter.content and chapter.content != new_content:
            self._save_version(chapter, change_summary)

        # The in-memory chapter only changes once both files are written.
        updated = replace(
            chapter,
            content=new_content,
            word_count=count_words(new_content),
            current_version=chapter.current_version + 1,
            modified_at=utcnow(),
        )
        write_text(ProjectLayout.chapter_content_file(chapter.dir_path), new_content)
        self._write_chapter_metadata(updated)

        chapter.content = updated.content
        chapter.word_count = updated.word_count
        chapter.current_version = updated.current_version
        chapter.modified_at = updated.modified_at
        self.project.touch()
        if self.settings.persist_on_content_update:
            self.persist()
        logger.debug("Chapter %s now at version %d", chapter_id, chapter.current_version)

    def _save_version(self, chapter: Chapter, summary: Optional[str]):
        version = ChapterVersion(
            version=chapter.current_version,
            content=chapter.content,
            word_count=count_words(chapter.content),
            summary=summary or self.settings.default_change_summary,
        )
        path = ProjectLayout.version_file(chapter.dir_path, version.version)
        ensure_dir(path.parent)
        write_text(path, version_to_json(version))
        logger.info("Saved chapter %s version %d", chapter.id, version.version)

    def get_version_history(self, chapter_id: ChapterId) -> list[ChapterVersion]:
        """Return saved versions of a chapter, most recent first."""
        chapter = self.project.chapters.get(chapter_id)
        if chapter is None:
            raise NotFoundError("chapter", chapter_id)

        versions = [
            version_from_json(read_text(path), path)
            for _, path in scan_versions(ProjectLayout.history_dir(chapter.dir_path))
        ]
        versions.sort(key=lambda v: v.version, reverse=True)
        return versions

    def restore_version(self, chapter_id: ChapterId, version: int):
        """Make a saved version the current content again.

        This is an ordinary content update: the text being replaced is
        itself saved and the version counter keeps increasing.
        """
        chapter = self.project.chapters.get(chapter_id)
        if chapter is None:
            raise NotFoundError("chapter", chapter_id)

        path = ProjectLayout.version_file(chapter.dir_path, version)
        if not path.is_file():
            raise NotFoundError("version", version, f"Version {version} of chapter {chapter_id} not found")

        snapshot = version_from_json(read_text(path), path)
        self.update_chapter_content(chapter_id, snapshot.content, f"Restored to version {version}")
        logger.info("Restored chapter %s to version %d", chapter_id, version)


def _load_settings(layout: ProjectLayout) -> NovelSettings:
    """Read the settings documents; a missing file means an empty list."""
    settings = NovelSettings()
    if layout.characters_file.is_file():
        settings.characters = characters_from_json(read_text(layout.characters_file), layout.characters_file)
    if layout.world_file.is_file():
        settings.world = world_from_json(read_text(layout.world_file), layout.world_file)
    if layout.plot_file.is_file():
        settings.plot_points = plot_from_json(read_text(layout.plot_file), layout.plot_file)
    return settings
