"""On-disk layout of a project root and the file I/O helpers behind it.

Every helper translates ``OSError`` into ``StorageIOError`` carrying the
path and the operation that failed.
"""

import logging
import os
import re
import shutil
from pathlib import Path
from typing import Optional

from config.exceptions import StorageIOError
from config.settings import Settings

logger = logging.getLogger(__name__)

PROJECT_FILE = "project.json"
CHARACTERS_FILE = "characters.json"
WORLD_FILE = "world.json"
PLOT_FILE = "plot.json"

CHAPTER_METADATA_FILE = "metadata.json"
CHAPTER_CONTENT_FILE = "content.md"
HISTORY_DIR = "history"

_VERSION_FILE_RE = re.compile(r"^v(\d+)\.json$")


class ProjectLayout:
    """Resolves every path of a project root.

    ::

        <root>/
          .novel/project.json, characters.json, world.json, plot.json
          chapters/chapter-<id>/metadata.json, content.md, history/v<N>.json
          drafts/
    """

    def __init__(self, root: str | Path, settings: Settings):
        self.root = Path(root)
        self.settings = settings

    @property
    def metadata_dir(self) -> Path:
        return self.root / self.settings.metadata_dir_name

    @property
    def project_file(self) -> Path:
        return self.metadata_dir / PROJECT_FILE

    @property
    def characters_file(self) -> Path:
        return self.metadata_dir / CHARACTERS_FILE

    @property
    def world_file(self) -> Path:
        return self.metadata_dir / WORLD_FILE

    @property
    def plot_file(self) -> Path:
        return self.metadata_dir / PLOT_FILE

    @property
    def chapters_dir(self) -> Path:
        return self.root / self.settings.chapters_dir_name

    @property
    def drafts_dir(self) -> Path:
        return self.root / self.settings.drafts_dir_name

    def chapter_dir(self, chapter_id: int) -> Path:
        return self.chapters_dir / f"chapter-{chapter_id}"

    # Paths inside a chapter directory. The directory is passed in rather
    # than derived from the id, since a loaded chapter keeps the directory
    # it was found in.

    @staticmethod
    def chapter_metadata_file(chapter_dir: Path) -> Path:
        return chapter_dir / CHAPTER_METADATA_FILE

    @staticmethod
    def chapter_content_file(chapter_dir: Path) -> Path:
        return chapter_dir / CHAPTER_CONTENT_FILE

    @staticmethod
    def history_dir(chapter_dir: Path) -> Path:
        return chapter_dir / HISTORY_DIR

    @staticmethod
    def version_file(chapter_dir: Path, version: int) -> Path:
        return chapter_dir / HISTORY_DIR / f"v{version}.json"


def parse_version_number(filename: str) -> Optional[int]:
    """Return N for a ``v<N>.json`` file name, otherwise None."""
    match = _VERSION_FILE_RE.match(filename)
    if not match:
        return None
    return int(match.group(1))


def scan_versions(history_dir: Path) -> list[tuple[int, Path]]:
    """List ``(version, path)`` for every snapshot file, unsorted."""
    if not history_dir.is_dir():
        return []
    found = []
    try:
        for entry in history_dir.iterdir():
            version = parse_version_number(entry.name)
            if version is not None and entry.is_file():
                found.append((version, entry))
    except OSError as e:
        raise StorageIOError("list", history_dir, str(e)) from e
    return found


def latest_version(history_dir: Path) -> Optional[int]:
    versions = [v for v, _ in scan_versions(history_dir)]
    return max(versions) if versions else None


def list_subdirs(path: Path) -> list[Path]:
    if not path.is_dir():
        return []
    try:
        return sorted(p for p in path.iterdir() if p.is_dir())
    except OSError as e:
        raise StorageIOError("list", path, str(e)) from e


def ensure_dir(path: Path):
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageIOError("create directory", path, str(e)) from e


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise StorageIOError("read", path, str(e)) from e


def write_text(path: Path, content: str):
    """Write a file through a temp file and ``os.replace``.

    Readers never see a half-written file, though several files written
    for one operation are still not updated together.
    """
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(content, encoding="utf-8")
        os.replace(tmp, path)
    except OSError as e:
        raise StorageIOError("write", path, str(e)) from e
    logger.debug("Wrote %s (%d chars)", path, len(content))


def remove_tree(path: Path):
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise StorageIOError("remove", path, str(e)) from e
    logger.debug("Removed %s", path)
