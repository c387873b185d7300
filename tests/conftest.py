"""Shared pytest fixtures for the novel project store test suite."""

import pytest


# ---------------------------------------------------------------------------
# Settings fixture
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path):
    """Return a Settings instance that ignores any local .env file."""
    from config.settings import Settings
    return Settings(_env_file=None, log_dir=tmp_path / "logs")


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def project_root(tmp_path):
    """Return the root directory for a test project."""
    return tmp_path / "novel"


@pytest.fixture
def store(project_root, settings):
    """Return an initialized ProjectStore with the default volume only."""
    from storage.project_store import ProjectStore
    store = ProjectStore.create(project_root, "Test Novel", settings)
    store.initialize()
    return store


@pytest.fixture
def default_volume_id(store):
    return store.volumes[0].id


@pytest.fixture
def three_chapters(store):
    """Create three chapters in the default volume and return their ids."""
    return [store.create_chapter(f"Chapter {i}") for i in range(1, 4)]


def assert_volume_consistent(store, volume):
    """Chapter order caches mirror the volume's chapter_ids."""
    for index, chapter_id in enumerate(volume.chapter_ids):
        chapter = store.project.chapters[chapter_id]
        assert chapter.order == index
        assert chapter.volume_id == volume.id
    owned = [c for c in store.project.chapters.values() if c.volume_id == volume.id]
    assert len(owned) == len(volume.chapter_ids)


def assert_project_consistent(store):
    """Every structural invariant of a project holds."""
    project = store.project
    assert [v.order for v in project.volumes] == list(range(len(project.volumes)))
    listed = [cid for v in project.volumes for cid in v.chapter_ids]
    assert len(listed) == len(set(listed))
    assert sorted(listed) == sorted(project.chapters)
    for volume in project.volumes:
        assert_volume_consistent(store, volume)
    for chapter in project.chapters.values():
        assert chapter.dir_path.is_dir()
        assert chapter.word_count == len(chapter.content.split())
    chapters_dir = store.layout.chapters_dir
    if chapters_dir.exists():
        on_disk = {p.name for p in chapters_dir.iterdir() if p.is_dir()}
        assert on_disk == {c.dir_path.name for c in project.chapters.values()}


@pytest.fixture
def check_invariants():
    """Return a callable asserting every structural invariant of a store."""
    return assert_project_consistent
