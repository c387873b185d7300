"""Storage package: project store, async wrapper, and on-disk layout."""

from storage.async_store import AsyncProjectStore
from storage.files import ProjectLayout
from storage.project_store import ProjectStore

__all__ = [
    "ProjectStore",
    "AsyncProjectStore",
    "ProjectLayout",
]
