"""Custom exception hierarchy for the novel project store."""

from pathlib import Path
from typing import Optional


class NovelStoreError(Exception):
    """Base exception for all project store errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# ---- Lookup Errors ----

class NotFoundError(NovelStoreError):
    """A chapter, volume or version id is unknown."""

    def __init__(self, kind: str, identifier, message: str = ""):
        msg = message or f"{kind.capitalize()} not found: {identifier}"
        super().__init__(msg, {"kind": kind, "id": identifier})
        self.kind = kind
        self.identifier = identifier


# ---- Storage Errors ----

class StorageIOError(NovelStoreError):
    """Filesystem read/write/create/remove failed."""

    def __init__(self, operation: str, path: str | Path, reason: str = ""):
        msg = f"Failed to {operation} {path}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg, {"operation": operation, "path": str(path)})
        self.operation = operation
        self.path = Path(path)


class ParseError(NovelStoreError):
    """A metadata or version file could not be deserialized."""

    def __init__(self, path: str | Path, message: str = ""):
        msg = message or f"Failed to parse {path}"
        super().__init__(msg, {"path": str(path)})
        self.path = Path(path)


class MetadataMissingError(ParseError):
    """The file to parse does not exist."""

    def __init__(self, path: str | Path):
        super().__init__(path, f"Metadata file missing: {path}")


class MetadataMalformedError(ParseError):
    """The file exists but its content is not valid."""

    def __init__(self, path: str | Path, reason: str = ""):
        msg = f"Metadata file malformed: {path}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(path, msg)
        self.reason = reason


# ---- Validation Errors ----

class ValidationError(NovelStoreError):
    """Input validation failed."""


class InvalidArgumentError(ValidationError):
    """An argument is inconsistent with the current project state."""


class InvalidConfigError(ValidationError):
    """Configuration value is invalid."""
