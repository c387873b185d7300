"""Enumerations for chapter status tracking."""

from enum import Enum


class ChapterStatus(str, Enum):
    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    DRAFT = "Draft"
    REVIEW = "Review"
    COMPLETE = "Complete"
