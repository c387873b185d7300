"""Character and world-building data models.

These records are stored and returned as-is; the project store never
interprets them.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class CharacterProfile:
    """Represents a character card."""
    name: str = ""
    age: Optional[int] = None
    appearance: str = ""
    personality: str = ""
    background: str = ""
    goals: str = ""
    relationships: dict[str, str] = field(default_factory=dict)  # {character_name: relationship}


@dataclass
class WorldSetting:
    """Represents a world-building element."""
    name: str = ""  # e.g. "Magic System", "Geography"
    description: str = ""
    rules: list[str] = field(default_factory=list)


@dataclass
class PlotPoint:
    """Represents a plot point in the overall story structure."""
    title: str = ""
    description: str = ""
    chapter_ids: list[int] = field(default_factory=list)
    order: int = 0


@dataclass
class NovelSettings:
    characters: list[CharacterProfile] = field(default_factory=list)
    world: list[WorldSetting] = field(default_factory=list)
    plot_points: list[PlotPoint] = field(default_factory=list)
