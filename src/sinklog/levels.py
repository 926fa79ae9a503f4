"""
Level and color taxonomy.

Severity runs the other way from stdlib logging: 0 is the most severe level
and larger numbers are chattier. A taxonomy is immutable and is replaced as a
whole, never merged field by field.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


DEFAULT_LEVELS: dict[str, int] = {
    "error": 0,
    "debug": 1,
    "warn": 2,
    "data": 3,
    "info": 4,
    "verbose": 5,
    "silly": 6,
}

DEFAULT_COLORS: dict[str, str] = {
    "silly": "rainbow",
    "input": "grey",
    "verbose": "cyan",
    "prompt": "grey",
    "info": "green",
    "data": "grey",
    "help": "cyan",
    "warn": "yellow",
    "debug": "magenta",
    "error": "red",
}


class Taxonomy(BaseModel):
    """
    Level name → severity and level/category name → color name.

    Usage:
        tax = Taxonomy(levels={"fatal": 0, "info": 1}, colors={"fatal": "red"})
        tax.severity("info")   # 1
        tax.color_for("fatal") # "red"
    """

    model_config = ConfigDict(frozen=True)

    levels: dict[str, int]
    colors: dict[str, str] = {}

    @field_validator("levels")
    @classmethod
    def validate_levels(cls, v: dict[str, int]) -> dict[str, int]:
        if not v:
            raise ValueError("taxonomy must define at least one level")
        for name, severity in v.items():
            if severity < 0:
                raise ValueError(f"Level '{name}' has negative severity {severity}")
        return v

    def severity(self, level: str) -> Optional[int]:
        """Numeric severity for a level name, None if the level is unknown."""
        return self.levels.get(level)

    def color_for(self, name: str) -> Optional[str]:
        return self.colors.get(name)

    def resolve(self, level: int | str) -> int:
        """Convert a level name or severity to a severity. Raises on unknown names."""
        if isinstance(level, int):
            return level
        severity = self.levels.get(level)
        if severity is None:
            raise ValueError(
                f"Unknown log level '{level}'. "
                f"Valid levels: {', '.join(self.levels)}"
            )
        return severity

    @property
    def names(self) -> tuple[str, ...]:
        """Level names ordered from most to least severe."""
        return tuple(sorted(self.levels, key=self.levels.__getitem__))


DEFAULT_TAXONOMY = Taxonomy(levels=DEFAULT_LEVELS, colors=DEFAULT_COLORS)
