"""Marker and chapter domain models for a single media item."""

from dataclasses import dataclass
from enum import StrEnum


class MarkerType(StrEnum):
    """Marker types as stored in the Plex database.

    ANY only appears in expressions, where it matches every other type.
    """

    ANY = "any"
    INTRO = "intro"
    CREDITS = "credits"
    AD = "commercial"


@dataclass(frozen=True)
class Marker:
    """Single timestamped marker of an episode or movie."""

    marker_type: MarkerType
    start: int
    end: int
    index: int = 0

    def __post_init__(self):
        """Validate marker constraints."""
        if self.marker_type is MarkerType.ANY:
            raise ValueError("Marker type must be intro, credits or commercial")
        if self.start < 0:
            raise ValueError(f"Marker start must be non-negative, got {self.start}")
        if self.start >= self.end:
            raise ValueError(
                f"Start time {self.start} must be before end time {self.end}"
            )


@dataclass(frozen=True)
class Chapter:
    """Single chapter embedded in a media file."""

    name: str
    start: int
    end: int

    def __post_init__(self):
        """Validate chapter constraints."""
        if self.start < 0:
            raise ValueError(f"Chapter start must be non-negative, got {self.start}")
        if self.end < self.start:
            raise ValueError(
                f"Chapter end {self.end} must not be before start {self.start}"
            )
