"""Marker and chapter references embedded in timestamp expressions.

A reference is either a MarkerReference or a ChapterReference. Both hold a
BaseReference by value for the shared index/start/implicit data, and the
behavior that differs between them (equality, cloning, text form) lives in
the free functions below, which dispatch on the variant with ``match``.
"""

import re
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import ClassVar

from markertime.core.errors import ExpressionSyntaxError
from markertime.core.media import MarkerType
from markertime.core.reasons import InvalidReason


class ReferenceKind(StrEnum):
    """Discriminator for reference variants."""

    MARKER = "marker"
    CHAPTER = "chapter"


# Expression keys for each marker type, e.g. "I2" or "C@".
MARKER_TYPE_KEYS: dict[MarkerType, str] = {
    MarkerType.ANY: "M",
    MarkerType.INTRO: "I",
    MarkerType.CREDITS: "C",
    MarkerType.AD: "A",
}
KEY_MARKER_TYPES: dict[str, MarkerType] = {
    key: marker_type for marker_type, key in MARKER_TYPE_KEYS.items()
}

# Characters that have to be escaped to be matched literally.
_REGEX_SPECIAL = frozenset(".^$*+?{}[]()|\\/")


@dataclass
class BaseReference:
    """Index and side of a referenced marker or chapter.

    Attributes:
        index: 1-based position, negative values count from the end
        start: Use the item's start (True) or end (False)
        implicit: Whether start/end was inferred instead of written as S/E
    """

    index: int = 0
    start: bool = False
    implicit: bool = False

    def equals(self, other: "BaseReference", strict: bool = False) -> bool:
        """Compare the fields that affect the timestamp, and implicit if strict."""
        return (
            self.index == other.index
            and self.start == other.start
            and (not strict or self.implicit == other.implicit)
        )

    @property
    def suffix(self) -> str:
        """Explicit S/E suffix, empty when start/end was inferred."""
        if self.implicit:
            return ""
        return "S" if self.start else "E"


@dataclass(frozen=True)
class ChapterNameReference:
    """Chapter lookup by name, either a wildcard string or a literal regex."""

    pattern: re.Pattern[str]
    display_text: str
    is_regex: bool

    @classmethod
    def from_wildcard(cls, text: str) -> "ChapterNameReference":
        """Build a case-insensitive, anchored lookup from wildcard text.

        '*' matches any run of characters and '?' exactly one character.
        Backslash escapes '*', '?', '\\', ')' and other regex punctuation,
        and '\\t' is a tab.

        Raises:
            ExpressionSyntaxError: On an unsupported escape or a bad pattern
        """
        parts = ["^"]
        chars = iter(text)
        for char in chars:
            if char == "\\":
                escaped = next(chars, "")
                if escaped == "t":
                    parts.append(r"\t")
                elif escaped and escaped in _REGEX_SPECIAL:
                    parts.append("\\" + escaped)
                else:
                    raise ExpressionSyntaxError(
                        InvalidReason.bad_wildcard_escape(escaped)
                    )
            elif char == "*":
                parts.append(".*")
            elif char == "?":
                parts.append(".")
            elif char in _REGEX_SPECIAL:
                parts.append("\\" + char)
            else:
                parts.append(char)
        parts.append("$")

        source = "".join(parts)
        try:
            pattern = re.compile(source, re.IGNORECASE)
        except re.error as e:
            raise ExpressionSyntaxError(
                InvalidReason.bad_chapter_regex(f"/{source}/i", str(e))
            ) from e
        return cls(pattern=pattern, display_text=text, is_regex=False)

    @classmethod
    def from_regex(cls, source: str, flags: str = "") -> "ChapterNameReference":
        """Build a lookup from a user-written /regex/ with optional 'i' flag.

        Raises:
            ExpressionSyntaxError: If the regex does not compile
        """
        display_text = f"/{source}/{flags}"
        try:
            pattern = re.compile(source, re.IGNORECASE if "i" in flags else 0)
        except re.error as e:
            raise ExpressionSyntaxError(
                InvalidReason.bad_chapter_regex(display_text, str(e))
            ) from e
        return cls(pattern=pattern, display_text=display_text, is_regex=True)

    @property
    def ignore_case(self) -> bool:
        return bool(self.pattern.flags & re.IGNORECASE)

    @property
    def pattern_text(self) -> str:
        """Pattern in /source/flags form, as reported when nothing matches."""
        return f"/{self.pattern.pattern}/{'i' if self.ignore_case else ''}"

    def matches(self, name: str) -> bool:
        return self.pattern.search(name) is not None

    def equals(self, other: "ChapterNameReference", strict: bool = False) -> bool:
        """Compare patterns, and how they were written if strict."""
        if self.pattern_text != other.pattern_text:
            return False
        return not strict or (
            self.display_text == other.display_text
            and self.is_regex == other.is_regex
        )


@dataclass
class MarkerReference:
    """The Nth marker of a given type, e.g. "I1S" or "M-1"."""

    base: BaseReference
    marker_type: MarkerType = MarkerType.ANY

    kind: ClassVar[ReferenceKind] = ReferenceKind.MARKER


@dataclass
class ChapterReference:
    """The Nth chapter ("Ch2E") or the first chapter matching a name ("Ch(Intro*)")."""

    base: BaseReference = field(default_factory=BaseReference)
    name: ChapterNameReference | None = None

    kind: ClassVar[ReferenceKind] = ReferenceKind.CHAPTER


Reference = MarkerReference | ChapterReference


def clone_reference(ref: Reference) -> Reference:
    """Return a copy that shares no mutable state with ref."""
    return replace(ref, base=replace(ref.base))


def references_equal(a: Reference, b: Reference, strict: bool = False) -> bool:
    """Determine whether two references point at the same timestamp.

    With strict, how the reference was written (implicit S/E, wildcard vs
    regex) also has to match.
    """
    match a, b:
        case MarkerReference(), MarkerReference():
            return a.marker_type == b.marker_type and a.base.equals(b.base, strict)
        case ChapterReference(), ChapterReference():
            if not a.base.equals(b.base, strict):
                return False
            if a.name is None or b.name is None:
                return a.name is None and b.name is None
            return a.name.equals(b.name, strict)
        case _:
            return False


def reference_text(ref: Reference) -> str:
    """Canonical expression text of a reference, without the leading '='."""
    match ref:
        case MarkerReference(base=base, marker_type=marker_type):
            return f"{MARKER_TYPE_KEYS[marker_type]}{base.index}{base.suffix}"
        case ChapterReference(base=base, name=ChapterNameReference() as name):
            return f"Ch({name.display_text}){base.suffix}"
        case ChapterReference(base=base):
            return f"Ch{base.index}{base.suffix}"
    raise TypeError(f"Unknown reference type {type(ref).__name__}")
