"""Parsed state of a timestamp expression."""

from dataclasses import dataclass, replace

from markertime.core.media import MarkerType
from markertime.core.references import (
    ChapterReference,
    MarkerReference,
    Reference,
    clone_reference,
    references_equal,
)


@dataclass
class ParseState:
    """Result of parsing a timestamp expression.

    Attributes:
        plain: Plain timestamp text, as opposed to an '=' expression
        valid: Whether the text parsed and any reference resolved
        invalid_reason: Why the expression is invalid, empty when valid
        uses_clock_format: Whether the timestamp is shown as clock time
            rather than milliseconds, None until a timestamp is seen
        ms: Millisecond offset, not including any reference
        marker_type: Type of marker to create, from an "I@" style prefix
        reference: The single marker or chapter reference, if any
    """

    plain: bool = True
    valid: bool = True
    invalid_reason: str = ""
    uses_clock_format: bool | None = None
    ms: int = 0
    marker_type: MarkerType | None = None
    reference: Reference | None = None

    def equals(self, other: "ParseState", strict: bool = False) -> bool:
        """Determine whether two states describe the same timestamp.

        Args:
            other: State to compare against
            strict: Also compare validity, clock format and how the
                reference was written, not just what affects the result
        """
        if (self.plain, self.ms, self.marker_type) != (
            other.plain,
            other.ms,
            other.marker_type,
        ):
            return False

        if strict and (
            self.valid != other.valid
            or self.invalid_reason != other.invalid_reason
            or self.uses_clock_format != other.uses_clock_format
        ):
            return False

        if self.reference is None or other.reference is None:
            return self.reference is None and other.reference is None

        return references_equal(self.reference, other.reference, strict)

    def clone(self) -> "ParseState":
        """Return a deep copy of this state."""
        reference = clone_reference(self.reference) if self.reference else None
        return replace(self, reference=reference)

    def marker_reference(self) -> MarkerReference | None:
        if isinstance(self.reference, MarkerReference):
            return self.reference
        return None

    def chapter_reference(self) -> ChapterReference | None:
        if isinstance(self.reference, ChapterReference):
            return self.reference
        return None
