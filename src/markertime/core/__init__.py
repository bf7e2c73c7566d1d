"""Timestamp expression engine."""

from markertime.core.errors import (
    ExpressionError,
    ExpressionSyntaxError,
    MediaItemRequiredError,
    ReferenceResolutionError,
)
from markertime.core.expression import TimeExpression
from markertime.core.media import Chapter, Marker, MarkerType
from markertime.core.reasons import InvalidReason
from markertime.core.references import (
    BaseReference,
    ChapterNameReference,
    ChapterReference,
    MarkerReference,
    Reference,
    ReferenceKind,
)
from markertime.core.state import ParseState

__all__ = [
    "BaseReference",
    "Chapter",
    "ChapterNameReference",
    "ChapterReference",
    "ExpressionError",
    "ExpressionSyntaxError",
    "InvalidReason",
    "Marker",
    "MarkerReference",
    "MarkerType",
    "MediaItemRequiredError",
    "ParseState",
    "Reference",
    "ReferenceKind",
    "ReferenceResolutionError",
    "TimeExpression",
]
