"""Resolve expression references against a media item's markers and chapters."""

from collections.abc import Iterable, Sequence
from typing import TypeVar

from markertime.core.errors import ReferenceResolutionError
from markertime.core.media import Chapter, Marker, MarkerType
from markertime.core.reasons import InvalidReason
from markertime.core.references import ChapterReference, MarkerReference, Reference

T = TypeVar("T")


def _nth(items: Sequence[T], index: int) -> T | None:
    """Return the 1-based index-th item, counting from the end if negative."""
    ordered: Iterable[T] = items if index > 0 else reversed(items)
    target = abs(index)
    for position, item in enumerate(ordered, start=1):
        if position == target:
            return item
    return None


def resolve_marker(ref: MarkerReference, markers: Sequence[Marker]) -> Marker:
    """Find the marker a reference points to.

    Raises:
        ReferenceResolutionError: If there are fewer matching markers than
            the reference's index asks for
    """
    if ref.marker_type is MarkerType.ANY:
        candidates = list(markers)
        counted = "markers"
    else:
        candidates = [m for m in markers if m.marker_type == ref.marker_type]
        counted = f"{ref.marker_type} markers"

    marker = _nth(candidates, ref.base.index)
    if marker is None:
        raise ReferenceResolutionError(
            InvalidReason.bad_reference_index("marker", ref.base.index, counted)
        )
    return marker


def resolve_chapter(ref: ChapterReference, chapters: Sequence[Chapter]) -> Chapter:
    """Find the chapter a reference points to, by name or by index.

    Name lookups return the first chapter whose name matches.

    Raises:
        ReferenceResolutionError: If no chapter matches the name, or the
            index is out of range
    """
    if ref.name is not None:
        for chapter in chapters:
            if ref.name.matches(chapter.name):
                return chapter
        raise ReferenceResolutionError(
            InvalidReason.no_chapter_match(ref.name.pattern_text)
        )

    chapter = _nth(chapters, ref.base.index)
    if chapter is None:
        raise ReferenceResolutionError(
            InvalidReason.bad_reference_index("chapter", ref.base.index, "chapters")
        )
    return chapter


def resolve_reference(
    ref: Reference,
    markers: Sequence[Marker],
    chapters: Sequence[Chapter],
) -> Marker | Chapter:
    """Resolve either kind of reference."""
    match ref:
        case MarkerReference():
            return resolve_marker(ref, markers)
        case ChapterReference():
            return resolve_chapter(ref, chapters)
    raise TypeError(f"Unknown reference type {type(ref).__name__}")


def anchor_ms(ref: Reference, item: Marker | Chapter) -> int:
    """Timestamp of the side of the resolved item the reference uses."""
    return item.start if ref.base.start else item.end
