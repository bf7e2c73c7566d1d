"""Timestamp expression parsing, evaluation and rendering.

Two input forms are accepted:

* Plain timestamps: clock time ("1:23.456") or raw milliseconds ("83456").
* Advanced expressions, which start with '=' and consist of:
  * An optional marker type prefix ("I@", "C@", "A@", "M@") naming the type
    of marker to create. Only valid first, only for start times, and never
    together with a reference.
  * Up to one reference, either a marker ("I1S": start of the first intro,
    "C-1": last credits marker, "M2": second marker of any type) or a
    chapter ("Ch3E", "Ch(Opening*)", "Ch(/^Intro/i)").
  * Any number of plain timestamps joined with '+' or '-'. A reference can
    be added but never subtracted.

Without an S/E suffix, chapter references use the same side as the input
(start inputs read the chapter start), while marker references use the
opposite side (start inputs read the marker end).
"""

import math
import re
from collections.abc import Sequence

import structlog

from markertime.core.errors import (
    ExpressionError,
    ExpressionSyntaxError,
    MediaItemRequiredError,
)
from markertime.core.media import Chapter, Marker
from markertime.core.reasons import InvalidReason
from markertime.core.references import (
    KEY_MARKER_TYPES,
    MARKER_TYPE_KEYS,
    BaseReference,
    ChapterNameReference,
    ChapterReference,
    MarkerReference,
    ReferenceKind,
    reference_text,
)
from markertime.core.resolution import anchor_ms, resolve_reference
from markertime.core.state import ParseState
from markertime.formats.timestamp import (
    TimestampParseError,
    format_timestamp,
    is_clock_format,
    parse_timestamp,
)
from markertime.utils.config import get_settings

logger = structlog.get_logger()

_TIME_CHARS = frozenset("0123456789.:")
_OPERATORS = frozenset("+-")
_CHAPTER_PREFIX = "Ch"
_MARKER_REF = re.compile(r"(?P<type>[MICA])(?P<index>-?[0-9]+)(?P<side>[SE])?")
_CHAPTER_INDEX = re.compile(r"(?P<index>-?[0-9]+)(?P<side>[SE])?")
_SIDE = re.compile(r"[SE]")


class TimeExpression:
    """Parses and evaluates the timestamp expression of a single input.

    Args:
        markers: Markers of the media item being edited, ordered by start.
            None, together with chapters=None, means no media item is in
            scope and references cannot be resolved yet.
        chapters: Chapters of the media item, in file order
        is_end: Whether the expression is for an end timestamp
        plain_only: Reject '=' expressions (e.g. bulk shift)
    """

    def __init__(
        self,
        markers: Sequence[Marker] | None = None,
        chapters: Sequence[Chapter] | None = None,
        *,
        is_end: bool = False,
        plain_only: bool = False,
    ) -> None:
        self._has_media_item = markers is not None or chapters is not None
        self._markers: tuple[Marker, ...] = tuple(
            sorted(markers or (), key=lambda marker: marker.start)
        )
        self._chapters: tuple[Chapter, ...] = tuple(chapters or ())
        self._is_end = is_end
        self._plain_only = plain_only
        self._use_cache = get_settings().parse_cache

        self._state = ParseState()
        self._text = ""
        self._matched: Marker | Chapter | None = None
        # Text that produced (or was rendered from) the current state.
        self._last_text: str | None = None

    @property
    def is_end(self) -> bool:
        return self._is_end

    @property
    def has_media_item(self) -> bool:
        return self._has_media_item

    @property
    def state(self) -> ParseState:
        """Copy of the current parse state."""
        return self._state.clone()

    def is_advanced(self) -> bool:
        """Return whether the expression needs media item data to evaluate."""
        return self._state.reference is not None

    def parse(self, text: str, force: bool = False) -> ParseState:
        """Parse text into a new state.

        Args:
            text: Raw input text
            force: Parse even if text matches the last parsed text

        Returns:
            A copy of the parsed state. Invalid input is reported through
            valid/invalid_reason, never raised.
        """
        text = text.strip()
        if self._use_cache and not force and text == self._last_text:
            logger.debug("parse_cache_hit", text=text)
            return self._state.clone()

        self._state = ParseState()
        self._matched = None
        self._text = text
        self._last_text = text

        try:
            self._parse(text)
        except ExpressionError as e:
            self._set_invalid(e.reason)
            logger.debug("expression_invalid", text=text, reason=e.reason)

        return self._state.clone()

    def update_state(self, state: ParseState) -> "TimeExpression":
        """Replace the current state with a copy of another one.

        Used by bulk operations to apply one expression to many media items
        without re-parsing text. The reference is resolved against this
        expression's own markers and chapters.
        """
        self._state = state.clone()
        self._matched = None
        # Shown by to_string if this item rejects the state
        self._text = self.to_string() if state.valid else ""
        self._last_text = None
        if self._has_media_item:
            try:
                self._validate_reference()
            except ExpressionError as e:
                self._set_invalid(e.reason)
        logger.debug(
            "state_applied",
            valid=self._state.valid,
            resolved=self._matched is not None,
        )
        return self

    def ms(self, final: bool = False) -> int | float | None:
        """Evaluate the expression.

        Args:
            final: The value is about to be committed. Bare marker
                references are nudged by 1ms (start -1, end +1) so the new
                marker doesn't share a boundary with the referenced one.

        Returns:
            Milliseconds, NaN if the expression is invalid, or None if it
            has a reference but no media item is in scope.
        """
        state = self._state
        if not state.valid:
            return math.nan

        ref = state.reference
        if ref is None:
            return state.ms

        if self._matched is None:
            return None

        ms = state.ms + anchor_ms(ref, self._matched)
        if not final or state.ms != 0 or not isinstance(ref, MarkerReference):
            return ms

        if ref.base.start:
            return ms if ms == 0 else ms - 1
        return ms + 1

    def set_ms(self, new_ms: int) -> "TimeExpression":
        """Set the evaluated timestamp, adjusting the offset around any reference.

        Without a resolved reference this sets the raw offset.
        """
        ref = self._state.reference
        if ref is None or self._matched is None:
            self._state.ms = new_ms
        else:
            self._state.ms = new_ms - anchor_ms(ref, self._matched)
        self._last_text = None
        return self

    def to_string(self) -> str:
        """Render the state as canonical text.

        Advanced expressions always come out as '=' + type + reference +
        offset, regardless of how they were typed. Invalid input is returned
        unchanged.
        """
        state = self._state
        if not state.valid:
            return self._remember(self._text)

        if state.plain:
            if state.uses_clock_format:
                return self._remember(format_timestamp(state.ms))
            return self._remember(str(state.ms))

        type_text = ""
        if state.marker_type is not None:
            type_text = MARKER_TYPE_KEYS[state.marker_type] + "@"

        ref = state.reference
        ref_text = reference_text(ref) if ref is not None else ""

        time_text = ""
        if state.ms != 0 or ref is None:
            if state.uses_clock_format is False:
                time_text = str(state.ms)
            else:
                time_text = format_timestamp(state.ms, minify=True)

        operator = "+" if ref_text and time_text and state.ms >= 0 else ""
        return self._remember(f"={type_text}{ref_text}{operator}{time_text}")

    def __str__(self) -> str:
        return self.to_string()

    @staticmethod
    def in_text_reference(text: str, cursor: int) -> bool:
        """Return whether cursor sits inside a chapter name, e.g. "Ch(Op|ening)".

        Inside a name, characters that are otherwise shortcuts are just text.
        """
        inside = False
        in_regex = False
        i = 0
        end = min(cursor, len(text))
        while i < end:
            if not inside:
                if text.startswith(_CHAPTER_PREFIX + "(", i) and i + 3 <= cursor:
                    inside = True
                    in_regex = text[i + 3 : i + 4] == "/"
                    i += 4 if in_regex else 3
                    continue
                i += 1
                continue

            char = text[i]
            if char == "\\":
                i += 2
                continue
            if in_regex and char == "/":
                in_regex = False
            elif not in_regex and char == ")":
                inside = False
            i += 1

        return inside

    def _remember(self, text: str) -> str:
        self._last_text = text
        return text

    def _set_invalid(self, reason: str) -> None:
        self._state.valid = False
        self._state.invalid_reason = reason

    def _parse(self, text: str) -> None:
        state = self._state
        if not text:
            state.uses_clock_format = True
            return

        if text[0] != "=":
            try:
                state.ms = parse_timestamp(text)
            except TimestampParseError as e:
                raise ExpressionSyntaxError(
                    InvalidReason.invalid_timestamp(text)
                ) from e
            state.uses_clock_format = is_clock_format(text)
            return

        if self._plain_only:
            raise ExpressionSyntaxError(InvalidReason.plain_only())

        state.plain = False
        self._parse_advanced(text)

        # An expression made only of references defaults to clock format
        if state.uses_clock_format is None:
            state.uses_clock_format = True

        if self._has_media_item:
            self._validate_reference()

    def _parse_advanced(self, text: str) -> None:
        operator: str | None = None
        after_term = False
        at_start = True
        i = 1
        while i < len(text):
            char = text[i]
            if char.isspace():
                i += 1
                continue

            if char in _OPERATORS:
                if operator is not None:
                    raise ExpressionSyntaxError(
                        InvalidReason.double_operator(operator + char)
                    )
                operator = char
                after_term = False
                at_start = False
                i += 1
                continue

            if char in KEY_MARKER_TYPES and text[i + 1 : i + 2] == "@":
                self._parse_marker_type(char, at_start)
                at_start = False
                i += 2
                continue

            is_chapter = text.startswith(_CHAPTER_PREFIX, i)
            if is_chapter or char in KEY_MARKER_TYPES:
                if after_term:
                    raise ExpressionSyntaxError(InvalidReason.no_operator())
                kind = ReferenceKind.CHAPTER if is_chapter else ReferenceKind.MARKER
                self._check_reference_allowed(kind, subtracted=operator == "-")
                if is_chapter:
                    i = self._parse_chapter_reference(text, i)
                else:
                    i = self._parse_marker_reference(text, i)
            elif char in _TIME_CHARS:
                if after_term:
                    raise ExpressionSyntaxError(InvalidReason.no_operator())
                i = self._parse_time(text, i, negative=operator == "-")
            else:
                raise ExpressionSyntaxError(
                    InvalidReason.unexpected_character(char, i)
                )

            operator = None
            after_term = True
            at_start = False

    def _parse_marker_type(self, key: str, at_start: bool) -> None:
        if self._is_end:
            raise ExpressionSyntaxError(InvalidReason.marker_type_in_end_input())
        if not at_start:
            raise ExpressionSyntaxError(InvalidReason.marker_type_not_at_start())
        self._state.marker_type = KEY_MARKER_TYPES[key]

    def _check_reference_allowed(self, kind: ReferenceKind, subtracted: bool) -> None:
        state = self._state
        if state.reference is not None:
            raise ExpressionSyntaxError(InvalidReason.multiple_references())
        if subtracted:
            raise ExpressionSyntaxError(InvalidReason.subtracted_reference(kind))

    def _check_reference_parsed(self, base: BaseReference, named: bool) -> None:
        if self._state.marker_type is not None:
            raise ExpressionSyntaxError(InvalidReason.marker_type_with_reference())
        if not named and base.index == 0:
            raise ExpressionSyntaxError(InvalidReason.zero_reference_index())

    def _parse_marker_reference(self, text: str, i: int) -> int:
        match = _MARKER_REF.match(text, i)
        if match is None:
            raise ExpressionSyntaxError(
                InvalidReason.invalid_reference(ReferenceKind.MARKER)
            )

        side = match.group("side")
        base = BaseReference(
            index=_parse_index(match.group("index"), ReferenceKind.MARKER),
            # Implicit marker references read the opposite side of the input
            start=side == "S" if side else self._is_end,
            implicit=side is None,
        )
        self._check_reference_parsed(base, named=False)
        self._state.reference = MarkerReference(
            base=base, marker_type=KEY_MARKER_TYPES[match.group("type")]
        )
        return match.end()

    def _parse_chapter_reference(self, text: str, i: int) -> int:
        i += len(_CHAPTER_PREFIX)
        name: ChapterNameReference | None = None
        index = 0
        if text[i : i + 1] == "(":
            name, i = self._parse_chapter_name(text, i + 1)
            side_match = _SIDE.match(text, i)
            side = side_match.group() if side_match else None
        else:
            match = _CHAPTER_INDEX.match(text, i)
            if match is None:
                raise ExpressionSyntaxError(
                    InvalidReason.invalid_reference(ReferenceKind.CHAPTER)
                )
            index = _parse_index(match.group("index"), ReferenceKind.CHAPTER)
            side = match.group("side")
            i = match.end("index")

        if side:
            i += 1

        base = BaseReference(
            index=index,
            # Implicit chapter references read the same side as the input
            start=side == "S" if side else not self._is_end,
            implicit=side is None,
        )
        self._check_reference_parsed(base, named=name is not None)
        self._state.reference = ChapterReference(base=base, name=name)
        return i

    @staticmethod
    def _parse_chapter_name(text: str, i: int) -> tuple[ChapterNameReference, int]:
        """Parse the inside of "Ch(...)", starting just after the '('.

        Returns:
            The name reference and the position just after the closing ')'
        """
        unterminated = ExpressionSyntaxError(
            InvalidReason.unterminated_chapter_reference()
        )

        if text[i : i + 1] == "/":
            end = _find_unescaped(text, i + 1, "/")
            if end is None:
                raise unterminated
            source = text[i + 1 : end]
            end += 1
            flags = ""
            if text[end : end + 1] == "i":
                flags = "i"
                end += 1
            if text[end : end + 1] != ")":
                raise unterminated
            return ChapterNameReference.from_regex(source, flags), end + 1

        end = _find_unescaped(text, i, ")")
        if end is None:
            raise unterminated
        return ChapterNameReference.from_wildcard(text[i:end]), end + 1

    def _parse_time(self, text: str, i: int, negative: bool) -> int:
        end = i
        while end < len(text) and text[end] in _TIME_CHARS:
            end += 1

        term = text[i:end]
        try:
            ms = parse_timestamp(term, allow_negative=False)
        except TimestampParseError as e:
            raise ExpressionSyntaxError(InvalidReason.invalid_timestamp(term)) from e

        state = self._state
        state.ms += -ms if negative else ms
        # Any clock-format term makes the whole expression clock format
        state.uses_clock_format = bool(state.uses_clock_format) or is_clock_format(
            term
        )
        return end

    def _validate_reference(self) -> None:
        """Resolve the reference against the media item's markers/chapters.

        Raises:
            MediaItemRequiredError: If no media item is in scope
            ReferenceResolutionError: If the reference points nowhere
            ExpressionSyntaxError: If the reference makes the result negative
        """
        if not self._has_media_item:
            raise MediaItemRequiredError()

        state = self._state
        ref = state.reference
        if not state.valid or ref is None:
            return

        item = resolve_reference(ref, self._markers, self._chapters)
        if state.ms + anchor_ms(ref, item) < 0:
            raise ExpressionSyntaxError(
                InvalidReason.negative_timestamp_with_reference()
            )
        self._matched = item


def _find_unescaped(text: str, start: int, target: str) -> int | None:
    """Index of the first target character not preceded by a backslash escape."""
    i = start
    while i < len(text):
        char = text[i]
        if char == "\\":
            i += 2
            continue
        if char == target:
            return i
        i += 1
    return None


def _parse_index(digits: str, kind: ReferenceKind) -> int:
    try:
        return int(digits)
    except ValueError as e:
        raise ExpressionSyntaxError(InvalidReason.invalid_reference(kind)) from e
