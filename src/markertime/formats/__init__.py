"""Timestamp text formats."""

from markertime.formats.timestamp import (
    TimestampParseError,
    format_timestamp,
    is_clock_format,
    parse_timestamp,
)

__all__ = [
    "TimestampParseError",
    "format_timestamp",
    "is_clock_format",
    "parse_timestamp",
]
