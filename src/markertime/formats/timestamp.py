"""Clock and millisecond timestamp parser and serializer."""

import re

_DIGITS = re.compile(r"[0-9]+")

_MS_PER_SECOND = 1000
_MS_PER_MINUTE = 60 * _MS_PER_SECOND
_MS_PER_HOUR = 60 * _MS_PER_MINUTE


class TimestampParseError(Exception):
    """Exception raised when a timestamp cannot be parsed."""

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"Could not parse '{text}' as a timestamp")


def is_clock_format(text: str) -> bool:
    """Return whether the text uses clock notation rather than raw milliseconds."""
    return ":" in text or "." in text


def _is_digits(text: str) -> bool:
    return _DIGITS.fullmatch(text) is not None


def _parse_clock(text: str, original: str) -> int:
    """Parse [[H:]M:]S[.fff] into milliseconds."""
    clock, _, fraction = text.partition(".")
    if "." in fraction or (fraction and not _is_digits(fraction)):
        raise TimestampParseError(original)

    parts = clock.split(":")
    if len(parts) > 3:
        raise TimestampParseError(original)

    if len(parts) == 1 and not parts[0]:
        # ".5" is fine, "." is not
        if not fraction:
            raise TimestampParseError(original)
        parts = ["0"]

    leading, *trailing = parts
    if not _is_digits(leading):
        raise TimestampParseError(original)

    for part in trailing:
        if not _is_digits(part) or len(part) > 2 or int(part) >= 60:
            raise TimestampParseError(original)

    units = [_MS_PER_HOUR, _MS_PER_MINUTE, _MS_PER_SECOND][-len(parts) :]
    ms = sum(int(part) * unit for part, unit in zip(parts, units, strict=True))

    # Only millisecond precision is kept
    if fraction:
        ms += int(fraction[:3].ljust(3, "0"))

    return ms


def parse_timestamp(text: str, *, allow_negative: bool = True) -> int:
    """Parse a clock-format or millisecond timestamp.

    Args:
        text: Timestamp such as "1:23.456", "83.456" or "83456"
        allow_negative: Whether a leading '-' is accepted

    Returns:
        The timestamp in milliseconds

    Raises:
        TimestampParseError: If the text is not a valid timestamp

    Notes:
        - Surrounding whitespace is ignored, inner whitespace is not
        - Bare digits are milliseconds, anything with ':' or '.' is clock time
        - The leading clock field is unbounded ("90:00" is 90 minutes), the
          remaining minute/second fields must be below 60
        - Fractions are truncated to milliseconds ("1.0001" is 1000)
    """
    value = text.strip()
    negative = value.startswith("-")
    body = value[1:] if negative else value
    if not body or (negative and not allow_negative):
        raise TimestampParseError(value)

    try:
        if is_clock_format(body):
            ms = _parse_clock(body, value)
        elif _is_digits(body):
            ms = int(body)
        else:
            raise TimestampParseError(value)
    except ValueError as e:
        # Digit runs past the int conversion limit
        raise TimestampParseError(value) from e

    return -ms if negative else ms


def format_timestamp(ms: int, *, minify: bool = False) -> str:
    """Serialize milliseconds as clock text.

    Args:
        ms: Timestamp in milliseconds, may be negative
        minify: Drop zero padding on the leading field and trailing
            zeros of the fraction ("0:59.8" instead of "00:59.800")

    Returns:
        Clock text, with an hour field only when hours are non-zero
    """
    sign = "-" if ms < 0 else ""
    remaining = abs(ms)
    hours, remaining = divmod(remaining, _MS_PER_HOUR)
    minutes, remaining = divmod(remaining, _MS_PER_MINUTE)
    seconds, millis = divmod(remaining, _MS_PER_SECOND)

    if not minify:
        time = f"{minutes:02d}:{seconds:02d}.{millis:03d}"
        if hours > 0:
            time = f"{hours}:{time}"
        return sign + time

    if hours > 0:
        time = f"{hours}:{minutes:02d}:{seconds:02d}"
    else:
        time = f"{minutes}:{seconds:02d}"

    if millis:
        time += "." + f"{millis:03d}".rstrip("0")

    return sign + time
