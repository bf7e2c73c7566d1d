"""Input-field helpers built on TimeExpression.

Keyboard shortcuts nudge the current timestamp. '-'/'=' are the big steps,
and shift ('_'/'+') makes them bigger. '['/']' are the small steps, and
shift ('{'/'}') makes them smaller. Alt multiplies a step by 5. In
expression mode, '-' and '=' are operators, so 'o'/'p' and 'O'/'P' take
their place.
"""

import re
import sys

import structlog

from markertime.core.expression import TimeExpression
from markertime.core.state import ParseState

logger = structlog.get_logger()

SMALL_ADJUST_KEYS: dict[str, int] = {
    "[": -1000,
    "]": 1000,
    "{": -100,
    "}": 100,
}

ADJUST_KEYS: dict[str, int] = {
    "_": -60000,
    "+": 60000,
    "-": -10000,
    "=": 10000,
    **SMALL_ADJUST_KEYS,
}

EXPRESSION_ADJUST_KEYS: dict[str, int] = {
    "O": -60000,
    "P": 60000,
    "o": -10000,
    "p": 10000,
    **SMALL_ADJUST_KEYS,
}

# Rounding keys: (factor, factor with Alt)
TRUNCATION_KEYS: dict[str, tuple[int, int]] = {
    "\\": (1000, 5000),
    "|": (100, 500),
}

ALT_MULTIPLIER = 5

_PLAIN_PASTE_REJECT = re.compile(r"[^0-9:.]")
_EXPRESSION_PASTE_REJECT = re.compile(r"[^-+=0-9:.ACIMSEh@ ]")


def round_delta(current: int, maximum: int, factor: int) -> int:
    """Offset that rounds current to the nearest multiple of factor.

    Rounds down instead of up when rounding up would pass maximum. Negative
    values always round toward zero.
    """
    remainder = abs(current) % factor
    if current < 0:
        remainder = -remainder
    if remainder == 0:
        return 0
    if maximum - current < factor - remainder or remainder < factor / 2:
        return -remainder
    return factor - remainder


def is_shortcut(key: str, expression_mode: bool) -> bool:
    simple_keys = EXPRESSION_ADJUST_KEYS if expression_mode else ADJUST_KEYS
    return key in simple_keys or key in TRUNCATION_KEYS


def apply_shortcut(
    expression: TimeExpression,
    key: str,
    *,
    alt: bool = False,
    duration: int | None = None,
) -> str | None:
    """Adjust the expression's timestamp for a shortcut key.

    Args:
        expression: Expression holding the input's last parsed state
        key: The key that was pressed
        alt: Whether Alt was held
        duration: Media duration in ms, the upper bound of the result

    Returns:
        The new input text, or None if the key isn't a shortcut or the
        expression can't be adjusted
    """
    state = expression.state
    expression_mode = not state.plain
    if not state.valid or not is_shortcut(key, expression_mode):
        return None

    current = expression.ms()
    maximum = sys.maxsize if duration is None else duration

    # A resolved reference can't go negative, but an unresolved one might
    # still end up positive once the reference is added.
    negative_allowed = not expression.is_advanced() or current is None
    if negative_allowed:
        minimum = -maximum
    else:
        minimum = 0

    if current is None:
        current = state.ms

    simple_keys = EXPRESSION_ADJUST_KEYS if expression_mode else ADJUST_KEYS
    if key in simple_keys:
        delta = simple_keys[key] * (ALT_MULTIPLIER if alt else 1)
    else:
        small, large = TRUNCATION_KEYS[key]
        delta = round_delta(current, maximum, large if alt else small)

    new_ms = min(maximum, max(minimum, current + delta))
    # A step that crosses between negative and positive stops at zero first
    if minimum != 0 and (current < 0 < new_ms or new_ms < 0 < current):
        new_ms = 0
    logger.debug("shortcut_applied", key=key, previous=current, new=new_ms)
    return expression.set_ms(new_ms).to_string()


def sanitize_paste(text: str, plain_only: bool) -> str:
    """Strip characters a time input can't hold from pasted text.

    Pasted expressions ('=...') are kept as-is, since chapter names can
    contain anything.
    """
    if not plain_only and text.startswith("="):
        return text
    reject = _PLAIN_PASTE_REJECT if plain_only else _EXPRESSION_PASTE_REJECT
    return reject.sub("", text)


def implicit_end_text(start_state: ParseState, end: TimeExpression) -> str | None:
    """Text implied for an empty end input when the start uses a chapter start.

    "=Ch2" for the start implies "=Ch2" for the end, resolved against the
    chapter's end.

    Args:
        start_state: Parsed state of the start input
        end: Expression of the end input

    Returns:
        The implied end expression, or None if the start state implies nothing
    """
    ref = start_state.chapter_reference()
    if not start_state.valid or ref is None or not ref.base.start:
        return None

    end_state = start_state.clone()
    end_ref = end_state.chapter_reference()
    if end_ref is not None:
        end_ref.base.start = False
    # End timestamps can't use the I@ syntax
    end_state.marker_type = None
    return end.update_state(end_state).to_string()
