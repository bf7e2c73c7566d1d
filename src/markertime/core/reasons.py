"""User-facing reasons attached to invalid expressions.

Every rejection goes through one of these builders so callers and tests can
compare reasons exactly.
"""


class InvalidReason:
    """Builders for the fixed set of invalid expression reasons."""

    @staticmethod
    def invalid_timestamp(text: str) -> str:
        return f'Could not parse "{text}" as a timestamp.'

    @staticmethod
    def double_operator(operators: str) -> str:
        return (
            f"Invalid operator sequence '{operators}'. "
            "Only a single operator is supported."
        )

    @staticmethod
    def no_operator() -> str:
        return "Expected an operator between subexpressions."

    @staticmethod
    def unexpected_character(char: str, position: int) -> str:
        return f"Unexpected character '{char}' at position {position}."

    @staticmethod
    def plain_only() -> str:
        return "Only plain expressions are allowed, cannot use '=' syntax."

    @staticmethod
    def marker_type_in_end_input() -> str:
        return "Marker type references are only allowed for start times."

    @staticmethod
    def marker_type_not_at_start() -> str:
        return "Marker type references must be the first part of the expression."

    @staticmethod
    def marker_type_with_reference() -> str:
        return "Marker type references cannot be combined with marker or chapter references."

    @staticmethod
    def multiple_references() -> str:
        return "Expressions can only reference a single marker or chapter."

    @staticmethod
    def subtracted_reference(kind: str) -> str:
        return f"{kind.capitalize()} references cannot be subtracted."

    @staticmethod
    def invalid_reference(kind: str) -> str:
        return f"Could not parse potential {kind} reference."

    @staticmethod
    def zero_reference_index() -> str:
        return "Reference index 0 is invalid, use 1-based indexing."

    @staticmethod
    def bad_reference_index(kind: str, index: int, counted: str) -> str:
        return f"Invalid {kind} index '{index}': not enough {counted}."

    @staticmethod
    def bad_wildcard_escape(char: str) -> str:
        return f"Invalid escape sequence '\\{char}' in chapter name."

    @staticmethod
    def bad_chapter_regex(text: str, error: str) -> str:
        return f"Invalid chapter name regex {text}: {error}"

    @staticmethod
    def unterminated_chapter_reference() -> str:
        return "Unterminated chapter name reference."

    @staticmethod
    def no_chapter_match(pattern: str) -> str:
        return f"No chapter names match {pattern}."

    @staticmethod
    def negative_timestamp_with_reference() -> str:
        return "Expressions with marker or chapter references cannot be negative."
