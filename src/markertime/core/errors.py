"""Expression error hierarchy."""


class ExpressionError(Exception):
    """Base error for a rejected expression, carrying the user-facing reason."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class ExpressionSyntaxError(ExpressionError):
    """Raised when expression text is malformed or misuses a token."""


class ReferenceResolutionError(ExpressionError):
    """Raised when a reference does not point at an existing marker or chapter."""


class MediaItemRequiredError(Exception):
    """Raised when references are resolved without marker/chapter data."""

    def __init__(self) -> None:
        super().__init__(
            "A media item's markers and chapters are required to resolve references"
        )
