"""CSS parsing error types."""


class MediaQueryError(Exception):
    """Raised when a media-query prelude cannot be parsed."""

    def __init__(
        self, message: str, line: int | None = None, column: int | None = None
    ):
        self.line = line
        self.column = column
        super().__init__(message)
