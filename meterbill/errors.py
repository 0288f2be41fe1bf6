from __future__ import annotations


class ParseError(ValueError):
    """Raised when user-supplied text cannot be parsed.

    ``segment`` holds the offending piece of input when the failure can be
    narrowed down (e.g. a single ``threshold:rate`` pair of a slab list).
    """

    def __init__(self, message: str, segment: str | None = None) -> None:
        super().__init__(message)
        self.segment = segment
