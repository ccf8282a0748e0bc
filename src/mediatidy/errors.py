"""Exception types for MediaTidy."""

from typing import Optional


class MediaTidyError(Exception):
    """Base class for MediaTidy errors."""


class ParseError(MediaTidyError):
    """Probe output could not be turned into a MediaInfo.

    Raised when a tool's output is malformed or reports no tracks. Callers may
    retry with a different probing tool.
    """

    def __init__(self, message: str, parser: Optional[str] = None):
        super().__init__(message)
        self.parser = parser

    def __str__(self) -> str:
        message = super().__str__()
        if self.parser:
            return f"{self.parser}: {message}"
        return message


class PreconditionError(AssertionError):
    """A caller broke the contract of a core operation.

    Mixing a selection from one parser with another tool's commands, or
    omitting a required argument, is a programming error and must not be
    handled as a runtime failure.
    """
