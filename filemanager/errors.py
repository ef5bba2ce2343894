"""
Error types raised by file manager commands.

Handlers raise these; the command executor turns each one into a single
printed line, so none of them ever ends the interactive loop.
"""

from typing import Optional


class FileManagerError(Exception):
    """Base class for all file manager errors."""


class UsageError(FileManagerError):
    """Missing or malformed arguments, unknown command or option."""


class ResolutionError(FileManagerError):
    """Target path does not exist or is of the wrong type."""


class TransferError(FileManagerError):
    """
    A streaming transfer failed.

    Carries the pipeline stage that failed ('source', 'transform' or 'sink')
    and the original exception.
    """

    def __init__(self, stage: str, cause: BaseException):
        self.stage = stage
        self.cause = cause
        super().__init__(describe_error(cause))


def describe_error(error: BaseException) -> str:
    """Return the human readable part of an exception."""
    if isinstance(error, OSError) and error.strerror:
        if error.filename:
            return f"{error.strerror}: '{error.filename}'"
        return error.strerror
    message: Optional[str] = str(error)
    return message or error.__class__.__name__
