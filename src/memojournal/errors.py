"""Exception types raised by the journal pipeline."""

from __future__ import annotations


class MemoJournalError(Exception):
    """Base class for all memojournal failures."""


class FetchError(MemoJournalError):
    """The memo source could not be reached or returned an error."""

    def __init__(self, message: str, resource: str | None = None) -> None:
        super().__init__(message)
        self.resource = resource


class ReadError(MemoJournalError):
    """A journal file could not be read."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class WriteError(MemoJournalError):
    """A bucket file could not be persisted."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(f"{message} ({path})")
        self.path = path


class FormatError(MemoJournalError):
    """A memo is missing fields required to render its block."""
