"""Typed failures raised by the note store.

"Not found" is never an error: read operations return ``None`` or an
empty list instead.
"""


class StorageError(Exception):
    """Base class for every failure surfaced by :class:`NoteStore`."""


class InitFailed(StorageError):
    """The database file could not be opened or the schema applied."""


class ClockError(StorageError):
    """The system clock did not yield a usable Unix timestamp."""


class WriteFailed(StorageError):
    """A write transaction did not complete and was rolled back."""


class QueryFailed(StorageError):
    """A read could not be executed."""
