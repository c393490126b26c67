"""Exceptions raised by the session viewer core."""


class SessionViewerError(Exception):
    """Base class for all session viewer errors."""


class SessionNotFound(SessionViewerError):
    """A requested session, project or path does not exist."""


class StorageError(SessionViewerError):
    """The storage medium could not be read."""
