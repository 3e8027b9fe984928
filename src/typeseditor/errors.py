"""Exception hierarchy shared by the codec, file sources and editor."""

from __future__ import annotations


class TypesEditorError(Exception):
    """Base class for every error the editor reports on its status line."""


class NotFoundError(TypesEditorError, FileNotFoundError):
    """The path does not exist on the selected source."""


class SourceIOError(TypesEditorError, OSError):
    """Local filesystem or SFTP failure."""


class BackendBusyError(SourceIOError):
    """The shared SSH backend is already locked by another operation."""

    def __init__(self, message: str = "SSH backend in use") -> None:
        super().__init__(message)


class AuthFailedError(SourceIOError):
    """SSH authentication was rejected."""


class InvalidDataError(TypesEditorError, ValueError):
    """Malformed XML, bad UTF-8, or a name that cannot be written as XML."""
