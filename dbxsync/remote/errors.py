"""
Error taxonomy for remote store operations.
"""

from typing import Optional


class RemoteError(Exception):
    """Base class for failures surfaced by a remote store."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path


class NotFound(RemoteError):
    """The remote path does not exist."""


class NotADirectory(RemoteError):
    """An operation expected a folder but the path is a file."""


class AlreadyExists(RemoteError):
    """Folder creation collided with an existing entry."""


class TransportFailure(RemoteError):
    """Opaque failure from the store's transport or API layer."""


class AuthFailure(RemoteError):
    """Linking failed, or no usable token is available."""
