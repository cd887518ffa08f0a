"""
Remote store module.

Entry types, error taxonomy, the RemoteStore capability interface and its
Dropbox implementation with OAuth linking.
"""

from .types import Account, RemoteEntry, RemoteFile, RemoteFolder
from .errors import (
    AlreadyExists,
    AuthFailure,
    NotADirectory,
    NotFound,
    RemoteError,
    TransportFailure,
)
from .store import RemoteStore
from .client import DropboxStore, DropboxStoreConfig
from .auth import DropboxAuth

__all__ = [
    "Account",
    "RemoteEntry",
    "RemoteFile",
    "RemoteFolder",
    "AlreadyExists",
    "AuthFailure",
    "NotADirectory",
    "NotFound",
    "RemoteError",
    "TransportFailure",
    "RemoteStore",
    "DropboxStore",
    "DropboxStoreConfig",
    "DropboxAuth",
]
