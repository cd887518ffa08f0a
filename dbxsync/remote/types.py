"""
Remote entry types for dbxsync.

A listing returns a mix of RemoteFile and RemoteFolder - match on the type
wherever entry kind drives behaviour.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union


@dataclass(frozen=True)
class RemoteFile:
    """A file in the remote store, as seen at listing time."""
    path: str
    name: str
    size: int = 0
    modified: Optional[datetime] = None


@dataclass(frozen=True)
class RemoteFolder:
    """A folder in the remote store."""
    path: str
    name: str


RemoteEntry = Union[RemoteFile, RemoteFolder]


@dataclass(frozen=True)
class Account:
    """The account a store is connected to."""
    account_id: str
    display_name: str = ""
    email: str = ""
