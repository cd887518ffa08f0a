"""
Capability interface the tree walker runs on.

Any object providing these five methods can back a TreeWalker; DropboxStore
is the production implementation.
"""

from typing import BinaryIO, Iterable, Iterator, List, Protocol, Union

from .types import RemoteEntry

ByteStream = Union[bytes, BinaryIO, Iterable[bytes]]


class RemoteStore(Protocol):
    """Hierarchical file store reachable by path."""

    def get_metadata(self, path: str) -> RemoteEntry:
        """Entry at path. Raises NotFound if absent."""
        ...

    def list_children(self, path: str) -> List[RemoteEntry]:
        """Immediate children of a folder, in store order."""
        ...

    def create_folder(self, path: str) -> None:
        """Create a folder. Raises AlreadyExists if present."""
        ...

    def read_file(self, path: str) -> Iterator[bytes]:
        """Stream a file's bytes."""
        ...

    def write_file(self, path: str, stream: ByteStream, overwrite: bool = True) -> None:
        """Write a file, replacing it fully when overwrite is true."""
        ...
