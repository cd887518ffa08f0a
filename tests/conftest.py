"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path

import pytest

from dbxsync.core.paths import normalize_remote, remote_name
from dbxsync.remote.errors import AlreadyExists, NotADirectory, NotFound, TransportFailure
from dbxsync.remote.types import RemoteFile, RemoteFolder


def _parent(path: str) -> str:
    return path.rsplit("/", 1)[0] or "/"


class MemoryStore:
    """
    In-memory RemoteStore.

    Entries list in insertion order. Paths in fail_reads / fail_writes /
    fail_lists raise TransportFailure; paths in fail_midstream yield one
    chunk and then fail.
    """

    def __init__(self):
        self.entries = {}  # path -> bytes for files, None for folders
        self.modified = {}
        self.fail_reads = set()
        self.fail_writes = set()
        self.fail_lists = set()
        self.fail_midstream = set()
        self.reads = []
        self.writes = []
        self.created = []

    # Setup helpers

    def add_folder(self, path: str):
        path = normalize_remote(path)
        if path == "/" or path in self.entries:
            return
        self.add_folder(_parent(path))
        self.entries[path] = None

    def add_file(self, path: str, data: bytes, modified=None):
        path = normalize_remote(path)
        self.add_folder(_parent(path))
        self.entries[path] = data
        if modified is not None:
            self.modified[path] = modified

    def is_file(self, path: str) -> bool:
        return self.entries.get(normalize_remote(path)) is not None

    def data(self, path: str) -> bytes:
        return self.entries[normalize_remote(path)]

    def _entry(self, path: str):
        data = self.entries[path]
        if data is None:
            return RemoteFolder(path=path, name=remote_name(path))
        return RemoteFile(path=path, name=remote_name(path), size=len(data), modified=self.modified.get(path))

    # RemoteStore capabilities

    def get_metadata(self, path):
        path = normalize_remote(path)
        if path == "/":
            return RemoteFolder(path="/", name="")
        if path not in self.entries:
            raise NotFound(f"Not found: {path}", path)
        return self._entry(path)

    def list_children(self, path):
        path = normalize_remote(path)
        if path in self.fail_lists:
            raise TransportFailure(f"list failed: {path}", path)
        if path != "/" and path not in self.entries:
            raise NotFound(f"Not found: {path}", path)
        if self.entries.get(path) is not None:
            raise NotADirectory(f"Not a folder: {path}", path)
        return [self._entry(p) for p in self.entries if _parent(p) == path and p != "/"]

    def create_folder(self, path):
        path = normalize_remote(path)
        if path == "/" or path in self.entries:
            raise AlreadyExists(f"Already exists: {path}", path)
        self.created.append(path)
        self.add_folder(path)

    def read_file(self, path):
        path = normalize_remote(path)
        if path in self.fail_reads:
            raise TransportFailure(f"read failed: {path}", path)
        if path not in self.entries or self.entries[path] is None:
            raise NotFound(f"Not found: {path}", path)
        self.reads.append(path)
        data = self.entries[path]
        if path in self.fail_midstream:
            return self._broken_stream(data, path)
        return iter([data[i:i + 4] for i in range(0, len(data), 4)])

    @staticmethod
    def _broken_stream(data, path):
        yield data[:1]
        raise TransportFailure(f"connection dropped: {path}", path)

    def write_file(self, path, stream, overwrite=True):
        path = normalize_remote(path)
        if path in self.fail_writes:
            raise TransportFailure(f"write failed: {path}", path)
        if path in self.entries and not overwrite:
            raise AlreadyExists(f"Already exists: {path}", path)
        data = stream.read() if hasattr(stream, "read") else bytes(stream)
        self.writes.append(path)
        self.add_file(path, data)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
