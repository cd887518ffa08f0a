"""
Dropbox-backed remote store for dbxsync.

Wraps the official Dropbox SDK client and exposes the RemoteStore
capabilities (metadata, listing, folder creation, streaming read/write).
HTTP, retries and token refresh stay inside the SDK.
"""

import contextlib
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterator, List, Optional

import dropbox
import requests
from dropbox.exceptions import ApiError, AuthError, DropboxException
from dropbox.files import (
    CommitInfo,
    FileMetadata,
    FolderMetadata,
    UploadSessionCursor,
    WriteMode,
)

from ..core.paths import is_remote_root, normalize_remote, to_sdk_path
from .errors import (
    AlreadyExists,
    AuthFailure,
    NotADirectory,
    NotFound,
    RemoteError,
    TransportFailure,
)
from .store import ByteStream
from .types import Account, RemoteEntry, RemoteFile, RemoteFolder

logger = logging.getLogger(__name__)

# Uploads larger than this go through an upload session
CHUNK_SIZE = 8 * 1024 * 1024

USER_AGENT = "dbxsync"


@dataclass
class DropboxStoreConfig:
    """Configuration for DropboxStore."""
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    app_key: Optional[str] = None
    app_secret: Optional[str] = None
    timeout: int = 100
    max_retries: int = 4
    chunk_size: int = CHUNK_SIZE
    user_agent: str = USER_AGENT


def _path_error_reason(error):
    """
    Dig the lookup/write reason out of an SDK error union.

    GetMetadataError, ListFolderError, DownloadError and CreateFolderError
    carry it under .get_path(); UploadError wraps it once more in
    UploadWriteFailed.reason.
    """
    if error is None or not hasattr(error, "is_path") or not error.is_path():
        return None
    reason = error.get_path()
    return getattr(reason, "reason", reason)


def _union_is(value, tag: str) -> bool:
    check = getattr(value, f"is_{tag}", None)
    return bool(check and check())


def translate_error(exc: Exception, path: str) -> RemoteError:
    """Map an SDK or transport exception onto the RemoteError taxonomy."""
    if isinstance(exc, ApiError):
        reason = _path_error_reason(exc.error)
        message = exc.user_message_text or str(exc.error)
        if _union_is(reason, "not_found"):
            return NotFound(f"Not found: {path}", path)
        if _union_is(reason, "not_folder"):
            return NotADirectory(f"Not a folder: {path}", path)
        if _union_is(reason, "conflict"):
            return AlreadyExists(f"Already exists: {path}", path)
        return TransportFailure(f"Dropbox API error for {path}: {message}", path)
    if isinstance(exc, AuthError):
        return AuthFailure(f"Dropbox rejected the access token: {exc.error}", path)
    if isinstance(exc, DropboxException):
        return TransportFailure(f"Dropbox request failed for {path}: {exc}", path)
    if isinstance(exc, requests.exceptions.RequestException):
        return TransportFailure(f"Network error for {path}: {exc}", path)
    return TransportFailure(f"Unexpected error for {path}: {exc}", path)


def _iter_chunks(stream: ByteStream, size: int) -> Iterator[bytes]:
    """Re-chunk bytes, a binary file object or an iterable of bytes to fixed-size pieces."""
    if isinstance(stream, (bytes, bytearray, memoryview)):
        data = bytes(stream)
        for start in range(0, len(data), size):
            yield data[start:start + size]
        return

    if hasattr(stream, "read"):
        while True:
            chunk = stream.read(size)
            if not chunk:
                return
            yield chunk

    buffer = bytearray()
    for piece in stream:
        buffer.extend(piece)
        while len(buffer) >= size:
            yield bytes(buffer[:size])
            del buffer[:size]
    if buffer:
        yield bytes(buffer)


def to_entry(metadata) -> Optional[RemoteEntry]:
    """Convert SDK metadata to a RemoteEntry (None for deleted entries)."""
    if isinstance(metadata, FileMetadata):
        return RemoteFile(
            path=metadata.path_display,
            name=metadata.name,
            size=metadata.size,
            modified=metadata.client_modified,
        )
    if isinstance(metadata, FolderMetadata):
        return RemoteFolder(path=metadata.path_display, name=metadata.name)
    return None


class DropboxStore:
    """
    Dropbox API v2 remote store.

    Handles metadata, listing, folder creation and file transfer.
    Every SDK failure is re-raised as a RemoteError subclass.
    """

    def __init__(self, config: DropboxStoreConfig, client: Optional[dropbox.Dropbox] = None):
        """
        Initialize the store.

        Args:
            config: Store configuration (tokens, timeouts, chunk size)
            client: Optional pre-built SDK client (built from config if omitted)
        """
        self.config = config
        self._dbx = client or self._build_client(config)
        self._api_calls = 0

    @staticmethod
    def _build_client(config: DropboxStoreConfig) -> dropbox.Dropbox:
        if not (config.access_token or config.refresh_token):
            raise AuthFailure("An access token or refresh token is required")
        return dropbox.Dropbox(
            oauth2_access_token=config.access_token,
            oauth2_refresh_token=config.refresh_token,
            app_key=config.app_key,
            app_secret=config.app_secret,
            max_retries_on_error=config.max_retries,
            timeout=config.timeout,
            user_agent=config.user_agent,
        )

    @property
    def client(self) -> dropbox.Dropbox:
        """The underlying SDK client."""
        return self._dbx

    @property
    def api_calls(self) -> int:
        """Total API calls made by this store."""
        return self._api_calls

    def _call(self, path: str, func: Callable, *args, **kwargs):
        """Invoke an SDK method, translating its failures."""
        self._api_calls += 1
        try:
            return func(*args, **kwargs)
        except (DropboxException, requests.exceptions.RequestException) as e:
            raise translate_error(e, path) from e

    # ------------------------------------------------------------------
    # RemoteStore capabilities
    # ------------------------------------------------------------------

    def get_metadata(self, path: str) -> RemoteEntry:
        """
        Get the entry at a path.

        The API has no metadata for the root, so the root is reported as a
        folder without a call.
        """
        path = normalize_remote(path)
        if is_remote_root(path):
            return RemoteFolder(path="/", name="")

        metadata = self._call(path, self._dbx.files_get_metadata, to_sdk_path(path))
        entry = to_entry(metadata)
        if entry is None:
            raise NotFound(f"Not found: {path}", path)
        return entry

    def list_children(self, path: str) -> List[RemoteEntry]:
        """
        List a folder's immediate children.

        Follows the listing cursor until every page is read. Deleted
        entries are dropped.
        """
        path = normalize_remote(path)
        result = self._call(path, self._dbx.files_list_folder, to_sdk_path(path))
        metadata = list(result.entries)

        while result.has_more:
            result = self._call(path, self._dbx.files_list_folder_continue, result.cursor)
            metadata.extend(result.entries)

        entries = [e for e in (to_entry(m) for m in metadata) if e is not None]
        logger.debug("Listed %s: %d entries", path, len(entries))
        return entries

    def create_folder(self, path: str) -> None:
        path = normalize_remote(path)
        self._call(path, self._dbx.files_create_folder_v2, to_sdk_path(path), autorename=False)
        logger.debug("Created folder %s", path)

    def read_file(self, path: str) -> Iterator[bytes]:
        """
        Stream a file's content.

        The download request is made immediately; the returned iterator
        yields body chunks and closes the response when exhausted.
        """
        path = normalize_remote(path)
        _, response = self._call(path, self._dbx.files_download, to_sdk_path(path))
        return self._stream_response(response, path)

    def _stream_response(self, response, path: str) -> Iterator[bytes]:
        with contextlib.closing(response):
            try:
                for chunk in response.iter_content(chunk_size=self.config.chunk_size):
                    if chunk:
                        yield chunk
            except requests.exceptions.RequestException as e:
                raise translate_error(e, path) from e

    def write_file(self, path: str, stream: ByteStream, overwrite: bool = True) -> None:
        """
        Upload a file.

        overwrite=True replaces the destination fully; otherwise the upload
        is add-only and an existing file is a conflict. Content larger than
        one chunk is sent through an upload session.
        """
        path = normalize_remote(path)
        sdk_path = to_sdk_path(path)
        mode = WriteMode.overwrite if overwrite else WriteMode.add

        chunks = _iter_chunks(stream, self.config.chunk_size)
        first = next(chunks, b"")
        following = next(chunks, None)

        if following is None:
            self._call(path, self._dbx.files_upload, first, sdk_path, mode=mode, autorename=False)
            logger.debug("Uploaded %s (%d bytes)", path, len(first))
            return

        session = self._call(path, self._dbx.files_upload_session_start, first)
        cursor = UploadSessionCursor(session_id=session.session_id, offset=len(first))
        commit = CommitInfo(path=sdk_path, mode=mode, autorename=False)

        current = following
        for chunk in chunks:
            self._call(path, self._dbx.files_upload_session_append_v2, current, cursor)
            cursor.offset += len(current)
            current = chunk

        self._call(path, self._dbx.files_upload_session_finish, current, cursor, commit)
        logger.debug("Uploaded %s in session (%d bytes)", path, cursor.offset + len(current))

    # ------------------------------------------------------------------
    # Account and metadata helpers
    # ------------------------------------------------------------------

    def get_account(self) -> Account:
        """Account the store is connected to."""
        account = self._call("/", self._dbx.users_get_current_account)
        return Account(
            account_id=account.account_id,
            display_name=account.name.display_name,
            email=account.email,
        )

    def last_modified(self, path: str) -> Optional[datetime]:
        """
        Client-side modification time of a file.

        Returns:
            datetime for files, None for folders
        """
        entry = self.get_metadata(path)
        if isinstance(entry, RemoteFile):
            return entry.modified
        return None
