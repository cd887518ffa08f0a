"""
Tree walker for dbxsync.

Depth-first, sequential mirroring of folder trees between local disk and a
RemoteStore. A failure on one entry is recorded in the TreeResult and the
walk carries on with its siblings.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from ..core.files import list_local_children, local_size, remove_partial
from ..core.paths import join_remote, normalize_remote
from ..remote.errors import AlreadyExists, NotADirectory, RemoteError
from ..remote.store import RemoteStore
from ..remote.types import RemoteEntry, RemoteFile, RemoteFolder
from .events import DOWNLOAD, UPLOAD, TransferEvent, TransferListener
from .result import TreeResult

logger = logging.getLogger(__name__)

# Per-entry failures that are recorded instead of aborting the walk
ENTRY_ERRORS = (RemoteError, OSError)


class TreeWalker:
    """Mirrors folder trees between local disk and a remote store."""

    def __init__(self, store: RemoteStore, listener: Optional[TransferListener] = None):
        """
        Initialize the walker.

        Args:
            store: Remote store providing the capability interface
            listener: Optional callable notified after each file transfer
        """
        self.store = store
        self.listener = listener

    def set_listener(self, listener: Optional[TransferListener]):
        """Register (or clear, with None) the transfer listener."""
        self.listener = listener

    def _emit(self, direction: str, local_path: Path, remote_path: str):
        if self.listener is None:
            return
        self.listener(TransferEvent(
            direction=direction,
            local_path=local_path,
            remote_path=remote_path,
            size=local_size(local_path),
        ))

    # ------------------------------------------------------------------
    # Single files
    # ------------------------------------------------------------------

    def download_file(self, remote_path: str, local_path: Union[str, Path]) -> Path:
        """
        Download one file.

        The local file is removed again if the transfer fails part way.

        Returns:
            The local path written
        """
        remote_path = normalize_remote(remote_path)
        local_path = Path(local_path)
        local_path.parent.mkdir(parents=True, exist_ok=True)

        stream = self.store.read_file(remote_path)
        try:
            with open(local_path, "wb") as f:
                for chunk in stream:
                    f.write(chunk)
        except BaseException:
            remove_partial(local_path)
            raise

        logger.debug("Downloaded %s -> %s", remote_path, local_path)
        self._emit(DOWNLOAD, local_path, remote_path)
        return local_path

    def upload_file(
        self,
        local_path: Union[str, Path],
        overwrite: bool = True,
        remote_folder: str = "/",
    ) -> str:
        """
        Upload one file into a remote folder.

        Args:
            local_path: File to upload
            overwrite: Replace an existing remote file (otherwise add-only)
            remote_folder: Destination folder

        Returns:
            The remote path written
        """
        local_path = Path(local_path)
        remote_path = join_remote(remote_folder, local_path.name)

        with open(local_path, "rb") as f:
            self.store.write_file(remote_path, f, overwrite=overwrite)

        logger.debug("Uploaded %s -> %s", local_path, remote_path)
        self._emit(UPLOAD, local_path, remote_path)
        return remote_path

    # ------------------------------------------------------------------
    # Trees
    # ------------------------------------------------------------------

    def download_tree(
        self,
        remote_path: str,
        local_path: Union[str, Path],
        descend_existing: bool = False,
    ) -> TreeResult:
        """
        Download a remote folder into a local directory.

        Entries whose local target already exists are skipped without any
        content or timestamp comparison.

        Args:
            remote_path: Remote folder to mirror
            local_path: Local directory (created if missing)
            descend_existing: Walk into local folders that already exist
                instead of skipping them, so an interrupted run can finish

        Returns:
            TreeResult with transferred files, skip count and failures
        """
        local_path = Path(local_path)
        local_path.mkdir(parents=True, exist_ok=True)
        result = TreeResult()

        entries = self.store.list_children(remote_path)
        self._download_entries(entries, local_path, result, descend_existing)

        logger.info(
            "Download of %s finished: %d transferred, %d skipped, %d failed",
            normalize_remote(remote_path), len(result.transferred), result.skipped, len(result.failures),
        )
        return result

    def _download_entries(
        self,
        entries: List[RemoteEntry],
        local_dir: Path,
        result: TreeResult,
        descend_existing: bool,
    ):
        for entry in entries:
            target = local_dir / entry.name
            exists = target.exists()

            if isinstance(entry, RemoteFile):
                if exists:
                    result.skipped += 1
                    continue
                try:
                    self.download_file(entry.path, target)
                except ENTRY_ERRORS as e:
                    logger.warning("Download failed for %s: %s", entry.path, e)
                    result.add_failure(entry.path, e)
                    continue
                result.add_transfer(target, local_size(target))

            elif isinstance(entry, RemoteFolder):
                if exists and not (descend_existing and target.is_dir()):
                    result.skipped += 1
                    continue
                try:
                    children = self.store.list_children(entry.path)
                    target.mkdir(parents=True, exist_ok=True)
                except ENTRY_ERRORS as e:
                    logger.warning("Could not list %s: %s", entry.path, e)
                    result.add_failure(entry.path, e)
                    continue
                self._download_entries(children, target, result, descend_existing)

    def upload_tree(
        self,
        local_dir: Union[str, Path],
        overwrite: bool = True,
        remote_parent: str = "/",
    ) -> TreeResult:
        """
        Upload a local directory under a remote parent folder.

        The directory lands at remote_parent/<local_dir name>. Does nothing
        if local_dir is not a directory.

        Args:
            local_dir: Directory to upload
            overwrite: Replace existing remote files; an existing remote
                folder is expected and ignored silently
            remote_parent: Remote folder that will contain the directory

        Returns:
            TreeResult with uploaded files and failures
        """
        local_dir = Path(local_dir)
        result = TreeResult()
        if not local_dir.is_dir():
            return result
        # "." and ".." carry no folder name of their own
        if local_dir.name in ("", ".."):
            local_dir = local_dir.resolve()

        self._upload_folder(local_dir, overwrite, remote_parent, result)

        logger.info(
            "Upload of %s finished: %d transferred, %d failed",
            local_dir, len(result.transferred), len(result.failures),
        )
        return result

    def _upload_folder(self, local_dir: Path, overwrite: bool, remote_parent: str, result: TreeResult):
        remote_dir = join_remote(remote_parent, local_dir.name)

        try:
            self.store.create_folder(remote_dir)
        except AlreadyExists as e:
            if not overwrite:
                logger.warning("Remote folder already exists: %s", e.path or remote_dir)
        except RemoteError as e:
            logger.warning("Could not create %s: %s", remote_dir, e)
            result.add_failure(remote_dir, e)

        try:
            children = list_local_children(local_dir)
        except OSError as e:
            logger.warning("Could not list %s: %s", local_dir, e)
            result.add_failure(local_dir, e)
            return

        for child in children:
            if child.is_file():
                try:
                    self.upload_file(child, overwrite=overwrite, remote_folder=remote_dir)
                except ENTRY_ERRORS as e:
                    logger.warning("Upload failed for %s: %s", child, e)
                    result.add_failure(child, e)
                    continue
                result.add_transfer(child, local_size(child))
            elif child.is_dir():
                self._upload_folder(child, overwrite, remote_dir, result)

    def list_tree(self, remote_path: str) -> List[RemoteEntry]:
        """
        List a remote folder recursively, in pre-order.

        Each folder entry is followed immediately by its own flattened
        contents.

        Raises:
            NotADirectory: remote_path is a file
        """
        entry = self.store.get_metadata(remote_path)
        if isinstance(entry, RemoteFile):
            raise NotADirectory(f"Not a folder: {entry.path}", entry.path)
        return self._list_recursive(entry.path)

    def _list_recursive(self, remote_path: str) -> List[RemoteEntry]:
        entries = []
        for child in self.store.list_children(remote_path):
            entries.append(child)
            if isinstance(child, RemoteFolder):
                entries.extend(self._list_recursive(child.path))
        return entries

    def tree_size(self, remote_path: str) -> int:
        """Total bytes of a remote file, or of every file below a remote folder."""
        entry = self.store.get_metadata(remote_path)
        if isinstance(entry, RemoteFile):
            return entry.size
        return self._folder_size(entry.path)

    def _folder_size(self, remote_path: str) -> int:
        total = 0
        for child in self.store.list_children(remote_path):
            if isinstance(child, RemoteFile):
                total += child.size
            else:
                total += self._folder_size(child.path)
        return total
