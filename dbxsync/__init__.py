"""
dbxsync - Mirror folder trees between local disk and Dropbox.

Authenticates against Dropbox through the official SDK, then downloads,
uploads, lists and sizes whole folder trees.

Import from submodules directly:
    from dbxsync.config import AppSettings
    from dbxsync.remote import DropboxAuth, DropboxStore
    from dbxsync.sync import TreeWalker, TransferEvent
"""


def _get_version():
    """Read version from VERSION file, falling back to installed metadata."""
    from pathlib import Path
    from importlib.metadata import PackageNotFoundError, version

    version_file = Path(__file__).parent.parent / "VERSION"
    if version_file.exists():
        return version_file.read_text().strip()
    try:
        return version("dbxsync")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()
