"""
Path helpers for dbxsync.

Remote paths are posix-style with a single leading slash ("/" is the root).
The Dropbox SDK spells the root as "" - use to_sdk_path() at that boundary.
"""

import re
import sys
from pathlib import Path, PurePath
from typing import Union

REMOTE_SEP = "/"
SETTINGS_FILENAME = "settings.json"
TOKEN_FILENAME = "token.json"
APP_DIR_NAME = ".dbxsync"


def normalize_remote(path: Union[str, Path, None]) -> str:
    """
    Normalize a remote path.

    - Backslashes become forward slashes
    - Repeated slashes collapse to one
    - Trailing slashes are dropped
    - Exactly one leading slash; empty input means the root "/"
    """
    if path is None:
        return REMOTE_SEP
    if isinstance(path, PurePath):
        path = path.as_posix()
    path = path.replace("\\", REMOTE_SEP)
    path = re.sub(r"/{2,}", REMOTE_SEP, path).strip(REMOTE_SEP)
    return REMOTE_SEP + path


def join_remote(*parts: Union[str, Path, None]) -> str:
    """Join remote path components, normalizing the result."""
    pieces = []
    for part in parts:
        if part is None:
            continue
        if isinstance(part, PurePath):
            part = part.as_posix()
        part = part.replace("\\", REMOTE_SEP).strip(REMOTE_SEP)
        if part:
            pieces.append(part)
    return normalize_remote(REMOTE_SEP.join(pieces))


def to_sdk_path(path: Union[str, Path, None]) -> str:
    """Convert a remote path to the Dropbox API v2 form ("" for the root)."""
    normalized = normalize_remote(path)
    return "" if normalized == REMOTE_SEP else normalized


def remote_name(path: str) -> str:
    """Last component of a remote path ("" for the root)."""
    return normalize_remote(path).rsplit(REMOTE_SEP, 1)[-1]


def is_remote_root(path: Union[str, Path, None]) -> bool:
    return normalize_remote(path) == REMOTE_SEP


# ============================================================================
# Application file locations
# ============================================================================

def get_app_dir() -> Path:
    """Directory where the app lives (for user-writable files)."""
    if getattr(sys, "frozen", False):
        return Path(sys.executable).parent
    return Path.cwd()


def get_data_dir() -> Path:
    """Per-user data directory (.dbxsync next to the app)."""
    return get_app_dir() / APP_DIR_NAME


def get_settings_path() -> Path:
    return get_data_dir() / SETTINGS_FILENAME


def get_token_path() -> Path:
    return get_data_dir() / TOKEN_FILENAME
