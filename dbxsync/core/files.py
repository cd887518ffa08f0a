"""
Local file system helpers for dbxsync.
"""

from pathlib import Path
from typing import List


def local_size(path: Path) -> int:
    """
    Byte size of a local file or directory.

    Directories report the sum of every descendant file. Missing paths
    report 0.
    """
    path = Path(path)
    if path.is_dir():
        return sum(local_size(child) for child in path.iterdir())
    try:
        return path.stat().st_size
    except FileNotFoundError:
        return 0


def list_local_children(folder: Path) -> List[Path]:
    """Immediate children of a directory, sorted by name."""
    return sorted(Path(folder).iterdir(), key=lambda p: p.name)


def remove_partial(path: Path):
    """Remove a partially written file, ignoring a file that never appeared."""
    try:
        path.unlink()
    except FileNotFoundError:
        pass
