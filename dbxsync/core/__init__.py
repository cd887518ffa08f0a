"""
Core utilities shared across dbxsync: paths, local files, formatting.
"""

from .files import local_size, list_local_children
from .formatting import format_size, format_duration
from .paths import join_remote, normalize_remote, to_sdk_path, remote_name

__all__ = [
    "local_size",
    "list_local_children",
    "format_size",
    "format_duration",
    "join_remote",
    "normalize_remote",
    "to_sdk_path",
    "remote_name",
]
