"""
Formatting utilities for dbxsync console output.
"""

from datetime import datetime
from typing import Optional


def format_size(size_bytes: int) -> str:
    """Format bytes as human readable string."""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size_bytes < 1024:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f} PB"


def format_duration(seconds: float) -> str:
    """Format seconds as human readable duration."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        return f"{int(seconds // 60)}m {int(seconds % 60)}s"
    else:
        return f"{int(seconds // 3600)}h {int((seconds % 3600) // 60)}m"


def format_timestamp(value: Optional[datetime]) -> str:
    """Format a modification time, or '-' when unknown."""
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M:%S")
