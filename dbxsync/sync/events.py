"""
Transfer notifications.

One TransferEvent is emitted per completed single-file transfer, delivered
synchronously to at most one registered listener.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

UPLOAD = "upload"
DOWNLOAD = "download"


@dataclass(frozen=True)
class TransferEvent:
    """A file finished uploading or downloading."""
    direction: str
    local_path: Path
    remote_path: str
    size: int = 0


TransferListener = Callable[[TransferEvent], None]
