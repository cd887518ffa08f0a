"""
Tree sync module.

Recursive download, upload, listing and sizing over a RemoteStore.
"""

from .events import DOWNLOAD, UPLOAD, TransferEvent, TransferListener
from .result import TransferFailure, TreeResult, TreeTransferError
from .walker import TreeWalker

__all__ = [
    "DOWNLOAD",
    "UPLOAD",
    "TransferEvent",
    "TransferListener",
    "TransferFailure",
    "TreeResult",
    "TreeTransferError",
    "TreeWalker",
]
