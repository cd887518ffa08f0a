"""
Aggregate outcome of a tree transfer.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from ..remote.errors import RemoteError


@dataclass
class TransferFailure:
    """One entry that could not be transferred."""
    path: str
    message: str
    error: Optional[BaseException] = None


class TreeTransferError(RemoteError):
    """Raised by TreeResult.raise_for_failures() when any entry failed."""

    def __init__(self, failures: List[TransferFailure]):
        first = failures[0].message if failures else ""
        more = f" (and {len(failures) - 1} more)" if len(failures) > 1 else ""
        super().__init__(f"{len(failures)} transfer(s) failed: {first}{more}")
        self.failures = failures


@dataclass
class TreeResult:
    """Files transferred, skipped and failed during one tree operation."""
    transferred: List[Path] = field(default_factory=list)
    skipped: int = 0
    failures: List[TransferFailure] = field(default_factory=list)
    bytes_transferred: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures

    def add_transfer(self, local_path: Path, size: int = 0):
        self.transferred.append(local_path)
        self.bytes_transferred += size

    def add_failure(self, path: Union[str, Path], error: BaseException):
        message = getattr(error, "message", None) or str(error)
        self.failures.append(TransferFailure(path=str(path), message=message, error=error))

    def raise_for_failures(self):
        """Raise TreeTransferError if any entry failed."""
        if self.failures:
            raise TreeTransferError(self.failures)
