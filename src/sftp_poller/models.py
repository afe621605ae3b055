"""
Data records passed between the transport, the orchestrator and the reporter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

# Single-character kinds, as ``ls -l`` prints them
REGULAR_FILE = "-"
DIRECTORY = "d"
SYMLINK = "l"
OTHER = "?"


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class Stage(str, Enum):
    """Per-file step that failed."""

    DOWNLOAD = "download"
    UPLOAD = "upload"
    RELOCATE = "relocate"


@dataclass(frozen=True)
class RemoteFileEntry:
    name: str
    type: str
    size: int = 0
    modified_at: datetime | None = None

    @property
    def is_regular_file(self) -> bool:
        return self.type == REGULAR_FILE


@dataclass(frozen=True)
class DownloadedPayload:
    """File content held in memory between download and upload."""

    filename: str
    content: bytes = field(repr=False)
    downloaded_at: datetime

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class FileOutcome:
    """
    Result of processing one candidate file.

    ``storage_key`` is set iff the status is success; ``error`` and ``stage``
    are set iff the status is error. Use the ``succeeded``/``failed``
    constructors rather than building instances by hand.
    """

    filename: str
    status: OutcomeStatus
    error: str | None = None
    storage_key: str | None = None
    stage: Stage | None = None

    def __post_init__(self) -> None:
        if self.status is OutcomeStatus.SUCCESS:
            if not self.storage_key or self.error is not None or self.stage is not None:
                raise ValueError(f"Successful outcome for {self.filename} needs a storage key and no error")
        elif self.storage_key is not None or self.error is None:
            raise ValueError(f"Failed outcome for {self.filename} needs an error and no storage key")

    @classmethod
    def succeeded(cls, filename: str, storage_key: str) -> FileOutcome:
        return cls(filename=filename, status=OutcomeStatus.SUCCESS, storage_key=storage_key)

    @classmethod
    def failed(cls, filename: str, error: str, stage: Stage | None = None) -> FileOutcome:
        return cls(filename=filename, status=OutcomeStatus.ERROR, error=error, stage=stage)

    @property
    def is_success(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS
