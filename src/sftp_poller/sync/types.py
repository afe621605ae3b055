"""
Collaborator protocols for the poll orchestrator.

``SFTPConnection`` and ``S3Connection`` satisfy these; tests pass in-memory
fakes.
"""

from __future__ import annotations

from typing import Protocol

from sftp_poller.models import RemoteFileEntry


class RemoteSession(Protocol):
    """Stateful remote file-transfer session."""

    def connect(self) -> object: ...

    def list(self, path: str) -> list[RemoteFileEntry]: ...

    def get(self, path: str) -> bytes: ...

    def rename(self, source: str, destination: str) -> None: ...

    def close(self) -> None: ...


class ObjectUploader(Protocol):
    """Object-store upload target."""

    def put_object(
        self,
        key: str,
        body: bytes,
        *,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> str: ...
