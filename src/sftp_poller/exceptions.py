"""
SFTP poller exception hierarchy.

All domain-specific exceptions inherit from PollerError, so the invocation
boundary can catch any poller failure with a single base class while the
orchestrator still tells batch-level and file-level failures apart.

Hierarchy::

    PollerError
    ├── ConfigurationError    - required setting missing or invalid
    ├── SecretStoreError      - parameter store fetch/parse failure (fail-fast)
    ├── TransportError        - SFTP connect/list failure (whole batch)
    └── FileProcessingError   - download/upload/relocate of one file
"""

from __future__ import annotations


class PollerError(Exception):
    """Base exception for all poller errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- Configuration -----------------------------------------------------------


class ConfigurationError(PollerError):
    """Raised when a required setting is absent, empty, or malformed."""


class SecretStoreError(PollerError):
    """Raised when the secret blob cannot be fetched or parsed.

    Never converted into a response: the invocation terminates.
    """

    def __init__(self, message: str, *, parameter: str | None = None) -> None:
        super().__init__(message, details={"parameter": parameter})
        self.parameter = parameter


# --- Transport ---------------------------------------------------------------


class TransportError(PollerError):
    """Raised when the SFTP session cannot be opened or the incoming directory listed."""

    def __init__(self, message: str, *, host: str | None = None, path: str | None = None) -> None:
        super().__init__(message, details={"host": host, "path": path})
        self.host = host
        self.path = path


# --- Per-file processing -----------------------------------------------------


class FileProcessingError(PollerError):
    """Raised when one file fails; recovered into an error outcome by the orchestrator."""

    def __init__(self, filename: str, stage: str, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message, details={"filename": filename, "stage": stage})
        self.filename = filename
        self.stage = stage
        if cause is not None:
            self.__cause__ = cause
