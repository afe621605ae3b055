"""
SFTP poller - scheduled SFTP -> S3 transfer of newly arrived CSV files.
"""

__version__ = "0.1.0"

# Configuration
from sftp_poller.config import (
    ConnectionParameters,
    PollerSettings,
    S3ClientOptions,
    fetch_secret_values,
    load_config_file,
    load_settings,
)

# Exceptions
from sftp_poller.exceptions import (
    ConfigurationError,
    FileProcessingError,
    PollerError,
    SecretStoreError,
    TransportError,
)

# Entry points
from sftp_poller.handler import handler, run_poll, secure_handler

# Records
from sftp_poller.models import DownloadedPayload, FileOutcome, OutcomeStatus, RemoteFileEntry, Stage

# Reporting
from sftp_poller.report import InvocationSummary, summarize

# Orchestration
from sftp_poller.sync import poll_sftp_server

# Logging utilities
from sftp_poller.utils.logging import get_logger, set_log_level, setup_logging

__all__ = [
    # Entry points
    "handler",
    "secure_handler",
    "run_poll",
    # Orchestration
    "poll_sftp_server",
    "summarize",
    # Configuration
    "ConnectionParameters",
    "PollerSettings",
    "S3ClientOptions",
    "fetch_secret_values",
    "load_config_file",
    "load_settings",
    # Records
    "DownloadedPayload",
    "FileOutcome",
    "InvocationSummary",
    "OutcomeStatus",
    "RemoteFileEntry",
    "Stage",
    # Exceptions
    "ConfigurationError",
    "FileProcessingError",
    "PollerError",
    "SecretStoreError",
    "TransportError",
    # Logging
    "get_logger",
    "set_log_level",
    "setup_logging",
]
