"""
Poll-and-transfer orchestration: SFTP incoming directory -> S3.
"""

from sftp_poller.sync.sftp_poll import (
    build_storage_key,
    is_candidate,
    poll_sftp_server,
    process_file,
    remote_directories,
)
from sftp_poller.sync.types import ObjectUploader, RemoteSession

__all__ = [
    "ObjectUploader",
    "RemoteSession",
    "build_storage_key",
    "is_candidate",
    "poll_sftp_server",
    "process_file",
    "remote_directories",
]
