"""
Connections to the two managed services: the SFTP server and S3.
"""

from sftp_poller.connections.s3 import S3Connection
from sftp_poller.connections.sftp import SFTPConnection, load_private_key

__all__ = [
    "S3Connection",
    "SFTPConnection",
    "load_private_key",
]
