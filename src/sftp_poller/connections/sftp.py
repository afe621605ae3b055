"""
SFTP session for polling the remote incoming directory.

Wraps paramiko with the handful of operations the poller needs: connect,
list, get (into memory), rename and close.
"""

from __future__ import annotations

import io
import socket
import stat
from datetime import datetime, timezone
from typing import Any

import paramiko

from sftp_poller.config.settings import ConnectionParameters
from sftp_poller.exceptions import TransportError
from sftp_poller.models import DIRECTORY, OTHER, REGULAR_FILE, SYMLINK, RemoteFileEntry
from sftp_poller.utils.logging import get_logger

logger = get_logger("sftp_poller.connections.sftp")

DEFAULT_CONNECT_TIMEOUT_S = 30.0

# Key types tried in order when parsing private key material
KEY_CLASSES: tuple[type[paramiko.PKey], ...] = (paramiko.RSAKey, paramiko.Ed25519Key, paramiko.ECDSAKey)


def load_private_key(material: str, passphrase: str | None = None) -> paramiko.PKey:
    """
    Parse PEM/OpenSSH private key material held in a string.

    Raises:
        TransportError: If no supported key type accepts the material.
    """
    errors = []
    for key_class in KEY_CLASSES:
        try:
            return key_class.from_private_key(io.StringIO(material), password=passphrase)
        except (paramiko.SSHException, ValueError) as e:
            errors.append(f"{key_class.__name__}: {e}")
    raise TransportError("Unable to parse SFTP private key (" + "; ".join(errors) + ")")


def entry_type(mode: int | None) -> str:
    """Single-character kind for an SFTP ``st_mode``."""
    if mode is None:
        return OTHER
    if stat.S_ISREG(mode):
        return REGULAR_FILE
    if stat.S_ISDIR(mode):
        return DIRECTORY
    if stat.S_ISLNK(mode):
        return SYMLINK
    return OTHER


class SFTPConnection:
    """
    One authenticated SFTP session.

    ``close()`` is safe to call whether or not ``connect()`` succeeded.
    """

    def __init__(self, params: ConnectionParameters, *, connect_timeout_s: float = DEFAULT_CONNECT_TIMEOUT_S):
        self.params = params
        self.connect_timeout_s = connect_timeout_s
        self._transport: paramiko.Transport | None = None
        self._client: paramiko.SFTPClient | None = None

    @property
    def client(self) -> paramiko.SFTPClient:
        if self._client is None:
            raise TransportError(f"SFTP session to {self.params.host} is not connected", host=self.params.host)
        return self._client

    def connect(self) -> paramiko.SFTPClient:
        """Connect (once) and return a live `paramiko.SFTPClient`."""
        if self._client is not None:
            return self._client

        params = self.params
        logger.info(f"Connecting to SFTP server: {params.host}:{params.port}")
        pkey = load_private_key(params.private_key)

        sock: socket.socket | None = None
        transport: paramiko.Transport | None = None
        try:
            sock = socket.create_connection((params.host, params.port), timeout=self.connect_timeout_s)
            transport = paramiko.Transport(sock)
            transport.banner_timeout = self.connect_timeout_s
            transport.auth_timeout = self.connect_timeout_s
            transport.connect(username=params.username, pkey=pkey)
            client = paramiko.SFTPClient.from_transport(transport)
            if client is None:
                raise paramiko.SSHException("server refused the sftp subsystem")
        except (OSError, paramiko.SSHException) as e:
            # The transport owns the socket once created
            if transport is not None:
                transport.close()
            elif sock is not None:
                sock.close()
            raise TransportError(
                f"Failed to connect to SFTP server {params.host}:{params.port}: {e}", host=params.host
            ) from e

        self._transport = transport
        self._client = client
        return client

    def list(self, path: str) -> list[RemoteFileEntry]:
        """List directory entries in server order."""
        entries = []
        for attr in self.client.listdir_attr(path):
            mtime = getattr(attr, "st_mtime", None)
            entries.append(
                RemoteFileEntry(
                    name=attr.filename,
                    type=entry_type(getattr(attr, "st_mode", None)),
                    size=int(getattr(attr, "st_size", 0) or 0),
                    modified_at=datetime.fromtimestamp(mtime, tz=timezone.utc) if mtime else None,
                )
            )
        return entries

    def get(self, path: str) -> bytes:
        """Download a remote file into memory."""
        buffer = io.BytesIO()
        self.client.getfo(path, buffer)
        return buffer.getvalue()

    def rename(self, source: str, destination: str) -> None:
        self.client.rename(source, destination)

    def close(self) -> None:
        """Close SFTP client + underlying transport."""
        try:
            if self._client is not None:
                self._client.close()
        finally:
            self._client = None
            try:
                if self._transport is not None:
                    self._transport.close()
            finally:
                self._transport = None
        logger.info("SFTP connection closed")

    def __enter__(self) -> SFTPConnection:
        self.connect()
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(host='{self.params.host}', port={self.params.port})"
