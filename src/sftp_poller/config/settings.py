"""
Typed poller settings built from explicit key/value layers.

Layers are plain mappings (process environment, secret store values, CLI or
config-file overrides). Later layers win. Nothing is written back into
``os.environ``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from sftp_poller.exceptions import ConfigurationError

# Environment keys
SFTP_HOST = "SFTP_HOST"
SFTP_PORT = "SFTP_PORT"
SFTP_USERNAME = "SFTP_USERNAME"
SFTP_PRIVATE_KEY = "SFTP_PRIVATE_KEY"
SFTP_REMOTE_PATH = "SFTP_REMOTE_PATH"
BUCKET = "SFTP_APPOINTMENTS_BUCKET"
LOCALSTACK_ENDPOINT = "LOCALSTACK_ENDPOINT"
AWS_REGION = "AWS_REGION"
LOG_LEVEL = "SFTP_POLLER_LOG_LEVEL"

DEFAULT_PORT = 22
DEFAULT_REMOTE_PATH = "/"


@dataclass(frozen=True)
class ConnectionParameters:
    host: str
    username: str
    private_key: str = field(repr=False)
    port: int = DEFAULT_PORT


@dataclass(frozen=True)
class S3ClientOptions:
    """
    Object-store client options.

    ``endpoint_url`` points the client at a local S3 (LocalStack, MinIO) and
    switches it to path-style addressing.
    """

    endpoint_url: str | None = None
    region: str | None = None

    @property
    def force_path_style(self) -> bool:
        return bool(self.endpoint_url)

    def client_kwargs(self) -> dict[str, Any]:
        """Build kwargs for ``boto3.client("s3", ...)``."""
        kwargs: dict[str, Any] = {}
        if self.region:
            kwargs["region_name"] = self.region
        if self.endpoint_url:
            from botocore.config import Config as BotoConfig

            kwargs["endpoint_url"] = self.endpoint_url
            kwargs["config"] = BotoConfig(s3={"addressing_style": "path"})
        return kwargs


@dataclass(frozen=True)
class PollerSettings:
    connection: ConnectionParameters
    remote_path: str = DEFAULT_REMOTE_PATH
    bucket: str | None = None
    s3: S3ClientOptions = field(default_factory=S3ClientOptions)
    log_level: str = "INFO"


def merge_layers(*layers: Mapping[str, Any] | None) -> dict[str, str]:
    """Merge key/value layers left to right; ``None`` values never override."""
    merged: dict[str, str] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            if value is None:
                continue
            merged[str(key)] = str(value)
    return merged


def load_connection_parameters(values: Mapping[str, str]) -> ConnectionParameters:
    """
    Build SFTP connection parameters, failing before any network activity.

    Raises:
        ConfigurationError: If the private key, host or username is missing or
            empty, or the port is not a valid integer.
    """
    private_key = values.get(SFTP_PRIVATE_KEY, "")
    if not private_key.strip():
        raise ConfigurationError(f"{SFTP_PRIVATE_KEY} environment variable is required")

    host = values.get(SFTP_HOST, "").strip()
    if not host:
        raise ConfigurationError(f"{SFTP_HOST} environment variable is required")

    username = values.get(SFTP_USERNAME, "").strip()
    if not username:
        raise ConfigurationError(f"{SFTP_USERNAME} environment variable is required")

    raw_port = values.get(SFTP_PORT, "").strip() or str(DEFAULT_PORT)
    try:
        port = int(raw_port)
    except ValueError:
        raise ConfigurationError(f"{SFTP_PORT} must be an integer, got {raw_port!r}") from None
    if not 0 < port < 65536:
        raise ConfigurationError(f"{SFTP_PORT} out of range: {port}")

    return ConnectionParameters(host=host, port=port, username=username, private_key=private_key)


def load_settings(
    environ: Mapping[str, str] | None = None,
    *,
    secrets: Mapping[str, Any] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> PollerSettings:
    """
    Load poller settings.

    Args:
        environ: Base layer (default: ``os.environ``)
        secrets: Values fetched from the parameter store
        overrides: Explicit values (CLI flags, config file)

    Returns:
        PollerSettings for one invocation
    """
    values = merge_layers(os.environ if environ is None else environ, secrets, overrides)

    return PollerSettings(
        connection=load_connection_parameters(values),
        remote_path=values.get(SFTP_REMOTE_PATH) or DEFAULT_REMOTE_PATH,
        bucket=values.get(BUCKET) or None,
        s3=S3ClientOptions(
            endpoint_url=values.get(LOCALSTACK_ENDPOINT) or None,
            region=values.get(AWS_REGION) or None,
        ),
        log_level=values.get(LOG_LEVEL) or "INFO",
    )
