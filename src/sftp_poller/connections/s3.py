"""
S3 connection for uploading polled files.

Provides a lazily created boto3 client. Credentials come from the
environment or the execution role.
"""

from __future__ import annotations

from typing import Any, Optional

from sftp_poller.config.settings import BUCKET, S3ClientOptions
from sftp_poller.exceptions import ConfigurationError
from sftp_poller.utils.logging import get_logger

logger = get_logger("sftp_poller.connections.s3")


class S3Connection:
    """
    S3 upload target.

    The bucket is checked at upload time, so a missing bucket fails each file
    instead of the whole batch.
    """

    def __init__(self, bucket: Optional[str], options: S3ClientOptions | None = None):
        self._bucket = bucket
        self.options = options or S3ClientOptions()
        self._client = None

    @property
    def bucket(self) -> str:
        """Destination bucket name."""
        if not self._bucket:
            raise ConfigurationError(f"{BUCKET} environment variable is not set")
        return self._bucket

    @property
    def client(self):
        """
        Get boto3 S3 client (lazy initialization).

        Returns:
            boto3.client('s3') instance
        """
        if self._client is None:
            import boto3

            self._client = boto3.client("s3", **self.options.client_kwargs())
        return self._client

    def put_object(
        self,
        key: str,
        body: bytes,
        *,
        content_type: str,
        metadata: Optional[dict[str, str]] = None,
    ) -> str:
        """
        Upload bytes under ``key``.

        Args:
            key: S3 object key
            body: Object content
            content_type: Content type header
            metadata: User metadata (stored as x-amz-meta-*)

        Returns:
            S3 URI of uploaded object
        """
        kwargs: dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": body,
            "ContentType": content_type,
        }
        if metadata:
            kwargs["Metadata"] = metadata

        self.client.put_object(**kwargs)
        logger.info(f"File uploaded to S3: {key}")
        return f"s3://{self.bucket}/{key}"

    def close(self) -> None:
        """Drop the client; boto3 clients need no explicit close."""
        self._client = None

    def __enter__(self) -> "S3Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(bucket='{self._bucket}')"
