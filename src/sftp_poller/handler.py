"""
Scheduled-invocation entry points.

``handler`` reads configuration from the environment. ``secure_handler`` first
loads the configuration blob from the parameter store; if that fails the
invocation terminates with the exception instead of a response.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sftp_poller.config.secrets import fetch_secret_values
from sftp_poller.config.settings import load_settings
from sftp_poller.connections.s3 import S3Connection
from sftp_poller.report.summary import failure_response, log_summary, success_response, summarize
from sftp_poller.sync.sftp_poll import poll_sftp_server
from sftp_poller.sync.types import ObjectUploader, RemoteSession
from sftp_poller.utils.logging import get_logger, set_log_level

logger = get_logger("sftp_poller.handler")


def run_poll(
    event: Mapping[str, Any] | None,
    *,
    environ: Mapping[str, str] | None = None,
    secrets: Mapping[str, Any] | None = None,
    overrides: Mapping[str, Any] | None = None,
    session: RemoteSession | None = None,
    uploader: ObjectUploader | None = None,
) -> dict[str, Any]:
    """
    Load configuration, run one batch and build the scheduler response.

    Configuration and transport failures become a 500 response; file-level
    failures are itemized in a 200 response.
    """
    event = event or {}
    logger.info("SFTP Poller triggered by EventBridge")
    logger.info(f"Event ID: {event.get('id')}, Time: {event.get('time')}")

    try:
        settings = load_settings(environ, secrets=secrets, overrides=overrides)
        set_log_level(settings.log_level)
        logger.info(f"Starting SFTP poll for path: {settings.remote_path}")

        if uploader is None:
            uploader = S3Connection(settings.bucket, settings.s3)
        outcomes = poll_sftp_server(
            settings.connection,
            settings.remote_path,
            uploader=uploader,
            session=session,
        )
    except Exception as e:
        logger.error(f"SFTP Poller execution failed: {e}")
        return failure_response(e, event)

    summary = summarize(outcomes)
    log_summary(summary, bucket=settings.bucket)
    return success_response(summary)


def handler(event: Mapping[str, Any] | None, context: Any = None) -> dict[str, Any]:
    """Lambda entry point; configuration from environment variables."""
    return run_poll(event)


def secure_handler(event: Mapping[str, Any] | None, context: Any = None) -> dict[str, Any]:
    """
    Lambda entry point with parameter-store configuration.

    Raises:
        SecretStoreError: If the configuration blob cannot be loaded.
    """
    secrets = fetch_secret_values()
    return run_poll(event, secrets=secrets)
