"""
sftp-poller poll - Run one polling batch from the command line.
"""

import os
import uuid
from datetime import datetime, timezone
from pathlib import Path

import typer
from rich.console import Console

from sftp_poller.config.loader import load_config_file
from sftp_poller.config.secrets import SECRET_PARAMETER_NAME, fetch_secret_values
from sftp_poller.config.settings import LOG_LEVEL, SFTP_REMOTE_PATH
from sftp_poller.exceptions import ConfigurationError, SecretStoreError
from sftp_poller.handler import run_poll
from sftp_poller.utils.logging import get_logger, setup_logging

logger = get_logger("sftp_poller.cli.poll")

console = Console()

app = typer.Typer(name="poll", help="Poll the SFTP server once and upload new files", invoke_without_command=True)


def manual_event() -> dict:
    """Trigger envelope for a command-line run."""
    return {
        "version": "0",
        "id": str(uuid.uuid4()),
        "detail-type": "Manual Invocation",
        "source": "sftp-poller.cli",
        "account": "",
        "time": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "region": os.environ.get("AWS_REGION", ""),
        "resources": [],
        "detail": {},
    }


@app.callback()
def poll(
    ctx: typer.Context,
    config_path: Path | None = typer.Option(None, "--config", "-c", help="YAML file with configuration values"),
    remote_path: str | None = typer.Option(None, "--remote-path", "-p", help="Remote base path (default: /)"),
    use_secret_store: bool = typer.Option(
        False, "--use-secret-store", help=f"Load configuration from parameter {SECRET_PARAMETER_NAME}"
    ),
    log_level: str | None = typer.Option(None, "--log-level", "-l", help="DEBUG, INFO, WARNING or ERROR"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write logs to this file"),
    plain: bool = typer.Option(False, "--plain", help="Plain log lines instead of rich output"),
) -> None:
    """
    Poll the incoming directory once.

    Prints the response body as JSON. Exits 1 when the batch fails as a whole,
    2 when the parameter store cannot be read.
    """
    if ctx.invoked_subcommand is not None:
        return

    setup_logging(
        level=log_level or os.environ.get(LOG_LEVEL, "INFO"),
        log_file=log_file,
        use_rich=not plain,
    )

    overrides: dict[str, str] = {}
    if config_path is not None:
        try:
            overrides.update(load_config_file(config_path))
        except ConfigurationError as e:
            logger.error(f"Invalid configuration file: {e}")
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1) from e
    if remote_path:
        overrides[SFTP_REMOTE_PATH] = remote_path
    if log_level:
        # run_poll applies the merged level again
        overrides[LOG_LEVEL] = log_level

    secrets = None
    if use_secret_store:
        try:
            secrets = fetch_secret_values()
        except SecretStoreError as e:
            logger.error(f"Parameter store unavailable: {e}")
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(2) from e

    response = run_poll(manual_event(), secrets=secrets, overrides=overrides)
    console.print_json(response["body"])

    if response["statusCode"] != 200:
        raise typer.Exit(1)
