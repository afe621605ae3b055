"""
Main CLI entry point.
"""

import typer

from sftp_poller import __version__
from sftp_poller.cli import poll


def version_callback(value: bool):
    """Callback to display version and exit."""
    if value:
        typer.echo(f"sftp-poller version {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="sftp-poller",
    help="SFTP poller - move new CSV files from an SFTP server into S3",
    add_completion=False,
)

app.add_typer(poll.app, name="poll")


@app.callback(invoke_without_command=True)
def entrypoint(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """
    SFTP poller - move new CSV files from an SFTP server into S3.

    Run 'sftp-poller <command> --help' for help on a specific command.
    """
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


if __name__ == "__main__":  # pragma: no cover
    app()
