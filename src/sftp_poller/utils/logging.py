"""
Logging configuration for the SFTP poller.

Console output goes through rich's RichHandler by default; Lambda runs use the
plain single-line formatter so CloudWatch receives one record per line.
"""

import logging
import os
import sys
import threading
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "sftp_poller"
LOG_LEVEL_ENV = "SFTP_POLLER_LOG_LEVEL"

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("paramiko", "paramiko.transport", "botocore", "boto3", "urllib3")


class FileFormatter(logging.Formatter):
    """Formatter for file logs - clean and parseable."""

    def __init__(self) -> None:
        super().__init__(fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")


class PlainFormatter(logging.Formatter):
    """Single-line console format; errors also get file:line."""

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.levelno >= logging.ERROR and record.pathname:
            filename = Path(record.pathname).name
            base = f"{record.levelname}: {self.formatTime(record)} - {filename}:{record.lineno} - {message}"
        else:
            base = f"{record.levelname}: {self.formatTime(record)} - {message}"
        if record.exc_info:
            base += "\n" + self.formatException(record.exc_info)
        return base


# Map string level names to logging constants
LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _parse_level(level: str | int | None) -> int:
    """
    Parse logging level from string or int.

    Unknown names fall back to INFO.
    """
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        return LEVEL_MAP.get(level.strip().upper(), logging.INFO)
    return logging.INFO


def setup_logging(
    level: str | int = logging.INFO,
    log_file: str | Path | None = None,
    file_mode: str = "a",
    console_enabled: bool = True,
    use_rich: bool = True,
) -> logging.Logger:
    """
    Setup logging for the poller.

    Args:
        level: Logging level as string (DEBUG, INFO, etc.) or int (default: INFO)
        log_file: Optional file path to write logs to (default: None, console only)
        file_mode: File mode for file handler - 'a' for append, 'w' for overwrite
        console_enabled: Whether to enable console logging (default: True)
        use_rich: Use RichHandler for console output; False gives plain lines

    Returns:
        The package root logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)

    # Only clear handlers from our own logger, never root or library loggers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    level_int = _parse_level(level)
    logger.setLevel(level_int)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level_int, logging.WARNING))

    if console_enabled:
        if use_rich:
            logger.addHandler(
                RichHandler(
                    console=Console(stderr=True),
                    level=level_int,
                    show_time=True,
                    show_path=True,
                    markup=False,
                    rich_tracebacks=True,
                    tracebacks_show_locals=False,
                    show_level=True,
                    log_time_format="[%X]",
                    omit_repeated_times=False,
                )
            )
        else:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(level_int)
            console_handler.setFormatter(PlainFormatter())
            logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode=file_mode)
        # File captures everything; the logger level still filters
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(FileFormatter())
        logger.addHandler(file_handler)

    # Records also reach root handlers (Lambda runtime, pytest caplog)
    logger.propagate = True

    return logger


def set_log_level(level: str | int) -> None:
    """
    Change the package level after setup.

    Console handlers follow the new level; file handlers keep capturing
    everything the logger lets through.
    """
    level_int = _parse_level(level)
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level_int)
    for handler in logger.handlers:
        if not isinstance(handler, logging.FileHandler):
            handler.setLevel(level_int)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level_int, logging.WARNING))


_logging_setup_done = False
_logging_setup_lock = threading.Lock()


def _auto_setup_logging() -> None:
    """
    Configure logging from the environment on first use.

    Skipped when setup_logging() already ran (the package logger has handlers).
    When the host already installed a root handler (the Lambda runtime does),
    only the level is set so records are not printed twice.
    """
    global _logging_setup_done

    if _logging_setup_done:
        return

    with _logging_setup_lock:
        if _logging_setup_done:
            return
        package_logger = logging.getLogger(ROOT_LOGGER_NAME)
        if not package_logger.handlers:
            level = os.environ.get(LOG_LEVEL_ENV, "INFO")
            if logging.getLogger().handlers:
                package_logger.setLevel(_parse_level(level))
            else:
                setup_logging(level=level, use_rich=False)
        _logging_setup_done = True


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger instance, setting up logging from the environment if needed.

    Args:
        name: Logger name (default: "sftp_poller")

    Returns:
        Logger instance
    """
    _auto_setup_logging()
    return logging.getLogger(name)
