"""
Shared utilities (logging).
"""

from sftp_poller.utils.logging import get_logger, set_log_level, setup_logging

__all__ = [
    "get_logger",
    "set_log_level",
    "setup_logging",
]
