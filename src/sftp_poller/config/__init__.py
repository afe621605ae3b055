"""
Configuration management.

Environment, parameter-store and config-file layers merged into typed settings.
"""

from sftp_poller.config.loader import load_config_file
from sftp_poller.config.resolver import resolve_config
from sftp_poller.config.secrets import SECRET_PARAMETER_NAME, fetch_secret_values
from sftp_poller.config.settings import (
    ConnectionParameters,
    PollerSettings,
    S3ClientOptions,
    load_connection_parameters,
    load_settings,
)

__all__ = [
    "ConnectionParameters",
    "PollerSettings",
    "S3ClientOptions",
    "SECRET_PARAMETER_NAME",
    "fetch_secret_values",
    "load_config_file",
    "load_connection_parameters",
    "load_settings",
    "resolve_config",
]
