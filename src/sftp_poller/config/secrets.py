"""
Parameter-store secrets for the poller.

One SecureString parameter holds a JSON object; its keys use the same names as
the environment variables (``SFTP_HOST``, ``SFTP_PRIVATE_KEY``, ...).
"""

from __future__ import annotations

import json
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from sftp_poller.exceptions import SecretStoreError
from sftp_poller.utils.logging import get_logger

logger = get_logger("sftp_poller.config.secrets")

SECRET_PARAMETER_NAME = "/sftp-poller/referwell/config"


def fetch_secret_values(name: str = SECRET_PARAMETER_NAME, *, client: Any = None) -> dict[str, str]:
    """
    Fetch and decode the secret configuration blob.

    Args:
        name: Parameter name (fixed in production)
        client: Optional SSM client (default: ``boto3.client("ssm")``)

    Returns:
        Configuration keys mapped to string values

    Raises:
        SecretStoreError: On any fetch failure, empty value, or a value that is
            not a JSON object. No retry is attempted.
    """
    logger.info(f"Loading configuration from parameter store: {name}")
    try:
        if client is None:
            import boto3

            client = boto3.client("ssm")
        response = client.get_parameter(Name=name, WithDecryption=True)
    except (ClientError, BotoCoreError) as e:
        raise SecretStoreError(f"Failed to fetch parameter {name}: {e}", parameter=name) from e

    raw = (response.get("Parameter") or {}).get("Value") or ""
    if not raw.strip():
        raise SecretStoreError(f"Parameter {name} is empty", parameter=name)

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SecretStoreError(f"Parameter {name} is not valid JSON: {e.msg}", parameter=name) from None

    if not isinstance(data, dict):
        raise SecretStoreError(
            f"Parameter {name} must hold a JSON object, got {type(data).__name__}", parameter=name
        )

    values = {str(key): value if isinstance(value, str) else json.dumps(value) for key, value in data.items()}
    logger.info(f"Loaded {len(values)} configuration values from parameter store")
    return values
