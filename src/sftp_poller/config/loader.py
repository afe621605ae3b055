"""
Configuration file loading.

An optional YAML file whose top-level keys are the same names the poller reads
from the environment, e.g.::

    SFTP_HOST: sftp.example.com
    SFTP_USERNAME: poller
    SFTP_PRIVATE_KEY: ${POLLER_KEY}
    SFTP_APPOINTMENTS_BUCKET: appointments-dev
"""

from collections.abc import Mapping
from pathlib import Path

import yaml

from sftp_poller.config.resolver import resolve_config
from sftp_poller.exceptions import ConfigurationError


def load_config_file(path: str | Path, environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """
    Load a flat YAML config file and substitute ``${VAR}`` placeholders.

    Args:
        path: Path to the YAML file
        environ: Variables for substitution (default: ``os.environ``)

    Returns:
        Mapping of configuration keys to string values

    Raises:
        ConfigurationError: If the file is missing, unreadable, not valid YAML,
            or not a mapping of scalar values
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        if mark is not None:
            raise ConfigurationError(
                f"Error parsing {path.name} at line {mark.line + 1}, column {mark.column + 1}:\n"
                f"  {e}\n"
                f"  Suggestion: Check YAML syntax, ensure proper indentation and quotes"
            ) from e
        raise ConfigurationError(f"Error parsing {path.name}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file {path} must be a mapping, got {type(data).__name__}"
        )

    nested = [key for key, value in data.items() if isinstance(value, (dict, list))]
    if nested:
        raise ConfigurationError(f"Configuration file {path} must be flat; nested values for: {', '.join(nested)}")

    resolved = resolve_config(data, environ)
    return {str(key): str(value) for key, value in resolved.items() if value is not None}
