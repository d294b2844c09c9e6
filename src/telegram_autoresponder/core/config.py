"""
Configuration loading.

Precedence, lowest first: model defaults, YAML config file, environment
variables (a .env file in the working directory is loaded first). A missing
config file is not an error so the daemon can be configured from the
environment alone, e.g. inside a container.
"""
import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from telegram_autoresponder.core.errors import ConfigError
from telegram_autoresponder.core.models import DaemonConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")

# env var -> config field
ENV_VARS = {
    "APP_ID": "app_id",
    "APP_HASH": "app_hash",
    "SESSION_FILE": "session_file",
    "PHONE": "phone",
    "PASSWORD": "password",
    "RESPONSE_MSG": "response_message",
    "RESPONSE_TIMEOUT_HOURS": "response_timeout_hours",
    "LOG_LEVEL": "log_level",
    "LOG_FILE": "log_file",
}

INT_FIELDS = {"app_id", "response_timeout_hours"}


def read_config_file(path: Path) -> dict[str, Any]:
    """Read the YAML config file, returning an empty dict if it does not exist."""
    if not path.exists():
        logger.debug("No config file at %s, using environment only", path)
        return {}

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level")

    unknown = set(data) - set(DaemonConfig.model_fields)
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(sorted(unknown)))
        data = {k: v for k, v in data.items() if k not in unknown}
    return data


def read_env(environ: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
    """Collect overrides from environment variables. Empty values are ignored."""
    environ = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}

    for var, field in ENV_VARS.items():
        value = environ.get(var)
        if not value:
            continue
        if field in INT_FIELDS:
            try:
                overrides[field] = int(value)
            except ValueError:
                raise ConfigError(f"Invalid {var}: {value!r} is not an integer") from None
        else:
            overrides[field] = value
    return overrides


def load_config(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    use_dotenv: bool = True
) -> DaemonConfig:
    """
    Load and validate the daemon configuration.

    Args:
        config_path: YAML file to read (defaults to ./config.yaml)
        environ: Environment mapping, os.environ when None
        use_dotenv: Load ./.env into os.environ before reading it

    Returns:
        Validated DaemonConfig

    Raises:
        ConfigError: On unreadable YAML, bad numeric env values or failed validation
    """
    if use_dotenv and environ is None:
        load_dotenv()

    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    data = read_config_file(path)
    data.update(read_env(environ))

    try:
        return DaemonConfig(**data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from e
