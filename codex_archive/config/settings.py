"""Configuration utilities for the Codex archive."""

import os
from pathlib import Path
from typing import Optional, Tuple

from .constants import CONFIG_DIR_NAME, DEFAULT_DB_FILENAME, ENV_VAR_DEFINITIONS


def get_config_dir() -> Path:
    """Return ``~/.config/codex``."""
    return Path.home() / ".config" / CONFIG_DIR_NAME


def get_db_path() -> Path:
    """Get the item store path.

    CODEX_TEST_DB wins so the test suite never touches a real archive,
    then CODEX_DB_PATH, then the default location in the config directory
    (created if missing).
    """
    test_db = os.environ.get("CODEX_TEST_DB")
    if test_db:
        return Path(test_db)

    configured = os.environ.get("CODEX_DB_PATH")
    if configured:
        return Path(configured).expanduser()

    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir / DEFAULT_DB_FILENAME


def validate_env_var(name: str, value: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate a single environment variable value.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if name not in ENV_VAR_DEFINITIONS:
        return True, None

    if value is None:
        return True, None

    valid_values = ENV_VAR_DEFINITIONS[name].get("valid_values")
    if valid_values is None:
        return True, None

    if value.upper() not in [v.upper() for v in valid_values]:
        return False, f"Invalid value '{value}' for {name}. Valid values: {valid_values}"

    return True, None


def validate_all_env_vars() -> list[str]:
    """Validate all CODEX_* environment variables.

    Returns:
        List of error messages (empty if all valid).
    """
    errors = []
    for name in ENV_VAR_DEFINITIONS:
        is_valid, error = validate_env_var(name, os.environ.get(name))
        if not is_valid:
            errors.append(error)
    return errors


def get_env_var(name: str, validate: bool = True) -> Optional[str]:
    """Get an environment variable, falling back to its declared default.

    Raises:
        ConfigurationError: If validate=True and the value is invalid.
    """
    from ..exceptions import ConfigurationError

    value = os.environ.get(name)

    if validate and value is not None:
        is_valid, error = validate_env_var(name, value)
        if not is_valid:
            raise ConfigurationError(error, setting=name)

    if value is None and name in ENV_VAR_DEFINITIONS:
        return ENV_VAR_DEFINITIONS[name].get("default")

    return value
