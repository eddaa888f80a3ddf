"""Configuration for the Codex archive."""

from .constants import GROUPABLE_KINDS, ITEM_KINDS
from .settings import get_config_dir, get_db_path, get_env_var, validate_all_env_vars

__all__ = [
    "GROUPABLE_KINDS",
    "ITEM_KINDS",
    "get_config_dir",
    "get_db_path",
    "get_env_var",
    "validate_all_env_vars",
]
