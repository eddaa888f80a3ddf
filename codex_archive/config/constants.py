"""
Centralized constants for the Codex archive.
"""

# =============================================================================
# ITEM KINDS
# =============================================================================

ITEM_KINDS = ("document", "audio", "video", "link", "note")

# Only these kinds may become group parents or group children
GROUPABLE_KINDS = frozenset({"audio", "video", "link"})

# =============================================================================
# STORAGE
# =============================================================================

CONFIG_DIR_NAME = "codex"
DEFAULT_DB_FILENAME = "codex.db"
ITEMS_TABLE = "codex_items"

# =============================================================================
# DISPLAY LIMITS
# =============================================================================

MAX_TREE_CHILDREN = 5  # Children shown under each expanded group in tree view
MAX_SHOW_CHILDREN = 20  # Children listed by `groups show`
TITLE_DISPLAY_WIDTH = 40

# =============================================================================
# ENVIRONMENT VARIABLES
# =============================================================================

ENV_VAR_DEFINITIONS = {
    "CODEX_DB_PATH": {
        "description": "Path to the SQLite item store",
        "default": None,
        "valid_values": None,
    },
    "CODEX_TEST_DB": {
        "description": "Item store path used by the test suite (takes precedence)",
        "default": None,
        "valid_values": None,
    },
    "CODEX_OWNER": {
        "description": "Default owner id for CLI commands",
        "default": None,
        "valid_values": None,
    },
    "CODEX_LOG_LEVEL": {
        "description": "Log level for the codex loggers",
        "default": "WARNING",
        "valid_values": ["DEBUG", "INFO", "WARNING", "ERROR"],
    },
}
