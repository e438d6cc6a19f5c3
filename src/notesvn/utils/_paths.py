from pathlib import Path

import platformdirs

APP_NAME = "notesvn"


def get_user_config_dir() -> Path:
    """Get the per-user configuration directory."""
    return platformdirs.user_config_path(APP_NAME)


def get_user_config_file() -> Path:
    """Get the path to the per-user config.toml."""
    return get_user_config_dir() / "config.toml"


def get_log_dir() -> Path:
    """Get the per-user log directory."""
    return platformdirs.user_log_path(APP_NAME)


def get_log_file() -> Path:
    """Get the path to the default log file."""
    return get_log_dir() / "notesvn.log"


def get_tree_config_file(root: Path) -> Path:
    """Get the path to the tree-local config file.

    Args:
        root: The tracked-tree root directory.

    Returns:
        Path to ``<root>/.notesvn.toml``.
    """
    return root / ".notesvn.toml"
