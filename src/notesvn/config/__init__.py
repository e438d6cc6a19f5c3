"""Configuration loading for notesvn.

Configuration merges, lowest to highest precedence: built-in defaults, the
per-user ``config.toml``, the tree's ``.notesvn.toml``, ``NOTESVN_*``
environment variables, and explicit overrides.
"""

from ._defaults import DEFAULT_CONFIG
from ._loader import (
    deep_merge,
    parse_env_vars,
    parse_string_value,
    read_toml_file,
    set_nested_key,
)
from ._models import (
    CacheConfig,
    ClientConfig,
    Config,
    ConfigSource,
    ConfigSourceName,
    HistoryConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    TreeConfig,
)

__all__ = [
    "DEFAULT_CONFIG",
    "CacheConfig",
    "ClientConfig",
    "Config",
    "ConfigSource",
    "ConfigSourceName",
    "HistoryConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "TreeConfig",
    "deep_merge",
    "parse_env_vars",
    "parse_string_value",
    "read_toml_file",
    "set_nested_key",
]
