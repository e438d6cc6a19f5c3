"""Default configuration values.

This module defines the built-in default configuration values that are used
when no other configuration sources provide values.
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "client": {
        "binary": "svn",
        "admin_binary": "svnadmin",
        "command_timeout": 120.0,
        "lookup_timeout": 5.0,
        "repo_size_timeout": 3.0,
        "max_parallel_lookups": 8,
    },
    "tree": {
        "root": "",
        "marker": ".svn",
    },
    "cache": {
        "freshness_window": 2.0,
        "refresh_throttle": 0.2,
    },
    "history": {
        "limit": 50,
        "enrich_sizes": True,
    },
    "logging": {
        "level": "info",
        "format": "json",
        "file": "",
    },
}
