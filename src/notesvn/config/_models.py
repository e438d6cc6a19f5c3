# pyright: reportExplicitAny=false, reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""Configuration models.

This module provides the Pydantic models for each configuration section and
the Config container that merges every source.
"""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError

from notesvn.exceptions import ConfigValidationError
from notesvn.utils._paths import get_tree_config_file, get_user_config_file

from ._defaults import DEFAULT_CONFIG
from ._loader import deep_merge, parse_env_vars, read_toml_file


class LogLevel(StrEnum):
    """Log level threshold values."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class ConfigSourceName(StrEnum):
    """Configuration source names, highest precedence first."""

    OVERRIDES = "overrides"
    ENV = "env"
    TREE = "tree"
    USER = "user"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class ConfigSource:
    """A configuration source that contributed values.

    Attributes:
        name: The source type identifier.
        path: Path to the config file, or None for non-file sources.
        exists: Whether the source exists.
        values: Configuration values from this source.
    """

    name: ConfigSourceName
    path: Path | None
    exists: bool
    values: dict[str, Any]


class ClientConfig(BaseModel):
    """External client settings.

    Attributes:
        binary: Version-control client executable.
        admin_binary: Repository administration executable.
        command_timeout: Seconds before a primary command is abandoned
            (0 disables the timeout).
        lookup_timeout: Seconds allowed for a per-revision size lookup.
        repo_size_timeout: Seconds allowed for a repository storage lookup.
        max_parallel_lookups: Concurrent enrichment lookups per log fetch.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    binary: str = "svn"
    admin_binary: str = "svnadmin"
    command_timeout: float = Field(default=120.0, ge=0)
    lookup_timeout: float = Field(default=5.0, gt=0)
    repo_size_timeout: float = Field(default=3.0, gt=0)
    max_parallel_lookups: int = Field(default=8, ge=1)


class TreeConfig(BaseModel):
    """Tracked-tree settings.

    Attributes:
        root: Directory relative note paths resolve against (empty for none).
        marker: Name of the control directory marking a tracked-tree root.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    root: str = ""
    marker: str = Field(default=".svn", min_length=1)

    @property
    def root_path(self) -> Path | None:
        """Return the configured root as a Path, or None if unset."""
        return Path(self.root).expanduser() if self.root else None


class CacheConfig(BaseModel):
    """Snapshot caching settings, in seconds."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    freshness_window: float = Field(default=2.0, ge=0)
    refresh_throttle: float = Field(default=0.2, ge=0)


class HistoryConfig(BaseModel):
    """Revision history settings."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    limit: int = Field(default=50, ge=1)
    enrich_sizes: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty uses the per-user log file).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    file: str = ""


def _to_validation_error(error: ValidationError, source: str | None) -> ConfigValidationError:
    first = error.errors()[0]
    key = ".".join(str(part) for part in first["loc"])
    prefix = f"{source}: " if source else ""
    return ConfigValidationError(
        f"{prefix}Invalid value for {key}: {first['msg']}",
        key=key,
        value=first.get("input"),
        expected=first["type"],
    )


class Config(BaseModel):
    """Merged, validated configuration.

    Use the factory methods rather than the constructor.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    client: ClientConfig = ClientConfig()
    tree: TreeConfig = TreeConfig()
    cache: CacheConfig = CacheConfig()
    history: HistoryConfig = HistoryConfig()
    logging: LoggingConfig = LoggingConfig()

    _sources: tuple[ConfigSource, ...] = PrivateAttr(default=())

    @property
    def sources(self) -> list[ConfigSource]:
        """Return the sources that contributed, highest precedence first."""
        return list(self._sources)

    @classmethod
    def _build(
        cls,
        data: dict[str, Any],
        sources: tuple[ConfigSource, ...] = (),
        *,
        source_label: str | None = None,
    ) -> Self:
        merged = deep_merge(DEFAULT_CONFIG, data)
        try:
            config = cls.model_validate(merged)
        except ValidationError as e:
            raise _to_validation_error(e, source_label) from e
        config._sources = sources
        return config

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create configuration from a dictionary merged over the defaults.

        Raises:
            ConfigValidationError: If a value fails validation.
        """
        return cls._build(data)

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load configuration from a single TOML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed.
            ConfigValidationError: If a value fails validation.
        """
        data = read_toml_file(path)
        source = ConfigSource(
            name=ConfigSourceName.TREE, path=path, exists=True, values=data
        )
        return cls._build(data, (source,), source_label=str(path))

    @classmethod
    def load(
        cls,
        *,
        root: Path | None = None,
        user_config: Path | None = None,
        include_env: bool = True,
        overrides: dict[str, Any] | None = None,
    ) -> Self:
        """Load merged configuration from all sources.

        Sources merge in precedence order
        (defaults -> user -> tree -> env -> overrides). The tree file is
        ``<root>/.notesvn.toml`` where root is the argument, or else the
        ``tree.root`` value from the lower-precedence sources.

        Args:
            root: Tracked-tree root to read the tree config file from.
            user_config: User config file (defaults to the platform path).
            include_env: Include NOTESVN_* environment variables.
            overrides: Highest-precedence values, e.g. from CLI flags.

        Returns:
            Merged configuration object.

        Raises:
            ConfigLoadError: If a config file cannot be parsed.
            ConfigValidationError: If the merged config fails validation.
        """
        loaded: list[ConfigSource] = [
            ConfigSource(
                name=ConfigSourceName.DEFAULT,
                path=None,
                exists=True,
                values=DEFAULT_CONFIG,
            )
        ]

        user_path = user_config if user_config is not None else get_user_config_file()
        user_values = read_toml_file(user_path) if user_path.is_file() else {}
        loaded.append(
            ConfigSource(
                name=ConfigSourceName.USER,
                path=user_path,
                exists=user_path.is_file(),
                values=user_values,
            )
        )

        env_values = parse_env_vars() if include_env else {}
        override_values = overrides or {}

        if root is None:
            candidate = deep_merge(deep_merge(user_values, env_values), override_values)
            configured = candidate.get("tree", {}).get("root", "")
            root = Path(configured).expanduser() if configured else None

        if root is not None:
            tree_path = get_tree_config_file(root)
            tree_values = read_toml_file(tree_path) if tree_path.is_file() else {}
            loaded.append(
                ConfigSource(
                    name=ConfigSourceName.TREE,
                    path=tree_path,
                    exists=tree_path.is_file(),
                    values=tree_values,
                )
            )

        loaded.append(
            ConfigSource(
                name=ConfigSourceName.ENV,
                path=None,
                exists=bool(env_values),
                values=env_values,
            )
        )
        loaded.append(
            ConfigSource(
                name=ConfigSourceName.OVERRIDES,
                path=None,
                exists=bool(override_values),
                values=override_values,
            )
        )

        merged: dict[str, Any] = {}
        for source in loaded:
            if source.values:
                merged = deep_merge(merged, source.values)

        if root is not None and not merged.get("tree", {}).get("root"):
            merged = deep_merge(merged, {"tree": {"root": str(root)}})

        return cls._build(merged, tuple(reversed(loaded)))

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-notation key.

        Examples:
            >>> config.get("client.binary")
            'svn'
            >>> config.get("nonexistent", "fallback")
            'fallback'
        """
        current: Any = self.model_dump(mode="json")
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration as a JSON-compatible dictionary."""
        return self.model_dump(mode="json")
