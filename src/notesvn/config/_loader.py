# pyright: reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""Raw configuration sources: TOML files and NOTESVN_* variables.

Everything here deals in plain nested dicts; validation happens once the
layers are merged into a Config.
"""

import copy
import json
import os
import tomllib
from pathlib import Path
from typing import Any

from notesvn.exceptions import ConfigLoadError

ENV_PREFIX = "NOTESVN_"

# Read by the logger factories, never mapped to config keys.
_RESERVED_ENV_VARS = frozenset({"NOTESVN_DEBUG", "NOTESVN_LOG_LEVEL"})

type RawConfig = dict[str, Any]  # pyright: ignore[reportExplicitAny]


def read_toml_file(path: Path) -> RawConfig:
    """Parse one TOML layer.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ConfigLoadError: On a syntax error, with its line and column when
            the interpreter reports them.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse TOML file: {e}"
        raise ConfigLoadError(
            msg,
            path=path,
            line=getattr(e, "lineno", None),
            column=getattr(e, "colno", None),
        ) from e


def deep_merge(base: RawConfig, override: RawConfig) -> RawConfig:
    """Return ``override`` layered over ``base``; inputs are left untouched.

    Tables merge key by key. Any other value in ``override``, arrays
    included, replaces the base value wholesale.
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def parse_env_vars(
    prefix: str = ENV_PREFIX,
    environ: dict[str, str] | None = None,
) -> RawConfig:
    """Collect ``NOTESVN_SECTION__KEY`` variables into a nested dict.

    Double underscores separate levels, so ``NOTESVN_CLIENT__BINARY`` sets
    ``client.binary``. Variables without a separator are ignored.
    """
    source = os.environ if environ is None else environ
    result: RawConfig = {}
    for name, raw in source.items():
        if not name.startswith(prefix) or name in _RESERVED_ENV_VARS:
            continue
        dotted = name.removeprefix(prefix)
        if "__" in dotted:
            set_nested_key(result, dotted.replace("__", ".").lower(), parse_string_value(raw))
    return result


def parse_string_value(value: str) -> Any:  # pyright: ignore[reportExplicitAny]
    """Infer a scalar or collection from an environment string.

    Tried in order: true/false, int, float (needs a dot), a JSON array or
    object. Anything else stays a string.

    Examples:
        >>> parse_string_value("false")
        False
        >>> parse_string_value("30")
        30
        >>> parse_string_value("/usr/bin/svn")
        '/usr/bin/svn'
    """
    if value.lower() in {"true", "false"}:
        return value.lower() == "true"
    try:
        return int(value)
    except ValueError:
        pass
    if "." in value:
        try:
            return float(value)
        except ValueError:
            pass
    if value[:1] + value[-1:] in {"[]", "{}"}:
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass
    return value


def set_nested_key(
    d: RawConfig,
    key_path: str,
    value: Any,  # pyright: ignore[reportExplicitAny]
) -> None:
    """Assign ``value`` at dotted ``key_path``, replacing non-table parents.

    Example:
        >>> d = {"tree": "flat"}
        >>> set_nested_key(d, "tree.root", "/notes")
        >>> d
        {'tree': {'root': '/notes'}}
    """
    *parents, leaf = key_path.split(".")
    current = d
    for part in parents:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[leaf] = value
