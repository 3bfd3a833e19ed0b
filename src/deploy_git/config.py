"""
Run configuration loading from JSON option files and command-line overrides.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .models import ConfigError, NpmOptions, RunOptions


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "deploy-git.json"

# Option names as used by the original gulp task configuration
_KEY_ALIASES = {
    "bumpVersion": "bump_version",
    "additionalPackageFiles": "additional_package_files",
}
_BOOL_KEYS = ("debug", "release")
_STR_KEYS = ("repository", "prefix", "branch", "remote")


def _require(value: Any, kind: type, key: str) -> Any:
    if not isinstance(value, kind):
        raise ConfigError(f"Option '{key}' must be of type {kind.__name__}, got {type(value).__name__}")
    return value


def _npm_from_mapping(data: Any) -> NpmOptions:
    _require(data, dict, "npm")
    registry = _require(data.get("registry", ""), str, "npm.registry")
    publish = _require(data.get("publish", False), bool, "npm.publish")
    return NpmOptions(registry=registry, publish=publish)


def options_from_mapping(data: Mapping[str, Any]) -> RunOptions:
    """Build RunOptions from a camelCase or snake_case option mapping."""
    kwargs: Dict[str, Any] = {}
    for raw_key, value in data.items():
        key = _KEY_ALIASES.get(raw_key, raw_key)
        if key in _BOOL_KEYS:
            kwargs[key] = _require(value, bool, raw_key)
        elif key in _STR_KEYS:
            kwargs[key] = _require(value, str, raw_key)
        elif key == "bump_version":
            kwargs[key] = None if value is None else _require(value, bool, raw_key)
        elif key == "additional_package_files":
            files = _require(value, list, raw_key)
            kwargs[key] = tuple(_require(f, str, raw_key) for f in files)
        elif key == "npm":
            kwargs[key] = _npm_from_mapping(value)
        else:
            logger.warning(f"Ignoring unknown option '{raw_key}'")
    return RunOptions(**kwargs)


def load_config_file(path: Path) -> RunOptions:
    """Read RunOptions from a JSON file."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    logger.info(f"Loaded configuration from {path}")
    return options_from_mapping(data)


def load_options(
    config_path: Optional[Path] = None,
    source_dir: Optional[Path] = None,
    **overrides: Any,
) -> RunOptions:
    """
    Resolve the options for a run.

    An explicit config file wins; otherwise deploy-git.json in the source directory
    is used when present. Overrides that are not None replace file values; the
    ``npm_registry``/``npm_publish`` overrides update the nested npm options.
    """
    if config_path is None and source_dir is not None:
        candidate = Path(source_dir) / DEFAULT_CONFIG_NAME
        if candidate.exists():
            config_path = candidate

    options = load_config_file(config_path) if config_path else RunOptions()

    npm_registry = overrides.pop("npm_registry", None)
    npm_publish = overrides.pop("npm_publish", None)
    if npm_registry is not None or npm_publish is not None:
        options = replace(
            options,
            npm=NpmOptions(
                registry=options.npm.registry if npm_registry is None else npm_registry,
                publish=options.npm.publish if npm_publish is None else npm_publish,
            ),
        )

    changes = {k: v for k, v in overrides.items() if v is not None}
    if "additional_package_files" in changes:
        files = tuple(changes["additional_package_files"])
        if files:
            changes["additional_package_files"] = files
        else:
            del changes["additional_package_files"]
    try:
        return replace(options, **changes)
    except TypeError as e:
        raise ConfigError(f"Invalid option override: {e}") from e
