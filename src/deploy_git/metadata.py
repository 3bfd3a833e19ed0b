"""
Reading and writing JSON version metadata (bower.json, package.json, version.json).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .models import FilesystemError, NoVersionError


logger = logging.getLogger(__name__)

BOWER_JSON = "bower.json"
PACKAGE_JSON = "package.json"
VERSION_JSON = "version.json"
VERSION_SNAPSHOT = ".version.json"
PRIMARY_METADATA_FILES = (BOWER_JSON, PACKAGE_JSON)

INDENT = 4


def read_json(path: Path) -> Dict[str, Any]:
    """Parse a JSON metadata document."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise FilesystemError(f"Failed to read {path}: {e}") from e
    if not isinstance(data, dict):
        raise FilesystemError(f"{path} does not contain a JSON object")
    return data


def write_json(path: Path, data: Dict[str, Any]) -> None:
    """Serialize ``data`` with 4-space indentation."""
    try:
        Path(path).write_text(json.dumps(data, indent=INDENT), encoding="utf-8")
    except OSError as e:
        raise FilesystemError(f"Failed to write {path}: {e}") from e


def set_version(path: Path, version: str) -> None:
    """Rewrite the ``version`` field of an existing metadata file, keeping key order."""
    data = read_json(path)
    data["version"] = version
    write_json(path, data)
    logger.debug(f"Set version {version} in {path}")


def find_primary_metadata(directory: Path) -> Optional[Path]:
    """Return bower.json if present, else package.json, else None."""
    for name in PRIMARY_METADATA_FILES:
        candidate = Path(directory) / name
        if candidate.exists():
            return candidate
    return None


def read_base_version(directory: Path) -> str:
    """Read the version from the primary metadata file of ``directory``."""
    metadata = find_primary_metadata(directory)
    if metadata is None:
        raise NoVersionError()
    version = read_json(metadata).get("version")
    if not isinstance(version, str) or not version:
        raise NoVersionError(f"No version field in {metadata}")
    logger.debug(f"Read base version {version} from {metadata}")
    return version
