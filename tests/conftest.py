"""
Shared fixtures.
"""

import json
from pathlib import Path

import pytest


def write_json(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


def read_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture()
def source_dir(tmp_path: Path) -> Path:
    """A source project with package.json at version 1.2.3 and a built dist/ tree."""
    root = tmp_path / "project"
    write_json(root / "package.json", {"name": "app", "version": "1.2.3"})
    (root / "dist" / "app").mkdir(parents=True)
    (root / "dist" / "app" / "app.js").write_text("console.log('app');\n")
    (root / "dist" / "index.html").write_text("<html></html>\n")
    return root
