from pathlib import Path
from typing import Dict, Union

import pytest

from gatherer import logging as gatherer_logging
from gatherer import settings


def write_tree(root: Path, files: Dict[str, Union[str, bytes]]) -> Path:
    """Creates files under root from a {relative/path: content} mapping."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_bytes(content.encode("utf-8"))
    return root


@pytest.fixture(autouse=True)
def isolated_durable_root(tmp_path, monkeypatch):
    durable = tmp_path / ".durable"
    monkeypatch.setenv("GATHERER_DURABLE_ROOT", str(durable))
    monkeypatch.delenv("GATHERER_OUTPUT_DIR", raising=False)
    monkeypatch.delenv("GATHERER_LOG_ROOT", raising=False)
    settings.set_settings_file(None)
    gatherer_logging._subscribers.clear()
    yield durable
    settings.set_settings_file(None)
    gatherer_logging._subscribers.clear()


@pytest.fixture
def source_root(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def make_tree(source_root):
    def _make(files: Dict[str, Union[str, bytes]]) -> Path:
        return write_tree(source_root, files)
    return _make
