"""Shared fixtures for building throwaway source trees."""

import tempfile
from pathlib import Path
from typing import Dict

import pytest


class SourceTree:
    """A temporary project directory that tests fill with source files."""

    def __init__(self, root: Path):
        self.root = root

    def write(self, files: Dict[str, str]) -> None:
        for relative, content in files.items():
            target = self.root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")

    def path(self, relative: str) -> Path:
        return self.root / relative


@pytest.fixture
def tree():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield SourceTree(Path(tmpdir).resolve())
