"""Shared test fixtures for the tree view."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.helpers import SAMPLE_YAML


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    """A small description with one unreachable node."""
    path = tmp_path / "graph-data.yaml"
    path.write_text(SAMPLE_YAML, encoding="utf-8")
    return path
