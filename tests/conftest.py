from __future__ import annotations

from pathlib import Path

import pytest

from geoffrey.markers import extract
from geoffrey.models import RegionForest
from tests._fixtures.doc_builder import MAIN_CPP, DocTreeBuilder


@pytest.fixture
def doc_builder(tmp_path: Path) -> DocTreeBuilder:
    """Provide a reusable documentation tree rooted at the pytest tmp_path."""
    return DocTreeBuilder(tmp_path)


@pytest.fixture
def main_forest() -> RegionForest:
    return extract(MAIN_CPP)
