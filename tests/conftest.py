from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.design_builder import SketchBuilder


@pytest.fixture
def sketch_builder(tmp_path: Path) -> SketchBuilder:
    """Provide a builder for .sketch project trees rooted at the pytest tmp_path."""
    return SketchBuilder(tmp_path)
