from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from golfdb.harvest.overpass_harvest import CANDIDATES_PATH

FIXTURES = Path("tests/fixtures")


@pytest.fixture
def harvested_data_dir(tmp_path: Path) -> Path:
    """Data dir holding the fixture harvest output where the build stage expects it."""
    data_dir = tmp_path / "data"
    target = data_dir / CANDIDATES_PATH
    target.parent.mkdir(parents=True)
    shutil.copyfile(FIXTURES / "uk_golf_candidates.json", target)
    return data_dir
