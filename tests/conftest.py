"""Pytest configuration for repository test runs."""

import os
import sys
from pathlib import Path

import pandas as pd
import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))
os.environ.setdefault("MPLBACKEND", "Agg")

from podlove_import import import_clean  # noqa: E402
from tests.fixture_paths import fixture_path  # noqa: E402


@pytest.fixture
def sample_tidy() -> pd.DataFrame:
    """Tidy table of the four-episode sample export."""
    return import_clean(fixture_path("sample_podlove_data.csv"), fixture_path("ref_pit.csv"))
