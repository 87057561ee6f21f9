import random
import sys
from pathlib import Path

import pytest

# Add src to sys.path so we can import enigmind without installing it
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from enigmind.model import GameConfiguration  # noqa: E402


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source so generation is reproducible."""
    return random.Random(1234)


@pytest.fixture
def small_config() -> GameConfiguration:
    """3 columns, digits 0-4, rules must keep more than 10% of the codes."""
    return GameConfiguration.create(base=5, column_count=3, difficulty_percent=10)


@pytest.fixture
def tiny_config() -> GameConfiguration:
    """2 columns, binary digits: codes 00, 01, 10, 11."""
    return GameConfiguration.create(base=2, column_count=2, difficulty_percent=0)
