import sys
from pathlib import Path

import pytest

# Ensure the repo root is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from clock import ManualClock  # noqa: E402
from game import GameEngine  # noqa: E402
from settings import GameConfig  # noqa: E402
from storage import InMemoryStore  # noqa: E402


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def shared():
    return []


@pytest.fixture
def engine(store, clock, shared):
    """Engine whose target is always CRANE."""
    return GameEngine(store, clock, config=GameConfig(), share=shared.append, picker=lambda words: "CRANE")
