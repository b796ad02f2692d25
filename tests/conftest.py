"""
Shared fixtures for the quadworld tests
"""
import pytest

from quadworld.constants import WorldSettings
from quadworld.store import Store


@pytest.fixture
def store(tmp_path):
    """A fresh world in a temporary directory"""
    return Store(str(tmp_path / "qtree"), WorldSettings(seed=1234))
