"""
Pytest configuration file.

This file ensures that the parent directory is in the Python path
so that test files can import lazy, models, utils and app modules.
"""

import sys
from pathlib import Path

# Add the parent directory to the Python path
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

import pytest
from fastapi.testclient import TestClient

from lazy import Iterator, EXHAUSTED


class CountingSource(Iterator):
    """Source that records how often it is pulled"""
    def __init__(self, values):
        super().__init__()
        self._values = list(values)
        self.pulls = 0

    def _pull(self):
        self.pulls += 1
        if not self._values:
            return EXHAUSTED
        return self._values.pop(0)


@pytest.fixture
def counting_source():
    return CountingSource


@pytest.fixture
def client():
    from app import app
    with TestClient(app) as test_client:
        yield test_client
