"""
Test Configuration File

Unified setup for Python path, avoiding sys.path.insert in each test file.
"""

import sys
from pathlib import Path

import pytest

# Add the src directory to the Python path
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


@pytest.fixture
def two_band_state():
    """Two peaking bands used by the grid/target comparison tests."""
    return {
        "bands": [
            {"frequency": 500, "gain": 3, "Q": 1, "type": "peaking"},
            {"frequency": 2000, "gain": -4, "Q": 1, "type": "peaking"},
        ]
    }
