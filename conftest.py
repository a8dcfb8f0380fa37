"""
Pytest configuration file for the httpengine project.
This file ensures that the httpengine package can be imported during tests
and provides fixtures shared by the test modules.
"""

import sys
from pathlib import Path

import pytest

# Add the project root directory to the Python path
project_root = Path(__file__).parent.absolute()
sys.path.insert(0, str(project_root))


@pytest.fixture
def serving_dir(tmp_path):
    """A fresh serving directory for /files/ routes."""
    directory = tmp_path / "files"
    directory.mkdir()
    return directory
