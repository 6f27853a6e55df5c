import shutil
from pathlib import Path

import pytest

from backend.state import init_storage

TEST_DATA_DIR = Path("data-tests")


@pytest.fixture(autouse=True)
def storage():
    """Wipe and re-init data-tests/ before every test."""
    if TEST_DATA_DIR.exists():
        shutil.rmtree(TEST_DATA_DIR)
    yield init_storage(TEST_DATA_DIR)
    # leave data-tests around after tests for inspection; CI can ignore it
