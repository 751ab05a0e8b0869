import pytest

from avtrack.analysis.component_tracker import ComponentTracker
from avtrack.analysis.heart_block import HeartBlockDetector


def pytest_collection_modifyitems(items):
    """Apply unit marker to all tests in this directory."""
    for item in items:
        if "/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def tracker():
    return ComponentTracker()


@pytest.fixture
def detector(tracker):
    return HeartBlockDetector(tracker=tracker)
