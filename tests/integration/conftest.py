import json

import pytest

from click.testing import CliRunner


def pytest_collection_modifyitems(items):
    """Apply integration marker to all tests in this directory."""
    for item in items:
        if "/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def payload_file(tmp_path):
    """Factory writing a payload to a JSON file and returning its path."""

    def _write(payload, name="payload.json"):
        path = tmp_path / name
        path.write_text(json.dumps(payload))
        return path

    return _write
