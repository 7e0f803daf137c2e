"""Pytest configuration and fixtures."""

import json

import pytest

from core.models import CommandResult


class FakeRunner:
    """Command runner double keyed by the manager subcommand (ls, install, dedupe)."""

    def __init__(self, outputs: dict | None = None):
        self.outputs = outputs or {}
        self.calls: list[list[str]] = []

    def __call__(self, args, cwd, merge_stderr=False):
        self.calls.append(list(args))
        result = self.outputs.get(args[1], CommandResult(returncode=0, stdout=""))
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def fake_runner():
    """Factory for command runner doubles."""
    return FakeRunner


@pytest.fixture
def sample_package_json():
    """Sample package.json content for testing."""
    return """
{
  "name": "test-project",
  "dependencies": {
    "express": "^4.18.0",
    "lodash": "~4.17.21"
  }
}
"""


@pytest.fixture
def conflicting_package_json():
    """package.json declaring left-pad at two different versions."""
    return json.dumps({
        "dependencies": {"left-pad": "^1.0.0"},
        "devDependencies": {"left-pad": "^2.0.0"},
    })


@pytest.fixture
def project_dir(tmp_path, sample_package_json):
    """A project directory with a conflict-free package.json."""
    (tmp_path / "package.json").write_text(sample_package_json)
    return tmp_path
