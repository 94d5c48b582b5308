"""
Pytest configuration for the bugduck test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- An isolated project directory and home for every test
- Shared fixtures for seeded randomness and parsed trees
"""

import os
import random

import pytest

from bugduck.logging_config import setup_logging
from bugduck.mutation.tree import SourceTree


# ============================================================================
# GLOBAL CONFIGURATION
# ============================================================================

def pytest_configure(config):
    os.environ.setdefault("BUGDUCK_MACHINE_MODE", "1")


# ============================================================================
# LOGGING FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    setup_logging(level="DEBUG", suppress_console=True, enable_file_logging=False)


# ============================================================================
# ISOLATION
# ============================================================================

@pytest.fixture(autouse=True)
def isolated_project(tmp_path, monkeypatch):
    """
    Run every test inside its own project directory with its own home, so
    .bugduck/ state and config files never leak between tests.
    """
    from bugduck.cli.config import CLIConfig
    from bugduck.paths import reset_paths
    from bugduck.user_config import reset_user_config

    project = tmp_path / "project"
    home = tmp_path / "home"
    project.mkdir()
    home.mkdir()

    monkeypatch.chdir(project)
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("BUGDUCK_LLM_API_KEY", raising=False)
    monkeypatch.delenv("BUGDUCK_HUMAN_MODE", raising=False)
    reset_paths()
    reset_user_config()
    CLIConfig.set_machine_mode(None)

    yield project

    reset_paths()
    reset_user_config()
    CLIConfig.set_machine_mode(None)


# ============================================================================
# SHARED FIXTURES
# ============================================================================

@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def parse():
    """Parse a snippet, defaulting to the tsx grammar."""
    def _parse(code: str, language: str = "tsx") -> SourceTree:
        return SourceTree.parse(code, language)
    return _parse


RICH_SOURCE = """\
const limit = 10;
let total = 0;

function accumulate(items, flag) {
  for (let i = 0; i < items.length; i++) {
    if (items[i] === null || flag) {
      continue;
    }
    total = total + items[i] * 2;
  }
  return total > limit ? 'over' : 'under';
}

const label = accumulate([1, 2, 3], false) & 1;
console.log(label.charAt(0), total % 3);
"""


@pytest.fixture
def rich_source():
    """A module with at least one target for every bug kind."""
    return RICH_SOURCE
