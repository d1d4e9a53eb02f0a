"""
Pytest configuration and shared fixtures for airdrop Merkle tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")

SCENARIO_RECORDS = _common.SCENARIO_RECORDS
make_allocations = _common.make_allocations
make_distribution = _common.make_distribution
write_allocations_csv = _common.write_allocations_csv


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def scenario_records():
    """The alice/bob/carol records."""
    return list(SCENARIO_RECORDS)


@pytest.fixture
def allocations():
    """Three EVM allocations: 1000, 2000, 3000."""
    return make_allocations(3)


@pytest.fixture
def distribution():
    """A packed-encoding distribution over five recipients."""
    dist, _ = make_distribution(count=5)
    return dist


@pytest.fixture
def allocations_csv(tmp_path):
    """A sample allocation CSV on disk."""
    return write_allocations_csv(
        tmp_path / "allocations.csv",
        [
            ("0x1111111111111111111111111111111111111111", "1000"),
            ("0x2222222222222222222222222222222222222222", "2500"),
            ("0x3333333333333333333333333333333333333333", "5000"),
        ],
    )


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep AIRDROP_* variables from the developer's shell out of tests."""
    import os
    for key in list(os.environ):
        if key.startswith("AIRDROP_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
