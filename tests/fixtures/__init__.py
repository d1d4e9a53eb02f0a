"""
Test fixtures package for airdrop Merkle tests.

This package provides factory functions for creating test objects:
- common.py: records, allocations, distributions and allocation files

Usage:
    from fixtures import make_allocations, make_distribution

    def test_something():
        distribution, tree = make_distribution(count=5)
"""

from .common import (
    SCENARIO_RECORDS,
    make_address,
    make_allocations,
    make_distribution,
    make_records,
    write_allocations_csv,
    write_allocations_json,
)

__all__ = [
    "SCENARIO_RECORDS",
    "make_address",
    "make_allocations",
    "make_distribution",
    "make_records",
    "write_allocations_csv",
    "write_allocations_json",
]
