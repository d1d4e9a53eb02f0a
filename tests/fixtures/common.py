"""
Common test fixtures shared by all modules.

Provides factory functions for:
- canonical text records ("alice:100")
- Allocation lists with deterministic EVM addresses
- Distributions built from those allocations
- Allocation CSV / JSON files on disk
"""

import csv
import json
from pathlib import Path
from typing import Optional

from core.allocation import Allocation, LeafEncoding
from core.crypto.hashing import TreeHasher
from core.distribution import Distribution, build_distribution
from core.merkle import MerkleTree


# Three-recipient campaign used throughout the suite
SCENARIO_RECORDS = ["alice:100", "bob:200", "carol:150"]


def make_address(i: int) -> str:
    """Deterministic, valid, lower-case EVM address for recipient ``i``."""
    return "0x" + f"{i + 1:040x}"


def make_records(count: int, prefix: str = "user") -> list[str]:
    """Text records ``user0:100``, ``user1:101``, ..."""
    return [f"{prefix}{i}:{100 + i}" for i in range(count)]


def make_allocations(
    count: int = 3,
    base_amount: int = 1000,
    evm: bool = True,
) -> list[Allocation]:
    """
    Create ``count`` allocations with distinct recipients.

    With ``evm=False`` recipients are plain names (``user0``, ``user1``...).
    """
    return [
        Allocation(
            recipient=make_address(i) if evm else f"user{i}",
            amount=base_amount * (i + 1),
        )
        for i in range(count)
    ]


def make_distribution(
    count: int = 3,
    campaign_id: str = "test-campaign",
    encoding: LeafEncoding | str = LeafEncoding.PACKED,
    hasher: Optional[TreeHasher] = None,
) -> tuple[Distribution, MerkleTree]:
    """Build a distribution over ``make_allocations(count)``."""
    evm = LeafEncoding(encoding) is LeafEncoding.PACKED
    return build_distribution(
        campaign_id,
        make_allocations(count, evm=evm),
        encoding=encoding,
        hasher=hasher,
    )


def write_allocations_csv(
    path: Path,
    rows: list[tuple[str, str]],
    header: tuple[str, str] = ("address", "amount"),
) -> Path:
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)
    return path


def write_allocations_json(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path
