"""
Module 03 - Allocations
File: encoding.py

Purpose: Canonical record encodings feeding the Merkle leaf layer.

This is a byte-exact compatibility boundary: whatever verifies claims
(a distributor contract, a claim service) must rebuild the same bytes
from (recipient, amount) before hashing the leaf.
"""

from __future__ import annotations

import re
from typing import Iterable, Sequence

from core.allocation.models import Allocation, LeafEncoding
from core.schemas.errors import InvalidInputError

ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")

AMOUNT_BYTES = 32


def is_evm_address(value: str) -> bool:
    return isinstance(value, str) and ADDRESS_RE.match(value.strip()) is not None


def normalize_address(address: str) -> str:
    """
    Validate an EVM address and return it lower-cased.

    Raises:
        InvalidInputError: If the value is not 0x followed by 40 hex digits
    """
    if not isinstance(address, str):
        raise InvalidInputError("Address must be a string", field_path="recipient")
    candidate = address.strip()
    if not ADDRESS_RE.match(candidate):
        raise InvalidInputError(f"Invalid EVM address: {address}", field_path="recipient")
    return candidate.lower()


def recipient_key(recipient: str, encoding: LeafEncoding | str) -> str:
    """
    Lookup key for a recipient under an encoding.

    Packed encodings compare addresses case-insensitively; text encodings
    compare the identifier exactly.
    """
    if LeafEncoding(encoding) is LeafEncoding.PACKED:
        return normalize_address(recipient)
    return recipient.strip()


def encode_allocation(allocation: Allocation, encoding: LeafEncoding | str = LeafEncoding.TEXT) -> bytes:
    """
    Serialize one allocation to its canonical record bytes.

    Example:
        >>> encode_allocation(Allocation(recipient="alice", amount=100))
        b'alice:100'
    """
    encoding = LeafEncoding(encoding)
    if encoding is LeafEncoding.TEXT:
        return f"{allocation.recipient}:{allocation.amount}".encode("utf-8")

    address = normalize_address(allocation.recipient)
    return bytes.fromhex(address[2:]) + allocation.amount.to_bytes(AMOUNT_BYTES, byteorder="big")


def encode_allocations(
    allocations: Iterable[Allocation],
    encoding: LeafEncoding | str = LeafEncoding.TEXT,
) -> list[bytes]:
    """Encode allocations in input order."""
    encoded: list[bytes] = []
    for i, allocation in enumerate(allocations):
        try:
            encoded.append(encode_allocation(allocation, encoding))
        except InvalidInputError as e:
            raise InvalidInputError(e.message, field_path=f"allocations[{i}].recipient") from e
    return encoded


def check_unique_recipients(
    allocations: Sequence[Allocation],
    encoding: LeafEncoding | str = LeafEncoding.TEXT,
) -> None:
    """
    Raises:
        InvalidInputError: If two allocations share a recipient key
    """
    seen: dict[str, int] = {}
    for i, allocation in enumerate(allocations):
        key = recipient_key(allocation.recipient, encoding)
        if key in seen:
            raise InvalidInputError(
                f"Duplicate recipient {allocation.recipient!r} "
                f"(rows {seen[key]} and {i})",
                field_path=f"allocations[{i}].recipient",
            )
        seen[key] = i
