"""
Module 02 - Hashing Utilities
Hash primitives and the leaf/node hashing contract for Merkle commitments.

Module ID: M02

This module provides:
- SHA-256 and keccak-256 hashing for raw bytes
- TreeHasher: the leaf/node hashing rules shared by builder and verifier
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- Always hash raw bytes exactly as specified
- Builder and verifier must use the same TreeHasher, otherwise roots differ
- With domain separation disabled an internal node can be presented as a
  leaf (second-preimage weakness of self-duplicating trees). Enable it for
  new campaigns whose verifier applies the same prefixes.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from eth_utils import keccak


LEAF_PREFIX: bytes = b"\x00"
NODE_PREFIX: bytes = b"\x01"


class HashAlgorithm(str, Enum):
    """Supported digest functions for leaves and internal nodes."""
    SHA256 = "sha256"
    KECCAK256 = "keccak256"


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def keccak256(data: bytes) -> bytes:
    """
    Compute Ethereum keccak-256 of raw bytes.

    This is the pre-standard Keccak used by Solidity's ``keccak256``,
    not ``hashlib.sha3_256``.
    """
    return keccak(data)


_HASH_FUNCTIONS: dict[HashAlgorithm, Callable[[bytes], bytes]] = {
    HashAlgorithm.SHA256: sha256,
    HashAlgorithm.KECCAK256: keccak256,
}


def get_hash_function(algorithm: HashAlgorithm | str) -> Callable[[bytes], bytes]:
    """
    Resolve a hash function by algorithm name.

    Raises:
        ValueError: If the algorithm is not supported
    """
    try:
        return _HASH_FUNCTIONS[HashAlgorithm(algorithm)]
    except ValueError:
        supported = ", ".join(a.value for a in HashAlgorithm)
        raise ValueError(
            f"Unsupported hash algorithm: {algorithm!r} (supported: {supported})"
        ) from None


@dataclass(frozen=True)
class TreeHasher:
    """
    Leaf and internal-node hashing rules for a Merkle tree.

    Rules:
    - leaf = H(record)               (H(0x00 || record) when domain separated)
    - node = H(left || right)        (H(0x01 || left || right) when domain separated)

    Attributes:
        algorithm: Digest function used for every hash in the tree
        domain_separated: Prefix leaves and nodes with distinct tag bytes
    """
    algorithm: HashAlgorithm = HashAlgorithm.SHA256
    domain_separated: bool = False

    def __post_init__(self) -> None:
        # Accept plain strings from config files
        object.__setattr__(self, "algorithm", HashAlgorithm(self.algorithm))

    @property
    def digest_size(self) -> int:
        return 32

    @property
    def empty_root(self) -> bytes:
        """All-zero sentinel for a tree without leaves. Never a valid root."""
        return bytes(self.digest_size)

    def digest(self, data: bytes) -> bytes:
        return get_hash_function(self.algorithm)(data)

    def hash_leaf(self, record: bytes) -> bytes:
        """Hash one canonical record into a leaf."""
        if self.domain_separated:
            return self.digest(LEAF_PREFIX + record)
        return self.digest(record)

    def hash_node(self, left: bytes, right: bytes) -> bytes:
        """Hash two child digests into their parent."""
        if self.domain_separated:
            return self.digest(NODE_PREFIX + left + right)
        return self.digest(left + right)


DEFAULT_HASHER = TreeHasher()


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not isinstance(hex_string, str):
        raise ValueError(f"Hex value must be a string, got {type(hex_string).__name__}")

    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


__all__ = [
    "LEAF_PREFIX",
    "NODE_PREFIX",
    "HashAlgorithm",
    "sha256",
    "keccak256",
    "get_hash_function",
    "TreeHasher",
    "DEFAULT_HASHER",
    "to_hex",
    "from_hex",
]
