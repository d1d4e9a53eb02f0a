"""
Core cryptographic utilities.

Module 02 provides hashing primitives and the Merkle hashing contract.
"""
from .hashing import (
    DEFAULT_HASHER,
    LEAF_PREFIX,
    NODE_PREFIX,
    HashAlgorithm,
    TreeHasher,
    from_hex,
    get_hash_function,
    keccak256,
    sha256,
    to_hex,
)

__all__ = [
    "DEFAULT_HASHER",
    "LEAF_PREFIX",
    "NODE_PREFIX",
    "HashAlgorithm",
    "TreeHasher",
    "from_hex",
    "get_hash_function",
    "keccak256",
    "sha256",
    "to_hex",
]
