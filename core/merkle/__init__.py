"""
Module 02 - Merkle Tree and Commitments
Deterministic Merkle tree construction + proof generation/verification.

Module ID: M02

This module provides:
- MerkleTree: build once per campaign, then get_root / get_proof
- ProofStep, MerkleProof: position-aware inclusion proofs
- verify_proof / verify_merkle_proof: stateless verification (never raises)
- MerkleProver, MerkleVerifier: convenience wrappers incl. hex wire format
- TreeCache: caller-owned campaign id -> tree cache

Canonical Commitment Rules:
1. Leaf hashing: H(record), H(0x00 + record) when domain separated
2. Parent hashing: H(left + right), H(0x01 + left + right) when domain separated
3. Padding: Duplicate last node if odd number at any level
4. Empty tree: EMPTY_TREE_ROOT (all zeros)
5. Single leaf: root = leaf

Usage:
    from core.merkle import MerkleTree

    tree = MerkleTree.from_records(["alice:100", "bob:200", "carol:150"])
    proof = tree.get_proof(1)
    assert MerkleTree.verify(tree.get_leaf(1), proof, tree.get_root())
"""
from .merkle_tree import (
    EMPTY_TREE_ROOT,
    MerkleProof,
    MerkleTree,
    ProofStep,
    build_levels,
    build_merkle_root,
    compute_tree_depth,
    merkle_parent,
    verify_merkle_proof,
    verify_proof,
)

from .merkle_proofs import (
    MerkleProver,
    MerkleVerifier,
    decode_proof,
    encode_proof,
)

from .cache import TreeCache


__all__ = [
    # Core types
    "MerkleTree",
    "MerkleProof",
    "ProofStep",
    "EMPTY_TREE_ROOT",
    # Core functions
    "merkle_parent",
    "build_levels",
    "build_merkle_root",
    "compute_tree_depth",
    "verify_proof",
    "verify_merkle_proof",
    # Wire format
    "encode_proof",
    "decode_proof",
    # Convenience classes
    "MerkleProver",
    "MerkleVerifier",
    "TreeCache",
]
