"""
Module 02 - Merkle Proofs Convenience Wrappers
Hex wire format and class-based helpers around merkle_tree.py.

Module ID: M02

Proofs travel to claimants as JSON:

    [{"hash": "0x…", "position": "right"}, {"hash": "0x…", "position": "left"}]

This module provides:
- encode_proof / decode_proof: ProofStep list <-> JSON-ready dicts
- MerkleProver: build proofs straight from records
- MerkleVerifier: verify proofs, including hex-encoded ones from untrusted input
"""
from __future__ import annotations

from typing import Any, Sequence

from core.crypto.hashing import TreeHasher, from_hex
from core.merkle.merkle_tree import (
    MerkleProof,
    MerkleTree,
    ProofStep,
    verify_merkle_proof,
    verify_proof,
)


def encode_proof(steps: Sequence[ProofStep]) -> list[dict[str, str]]:
    """Convert proof steps into their JSON wire form."""
    return [step.to_dict() for step in steps]


def decode_proof(data: Sequence[dict[str, Any]]) -> list[ProofStep]:
    """
    Parse proof steps from their JSON wire form.

    Raises:
        ValueError: If an entry has a bad hash or position
        KeyError: If an entry has no hash
    """
    return [ProofStep.from_dict(entry) for entry in data]


class MerkleProver:
    """
    Convenience class for generating Merkle proofs.

    Example:
        >>> proof = MerkleProver.prove(["alice:100", "bob:200"], index=1)
        >>> len(proof.steps)
        1
    """

    @staticmethod
    def prove(
        records: Sequence[str | bytes],
        index: int,
        hasher: TreeHasher | None = None,
    ) -> MerkleProof:
        """
        Build a tree from records and prove the record at ``index``.

        Raises:
            InvalidInputError: If records is empty or malformed
            IndexOutOfRangeError: If index is out of range
        """
        return MerkleTree.from_records(records, hasher).get_merkle_proof(index)

    @staticmethod
    def compute_root(
        records: Sequence[str | bytes],
        hasher: TreeHasher | None = None,
    ) -> bytes:
        """Merkle root for a sequence of records."""
        return MerkleTree.from_records(records, hasher).get_root()


class MerkleVerifier:
    """
    Convenience class for verifying Merkle proofs.

    All methods return False on mismatch or malformed input; none raise.
    """

    @staticmethod
    def verify(proof: MerkleProof, hasher: TreeHasher | None = None) -> bool:
        """Verify a MerkleProof bundle against its own root."""
        return verify_merkle_proof(proof, hasher)

    @staticmethod
    def verify_leaf_in_root(
        leaf: bytes,
        steps: Sequence[ProofStep],
        root: bytes,
        hasher: TreeHasher | None = None,
    ) -> bool:
        """Verify a leaf hash is included under ``root``."""
        return verify_proof(leaf, steps, root, hasher)

    @staticmethod
    def verify_hex(
        leaf_hex: str,
        proof: Sequence[dict[str, Any]],
        root_hex: str,
        hasher: TreeHasher | None = None,
    ) -> bool:
        """
        Verify a hex-encoded proof as received from a claimant.

        Args:
            leaf_hex: 0x-prefixed leaf hash
            proof: Wire-form proof steps
            root_hex: 0x-prefixed published root
        """
        try:
            leaf = from_hex(leaf_hex)
            root = from_hex(root_hex)
            steps = decode_proof(proof)
        except (KeyError, TypeError, ValueError, AttributeError):
            return False
        return verify_proof(leaf, steps, root, hasher)


__all__ = [
    "encode_proof",
    "decode_proof",
    "MerkleProver",
    "MerkleVerifier",
]
