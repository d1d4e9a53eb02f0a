"""
Module 02 - Merkle Tree Implementation
Deterministic Merkle tree construction, proof generation, and verification.

Module ID: M02

This module provides:
- MerkleTree: build once from an ordered record list, then serve roots and proofs
- Position-aware inclusion proofs (ProofStep / MerkleProof)
- Stateless proof verification (verify_proof / verify_merkle_proof)
- Functional helpers for roots and depth without a tree object

Canonical Commitment Rules (Hard Contracts):
1. Leaf hashing: leaf = H(record)  (see core.crypto.hashing.TreeHasher)
2. Parent hashing: parent = H(left + right)
3. Padding rule: at any level with an odd node count the last node is
   paired with itself (self-duplication), never promoted unchanged
4. Single leaf: root = leaf, proof is empty
5. Empty leaves: build_merkle_root([]) returns EMPTY_TREE_ROOT (all zeros);
   MerkleTree.build([]) is rejected

Proof Direction:
Every proof entry records whether the sibling sits on the left or the right
of the running hash. Verification concatenates in that order, so it always
mirrors construction. A self-duplicated node gets itself as a right sibling.

Determinism Notes:
- Leaf ordering is defined by the caller; this module never sorts
- A built tree is immutable; proofs and verification take no locks
"""
from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from core.crypto.hashing import DEFAULT_HASHER, TreeHasher, from_hex, to_hex
from core.schemas.errors import (
    IndexOutOfRangeError,
    InvalidInputError,
    TreeAlreadyBuiltError,
    TreeNotBuiltError,
)


logger = logging.getLogger(__name__)


# Empty tree sentinel: all-zero digest, never produced by a real tree
EMPTY_TREE_ROOT: bytes = bytes(32)

_BYTES_LIKE = (bytes, bytearray, memoryview)


@dataclass(frozen=True)
class ProofStep:
    """
    One level of an inclusion proof.

    Attributes:
        sibling: Hash of the other member of the pair at this level
        is_left: True if the sibling is the left child (running hash goes right)
    """
    sibling: bytes
    is_left: bool

    @property
    def position(self) -> str:
        return "left" if self.is_left else "right"

    def to_dict(self) -> dict[str, str]:
        return {"hash": to_hex(self.sibling), "position": self.position}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProofStep":
        position = data.get("position")
        if position not in ("left", "right"):
            raise ValueError(f"Proof step position must be 'left' or 'right', got {position!r}")
        return cls(sibling=from_hex(data["hash"]), is_left=position == "left")


@dataclass(frozen=True)
class MerkleProof:
    """
    A Merkle proof for a single leaf in a Merkle tree.

    Attributes:
        leaf: The leaf hash being proven
        index: The 0-based index of the leaf in the original leaf list
        steps: One ProofStep per level, from the leaf level upward
        root: The Merkle root this proof is against
    """
    leaf: bytes
    index: int
    steps: tuple[ProofStep, ...] = field(default_factory=tuple)
    root: bytes = EMPTY_TREE_ROOT

    def __post_init__(self) -> None:
        """Validate proof structure."""
        if self.index < 0:
            raise ValueError(f"Leaf index must be non-negative, got {self.index}")
        object.__setattr__(self, "steps", tuple(self.steps))

    @property
    def siblings(self) -> list[bytes]:
        """Bare sibling hashes, bottom-up."""
        return [step.sibling for step in self.steps]

    def __len__(self) -> int:
        return len(self.steps)

    def to_dict(self) -> dict[str, Any]:
        return {
            "leaf": to_hex(self.leaf),
            "index": self.index,
            "proof": [step.to_dict() for step in self.steps],
            "root": to_hex(self.root),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MerkleProof":
        return cls(
            leaf=from_hex(data["leaf"]),
            index=int(data["index"]),
            steps=tuple(ProofStep.from_dict(s) for s in data.get("proof", [])),
            root=from_hex(data["root"]),
        )


# =============================================================================
# Functional core
# =============================================================================


def merkle_parent(left: bytes, right: bytes, hasher: TreeHasher | None = None) -> bytes:
    """Compute the parent hash of two child nodes: H(left + right)."""
    return (hasher or DEFAULT_HASHER).hash_node(left, right)


def _next_level(level: Sequence[bytes], hasher: TreeHasher) -> list[bytes]:
    """Pair adjacent nodes left to right; an odd trailing node pairs with itself."""
    parents: list[bytes] = []
    for i in range(0, len(level), 2):
        left = level[i]
        right = level[i + 1] if i + 1 < len(level) else left
        parents.append(hasher.hash_node(left, right))
    return parents


def build_levels(leaves: Sequence[bytes], hasher: TreeHasher | None = None) -> list[list[bytes]]:
    """
    Build every level of the tree, leaves first and root last.

    Example: [a, b, c] -> [[a, b, c], [H(a+b), H(c+c)], [root]]

    Raises:
        ValueError: If leaves is empty
    """
    if len(leaves) == 0:
        raise ValueError("Cannot build levels for empty leaf list")

    hasher = hasher or DEFAULT_HASHER
    levels: list[list[bytes]] = [list(leaves)]
    while len(levels[-1]) > 1:
        levels.append(_next_level(levels[-1], hasher))
    return levels


def build_merkle_root(leaves: Sequence[bytes], hasher: TreeHasher | None = None) -> bytes:
    """
    Build a Merkle root from a sequence of leaf hashes.

    Empty input returns EMPTY_TREE_ROOT; a single leaf is its own root.

    Example:
        >>> leaves = [sha256(b"a"), sha256(b"b"), sha256(b"c")]
        >>> len(build_merkle_root(leaves))
        32
    """
    if len(leaves) == 0:
        return EMPTY_TREE_ROOT
    return build_levels(leaves, hasher)[-1][0]


def compute_tree_depth(num_leaves: int) -> int:
    """
    Number of levels above the leaves, ceil(log2(n)).

    Equals the proof length for every leaf. 0 for empty and single-leaf trees.
    """
    if num_leaves < 0:
        raise ValueError(f"Leaf count must be non-negative, got {num_leaves}")
    return max(num_leaves - 1, 0).bit_length()


def _as_digest(value: Any) -> bytes | None:
    if isinstance(value, _BYTES_LIKE):
        return bytes(value)
    return None


def verify_proof(
    leaf_hash: bytes,
    proof: Iterable[ProofStep],
    expected_root: bytes,
    hasher: TreeHasher | None = None,
) -> bool:
    """
    Verify an inclusion proof against a root.

    Algorithm:
    1. Start with the leaf hash
    2. For each step (bottom-up):
       - sibling on the left:  hash = parent(sibling, hash)
       - sibling on the right: hash = parent(hash, sibling)
    3. Compare the result with expected_root byte for byte

    Never raises: malformed arguments verify as False.
    """
    hasher = hasher or DEFAULT_HASHER
    current = _as_digest(leaf_hash)
    root = _as_digest(expected_root)
    if current is None or root is None:
        return False

    try:
        for step in proof:
            sibling = _as_digest(step.sibling)
            if sibling is None:
                return False
            if step.is_left:
                current = hasher.hash_node(sibling, current)
            else:
                current = hasher.hash_node(current, sibling)
    except (AttributeError, TypeError, ValueError):
        return False

    return hmac.compare_digest(current, root)


def verify_merkle_proof(proof: MerkleProof, hasher: TreeHasher | None = None) -> bool:
    """
    Verify a MerkleProof bundle against its own root.

    Besides recomputing the root, the step directions must agree with the
    bits of ``proof.index`` so a proof cannot be replayed under another index.
    """
    try:
        index = proof.index
        for level, step in enumerate(proof.steps):
            if step.is_left != bool((index >> level) & 1):
                return False
        if index >> len(proof.steps):
            return False
        return verify_proof(proof.leaf, proof.steps, proof.root, hasher)
    except (AttributeError, TypeError):
        return False


# =============================================================================
# Tree object
# =============================================================================


class MerkleTree:
    """
    Binary Merkle tree over an ordered record list.

    States:
    - unbuilt: only build() is valid
    - built: read operations are valid, no further mutation

    Example:
        >>> tree = MerkleTree.from_records(["alice:100", "bob:200", "carol:150"])
        >>> proof = tree.get_proof(1)
        >>> MerkleTree.verify(tree.get_leaf(1), proof, tree.get_root())
        True
    """

    def __init__(self, hasher: TreeHasher | None = None) -> None:
        self._hasher = hasher or DEFAULT_HASHER
        self._levels: tuple[tuple[bytes, ...], ...] | None = None

    @classmethod
    def from_records(
        cls,
        records: Sequence[str | bytes],
        hasher: TreeHasher | None = None,
    ) -> "MerkleTree":
        """Build a tree from canonical records (str is UTF-8 encoded)."""
        return cls(hasher).build(records)

    @classmethod
    def from_leaves(
        cls,
        leaves: Sequence[bytes],
        hasher: TreeHasher | None = None,
    ) -> "MerkleTree":
        """Build a tree from already hashed leaves."""
        tree = cls(hasher)
        tree._require_unbuilt()
        tree._set_levels(tree._validate_leaves(leaves))
        return tree

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def build(self, records: Sequence[str | bytes]) -> "MerkleTree":
        """
        Hash each record into a leaf and build all levels.

        Records must be a non-empty sequence of str or of bytes (not mixed).

        Returns:
            self, now built

        Raises:
            InvalidInputError: On empty, mixed or unsupported records
            TreeAlreadyBuiltError: If the tree was already built
        """
        self._require_unbuilt()
        encoded = self._encode_records(records)
        self._set_levels([self._hasher.hash_leaf(record) for record in encoded])
        return self

    def _require_unbuilt(self) -> None:
        if self._levels is not None:
            raise TreeAlreadyBuiltError()

    @staticmethod
    def _encode_records(records: Sequence[str | bytes]) -> list[bytes]:
        if isinstance(records, (str, *_BYTES_LIKE)):
            raise InvalidInputError(
                "Expected a sequence of records, got a single "
                f"{type(records).__name__}"
            )
        try:
            items = list(records)
        except TypeError as e:
            raise InvalidInputError(f"Records must be iterable: {e}") from e

        if not items:
            raise InvalidInputError("Cannot build a Merkle tree from an empty record list")

        first_is_text = isinstance(items[0], str)
        encoded: list[bytes] = []
        for i, item in enumerate(items):
            if isinstance(item, str) and first_is_text:
                encoded.append(item.encode("utf-8"))
            elif isinstance(item, _BYTES_LIKE) and not first_is_text:
                encoded.append(bytes(item))
            else:
                expected = "str" if first_is_text else "bytes"
                raise InvalidInputError(
                    f"Records must share one encoding: expected {expected}, "
                    f"got {type(item).__name__}",
                    field_path=f"records[{i}]",
                )
        return encoded

    def _validate_leaves(self, leaves: Sequence[bytes]) -> list[bytes]:
        items = list(leaves)
        if not items:
            raise InvalidInputError("Cannot build a Merkle tree from an empty leaf list")

        size = self._hasher.digest_size
        for i, leaf in enumerate(items):
            if not isinstance(leaf, _BYTES_LIKE) or len(leaf) != size:
                raise InvalidInputError(
                    f"Leaf must be a {size}-byte digest",
                    field_path=f"leaves[{i}]",
                )
        return [bytes(leaf) for leaf in items]

    def _set_levels(self, leaves: list[bytes]) -> None:
        levels = build_levels(leaves, self._hasher)
        for depth, level in enumerate(levels[1:], start=1):
            logger.debug(f"Level {depth}: {len(level)} nodes")
        self._levels = tuple(tuple(level) for level in levels)
        logger.info(
            f"Built Merkle tree: {len(leaves)} leaves, depth {self.depth}, "
            f"root {to_hex(self._levels[-1][0])}"
        )

    # -------------------------------------------------------------------------
    # Read operations
    # -------------------------------------------------------------------------

    def _require_built(self, operation: str) -> tuple[tuple[bytes, ...], ...]:
        if self._levels is None:
            raise TreeNotBuiltError(operation)
        return self._levels

    @property
    def is_built(self) -> bool:
        return self._levels is not None

    @property
    def hasher(self) -> TreeHasher:
        return self._hasher

    @property
    def levels(self) -> tuple[tuple[bytes, ...], ...]:
        """All levels, leaves first and root last."""
        return self._require_built("levels")

    @property
    def leaves(self) -> tuple[bytes, ...]:
        return self._require_built("leaves")[0]

    @property
    def leaf_count(self) -> int:
        return len(self._levels[0]) if self._levels is not None else 0

    @property
    def depth(self) -> int:
        """Levels above the leaves; also the length of every proof."""
        return len(self._require_built("depth")) - 1

    def get_root(self) -> bytes:
        return self._require_built("get_root")[-1][0]

    def get_leaf(self, index: int) -> bytes:
        levels = self._require_built("get_leaf")
        self._check_index(index, len(levels[0]))
        return levels[0][index]

    @staticmethod
    def _check_index(index: int, leaf_count: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"Leaf index must be an int, got {type(index).__name__}")
        if index < 0 or index >= leaf_count:
            raise IndexOutOfRangeError(index, leaf_count)

    def get_proof(self, index: int) -> list[ProofStep]:
        """
        Sibling path from leaf ``index`` up to the root.

        Returns:
            One ProofStep per level (len == depth); empty for a single leaf

        Raises:
            IndexOutOfRangeError: If index is outside [0, leaf_count)
            TreeNotBuiltError: If the tree is not built
        """
        levels = self._require_built("get_proof")
        self._check_index(index, len(levels[0]))

        steps: list[ProofStep] = []
        position = index
        for level in levels[:-1]:
            if position % 2 == 0:
                # Left child; a trailing odd node is its own sibling
                sibling = position + 1 if position + 1 < len(level) else position
                steps.append(ProofStep(sibling=level[sibling], is_left=False))
            else:
                steps.append(ProofStep(sibling=level[position - 1], is_left=True))
            position //= 2
        return steps

    def get_merkle_proof(self, index: int) -> MerkleProof:
        """Proof for ``index`` bundled with its leaf and the root."""
        steps = self.get_proof(index)
        return MerkleProof(
            leaf=self.get_leaf(index),
            index=index,
            steps=tuple(steps),
            root=self.get_root(),
        )

    @staticmethod
    def verify(
        leaf_hash: bytes,
        proof: Iterable[ProofStep],
        expected_root: bytes,
        hasher: TreeHasher | None = None,
    ) -> bool:
        """Stateless verification; see verify_proof."""
        return verify_proof(leaf_hash, proof, expected_root, hasher)

    def __repr__(self) -> str:
        if self._levels is None:
            return f"MerkleTree(unbuilt, algorithm={self._hasher.algorithm.value})"
        return (
            f"MerkleTree(leaves={self.leaf_count}, depth={self.depth}, "
            f"root={to_hex(self.get_root())})"
        )


__all__ = [
    "EMPTY_TREE_ROOT",
    "ProofStep",
    "MerkleProof",
    "MerkleTree",
    "merkle_parent",
    "build_levels",
    "build_merkle_root",
    "compute_tree_depth",
    "verify_proof",
    "verify_merkle_proof",
]
