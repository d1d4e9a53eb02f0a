"""
Module 04 - Distribution
File: builder.py

Purpose: Turn an allocation list into a campaign tree and its published
distribution, and verify claims against a distribution.

Data flow:
    allocations -> canonical records -> MerkleTree -> Distribution
    (root published on-chain, claims handed to recipients)
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from pydantic import ValidationError

from core.allocation.encoding import (
    check_unique_recipients,
    encode_allocation,
    encode_allocations,
    recipient_key,
)
from core.allocation.models import Allocation, LeafEncoding
from core.crypto.hashing import DEFAULT_HASHER, TreeHasher, from_hex, to_hex
from core.merkle.merkle_proofs import decode_proof, encode_proof
from core.merkle.merkle_tree import MerkleTree, ProofStep, verify_proof
from core.distribution.models import ClaimEntry, Distribution, ProofEntry
from core.schemas.errors import InvalidInputError


logger = logging.getLogger(__name__)


def build_distribution(
    campaign_id: str,
    allocations: Sequence[Allocation],
    *,
    encoding: LeafEncoding | str = LeafEncoding.TEXT,
    hasher: TreeHasher | None = None,
) -> tuple[Distribution, MerkleTree]:
    """
    Build the campaign tree and the distribution document.

    Leaf order follows allocation order; reordering the allocations
    changes the root.

    Returns:
        (distribution, tree)

    Raises:
        InvalidInputError: On an empty list, duplicate recipients, or
            recipients the encoding cannot represent
    """
    encoding = LeafEncoding(encoding)
    hasher = hasher or DEFAULT_HASHER

    if not allocations:
        raise InvalidInputError("Cannot build a distribution without allocations")
    check_unique_recipients(allocations, encoding)

    records = encode_allocations(allocations, encoding)
    tree = MerkleTree.from_records(records, hasher)

    claims: dict[str, ClaimEntry] = {}
    for index, allocation in enumerate(allocations):
        claims[recipient_key(allocation.recipient, encoding)] = ClaimEntry(
            index=index,
            recipient=allocation.recipient,
            amount=str(allocation.amount),
            leaf=to_hex(tree.get_leaf(index)),
            proof=[ProofEntry(**step) for step in encode_proof(tree.get_proof(index))],
        )

    distribution = Distribution(
        campaign_id=campaign_id,
        merkle_root=to_hex(tree.get_root()),
        hash_algorithm=hasher.algorithm,
        leaf_encoding=encoding,
        domain_separated=hasher.domain_separated,
        leaf_count=tree.leaf_count,
        token_total=str(sum(a.amount for a in allocations)),
        claims=claims,
    )
    logger.info(
        f"Built distribution for campaign {campaign_id}: "
        f"{distribution.leaf_count} claims, root {distribution.merkle_root}"
    )
    return distribution, tree


def _coerce_steps(proof: Sequence[Any]) -> list[ProofStep]:
    steps: list[ProofStep] = []
    for entry in proof:
        if isinstance(entry, ProofStep):
            steps.append(entry)
        elif isinstance(entry, ProofEntry):
            steps.append(ProofStep.from_dict(entry.model_dump()))
        else:
            steps.extend(decode_proof([entry]))
    return steps


def verify_claim(
    distribution: Distribution,
    recipient: str,
    amount: int | str,
    proof: Sequence[Any] | None = None,
) -> bool:
    """
    Check that (recipient, amount) is committed to by the distribution root.

    The leaf is rebuilt from the claimed values, never read from the file.
    Without an explicit ``proof`` the recipient's stored proof is used.

    Returns False for unknown recipients, wrong amounts, malformed input
    and tampered proofs. Never raises.
    """
    try:
        allocation = Allocation(recipient=recipient, amount=amount)
        record = encode_allocation(allocation, distribution.leaf_encoding)
    except (ValidationError, InvalidInputError):
        return False

    if proof is None:
        claim = distribution.get_claim(recipient)
        if claim is None:
            return False
        proof = claim.proof

    try:
        steps = _coerce_steps(proof)
        root = from_hex(distribution.merkle_root)
    except (KeyError, TypeError, ValueError, AttributeError):
        return False

    hasher = distribution.hasher()
    return verify_proof(hasher.hash_leaf(record), steps, root, hasher)


def audit_distribution(distribution: Distribution) -> list[str]:
    """
    Re-verify every stored claim against the root.

    Returns:
        Recipients whose claim does not verify (empty when consistent)
    """
    failed: list[str] = []
    for claim in distribution.claims_by_index():
        if not verify_claim(distribution, claim.recipient, claim.amount):
            failed.append(claim.recipient)
    if failed:
        logger.warning(f"{len(failed)} claims failed verification in campaign {distribution.campaign_id}")
    return failed
