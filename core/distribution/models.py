"""
Module 04 - Distribution
File: models.py

Purpose: Published campaign distribution: the Merkle root plus one claim
(index, amount, leaf, proof) per recipient. This is the document handed
to claim frontends and recorded alongside the on-chain root.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from core.allocation.encoding import recipient_key
from core.allocation.models import LeafEncoding
from core.crypto.hashing import HashAlgorithm, TreeHasher
from core.schemas.errors import InvalidInputError

DISTRIBUTION_FORMAT_VERSION = "1"


class ProofEntry(BaseModel):
    """One sibling hash with its side of the pair."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    hash: str = Field(..., description="0x-prefixed sibling hash", pattern=r"^0x[0-9a-fA-F]*$")
    position: Literal["left", "right"] = Field(
        ...,
        description="Side of the sibling relative to the running hash",
    )


class ClaimEntry(BaseModel):
    """Everything a recipient submits to claim."""

    model_config = ConfigDict(extra="forbid")

    index: int = Field(..., description="Leaf index in the campaign tree", ge=0)
    recipient: str = Field(..., description="Recipient as given in the allocation list", min_length=1)
    amount: str = Field(..., description="Allocation as a decimal string", pattern=r"^[0-9]+$")
    leaf: str = Field(..., description="0x-prefixed leaf hash", pattern=r"^0x[0-9a-fA-F]*$")
    proof: list[ProofEntry] = Field(default_factory=list)


class Distribution(BaseModel):
    """
    Merkle distribution for one campaign.

    ``claims`` is keyed by recipient key: the lower-cased address for
    packed encodings, the recipient identifier as-is for text encodings.
    """

    model_config = ConfigDict(extra="forbid")

    format_version: str = Field(default=DISTRIBUTION_FORMAT_VERSION)
    campaign_id: str = Field(..., description="Campaign identifier", min_length=1)
    merkle_root: str = Field(..., description="0x-prefixed Merkle root", pattern=r"^0x[0-9a-fA-F]*$")
    hash_algorithm: HashAlgorithm = Field(default=HashAlgorithm.SHA256)
    leaf_encoding: LeafEncoding = Field(default=LeafEncoding.TEXT)
    domain_separated: bool = Field(default=False)
    leaf_count: int = Field(..., ge=1)
    token_total: str = Field(..., pattern=r"^[0-9]+$")
    claims: dict[str, ClaimEntry] = Field(default_factory=dict)

    def hasher(self) -> TreeHasher:
        """The TreeHasher this distribution was built with."""
        return TreeHasher(
            algorithm=self.hash_algorithm,
            domain_separated=self.domain_separated,
        )

    def get_claim(self, recipient: str) -> ClaimEntry | None:
        """Look up a claim; None for unknown or malformed recipients."""
        try:
            key = recipient_key(recipient, self.leaf_encoding)
        except InvalidInputError:
            return None
        return self.claims.get(key)

    def claims_by_index(self) -> list[ClaimEntry]:
        """Claims in leaf order."""
        return sorted(self.claims.values(), key=lambda c: c.index)
