"""
Module 03 - Allocations
File: models.py

Purpose: Recipient allocation records, the input of every campaign tree.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Amounts are encoded as uint256 on-chain
MAX_AMOUNT = 2**256 - 1


class LeafEncoding(str, Enum):
    """
    Canonical byte encodings of one allocation record.

    TEXT:   UTF-8 of "<recipient>:<amount>", e.g. b"alice:100"
    PACKED: abi.encodePacked(address, uint256), 20 + 32 bytes
    """
    TEXT = "text"
    PACKED = "packed"


class Allocation(BaseModel):
    """
    One recipient and the token amount it may claim.

    Amount is an integer in the token's smallest unit. Integer strings
    such as "1000" are accepted.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    recipient: str = Field(
        ...,
        description="Recipient identifier (EVM address for packed encoding)",
        min_length=1,
    )
    amount: int = Field(
        ...,
        description="Allocation in the token's smallest unit",
        ge=0,
        le=MAX_AMOUNT,
    )

    @field_validator("recipient", mode="before")
    @classmethod
    def strip_recipient(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, v: object) -> object:
        """Accept decimal integer strings only; reject floats like 1.5 or 1e3."""
        if isinstance(v, bool):
            raise ValueError("amount must be an integer, not a boolean")
        if isinstance(v, str):
            text = v.strip()
            if not (text.isascii() and text.isdigit()):
                raise ValueError(f"amount must be a non-negative integer string, got {v!r}")
            return int(text)
        if isinstance(v, float):
            raise ValueError(f"amount must be an integer, got float {v!r}")
        return v
