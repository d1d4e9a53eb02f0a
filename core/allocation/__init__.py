"""
Module 03 - Allocations

Recipient allocation records and their canonical leaf encodings.
"""
from .models import MAX_AMOUNT, Allocation, LeafEncoding
from .encoding import (
    check_unique_recipients,
    encode_allocation,
    encode_allocations,
    is_evm_address,
    normalize_address,
    recipient_key,
)
from .loaders import (
    load_allocations,
    load_allocations_csv,
    load_allocations_json,
    parse_allocations,
)

__all__ = [
    "MAX_AMOUNT",
    "Allocation",
    "LeafEncoding",
    "check_unique_recipients",
    "encode_allocation",
    "encode_allocations",
    "is_evm_address",
    "normalize_address",
    "recipient_key",
    "load_allocations",
    "load_allocations_csv",
    "load_allocations_json",
    "parse_allocations",
]
