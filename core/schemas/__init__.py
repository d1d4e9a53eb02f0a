"""
Module 01 - Schemas & Canonicalization
File: __init__.py

Purpose: Export the public API for the schemas module.
"""

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonicalize_value,
    dumps_canonical,
    loads_canonical,
)

# Error models and exceptions
from .errors import (
    AirdropError,
    AirdropException,
    CampaignNotFoundError,
    CanonicalizationException,
    DistributionFormatError,
    ErrorCodes,
    IndexOutOfRangeError,
    InvalidInputError,
    TreeAlreadyBuiltError,
    TreeNotBuiltError,
)

__all__ = [
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonicalize_value",
    "dumps_canonical",
    "loads_canonical",
    # Errors
    "AirdropError",
    "AirdropException",
    "CampaignNotFoundError",
    "CanonicalizationException",
    "DistributionFormatError",
    "ErrorCodes",
    "IndexOutOfRangeError",
    "InvalidInputError",
    "TreeAlreadyBuiltError",
    "TreeNotBuiltError",
]
