"""
Module 04 - Distribution

Campaign distributions: root + per-recipient claims, claim verification, file IO.
"""
from .models import (
    DISTRIBUTION_FORMAT_VERSION,
    ClaimEntry,
    Distribution,
    ProofEntry,
)
from .builder import (
    audit_distribution,
    build_distribution,
    verify_claim,
)
from .io import (
    load_distribution,
    save_claims_csv,
    save_distribution,
)

__all__ = [
    "DISTRIBUTION_FORMAT_VERSION",
    "ClaimEntry",
    "Distribution",
    "ProofEntry",
    "audit_distribution",
    "build_distribution",
    "verify_claim",
    "load_distribution",
    "save_claims_csv",
    "save_distribution",
]
