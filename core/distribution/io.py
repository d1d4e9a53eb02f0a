"""
Module 04 - Distribution
File: io.py

Purpose: Save and load distribution documents and flat claim sheets.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from core.distribution.models import Distribution
from core.schemas.canonical import dumps_canonical, loads_canonical
from core.schemas.errors import CanonicalizationException, DistributionFormatError


logger = logging.getLogger(__name__)


def save_distribution(distribution: Distribution, path: str | Path) -> Path:
    """Write the distribution as canonical JSON. Returns the written path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = distribution.model_dump(mode="json")
    path.write_text(dumps_canonical(data) + "\n", encoding="utf-8")
    logger.info(f"Wrote distribution for campaign {distribution.campaign_id} to {path}")
    return path


def load_distribution(path: str | Path) -> Distribution:
    """
    Raises:
        FileNotFoundError: If the file does not exist
        DistributionFormatError: If the file is not a valid distribution
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Distribution file not found: {path}")

    try:
        data = loads_canonical(path.read_text(encoding="utf-8"))
    except CanonicalizationException as e:
        raise DistributionFormatError(e.message, path=str(path), details=dict(e.details)) from e

    try:
        return Distribution.model_validate(data)
    except ValidationError as e:
        raise DistributionFormatError(
            f"Invalid distribution document: {e.error_count()} errors",
            path=str(path),
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e


def save_claims_csv(distribution: Distribution, path: str | Path) -> Path:
    """
    Write one row per claim: recipient, amount, index, leaf, proof (JSON).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["recipient", "amount", "index", "leaf", "proof"])
        for claim in distribution.claims_by_index():
            proof = [entry.model_dump() for entry in claim.proof]
            writer.writerow([
                claim.recipient,
                claim.amount,
                claim.index,
                claim.leaf,
                json.dumps(proof, separators=(",", ":")),
            ])
    logger.info(f"Wrote {len(distribution.claims)} claims to {path}")
    return path
