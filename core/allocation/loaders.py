"""
Module 03 - Allocations
File: loaders.py

Purpose: Read allocation lists from CSV or JSON files, preserving row order.

CSV files need a header with an ``amount`` column and either an
``address`` or a ``recipient`` column. JSON files hold either a list of
``{"recipient": ..., "amount": ...}`` objects or a ``{recipient: amount}``
mapping.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from core.allocation.encoding import check_unique_recipients
from core.allocation.models import Allocation
from core.schemas.errors import InvalidInputError


logger = logging.getLogger(__name__)

RECIPIENT_COLUMNS = ("recipient", "address")


def _make_allocation(recipient: Any, amount: Any, location: str) -> Allocation:
    try:
        return Allocation(recipient=recipient, amount=amount)
    except ValidationError as e:
        first = e.errors()[0]
        raise InvalidInputError(
            f"Invalid allocation at {location}: {first['msg']}",
            field_path=location,
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from None


def parse_allocations(data: Any) -> list[Allocation]:
    """
    Build allocations from decoded JSON data.

    Raises:
        InvalidInputError: On an unsupported shape, bad rows, or duplicates
    """
    allocations: list[Allocation] = []
    if isinstance(data, dict):
        for recipient, amount in data.items():
            allocations.append(_make_allocation(recipient, amount, f"allocations[{recipient!r}]"))
    elif isinstance(data, list):
        for i, row in enumerate(data):
            if not isinstance(row, dict):
                raise InvalidInputError(
                    f"Allocation entry must be an object, got {type(row).__name__}",
                    field_path=f"allocations[{i}]",
                )
            recipient = next((row[c] for c in RECIPIENT_COLUMNS if c in row), None)
            allocations.append(_make_allocation(recipient, row.get("amount"), f"allocations[{i}]"))
    else:
        raise InvalidInputError(
            f"Allocations must be a list or an object, got {type(data).__name__}"
        )

    if not allocations:
        raise InvalidInputError("Allocation list is empty")
    check_unique_recipients(allocations)
    return allocations


def load_allocations_json(path: str | Path) -> list[Allocation]:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"Invalid JSON in {path}: {e}") from e

    # Allow {"allocations": [...]} wrappers
    if isinstance(data, dict) and isinstance(data.get("allocations"), (list, dict)):
        data = data["allocations"]

    allocations = parse_allocations(data)
    logger.info(f"Loaded {len(allocations)} allocations from {path}")
    return allocations


def load_allocations_csv(path: str | Path) -> list[Allocation]:
    path = Path(path)
    with open(path, newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        fieldnames = [name.strip().lower() for name in (reader.fieldnames or [])]
        recipient_col = next((c for c in RECIPIENT_COLUMNS if c in fieldnames), None)
        if recipient_col is None or "amount" not in fieldnames:
            raise InvalidInputError(
                f"CSV {path} needs a header with 'address' (or 'recipient') and 'amount'"
            )
        reader.fieldnames = fieldnames

        allocations: list[Allocation] = []
        for row in reader:
            recipient = (row.get(recipient_col) or "").strip()
            amount = (row.get("amount") or "").strip()
            if not recipient and not amount:
                continue
            allocations.append(_make_allocation(recipient, amount, f"line {reader.line_num}"))

    if not allocations:
        raise InvalidInputError(f"No allocation rows in CSV {path}")
    check_unique_recipients(allocations)
    logger.info(f"Loaded {len(allocations)} allocations from {path}")
    return allocations


def load_allocations(path: str | Path) -> list[Allocation]:
    """
    Load allocations, choosing the parser by file suffix (.json or .csv).

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidInputError: On unsupported suffixes or malformed content
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Allocation file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        return load_allocations_json(path)
    if suffix == ".csv":
        return load_allocations_csv(path)
    raise InvalidInputError(f"Unsupported allocation file type: {suffix or path.name}")
