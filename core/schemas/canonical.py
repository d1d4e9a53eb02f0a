"""
Module 01 - Schemas & Canonicalization
File: canonical.py

Purpose: Byte-stable JSON for distribution documents.

A distribution file is published next to an on-chain root, so two builds
of the same campaign must produce identical bytes, and a reader must not
silently accept a document that a writer could never have produced.

Rules:
- Object keys sorted, no whitespace, UTF-8 kept as-is
- None values dropped from objects
- Enums as their value, bytes as 0x-prefixed hex
- Integers only: token amounts travel as decimal strings, so any float
  (including NaN/Infinity) is rejected both when writing and when reading
- Duplicate object keys are rejected when reading
"""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .errors import CanonicalizationException

CANONICAL_JSON_SEPARATORS: tuple[str, str] = (",", ":")


def canonicalize_value(value: Any, path: str = "") -> Any:
    """
    Convert a value into plain JSON types following the canonical rules.

    Raises:
        CanonicalizationException: On floats or unsupported types; ``details``
            carries the offending path
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value

    if isinstance(value, Enum):
        return value.value

    if isinstance(value, bytes):
        return "0x" + value.hex()

    if isinstance(value, BaseModel):
        return canonicalize_value(value.model_dump(mode="json", exclude_none=True), path)

    if isinstance(value, dict):
        return {
            str(k): canonicalize_value(v, f"{path}.{k}" if path else str(k))
            for k, v in value.items()
            if v is not None
        }

    if isinstance(value, (list, tuple)):
        return [canonicalize_value(item, f"{path}[{i}]") for i, item in enumerate(value)]

    if isinstance(value, float):
        raise CanonicalizationException(
            message=f"Floats are not allowed in canonical documents: {value!r}",
            details={"path": path, "value": repr(value)},
        )

    raise CanonicalizationException(
        message=f"Cannot canonicalize value of type {type(value).__name__}",
        details={"path": path, "type": type(value).__name__},
    )


def dumps_canonical(obj: Any) -> str:
    """
    Serialize to canonical JSON text.

    Example:
        >>> dumps_canonical({"b": 2, "a": b"\\x01"})
        '{"a":"0x01","b":2}'
    """
    return json.dumps(
        canonicalize_value(obj),
        sort_keys=True,
        separators=CANONICAL_JSON_SEPARATORS,
        ensure_ascii=False,
    )


def _reject_duplicate_keys(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    obj: dict[str, Any] = {}
    for key, value in pairs:
        if key in obj:
            raise CanonicalizationException(
                message=f"Duplicate key in JSON object: {key!r}",
                details={"key": key},
            )
        obj[key] = value
    return obj


def _reject_float(text: str) -> Any:
    raise CanonicalizationException(
        message=f"Floats are not allowed in canonical documents: {text}",
        details={"value": text},
    )


def loads_canonical(text: str) -> Any:
    """
    Parse JSON text under the canonical rules.

    Key order and whitespace are not checked; only content a canonical
    writer cannot produce is refused.

    Raises:
        CanonicalizationException: On malformed JSON, duplicate keys or floats
    """
    try:
        return json.loads(
            text,
            object_pairs_hook=_reject_duplicate_keys,
            parse_float=_reject_float,
            parse_constant=_reject_float,
        )
    except json.JSONDecodeError as e:
        raise CanonicalizationException(
            message=f"Invalid JSON: {e}",
            details={"line": e.lineno, "column": e.colno},
        ) from e
