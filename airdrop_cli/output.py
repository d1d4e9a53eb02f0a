"""
CLI error output.

Commands report failures through ``report_error``. With ``--json`` the
structured ``AirdropError`` document goes to stdout; otherwise a one-line
message goes to stderr.
"""

from __future__ import annotations

import json
import sys
from typing import Any

from core.schemas.errors import AirdropError, AirdropException, ErrorCodes


def file_not_found(e: FileNotFoundError) -> AirdropError:
    if e.filename is None:
        return AirdropError(code=ErrorCodes.FILE_NOT_FOUND, message=str(e))
    return AirdropError(
        code=ErrorCodes.FILE_NOT_FOUND,
        message=f"File not found: {e.filename}",
        details={"path": str(e.filename)},
    )


def usage_error(message: str, **details: Any) -> AirdropError:
    return AirdropError(code=ErrorCodes.INVALID_INPUT, message=message, details=details)


def report_error(error: AirdropError | AirdropException, as_json: bool = False) -> None:
    if isinstance(error, AirdropException):
        error = error.to_error_model()

    if as_json:
        print(json.dumps({"error": error.model_dump(mode="json")}, indent=2))
    else:
        print(f"Error: {error.message}", file=sys.stderr)
