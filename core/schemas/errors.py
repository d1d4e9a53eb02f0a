"""
Module 01 - Schemas & Canonicalization
File: errors.py

Purpose: Standard error taxonomy for the airdrop Merkle toolkit.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

Proof mismatches are deliberately absent from this module: verification
reports them as a plain ``False`` and never raises.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Input & Encoding Errors
    INVALID_INPUT = "INVALID_INPUT"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"
    DISTRIBUTION_FORMAT_ERROR = "DISTRIBUTION_FORMAT_ERROR"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"

    # Tree State Errors
    TREE_NOT_BUILT = "TREE_NOT_BUILT"
    TREE_ALREADY_BUILT = "TREE_ALREADY_BUILT"
    INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"

    # Campaign Errors
    CAMPAIGN_NOT_FOUND = "CAMPAIGN_NOT_FOUND"
    RECIPIENT_NOT_FOUND = "RECIPIENT_NOT_FOUND"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class AirdropError(BaseModel):
    """
    Base error model for structured error communication.

    Used when an error has to cross a process boundary without being
    raised, e.g. the ``{"error": ...}`` document the CLI prints in
    ``--json`` mode.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.INVALID_INPUT],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "AirdropException":
        """Convert this error model to a raised exception."""
        return AirdropException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class AirdropException(Exception):
    """
    Base exception for all airdrop toolkit errors.

    This exception carries structured error information and can be
    converted to/from AirdropError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "AIRDROP_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> AirdropError:
        """Convert this exception to an AirdropError model."""
        return AirdropError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class InvalidInputError(AirdropException, ValueError):
    """Raised when leaf input or allocation records are empty or malformed."""

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_INPUT,
            details=full_details,
            retryable=False,
        )


class IndexOutOfRangeError(AirdropException, IndexError):
    """Raised when a proof is requested for a leaf index outside the tree."""

    def __init__(
        self,
        index: int,
        leaf_count: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        full_details["index"] = index
        full_details["leaf_count"] = leaf_count
        super().__init__(
            message=f"Leaf index {index} out of range for {leaf_count} leaves",
            code=ErrorCodes.INDEX_OUT_OF_RANGE,
            details=full_details,
            retryable=False,
        )
        self.index = index
        self.leaf_count = leaf_count


class TreeNotBuiltError(AirdropException, RuntimeError):
    """Raised when a read operation is attempted on an unbuilt tree."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            message=f"Merkle tree must be built before calling {operation}()",
            code=ErrorCodes.TREE_NOT_BUILT,
            details={"operation": operation},
            retryable=False,
        )


class TreeAlreadyBuiltError(AirdropException, RuntimeError):
    """Raised when build() is called on a tree that is already built."""

    def __init__(self) -> None:
        super().__init__(
            message="Merkle tree is already built; create a new tree for a new leaf set",
            code=ErrorCodes.TREE_ALREADY_BUILT,
            retryable=False,
        )


class CampaignNotFoundError(AirdropException, KeyError):
    """Raised when a campaign is not present in a tree cache."""

    def __init__(self, campaign_id: str) -> None:
        super().__init__(
            message=f"Campaign not found: {campaign_id}",
            code=ErrorCodes.CAMPAIGN_NOT_FOUND,
            details={"campaign_id": campaign_id},
            retryable=False,
        )
        self.campaign_id = campaign_id


class CanonicalizationException(AirdropException):
    """Exception raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
            retryable=False,
        )


class DistributionFormatError(AirdropException):
    """Raised when a distribution file cannot be parsed."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if path:
            full_details["path"] = path
        super().__init__(
            message=message,
            code=ErrorCodes.DISTRIBUTION_FORMAT_ERROR,
            details=full_details,
            retryable=False,
        )
