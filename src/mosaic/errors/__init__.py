"""Mosaic error handling.

Structured exceptions shared by the facilitator, the ledger clients and the
proof generator.
"""

from .exceptions import (
    ApprovalError,
    BlockHeightError,
    BountyMismatchError,
    BridgeError,
    ConfigurationError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    MessageStatusError,
    MosaicError,
    PreconditionError,
    ProgressError,
    ProofError,
    TransactionError,
    ValidationError,
    create_validation_error,
)

__all__ = [
    "MosaicError",
    "ErrorSeverity",
    "ErrorCategory",
    "ErrorContext",
    # Validation
    "ValidationError",
    "BountyMismatchError",
    "create_validation_error",
    # Preconditions
    "PreconditionError",
    "ApprovalError",
    "MessageStatusError",
    "BlockHeightError",
    # Remote execution
    "BridgeError",
    "TransactionError",
    "ProofError",
    "ProgressError",
    # Configuration
    "ConfigurationError",
]
