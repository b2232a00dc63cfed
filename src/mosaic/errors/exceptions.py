"""Exception hierarchy for Mosaic.

This module defines the structured exceptions raised by the facilitator and
its chain clients. Every error carries a category, a severity and a
``retryable`` flag so callers can tell "retry later" apart from
"fix and retry".
"""

import time
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories."""

    VALIDATION = "validation"
    PRECONDITION = "precondition"
    TRANSACTION = "transaction"
    PROOF = "proof"
    NETWORK = "network"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


@dataclass
class ErrorContext:
    """Context information for an error."""

    timestamp: float = field(default_factory=time.time)
    component: Optional[str] = None
    operation: Optional[str] = None
    chain: Optional[str] = None
    message_hash: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary."""
        return {
            "timestamp": self.timestamp,
            "component": self.component,
            "operation": self.operation,
            "chain": self.chain,
            "message_hash": self.message_hash,
            "metadata": self.metadata,
        }


class MosaicError(Exception):
    """Base exception for all Mosaic errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        retryable: bool = False,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.severity = severity
        self.category = category
        self.context = context or ErrorContext()
        self.cause = cause
        self.retryable = retryable
        self.metadata = metadata or {}
        self.timestamp = time.time()
        self.traceback = traceback.format_exc()

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "severity": self.severity.value,
            "category": self.category.value,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
            "retryable": self.retryable,
            "metadata": self.metadata,
            "timestamp": self.timestamp,
        }

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [f"{self.__class__.__name__}: {self.message}"]

        if self.error_code:
            parts.append(f"Code: {self.error_code}")

        if self.severity != ErrorSeverity.MEDIUM:
            parts.append(f"Severity: {self.severity.value}")

        if self.retryable:
            parts.append("Retryable: Yes")

        return " | ".join(parts)


class ValidationError(MosaicError):
    """Malformed caller input, detected before any remote call."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[Any] = None,
        **kwargs,
    ):
        kwargs.setdefault("error_code", "INVALID_INPUT")
        super().__init__(message, category=ErrorCategory.VALIDATION, **kwargs)
        self.field = field
        self.value = value
        self.expected = expected

    def to_dict(self) -> Dict[str, Any]:
        """Convert validation error to dictionary."""
        data = super().to_dict()
        data.update(
            {
                "field": self.field,
                "value": str(self.value) if self.value is not None else None,
                "expected": str(self.expected) if self.expected is not None else None,
            }
        )
        return data


class BountyMismatchError(ValidationError):
    """Transaction value does not match the contract bounty."""

    def __init__(self, value: Any, bounty: int, **kwargs):
        super().__init__(
            f"Value passed in transaction options {value} must be equal to "
            f"bounty amount {bounty}.",
            field="value",
            value=value,
            expected=bounty,
            error_code="BOUNTY_MISMATCH",
            **kwargs,
        )
        self.bounty = bounty


class PreconditionError(MosaicError):
    """A remote read shows that the requested write cannot succeed yet."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, category=ErrorCategory.PRECONDITION, **kwargs)


class ApprovalError(PreconditionError):
    """Token allowance is missing and the facilitator cannot grant it."""

    def __init__(
        self,
        message: str,
        owner: Optional[str] = None,
        spender: Optional[str] = None,
        amount: Optional[int] = None,
        **kwargs,
    ):
        kwargs.setdefault("error_code", "APPROVAL_REQUIRED")
        super().__init__(message, retryable=False, **kwargs)
        self.owner = owner
        self.spender = spender
        self.amount = amount

    def to_dict(self) -> Dict[str, Any]:
        """Convert approval error to dictionary."""
        data = super().to_dict()
        data.update(
            {
                "owner": self.owner,
                "spender": self.spender,
                "amount": str(self.amount) if self.amount is not None else None,
            }
        )
        return data


class MessageStatusError(PreconditionError):
    """Message status is not eligible for the requested transition."""

    def __init__(
        self,
        message: str,
        message_hash: Optional[str] = None,
        status: Optional[Any] = None,
        **kwargs,
    ):
        kwargs.setdefault("error_code", "INVALID_MESSAGE_STATUS")
        kwargs.setdefault("retryable", True)
        super().__init__(message, **kwargs)
        self.message_hash = message_hash
        self.status = status

    def to_dict(self) -> Dict[str, Any]:
        """Convert message status error to dictionary."""
        data = super().to_dict()
        status = getattr(self.status, "name", self.status)
        data.update(
            {
                "message_hash": self.message_hash,
                "status": str(status) if status is not None else None,
            }
        )
        return data


class BlockHeightError(PreconditionError):
    """Requested block height is ahead of the latest anchored state root."""

    def __init__(
        self,
        message: str,
        block_number: Optional[int] = None,
        anchored_height: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(
            message, error_code="BLOCK_NOT_ANCHORED", retryable=True, **kwargs
        )
        self.block_number = block_number
        self.anchored_height = anchored_height

    def to_dict(self) -> Dict[str, Any]:
        """Convert block height error to dictionary."""
        data = super().to_dict()
        data.update(
            {
                "block_number": self.block_number,
                "anchored_height": self.anchored_height,
            }
        )
        return data


class BridgeError(MosaicError):
    """Remote execution error on one of the chains."""

    def __init__(self, message: str, chain: Optional[str] = None, **kwargs):
        kwargs.setdefault("category", ErrorCategory.TRANSACTION)
        super().__init__(message, **kwargs)
        self.chain = chain


class TransactionError(BridgeError):
    """A state-changing call was mined but reverted."""

    def __init__(
        self,
        message: str,
        transaction_hash: Optional[str] = None,
        receipt: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        super().__init__(message, severity=ErrorSeverity.HIGH, **kwargs)
        self.transaction_hash = transaction_hash
        self.receipt = receipt

    def to_dict(self) -> Dict[str, Any]:
        """Convert transaction error to dictionary."""
        data = super().to_dict()
        data.update({"transaction_hash": self.transaction_hash})
        return data


class ProofError(BridgeError):
    """Proof provider returned data that cannot be submitted."""

    def __init__(self, message: str, account_address: Optional[str] = None, **kwargs):
        super().__init__(message, category=ErrorCategory.PROOF, **kwargs)
        self.account_address = account_address


class ProgressError(BridgeError):
    """At least one progression leg failed.

    ``outcome`` keeps the result of every leg, so a caller can re-drive only
    the leg that failed.
    """

    def __init__(self, message: str, outcome: Any = None, **kwargs):
        super().__init__(message, retryable=True, **kwargs)
        self.outcome = outcome


class ConfigurationError(MosaicError):
    """Configuration error."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        **kwargs,
    ):
        super().__init__(message, category=ErrorCategory.CONFIGURATION, **kwargs)
        self.config_key = config_key
        self.config_value = config_value

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration error to dictionary."""
        data = super().to_dict()
        data.update(
            {
                "config_key": self.config_key,
                "config_value": str(self.config_value)
                if self.config_value is not None
                else None,
            }
        )
        return data


def create_validation_error(
    field: str, value: Any, expected: Any, message: Optional[str] = None
) -> ValidationError:
    """Create a validation error."""
    if message is None:
        message = f"Invalid {field.replace('_', ' ')}: {value}."

    return ValidationError(message=message, field=field, value=value, expected=expected)
