"""Message identity for stake and redeem transfers.

The Gateway and CoGateway key every message by a typed hash over the transfer
intent. The hash is recomputed locally so the facilitator can query both
ledgers before any transaction is sent; it must match the contracts
bit-for-bit.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional

from eth_abi import encode
from web3 import Web3

from ..errors import MessageStatusError, ValidationError
from .validation import require_address, require_bytes32, require_positive, to_uint

STAKE_INTENT_TYPEHASH = Web3.keccak(
    text="StakeIntent(uint256 amount,address beneficiary,address gateway)"
)
REDEEM_INTENT_TYPEHASH = Web3.keccak(
    text="RedeemIntent(uint256 amount,address beneficiary,address gateway)"
)
MESSAGE_TYPEHASH = Web3.keccak(
    text=(
        "Message(bytes32 intentHash,uint256 nonce,uint256 gasPrice,"
        "uint256 gasLimit,address sender,bytes32 hashLock)"
    )
)


class MessageStatus(Enum):
    """Lifecycle state of a message in an outbox or inbox."""

    UNDECLARED = 0
    DECLARED = 1
    PROGRESSED = 2
    REVOCATION_DECLARED = 3
    REVOKED = 4

    @classmethod
    def from_value(cls, raw: Any) -> "MessageStatus":
        """Map a wire value to a status, rejecting unknown values."""
        try:
            return cls(int(raw))
        except (TypeError, ValueError):
            raise MessageStatusError(
                f"Unknown message status: {raw}.",
                status=raw,
                error_code="UNKNOWN_MESSAGE_STATUS",
                retryable=False,
            ) from None


def message_status():
    """Return the message status enumeration."""
    return MessageStatus


@dataclass(frozen=True)
class TransferIntent:
    """Parameters of a stake or redeem request.

    ``nonce`` stays ``None`` until the ledger assigns it on declaration.
    """

    sender: str
    amount: Any
    beneficiary: str
    gas_price: Any
    gas_limit: Any
    hash_lock: str
    nonce: Optional[Any] = None

    def normalized(self, require_nonce: bool = False) -> "TransferIntent":
        """Validate every field and return a copy with canonical values."""
        nonce = self.nonce
        if nonce is not None or require_nonce:
            if nonce is None:
                raise ValidationError(
                    "Invalid nonce: None.", field="nonce", value=None, expected="unsigned integer"
                )
            nonce = to_uint(nonce, "nonce")

        return TransferIntent(
            sender=require_address(self.sender, "sender"),
            amount=require_positive(self.amount, "amount"),
            beneficiary=require_address(self.beneficiary, "beneficiary"),
            gas_price=to_uint(self.gas_price, "gas_price"),
            gas_limit=to_uint(self.gas_limit, "gas_limit"),
            hash_lock=require_bytes32(self.hash_lock, "hash_lock"),
            nonce=nonce,
        )

    def with_nonce(self, nonce: Any) -> "TransferIntent":
        """Return a copy carrying ``nonce``."""
        return replace(self, nonce=nonce)

    def to_dict(self) -> Dict[str, Any]:
        """Convert intent to dictionary."""
        return {
            "sender": self.sender,
            "amount": self.amount,
            "beneficiary": self.beneficiary,
            "gas_price": self.gas_price,
            "gas_limit": self.gas_limit,
            "hash_lock": self.hash_lock,
            "nonce": self.nonce,
        }


def _intent_hash(typehash: bytes, amount: int, beneficiary: str, contract: str) -> bytes:
    return Web3.keccak(
        encode(
            ["bytes32", "uint256", "address", "address"],
            [typehash, amount, beneficiary, contract],
        )
    )


def _message_hash(intent_hash: bytes, intent: TransferIntent) -> str:
    digest = Web3.keccak(
        encode(
            ["bytes32", "bytes32", "uint256", "uint256", "uint256", "address", "bytes32"],
            [
                MESSAGE_TYPEHASH,
                intent_hash,
                intent.nonce,
                intent.gas_price,
                intent.gas_limit,
                intent.sender,
                Web3.to_bytes(hexstr=intent.hash_lock),
            ],
        )
    )
    return Web3.to_hex(digest)


def _typed_message_hash(typehash: bytes, intent: TransferIntent, contract: str, field: str) -> str:
    intent = intent.normalized(require_nonce=True)
    contract = require_address(contract, field)
    intent_hash = _intent_hash(typehash, intent.amount, intent.beneficiary, contract)
    return _message_hash(intent_hash, intent)


def get_stake_message_hash(intent: TransferIntent, gateway_address: str) -> str:
    """Hash of a stake message as stored by the Gateway and CoGateway."""
    return _typed_message_hash(STAKE_INTENT_TYPEHASH, intent, gateway_address, "gateway_address")


def get_redeem_message_hash(intent: TransferIntent, co_gateway_address: str) -> str:
    """Hash of a redeem message as stored by the CoGateway and Gateway."""
    return _typed_message_hash(
        REDEEM_INTENT_TYPEHASH, intent, co_gateway_address, "co_gateway_address"
    )
