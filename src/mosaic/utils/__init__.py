"""Utilities shared by the ledger clients and the facilitator."""

from .hashlock import (
    HashLock,
    create_secret_hash_lock,
    is_valid_unlock_secret,
    to_hash_lock,
)
from .message import (
    MESSAGE_TYPEHASH,
    REDEEM_INTENT_TYPEHASH,
    STAKE_INTENT_TYPEHASH,
    MessageStatus,
    TransferIntent,
    get_redeem_message_hash,
    get_stake_message_hash,
    message_status,
)
from .validation import (
    is_address,
    require_address,
    require_block_number,
    require_bytes32,
    require_positive,
    require_tx_options,
    to_block_height_hex,
    to_bytes32,
    to_hex_string,
    to_uint,
)

__all__ = [
    # Hash lock
    "HashLock",
    "create_secret_hash_lock",
    "to_hash_lock",
    "is_valid_unlock_secret",
    # Message
    "MESSAGE_TYPEHASH",
    "STAKE_INTENT_TYPEHASH",
    "REDEEM_INTENT_TYPEHASH",
    "MessageStatus",
    "TransferIntent",
    "message_status",
    "get_stake_message_hash",
    "get_redeem_message_hash",
    # Validation
    "is_address",
    "require_address",
    "require_block_number",
    "require_bytes32",
    "require_positive",
    "require_tx_options",
    "to_block_height_hex",
    "to_bytes32",
    "to_hex_string",
    "to_uint",
]
