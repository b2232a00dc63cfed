"""
Outbox proof generation.

A confirmation on the target chain needs two Merkle-Patricia proofs from the
source chain: the contract account against the state root, and the outbox
storage slot of the message against the account's storage root. The default
provider reads both through ``eth_getProof``.
"""

import logging

logger = logging.getLogger(__name__)
from abc import ABC, abstractmethod
from typing import Any, List, Sequence

import rlp
from rlp.exceptions import DecodingError
from eth_abi import encode
from web3 import Web3

from ..errors import ProofError
from ..utils.validation import require_address, require_bytes32, to_hex_string
from .types import ProofResult, StorageProof

OUTBOX_OFFSET = 7


class ProofGenerator(ABC):
    """Abstract proof provider."""

    @abstractmethod
    async def get_outbox_proof(
        self,
        source_web3: Any,
        target_web3: Any,
        account_address: str,
        message_hashes: Sequence[str],
        block_height_hex: str,
    ) -> ProofResult:
        """Prove ``account_address`` and its outbox slots at ``block_height_hex``.

        ``source_web3`` is the chain holding the outbox; ``target_web3`` is the
        chain that will verify the proof.
        """
        pass


def outbox_storage_key(message_hash: str, outbox_offset: int = OUTBOX_OFFSET) -> bytes:
    """Storage slot of ``outbox[message_hash]`` for a mapping at ``outbox_offset``."""
    return Web3.keccak(
        encode(
            ["bytes32", "uint256"],
            [Web3.to_bytes(hexstr=message_hash), outbox_offset],
        )
    )


def encode_account(nonce: int, balance: int, storage_hash: bytes, code_hash: bytes) -> str:
    """RLP encode an account the way it is stored in the state trie."""
    return Web3.to_hex(
        rlp.encode([nonce, balance, bytes(storage_hash), bytes(code_hash)])
    )


def serialize_proof(nodes: Sequence[Any]) -> str:
    """Serialize proof nodes into a single RLP list."""
    return Web3.to_hex(rlp.encode([rlp.decode(bytes(node)) for node in nodes]))


class Web3ProofGenerator(ProofGenerator):
    """Proof provider backed by ``eth_getProof`` on the source chain."""

    def __init__(self, outbox_offset: int = OUTBOX_OFFSET):
        self.outbox_offset = outbox_offset

    async def get_outbox_proof(
        self,
        source_web3: Any,
        target_web3: Any,
        account_address: str,
        message_hashes: Sequence[str],
        block_height_hex: str,
    ) -> ProofResult:
        account_address = require_address(account_address, "account_address")
        hashes = [require_bytes32(h, "message_hash") for h in message_hashes]
        keys = [
            int.from_bytes(outbox_storage_key(h, self.outbox_offset), "big")
            for h in hashes
        ]
        block_identifier = int(block_height_hex, 16)

        logger.debug(
            f"Requesting proof for {account_address} at block {block_identifier} "
            f"with {len(keys)} storage key(s)"
        )
        proof = await source_web3.eth.get_proof(account_address, keys, block_identifier)

        return self._build_result(proof, account_address, block_height_hex, len(keys))

    def _build_result(
        self, proof: Any, account_address: str, block_height_hex: str, expected: int
    ) -> ProofResult:
        try:
            encoded_account = encode_account(
                proof["nonce"],
                proof["balance"],
                proof["storageHash"],
                proof["codeHash"],
            )
            account_proof = serialize_proof(proof["accountProof"])
            storage_proofs: List[StorageProof] = [
                StorageProof(
                    key=to_hex_string(entry["key"]),
                    value=int(entry["value"]),
                    serialized_proof=serialize_proof(entry["proof"]),
                )
                for entry in proof["storageProof"]
            ]
        except (KeyError, TypeError, ValueError, DecodingError) as e:
            raise ProofError(
                f"Malformed proof for account {account_address}: {e}",
                account_address=account_address,
                cause=e,
            ) from e

        if len(storage_proofs) != expected:
            raise ProofError(
                f"Expected {expected} storage proof(s) for account {account_address}, "
                f"got {len(storage_proofs)}",
                account_address=account_address,
            )

        return ProofResult(
            block_height=block_height_hex,
            encoded_account_value=encoded_account,
            serialized_account_proof=account_proof,
            storage_proof=storage_proofs,
        )
