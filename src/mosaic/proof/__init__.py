"""Merkle proof generation for cross-chain confirmation."""

from .generator import (
    OUTBOX_OFFSET,
    ProofGenerator,
    Web3ProofGenerator,
    encode_account,
    outbox_storage_key,
    serialize_proof,
)
from .types import ProofBundle, ProofResult, StorageProof

__all__ = [
    "OUTBOX_OFFSET",
    "ProofGenerator",
    "Web3ProofGenerator",
    "ProofResult",
    "StorageProof",
    "ProofBundle",
    "encode_account",
    "outbox_storage_key",
    "serialize_proof",
]
