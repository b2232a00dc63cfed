"""Proof data structures."""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class StorageProof:
    """Serialized Merkle-Patricia proof for one storage slot."""
    key: str
    value: int
    serialized_proof: str


@dataclass
class ProofResult:
    """Output of a proof provider for one account."""
    block_height: str
    encoded_account_value: str
    serialized_account_proof: str
    storage_proof: List[StorageProof] = field(default_factory=list)


@dataclass
class ProofBundle:
    """Everything ``proveGateway`` and ``confirm*Intent`` need for one message.

    Bundles can be persisted between proving the remote account and
    confirming the intent, and handed back to the facilitator to resume.
    """
    block_number: int
    account_data: str
    account_proof: str
    storage_proof: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert bundle to dictionary."""
        return {
            "block_number": self.block_number,
            "account_data": self.account_data,
            "account_proof": self.account_proof,
            "storage_proof": self.storage_proof,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProofBundle":
        """Create bundle from dictionary."""
        return cls(
            block_number=int(data["block_number"]),
            account_data=data["account_data"],
            account_proof=data["account_proof"],
            storage_proof=data["storage_proof"],
        )
