"""Ledger result types."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class AnchorInfo:
    """Latest remote state root anchored on a chain."""
    block_height: int
    state_root: str

    def to_dict(self) -> Dict[str, Any]:
        return {"block_height": self.block_height, "state_root": self.state_root}


@dataclass(frozen=True)
class DeclarationResult:
    """Outcome of a stake or redeem declaration."""
    message_hash: str
    nonce: int
    block_number: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message_hash": self.message_hash,
            "nonce": self.nonce,
            "block_number": self.block_number,
        }
