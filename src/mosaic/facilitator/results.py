"""Result types returned by the facilitator."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..proof.types import ProofBundle


@dataclass
class ConfirmationResult:
    """Outcome of confirming a remote declaration in an inbox.

    ``already_confirmed`` is set when the inbox already held the message and
    no transaction was sent. Otherwise ``proof`` is the bundle that was
    submitted, so a caller can reuse it if confirmation has to be retried.
    """

    message_hash: str
    already_confirmed: bool = False
    proof: Optional[ProofBundle] = None
    prove_receipt: Any = None
    confirm_receipt: Any = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        return {
            "message_hash": self.message_hash,
            "already_confirmed": self.already_confirmed,
            "proof": self.proof.to_dict() if self.proof else None,
        }


@dataclass
class LegResult:
    """Outcome of one progression leg."""

    leg: str
    receipt: Any = None
    already_progressed: bool = False
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "leg": self.leg,
            "succeeded": self.succeeded,
            "already_progressed": self.already_progressed,
            "error": str(self.error) if self.error else None,
        }


@dataclass
class ProgressOutcome:
    """Joint outcome of the two progression legs of a message."""

    message_hash: str
    legs: List[LegResult] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return all(leg.succeeded for leg in self.legs)

    @property
    def failures(self) -> List[LegResult]:
        return [leg for leg in self.legs if not leg.succeeded]

    def get_leg(self, name: str) -> Optional[LegResult]:
        """Get the result of leg ``name``."""
        for leg in self.legs:
            if leg.leg == name:
                return leg
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message_hash": self.message_hash,
            "succeeded": self.succeeded,
            "legs": [leg.to_dict() for leg in self.legs],
        }
