"""Facilitator for Mosaic stake-and-mint and redeem-and-unstake transfers."""

from .facilitator import Facilitator
from .results import ConfirmationResult, LegResult, ProgressOutcome

__all__ = [
    "Facilitator",
    "ConfirmationResult",
    "LegResult",
    "ProgressOutcome",
]
