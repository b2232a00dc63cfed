"""Ledger clients for the Gateway and CoGateway contracts."""

from .abi import CO_GATEWAY_ABI, EIP20_TOKEN_ABI, GATEWAY_ABI, STATE_ROOT_PROVIDER_ABI
from .auxiliary import AuxiliaryLedger
from .base import LedgerClient
from .origin import OriginLedger
from .token import EIP20Token
from .transaction import send_transaction
from .types import AnchorInfo, DeclarationResult

__all__ = [
    "LedgerClient",
    "OriginLedger",
    "AuxiliaryLedger",
    "EIP20Token",
    "AnchorInfo",
    "DeclarationResult",
    "send_transaction",
    "GATEWAY_ABI",
    "CO_GATEWAY_ABI",
    "EIP20_TOKEN_ABI",
    "STATE_ROOT_PROVIDER_ABI",
]
