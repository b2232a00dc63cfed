"""
Auxiliary chain ledger client (EIP20CoGateway).

Redeems are declared in the CoGateway outbox with the bounty attached as
transaction value. Stakes declared on the origin chain are confirmed in the
CoGateway inbox and progressed with ``progressMint``.
"""

import logging

logger = logging.getLogger(__name__)
from typing import Any, Dict, Optional

from ..utils.message import TransferIntent
from ..utils.validation import require_block_number, require_tx_options, to_bytes32
from .abi import CO_GATEWAY_ABI
from .base import LedgerClient, _to_bytes
from .token import EIP20Token
from .types import DeclarationResult


class AuxiliaryLedger(LedgerClient):
    """Client for the CoGateway contract on the auxiliary chain."""

    chain = "auxiliary"
    abi = CO_GATEWAY_ABI
    declared_event = "RedeemIntentDeclared"
    nonce_arg = "_redeemerNonce"

    async def get_value_token(self) -> EIP20Token:
        """Utility token redeemed through the CoGateway."""
        address = await self.contract.functions.utilityToken().call()
        return EIP20Token(self.web3, address, chain=self.chain)

    async def is_bounty_approved(self, owner: str) -> bool:
        # The redeem bounty travels as transaction value.
        return True

    async def approve_bounty(self, tx_options: Dict[str, Any]) -> Optional[Any]:
        return None

    async def declare(self, intent: TransferIntent, tx_options: Dict[str, Any]) -> DeclarationResult:
        """Call payable ``redeem`` and decode the ``RedeemIntentDeclared`` event."""
        intent = intent.normalized(require_nonce=True)
        tx_options = require_tx_options(tx_options)
        logger.info(f"Redeeming {intent.amount} for {intent.beneficiary} with nonce {intent.nonce}")
        receipt = await self._send(
            self.contract.functions.redeem(
                intent.amount,
                intent.beneficiary,
                intent.gas_price,
                intent.gas_limit,
                intent.nonce,
                to_bytes32(intent.hash_lock),
            ),
            tx_options,
            "redeem",
        )
        return self._declaration_from_receipt(receipt)

    async def confirm_intent(
        self,
        intent: TransferIntent,
        block_number: Any,
        storage_proof: str,
        tx_options: Dict[str, Any],
    ) -> Any:
        """Call ``confirmStakeIntent`` with the Gateway outbox proof."""
        intent = intent.normalized(require_nonce=True)
        block_number = require_block_number(block_number)
        tx_options = require_tx_options(tx_options)
        return await self._send(
            self.contract.functions.confirmStakeIntent(
                intent.sender,
                intent.nonce,
                intent.beneficiary,
                intent.amount,
                intent.gas_price,
                intent.gas_limit,
                to_bytes32(intent.hash_lock),
                block_number,
                _to_bytes(storage_proof, "storage_proof"),
            ),
            tx_options,
            "confirmStakeIntent",
        )

    async def progress_outbox(
        self, message_hash: str, unlock_secret: str, tx_options: Dict[str, Any]
    ) -> Any:
        return await self._progress("progressRedeem", message_hash, unlock_secret, tx_options)

    async def progress_inbox(
        self, message_hash: str, unlock_secret: str, tx_options: Dict[str, Any]
    ) -> Any:
        return await self._progress("progressMint", message_hash, unlock_secret, tx_options)

    # Protocol names
    declare_redeem = declare
    confirm_stake_intent = confirm_intent
    progress_redeem = progress_outbox
    progress_mint = progress_inbox
