"""
Origin chain ledger client (EIP20Gateway).

Stakes are declared in the Gateway outbox and progressed with
``progressStake``. Redeems declared on the auxiliary chain are confirmed in
the Gateway inbox and progressed with ``progressUnstake``.
"""

import logging

logger = logging.getLogger(__name__)
from typing import Any, Dict

from ..utils.message import TransferIntent
from ..utils.validation import require_block_number, require_tx_options, to_bytes32
from .abi import GATEWAY_ABI
from .base import LedgerClient, _to_bytes
from .token import EIP20Token
from .types import DeclarationResult


class OriginLedger(LedgerClient):
    """Client for the Gateway contract on the origin chain."""

    chain = "origin"
    abi = GATEWAY_ABI
    declared_event = "StakeIntentDeclared"
    nonce_arg = "_stakerNonce"

    async def get_value_token(self) -> EIP20Token:
        """Token staked through the Gateway."""
        address = await self.contract.functions.token().call()
        return EIP20Token(self.web3, address, chain=self.chain)

    async def get_bounty_token(self) -> EIP20Token:
        """Token the Gateway bounty is paid in."""
        address = await self.contract.functions.baseToken().call()
        return EIP20Token(self.web3, address, chain=self.chain)

    async def is_bounty_approved(self, owner: str) -> bool:
        bounty = await self.get_bounty()
        token = await self.get_bounty_token()
        allowance = await token.allowance(owner, self.address)
        return int(allowance) >= bounty

    async def approve_bounty(self, tx_options: Dict[str, Any]) -> Any:
        tx_options = require_tx_options(tx_options)
        bounty = await self.get_bounty()
        token = await self.get_bounty_token()
        return await token.approve(self.address, bounty, tx_options)

    async def declare(self, intent: TransferIntent, tx_options: Dict[str, Any]) -> DeclarationResult:
        """Call ``stake`` and decode the ``StakeIntentDeclared`` event."""
        intent = intent.normalized(require_nonce=True)
        tx_options = require_tx_options(tx_options)
        logger.info(f"Staking {intent.amount} for {intent.beneficiary} with nonce {intent.nonce}")
        receipt = await self._send(
            self.contract.functions.stake(
                intent.amount,
                intent.beneficiary,
                intent.gas_price,
                intent.gas_limit,
                intent.nonce,
                to_bytes32(intent.hash_lock),
            ),
            tx_options,
            "stake",
        )
        return self._declaration_from_receipt(receipt)

    async def confirm_intent(
        self,
        intent: TransferIntent,
        block_number: Any,
        storage_proof: str,
        tx_options: Dict[str, Any],
    ) -> Any:
        """Call ``confirmRedeemIntent`` with the CoGateway outbox proof."""
        intent = intent.normalized(require_nonce=True)
        block_number = require_block_number(block_number)
        tx_options = require_tx_options(tx_options)
        return await self._send(
            self.contract.functions.confirmRedeemIntent(
                intent.sender,
                intent.nonce,
                intent.beneficiary,
                intent.amount,
                intent.gas_price,
                intent.gas_limit,
                block_number,
                to_bytes32(intent.hash_lock),
                _to_bytes(storage_proof, "storage_proof"),
            ),
            tx_options,
            "confirmRedeemIntent",
        )

    async def progress_outbox(
        self, message_hash: str, unlock_secret: str, tx_options: Dict[str, Any]
    ) -> Any:
        return await self._progress("progressStake", message_hash, unlock_secret, tx_options)

    async def progress_inbox(
        self, message_hash: str, unlock_secret: str, tx_options: Dict[str, Any]
    ) -> Any:
        return await self._progress("progressUnstake", message_hash, unlock_secret, tx_options)

    # Protocol names
    declare_stake = declare
    confirm_redeem_intent = confirm_intent
    progress_stake = progress_outbox
    progress_unstake = progress_inbox
