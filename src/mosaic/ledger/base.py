"""
Ledger client base class.

A ledger client binds one web3 connection to one gateway contract and exposes
the reads and writes the facilitator needs. The shared surface lives here;
:class:`~mosaic.ledger.origin.OriginLedger` and
:class:`~mosaic.ledger.auxiliary.AuxiliaryLedger` add the direction-specific
calls.
"""

import logging

logger = logging.getLogger(__name__)
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from web3 import Web3

from ..errors import TransactionError, create_validation_error
from ..utils.message import MessageStatus, TransferIntent
from ..utils.validation import (
    require_address,
    require_block_number,
    require_bytes32,
    require_tx_options,
    to_bytes32,
    to_hex_string,
    to_uint,
)
from .abi import STATE_ROOT_PROVIDER_ABI
from .token import EIP20Token
from .transaction import send_transaction
from .types import AnchorInfo, DeclarationResult


class LedgerClient(ABC):
    """Client for one gateway contract on one chain."""

    chain: str = "chain"
    abi: List[Dict[str, Any]] = []
    declared_event: str = ""
    nonce_arg: str = ""

    def __init__(self, web3: Any, address: str, contract: Any = None):
        self.web3 = web3
        self.address = require_address(address, "address")
        self.contract = contract or web3.eth.contract(address=self.address, abi=self.abi)
        self._bounty: Optional[int] = None

    async def get_nonce(self, account: str) -> int:
        """Next nonce the contract expects from ``account``."""
        account = require_address(account, "account")
        return int(await self.contract.functions.getNonce(account).call())

    async def get_bounty(self) -> int:
        """Bounty of the contract, read once and cached."""
        if self._bounty is None:
            self._bounty = int(await self.contract.functions.bounty().call())
            logger.debug(f"Bounty on {self.chain} is {self._bounty}")
        return self._bounty

    @abstractmethod
    async def get_value_token(self) -> EIP20Token:
        """Token the transferred amount is pulled from."""
        pass

    async def is_amount_approved(self, owner: str, amount: Any) -> bool:
        """Check that ``owner`` allows the contract to pull ``amount``."""
        amount = to_uint(amount, "amount")
        token = await self.get_value_token()
        allowance = await token.allowance(owner, self.address)
        return int(allowance) >= amount

    async def approve_amount(self, amount: Any, tx_options: Dict[str, Any]) -> Any:
        """Approve the contract to pull ``amount`` from ``tx_options['from']``."""
        tx_options = require_tx_options(tx_options)
        token = await self.get_value_token()
        return await token.approve(self.address, amount, tx_options)

    @abstractmethod
    async def is_bounty_approved(self, owner: str) -> bool:
        """Check that ``owner`` can pay the bounty."""
        pass

    @abstractmethod
    async def approve_bounty(self, tx_options: Dict[str, Any]) -> Any:
        """Grant what the contract needs to collect the bounty."""
        pass

    async def get_outbox_message_status(self, message_hash: str) -> MessageStatus:
        """Status of ``message_hash`` in the contract outbox."""
        message_hash = require_bytes32(message_hash, "message_hash")
        raw = await self.contract.functions.getOutboxMessageStatus(to_bytes32(message_hash)).call()
        return MessageStatus.from_value(raw)

    async def get_inbox_message_status(self, message_hash: str) -> MessageStatus:
        """Status of ``message_hash`` in the contract inbox."""
        message_hash = require_bytes32(message_hash, "message_hash")
        raw = await self.contract.functions.getInboxMessageStatus(to_bytes32(message_hash)).call()
        return MessageStatus.from_value(raw)

    async def get_latest_anchor_info(self) -> AnchorInfo:
        """Latest remote state root anchored for this contract."""
        provider_address = await self.contract.functions.stateRootProvider().call()
        anchor = self.web3.eth.contract(
            address=require_address(provider_address, "state_root_provider"),
            abi=STATE_ROOT_PROVIDER_ABI,
        )
        block_height = int(await anchor.functions.getLatestStateRootBlockHeight().call())
        state_root = await anchor.functions.getStateRoot(block_height).call()
        return AnchorInfo(block_height=block_height, state_root=to_hex_string(state_root))

    async def prove_remote_account(
        self,
        block_number: Any,
        account_data: str,
        account_proof: str,
        tx_options: Dict[str, Any],
    ) -> Any:
        """Prove the remote gateway account against an anchored state root."""
        block_number = require_block_number(block_number)
        tx_options = require_tx_options(tx_options)
        return await self._send(
            self.contract.functions.proveGateway(
                block_number,
                _to_bytes(account_data, "account_data"),
                _to_bytes(account_proof, "account_proof"),
            ),
            tx_options,
            "proveGateway",
        )

    async def _send(self, function_call: Any, tx_options: Dict[str, Any], description: str) -> Any:
        return await send_transaction(
            self.web3, function_call, tx_options, description, chain=self.chain
        )

    def _declaration_from_receipt(self, receipt: Any) -> DeclarationResult:
        events = getattr(self.contract.events, self.declared_event)().process_receipt(receipt)
        if not events:
            raise TransactionError(
                f"{self.declared_event} event not found in receipt",
                transaction_hash=to_hex_string(receipt.get("transactionHash")),
                receipt=receipt,
                chain=self.chain,
            )
        args = events[0]["args"]
        return DeclarationResult(
            message_hash=to_hex_string(args["_messageHash"]),
            nonce=int(args[self.nonce_arg]),
            block_number=int(receipt["blockNumber"]),
        )

    async def _progress(
        self, function_name: str, message_hash: str, unlock_secret: str, tx_options: Dict[str, Any]
    ) -> Any:
        message_hash = require_bytes32(message_hash, "message_hash")
        unlock_secret = require_bytes32(unlock_secret, "unlock_secret")
        tx_options = require_tx_options(tx_options)
        function = getattr(self.contract.functions, function_name)
        return await self._send(
            function(to_bytes32(message_hash), to_bytes32(unlock_secret)),
            tx_options,
            function_name,
        )

    @abstractmethod
    async def declare(self, intent: TransferIntent, tx_options: Dict[str, Any]) -> DeclarationResult:
        """Declare a transfer in the outbox."""
        pass

    @abstractmethod
    async def confirm_intent(
        self,
        intent: TransferIntent,
        block_number: Any,
        storage_proof: str,
        tx_options: Dict[str, Any],
    ) -> Any:
        """Confirm a remote declaration in the inbox."""
        pass

    @abstractmethod
    async def progress_outbox(
        self, message_hash: str, unlock_secret: str, tx_options: Dict[str, Any]
    ) -> Any:
        """Progress a declared message in the outbox."""
        pass

    @abstractmethod
    async def progress_inbox(
        self, message_hash: str, unlock_secret: str, tx_options: Dict[str, Any]
    ) -> Any:
        """Progress a confirmed message in the inbox."""
        pass


def _to_bytes(value: Any, field: str) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    try:
        return Web3.to_bytes(hexstr=value)
    except (TypeError, ValueError):
        raise create_validation_error(field, value, "hex encoded bytes") from None
