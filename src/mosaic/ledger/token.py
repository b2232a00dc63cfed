"""
EIP-20 token contract wrapper.

The Gateway pulls the staked amount from ``token()`` and the bounty from
``baseToken()``; the CoGateway pulls the redeemed amount from
``utilityToken()``. The ledger clients use this wrapper to check and grant
those allowances.
"""

import logging

logger = logging.getLogger(__name__)
from typing import Any, Dict, Optional

from ..utils.validation import require_address, to_uint
from .abi import EIP20_TOKEN_ABI
from .transaction import send_transaction


class EIP20Token:
    """EIP-20 token contract interface."""

    def __init__(self, web3: Any, address: str, chain: Optional[str] = None):
        """Initialize token contract."""
        self.web3 = web3
        self.address = require_address(address, "token_address")
        self.chain = chain
        self.contract = web3.eth.contract(address=self.address, abi=EIP20_TOKEN_ABI)

    async def allowance(self, owner: str, spender: str) -> int:
        """Get allowance."""
        owner = require_address(owner, "owner")
        spender = require_address(spender, "spender")
        return await self.contract.functions.allowance(owner, spender).call()

    async def approve(self, spender: str, amount: Any, tx_options: Dict[str, Any]) -> Any:
        """Approve spender and return the mined receipt."""
        spender = require_address(spender, "spender")
        amount = to_uint(amount, "amount")
        logger.info(f"Approving {spender} for {amount} of token {self.address}")
        return await send_transaction(
            self.web3,
            self.contract.functions.approve(spender, amount),
            tx_options,
            "approve",
            chain=self.chain,
        )
