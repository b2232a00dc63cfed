"""Transaction submission shared by the ledger clients and token wrapper."""

import logging

logger = logging.getLogger(__name__)
from typing import Any, Dict, Optional

from ..errors import TransactionError
from ..utils.validation import to_hex_string


async def send_transaction(
    web3: Any,
    function_call: Any,
    tx_options: Dict[str, Any],
    description: str,
    chain: Optional[str] = None,
) -> Any:
    """Send a contract call and wait for it to be mined.

    Errors raised by web3 propagate unchanged. A mined transaction whose
    receipt reports ``status == 0`` raises :class:`TransactionError`.
    """
    logger.debug(f"Sending {description} on {chain or 'chain'} from {tx_options.get('from')}")
    tx_hash = await function_call.transact(tx_options)
    receipt = await web3.eth.wait_for_transaction_receipt(tx_hash)

    if receipt.get("status") == 0:
        tx_hash_hex = to_hex_string(tx_hash)
        raise TransactionError(
            f"Transaction {description} reverted: {tx_hash_hex}",
            transaction_hash=tx_hash_hex,
            receipt=receipt,
            chain=chain,
        )

    logger.debug(f"{description} mined in block {receipt.get('blockNumber')}")
    return receipt
