"""
Facilitator for stake-and-mint and redeem-and-unstake transfers.

The facilitator drives a hash-locked message through the three phases of the
Mosaic protocol:

1. Declaration on the source chain (``stake`` on the Gateway, ``redeem`` on
   the CoGateway), after making sure the token allowances are in place.
2. Confirmation on the target chain: the source gateway account is proven
   against the state root anchored on the target chain, then the message is
   confirmed with a storage proof of the source outbox.
3. Progression on both chains by revealing the unlock secret.

Every step checks the message status on the relevant ledger first, so any
step can be re-invoked after a partial failure.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from ..errors import (
    ApprovalError,
    BlockHeightError,
    BountyMismatchError,
    MessageStatusError,
    ProgressError,
    ProofError,
    ValidationError,
)
from ..ledger import AuxiliaryLedger, DeclarationResult, LedgerClient, OriginLedger
from ..logging import LogContext, get_logger
from ..proof import ProofBundle, ProofGenerator, Web3ProofGenerator
from ..utils.hashlock import (
    HashLock,
    create_secret_hash_lock,
    is_valid_unlock_secret,
    to_hash_lock,
)
from ..utils.message import (
    MessageStatus,
    TransferIntent,
    get_redeem_message_hash,
    get_stake_message_hash,
)
from ..utils.validation import (
    require_block_number,
    require_bytes32,
    require_tx_options,
    to_block_height_hex,
    to_uint,
)
from .results import ConfirmationResult, LegResult, ProgressOutcome

logger = get_logger(__name__)

_CONFIRMED_INBOX_STATUSES = (
    MessageStatus.DECLARED,
    MessageStatus.PROGRESSED,
    MessageStatus.REVOKED,
)


def _context(operation: str, chain: Optional[str] = None, message_hash: Optional[str] = None) -> LogContext:
    return LogContext(
        component="facilitator",
        operation=operation,
        chain=chain,
        message_hash=message_hash,
    )


class Facilitator:
    """Drives messages between an origin Gateway and an auxiliary CoGateway."""

    def __init__(
        self,
        gateway: OriginLedger,
        co_gateway: AuxiliaryLedger,
        proof_generator: Optional[ProofGenerator] = None,
    ):
        self.gateway = gateway
        self.co_gateway = co_gateway
        self.proof_generator = proof_generator or Web3ProofGenerator()

    @classmethod
    def from_mosaic(cls, mosaic: Any, proof_generator: Optional[ProofGenerator] = None) -> "Facilitator":
        """Build ledger clients and the default proof provider for ``mosaic``."""
        gateway = OriginLedger(mosaic.origin.web3, mosaic.origin.contract_address)
        co_gateway = AuxiliaryLedger(mosaic.auxiliary.web3, mosaic.auxiliary.contract_address)
        if proof_generator is None:
            proof_generator = Web3ProofGenerator(mosaic.outbox_offset)
        return cls(gateway, co_gateway, proof_generator)

    # ------------------------------------------------------------------
    # Declaration
    # ------------------------------------------------------------------

    async def stake(self, intent: TransferIntent, tx_options: Dict[str, Any]) -> DeclarationResult:
        """Declare a stake on the Gateway.

        The staked amount must be approved for the Gateway. If the staker is
        the facilitator itself (``tx_options['from']``) the approval is made
        here. The facilitator's bounty allowance is granted when missing.
        """
        intent = intent.normalized()
        tx_options = require_tx_options(tx_options)
        facilitator = tx_options["from"]
        context = _context("stake", chain="origin")

        logger.info(f"Staking {intent.amount} from {intent.sender} for {intent.beneficiary}", context=context)

        try:
            await self._ensure_amount_approved(self.gateway, intent, tx_options, "stake", context)

            if not await self.gateway.is_bounty_approved(facilitator):
                logger.info("Approving Gateway for bounty transfer", context=context)
                await self.gateway.approve_bounty(tx_options)

            nonce = await self.gateway.get_nonce(intent.sender)
            result = await self.gateway.declare_stake(intent.with_nonce(nonce), tx_options)
        except Exception as e:
            logger.error("Failed to perform stake", context=context, exception=e)
            raise

        logger.info(
            f"Stake declared with nonce {result.nonce} in block {result.block_number}",
            context=_context("stake", chain="origin", message_hash=result.message_hash),
        )
        return result

    async def redeem(self, intent: TransferIntent, tx_options: Dict[str, Any]) -> DeclarationResult:
        """Declare a redeem on the CoGateway.

        ``tx_options['value']`` must equal the CoGateway bounty exactly, since
        the bounty is paid with the redeem transaction.
        """
        intent = intent.normalized()
        tx_options = require_tx_options(tx_options)
        if tx_options.get("value") is None:
            raise ValidationError(
                "Invalid transaction value: None.",
                field="value",
                value=None,
                expected="bounty amount",
            )
        value = to_uint(tx_options["value"], "value")
        context = _context("redeem", chain="auxiliary")

        logger.info(f"Redeeming {intent.amount} from {intent.sender} for {intent.beneficiary}", context=context)

        try:
            bounty = await self.co_gateway.get_bounty()
            if value != bounty:
                raise BountyMismatchError(tx_options["value"], bounty)
            tx_options["value"] = value

            approval_options = {k: v for k, v in tx_options.items() if k != "value"}
            await self._ensure_amount_approved(self.co_gateway, intent, approval_options, "redeem", context)

            nonce = await self.co_gateway.get_nonce(intent.sender)
            result = await self.co_gateway.declare_redeem(intent.with_nonce(nonce), tx_options)
        except Exception as e:
            logger.error("Failed to perform redeem", context=context, exception=e)
            raise

        logger.info(
            f"Redeem declared with nonce {result.nonce} in block {result.block_number}",
            context=_context("redeem", chain="auxiliary", message_hash=result.message_hash),
        )
        return result

    async def _ensure_amount_approved(
        self,
        ledger: LedgerClient,
        intent: TransferIntent,
        tx_options: Dict[str, Any],
        operation: str,
        context: LogContext,
    ) -> None:
        if await ledger.is_amount_approved(intent.sender, intent.amount):
            return
        if intent.sender != tx_options["from"]:
            raise ApprovalError(
                f"Transfer of {operation} amount must be approved.",
                owner=intent.sender,
                spender=ledger.address,
                amount=intent.amount,
            )
        logger.info(f"Sender is the facilitator, approving {ledger.chain} contract for token transfer", context=context)
        await ledger.approve_amount(intent.amount, tx_options)

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------

    async def confirm_stake_intent(
        self,
        intent: TransferIntent,
        block_number: Any,
        tx_options: Dict[str, Any],
        proof: Optional[ProofBundle] = None,
    ) -> ConfirmationResult:
        """Confirm a declared stake in the CoGateway inbox."""
        return await self._confirm(
            "confirm_stake_intent",
            intent,
            block_number,
            tx_options,
            proof,
            source=self.gateway,
            target=self.co_gateway,
            get_message_hash=get_stake_message_hash,
            get_proof=self.get_gateway_proof,
        )

    async def confirm_redeem_intent(
        self,
        intent: TransferIntent,
        block_number: Any,
        tx_options: Dict[str, Any],
        proof: Optional[ProofBundle] = None,
    ) -> ConfirmationResult:
        """Confirm a declared redeem in the Gateway inbox."""
        return await self._confirm(
            "confirm_redeem_intent",
            intent,
            block_number,
            tx_options,
            proof,
            source=self.co_gateway,
            target=self.gateway,
            get_message_hash=get_redeem_message_hash,
            get_proof=self.get_co_gateway_proof,
        )

    async def _confirm(
        self,
        operation: str,
        intent: TransferIntent,
        block_number: Any,
        tx_options: Dict[str, Any],
        proof: Optional[ProofBundle],
        source: LedgerClient,
        target: LedgerClient,
        get_message_hash: Callable[[TransferIntent, str], str],
        get_proof: Callable[[str, int], Awaitable[ProofBundle]],
    ) -> ConfirmationResult:
        intent = intent.normalized(require_nonce=True)
        block_number = require_block_number(block_number)
        tx_options = require_tx_options(tx_options)
        context = _context(operation, chain=target.chain)

        anchor = await target.get_latest_anchor_info()
        if anchor.block_height < block_number:
            logger.error(
                f"Block {block_number} is above the latest anchored height {anchor.block_height}",
                context=context,
            )
            raise BlockHeightError(
                "Block number should be less or equal to the latest available state root block height.",
                block_number=block_number,
                anchored_height=anchor.block_height,
            )

        message_hash = get_message_hash(intent, source.address)
        context = _context(operation, chain=target.chain, message_hash=message_hash)
        logger.info(f"Message hash is {message_hash}", context=context)

        outbox_status = await source.get_outbox_message_status(message_hash)
        logger.debug(f"Outbox status on {source.chain} is {outbox_status.name}", context=context)
        if outbox_status == MessageStatus.UNDECLARED:
            raise MessageStatusError(
                "Message hash must be declared in the source outbox.",
                message_hash=message_hash,
                status=outbox_status,
            )

        inbox_status = await target.get_inbox_message_status(message_hash)
        logger.debug(f"Inbox status on {target.chain} is {inbox_status.name}", context=context)
        if inbox_status in _CONFIRMED_INBOX_STATUSES:
            logger.info(f"Intent already confirmed on {target.chain}", context=context)
            return ConfirmationResult(message_hash=message_hash, already_confirmed=True)

        if proof is None:
            proof = await get_proof(message_hash, anchor.block_height)
        elif proof.block_number > anchor.block_height:
            logger.error(
                f"Proof block {proof.block_number} is above the latest anchored height {anchor.block_height}",
                context=context,
            )
            raise BlockHeightError(
                "Proof block number should be less or equal to the latest available state root block height.",
                block_number=proof.block_number,
                anchored_height=anchor.block_height,
            )
        else:
            logger.info(f"Reusing proof at block {proof.block_number}", context=context)

        try:
            prove_receipt = await target.prove_remote_account(
                proof.block_number, proof.account_data, proof.account_proof, tx_options
            )
            logger.info(f"{source.chain} contract proven on {target.chain}", context=context)
            confirm_receipt = await target.confirm_intent(
                intent, proof.block_number, proof.storage_proof, tx_options
            )
        except Exception as e:
            logger.error("Failed to confirm intent", context=context, exception=e)
            raise

        logger.info("Intent confirmed", context=context)
        return ConfirmationResult(
            message_hash=message_hash,
            already_confirmed=False,
            proof=proof,
            prove_receipt=prove_receipt,
            confirm_receipt=confirm_receipt,
        )

    # ------------------------------------------------------------------
    # Progression
    # ------------------------------------------------------------------

    async def perform_progress_stake(
        self, message_hash: str, unlock_secret: str, tx_options: Dict[str, Any]
    ) -> LegResult:
        """Progress the stake in the Gateway outbox."""
        return await self._perform_progress(
            "progress_stake",
            self.gateway.get_outbox_message_status,
            self.gateway.progress_stake,
            self.gateway.chain,
            message_hash,
            unlock_secret,
            tx_options,
        )

    async def perform_progress_mint(
        self, message_hash: str, unlock_secret: str, tx_options: Dict[str, Any]
    ) -> LegResult:
        """Progress the mint in the CoGateway inbox."""
        return await self._perform_progress(
            "progress_mint",
            self.co_gateway.get_inbox_message_status,
            self.co_gateway.progress_mint,
            self.co_gateway.chain,
            message_hash,
            unlock_secret,
            tx_options,
        )

    async def perform_progress_redeem(
        self, message_hash: str, unlock_secret: str, tx_options: Dict[str, Any]
    ) -> LegResult:
        """Progress the redeem in the CoGateway outbox."""
        return await self._perform_progress(
            "progress_redeem",
            self.co_gateway.get_outbox_message_status,
            self.co_gateway.progress_redeem,
            self.co_gateway.chain,
            message_hash,
            unlock_secret,
            tx_options,
        )

    async def perform_progress_unstake(
        self, message_hash: str, unlock_secret: str, tx_options: Dict[str, Any]
    ) -> LegResult:
        """Progress the unstake in the Gateway inbox."""
        return await self._perform_progress(
            "progress_unstake",
            self.gateway.get_inbox_message_status,
            self.gateway.progress_unstake,
            self.gateway.chain,
            message_hash,
            unlock_secret,
            tx_options,
        )

    async def _perform_progress(
        self,
        leg: str,
        get_status: Callable[[str], Awaitable[MessageStatus]],
        submit: Callable[[str, str, Dict[str, Any]], Awaitable[Any]],
        chain: str,
        message_hash: str,
        unlock_secret: str,
        tx_options: Dict[str, Any],
    ) -> LegResult:
        message_hash = require_bytes32(message_hash, "message_hash")
        unlock_secret = require_bytes32(unlock_secret, "unlock_secret")
        tx_options = require_tx_options(tx_options)
        context = _context(leg, chain=chain, message_hash=message_hash)

        status = await get_status(message_hash)
        logger.debug(f"Message status is {status.name}", context=context)

        if status == MessageStatus.PROGRESSED:
            logger.info("Message already progressed", context=context)
            return LegResult(leg=leg, already_progressed=True)

        if status != MessageStatus.DECLARED:
            raise MessageStatusError(
                f"Message cannot be progressed in status {status.name}.",
                message_hash=message_hash,
                status=status,
                retryable=status == MessageStatus.UNDECLARED,
            )

        receipt = await submit(message_hash, unlock_secret, tx_options)
        logger.info("Message progressed", context=context)
        return LegResult(leg=leg, receipt=receipt)

    async def progress_stake_message(
        self,
        message_hash: str,
        unlock_secret: str,
        tx_origin: Dict[str, Any],
        tx_auxiliary: Dict[str, Any],
    ) -> ProgressOutcome:
        """Progress stake on the origin chain and mint on the auxiliary chain."""
        message_hash = require_bytes32(message_hash, "message_hash")
        unlock_secret = require_bytes32(unlock_secret, "unlock_secret")
        tx_origin = require_tx_options(tx_origin, "tx_origin")
        tx_auxiliary = require_tx_options(tx_auxiliary, "tx_auxiliary")
        return await self._progress_legs(
            "progress_stake_message",
            message_hash,
            [
                ("progress_stake", self.perform_progress_stake(message_hash, unlock_secret, tx_origin)),
                ("progress_mint", self.perform_progress_mint(message_hash, unlock_secret, tx_auxiliary)),
            ],
        )

    async def progress_redeem_message(
        self,
        message_hash: str,
        unlock_secret: str,
        tx_origin: Dict[str, Any],
        tx_auxiliary: Dict[str, Any],
    ) -> ProgressOutcome:
        """Progress redeem on the auxiliary chain and unstake on the origin chain."""
        message_hash = require_bytes32(message_hash, "message_hash")
        unlock_secret = require_bytes32(unlock_secret, "unlock_secret")
        tx_origin = require_tx_options(tx_origin, "tx_origin")
        tx_auxiliary = require_tx_options(tx_auxiliary, "tx_auxiliary")
        return await self._progress_legs(
            "progress_redeem_message",
            message_hash,
            [
                ("progress_redeem", self.perform_progress_redeem(message_hash, unlock_secret, tx_auxiliary)),
                ("progress_unstake", self.perform_progress_unstake(message_hash, unlock_secret, tx_origin)),
            ],
        )

    async def _progress_legs(
        self,
        operation: str,
        message_hash: str,
        legs: Sequence[Tuple[str, Awaitable[LegResult]]],
    ) -> ProgressOutcome:
        context = _context(operation, message_hash=message_hash)
        logger.info(f"Running {', '.join(name for name, _ in legs)}", context=context)

        # Legs are independent: one failing never cancels the other.
        results = await asyncio.gather(*(coro for _, coro in legs), return_exceptions=True)

        leg_results: List[LegResult] = []
        for (name, _), result in zip(legs, results):
            if isinstance(result, Exception):
                logger.error(f"{name} failed", context=context, exception=result)
                leg_results.append(LegResult(leg=name, error=result))
            elif isinstance(result, BaseException):
                raise result
            else:
                leg_results.append(result)

        outcome = ProgressOutcome(message_hash=message_hash, legs=leg_results)
        if not outcome.succeeded:
            first = outcome.failures[0].error
            raise ProgressError(
                f"{', '.join(f.leg for f in outcome.failures)} failed: {first}",
                outcome=outcome,
                cause=first,
            ) from first

        logger.info("Message progressed on both chains", context=context)
        return outcome

    async def progress_stake(
        self,
        intent: TransferIntent,
        unlock_secret: str,
        block_number: Any,
        tx_origin: Dict[str, Any],
        tx_auxiliary: Dict[str, Any],
    ) -> ProgressOutcome:
        """Confirm a declared stake on the auxiliary chain, then progress it."""
        intent, unlock_secret, block_number, tx_origin, tx_auxiliary = self._validate_progress_inputs(
            intent, unlock_secret, block_number, tx_origin, tx_auxiliary
        )
        confirmation = await self.confirm_stake_intent(intent, block_number, tx_auxiliary)
        return await self._progress_surfacing_first_error(
            self.progress_stake_message,
            confirmation.message_hash,
            unlock_secret,
            tx_origin,
            tx_auxiliary,
        )

    async def progress_redeem(
        self,
        intent: TransferIntent,
        unlock_secret: str,
        block_number: Any,
        tx_origin: Dict[str, Any],
        tx_auxiliary: Dict[str, Any],
    ) -> ProgressOutcome:
        """Confirm a declared redeem on the origin chain, then progress it."""
        intent, unlock_secret, block_number, tx_origin, tx_auxiliary = self._validate_progress_inputs(
            intent, unlock_secret, block_number, tx_origin, tx_auxiliary
        )
        confirmation = await self.confirm_redeem_intent(intent, block_number, tx_origin)
        return await self._progress_surfacing_first_error(
            self.progress_redeem_message,
            confirmation.message_hash,
            unlock_secret,
            tx_origin,
            tx_auxiliary,
        )

    @staticmethod
    def _validate_progress_inputs(
        intent: TransferIntent,
        unlock_secret: str,
        block_number: Any,
        tx_origin: Dict[str, Any],
        tx_auxiliary: Dict[str, Any],
    ) -> Tuple[TransferIntent, str, int, Dict[str, Any], Dict[str, Any]]:
        intent = intent.normalized(require_nonce=True)
        unlock_secret = require_bytes32(unlock_secret, "unlock_secret")
        block_number = require_block_number(block_number)
        tx_origin = require_tx_options(tx_origin, "tx_origin")
        tx_auxiliary = require_tx_options(tx_auxiliary, "tx_auxiliary")
        if not is_valid_unlock_secret(unlock_secret, intent.hash_lock):
            raise ValidationError(
                f"Unlock secret does not open hash lock {intent.hash_lock}.",
                field="unlock_secret",
                value=unlock_secret,
                expected="keccak256(unlock_secret) == hash_lock",
            )
        return intent, unlock_secret, block_number, tx_origin, tx_auxiliary

    @staticmethod
    async def _progress_surfacing_first_error(
        progress: Callable[..., Awaitable[ProgressOutcome]], *args: Any
    ) -> ProgressOutcome:
        try:
            return await progress(*args)
        except ProgressError as e:
            failure = e.outcome.failures[0].error
        raise failure

    # ------------------------------------------------------------------
    # Proofs and hash locks
    # ------------------------------------------------------------------

    async def get_gateway_proof(self, message_hash: str, block_number: Any) -> ProofBundle:
        """Proof of the Gateway outbox entry for ``message_hash``."""
        return await self._get_proof(
            self.gateway, self.co_gateway, message_hash, block_number, "get_gateway_proof"
        )

    async def get_co_gateway_proof(self, message_hash: str, block_number: Any) -> ProofBundle:
        """Proof of the CoGateway outbox entry for ``message_hash``."""
        return await self._get_proof(
            self.co_gateway, self.gateway, message_hash, block_number, "get_co_gateway_proof"
        )

    async def _get_proof(
        self,
        source: LedgerClient,
        target: LedgerClient,
        message_hash: str,
        block_number: Any,
        operation: str,
    ) -> ProofBundle:
        message_hash = require_bytes32(message_hash, "message_hash")
        block_number = require_block_number(block_number)
        context = _context(operation, chain=source.chain, message_hash=message_hash)

        logger.info(f"Generating proof at block {block_number}", context=context)
        try:
            result = await self.proof_generator.get_outbox_proof(
                source.web3,
                target.web3,
                source.address,
                [message_hash],
                to_block_height_hex(block_number),
            )
        except Exception as e:
            logger.error("Failed to generate proof", context=context, exception=e)
            raise

        if not result.storage_proof:
            raise ProofError(
                f"Proof provider returned no storage proof for {message_hash}.",
                account_address=source.address,
                chain=source.chain,
            )

        logger.debug("Proof generated", context=context)
        return ProofBundle(
            block_number=block_number,
            account_data=result.encoded_account_value,
            account_proof=result.serialized_account_proof,
            storage_proof=result.storage_proof[0].serialized_proof,
        )

    @staticmethod
    def get_hash_lock(secret: Optional[str] = None) -> HashLock:
        """Fresh hash lock, or the hash lock derived from a known secret."""
        if secret is None:
            return create_secret_hash_lock()
        return to_hash_lock(secret)
