"""Tests for stake and redeem intent confirmation."""

from unittest.mock import AsyncMock

import pytest

from conftest import CO_GATEWAY, GATEWAY
from mosaic.errors import BlockHeightError, MessageStatusError, ProofError, ValidationError
from mosaic.ledger import AnchorInfo
from mosaic.proof import ProofBundle
from mosaic.utils import MessageStatus, get_redeem_message_hash, get_stake_message_hash


class TestConfirmStakeIntent:
    """Test Facilitator.confirm_stake_intent."""

    @pytest.mark.asyncio
    async def test_confirm(self, facilitator, gateway, co_gateway, proof_generator, intent, tx_options):
        """Test prove then confirm on the CoGateway."""
        result = await facilitator.confirm_stake_intent(intent, 90, tx_options)

        message_hash = get_stake_message_hash(intent, GATEWAY)
        assert result.message_hash == message_hash
        assert result.already_confirmed is False
        assert result.proof == ProofBundle(
            block_number=100, account_data="0xf8", account_proof="0xf9", storage_proof="0xfa"
        )
        gateway.get_outbox_message_status.assert_awaited_once_with(message_hash)
        co_gateway.get_inbox_message_status.assert_awaited_once_with(message_hash)
        co_gateway.prove_remote_account.assert_awaited_once_with(100, "0xf8", "0xf9", tx_options)
        confirm_args = co_gateway.confirm_intent.call_args.args
        assert confirm_args[1:] == (100, "0xfa", tx_options)

    @pytest.mark.asyncio
    async def test_proof_generated_at_anchored_height(
        self, facilitator, gateway, co_gateway, proof_generator, intent, tx_options
    ):
        """Test the proof is requested for the anchored block on the origin chain."""
        await facilitator.confirm_stake_intent(intent, 90, tx_options)

        source_web3, target_web3, account, hashes, height = proof_generator.get_outbox_proof.call_args.args
        assert source_web3 is gateway.web3
        assert target_web3 is co_gateway.web3
        assert account == GATEWAY
        assert hashes == [get_stake_message_hash(intent, GATEWAY)]
        assert height == "0x64"

    @pytest.mark.asyncio
    async def test_block_at_anchor_height(self, facilitator, co_gateway, intent, tx_options):
        """Test the anchored block itself is accepted."""
        await facilitator.confirm_stake_intent(intent, 100, tx_options)

        co_gateway.confirm_intent.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_block_above_anchor(self, facilitator, gateway, co_gateway, proof_generator, intent, tx_options):
        """Test unanchored blocks are rejected before any proof request."""
        with pytest.raises(BlockHeightError) as exc_info:
            await facilitator.confirm_stake_intent(intent, 101, tx_options)

        assert exc_info.value.retryable is True
        assert exc_info.value.anchored_height == 100
        proof_generator.get_outbox_proof.assert_not_awaited()
        gateway.get_outbox_message_status.assert_not_awaited()
        co_gateway.prove_remote_account.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_undeclared_stake(self, facilitator, gateway, co_gateway, intent, tx_options):
        """Test an undeclared stake cannot be confirmed."""
        gateway.get_outbox_message_status = AsyncMock(return_value=MessageStatus.UNDECLARED)

        with pytest.raises(MessageStatusError):
            await facilitator.confirm_stake_intent(intent, 90, tx_options)

        co_gateway.prove_remote_account.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status", [MessageStatus.DECLARED, MessageStatus.PROGRESSED, MessageStatus.REVOKED]
    )
    async def test_already_confirmed(self, facilitator, co_gateway, proof_generator, intent, tx_options, status):
        """Test confirmation is skipped when the inbox already holds the message."""
        co_gateway.get_inbox_message_status = AsyncMock(return_value=status)

        result = await facilitator.confirm_stake_intent(intent, 90, tx_options)

        assert result.already_confirmed is True
        assert result.proof is None
        proof_generator.get_outbox_proof.assert_not_awaited()
        co_gateway.prove_remote_account.assert_not_awaited()
        co_gateway.confirm_intent.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_idempotent(self, facilitator, co_gateway, intent, tx_options):
        """Test confirming twice sends a single confirmation."""
        co_gateway.get_inbox_message_status = AsyncMock(
            side_effect=[MessageStatus.UNDECLARED, MessageStatus.DECLARED]
        )

        first = await facilitator.confirm_stake_intent(intent, 90, tx_options)
        second = await facilitator.confirm_stake_intent(intent, 90, tx_options)

        assert first.already_confirmed is False
        assert second.already_confirmed is True
        co_gateway.confirm_intent.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_resume_with_proof(self, facilitator, co_gateway, proof_generator, intent, tx_options):
        """Test a persisted proof skips proof generation."""
        proof = ProofBundle(block_number=95, account_data="0x01", account_proof="0x02", storage_proof="0x03")

        result = await facilitator.confirm_stake_intent(intent, 90, tx_options, proof=proof)

        assert result.proof is proof
        proof_generator.get_outbox_proof.assert_not_awaited()
        co_gateway.prove_remote_account.assert_awaited_once_with(95, "0x01", "0x02", tx_options)

    @pytest.mark.asyncio
    async def test_resume_with_unanchored_proof(self, facilitator, co_gateway, proof_generator, intent, tx_options):
        """Test a persisted proof above the anchored height is rejected before any write."""
        proof = ProofBundle(block_number=500, account_data="0x01", account_proof="0x02", storage_proof="0x03")

        with pytest.raises(BlockHeightError) as exc_info:
            await facilitator.confirm_stake_intent(intent, 50, tx_options, proof=proof)

        assert exc_info.value.block_number == 500
        assert exc_info.value.anchored_height == 100
        proof_generator.get_outbox_proof.assert_not_awaited()
        co_gateway.prove_remote_account.assert_not_awaited()
        co_gateway.confirm_intent.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_resume_with_proof_at_anchor(self, facilitator, co_gateway, intent, tx_options):
        """Test a persisted proof at the anchored height is accepted."""
        proof = ProofBundle(block_number=100, account_data="0x01", account_proof="0x02", storage_proof="0x03")

        await facilitator.confirm_stake_intent(intent, 50, tx_options, proof=proof)

        co_gateway.prove_remote_account.assert_awaited_once_with(100, "0x01", "0x02", tx_options)

    @pytest.mark.asyncio
    async def test_confirm_failure_propagates(self, facilitator, co_gateway, intent, tx_options):
        """Test a failing confirm surfaces after the prove succeeded."""
        co_gateway.confirm_intent = AsyncMock(side_effect=RuntimeError("reverted"))

        with pytest.raises(RuntimeError, match="reverted"):
            await facilitator.confirm_stake_intent(intent, 90, tx_options)

        co_gateway.prove_remote_account.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("block_number", [None, -1, "latest"])
    async def test_invalid_block_number(self, facilitator, co_gateway, intent, tx_options, block_number):
        """Test block height validation."""
        with pytest.raises(ValidationError):
            await facilitator.confirm_stake_intent(intent, block_number, tx_options)

        co_gateway.get_latest_anchor_info.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_nonce(self, facilitator, co_gateway, intent, tx_options):
        """Test nonce is required."""
        with pytest.raises(ValidationError):
            await facilitator.confirm_stake_intent(intent.with_nonce(None), 90, tx_options)

        co_gateway.get_latest_anchor_info.assert_not_awaited()


class TestConfirmRedeemIntent:
    """Test Facilitator.confirm_redeem_intent."""

    @pytest.mark.asyncio
    async def test_confirm(self, facilitator, gateway, co_gateway, proof_generator, intent, tx_options):
        """Test prove then confirm on the Gateway."""
        gateway.get_latest_anchor_info = AsyncMock(return_value=AnchorInfo(block_height=50, state_root="0x00"))

        result = await facilitator.confirm_redeem_intent(intent, 50, tx_options)

        message_hash = get_redeem_message_hash(intent, CO_GATEWAY)
        assert result.message_hash == message_hash
        co_gateway.get_outbox_message_status.assert_awaited_once_with(message_hash)
        gateway.get_inbox_message_status.assert_awaited_once_with(message_hash)
        source_web3, target_web3, account, _, height = proof_generator.get_outbox_proof.call_args.args
        assert source_web3 is co_gateway.web3
        assert target_web3 is gateway.web3
        assert account == CO_GATEWAY
        assert height == "0x32"
        gateway.prove_remote_account.assert_awaited_once()
        gateway.confirm_intent.assert_awaited_once()
        co_gateway.confirm_intent.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_block_above_anchor(self, facilitator, gateway, proof_generator, intent, tx_options):
        """Test the Gateway anchor bounds the block height."""
        gateway.get_latest_anchor_info = AsyncMock(return_value=AnchorInfo(block_height=50, state_root="0x00"))

        with pytest.raises(BlockHeightError):
            await facilitator.confirm_redeem_intent(intent, 51, tx_options)

        proof_generator.get_outbox_proof.assert_not_awaited()


class TestProofs:
    """Test proof retrieval."""

    @pytest.mark.asyncio
    async def test_get_gateway_proof(self, facilitator, gateway, proof_generator):
        """Test proof bundle for the Gateway outbox."""
        message_hash = "0x" + "ab" * 32

        bundle = await facilitator.get_gateway_proof(message_hash, 255)

        assert bundle == ProofBundle(block_number=255, account_data="0xf8", account_proof="0xf9", storage_proof="0xfa")
        assert proof_generator.get_outbox_proof.call_args.args[2:] == (GATEWAY, [message_hash], "0xff")

    @pytest.mark.asyncio
    async def test_get_co_gateway_proof(self, facilitator, proof_generator):
        """Test proof bundle for the CoGateway outbox."""
        await facilitator.get_co_gateway_proof("0x" + "ab" * 32, 1)

        assert proof_generator.get_outbox_proof.call_args.args[2] == CO_GATEWAY

    @pytest.mark.asyncio
    async def test_empty_storage_proof(self, facilitator, proof_generator):
        """Test a provider result without storage proof."""
        proof_generator.get_outbox_proof.return_value.storage_proof = []

        with pytest.raises(ProofError):
            await facilitator.get_gateway_proof("0x" + "ab" * 32, 1)

    @pytest.mark.asyncio
    async def test_invalid_message_hash(self, facilitator, proof_generator):
        """Test malformed hash."""
        with pytest.raises(ValidationError):
            await facilitator.get_gateway_proof("hash", 1)

        proof_generator.get_outbox_proof.assert_not_awaited()
