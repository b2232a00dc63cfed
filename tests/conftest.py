"""Shared fixtures for Mosaic tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from mosaic.facilitator import Facilitator
from mosaic.ledger import AnchorInfo, AuxiliaryLedger, DeclarationResult, OriginLedger
from mosaic.proof import ProofResult, StorageProof
from mosaic.utils import MessageStatus, TransferIntent, to_hash_lock

# Digit-only addresses are already in checksum form.
FACILITATOR = "0x" + "1" * 40
BENEFICIARY = "0x" + "2" * 40
GATEWAY = "0x" + "3" * 40
CO_GATEWAY = "0x" + "4" * 40
TOKEN = "0x" + "5" * 40
OTHER_STAKER = "0x" + "6" * 40
ANCHOR = "0x" + "7" * 40

MESSAGE_HASH = "0x" + "ab" * 32
STATE_ROOT = "0x" + "cd" * 32
SECRET = "mosaic-test-secret"


def make_receipt(block_number=42, status=1):
    """Build a minimal transaction receipt."""
    return {"status": status, "blockNumber": block_number, "transactionHash": b"\x01" * 32}


def make_ledger(cls, address, chain):
    """Mock ledger client whose reads succeed and whose writes return receipts."""
    ledger = MagicMock(spec=cls)
    ledger.address = address
    ledger.chain = chain
    ledger.web3 = MagicMock(name=f"{chain}_web3")

    ledger.get_nonce = AsyncMock(return_value=1)
    ledger.get_bounty = AsyncMock(return_value=100)
    ledger.is_amount_approved = AsyncMock(return_value=True)
    ledger.approve_amount = AsyncMock(return_value=make_receipt())
    ledger.is_bounty_approved = AsyncMock(return_value=True)
    ledger.approve_bounty = AsyncMock(return_value=make_receipt())
    ledger.get_outbox_message_status = AsyncMock(return_value=MessageStatus.DECLARED)
    ledger.get_inbox_message_status = AsyncMock(return_value=MessageStatus.UNDECLARED)
    ledger.get_latest_anchor_info = AsyncMock(
        return_value=AnchorInfo(block_height=100, state_root=STATE_ROOT)
    )
    ledger.prove_remote_account = AsyncMock(return_value=make_receipt())
    ledger.confirm_intent = AsyncMock(return_value=make_receipt())
    ledger.progress_outbox = AsyncMock(return_value=make_receipt())
    ledger.progress_inbox = AsyncMock(return_value=make_receipt())
    return ledger


@pytest.fixture
def hash_lock():
    """Deterministic hash lock."""
    return to_hash_lock(SECRET)


@pytest.fixture
def intent(hash_lock):
    """Transfer intent sent by the facilitator itself."""
    return TransferIntent(
        sender=FACILITATOR,
        amount=1000,
        beneficiary=BENEFICIARY,
        gas_price="1",
        gas_limit="1000000",
        hash_lock=hash_lock.hash_lock,
        nonce=1,
    )


@pytest.fixture
def tx_options():
    """Transaction options for the facilitator."""
    return {"from": FACILITATOR, "gas": 7500000}


@pytest.fixture
def gateway():
    """Mock origin ledger."""
    ledger = make_ledger(OriginLedger, GATEWAY, "origin")
    ledger.declare_stake = AsyncMock(
        return_value=DeclarationResult(message_hash=MESSAGE_HASH, nonce=1, block_number=42)
    )
    ledger.confirm_redeem_intent = AsyncMock(return_value=make_receipt())
    ledger.progress_stake = AsyncMock(return_value=make_receipt())
    ledger.progress_unstake = AsyncMock(return_value=make_receipt())
    return ledger


@pytest.fixture
def co_gateway():
    """Mock auxiliary ledger."""
    ledger = make_ledger(AuxiliaryLedger, CO_GATEWAY, "auxiliary")
    ledger.declare_redeem = AsyncMock(
        return_value=DeclarationResult(message_hash=MESSAGE_HASH, nonce=1, block_number=42)
    )
    ledger.confirm_stake_intent = AsyncMock(return_value=make_receipt())
    ledger.progress_redeem = AsyncMock(return_value=make_receipt())
    ledger.progress_mint = AsyncMock(return_value=make_receipt())
    return ledger


@pytest.fixture
def proof_generator():
    """Mock proof provider."""
    generator = MagicMock()
    generator.get_outbox_proof = AsyncMock(
        return_value=ProofResult(
            block_height=hex(100),
            encoded_account_value="0xf8",
            serialized_account_proof="0xf9",
            storage_proof=[StorageProof(key="0x00", value=1, serialized_proof="0xfa")],
        )
    )
    return generator


@pytest.fixture
def facilitator(gateway, co_gateway, proof_generator):
    """Facilitator wired to mock ledgers and proof provider."""
    return Facilitator(gateway, co_gateway, proof_generator)
