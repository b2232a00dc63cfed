"""Tests for outbox proof generation."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import rlp
from eth_abi import encode
from web3 import Web3

from conftest import GATEWAY, MESSAGE_HASH
from mosaic.errors import ProofError, ValidationError
from mosaic.proof import (
    OUTBOX_OFFSET,
    ProofBundle,
    ProofGenerator,
    Web3ProofGenerator,
    encode_account,
    outbox_storage_key,
    serialize_proof,
)

ACCOUNT_NODE = rlp.encode([b"branch", b"leaf"])
STORAGE_NODE = rlp.encode([b"slot"])


def make_proof(storage_entries=1):
    """eth_getProof style response."""
    return {
        "nonce": 1,
        "balance": 0,
        "storageHash": b"\x11" * 32,
        "codeHash": b"\x22" * 32,
        "accountProof": [ACCOUNT_NODE],
        "storageProof": [
            {"key": b"\x00" * 32, "value": 1, "proof": [STORAGE_NODE]}
            for _ in range(storage_entries)
        ],
    }


@pytest.fixture
def source_web3():
    """Mock source chain."""
    web3 = MagicMock()
    web3.eth.get_proof = AsyncMock(return_value=make_proof())
    return web3


class TestProofHelpers:
    """Test proof encoding helpers."""

    def test_outbox_storage_key(self):
        """Test storage slot of the outbox mapping entry."""
        expected = Web3.keccak(encode(["bytes32", "uint256"], [b"\xab" * 32, 7]))

        assert OUTBOX_OFFSET == 7
        assert outbox_storage_key(MESSAGE_HASH) == expected
        assert outbox_storage_key(MESSAGE_HASH, 8) != expected

    def test_encode_account(self):
        """Test account RLP encoding."""
        encoded = encode_account(1, 0, b"\x11" * 32, b"\x22" * 32)

        assert rlp.decode(Web3.to_bytes(hexstr=encoded)) == [b"\x01", b"", b"\x11" * 32, b"\x22" * 32]

    def test_serialize_proof(self):
        """Test proof nodes are wrapped in one RLP list."""
        serialized = serialize_proof([ACCOUNT_NODE, STORAGE_NODE])

        assert rlp.decode(Web3.to_bytes(hexstr=serialized)) == [[b"branch", b"leaf"], [b"slot"]]

    def test_generator_is_abstract(self):
        """Test the provider interface cannot be instantiated."""
        with pytest.raises(TypeError):
            ProofGenerator()


class TestWeb3ProofGenerator:
    """Test the eth_getProof backed provider."""

    @pytest.mark.asyncio
    async def test_get_outbox_proof(self, source_web3):
        """Test proof request and encoding."""
        target_web3 = MagicMock()
        generator = Web3ProofGenerator()

        result = await generator.get_outbox_proof(
            source_web3, target_web3, GATEWAY, [MESSAGE_HASH], "0x64"
        )

        key = int.from_bytes(outbox_storage_key(MESSAGE_HASH), "big")
        source_web3.eth.get_proof.assert_awaited_once_with(GATEWAY, [key], 100)
        target_web3.eth.get_proof.assert_not_called()
        assert result.block_height == "0x64"
        assert result.encoded_account_value == encode_account(1, 0, b"\x11" * 32, b"\x22" * 32)
        assert result.serialized_account_proof == serialize_proof([ACCOUNT_NODE])
        assert len(result.storage_proof) == 1
        assert result.storage_proof[0].serialized_proof == serialize_proof([STORAGE_NODE])
        assert result.storage_proof[0].value == 1

    @pytest.mark.asyncio
    async def test_custom_offset(self, source_web3):
        """Test a different outbox slot."""
        generator = Web3ProofGenerator(outbox_offset=3)

        await generator.get_outbox_proof(source_web3, MagicMock(), GATEWAY, [MESSAGE_HASH], "0x1")

        key = int.from_bytes(outbox_storage_key(MESSAGE_HASH, 3), "big")
        assert source_web3.eth.get_proof.call_args.args[1] == [key]

    @pytest.mark.asyncio
    async def test_invalid_message_hash(self, source_web3):
        """Test malformed hashes are rejected before the request."""
        with pytest.raises(ValidationError):
            await Web3ProofGenerator().get_outbox_proof(
                source_web3, MagicMock(), GATEWAY, ["0x12"], "0x1"
            )

        source_web3.eth.get_proof.assert_not_called()

    @pytest.mark.asyncio
    async def test_malformed_response(self, source_web3):
        """Test missing fields raise ProofError."""
        proof = make_proof()
        del proof["codeHash"]
        source_web3.eth.get_proof = AsyncMock(return_value=proof)

        with pytest.raises(ProofError) as exc_info:
            await Web3ProofGenerator().get_outbox_proof(
                source_web3, MagicMock(), GATEWAY, [MESSAGE_HASH], "0x1"
            )

        assert exc_info.value.account_address == GATEWAY

    @pytest.mark.asyncio
    async def test_missing_storage_proof(self, source_web3):
        """Test storage proof count must match the request."""
        source_web3.eth.get_proof = AsyncMock(return_value=make_proof(storage_entries=0))

        with pytest.raises(ProofError):
            await Web3ProofGenerator().get_outbox_proof(
                source_web3, MagicMock(), GATEWAY, [MESSAGE_HASH], "0x1"
            )


class TestProofBundle:
    """Test ProofBundle."""

    def test_dict_round_trip(self):
        """Test persistence helpers."""
        bundle = ProofBundle(block_number=100, account_data="0xf8", account_proof="0xf9", storage_proof="0xfa")

        assert ProofBundle.from_dict(bundle.to_dict()) == bundle
