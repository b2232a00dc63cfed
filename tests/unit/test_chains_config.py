"""Tests for chain configuration and wiring."""

from unittest.mock import patch

import pytest

from conftest import CO_GATEWAY, GATEWAY
from mosaic.chains import Chain, ChainConfig, Mosaic, MosaicConfig
from mosaic.errors import ConfigurationError
from mosaic.facilitator import Facilitator
from mosaic.logging import LogLevel, shutdown_logging
from mosaic.proof import Web3ProofGenerator


@pytest.fixture
def config():
    """Valid configuration."""
    return MosaicConfig(
        origin=ChainConfig(rpc_url="http://localhost:8545", contract_address=GATEWAY),
        auxiliary=ChainConfig(rpc_url="http://localhost:8546", contract_address=CO_GATEWAY),
    )


class TestMosaicConfig:
    """Test MosaicConfig."""

    def test_defaults(self):
        """Test default values."""
        config = MosaicConfig()

        assert config.outbox_offset == 7
        assert config.log_level == "info"
        assert config.log_format == "text"

    def test_round_trip_dict(self, config):
        """Test dictionary conversion."""
        assert MosaicConfig.from_dict(config.to_dict()) == config

    def test_from_env(self):
        """Test environment variables."""
        config = MosaicConfig.from_env(
            {
                "MOSAIC_ORIGIN_RPC_URL": "http://origin",
                "MOSAIC_GATEWAY_ADDRESS": GATEWAY,
                "MOSAIC_AUXILIARY_RPC_URL": "http://auxiliary",
                "MOSAIC_CO_GATEWAY_ADDRESS": CO_GATEWAY,
                "MOSAIC_OUTBOX_OFFSET": "9",
                "MOSAIC_LOG_LEVEL": "DEBUG",
            }
        )

        assert config.origin == ChainConfig("http://origin", GATEWAY)
        assert config.auxiliary == ChainConfig("http://auxiliary", CO_GATEWAY)
        assert config.outbox_offset == 9
        assert config.log_level == "DEBUG"

    def test_from_env_invalid_offset(self):
        """Test non-numeric offsets are rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            MosaicConfig.from_env({"MOSAIC_OUTBOX_OFFSET": "seven"})

        assert exc_info.value.config_key == "MOSAIC_OUTBOX_OFFSET"

    def test_validate(self, config):
        """Test a valid configuration passes."""
        config.validate()

    @pytest.mark.parametrize(
        "changes,key",
        [
            ({"origin": ChainConfig("", GATEWAY)}, "origin.rpc_url"),
            ({"auxiliary": ChainConfig("http://aux", "0x12")}, "auxiliary.contract_address"),
            ({"outbox_offset": -1}, "outbox_offset"),
            ({"log_level": "loud"}, "log_level"),
            ({"log_format": "xml"}, "log_format"),
        ],
    )
    def test_validate_rejects(self, config, changes, key):
        """Test invalid settings."""
        for name, value in changes.items():
            setattr(config, name, value)

        with pytest.raises(ConfigurationError) as exc_info:
            config.validate()

        assert exc_info.value.config_key == key

    def test_setup_logging(self, config):
        """Test logging configuration."""
        config.log_level = "DEBUG"
        try:
            manager = config.setup_logging()
            assert manager.config.level == LogLevel.DEBUG
            assert manager.config.format_type == "text"
        finally:
            shutdown_logging()


class TestMosaic:
    """Test chain wiring."""

    def test_from_config(self, config):
        """Test AsyncWeb3 instances are created per chain."""
        with patch("mosaic.chains.mosaic.AsyncHTTPProvider") as provider, patch(
            "mosaic.chains.mosaic.AsyncWeb3"
        ) as web3:
            mosaic = Mosaic.from_config(config)

        provider.assert_any_call("http://localhost:8545")
        provider.assert_any_call("http://localhost:8546")
        assert web3.call_count == 2
        assert mosaic.origin.contract_address == GATEWAY
        assert mosaic.auxiliary.contract_address == CO_GATEWAY
        assert mosaic.outbox_offset == 7

    def test_from_config_validates(self):
        """Test invalid configuration is rejected before connecting."""
        with pytest.raises(ConfigurationError):
            Mosaic.from_config(MosaicConfig())

    def test_facilitator_from_mosaic(self, config):
        """Test facilitator wiring."""
        with patch("mosaic.chains.mosaic.AsyncHTTPProvider"), patch("mosaic.chains.mosaic.AsyncWeb3"):
            mosaic = Mosaic.from_config(config)

        facilitator = Facilitator.from_mosaic(mosaic)

        assert facilitator.gateway.address == GATEWAY
        assert facilitator.co_gateway.address == CO_GATEWAY
        assert facilitator.gateway.web3 is mosaic.origin.web3
        assert isinstance(facilitator.proof_generator, Web3ProofGenerator)
        assert facilitator.proof_generator.outbox_offset == 7

    def test_chain_dataclass(self):
        """Test Chain holds its connection."""
        chain = Chain(web3=object(), contract_address=GATEWAY)

        assert chain.contract_address == GATEWAY
