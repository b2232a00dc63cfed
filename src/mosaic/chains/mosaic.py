"""Web3 connections to the origin and auxiliary chains."""

from dataclasses import dataclass
from typing import Any

from web3 import AsyncHTTPProvider, AsyncWeb3

from ..proof import OUTBOX_OFFSET
from .config import ChainConfig, MosaicConfig


@dataclass
class Chain:
    """A web3 connection and the gateway contract address on that chain."""
    web3: Any
    contract_address: str

    @classmethod
    def from_config(cls, config: ChainConfig) -> "Chain":
        """Create an ``AsyncWeb3`` connection for ``config``."""
        return cls(
            web3=AsyncWeb3(AsyncHTTPProvider(config.rpc_url)),
            contract_address=config.contract_address,
        )


@dataclass
class Mosaic:
    """Origin and auxiliary chains of one Mosaic deployment."""
    origin: Chain
    auxiliary: Chain
    outbox_offset: int = OUTBOX_OFFSET

    @classmethod
    def from_config(cls, config: MosaicConfig) -> "Mosaic":
        """Validate ``config`` and connect to both chains."""
        config.validate()
        return cls(
            origin=Chain.from_config(config.origin),
            auxiliary=Chain.from_config(config.auxiliary),
            outbox_offset=config.outbox_offset,
        )
