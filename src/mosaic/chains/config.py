"""
Configuration for a Mosaic origin/auxiliary chain pair.

Configuration can be built from a dictionary (for example a parsed JSON
file) or from ``MOSAIC_*`` environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from ..errors import ConfigurationError
from ..logging import LogConfig, LogLevel, LogManager, setup_logging
from ..proof import OUTBOX_OFFSET
from ..utils.validation import is_address

ENV_PREFIX = "MOSAIC_"


@dataclass
class ChainConfig:
    """One chain endpoint and the gateway contract deployed on it."""
    rpc_url: str = ""
    contract_address: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"rpc_url": self.rpc_url, "contract_address": self.contract_address}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChainConfig":
        """Create from dictionary."""
        return cls(
            rpc_url=data.get("rpc_url", ""),
            contract_address=data.get("contract_address", ""),
        )


@dataclass
class MosaicConfig:
    """Origin and auxiliary chain configuration."""
    origin: ChainConfig = field(default_factory=ChainConfig)
    auxiliary: ChainConfig = field(default_factory=ChainConfig)
    outbox_offset: int = OUTBOX_OFFSET
    log_level: str = "info"
    log_format: str = "text"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "origin": self.origin.to_dict(),
            "auxiliary": self.auxiliary.to_dict(),
            "outbox_offset": self.outbox_offset,
            "log_level": self.log_level,
            "log_format": self.log_format,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MosaicConfig":
        """Create from dictionary."""
        return cls(
            origin=ChainConfig.from_dict(data.get("origin", {})),
            auxiliary=ChainConfig.from_dict(data.get("auxiliary", {})),
            outbox_offset=_to_int(data.get("outbox_offset", OUTBOX_OFFSET), "outbox_offset"),
            log_level=data.get("log_level", "info"),
            log_format=data.get("log_format", "text"),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "MosaicConfig":
        """Create from ``MOSAIC_*`` environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            origin=ChainConfig(
                rpc_url=env.get(ENV_PREFIX + "ORIGIN_RPC_URL", ""),
                contract_address=env.get(ENV_PREFIX + "GATEWAY_ADDRESS", ""),
            ),
            auxiliary=ChainConfig(
                rpc_url=env.get(ENV_PREFIX + "AUXILIARY_RPC_URL", ""),
                contract_address=env.get(ENV_PREFIX + "CO_GATEWAY_ADDRESS", ""),
            ),
            outbox_offset=_to_int(
                env.get(ENV_PREFIX + "OUTBOX_OFFSET", OUTBOX_OFFSET), ENV_PREFIX + "OUTBOX_OFFSET"
            ),
            log_level=env.get(ENV_PREFIX + "LOG_LEVEL", "info"),
            log_format=env.get(ENV_PREFIX + "LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """Raise :class:`ConfigurationError` for the first invalid setting."""
        for name, chain in (("origin", self.origin), ("auxiliary", self.auxiliary)):
            if not chain.rpc_url:
                raise ConfigurationError(
                    f"Missing RPC URL for {name} chain",
                    config_key=f"{name}.rpc_url",
                    config_value=chain.rpc_url,
                )
            if not is_address(chain.contract_address):
                raise ConfigurationError(
                    f"Invalid contract address for {name} chain: {chain.contract_address}",
                    config_key=f"{name}.contract_address",
                    config_value=chain.contract_address,
                )
        if self.outbox_offset < 0:
            raise ConfigurationError(
                f"Outbox offset must not be negative: {self.outbox_offset}",
                config_key="outbox_offset",
                config_value=self.outbox_offset,
            )
        self._log_level()
        if self.log_format not in ("text", "json"):
            raise ConfigurationError(
                f"Unknown log format: {self.log_format}",
                config_key="log_format",
                config_value=self.log_format,
            )

    def setup_logging(self) -> LogManager:
        """Configure the global log manager from this configuration."""
        return setup_logging(LogConfig(level=self._log_level(), format_type=self.log_format))

    def _log_level(self) -> LogLevel:
        try:
            return LogLevel(str(self.log_level).lower())
        except ValueError:
            raise ConfigurationError(
                f"Unknown log level: {self.log_level}",
                config_key="log_level",
                config_value=self.log_level,
            ) from None


def _to_int(value: Any, key: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"Expected an integer for {key}: {value}", config_key=key, config_value=value
        ) from None
