"""Chain configuration and connections."""

from .config import ENV_PREFIX, ChainConfig, MosaicConfig
from .mosaic import Chain, Mosaic

__all__ = [
    "ENV_PREFIX",
    "ChainConfig",
    "MosaicConfig",
    "Chain",
    "Mosaic",
]
