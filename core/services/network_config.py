from __future__ import annotations

from functools import lru_cache

from adapters.chain.artifacts import load_network_json
from core.domain.schemas.network_config import NetworkConfig


@lru_cache(maxsize=None)
def get_network_config(network: str) -> NetworkConfig:
    """
    Load and validate libs/networks/<network>.json once per process.
    """
    cfg = NetworkConfig.from_dict(load_network_json(network))
    if cfg.network != (network or "").strip().lower():
        raise ValueError(f"Network file declares {cfg.network!r}, expected {network!r}")
    return cfg
