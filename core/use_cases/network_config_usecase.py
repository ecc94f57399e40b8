from __future__ import annotations

from dataclasses import dataclass

from adapters.chain.artifacts import available_networks
from config import get_settings
from core.services.network_config import get_network_config
from core.services.normalize import _norm_lower


@dataclass
class NetworkConfigUseCase:
    """
    Exposes the static per-network routing configuration (libs/networks/*.json).
    """

    default_network: str

    @classmethod
    def from_settings(cls) -> "NetworkConfigUseCase":
        return cls(default_network=get_settings().DEFAULT_NETWORK)

    def list_networks(self) -> dict:
        return {
            "ok": True,
            "message": "OK",
            "data": {"default": self.default_network, "networks": available_networks()},
        }

    def get_network(self, network: str | None = None) -> dict:
        network = _norm_lower(network) or self.default_network
        if network not in available_networks():
            raise LookupError(f"Unknown network: {network!r}")
        cfg = get_network_config(network)
        return {"ok": True, "message": "OK", "data": cfg.to_dict()}

    def is_hop_token(self, network: str, token: str) -> dict:
        network = _norm_lower(network) or self.default_network
        if network not in available_networks():
            raise LookupError(f"Unknown network: {network!r}")
        cfg = get_network_config(network)
        return {"ok": True, "message": "OK", "data": {"network": network, "token": token, "is_hop_token": cfg.is_hop_token(token)}}
