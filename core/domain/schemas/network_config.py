from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from web3 import Web3


@dataclass(frozen=True)
class HopToken:
    symbol: str
    address: str


@dataclass(frozen=True)
class NetworkConfig:
    """
    Per-network routing surface consumed by an external router:
    enabled adapter names, a reduced fast-path list, intermediate hop tokens
    and the wrapped native asset. Loaded once, never mutated.
    """

    network: str
    wnative: str
    adapter_whitelist: Tuple[str, ...]
    hop_tokens: Tuple[HopToken, ...]
    minimal_adapter_whitelist: Tuple[str, ...] = field(default_factory=tuple)
    chain_id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetworkConfig":
        network = str(data.get("network") or "").strip().lower()
        if not network:
            raise ValueError("network is required")

        wnative = str(data.get("wnative") or "").strip().lower()
        if not Web3.is_address(wnative):
            raise ValueError(f"{network}: wnative must be a valid address")

        whitelist = tuple(str(x).strip() for x in data.get("adapter_whitelist") or [] if str(x).strip())
        if not whitelist:
            raise ValueError(f"{network}: adapter_whitelist must not be empty")
        if len(set(whitelist)) != len(whitelist):
            raise ValueError(f"{network}: adapter_whitelist has duplicates")

        hops = []
        for row in data.get("hop_tokens") or []:
            addr = str(row.get("address") or "").strip().lower()
            if not Web3.is_address(addr):
                raise ValueError(f"{network}: invalid hop token address {addr!r}")
            hops.append(HopToken(symbol=str(row.get("symbol") or ""), address=Web3.to_checksum_address(addr)))

        minimal = tuple(str(x).strip() for x in data.get("minimal_adapter_whitelist") or [] if str(x).strip())
        chain_id = data.get("chain_id")

        return cls(
            network=network,
            wnative=Web3.to_checksum_address(wnative),
            adapter_whitelist=whitelist,
            hop_tokens=tuple(hops),
            minimal_adapter_whitelist=minimal,
            chain_id=int(chain_id) if chain_id is not None else None,
        )

    def is_hop_token(self, token: str) -> bool:
        t = (token or "").strip().lower()
        return any(h.address.lower() == t for h in self.hop_tokens)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "network": self.network,
            "chain_id": self.chain_id,
            "adapter_whitelist": list(self.adapter_whitelist),
            "minimal_adapter_whitelist": list(self.minimal_adapter_whitelist),
            "hop_tokens": [{"symbol": h.symbol, "address": h.address} for h in self.hop_tokens],
            "wnative": self.wnative,
        }
