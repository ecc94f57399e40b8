import os
from dotenv import load_dotenv
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, List

load_dotenv()


def _parse_csv(value: str, *, lower: bool = False) -> List[str]:
    if not value:
        return []
    items = [x.strip() for x in value.split(",")]
    items = [x for x in items if x]
    if lower:
        items = [x.lower() for x in items]
    return items


def _parse_rpc_urls(value: str) -> Dict[str, str]:
    """
    "avalanche=https://...,arbitrum=https://..." -> {"avalanche": "https://...", ...}
    """
    out: Dict[str, str] = {}
    for item in _parse_csv(value):
        chain, sep, url = item.partition("=")
        if not sep or not chain.strip() or not url.strip():
            raise ValueError(f"Invalid RPC_URLS entry: {item!r} (expected chain=url)")
        out[chain.strip().lower()] = url.strip()
    return out


@dataclass
class Settings:
    # MongoDB
    MONGO_URI: str
    MONGO_DB: str

    # chain RPCs (quote-only reads)
    RPC_URL_DEFAULT: str
    RPC_URLS: Dict[str, str] = field(default_factory=dict)

    # ---- Admin / Privy Auth ----
    PRIVY_APP_ID: str = ""
    PRIVY_APP_SECRET: str = ""
    ADMIN_WALLETS: str = ""

    # routing surface
    DEFAULT_NETWORK: str = "avalanche"

    # generic
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    def rpc_url_for(self, chain: str) -> str:
        key = (chain or "").strip().lower()
        url = self.RPC_URLS.get(key) or self.RPC_URL_DEFAULT
        if not url:
            raise ValueError(f"No RPC URL configured for chain {chain!r}")
        return url


@lru_cache()
def get_settings() -> Settings:
    return Settings(
        # Mongo
        MONGO_URI=os.getenv("MONGO_URI", "mongodb://mongo-adapters:27017/swap_adapters"),
        MONGO_DB=os.getenv("MONGO_DB", "swap_adapters"),

        # Chain
        RPC_URL_DEFAULT=os.getenv("RPC_URL_DEFAULT", ""),
        RPC_URLS=_parse_rpc_urls(os.getenv("RPC_URLS", "")),

        # Admin / Privy Auth
        PRIVY_APP_ID=os.getenv("PRIVY_APP_ID", ""),
        PRIVY_APP_SECRET=os.getenv("PRIVY_APP_SECRET", ""),
        ADMIN_WALLETS=os.getenv("ADMIN_WALLETS", ""),

        DEFAULT_NETWORK=os.getenv("DEFAULT_NETWORK", "avalanche").strip().lower(),

        ENV=os.getenv("ENV", "dev"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
