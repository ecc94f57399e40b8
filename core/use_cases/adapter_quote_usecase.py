from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Tuple

from pymongo.errors import PyMongoError

from adapters.chain.remote_chain import RemoteChain
from adapters.external.database.adapter_registry_repository_mongodb import AdapterRegistryRepositoryMongoDB
from core.domain.entities.adapter_registry_entity import AdapterRegistryEntity
from core.domain.enums.adapter_enums import AdapterStatus
from core.domain.protocols.chain_interface import ChainInterface
from core.domain.repositories.adapter_registry_repository_interface import AdapterRegistryRepository
from core.services.exceptions import AdapterNotFoundError
from core.services.normalize import _norm, _norm_lower, _parse_amount, _require_nonzero
from core.swap_adapters.base import SwapAdapter
from core.swap_adapters.factory import build_from_entity

logger = logging.getLogger(__name__)


@dataclass
class AdapterQuoteUseCase:
    """
    Read-only surface over registered adapters: pool-token membership,
    quotes and declared gas estimates.

    Adapters are rebuilt from their registry record against the chain
    returned by `chain_factory` and cached per (chain, name).
    """

    repo: AdapterRegistryRepository
    chain_factory: Callable[[str], ChainInterface]
    _chains: Dict[str, ChainInterface] = field(default_factory=dict, repr=False)
    _adapters: Dict[Tuple[str, str], SwapAdapter] = field(default_factory=dict, repr=False)

    @classmethod
    def from_settings(cls) -> "AdapterQuoteUseCase":
        repo = AdapterRegistryRepositoryMongoDB()
        try:
            repo.ensure_indexes()
        except PyMongoError as exc:
            logger.warning("Could not ensure adapter_registry indexes: %s", exc)
        return cls(repo=repo, chain_factory=RemoteChain.from_settings)

    # ---------- registry ----------

    def list_active(self, *, chain: str, limit: int = 200) -> dict:
        chain = _norm_lower(chain)
        if not chain:
            raise ValueError("chain is required")
        rows = self.repo.list_active(chain=chain, limit=int(limit))
        return {"ok": True, "message": "OK", "data": [r.to_public() for r in rows]}

    def get_adapter(self, *, chain: str, name: str) -> dict:
        ent = self._get_entity(chain, name)
        return {"ok": True, "message": "OK", "data": ent.to_public()}

    # ---------- adapter surface ----------

    def is_pool_token(self, *, chain: str, name: str, token: str) -> dict:
        token = _require_nonzero("token", token)
        adapter = self._adapter(chain, name)
        return {
            "ok": True,
            "message": "OK",
            "data": {"adapter": adapter.name, "token": token, "is_pool_token": adapter.is_pool_token(token)},
        }

    def query(self, *, chain: str, name: str, amount_in: str | int, token_from: str, token_to: str) -> dict:
        amount = _parse_amount("amount_in", amount_in)
        token_from = _norm(token_from)
        token_to = _norm(token_to)
        if not token_from or not token_to:
            raise ValueError("token_from and token_to are required")

        adapter = self._adapter(chain, name)
        amount_out = adapter.query(amount, token_from, token_to)
        return {
            "ok": True,
            "message": "OK",
            "data": {
                "adapter": adapter.name,
                "token_from": token_from,
                "token_to": token_to,
                "amount_in": str(amount),
                "amount_out": str(amount_out),
            },
        }

    def gas_estimate(self, *, chain: str, name: str) -> dict:
        ent = self._get_entity(chain, name)
        if ent.gas_estimate is not None:
            estimate = int(ent.gas_estimate)
        else:
            estimate = self._adapter(chain, name).swap_gas_estimate()
        return {"ok": True, "message": "OK", "data": {"adapter": ent.name, "gas_estimate": estimate}}

    # ---------- internals ----------

    def _get_entity(self, chain: str, name: str) -> AdapterRegistryEntity:
        chain = _norm_lower(chain)
        name = _norm(name)
        if not chain:
            raise ValueError("chain is required")
        if not name:
            raise ValueError("name is required")
        ent = self.repo.get_by_name(chain=chain, name=name)
        if ent is None or ent.status != AdapterStatus.ACTIVE.value:
            raise AdapterNotFoundError(chain, name)
        return ent

    def _adapter(self, chain: str, name: str) -> SwapAdapter:
        ent = self._get_entity(chain, name)
        key = (ent.chain, ent.name)
        adapter = self._adapters.get(key)
        if adapter is None:
            chain_env = self._chains.get(ent.chain)
            if chain_env is None:
                chain_env = self.chain_factory(ent.chain)
                self._chains[ent.chain] = chain_env
            adapter = build_from_entity(ent, chain_env)
            self._adapters[key] = adapter
        return adapter
