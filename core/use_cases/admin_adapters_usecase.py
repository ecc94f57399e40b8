from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from pymongo.errors import PyMongoError
from web3 import Web3

from adapters.chain.remote_chain import RemoteChain
from adapters.external.database.adapter_registry_repository_mongodb import AdapterRegistryRepositoryMongoDB
from core.domain.entities.adapter_registry_entity import AdapterRegistryEntity
from core.domain.enums.adapter_enums import AdapterKind, AdapterStatus, CorrectionKind, CurveIndexType
from core.domain.protocols.chain_interface import ChainInterface
from core.domain.repositories.adapter_registry_repository_interface import AdapterRegistryRepository
from core.services.deployment_checks import check_token_count
from core.services.normalize import _norm, _norm_lower, _require_nonzero
from core.swap_adapters.corrections import correction_from
from core.swap_adapters.factory import build_adapter

logger = logging.getLogger(__name__)

CURVE_KINDS = (AdapterKind.CURVE_PLAIN, AdapterKind.CURVE_UNDERLYING)
STABLESWAP_KINDS = CURVE_KINDS + (AdapterKind.CURVELIKE,)
UNILIKE_KINDS = (AdapterKind.UNILIKE, AdapterKind.UNILIKE_FACTORY)


def _cs_addr(field: str, v: str) -> str:
    vv = _require_nonzero(field, v)
    if not Web3.is_address(vv):
        raise ValueError(f"{field} must be a valid EVM address (0x...).")
    return Web3.to_checksum_address(vv)


@dataclass
class AdminAdaptersUseCase:
    """
    Admin use case to register adapters (per chain) in MongoDB.

    Registration is where configuration defects are caught: the pool is read
    from the live chain, StableSwap pools must pass the token-count check, and
    the adapter is built once so a wrong pool address fails here rather than
    at quote time.
    """

    repo: AdapterRegistryRepository
    chain_factory: Callable[[str], ChainInterface]

    @classmethod
    def from_settings(cls) -> "AdminAdaptersUseCase":
        repo = AdapterRegistryRepositoryMongoDB()
        try:
            repo.ensure_indexes()
        except PyMongoError as exc:
            logger.warning("Could not ensure adapter_registry indexes: %s", exc)
        return cls(repo=repo, chain_factory=RemoteChain.from_settings)

    def register_adapter(
        self,
        *,
        chain: str,
        name: str,
        kind: str,
        pool: str,
        fee: Optional[int] = None,
        token_count: Optional[int] = None,
        gas_estimate: Optional[int] = None,
        correction_kind: Optional[str] = None,
        correction_value: Optional[int] = None,
        index_type: Optional[str] = None,
        address: Optional[str] = None,
        status: str = "ACTIVE",
        created_by: str | None = None,
    ) -> dict:
        chain = _norm_lower(chain)
        if not chain:
            raise ValueError("chain is required")

        name = _norm(name)
        if not name:
            raise ValueError("name is required")

        try:
            kind_e = AdapterKind(_norm_lower(kind))
        except ValueError as exc:
            raise ValueError(f"kind must be one of: {', '.join(k.value for k in AdapterKind)}") from exc

        pool_cs = _cs_addr("pool", pool)
        address_cs = _cs_addr("address", address) if address else None

        if kind_e in STABLESWAP_KINDS:
            if token_count is None or int(token_count) < 2:
                raise ValueError("token_count (>= 2) is required for StableSwap adapters")
        elif token_count is not None:
            raise ValueError(f"token_count does not apply to {kind_e.value} adapters")

        if kind_e in CURVE_KINDS:
            idx = CurveIndexType(_norm_lower(index_type) or CurveIndexType.INT128)
        elif index_type:
            raise ValueError(f"index_type does not apply to {kind_e.value} adapters")
        else:
            idx = None

        if kind_e in UNILIKE_KINDS:
            fee = 3 if fee is None else int(fee)
            if not 0 <= fee < 1000:
                raise ValueError("fee must be within [0, 1000) per-mille")
        elif fee is not None:
            raise ValueError(f"fee does not apply to {kind_e.value} adapters")

        if gas_estimate is not None and int(gas_estimate) <= 0:
            raise ValueError("gas_estimate must be > 0")

        corr_kind = CorrectionKind(_norm_lower(correction_kind)) if correction_kind else None
        if corr_kind is None and correction_value is not None:
            raise ValueError("correction_value requires correction_kind")
        if kind_e not in STABLESWAP_KINDS and (corr_kind is not None or correction_value is not None):
            raise ValueError(f"correction does not apply to {kind_e.value} adapters")

        st = _norm(status).upper() or "ACTIVE"
        if st not in (AdapterStatus.ACTIVE.value, AdapterStatus.INACTIVE.value):
            raise ValueError("status must be ACTIVE or INACTIVE")

        # Uniqueness by (chain,name) and (chain,kind,pool)
        if self.repo.get_by_name(chain=chain, name=name):
            raise ValueError("Adapter already exists with this name.")
        if self.repo.get_by_kind_pool(chain=chain, kind=kind_e.value, pool=pool_cs):
            raise ValueError("Adapter already exists for this kind+pool.")

        chain_env = self.chain_factory(chain)

        # deployment-time invariant: pool enumerates exactly token_count coins
        if kind_e in CURVE_KINDS:
            check_token_count(chain_env.curve_pool(pool_cs, idx), int(token_count))
        elif kind_e == AdapterKind.CURVELIKE:
            check_token_count(chain_env.curvelike_pool(pool_cs), int(token_count), accessor="get_token")

        adapter = build_adapter(
            kind_e,
            chain_env,
            name,
            pool_cs,
            fee=fee,
            token_count=token_count,
            gas_estimate=gas_estimate,
            correction=correction_from(corr_kind, correction_value),
            index_type=idx or CurveIndexType.INT128,
            address=address_cs,
        )

        ent = AdapterRegistryEntity(
            chain=chain,
            name=name,
            kind=kind_e,
            pool=_norm_lower(pool_cs),
            fee=fee,
            token_count=int(token_count) if token_count is not None else None,
            gas_estimate=adapter.swap_gas_estimate(),
            correction_kind=adapter.correction.kind,
            correction_value=adapter.correction.value,
            index_type=idx,
            address=_norm_lower(address_cs) if address_cs else None,
            tokens=[_norm_lower(t) for t in adapter.pool_tokens()],
            status=AdapterStatus(st),
            created_by=_norm_lower(created_by) if created_by else None,
        )
        self.repo.insert(ent)

        persisted = self.repo.get_by_name(chain=chain, name=name)
        if not persisted:
            raise RuntimeError("Adapter validated but failed to persist in MongoDB.")

        logger.info("Registered adapter %s (%s) on %s for pool %s", name, kind_e.value, chain, pool_cs)
        return persisted.to_public()

    def set_status(self, *, chain: str, name: str, status: str) -> dict:
        chain = _norm_lower(chain)
        name = _norm(name)
        if not chain or not name:
            raise ValueError("chain and name are required")
        st = _norm(status).upper()
        if st not in (AdapterStatus.ACTIVE.value, AdapterStatus.INACTIVE.value):
            raise ValueError("status must be ACTIVE or INACTIVE")

        updated = self.repo.set_status(chain=chain, name=name, status=st)
        if updated <= 0 and not self.repo.get_by_name(chain=chain, name=name):
            raise ValueError("Adapter not found.")
        return {"chain": chain, "name": name, "status": st}

    def list_adapters(self, *, chain: str, limit: int = 200) -> list[dict]:
        chain = _norm_lower(chain)
        if not chain:
            raise ValueError("chain is required")
        return [e.to_public() for e in self.repo.list_all(chain=chain, limit=int(limit))]
