from __future__ import annotations

from typing import List, Optional

from pydantic import ConfigDict, Field

from core.domain.entities.base_entity import MongoEntity
from core.domain.enums.adapter_enums import AdapterKind, AdapterStatus, CorrectionKind, CurveIndexType


class AdapterRegistryEntity(MongoEntity):
    """
    Mongo document (collection: adapter_registry).
    One record per (chain, name); at most one adapter per (chain, kind, pool).

    Construction parameters (immutable once registered):
      - kind: destination protocol family
      - pool: pool / factory / vault address
      - fee: per-mille fee (constant-product families)
      - token_count: coin count validated at registration (StableSwap families)
      - gas_estimate: declared worst-case query + swap gas
      - correction_kind/correction_value: quote correction (None = family default)
      - index_type: Curve coin index ABI

    Metadata:
      - address: deployed adapter address, when one exists
      - tokens: pool tokens enumerated at registration
      - status: ACTIVE|INACTIVE
    """

    chain: str
    name: str
    kind: AdapterKind

    pool: str
    fee: Optional[int] = None
    token_count: Optional[int] = None
    gas_estimate: Optional[int] = None

    correction_kind: Optional[CorrectionKind] = None
    correction_value: Optional[int] = None
    index_type: Optional[CurveIndexType] = None

    address: Optional[str] = None
    tokens: List[str] = Field(default_factory=list)

    status: AdapterStatus = AdapterStatus.ACTIVE
    created_by: Optional[str] = None

    model_config = ConfigDict(extra="allow", use_enum_values=True)

    def to_public(self) -> dict:
        return {
            "chain": self.chain,
            "name": self.name,
            "kind": self.kind,
            "pool": self.pool,
            "address": self.address,
            "fee": self.fee,
            "token_count": self.token_count,
            "gas_estimate": self.gas_estimate,
            "correction_kind": self.correction_kind,
            "correction_value": self.correction_value,
            "index_type": self.index_type,
            "tokens": list(self.tokens),
            "status": self.status,
            "created_at": self.created_at_iso,
            "created_by": self.created_by,
        }
