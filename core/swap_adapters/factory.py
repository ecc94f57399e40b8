from __future__ import annotations

from typing import Dict, Optional, Type

from core.domain.entities.adapter_registry_entity import AdapterRegistryEntity
from core.domain.enums.adapter_enums import AdapterKind, CurveIndexType
from core.domain.protocols.chain_interface import ChainInterface
from core.swap_adapters.base import SwapAdapter
from core.swap_adapters.corrections import QuoteCorrection, correction_from
from core.swap_adapters.curve import CurveLikeAdapter, CurvePlainAdapter, CurveUnderlyingAdapter
from core.swap_adapters.gmx import GmxAdapter
from core.swap_adapters.unilike import UnilikeAdapter, UnilikeFactoryAdapter

ADAPTER_CLASSES: Dict[AdapterKind, Type[SwapAdapter]] = {
    AdapterKind.UNILIKE: UnilikeAdapter,
    AdapterKind.UNILIKE_FACTORY: UnilikeFactoryAdapter,
    AdapterKind.CURVE_PLAIN: CurvePlainAdapter,
    AdapterKind.CURVE_UNDERLYING: CurveUnderlyingAdapter,
    AdapterKind.CURVELIKE: CurveLikeAdapter,
    AdapterKind.GMX: GmxAdapter,
}


def build_adapter(
    kind: AdapterKind | str,
    chain: ChainInterface,
    name: str,
    pool: str,
    *,
    fee: Optional[int] = None,
    token_count: Optional[int] = None,
    gas_estimate: Optional[int] = None,
    correction: Optional[QuoteCorrection] = None,
    index_type: CurveIndexType | str = CurveIndexType.INT128,
    address: Optional[str] = None,
) -> SwapAdapter:
    """
    Construct one adapter of the given family. Omitted optional parameters
    fall back to each family's defaults.
    """
    kind = AdapterKind(kind)
    kwargs = {"address": address}
    if gas_estimate is not None:
        kwargs["gas_estimate"] = int(gas_estimate)

    if kind in (AdapterKind.UNILIKE, AdapterKind.UNILIKE_FACTORY):
        if fee is not None:
            kwargs["fee"] = int(fee)
    elif kind in (AdapterKind.CURVE_PLAIN, AdapterKind.CURVE_UNDERLYING):
        if token_count is None:
            raise ValueError(f"token_count is required for {kind} adapters")
        kwargs["token_count"] = int(token_count)
        kwargs["index_type"] = CurveIndexType(index_type)
        kwargs["correction"] = correction
    elif kind == AdapterKind.CURVELIKE:
        if token_count is not None:
            kwargs["token_count"] = int(token_count)
        kwargs["correction"] = correction

    return ADAPTER_CLASSES[kind](chain, name, pool, **kwargs)


def build_from_entity(entity: AdapterRegistryEntity, chain: ChainInterface) -> SwapAdapter:
    return build_adapter(
        entity.kind,
        chain,
        entity.name,
        entity.pool,
        fee=entity.fee,
        token_count=entity.token_count,
        gas_estimate=entity.gas_estimate,
        correction=correction_from(entity.correction_kind, entity.correction_value),
        index_type=entity.index_type or CurveIndexType.INT128,
        address=entity.address,
    )
