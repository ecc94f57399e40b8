from __future__ import annotations

from pydantic import BaseModel, Field, field_validator
from typing import Literal, Optional

from web3 import Web3

from core.domain.enums.adapter_enums import AdapterKind, CorrectionKind, CurveIndexType


class RegisterAdapterRequest(BaseModel):
    """
    Admin request to register a swap adapter and persist the record in MongoDB.

    NOTE:
      - The pool is read from the chain at registration: StableSwap pools
        must enumerate exactly `token_count` coins or the request is rejected.
      - `fee` only applies to constant-product kinds; `token_count` and the
        correction fields only to StableSwap kinds (curve_plain,
        curve_underlying, curvelike); `index_type` only to the Curve kinds.
        Fields sent for a kind they do not apply to are rejected.
    """

    chain: str = Field(..., description='Chain key (e.g. "avalanche", "arbitrum")')
    name: str = Field(..., description='Adapter name (e.g. "PangolinAdapter")')
    kind: AdapterKind

    pool: str = Field(..., description="Pool, factory or vault address")
    address: Optional[str] = Field(default=None, description="Deployed adapter address, if any")

    fee: Optional[int] = Field(default=None, ge=0, lt=1000, description="Per-mille fee (constant-product kinds)")
    token_count: Optional[int] = Field(default=None, ge=2, le=8)
    gas_estimate: Optional[int] = Field(default=None, gt=0)

    correction_kind: Optional[CorrectionKind] = None
    correction_value: Optional[int] = Field(default=None, ge=0)
    index_type: Optional[CurveIndexType] = None

    status: Literal["ACTIVE", "INACTIVE"] = "ACTIVE"

    @field_validator("pool", "address")
    @classmethod
    def _validate_addresses(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = (v or "").strip()
        if not Web3.is_address(v):
            raise ValueError("Invalid address in request (expected 0x...).")
        return Web3.to_checksum_address(v)

    @field_validator("chain", "name")
    @classmethod
    def _validate_key(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("must not be empty")
        if len(v) > 64:
            raise ValueError("too long")
        return v


class SetAdapterStatusRequest(BaseModel):
    chain: str
    status: Literal["ACTIVE", "INACTIVE"]
