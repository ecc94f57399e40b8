from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from adapters.entry.http.views.admin.admin_auth import require_admin, AdminPrincipal
from adapters.entry.http.dtos.admin_adapter_dtos import RegisterAdapterRequest, SetAdapterStatusRequest
from core.use_cases.admin_adapters_usecase import AdminAdaptersUseCase
from core.services.exceptions import ContractRevertError, TokenCountMismatchError

router = APIRouter(prefix="/admin", tags=["admin"])


def get_use_case() -> AdminAdaptersUseCase:
    return AdminAdaptersUseCase.from_settings()


@router.post("/adapters/register")
async def register_adapter(
    body: RegisterAdapterRequest,
    admin: AdminPrincipal = Depends(require_admin),
    use_case: AdminAdaptersUseCase = Depends(get_use_case),
):
    """
    Validate a pool on-chain and persist its adapter registry record in MongoDB.

    Notes:
      - Uniqueness is enforced by (chain, name) and (chain, kind, pool).
      - StableSwap pools are rejected unless they enumerate exactly `token_count` coins.
      - All validation must be server-side (frontend is convenience-only).
    """
    try:
        created_by = (admin.wallet_address or "").strip() or None
        data = use_case.register_adapter(
            chain=body.chain,
            name=body.name,
            kind=body.kind.value,
            pool=body.pool,
            fee=body.fee,
            token_count=body.token_count,
            gas_estimate=body.gas_estimate,
            correction_kind=body.correction_kind.value if body.correction_kind else None,
            correction_value=body.correction_value,
            index_type=body.index_type.value if body.index_type else None,
            address=body.address,
            status=body.status,
            created_by=created_by,
        )
        return {"ok": True, "message": "Adapter registered", "data": data}
    except (ValueError, TokenCountMismatchError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ContractRevertError as exc:
        raise HTTPException(
            status_code=400,
            detail={"error": "pool_call_reverted", "contract": exc.contract, "reason": exc.reason},
        ) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to register adapter: {exc}") from exc


@router.post("/adapters/{name}/status")
async def set_adapter_status(
    name: str,
    body: SetAdapterStatusRequest,
    _: AdminPrincipal = Depends(require_admin),
    use_case: AdminAdaptersUseCase = Depends(get_use_case),
):
    try:
        return {"ok": True, "message": "OK", "data": use_case.set_status(chain=body.chain, name=name, status=body.status)}
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to update adapter status: {exc}") from exc


@router.get("/adapters")
async def list_adapters(
    chain: str = Query(...),
    _: AdminPrincipal = Depends(require_admin),
    use_case: AdminAdaptersUseCase = Depends(get_use_case),
):
    try:
        return {"ok": True, "message": "ok", "data": use_case.list_adapters(chain=chain, limit=200)}
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to list adapters: {exc}") from exc
