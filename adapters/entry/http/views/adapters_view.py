from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Query

from core.services.exceptions import AdapterNotFoundError, Uint256OverflowError
from core.use_cases.adapter_quote_usecase import AdapterQuoteUseCase


router = APIRouter(prefix="/adapters", tags=["adapters"])


@lru_cache(maxsize=1)
def get_use_case() -> AdapterQuoteUseCase:
    # cached so built adapters (and their token maps) survive across requests
    return AdapterQuoteUseCase.from_settings()


@router.get("")
async def list_adapters(
    chain: str = Query(..., description='Chain key (e.g. "avalanche", "arbitrum")'),
    limit: int = Query(200, ge=1, le=1000),
    use_case: AdapterQuoteUseCase = Depends(get_use_case),
):
    try:
        return use_case.list_active(chain=chain, limit=limit)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to list adapters: {exc}") from exc


@router.get("/{name}")
async def get_adapter(
    name: str,
    chain: str = Query(...),
    use_case: AdapterQuoteUseCase = Depends(get_use_case),
):
    try:
        return use_case.get_adapter(chain=chain, name=name)
    except AdapterNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to get adapter: {exc}") from exc


@router.get("/{name}/pool-tokens/{token}")
async def is_pool_token(
    name: str,
    token: str,
    chain: str = Query(...),
    use_case: AdapterQuoteUseCase = Depends(get_use_case),
):
    """
    Factory-bound adapters answer by scanning every pair of the factory,
    which costs RPC round trips proportional to the pair count.
    """
    try:
        return use_case.is_pool_token(chain=chain, name=name, token=token)
    except AdapterNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to check pool token: {exc}") from exc


@router.get("/{name}/query")
async def query_adapter(
    name: str,
    chain: str = Query(...),
    amount_in: str = Query(..., description="Raw input amount (uint256, decimal string)"),
    token_from: str = Query(...),
    token_to: str = Query(...),
    use_case: AdapterQuoteUseCase = Depends(get_use_case),
):
    """
    Quote `amount_in` of `token_from` into `token_to` on one adapter.

    Notes:
      - Unsupported pairs and zero amounts quote 0 (they are not errors).
      - The quote never exceeds what a swap in the same state would deliver.
    """
    try:
        return use_case.query(
            chain=chain,
            name=name,
            amount_in=amount_in,
            token_from=token_from,
            token_to=token_to,
        )
    except AdapterNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (ValueError, Uint256OverflowError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to query adapter: {exc}") from exc


@router.get("/{name}/gas-estimate")
async def gas_estimate(
    name: str,
    chain: str = Query(...),
    use_case: AdapterQuoteUseCase = Depends(get_use_case),
):
    try:
        return use_case.gas_estimate(chain=chain, name=name)
    except AdapterNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to get gas estimate: {exc}") from exc
