from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from core.use_cases.network_config_usecase import NetworkConfigUseCase


router = APIRouter(prefix="/networks", tags=["networks"])


def get_use_case() -> NetworkConfigUseCase:
    return NetworkConfigUseCase.from_settings()


@router.get("")
async def list_networks(use_case: NetworkConfigUseCase = Depends(get_use_case)):
    try:
        return use_case.list_networks()
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to list networks: {exc}") from exc


@router.get("/{network}")
async def get_network(network: str, use_case: NetworkConfigUseCase = Depends(get_use_case)):
    try:
        return use_case.get_network(network)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to load network config: {exc}") from exc


@router.get("/{network}/hop-tokens/{token}")
async def is_hop_token(network: str, token: str, use_case: NetworkConfigUseCase = Depends(get_use_case)):
    try:
        return use_case.is_hop_token(network, token)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to check hop token: {exc}") from exc
