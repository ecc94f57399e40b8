from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, Set

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from privy import PrivyAPI

from config import get_settings

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AdminPrincipal:
    """
    Operator allowed to register adapters, derived from a Privy access token.
    """
    privy_did: str
    wallet_address: str


@lru_cache(maxsize=1)
def _admin_allowlist() -> Set[str]:
    s = get_settings()
    return {x.strip().lower() for x in (s.ADMIN_WALLETS or "").split(",") if x.strip()}


@lru_cache(maxsize=1)
def _privy_client() -> PrivyAPI:
    s = get_settings()
    if not s.PRIVY_APP_ID:
        raise RuntimeError("Missing settings.PRIVY_APP_ID")
    if not s.PRIVY_APP_SECRET:
        raise RuntimeError("Missing settings.PRIVY_APP_SECRET")
    return PrivyAPI(app_id=s.PRIVY_APP_ID, app_secret=s.PRIVY_APP_SECRET)


def _field(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def _as_wallet(v: Any) -> Optional[str]:
    return v if isinstance(v, str) and v.startswith("0x") else None


def wallet_of(user: Any) -> str:
    """
    First EVM address found on a Privy user (object or dict), or "".

    Looked up in order: top-level address, `wallet`, `wallets[]`, then
    `linked_accounts[]` (wallet-typed entries first).
    """
    for key in ("wallet_address", "address"):
        addr = _as_wallet(_field(user, key))
        if addr:
            return addr

    wallet = _field(user, "wallet")
    addr = _as_wallet(_field(wallet, "address") or _field(wallet, "wallet_address"))
    if addr:
        return addr

    for w in _field(user, "wallets") or []:
        addr = _as_wallet(_field(w, "address") or _field(w, "wallet_address"))
        if addr:
            return addr

    linked = _field(user, "linked_accounts") or []
    typed = [a for a in linked if (_field(a, "type") or "").lower() == "wallet"]
    for acc in typed + [a for a in linked if a not in typed]:
        addr = _as_wallet(_field(acc, "address") or _field(acc, "wallet_address"))
        if addr:
            return addr
    return ""


def _fetch_user(client: PrivyAPI, did: str) -> Any:
    # method name differs across privy SDK releases
    users = client.users
    for method, kwargs in (("get", None), ("get_by_id", "user_id"), ("retrieve", "user_id")):
        fn = getattr(users, method, None)
        if callable(fn):
            return fn(did) if kwargs is None else fn(**{kwargs: did})
    raise RuntimeError("Privy SDK does not expose users.get/get_by_id/retrieve")


def require_admin(
    creds: HTTPAuthorizationCredentials = Depends(bearer),
) -> AdminPrincipal:
    if not creds or not creds.credentials:
        raise HTTPException(status_code=401, detail="Missing Authorization bearer token.")

    try:
        client = _privy_client()
        claims = client.users.verify_access_token(auth_token=creds.credentials)
        privy_did = str(_field(claims, "user_id") or "")
        if not privy_did:
            raise HTTPException(status_code=401, detail="Invalid token (missing user_id).")

        wallet = wallet_of(_fetch_user(client, privy_did)).lower()
    except HTTPException:
        raise
    except Exception as exc:
        logger.info("Admin token rejected: %s", exc)
        raise HTTPException(status_code=401, detail=f"Authentication failed: {exc or 'invalid token'}") from exc

    if not wallet:
        raise HTTPException(status_code=403, detail="Token verified but user has no linked wallet address.")
    if wallet not in _admin_allowlist():
        raise HTTPException(status_code=403, detail="Not authorized (wallet not allowlisted).")

    return AdminPrincipal(privy_did=privy_did, wallet_address=wallet)
