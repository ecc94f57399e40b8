from __future__ import annotations

from core.services.exceptions import Uint256OverflowError

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
MAX_UINT256 = (1 << 256) - 1


def _norm(a: str | None) -> str:
    return (a or "").strip()


def _norm_lower(a: str | None) -> str:
    return _norm(a).lower()


def _require_nonzero(name: str, addr: str | None) -> str:
    addr = _norm(addr)
    if not addr or _norm_lower(addr) == ZERO_ADDRESS:
        raise ValueError(f"{name} must not be zero address.")
    return addr


def _require_uint256(name: str, value: int) -> int:
    v = int(value)
    if v < 0 or v > MAX_UINT256:
        raise Uint256OverflowError(name, v)
    return v


def _parse_amount(name: str, value: str | int) -> int:
    """
    Parse an integer amount coming from the HTTP layer (decimal string or int).
    """
    if isinstance(value, int):
        return _require_uint256(name, value)
    s = _norm(value)
    if not s.isdigit():
        raise ValueError(f"{name} must be a non-negative integer string")
    return _require_uint256(name, int(s))
