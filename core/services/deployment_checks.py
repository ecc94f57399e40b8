from __future__ import annotations

import logging
from typing import Any, List

from core.services.exceptions import ContractRevertError, TokenCountMismatchError
from core.services.normalize import ZERO_ADDRESS, _norm_lower

logger = logging.getLogger(__name__)


def check_token_count(pool: Any, expected: int, accessor: str = "coins") -> List[str]:
    """
    Verify that `pool` enumerates exactly `expected` tokens through `accessor`
    (`coins`, `underlying_coins`, `get_token`, ...): index expected-1 must
    resolve and index expected must revert. A zero address counts as a
    missing slot.

    Returns the enumerated token list. Raises TokenCountMismatchError
    otherwise; this blocks registration.
    """
    expected = int(expected)
    address = getattr(pool, "address", str(pool))
    if expected < 1:
        raise ValueError("expected token count must be >= 1")

    coin_at = getattr(pool, accessor, None)
    if not callable(coin_at):
        raise ValueError(f"Pool does not expose {accessor!r}")

    try:
        last = coin_at(expected - 1)
    except ContractRevertError as exc:
        raise TokenCountMismatchError(address, expected, f"index {expected - 1} reverted") from exc
    if _norm_lower(last) == ZERO_ADDRESS:
        raise TokenCountMismatchError(address, expected, f"index {expected - 1} is empty")

    try:
        extra = coin_at(expected)
    except ContractRevertError:
        extra = None

    if extra is not None and _norm_lower(extra) != ZERO_ADDRESS:
        raise TokenCountMismatchError(address, expected, f"index {expected} did not revert")

    tokens = [coin_at(i) for i in range(expected - 1)] + [last]
    logger.info("Token count check passed for %s (%s tokens)", address, expected)
    return tokens
