from __future__ import annotations

from typing import Callable, Dict, Generic, List, Optional, TypeVar

from core.services.exceptions import ContractRevertError
from core.services.normalize import ZERO_ADDRESS, _norm_lower

SlotT = TypeVar("SlotT")


class TokenIndexMap(Generic[SlotT]):
    """
    Immutable `token -> slot` relation derived from a pool's coin list.

    Built once from `coin_at(0..token_count-1)`; the count is trusted here
    (it is validated once, before registration). Unknown tokens resolve to
    None, never raise.
    """

    def __init__(self, coins: List[str], slots: Optional[List[SlotT]] = None):
        self._coins = list(coins)
        slots = list(slots) if slots is not None else list(range(len(coins)))
        if len(slots) != len(self._coins):
            raise ValueError("coins and slots must have the same length")
        self._index: Dict[str, SlotT] = {}
        for coin, slot in zip(self._coins, slots):
            self._index.setdefault(_norm_lower(coin), slot)

    @classmethod
    def enumerate(cls, coin_at: Callable[[int], str], token_count: int) -> "TokenIndexMap[int]":
        if int(token_count) < 2:
            raise ValueError("token_count must be >= 2")
        return cls([coin_at(i) for i in range(int(token_count))])

    @classmethod
    def discover(cls, coin_at: Callable[[int], str], limit: int) -> "TokenIndexMap[int]":
        """
        Enumerate coins until `coin_at` reverts or returns the zero address.
        """
        coins: List[str] = []
        for i in range(int(limit)):
            try:
                coin = coin_at(i)
            except ContractRevertError:
                break
            if _norm_lower(coin) == ZERO_ADDRESS:
                break
            coins.append(coin)
        if len(coins) < 2:
            raise ValueError("pool must hold at least 2 tokens")
        return cls(coins)

    @property
    def coins(self) -> List[str]:
        return list(self._coins)

    def __len__(self) -> int:
        return len(self._coins)

    def __contains__(self, token: object) -> bool:
        return isinstance(token, str) and _norm_lower(token) in self._index

    def resolve(self, token: str) -> Optional[SlotT]:
        return self._index.get(_norm_lower(token))
