from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Tuple


class UnilikePairInterface(ABC):
    """Constant-product pair (Uniswap v2 style)."""

    address: str

    @abstractmethod
    def token0(self) -> str: ...

    @abstractmethod
    def token1(self) -> str: ...

    @abstractmethod
    def get_reserves(self) -> Tuple[int, int]: ...

    @abstractmethod
    def swap(self, sender: str, amount0_out: int, amount1_out: int, to: str) -> None:
        """Pays the requested outputs to `to`; input must already sit in the pair."""
        ...


class UnilikeFactoryInterface(ABC):
    address: str

    @abstractmethod
    def get_pair(self, token_a: str, token_b: str) -> str:
        """Pair address, or the zero address when the pair does not exist."""
        ...

    @abstractmethod
    def pair_at(self, address: str) -> UnilikePairInterface: ...

    @abstractmethod
    def all_pairs_length(self) -> int: ...

    @abstractmethod
    def all_pairs(self, index: int) -> str: ...


class CurvePoolInterface(ABC):
    """StableSwap pool addressed by integer coin indices."""

    address: str

    @abstractmethod
    def coins(self, index: int) -> str:
        """Coin address at `index`; reverts past the last coin."""
        ...

    @abstractmethod
    def get_dy(self, i: int, j: int, dx: int) -> int: ...

    @abstractmethod
    def exchange(self, sender: str, i: int, j: int, dx: int, min_dy: int) -> int:
        """Pulls dx of coin i from sender (allowance required), pays coin j back to sender."""
        ...


class CurveLikePoolInterface(ABC):
    """StableSwap pool with Saddle's ABI (uint8 token indices, pausable)."""

    address: str

    @abstractmethod
    def get_token(self, index: int) -> str:
        """Token address at `index`; reverts past the last token."""
        ...

    @abstractmethod
    def paused(self) -> bool: ...

    @abstractmethod
    def calculate_swap(self, i: int, j: int, dx: int) -> int: ...

    @abstractmethod
    def swap(self, sender: str, i: int, j: int, dx: int, min_dy: int) -> int:
        """Pulls dx of token i from sender (allowance required), pays token j back to sender."""
        ...


class GmxVaultInterface(ABC):
    """Vault-based perpetual-exchange liquidity (GMX v1 style)."""

    PRICE_PRECISION = 10**30
    BASIS_POINTS_DIVISOR = 10_000
    USDG_DECIMALS = 18

    address: str

    @abstractmethod
    def is_swap_enabled(self) -> bool: ...

    @abstractmethod
    def whitelisted_tokens(self, token: str) -> bool: ...

    @abstractmethod
    def all_whitelisted_tokens_length(self) -> int: ...

    @abstractmethod
    def all_whitelisted_tokens(self, index: int) -> str: ...

    @abstractmethod
    def token_decimals(self, token: str) -> int: ...

    @abstractmethod
    def get_min_price(self, token: str) -> int: ...

    @abstractmethod
    def get_max_price(self, token: str) -> int: ...

    @abstractmethod
    def pool_amounts(self, token: str) -> int: ...

    @abstractmethod
    def reserved_amounts(self, token: str) -> int: ...

    @abstractmethod
    def buffer_amounts(self, token: str) -> int: ...

    @abstractmethod
    def usdg_amounts(self, token: str) -> int: ...

    @abstractmethod
    def max_usdg_amounts(self, token: str) -> int: ...

    @abstractmethod
    def get_swap_fee_basis_points(self, token_in: str, token_out: str, usdg_amount: int) -> int: ...

    @abstractmethod
    def swap(self, sender: str, token_in: str, token_out: str, receiver: str) -> int:
        """Swaps whatever tokenIn balance was transferred in beforehand; returns amount paid out."""
        ...
