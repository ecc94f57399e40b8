from __future__ import annotations

from typing import Optional, Tuple

from adapters.chain.local.chain import LocalChain
from adapters.chain.local.erc20 import ERC20Token
from core.domain.protocols.pool_interfaces import UnilikeFactoryInterface, UnilikePairInterface
from core.services.exceptions import ContractRevertError
from core.services.normalize import ZERO_ADDRESS, _norm_lower, _require_uint256


def sort_tokens(token_a: str, token_b: str) -> Tuple[str, str]:
    if _norm_lower(token_a) == _norm_lower(token_b):
        raise ValueError("IDENTICAL_ADDRESSES")
    if int(token_a, 16) < int(token_b, 16):
        return token_a, token_b
    return token_b, token_a


class UnilikePair(UnilikePairInterface):
    """
    Constant-product pair. `fee` is charged on input, in per-mille (3 -> 0.3%).
    """

    def __init__(
        self,
        chain: LocalChain,
        token_a: ERC20Token,
        token_b: ERC20Token,
        fee: int = 3,
        address: Optional[str] = None,
    ):
        first, _ = sort_tokens(token_a.address, token_b.address)
        if first == token_a.address:
            self._token0, self._token1 = token_a, token_b
        else:
            self._token0, self._token1 = token_b, token_a
        self.chain = chain
        self.fee = int(fee)
        self.address = chain.register(self, address)

    def _revert(self, reason: str) -> None:
        raise ContractRevertError(f"UnilikePair({self.address})", reason)

    def token0(self) -> str:
        self.chain.external_call()
        return self._token0.address

    def token1(self) -> str:
        self.chain.external_call()
        return self._token1.address

    def get_reserves(self) -> Tuple[int, int]:
        self.chain.external_call()
        r0 = int(self.chain.sload(self.address, "reserve0"))
        r1 = int(self.chain.sload(self.address, "reserve1"))
        return r0, r1

    def sync(self) -> None:
        """
        Force reserves to match balances (used after seeding liquidity).
        """
        self.chain.sstore(self.address, "reserve0", self._token0.balance_of(self.address))
        self.chain.sstore(self.address, "reserve1", self._token1.balance_of(self.address))

    def swap(self, sender: str, amount0_out: int, amount1_out: int, to: str) -> None:
        self.chain.external_call()
        amount0_out = _require_uint256("amount0_out", amount0_out)
        amount1_out = _require_uint256("amount1_out", amount1_out)
        if amount0_out == 0 and amount1_out == 0:
            self._revert("INSUFFICIENT_OUTPUT_AMOUNT")

        r0 = int(self.chain.sload(self.address, "reserve0"))
        r1 = int(self.chain.sload(self.address, "reserve1"))
        if amount0_out >= r0 or amount1_out >= r1:
            self._revert("INSUFFICIENT_LIQUIDITY")
        if _norm_lower(to) in (_norm_lower(self._token0.address), _norm_lower(self._token1.address)):
            self._revert("INVALID_TO")

        if amount0_out:
            self._token0.transfer(self.address, to, amount0_out)
        if amount1_out:
            self._token1.transfer(self.address, to, amount1_out)

        b0 = self._token0.balance_of(self.address)
        b1 = self._token1.balance_of(self.address)
        in0 = b0 - (r0 - amount0_out) if b0 > r0 - amount0_out else 0
        in1 = b1 - (r1 - amount1_out) if b1 > r1 - amount1_out else 0
        if in0 == 0 and in1 == 0:
            self._revert("INSUFFICIENT_INPUT_AMOUNT")

        adj0 = b0 * 1000 - in0 * self.fee
        adj1 = b1 * 1000 - in1 * self.fee
        if adj0 * adj1 < r0 * r1 * 1000**2:
            self._revert("K")

        self.chain.sstore(self.address, "reserve0", b0)
        self.chain.sstore(self.address, "reserve1", b1)


class UnilikeFactory(UnilikeFactoryInterface):
    def __init__(self, chain: LocalChain, fee: int = 3, address: Optional[str] = None):
        self.chain = chain
        self.fee = int(fee)
        self.address = chain.register(self, address)

    def create_pair(self, token_a: ERC20Token, token_b: ERC20Token) -> UnilikePair:
        key = tuple(_norm_lower(a) for a in sort_tokens(token_a.address, token_b.address))
        if self.chain.sload(self.address, ("pair",) + key, ZERO_ADDRESS) != ZERO_ADDRESS:
            raise ContractRevertError(f"UnilikeFactory({self.address})", "PAIR_EXISTS")

        pair = UnilikePair(self.chain, token_a, token_b, fee=self.fee)
        self.chain.sstore(self.address, ("pair",) + key, pair.address)
        n = int(self.chain.sload(self.address, "all_pairs_length"))
        self.chain.sstore(self.address, ("all_pairs", n), pair.address)
        self.chain.sstore(self.address, "all_pairs_length", n + 1)
        return pair

    def get_pair(self, token_a: str, token_b: str) -> str:
        self.chain.external_call()
        if _norm_lower(token_a) == _norm_lower(token_b):
            return ZERO_ADDRESS
        key = tuple(_norm_lower(a) for a in sort_tokens(token_a, token_b))
        return self.chain.sload(self.address, ("pair",) + key, ZERO_ADDRESS)

    def pair_at(self, address: str) -> UnilikePair:
        return self.chain.contract_at(address)

    def all_pairs_length(self) -> int:
        self.chain.external_call()
        return int(self.chain.sload(self.address, "all_pairs_length"))

    def all_pairs(self, index: int) -> str:
        self.chain.external_call()
        n = int(self.chain.sload(self.address, "all_pairs_length"))
        if not 0 <= int(index) < n:
            raise ContractRevertError(f"UnilikeFactory({self.address})", "index out of range")
        return self.chain.sload(self.address, ("all_pairs", int(index)), ZERO_ADDRESS)
