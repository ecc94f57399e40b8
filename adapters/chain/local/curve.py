"""
StableSwap pools on the local ledger.

The invariant math follows Curve's StableSwap (get_D / get_y with raw A and
N**N folded into Ann). Balances are kept in native coin units and scaled to
18 decimals (`xp`) for the math.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from adapters.chain.local.chain import LocalChain
from adapters.chain.local.erc20 import ERC20Token
from core.domain.protocols.pool_interfaces import CurveLikePoolInterface, CurvePoolInterface
from core.services.exceptions import ContractRevertError
from core.services.normalize import _require_uint256

FEE_DENOMINATOR = 10**10
MAX_ITERATIONS = 255

# Flat charge for one invariant evaluation (get_D + get_y).
STABLESWAP_MATH_GAS = 40_000


def get_D(xp: Sequence[int], amp: int) -> int:
    n = len(xp)
    s = sum(xp)
    if s == 0:
        return 0
    d = s
    ann = amp * n
    for _ in range(MAX_ITERATIONS):
        d_p = d
        for x in xp:
            d_p = d_p * d // (x * n)
        d_prev = d
        d = (ann * s + d_p * n) * d // ((ann - 1) * d + (n + 1) * d_p)
        if abs(d - d_prev) <= 1:
            return d
    raise ContractRevertError("StableSwap", "D did not converge")


def get_y(i: int, j: int, x: int, xp: Sequence[int], amp: int) -> int:
    """
    Balance of coin j that keeps D constant once coin i is set to `x`.
    """
    n = len(xp)
    d = get_D(xp, amp)
    ann = amp * n
    c = d
    s = 0
    for k in range(n):
        if k == i:
            xk = x
        elif k != j:
            xk = xp[k]
        else:
            continue
        s += xk
        c = c * d // (xk * n)
    c = c * d // (ann * n)
    b = s + d // ann

    y = d
    for _ in range(MAX_ITERATIONS):
        y_prev = y
        y = (y * y + c) // (2 * y + b - d)
        if abs(y - y_prev) <= 1:
            return y
    raise ContractRevertError("StableSwap", "y did not converge")


class StableSwapPool:
    """
    StableSwap balances and pricing shared by the Curve and Saddle-style
    pools; the subclasses only differ in their external ABI.

    `fee` uses a 1e10 denominator (4_000_000 == 4bps).
    `settlement_rounding` is the number of raw output units a swap nets
    below the quote for the same state (Curve pools whose pricing and
    settlement round in different directions report one unit too many).
    """

    def __init__(
        self,
        chain: LocalChain,
        coins: Sequence[ERC20Token],
        amp: int = 200,
        fee: int = 4_000_000,
        settlement_rounding: int = 1,
        address: Optional[str] = None,
    ):
        if len(coins) < 2:
            raise ValueError("StableSwap pool needs at least 2 coins")
        self.chain = chain
        self._coins: List[ERC20Token] = list(coins)
        self._mul = [10 ** (18 - c._decimals) for c in self._coins]
        self.n_coins = len(self._coins)
        self.amp = int(amp)
        self.fee = int(fee)
        self.settlement_rounding = int(settlement_rounding)
        self.address = chain.register(self, address)

    def _revert(self, reason: str) -> None:
        raise ContractRevertError(f"{type(self).__name__}({self.address})", reason)

    def _check_indices(self, i: int, j: int) -> None:
        if i == j:
            self._revert("same coin")
        if not (0 <= i < self.n_coins and 0 <= j < self.n_coins):
            self._revert("coin index out of range")

    def _balances(self) -> List[int]:
        return [int(self.chain.sload(self.address, ("balance", k))) for k in range(self.n_coins)]

    def _xp(self, balances: Sequence[int]) -> List[int]:
        return [b * m for b, m in zip(balances, self._mul)]

    def _fee_rate(self, i: int, j: int, xp: Sequence[int], x: int, y: int, settling: bool) -> int:
        return self.fee

    def _calc_dy(self, i: int, j: int, dx: int, balances: Sequence[int], settling: bool) -> int:
        self.chain.charge(STABLESWAP_MATH_GAS)
        xp = self._xp(balances)
        if any(v == 0 for v in xp):
            self._revert("empty pool")
        x = xp[i] + dx * self._mul[i]
        y = get_y(i, j, x, xp, self.amp)
        dy = xp[j] - y - 1
        if dy < 0:
            self._revert("dy underflow")
        fee = self._fee_rate(i, j, xp, x, y, settling) * dy // FEE_DENOMINATOR
        return (dy - fee) // self._mul[j]

    def _quote(self, i: int, j: int, dx: int) -> int:
        i, j, dx = int(i), int(j), _require_uint256("dx", dx)
        self._check_indices(i, j)
        return self._calc_dy(i, j, dx, self._balances(), settling=False)

    def _settle(self, sender: str, i: int, j: int, dx: int, min_dy: int, reason: str) -> int:
        i, j, dx = int(i), int(j), _require_uint256("dx", dx)
        self._check_indices(i, j)
        balances = self._balances()

        dy = self._calc_dy(i, j, dx, balances, settling=True) - self.settlement_rounding
        if dy <= 0 or dy < int(min_dy):
            self._revert(reason)

        self._coins[i].transfer_from(self.address, sender, self.address, dx)
        self._coins[j].transfer(self.address, sender, dy)
        self.chain.sstore(self.address, ("balance", i), balances[i] + dx)
        self.chain.sstore(self.address, ("balance", j), balances[j] - dy)
        return dy

    def _coin_at(self, index: int) -> str:
        if not 0 <= int(index) < self.n_coins:
            self._revert("coin index out of range")
        return self._coins[int(index)].address

    def add_liquidity(self, sender: str, amounts: Sequence[int]) -> None:
        """
        Seed balances from `sender` (no LP token is issued).
        """
        if len(amounts) != self.n_coins:
            raise ValueError("amounts length must match coin count")
        for k, amount in enumerate(amounts):
            if int(amount) == 0:
                continue
            self._coins[k].transfer_from(self.address, sender, self.address, int(amount))
            bal = int(self.chain.sload(self.address, ("balance", k)))
            self.chain.sstore(self.address, ("balance", k), bal + int(amount))


class CurvePool(StableSwapPool, CurvePoolInterface):
    """
    Plain Curve StableSwap pool (`coins` / `get_dy` / `exchange`).
    """

    # ---------- views ----------

    def coins(self, index: int) -> str:
        self.chain.external_call()
        return self._coin_at(index)

    def balances(self, index: int) -> int:
        self.chain.external_call()
        if not 0 <= int(index) < self.n_coins:
            self._revert("coin index out of range")
        return int(self.chain.sload(self.address, ("balance", int(index))))

    def get_dy(self, i: int, j: int, dx: int) -> int:
        self.chain.external_call()
        return self._quote(i, j, dx)

    # ---------- writes ----------

    def exchange(self, sender: str, i: int, j: int, dx: int, min_dy: int) -> int:
        self.chain.external_call()
        return self._settle(sender, i, j, dx, min_dy, "Exchange resulted in fewer coins than expected")


class CurveDynamicFeePool(CurvePool):
    """
    StableSwap pool with Curve's off-peg dynamic fee.

    `get_dy` prices the fee on the pre-trade balances of coins i and j, while
    `exchange` prices it on the midpoint between pre- and post-trade balances.
    For trades that push the pool away from peg, settlement nets slightly less
    than the quote.
    """

    def __init__(
        self,
        chain: LocalChain,
        coins: Sequence[ERC20Token],
        amp: int = 200,
        fee: int = 1_000_000,
        offpeg_fee_multiplier: int = 2 * FEE_DENOMINATOR,
        settlement_rounding: int = 0,
        address: Optional[str] = None,
    ):
        super().__init__(
            chain,
            coins,
            amp=amp,
            fee=fee,
            settlement_rounding=settlement_rounding,
            address=address,
        )
        self.offpeg_fee_multiplier = int(offpeg_fee_multiplier)

    def _dynamic_fee(self, xpi: int, xpj: int) -> int:
        feemul = self.offpeg_fee_multiplier
        if feemul <= FEE_DENOMINATOR:
            return self.fee
        xps2 = (xpi + xpj) ** 2
        return feemul * self.fee // ((feemul - FEE_DENOMINATOR) * 4 * xpi * xpj // xps2 + FEE_DENOMINATOR)

    def _fee_rate(self, i: int, j: int, xp: Sequence[int], x: int, y: int, settling: bool) -> int:
        if settling:
            return self._dynamic_fee((xp[i] + x) // 2, (xp[j] + y) // 2)
        return self._dynamic_fee(xp[i], xp[j])


class CurveLikePool(StableSwapPool, CurveLikePoolInterface):
    """
    Saddle-style StableSwap pool (`getToken` / `calculateSwap` / `swap`).

    Same invariant as Curve, but `calculateSwap` and `swap` price identically
    (no settlement rounding) and the pool can be paused, which blocks `swap`
    while `calculateSwap` keeps answering.
    """

    def __init__(
        self,
        chain: LocalChain,
        coins: Sequence[ERC20Token],
        amp: int = 200,
        fee: int = 4_000_000,
        address: Optional[str] = None,
    ):
        super().__init__(chain, coins, amp=amp, fee=fee, settlement_rounding=0, address=address)

    # ---------- views ----------

    def get_token(self, index: int) -> str:
        self.chain.external_call()
        if not 0 <= int(index) < self.n_coins:
            self._revert("Out of range")
        return self._coins[int(index)].address

    def paused(self) -> bool:
        self.chain.external_call()
        return bool(self.chain.sload(self.address, "paused", False))

    def calculate_swap(self, i: int, j: int, dx: int) -> int:
        self.chain.external_call()
        return self._quote(i, j, dx)

    # ---------- writes ----------

    def swap(self, sender: str, i: int, j: int, dx: int, min_dy: int) -> int:
        self.chain.external_call()
        if self.chain.sload(self.address, "paused", False):
            self._revert("Pausable: paused")
        return self._settle(sender, i, j, dx, min_dy, "Swap didn't result in min tokens")

    def set_paused(self, paused: bool) -> None:
        self.chain.sstore(self.address, "paused", bool(paused))
