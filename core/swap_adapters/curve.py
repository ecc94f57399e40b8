from __future__ import annotations

from typing import List, Optional, Tuple

from core.domain.enums.adapter_enums import AdapterKind, CurveIndexType
from core.domain.protocols.chain_interface import ChainInterface
from core.domain.protocols.token_interface import LendingTokenInterface
from core.services.exceptions import ContractRevertError
from core.swap_adapters.base import Route, SwapAdapter
from core.swap_adapters.corrections import QuoteCorrection, UnitCorrection
from core.swap_adapters.token_resolver import TokenIndexMap

CURVE_PLAIN_GAS_ESTIMATE = 230_000
CURVE_UNDERLYING_GAS_ESTIMATE = 330_000
CURVELIKE_GAS_ESTIMATE = 240_000

# Saddle pools hold at most 32 tokens
CURVELIKE_MAX_TOKENS = 32

EXCHANGE_RATE_SCALE = 10**18


class CurvePlainAdapter(SwapAdapter):
    """
    StableSwap pool traded through its own coins. Slots are coin indices,
    enumerated once up to `token_count`.

    Defaults to a one-unit correction: StableSwap `get_dy` and `exchange`
    round in different directions on most deployments.
    """

    kind = AdapterKind.CURVE_PLAIN

    def __init__(
        self,
        chain: ChainInterface,
        name: str,
        pool: str,
        token_count: int,
        gas_estimate: int = CURVE_PLAIN_GAS_ESTIMATE,
        correction: Optional[QuoteCorrection] = None,
        index_type: CurveIndexType = CurveIndexType.INT128,
        address: Optional[str] = None,
    ):
        super().__init__(chain, name, pool, gas_estimate, correction or UnitCorrection(), address)
        self.token_count = int(token_count)
        self.index_type = CurveIndexType(index_type)
        self._pool = chain.curve_pool(self.pool, self.index_type)
        self._coins = TokenIndexMap.enumerate(self._pool.coins, self.token_count)

    def pool_tokens(self) -> List[str]:
        return self._coins.coins

    def _resolve(self, token: str) -> Optional[int]:
        return self._coins.resolve(token)

    def _quote(self, amount_in: int, route: Route) -> int:
        return self.correction.apply(self._pool.get_dy(route.slot_from, route.slot_to, amount_in))

    def _execute(self, amount_in: int, route: Route) -> None:
        self._ensure_allowance(route.token_from, self._pool.address, amount_in)
        self._pool.exchange(self.address, route.slot_from, route.slot_to, amount_in, 0)


class CurveUnderlyingAdapter(SwapAdapter):
    """
    StableSwap pool whose coins are lending (wrapped) tokens, traded in
    terms of their underlying assets.

    Only the underlying tokens are pool tokens here; each resolves to
    `(coin index, lending token)`. The wrap/unwrap step happens on the
    adapter so callers only ever see underlying amounts:

        quote = unwrap(correction(get_dy(i, j, wrap(amount_in))))
        wrap(x) = x * 1e18 // rate_in,  unwrap(w) = w * rate_out // 1e18
    """

    kind = AdapterKind.CURVE_UNDERLYING

    def __init__(
        self,
        chain: ChainInterface,
        name: str,
        pool: str,
        token_count: int,
        gas_estimate: int = CURVE_UNDERLYING_GAS_ESTIMATE,
        correction: Optional[QuoteCorrection] = None,
        index_type: CurveIndexType = CurveIndexType.INT128,
        address: Optional[str] = None,
    ):
        super().__init__(chain, name, pool, gas_estimate, correction or UnitCorrection(), address)
        self.token_count = int(token_count)
        self.index_type = CurveIndexType(index_type)
        self._pool = chain.curve_pool(self.pool, self.index_type)

        wrapped = TokenIndexMap.enumerate(self._pool.coins, self.token_count).coins
        lending = [chain.lending_token(w) for w in wrapped]
        self._underlying: TokenIndexMap[Tuple[int, LendingTokenInterface]] = TokenIndexMap(
            [lt.underlying() for lt in lending],
            slots=list(enumerate(lending)),
        )

    def pool_tokens(self) -> List[str]:
        return self._underlying.coins

    def _resolve(self, token: str) -> Optional[Tuple[int, LendingTokenInterface]]:
        return self._underlying.resolve(token)

    def _quote(self, amount_in: int, route: Route) -> int:
        i, wrapped_in = route.slot_from
        j, wrapped_out = route.slot_to
        rate_in = wrapped_in.exchange_rate_stored()
        rate_out = wrapped_out.exchange_rate_stored()

        dx = amount_in * EXCHANGE_RATE_SCALE // rate_in
        if dx == 0:
            return 0
        dy = self.correction.apply(self._pool.get_dy(i, j, dx))
        return dy * rate_out // EXCHANGE_RATE_SCALE

    def _execute(self, amount_in: int, route: Route) -> None:
        i, wrapped_in = route.slot_from
        j, wrapped_out = route.slot_to

        self._ensure_allowance(route.token_from, wrapped_in.address, amount_in)
        dx = wrapped_in.mint(self.address, amount_in)

        self._ensure_allowance(wrapped_in.address, self._pool.address, dx)
        dy = self._pool.exchange(self.address, i, j, dx, 0)

        wrapped_out.redeem(self.address, dy)


class CurveLikeAdapter(SwapAdapter):
    """
    Saddle-style StableSwap pool (`getToken` / `calculateSwap` / `swap`).

    The token list is read once: up to `token_count` when given (registered
    adapters carry the checked count), otherwise until `getToken` reverts.
    `calculateSwap` and `swap` share one pricing path, so no correction is
    applied by default. A paused pool, or one whose `calculateSwap` reverts,
    quotes 0.
    """

    kind = AdapterKind.CURVELIKE

    def __init__(
        self,
        chain: ChainInterface,
        name: str,
        pool: str,
        token_count: Optional[int] = None,
        gas_estimate: int = CURVELIKE_GAS_ESTIMATE,
        correction: Optional[QuoteCorrection] = None,
        address: Optional[str] = None,
    ):
        super().__init__(chain, name, pool, gas_estimate, correction, address)
        self._pool = chain.curvelike_pool(self.pool)
        if token_count is None:
            self._tokens = TokenIndexMap.discover(self._pool.get_token, CURVELIKE_MAX_TOKENS)
        else:
            self._tokens = TokenIndexMap.enumerate(self._pool.get_token, token_count)
        self.token_count = len(self._tokens)

    def pool_tokens(self) -> List[str]:
        return self._tokens.coins

    def _resolve(self, token: str) -> Optional[int]:
        return self._tokens.resolve(token)

    def _quote(self, amount_in: int, route: Route) -> int:
        if self._pool.paused():
            return 0
        try:
            dy = self._pool.calculate_swap(route.slot_from, route.slot_to, amount_in)
        except ContractRevertError:
            return 0
        return self.correction.apply(dy)

    def _execute(self, amount_in: int, route: Route) -> None:
        self._ensure_allowance(route.token_from, self._pool.address, amount_in)
        self._pool.swap(self.address, route.slot_from, route.slot_to, amount_in, 0)
