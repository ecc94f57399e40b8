from __future__ import annotations

from typing import List, Optional

from web3 import Web3

from core.domain.enums.adapter_enums import AdapterKind
from core.domain.protocols.chain_interface import ChainInterface
from core.services.normalize import ZERO_ADDRESS, _norm_lower
from core.swap_adapters.base import Route, SwapAdapter
from core.swap_adapters.token_resolver import TokenIndexMap

UNILIKE_GAS_ESTIMATE = 150_000
UNILIKE_FACTORY_GAS_ESTIMATE = 160_000


def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int, fee: int) -> int:
    """
    Constant-product output with the fee charged on input (fee in per-mille).
    """
    if amount_in == 0 or reserve_in == 0 or reserve_out == 0:
        return 0
    amount_in_with_fee = amount_in * (1000 - fee)
    return amount_in_with_fee * reserve_out // (reserve_in * 1000 + amount_in_with_fee)


def _is_address(token: object) -> bool:
    return isinstance(token, str) and Web3.is_address(token.strip())


def _check_fee(fee: int) -> int:
    fee = int(fee)
    if not 0 <= fee < 1000:
        raise ValueError("fee must be within [0, 1000) per-mille")
    return fee


class UnilikeAdapter(SwapAdapter):
    """
    Adapter bound to one constant-product pair. Slots are the pair sides (0/1).
    """

    kind = AdapterKind.UNILIKE

    def __init__(
        self,
        chain: ChainInterface,
        name: str,
        pool: str,
        fee: int = 3,
        gas_estimate: int = UNILIKE_GAS_ESTIMATE,
        address: Optional[str] = None,
    ):
        super().__init__(chain, name, pool, gas_estimate, address=address)
        self.fee = _check_fee(fee)
        self._pair = chain.unilike_pair(self.pool)
        self._sides = TokenIndexMap([self._pair.token0(), self._pair.token1()])

    def pool_tokens(self) -> List[str]:
        return self._sides.coins

    def _resolve(self, token: str) -> Optional[int]:
        return self._sides.resolve(token)

    def _quote(self, amount_in: int, route: Route) -> int:
        reserves = self._pair.get_reserves()
        raw = get_amount_out(amount_in, reserves[route.slot_from], reserves[route.slot_to], self.fee)
        return self.correction.apply(raw)

    def _execute(self, amount_in: int, route: Route) -> None:
        amount_out = self._quote(amount_in, route)
        self.chain.token(route.token_from).transfer(self.address, self._pair.address, amount_in)
        if route.slot_to == 0:
            self._pair.swap(self.address, amount_out, 0, self.address)
        else:
            self._pair.swap(self.address, 0, amount_out, self.address)


class UnilikeFactoryAdapter(SwapAdapter):
    """
    Adapter bound to a constant-product factory; the pair is looked up per
    call and a missing pair (zero address) means unsupported.
    """

    kind = AdapterKind.UNILIKE_FACTORY

    def __init__(
        self,
        chain: ChainInterface,
        name: str,
        pool: str,
        fee: int = 3,
        gas_estimate: int = UNILIKE_FACTORY_GAS_ESTIMATE,
        address: Optional[str] = None,
    ):
        super().__init__(chain, name, pool, gas_estimate, address=address)
        self.fee = _check_fee(fee)
        self._factory = chain.unilike_factory(self.pool)

    def is_pool_token(self, token: str) -> bool:
        """
        Scans every pair the factory has created: one `allPairs` lookup plus
        both side reads per pair. On a live factory that is three RPC round
        trips per pair, so prefer `query` against a known counterpart token
        when serving untrusted traffic.
        """
        target = _norm_lower(token)
        with self.chain.static_frame():
            for i in range(self._factory.all_pairs_length()):
                pair = self._factory.pair_at(self._factory.all_pairs(i))
                if target in (_norm_lower(pair.token0()), _norm_lower(pair.token1())):
                    return True
        return False

    def _resolve(self, token: str) -> Optional[int]:
        # sides only exist relative to a counterpart token, see _resolve_pair
        return None

    def _resolve_pair(self, token_from: str, token_to: str) -> Optional[Route]:
        if not (_is_address(token_from) and _is_address(token_to)):
            return None
        if _norm_lower(token_from) == _norm_lower(token_to):
            return None
        pair_address = self._factory.get_pair(token_from, token_to)
        if _norm_lower(pair_address) == ZERO_ADDRESS:
            return None
        # token0 is the lower address
        side_from = 0 if int(token_from, 16) < int(token_to, 16) else 1
        pair = self._factory.pair_at(pair_address)
        return Route(token_from, token_to, (pair, side_from), 1 - side_from)

    def _quote(self, amount_in: int, route: Route) -> int:
        pair, side_from = route.slot_from
        reserves = pair.get_reserves()
        raw = get_amount_out(amount_in, reserves[side_from], reserves[route.slot_to], self.fee)
        return self.correction.apply(raw)

    def _execute(self, amount_in: int, route: Route) -> None:
        pair, _ = route.slot_from
        amount_out = self._quote(amount_in, route)
        self.chain.token(route.token_from).transfer(self.address, pair.address, amount_in)
        if route.slot_to == 0:
            pair.swap(self.address, amount_out, 0, self.address)
        else:
            pair.swap(self.address, 0, amount_out, self.address)
