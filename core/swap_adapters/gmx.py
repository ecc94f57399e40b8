from __future__ import annotations

from typing import List, Optional

from core.domain.enums.adapter_enums import AdapterKind
from core.domain.protocols.chain_interface import ChainInterface
from core.swap_adapters.base import Route, SwapAdapter

GMX_GAS_ESTIMATE = 330_000


def adjust_for_decimals(amount: int, decimals_div: int, decimals_mul: int) -> int:
    return amount * 10**decimals_mul // 10**decimals_div


class GmxAdapter(SwapAdapter):
    """
    Adapter over a GMX-style vault.

    The whitelist is vault state, so resolution re-reads it on every call.
    The quote replays the vault's swap pricing (min price in / max price out,
    dynamic fee on the USDG value) and returns 0 where the vault would reject
    the swap.
    """

    kind = AdapterKind.GMX

    def __init__(
        self,
        chain: ChainInterface,
        name: str,
        pool: str,
        gas_estimate: int = GMX_GAS_ESTIMATE,
        address: Optional[str] = None,
    ):
        super().__init__(chain, name, pool, gas_estimate, address=address)
        self._vault = chain.gmx_vault(self.pool)

    def pool_tokens(self) -> List[str]:
        with self.chain.static_frame():
            n = self._vault.all_whitelisted_tokens_length()
            return [self._vault.all_whitelisted_tokens(i) for i in range(n)]

    def _resolve(self, token: str) -> Optional[str]:
        return token if self._vault.whitelisted_tokens(token) else None

    def _quote(self, amount_in: int, route: Route) -> int:
        vault = self._vault
        token_in, token_out = route.token_from, route.token_to
        if not vault.is_swap_enabled():
            return 0

        price_in = vault.get_min_price(token_in)
        price_out = vault.get_max_price(token_out)
        dec_in = vault.token_decimals(token_in)
        dec_out = vault.token_decimals(token_out)
        if price_in == 0 or price_out == 0:
            return 0

        amount_out = adjust_for_decimals(amount_in * price_in // price_out, dec_in, dec_out)
        usdg_amount = adjust_for_decimals(
            amount_in * price_in // vault.PRICE_PRECISION, dec_in, vault.USDG_DECIMALS
        )
        fee_bps = vault.get_swap_fee_basis_points(token_in, token_out, usdg_amount)
        after_fees = amount_out * (vault.BASIS_POINTS_DIVISOR - fee_bps) // vault.BASIS_POINTS_DIVISOR

        pool_out = vault.pool_amounts(token_out)
        reserved_out = vault.reserved_amounts(token_out)
        buffer_out = vault.buffer_amounts(token_out)
        if pool_out < amount_out or reserved_out > pool_out - amount_out or pool_out - amount_out < buffer_out:
            return 0

        usdg_in = vault.usdg_amounts(token_in)
        max_usdg_in = vault.max_usdg_amounts(token_in)
        if max_usdg_in and usdg_in + usdg_amount > max_usdg_in:
            return 0

        return self.correction.apply(after_fees)

    def _execute(self, amount_in: int, route: Route) -> None:
        self.chain.token(route.token_from).transfer(self.address, self._vault.address, amount_in)
        self._vault.swap(self.address, route.token_from, route.token_to, self.address)
