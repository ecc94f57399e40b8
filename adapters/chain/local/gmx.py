"""
GMX v1 style vault on the local ledger (swap path only).

Per-token slots: whitelisted, decimals, stable, min_price, max_price, pool,
reserved, buffer, usdg, max_usdg, weight, token_balance, fee_reserve.
Globals: swap_enabled, has_dynamic_fees, usdg_supply, total_weights, fee
parameters and the whitelist enumeration.
"""

from __future__ import annotations

from typing import Optional

from adapters.chain.local.chain import LocalChain
from adapters.chain.local.erc20 import ERC20Token
from core.domain.protocols.pool_interfaces import GmxVaultInterface
from core.services.exceptions import ContractRevertError
from core.services.normalize import _norm_lower


class GmxVault(GmxVaultInterface):
    def __init__(
        self,
        chain: LocalChain,
        swap_fee_bps: int = 30,
        stable_swap_fee_bps: int = 4,
        tax_bps: int = 50,
        stable_tax_bps: int = 20,
        has_dynamic_fees: bool = True,
        address: Optional[str] = None,
    ):
        self.chain = chain
        self.address = chain.register(self, address)
        self._tokens = {}
        chain.sstore(self.address, "swap_enabled", True)
        chain.sstore(self.address, "has_dynamic_fees", bool(has_dynamic_fees))
        chain.sstore(self.address, "swap_fee_bps", int(swap_fee_bps))
        chain.sstore(self.address, "stable_swap_fee_bps", int(stable_swap_fee_bps))
        chain.sstore(self.address, "tax_bps", int(tax_bps))
        chain.sstore(self.address, "stable_tax_bps", int(stable_tax_bps))

    def _revert(self, reason: str) -> None:
        raise ContractRevertError(f"GmxVault({self.address})", reason)

    def _get(self, field: str, token: str, default=0):
        return self.chain.sload(self.address, (field, _norm_lower(token)), default)

    def _set(self, field: str, token: str, value) -> None:
        self.chain.sstore(self.address, (field, _norm_lower(token)), value)

    # ---------- governance / harness ----------

    def set_token_config(
        self,
        token: ERC20Token,
        weight: int,
        is_stable: bool = False,
        max_usdg_amount: int = 0,
        buffer_amount: int = 0,
    ) -> None:
        if not self._get("whitelisted", token.address, False):
            n = int(self.chain.sload(self.address, "whitelist_length"))
            self.chain.sstore(self.address, ("whitelist", n), token.address)
            self.chain.sstore(self.address, "whitelist_length", n + 1)
        self._tokens[_norm_lower(token.address)] = token

        total = int(self.chain.sload(self.address, "total_weights"))
        total = total - int(self._get("weight", token.address)) + int(weight)
        self.chain.sstore(self.address, "total_weights", total)

        self._set("whitelisted", token.address, True)
        self._set("decimals", token.address, token._decimals)
        self._set("stable", token.address, bool(is_stable))
        self._set("weight", token.address, int(weight))
        self._set("max_usdg", token.address, int(max_usdg_amount))
        self._set("buffer", token.address, int(buffer_amount))

    def set_price(self, token: str, min_price: int, max_price: Optional[int] = None) -> None:
        """Prices are USD with 30 decimals."""
        self._set("min_price", token, int(min_price))
        self._set("max_price", token, int(max_price if max_price is not None else min_price))

    def set_is_swap_enabled(self, enabled: bool) -> None:
        self.chain.sstore(self.address, "swap_enabled", bool(enabled))

    def set_reserved_amount(self, token: str, amount: int) -> None:
        self._set("reserved", token, int(amount))

    def set_buffer_amount(self, token: str, amount: int) -> None:
        self._set("buffer", token, int(amount))

    def set_max_usdg_amount(self, token: str, amount: int) -> None:
        self._set("max_usdg", token, int(amount))

    def direct_pool_deposit(self, sender: str, token: str, amount: int) -> None:
        """
        Add liquidity from `sender` and book its USDG value as vault debt,
        the way buyUSDG would (without minting or fees).
        """
        erc20 = self._tokens[_norm_lower(token)]
        erc20.transfer(sender, self.address, int(amount))
        self._set("token_balance", token, erc20.balance_of(self.address))
        self._set("pool", token, int(self._get("pool", token)) + int(amount))

        price = int(self._get("min_price", token))
        usdg = self._adjust_for_decimals(
            int(amount) * price // self.PRICE_PRECISION,
            int(self._get("decimals", token)),
            self.USDG_DECIMALS,
        )
        self._set("usdg", token, int(self._get("usdg", token)) + usdg)
        supply = int(self.chain.sload(self.address, "usdg_supply"))
        self.chain.sstore(self.address, "usdg_supply", supply + usdg)

    # ---------- views ----------

    def is_swap_enabled(self) -> bool:
        self.chain.external_call()
        return bool(self.chain.sload(self.address, "swap_enabled", False))

    def whitelisted_tokens(self, token: str) -> bool:
        self.chain.external_call()
        return bool(self._get("whitelisted", token, False))

    def all_whitelisted_tokens_length(self) -> int:
        self.chain.external_call()
        return int(self.chain.sload(self.address, "whitelist_length"))

    def all_whitelisted_tokens(self, index: int) -> str:
        self.chain.external_call()
        n = int(self.chain.sload(self.address, "whitelist_length"))
        if not 0 <= int(index) < n:
            self._revert("index out of range")
        return self.chain.sload(self.address, ("whitelist", int(index)))

    def token_decimals(self, token: str) -> int:
        self.chain.external_call()
        return int(self._get("decimals", token))

    def get_min_price(self, token: str) -> int:
        self.chain.external_call()
        return int(self._get("min_price", token))

    def get_max_price(self, token: str) -> int:
        self.chain.external_call()
        return int(self._get("max_price", token))

    def pool_amounts(self, token: str) -> int:
        self.chain.external_call()
        return int(self._get("pool", token))

    def reserved_amounts(self, token: str) -> int:
        self.chain.external_call()
        return int(self._get("reserved", token))

    def buffer_amounts(self, token: str) -> int:
        self.chain.external_call()
        return int(self._get("buffer", token))

    def usdg_amounts(self, token: str) -> int:
        self.chain.external_call()
        return int(self._get("usdg", token))

    def max_usdg_amounts(self, token: str) -> int:
        self.chain.external_call()
        return int(self._get("max_usdg", token))

    def fee_reserves(self, token: str) -> int:
        self.chain.external_call()
        return int(self._get("fee_reserve", token))

    def get_swap_fee_basis_points(self, token_in: str, token_out: str, usdg_amount: int) -> int:
        self.chain.external_call()
        return self._swap_fee_bps(token_in, token_out, int(usdg_amount))

    # ---------- fee model ----------

    @staticmethod
    def _adjust_for_decimals(amount: int, decimals_div: int, decimals_mul: int) -> int:
        return amount * 10**decimals_mul // 10**decimals_div

    def _swap_fee_bps(self, token_in: str, token_out: str, usdg_amount: int) -> int:
        stable_in = bool(self._get("stable", token_in, False))
        stable_out = bool(self._get("stable", token_out, False))
        is_stable_swap = stable_in and stable_out
        if is_stable_swap:
            base_bps = int(self.chain.sload(self.address, "stable_swap_fee_bps"))
            tax_bps = int(self.chain.sload(self.address, "stable_tax_bps"))
        else:
            base_bps = int(self.chain.sload(self.address, "swap_fee_bps"))
            tax_bps = int(self.chain.sload(self.address, "tax_bps"))

        if not self.chain.sload(self.address, "has_dynamic_fees", False):
            return base_bps

        bps_in = self._fee_bps(token_in, usdg_amount, base_bps, tax_bps, increment=True)
        bps_out = self._fee_bps(token_out, usdg_amount, base_bps, tax_bps, increment=False)
        return max(bps_in, bps_out)

    def _fee_bps(self, token: str, usdg_delta: int, fee_bps: int, tax_bps: int, increment: bool) -> int:
        initial = int(self._get("usdg", token))
        supply = int(self.chain.sload(self.address, "usdg_supply"))
        weight = int(self._get("weight", token))
        total_weights = int(self.chain.sload(self.address, "total_weights"))

        if increment:
            nxt = initial + usdg_delta
        else:
            nxt = 0 if usdg_delta > initial else initial - usdg_delta

        target = weight * supply // total_weights if supply and total_weights else 0
        if target == 0:
            return fee_bps

        initial_diff = abs(initial - target)
        next_diff = abs(nxt - target)
        if next_diff < initial_diff:
            rebate = tax_bps * initial_diff // target
            return 0 if rebate > fee_bps else fee_bps - rebate

        average_diff = min((initial_diff + next_diff) // 2, target)
        return fee_bps + tax_bps * average_diff // target

    # ---------- swap ----------

    def swap(self, sender: str, token_in: str, token_out: str, receiver: str) -> int:
        self.chain.external_call()
        if not self.chain.sload(self.address, "swap_enabled", False):
            self._revert("swaps not enabled")
        if not self._get("whitelisted", token_in, False):
            self._revert("_tokenIn not whitelisted")
        if not self._get("whitelisted", token_out, False):
            self._revert("_tokenOut not whitelisted")
        if _norm_lower(token_in) == _norm_lower(token_out):
            self._revert("invalid tokens")

        erc_in = self._tokens[_norm_lower(token_in)]
        erc_out = self._tokens[_norm_lower(token_out)]

        # transfer-in accounting: whatever arrived since the last booked balance
        booked = int(self._get("token_balance", token_in))
        amount_in = erc_in.balance_of(self.address) - booked
        if amount_in <= 0:
            self._revert("invalid amountIn")
        self._set("token_balance", token_in, booked + amount_in)

        price_in = int(self._get("min_price", token_in))
        price_out = int(self._get("max_price", token_out))
        dec_in = int(self._get("decimals", token_in))
        dec_out = int(self._get("decimals", token_out))

        amount_out = self._adjust_for_decimals(amount_in * price_in // price_out, dec_in, dec_out)
        usdg_amount = self._adjust_for_decimals(
            amount_in * price_in // self.PRICE_PRECISION, dec_in, self.USDG_DECIMALS
        )

        fee_bps = self._swap_fee_bps(token_in, token_out, usdg_amount)
        after_fees = amount_out * (self.BASIS_POINTS_DIVISOR - fee_bps) // self.BASIS_POINTS_DIVISOR
        self._set("fee_reserve", token_out, int(self._get("fee_reserve", token_out)) + amount_out - after_fees)

        # usdg debt moves from token_out to token_in
        usdg_in = int(self._get("usdg", token_in)) + usdg_amount
        self._set("usdg", token_in, usdg_in)
        max_usdg = int(self._get("max_usdg", token_in))
        if max_usdg and usdg_in > max_usdg:
            self._revert("max USDG exceeded")
        usdg_out = int(self._get("usdg", token_out))
        self._set("usdg", token_out, 0 if usdg_amount >= usdg_out else usdg_out - usdg_amount)

        pool_in = int(self._get("pool", token_in)) + amount_in
        self._set("pool", token_in, pool_in)
        if pool_in > erc_in.balance_of(self.address):
            self._revert("poolAmount exceeded balance")

        pool_out = int(self._get("pool", token_out))
        if pool_out < amount_out:
            self._revert("poolAmount exceeded")
        pool_out -= amount_out
        self._set("pool", token_out, pool_out)
        if int(self._get("reserved", token_out)) > pool_out:
            self._revert("reserve exceeds pool")
        if pool_out < int(self._get("buffer", token_out)):
            self._revert("poolAmount < buffer")

        erc_out.transfer(self.address, receiver, after_fees)
        self._set("token_balance", token_out, erc_out.balance_of(self.address))
        return after_fees
