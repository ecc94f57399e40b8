from __future__ import annotations

from typing import Optional

from adapters.chain.local.chain import LocalChain
from adapters.chain.local.erc20 import ERC20Token
from core.domain.protocols.token_interface import LendingTokenInterface
from core.services.normalize import _require_uint256

EXCHANGE_RATE_SCALE = 10**18


class LendingToken(ERC20Token, LendingTokenInterface):
    """
    cToken-style wrapper: holds the underlying, issues wrapped units at
    `exchange_rate` (underlying per wrapped, scaled by 1e18).
    """

    def __init__(
        self,
        chain: LocalChain,
        symbol: str,
        underlying: ERC20Token,
        exchange_rate: int,
        decimals: int = 8,
        address: Optional[str] = None,
    ):
        super().__init__(chain, symbol, decimals=decimals, address=address)
        if int(exchange_rate) <= 0:
            raise ValueError("exchange_rate must be > 0")
        self._underlying = underlying
        chain.sstore(self.address, "exchange_rate", int(exchange_rate))

    def underlying(self) -> str:
        self.chain.external_call()
        return self._underlying.address

    def exchange_rate_stored(self) -> int:
        self.chain.external_call()
        return int(self.chain.sload(self.address, "exchange_rate"))

    def accrue(self, exchange_rate: int) -> None:
        """
        Move the exchange rate (interest accrual). Harness only.
        """
        if int(exchange_rate) <= 0:
            raise ValueError("exchange_rate must be > 0")
        self.chain.sstore(self.address, "exchange_rate", int(exchange_rate))

    def mint(self, sender: str, underlying_amount: int) -> int:
        self.chain.external_call()
        amount = _require_uint256("underlying_amount", underlying_amount)
        rate = int(self.chain.sload(self.address, "exchange_rate"))

        minted = amount * EXCHANGE_RATE_SCALE // rate
        if minted == 0:
            self._revert("mint amount too small")

        self._underlying.transfer_from(self.address, sender, self.address, amount)
        self._credit(sender, minted)
        return minted

    def redeem(self, sender: str, wrapped_amount: int) -> int:
        self.chain.external_call()
        amount = _require_uint256("wrapped_amount", wrapped_amount)
        rate = int(self.chain.sload(self.address, "exchange_rate"))

        paid = amount * rate // EXCHANGE_RATE_SCALE
        self._debit(sender, amount)
        self._underlying.transfer(self.address, sender, paid)
        return paid
