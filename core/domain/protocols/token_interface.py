from __future__ import annotations

from abc import ABC, abstractmethod


class Erc20Interface(ABC):
    address: str

    @abstractmethod
    def decimals(self) -> int: ...

    @abstractmethod
    def balance_of(self, holder: str) -> int: ...

    @abstractmethod
    def allowance(self, owner: str, spender: str) -> int: ...

    @abstractmethod
    def approve(self, owner: str, spender: str, amount: int) -> bool: ...

    @abstractmethod
    def transfer(self, sender: str, to: str, amount: int) -> bool: ...

    @abstractmethod
    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool: ...


class LendingTokenInterface(Erc20Interface):
    """
    Interest-bearing wrapper around an underlying asset (cToken style).

    underlying = wrapped * exchange_rate_stored() // 1e18
    """

    @abstractmethod
    def underlying(self) -> str: ...

    @abstractmethod
    def exchange_rate_stored(self) -> int: ...

    @abstractmethod
    def mint(self, sender: str, underlying_amount: int) -> int:
        """Pull `underlying_amount` from sender, credit wrapped tokens; returns wrapped minted."""
        ...

    @abstractmethod
    def redeem(self, sender: str, wrapped_amount: int) -> int:
        """Burn sender's wrapped tokens, pay out underlying; returns underlying paid."""
        ...
