from __future__ import annotations

from typing import Optional

from adapters.chain.local.chain import LocalChain
from core.domain.protocols.token_interface import Erc20Interface
from core.services.exceptions import ContractRevertError
from core.services.normalize import MAX_UINT256, _norm_lower, _require_uint256


class ERC20Token(Erc20Interface):
    """
    Plain ERC20 living in LocalChain storage.

    Slots: ("balance", holder), ("allowance", owner, spender), "total_supply".
    An allowance of MAX_UINT256 is never decremented.
    """

    def __init__(self, chain: LocalChain, symbol: str, decimals: int = 18, address: Optional[str] = None):
        if not 0 <= int(decimals) <= 18:
            raise ValueError("decimals must be within [0, 18]")
        self.chain = chain
        self.symbol = symbol
        self._decimals = int(decimals)
        self.address = chain.register(self, address)

    def __repr__(self) -> str:
        return f"ERC20Token({self.symbol}, {self.address})"

    def _revert(self, reason: str) -> None:
        raise ContractRevertError(self.symbol, reason)

    # ---------- views ----------

    def decimals(self) -> int:
        self.chain.external_call()
        return self._decimals

    def total_supply(self) -> int:
        self.chain.external_call()
        return int(self.chain.sload(self.address, "total_supply"))

    def balance_of(self, holder: str) -> int:
        self.chain.external_call()
        return int(self.chain.sload(self.address, ("balance", _norm_lower(holder))))

    def allowance(self, owner: str, spender: str) -> int:
        self.chain.external_call()
        return int(self.chain.sload(self.address, ("allowance", _norm_lower(owner), _norm_lower(spender))))

    # ---------- writes ----------

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        self.chain.external_call()
        amount = _require_uint256("allowance", amount)
        self.chain.sstore(self.address, ("allowance", _norm_lower(owner), _norm_lower(spender)), amount)
        return True

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        self.chain.external_call()
        self._move(sender, to, amount)
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        self.chain.external_call()
        amount = _require_uint256("amount", amount)
        slot = ("allowance", _norm_lower(owner), _norm_lower(spender))
        allowed = int(self.chain.sload(self.address, slot))
        if allowed < amount:
            self._revert("insufficient allowance")
        if allowed != MAX_UINT256:
            self.chain.sstore(self.address, slot, allowed - amount)
        self._move(owner, to, amount)
        return True

    def mint(self, to: str, amount: int) -> None:
        """
        Credit `to` out of thin air (test/calibration balance injection).
        """
        self._credit(to, amount)

    # ---------- internals ----------

    def _move(self, src: str, dst: str, amount: int) -> None:
        amount = _require_uint256("amount", amount)
        src_slot = ("balance", _norm_lower(src))
        dst_slot = ("balance", _norm_lower(dst))

        src_bal = int(self.chain.sload(self.address, src_slot))
        if src_bal < amount:
            self._revert("transfer amount exceeds balance")
        self.chain.sstore(self.address, src_slot, src_bal - amount)

        dst_bal = int(self.chain.sload(self.address, dst_slot))
        self.chain.sstore(self.address, dst_slot, _require_uint256("balance", dst_bal + amount))

    def _credit(self, to: str, amount: int) -> None:
        amount = _require_uint256("amount", amount)
        slot = ("balance", _norm_lower(to))
        bal = int(self.chain.sload(self.address, slot))
        self.chain.sstore(self.address, slot, _require_uint256("balance", bal + amount))
        supply = int(self.chain.sload(self.address, "total_supply"))
        self.chain.sstore(self.address, "total_supply", _require_uint256("total_supply", supply + amount))

    def _debit(self, src: str, amount: int) -> None:
        amount = _require_uint256("amount", amount)
        slot = ("balance", _norm_lower(src))
        bal = int(self.chain.sload(self.address, slot))
        if bal < amount:
            self._revert("burn amount exceeds balance")
        self.chain.sstore(self.address, slot, bal - amount)
        supply = int(self.chain.sload(self.address, "total_supply"))
        self.chain.sstore(self.address, "total_supply", supply - amount)
