from __future__ import annotations

from typing import Optional

from web3 import Web3

from adapters.chain.contract_reader import ContractReader
from core.domain.protocols.pool_interfaces import GmxVaultInterface


def _view(name: str, inputs: list, out: str) -> dict:
    return {
        "name": name,
        "inputs": [{"type": t, "name": f"arg{k}"} for k, t in enumerate(inputs)],
        "outputs": [{"type": out}],
        "stateMutability": "view",
        "type": "function",
    }


ABI_GMX_VAULT = [
    _view("isSwapEnabled", [], "bool"),
    _view("vaultUtils", [], "address"),
    _view("whitelistedTokens", ["address"], "bool"),
    _view("allWhitelistedTokensLength", [], "uint256"),
    _view("allWhitelistedTokens", ["uint256"], "address"),
    _view("tokenDecimals", ["address"], "uint256"),
    _view("getMinPrice", ["address"], "uint256"),
    _view("getMaxPrice", ["address"], "uint256"),
    _view("poolAmounts", ["address"], "uint256"),
    _view("reservedAmounts", ["address"], "uint256"),
    _view("bufferAmounts", ["address"], "uint256"),
    _view("usdgAmounts", ["address"], "uint256"),
    _view("maxUsdgAmounts", ["address"], "uint256"),
]

ABI_GMX_VAULT_UTILS = [
    _view("getSwapFeeBasisPoints", ["address", "address", "uint256"], "uint256"),
]


class GmxVaultUtilsReader(ContractReader):
    ABI = ABI_GMX_VAULT_UTILS


class GmxVaultReader(ContractReader, GmxVaultInterface):
    """
    GMX v1 Vault. Swap fee bps live on the separate VaultUtils contract.
    """

    ABI = ABI_GMX_VAULT

    def __init__(self, w3: Web3, address: str):
        super().__init__(w3, address)
        self._utils: Optional[GmxVaultUtilsReader] = None

    def _cs(self, token: str) -> str:
        return Web3.to_checksum_address(token)

    def is_swap_enabled(self) -> bool:
        return bool(self._call("isSwapEnabled"))

    def whitelisted_tokens(self, token: str) -> bool:
        if not Web3.is_address(token):
            return False
        return bool(self._call("whitelistedTokens", self._cs(token)))

    def all_whitelisted_tokens_length(self) -> int:
        return int(self._call("allWhitelistedTokensLength"))

    def all_whitelisted_tokens(self, index: int) -> str:
        return self._cs(self._call("allWhitelistedTokens", int(index)))

    def token_decimals(self, token: str) -> int:
        return int(self._call("tokenDecimals", self._cs(token)))

    def get_min_price(self, token: str) -> int:
        return int(self._call("getMinPrice", self._cs(token)))

    def get_max_price(self, token: str) -> int:
        return int(self._call("getMaxPrice", self._cs(token)))

    def pool_amounts(self, token: str) -> int:
        return int(self._call("poolAmounts", self._cs(token)))

    def reserved_amounts(self, token: str) -> int:
        return int(self._call("reservedAmounts", self._cs(token)))

    def buffer_amounts(self, token: str) -> int:
        return int(self._call("bufferAmounts", self._cs(token)))

    def usdg_amounts(self, token: str) -> int:
        return int(self._call("usdgAmounts", self._cs(token)))

    def max_usdg_amounts(self, token: str) -> int:
        return int(self._call("maxUsdgAmounts", self._cs(token)))

    def get_swap_fee_basis_points(self, token_in: str, token_out: str, usdg_amount: int) -> int:
        if self._utils is None:
            self._utils = GmxVaultUtilsReader(self.w3, self._call("vaultUtils"))
        return int(self._utils._call("getSwapFeeBasisPoints", self._cs(token_in), self._cs(token_out), int(usdg_amount)))

    def swap(self, sender: str, token_in: str, token_out: str, receiver: str) -> int:
        return self._write("swap")
