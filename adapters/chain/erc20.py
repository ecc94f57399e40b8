from __future__ import annotations

from web3 import Web3

from adapters.chain.contract_reader import ContractReader
from core.domain.protocols.token_interface import Erc20Interface, LendingTokenInterface

ABI_ERC20 = [
    {"name": "decimals", "inputs": [], "outputs": [{"type": "uint8"}], "stateMutability": "view", "type": "function"},
    {"name": "symbol", "inputs": [], "outputs": [{"type": "string"}], "stateMutability": "view", "type": "function"},
    {"name": "balanceOf", "inputs": [{"type": "address", "name": "owner"}], "outputs": [{"type": "uint256"}], "stateMutability": "view", "type": "function"},
    {"name": "allowance", "inputs": [{"type": "address", "name": "owner"}, {"type": "address", "name": "spender"}], "outputs": [{"type": "uint256"}], "stateMutability": "view", "type": "function"},
]

ABI_LENDING_TOKEN = ABI_ERC20 + [
    {"name": "underlying", "inputs": [], "outputs": [{"type": "address"}], "stateMutability": "view", "type": "function"},
    {"name": "exchangeRateStored", "inputs": [], "outputs": [{"type": "uint256"}], "stateMutability": "view", "type": "function"},
]


class Erc20Reader(ContractReader, Erc20Interface):
    ABI = ABI_ERC20

    def decimals(self) -> int:
        return int(self._call("decimals"))

    def symbol(self) -> str:
        return str(self._call("symbol"))

    def balance_of(self, holder: str) -> int:
        return int(self._call("balanceOf", Web3.to_checksum_address(holder)))

    def allowance(self, owner: str, spender: str) -> int:
        return int(self._call("allowance", Web3.to_checksum_address(owner), Web3.to_checksum_address(spender)))

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        return self._write("approve")

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        return self._write("transfer")

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        return self._write("transfer_from")


class LendingTokenReader(Erc20Reader, LendingTokenInterface):
    ABI = ABI_LENDING_TOKEN

    def underlying(self) -> str:
        return Web3.to_checksum_address(self._call("underlying"))

    def exchange_rate_stored(self) -> int:
        return int(self._call("exchangeRateStored"))

    def mint(self, sender: str, underlying_amount: int) -> int:
        return self._write("mint")

    def redeem(self, sender: str, wrapped_amount: int) -> int:
        return self._write("redeem")
