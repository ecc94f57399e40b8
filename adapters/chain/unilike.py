from __future__ import annotations

from typing import Tuple

from web3 import Web3

from adapters.chain.contract_reader import ContractReader
from core.domain.protocols.pool_interfaces import UnilikeFactoryInterface, UnilikePairInterface

ABI_UNILIKE_PAIR = [
    {"name": "token0", "inputs": [], "outputs": [{"type": "address"}], "stateMutability": "view", "type": "function"},
    {"name": "token1", "inputs": [], "outputs": [{"type": "address"}], "stateMutability": "view", "type": "function"},
    {"name": "getReserves", "inputs": [], "outputs": [{"type": "uint112"}, {"type": "uint112"}, {"type": "uint32"}], "stateMutability": "view", "type": "function"},
]

ABI_UNILIKE_FACTORY = [
    {"name": "getPair", "inputs": [{"type": "address", "name": "tokenA"}, {"type": "address", "name": "tokenB"}], "outputs": [{"type": "address"}], "stateMutability": "view", "type": "function"},
    {"name": "allPairsLength", "inputs": [], "outputs": [{"type": "uint256"}], "stateMutability": "view", "type": "function"},
    {"name": "allPairs", "inputs": [{"type": "uint256", "name": "index"}], "outputs": [{"type": "address"}], "stateMutability": "view", "type": "function"},
]


class UnilikePairReader(ContractReader, UnilikePairInterface):
    ABI = ABI_UNILIKE_PAIR

    def token0(self) -> str:
        return Web3.to_checksum_address(self._call("token0"))

    def token1(self) -> str:
        return Web3.to_checksum_address(self._call("token1"))

    def get_reserves(self) -> Tuple[int, int]:
        r0, r1, _ts = self._call("getReserves")
        return int(r0), int(r1)

    def swap(self, sender: str, amount0_out: int, amount1_out: int, to: str) -> None:
        return self._write("swap")


class UnilikeFactoryReader(ContractReader, UnilikeFactoryInterface):
    ABI = ABI_UNILIKE_FACTORY

    def get_pair(self, token_a: str, token_b: str) -> str:
        if not (Web3.is_address(token_a) and Web3.is_address(token_b)):
            return "0x0000000000000000000000000000000000000000"
        return self._call("getPair", Web3.to_checksum_address(token_a), Web3.to_checksum_address(token_b))

    def pair_at(self, address: str) -> UnilikePairReader:
        return UnilikePairReader(self.w3, address)

    def all_pairs_length(self) -> int:
        return int(self._call("allPairsLength"))

    def all_pairs(self, index: int) -> str:
        return self._call("allPairs", int(index))
