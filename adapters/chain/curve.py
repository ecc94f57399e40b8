from __future__ import annotations

from web3 import Web3

from adapters.chain.contract_reader import ContractReader
from core.domain.enums.adapter_enums import CurveIndexType
from core.domain.protocols.pool_interfaces import CurveLikePoolInterface, CurvePoolInterface
from core.services.exceptions import ContractRevertError


def curve_pool_abi(index_type: CurveIndexType) -> list:
    """
    Older StableSwap pools take int128 coin indices in get_dy/exchange,
    crypto pools take uint256. `coins` is uint256 on both.
    """
    idx = CurveIndexType(index_type).value
    return [
        {"name": "coins", "inputs": [{"type": "uint256", "name": "i"}], "outputs": [{"type": "address"}], "stateMutability": "view", "type": "function"},
        {"name": "balances", "inputs": [{"type": "uint256", "name": "i"}], "outputs": [{"type": "uint256"}], "stateMutability": "view", "type": "function"},
        {
            "name": "get_dy",
            "inputs": [{"type": idx, "name": "i"}, {"type": idx, "name": "j"}, {"type": "uint256", "name": "dx"}],
            "outputs": [{"type": "uint256"}],
            "stateMutability": "view",
            "type": "function",
        },
    ]


class CurvePoolReader(ContractReader, CurvePoolInterface):
    def __init__(self, w3: Web3, address: str, index_type: CurveIndexType = CurveIndexType.INT128):
        self.index_type = CurveIndexType(index_type)
        self.ABI = curve_pool_abi(self.index_type)
        super().__init__(w3, address)

    def coins(self, index: int) -> str:
        return Web3.to_checksum_address(self._call("coins", int(index)))

    def balances(self, index: int) -> int:
        return int(self._call("balances", int(index)))

    def get_dy(self, i: int, j: int, dx: int) -> int:
        return int(self._call("get_dy", int(i), int(j), int(dx)))

    def exchange(self, sender: str, i: int, j: int, dx: int, min_dy: int) -> int:
        return self._write("exchange")


CURVELIKE_POOL_ABI = [
    {"name": "getToken", "inputs": [{"type": "uint8", "name": "index"}], "outputs": [{"type": "address"}], "stateMutability": "view", "type": "function"},
    {"name": "paused", "inputs": [], "outputs": [{"type": "bool"}], "stateMutability": "view", "type": "function"},
    {
        "name": "calculateSwap",
        "inputs": [{"type": "uint8", "name": "tokenIndexFrom"}, {"type": "uint8", "name": "tokenIndexTo"}, {"type": "uint256", "name": "dx"}],
        "outputs": [{"type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
]

MAX_UINT8 = 255


class CurveLikePoolReader(ContractReader, CurveLikePoolInterface):
    """
    Saddle-style pool (Gondola, Saddle forks): uint8 token indices.
    """

    ABI = CURVELIKE_POOL_ABI

    def get_token(self, index: int) -> str:
        index = int(index)
        if not 0 <= index <= MAX_UINT8:
            # no uint8 encoding exists, so there is no token there either
            raise ContractRevertError(self.address, f"token index {index} out of uint8 range")
        return Web3.to_checksum_address(self._call("getToken", index))

    def paused(self) -> bool:
        return bool(self._call("paused"))

    def calculate_swap(self, i: int, j: int, dx: int) -> int:
        return int(self._call("calculateSwap", int(i), int(j), int(dx)))

    def swap(self, sender: str, i: int, j: int, dx: int, min_dy: int) -> int:
        return self._write("swap")
