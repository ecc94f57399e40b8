from __future__ import annotations

from contextlib import nullcontext
from typing import Any, Dict, Optional, Tuple

from eth_utils import keccak
from web3 import Web3

from adapters.chain.curve import CurveLikePoolReader, CurvePoolReader
from adapters.chain.erc20 import Erc20Reader, LendingTokenReader
from adapters.chain.gmx import GmxVaultReader
from adapters.chain.unilike import UnilikeFactoryReader, UnilikePairReader
from config import get_settings
from core.domain.enums.adapter_enums import CurveIndexType
from core.domain.protocols.chain_interface import ChainInterface
from core.services.exceptions import ExecutionNotSupportedError
from core.services.web3_cache import get_web3


class RemoteChain(ChainInterface):
    """
    Live chain seen through web3 `eth_call`s. Quote-only: adapters built on
    it can resolve tokens and price swaps, never execute them.
    """

    def __init__(self, w3: Web3, name: str):
        self.w3 = w3
        self.name = name
        self._readers: Dict[Tuple[str, str], Any] = {}
        self._nonce = 0

    @classmethod
    def from_settings(cls, chain: str) -> "RemoteChain":
        s = get_settings()
        return cls(get_web3(s.rpc_url_for(chain)), chain)

    def register(self, contract: Any, address: Optional[str] = None) -> str:
        if address:
            return Web3.to_checksum_address(address)
        # virtual address: nothing is ever held or executed there
        self._nonce += 1
        label = getattr(contract, "name", type(contract).__name__)
        return Web3.to_checksum_address(keccak(text=f"{self.name}:{label}:{self._nonce}")[-20:])

    def _reader(self, key: str, address: str, factory) -> Any:
        cache_key = (key, address.lower())
        hit = self._readers.get(cache_key)
        if hit is None:
            hit = factory()
            self._readers[cache_key] = hit
        return hit

    def token(self, address: str) -> Erc20Reader:
        return self._reader("erc20", address, lambda: Erc20Reader(self.w3, address))

    def lending_token(self, address: str) -> LendingTokenReader:
        return self._reader("lending", address, lambda: LendingTokenReader(self.w3, address))

    def unilike_pair(self, address: str) -> UnilikePairReader:
        return self._reader("pair", address, lambda: UnilikePairReader(self.w3, address))

    def unilike_factory(self, address: str) -> UnilikeFactoryReader:
        return self._reader("factory", address, lambda: UnilikeFactoryReader(self.w3, address))

    def curve_pool(self, address: str, index_type: CurveIndexType = CurveIndexType.INT128) -> CurvePoolReader:
        index_type = CurveIndexType(index_type)
        return self._reader(
            f"curve:{index_type.value}", address, lambda: CurvePoolReader(self.w3, address, index_type)
        )

    def curvelike_pool(self, address: str) -> CurveLikePoolReader:
        return self._reader("curvelike", address, lambda: CurveLikePoolReader(self.w3, address))

    def gmx_vault(self, address: str) -> GmxVaultReader:
        return self._reader("gmx", address, lambda: GmxVaultReader(self.w3, address))

    def static_frame(self):
        # eth_call never persists state
        return nullcontext()

    def transaction(self):
        raise ExecutionNotSupportedError(f"Chain {self.name!r} is quote-only; swaps are not executed by this service")
