from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Optional

from core.domain.enums.adapter_enums import CurveIndexType
from core.domain.protocols.pool_interfaces import (
    CurveLikePoolInterface,
    CurvePoolInterface,
    GmxVaultInterface,
    UnilikeFactoryInterface,
    UnilikePairInterface,
)
from core.domain.protocols.token_interface import Erc20Interface, LendingTokenInterface


class ChainInterface(ABC):
    """
    Execution environment an adapter is deployed into.

    The local ledger implements every method; the live (web3) environment is
    read-only and refuses `transaction()`.
    """

    name: str

    @abstractmethod
    def register(self, contract: Any, address: Optional[str] = None) -> str:
        """Bind a contract object to an address and return that address."""
        raise NotImplementedError

    # ---------- protocol handles ----------

    @abstractmethod
    def token(self, address: str) -> Erc20Interface:
        raise NotImplementedError

    @abstractmethod
    def lending_token(self, address: str) -> LendingTokenInterface:
        raise NotImplementedError

    @abstractmethod
    def unilike_pair(self, address: str) -> UnilikePairInterface:
        raise NotImplementedError

    @abstractmethod
    def unilike_factory(self, address: str) -> UnilikeFactoryInterface:
        raise NotImplementedError

    @abstractmethod
    def curve_pool(self, address: str, index_type: CurveIndexType = CurveIndexType.INT128) -> CurvePoolInterface:
        raise NotImplementedError

    @abstractmethod
    def curvelike_pool(self, address: str) -> CurveLikePoolInterface:
        raise NotImplementedError

    @abstractmethod
    def gmx_vault(self, address: str) -> GmxVaultInterface:
        raise NotImplementedError

    # ---------- frames ----------

    @abstractmethod
    def static_frame(self) -> AbstractContextManager[Any]:
        """Read-only frame: storage writes inside it must fail."""
        raise NotImplementedError

    @abstractmethod
    def transaction(self) -> AbstractContextManager[Any]:
        """Atomic frame: any exception discards every state change made inside it."""
        raise NotImplementedError
