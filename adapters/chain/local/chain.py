"""
In-process ledger the swap adapters execute against.

One global state (per-contract storage slots), sequential execution, and three
kinds of frames:

- transaction(): atomic; any exception restores the storage as it was when the
  outermost or nested frame was entered.
- static_frame(): read-only; any storage write raises StaticCallViolationError.
- snapshot()/revert(): harness-level state checkpoints (evm_snapshot style).

Gas is metered with a small fixed schedule so adapter gas estimates can be
calibrated against observed costs.
"""

from __future__ import annotations

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

from eth_utils import keccak, to_checksum_address

from core.domain.enums.adapter_enums import CurveIndexType
from core.domain.protocols.chain_interface import ChainInterface
from core.domain.protocols.pool_interfaces import (
    CurveLikePoolInterface,
    CurvePoolInterface,
    GmxVaultInterface,
    UnilikeFactoryInterface,
    UnilikePairInterface,
)
from core.domain.protocols.token_interface import Erc20Interface, LendingTokenInterface
from core.services.exceptions import ContractRevertError, StaticCallViolationError
from core.services.normalize import _norm_lower

logger = logging.getLogger(__name__)

TX_BASE_GAS = 21_000
CALL_GAS = 2_600
SLOAD_GAS = 2_100
SSTORE_GAS = 5_000


@dataclass
class Receipt:
    """
    Filled when the outermost frame exits (including on failure).
    """

    gas_used: int = 0
    success: bool = True


class LocalChain(ChainInterface):
    def __init__(self, name: str = "local"):
        self.name = name
        self._storage: Dict[str, Dict[Any, Any]] = {}
        self._contracts: Dict[str, Any] = {}
        self._snapshots: Dict[int, Dict[str, Dict[Any, Any]]] = {}
        self._nonce = 0
        self._snapshot_seq = 0
        self._gas_used = 0
        self._depth = 0
        self._static_depth = 0

    # ---------- addresses / contracts ----------

    def new_address(self, label: str = "") -> str:
        self._nonce += 1
        digest = keccak(text=f"{self.name}:{label}:{self._nonce}")
        return to_checksum_address(digest[-20:])

    def register(self, contract: Any, address: Optional[str] = None) -> str:
        addr = to_checksum_address(address) if address else self.new_address(type(contract).__name__)
        key = addr.lower()
        if key in self._contracts:
            raise ValueError(f"Address already in use: {addr}")
        self._contracts[key] = contract
        return addr

    def contract_at(self, address: str) -> Any:
        contract = self._contracts.get(_norm_lower(address))
        if contract is None:
            raise ContractRevertError(address, "no contract at address")
        return contract

    def _typed(self, address: str, interface: type, label: str) -> Any:
        contract = self.contract_at(address)
        if not isinstance(contract, interface):
            raise ContractRevertError(address, f"not a {label}")
        return contract

    def token(self, address: str) -> Erc20Interface:
        return self._typed(address, Erc20Interface, "ERC20 token")

    def lending_token(self, address: str) -> LendingTokenInterface:
        return self._typed(address, LendingTokenInterface, "lending token")

    def unilike_pair(self, address: str) -> UnilikePairInterface:
        return self._typed(address, UnilikePairInterface, "constant-product pair")

    def unilike_factory(self, address: str) -> UnilikeFactoryInterface:
        return self._typed(address, UnilikeFactoryInterface, "constant-product factory")

    def curve_pool(self, address: str, index_type: CurveIndexType = CurveIndexType.INT128) -> CurvePoolInterface:
        # simulated pools take plain ints, the index ABI only matters for live reads
        return self._typed(address, CurvePoolInterface, "StableSwap pool")

    def curvelike_pool(self, address: str) -> CurveLikePoolInterface:
        return self._typed(address, CurveLikePoolInterface, "Saddle-style pool")

    def gmx_vault(self, address: str) -> GmxVaultInterface:
        return self._typed(address, GmxVaultInterface, "GMX vault")

    # ---------- gas ----------

    @property
    def gas_used(self) -> int:
        return self._gas_used

    def charge(self, gas: int) -> None:
        self._gas_used += int(gas)

    def external_call(self) -> None:
        self.charge(CALL_GAS)

    # ---------- storage ----------

    def sload(self, address: str, slot: Any, default: Any = 0) -> Any:
        self.charge(SLOAD_GAS)
        return self._storage.get(_norm_lower(address), {}).get(slot, default)

    def sstore(self, address: str, slot: Any, value: Any) -> None:
        if self._static_depth:
            raise StaticCallViolationError(address, slot)
        self.charge(SSTORE_GAS)
        self._storage.setdefault(_norm_lower(address), {})[slot] = value

    # ---------- frames ----------

    def _enter(self) -> bool:
        top = self._depth == 0
        if top:
            self._gas_used = 0
            self.charge(TX_BASE_GAS)
        self._depth += 1
        return top

    @contextmanager
    def transaction(self) -> Iterator[Receipt]:
        if self._static_depth:
            raise StaticCallViolationError("transaction", "opened inside a static frame")
        saved = copy.deepcopy(self._storage)
        receipt = Receipt()
        top = self._enter()
        try:
            yield receipt
        except Exception:
            self._storage = saved
            receipt.success = False
            if top:
                logger.debug("Transaction reverted on %s after %s gas", self.name, self._gas_used)
            raise
        finally:
            self._depth -= 1
            if top:
                receipt.gas_used = self._gas_used

    @contextmanager
    def static_frame(self) -> Iterator[Receipt]:
        receipt = Receipt()
        top = self._enter()
        self._static_depth += 1
        try:
            yield receipt
        finally:
            self._static_depth -= 1
            self._depth -= 1
            if top:
                receipt.gas_used = self._gas_used

    # ---------- harness checkpoints ----------

    def snapshot(self) -> int:
        self._snapshot_seq += 1
        self._snapshots[self._snapshot_seq] = copy.deepcopy(self._storage)
        return self._snapshot_seq

    def revert(self, snapshot_id: int) -> None:
        saved = self._snapshots.pop(snapshot_id, None)
        if saved is None:
            raise ValueError(f"Unknown snapshot id: {snapshot_id}")
        self._storage = saved
