from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, List, NamedTuple, Optional

from web3 import Web3

from core.domain.enums.adapter_enums import AdapterKind
from core.domain.protocols.chain_interface import ChainInterface
from core.services.exceptions import InsufficientOutputError, UnsupportedPairError
from core.services.normalize import MAX_UINT256, _norm_lower, _require_nonzero, _require_uint256
from core.swap_adapters.corrections import NoCorrection, QuoteCorrection

logger = logging.getLogger(__name__)


class Route(NamedTuple):
    """A resolved token pair: the caller's tokens plus their pool-specific slots."""

    token_from: str
    token_to: str
    slot_from: Any
    slot_to: Any


class SwapAdapter(ABC):
    """
    Uniform quote/execute surface over one destination liquidity protocol.

    An adapter is bound to a single pool (or vault/factory) at construction
    and keeps no state of its own besides that immutable configuration. Funds
    it holds between the caller's transfer and `swap` are transient custody.

    Subclasses supply token resolution (`_resolve` or `_resolve_pair`), the
    protocol pricing (`_quote`, correction included) and the native execution
    (`_execute`). Frames, output measurement, min-out enforcement and the
    forward to the recipient live here.
    """

    kind: ClassVar[AdapterKind]

    def __init__(
        self,
        chain: ChainInterface,
        name: str,
        pool: str,
        gas_estimate: int,
        correction: Optional[QuoteCorrection] = None,
        address: Optional[str] = None,
    ):
        name = (name or "").strip()
        if not name:
            raise ValueError("Adapter name is required")
        if int(gas_estimate) <= 0:
            raise ValueError("gas_estimate must be > 0")

        self.chain = chain
        self.name = name
        self.pool = Web3.to_checksum_address(_require_nonzero("pool", pool))
        self.correction = correction or NoCorrection()
        self._gas_estimate = int(gas_estimate)
        self.address = chain.register(self, address)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, pool={self.pool})"

    # ---------- public surface ----------

    def swap_gas_estimate(self) -> int:
        return self._gas_estimate

    def is_pool_token(self, token: str) -> bool:
        with self.chain.static_frame():
            return self._resolve(token) is not None

    def pool_tokens(self) -> List[str]:
        """Tokens this adapter can route, where the pool exposes a finite list."""
        return []

    def query(self, amount_in: int, token_from: str, token_to: str) -> int:
        amount_in = _require_uint256("amount_in", amount_in)
        if amount_in == 0:
            return 0
        with self.chain.static_frame():
            route = self._resolve_pair(token_from, token_to)
            if route is None:
                return 0
            return _require_uint256("amount_out", self._quote(amount_in, route))

    def swap(self, amount_in: int, min_out: int, token_from: str, token_to: str, recipient: str) -> int:
        amount_in = _require_uint256("amount_in", amount_in)
        min_out = _require_uint256("min_out", min_out)
        recipient = _require_nonzero("recipient", recipient)
        if amount_in == 0:
            raise ValueError("amount_in must be > 0")

        with self.chain.transaction():
            route = self._resolve_pair(token_from, token_to)
            if route is None:
                raise UnsupportedPairError(self.name, token_from, token_to)

            out_token = self.chain.token(route.token_to)
            before = out_token.balance_of(self.address)
            self._execute(amount_in, route)
            received = out_token.balance_of(self.address) - before

            if received < min_out:
                raise InsufficientOutputError(self.name, received, min_out)
            out_token.transfer(self.address, recipient, received)

        logger.debug(
            "%s swap %s %s -> %s %s (min_out=%s, recipient=%s)",
            self.name, amount_in, token_from, received, token_to, min_out, recipient,
        )
        return received

    # ---------- resolution ----------

    @abstractmethod
    def _resolve(self, token: str) -> Optional[Any]:
        """Pool slot for `token`, or None when the pool does not hold it."""
        raise NotImplementedError

    def _resolve_pair(self, token_from: str, token_to: str) -> Optional[Route]:
        if _norm_lower(token_from) == _norm_lower(token_to):
            return None
        slot_from = self._resolve(token_from)
        if slot_from is None:
            return None
        slot_to = self._resolve(token_to)
        if slot_to is None:
            return None
        return Route(token_from, token_to, slot_from, slot_to)

    # ---------- protocol translation ----------

    @abstractmethod
    def _quote(self, amount_in: int, route: Route) -> int:
        """Expected output for a resolved route, after this adapter's correction."""
        raise NotImplementedError

    @abstractmethod
    def _execute(self, amount_in: int, route: Route) -> None:
        """Run the native swap; output must land on `self.address`."""
        raise NotImplementedError

    def _ensure_allowance(self, token: str, spender: str, amount: int) -> None:
        erc20 = self.chain.token(token)
        if erc20.allowance(self.address, spender) < amount:
            erc20.approve(self.address, spender, MAX_UINT256)
