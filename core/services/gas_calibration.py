from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from adapters.chain.local.chain import LocalChain
from core.services.exceptions import GasEstimateOutOfBoundsError
from core.swap_adapters.base import SwapAdapter

logger = logging.getLogger(__name__)

MAX_MARGIN_BPS = 1_000
DEFAULT_MARGIN_BPS = 500


@dataclass(frozen=True)
class GasSample:
    token_from: str
    token_to: str
    amount_in: int
    amount_out: int
    query_gas: int
    swap_gas: int

    @property
    def total(self) -> int:
        return self.query_gas + self.swap_gas


@dataclass(frozen=True)
class GasReport:
    adapter: str
    estimate: int
    samples: Tuple[GasSample, ...]

    @property
    def max_observed(self) -> int:
        return max(s.total for s in self.samples)

    @property
    def upper_bound(self) -> int:
        return self.max_observed * (10_000 + MAX_MARGIN_BPS) // 10_000

    @property
    def within_bounds(self) -> bool:
        return self.max_observed <= self.estimate <= self.upper_bound


class GasCalibrator:
    """
    Measures one query plus one swap per sample on the local ledger and
    compares the total against an adapter's declared estimate.

    Every sample runs from the same starting state: the ledger is
    snapshotted before it and reverted after it.
    """

    def __init__(self, chain: LocalChain, recipient: Optional[str] = None):
        self.chain = chain
        self.recipient = recipient or chain.new_address("gas-calibration-recipient")

    def measure(self, adapter: SwapAdapter, token_from: str, token_to: str, amount_in: int) -> GasSample:
        snapshot_id = self.chain.snapshot()
        try:
            with self.chain.static_frame() as query_receipt:
                amount_out = adapter.query(amount_in, token_from, token_to)
            if amount_out == 0:
                raise ValueError(f"{adapter.name}: no quote for {token_from} -> {token_to}")

            self.chain.token(token_from).mint(adapter.address, amount_in)
            with self.chain.transaction() as swap_receipt:
                adapter.swap(amount_in, amount_out, token_from, token_to, self.recipient)
        finally:
            self.chain.revert(snapshot_id)

        return GasSample(
            token_from=token_from,
            token_to=token_to,
            amount_in=int(amount_in),
            amount_out=int(amount_out),
            query_gas=query_receipt.gas_used,
            swap_gas=swap_receipt.gas_used,
        )

    def report(self, adapter: SwapAdapter, samples: Iterable[Tuple[str, str, int]]) -> GasReport:
        measured: List[GasSample] = [self.measure(adapter, *s) for s in samples]
        if not measured:
            raise ValueError("At least one sample is required")
        return GasReport(adapter=adapter.name, estimate=adapter.swap_gas_estimate(), samples=tuple(measured))

    def check_estimate(self, adapter: SwapAdapter, samples: Iterable[Tuple[str, str, int]]) -> GasReport:
        report = self.report(adapter, samples)
        if not report.within_bounds:
            logger.warning(
                "%s gas estimate %s outside [%s, %s]",
                adapter.name, report.estimate, report.max_observed, report.upper_bound,
            )
            raise GasEstimateOutOfBoundsError(
                adapter.name, report.estimate, report.max_observed, report.upper_bound
            )
        return report


def suggest_estimate(samples: Sequence[GasSample], margin_bps: int = DEFAULT_MARGIN_BPS) -> int:
    """
    Smallest estimate covering every sample plus `margin_bps` (capped at 10%).
    """
    if not samples:
        raise ValueError("At least one sample is required")
    if not 0 <= int(margin_bps) <= MAX_MARGIN_BPS:
        raise ValueError(f"margin_bps must be within [0, {MAX_MARGIN_BPS}]")
    max_observed = max(s.total for s in samples)
    return max_observed * (10_000 + int(margin_bps)) // 10_000
