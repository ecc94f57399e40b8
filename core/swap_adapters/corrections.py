from __future__ import annotations

from dataclasses import dataclass

from core.domain.enums.adapter_enums import CorrectionKind

BPS_DIVISOR = 10_000


@dataclass(frozen=True)
class QuoteCorrection:
    """
    Fixed adjustment applied to a protocol's native quote so that it never
    exceeds what settlement actually nets.
    """

    kind: CorrectionKind = CorrectionKind.NONE
    value: int = 0

    def apply(self, raw: int) -> int:
        return raw


@dataclass(frozen=True)
class NoCorrection(QuoteCorrection):
    kind: CorrectionKind = CorrectionKind.NONE
    value: int = 0


@dataclass(frozen=True)
class UnitCorrection(QuoteCorrection):
    """Subtract `value` raw units (pricing rounds up relative to settlement)."""

    kind: CorrectionKind = CorrectionKind.UNIT
    value: int = 1

    def apply(self, raw: int) -> int:
        return max(raw - self.value, 0)


@dataclass(frozen=True)
class BpsHaircut(QuoteCorrection):
    """Proportional haircut for pools whose pricing overstates settlement."""

    kind: CorrectionKind = CorrectionKind.BPS
    value: int = 4

    def __post_init__(self):
        if not 0 <= self.value < BPS_DIVISOR:
            raise ValueError("bps haircut must be within [0, 10000)")

    def apply(self, raw: int) -> int:
        return raw * (BPS_DIVISOR - self.value) // BPS_DIVISOR


def correction_from(kind: CorrectionKind | str | None, value: int | None = None) -> QuoteCorrection | None:
    """
    Rebuild a stored correction. None means "use the adapter family's default".
    """
    if kind is None:
        return None
    kind = CorrectionKind(kind)
    if kind == CorrectionKind.UNIT:
        return UnitCorrection(value=1 if value is None else int(value))
    if kind == CorrectionKind.BPS:
        return BpsHaircut(value=4 if value is None else int(value))
    return NoCorrection()
