from __future__ import annotations

from enum import Enum, StrEnum


class AdapterStatus(str, Enum):
    """
    Adapter record status stored in MongoDB.

    ACTIVE: can be selected/used by services that resolve adapters.
    INACTIVE: kept for history but should not be used by default.
    """

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class AdapterKind(StrEnum):
    """
    Destination protocol family an adapter translates to.
    """

    UNILIKE = "unilike"
    UNILIKE_FACTORY = "unilike_factory"
    CURVE_PLAIN = "curve_plain"
    CURVE_UNDERLYING = "curve_underlying"
    CURVELIKE = "curvelike"
    GMX = "gmx"


class CorrectionKind(StrEnum):
    """
    Quote correction applied on top of the protocol's native pricing function.

    NONE: pricing is exact.
    UNIT: subtract a fixed number of raw units (rounding divergence).
    BPS: proportional haircut in basis points (dynamic-fee pools).
    """

    NONE = "none"
    UNIT = "unit"
    BPS = "bps"


class CurveIndexType(StrEnum):
    """
    ABI type of coin indices in Curve pool functions.

    Older StableSwap pools take int128, crypto pools take uint256.
    """

    INT128 = "int128"
    UINT256 = "uint256"
