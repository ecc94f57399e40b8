from enum import Enum
from typing import Any

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def sanitize_for_mongo(value: Any) -> Any:
    """
    Make a value BSON-safe before insert.

    Token amounts and gas figures are uint256 on-chain; anything outside
    int64 is stored as its decimal string. Enums are stored by value.
    """
    if isinstance(value, bool):
        return value

    if isinstance(value, int):
        if INT64_MIN <= value <= INT64_MAX:
            return value
        return str(value)

    if isinstance(value, Enum):
        return sanitize_for_mongo(value.value)

    if isinstance(value, dict):
        return {k: sanitize_for_mongo(v) for k, v in value.items()}

    if isinstance(value, (list, tuple)):
        return [sanitize_for_mongo(v) for v in value]

    return value
