from __future__ import annotations


class AdapterError(Exception):
    """
    Base class for failures raised by swap adapters and the services around them.
    """


class ChainError(Exception):
    """
    Base class for failures raised by the chain environment (ledger, protocols).
    """


class ContractRevertError(ChainError):
    """
    A destination protocol (or token) rejected the call.

    Raised by the simulated protocols and translated from web3's
    ContractLogicError by the live readers, so callers see one type.
    """

    def __init__(self, contract: str, reason: str):
        self.contract = contract
        self.reason = reason
        super().__init__(f"{contract}: {reason}")


class StaticCallViolationError(ChainError):
    """
    A storage write was attempted inside a read-only (static) frame.
    """

    def __init__(self, address: str, slot: object):
        self.address = address
        self.slot = slot
        super().__init__(f"State modification in static frame ({address}, {slot!r})")


class Uint256OverflowError(ChainError):
    """
    An amount left the uint256 range. Arithmetic never wraps.
    """

    def __init__(self, name: str, value: int):
        self.name = name
        self.value = value
        super().__init__(f"{name} out of uint256 range: {value}")


class ExecutionNotSupportedError(ChainError):
    """
    The chain environment is read-only (live quoting) and cannot execute swaps.
    """


class UnsupportedPairError(AdapterError):
    def __init__(self, adapter: str, token_from: str, token_to: str):
        self.adapter = adapter
        self.token_from = token_from
        self.token_to = token_to
        super().__init__(f"{adapter}: unsupported pair {token_from} -> {token_to}")


class InsufficientOutputError(AdapterError):
    def __init__(self, adapter: str, amount_out: int, min_out: int):
        self.adapter = adapter
        self.amount_out = int(amount_out)
        self.min_out = int(min_out)
        super().__init__(f"{adapter}: insufficient amount-out ({amount_out} < {min_out})")


class TokenCountMismatchError(AdapterError):
    """
    Deployment-time check failed: the pool does not enumerate exactly the
    expected number of tokens.
    """

    def __init__(self, pool: str, expected: int, reason: str):
        self.pool = pool
        self.expected = int(expected)
        self.reason = reason
        super().__init__(f"Invalid token-count for pool {pool} (expected {expected}): {reason}")


class GasEstimateOutOfBoundsError(AdapterError):
    def __init__(self, adapter: str, estimate: int, max_observed: int, upper_bound: int):
        self.adapter = adapter
        self.estimate = int(estimate)
        self.max_observed = int(max_observed)
        self.upper_bound = int(upper_bound)
        super().__init__(
            f"{adapter}: gas estimate {estimate} outside [{max_observed}, {upper_bound}]"
        )


class AdapterNotFoundError(AdapterError):
    def __init__(self, chain: str, name: str):
        self.chain = chain
        self.name = name
        super().__init__(f"Adapter {name!r} not found on chain {chain!r}")
