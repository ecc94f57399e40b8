from __future__ import annotations

from typing import Any

from web3 import Web3
from web3.contract import Contract
from web3.exceptions import ContractLogicError

from core.services.exceptions import ContractRevertError, ExecutionNotSupportedError


class ContractReader:
    """
    Read-only web3 binding. Reverts surface as ContractRevertError; writes are
    refused because live chains are only used for quoting.
    """

    ABI: list = []

    def __init__(self, w3: Web3, address: str):
        self.w3 = w3
        self.address = Web3.to_checksum_address(address)
        self.contract: Contract = w3.eth.contract(address=self.address, abi=self.ABI)

    def _call(self, fn_name: str, *args: Any) -> Any:
        try:
            return getattr(self.contract.functions, fn_name)(*args).call()
        except ContractLogicError as exc:
            raise ContractRevertError(self.address, str(exc)) from exc

    def _write(self, fn_name: str) -> Any:
        raise ExecutionNotSupportedError(f"{type(self).__name__}.{fn_name} is read-only on a live chain")
