"""Settings parsing and the live (quote-only) chain environment."""

import pytest
from web3 import Web3

from adapters.chain.remote_chain import RemoteChain
from config import Settings, _parse_csv, _parse_rpc_urls, get_settings
from core.services.exceptions import ContractRevertError, ExecutionNotSupportedError
from core.services.web3_cache import clear_web3_cache, get_web3
from core.swap_adapters.base import SwapAdapter

POOL = "0x00000000000000000000000000000000000000b1"


def test_parse_csv():
    assert _parse_csv(" a, B ,,c ") == ["a", "B", "c"]
    assert _parse_csv("A,B", lower=True) == ["a", "b"]
    assert _parse_csv("") == []


def test_parse_rpc_urls():
    urls = _parse_rpc_urls("Avalanche=https://avax.example, arbitrum=https://arb.example")
    assert urls == {"avalanche": "https://avax.example", "arbitrum": "https://arb.example"}
    with pytest.raises(ValueError):
        _parse_rpc_urls("avalanche")


def test_rpc_url_for_falls_back_to_default():
    s = Settings(MONGO_URI="", MONGO_DB="", RPC_URL_DEFAULT="https://default.example", RPC_URLS={"mantle": "https://m"})
    assert s.rpc_url_for("MANTLE") == "https://m"
    assert s.rpc_url_for("optimism") == "https://default.example"
    with pytest.raises(ValueError):
        Settings(MONGO_URI="", MONGO_DB="", RPC_URL_DEFAULT="").rpc_url_for("optimism")


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("RPC_URLS", "optimism=https://op.example")
    monkeypatch.setenv("DEFAULT_NETWORK", " Arbitrum ")
    get_settings.cache_clear()
    try:
        s = get_settings()
        assert s.rpc_url_for("optimism") == "https://op.example"
        assert s.DEFAULT_NETWORK == "arbitrum"
    finally:
        get_settings.cache_clear()


class TestWeb3Cache:
    def test_instances_reused_per_url(self):
        clear_web3_cache()
        assert get_web3("http://127.0.0.1:8545") is get_web3("http://127.0.0.1:8545")
        assert get_web3("http://127.0.0.1:8545") is not get_web3("http://127.0.0.1:9545")

    def test_url_required(self):
        with pytest.raises(ValueError):
            get_web3(" ")


class TestRemoteChain:
    @pytest.fixture
    def remote(self):
        return RemoteChain(get_web3("http://127.0.0.1:8545"), "avalanche")

    def test_swaps_are_refused(self, remote):
        with pytest.raises(ExecutionNotSupportedError):
            remote.transaction()

    def test_static_frame_is_passthrough(self, remote):
        with remote.static_frame():
            pass

    def test_virtual_addresses_are_distinct(self, remote):
        a = remote.register(object())
        b = remote.register(object())
        assert a != b
        assert Web3.is_checksum_address(a)
        assert remote.register(object(), POOL) == Web3.to_checksum_address(POOL)

    def test_readers_are_cached(self, remote):
        assert remote.token(POOL) is remote.token(POOL.upper().replace("0X", "0x"))
        assert remote.curve_pool(POOL) is not remote.curve_pool(POOL, "uint256")
        assert remote.curvelike_pool(POOL) is remote.curvelike_pool(POOL)

    def test_curvelike_index_outside_uint8_reverts(self, remote):
        with pytest.raises(ContractRevertError):
            remote.curvelike_pool(POOL).get_token(256)
        with pytest.raises(ContractRevertError):
            remote.curvelike_pool(POOL).get_token(-1)

    def test_reader_writes_refused(self, remote):
        with pytest.raises(ExecutionNotSupportedError):
            remote.token(POOL).transfer(POOL, POOL, 1)

    def test_adapter_swap_refused_on_live_chain(self, remote):
        class Passthrough(SwapAdapter):
            def _resolve(self, token):
                return 0

            def _quote(self, amount_in, route):
                return amount_in

            def _execute(self, amount_in, route):
                raise AssertionError("never reached")

        adapter = Passthrough(remote, "Passthrough", POOL, gas_estimate=1)
        assert adapter.query(5, POOL, "0x00000000000000000000000000000000000000b2") == 5
        with pytest.raises(ExecutionNotSupportedError):
            adapter.swap(5, 0, POOL, "0x00000000000000000000000000000000000000b2", POOL)
