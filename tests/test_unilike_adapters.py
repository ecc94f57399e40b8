"""Tests for the constant-product adapters (pair-bound and factory-bound)."""

import pytest

from conftest import fund_and_swap
from core.services.exceptions import (
    InsufficientOutputError,
    StaticCallViolationError,
    Uint256OverflowError,
    UnsupportedPairError,
)
from core.services.normalize import MAX_UINT256
from core.swap_adapters.unilike import UnilikeAdapter, UnilikeFactoryAdapter, get_amount_out


class TestConstantProductMath:
    def test_fee_on_input(self):
        # 1000 in, reserves 1e6/1e6, 0.3% fee
        assert get_amount_out(1_000, 10**6, 10**6, 3) == 997_000 * 10**6 // (10**9 + 997_000)

    def test_zero_inputs(self):
        assert get_amount_out(0, 100, 100, 3) == 0
        assert get_amount_out(100, 0, 100, 3) == 0
        assert get_amount_out(100, 100, 0, 3) == 0

    def test_zero_fee(self):
        assert get_amount_out(100, 1_000, 1_000, 0) == 100 * 1_000 // 1_100


@pytest.fixture
def adapter(chain, pair):
    return UnilikeAdapter(chain, "PangolinAdapter", pair.address)


@pytest.fixture
def factory_adapter(chain, factory):
    return UnilikeFactoryAdapter(chain, "SushiswapAdapter", factory.address)


class TestUnilikeAdapter:
    def test_quote_matches_pool_math(self, adapter, pair, tokens):
        amount = 1_000 * 10**6
        r0, r1 = pair.get_reserves()
        if int(tokens.usdc.address, 16) < int(tokens.dai.address, 16):
            r_in, r_out = r0, r1
        else:
            r_in, r_out = r1, r0
        assert adapter.query(amount, tokens.usdc.address, tokens.dai.address) == get_amount_out(amount, r_in, r_out, 3)

    def test_swap_delivers_quote(self, adapter, tokens, recipient):
        amount = 2_500 * 10**6
        quote = adapter.query(amount, tokens.usdc.address, tokens.dai.address)
        out = fund_and_swap(adapter, tokens.usdc, tokens.dai, amount, recipient, min_out=quote)
        assert out == quote
        assert tokens.dai.balance_of(recipient) == out

    def test_swap_reverse_direction(self, adapter, tokens, recipient):
        amount = 777 * 10**18
        quote = adapter.query(amount, tokens.dai.address, tokens.usdc.address)
        assert quote > 0
        assert fund_and_swap(adapter, tokens.dai, tokens.usdc, amount, recipient) == quote

    def test_adapter_keeps_no_balance(self, adapter, tokens, recipient):
        fund_and_swap(adapter, tokens.usdc, tokens.dai, 10**9, recipient)
        assert tokens.usdc.balance_of(adapter.address) == 0
        assert tokens.dai.balance_of(adapter.address) == 0

    def test_pool_tokens(self, adapter, tokens):
        assert {t.lower() for t in adapter.pool_tokens()} == {tokens.usdc.address.lower(), tokens.dai.address.lower()}
        assert adapter.is_pool_token(tokens.usdc.address)
        assert adapter.is_pool_token(tokens.dai.address.lower())
        assert not adapter.is_pool_token(tokens.weth.address)

    def test_degenerate_queries_return_zero(self, adapter, tokens):
        assert adapter.query(0, tokens.usdc.address, tokens.dai.address) == 0
        assert adapter.query(10**6, tokens.usdc.address, tokens.usdc.address) == 0
        assert adapter.query(10**6, tokens.usdc.address, tokens.weth.address) == 0

    def test_query_rejects_out_of_range_amounts(self, adapter, tokens):
        with pytest.raises(Uint256OverflowError):
            adapter.query(MAX_UINT256 + 1, tokens.usdc.address, tokens.dai.address)

    def test_min_out_failure_is_atomic(self, chain, adapter, pair, tokens, recipient):
        amount = 10**9
        quote = adapter.query(amount, tokens.usdc.address, tokens.dai.address)
        reserves = pair.get_reserves()
        tokens.usdc.mint(adapter.address, amount)

        with pytest.raises(InsufficientOutputError) as exc:
            adapter.swap(amount, quote + 1, tokens.usdc.address, tokens.dai.address, recipient)

        assert exc.value.amount_out == quote
        assert pair.get_reserves() == reserves
        assert tokens.usdc.balance_of(adapter.address) == amount
        assert tokens.dai.balance_of(recipient) == 0

    def test_unsupported_pair_swap_raises(self, adapter, tokens, recipient):
        tokens.usdc.mint(adapter.address, 10)
        with pytest.raises(UnsupportedPairError):
            adapter.swap(10, 0, tokens.usdc.address, tokens.weth.address, recipient)
        with pytest.raises(UnsupportedPairError):
            adapter.swap(10, 0, tokens.usdc.address, tokens.usdc.address, recipient)

    def test_zero_amount_swap_rejected(self, adapter, tokens, recipient):
        with pytest.raises(ValueError):
            adapter.swap(0, 0, tokens.usdc.address, tokens.dai.address, recipient)

    def test_zero_recipient_rejected(self, adapter, tokens):
        with pytest.raises(ValueError):
            adapter.swap(1, 0, tokens.usdc.address, tokens.dai.address, "0x" + "0" * 40)

    def test_query_is_read_only(self, chain, pair, tokens):
        class WritingAdapter(UnilikeAdapter):
            def _quote(self, amount_in, route):
                self.chain.sstore(self.address, "scratch", amount_in)
                return super()._quote(amount_in, route)

        rogue = WritingAdapter(chain, "Rogue", pair.address)
        with pytest.raises(StaticCallViolationError):
            rogue.query(10**6, tokens.usdc.address, tokens.dai.address)

    def test_invalid_fee_rejected(self, chain, pair):
        with pytest.raises(ValueError):
            UnilikeAdapter(chain, "Bad", pair.address, fee=1000)

    def test_gas_estimate_is_declared(self, adapter):
        assert adapter.swap_gas_estimate() == 150_000


class TestUnilikeFactoryAdapter:
    def test_quote_through_factory_pair(self, factory, factory_adapter, tokens):
        pair = factory.pair_at(factory.get_pair(tokens.dai.address, tokens.weth.address))
        amount = 5_000 * 10**18
        r0, r1 = pair.get_reserves()
        if int(tokens.dai.address, 16) < int(tokens.weth.address, 16):
            expected = get_amount_out(amount, r0, r1, 3)
        else:
            expected = get_amount_out(amount, r1, r0, 3)
        assert factory_adapter.query(amount, tokens.dai.address, tokens.weth.address) == expected

    def test_missing_pair_quotes_zero(self, factory_adapter, tokens):
        assert factory_adapter.query(10**6, tokens.usdc.address, tokens.weth.address) == 0

    @pytest.mark.parametrize("bad", ["", "not-an-address", "0x1234", None])
    def test_malformed_token_quotes_zero(self, factory_adapter, tokens, bad):
        assert factory_adapter.query(10**6, bad, tokens.weth.address) == 0
        assert factory_adapter.query(10**6, tokens.weth.address, bad) == 0

    def test_swap_delivers_quote(self, factory_adapter, tokens, recipient):
        amount = 3 * 10**18
        quote = factory_adapter.query(amount, tokens.weth.address, tokens.dai.address)
        assert fund_and_swap(factory_adapter, tokens.weth, tokens.dai, amount, recipient, min_out=quote) == quote
        assert tokens.weth.balance_of(factory_adapter.address) == 0

    def test_missing_pair_swap_raises(self, factory_adapter, tokens, recipient):
        tokens.usdc.mint(factory_adapter.address, 10)
        with pytest.raises(UnsupportedPairError):
            factory_adapter.swap(10, 0, tokens.usdc.address, tokens.weth.address, recipient)

    def test_is_pool_token_scans_pairs(self, factory_adapter, tokens):
        assert factory_adapter.is_pool_token(tokens.weth.address)
        assert factory_adapter.is_pool_token(tokens.usdc.address)
        assert not factory_adapter.is_pool_token(tokens.usdt.address)

    def test_gas_estimate_is_declared(self, factory_adapter):
        assert factory_adapter.swap_gas_estimate() == 160_000
