"""Declared gas estimates against metered query + swap costs on the local ledger."""

import pytest

from core.services.exceptions import GasEstimateOutOfBoundsError
from core.services.gas_calibration import GasCalibrator, GasSample, suggest_estimate
from core.swap_adapters.curve import CurveLikeAdapter, CurvePlainAdapter, CurveUnderlyingAdapter
from core.swap_adapters.gmx import GmxAdapter
from core.swap_adapters.unilike import UnilikeAdapter, UnilikeFactoryAdapter


@pytest.fixture
def calibrator(chain):
    return GasCalibrator(chain)


def both_ways(a, b, amount_a, amount_b):
    return [(a.address, b.address, amount_a), (b.address, a.address, amount_b)]


class TestDeclaredEstimates:
    def test_unilike(self, chain, pair, tokens, calibrator):
        adapter = UnilikeAdapter(chain, "PangolinAdapter", pair.address)
        report = calibrator.check_estimate(adapter, both_ways(tokens.usdc, tokens.dai, 10**9, 10**21))
        assert report.max_observed == 141_600

    def test_unilike_factory(self, chain, factory, tokens, calibrator):
        adapter = UnilikeFactoryAdapter(chain, "SushiswapAdapter", factory.address)
        report = calibrator.check_estimate(adapter, both_ways(tokens.dai, tokens.weth, 10**21, 10**18))
        assert report.within_bounds

    def test_curve_plain(self, chain, curve_pool, tokens, calibrator):
        adapter = CurvePlainAdapter(chain, "CurveUSDCAdapter", curve_pool.address, token_count=2)
        report = calibrator.check_estimate(adapter, both_ways(tokens.usdc, tokens.dai, 10**9, 10**21))
        assert report.max_observed == 219_800

    def test_curve_plain_three_coins(self, chain, curve_pool_3, tokens, calibrator):
        adapter = CurvePlainAdapter(chain, "Curve3poolAdapter", curve_pool_3.address, token_count=3)
        calibrator.check_estimate(adapter, both_ways(tokens.usdc, tokens.usdt, 10**9, 10**9))

    def test_curve_underlying(self, chain, lending_pool, tokens, calibrator):
        adapter = CurveUnderlyingAdapter(chain, "CurveCompoundAdapter", lending_pool.pool.address, token_count=2)
        calibrator.check_estimate(adapter, both_ways(tokens.usdc, tokens.dai, 10**9, 10**21))

    def test_curvelike(self, chain, curvelike_pool, tokens, calibrator):
        adapter = CurveLikeAdapter(chain, "GondolaDAIUSDTAdapter", curvelike_pool.address)
        report = calibrator.check_estimate(adapter, both_ways(tokens.dai, tokens.usdt, 10**21, 10**9))
        # plain Curve plus the paused() read on query and the paused slot on swap
        assert report.max_observed == 219_800 + 4_700 + 2_100

    def test_gmx(self, chain, gmx_vault, tokens, calibrator):
        adapter = GmxAdapter(chain, "GmxAdapter", gmx_vault.address)
        calibrator.check_estimate(adapter, both_ways(tokens.usdc, tokens.weth, 10**9, 10**18))


class TestCalibrator:
    def test_amount_does_not_change_gas(self, chain, pair, tokens, calibrator):
        adapter = UnilikeAdapter(chain, "PangolinAdapter", pair.address)
        small = calibrator.measure(adapter, tokens.usdc.address, tokens.dai.address, 10**6)
        large = calibrator.measure(adapter, tokens.usdc.address, tokens.dai.address, 10**11)
        assert small.total == large.total

    def test_measure_leaves_no_trace(self, chain, pair, tokens, calibrator):
        adapter = UnilikeAdapter(chain, "PangolinAdapter", pair.address)
        reserves = pair.get_reserves()
        sample = calibrator.measure(adapter, tokens.usdc.address, tokens.dai.address, 10**9)
        assert sample.amount_out > 0
        assert pair.get_reserves() == reserves
        assert tokens.dai.balance_of(calibrator.recipient) == 0

    def test_underestimate_is_flagged(self, chain, pair, tokens, calibrator):
        adapter = UnilikeAdapter(chain, "Cheap", pair.address, gas_estimate=100_000)
        with pytest.raises(GasEstimateOutOfBoundsError) as exc:
            calibrator.check_estimate(adapter, both_ways(tokens.usdc, tokens.dai, 10**9, 10**21))
        assert exc.value.max_observed == 141_600

    def test_overestimate_is_flagged(self, chain, pair, tokens, calibrator):
        adapter = UnilikeAdapter(chain, "Padded", pair.address, gas_estimate=200_000)
        with pytest.raises(GasEstimateOutOfBoundsError):
            calibrator.check_estimate(adapter, both_ways(tokens.usdc, tokens.dai, 10**9, 10**21))

    def test_unquotable_sample_rejected(self, chain, pair, tokens, calibrator):
        adapter = UnilikeAdapter(chain, "PangolinAdapter", pair.address)
        with pytest.raises(ValueError):
            calibrator.measure(adapter, tokens.usdc.address, tokens.weth.address, 10**6)

    def test_report_needs_samples(self, chain, pair, calibrator):
        adapter = UnilikeAdapter(chain, "PangolinAdapter", pair.address)
        with pytest.raises(ValueError):
            calibrator.report(adapter, [])


class TestSuggestEstimate:
    def sample(self, query_gas, swap_gas):
        return GasSample("a", "b", 1, 1, query_gas, swap_gas)

    def test_margin_applied_to_max(self):
        samples = [self.sample(20_000, 100_000), self.sample(30_000, 110_000)]
        assert suggest_estimate(samples) == 140_000 * 10_500 // 10_000
        assert suggest_estimate(samples, margin_bps=0) == 140_000

    def test_margin_capped(self):
        with pytest.raises(ValueError):
            suggest_estimate([self.sample(1, 1)], margin_bps=1_001)

    def test_needs_samples(self):
        with pytest.raises(ValueError):
            suggest_estimate([])
