from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import pytest

from adapters.chain.local.chain import LocalChain
from adapters.chain.local.curve import CurveDynamicFeePool, CurveLikePool, CurvePool, StableSwapPool
from adapters.chain.local.erc20 import ERC20Token
from adapters.chain.local.gmx import GmxVault
from adapters.chain.local.lending import LendingToken
from adapters.chain.local.unilike import UnilikeFactory, UnilikePair
from core.domain.entities.adapter_registry_entity import AdapterRegistryEntity
from core.domain.enums.adapter_enums import AdapterStatus
from core.domain.repositories.adapter_registry_repository_interface import AdapterRegistryRepository
from core.services.normalize import MAX_UINT256, _norm, _norm_lower
from core.swap_adapters.base import SwapAdapter

USD = 10**30  # GMX price precision

# underlying per wrapped unit (1e18 scale); both wrappers are worth the same per raw unit
RATE_USDC = 2 * 10**16
RATE_DAI = 2 * 10**28


@dataclass
class Tokens:
    usdc: ERC20Token  # 6 decimals
    dai: ERC20Token  # 18 decimals
    usdt: ERC20Token  # 6 decimals
    weth: ERC20Token  # 18 decimals


@pytest.fixture
def chain() -> LocalChain:
    return LocalChain("testnet")


@pytest.fixture
def tokens(chain: LocalChain) -> Tokens:
    return Tokens(
        usdc=ERC20Token(chain, "USDC", decimals=6),
        dai=ERC20Token(chain, "DAI", decimals=18),
        usdt=ERC20Token(chain, "USDT", decimals=6),
        weth=ERC20Token(chain, "WETH", decimals=18),
    )


@pytest.fixture
def lp(chain: LocalChain) -> str:
    return chain.new_address("liquidity-provider")


@pytest.fixture
def recipient(chain: LocalChain) -> str:
    return chain.new_address("recipient")


# ---------- liquidity seeding ----------


def seed_pair(pair: UnilikePair, token_a: ERC20Token, token_b: ERC20Token, amount_a: int, amount_b: int) -> None:
    token_a.mint(pair.address, amount_a)
    token_b.mint(pair.address, amount_b)
    pair.sync()


def seed_curve(pool: StableSwapPool, coins: Sequence[ERC20Token], amounts: Sequence[int], lp: str) -> None:
    for coin, amount in zip(coins, amounts):
        coin.mint(lp, amount)
        coin.approve(lp, pool.address, MAX_UINT256)
    pool.add_liquidity(lp, amounts)


def wrap_for(lending: LendingToken, underlying: ERC20Token, amount: int, holder: str) -> int:
    underlying.mint(holder, amount)
    underlying.approve(holder, lending.address, MAX_UINT256)
    return lending.mint(holder, amount)


def fund_and_swap(
    adapter: SwapAdapter,
    token_from: ERC20Token,
    token_to: ERC20Token,
    amount_in: int,
    recipient: str,
    min_out: int = 0,
) -> int:
    """
    Caller flow: move the input into the adapter's custody, then swap.
    """
    token_from.mint(adapter.address, amount_in)
    return adapter.swap(amount_in, min_out, token_from.address, token_to.address, recipient)


# ---------- pools ----------


@pytest.fixture
def pair(chain: LocalChain, tokens: Tokens) -> UnilikePair:
    p = UnilikePair(chain, tokens.usdc, tokens.dai)
    seed_pair(p, tokens.usdc, tokens.dai, 1_000_000 * 10**6, 1_000_000 * 10**18)
    return p


@pytest.fixture
def factory(chain: LocalChain, tokens: Tokens) -> UnilikeFactory:
    f = UnilikeFactory(chain)
    seed_pair(f.create_pair(tokens.usdc, tokens.dai), tokens.usdc, tokens.dai, 1_000_000 * 10**6, 1_000_000 * 10**18)
    seed_pair(f.create_pair(tokens.dai, tokens.weth), tokens.dai, tokens.weth, 2_000_000 * 10**18, 1_000 * 10**18)
    return f


@pytest.fixture
def curve_pool(chain: LocalChain, tokens: Tokens, lp: str) -> CurvePool:
    pool = CurvePool(chain, [tokens.usdc, tokens.dai])
    seed_curve(pool, [tokens.usdc, tokens.dai], [1_000_000 * 10**6, 1_000_000 * 10**18], lp)
    return pool


@pytest.fixture
def curve_pool_3(chain: LocalChain, tokens: Tokens, lp: str) -> CurvePool:
    coins = [tokens.dai, tokens.usdc, tokens.usdt]
    pool = CurvePool(chain, coins)
    seed_curve(pool, coins, [1_000_000 * 10**18, 1_000_000 * 10**6, 1_000_000 * 10**6], lp)
    return pool


@pytest.fixture
def dynamic_fee_pool(chain: LocalChain, tokens: Tokens, lp: str) -> CurveDynamicFeePool:
    pool = CurveDynamicFeePool(chain, [tokens.usdc, tokens.dai])
    seed_curve(pool, [tokens.usdc, tokens.dai], [1_000_000 * 10**6, 1_000_000 * 10**18], lp)
    return pool


@pytest.fixture
def curvelike_pool(chain: LocalChain, tokens: Tokens, lp: str) -> CurveLikePool:
    coins = [tokens.dai, tokens.usdt]
    pool = CurveLikePool(chain, coins)
    seed_curve(pool, coins, [1_000_000 * 10**18, 1_000_000 * 10**6], lp)
    return pool


@dataclass
class LendingSetup:
    pool: CurvePool
    cusdc: LendingToken
    cdai: LendingToken


@pytest.fixture
def lending_pool(chain: LocalChain, tokens: Tokens, lp: str) -> LendingSetup:
    cusdc = LendingToken(chain, "cUSDC", tokens.usdc, RATE_USDC)
    cdai = LendingToken(chain, "cDAI", tokens.dai, RATE_DAI)
    w_usdc = wrap_for(cusdc, tokens.usdc, 1_000_000 * 10**6, lp)
    w_dai = wrap_for(cdai, tokens.dai, 1_000_000 * 10**18, lp)

    pool = CurvePool(chain, [cusdc, cdai])
    cusdc.approve(lp, pool.address, MAX_UINT256)
    cdai.approve(lp, pool.address, MAX_UINT256)
    pool.add_liquidity(lp, [w_usdc, w_dai])
    return LendingSetup(pool=pool, cusdc=cusdc, cdai=cdai)


@pytest.fixture
def gmx_vault(chain: LocalChain, tokens: Tokens, lp: str) -> GmxVault:
    vault = GmxVault(chain)
    vault.set_token_config(tokens.usdc, weight=50_000, is_stable=True)
    vault.set_token_config(tokens.weth, weight=50_000)
    vault.set_price(tokens.usdc.address, USD)
    vault.set_price(tokens.weth.address, 1_995 * USD, 2_005 * USD)

    tokens.usdc.mint(lp, 1_000_000 * 10**6)
    tokens.weth.mint(lp, 500 * 10**18)
    vault.direct_pool_deposit(lp, tokens.usdc.address, 1_000_000 * 10**6)
    vault.direct_pool_deposit(lp, tokens.weth.address, 500 * 10**18)
    return vault


# ---------- registry ----------


class InMemoryAdapterRegistryRepository(AdapterRegistryRepository):
    def __init__(self) -> None:
        self.rows: List[AdapterRegistryEntity] = []

    def ensure_indexes(self) -> None:
        return None

    def get_by_name(self, *, chain: str, name: str) -> Optional[AdapterRegistryEntity]:
        for r in self.rows:
            if r.chain == _norm_lower(chain) and r.name == _norm(name):
                return r
        return None

    def get_by_kind_pool(self, *, chain: str, kind: str, pool: str) -> Optional[AdapterRegistryEntity]:
        for r in self.rows:
            if r.chain == _norm_lower(chain) and r.kind == _norm_lower(kind) and r.pool == _norm_lower(pool):
                return r
        return None

    def insert(self, entity: AdapterRegistryEntity) -> None:
        if self.get_by_name(chain=entity.chain, name=entity.name):
            raise ValueError("duplicate key (chain, name)")
        self.rows.append(entity.touch_for_insert())

    def set_status(self, *, chain: str, name: str, status: str) -> int:
        row = self.get_by_name(chain=chain, name=name)
        if row is None or row.status == status:
            return 0
        row.status = AdapterStatus(status).value
        return 1

    def list_all(self, *, chain: str, limit: int = 100) -> List[AdapterRegistryEntity]:
        return [r for r in self.rows if r.chain == _norm_lower(chain)][:limit]

    def list_active(self, *, chain: str, limit: int = 200) -> List[AdapterRegistryEntity]:
        return [r for r in self.list_all(chain=chain, limit=limit) if r.status == AdapterStatus.ACTIVE.value]


@pytest.fixture
def registry() -> InMemoryAdapterRegistryRepository:
    return InMemoryAdapterRegistryRepository()
